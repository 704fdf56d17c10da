# =============================================================================
# app/middleware/hooks.py - Request Hooks
# =============================================================================
# Lets controllers and models react to traffic without writing middleware.
#
# Usage:
#   from app.middleware.hooks import HookMiddlewareFactory
#
#   def audit(request):
#       ...
#
#   HookMiddlewareFactory.register("request", audit)
#   HookMiddlewareFactory.register("response", lambda request, status: ...)
#
# Events:
# - request: called with the Request before it reaches the router
# - response: called with the Request and status code once the response starts
#
# Callbacks may be plain functions or coroutines. Hooks registered after the
# middleware is installed still fire: the middleware reads the live registry.
# =============================================================================

import inspect
import logging
from typing import Any, Callable

from starlette.middleware import Middleware
from starlette.requests import Request
from starlette.types import ASGIApp, Message, Receive, Scope, Send

logger = logging.getLogger(__name__)

HOOK_EVENTS = ("request", "response")


async def _call(callback: Callable[..., Any], *args: Any) -> None:
    result = callback(*args)
    if inspect.isawaitable(result):
        await result


class HookMiddleware:
    """Run registered hooks around each HTTP request."""

    def __init__(self, app: ASGIApp, hooks: dict[str, list[Callable[..., Any]]]):
        self.app = app
        self.hooks = hooks

    async def __call__(self, scope: Scope, receive: Receive, send: Send) -> None:
        if scope["type"] != "http":
            await self.app(scope, receive, send)
            return

        received: list[Message] = []

        async def recording_receive() -> Message:
            message = await receive()
            received.append(message)
            return message

        # Hooks may read the body; whatever they consumed is replayed downstream
        async def replay_receive() -> Message:
            if received:
                return received.pop(0)
            return await receive()

        request = Request(scope, recording_receive)
        for callback in list(self.hooks["request"]):
            await _call(callback, request)

        async def send_with_hooks(message: Message) -> None:
            if message["type"] == "http.response.start":
                for callback in list(self.hooks["response"]):
                    await _call(callback, request, message["status"])
            await send(message)

        await self.app(scope, replay_receive, send_with_hooks)


class HookMiddlewareFactory:
    """Process-wide hook registry and the middleware that runs it."""

    _hooks: dict[str, list[Callable[..., Any]]] = {event: [] for event in HOOK_EVENTS}

    @classmethod
    def register(cls, event: str, callback: Callable[..., Any]) -> None:
        if event not in cls._hooks:
            raise ValueError(f"Unknown hook event: {event!r} (expected one of {', '.join(HOOK_EVENTS)})")
        cls._hooks[event].append(callback)
        logger.debug(f"Registered {event} hook {getattr(callback, '__name__', callback)!r}")

    @classmethod
    def unregister(cls, event: str, callback: Callable[..., Any]) -> None:
        if callback in cls._hooks.get(event, []):
            cls._hooks[event].remove(callback)

    @classmethod
    def clear(cls) -> None:
        for callbacks in cls._hooks.values():
            callbacks.clear()

    @classmethod
    def get_middleware(cls) -> Middleware:
        return Middleware(HookMiddleware, hooks=cls._hooks)
