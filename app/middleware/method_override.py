# =============================================================================
# app/middleware/method_override.py - HTTP Method Override
# =============================================================================
# Lets HTML forms (which can only GET/POST) reach PUT/PATCH/DELETE routes.
#
# The override is read from:
# - a request header, when the field name starts with "X-"
#   (e.g. X-HTTP-Method-Override), or
# - a field of the parsed body (e.g. _method), which is then removed from
#   request.state.body. Requires the body parser earlier in the stack.
# =============================================================================

import logging

from starlette.datastructures import Headers
from starlette.types import ASGIApp, Receive, Scope, Send

logger = logging.getLogger(__name__)

ALLOWED_METHODS = frozenset({"GET", "HEAD", "POST", "PUT", "PATCH", "DELETE", "OPTIONS"})


class MethodOverrideMiddleware:
    """Rewrite the method of POST requests that carry an override."""

    def __init__(
        self,
        app: ASGIApp,
        field_name: str = "X-HTTP-Method-Override",
        methods: tuple[str, ...] = ("POST",),
    ):
        self.app = app
        self.field_name = field_name
        self.methods = {m.upper() for m in methods}
        self.from_header = field_name.lower().startswith("x-")

    def _requested_method(self, scope: Scope) -> str | None:
        if self.from_header:
            return Headers(scope=scope).get(self.field_name)

        body = scope.get("state", {}).get("body")
        if isinstance(body, dict) and self.field_name in body:
            value = body.pop(self.field_name)
            # Repeated form fields arrive as a list; the last one wins
            return value[-1] if isinstance(value, list) else value
        return None

    async def __call__(self, scope: Scope, receive: Receive, send: Send) -> None:
        if scope["type"] == "http" and scope["method"] in self.methods:
            requested = self._requested_method(scope)
            if isinstance(requested, str) and requested.upper() in ALLOWED_METHODS:
                scope.setdefault("state", {})["original_method"] = scope["method"]
                scope["method"] = requested.upper()
                logger.debug(f"Method override {scope['state']['original_method']} -> {scope['method']} for {scope['path']}")

        await self.app(scope, receive, send)
