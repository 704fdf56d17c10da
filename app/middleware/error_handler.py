# =============================================================================
# app/middleware/error_handler.py - Error Responses
# =============================================================================
# Turns exceptions into responses:
# - Clients accepting text/html get the error template rendered with
#   status, message, code and request_id
# - Everyone else gets the JSON error body ({"detail", "code", ...})
#
# ErrorResponder does the rendering. It is used twice: by
# ErrorHandlerMiddleware for exceptions escaping middleware and routes, and
# as the FastAPI exception handler for HTTPException / AppShellException,
# which FastAPI answers inside the router before any middleware sees them.
#
# AppShellExceptionMiddleware is the always-on fallback for AppShellException
# raised by middleware when no error handler is registered.
# =============================================================================

import logging
from pathlib import Path
from typing import Any

from starlette.exceptions import HTTPException
from starlette.requests import Request
from starlette.responses import JSONResponse, Response
from starlette.types import ASGIApp, Message, Receive, Scope, Send

from app.exceptions import AppShellException, appshell_exception_handler
from app.views import Views

logger = logging.getLogger(__name__)


def describe_error(exc: Exception) -> tuple[int, dict[str, Any]]:
    """Status code and JSON body for an exception."""
    if isinstance(exc, AppShellException):
        return exc.status_code, exc.to_dict()
    if isinstance(exc, HTTPException):
        return exc.status_code, {"detail": exc.detail, "code": "HTTP_ERROR"}
    return 500, {"detail": "An unexpected error occurred", "code": "INTERNAL_ERROR"}


class ErrorResponder:
    """Render exceptions as HTML (from a template) or JSON."""

    def __init__(self, render_path: str | None = None):
        self.views: Views | None = None
        self.template: str | None = None
        if render_path:
            path = Path(render_path)
            self.views = Views(str(path.parent), cache=True)
            self.template = path.name

    def _wants_html(self, request: Request) -> bool:
        return "text/html" in request.headers.get("accept", "")

    def build_response(self, request: Request, exc: Exception) -> Response:
        status_code, body = describe_error(exc)
        request_id = request.scope.get("state", {}).get("request_id")
        if request_id:
            body["request_id"] = request_id

        if status_code >= 500:
            logger.error(
                f"Unhandled error on {request.method} {request.url.path}: {exc}",
                exc_info=exc,
            )
        else:
            logger.warning(f"{body['code']} on {request.method} {request.url.path}: {body['detail']}")

        headers = getattr(exc, "headers", None)

        if self.views is not None and self._wants_html(request):
            response = self.views.render(
                request,
                self.template,
                {
                    "status": status_code,
                    "message": body["detail"],
                    "code": body["code"],
                    "request_id": request_id,
                },
                status_code=status_code,
            )
            if headers:
                response.headers.update(headers)
            return response

        return JSONResponse(body, status_code=status_code, headers=headers)

    async def handle(self, request: Request, exc: Exception) -> Response:
        """FastAPI exception handler signature."""
        return self.build_response(request, exc)


class ErrorHandlerMiddleware:
    """Catch exceptions raised downstream and answer with an error response."""

    def __init__(
        self,
        app: ASGIApp,
        render_path: str | None = None,
        responder: ErrorResponder | None = None,
    ):
        self.app = app
        self.responder = responder or ErrorResponder(render_path)

    async def __call__(self, scope: Scope, receive: Receive, send: Send) -> None:
        if scope["type"] != "http":
            await self.app(scope, receive, send)
            return

        response_started = False

        async def send_tracking(message: Message) -> None:
            nonlocal response_started
            if message["type"] == "http.response.start":
                response_started = True
            await send(message)

        try:
            await self.app(scope, receive, send_tracking)
        except Exception as exc:
            # Headers already went out; nothing sensible left to send.
            if response_started:
                raise
            response = self.responder.build_response(Request(scope, receive), exc)
            await response(scope, receive, send)


class AppShellExceptionMiddleware:
    """Answer AppShellException raised by middleware with its JSON body."""

    def __init__(self, app: ASGIApp):
        self.app = app

    async def __call__(self, scope: Scope, receive: Receive, send: Send) -> None:
        if scope["type"] != "http":
            await self.app(scope, receive, send)
            return

        response_started = False

        async def send_tracking(message: Message) -> None:
            nonlocal response_started
            if message["type"] == "http.response.start":
                response_started = True
            await send(message)

        try:
            await self.app(scope, receive, send_tracking)
        except AppShellException as exc:
            if response_started:
                raise
            logger.warning(f"{exc.code} on {scope['method']} {scope['path']}: {exc.message}")
            response = await appshell_exception_handler(Request(scope, receive), exc)
            await response(scope, receive, send)
