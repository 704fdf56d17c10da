# =============================================================================
# app/middleware/request_id.py - Request Id Tagging
# =============================================================================
# Gives every request an id, available to handlers as request.state.request_id
# and echoed back in a response header.
#
# The id is taken from (in order): the configured request header, the
# configured query parameter, or a freshly generated UUID4.
# =============================================================================

import uuid

from starlette.datastructures import Headers, MutableHeaders, QueryParams
from starlette.types import ASGIApp, Message, Receive, Scope, Send

from core.models.options import RequestIdOptions


class RequestIdMiddleware:
    """Tag each HTTP request with an id and expose it on the response."""

    def __init__(self, app: ASGIApp, options: RequestIdOptions | None = None):
        self.app = app
        self.options = options or RequestIdOptions()

    def _resolve_id(self, scope: Scope) -> str:
        if self.options.header:
            value = Headers(scope=scope).get(self.options.header)
            if value:
                return value
        if self.options.query:
            value = QueryParams(scope.get("query_string", b"")).get(self.options.query)
            if value:
                return value
        return str(uuid.uuid4())

    async def __call__(self, scope: Scope, receive: Receive, send: Send) -> None:
        if scope["type"] != "http":
            await self.app(scope, receive, send)
            return

        request_id = self._resolve_id(scope)
        scope.setdefault("state", {})["request_id"] = request_id

        if not self.options.expose:
            await self.app(scope, receive, send)
            return

        async def send_with_id(message: Message) -> None:
            if message["type"] == "http.response.start":
                headers = MutableHeaders(scope=message)
                headers[self.options.expose] = request_id
            await send(message)

        await self.app(scope, receive, send_with_id)
