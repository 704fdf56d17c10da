# =============================================================================
# app/middleware/body_parser.py - Request Body Parsing
# =============================================================================
# Parses JSON, urlencoded form and plain text bodies ahead of the router:
# - request.state.body: parsed value ({} when the type is not enabled)
# - request.state.raw_body: decoded text of the body
#
# The original bytes are replayed downstream, so handlers can still call
# request.json() / request.body() as usual.
# =============================================================================

import json
import logging

from starlette.datastructures import FormData, Headers
from starlette.requests import Request
from starlette.types import ASGIApp, Message, Receive, Scope, Send

from app.exceptions import BodyParseError, PayloadTooLargeError
from core.models.options import BodyParserOptions, BodyType

logger = logging.getLogger(__name__)


JSON_TYPES = {
    "application/json",
    "application/json-patch+json",
    "application/vnd.api+json",
    "application/csp-report",
}
FORM_TYPES = {"application/x-www-form-urlencoded"}
TEXT_TYPES = {"text/plain"}


def detect_body_type(content_type: str) -> BodyType | None:
    """Map a Content-Type header to the body type that parses it."""
    media_type = content_type.split(";", 1)[0].strip().lower()
    if media_type in JSON_TYPES or (media_type.startswith("application/") and media_type.endswith("+json")):
        return BodyType.JSON
    if media_type in FORM_TYPES:
        return BodyType.FORM
    if media_type in TEXT_TYPES:
        return BodyType.TEXT
    return None


def form_to_dict(form: FormData) -> dict:
    """Flatten parsed form data; repeated keys collect into a list."""
    result: dict = {}
    for key, value in form.multi_items():
        if key in result:
            existing = result[key]
            result[key] = existing + [value] if isinstance(existing, list) else [existing, value]
        else:
            result[key] = value
    return result


class BodyParserMiddleware:
    """Buffer, size-check and parse request bodies of the enabled types."""

    def __init__(self, app: ASGIApp, options: BodyParserOptions | None = None):
        self.app = app
        self.options = options or BodyParserOptions()

    async def _read_body(self, receive: Receive, limit: int) -> bytes:
        chunks: list[bytes] = []
        size = 0
        more_body = True
        while more_body:
            message = await receive()
            if message["type"] != "http.request":
                break
            chunk = message.get("body", b"")
            size += len(chunk)
            if size > limit:
                raise PayloadTooLargeError(size, limit)
            chunks.append(chunk)
            more_body = message.get("more_body", False)
        return b"".join(chunks)

    async def _parse_form(self, scope: Scope, body: bytes) -> dict:
        async def receive_body() -> Message:
            return {"type": "http.request", "body": body, "more_body": False}

        # Starlette hands urlencoded bodies to python-multipart
        form = await Request(scope, receive_body).form()
        try:
            return form_to_dict(form)
        finally:
            await form.close()

    async def _parse(self, scope: Scope, body_type: BodyType, body: bytes, text: str):
        if body_type == BodyType.JSON:
            if not text.strip():
                return {}
            try:
                value = json.loads(text)
            except json.JSONDecodeError as e:
                raise BodyParseError("json", str(e))
            if self.options.strict and not isinstance(value, (dict, list)):
                raise BodyParseError("json", "only objects and arrays are allowed in strict mode")
            return value
        if body_type == BodyType.FORM:
            return await self._parse_form(scope, body)
        return text

    async def __call__(self, scope: Scope, receive: Receive, send: Send) -> None:
        if scope["type"] != "http":
            await self.app(scope, receive, send)
            return

        state = scope.setdefault("state", {})
        headers = Headers(scope=scope)
        body_type = detect_body_type(headers.get("content-type", ""))

        if body_type is None or body_type not in self.options.enable_types:
            state.setdefault("body", {})
            await self.app(scope, receive, send)
            return

        limit = self.options.limit_for(body_type)
        declared = headers.get("content-length")
        if declared and declared.isdigit() and int(declared) > limit:
            raise PayloadTooLargeError(int(declared), limit)

        body = await self._read_body(receive, limit)
        try:
            text = body.decode(self.options.encoding)
        except UnicodeDecodeError as e:
            raise BodyParseError(body_type.value, str(e))

        state["raw_body"] = text
        state["body"] = await self._parse(scope, body_type, body, text)
        logger.debug(f"Parsed {body_type.value} body ({len(body)} bytes) for {scope['path']}")

        replayed = False

        async def replay_receive() -> Message:
            nonlocal replayed
            if not replayed:
                replayed = True
                return {"type": "http.request", "body": body, "more_body": False}
            return await receive()

        await self.app(scope, replay_receive, send)
