# =============================================================================
# app/middleware/ssl.py - HTTPS Enforcement
# =============================================================================
# Plain HTTP requests are rejected with 403 (InsecureRequestError), or
# redirected to https when EnforceSSLOptions.redirect is set.
# =============================================================================

import logging

from starlette.datastructures import URL, Headers
from starlette.responses import RedirectResponse
from starlette.types import ASGIApp, Receive, Scope, Send

from app.exceptions import InsecureRequestError
from core.models.options import EnforceSSLOptions

logger = logging.getLogger(__name__)


class EnforceSSLMiddleware:
    """Only let TLS (or trusted-proxy TLS) requests through."""

    def __init__(self, app: ASGIApp, options: EnforceSSLOptions | None = None):
        self.app = app
        self.options = options or EnforceSSLOptions()

    def is_secure(self, scope: Scope) -> bool:
        if scope.get("scheme") == "https":
            return True
        if self.options.trust_proxy:
            forwarded = Headers(scope=scope).get("x-forwarded-proto", "")
            # Proxies may append: "https, http" -> first hop wins
            return forwarded.split(",")[0].strip().lower() == "https"
        return False

    def redirect_url(self, scope: Scope) -> str:
        url = URL(scope=scope)
        hostname = url.hostname or ""
        port = self.options.https_port
        netloc = hostname if port in (None, 443) else f"{hostname}:{port}"
        return str(url.replace(scheme="https", netloc=netloc))

    async def __call__(self, scope: Scope, receive: Receive, send: Send) -> None:
        if scope["type"] != "http" or self.options.disabled or self.is_secure(scope):
            await self.app(scope, receive, send)
            return

        if self.options.redirect:
            response = RedirectResponse(self.redirect_url(scope), status_code=301)
            await response(scope, receive, send)
            return

        logger.warning(f"Rejected insecure request: {scope.get('method')} {scope.get('path')}")
        raise InsecureRequestError()
