# =============================================================================
# app/middleware/security.py - Security Headers
# =============================================================================
# SecurityMiddlewareFactory turns SecurityOptions into one middleware per
# enabled header, so each header can be reasoned about (and disabled)
# independently.
#
# Usage:
#   for middleware in SecurityMiddlewareFactory(options).get_middlewares():
#       application.add_middleware(middleware)
# =============================================================================

from starlette.datastructures import MutableHeaders
from starlette.middleware import Middleware
from starlette.types import ASGIApp, Message, Receive, Scope, Send

from core.models.options import SecurityOptions


class SecurityHeadersMiddleware:
    """Set a fixed header on every HTTP response unless a handler already did."""

    def __init__(self, app: ASGIApp, name: str, value: str):
        self.app = app
        self.name = name
        self.value = value

    async def __call__(self, scope: Scope, receive: Receive, send: Send) -> None:
        if scope["type"] != "http":
            await self.app(scope, receive, send)
            return

        async def send_with_header(message: Message) -> None:
            if message["type"] == "http.response.start":
                headers = MutableHeaders(scope=message)
                if self.name not in headers:
                    headers[self.name] = self.value
            await send(message)

        await self.app(scope, receive, send_with_header)


class SecurityMiddlewareFactory:
    """Build the security header middleware stack from SecurityOptions."""

    def __init__(self, options: SecurityOptions | dict | None = None):
        if isinstance(options, dict):
            options = SecurityOptions(**options)
        self.options = options or SecurityOptions()

    def get_headers(self) -> list[tuple[str, str]]:
        """Headers to emit, in registration order."""
        opts = self.options
        headers: list[tuple[str, str]] = []

        if opts.frame_options:
            headers.append(("X-Frame-Options", opts.frame_options))
        if opts.content_type_nosniff:
            headers.append(("X-Content-Type-Options", "nosniff"))
        if opts.xss_protection:
            headers.append(("X-XSS-Protection", "1; mode=block"))
        if opts.hsts_max_age is not None:
            hsts = f"max-age={opts.hsts_max_age}"
            if opts.hsts_include_subdomains:
                hsts += "; includeSubDomains"
            headers.append(("Strict-Transport-Security", hsts))
        if opts.referrer_policy:
            headers.append(("Referrer-Policy", opts.referrer_policy))
        if opts.content_security_policy:
            headers.append(("Content-Security-Policy", opts.content_security_policy))
        if opts.download_options:
            headers.append(("X-Download-Options", "noopen"))
        if opts.dns_prefetch_control:
            headers.append(("X-DNS-Prefetch-Control", "off"))

        return headers

    def get_middlewares(self) -> list[Middleware]:
        return [
            Middleware(SecurityHeadersMiddleware, name=name, value=value)
            for name, value in self.get_headers()
        ]
