# =============================================================================
# app/middleware/ - ASGI Middleware
# =============================================================================
# One module per request concern, each a plain ASGI middleware class that
# Application.add_middleware() can register:
# - body_parser.py: JSON / form / text body parsing into request.state.body
# - error_handler.py: Exception to JSON or rendered HTML error responses,
#   plus the always-on AppShellException layer
# - hooks.py: Request/response hook callbacks
# - method_override.py: POST method override from a header or body field
# - request_id.py: Request id tagging
# - security.py: Security response headers
# - ssl.py: HTTPS enforcement
# - static.py: Static file serving with fall-through
# =============================================================================

from app.middleware.body_parser import BodyParserMiddleware
from app.middleware.error_handler import (
    AppShellExceptionMiddleware,
    ErrorHandlerMiddleware,
    ErrorResponder,
)
from app.middleware.hooks import HookMiddleware, HookMiddlewareFactory
from app.middleware.method_override import MethodOverrideMiddleware
from app.middleware.request_id import RequestIdMiddleware
from app.middleware.security import SecurityHeadersMiddleware, SecurityMiddlewareFactory
from app.middleware.ssl import EnforceSSLMiddleware
from app.middleware.static import StaticContentMiddleware

__all__ = [
    "AppShellExceptionMiddleware",
    "BodyParserMiddleware",
    "ErrorHandlerMiddleware",
    "ErrorResponder",
    "HookMiddleware",
    "HookMiddlewareFactory",
    "MethodOverrideMiddleware",
    "RequestIdMiddleware",
    "SecurityHeadersMiddleware",
    "SecurityMiddlewareFactory",
    "EnforceSSLMiddleware",
    "StaticContentMiddleware",
]
