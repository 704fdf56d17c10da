# =============================================================================
# app/exceptions.py - Custom Exceptions and Handlers
# =============================================================================
# Centralized exception types for the bootstrap layer.
# Errors carry a machine-readable code and, where possible, a suggestion
# telling the caller how to fix the problem.
# =============================================================================

from typing import Any

from fastapi import Request
from fastapi.responses import JSONResponse


class AppShellException(Exception):
    """
    Base exception for appshell.

    All custom exceptions inherit from this class.
    Provides structured error responses with actionable suggestions.
    """

    def __init__(
        self,
        message: str,
        code: str = "APPSHELL_ERROR",
        status_code: int = 500,
        suggestion: str | None = None,
        details: dict[str, Any] | None = None,
    ):
        super().__init__(message)
        self.message = message
        self.code = code
        self.status_code = status_code
        self.suggestion = suggestion
        self.details = details or {}

    def to_dict(self) -> dict[str, Any]:
        """Convert exception to API response dict."""
        result = {
            "detail": self.message,
            "code": self.code,
        }
        if self.suggestion:
            result["suggestion"] = self.suggestion
        if self.details:
            result["details"] = self.details
        return result


# =============================================================================
# Request Exceptions
# =============================================================================

class BodyParseError(AppShellException):
    """Raised when a request body cannot be decoded."""

    def __init__(self, content_type: str, error: str):
        super().__init__(
            message=f"Invalid {content_type} body: {error}",
            code="INVALID_BODY",
            status_code=400,
            suggestion="Check that the body matches its Content-Type",
            details={"content_type": content_type, "error": error}
        )


class PayloadTooLargeError(AppShellException):
    """Raised when a request body exceeds the configured limit."""

    def __init__(self, size: int, limit: int):
        super().__init__(
            message=f"Request body too large: {size} bytes (max: {limit} bytes)",
            code="PAYLOAD_TOO_LARGE",
            status_code=413,
            suggestion=f"Send a body smaller than {limit} bytes",
            details={"size": size, "limit": limit}
        )


class InsecureRequestError(AppShellException):
    """Raised when a plain HTTP request reaches an SSL-only application."""

    def __init__(self):
        super().__init__(
            message="Please use HTTPS when communicating with this server.",
            code="HTTPS_REQUIRED",
            status_code=403,
            suggestion="Retry the request over https://",
        )


# =============================================================================
# Bootstrap Exceptions
# =============================================================================

class ControllerLoadError(AppShellException):
    """Raised when a controller package exposes nothing to register."""

    def __init__(self, path: str):
        super().__init__(
            message=f"Controller has no register() or router: {path}",
            code="CONTROLLER_LOAD_ERROR",
            status_code=500,
            suggestion="Define register(app) or a module-level APIRouter named router",
            details={"path": path}
        )


class HTTPSConfigurationError(AppShellException):
    """Raised when the TLS listener is requested without key material."""

    def __init__(self, missing: list[str]):
        super().__init__(
            message=f"HTTPS listener requires {', '.join(missing)}",
            code="HTTPS_NOT_CONFIGURED",
            status_code=500,
            suggestion="Set HTTPS_KEY and HTTPS_CERT to PEM file paths, or unset SERVE_HTTPS",
            details={"missing": missing}
        )


class ListenerStartupError(AppShellException):
    """Raised when a server exits before it starts accepting connections."""

    def __init__(self, port: int):
        super().__init__(
            message=f"Listener on port {port} exited during startup",
            code="LISTENER_STARTUP_FAILED",
            status_code=500,
            suggestion="Check the application lifespan handlers in the log output",
            details={"port": port}
        )


# =============================================================================
# Exception Handlers
# =============================================================================

async def appshell_exception_handler(
    request: Request,
    exc: AppShellException
) -> JSONResponse:
    """
    Convert AppShellException to JSON response.

    Returns structured error with:
    - detail: Human-readable message
    - code: Machine-readable error code
    - suggestion: How to fix (if available)
    - details: Additional context
    """
    content = exc.to_dict()
    request_id = request.scope.get("state", {}).get("request_id")
    if request_id:
        content["request_id"] = request_id

    return JSONResponse(
        status_code=exc.status_code,
        content=content
    )
