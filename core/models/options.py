# =============================================================================
# core/models/options.py - Middleware Option Schemas
# =============================================================================
# Options accepted by the Application.add_*_middleware methods:
# - BodyParserOptions: which body types to parse and their size limits
# - RequestIdOptions: where the request id is read from and exposed
# - SecurityOptions: which security headers are emitted
# - EnforceSSLOptions: how plain HTTP requests are treated
#
# Each model has defaults matching the stock behaviour, so callers only pass
# what they want to change.
# =============================================================================

from enum import Enum

from pydantic import BaseModel, Field, field_validator

from lib.utils import parse_byte_size


class BodyType(str, Enum):
    """Body encodings the body parser understands."""
    JSON = "json"
    FORM = "form"
    TEXT = "text"


class BodyParserOptions(BaseModel):
    """
    Options for the body parser middleware.

    Limits accept either bytes or human-readable sizes ("1mb", "56kb");
    they are normalized to bytes on validation.
    """

    enable_types: list[BodyType] = Field(
        default_factory=lambda: [BodyType.JSON, BodyType.FORM],
        description="Body types to parse; anything else is left unparsed"
    )

    json_limit: int = Field(default=1024 ** 2, ge=0)
    form_limit: int = Field(default=56 * 1024, ge=0)
    text_limit: int = Field(default=1024 ** 2, ge=0)

    strict: bool = Field(
        default=True,
        description="Only accept JSON objects and arrays at the top level"
    )

    encoding: str = Field(default="utf-8")

    @field_validator("json_limit", "form_limit", "text_limit", mode="before")
    @classmethod
    def _parse_limit(cls, value):
        return parse_byte_size(value)

    def limit_for(self, body_type: BodyType) -> int:
        """Size limit in bytes for a body type."""
        return {
            BodyType.JSON: self.json_limit,
            BodyType.FORM: self.form_limit,
            BodyType.TEXT: self.text_limit,
        }[body_type]


class RequestIdOptions(BaseModel):
    """
    Options for the request id middleware.

    Example:
        {
            "expose": "x-request-id",   # response header carrying the id
            "header": "x-request-id",   # request header trusted as the id
            "query": "x-request-id"     # query parameter trusted as the id
        }

    Set any of them to None to disable that channel.
    """

    expose: str | None = "x-request-id"
    header: str | None = "x-request-id"
    query: str | None = "x-request-id"


class SecurityOptions(BaseModel):
    """Security headers emitted on every response. None/False disables one."""

    frame_options: str | None = "SAMEORIGIN"
    content_type_nosniff: bool = True
    xss_protection: bool = True
    hsts_max_age: int | None = Field(default=15552000, ge=0)
    hsts_include_subdomains: bool = True
    referrer_policy: str | None = "no-referrer"
    content_security_policy: str | None = None
    download_options: bool = True
    dns_prefetch_control: bool = True


class EnforceSSLOptions(BaseModel):
    """Options for the SSL enforcement middleware."""

    disabled: bool = False
    trust_proxy: bool = Field(
        default=False,
        description="Treat X-Forwarded-Proto: https as a secure request"
    )
    redirect: bool = Field(
        default=False,
        description="Redirect to https instead of rejecting with 403"
    )
    https_port: int | None = Field(
        default=None,
        ge=1,
        le=65535,
        description="Port used in redirect targets (defaults to the request port)"
    )
