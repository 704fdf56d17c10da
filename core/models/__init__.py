# =============================================================================
# core/models/ - Data Models
# =============================================================================
# This package contains:
# - options.py: Pydantic option schemas for each middleware
# - listener.py: Listener record for a running server
#
# These models define the "contract" between the Application and callers.
# =============================================================================

# -----------------------------------------------------------------------------
# Middleware Options
# -----------------------------------------------------------------------------
from .options import (
    BodyParserOptions,
    BodyType,
    EnforceSSLOptions,
    RequestIdOptions,
    SecurityOptions,
)

# -----------------------------------------------------------------------------
# Listeners
# -----------------------------------------------------------------------------
from .listener import Listener

__all__ = [
    # Options
    "BodyParserOptions",
    "BodyType",
    "EnforceSSLOptions",
    "RequestIdOptions",
    "SecurityOptions",
    # Listeners
    "Listener",
]
