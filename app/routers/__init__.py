# =============================================================================
# app/routers/ - Built-in Route Definitions
# =============================================================================
# Application routes come from controllers loaded at startup; this package
# only holds the endpoints every deployment gets:
# - health.py: Health check endpoints
#
# Each router is mounted in main.py with a URL prefix.
# =============================================================================

from . import health

__all__ = [
    "health",
]
