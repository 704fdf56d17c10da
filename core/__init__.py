# =============================================================================
# core/ - Framework-Agnostic Definitions
# =============================================================================
# This package contains the data definitions the web layer is configured with:
# - models/: Pydantic option schemas and the listener record
#
# Code in this package should NOT import from FastAPI.
# This keeps the option schemas testable and reusable.
# =============================================================================
