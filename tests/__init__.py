# =============================================================================
# tests/ - Test Suite
# =============================================================================
# This package contains all tests for appshell:
# - test_utils.py: Byte-size parsing and module file helpers
# - test_options.py: Middleware option schemas
# - test_middleware.py: Each middleware through a TestClient
# - test_loaders.py: Controller and model discovery
# - test_views.py: Template rendering
# - test_application.py: Application wrapper and listener lifecycle
# - test_main.py: Fully wired application and health endpoints
#
# Run tests with: poetry run pytest
# =============================================================================
