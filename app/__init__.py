# =============================================================================
# app/ - FastAPI Application Package
# =============================================================================
# This package contains the bootstrap layer around a FastAPI application:
# - application.py: Application wrapper (middleware, discovery, listeners)
# - main.py: Entry point wiring everything from settings
# - config.py: Environment variable loading and settings
# - middleware/: One ASGI middleware per request concern
# - loaders.py: Controller and model discovery
# - views.py: Jinja2 template rendering
# - server.py: uvicorn HTTP/HTTPS listeners
# - routers/: Built-in endpoints (health checks)
# =============================================================================

__version__ = "1.0.0"
