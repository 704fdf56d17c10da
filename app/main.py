# =============================================================================
# app/main.py - Application Entry Point
# =============================================================================
# Builds the FastAPI application from settings: middleware stack, built-in
# routers, and the models/controllers found on disk.
#
# Usage:
#   # Built-in listeners (HTTP, plus HTTPS on port + 10000 if SERVE_HTTPS=true)
#   poetry run python scripts/start_server.py
#
#   # Or any ASGI server
#   poetry run uvicorn app.main:app --reload
# =============================================================================

import asyncio
import logging
import signal
from contextlib import asynccontextmanager
from pathlib import Path

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from app import __version__
from app.application import Application
from app.config import Settings, get_settings, settings
from app.routers import health

# Configure logging
logging.basicConfig(
    level=logging.DEBUG if settings.DEBUG else logging.INFO,
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s"
)
logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """
    Application lifespan handler.

    Runs once on startup and shutdown of the HTTP listener.
    """
    logger.info(f"Starting appshell in {settings.ENVIRONMENT} mode")
    yield
    logger.info("Shutting down appshell")


def create_application(config: Settings | None = None) -> Application:
    """
    Build an Application with the full middleware stack.

    Directory-backed steps (static files, views, models, controllers) are
    skipped when their directory does not exist.
    """
    config = config or get_settings()

    fastapi_app = FastAPI(
        title="appshell",
        version=__version__,
        lifespan=lifespan,
    )
    application = Application(fastapi_app, settings=config)

    # -------------------------------------------------------------------------
    # Middleware (outermost first)
    # -------------------------------------------------------------------------

    error_template = Path(config.ERROR_TEMPLATE)
    application.add_error_handler_middleware(
        str(error_template) if error_template.is_file() else None
    )
    application.add_request_id_middleware()
    application.add_security_middlewares()

    if config.ENFORCE_SSL:
        application.add_enforce_ssl_middleware({"trust_proxy": config.TRUST_PROXY})

    if config.cors_origins_list == ["*"]:
        application.add_cors_support_middleware()
    else:
        application.add_middleware(
            CORSMiddleware,
            allow_origins=config.cors_origins_list,
            allow_credentials=True,
            allow_methods=["*"],
            allow_headers=["*"],
        )

    application.add_body_parse_middleware({
        "json_limit": config.BODY_JSON_LIMIT,
        "form_limit": config.BODY_FORM_LIMIT,
    })
    application.add_method_override_middleware(config.METHOD_OVERRIDE_FIELD)
    application.add_hook_middleware()

    if Path(config.STATIC_DIR).is_dir():
        application.add_static_content_middleware(config.STATIC_DIR)
    else:
        logger.info(f"Static directory not found, skipping: {config.STATIC_DIR}")

    if Path(config.VIEWS_DIR).is_dir():
        application.add_dynamic_view_middleware(config.VIEWS_DIR, config.view_cache_enabled)

    # -------------------------------------------------------------------------
    # Routes
    # -------------------------------------------------------------------------

    fastapi_app.include_router(
        health.router,
        prefix="/api/v1",
        tags=["Health"]
    )

    if Path(config.MODELS_DIR).is_dir():
        application.load_models(config.MODELS_DIR)

    if Path(config.CONTROLLERS_DIR).is_dir():
        application.load_controllers(config.CONTROLLERS_DIR)

    return application


async def serve(application: Application, port: int | str, env: str | None = None) -> None:
    """Listen until SIGINT/SIGTERM, then close every listener."""
    stop = asyncio.Event()
    loop = asyncio.get_running_loop()
    for sig in (signal.SIGINT, signal.SIGTERM):
        loop.add_signal_handler(sig, stop.set)

    try:
        await application.listen(port, env)
        await stop.wait()
    finally:
        await application.close()


def main() -> None:
    asyncio.run(serve(application, settings.API_PORT, settings.ENVIRONMENT))


# Module-level instances for ASGI servers: uvicorn app.main:app
application = create_application()
app = application.fastapi_app
