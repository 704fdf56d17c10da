# =============================================================================
# app/application.py - Application Bootstrap Wrapper
# =============================================================================
# Wraps a FastAPI instance with one method per bootstrap step: middleware
# registration, controller/model discovery, and HTTP/HTTPS listeners.
#
# Usage:
#   application = Application()
#   application.add_error_handler_middleware("views/error.html")
#   application.add_request_id_middleware()
#   application.add_cors_support_middleware()
#   application.add_body_parse_middleware()
#   application.load_models("models")
#   application.load_controllers("controllers")
#
#   await application.listen(8000, "development")
#   ...
#   await application.close()
#
# Middleware runs in registration order: the first one added sees the
# request first and the response last. A built-in AppShellException layer
# always sits outside all of them.
# =============================================================================

import asyncio
import logging
from pathlib import Path
from types import ModuleType
from typing import Any

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from starlette.exceptions import HTTPException
from starlette.middleware import Middleware

from app.config import Settings, get_settings
from app.exceptions import (
    AppShellException,
    HTTPSConfigurationError,
    appshell_exception_handler,
)
from app.loaders import load_controllers, load_models
from app.middleware import (
    AppShellExceptionMiddleware,
    BodyParserMiddleware,
    EnforceSSLMiddleware,
    ErrorHandlerMiddleware,
    ErrorResponder,
    HookMiddlewareFactory,
    MethodOverrideMiddleware,
    RequestIdMiddleware,
    SecurityMiddlewareFactory,
    StaticContentMiddleware,
)
from app.server import start_server, stop_server
from app.views import ViewMiddleware, Views
from core.models.listener import Listener
from core.models.options import (
    BodyParserOptions,
    EnforceSSLOptions,
    RequestIdOptions,
    SecurityOptions,
)

logger = logging.getLogger(__name__)

# The TLS listener binds to the HTTP port plus this offset.
HTTPS_PORT_OFFSET = 10000


class Application:
    """
    Bootstrap wrapper around a FastAPI application.

    Holds the list of active listeners; an entry in `servers` is always an
    actively listening server.
    """

    def __init__(self, fastapi_app: FastAPI | None = None, settings: Settings | None = None):
        self.fastapi_app = fastapi_app or FastAPI()
        self.settings = settings or get_settings()
        self._servers: list[Listener] = []

        self.fastapi_app.state.application = self
        self.fastapi_app.add_exception_handler(AppShellException, appshell_exception_handler)
        # Outermost layer, ahead of anything registered through add_middleware:
        # AppShellException raised by middleware keeps its status code.
        self.fastapi_app.user_middleware.insert(0, Middleware(AppShellExceptionMiddleware))

    @property
    def servers(self) -> list[Listener]:
        """Snapshot of the active listeners."""
        return list(self._servers)

    # =========================================================================
    # Middleware
    # =========================================================================

    def add_middleware(self, middleware: type | Middleware, **options: Any) -> None:
        """
        Register an ASGI middleware class (with options) or a Middleware spec.

        Appends to the stack, so earlier registrations wrap later ones.
        """
        if self.fastapi_app.middleware_stack is not None:
            raise RuntimeError("Cannot add middleware after an application has started")

        if not isinstance(middleware, Middleware):
            middleware = Middleware(middleware, **options)
        self.fastapi_app.user_middleware.append(middleware)

    def add_cors_support_middleware(self) -> None:
        self.add_middleware(
            CORSMiddleware,
            allow_origins=["*"],
            allow_methods=["*"],
            allow_headers=["*"],
        )

    def add_static_content_middleware(self, path: str) -> None:
        self.add_middleware(StaticContentMiddleware, directory=path)

    def add_dynamic_view_middleware(self, root: str, cache: bool) -> Views:
        """Configure templates under `root`; cache=False re-reads them on each render."""
        views = Views(root, cache=cache)
        self.fastapi_app.state.views = views
        self.add_middleware(ViewMiddleware, views=views)
        return views

    def add_hook_middleware(self) -> None:
        self.add_middleware(HookMiddlewareFactory.get_middleware())

    def add_method_override_middleware(self, field_name: str) -> None:
        self.add_middleware(MethodOverrideMiddleware, field_name=field_name)

    def add_error_handler_middleware(self, render_path: str | None = None) -> None:
        """
        Answer errors with the template at `render_path` (HTML clients) or JSON.

        Also takes over FastAPI's handlers for HTTPException and
        AppShellException, which are resolved inside the router and would
        otherwise never reach the middleware.
        """
        responder = ErrorResponder(render_path)
        self.add_middleware(ErrorHandlerMiddleware, responder=responder)
        self.fastapi_app.add_exception_handler(HTTPException, responder.handle)
        self.fastapi_app.add_exception_handler(AppShellException, responder.handle)

    def add_body_parse_middleware(self, options: BodyParserOptions | dict | None = None) -> None:
        if isinstance(options, dict):
            options = BodyParserOptions(**options)
        self.add_middleware(BodyParserMiddleware, options=options)

    def add_request_id_middleware(self, options: RequestIdOptions | dict | None = None) -> None:
        if isinstance(options, dict):
            options = RequestIdOptions(**options)
        self.add_middleware(RequestIdMiddleware, options=options or RequestIdOptions())

    def add_security_middlewares(self, options: SecurityOptions | dict | None = None) -> None:
        for middleware in SecurityMiddlewareFactory(options).get_middlewares():
            self.add_middleware(middleware)

    def add_enforce_ssl_middleware(self, options: EnforceSSLOptions | dict | None = None) -> None:
        if isinstance(options, dict):
            options = EnforceSSLOptions(**options)
        self.add_middleware(EnforceSSLMiddleware, options=options)

    # =========================================================================
    # Discovery
    # =========================================================================

    def load_controllers(self, path: str | Path) -> list[ModuleType]:
        return load_controllers(path, self.fastapi_app)

    def load_models(self, path: str | Path) -> list[ModuleType]:
        return load_models(path)

    # =========================================================================
    # Listeners
    # =========================================================================

    async def listen(self, port: int | str, env: str | None = None) -> None:
        """
        Start the HTTP listener on `port`, plus the TLS listener on
        port + 10000 when SERVE_HTTPS is set.
        """
        http_port = int(port)
        await self._start_http_server(http_port, env)

        if self.settings.SERVE_HTTPS:
            await self._start_https_server(http_port + HTTPS_PORT_OFFSET, env)

    async def close(self) -> None:
        """Stop every listener concurrently; returns once all have closed."""
        await asyncio.gather(*(self._close_server(listener) for listener in self.servers))

    async def _start_http_server(self, port: int, env: str | None) -> None:
        listener = await start_server(
            self.fastapi_app,
            self.settings.API_HOST,
            port,
            env=env,
        )
        self._servers.append(listener)
        logger.info(f"Application started: port={listener.port} env={env}")

    async def _start_https_server(self, port: int, env: str | None) -> None:
        missing = [
            name for name in ("HTTPS_KEY", "HTTPS_CERT")
            if not getattr(self.settings, name)
        ]
        if missing:
            raise HTTPSConfigurationError(missing)

        # Lifespan events already run on the HTTP listener.
        listener = await start_server(
            self.fastapi_app,
            self.settings.API_HOST,
            port,
            env=env,
            ssl_keyfile=self.settings.HTTPS_KEY,
            ssl_certfile=self.settings.HTTPS_CERT,
            lifespan="off",
        )
        self._servers.append(listener)
        logger.info(f"Application started (with SSL): port={listener.port} env={env}")

    async def _close_server(self, listener: Listener) -> None:
        self._servers = [stored for stored in self._servers if stored is not listener]
        await stop_server(listener)
