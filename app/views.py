# =============================================================================
# app/views.py - Server-Rendered Views
# =============================================================================
# Thin wrapper around Jinja2Templates.
#
# Usage (inside a controller):
#   @router.get("/")
#   async def home(request: Request):
#       return request.state.render("home.html", {"title": "Home"})
#
#   # or, without the view middleware in front of the route:
#   return request.app.state.views.render(request, "home.html", {...})
# =============================================================================

from functools import partial
from typing import Any

import jinja2
from starlette.requests import Request
from starlette.responses import Response
from starlette.templating import Jinja2Templates
from starlette.types import ASGIApp, Receive, Scope, Send


class Views:
    """
    Template renderer rooted at one directory.

    With cache=False templates are re-read from disk on every render,
    which is what you want while editing them in development.
    """

    def __init__(self, root: str, cache: bool = True):
        self.root = root
        self.cache = cache
        self.environment = jinja2.Environment(
            loader=jinja2.FileSystemLoader(root),
            autoescape=jinja2.select_autoescape(["html", "htm", "xml"]),
            auto_reload=not cache,
            cache_size=400 if cache else 0,
        )
        self.templates = Jinja2Templates(env=self.environment)

    def render(
        self,
        request: Request,
        name: str,
        context: dict[str, Any] | None = None,
        status_code: int = 200,
    ) -> Response:
        """
        Render a template to an HTML response.

        Args:
            request: Current request (exposed to the template as `request`)
            name: Template path relative to the views root
            context: Template variables
            status_code: HTTP status of the response
        """
        return self.templates.TemplateResponse(
            request,
            name,
            context or {},
            status_code=status_code,
        )


class ViewMiddleware:
    """Attach request.state.views and a bound request.state.render helper."""

    def __init__(self, app: ASGIApp, views: Views):
        self.app = app
        self.views = views

    async def __call__(self, scope: Scope, receive: Receive, send: Send) -> None:
        if scope["type"] == "http":
            state = scope.setdefault("state", {})
            state["views"] = self.views
            state["render"] = partial(self.views.render, Request(scope, receive))

        await self.app(scope, receive, send)
