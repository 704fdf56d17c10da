# =============================================================================
# app/middleware/static.py - Static Content
# =============================================================================
# Serves files from a directory for GET/HEAD requests. Unlike mounting
# StaticFiles on a path prefix, a miss falls through to the rest of the
# stack, so static files and routes share one URL space.
# =============================================================================

from starlette.exceptions import HTTPException
from starlette.staticfiles import StaticFiles
from starlette.types import ASGIApp, Receive, Scope, Send


class StaticContentMiddleware:
    """Serve a file when one matches the request path, otherwise pass through."""

    def __init__(self, app: ASGIApp, directory: str, index: str = "index.html"):
        self.app = app
        self.index = index
        # Raises RuntimeError if the directory does not exist.
        self.files = StaticFiles(directory=directory)

    async def __call__(self, scope: Scope, receive: Receive, send: Send) -> None:
        if scope["type"] != "http" or scope["method"] not in ("GET", "HEAD"):
            await self.app(scope, receive, send)
            return

        path = self.files.get_path(scope)
        if scope["path"].endswith("/"):
            path = f"{path}/{self.index}" if path not in ("", ".") else self.index

        try:
            response = await self.files.get_response(path, scope)
        except HTTPException as exc:
            if exc.status_code != 404:
                raise
            await self.app(scope, receive, send)
            return

        await response(scope, receive, send)
