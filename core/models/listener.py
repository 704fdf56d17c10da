# =============================================================================
# core/models/listener.py - Active Listener Record
# =============================================================================
# A Listener is one running server bound to one port. The Application keeps
# a list of them; an entry in that list is always an actively listening
# server.
# =============================================================================

from __future__ import annotations

import asyncio
from dataclasses import dataclass
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    import uvicorn


@dataclass
class Listener:
    """A started server and the task driving it."""

    server: uvicorn.Server
    task: asyncio.Task
    host: str
    port: int
    secure: bool = False
    env: str | None = None

    @property
    def scheme(self) -> str:
        return "https" if self.secure else "http"

    @property
    def url(self) -> str:
        host = "127.0.0.1" if self.host in ("0.0.0.0", "") else self.host
        return f"{self.scheme}://{host}:{self.port}"
