# =============================================================================
# app/server.py - HTTP/HTTPS Listeners
# =============================================================================
# Starts and stops uvicorn servers inside the running event loop.
#
# Usage:
#   listener = await start_server(app, "0.0.0.0", 8000, env="development")
#   ...
#   await stop_server(listener)
#
# Failures surface from the library that hit them: OSError for a bad or busy
# port, FileNotFoundError / ssl.SSLError for unreadable certificate material.
# =============================================================================

import asyncio
import contextlib
import logging
import socket

import uvicorn

from app.exceptions import ListenerStartupError
from core.models.listener import Listener

logger = logging.getLogger(__name__)


class _Server(uvicorn.Server):
    """uvicorn server that leaves signal handling to the caller."""

    @contextlib.contextmanager
    def capture_signals(self):
        yield

    def install_signal_handlers(self) -> None:
        pass


def _bind_socket(host: str, port: int) -> socket.socket:
    family = socket.AF_INET6 if ":" in host else socket.AF_INET
    sock = socket.socket(family, socket.SOCK_STREAM)
    try:
        sock.setsockopt(socket.SOL_SOCKET, socket.SO_REUSEADDR, 1)
        sock.bind((host, port))
        sock.set_inheritable(True)
    except OSError:
        sock.close()
        raise
    return sock


async def start_server(
    asgi_app,
    host: str,
    port: int,
    env: str | None = None,
    ssl_keyfile: str | None = None,
    ssl_certfile: str | None = None,
    lifespan: str = "auto",
) -> Listener:
    """
    Start a uvicorn server and wait until it accepts connections.

    Args:
        asgi_app: The ASGI application to serve
        host: Interface to bind
        port: Port to bind (0 picks a free port)
        env: Environment label recorded on the listener
        ssl_keyfile: PEM private key; enables TLS together with ssl_certfile
        ssl_certfile: PEM certificate
        lifespan: uvicorn lifespan mode ("auto", "on" or "off")

    Returns:
        Listener: The started listener, with the port actually bound
    """
    config = uvicorn.Config(
        asgi_app,
        host=host,
        port=port,
        ssl_keyfile=ssl_keyfile,
        ssl_certfile=ssl_certfile,
        lifespan=lifespan,
        log_config=None,
    )
    # Loading here raises certificate errors before any socket is bound.
    config.load()

    sock = _bind_socket(host, port)
    bound_port = sock.getsockname()[1]

    server = _Server(config)
    task = asyncio.create_task(server.serve(sockets=[sock]))

    try:
        while not server.started:
            if task.done():
                # Re-raises whatever stopped the server; a clean exit means
                # startup was aborted (e.g. a failing lifespan handler).
                task.result()
                raise ListenerStartupError(bound_port)
            await asyncio.sleep(0.01)
    except BaseException:
        # Failed or cancelled before the listener was handed out: nobody
        # else will stop the server or release the socket.
        server.should_exit = True
        task.cancel()
        await asyncio.gather(task, return_exceptions=True)
        sock.close()
        raise

    return Listener(
        server=server,
        task=task,
        host=host,
        port=bound_port,
        secure=ssl_certfile is not None,
        env=env,
    )


async def stop_server(listener: Listener) -> None:
    """Ask a listener to exit and wait until its socket is released."""
    listener.server.should_exit = True
    await listener.task
    logger.debug(f"Listener on port {listener.port} closed")
