# =============================================================================
# tests/test_application.py - Application Bootstrap Tests
# =============================================================================
# Tests for app/application.py:
#   - Middleware ordering and registration rules
#   - HTTP/HTTPS listener lifecycle (listen / close)
#
# Listener tests bind real sockets on 127.0.0.1 with port 0.
#
# Run with: poetry run pytest tests/test_application.py -v
# =============================================================================

import asyncio
import socket
import ssl
from contextlib import asynccontextmanager

import httpx
import pytest
import trustme
from fastapi import FastAPI
from fastapi.testclient import TestClient

from app.application import HTTPS_PORT_OFFSET, Application
from app.config import Settings
from app.exceptions import HTTPSConfigurationError
from app.server import start_server


class RecordingMiddleware:
    """Appends its name to a shared list on the way in."""

    def __init__(self, app, name: str, calls: list):
        self.app = app
        self.name = name
        self.calls = calls

    async def __call__(self, scope, receive, send):
        if scope["type"] == "http":
            self.calls.append(self.name)
        await self.app(scope, receive, send)


def add_ping_route(application: Application) -> None:
    @application.fastapi_app.get("/ping")
    async def ping():
        return {"pong": True}


def port_is_free(port: int) -> bool:
    with socket.socket(socket.AF_INET, socket.SOCK_STREAM) as sock:
        try:
            sock.bind(("127.0.0.1", port))
        except OSError:
            return False
    return True


def free_port_pair(offset: int) -> int:
    """A free port whose port + offset is free as well."""
    for _ in range(100):
        with socket.socket(socket.AF_INET, socket.SOCK_STREAM) as sock:
            sock.bind(("127.0.0.1", 0))
            port = sock.getsockname()[1]
        if port + offset <= 65535 and port_is_free(port + offset):
            return port
    raise RuntimeError("no free port pair found")


# =============================================================================
# Middleware Registration
# =============================================================================

class TestAddMiddleware:
    """Test Application.add_middleware."""

    def test_runs_in_registration_order(self, application):
        calls: list[str] = []
        application.add_middleware(RecordingMiddleware, name="first", calls=calls)
        application.add_middleware(RecordingMiddleware, name="second", calls=calls)
        application.add_middleware(RecordingMiddleware, name="third", calls=calls)
        add_ping_route(application)

        TestClient(application.fastapi_app).get("/ping")

        assert calls == ["first", "second", "third"]

    def test_rejects_middleware_after_start(self, application):
        add_ping_route(application)
        TestClient(application.fastapi_app).get("/ping")

        with pytest.raises(RuntimeError):
            application.add_request_id_middleware()

    def test_state_points_back_to_application(self, application):
        assert application.fastapi_app.state.application is application

    def test_creates_fastapi_app_when_missing(self, test_settings):
        application = Application(settings=test_settings)
        assert isinstance(application.fastapi_app, FastAPI)


# =============================================================================
# Listeners
# =============================================================================

class TestListen:
    """Test listen() and close() against real sockets."""

    def test_listen_and_close(self, application):
        add_ping_route(application)

        async def run():
            await application.listen(0, "test")
            [listener] = application.servers

            assert listener.port > 0
            assert listener.env == "test"
            assert listener.secure is False

            async with httpx.AsyncClient() as client:
                response = await client.get(f"{listener.url}/ping")

            await application.close()
            return response

        response = asyncio.run(run())

        assert response.json() == {"pong": True}
        assert application.servers == []

    def test_accepts_port_as_string(self, application):
        async def run():
            await application.listen("0")
            ports = [listener.port for listener in application.servers]
            await application.close()
            return ports

        ports = asyncio.run(run())

        assert len(ports) == 1
        assert ports[0] > 0

    def test_close_stops_every_listener(self, application):
        add_ping_route(application)

        async def run():
            await application.listen(0)
            await application.listen(0)
            urls = [listener.url for listener in application.servers]
            await application.close()

            failures = 0
            async with httpx.AsyncClient() as client:
                for url in urls:
                    try:
                        await client.get(f"{url}/ping")
                    except httpx.ConnectError:
                        failures += 1
            return urls, failures

        urls, failures = asyncio.run(run())

        assert len(urls) == 2
        assert failures == 2
        assert application.servers == []

    def test_close_without_listeners(self, application):
        asyncio.run(application.close())
        assert application.servers == []

    def test_busy_port_raises(self, application):
        async def run():
            await application.listen(0)
            port = application.servers[0].port
            try:
                with pytest.raises(OSError):
                    await application.listen(port)
                return len(application.servers)
            finally:
                await application.close()

        assert asyncio.run(run()) == 1


class TestHTTPSListener:
    """Test the TLS listener started alongside the HTTP one."""

    def test_missing_key_and_cert(self):
        application = Application(
            FastAPI(),
            settings=Settings(API_HOST="127.0.0.1", SERVE_HTTPS=True),
        )

        async def run():
            try:
                with pytest.raises(HTTPSConfigurationError) as exc_info:
                    await application.listen(0)
                return exc_info.value, len(application.servers)
            finally:
                await application.close()

        error, listeners = asyncio.run(run())

        assert error.details["missing"] == ["HTTPS_KEY", "HTTPS_CERT"]
        # The HTTP listener was already up when the TLS one failed
        assert listeners == 1
        assert application.servers == []

    def test_unreadable_certificate(self, tmp_path):
        application = Application(
            FastAPI(),
            settings=Settings(
                API_HOST="127.0.0.1",
                SERVE_HTTPS=True,
                HTTPS_KEY=str(tmp_path / "missing-key.pem"),
                HTTPS_CERT=str(tmp_path / "missing-cert.pem"),
            ),
        )

        async def run():
            try:
                with pytest.raises(FileNotFoundError):
                    await application.listen(0)
            finally:
                await application.close()

        asyncio.run(run())

    def test_https_port_offset(self, monkeypatch):
        application = Application(
            FastAPI(),
            settings=Settings(API_HOST="127.0.0.1", SERVE_HTTPS=True),
        )
        started: list[tuple[str, int, str]] = []

        async def fake_http(port, env):
            started.append(("http", port, env))

        async def fake_https(port, env):
            started.append(("https", port, env))

        monkeypatch.setattr(application, "_start_http_server", fake_http)
        monkeypatch.setattr(application, "_start_https_server", fake_https)

        asyncio.run(application.listen("3000", "production"))

        assert HTTPS_PORT_OFFSET == 10000
        assert started == [("http", 3000, "production"), ("https", 13000, "production")]

    def test_http_only_without_serve_https(self, application, monkeypatch):
        started: list[tuple[str, int]] = []

        async def fake_http(port, env):
            started.append(("http", port))

        async def fake_https(port, env):
            started.append(("https", port))

        monkeypatch.setattr(application, "_start_http_server", fake_http)
        monkeypatch.setattr(application, "_start_https_server", fake_https)

        asyncio.run(application.listen(3000))

        assert started == [("http", 3000)]


class TestHTTPSListenerServing:
    """A real TLS listener next to the HTTP one."""

    def test_serves_https_on_offset_port(self, tmp_path):
        ca = trustme.CA()
        server_cert = ca.issue_cert("127.0.0.1")
        key_path = tmp_path / "key.pem"
        cert_path = tmp_path / "cert.pem"
        server_cert.private_key_pem.write_to_path(str(key_path))
        server_cert.cert_chain_pems[0].write_to_path(str(cert_path))

        application = Application(
            FastAPI(),
            settings=Settings(
                API_HOST="127.0.0.1",
                SERVE_HTTPS=True,
                HTTPS_KEY=str(key_path),
                HTTPS_CERT=str(cert_path),
            ),
        )
        add_ping_route(application)

        client_context = ssl.create_default_context()
        ca.configure_trust(client_context)
        port = free_port_pair(HTTPS_PORT_OFFSET)

        async def run():
            await application.listen(port, "test")
            listeners = [(listener.port, listener.secure) for listener in application.servers]
            secure_url = application.servers[1].url

            async with httpx.AsyncClient(verify=client_context) as client:
                response = await client.get(f"{secure_url}/ping")

            await application.close()
            return listeners, secure_url, response

        listeners, secure_url, response = asyncio.run(run())

        assert listeners == [(port, False), (port + HTTPS_PORT_OFFSET, True)]
        assert secure_url.startswith("https://")
        assert response.json() == {"pong": True}
        assert application.servers == []


class TestStartServer:
    """Test start_server edge cases."""

    def test_cancelled_startup_releases_port(self):
        port = free_port_pair(0)

        @asynccontextmanager
        async def never_ready(app):
            await asyncio.Event().wait()
            yield

        async def run():
            starting = asyncio.create_task(
                start_server(FastAPI(lifespan=never_ready), "127.0.0.1", port)
            )
            await asyncio.sleep(0.2)
            starting.cancel()
            with pytest.raises(asyncio.CancelledError):
                await starting

        asyncio.run(run())

        assert port_is_free(port)
