"""Shared test fixtures for the AuthStorm test suite."""

from __future__ import annotations

import asyncio
import logging
import socket
import threading
from dataclasses import dataclass, field
from typing import TYPE_CHECKING

import pytest
from aiohttp import web

from authstorm._internal.config import RunConfig

if TYPE_CHECKING:
    from collections.abc import AsyncIterator, Callable, Iterator
    from pathlib import Path


# =============================================================================
# Pytest configuration
# =============================================================================


def pytest_collection_modifyitems(config: pytest.Config, items: list[pytest.Item]) -> None:
    """Auto-apply markers based on test directory structure."""
    for item in items:
        test_path = str(item.fspath)
        if "/unit/" in test_path:
            item.add_marker(pytest.mark.unit)
        elif "/integration/" in test_path:
            item.add_marker(pytest.mark.integration)
        elif "/e2e/" in test_path:
            item.add_marker(pytest.mark.e2e)


@pytest.fixture(autouse=True)
def _reset_authstorm_logger() -> Iterator[None]:
    """Undo ``setup_logging`` between tests so caplog keeps working."""
    yield
    logger = logging.getLogger("authstorm")
    for handler in list(logger.handlers):
        logger.removeHandler(handler)
    logger.propagate = True
    logger.setLevel(logging.NOTSET)


# =============================================================================
# Network utilities
# =============================================================================


def _get_free_port() -> int:
    """Find an available port on localhost."""
    with socket.socket(socket.AF_INET, socket.SOCK_STREAM) as s:
        s.bind(("", 0))
        s.setsockopt(socket.SOL_SOCKET, socket.SO_REUSEADDR, 1)
        return s.getsockname()[1]


# =============================================================================
# Target HTTP server
# =============================================================================


@dataclass
class ReceivedRequest:
    """A request as seen by the target server."""

    method: str
    path: str
    headers: dict[str, str]
    body: bytes


@dataclass
class TargetServer:
    """Mock target exposing ``POST /ruuvi.json``.

    ``status`` and ``delay`` may be changed by a test before the run.
    """

    host: str = ""
    status: int = 200
    delay: float = 0.0
    received: list[ReceivedRequest] = field(default_factory=list)

    @property
    def auth_headers(self) -> list[str]:
        return [r.headers.get("Authorization", "") for r in self.received]


def _create_target_app(target: TargetServer) -> web.Application:
    """Build the target app, recording every request into ``target``."""

    async def _ruuvi_handler(request: web.Request) -> web.Response:
        body = await request.read()
        target.received.append(
            ReceivedRequest(
                method=request.method,
                path=request.path,
                headers=dict(request.headers),
                body=body,
            )
        )
        if target.delay:
            await asyncio.sleep(target.delay)
        return web.json_response({"ok": target.status < 400}, status=target.status)

    app = web.Application()
    app.router.add_route("*", "/ruuvi.json", _ruuvi_handler)
    return app


# =============================================================================
# Fixtures
# =============================================================================


@pytest.fixture
async def target() -> AsyncIterator[TargetServer]:
    """Aiohttp target server fixture running on the test's event loop."""
    server = TargetServer()
    port = _get_free_port()
    runner = web.AppRunner(_create_target_app(server))
    await runner.setup()
    site = web.TCPSite(runner, "127.0.0.1", port)
    await site.start()
    server.host = f"127.0.0.1:{port}"
    yield server
    await runner.cleanup()


@pytest.fixture
def sync_target() -> Iterator[TargetServer]:
    """Target server running in a background thread for sync tests.

    Needed where the code under test owns the event loop (``run_storm``,
    the CLI) and blocks the main thread.
    """
    server = TargetServer()
    port = _get_free_port()
    started = threading.Event()
    loop_holder: list[asyncio.AbstractEventLoop] = []

    def _thread_target() -> None:
        loop = asyncio.new_event_loop()
        asyncio.set_event_loop(loop)
        runner = web.AppRunner(_create_target_app(server))
        loop.run_until_complete(runner.setup())
        site = web.TCPSite(runner, "127.0.0.1", port)
        loop.run_until_complete(site.start())
        loop_holder.append(loop)
        started.set()
        loop.run_forever()
        loop.run_until_complete(runner.cleanup())
        loop.close()

    thread = threading.Thread(target=_thread_target, daemon=True)
    thread.start()
    started.wait(timeout=5.0)
    server.host = f"127.0.0.1:{port}"

    yield server

    if loop_holder:
        loop_holder[0].call_soon_threadsafe(loop_holder[0].stop)
    thread.join(timeout=5.0)


@pytest.fixture
def closed_host() -> str:
    """Host:port with nothing listening on it."""
    return f"127.0.0.1:{_get_free_port()}"


@pytest.fixture
def body_file(tmp_path: Path) -> Path:
    """Request body file containing ``{"a":1}``."""
    path = tmp_path / "ruuvi.json"
    path.write_bytes(b'{"a":1}')
    return path


# =============================================================================
# Fake executors
# =============================================================================


class FakeExecutor:
    """Stands in for AttemptExecutor without any network I/O.

    ``outcome`` is either a status code to return or an exception to raise
    on every call. ``fail_every`` makes only every n-th call fail.
    """

    def __init__(
        self,
        outcome: int | BaseException = 200,
        *,
        delay: float = 0.0,
        fail_every: int = 0,
    ) -> None:
        self.outcome = outcome
        self.delay = delay
        self.fail_every = fail_every
        self.calls: list[str] = []

    async def execute(self, credential: str) -> int:
        self.calls.append(credential)
        if self.delay:
            await asyncio.sleep(self.delay)
        if self.fail_every and len(self.calls) % self.fail_every:
            return 200
        if isinstance(self.outcome, BaseException):
            raise self.outcome
        return self.outcome


@pytest.fixture
def make_executor() -> Callable[..., FakeExecutor]:
    """Factory for FakeExecutor instances."""
    return FakeExecutor


@pytest.fixture
def make_config() -> Callable[..., RunConfig]:
    """Factory for RunConfig with test-friendly defaults."""

    def _make(
        runners: int = 1,
        attempts: int = 1,
        *,
        host: str = "example.test",
        payload: bytes = b'{"a":1}',
        timeout: float = 5.0,
    ) -> RunConfig:
        return RunConfig(
            host=host,
            runners=runners,
            attempts=attempts,
            payload=payload,
            timeout=timeout,
        )

    return _make
