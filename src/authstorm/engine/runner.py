"""Top-level run entry point: event loop, logging and signal handling."""

from __future__ import annotations

import asyncio
import signal
import sys
from typing import TYPE_CHECKING

from authstorm._internal.logging import get_logger, setup_logging
from authstorm.engine.dispatcher import Dispatcher

if TYPE_CHECKING:
    from collections.abc import Callable

    from authstorm._internal.config import RunConfig
    from authstorm.metrics.models import RunResult

logger = get_logger("engine.runner")


def _loop_factory() -> Callable[[], asyncio.AbstractEventLoop] | None:
    """Return uvloop's loop constructor if available.

    Falls back to the default asyncio event loop on Windows or if uvloop
    is not installed.
    """
    if sys.platform == "win32":
        return None

    try:
        import uvloop
    except ImportError:
        logger.debug("uvloop not available, using default asyncio event loop")
        return None

    logger.debug("Using uvloop event loop")
    return uvloop.new_event_loop


def run_storm(
    config: RunConfig,
    *,
    log_level: int = 20,
    json_logs: bool = False,
) -> RunResult:
    """Execute a complete run in the current process.

    Sets up logging, creates the event loop (uvloop when available) and
    runs a Dispatcher to completion. SIGINT and SIGTERM stop the run
    gracefully; the returned result is then marked as cancelled.

    Args:
        config: Validated run configuration.
        log_level: Logging level (default: logging.INFO = 20).
        json_logs: Emit structured JSON log lines.

    Returns:
        RunResult for the whole run.

    Raises:
        DispatchError: If workers could not be launched.
        ConfigError: If a fatal configuration problem surfaced mid-run.
    """
    setup_logging(level=log_level, json_format=json_logs)

    with asyncio.Runner(loop_factory=_loop_factory()) as runner:
        return runner.run(_run_dispatcher(config))


async def _run_dispatcher(config: RunConfig) -> RunResult:
    """Run a Dispatcher with signal handlers installed."""
    dispatcher = Dispatcher(config)
    _install_signal_handlers(dispatcher)
    try:
        return await dispatcher.run_all()
    finally:
        _remove_signal_handlers()


def _install_signal_handlers(dispatcher: Dispatcher) -> None:
    """Route SIGINT and SIGTERM to ``dispatcher.stop``."""

    def _signal_handler() -> None:
        logger.info("Signal received, initiating graceful shutdown")
        dispatcher.stop()

    if sys.platform != "win32":
        loop = asyncio.get_running_loop()
        loop.add_signal_handler(signal.SIGINT, _signal_handler)
        loop.add_signal_handler(signal.SIGTERM, _signal_handler)
    else:
        # Windows doesn't support add_signal_handler
        signal.signal(signal.SIGINT, lambda _s, _f: _signal_handler())
        signal.signal(signal.SIGTERM, lambda _s, _f: _signal_handler())


def _remove_signal_handlers() -> None:
    """Remove custom signal handlers, restoring defaults."""
    if sys.platform != "win32":
        loop = asyncio.get_running_loop()
        for sig in (signal.SIGINT, signal.SIGTERM):
            loop.remove_signal_handler(sig)
    else:
        signal.signal(signal.SIGINT, signal.default_int_handler)
        signal.signal(signal.SIGTERM, signal.SIG_DFL)
