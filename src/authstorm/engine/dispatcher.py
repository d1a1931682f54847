"""Concurrent fan-out of workers with a full-barrier join."""

from __future__ import annotations

import asyncio
import time
from typing import TYPE_CHECKING

from authstorm._internal.errors import AuthStormError, ConfigError, DispatchError
from authstorm._internal.logging import get_logger
from authstorm.engine.attempt import AttemptExecutor
from authstorm.engine.worker import run_worker
from authstorm.metrics.collector import AttemptCollector

if TYPE_CHECKING:
    from authstorm._internal.config import RunConfig
    from authstorm.metrics.models import RunResult, WorkerResult

logger = get_logger("engine.dispatcher")


class Dispatcher:
    """Launches ``config.runners`` workers concurrently and waits for all.

    Each worker is an asyncio task. The only suspension point inside a
    worker is its in-flight request, so workers proceed in parallel with
    respect to network I/O and a slow target does not serialize them.

    ``run_all`` returns only when every worker has exhausted its attempts
    (or the run was stopped), and measures the wall-clock time from the
    first launch to the last completion.

    Attributes:
        config: The run configuration shared by all workers.
    """

    def __init__(
        self,
        config: RunConfig,
        *,
        executor: AttemptExecutor | None = None,
        collector: AttemptCollector | None = None,
    ) -> None:
        """Initialize the dispatcher.

        Args:
            config: Run configuration.
            executor: Executor shared by all workers. When None, an
                ``AttemptExecutor`` is opened for the duration of the run.
            collector: Attempt collector. A new one is created if None.

        Raises:
            ConfigError: If the config asks for fewer than one runner or
                attempt.
        """
        if config.runners < 1 or config.attempts < 1:
            msg = f"runners and attempts must be >= 1, got {config.runners} x {config.attempts}"
            raise ConfigError(msg)
        self.config = config
        self._executor = executor
        self._collector = collector or AttemptCollector()
        self._tasks: list[asyncio.Task[WorkerResult]] = []
        self._worker_results: list[WorkerResult] = []
        self._stop_requested = False

    @property
    def collector(self) -> AttemptCollector:
        """Return the collector receiving every attempt outcome."""
        return self._collector

    @property
    def worker_results(self) -> list[WorkerResult]:
        """Return the results of runners that finished the last run normally.

        Runners that were cancelled have no entry.
        """
        return list(self._worker_results)

    @property
    def active_workers(self) -> int:
        """Return the number of workers still running."""
        return sum(1 for t in self._tasks if not t.done())

    async def run_all(self) -> RunResult:
        """Run every worker to completion and return the aggregate result.

        Returns:
            RunResult for the whole run. ``cancelled`` is set if ``stop``
            was called before all workers finished. A stop request only
            applies to the run it interrupts (or the next one, if called
            while idle), so the same dispatcher can be run again. Records
            accumulate in the collector across runs.

        Raises:
            DispatchError: If the workers could not be launched, or one
                crashed outside its per-attempt failure guard.
            ConfigError: If a worker hit a fatal configuration problem
                (e.g. no entropy source).
        """
        try:
            if self._executor is not None:
                return await self._dispatch(self._executor)

            async with AttemptExecutor(self.config) as executor:
                return await self._dispatch(executor)
        finally:
            self._stop_requested = False

    def stop(self) -> None:
        """Cancel all in-flight workers.

        In-flight requests are cancelled with them. ``run_all`` returns
        promptly with a result marked as cancelled.
        """
        if self._stop_requested:
            return
        self._stop_requested = True
        logger.info("Stop requested, cancelling %d active runners", self.active_workers)
        for task in self._tasks:
            if not task.done():
                task.cancel()

    async def _dispatch(self, executor: AttemptExecutor) -> RunResult:
        config = self.config
        logger.info(
            "Dispatching %d runners x %d attempts against %s",
            config.runners,
            config.attempts,
            config.url,
        )

        self._tasks = []
        self._worker_results = []
        baseline = len(self._collector)
        start_time = time.monotonic()
        try:
            for worker_id in range(config.runners):
                self._tasks.append(
                    asyncio.create_task(
                        run_worker(worker_id, config, executor, self._collector),
                        name=f"runner-{worker_id}",
                    )
                )
        except Exception as exc:
            await self._cancel_all()
            msg = f"Could not launch {config.runners} runners"
            raise DispatchError(msg) from exc

        if self._stop_requested:
            for task in self._tasks:
                task.cancel()

        try:
            _done, pending = await asyncio.wait(
                self._tasks,
                return_when=asyncio.FIRST_EXCEPTION,
            )
            # Only non-empty when a worker died; take its siblings down too
            if pending:
                for task in pending:
                    task.cancel()
                await asyncio.wait(pending)
        except asyncio.CancelledError:
            await self._cancel_all()
            raise

        elapsed = time.monotonic() - start_time
        self._raise_worker_failure()

        self._gather_worker_results()

        cancelled = self._stop_requested or any(t.cancelled() for t in self._tasks)
        result = self._collector.build_result(
            planned_attempts=config.total_attempts,
            elapsed_seconds=elapsed,
            cancelled=cancelled,
        )
        if not cancelled:
            reported = sum(w.failures for w in self._worker_results)
            recorded = sum(1 for r in self._collector.records[baseline:] if not r.ok)
            if reported != recorded:
                logger.warning(
                    "Runners reported %d failures but %d were recorded",
                    reported,
                    recorded,
                )
        logger.info(
            "Run %s: %d/%d attempts, %d failed, %.3fs",
            "cancelled" if cancelled else "completed",
            result.total_attempts,
            result.planned_attempts,
            result.failures,
            elapsed,
        )
        return result

    def _raise_worker_failure(self) -> None:
        """Re-raise the first worker crash, if any."""
        for task in self._tasks:
            if task.cancelled():
                continue
            exc = task.exception()
            if exc is None:
                continue
            if isinstance(exc, AuthStormError):
                raise exc
            msg = f"Runner task {task.get_name()} crashed: {exc}"
            raise DispatchError(msg) from exc

    def _gather_worker_results(self) -> None:
        """Collect the WorkerResult of every runner that was not cancelled."""
        for task in self._tasks:
            if task.cancelled():
                continue
            worker = task.result()
            self._worker_results.append(worker)
            logger.debug(
                "Runner %d finished: %d attempts, %d failed",
                worker.worker_id,
                worker.attempts,
                worker.failures,
            )

    async def _cancel_all(self) -> None:
        """Cancel every worker and wait briefly for them to unwind."""
        for task in self._tasks:
            task.cancel()
        if self._tasks:
            await asyncio.wait(self._tasks, timeout=2.0)
