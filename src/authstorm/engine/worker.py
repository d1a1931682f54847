"""Sequential attempt loop run by each concurrent worker."""

from __future__ import annotations

import asyncio
import time
from typing import TYPE_CHECKING

from authstorm._internal.errors import AttemptError
from authstorm._internal.logging import get_logger
from authstorm.engine.credentials import generate_credential
from authstorm.metrics.models import AttemptRecord, WorkerResult

if TYPE_CHECKING:
    from authstorm._internal.config import RunConfig
    from authstorm.engine.attempt import AttemptExecutor
    from authstorm.metrics.collector import AttemptCollector

logger = get_logger("engine.worker")


async def run_worker(
    worker_id: int,
    config: RunConfig,
    executor: AttemptExecutor,
    collector: AttemptCollector,
) -> WorkerResult:
    """Run ``config.attempts`` attempts one after another.

    Every attempt gets a fresh credential. A failed attempt is logged and
    recorded, and the loop moves straight on to the next index: there is
    no retry, no backoff and no early exit. Attempt ``i`` always finishes
    before attempt ``i + 1`` starts.

    Credential generation sits outside the failure guard: an unavailable
    entropy source raises ``ConfigError`` and ends the run.

    Args:
        worker_id: Identifier of this worker, in ``[0, config.runners)``.
        config: Shared, read-only run configuration.
        executor: Performs the HTTP request for each attempt.
        collector: Receives one AttemptRecord per attempt.

    Returns:
        WorkerResult with the number of attempts and failures.
    """
    failures = 0

    for attempt_index in range(config.attempts):
        credential = generate_credential()
        started_at = time.time()
        start = time.monotonic()
        status_code = 0
        error: str | None = None
        error_kind: str | None = None

        try:
            status_code = await executor.execute(credential)
        except asyncio.CancelledError:
            raise
        except AttemptError as exc:
            error = exc.reason
            error_kind = exc.kind
            status_code = exc.status_code or 0
            logger.warning(
                "Runner %d attempt %d failed: %s",
                worker_id,
                attempt_index,
                exc.reason,
                extra={
                    "worker_id": worker_id,
                    "attempt_index": attempt_index,
                    "error_kind": exc.kind,
                    "status_code": exc.status_code,
                },
            )
        except Exception as exc:
            error = f"{type(exc).__name__}: {exc}"
            error_kind = "unexpected"
            logger.warning(
                "Runner %d attempt %d failed unexpectedly: %s",
                worker_id,
                attempt_index,
                error,
                exc_info=True,
                extra={
                    "worker_id": worker_id,
                    "attempt_index": attempt_index,
                    "error_kind": error_kind,
                },
            )

        if error is not None:
            failures += 1

        collector.record(
            AttemptRecord(
                worker_id=worker_id,
                attempt_index=attempt_index,
                timestamp=started_at,
                latency_ms=(time.monotonic() - start) * 1000,
                status_code=status_code,
                error=error,
                error_kind=error_kind,
            )
        )

    logger.debug(
        "Runner %d finished: %d attempts, %d failed",
        worker_id,
        config.attempts,
        failures,
    )
    return WorkerResult(
        worker_id=worker_id,
        attempts=config.attempts,
        failures=failures,
    )
