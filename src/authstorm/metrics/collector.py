"""In-memory attempt collection for a single run."""

from __future__ import annotations

from collections import Counter
from typing import TYPE_CHECKING

import numpy as np

from authstorm._internal.logging import get_logger
from authstorm.metrics.models import RunResult

if TYPE_CHECKING:
    from authstorm.metrics.models import AttemptRecord

logger = get_logger("metrics.collector")


def _compute_latency_stats(
    latencies: list[float],
) -> tuple[float, float, float, float, float, float]:
    """Compute latency statistics.

    Args:
        latencies: Latency values in milliseconds.

    Returns:
        Tuple of (min, avg, p50, p95, p99, max).
    """
    if not latencies:
        return (0.0, 0.0, 0.0, 0.0, 0.0, 0.0)

    arr = np.array(latencies, dtype=np.float64)
    p50, p95, p99 = np.percentile(arr, [50.0, 95.0, 99.0])

    return (
        float(np.min(arr)),
        float(np.mean(arr)),
        float(p50),
        float(p95),
        float(p99),
        float(np.max(arr)),
    )


class AttemptCollector:
    """Collects AttemptRecord objects for one run.

    Workers call ``record`` after every attempt. All workers of a run
    live on the same event loop, so appends never race.
    ``build_result`` turns the collected records into a ``RunResult``.
    """

    def __init__(self) -> None:
        self._records: list[AttemptRecord] = []

    def __len__(self) -> int:
        return len(self._records)

    @property
    def records(self) -> list[AttemptRecord]:
        """Return a copy of all records collected so far."""
        return list(self._records)

    def record(self, attempt: AttemptRecord) -> None:
        """Store the outcome of one attempt."""
        self._records.append(attempt)

    def build_result(
        self,
        *,
        planned_attempts: int,
        elapsed_seconds: float,
        cancelled: bool = False,
    ) -> RunResult:
        """Aggregate every recorded attempt into a RunResult.

        Args:
            planned_attempts: runners x attempts from the configuration.
            elapsed_seconds: Wall-clock duration of the run.
            cancelled: Whether the run was stopped early.

        Returns:
            Immutable RunResult.
        """
        failed = [r for r in self._records if not r.ok]
        by_status = Counter(r.status_code for r in failed if r.status_code)
        by_kind = Counter(r.error_kind or "unexpected" for r in failed)
        lat_min, lat_avg, p50, p95, p99, lat_max = _compute_latency_stats(
            [r.latency_ms for r in self._records]
        )

        total = len(self._records)
        logger.debug(
            "Aggregated %d attempts (%d failed) over %.3fs",
            total,
            len(failed),
            elapsed_seconds,
        )

        return RunResult(
            planned_attempts=planned_attempts,
            total_attempts=total,
            elapsed_seconds=elapsed_seconds,
            successes=total - len(failed),
            failures=len(failed),
            errors_by_status=dict(by_status),
            errors_by_kind=dict(by_kind),
            latency_min=lat_min,
            latency_avg=lat_avg,
            latency_p50=p50,
            latency_p95=p95,
            latency_p99=p99,
            latency_max=lat_max,
            cancelled=cancelled,
        )
