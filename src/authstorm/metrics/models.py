"""Attempt and run result dataclasses for AuthStorm."""

from __future__ import annotations

from dataclasses import dataclass, field

__all__ = [
    "AttemptRecord",
    "RunResult",
    "WorkerResult",
]


@dataclass(frozen=True)
class AttemptRecord:
    """Outcome of one attempt, identified by (worker_id, attempt_index).

    Attributes:
        worker_id: Worker that ran the attempt.
        attempt_index: Position of the attempt in the worker's loop.
        timestamp: Wall-clock time (epoch seconds) when the attempt started.
        latency_ms: Time until success or failure, in milliseconds.
        status_code: HTTP status code, 0 if no response was received.
        error: Failure description, None on success.
        error_kind: Failure class ("status", "transport", "timeout",
            "unexpected"), None on success.
    """

    worker_id: int
    attempt_index: int
    timestamp: float
    latency_ms: float
    status_code: int = 0
    error: str | None = None
    error_kind: str | None = None

    @property
    def ok(self) -> bool:
        """True if the attempt succeeded."""
        return self.error is None


@dataclass(frozen=True)
class WorkerResult:
    """Summary returned by a worker after its loop completes.

    Attributes:
        worker_id: Identifier of the worker.
        attempts: Attempts executed.
        failures: Attempts that failed.
    """

    worker_id: int
    attempts: int
    failures: int


@dataclass(frozen=True)
class RunResult:
    """Aggregate result of a whole run, produced once by the dispatcher.

    Attributes:
        planned_attempts: runners x attempts from the configuration.
        total_attempts: Attempts actually executed.
        elapsed_seconds: Wall-clock time from first launch to last completion.
        successes: Attempts with a 2xx response.
        failures: Attempts that failed for any reason.
        errors_by_status: Failure count per HTTP status code.
        errors_by_kind: Failure count per failure class.
        latency_min: Minimum attempt latency (ms).
        latency_avg: Mean attempt latency (ms).
        latency_p50: 50th percentile latency (ms).
        latency_p95: 95th percentile latency (ms).
        latency_p99: 99th percentile latency (ms).
        latency_max: Maximum attempt latency (ms).
        cancelled: True if the run was stopped before all attempts ran.
    """

    planned_attempts: int
    total_attempts: int
    elapsed_seconds: float
    successes: int = 0
    failures: int = 0
    errors_by_status: dict[int, int] = field(default_factory=dict)
    errors_by_kind: dict[str, int] = field(default_factory=dict)
    latency_min: float = 0.0
    latency_avg: float = 0.0
    latency_p50: float = 0.0
    latency_p95: float = 0.0
    latency_p99: float = 0.0
    latency_max: float = 0.0
    cancelled: bool = False

    @property
    def failure_rate(self) -> float:
        """Fraction of executed attempts that failed (0.0 to 1.0)."""
        if self.total_attempts == 0:
            return 0.0
        return self.failures / self.total_attempts
