"""AuthStorm — concurrent randomized-credential load for authentication paths."""

from __future__ import annotations

from authstorm._internal.config import RunConfig, build_run_config
from authstorm._internal.errors import AttemptError, AuthStormError, ConfigError, DispatchError
from authstorm.engine.attempt import AttemptExecutor
from authstorm.engine.credentials import generate_credential
from authstorm.engine.dispatcher import Dispatcher
from authstorm.engine.runner import run_storm
from authstorm.engine.worker import run_worker
from authstorm.metrics.models import AttemptRecord, RunResult, WorkerResult

__version__ = "0.1.0"

__all__ = [
    "AttemptError",
    "AttemptExecutor",
    "AttemptRecord",
    "AuthStormError",
    "ConfigError",
    "DispatchError",
    "Dispatcher",
    "RunConfig",
    "RunResult",
    "WorkerResult",
    "build_run_config",
    "generate_credential",
    "run_storm",
    "run_worker",
]
