"""Custom exception hierarchy for AuthStorm."""

from __future__ import annotations

from typing import Literal

AttemptErrorKind = Literal["status", "transport", "timeout", "unexpected"]


class AuthStormError(Exception):
    """Base exception for all AuthStorm errors.

    Anything that should abort a run inherits from this class, so the CLI
    can turn it into a clean non-zero exit with a single except clause.
    """


class ConfigError(AuthStormError):
    """Raised when configuration is invalid or missing.

    Examples:
        - No target host given on the command line or in ``RUUVI_IP``.
        - The request body file cannot be read.
        - An environment variable has an invalid value.
        - The operating system entropy source is unavailable.
    """


class DispatchError(AuthStormError):
    """Raised when the dispatcher cannot run its workers to completion.

    Examples:
        - Worker tasks could not be created.
        - A worker crashed outside its per-attempt failure guard.
    """


class AttemptError(AuthStormError):
    """Raised when a single request attempt fails.

    Attempt errors are recoverable: the worker that owns the attempt logs
    them and moves on to its next attempt. They never abort a run.

    Attributes:
        kind: Failure class: "status" for a non-2xx response, "transport"
            for connection-level faults, "timeout" when the per-attempt
            deadline fires.
        status_code: HTTP status code for "status" failures, else None.
        reason: Human-readable failure description.
    """

    def __init__(
        self,
        reason: str,
        *,
        kind: AttemptErrorKind,
        status_code: int | None = None,
    ) -> None:
        super().__init__(reason)
        self.reason = reason
        self.kind = kind
        self.status_code = status_code

    @classmethod
    def from_status(cls, status_code: int) -> AttemptError:
        """Build an error for a response with a non-success status."""
        return cls(f"HTTP {status_code}", kind="status", status_code=status_code)
