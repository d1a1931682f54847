"""Configuration loading for AuthStorm."""

from __future__ import annotations

import os
from dataclasses import dataclass
from pathlib import Path

from yarl import URL

from authstorm._internal.errors import ConfigError

DEFAULT_PATH = "/ruuvi.json"
DEFAULT_BODY_FILE = "ruuvi.json"
DEFAULT_RUNNERS = 10
DEFAULT_ATTEMPTS = 100
DEFAULT_TIMEOUT = 10.0


@dataclass(frozen=True)
class AuthStormSettings:
    """Defaults taken from the environment.

    Attributes:
        default_host: Target host when ``--ip`` is not given.
        request_timeout: Per-attempt timeout in seconds.
    """

    default_host: str = ""
    request_timeout: float = DEFAULT_TIMEOUT


@dataclass(frozen=True)
class RunConfig:
    """Immutable description of one run, shared read-only by all workers.

    Attributes:
        host: Target host name or address, optionally with ``:port``.
        runners: Number of concurrent workers.
        attempts: Sequential attempts per worker.
        payload: Request body, sent verbatim with every attempt.
        timeout: Upper bound in seconds for a single attempt.
        path: Request path on the target host.
    """

    host: str
    runners: int
    attempts: int
    payload: bytes
    timeout: float = DEFAULT_TIMEOUT
    path: str = DEFAULT_PATH

    @property
    def url(self) -> str:
        """Full target URL."""
        return f"http://{self.host}{self.path}"

    @property
    def total_attempts(self) -> int:
        """Planned number of attempts across all workers."""
        return self.runners * self.attempts


def load_config() -> AuthStormSettings:
    """Load defaults from environment variables.

    Environment variables:
        RUUVI_IP: Default target host.
        AUTHSTORM_TIMEOUT: Per-attempt timeout in seconds (default: 10.0).

    Returns:
        Populated AuthStormSettings instance.

    Raises:
        ConfigError: If an environment variable has an invalid value.
    """
    timeout_str = os.environ.get("AUTHSTORM_TIMEOUT", str(DEFAULT_TIMEOUT))

    try:
        timeout = float(timeout_str)
    except ValueError:
        msg = f"AUTHSTORM_TIMEOUT must be a number, got: {timeout_str!r}"
        raise ConfigError(msg) from None

    if timeout <= 0:
        msg = f"AUTHSTORM_TIMEOUT must be positive, got: {timeout}"
        raise ConfigError(msg)

    return AuthStormSettings(
        default_host=os.environ.get("RUUVI_IP", "").strip(),
        request_timeout=timeout,
    )


def read_payload(body_file: str | Path) -> bytes:
    """Read the request body file.

    Raises:
        ConfigError: If the file is missing or unreadable.
    """
    path = Path(body_file)
    try:
        return path.read_bytes()
    except OSError as exc:
        msg = f"Cannot read request body file {str(path)!r}: {exc.strerror or exc}"
        raise ConfigError(msg) from exc


def validate_host(host: str) -> str:
    """Check that ``host`` is a bare host name or address, optionally with a port.

    Schemes, paths, queries, credentials and whitespace are rejected, as is
    a port that is not a number in 1..65535.

    Returns:
        The host unchanged.

    Raises:
        ConfigError: If the host is not usable as ``http://<host>/``.
    """
    invalid = f"Invalid IP/hostname {host!r}: expected host or host:port"
    if any(c.isspace() for c in host) or any(c in host for c in "/?#@"):
        raise ConfigError(invalid)

    try:
        url = URL(f"http://{host}")
        port = url.port
    except ValueError:
        raise ConfigError(invalid) from None

    if not url.host or url.path not in ("", "/"):
        raise ConfigError(invalid)
    if port is None or not 1 <= port <= 65535:
        raise ConfigError(invalid)
    if ":" in host and not host.startswith("[") and not host.rsplit(":", 1)[1].isdigit():
        raise ConfigError(invalid)
    return host


def build_run_config(
    host: str | None,
    runners: int,
    attempts: int,
    body_file: str | Path,
    *,
    timeout: float | None = None,
    settings: AuthStormSettings | None = None,
) -> RunConfig:
    """Validate raw option values and build a RunConfig.

    Values passed explicitly win over ``settings`` (environment defaults).

    Args:
        host: Target host, or None/empty to fall back to ``RUUVI_IP``.
        runners: Number of concurrent workers (>= 1).
        attempts: Attempts per worker (>= 1).
        body_file: Path to the request body file.
        timeout: Per-attempt timeout in seconds, or None for the default.
        settings: Environment defaults. Loaded with ``load_config`` if None.

    Returns:
        Validated RunConfig.

    Raises:
        ConfigError: If the host is missing or invalid, a value is out of
            range, or the body file cannot be read.
    """
    if settings is None:
        settings = load_config()

    target = (host or "").strip() or settings.default_host
    if not target:
        msg = "IP/hostname is required (set env RUUVI_IP or --ip)"
        raise ConfigError(msg)

    validate_host(target)

    if runners < 1:
        msg = f"runners must be >= 1, got: {runners}"
        raise ConfigError(msg)

    if attempts < 1:
        msg = f"attempts must be >= 1, got: {attempts}"
        raise ConfigError(msg)

    effective_timeout = settings.request_timeout if timeout is None else timeout
    if effective_timeout <= 0:
        msg = f"timeout must be positive, got: {effective_timeout}"
        raise ConfigError(msg)

    return RunConfig(
        host=target,
        runners=runners,
        attempts=attempts,
        payload=read_payload(body_file),
        timeout=effective_timeout,
    )
