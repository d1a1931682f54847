"""``authstorm`` command: validate options, run, and report."""

from __future__ import annotations

import logging
from pathlib import Path

import typer
from rich.console import Console

from authstorm import __version__
from authstorm._internal.config import (
    DEFAULT_ATTEMPTS,
    DEFAULT_BODY_FILE,
    DEFAULT_RUNNERS,
    build_run_config,
)
from authstorm._internal.errors import AuthStormError
from authstorm.cli.report import report_end, report_start
from authstorm.engine.runner import run_storm

console = Console(stderr=True)

# Conventional exit status for a run interrupted by SIGINT
EXIT_CANCELLED = 130


def _version_callback(value: bool) -> None:
    """Print version and exit.

    Args:
        value: True if --version was passed.
    """
    if value:
        typer.echo(f"authstorm {__version__}")
        raise typer.Exit


def run_cmd(
    ip: str | None = typer.Option(
        None,
        "--ip",
        help="Target host name or IP (optionally host:port). Defaults to $RUUVI_IP.",
        show_default=False,
    ),
    runners: int = typer.Option(
        DEFAULT_RUNNERS,
        "--runners",
        "-r",
        help="Number of concurrent runners.",
        min=1,
    ),
    attempts: int = typer.Option(
        DEFAULT_ATTEMPTS,
        "--attempts",
        "-a",
        help="Sequential requests per runner.",
        min=1,
    ),
    body: Path = typer.Option(
        Path(DEFAULT_BODY_FILE),
        "--body",
        "-b",
        help="JSON request body file, sent verbatim.",
    ),
    timeout: float | None = typer.Option(
        None,
        "--timeout",
        "-t",
        help="Per-request timeout in seconds. Defaults to $AUTHSTORM_TIMEOUT or 10.",
        show_default=False,
    ),
    verbose: bool = typer.Option(
        False,
        "--verbose",
        "-v",
        help="Enable verbose (DEBUG) logging.",
    ),
    json_logs: bool = typer.Option(
        False,
        "--json-logs",
        help="Emit log lines as JSON objects.",
    ),
    version: bool = typer.Option(
        False,
        "--version",
        "-V",
        help="Show version and exit.",
        callback=_version_callback,
        is_eager=True,
    ),
) -> None:
    """Send randomized bearer tokens to a target under concurrent load."""
    try:
        config = build_run_config(ip, runners, attempts, body, timeout=timeout)
    except AuthStormError as exc:
        console.print(f"[red]Error:[/red] {exc}")
        raise typer.Exit(code=1) from exc

    report_start(config)

    log_level = logging.DEBUG if verbose else logging.INFO
    try:
        result = run_storm(config, log_level=log_level, json_logs=json_logs)
    except AuthStormError as exc:
        console.print(f"[red]Run failed:[/red] {exc}")
        raise typer.Exit(code=1) from exc

    report_end(result)

    if result.cancelled:
        raise typer.Exit(code=EXIT_CANCELLED)
