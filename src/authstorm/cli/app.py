"""Main Typer application — entry point for the ``authstorm`` CLI."""

from __future__ import annotations

import typer

from authstorm.cli.run import run_cmd

app = typer.Typer(
    name="authstorm",
    help="Stress an endpoint's authentication path with random bearer tokens.",
    add_completion=False,
    rich_markup_mode="rich",
)

# Single command: flags are given directly, e.g. ``authstorm --ip=... --runners=10``
app.command(help="Run a randomized-credential load test.")(run_cmd)


def main() -> None:
    """Console script entry point."""
    app()
