"""Pre-run and post-run console summaries."""

from __future__ import annotations

from typing import TYPE_CHECKING

from rich.console import Console
from rich.panel import Panel
from rich.table import Table

if TYPE_CHECKING:
    from authstorm._internal.config import RunConfig
    from authstorm.metrics.models import RunResult

console = Console(stderr=True)


def report_start(config: RunConfig, out: Console | None = None) -> None:
    """Print the planned amount of work before dispatch.

    Args:
        config: The run about to start.
        out: Console to print to. Defaults to the stderr console.
    """
    out = out or console
    out.print(
        f"Brute-force test: {config.runners} runners × {config.attempts} req "
        f"= {config.total_attempts} random tokens…"
    )
    out.print(
        Panel(
            f"[bold]Target:[/bold]   {config.url}\n"
            f"[bold]Runners:[/bold]  {config.runners}\n"
            f"[bold]Attempts:[/bold] {config.attempts} per runner\n"
            f"[bold]Payload:[/bold]  {len(config.payload)} bytes\n"
            f"[bold]Timeout:[/bold]  {config.timeout:g}s per attempt",
            title="AuthStorm",
            border_style="cyan",
        )
    )


def report_end(result: RunResult, out: Console | None = None) -> None:
    """Print elapsed time and a summary table after the run.

    Args:
        result: Result returned by the dispatcher.
        out: Console to print to. Defaults to the stderr console.
    """
    out = out or console
    table = Table(
        title="Run Cancelled" if result.cancelled else "Run Complete",
        show_header=True,
        header_style="bold green",
        expand=True,
    )
    table.add_column("Metric", style="bold")
    table.add_column("Value", justify="right")

    table.add_row("Attempts", f"{result.total_attempts} / {result.planned_attempts}")
    table.add_row("Successes", str(result.successes))
    table.add_row("Failures", str(result.failures))
    table.add_row("Failure Rate", f"{result.failure_rate * 100:.2f}%")
    for status, count in sorted(result.errors_by_status.items()):
        table.add_row(f"  HTTP {status}", str(count))
    for kind, count in sorted(result.errors_by_kind.items()):
        table.add_row(f"  {kind}", str(count))
    table.add_row("Latency avg", f"{result.latency_avg:.1f}ms")
    table.add_row("Latency p50", f"{result.latency_p50:.1f}ms")
    table.add_row("Latency p95", f"{result.latency_p95:.1f}ms")
    table.add_row("Latency p99", f"{result.latency_p99:.1f}ms")
    table.add_row("Latency max", f"{result.latency_max:.1f}ms")

    out.print(table)

    if result.cancelled:
        out.print(f"[yellow]Stopped after {result.elapsed_seconds:.3f}s[/yellow]")
    else:
        out.print(f"[green]Finished in {result.elapsed_seconds:.3f}s[/green]")
