"""``wrtforge triage LOG`` — summarize an existing build log without rebuilding."""

from __future__ import annotations

from pathlib import Path

import typer
from rich.console import Console

from wrtforge.core.failure_triage import MAX_MATCHES, TAIL_LINES, FailureTriage
from wrtforge.monitor.renderer import ReportRenderer

console = Console()


def triage_cmd(
    log_path: Path = typer.Argument(..., help="Build log to summarize."),
    max_matches: int = typer.Option(MAX_MATCHES, "--max-matches", min=0),
    tail: int = typer.Option(TAIL_LINES, "--tail", min=0),
) -> None:
    """Print error-pattern matches and trailing context from LOG_PATH."""
    summary = FailureTriage(max_matches=max_matches, tail_lines=tail).summarize(log_path)
    ReportRenderer(console=console).print_failure(summary)
    if summary.degraded:
        raise typer.Exit(code=1)
