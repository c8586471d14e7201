"""Rich terminal renderer for wrtforge run reports.

Color scheme
------------
- green     : PASSED
- yellow    : WARNED / RUNNING
- red       : FAILED
- bold red  : BLOCKED
- dim       : NOT_STARTED / SKIPPED
"""

from __future__ import annotations

from rich.console import Console, Group
from rich.panel import Panel
from rich.table import Table
from rich.text import Text

from wrtforge.models.build import ArtifactSet, FailureSummary
from wrtforge.models.report import PipelineReport
from wrtforge.models.stages import DEFAULT_STAGE_DEFINITIONS, StageState

# ---------------------------------------------------------------------------
# State -> Rich style mapping
# ---------------------------------------------------------------------------

_STATE_STYLES: dict[StageState, str] = {
    StageState.PASSED: "bold green",
    StageState.WARNED: "bold yellow",
    StageState.FAILED: "bold red",
    StageState.RUNNING: "bold yellow",
    StageState.NOT_STARTED: "dim",
    StageState.SKIPPED: "dim",
    StageState.BLOCKED: "bold red",
}

_STATE_LABELS: dict[StageState, str] = {
    StageState.PASSED: "[green]PASSED[/green]",
    StageState.WARNED: "[yellow]WARNED[/yellow]",
    StageState.FAILED: "[bold red]FAILED[/bold red]",
    StageState.RUNNING: "[yellow]RUNNING[/yellow]",
    StageState.NOT_STARTED: "[dim]NOT STARTED[/dim]",
    StageState.SKIPPED: "[dim]SKIPPED[/dim]",
    StageState.BLOCKED: "[bold red]BLOCKED[/bold red]",
}

_DISPLAY_NAMES: dict[str, str] = {
    sd.stage_id: sd.display_name for sd in DEFAULT_STAGE_DEFINITIONS
}


class ReportRenderer:
    """Renders ``PipelineReport`` and its parts as Rich terminal output.

    Parameters
    ----------
    console:
        Rich Console instance.  A new one is created if not provided.
    """

    def __init__(self, console: Console | None = None) -> None:
        self.console = console or Console()

    # ------------------------------------------------------------------
    # Renderables
    # ------------------------------------------------------------------

    def render_report(self, report: PipelineReport) -> Panel:
        """Stage table plus a one-line run summary, wrapped in a Panel."""
        table = self._build_stage_table(report)

        summary_parts: list[str] = [
            f"[bold]Run:[/bold] {report.run_id}",
            f"[bold]Branch:[/bold] {report.pin.branch}",
        ]
        if report.workspace is not None:
            revision = report.workspace.tag or report.workspace.revision[:12] or "?"
            summary_parts.append(f"[bold]Revision:[/bold] {revision}")
        if report.artifacts is not None:
            summary_parts.append(f"[bold]Artifacts:[/bold] {report.artifacts.count}")
        status = (
            "[green]success[/green]"
            if report.succeeded
            else f"[bold red]failed at {report.failed_stage}[/bold red]"
        )
        summary_parts.append(f"[bold]Result:[/bold] {status}")

        return Panel(
            Group(table, Text(""), Text.from_markup("  |  ".join(summary_parts))),
            title="[bold]wrtforge build[/bold]",
            subtitle=f"Finished: {report.finished_at.strftime('%Y-%m-%d %H:%M:%S UTC')}",
            border_style="green" if report.succeeded else "red",
            padding=(1, 2),
        )

    def _build_stage_table(self, report: PipelineReport) -> Table:
        table = Table(show_header=True, header_style="bold cyan", expand=True)
        table.add_column("#", style="dim", width=3, justify="right")
        table.add_column("Stage", min_width=18)
        table.add_column("State", min_width=12, justify="center")
        table.add_column("Details", min_width=20)

        outcomes = {o.stage_id: o for o in report.outcomes}
        for i, (stage_id, state) in enumerate(report.states.items()):
            style = _STATE_STYLES.get(state, "")
            name = _DISPLAY_NAMES.get(stage_id, stage_id)
            outcome = outcomes.get(stage_id)

            details: list[str] = []
            if outcome is not None and outcome.reason:
                details.append(f"[red]{outcome.reason}[/red]")
            if outcome is not None:
                details.extend(f"[yellow]{w}[/yellow]" for w in outcome.warnings)
            table.add_row(
                str(i),
                f"[{style}]{name}[/{style}]",
                _STATE_LABELS.get(state, state.value),
                "\n".join(details) if details else "[dim]-[/dim]",
            )
        return table

    def render_failure(self, summary: FailureSummary) -> Panel:
        """Pattern matches followed by the trailing log context."""
        if summary.degraded:
            body = Text(f"Build log unavailable: {summary.log_path}", style="yellow")
        else:
            body = Text(summary.render())
        return Panel(
            body,
            title=f"[bold red]Error summary[/bold red] ({len(summary.matches)} matches)",
            border_style="red",
        )

    def render_artifacts(self, artifacts: ArtifactSet) -> Table:
        table = Table(title=f"Artifacts under {artifacts.output_root}", expand=True)
        table.add_column("Path", style="cyan")
        table.add_column("Size", justify="right")
        for path in artifacts.paths:
            try:
                size = f"{path.stat().st_size:,}"
            except OSError:
                size = "?"
            table.add_row(str(path), size)
        return table

    # ------------------------------------------------------------------
    # Standalone print
    # ------------------------------------------------------------------

    def print_report(self, report: PipelineReport) -> None:
        if report.failure is not None:
            self.console.print(self.render_failure(report.failure))
        if report.artifacts is not None and report.artifacts.paths:
            self.print_artifacts(report.artifacts)
        self.console.print(self.render_report(report))

    def print_failure(self, summary: FailureSummary) -> None:
        self.console.print(self.render_failure(summary))

    def print_artifacts(self, artifacts: ArtifactSet) -> None:
        if not artifacts.paths:
            self.console.print(f"[dim]No artifacts found under {artifacts.output_root}[/dim]")
            return
        self.console.print(self.render_artifacts(artifacts))
