"""``wrtforge artifacts [ROOT]`` — list recognized firmware outputs."""

from __future__ import annotations

from pathlib import Path

import typer
from rich.console import Console

from wrtforge.config import ForgeSettings
from wrtforge.core.artifact_locator import MAX_DEPTH, OUTPUT_ROOT, ArtifactLocator
from wrtforge.monitor.renderer import ReportRenderer

console = Console()


def artifacts_cmd(
    output_root: Path = typer.Argument(
        None, help="Output root (defaults to <buildroot>/bin/targets)."
    ),
    max_depth: int = typer.Option(MAX_DEPTH, "--max-depth", min=1),
) -> None:
    """List artifacts; an empty or missing tree is not an error."""
    root = output_root or ForgeSettings().buildroot / OUTPUT_ROOT
    artifacts = ArtifactLocator().locate(root, max_depth)
    ReportRenderer(console=console).print_artifacts(artifacts)
