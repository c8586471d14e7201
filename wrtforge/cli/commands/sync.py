"""``wrtforge sync`` — bring the buildroot to the pinned revision only."""

from __future__ import annotations

from pathlib import Path

import typer
from pydantic import ValidationError
from rich.console import Console
from rich.markup import escape

from wrtforge.config import ForgeSettings
from wrtforge.core.runner import CommandError
from wrtforge.core.workspace_sync import WorkspaceSync

console = Console()


def sync_cmd(
    branch: str = typer.Option(None, "--branch", "-b", help="Branch to sync."),
    tag: str = typer.Option(None, "--tag", "-t", help="Tag to pin (best-effort)."),
    buildroot: Path = typer.Option(None, "--buildroot", help="Checkout directory."),
) -> None:
    """Clone or update the checkout, then try to pin the tag."""
    overrides = {
        key: value
        for key, value in {
            "openwrt_branch": branch,
            "openwrt_tag": tag,
            "buildroot_dir": buildroot,
        }.items()
        if value is not None
    }
    try:
        settings = ForgeSettings(**overrides)
    except ValidationError as exc:
        console.print(f"[bold red]Invalid settings:[/bold red] {escape(str(exc))}")
        raise typer.Exit(code=2)

    try:
        workspace = WorkspaceSync().sync(settings.pin, settings.buildroot)
    except CommandError as exc:
        console.print(f"[bold red]Sync failed:[/bold red] {exc}")
        raise typer.Exit(code=1)

    for warning in workspace.warnings:
        console.print(f"[yellow]warning:[/yellow] {warning}")
    console.print(
        f"[bold green]Synced[/bold green] {workspace.path} "
        f"(was {workspace.initial_state.value}) -> "
        f"{workspace.tag or workspace.branch} {workspace.revision[:12]}"
    )
