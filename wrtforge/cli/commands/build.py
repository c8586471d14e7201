"""``wrtforge build`` — run the full firmware build pipeline.

Command-line options override ``WRTFORGE_*`` settings.  The process exits
with the pipeline's exit code: 0 on success, 1 when any stage was fatal.
"""

from __future__ import annotations

from pathlib import Path
from typing import Any

import typer
from pydantic import ValidationError
from rich.console import Console
from rich.markup import escape

from wrtforge.config import ForgeSettings
from wrtforge.core.orchestrator import Orchestrator
from wrtforge.monitor.renderer import ReportRenderer

console = Console()


def build_cmd(
    repo: str = typer.Option(None, "--repo", help="OpenWrt repository URL."),
    branch: str = typer.Option(None, "--branch", "-b", help="Branch to build."),
    tag: str = typer.Option(
        None, "--tag", "-t", help="Tag to pin (best-effort; empty string disables)."
    ),
    feed_url: str = typer.Option(None, "--feed-url", help="splitdns feed git URL."),
    workdir: Path = typer.Option(None, "--workdir", help="Workspace directory."),
    buildroot: Path = typer.Option(
        None, "--buildroot", help="Buildroot path (defaults to <workdir>/openwrt)."
    ),
    config_file: Path = typer.Option(
        None, "--config", "-c", help="The .config snapshot to apply."
    ),
    log_dir: Path = typer.Option(None, "--log-dir", help="Directory for build logs."),
    jobs: int = typer.Option(None, "--jobs", "-j", min=1, help="Parallel build jobs."),
    verbose: str = typer.Option(None, "--verbose", "-V", help="Build verbosity, e.g. 's'."),
    make_flags: str = typer.Option(None, "--make-flags", help="Extra make flags."),
    clean: bool = typer.Option(False, "--clean", help="Run make distclean first."),
    diagnose: str = typer.Option(
        None,
        "--diagnose",
        help="Component to rebuild at -j1 V=s after a failure, e.g. package/foo/compile.",
    ),
) -> None:
    """Run the full pipeline and print the run report."""
    options: dict[str, Any] = {
        "openwrt_repo": repo,
        "openwrt_branch": branch,
        "openwrt_tag": tag,
        "splitdns_feed_url": feed_url,
        "workdir": workdir,
        "buildroot_dir": buildroot,
        "config_file": config_file,
        "log_dir": log_dir,
        "jobs": jobs,
        "verbose": verbose,
        "make_flags": make_flags,
        "diagnose_component": diagnose,
    }
    overrides = {key: value for key, value in options.items() if value is not None}
    if clean:
        overrides["clean"] = True

    try:
        settings = ForgeSettings(**overrides)
    except ValidationError as exc:
        console.print(f"[bold red]Invalid settings:[/bold red] {escape(str(exc))}")
        raise typer.Exit(code=2)
    console.print(
        f"[bold]Buildroot:[/bold] {settings.buildroot}  "
        f"[bold]Config:[/bold] {settings.config_file}  "
        f"[bold]Jobs:[/bold] {settings.jobs}"
    )

    report = Orchestrator(settings).run()
    ReportRenderer(console=console).print_report(report)
    raise typer.Exit(code=report.exit_code)
