"""Main Typer application — imports and registers all CLI commands.

Entry point: ``wrtforge`` (configured via pyproject.toml project.scripts).
"""

from __future__ import annotations

import logging

import typer
from pydantic import ValidationError
from rich.console import Console
from rich.logging import RichHandler

from wrtforge.cli.commands.artifacts import artifacts_cmd
from wrtforge.cli.commands.build import build_cmd
from wrtforge.cli.commands.sync import sync_cmd
from wrtforge.cli.commands.triage import triage_cmd
from wrtforge.config import ForgeSettings

app = typer.Typer(
    name="wrtforge",
    help="wrtforge: reproducible OpenWrt firmware builds with pinned sources and feed overrides.",
    no_args_is_help=True,
    rich_markup_mode="rich",
    add_completion=False,
)

# Register subcommands
app.command(name="build", help="Run the full pipeline: sync, feeds, overrides, config, build.")(build_cmd)
app.command(name="sync", help="Sync the buildroot checkout to the pinned branch/tag only.")(sync_cmd)
app.command(name="triage", help="Summarize errors from an existing build log.")(triage_cmd)
app.command(name="artifacts", help="List firmware artifacts under the output tree.")(artifacts_cmd)


def configure_logging(level: str) -> None:
    """Route log records through Rich on stderr; build output owns stdout."""
    logging.basicConfig(
        level=level.upper(),
        format="%(message)s",
        datefmt="[%X]",
        handlers=[
            RichHandler(console=Console(stderr=True), show_path=False, rich_tracebacks=True)
        ],
        force=True,
    )


@app.callback()
def main_callback(
    log_level: str = typer.Option(
        None,
        "--log-level",
        help="Logging level (defaults to WRTFORGE_LOG_LEVEL or INFO).",
    ),
) -> None:
    """Configure logging before any subcommand runs."""
    if not log_level:
        try:
            log_level = ForgeSettings().log_level
        except ValidationError:
            # Reported by the subcommand that loads the settings.
            log_level = "INFO"
    configure_logging(log_level)


def main() -> None:
    """CLI entry point."""
    app()


if __name__ == "__main__":
    main()
