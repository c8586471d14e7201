"""wrtforge CLI — Typer-based command-line interface.

Provides the ``wrtforge`` command with subcommands for running the full
firmware build, syncing the workspace only, triaging an existing build log
and listing build artifacts.

All output uses Rich for formatted terminal display.
"""
