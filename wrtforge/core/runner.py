"""Subprocess seam for the opaque external tools (git, feeds, make).

Defines the ``CommandRunner`` Protocol that the pipeline components call,
and ``SubprocessRunner``, the default implementation.  Tests substitute a
recording fake that satisfies the same Protocol.
"""

from __future__ import annotations

import logging
import shlex
import subprocess
from collections.abc import Sequence
from pathlib import Path
from typing import Protocol, runtime_checkable

from pydantic import BaseModel, ConfigDict

logger = logging.getLogger(__name__)


class CommandError(RuntimeError):
    """Raised when an external tool exits non-zero (or cannot be started)."""

    def __init__(self, argv: Sequence[str], returncode: int, detail: str = "") -> None:
        self.argv = list(argv)
        self.returncode = returncode
        self.detail = detail
        message = f"Command failed with exit code {returncode}: {shlex.join(self.argv)}"
        if detail:
            message = f"{message} ({detail})"
        super().__init__(message)


class CommandResult(BaseModel):
    model_config = ConfigDict(frozen=True)

    argv: list[str]
    returncode: int
    stdout: str = ""

    @property
    def ok(self) -> bool:
        return self.returncode == 0


@runtime_checkable
class CommandRunner(Protocol):
    """Protocol for running an external tool to completion.

    Only the exit status (and, with ``capture=True``, stdout) is inspected.
    """

    def run(
        self,
        args: Sequence[str | Path],
        *,
        cwd: Path | None = None,
        check: bool = True,
        capture: bool = False,
    ) -> CommandResult:
        """Run *args*; raise ``CommandError`` on non-zero exit when *check*."""
        ...


class SubprocessRunner:
    """Runs commands with ``subprocess.run``.

    Output goes straight to the controlling terminal unless *capture* is
    set, in which case stdout is returned and stderr is discarded.
    """

    def run(
        self,
        args: Sequence[str | Path],
        *,
        cwd: Path | None = None,
        check: bool = True,
        capture: bool = False,
    ) -> CommandResult:
        argv = [str(a) for a in args]
        logger.info("$ %s%s", shlex.join(argv), f"  (cwd={cwd})" if cwd else "")
        try:
            proc = subprocess.run(
                argv,
                cwd=str(cwd) if cwd else None,
                stdout=subprocess.PIPE if capture else None,
                stderr=subprocess.DEVNULL if capture else None,
                text=True,
                check=False,
            )
        except OSError as exc:
            # Missing binary or bad cwd: report like a shell would.
            if check:
                raise CommandError(argv, 127, str(exc)) from exc
            logger.warning("Could not start %s: %s", argv[0], exc)
            return CommandResult(argv=argv, returncode=127)

        result = CommandResult(
            argv=argv, returncode=proc.returncode, stdout=proc.stdout or ""
        )
        if check and not result.ok:
            raise CommandError(argv, proc.returncode)
        return result
