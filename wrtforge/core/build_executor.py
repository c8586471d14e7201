"""Run the firmware build and keep its true exit status.

The build's combined stdout/stderr is read line by line and written both
to the terminal stream and to the build log.  The recorded exit code comes
from waiting on the build process itself, so a failing build is reported as
failed regardless of how the log was written.
"""

from __future__ import annotations

import logging
import shlex
import subprocess
import sys
from collections.abc import Callable, Sequence
from datetime import datetime
from pathlib import Path
from typing import TextIO

from wrtforge.core.runner import CommandError
from wrtforge.models.build import BuildRun

logger = logging.getLogger(__name__)


def timestamped_log_path(log_dir: Path, when: datetime | None = None) -> Path:
    """``<log_dir>/build-YYYYmmdd-HHMMSS.txt``."""
    stamp = (when or datetime.now()).strftime("%Y%m%d-%H%M%S")
    return Path(log_dir) / f"build-{stamp}.txt"


class BuildExecutor:
    """Invokes the build tool with bounded parallelism.

    Parameters
    ----------
    buildroot:
        Working directory for the build.
    make_command:
        Build tool argv prefix; ``("make",)`` by default.
    stream:
        Terminal stream that build output is mirrored to.  Defaults to
        ``sys.stdout`` at call time.
    """

    def __init__(
        self,
        buildroot: Path,
        make_command: Sequence[str] = ("make",),
        stream: TextIO | None = None,
    ) -> None:
        self._buildroot = Path(buildroot)
        self._make = list(make_command)
        self._stream = stream

    def command(
        self,
        jobs: int,
        verbose: str | None = None,
        extra_flags: str = "",
        targets: Sequence[str] = (),
    ) -> list[str]:
        argv = [*self._make, f"-j{jobs}"]
        if verbose:
            argv.append(f"V={verbose}")
        argv.extend(shlex.split(extra_flags or ""))
        argv.extend(targets)
        return argv

    def run(
        self,
        jobs: int,
        verbose: str | None,
        extra_flags: str,
        log_path: Path,
        targets: Sequence[str] = (),
    ) -> BuildRun:
        """Run the build to completion and return its ``BuildRun``.

        Raises ``CommandError`` only when the build tool cannot be started;
        a non-zero exit is returned, not raised.
        """
        argv = self.command(jobs, verbose, extra_flags, targets)
        log_path = Path(log_path)
        log_path.parent.mkdir(parents=True, exist_ok=True)
        stream = self._stream or sys.stdout

        logger.info("Building firmware (JOBS=%d): %s", jobs, shlex.join(argv))
        logger.info("Build log: %s", log_path)
        log_fh = log_path.open("w", encoding="utf-8")
        try:
            proc = subprocess.Popen(
                argv,
                cwd=str(self._buildroot),
                stdout=subprocess.PIPE,
                stderr=subprocess.STDOUT,
                text=True,
                errors="replace",
                bufsize=1,
            )
        except OSError as exc:
            log_fh.close()
            raise CommandError(argv, 127, str(exc)) from exc

        sinks: dict[str, TextIO] = {"terminal": stream, "build log": log_fh}
        try:
            self._drain(proc, sinks)
        finally:
            # The build is always reaped; its status is the run's status.
            exit_code = proc.wait()
            if "terminal" in sinks:
                self._release(sinks, "terminal", stream.flush)
            self._release(sinks, "build log", log_fh.close)

        if exit_code == 0:
            logger.info("Build done.")
        else:
            logger.error("Build exited with status %d", exit_code)

        return BuildRun(
            command=argv,
            jobs=jobs,
            verbose=verbose or None,
            extra_flags=extra_flags,
            log_path=log_path,
            exit_code=exit_code,
        )

    @staticmethod
    def _drain(proc: subprocess.Popen, sinks: dict[str, TextIO]) -> None:
        """Copy build output to every sink until the build closes its output.

        A sink that fails to accept a line is dropped; reading continues so
        the build never stalls on a full pipe.
        """
        assert proc.stdout is not None
        with proc.stdout:
            for line in proc.stdout:
                for name in list(sinks):
                    try:
                        sinks[name].write(line)
                    except (OSError, ValueError) as exc:
                        logger.warning("Stopped writing build output to %s: %s", name, exc)
                        del sinks[name]

    @staticmethod
    def _release(sinks: dict[str, TextIO], name: str, action: Callable[[], None]) -> None:
        try:
            action()
        except (OSError, ValueError) as exc:
            logger.warning("Could not finish writing build output to %s: %s", name, exc)
            sinks.pop(name, None)

    def diagnose(self, component: str, log_path: Path) -> BuildRun | None:
        """Rebuild *component* at ``-j1 V=s`` purely for diagnostics.

        Failures, including an unstartable build tool, are tolerated.
        """
        logger.info("Diagnostic rebuild of %s (log: %s)", component, log_path)
        try:
            run = self.run(1, "s", "", log_path, targets=[component])
        except (CommandError, OSError) as exc:
            logger.warning("Diagnostic rebuild of %s could not run: %s", component, exc)
            return None
        if not run.succeeded:
            logger.warning(
                "Diagnostic rebuild of %s exited with status %d", component, run.exit_code
            )
        return run
