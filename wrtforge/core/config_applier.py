"""Materialize a pinned ``.config`` snapshot and expand it.

The snapshot is opaque: it is copied verbatim over the live ``.config`` and
expanded by ``make defconfig``.  Exporting the expanded result is a
diagnostic convenience and never fails the pipeline.
"""

from __future__ import annotations

import logging
import shutil
from pathlib import Path

from wrtforge.core.hasher import file_sha256
from wrtforge.core.runner import CommandRunner, SubprocessRunner
from wrtforge.models.build import ConfigSnapshot

logger = logging.getLogger(__name__)

LIVE_SLOT = ".config"


class ConfigSnapshotMissingError(RuntimeError):
    """Raised when the configured ``.config`` snapshot file does not exist."""


class ConfigApplier:
    """Applies a ``ConfigSnapshot`` to a buildroot.

    Parameters
    ----------
    buildroot:
        OpenWrt buildroot holding the live ``.config``.
    runner:
        Command runner for ``make`` invocations.
    """

    def __init__(self, buildroot: Path, runner: CommandRunner | None = None) -> None:
        self._buildroot = Path(buildroot)
        self._runner = runner or SubprocessRunner()

    @property
    def live_slot(self) -> Path:
        return self._buildroot / LIVE_SLOT

    @staticmethod
    def load_snapshot(path: Path) -> ConfigSnapshot:
        """Fingerprint the snapshot at *path*; it must be a regular file."""
        path = Path(path)
        if not path.is_file():
            raise ConfigSnapshotMissingError(f"Missing file: {path}")
        return ConfigSnapshot(path=path, sha256=file_sha256(path))

    def apply(self, snapshot: ConfigSnapshot, live_slot: Path | None = None) -> Path:
        """Copy the snapshot over the live slot, unconditionally."""
        destination = Path(live_slot) if live_slot else self.live_slot
        logger.info("Applying config: %s -> %s", snapshot.path, destination)
        shutil.copyfile(snapshot.path, destination)
        return destination

    def expand(self) -> None:
        """Run ``make defconfig``; any failure propagates as ``CommandError``."""
        logger.info("Running make defconfig")
        self._runner.run(["make", "defconfig"], cwd=self._buildroot)

    def distclean(self) -> None:
        logger.info("Running make distclean")
        self._runner.run(["make", "distclean"], cwd=self._buildroot)

    def export(self, destination: Path) -> str | None:
        """Copy the expanded ``.config`` to *destination*.

        Returns a warning message on failure instead of raising.
        """
        destination = Path(destination)
        try:
            destination.parent.mkdir(parents=True, exist_ok=True)
            shutil.copyfile(self.live_slot, destination)
        except OSError as exc:
            message = f"Could not export expanded config to {destination}: {exc}"
            logger.warning(message)
            return message
        logger.info("Exported expanded config to %s", destination)
        return None
