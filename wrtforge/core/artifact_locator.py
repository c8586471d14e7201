"""Discover firmware output files under ``bin/targets``."""

from __future__ import annotations

import fnmatch
import logging
import os
from pathlib import Path

from wrtforge.models.build import ArtifactSet

logger = logging.getLogger(__name__)

OUTPUT_ROOT = Path("bin/targets")
MAX_DEPTH = 4

# Compressed/disk images, rootfs archives, checksums and package manifests.
ARTIFACT_PATTERNS: tuple[str, ...] = (
    "*.img.gz",
    "*.vmdk",
    "*.vhdx",
    "*.qcow2",
    "*rootfs.tar.gz",
    "sha256sums",
    "*.manifest",
)


def is_artifact(name: str, patterns: tuple[str, ...] = ARTIFACT_PATTERNS) -> bool:
    return any(fnmatch.fnmatchcase(name, pattern) for pattern in patterns)


class ArtifactLocator:
    """Bounded-depth scan for recognized output files."""

    def __init__(self, patterns: tuple[str, ...] = ARTIFACT_PATTERNS) -> None:
        self._patterns = patterns

    def locate(self, output_root: Path, max_depth: int = MAX_DEPTH) -> ArtifactSet:
        """Return matching files at most *max_depth* levels below *output_root*.

        Files directly inside *output_root* are at depth 1.  A missing root
        yields an empty set.
        """
        output_root = Path(output_root)
        if not output_root.is_dir():
            logger.info("No output directory at %s", output_root)
            return ArtifactSet(output_root=output_root)

        found: list[Path] = []
        for dirpath, dirnames, filenames in os.walk(output_root):
            depth = len(Path(dirpath).relative_to(output_root).parts)
            if depth + 1 >= max_depth:
                dirnames.clear()
            if depth + 1 > max_depth:
                continue
            found.extend(
                Path(dirpath) / name for name in filenames if is_artifact(name, self._patterns)
            )

        found.sort()
        for path in found:
            logger.info("[out] %s", path)
        return ArtifactSet(output_root=output_root, paths=found)
