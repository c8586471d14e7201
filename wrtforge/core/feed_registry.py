"""Feed registration and the ``./scripts/feeds`` tool.

``register`` keeps ``feeds.conf.default`` append-only and idempotent: a line
is added only when no existing line matches it exactly.  ``refresh`` and
``install`` wrap ``feeds update`` and ``feeds install``.
"""

from __future__ import annotations

import logging
from collections.abc import Sequence
from pathlib import Path

from wrtforge.core.runner import CommandError, CommandRunner, SubprocessRunner

logger = logging.getLogger(__name__)

FEEDS_SCRIPT = "./scripts/feeds"
MANIFEST_NAME = "feeds.conf.default"


class FeedRegistry:
    """Registers package feeds and drives the feed installer.

    Parameters
    ----------
    buildroot:
        OpenWrt buildroot; the feeds tool runs with this as cwd.
    runner:
        Command runner for feed tool invocations.
    """

    def __init__(self, buildroot: Path, runner: CommandRunner | None = None) -> None:
        self._buildroot = Path(buildroot)
        self._runner = runner or SubprocessRunner()

    @property
    def manifest_path(self) -> Path:
        return self._buildroot / MANIFEST_NAME

    # ------------------------------------------------------------------
    # Manifest
    # ------------------------------------------------------------------

    @staticmethod
    def register(manifest: Path, line: str) -> bool:
        """Append *line* to *manifest* unless an identical line exists.

        Matching is exact (case- and whitespace-sensitive, full line).  Only
        newlines separate lines; a trailing carriage return is ignored.
        Returns ``True`` when the line was appended.  Write errors propagate.
        """
        manifest = Path(manifest)
        existing = ""
        if manifest.exists():
            with manifest.open(encoding="utf-8", errors="surrogateescape", newline="") as fh:
                existing = fh.read()
        if line in (entry.removesuffix("\r") for entry in existing.split("\n")):
            logger.info("Feed already registered in %s: %s", manifest.name, line)
            return False

        separator = "" if not existing or existing.endswith("\n") else "\n"
        with manifest.open("a", encoding="utf-8") as fh:
            fh.write(f"{separator}{line}\n")
        logger.info("Registered feed in %s: %s", manifest.name, line)
        return True

    # ------------------------------------------------------------------
    # Feed tool
    # ------------------------------------------------------------------

    def refresh(self, scope: str | None = None, *, tolerate_failure: bool = False) -> bool:
        """Run ``feeds update`` for every feed, or only *scope*."""
        args = [FEEDS_SCRIPT, "update", scope or "-a"]
        logger.info("Updating %s", f"feed '{scope}'" if scope else "all feeds")
        return self._invoke(args, tolerate_failure)

    def install(
        self,
        packages: Sequence[str] = (),
        *,
        feed: str | None = None,
        tolerate_failure: bool = False,
    ) -> bool:
        """Run ``feeds install`` for *packages* (all when empty).

        With *feed*, installation prefers that feed's copy of every package.
        """
        args = [FEEDS_SCRIPT, "install"]
        if not packages:
            args.append("-a")
        if feed:
            args.extend(["-p", feed])
        args.extend(packages)
        logger.info(
            "Installing %s%s",
            ", ".join(packages) if packages else "all feed packages",
            f" from feed '{feed}'" if feed else "",
        )
        return self._invoke(args, tolerate_failure)

    def _invoke(self, args: list[str], tolerate_failure: bool) -> bool:
        try:
            self._runner.run(args, cwd=self._buildroot)
        except CommandError as exc:
            if not tolerate_failure:
                raise
            logger.warning("Tolerated feed tool failure: %s", exc)
            return False
        return True
