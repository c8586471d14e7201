"""Deterministic overrides of feed-provided packages.

Two mechanisms:

* ``override_component`` swaps a feed-owned directory for a symlink to a
  vendored directory, then refreshes and reinstalls the affected feed.
* ``force_feed_ownership`` removes a package's installed tree under every
  claiming feed and reinstalls it from the owner feed only.

Both are idempotent: re-applying yields the same filesystem state.
Single writer assumed; there is no locking.
"""

from __future__ import annotations

import logging
import os
import shutil
from pathlib import Path

from wrtforge.core.feed_registry import FeedRegistry
from wrtforge.models.feeds import ConflictSet, OverrideMapping

logger = logging.getLogger(__name__)


class OverrideSourceMissingError(RuntimeError):
    """Raised when an override's vendored source directory does not exist."""


class OverrideResolver:
    """Applies ``OverrideMapping`` and ``ConflictSet`` values to a buildroot.

    Parameters
    ----------
    buildroot:
        OpenWrt buildroot that relative mapping paths are resolved against.
    registry:
        Feed registry used to refresh and reinstall after each change.
    """

    def __init__(self, buildroot: Path, registry: FeedRegistry) -> None:
        self._buildroot = Path(buildroot)
        self._registry = registry

    def override_component(self, mapping: OverrideMapping) -> Path:
        """Replace ``mapping.target`` with a symlink to the absolute source.

        Returns the link path.  Raises ``OverrideSourceMissingError`` if the
        source has not been materialized by a prior feed install.
        """
        source = (self._buildroot / mapping.source).absolute()
        target = self._buildroot / mapping.target
        if not source.is_dir():
            raise OverrideSourceMissingError(
                f"{mapping.source} not found under {self._buildroot}. "
                "Did feeds update succeed?"
            )

        logger.info("Overriding %s with %s", mapping.target, mapping.source)
        remove_tree(target)
        target.parent.mkdir(parents=True, exist_ok=True)
        os.symlink(source, target, target_is_directory=True)

        # Dependent package definitions must see the new source.
        self._registry.refresh(mapping.feed)
        self._registry.install(feed=mapping.feed)
        return target

    def force_feed_ownership(self, conflict: ConflictSet) -> list[str]:
        """Make ``conflict.owner`` the sole provider of ``conflict.package``.

        Returns advisory warnings.  Raises ``CommandError`` when the owner
        feed fails to reinstall the package.
        """
        logger.info(
            "Forcing %s to come from feed '%s'", conflict.package, conflict.owner
        )
        for path in conflict.claimant_paths(self._buildroot):
            remove_tree(path)

        self._registry.install([conflict.package], feed=conflict.owner)

        warnings: list[str] = []
        marker = conflict.marker_path(self._buildroot)
        if not marker.exists():
            message = f"Expected {marker.relative_to(self._buildroot)} after install; not found"
            logger.warning(message)
            warnings.append(message)
        return warnings


def remove_tree(path: Path) -> bool:
    """Remove *path* whether it is a symlink, file or directory.

    Returns ``True`` when something was removed.
    """
    if path.is_symlink() or path.is_file():
        path.unlink()
        return True
    if path.is_dir():
        shutil.rmtree(path)
        return True
    return False
