"""Bring the buildroot checkout to a pinned branch/tag.

The checkout directory is modelled as a state machine over
``WorkspaceState``:

    absent  -> shallow clone of the branch, best-effort tag fetch
    foreign -> remove entirely, then clone as for absent
    pinned  -> fetch all refs/tags, checkout branch, ff-only pull (tolerated)

Tag pinning always runs last so an available tag wins over whatever the
branch pull produced.  An unresolvable tag leaves the branch head checked
out and is reported as a warning.
"""

from __future__ import annotations

import logging
import shutil
from pathlib import Path

from wrtforge.core.runner import CommandRunner, SubprocessRunner
from wrtforge.models.workspace import PinSpec, Workspace, WorkspaceState

logger = logging.getLogger(__name__)


class WorkspaceSync:
    """Clones or updates a git checkout to a ``PinSpec``.

    Parameters
    ----------
    runner:
        Command runner used for every ``git`` invocation.
    """

    def __init__(self, runner: CommandRunner | None = None) -> None:
        self._runner = runner or SubprocessRunner()

    @staticmethod
    def classify(directory: Path) -> WorkspaceState:
        """Return the state of *directory* before any sync."""
        directory = Path(directory)
        if (directory / ".git").exists():
            return WorkspaceState.PINNED
        if directory.exists() or directory.is_symlink():
            return WorkspaceState.FOREIGN
        return WorkspaceState.ABSENT

    def sync(self, pin: PinSpec, directory: Path) -> Workspace:
        """Synchronize *directory* to *pin* and describe the result.

        Raises ``CommandError`` when a clone, fetch or checkout fails.
        """
        directory = Path(directory)
        state = self.classify(directory)
        warnings: list[str] = []

        if state == WorkspaceState.PINNED:
            self._update(pin, directory, warnings)
        else:
            if state == WorkspaceState.FOREIGN:
                message = f"Directory exists but is not a git repo, removing: {directory}"
                logger.warning(message)
                warnings.append(message)
                self._remove(directory)
            self._clone(pin, directory, warnings)

        tag = self._checkout_tag(pin.tag, directory, warnings) if pin.tag else None
        revision = self._runner.run(
            ["git", "rev-parse", "HEAD"], cwd=directory, check=False, capture=True
        ).stdout.strip()

        logger.info(
            "Workspace %s at %s (branch=%s, tag=%s)",
            directory,
            revision[:12] or "unknown",
            pin.branch,
            tag or "-",
        )
        return Workspace(
            path=directory,
            initial_state=state,
            branch=pin.branch,
            tag=tag,
            revision=revision,
            warnings=warnings,
        )

    # ------------------------------------------------------------------
    # Transitions
    # ------------------------------------------------------------------

    def _update(self, pin: PinSpec, directory: Path, warnings: list[str]) -> None:
        logger.info("Updating existing repo: %s", directory)
        self._runner.run(["git", "fetch", "--all", "--tags", "--prune"], cwd=directory)
        self._runner.run(["git", "checkout", pin.branch], cwd=directory)
        pulled = self._runner.run(["git", "pull", "--ff-only"], cwd=directory, check=False)
        if not pulled.ok:
            message = f"Fast-forward pull of '{pin.branch}' failed; keeping local head"
            logger.warning(message)
            warnings.append(message)

    def _clone(self, pin: PinSpec, directory: Path, warnings: list[str]) -> None:
        logger.info(
            "Cloning repo: %s (branch: %s) -> %s", pin.repository, pin.branch, directory
        )
        directory.parent.mkdir(parents=True, exist_ok=True)
        self._runner.run(
            [
                "git", "clone", "--depth", "1", "--branch", pin.branch,
                pin.repository, str(directory),
            ]
        )
        # Some remotes refuse tag listing on shallow clones.
        tags = self._runner.run(["git", "fetch", "--tags", "--prune"], cwd=directory, check=False)
        if not tags.ok:
            message = "Fetching tags after clone failed"
            logger.warning(message)
            warnings.append(message)

    def _checkout_tag(self, tag: str, directory: Path, warnings: list[str]) -> str | None:
        logger.info("Trying to checkout tag: %s", tag)
        ref = f"refs/tags/{tag}"
        self._runner.run(
            ["git", "fetch", "--force", "--prune", "origin", f"{ref}:{ref}"],
            cwd=directory,
            check=False,
        )
        verified = self._runner.run(
            ["git", "rev-parse", "-q", "--verify", ref], cwd=directory, check=False, capture=True
        )
        if verified.ok:
            self._runner.run(["git", "checkout", "-f", tag], cwd=directory)
            return tag

        message = f"Tag '{tag}' not found; keep branch HEAD"
        logger.warning(message)
        warnings.append(message)
        return None

    @staticmethod
    def _remove(directory: Path) -> None:
        if directory.is_dir() and not directory.is_symlink():
            shutil.rmtree(directory)
        else:
            directory.unlink()
