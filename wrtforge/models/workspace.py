"""Source pin and workspace models."""

from __future__ import annotations

from enum import Enum
from pathlib import Path

from pydantic import BaseModel, ConfigDict, field_validator


class PinSpec(BaseModel):
    """Pinned upstream revision: repository, required branch, optional tag.

    The tag is best-effort; an unresolvable tag leaves the workspace on the
    branch head.
    """

    model_config = ConfigDict(frozen=True)

    repository: str
    branch: str
    tag: str | None = None

    @field_validator("branch")
    @classmethod
    def _branch_required(cls, value: str) -> str:
        if not value.strip():
            raise ValueError("branch must not be empty")
        return value

    @field_validator("tag")
    @classmethod
    def _blank_tag_is_none(cls, value: str | None) -> str | None:
        return value or None


class WorkspaceState(str, Enum):
    """State of the checkout directory before a sync."""

    ABSENT = "absent"
    FOREIGN = "foreign"  # exists, no .git metadata
    PINNED = "pinned"  # git-tracked checkout


class Workspace(BaseModel):
    """A buildroot checkout after WorkspaceSync has run."""

    model_config = ConfigDict(frozen=True)

    path: Path
    initial_state: WorkspaceState
    branch: str
    tag: str | None = None  # set only when the tag was checked out
    revision: str = ""
    warnings: list[str] = []
