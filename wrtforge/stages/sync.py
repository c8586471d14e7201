"""Workspace Sync — clone or update the buildroot to the pinned revision."""

from __future__ import annotations

from typing import Any

from wrtforge.config import ForgeSettings
from wrtforge.core.workspace_sync import WorkspaceSync
from wrtforge.stages.base import BaseStage


class SyncStage(BaseStage):

    def __init__(self, sync: WorkspaceSync) -> None:
        self._sync = sync

    @property
    def stage_id(self) -> str:
        return "sync"

    @property
    def display_name(self) -> str:
        return "Workspace Sync"

    def inputs(self, run_context: dict[str, Any]) -> dict[str, Any]:
        settings: ForgeSettings = run_context["settings"]
        return {"pin": settings.pin.model_dump(), "buildroot": str(settings.buildroot)}

    def execute(self, run_context: dict[str, Any]) -> dict[str, Any]:
        settings: ForgeSettings = run_context["settings"]
        workspace = self._sync.sync(settings.pin, settings.buildroot)
        run_context["workspace"] = workspace
        return {
            "initial_state": workspace.initial_state.value,
            "branch": workspace.branch,
            "tag": workspace.tag,
            "revision": workspace.revision,
            "_warnings": workspace.warnings,
        }
