"""Preflight — required inputs must exist before anything is mutated."""

from __future__ import annotations

from typing import Any

from wrtforge.config import ForgeSettings
from wrtforge.core.config_applier import ConfigApplier
from wrtforge.stages.base import BaseStage


class PreflightStage(BaseStage):
    """Fingerprints the ``.config`` snapshot; a missing file is fatal."""

    @property
    def stage_id(self) -> str:
        return "preflight"

    @property
    def display_name(self) -> str:
        return "Preflight"

    def inputs(self, run_context: dict[str, Any]) -> dict[str, Any]:
        settings: ForgeSettings = run_context["settings"]
        return {"config_file": str(settings.config_file)}

    def execute(self, run_context: dict[str, Any]) -> dict[str, Any]:
        settings: ForgeSettings = run_context["settings"]
        snapshot = ConfigApplier.load_snapshot(settings.config_file)
        run_context["config_snapshot"] = snapshot
        return {
            "config_file": str(snapshot.path),
            "config_sha256": snapshot.sha256,
            "buildroot": str(settings.buildroot),
        }
