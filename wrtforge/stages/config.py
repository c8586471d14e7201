"""Apply Config — copy the snapshot to ``.config`` and run ``make defconfig``."""

from __future__ import annotations

from typing import Any

from wrtforge.config import ForgeSettings
from wrtforge.core.config_applier import ConfigApplier
from wrtforge.models.build import ConfigSnapshot
from wrtforge.stages.base import BaseStage

EXPORT_NAME = "openwrt.defconfig"


class ConfigStage(BaseStage):
    """Expansion failure is fatal; exporting the expanded copy is not."""

    def __init__(self, applier: ConfigApplier) -> None:
        self._applier = applier

    @property
    def stage_id(self) -> str:
        return "config"

    @property
    def display_name(self) -> str:
        return "Apply Config"

    def inputs(self, run_context: dict[str, Any]) -> dict[str, Any]:
        snapshot: ConfigSnapshot | None = run_context.get("config_snapshot")
        return {"config_sha256": snapshot.sha256 if snapshot else ""}

    def execute(self, run_context: dict[str, Any]) -> dict[str, Any]:
        settings: ForgeSettings = run_context["settings"]
        snapshot: ConfigSnapshot | None = run_context.get("config_snapshot")
        if snapshot is None:
            snapshot = ConfigApplier.load_snapshot(settings.config_file)
            run_context["config_snapshot"] = snapshot

        live = self._applier.apply(snapshot)
        self._applier.expand()

        export_path = settings.log_dir / EXPORT_NAME
        problem = self._applier.export(export_path)
        return {
            "live_slot": str(live),
            "exported": None if problem else str(export_path),
            "_warnings": [problem] if problem else [],
        }
