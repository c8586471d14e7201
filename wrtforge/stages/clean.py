"""Distclean — optional ``make distclean`` before feeds and config."""

from __future__ import annotations

from typing import Any

from wrtforge.config import ForgeSettings
from wrtforge.core.config_applier import ConfigApplier
from wrtforge.stages.base import BaseStage


class CleanStage(BaseStage):

    def __init__(self, applier: ConfigApplier) -> None:
        self._applier = applier

    @property
    def stage_id(self) -> str:
        return "clean"

    @property
    def display_name(self) -> str:
        return "Distclean"

    def should_run(self, run_context: dict[str, Any]) -> bool:
        settings: ForgeSettings = run_context["settings"]
        return settings.clean

    def execute(self, run_context: dict[str, Any]) -> dict[str, Any]:
        self._applier.distclean()
        return {"cleaned": True}
