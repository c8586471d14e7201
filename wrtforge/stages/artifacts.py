"""Artifacts — list firmware outputs under ``bin/targets``."""

from __future__ import annotations

from typing import Any

from wrtforge.config import ForgeSettings
from wrtforge.core.artifact_locator import MAX_DEPTH, OUTPUT_ROOT, ArtifactLocator
from wrtforge.stages.base import BaseStage


class ArtifactsStage(BaseStage):
    """An empty or missing output tree is a warning, never a failure."""

    def __init__(self, locator: ArtifactLocator) -> None:
        self._locator = locator

    @property
    def stage_id(self) -> str:
        return "artifacts"

    @property
    def display_name(self) -> str:
        return "Artifacts"

    def execute(self, run_context: dict[str, Any]) -> dict[str, Any]:
        settings: ForgeSettings = run_context["settings"]
        output_root = settings.buildroot / OUTPUT_ROOT
        artifacts = self._locator.locate(output_root, MAX_DEPTH)
        run_context["artifacts"] = artifacts

        warnings = [] if artifacts.paths else [f"No artifacts found under {output_root}"]
        return {
            "output_root": str(output_root),
            "artifacts": [str(p) for p in artifacts.paths],
            "_warnings": warnings,
        }
