"""Rootfs Overlay — default opkg feeds pointing at the configured mirror."""

from __future__ import annotations

from typing import Any

from wrtforge.config import ForgeSettings
from wrtforge.core.rootfs_overlay import RootfsOverlay
from wrtforge.stages.base import BaseStage


class OverlayStage(BaseStage):

    def __init__(self, overlay: RootfsOverlay) -> None:
        self._overlay = overlay

    @property
    def stage_id(self) -> str:
        return "overlay"

    @property
    def display_name(self) -> str:
        return "Rootfs Overlay"

    def inputs(self, run_context: dict[str, Any]) -> dict[str, Any]:
        settings: ForgeSettings = run_context["settings"]
        return settings.model_dump(
            mode="json", include={"mirror_url", "release_version", "target", "package_arch"}
        )

    def execute(self, run_context: dict[str, Any]) -> dict[str, Any]:
        settings: ForgeSettings = run_context["settings"]
        path = self._overlay.write_distfeeds(
            settings.mirror_url,
            settings.release_version,
            settings.target,
            settings.package_arch,
        )
        return {"distfeeds": str(path)}
