"""Feed Registry — register the splitdns feed, update and install feeds."""

from __future__ import annotations

from typing import Any

from wrtforge.config import ForgeSettings
from wrtforge.core.feed_registry import FeedRegistry
from wrtforge.stages.base import BaseStage


class FeedsStage(BaseStage):

    def __init__(self, registry: FeedRegistry) -> None:
        self._registry = registry

    @property
    def stage_id(self) -> str:
        return "feeds"

    @property
    def display_name(self) -> str:
        return "Feed Registry"

    def inputs(self, run_context: dict[str, Any]) -> dict[str, Any]:
        settings: ForgeSettings = run_context["settings"]
        return {"feed_line": settings.feed_line}

    def execute(self, run_context: dict[str, Any]) -> dict[str, Any]:
        settings: ForgeSettings = run_context["settings"]
        manifest = self._registry.manifest_path
        registered = self._registry.register(manifest, settings.feed_line)
        self._registry.refresh()
        self._registry.install()
        return {"manifest": str(manifest), "registered": registered}
