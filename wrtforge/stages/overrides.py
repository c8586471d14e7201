"""Feed Overrides — vendored golang packaging and forced package ownership."""

from __future__ import annotations

from collections.abc import Sequence
from typing import Any

from wrtforge.core.override_resolver import OverrideResolver
from wrtforge.models.feeds import (
    GEODATA_CONFLICT,
    GOLANG_OVERRIDE,
    ConflictSet,
    OverrideMapping,
)
from wrtforge.stages.base import BaseStage


class OverridesStage(BaseStage):
    """Applies directory overrides first, then ownership conflicts."""

    def __init__(
        self,
        resolver: OverrideResolver,
        mappings: Sequence[OverrideMapping] = (GOLANG_OVERRIDE,),
        conflicts: Sequence[ConflictSet] = (GEODATA_CONFLICT,),
    ) -> None:
        self._resolver = resolver
        self._mappings = list(mappings)
        self._conflicts = list(conflicts)

    @property
    def stage_id(self) -> str:
        return "overrides"

    @property
    def display_name(self) -> str:
        return "Feed Overrides"

    def inputs(self, run_context: dict[str, Any]) -> dict[str, Any]:
        return {
            "mappings": [m.model_dump(mode="json") for m in self._mappings],
            "conflicts": [c.model_dump(mode="json") for c in self._conflicts],
        }

    def execute(self, run_context: dict[str, Any]) -> dict[str, Any]:
        links = [str(self._resolver.override_component(m)) for m in self._mappings]
        warnings: list[str] = []
        for conflict in self._conflicts:
            warnings.extend(self._resolver.force_feed_ownership(conflict))
        return {
            "links": links,
            "forced_packages": {c.package: c.owner for c in self._conflicts},
            "_warnings": warnings,
        }
