"""wrtforge pipeline stages, in execution order.

Usage::

    from wrtforge.stages import STAGE_ORDER, SyncStage

Stages receive their components at construction; ``Orchestrator`` wires
them together.  Run-wide values travel in the ``run_context`` dict.
"""

from __future__ import annotations

from wrtforge.stages.artifacts import ArtifactsStage
from wrtforge.stages.base import BaseStage
from wrtforge.stages.build import BuildStage
from wrtforge.stages.clean import CleanStage
from wrtforge.stages.config import ConfigStage
from wrtforge.stages.feeds import FeedsStage
from wrtforge.stages.overlay import OverlayStage
from wrtforge.stages.overrides import OverridesStage
from wrtforge.stages.preflight import PreflightStage
from wrtforge.stages.sync import SyncStage

# Ordered list matching the default pipeline execution order.
STAGE_ORDER: list[str] = [
    "preflight",
    "sync",
    "clean",
    "feeds",
    "overrides",
    "overlay",
    "config",
    "build",
    "artifacts",
]

__all__ = [
    "BaseStage",
    "STAGE_ORDER",
    "PreflightStage",
    "SyncStage",
    "CleanStage",
    "FeedsStage",
    "OverridesStage",
    "OverlayStage",
    "ConfigStage",
    "BuildStage",
    "ArtifactsStage",
]
