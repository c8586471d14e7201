"""wrtforge data models — all Pydantic v2, all frozen (immutable)."""

from wrtforge.models.build import (
    ArtifactSet,
    BuildRun,
    ConfigSnapshot,
    FailureSummary,
    LogMatch,
)
from wrtforge.models.feeds import (
    GEODATA_CONFLICT,
    GOLANG_OVERRIDE,
    ConflictSet,
    OverrideMapping,
)
from wrtforge.models.outcomes import OutcomeKind, StageOutcome
from wrtforge.models.report import PipelineReport
from wrtforge.models.stages import (
    DEFAULT_STAGE_DEFINITIONS,
    SATISFIED_STATES,
    VALID_TRANSITIONS,
    StageDefinition,
    StageState,
    StageTransition,
)
from wrtforge.models.workspace import PinSpec, Workspace, WorkspaceState

__all__ = [
    # workspace
    "PinSpec",
    "Workspace",
    "WorkspaceState",
    # feeds
    "OverrideMapping",
    "ConflictSet",
    "GOLANG_OVERRIDE",
    "GEODATA_CONFLICT",
    # build
    "ConfigSnapshot",
    "BuildRun",
    "LogMatch",
    "FailureSummary",
    "ArtifactSet",
    # stages
    "StageState",
    "StageDefinition",
    "StageTransition",
    "VALID_TRANSITIONS",
    "SATISFIED_STATES",
    "DEFAULT_STAGE_DEFINITIONS",
    # outcomes
    "OutcomeKind",
    "StageOutcome",
    # report
    "PipelineReport",
]
