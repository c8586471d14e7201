"""Per-run pipeline report."""

from __future__ import annotations

from datetime import datetime, timezone

from pydantic import BaseModel, ConfigDict, Field

from wrtforge.models.build import ArtifactSet, BuildRun, ConfigSnapshot, FailureSummary
from wrtforge.models.outcomes import StageOutcome
from wrtforge.models.stages import StageState, StageTransition
from wrtforge.models.workspace import PinSpec, Workspace


class PipelineReport(BaseModel):
    """Everything a caller needs after one pipeline invocation."""

    model_config = ConfigDict(frozen=True)

    run_id: str
    pin: PinSpec
    started_at: datetime
    finished_at: datetime = Field(default_factory=lambda: datetime.now(timezone.utc))
    states: dict[str, StageState] = {}
    transitions: list[StageTransition] = []
    outcomes: list[StageOutcome] = []
    workspace: Workspace | None = None
    config: ConfigSnapshot | None = None
    build: BuildRun | None = None
    failure: FailureSummary | None = None
    artifacts: ArtifactSet | None = None
    exit_code: int = 0

    @property
    def succeeded(self) -> bool:
        return self.exit_code == 0

    @property
    def failed_stage(self) -> str | None:
        for outcome in self.outcomes:
            if outcome.is_fatal:
                return outcome.stage_id
        return None

    @property
    def warnings(self) -> list[str]:
        return [f"{o.stage_id}: {w}" for o in self.outcomes for w in o.warnings]
