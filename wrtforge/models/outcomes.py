"""Tagged stage outcomes: every stage ends Ok, Warn or Fatal."""

from __future__ import annotations

from enum import Enum
from typing import Any

from pydantic import BaseModel, ConfigDict


class OutcomeKind(str, Enum):
    OK = "ok"
    WARN = "warn"
    FATAL = "fatal"


class StageOutcome(BaseModel):
    """Result of one stage run.

    ``warnings`` carries recoverable discrepancies (unresolved tag, refused
    fast-forward, missing advisory marker).  ``reason`` is set for FATAL
    outcomes and names what stopped the pipeline.
    """

    model_config = ConfigDict(frozen=True)

    stage_id: str
    kind: OutcomeKind
    reason: str = ""
    warnings: list[str] = []
    input_hash: str = ""
    details: dict[str, Any] = {}

    @classmethod
    def ok(cls, stage_id: str, **kwargs: Any) -> StageOutcome:
        return cls(stage_id=stage_id, kind=OutcomeKind.OK, **kwargs)

    @classmethod
    def warn(cls, stage_id: str, warnings: list[str], **kwargs: Any) -> StageOutcome:
        return cls(stage_id=stage_id, kind=OutcomeKind.WARN, warnings=warnings, **kwargs)

    @classmethod
    def fatal(cls, stage_id: str, reason: str, **kwargs: Any) -> StageOutcome:
        return cls(stage_id=stage_id, kind=OutcomeKind.FATAL, reason=reason, **kwargs)

    @property
    def is_fatal(self) -> bool:
        return self.kind == OutcomeKind.FATAL
