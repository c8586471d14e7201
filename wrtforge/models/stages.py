"""Stage state machine models — deterministic pipeline transitions."""

from __future__ import annotations

from enum import Enum

from pydantic import BaseModel, ConfigDict


class StageState(str, Enum):
    """Strict state model for each pipeline stage."""

    NOT_STARTED = "not_started"
    RUNNING = "running"
    BLOCKED = "blocked"
    FAILED = "failed"
    PASSED = "passed"
    WARNED = "warned"
    SKIPPED = "skipped"


# Valid state transitions, enforced by StageMachine.
# Terminal states (PASSED, WARNED, SKIPPED) have no outgoing transitions.
VALID_TRANSITIONS: dict[StageState, set[StageState]] = {
    StageState.NOT_STARTED: {StageState.RUNNING, StageState.BLOCKED, StageState.SKIPPED},
    StageState.RUNNING: {StageState.PASSED, StageState.WARNED, StageState.FAILED},
    StageState.BLOCKED: {StageState.NOT_STARTED},
    StageState.FAILED: {StageState.NOT_STARTED},  # re-run
    StageState.PASSED: set(),
    StageState.WARNED: set(),
    StageState.SKIPPED: set(),
}

# States that satisfy a downstream prerequisite.
SATISFIED_STATES: frozenset[StageState] = frozenset(
    {StageState.PASSED, StageState.WARNED, StageState.SKIPPED}
)


class StageDefinition(BaseModel):
    """Defines a pipeline stage and its prerequisites.

    A stage cannot enter RUNNING unless every prerequisite is in one of
    ``SATISFIED_STATES``.
    """

    model_config = ConfigDict(frozen=True)

    stage_id: str
    display_name: str
    ordinal: int
    prerequisites: list[str] = []


class StageTransition(BaseModel):
    """Records a single state transition for the run report."""

    model_config = ConfigDict(frozen=True)

    stage_id: str
    from_state: StageState
    to_state: StageState
    reason: str | None = None


# The standard firmware build pipeline, in execution order.
DEFAULT_STAGE_DEFINITIONS: list[StageDefinition] = [
    StageDefinition(stage_id="preflight", display_name="Preflight", ordinal=0),
    StageDefinition(
        stage_id="sync",
        display_name="Workspace Sync",
        ordinal=1,
        prerequisites=["preflight"],
    ),
    StageDefinition(
        stage_id="clean",
        display_name="Distclean",
        ordinal=2,
        prerequisites=["sync"],
    ),
    StageDefinition(
        stage_id="feeds",
        display_name="Feed Registry",
        ordinal=3,
        prerequisites=["clean"],
    ),
    StageDefinition(
        stage_id="overrides",
        display_name="Feed Overrides",
        ordinal=4,
        prerequisites=["feeds"],
    ),
    StageDefinition(
        stage_id="overlay",
        display_name="Rootfs Overlay",
        ordinal=5,
        prerequisites=["overrides"],
    ),
    StageDefinition(
        stage_id="config",
        display_name="Apply Config",
        ordinal=6,
        prerequisites=["overlay"],
    ),
    StageDefinition(
        stage_id="build",
        display_name="Firmware Build",
        ordinal=7,
        prerequisites=["config"],
    ),
    StageDefinition(
        stage_id="artifacts",
        display_name="Artifacts",
        ordinal=8,
        prerequisites=["build"],
    ),
]
