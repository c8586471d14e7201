"""Deterministic stage state machine for one pipeline run.

Enforces:
- Valid state transitions only (VALID_TRANSITIONS table)
- Prerequisites checked before RUNNING
- Cascade blocking of dependents on failure
- Every transition recorded in order for the run report
"""

from __future__ import annotations

from wrtforge.models.stages import (
    SATISFIED_STATES,
    VALID_TRANSITIONS,
    StageDefinition,
    StageState,
    StageTransition,
)


class InvalidTransitionError(RuntimeError):
    """Raised when a requested state transition is not valid."""


class PrerequisiteNotMetError(RuntimeError):
    """Raised when a stage is started before its prerequisites are satisfied."""


class StageMachine:
    """Tracks stage states for a single run.

    Parameters
    ----------
    definitions:
        Stage definitions; prerequisites must name defined stages.
    """

    def __init__(self, definitions: list[StageDefinition]) -> None:
        self._definitions = {sd.stage_id: sd for sd in definitions}
        for sd in definitions:
            unknown = [p for p in sd.prerequisites if p not in self._definitions]
            if unknown:
                raise ValueError(f"Stage {sd.stage_id} has unknown prerequisites: {unknown}")
        self._states: dict[str, StageState] = {}
        self._history: list[StageTransition] = []
        self.initialize()

    @property
    def stage_ids(self) -> list[str]:
        return list(self._definitions)

    @property
    def history(self) -> list[StageTransition]:
        return list(self._history)

    def initialize(self) -> dict[str, StageState]:
        """Reset every stage to NOT_STARTED and clear the history."""
        self._states = {sid: StageState.NOT_STARTED for sid in self._definitions}
        self._history = []
        return dict(self._states)

    def get_state(self, stage_id: str) -> StageState:
        return self._states[stage_id]

    def get_all_states(self) -> dict[str, StageState]:
        return dict(self._states)

    # ------------------------------------------------------------------
    # Transition logic
    # ------------------------------------------------------------------

    def transition(
        self, stage_id: str, target_state: StageState, *, reason: str | None = None
    ) -> StageTransition:
        """Move *stage_id* to *target_state*.

        Validates the transition against VALID_TRANSITIONS and, when entering
        RUNNING, the stage's prerequisites.  Entering FAILED blocks every
        not-yet-started dependent.
        """
        current = self._states[stage_id]
        allowed = VALID_TRANSITIONS.get(current, set())
        if target_state not in allowed:
            raise InvalidTransitionError(
                f"Cannot transition {stage_id} from {current.value} to {target_state.value}. "
                f"Allowed: {sorted(s.value for s in allowed)}"
            )

        if target_state == StageState.RUNNING:
            blocking = self.blocking_reasons(stage_id)
            if blocking:
                raise PrerequisiteNotMetError(
                    f"Cannot start {stage_id}: prerequisites not met. "
                    f"Blocked by: {'; '.join(blocking)}"
                )

        record = self._record(stage_id, current, target_state, reason)

        if target_state == StageState.FAILED:
            for dependent in self._dependents(stage_id):
                if self._states[dependent] == StageState.NOT_STARTED:
                    self._record(
                        dependent,
                        StageState.NOT_STARTED,
                        StageState.BLOCKED,
                        f"upstream {stage_id} failed",
                    )
        return record

    def blocking_reasons(self, stage_id: str) -> list[str]:
        prerequisites = self._definitions[stage_id].prerequisites
        return [
            f"{p} is {self._states[p].value}"
            for p in prerequisites
            if self._states[p] not in SATISFIED_STATES
        ]

    def can_start(self, stage_id: str) -> tuple[bool, list[str]]:
        """Return (can_start, blocking_reasons)."""
        current = self._states[stage_id]
        if current != StageState.NOT_STARTED:
            return False, [f"Stage is currently {current.value}, not not_started"]
        reasons = self.blocking_reasons(stage_id)
        return not reasons, reasons

    # ------------------------------------------------------------------
    # Internals
    # ------------------------------------------------------------------

    def _record(
        self,
        stage_id: str,
        from_state: StageState,
        to_state: StageState,
        reason: str | None,
    ) -> StageTransition:
        record = StageTransition(
            stage_id=stage_id, from_state=from_state, to_state=to_state, reason=reason
        )
        self._states[stage_id] = to_state
        self._history.append(record)
        return record

    def _dependents(self, stage_id: str) -> list[str]:
        """All transitive dependents of *stage_id*, in definition order."""
        affected = {stage_id}
        ordered: list[str] = []
        changed = True
        while changed:
            changed = False
            for sid, sd in self._definitions.items():
                if sid not in affected and affected.intersection(sd.prerequisites):
                    affected.add(sid)
                    ordered.append(sid)
                    changed = True
        return [sid for sid in self._definitions if sid in ordered]
