"""Pipeline orchestrator — the central coordinator for a firmware build.

The Orchestrator wires WorkspaceSync, FeedRegistry, OverrideResolver,
RootfsOverlay, ConfigApplier, BuildExecutor, FailureTriage and
ArtifactLocator into stage objects, drives them strictly in sequence
through the StageMachine, and assembles a ``PipelineReport``.

A fatal outcome stops the run; every stage after it is blocked.  The
report's exit code is 0 when no stage was fatal and 1 otherwise.
"""

from __future__ import annotations

import logging
import uuid
from datetime import datetime, timezone
from pathlib import Path
from typing import Any, TextIO

from wrtforge.config import ForgeSettings
from wrtforge.core.artifact_locator import ArtifactLocator
from wrtforge.core.build_executor import BuildExecutor
from wrtforge.core.config_applier import ConfigApplier
from wrtforge.core.failure_triage import FailureTriage
from wrtforge.core.feed_registry import FeedRegistry
from wrtforge.core.override_resolver import OverrideResolver
from wrtforge.core.rootfs_overlay import RootfsOverlay
from wrtforge.core.runner import CommandRunner, SubprocessRunner
from wrtforge.core.stage_machine import StageMachine
from wrtforge.core.workspace_sync import WorkspaceSync
from wrtforge.models.outcomes import OutcomeKind, StageOutcome
from wrtforge.models.report import PipelineReport
from wrtforge.models.stages import DEFAULT_STAGE_DEFINITIONS, StageState
from wrtforge.stages import (
    ArtifactsStage,
    BaseStage,
    BuildStage,
    CleanStage,
    ConfigStage,
    FeedsStage,
    OverlayStage,
    OverridesStage,
    PreflightStage,
    SyncStage,
)

logger = logging.getLogger(__name__)

_STATE_FOR_OUTCOME: dict[OutcomeKind, StageState] = {
    OutcomeKind.OK: StageState.PASSED,
    OutcomeKind.WARN: StageState.WARNED,
    OutcomeKind.FATAL: StageState.FAILED,
}


class Orchestrator:
    """Runs the firmware build pipeline once.

    Parameters
    ----------
    settings:
        Pipeline settings.  Uses environment-driven defaults if not provided.
    runner:
        Command runner for git, feeds and ``make`` housekeeping calls.
    build_executor:
        Executor for the build itself; defaults to ``make`` in the buildroot.
    stream:
        Terminal stream build output is mirrored to.
    """

    def __init__(
        self,
        settings: ForgeSettings | None = None,
        runner: CommandRunner | None = None,
        *,
        build_executor: BuildExecutor | None = None,
        stream: TextIO | None = None,
    ) -> None:
        self.settings = settings or ForgeSettings()
        buildroot = self.settings.buildroot
        runner = runner or SubprocessRunner()

        # Components
        self.workspace_sync = WorkspaceSync(runner)
        self.feed_registry = FeedRegistry(buildroot, runner)
        self.override_resolver = OverrideResolver(buildroot, self.feed_registry)
        self.rootfs_overlay = RootfsOverlay(buildroot)
        self.config_applier = ConfigApplier(buildroot, runner)
        self.build_executor = build_executor or BuildExecutor(buildroot, stream=stream)
        self.failure_triage = FailureTriage()
        self.artifact_locator = ArtifactLocator()

        self.stages: list[BaseStage] = [
            PreflightStage(),
            SyncStage(self.workspace_sync),
            CleanStage(self.config_applier),
            FeedsStage(self.feed_registry),
            OverridesStage(self.override_resolver),
            OverlayStage(self.rootfs_overlay),
            ConfigStage(self.config_applier),
            BuildStage(self.build_executor, self.failure_triage),
            ArtifactsStage(self.artifact_locator),
        ]
        self.stage_machine = StageMachine(DEFAULT_STAGE_DEFINITIONS)

        ts = datetime.now(timezone.utc).strftime("%Y%m%d-%H%M%S")
        self.run_id = f"wf-{ts}-{uuid.uuid4().hex[:3]}"

    # ------------------------------------------------------------------
    # Run lifecycle
    # ------------------------------------------------------------------

    def run(self) -> PipelineReport:
        """Execute every stage in order and return the run report."""
        started_at = datetime.now(timezone.utc)
        self.stage_machine.initialize()
        run_context: dict[str, Any] = {
            "run_id": self.run_id,
            "settings": self.settings,
            "stage_results": {},
        }

        logger.info("Run %s: buildroot=%s", self.run_id, self.settings.buildroot)
        outcomes: list[StageOutcome] = []
        for stage in self.stages:
            if not stage.should_run(run_context):
                self.stage_machine.transition(
                    stage.stage_id, StageState.SKIPPED, reason="disabled"
                )
                logger.info("%s [%s] skipped", stage.display_name, stage.stage_id)
                continue

            self.stage_machine.transition(stage.stage_id, StageState.RUNNING)
            outcome = stage.run_stage(run_context)
            self.stage_machine.transition(
                stage.stage_id,
                _STATE_FOR_OUTCOME[outcome.kind],
                reason=outcome.reason or None,
            )
            outcomes.append(outcome)
            if outcome.is_fatal:
                logger.error("Stage %s failed: %s", stage.stage_id, outcome.reason)
                break

        exit_code = 1 if any(o.is_fatal for o in outcomes) else 0
        report = PipelineReport(
            run_id=self.run_id,
            pin=self.settings.pin,
            started_at=started_at,
            states=self.stage_machine.get_all_states(),
            transitions=self.stage_machine.history,
            outcomes=outcomes,
            workspace=run_context.get("workspace"),
            config=run_context.get("config_snapshot"),
            build=run_context.get("build_run"),
            failure=run_context.get("failure_summary"),
            artifacts=run_context.get("artifacts"),
            exit_code=exit_code,
        )
        self.persist_report(report)
        return report

    def persist_report(self, report: PipelineReport) -> Path | None:
        """Write the report as JSON under the log directory.

        Failure to write is logged and otherwise ignored.
        """
        path = self.settings.log_dir / f"run-{report.run_id}.json"
        try:
            path.parent.mkdir(parents=True, exist_ok=True)
            path.write_text(report.model_dump_json(indent=2), encoding="utf-8")
        except OSError as exc:
            logger.warning("Could not write run report %s: %s", path, exc)
            return None
        logger.info("Run report: %s", path)
        return path

    # ------------------------------------------------------------------
    # Query methods
    # ------------------------------------------------------------------

    def get_states(self) -> dict[str, StageState]:
        """Return current state of all stages."""
        return self.stage_machine.get_all_states()

    def get_stage_state(self, stage_id: str) -> StageState:
        return self.stage_machine.get_state(stage_id)
