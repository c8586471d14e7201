"""Firmware Build — logged build, then triage when it fails.

A failing build does not raise: triage (and the optional diagnostic
rebuild) runs first, and the stage returns a fatal result carrying the
bounded summary.
"""

from __future__ import annotations

from typing import Any

from wrtforge.config import ForgeSettings
from wrtforge.core.build_executor import BuildExecutor, timestamped_log_path
from wrtforge.core.failure_triage import FailureTriage
from wrtforge.stages.base import BaseStage


class BuildStage(BaseStage):

    def __init__(self, executor: BuildExecutor, triage: FailureTriage) -> None:
        self._executor = executor
        self._triage = triage

    @property
    def stage_id(self) -> str:
        return "build"

    @property
    def display_name(self) -> str:
        return "Firmware Build"

    def inputs(self, run_context: dict[str, Any]) -> dict[str, Any]:
        settings: ForgeSettings = run_context["settings"]
        return settings.model_dump(mode="json", include={"jobs", "verbose", "make_flags"})

    def execute(self, run_context: dict[str, Any]) -> dict[str, Any]:
        settings: ForgeSettings = run_context["settings"]
        log_path = timestamped_log_path(settings.log_dir)

        build_run = self._executor.run(
            settings.jobs, settings.verbose or None, settings.make_flags, log_path
        )
        run_context["build_run"] = build_run
        result: dict[str, Any] = {
            "command": build_run.command,
            "log_path": str(build_run.log_path),
            "exit_code": build_run.exit_code,
        }
        if build_run.succeeded:
            return result

        summary = self._triage.summarize(build_run.log_path)
        run_context["failure_summary"] = summary
        result["matched_lines"] = len(summary.matches)

        if settings.diagnose_component:
            diagnose_log = log_path.with_name(f"{log_path.stem}-diagnose.txt")
            rerun = self._executor.diagnose(settings.diagnose_component, diagnose_log)
            result["diagnostic_exit_code"] = rerun.exit_code if rerun else None

        result["_fatal"] = (
            f"Build failed with exit code {build_run.exit_code}; see {build_run.log_path}"
        )
        return result
