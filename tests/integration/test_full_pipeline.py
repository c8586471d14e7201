"""End-to-end integration tests — full pipeline execution, preflight to artifacts.

These tests exercise the Orchestrator, StageMachine, WorkspaceSync,
FeedRegistry, OverrideResolver, RootfsOverlay, ConfigApplier, BuildExecutor,
FailureTriage and ArtifactLocator working together.  git and the feeds tool
are simulated by the FakeRunner; the build itself is a real subprocess.
"""

from __future__ import annotations

import io
import os
import sys
from pathlib import Path

import pytest

from wrtforge.config import ForgeSettings
from wrtforge.core.build_executor import BuildExecutor
from wrtforge.core.orchestrator import Orchestrator
from wrtforge.models.outcomes import OutcomeKind
from wrtforge.models.report import PipelineReport
from wrtforge.models.stages import StageState

PASSING_BUILD = (
    "import pathlib\n"
    "out = pathlib.Path('bin/targets/x86/64')\n"
    "out.mkdir(parents=True, exist_ok=True)\n"
    "(out / 'openwrt-24.10.5-x86-64-generic-ext4-combined-efi.img.gz').write_bytes(b'img')\n"
    "(out / 'sha256sums').write_text('')\n"
    "(out / 'profiles.json').write_text('{}')\n"
    "print('make[1]: Leaving directory')\n"
)

FAILING_BUILD = (
    "import sys\n"
    "for i in range(300):\n"
    "    print(f'make[3]: building step {i}')\n"
    "print('ERROR: package/feeds/splitdns/v2ray-geodata failed to build.')\n"
    "print('make[1]: *** [package/Makefile:129: package/install] Error 2')\n"
    "sys.exit(2)\n"
)


def _orchestrator(settings: ForgeSettings, runner, code: str) -> Orchestrator:
    executor = BuildExecutor(
        settings.buildroot, make_command=[sys.executable, "-c", code], stream=io.StringIO()
    )
    return Orchestrator(settings, runner, build_executor=executor)


class TestSuccessfulBuild:
    """A clean run from an empty workdir to listed artifacts."""

    @pytest.fixture
    def report(self, settings: ForgeSettings, openwrt_runner) -> PipelineReport:
        return _orchestrator(settings, openwrt_runner, PASSING_BUILD).run()

    def test_exit_code_zero(self, report: PipelineReport):
        assert report.exit_code == 0
        assert report.failed_stage is None

    def test_stage_states(self, report: PipelineReport):
        expected = {sid: StageState.PASSED for sid in report.states}
        expected["clean"] = StageState.SKIPPED
        assert report.states == expected

    def test_stage_commands_in_order(self, report: PipelineReport, openwrt_runner):
        commands = openwrt_runner.commands
        order = [
            commands.index(next(c for c in commands if c.startswith("git clone"))),
            commands.index("./scripts/feeds update -a"),
            commands.index("./scripts/feeds update packages"),
            commands.index("./scripts/feeds install -p splitdns v2ray-geodata"),
            commands.index("make defconfig"),
        ]
        assert order == sorted(order)
        assert "make distclean" not in commands

    def test_workspace_pinned_to_tag(self, report: PipelineReport):
        assert report.workspace is not None
        assert report.workspace.tag == "v24.10.5"

    def test_buildroot_prepared(self, report: PipelineReport, settings: ForgeSettings, config_file: Path):
        root = settings.buildroot
        assert (root / "feeds.conf.default").read_text().splitlines() == [settings.feed_line]
        assert (root / "feeds/packages/lang/golang").is_symlink()
        assert (root / ".config").read_bytes() == config_file.read_bytes()
        assert "openwrt_core" in (root / "files/etc/opkg/distfeeds.conf").read_text()
        assert (settings.log_dir / "openwrt.defconfig").is_file()

    def test_artifacts_listed(self, report: PipelineReport):
        assert report.artifacts is not None
        assert [p.name for p in report.artifacts.paths] == [
            "openwrt-24.10.5-x86-64-generic-ext4-combined-efi.img.gz",
            "sha256sums",
        ]

    def test_report_persisted(self, report: PipelineReport, settings: ForgeSettings):
        path = settings.log_dir / f"run-{report.run_id}.json"
        restored = PipelineReport.model_validate_json(path.read_text())
        assert restored.exit_code == 0
        assert restored.states["build"] == StageState.PASSED

    def test_build_log_written(self, report: PipelineReport):
        assert report.build is not None
        assert "Leaving directory" in report.build.log_path.read_text()


class TestFailedBuild:
    """A failing build is reported with its own exit status and a bounded summary."""

    @pytest.fixture
    def report(self, settings: ForgeSettings, openwrt_runner) -> PipelineReport:
        return _orchestrator(settings, openwrt_runner, FAILING_BUILD).run()

    def test_exit_code_one(self, report: PipelineReport):
        assert report.exit_code == 1
        assert report.failed_stage == "build"
        assert report.build is not None and report.build.exit_code == 2

    def test_artifacts_blocked(self, report: PipelineReport):
        assert report.states["build"] == StageState.FAILED
        assert report.states["artifacts"] == StageState.BLOCKED
        assert report.artifacts is None

    def test_failure_summary(self, report: PipelineReport):
        summary = report.failure
        assert summary is not None and not summary.degraded
        assert [m.line_no for m in summary.matches] == [301, 302]
        assert len(summary.tail) == 120
        assert summary.tail[-1].endswith("Error 2")


class TestTolerableDiscrepancies:
    def test_missing_tag_warns_and_builds(self, settings: ForgeSettings, openwrt_runner):
        openwrt_runner.fail("git", "rev-parse", "-q", "--verify")
        report = _orchestrator(settings, openwrt_runner, PASSING_BUILD).run()

        assert report.exit_code == 0
        assert report.states["sync"] == StageState.WARNED
        assert any("not found" in w for w in report.warnings)

    def test_empty_output_tree_warns(self, settings: ForgeSettings, openwrt_runner):
        report = _orchestrator(settings, openwrt_runner, "print('nothing')").run()
        assert report.exit_code == 0
        assert report.states["artifacts"] == StageState.WARNED
        assert report.artifacts is not None and report.artifacts.count == 0


class TestFatalSteps:
    def test_feed_update_failure_blocks_rest(self, settings: ForgeSettings, openwrt_runner):
        openwrt_runner.fail("./scripts/feeds", "update", "-a")
        report = _orchestrator(settings, openwrt_runner, PASSING_BUILD).run()

        assert report.exit_code == 1
        assert report.failed_stage == "feeds"
        for sid in ("overrides", "overlay", "config", "build", "artifacts"):
            assert report.states[sid] == StageState.BLOCKED
        assert report.build is None
        assert openwrt_runner.count("make", "defconfig") == 0

    def test_defconfig_failure(self, settings: ForgeSettings, openwrt_runner):
        openwrt_runner.fail("make", "defconfig")
        report = _orchestrator(settings, openwrt_runner, PASSING_BUILD).run()
        assert report.failed_stage == "config"
        assert report.states["build"] == StageState.BLOCKED

    def test_clone_failure(self, settings: ForgeSettings, openwrt_runner):
        openwrt_runner.fail("git", "clone", returncode=128)
        report = _orchestrator(settings, openwrt_runner, PASSING_BUILD).run()
        fatal = next(o for o in report.outcomes if o.kind == OutcomeKind.FATAL)
        assert fatal.stage_id == "sync"
        assert "CommandError" in fatal.reason


class TestReentrantRun:
    """A second run over the same workdir converges to the same state."""

    def test_second_run_updates_in_place(self, settings: ForgeSettings, openwrt_runner):
        first = _orchestrator(settings, openwrt_runner, PASSING_BUILD).run()
        link = settings.buildroot / "feeds/packages/lang/golang"
        first_target = os.readlink(link)

        second = _orchestrator(settings, openwrt_runner, PASSING_BUILD).run()

        assert first.exit_code == second.exit_code == 0
        assert second.workspace is not None
        assert second.workspace.initial_state.value == "pinned"
        assert openwrt_runner.count("git", "clone") == 1
        manifest = (settings.buildroot / "feeds.conf.default").read_text()
        assert manifest.splitlines().count(settings.feed_line) == 1
        assert os.readlink(link) == first_target
        assert [o.input_hash for o in second.outcomes] == [o.input_hash for o in first.outcomes]

    def test_clean_flag_runs_distclean(self, settings: ForgeSettings, openwrt_runner):
        settings = settings.model_copy(update={"clean": True})
        report = _orchestrator(settings, openwrt_runner, PASSING_BUILD).run()
        assert report.states["clean"] == StageState.PASSED
        assert "make distclean" in openwrt_runner.commands
