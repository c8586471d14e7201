"""Tests for FeedRegistry — idempotent registration and feed tool invocations."""

from __future__ import annotations

from pathlib import Path

import pytest

from wrtforge.core.feed_registry import FeedRegistry
from wrtforge.core.runner import CommandError

LINE = "src-git splitdns https://github.com/nicky1605/openwrt-splitdns-feed.git"

EXISTING = (
    "src-git packages https://git.openwrt.org/feed/packages.git\n"
    "src-git luci https://git.openwrt.org/project/luci.git\n"
)


class TestRegister:
    def test_appends_when_absent(self, tmp_path: Path):
        manifest = tmp_path / "feeds.conf.default"
        manifest.write_text(EXISTING)
        assert FeedRegistry.register(manifest, LINE) is True
        assert manifest.read_text() == EXISTING + LINE + "\n"

    def test_idempotent_and_order_preserving(self, tmp_path: Path):
        manifest = tmp_path / "feeds.conf.default"
        manifest.write_text(EXISTING)

        FeedRegistry.register(manifest, LINE)
        assert FeedRegistry.register(manifest, LINE) is False

        lines = manifest.read_text().splitlines()
        assert lines.count(LINE) == 1
        assert lines[:2] == EXISTING.splitlines()

    def test_exact_match_only(self, tmp_path: Path):
        manifest = tmp_path / "feeds.conf.default"
        manifest.write_text(f"#{LINE}\n{LINE.upper()}\n{LINE} \n")
        assert FeedRegistry.register(manifest, LINE) is True
        assert manifest.read_text().splitlines().count(LINE) == 1

    def test_missing_trailing_newline(self, tmp_path: Path):
        manifest = tmp_path / "feeds.conf.default"
        manifest.write_text("src-git packages https://example.invalid/packages.git")
        FeedRegistry.register(manifest, LINE)
        assert manifest.read_text().splitlines()[-1] == LINE

    def test_creates_missing_manifest(self, tmp_path: Path):
        manifest = tmp_path / "feeds.conf.default"
        FeedRegistry.register(manifest, LINE)
        assert manifest.read_text() == LINE + "\n"

    def test_other_line_breaks_are_part_of_the_line(self, tmp_path: Path):
        manifest = tmp_path / "feeds.conf.default"
        manifest.write_text(f"src-git packages x\x0c{LINE}\nsrc-git luci y\x0b{LINE}\n")
        assert FeedRegistry.register(manifest, LINE) is True
        assert manifest.read_text().split("\n").count(LINE) == 1

    def test_lone_carriage_return_does_not_split(self, tmp_path: Path):
        manifest = tmp_path / "feeds.conf.default"
        manifest.write_bytes(f"src-git packages x\r{LINE}\n".encode())
        assert FeedRegistry.register(manifest, LINE) is True

    def test_non_utf8_manifest_is_appended_to(self, tmp_path: Path):
        manifest = tmp_path / "feeds.conf.default"
        legacy = b"src-git legacy https://example.invalid/caf\xe9.git\n"
        manifest.write_bytes(legacy)

        assert FeedRegistry.register(manifest, LINE) is True
        assert manifest.read_bytes() == legacy + f"{LINE}\n".encode()
        assert FeedRegistry.register(manifest, LINE) is False

    def test_write_failure_propagates(self, tmp_path: Path):
        with pytest.raises(OSError):
            FeedRegistry.register(tmp_path / "no-such-dir" / "feeds.conf", LINE)


class TestFeedTool:
    def test_refresh_all_and_scoped(self, runner, buildroot: Path):
        registry = FeedRegistry(buildroot, runner)
        registry.refresh()
        registry.refresh("packages")
        assert runner.commands == [
            "./scripts/feeds update -a",
            "./scripts/feeds update packages",
        ]
        assert all(cwd == buildroot for _, cwd in runner.calls)

    def test_install_variants(self, runner, buildroot: Path):
        registry = FeedRegistry(buildroot, runner)
        registry.install()
        registry.install(feed="packages")
        registry.install(["v2ray-geodata"], feed="splitdns")
        assert runner.commands == [
            "./scripts/feeds install -a",
            "./scripts/feeds install -a -p packages",
            "./scripts/feeds install -p splitdns v2ray-geodata",
        ]

    def test_failure_is_fatal_by_default(self, runner, buildroot: Path):
        runner.fail("./scripts/feeds", "update")
        with pytest.raises(CommandError):
            FeedRegistry(buildroot, runner).refresh()

    def test_tolerated_failure_returns_false(self, runner, buildroot: Path):
        runner.fail("./scripts/feeds", "install")
        assert FeedRegistry(buildroot, runner).install(tolerate_failure=True) is False

    def test_manifest_path(self, runner, buildroot: Path):
        assert FeedRegistry(buildroot, runner).manifest_path == buildroot / "feeds.conf.default"
