"""Tests for the rootfs overlay (opkg distfeeds)."""

from __future__ import annotations

from pathlib import Path

from wrtforge.core.rootfs_overlay import DISTFEEDS_PATH, RootfsOverlay, render_distfeeds

MIRROR = "https://mirrors.ustc.edu.cn/openwrt"


class TestRenderDistfeeds:
    def test_six_feeds_in_order(self):
        lines = render_distfeeds(MIRROR, "24.10.5", "x86/64", "x86_64").splitlines()
        names = [line.split()[1] for line in lines]
        assert names == [
            "openwrt_core",
            "openwrt_base",
            "openwrt_luci",
            "openwrt_packages",
            "openwrt_routing",
            "openwrt_telephony",
        ]

    def test_urls(self):
        lines = render_distfeeds(MIRROR + "/", "24.10.5", "x86/64", "x86_64").splitlines()
        assert lines[0].endswith(f"{MIRROR}/releases/24.10.5/targets/x86/64/packages")
        assert lines[1].endswith(f"{MIRROR}/releases/packages-24.10/x86_64/base")
        assert all(line.startswith("src/gz ") for line in lines)


class TestRootfsOverlay:
    def test_write_creates_parents_and_overwrites(self, buildroot: Path):
        target = buildroot / DISTFEEDS_PATH
        target.parent.mkdir(parents=True)
        target.write_text("src/gz stale http://example.invalid\n")

        path = RootfsOverlay(buildroot).write_distfeeds(MIRROR, "24.10.5", "x86/64", "x86_64")

        assert path == target
        content = path.read_text()
        assert "stale" not in content
        assert content.count("\n") == 6
