"""Static files injected into the firmware rootfs via ``<buildroot>/files``."""

from __future__ import annotations

import logging
from pathlib import Path

logger = logging.getLogger(__name__)

DISTFEEDS_PATH = Path("files/etc/opkg/distfeeds.conf")

# opkg feed name -> package sub-repository under packages-<major>/<arch>/
_PACKAGE_FEEDS: tuple[str, ...] = ("base", "luci", "packages", "routing", "telephony")


def render_distfeeds(
    mirror_url: str, release_version: str, target: str, package_arch: str
) -> str:
    """Render ``distfeeds.conf`` pointing every opkg feed at *mirror_url*."""
    mirror = mirror_url.rstrip("/")
    branch = ".".join(release_version.split(".")[:2])
    feeds = [
        ("openwrt_core", f"{mirror}/releases/{release_version}/targets/{target}/packages"),
    ]
    feeds.extend(
        (f"openwrt_{name}", f"{mirror}/releases/packages-{branch}/{package_arch}/{name}")
        for name in _PACKAGE_FEEDS
    )
    return "".join(f"src/gz {name:<17} {url}\n" for name, url in feeds)


class RootfsOverlay:
    """Writes overlay files under the buildroot's ``files/`` tree."""

    def __init__(self, buildroot: Path) -> None:
        self._buildroot = Path(buildroot)

    def write_distfeeds(
        self,
        mirror_url: str,
        release_version: str,
        target: str,
        package_arch: str,
    ) -> Path:
        """Overwrite ``files/etc/opkg/distfeeds.conf``; returns its path."""
        path = self._buildroot / DISTFEEDS_PATH
        logger.info("Writing default opkg distfeeds (%s) to %s", mirror_url, path)
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_text(
            render_distfeeds(mirror_url, release_version, target, package_arch),
            encoding="utf-8",
        )
        return path
