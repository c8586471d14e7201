"""Feed override models: directory symlink overrides and ownership conflicts."""

from __future__ import annotations

from pathlib import Path

from pydantic import BaseModel, ConfigDict


class OverrideMapping(BaseModel):
    """Replace a feed-owned directory with a symlink to a vendored one.

    Paths are relative to the buildroot unless absolute.  ``feed`` is the
    feed whose index is refreshed and reinstalled after the swap.
    """

    model_config = ConfigDict(frozen=True)

    target: Path
    source: Path
    feed: str


class ConflictSet(BaseModel):
    """One package name claimed by several feeds, resolved to ``owner``."""

    model_config = ConfigDict(frozen=True)

    package: str
    feeds: list[str]
    owner: str

    def claimant_paths(self, buildroot: Path) -> list[Path]:
        """Installed trees under ``package/feeds/<feed>/<package>``, owner included."""
        feeds = list(dict.fromkeys([*self.feeds, self.owner]))
        return [Path(buildroot) / "package" / "feeds" / feed / self.package for feed in feeds]

    def marker_path(self, buildroot: Path) -> Path:
        return Path(buildroot) / "package" / "feeds" / self.owner / self.package / "Makefile"


# Go toolchain packaging comes from the splitdns feed instead of packages.
GOLANG_OVERRIDE = OverrideMapping(
    target=Path("feeds/packages/lang/golang"),
    source=Path("feeds/splitdns/golang"),
    feed="packages",
)

# v2ray-geodata ships in both feeds; the splitdns copy wins.
GEODATA_CONFLICT = ConflictSet(
    package="v2ray-geodata",
    feeds=["packages", "splitdns"],
    owner="splitdns",
)
