"""Build configuration — env-driven, pydantic-settings backed.

Every value can be overridden via ``WRTFORGE_*`` environment variables or a
``.env`` file in the working directory.

Examples
--------
Override via environment::

    export WRTFORGE_OPENWRT_TAG=v24.10.5
    export WRTFORGE_JOBS=16
    export WRTFORGE_VERBOSE=s
    export WRTFORGE_MAKE_FLAGS="IGNORE_ERRORS=1"
"""

from __future__ import annotations

import os
from pathlib import Path

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from wrtforge.models.workspace import PinSpec


class ForgeSettings(BaseSettings):
    """Pipeline settings with environment variable overrides."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_prefix="WRTFORGE_",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    # Upstream source pin
    openwrt_repo: str = "https://github.com/nicky1605/openwrt.git"
    openwrt_branch: str = "openwrt-24.10"
    openwrt_tag: str = "v24.10.5"  # empty string disables tag pinning
    splitdns_feed_url: str = "https://github.com/nicky1605/openwrt-splitdns-feed.git"

    # Layout
    workdir: Path = Path("workdir")
    buildroot_dir: Path | None = None  # defaults to <workdir>/openwrt
    config_file: Path = Path("configs/openwrt-24.10.5/latest.config")
    log_dir: Path = Path("logs")

    # Build invocation
    jobs: int = Field(default_factory=lambda: os.cpu_count() or 1, ge=1)
    verbose: str = ""  # "s" for V=s
    make_flags: str = ""  # extra make flags, e.g. "IGNORE_ERRORS=1"
    clean: bool = False  # make distclean before applying config
    diagnose_component: str = ""  # e.g. "package/feeds/splitdns/v2ray-geodata/compile"

    # Rootfs overlay: default opkg feeds
    mirror_url: str = "https://mirrors.ustc.edu.cn/openwrt"
    release_version: str = "24.10.5"
    target: str = "x86/64"
    package_arch: str = "x86_64"

    log_level: str = "INFO"

    @field_validator("openwrt_branch")
    @classmethod
    def _branch_required(cls, value: str) -> str:
        if not value.strip():
            raise ValueError("openwrt_branch must not be empty")
        return value

    @property
    def buildroot(self) -> Path:
        """Resolved buildroot path."""
        return self.buildroot_dir or self.workdir / "openwrt"

    @property
    def pin(self) -> PinSpec:
        return PinSpec(
            repository=self.openwrt_repo,
            branch=self.openwrt_branch,
            tag=self.openwrt_tag or None,
        )

    @property
    def feed_line(self) -> str:
        """The ``feeds.conf.default`` line registering the splitdns feed."""
        return f"src-git splitdns {self.splitdns_feed_url}"
