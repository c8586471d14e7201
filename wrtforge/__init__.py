"""wrtforge: reproducible OpenWrt firmware builds.

Composes an upstream OpenWrt buildroot, the ``splitdns`` package feed and a
pinned ``.config`` snapshot into one deterministic build invocation:

  - Workspace sync to a pinned branch/tag with stale-directory recovery
  - Idempotent feed registration, refresh and install
  - Forced overrides of feed-provided packages (golang, v2ray-geodata)
  - Rootfs overlay with default opkg mirror configuration
  - Logged build that keeps the build's own exit status
  - Bounded failure triage and artifact discovery
"""

__version__ = "0.2.0"
__description__ = "Reproducible OpenWrt firmware build orchestration"

from wrtforge.core.orchestrator import Orchestrator

__all__ = ["Orchestrator", "__version__"]
