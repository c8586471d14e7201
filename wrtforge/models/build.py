"""Build-side models: config snapshot, build run, triage summary, artifacts."""

from __future__ import annotations

from pathlib import Path

from pydantic import BaseModel, ConfigDict


class ConfigSnapshot(BaseModel):
    """An opaque ``.config`` blob copied verbatim into the buildroot."""

    model_config = ConfigDict(frozen=True)

    path: Path
    sha256: str


class BuildRun(BaseModel):
    """One build invocation.

    ``exit_code`` is the build command's own status, independent of the
    log duplication.
    """

    model_config = ConfigDict(frozen=True)

    command: list[str]
    jobs: int
    verbose: str | None = None
    extra_flags: str = ""
    log_path: Path
    exit_code: int

    @property
    def succeeded(self) -> bool:
        return self.exit_code == 0


class LogMatch(BaseModel):
    model_config = ConfigDict(frozen=True)

    line_no: int
    text: str


class FailureSummary(BaseModel):
    """Bounded diagnostic extracted from a build log."""

    model_config = ConfigDict(frozen=True)

    log_path: Path
    matches: list[LogMatch] = []
    tail: list[str] = []
    degraded: bool = False  # log missing or unreadable

    def render(self) -> str:
        """Plain-text summary: pattern matches, then trailing context."""
        lines = [f"Error summary from log: {self.log_path}"]
        lines.extend(f"{m.line_no}:{m.text}" for m in self.matches)
        lines.append(f"----- tail -n {len(self.tail)} (context) -----")
        lines.extend(self.tail)
        lines.append("----- end context -----")
        return "\n".join(lines)


class ArtifactSet(BaseModel):
    """Output files discovered under the build's output root, in path order."""

    model_config = ConfigDict(frozen=True)

    output_root: Path
    paths: list[Path] = []

    @property
    def count(self) -> int:
        return len(self.paths)
