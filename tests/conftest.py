"""Shared test fixtures for wrtforge."""

from __future__ import annotations

from collections.abc import Callable, Sequence
from pathlib import Path

import pytest

from wrtforge.config import ForgeSettings
from wrtforge.core.runner import CommandError, CommandResult

Effect = Callable[[list[str], Path | None], None]


class FakeRunner:
    """Recording ``CommandRunner`` for git / feeds / make invocations.

    Commands are matched by argv prefix.  ``fail`` makes matching commands
    exit non-zero; ``on`` registers a side effect run for successful
    matching commands; ``output`` sets captured stdout.
    """

    def __init__(self) -> None:
        self.calls: list[tuple[list[str], Path | None]] = []
        self._failures: list[tuple[tuple[str, ...], int]] = []
        self._effects: list[tuple[tuple[str, ...], Effect]] = []
        self._outputs: list[tuple[tuple[str, ...], str]] = []

    def fail(self, *prefix: str, returncode: int = 1) -> None:
        self._failures.append((prefix, returncode))

    def on(self, *prefix: str, effect: Effect) -> None:
        self._effects.append((prefix, effect))

    def output(self, *prefix: str, stdout: str) -> None:
        self._outputs.append((prefix, stdout))

    @staticmethod
    def _matches(argv: list[str], prefix: tuple[str, ...]) -> bool:
        return tuple(argv[: len(prefix)]) == prefix

    def run(
        self,
        args: Sequence[str | Path],
        *,
        cwd: Path | None = None,
        check: bool = True,
        capture: bool = False,
    ) -> CommandResult:
        argv = [str(a) for a in args]
        self.calls.append((argv, cwd))

        returncode = 0
        for prefix, code in self._failures:
            if self._matches(argv, prefix):
                returncode = code
        stdout = ""
        if returncode == 0:
            for prefix, effect in self._effects:
                if self._matches(argv, prefix):
                    effect(argv, cwd)
            for prefix, text in self._outputs:
                if self._matches(argv, prefix):
                    stdout = text

        if check and returncode != 0:
            raise CommandError(argv, returncode)
        return CommandResult(argv=argv, returncode=returncode, stdout=stdout)

    @property
    def commands(self) -> list[str]:
        """Every recorded argv joined with spaces, in call order."""
        return [" ".join(argv) for argv, _ in self.calls]

    def count(self, *prefix: str) -> int:
        return sum(1 for argv, _ in self.calls if self._matches(argv, prefix))


def _clone_effect(argv: list[str], cwd: Path | None) -> None:
    """``git clone ... <dir>`` creates ``<dir>/.git``."""
    (Path(argv[-1]) / ".git").mkdir(parents=True, exist_ok=True)


def _feeds_update_effect(argv: list[str], cwd: Path | None) -> None:
    """``feeds update`` materializes the vendored golang tree."""
    assert cwd is not None
    golang = Path(cwd) / "feeds" / "splitdns" / "golang"
    golang.mkdir(parents=True, exist_ok=True)
    (golang / "golang-package.mk").write_text("# vendored\n")
    (Path(cwd) / "feeds" / "packages" / "lang" / "golang").mkdir(parents=True, exist_ok=True)


def _feeds_install_effect(argv: list[str], cwd: Path | None) -> None:
    """``feeds install -p <feed> <pkg>...`` links each package with a Makefile."""
    assert cwd is not None
    if "-p" not in argv or "-a" in argv:
        return
    feed = argv[argv.index("-p") + 1]
    for package in argv[argv.index("-p") + 2:]:
        tree = Path(cwd) / "package" / "feeds" / feed / package
        tree.mkdir(parents=True, exist_ok=True)
        (tree / "Makefile").write_text(f"# {package} from {feed}\n")


@pytest.fixture
def runner() -> FakeRunner:
    """A FakeRunner with no behavior configured."""
    return FakeRunner()


@pytest.fixture
def openwrt_runner(runner: FakeRunner) -> FakeRunner:
    """A FakeRunner that simulates git clone and the feeds tool."""
    runner.on("git", "clone", effect=_clone_effect)
    runner.on("./scripts/feeds", "update", effect=_feeds_update_effect)
    runner.on("./scripts/feeds", "install", effect=_feeds_install_effect)
    runner.output("git", "rev-parse", "HEAD", stdout="0123456789abcdef0123456789abcdef01234567\n")
    return runner


@pytest.fixture
def buildroot(tmp_path: Path) -> Path:
    """An existing (empty) buildroot directory."""
    path = tmp_path / "workdir" / "openwrt"
    path.mkdir(parents=True)
    return path


@pytest.fixture
def config_file(tmp_path: Path) -> Path:
    path = tmp_path / "configs" / "latest.config"
    path.parent.mkdir(parents=True)
    path.write_text("CONFIG_TARGET_x86=y\nCONFIG_TARGET_x86_64=y\n")
    return path


@pytest.fixture
def settings(tmp_path: Path, config_file: Path) -> ForgeSettings:
    """Settings rooted in a temp directory, independent of the environment."""
    return ForgeSettings(
        _env_file=None,
        workdir=tmp_path / "workdir",
        config_file=config_file,
        log_dir=tmp_path / "logs",
        jobs=2,
    )
