"""Tests for runner executable lookup."""

import os
from pathlib import Path
from unittest.mock import Mock

import pytest

from dotnet_test_bridge.context import EngineContext, InMemoryRunnerPathStore
from dotnet_test_bridge.models.catalog import TestType
from dotnet_test_bridge.runners.locator import (
    RunnerLocator,
    RunnerNotFoundError,
    program_directories,
)

EXECUTABLE = "bin/nunit-console.exe"


def install(root: Path, name: str, mtime: float) -> Path:
    """Create an install directory holding the runner executable."""
    executable = root / name / EXECUTABLE
    executable.parent.mkdir(parents=True)
    executable.touch()
    os.utime(root / name, (mtime, mtime))
    return executable


def make_locator(
    context: EngineContext,
    search_roots: list[Path],
    configured_path: Path | None = None,
) -> RunnerLocator:
    return RunnerLocator(
        test_type=TestType.NUNIT,
        install_glob="NUnit*",
        executable=EXECUTABLE,
        context=context,
        configured_path=configured_path,
        search_roots=search_roots,
    )


class TestRunnerLocator:
    """Tests for RunnerLocator.locate."""

    def test_prefers_configured_path(self, tmp_path: Path) -> None:
        """An existing configured path wins over everything else."""
        configured = tmp_path / "custom" / "nunit-console.exe"
        configured.parent.mkdir()
        configured.touch()
        install(tmp_path, "NUnit 2.6", 2_000_000)

        locator = make_locator(EngineContext(), [tmp_path], configured)

        assert locator.locate() == configured

    def test_uses_remembered_path(self, tmp_path: Path) -> None:
        """The remembered path is used when nothing is configured."""
        remembered = tmp_path / "remembered.exe"
        remembered.touch()
        store = InMemoryRunnerPathStore(paths={TestType.NUNIT: remembered})
        context = EngineContext(runner_paths=store)

        locator = make_locator(context, [tmp_path], tmp_path / "missing.exe")

        assert locator.locate() == remembered

    def test_picks_most_recent_install(self, tmp_path: Path) -> None:
        """The most recently modified matching install is chosen."""
        older = tmp_path / "old-root"
        newer = tmp_path / "new-root"
        older.mkdir()
        newer.mkdir()
        install(older, "NUnit 2.5", 1_000_000)
        latest = install(newer, "NUnit 2.6", 2_000_000)
        install(newer, "NUnit 2.4", 500_000)
        (newer / "NUnit 3.0").mkdir()
        os.utime(newer / "NUnit 3.0", (3_000_000, 3_000_000))

        locator = make_locator(EngineContext(), [older, newer])

        assert locator.locate() == latest

    def test_prompts_and_remembers_choice(self, tmp_path: Path) -> None:
        """The prompted path is returned and stored for later runs."""
        chosen = tmp_path / "chosen.exe"
        chosen.touch()
        prompt = Mock(return_value=chosen)
        store = InMemoryRunnerPathStore()
        context = EngineContext(runner_paths=store, prompt_runner_path=prompt)

        locator = make_locator(context, [tmp_path / "empty"])

        assert locator.locate() == chosen
        assert store.get(TestType.NUNIT) == chosen
        prompt.assert_called_once_with(TestType.NUNIT, EXECUTABLE)

    def test_raises_when_not_found(self, tmp_path: Path) -> None:
        """Fails once every resolution step is exhausted."""
        context = EngineContext(prompt_runner_path=Mock(return_value=None))

        with pytest.raises(RunnerNotFoundError) as exc_info:
            make_locator(context, [tmp_path]).locate()

        assert "nunit-console.exe" in str(exc_info.value)


class TestProgramDirectories:
    """Tests for program_directories."""

    @pytest.fixture(autouse=True)
    def clear_environment(self, monkeypatch: pytest.MonkeyPatch) -> None:
        for variable in ("ProgramW6432", "ProgramFiles", "ProgramFiles(x86)"):
            monkeypatch.delenv(variable, raising=False)

    def test_derives_x86_twin(self, monkeypatch: pytest.MonkeyPatch) -> None:
        """With a single directory known, the 32-bit twin is derived."""
        monkeypatch.setenv("ProgramFiles", "C:\\Program Files")

        assert program_directories() == [
            Path("C:\\Program Files"),
            Path("C:\\Program Files (x86)"),
        ]

    def test_derives_64_bit_twin(self, monkeypatch: pytest.MonkeyPatch) -> None:
        """A lone x86 directory yields the 64-bit one first."""
        monkeypatch.setenv("ProgramFiles(x86)", "C:\\Program Files (x86)")

        assert program_directories() == [
            Path("C:\\Program Files"),
            Path("C:\\Program Files (x86)"),
        ]

    def test_removes_duplicates(self, monkeypatch: pytest.MonkeyPatch) -> None:
        """The same directory reported twice is listed once."""
        monkeypatch.setenv("ProgramW6432", "C:\\Program Files")
        monkeypatch.setenv("ProgramFiles", "C:\\Program Files")
        monkeypatch.setenv("ProgramFiles(x86)", "C:\\Program Files (x86)")

        assert program_directories() == [
            Path("C:\\Program Files"),
            Path("C:\\Program Files (x86)"),
        ]

    def test_empty_without_environment(self) -> None:
        """No environment gives no directories."""
        assert program_directories() == []
