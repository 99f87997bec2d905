"""Locate console runner executables on disk."""

import logging
import os
from collections.abc import Sequence
from dataclasses import dataclass
from pathlib import Path

from dotnet_test_bridge.context import EngineContext
from dotnet_test_bridge.models.catalog import TestType

log = logging.getLogger(__name__)

X86_SUFFIX = " (x86)"


class RunnerNotFoundError(Exception):
    """Raised when no runner executable could be located."""


def program_directories() -> Sequence[Path]:
    """Return the 64-bit and 32-bit program directories, without duplicates."""
    candidates: list[str] = []
    for variable in ("ProgramW6432", "ProgramFiles", "ProgramFiles(x86)"):
        if value := os.environ.get(variable):
            candidates.append(value)

    if len(candidates) == 1:
        only = candidates[0]
        if only.endswith(X86_SUFFIX):
            candidates.insert(0, only.removesuffix(X86_SUFFIX))
        else:
            candidates.append(only + X86_SUFFIX)

    directories: list[Path] = []
    for candidate in candidates:
        path = Path(candidate)
        if path not in directories:
            directories.append(path)
    return directories


@dataclass(frozen=True, kw_only=True)
class RunnerLocator:
    """Finds a runner executable for one framework.

    Resolution order: the configured path, the remembered path, the most
    recently modified matching install under the search roots, then the
    operator prompt. A prompted path is remembered for later runs.
    """

    test_type: TestType
    install_glob: str
    executable: str
    context: EngineContext
    configured_path: Path | None = None
    search_roots: Sequence[Path] | None = None

    def locate(self) -> Path:
        """Return the runner executable path.

        Raises:
            RunnerNotFoundError: If every resolution step failed

        """
        for candidate in (
            self.configured_path,
            self.context.runner_paths.get(self.test_type),
        ):
            if candidate is not None and candidate.is_file():
                return candidate

        if (found := self.search()) is not None:
            log.info("Using %s runner at %s", self.test_type, found)
            return found

        if self.context.prompt_runner_path is not None:
            chosen = self.context.prompt_runner_path(self.test_type, self.executable)
            if chosen is not None and chosen.is_file():
                self.context.runner_paths.set(self.test_type, chosen)
                return chosen

        raise RunnerNotFoundError(
            f"{self.test_type} runner '{Path(self.executable).name}' not found. "
            "Configure its path and run again."
        )

    def search(self) -> Path | None:
        """Search the install roots, newest install first."""
        roots = (
            self.search_roots
            if self.search_roots is not None
            else program_directories()
        )
        installs = [
            directory
            for root in roots
            if root.is_dir()
            for directory in root.glob(self.install_glob)
            if directory.is_dir()
        ]
        installs.sort(key=lambda directory: directory.stat().st_mtime, reverse=True)

        for install in installs:
            executable = install / self.executable
            if executable.is_file():
                return executable
        return None
