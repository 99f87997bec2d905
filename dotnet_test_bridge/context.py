"""Collaborators handed to the engine by the host application."""

import logging
from dataclasses import dataclass, field
from pathlib import Path
from typing import Protocol

from dotnet_test_bridge.models.catalog import TestType


class DiagnosticSink(Protocol):
    """Operator-visible destination for diagnostics."""

    def write(self, message: str) -> None:
        """Record one diagnostic line."""


class RunnerPathStore(Protocol):
    """Persisted "last known runner path" per framework."""

    def get(self, test_type: TestType) -> Path | None:
        """Return the remembered runner path, if any."""

    def set(self, test_type: TestType, path: Path) -> None:
        """Remember a runner path."""


class RunnerPathPrompt(Protocol):
    """Asks the operator to locate a runner executable."""

    def __call__(self, test_type: TestType, executable_name: str) -> Path | None:
        """Return the chosen executable or None when the operator declined."""


@dataclass(kw_only=True)
class LoggingDiagnosticSink:
    """Writes diagnostics to a logger and keeps them for inspection."""

    logger: logging.Logger = field(
        default_factory=lambda: logging.getLogger("dotnet_test_bridge")
    )
    messages: list[str] = field(default_factory=list)

    def write(self, message: str) -> None:
        self.messages.append(message)
        self.logger.warning("%s", message)


@dataclass(kw_only=True)
class InMemoryRunnerPathStore:
    """Runner path store that lives as long as the process."""

    paths: dict[TestType, Path] = field(default_factory=dict)

    def get(self, test_type: TestType) -> Path | None:
        return self.paths.get(test_type)

    def set(self, test_type: TestType, path: Path) -> None:
        self.paths[test_type] = path


@dataclass(frozen=True, kw_only=True)
class EngineContext:
    """Explicit context passed to every engine component.

    Built once by the host and never stored globally.
    """

    diagnostics: DiagnosticSink = field(default_factory=LoggingDiagnosticSink)
    runner_paths: RunnerPathStore = field(default_factory=InMemoryRunnerPathStore)
    prompt_runner_path: RunnerPathPrompt | None = None
