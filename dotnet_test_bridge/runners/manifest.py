"""Framework manifest definition for the plugin system."""

from dataclasses import dataclass
from pathlib import Path
from typing import Protocol

from dotnet_test_bridge.config import CoverageConfig, RunnerConfig
from dotnet_test_bridge.context import EngineContext
from dotnet_test_bridge.discovery.conventions import Convention
from dotnet_test_bridge.runners.base import TestRunner


class RunnerFactory[ConfigT: RunnerConfig](Protocol):
    """Callable creating a runner from its configuration."""

    def __call__(
        self,
        config: ConfigT,
        *,
        context: EngineContext,
        work_dir: Path,
        coverage: CoverageConfig | None = None,
    ) -> TestRunner[ConfigT]: ...


@dataclass(frozen=True, kw_only=True)
class FrameworkManifest[ConfigT: RunnerConfig]:
    """Manifest describing a test framework plugin.

    The manifest ties together the discovery convention, the configuration
    class and the runner factory of one framework so frameworks can be
    loaded by key.
    """

    convention: Convention
    config_cls: type[ConfigT]
    runner_factory: RunnerFactory[ConfigT]

    @property
    def key(self) -> str:
        return self.convention.test_type.value
