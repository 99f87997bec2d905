"""Configuration for the MSTest runner."""

from pathlib import Path

from dotnet_test_bridge.config import RunnerConfig


class MSTestConfig(RunnerConfig):
    """Configuration for ``MSTest.exe``."""

    test_settings: Path | None = None
