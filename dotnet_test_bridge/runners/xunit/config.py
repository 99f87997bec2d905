"""Configuration for the xUnit runner."""

from dotnet_test_bridge.config import RunnerConfig


class XUnitConfig(RunnerConfig):
    """Configuration for the xUnit console runner."""

    noshadow: bool = True
