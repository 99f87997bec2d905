"""Configuration for the NUnit runner."""

from dotnet_test_bridge.config import RunnerConfig


class NUnitConfig(RunnerConfig):
    """Configuration for the NUnit console runner.

    ``framework`` selects the runtime version (``/framework:net-4.0``).
    """

    noshadow: bool = True
    framework: str | None = None
