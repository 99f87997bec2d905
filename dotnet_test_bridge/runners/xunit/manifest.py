"""xUnit framework manifest."""

from dotnet_test_bridge.discovery.conventions import XUNIT_CONVENTION
from dotnet_test_bridge.runners.manifest import FrameworkManifest
from dotnet_test_bridge.runners.xunit.config import XUnitConfig
from dotnet_test_bridge.runners.xunit.runner import XUnitRunner

xunit_manifest = FrameworkManifest(
    convention=XUNIT_CONVENTION,
    config_cls=XUnitConfig,
    runner_factory=XUnitRunner.from_config,
)
