"""NUnit framework manifest."""

from dotnet_test_bridge.discovery.conventions import NUNIT_CONVENTION
from dotnet_test_bridge.runners.manifest import FrameworkManifest
from dotnet_test_bridge.runners.nunit.config import NUnitConfig
from dotnet_test_bridge.runners.nunit.runner import NUnitRunner

nunit_manifest = FrameworkManifest(
    convention=NUNIT_CONVENTION,
    config_cls=NUnitConfig,
    runner_factory=NUnitRunner.from_config,
)
