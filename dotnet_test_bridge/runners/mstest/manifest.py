"""MSTest framework manifest."""

from dotnet_test_bridge.discovery.conventions import MSTEST_CONVENTION
from dotnet_test_bridge.runners.manifest import FrameworkManifest
from dotnet_test_bridge.runners.mstest.config import MSTestConfig
from dotnet_test_bridge.runners.mstest.runner import MSTestRunner

mstest_manifest = FrameworkManifest(
    convention=MSTEST_CONVENTION,
    config_cls=MSTestConfig,
    runner_factory=MSTestRunner.from_config,
)
