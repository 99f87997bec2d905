"""MSTest framework module."""

from dotnet_test_bridge.runners.mstest.config import MSTestConfig
from dotnet_test_bridge.runners.mstest.manifest import mstest_manifest
from dotnet_test_bridge.runners.mstest.runner import MSTestRunner

__all__ = ["MSTestConfig", "MSTestRunner", "mstest_manifest"]
