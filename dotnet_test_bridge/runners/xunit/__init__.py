"""xUnit framework module."""

from dotnet_test_bridge.runners.xunit.config import XUnitConfig
from dotnet_test_bridge.runners.xunit.manifest import xunit_manifest
from dotnet_test_bridge.runners.xunit.runner import XUnitRunner

__all__ = ["XUnitConfig", "XUnitRunner", "xunit_manifest"]
