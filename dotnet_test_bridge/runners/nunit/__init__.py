"""NUnit framework module."""

from dotnet_test_bridge.runners.nunit.config import NUnitConfig
from dotnet_test_bridge.runners.nunit.manifest import nunit_manifest
from dotnet_test_bridge.runners.nunit.runner import NUnitRunner

__all__ = ["NUnitConfig", "NUnitRunner", "nunit_manifest"]
