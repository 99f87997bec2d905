"""xUnit console runner."""

import xml.etree.ElementTree as ET
from collections.abc import Sequence
from dataclasses import dataclass
from pathlib import Path

from dotnet_test_bridge.models.catalog import TestType
from dotnet_test_bridge.runners.base import TestRunner, TestSelection
from dotnet_test_bridge.runners.results import ResultsByBinary
from dotnet_test_bridge.runners.xunit.config import XUnitConfig
from dotnet_test_bridge.runners.xunit.parser import parse_xunit_results


@dataclass(frozen=True, kw_only=True)
class XUnitRunner(TestRunner[XUnitConfig]):
    """Runs tests with ``xunit-console.exe`` and a run-list file."""

    test_type = TestType.XUNIT
    install_glob = "XUnit*"
    executable = "xunit-console.exe"

    def build_arguments(
        self, selection: TestSelection, run_list_path: Path | None, results_path: Path
    ) -> Sequence[str]:
        arguments = [*selection.binaries, f"/runlist={run_list_path}", "/nologo"]
        if self.config.noshadow:
            arguments.append("/noshadow")
        arguments.append(f"/result={results_path}")
        return arguments

    def parse_results(self, root: ET.Element) -> ResultsByBinary:
        return parse_xunit_results(root)
