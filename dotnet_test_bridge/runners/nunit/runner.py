"""NUnit console runner."""

import xml.etree.ElementTree as ET
from collections.abc import Sequence
from dataclasses import dataclass
from pathlib import Path

from dotnet_test_bridge.models.catalog import TestType
from dotnet_test_bridge.runners.base import TestRunner, TestSelection
from dotnet_test_bridge.runners.nunit.config import NUnitConfig
from dotnet_test_bridge.runners.nunit.parser import parse_nunit_results
from dotnet_test_bridge.runners.results import ResultsByBinary


@dataclass(frozen=True, kw_only=True)
class NUnitRunner(TestRunner[NUnitConfig]):
    """Runs tests with ``nunit-console.exe`` (NUnit 2.6) and a run-list file."""

    test_type = TestType.NUNIT
    install_glob = "NUnit*"
    executable = "bin/nunit-console.exe"

    def build_arguments(
        self, selection: TestSelection, run_list_path: Path | None, results_path: Path
    ) -> Sequence[str]:
        arguments = [*selection.binaries, f"/runlist={run_list_path}", "/nologo"]
        if self.config.noshadow:
            arguments.append("/noshadow")
        if self.config.framework:
            arguments.append(f"/framework:{self.config.framework}")
        arguments.append(f"/result={results_path}")
        return arguments

    def parse_results(self, root: ET.Element) -> ResultsByBinary:
        return parse_nunit_results(root)
