"""MSTest console runner."""

import xml.etree.ElementTree as ET
from collections.abc import Sequence
from dataclasses import dataclass
from pathlib import Path

from dotnet_test_bridge.models.catalog import TestType
from dotnet_test_bridge.runners.base import TestRunner, TestSelection
from dotnet_test_bridge.runners.mstest.config import MSTestConfig
from dotnet_test_bridge.runners.mstest.parser import parse_trx_results
from dotnet_test_bridge.runners.results import ResultsByBinary


@dataclass(frozen=True, kw_only=True)
class MSTestRunner(TestRunner[MSTestConfig]):
    """Runs tests with ``MSTest.exe``.

    MSTest has no run-list input, the selected tests go on the command line.
    """

    test_type = TestType.MSTEST
    install_glob = "Microsoft Visual Studio*"
    executable = "Common7/IDE/MSTest.exe"
    results_extension = ".trx"
    uses_run_list = False

    def build_arguments(
        self, selection: TestSelection, run_list_path: Path | None, results_path: Path
    ) -> Sequence[str]:
        arguments = [f"/testcontainer:{binary}" for binary in selection.binaries]
        arguments.extend(f"/test:{test}" for test in selection.tests)
        if self.config.test_settings is not None:
            arguments.append(f"/testsettings:{self.config.test_settings}")
        arguments.extend([f"/resultsfile:{results_path}", "/nologo"])
        return arguments

    def parse_results(self, root: ET.Element) -> ResultsByBinary:
        return parse_trx_results(root)
