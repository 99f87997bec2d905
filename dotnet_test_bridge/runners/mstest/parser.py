"""Parser for MSTest TRX result documents.

Test definitions (``TestDefinitions/UnitTest``) carry the binary and the
method identity; results (``Results/UnitTestResult``) refer to them by id.
Data-driven tests nest one ``InnerResults/UnitTestResult`` per data row below
the aggregate result.
"""

import re
import xml.etree.ElementTree as ET
from dataclasses import dataclass

from dotnet_test_bridge.models.result import TestResult
from dotnet_test_bridge.runners.results import ResultsByBinary, to_status

TIMESPAN_PATTERN = re.compile(
    r"^(?:(?P<days>\d+)\.)?(?P<hours>\d+):(?P<minutes>\d+):(?P<seconds>\d+(?:\.\d+)?)$"
)


@dataclass(frozen=True, kw_only=True)
class _Definition:
    binary: str
    method_name: str


def parse_timespan(value: str | None) -> float:
    """Convert a ``[d.]hh:mm:ss[.fffffff]`` duration to seconds, 0 if invalid."""
    if not value or not (match := TIMESPAN_PATTERN.match(value.strip())):
        return 0.0
    return (
        int(match["days"] or 0) * 86400
        + int(match["hours"]) * 3600
        + int(match["minutes"]) * 60
        + float(match["seconds"])
    )


def _namespace(root: ET.Element) -> str:
    return root.tag[1:].partition("}")[0] if root.tag.startswith("{") else ""


def parse_trx_results(root: ET.Element) -> ResultsByBinary:
    """Collect results per test container."""
    namespace = _namespace(root)

    def q(tag: str) -> str:
        return f"{{{namespace}}}{tag}" if namespace else tag

    definitions: dict[str, _Definition] = {}
    for unit_test in root.iter(q("UnitTest")):
        method = unit_test.find(q("TestMethod"))
        test_id = unit_test.get("id")
        if method is None or test_id is None:
            continue
        binary = method.get("codeBase") or unit_test.get("storage")
        if not binary:
            continue
        class_name = method.get("className", "").partition(",")[0].strip()
        name = method.get("name") or unit_test.get("name", "")
        definitions[test_id] = _Definition(
            binary=binary,
            method_name=f"{class_name}.{name}" if class_name else name,
        )

    def to_result(unit_result: ET.Element, method_name: str) -> TestResult:
        error_info = unit_result.find(f"{q('Output')}/{q('ErrorInfo')}")
        message = error_info.find(q("Message")) if error_info is not None else None
        stack_trace = (
            error_info.find(q("StackTrace")) if error_info is not None else None
        )
        # data-driven rows share the parent's test id
        rows = unit_result.findall(f"{q('InnerResults')}/{q('UnitTestResult')}")
        children = [to_result(row, method_name) for row in rows]
        return TestResult(
            method_name=method_name,
            status=to_status(unit_result.get("outcome")),
            duration=parse_timespan(unit_result.get("duration")),
            message=message.text if message is not None else None,
            stack_trace=stack_trace.text if stack_trace is not None else None,
            children=children,
        )

    results: dict[str, list[TestResult]] = {}
    for unit_result in root.findall(f"{q('Results')}/{q('UnitTestResult')}"):
        if unit_result.get("parentExecutionId"):
            continue
        definition = definitions.get(unit_result.get("testId", ""))
        if definition is None:
            continue
        results.setdefault(definition.binary, []).append(
            to_result(unit_result, definition.method_name)
        )
    return results
