"""Helpers shared by the runner result parsers."""

import logging
import math
import xml.etree.ElementTree as ET
from collections.abc import Callable, Mapping, Sequence
from pathlib import Path

from dotnet_test_bridge.context import DiagnosticSink
from dotnet_test_bridge.models.result import TestExecutionStatus, TestResult

log = logging.getLogger(__name__)

type ResultsByBinary = Mapping[str, Sequence[TestResult]]
type ResultsParser = Callable[[ET.Element], ResultsByBinary]

PARAMETER_LIST_START = "("

STATUS_BY_RESULT: Mapping[str, TestExecutionStatus] = {
    "success": "successful",
    "passed": "successful",
    "pass": "successful",
    "failure": "error",
    "failed": "error",
    "fail": "error",
    "error": "error",
    "notrunnable": "error",
    "timeout": "error",
    "aborted": "error",
    "inconclusive": "inconclusive",
    "ignored": "inconclusive",
    "skipped": "inconclusive",
    "skip": "inconclusive",
    "notexecuted": "inconclusive",
}


def to_status(value: str | None) -> TestExecutionStatus:
    """Map a runner's result string to an execution status."""
    if not value:
        return "not_run"
    return STATUS_BY_RESULT.get(value.strip().lower(), "not_run")


def parse_duration(value: str | None) -> float:
    """Parse a duration in seconds, 0 when absent or not a valid number."""
    try:
        duration = float(value) if value is not None else 0.0
    except ValueError:
        return 0.0
    if math.isnan(duration) or math.isinf(duration) or duration < 0:
        return 0.0
    return duration


def child_text(element: ET.Element | None, path: str) -> str | None:
    """Text of a descendant element, None when the element is missing."""
    if element is None:
        return None
    child = element.find(path)
    return child.text if child is not None else None


def parameterized_name(children: Sequence[TestResult], fallback: str) -> str:
    """Name shared by parameterized cases: the part before the parameter list."""
    if not children:
        return fallback
    return children[0].method_name.partition(PARAMETER_LIST_START)[0]


def load_results(
    path: Path, parser: ResultsParser, diagnostics: DiagnosticSink
) -> ResultsByBinary:
    """Parse a results artifact, yielding nothing when it is missing or broken."""
    if not path.is_file():
        diagnostics.write(f"Test results file does not exist: {path}")
        return {}

    try:
        root = ET.parse(path).getroot()
        return parser(root)
    except Exception as e:
        log.exception("Failed to read test results from %s", path)
        diagnostics.write(f"Failed to read test results from {path}: {e}")
        return {}
