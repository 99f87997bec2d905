"""Parser for NUnit 2.x result documents.

Assemblies are ``test-suite`` elements of type ``Assembly`` whose name is
the binary path. Namespaces and fixtures nest further ``test-suite``
elements; parameterized tests are suites of type ``ParameterizedTest``
holding one ``test-case`` per argument set.
"""

import xml.etree.ElementTree as ET
from collections.abc import Iterator
from dataclasses import replace

from dotnet_test_bridge.models.result import TestResult
from dotnet_test_bridge.runners.results import (
    ResultsByBinary,
    child_text,
    parameterized_name,
    parse_duration,
    to_status,
)

PARAMETERIZED_SUITE_TYPES = frozenset({"ParameterizedTest", "Theory", "GenericMethod"})


def case_result(
    element: ET.Element, children: list[TestResult] | None = None
) -> TestResult:
    """Build a result from a test-case or parameterized test-suite element."""
    failure = element.find("failure")
    message = child_text(failure, "message")
    if message is None:
        message = child_text(element, "reason/message")
    return TestResult(
        method_name=element.get("name", ""),
        status=to_status(element.get("result")),
        duration=parse_duration(element.get("time")),
        message=message,
        stack_trace=child_text(failure, "stack-trace"),
        children=children or (),
    )


def suite_results(suite: ET.Element) -> Iterator[TestResult]:
    """Yield the results below a suite, descending through non-test suites."""
    for child in suite.findall("results/*"):
        if child.tag == "test-case":
            yield case_result(child)
        elif child.tag == "test-suite":
            if child.get("type") in PARAMETERIZED_SUITE_TYPES:
                children = [case_result(case) for case in child.iter("test-case")]
                parent = case_result(child, children)
                yield replace(
                    parent,
                    method_name=parameterized_name(children, parent.method_name),
                )
            else:
                yield from suite_results(child)


def parse_nunit_results(root: ET.Element) -> ResultsByBinary:
    """Collect results per assembly suite."""
    results: dict[str, list[TestResult]] = {}
    for suite in root.iter("test-suite"):
        if suite.get("type") != "Assembly":
            continue
        binary = suite.get("name")
        if binary is None:
            continue
        results.setdefault(binary, []).extend(suite_results(suite))
    return results
