"""Parser for the xUnit console runner results document.

Structure::

    <Module name="C:\\build\\Tests.dll">
      <Class name="NS.Fixture">
        <results>
          <test-case name="NS.Fixture.Method" result="Success" time="0.01"/>
          <test-suite name="NS.Fixture.Theory" result="Failure" time="0.2">
            <results>
              <test-case name="NS.Fixture.Theory(1)" result="Failure" time="0.1">
                <failure>
                  <message>Assert.Equal() Failure</message>
                  <stack-trace>at NS.Fixture.Theory(Int32 value)</stack-trace>
                </failure>
              </test-case>
            </results>
          </test-suite>
        </results>
      </Class>
    </Module>
"""

import xml.etree.ElementTree as ET
from dataclasses import replace

from dotnet_test_bridge.models.result import TestResult
from dotnet_test_bridge.runners.results import (
    ResultsByBinary,
    child_text,
    parameterized_name,
    parse_duration,
    to_status,
)


def case_result(
    element: ET.Element, children: list[TestResult] | None = None
) -> TestResult:
    """Build a result from a test-case or test-suite element."""
    failure = element.find("failure")
    return TestResult(
        method_name=element.get("name", ""),
        status=to_status(element.get("result")),
        duration=parse_duration(element.get("time")),
        message=child_text(failure, "message"),
        stack_trace=child_text(failure, "stack-trace"),
        children=children or (),
    )


def suite_result(suite: ET.Element) -> TestResult:
    """Build a parent result whose name is shared by its parameterized cases."""
    children = [case_result(case) for case in suite.findall("results/test-case")]
    parent = case_result(suite, children)
    return replace(
        parent, method_name=parameterized_name(children, parent.method_name)
    )


def parse_xunit_results(root: ET.Element) -> ResultsByBinary:
    """Collect results per module, flat cases before suites."""
    results: dict[str, list[TestResult]] = {}
    for module in root.iter("Module"):
        binary = module.get("name")
        if binary is None:
            continue
        entries = results.setdefault(binary, [])
        containers = [
            container
            for test_class in module.iter("Class")
            for container in test_class.findall("results")
        ]
        entries.extend(
            case_result(case)
            for container in containers
            for case in container.findall("test-case")
        )
        entries.extend(
            suite_result(suite)
            for container in containers
            for suite in container.findall("test-suite")
        )
    return results
