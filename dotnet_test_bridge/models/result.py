"""Models for parsed test execution results."""

from collections.abc import Iterator, Sequence
from dataclasses import dataclass
from typing import Literal

type TestExecutionStatus = Literal["not_run", "successful", "error", "inconclusive"]


@dataclass(frozen=True, kw_only=True)
class TestResult:
    """Outcome of one executed test as reported by a console runner.

    Hierarchical runners (parameterized tests, theories) report a parent
    result whose ``children`` hold the individual cases. Flat runners never
    populate ``children``.
    """

    __test__ = False

    method_name: str
    status: TestExecutionStatus
    duration: float = 0.0
    message: str | None = None
    stack_trace: str | None = None
    children: Sequence["TestResult"] = ()

    def walk(self) -> Iterator["TestResult"]:
        """Yield this result followed by all nested results, depth first."""
        yield self
        for child in self.children:
            yield from child.walk()
