"""Test orchestrator coordinating runner execution across frameworks."""

import asyncio
import logging
from collections.abc import Mapping, Sequence
from dataclasses import dataclass

from dotnet_test_bridge.correlator import correlate
from dotnet_test_bridge.models.catalog import TestClass, TestMethod, TestType
from dotnet_test_bridge.runners.base import TestRunner, TestSelection
from dotnet_test_bridge.runners.loading import FrameworkNotFoundError

log = logging.getLogger(__name__)


@dataclass(frozen=True, kw_only=True)
class FrameworkRunReport:
    """Outcome of running one framework's selected tests."""

    test_type: TestType
    exit_code: int | None
    updated: Sequence[TestMethod] = ()
    error: str | None = None


def group_by_framework(
    selected: Sequence[TestMethod],
) -> Mapping[TestType, Sequence[TestMethod]]:
    """Group selected methods by their class's convention, keeping order."""
    groups: dict[TestType, list[TestMethod]] = {}
    for method in selected:
        test_class = method.test_class
        if test_class is None:
            continue
        groups.setdefault(test_class.test_type, []).append(method)
    return groups


def build_selection(methods: Sequence[TestMethod]) -> TestSelection:
    binaries: list[str] = []
    for method in methods:
        test_class = method.test_class
        if test_class is not None and test_class.dll_path not in binaries:
            binaries.append(test_class.dll_path)
    return TestSelection(
        binaries=binaries, tests=[method.full_name for method in methods]
    )


@dataclass(frozen=True, kw_only=True)
class TestOrchestrator:
    """Runs selected tests on their framework runners and records results."""

    __test__ = False

    runners: Mapping[TestType, TestRunner]

    async def run_tests(
        self,
        catalog: Sequence[TestClass],
        selected: Sequence[TestMethod],
    ) -> Sequence[FrameworkRunReport]:
        """Run the selected tests, one runner invocation per framework.

        Args:
            catalog: The discovered catalog results are correlated into
            selected: Test methods to run

        Returns:
            One report per framework involved in the selection

        """
        groups = group_by_framework(selected)
        if not groups:
            log.info("No tests selected")
            return []

        log.info("Running tests for %d framework(s)...", len(groups))
        tasks = [
            self._run_framework(test_type, methods, catalog)
            for test_type, methods in groups.items()
        ]

        results = await asyncio.gather(*tasks, return_exceptions=True)
        log.info("Test execution completed")

        return self._process_results(list(groups), results)

    def _process_results(
        self,
        test_types: Sequence[TestType],
        results: Sequence[FrameworkRunReport | BaseException],
    ) -> Sequence[FrameworkRunReport]:
        """Process results from runner execution, handling exceptions."""
        final_results: list[FrameworkRunReport] = []

        for test_type, result in zip(test_types, results, strict=True):
            if isinstance(result, FrameworkRunReport):
                log.info(
                    "Run completed: framework=%s exit_code=%s updated=%d",
                    test_type,
                    result.exit_code,
                    len(result.updated),
                )
                final_results.append(result)
            elif isinstance(result, Exception):
                log.error("%s run failed: %s", test_type, result, exc_info=result)
                final_results.append(
                    FrameworkRunReport(
                        test_type=test_type, exit_code=None, error=str(result)
                    )
                )
            else:
                raise result

        return final_results

    async def _run_framework(
        self,
        test_type: TestType,
        methods: Sequence[TestMethod],
        catalog: Sequence[TestClass],
    ) -> FrameworkRunReport:
        """Run one framework's tests and correlate its results."""
        runner = self.runners.get(test_type)
        if runner is None:
            raise FrameworkNotFoundError(f"No runner registered for {test_type}")

        log.info("Running %d %s test(s)", len(methods), test_type)
        outcome = await runner.run(build_selection(methods))
        updated = correlate(catalog, outcome.results)

        return FrameworkRunReport(
            test_type=test_type, exit_code=outcome.exit_code, updated=updated
        )
