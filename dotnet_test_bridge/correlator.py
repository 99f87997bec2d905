"""Join parsed runner results back onto the test catalog."""

import logging
from collections.abc import Sequence

from dotnet_test_bridge.models.catalog import TestClass, TestMethod, iter_methods
from dotnet_test_bridge.models.result import TestResult
from dotnet_test_bridge.runners.results import ResultsByBinary

log = logging.getLogger(__name__)

type ResultKey = tuple[str, str]


def index_results(results: ResultsByBinary) -> dict[ResultKey, TestResult]:
    """Index results by (binary, method name).

    Nested results are indexed too; a top-level result takes precedence over
    a nested one with the same name.
    """
    nested: dict[ResultKey, TestResult] = {}
    top_level: dict[ResultKey, TestResult] = {}
    for binary, binary_results in results.items():
        for result in binary_results:
            top_level[(binary, result.method_name)] = result
            for descendant in result.walk():
                if descendant is not result:
                    nested.setdefault((binary, descendant.method_name), descendant)
    return {**nested, **top_level}


def correlate(
    catalog: Sequence[TestClass], results: ResultsByBinary
) -> Sequence[TestMethod]:
    """Store each matching result on its test method.

    Matching is exact on the binary path and the method's full name.
    Results without a catalog entry are ignored.

    Returns:
        The test methods whose result was updated, in catalog order

    """
    index = index_results(results)
    updated: list[TestMethod] = []

    for method in iter_methods(catalog):
        test_class = method.test_class
        if test_class is None:
            continue
        result = index.get((test_class.dll_path, method.full_name))
        if result is not None:
            method.result = result
            updated.append(method)

    log.debug("Correlated %d of %d result(s)", len(updated), len(index))
    return updated
