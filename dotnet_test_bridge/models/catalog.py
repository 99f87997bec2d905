"""Models for the discovered test catalog."""

import weakref
from collections.abc import Iterable, Sequence
from dataclasses import dataclass, field
from enum import StrEnum

from dotnet_test_bridge.models.metadata import join_name
from dotnet_test_bridge.models.result import TestExecutionStatus, TestResult

NO_TRAITS = "No Traits"


class TestType(StrEnum):
    """Framework convention that produced a discovery."""

    __test__ = False

    XUNIT = "xunit"
    NUNIT = "nunit"
    MSTEST = "mstest"


@dataclass(kw_only=True, eq=False)
class TestMethod:
    """A discovered test method.

    The owning class is held through a weak reference so a method never
    keeps its class alive on its own.
    """

    __test__ = False

    name: str
    full_name: str
    traits: frozenset[str] = frozenset({NO_TRAITS})
    result: TestResult | None = None
    _owner: weakref.ReferenceType["TestClass"] | None = field(
        default=None, repr=False
    )

    @property
    def test_class(self) -> "TestClass | None":
        """The owning class, or None once it has been released."""
        return self._owner() if self._owner is not None else None

    @property
    def status(self) -> TestExecutionStatus:
        """Last known execution status."""
        return self.result.status if self.result is not None else "not_run"


@dataclass(kw_only=True, eq=False)
class TestClass:
    """A discovered test-bearing type."""

    __test__ = False

    dll_path: str
    name: str
    namespace: str
    test_type: TestType
    methods: list[TestMethod] = field(default_factory=list)

    @property
    def full_name(self) -> str:
        """Namespace-qualified class name."""
        return join_name(self.namespace, self.name)

    def add_method(self, name: str, traits: Iterable[str] = ()) -> TestMethod | None:
        """Attach a test method, returning None when the name is already taken."""
        full_name = f"{self.full_name}.{name}"
        if any(method.full_name == full_name for method in self.methods):
            return None

        trait_set = frozenset(traits)
        method = TestMethod(
            name=name,
            full_name=full_name,
            traits=trait_set if trait_set else frozenset({NO_TRAITS}),
            _owner=weakref.ref(self),
        )
        self.methods.append(method)
        return method


def iter_methods(catalog: Sequence[TestClass]) -> Iterable[TestMethod]:
    """Yield every test method in catalog order."""
    for test_class in catalog:
        yield from test_class.methods
