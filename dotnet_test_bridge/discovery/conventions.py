"""Marker attribute tables for the supported test framework conventions."""

from collections.abc import Sequence
from dataclasses import dataclass
from typing import Literal

from dotnet_test_bridge.models.catalog import TestType
from dotnet_test_bridge.models.metadata import (
    CustomAttribute,
    MethodMetadata,
    TypeMetadata,
)

type MarkerScope = Literal["type", "methods"]

MSTEST_NAMESPACE = "Microsoft.VisualStudio.TestTools.UnitTesting"


def _has_marker(attributes: Sequence[CustomAttribute], markers: frozenset[str]) -> bool:
    return any(attribute.type_name in markers for attribute in attributes)


@dataclass(frozen=True, kw_only=True)
class Convention:
    """How one framework marks test classes, test methods and categories.

    ``class_scope`` says where the class-level marker lives: on the type
    itself, or on any of its methods. ``inherited`` enables the base type
    walk. ``legacy_ancestor`` names the convention whose class check the
    legacy discovery applied to ancestors instead of this one's.
    """

    test_type: TestType
    priority: int
    class_markers: frozenset[str]
    class_scope: MarkerScope
    inherited: bool
    method_markers: frozenset[str]
    trait_markers: frozenset[str]
    legacy_ancestor: TestType | None = None

    def marks_type(self, type_: TypeMetadata) -> bool:
        """Check the class-level marker on this type only."""
        if self.class_scope == "type":
            return _has_marker(type_.attributes, self.class_markers)
        return any(
            _has_marker(method.attributes, self.class_markers)
            for method in type_.methods
        )

    def is_test_method(self, method: MethodMetadata) -> bool:
        return _has_marker(method.attributes, self.method_markers)

    def traits(self, method: MethodMetadata) -> list[str]:
        """Trait values contributed by the method's category markers."""
        return [
            "=".join(attribute.arguments)
            for attribute in method.attributes
            if attribute.type_name in self.trait_markers and any(attribute.arguments)
        ]


XUNIT_CONVENTION = Convention(
    test_type=TestType.XUNIT,
    priority=1,
    class_markers=frozenset({"Xunit.FactAttribute", "Xunit.TheoryAttribute"}),
    class_scope="methods",
    inherited=True,
    method_markers=frozenset({"Xunit.FactAttribute", "Xunit.TheoryAttribute"}),
    trait_markers=frozenset({"Xunit.TraitAttribute"}),
    legacy_ancestor=TestType.NUNIT,
)

NUNIT_CONVENTION = Convention(
    test_type=TestType.NUNIT,
    priority=0,
    class_markers=frozenset({"NUnit.Framework.TestFixtureAttribute"}),
    class_scope="type",
    inherited=True,
    method_markers=frozenset(
        {
            "NUnit.Framework.TestAttribute",
            "NUnit.Framework.TestCaseAttribute",
            "NUnit.Framework.TestCaseSourceAttribute",
        }
    ),
    trait_markers=frozenset({"NUnit.Framework.CategoryAttribute"}),
)

MSTEST_CONVENTION = Convention(
    test_type=TestType.MSTEST,
    priority=2,
    class_markers=frozenset({f"{MSTEST_NAMESPACE}.TestClassAttribute"}),
    class_scope="type",
    inherited=False,
    method_markers=frozenset(
        {
            f"{MSTEST_NAMESPACE}.TestMethodAttribute",
            f"{MSTEST_NAMESPACE}.DataTestMethodAttribute",
        }
    ),
    trait_markers=frozenset({f"{MSTEST_NAMESPACE}.TestCategoryAttribute"}),
)

BUILTIN_CONVENTIONS: Sequence[Convention] = (
    NUNIT_CONVENTION,
    XUNIT_CONVENTION,
    MSTEST_CONVENTION,
)
