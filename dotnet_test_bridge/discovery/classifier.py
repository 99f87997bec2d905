"""Decide whether a type is a test class and under which convention."""

from collections.abc import Sequence
from dataclasses import dataclass

from dotnet_test_bridge.discovery.conventions import BUILTIN_CONVENTIONS, Convention
from dotnet_test_bridge.discovery.hierarchy import TypeHierarchy
from dotnet_test_bridge.models.catalog import TestType
from dotnet_test_bridge.models.metadata import TypeMetadata


@dataclass(frozen=True, kw_only=True)
class Classifier:
    """Applies conventions to types, lowest priority value first.

    With ``legacy_xunit_ancestry`` set, a convention carrying a
    ``legacy_ancestor`` checks ancestors with that other convention's class
    marker (the xUnit ancestor walk of older releases looked for the NUnit
    fixture marker). Off by default.
    """

    conventions: Sequence[Convention] = BUILTIN_CONVENTIONS
    legacy_xunit_ancestry: bool = False

    def classify(
        self, type_: TypeMetadata, hierarchy: TypeHierarchy
    ) -> Convention | None:
        """Return the convention that makes ``type_`` a test class, if any."""
        for convention in sorted(self.conventions, key=lambda c: c.priority):
            if self._matches(convention, type_, hierarchy):
                return convention
        return None

    def _matches(
        self, convention: Convention, type_: TypeMetadata, hierarchy: TypeHierarchy
    ) -> bool:
        if convention.marks_type(type_):
            return True
        if not convention.inherited:
            return False

        ancestor_check = self._ancestor_convention(convention)
        return any(
            ancestor_check.marks_type(ancestor)
            for ancestor in hierarchy.ancestors(type_)
        )

    def _ancestor_convention(self, convention: Convention) -> Convention:
        if self.legacy_xunit_ancestry and convention.legacy_ancestor is not None:
            legacy = self.convention_for(convention.legacy_ancestor)
            if legacy is not None:
                return legacy
        return convention

    def convention_for(self, test_type: TestType) -> Convention | None:
        return next(
            (c for c in self.conventions if c.test_type == test_type), None
        )
