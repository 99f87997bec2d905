"""Models describing the structural metadata read from a compiled assembly."""

from collections.abc import Sequence

from pydantic import Field

from dotnet_test_bridge.models.base import Model


def join_name(namespace: str, name: str) -> str:
    """Join a namespace and a simple name the way metadata full names read."""
    return f"{namespace}.{name}" if namespace else name


class CustomAttribute(Model):
    """A custom attribute applied to a type or method."""

    type_name: str = Field(..., description="Full name of the attribute type")
    arguments: Sequence[str] = Field(
        default_factory=tuple,
        description="Textual values of the decoded constructor arguments",
    )


class MethodMetadata(Model):
    """A method declared on a type."""

    name: str
    attributes: Sequence[CustomAttribute] = Field(default_factory=tuple)


class TypeReference(Model):
    """Reference to a type, possibly declared in another assembly."""

    full_name: str
    assembly: str | None = Field(
        default=None,
        description="Referenced assembly name, None when declared in the same binary",
    )


class TypeMetadata(Model):
    """A top-level type declared in an assembly."""

    name: str
    namespace: str = ""
    base_type: TypeReference | None = None
    attributes: Sequence[CustomAttribute] = Field(default_factory=tuple)
    methods: Sequence[MethodMetadata] = Field(default_factory=tuple)

    @property
    def full_name(self) -> str:
        """Namespace-qualified type name."""
        return join_name(self.namespace, self.name)


class AssemblyMetadata(Model):
    """Everything the discovery needs to know about one binary."""

    path: str
    types: Sequence[TypeMetadata] = Field(default_factory=tuple)
