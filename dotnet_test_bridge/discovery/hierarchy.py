"""Base type lookup across a binary and the assemblies beside it."""

import logging
from collections.abc import Iterator
from dataclasses import dataclass, field
from pathlib import Path

from dotnet_test_bridge.metadata.reader import MetadataReader, find_sibling
from dotnet_test_bridge.models.metadata import AssemblyMetadata, TypeMetadata

log = logging.getLogger(__name__)

# None stands for the scanned binary itself
type AssemblyKey = str | None


@dataclass(kw_only=True)
class TypeHierarchy:
    """Lookup table of types keyed by (declaring assembly, full name).

    Types of referenced assemblies are read on first use from the binary's
    own directory. A reference that cannot be resolved ends the walk.
    """

    binary: Path
    reader: MetadataReader
    _types: dict[AssemblyKey, dict[str, TypeMetadata]] = field(default_factory=dict)
    _owners: dict[int, AssemblyKey] = field(default_factory=dict)

    @classmethod
    def for_assembly(
        cls, assembly: AssemblyMetadata, reader: MetadataReader
    ) -> "TypeHierarchy":
        hierarchy = cls(binary=Path(assembly.path), reader=reader)
        hierarchy._register(None, assembly)
        return hierarchy

    def _register(self, key: AssemblyKey, assembly: AssemblyMetadata | None) -> None:
        types = {} if assembly is None else {t.full_name: t for t in assembly.types}
        self._types[key] = types
        for type_ in types.values():
            self._owners[id(type_)] = key

    def _assembly_types(self, key: AssemblyKey) -> dict[str, TypeMetadata]:
        if key not in self._types:
            sibling = find_sibling(self.binary, key) if key is not None else None
            if sibling is None:
                log.debug("Referenced assembly %s not found beside %s", key, self.binary)
                self._register(key, None)
            else:
                self._register(key, self.reader.read(sibling))
        return self._types[key]

    def base_of(self, type_: TypeMetadata) -> TypeMetadata | None:
        """Return the metadata of the direct base type, None when unavailable."""
        reference = type_.base_type
        if reference is None:
            return None
        owner = self._owners.get(id(type_))
        key = reference.assembly if reference.assembly is not None else owner
        return self._assembly_types(key).get(reference.full_name)

    def ancestors(self, type_: TypeMetadata) -> Iterator[TypeMetadata]:
        """Walk the base type chain upwards, nearest ancestor first."""
        seen = {id(type_)}
        current = self.base_of(type_)
        while current is not None and id(current) not in seen:
            seen.add(id(current))
            yield current
            current = self.base_of(current)
