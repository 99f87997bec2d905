"""Read declared types and their custom attributes from a .NET binary.

The binary is parsed as data only, nothing inside it is loaded or executed.
"""

import logging
from collections import defaultdict
from collections.abc import Sequence
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Protocol

import dnfile

from dotnet_test_bridge.metadata.blobs import (
    decode_fixed_arguments,
    generic_type_definition,
)
from dotnet_test_bridge.models.metadata import (
    AssemblyMetadata,
    CustomAttribute,
    MethodMetadata,
    TypeMetadata,
    TypeReference,
    join_name,
)

log = logging.getLogger(__name__)

SIBLING_EXTENSIONS = (".dll", ".exe")


class MetadataReader(Protocol):
    """Anything able to turn a binary path into assembly metadata."""

    def read(self, path: Path) -> AssemblyMetadata | None:
        """Return the metadata of the binary, None when it cannot be read."""


def find_sibling(binary: Path, assembly_name: str) -> Path | None:
    """Locate a referenced assembly next to the binary that references it."""
    for extension in SIBLING_EXTENSIONS:
        candidate = binary.parent / f"{assembly_name}{extension}"
        if candidate.is_file():
            return candidate
    return None


def _text(value: Any) -> str:
    """Normalise a heap string (plain str or heap item) to str."""
    if value is None:
        return ""
    return str(getattr(value, "value", value))


def _blob(value: Any) -> bytes:
    """Normalise a heap blob (plain bytes or heap item) to bytes."""
    if isinstance(value, (bytes, bytearray)):
        return bytes(value)
    raw = getattr(value, "value", None)
    if isinstance(raw, (bytes, bytearray)):
        return bytes(raw)
    return b""


def _table_name(index: Any) -> str | None:
    table = getattr(index, "table", None)
    return getattr(table, "name", None) if table is not None else None


def _rows(tables: Any, name: str) -> Sequence[Any]:
    table = getattr(tables, name, None)
    if table is None:
        return ()
    return getattr(table, "rows", None) or ()


@dataclass(kw_only=True)
class _AssemblyExtractor:
    """Turns the metadata tables of one binary into AssemblyMetadata."""

    path: str
    tables: Any

    def extract(self) -> AssemblyMetadata:
        type_defs = _rows(self.tables, "TypeDef")
        nested = {
            row.NestedClass.row_index for row in _rows(self.tables, "NestedClass")
        }
        method_owner = self._method_owners(type_defs)
        type_attributes, method_attributes = self._custom_attributes(method_owner)

        types: list[TypeMetadata] = []
        for type_index, row in enumerate(type_defs, start=1):
            if type_index in nested:
                continue
            methods = [
                MethodMetadata(
                    name=_text(method.row.Name),
                    attributes=method_attributes.get(method.row_index, ()),
                )
                for method in row.MethodList or ()
                if method.row is not None
            ]
            types.append(
                TypeMetadata(
                    name=_text(row.TypeName),
                    namespace=_text(row.TypeNamespace),
                    base_type=self._reference(row.Extends),
                    attributes=type_attributes.get(type_index, ()),
                    methods=methods,
                )
            )

        return AssemblyMetadata(path=self.path, types=types)

    def _method_owners(self, type_defs: Sequence[Any]) -> dict[int, str]:
        owners: dict[int, str] = {}
        for row in type_defs:
            full_name = join_name(_text(row.TypeNamespace), _text(row.TypeName))
            for method in row.MethodList or ():
                owners[method.row_index] = full_name
        return owners

    def _custom_attributes(
        self, method_owner: dict[int, str]
    ) -> tuple[dict[int, list[CustomAttribute]], dict[int, list[CustomAttribute]]]:
        """Group decoded custom attributes by owning TypeDef and MethodDef row."""
        on_types: dict[int, list[CustomAttribute]] = defaultdict(list)
        on_methods: dict[int, list[CustomAttribute]] = defaultdict(list)

        for row in _rows(self.tables, "CustomAttribute"):
            parent_table = _table_name(row.Parent)
            if parent_table not in ("TypeDef", "MethodDef"):
                continue
            try:
                attribute = self._attribute(row, method_owner)
            except (AttributeError, ValueError) as e:
                log.debug("Skipping unreadable attribute in %s: %s", self.path, e)
                continue
            if attribute is None:
                continue
            target = on_types if parent_table == "TypeDef" else on_methods
            target[row.Parent.row_index].append(attribute)

        return on_types, on_methods

    def _attribute(
        self, row: Any, method_owner: dict[int, str]
    ) -> CustomAttribute | None:
        constructor = row.Type
        constructor_row = constructor.row
        if constructor_row is None:
            return None

        if _table_name(constructor) == "MethodDef":
            type_name = method_owner.get(constructor.row_index)
        else:
            reference = self._reference(constructor_row.Class)
            type_name = reference.full_name if reference is not None else None
        if not type_name:
            return None

        arguments = decode_fixed_arguments(
            _blob(constructor_row.Signature), _blob(row.Value)
        )
        return CustomAttribute(type_name=type_name, arguments=arguments)

    def _reference(self, index: Any) -> TypeReference | None:
        """Resolve a TypeDefOrRef-style index to a type reference."""
        if index is None or getattr(index, "row", None) is None:
            return None

        table = _table_name(index)
        row = index.row
        if table == "TypeDef":
            return TypeReference(
                full_name=join_name(_text(row.TypeNamespace), _text(row.TypeName))
            )
        if table == "TypeRef":
            return TypeReference(
                full_name=join_name(_text(row.TypeNamespace), _text(row.TypeName)),
                assembly=self._resolution_scope(row),
            )
        if table == "TypeSpec":
            return self._generic_definition(row)
        return None

    def _resolution_scope(self, type_ref: Any) -> str | None:
        scope = getattr(type_ref, "ResolutionScope", None)
        if scope is None or scope.row is None:
            return None
        if _table_name(scope) == "AssemblyRef":
            return _text(scope.row.Name)
        if _table_name(scope) == "TypeRef":
            # Nested type reference; it lives where its enclosing type lives.
            return self._resolution_scope(scope.row)
        return None

    def _generic_definition(self, type_spec: Any) -> TypeReference | None:
        target = generic_type_definition(_blob(type_spec.Signature))
        if target is None:
            return None
        table, row_index = target
        rows = _rows(self.tables, table)
        if not 0 < row_index <= len(rows):
            return None
        row = rows[row_index - 1]
        full_name = join_name(_text(row.TypeNamespace), _text(row.TypeName))
        if table == "TypeRef":
            return TypeReference(
                full_name=full_name, assembly=self._resolution_scope(row)
            )
        return TypeReference(full_name=full_name)


@dataclass(frozen=True, kw_only=True)
class DnfileMetadataReader:
    """Metadata reader backed by the dnfile PE/CLR parser."""

    def read(self, path: Path) -> AssemblyMetadata | None:
        """Return the metadata of ``path`` or None when it cannot be read.

        Missing, corrupted and non-.NET binaries all yield None.
        """
        if not path.is_file():
            log.debug("Binary not found: %s", path)
            return None

        try:
            pe = dnfile.dnPE(str(path))
        except Exception as e:
            log.debug("Failed to parse %s: %s", path, e)
            return None

        try:
            if pe.net is None or pe.net.mdtables is None:
                log.debug("No CLR metadata in %s", path)
                return None
            return _AssemblyExtractor(path=str(path), tables=pe.net.mdtables).extract()
        except Exception as e:
            log.debug("Failed to read metadata from %s: %s", path, e)
            return None
        finally:
            pe.close()
