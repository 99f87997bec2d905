"""Decoding of ECMA-335 signature and custom attribute blobs.

Only the subset needed to read marker attribute arguments is supported:
fixed arguments of primitive, string and enum types. Decoding stops at the
first argument whose type is not understood and returns what was read so far.
"""

import struct
from collections.abc import Sequence
from dataclasses import dataclass

from dnfile.utils import read_compressed_int

ELEMENT_BOOLEAN = 0x02
ELEMENT_CHAR = 0x03
ELEMENT_STRING = 0x0E
ELEMENT_VALUETYPE = 0x11
ELEMENT_CLASS = 0x12
ELEMENT_GENERICINST = 0x15

# element type -> struct format (little endian)
PRIMITIVE_FORMATS = {
    0x04: "<b",
    0x05: "<B",
    0x06: "<h",
    0x07: "<H",
    0x08: "<i",
    0x09: "<I",
    0x0A: "<q",
    0x0B: "<Q",
    0x0C: "<f",
    0x0D: "<d",
}

CUSTOM_ATTRIBUTE_PROLOG = b"\x01\x00"
NULL_STRING = 0xFF


class BlobError(ValueError):
    """Raised when a blob is truncated or malformed."""


@dataclass(kw_only=True)
class BlobReader:
    """Sequential reader over a metadata blob."""

    data: bytes
    offset: int = 0

    def read_byte(self) -> int:
        if self.offset >= len(self.data):
            raise BlobError("Unexpected end of blob")
        value = self.data[self.offset]
        self.offset += 1
        return value

    def read_bytes(self, count: int) -> bytes:
        end = self.offset + count
        if end > len(self.data):
            raise BlobError("Unexpected end of blob")
        chunk = self.data[self.offset : end]
        self.offset = end
        return chunk

    def read_compressed(self) -> int:
        """Read a compressed unsigned integer (ECMA-335 II.23.2)."""
        decoded = read_compressed_int(self.data[self.offset : self.offset + 4])
        if decoded is None:
            raise BlobError(f"Invalid compressed integer at offset {self.offset}")
        value, length = decoded
        self.offset += length
        return value

    def read_ser_string(self) -> str | None:
        """Read a SerString: packed length then UTF-8, 0xFF meaning null."""
        if self.offset < len(self.data) and self.data[self.offset] == NULL_STRING:
            self.offset += 1
            return None
        length = self.read_compressed()
        return self.read_bytes(length).decode("utf-8", errors="replace")


def decode_type_def_or_ref(encoded: int) -> tuple[str, int]:
    """Split a TypeDefOrRefOrSpecEncoded value into (table name, row index)."""
    tables = ("TypeDef", "TypeRef", "TypeSpec")
    tag = encoded & 0x03
    if tag >= len(tables):
        raise BlobError(f"Invalid TypeDefOrRef tag {tag}")
    return tables[tag], encoded >> 2


def constructor_parameter_types(signature: bytes) -> Sequence[int]:
    """Return the leading element type of each constructor parameter.

    Parameters whose type needs more than one byte to describe are reported
    by their leading element type; decoding of the argument blob stops there.
    """
    reader = BlobReader(data=signature)
    reader.read_byte()  # calling convention
    count = reader.read_compressed()
    reader.read_byte()  # return type, always void for constructors
    types: list[int] = []
    for _ in range(count):
        element = reader.read_byte()
        types.append(element)
        if element == ELEMENT_VALUETYPE:
            reader.read_compressed()
        elif element not in PRIMITIVE_FORMATS and element not in (
            ELEMENT_BOOLEAN,
            ELEMENT_CHAR,
            ELEMENT_STRING,
        ):
            break
    return types


def decode_fixed_arguments(signature: bytes, value: bytes) -> Sequence[str]:
    """Decode the textual values of a custom attribute's fixed arguments."""
    if not value.startswith(CUSTOM_ATTRIBUTE_PROLOG):
        return ()

    try:
        parameter_types = constructor_parameter_types(signature)
    except BlobError:
        return ()

    reader = BlobReader(data=value, offset=len(CUSTOM_ATTRIBUTE_PROLOG))
    arguments: list[str] = []
    try:
        for element in parameter_types:
            if element == ELEMENT_STRING:
                text = reader.read_ser_string()
                arguments.append(text if text is not None else "")
            elif element == ELEMENT_BOOLEAN:
                arguments.append("True" if reader.read_byte() else "False")
            elif element == ELEMENT_CHAR:
                arguments.append(reader.read_bytes(2).decode("utf-16-le"))
            elif element in PRIMITIVE_FORMATS:
                fmt = PRIMITIVE_FORMATS[element]
                (number,) = struct.unpack(fmt, reader.read_bytes(struct.calcsize(fmt)))
                arguments.append(str(number))
            elif element == ELEMENT_VALUETYPE:
                # Enum with unknown underlying type; read as int32 and stop.
                (number,) = struct.unpack("<i", reader.read_bytes(4))
                arguments.append(str(number))
                break
            else:
                break
    except BlobError:
        return arguments
    return arguments


def generic_type_definition(signature: bytes) -> tuple[str, int] | None:
    """Return the (table, row) of the generic type a TypeSpec instantiates."""
    reader = BlobReader(data=signature)
    try:
        if reader.read_byte() != ELEMENT_GENERICINST:
            return None
        if reader.read_byte() not in (ELEMENT_CLASS, ELEMENT_VALUETYPE):
            return None
        return decode_type_def_or_ref(reader.read_compressed())
    except BlobError:
        return None
