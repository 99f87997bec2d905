"""Tests for signature and custom attribute blob decoding."""

import struct

import pytest

from dotnet_test_bridge.metadata.blobs import (
    BlobError,
    BlobReader,
    constructor_parameter_types,
    decode_fixed_arguments,
    decode_type_def_or_ref,
    generic_type_definition,
)

# HASTHIS, parameter count, void return, parameter types
STRING_CTOR = b"\x20\x01\x01\x0e"
TWO_STRING_CTOR = b"\x20\x02\x01\x0e\x0e"
INT_CTOR = b"\x20\x01\x01\x08"
BOOL_CTOR = b"\x20\x01\x01\x02"
ENUM_CTOR = b"\x20\x02\x01\x11\x10\x0e"
NO_NAMED_ARGS = b"\x00\x00"


def ser_string(text: str) -> bytes:
    encoded = text.encode("utf-8")
    return bytes([len(encoded)]) + encoded


class TestBlobReader:
    """Tests for BlobReader."""

    @pytest.mark.parametrize(
        ("data", "expected"),
        [
            (b"\x03", 0x03),
            (b"\x7f", 0x7F),
            (b"\x80\x80", 0x80),
            (b"\xae\x57", 0x2E57),
            (b"\xc0\x00\x40\x00", 0x4000),
        ],
    )
    def test_read_compressed(self, data: bytes, expected: int) -> None:
        """Reads one, two and four byte compressed integers."""
        assert BlobReader(data=data).read_compressed() == expected

    def test_read_compressed_rejects_invalid_lead_byte(self) -> None:
        """A lead byte with the top three bits set is invalid."""
        with pytest.raises(BlobError):
            BlobReader(data=b"\xe0").read_compressed()

    def test_read_compressed_rejects_truncated_value(self) -> None:
        """A two byte integer cut after its lead byte is malformed."""
        with pytest.raises(BlobError):
            BlobReader(data=b"\x80").read_compressed()

    def test_read_compressed_advances_offset(self) -> None:
        """The reader moves past the bytes of the integer it read."""
        reader = BlobReader(data=b"\xae\x57\x05")

        assert reader.read_compressed() == 0x2E57
        assert reader.read_compressed() == 0x05
        assert reader.offset == 3

    def test_read_past_end_raises(self) -> None:
        """Truncated blobs raise BlobError."""
        with pytest.raises(BlobError):
            BlobReader(data=b"\x01").read_bytes(2)

    def test_read_ser_string_null(self) -> None:
        """0xFF encodes a null string."""
        assert BlobReader(data=b"\xff").read_ser_string() is None


def test_constructor_parameter_types() -> None:
    """Reports one element type per parameter."""
    assert list(constructor_parameter_types(TWO_STRING_CTOR)) == [0x0E, 0x0E]


def test_decode_single_string_argument() -> None:
    """Decodes a category name."""
    value = b"\x01\x00" + ser_string("Smoke") + NO_NAMED_ARGS

    assert list(decode_fixed_arguments(STRING_CTOR, value)) == ["Smoke"]


def test_decode_two_string_arguments() -> None:
    """Decodes a name/value trait."""
    value = b"\x01\x00" + ser_string("Priority") + ser_string("High") + NO_NAMED_ARGS

    assert list(decode_fixed_arguments(TWO_STRING_CTOR, value)) == ["Priority", "High"]


def test_decode_null_string_as_empty() -> None:
    """A null string argument decodes to an empty string."""
    value = b"\x01\x00\xff" + NO_NAMED_ARGS

    assert list(decode_fixed_arguments(STRING_CTOR, value)) == [""]


def test_decode_primitive_arguments() -> None:
    """Integers and booleans are rendered as text."""
    assert list(
        decode_fixed_arguments(INT_CTOR, b"\x01\x00" + struct.pack("<i", -5))
    ) == ["-5"]
    assert list(decode_fixed_arguments(BOOL_CTOR, b"\x01\x00\x01")) == ["True"]


def test_decode_stops_after_enum_argument() -> None:
    """An enum argument is read as int32 and ends the decoding."""
    value = b"\x01\x00" + struct.pack("<i", 2) + ser_string("ignored")

    assert list(decode_fixed_arguments(ENUM_CTOR, value)) == ["2"]


def test_decode_requires_prolog() -> None:
    """Blobs without the 0x0001 prolog yield no arguments."""
    assert list(decode_fixed_arguments(STRING_CTOR, ser_string("Smoke"))) == []


def test_decode_truncated_value_keeps_decoded_arguments() -> None:
    """Arguments read before the truncation are kept."""
    value = b"\x01\x00" + ser_string("Priority") + b"\x04Hi"

    assert list(decode_fixed_arguments(TWO_STRING_CTOR, value)) == ["Priority"]


def test_decode_type_def_or_ref() -> None:
    """The low two bits select the table."""
    assert decode_type_def_or_ref(0x09) == ("TypeRef", 2)
    assert decode_type_def_or_ref(0x04) == ("TypeDef", 1)


def test_generic_type_definition() -> None:
    """A generic instantiation resolves to its type definition."""
    assert generic_type_definition(b"\x15\x12\x09\x01\x0e") == ("TypeRef", 2)


@pytest.mark.parametrize("signature", [b"", b"\x12\x09", b"\x15\x0e"])
def test_generic_type_definition_rejects_other_signatures(signature: bytes) -> None:
    """Only class or value type generic instantiations are resolved."""
    assert generic_type_definition(signature) is None
