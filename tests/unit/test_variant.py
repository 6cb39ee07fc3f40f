"""Unit tests for wire variants."""

from __future__ import annotations

import io

import pytest

from nbtx import OtherError, Variant
from nbtx.codec.stream import ByteReader, ByteWriter


def _write(variant: Variant, method: str, value: int | float) -> bytes:
    buffer = io.BytesIO()
    getattr(variant.wire_format(), method)(ByteWriter(buffer), value)
    return buffer.getvalue()


def _read(variant: Variant, method: str, data: bytes) -> int | float:
    return getattr(variant.wire_format(), method)(ByteReader(io.BytesIO(data)))


class TestLayouts:
    """Test primitive layouts per variant."""

    @pytest.mark.parametrize(
        "variant,method,value,data",
        [
            (Variant.BIG_ENDIAN, "write_short", 1, b"\x00\x01"),
            (Variant.LITTLE_ENDIAN, "write_short", 1, b"\x01\x00"),
            (Variant.NETWORK_LITTLE_ENDIAN, "write_short", 1, b"\x01\x00"),
            (Variant.BIG_ENDIAN, "write_int", 1, b"\x00\x00\x00\x01"),
            (Variant.LITTLE_ENDIAN, "write_int", 1, b"\x01\x00\x00\x00"),
            (Variant.NETWORK_LITTLE_ENDIAN, "write_int", 1, b"\x02"),
            (Variant.NETWORK_LITTLE_ENDIAN, "write_int", -1, b"\x01"),
            (Variant.NETWORK_LITTLE_ENDIAN, "write_long", -2, b"\x03"),
            (Variant.BIG_ENDIAN, "write_float", 1.0, b"\x3f\x80\x00\x00"),
            (Variant.NETWORK_LITTLE_ENDIAN, "write_float", 1.0, b"\x00\x00\x80\x3f"),
            (Variant.BIG_ENDIAN, "write_string_length", 5, b"\x00\x05"),
            (Variant.LITTLE_ENDIAN, "write_string_length", 5, b"\x05\x00"),
            (Variant.NETWORK_LITTLE_ENDIAN, "write_string_length", 5, b"\x05"),
            (Variant.BIG_ENDIAN, "write_sequence_length", 3, b"\x00\x00\x00\x03"),
            (Variant.NETWORK_LITTLE_ENDIAN, "write_sequence_length", 3, b"\x06"),
        ],
    )
    def test_layout(self, variant: Variant, method: str, value: int | float, data: bytes) -> None:
        """Test each primitive writes and reads back the expected bytes."""
        assert _write(variant, method, value) == data
        assert _read(variant, method.replace("write_", "read_"), data) == value

    def test_net_string_length_is_unsigned(self) -> None:
        """Test network string lengths are not zigzag encoded."""
        assert _write(Variant.NETWORK_LITTLE_ENDIAN, "write_string_length", 300) == b"\xac\x02"

    def test_negative_sequence_length_reads_as_unsigned(self) -> None:
        """Test a negative length prefix becomes a huge count."""
        assert _read(Variant.BIG_ENDIAN, "read_sequence_length", b"\xff\xff\xff\xff") == 2**32 - 1


class TestRangeChecks:
    """Test out-of-range values are rejected."""

    def test_fixed_int_overflow(self) -> None:
        """Test struct overflow becomes OtherError."""
        with pytest.raises(OtherError):
            _write(Variant.BIG_ENDIAN, "write_short", 40000)

    def test_varint_int_overflow(self) -> None:
        """Test network ints outside 32 bits are rejected."""
        with pytest.raises(OtherError):
            _write(Variant.NETWORK_LITTLE_ENDIAN, "write_int", 2**31)

    def test_string_length_overflow(self) -> None:
        """Test u16 string lengths."""
        with pytest.raises(OtherError):
            _write(Variant.BIG_ENDIAN, "write_string_length", 70000)


def test_wire_format_is_shared() -> None:
    """Test a variant resolves to one strategy object."""
    assert Variant.LITTLE_ENDIAN.wire_format() is Variant.LITTLE_ENDIAN.wire_format()
