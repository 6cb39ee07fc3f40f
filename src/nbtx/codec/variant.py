"""Wire encoding variants.

NBT exists in three flavours that share one grammar but differ in byte order
and in how integers and length prefixes are written:

| Variant               | Short      | Int / Long     | Float / Double | String length | Sequence length |
|-----------------------|------------|----------------|----------------|---------------|-----------------|
| BIG_ENDIAN            | BE fixed   | BE fixed       | BE fixed       | u16 BE        | i32 BE          |
| LITTLE_ENDIAN         | LE fixed   | LE fixed       | LE fixed       | u16 LE        | i32 LE          |
| NETWORK_LITTLE_ENDIAN | LE fixed   | zigzag varint  | LE fixed       | varint u32    | zigzag varint   |

A variant is resolved to a WireFormat once per encode/decode call.
"""

from __future__ import annotations

import enum
import struct

from ..exceptions import OtherError
from .stream import ByteReader, ByteWriter, zigzag_decode, zigzag_encode


class WireFormat:
    """Fixed-width primitive rules for one byte order.

    Subclasses override the integer and length rules; the decoder and encoder
    call these methods without knowing which variant is active.
    """

    def __init__(self, byte_order: str) -> None:
        """Precompile the struct formats for the given byte order.

        Args:
            byte_order: ``">"`` for big-endian, ``"<"`` for little-endian
        """
        self._short = struct.Struct(byte_order + "h")
        self._int = struct.Struct(byte_order + "i")
        self._long = struct.Struct(byte_order + "q")
        self._float = struct.Struct(byte_order + "f")
        self._double = struct.Struct(byte_order + "d")
        self._string_length = struct.Struct(byte_order + "H")

    def read_short(self, reader: ByteReader) -> int:
        return self._short.unpack(reader.read_exact(2))[0]

    def read_int(self, reader: ByteReader) -> int:
        return self._int.unpack(reader.read_exact(4))[0]

    def read_long(self, reader: ByteReader) -> int:
        return self._long.unpack(reader.read_exact(8))[0]

    def read_float(self, reader: ByteReader) -> float:
        return self._float.unpack(reader.read_exact(4))[0]

    def read_double(self, reader: ByteReader) -> float:
        return self._double.unpack(reader.read_exact(8))[0]

    def read_string_length(self, reader: ByteReader) -> int:
        return self._string_length.unpack(reader.read_exact(2))[0]

    def read_sequence_length(self, reader: ByteReader) -> int:
        """Read a sequence length: a signed 32-bit value reinterpreted as unsigned."""
        return self._int.unpack(reader.read_exact(4))[0] & 0xFFFFFFFF

    def write_short(self, writer: ByteWriter, value: int) -> None:
        writer.write_struct(self._short, value)

    def write_int(self, writer: ByteWriter, value: int) -> None:
        writer.write_struct(self._int, value)

    def write_long(self, writer: ByteWriter, value: int) -> None:
        writer.write_struct(self._long, value)

    def write_float(self, writer: ByteWriter, value: float) -> None:
        writer.write_struct(self._float, value)

    def write_double(self, writer: ByteWriter, value: float) -> None:
        writer.write_struct(self._double, value)

    def write_string_length(self, writer: ByteWriter, length: int) -> None:
        writer.write_struct(self._string_length, length)

    def write_sequence_length(self, writer: ByteWriter, length: int) -> None:
        writer.write_struct(self._int, length)


class NetworkWireFormat(WireFormat):
    """Little-endian rules with varint-encoded ints, longs and length prefixes.

    Short, Float and Double keep their fixed little-endian width.
    """

    def __init__(self) -> None:
        super().__init__("<")

    def read_int(self, reader: ByteReader) -> int:
        return zigzag_decode(reader.read_varint(32))

    def read_long(self, reader: ByteReader) -> int:
        return zigzag_decode(reader.read_varint(64))

    def read_string_length(self, reader: ByteReader) -> int:
        return reader.read_varint(32)

    def read_sequence_length(self, reader: ByteReader) -> int:
        return self.read_int(reader) & 0xFFFFFFFF

    def write_int(self, writer: ByteWriter, value: int) -> None:
        _check_signed(value, 32)
        writer.write_varint(zigzag_encode(value, 32), 32)

    def write_long(self, writer: ByteWriter, value: int) -> None:
        _check_signed(value, 64)
        writer.write_varint(zigzag_encode(value, 64), 64)

    def write_string_length(self, writer: ByteWriter, length: int) -> None:
        writer.write_varint(length, 32)

    def write_sequence_length(self, writer: ByteWriter, length: int) -> None:
        self.write_int(writer, length)


def _check_signed(value: int, num_bits: int) -> None:
    half = 1 << (num_bits - 1)
    if not -half <= value < half:
        raise OtherError(f"Value {value} does not fit in a signed {num_bits}-bit integer")


class Variant(enum.Enum):
    """The three concrete NBT wire encodings."""

    BIG_ENDIAN = "be"
    LITTLE_ENDIAN = "le"
    NETWORK_LITTLE_ENDIAN = "net"

    def wire_format(self) -> WireFormat:
        """Return the strategy object implementing this variant."""
        return _WIRE_FORMATS[self]


_WIRE_FORMATS = {
    Variant.BIG_ENDIAN: WireFormat(">"),
    Variant.LITTLE_ENDIAN: WireFormat("<"),
    Variant.NETWORK_LITTLE_ENDIAN: NetworkWireFormat(),
}
