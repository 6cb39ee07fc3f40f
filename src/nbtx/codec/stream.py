"""Byte-level reading and writing utilities.

This module provides the low-level primitives the codec is built on: a
forward-only reader over a binary source and a writer over a binary sink.
Both translate I/O failures into the nbtx error hierarchy.
"""

from __future__ import annotations

import struct
from typing import BinaryIO

from ..exceptions import NbtIOError, OtherError

# Upper bound for a single read from the source. Length prefixes come from
# untrusted input, so large payloads are assembled chunk by chunk.
READ_CHUNK_SIZE = 64 * 1024


def zigzag_encode(value: int, num_bits: int) -> int:
    """Map a signed integer onto an unsigned one so small magnitudes stay small."""
    return ((value << 1) ^ (value >> (num_bits - 1))) & ((1 << num_bits) - 1)


def zigzag_decode(value: int) -> int:
    """Inverse of zigzag_encode."""
    return (value >> 1) ^ -(value & 1)


class ByteReader:
    """Reads primitives from a forward-only binary source.

    Example:
        >>> reader = ByteReader(io.BytesIO(b"\\x0a\\x00\\x00"))
        >>> reader.read_u8()
        10
    """

    def __init__(self, source: BinaryIO) -> None:
        """Initialize a reader over the given source.

        Args:
            source: Object with a ``read(n)`` method returning bytes
        """
        self._source = source
        self._position = 0

    def read_exact(self, num_bytes: int) -> bytes:
        """Read exactly ``num_bytes`` bytes.

        Args:
            num_bytes: Number of bytes to read

        Returns:
            Bytes read from the source

        Raises:
            NbtIOError: If the source is exhausted or fails
        """
        chunks = []
        remaining = num_bytes
        while remaining > 0:
            chunk = self._read(min(remaining, READ_CHUNK_SIZE))
            if not chunk:
                raise NbtIOError(
                    EOFError(
                        f"Unexpected end of data: need {num_bytes}, "
                        f"have {num_bytes - remaining}"
                    )
                )
            chunks.append(chunk)
            remaining -= len(chunk)
        self._position += num_bytes
        return b"".join(chunks)

    def read_u8(self) -> int:
        return self.read_exact(1)[0]

    def read_varint(self, num_bits: int) -> int:
        """Read an unsigned LEB128 varint of at most ``num_bits`` bits.

        Args:
            num_bits: Width of the encoded integer (32 or 64)

        Returns:
            Unsigned integer value, masked to ``num_bits``

        Raises:
            OtherError: If the varint is longer than the width allows
            NbtIOError: If the source is exhausted
        """
        max_bytes = (num_bits + 6) // 7
        result = 0
        for i in range(max_bytes):
            byte = self.read_u8()
            result |= (byte & 0x7F) << (7 * i)
            if not byte & 0x80:
                return result & ((1 << num_bits) - 1)
        raise OtherError(f"Varint exceeds {max_bytes} bytes for a {num_bits}-bit value")

    def position(self) -> int:
        """Return the number of bytes consumed so far."""
        return self._position

    def _read(self, num_bytes: int) -> bytes:
        try:
            return self._source.read(num_bytes)
        except OSError as e:
            raise NbtIOError(e) from e


class ByteWriter:
    """Writes primitives to a binary sink.

    Example:
        >>> buffer = io.BytesIO()
        >>> writer = ByteWriter(buffer)
        >>> writer.write_u8(10)
        >>> buffer.getvalue()
        b'\\n'
    """

    def __init__(self, sink: BinaryIO) -> None:
        """Initialize a writer over the given sink.

        Args:
            sink: Object with a ``write(data)`` method accepting bytes
        """
        self._sink = sink

    def write(self, data: bytes) -> None:
        try:
            self._sink.write(data)
        except OSError as e:
            raise NbtIOError(e) from e

    def write_u8(self, value: int) -> None:
        if not 0 <= value <= 0xFF:
            raise OtherError(f"Value {value} does not fit in an unsigned byte")
        self.write(bytes((value,)))

    def write_struct(self, fmt: struct.Struct, value: int | float) -> None:
        """Write one value using a precompiled struct format.

        Raises:
            OtherError: If the value does not fit the format
        """
        try:
            data = fmt.pack(value)
        except (struct.error, OverflowError) as e:
            raise OtherError(f"Value {value!r} cannot be packed as {fmt.format}: {e}") from e
        self.write(data)

    def write_varint(self, value: int, num_bits: int) -> None:
        """Write an unsigned LEB128 varint.

        Args:
            value: Unsigned integer value (must fit in ``num_bits``)
            num_bits: Width of the encoded integer (32 or 64)

        Raises:
            OtherError: If value is negative or too wide
        """
        if value < 0 or value >> num_bits:
            raise OtherError(f"Value {value} does not fit in an unsigned {num_bits}-bit varint")

        out = bytearray()
        while True:
            byte = value & 0x7F
            value >>= 7
            if value:
                out.append(byte | 0x80)
            else:
                out.append(byte)
                break
        self.write(bytes(out))
