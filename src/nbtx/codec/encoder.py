"""NBT encoder.

This module provides the Encoder and the encode() entry points. Every document
starts with a Compound tag and a root name, followed by the Compound body:

    tag(Compound) name (tag name payload)* tag(End)

Lists write one element tag and a length, then bare payloads. Arrays write only
a length and bare payloads.
"""

from __future__ import annotations

import io
import logging
from collections.abc import Iterator, Mapping
from contextlib import contextmanager
from typing import Any, BinaryIO

from pydantic import BaseModel

from ..config import CodecConfig
from ..exceptions import (
    DepthLimitError,
    OtherError,
    UnexpectedTypeError,
    UnsupportedError,
    Utf8Error,
)
from ..tags import Tag
from ..value import Value
from .schema import InferredNode, TypeNode, compile_type
from .stream import ByteWriter
from .variant import Variant, WireFormat

logger = logging.getLogger(__name__)


class Encoder:
    """Writes NBT primitives to a sink using one variant's rules.

    Schema nodes and Value objects drive the encoder; it only knows how to
    lay out each primitive on the wire.
    """

    def __init__(self, writer: ByteWriter, wire_format: WireFormat, max_depth: int) -> None:
        """Initialize an encoder.

        Args:
            writer: Destination of bytes
            wire_format: Primitive rules of the active variant
            max_depth: Maximum nesting of Lists and Compounds
        """
        self._writer = writer
        self._wire = wire_format
        self._max_depth = max_depth
        self._depth = 0

    @contextmanager
    def nested(self) -> Iterator[None]:
        """Track one level of List/Compound nesting."""
        self._depth += 1
        if self._depth > self._max_depth:
            raise DepthLimitError(self._max_depth)
        try:
            yield
        finally:
            self._depth -= 1

    def write_tag(self, tag: Tag) -> None:
        self._writer.write_u8(int(tag))

    def write_bool(self, value: bool) -> None:
        self._writer.write_u8(1 if value else 0)

    def write_byte(self, value: int) -> None:
        if not -128 <= value <= 127:
            raise OtherError(f"Value {value} does not fit in a signed byte")
        self._writer.write_u8(value & 0xFF)

    def write_short(self, value: int) -> None:
        self._wire.write_short(self._writer, value)

    def write_int(self, value: int) -> None:
        self._wire.write_int(self._writer, value)

    def write_long(self, value: int) -> None:
        self._wire.write_long(self._writer, value)

    def write_float(self, value: float) -> None:
        self._wire.write_float(self._writer, value)

    def write_double(self, value: float) -> None:
        self._wire.write_double(self._writer, value)

    def write_scalar(self, tag: Tag, value: Any) -> None:
        """Write a Byte through Double payload selected by tag."""
        _SCALAR_WRITERS[tag](self, value)

    def write_string(self, value: str) -> None:
        """Write a length-prefixed UTF-8 string.

        Raises:
            Utf8Error: If the string cannot be encoded (e.g. lone surrogates)
            OtherError: If the encoded length exceeds the variant's length prefix
        """
        try:
            raw = value.encode("utf-8")
        except UnicodeEncodeError as e:
            raise Utf8Error(e) from e
        self._wire.write_string_length(self._writer, len(raw))
        self._writer.write(raw)

    def write_byte_array(self, value: bytes) -> None:
        self._wire.write_sequence_length(self._writer, len(value))
        self._writer.write(bytes(value))

    def begin_list(self, element: Tag, length: int) -> None:
        """Write a List header: element tag then length."""
        self.write_tag(element)
        self._wire.write_sequence_length(self._writer, length)

    def begin_array(self, length: int) -> None:
        """Write an IntArray/LongArray header: only the length."""
        self._wire.write_sequence_length(self._writer, length)

    def write_root(self, tag: Tag, name: str) -> None:
        """Write the document header: the root tag and its name."""
        self.write_tag(tag)
        self.write_string(name)

    def write_entry_header(self, tag: Tag, key: str) -> None:
        """Write the tag and key that precede a Compound entry's payload."""
        self.write_tag(tag)
        self.write_string(key)

    def end_compound(self) -> None:
        self.write_tag(Tag.END)


_SCALAR_WRITERS = {
    Tag.BYTE: Encoder.write_byte,
    Tag.SHORT: Encoder.write_short,
    Tag.INT: Encoder.write_int,
    Tag.LONG: Encoder.write_long,
    Tag.FLOAT: Encoder.write_float,
    Tag.DOUBLE: Encoder.write_double,
}


def _root_node(value: Any) -> TypeNode:
    if isinstance(value, BaseModel):
        return compile_type(type(value))
    if isinstance(value, (Value, Mapping)):
        return InferredNode()
    raise UnsupportedError(f"Cannot encode {type(value).__name__} as an NBT document")


def encode_into(
    sink: BinaryIO,
    value: Any,
    variant: Variant = Variant.BIG_ENDIAN,
    *,
    config: CodecConfig | None = None,
) -> None:
    """Encode one NBT document into an existing sink.

    Nothing is written before or after the document, so it can be embedded in
    a larger stream.

    Args:
        sink: Object with a ``write(data)`` method
        value: A Compound, a pydantic model instance, or a mapping of str to
            Value/model/mapping
        variant: Wire encoding to produce
        config: Limits for this call (defaults to CodecConfig())

    Raises:
        UnexpectedTypeError: If the value is not compound-shaped, or a List mixes element tags
        UnsupportedError: If the value contains a shape NBT cannot represent
        NbtIOError: If the sink fails
        OtherError: If a number does not fit its tag or a length overflows
    """
    config = config or CodecConfig()
    node = _root_node(value)
    tag = node.tag_for(value)
    if tag is not Tag.COMPOUND:
        raise UnexpectedTypeError(Tag.COMPOUND, tag)

    logger.debug("Encoding %s as %s", type(value).__name__, variant.name)
    encoder = Encoder(ByteWriter(sink), variant.wire_format(), config.max_depth)
    encoder.write_root(Tag.COMPOUND, getattr(type(value), "nbt_root_name", ""))
    try:
        node.encode(encoder, value)
    except RecursionError as e:
        raise DepthLimitError(config.max_depth) from e


def encode(
    value: Any,
    variant: Variant = Variant.BIG_ENDIAN,
    *,
    config: CodecConfig | None = None,
) -> bytes:
    """Encode one NBT document to bytes.

    Args:
        value: A Compound, a pydantic model instance, or a mapping of str to
            Value/model/mapping
        variant: Wire encoding to produce
        config: Limits for this call (defaults to CodecConfig())

    Returns:
        Encoded document

    Examples:
        ```python
        from nbtx import Compound, Int, Variant, encode

        data = encode(Compound({"level": Int(7)}), Variant.LITTLE_ENDIAN)
        ```
    """
    buffer = io.BytesIO()
    encode_into(buffer, value, variant, config=config)
    return buffer.getvalue()


def to_be_bytes(value: Any, *, config: CodecConfig | None = None) -> bytes:
    """Encode big-endian NBT (Java Edition files and network)."""
    return encode(value, Variant.BIG_ENDIAN, config=config)


def to_le_bytes(value: Any, *, config: CodecConfig | None = None) -> bytes:
    """Encode little-endian NBT (Bedrock Edition disk formats)."""
    return encode(value, Variant.LITTLE_ENDIAN, config=config)


def to_net_bytes(value: Any, *, config: CodecConfig | None = None) -> bytes:
    """Encode network little-endian NBT (Bedrock Edition network formats)."""
    return encode(value, Variant.NETWORK_LITTLE_ENDIAN, config=config)
