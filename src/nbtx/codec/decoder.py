"""NBT decoder.

This module provides the streaming Decoder and the decode() entry points. The
decoder reads the wire grammar and hands each payload to a visitor; what gets
built (a dynamic Value tree or a typed pydantic model) is decided entirely by
the visitor, so both modes share one implementation of the grammar.
"""

from __future__ import annotations

import io
import logging
from typing import Any, BinaryIO, Protocol, Union

from ..config import CodecConfig
from ..exceptions import (
    DepthLimitError,
    OtherError,
    SequenceLengthError,
    UnexpectedTypeError,
    Utf8Error,
)
from ..tags import Tag
from ..visitor import Visitor
from .schema import compile_type
from .stream import ByteReader
from .variant import Variant, WireFormat

logger = logging.getLogger(__name__)

Source = Union[bytes, bytearray, memoryview, BinaryIO]


class Seed(Protocol):
    """Anything that can decode itself from the decoder's current position."""

    def decode(self, decoder: Decoder) -> Any: ...


class Decoder:
    """Reads one NBT document from a byte source.

    Construction consumes the root Compound tag and the root name; the decoder
    is then positioned at the root Compound's body.

    Attributes:
        next_tag: Tag of the payload the next decode call will read
        is_key: True while a compound key is being read
    """

    def __init__(self, reader: ByteReader, wire_format: WireFormat, max_depth: int) -> None:
        """Read the document header.

        Args:
            reader: Source of bytes
            wire_format: Primitive rules of the active variant
            max_depth: Maximum nesting of Lists and Compounds

        Raises:
            UnexpectedTypeError: If the root tag is not Compound
            UnrecognizedTagError: If the root tag byte is not a tag
            NbtIOError: If the source is truncated
            Utf8Error: If the root name is not valid UTF-8
        """
        self._reader = reader
        self._wire = wire_format
        self._max_depth = max_depth
        self._depth = 0
        self.is_key = False

        tag = Tag.from_byte(reader.read_u8())
        if tag is not Tag.COMPOUND:
            raise UnexpectedTypeError(Tag.COMPOUND, tag)
        self.next_tag = tag

        # The root name carries no information
        self._read_string()

    def expect(self, tag: Tag) -> None:
        if self.next_tag is not tag:
            raise UnexpectedTypeError(tag, self.next_tag)

    def _read_string(self) -> str:
        length = self._wire.read_string_length(self._reader)
        raw = self._reader.read_exact(length)
        try:
            return raw.decode("utf-8")
        except UnicodeDecodeError as e:
            raise Utf8Error(e) from e

    def _enter(self) -> None:
        self._depth += 1
        if self._depth > self._max_depth:
            raise DepthLimitError(self._max_depth)

    def read_tag(self) -> Tag:
        """Read one raw tag byte from the stream."""
        return Tag.from_byte(self._reader.read_u8())

    def decode_any(self, visitor: Visitor) -> Any:
        """Decode whatever the current tag announces."""
        if self.is_key:
            return self.decode_string(visitor)

        tag = self.next_tag
        if tag is Tag.END:
            raise OtherError("Encountered unmatched end tag")
        return _DISPATCH[tag](self, visitor)

    def decode_bool(self, visitor: Visitor) -> Any:
        """Decode a Byte as a boolean: zero is False, anything else True."""
        self.expect(Tag.BYTE)
        return visitor.visit_bool(self._reader.read_u8() != 0)

    def decode_byte(self, visitor: Visitor) -> Any:
        self.expect(Tag.BYTE)
        value = self._reader.read_u8()
        return visitor.visit_byte(value - 256 if value > 127 else value)

    def decode_short(self, visitor: Visitor) -> Any:
        self.expect(Tag.SHORT)
        return visitor.visit_short(self._wire.read_short(self._reader))

    def decode_int(self, visitor: Visitor) -> Any:
        self.expect(Tag.INT)
        return visitor.visit_int(self._wire.read_int(self._reader))

    def decode_long(self, visitor: Visitor) -> Any:
        self.expect(Tag.LONG)
        return visitor.visit_long(self._wire.read_long(self._reader))

    def decode_float(self, visitor: Visitor) -> Any:
        self.expect(Tag.FLOAT)
        return visitor.visit_float(self._wire.read_float(self._reader))

    def decode_double(self, visitor: Visitor) -> Any:
        self.expect(Tag.DOUBLE)
        return visitor.visit_double(self._wire.read_double(self._reader))

    def decode_string(self, visitor: Visitor) -> Any:
        self.expect(Tag.STRING)
        return visitor.visit_string(self._read_string())

    def decode_byte_array(self, visitor: Visitor) -> Any:
        self.expect(Tag.BYTE_ARRAY)
        length = self._wire.read_sequence_length(self._reader)
        return visitor.visit_byte_array(self._reader.read_exact(length))

    def decode_sequence(self, visitor: Visitor, expected_len: int = 0) -> Any:
        """Decode a List, ByteArray, IntArray or LongArray element by element.

        Array tags imply their element tag; a List carries it as a one-byte
        prefix before the length.

        Args:
            visitor: Receives a SequenceAccess
            expected_len: Required element count, or 0 for any length

        Raises:
            UnexpectedTypeError: If the current tag is not a sequence tag
            SequenceLengthError: If expected_len is set and differs from the wire length
        """
        container = self.next_tag
        if container is Tag.LIST:
            element = self.read_tag()
        elif container.array_element is not None:
            element = container.array_element
        else:
            raise UnexpectedTypeError(Tag.LIST, container)

        self.next_tag = element
        remaining = self._wire.read_sequence_length(self._reader)
        if expected_len and expected_len != remaining:
            raise SequenceLengthError(expected_len, remaining, element)

        self._enter()
        try:
            return visitor.visit_sequence(SequenceAccess(self, container, element, remaining))
        finally:
            self._depth -= 1

    def decode_compound(self, visitor: Visitor) -> Any:
        self.expect(Tag.COMPOUND)
        self._enter()
        try:
            return visitor.visit_compound(CompoundAccess(self))
        finally:
            self._depth -= 1

    def decode_optional(self, seed: Seed) -> Any:
        """Decode an optional value.

        There is no null tag: an absent value is an absent key. Reaching this
        point means the key was present, so the value is always decoded.
        """
        return seed.decode(self)


_DISPATCH = {
    Tag.BYTE: Decoder.decode_byte,
    Tag.SHORT: Decoder.decode_short,
    Tag.INT: Decoder.decode_int,
    Tag.LONG: Decoder.decode_long,
    Tag.FLOAT: Decoder.decode_float,
    Tag.DOUBLE: Decoder.decode_double,
    Tag.BYTE_ARRAY: Decoder.decode_byte_array,
    Tag.STRING: Decoder.decode_string,
    Tag.LIST: Decoder.decode_sequence,
    Tag.COMPOUND: Decoder.decode_compound,
    Tag.INT_ARRAY: Decoder.decode_sequence,
    Tag.LONG_ARRAY: Decoder.decode_sequence,
}


class SequenceAccess:
    """Element-by-element access to a sequence being decoded.

    Attributes:
        container: Tag of the sequence itself (List or an array tag)
        element: Tag shared by every element
        remaining: Number of elements not yet decoded
    """

    def __init__(self, decoder: Decoder, container: Tag, element: Tag, remaining: int) -> None:
        self._decoder = decoder
        self.container = container
        self.element = element
        self.remaining = remaining

    def __len__(self) -> int:
        return self.remaining

    def next_element(self, seed: Seed) -> Any:
        """Decode the next element with the given seed.

        The element tag is restored afterwards because a nested decode may
        have moved the decoder's current tag.
        """
        if self.remaining <= 0:
            raise IndexError("No elements remaining in sequence")
        self.remaining -= 1
        try:
            return seed.decode(self._decoder)
        finally:
            self._decoder.next_tag = self.element


class CompoundAccess:
    """Key/value access to a Compound being decoded.

    Wire order is tag, key, payload: ``next_key`` consumes the first two and
    leaves the decoder positioned on the payload with the entry's tag current.
    """

    def __init__(self, decoder: Decoder) -> None:
        self._decoder = decoder

    @property
    def tag(self) -> Tag:
        """Tag of the entry whose key was read last."""
        return self._decoder.next_tag

    def next_key(self) -> str | None:
        """Read the next entry's tag and key.

        Returns:
            The key, or None once the End tag is reached
        """
        decoder = self._decoder
        tag = decoder.read_tag()
        if tag is Tag.END:
            decoder.next_tag = tag
            return None

        decoder.is_key = True
        decoder.next_tag = Tag.STRING
        try:
            key = decoder.decode_any(_KEY)
        finally:
            decoder.is_key = False
        decoder.next_tag = tag
        return key

    def next_value(self, seed: Seed) -> Any:
        # next_key never leaves End as the current tag for a value
        assert self._decoder.next_tag is not Tag.END, "next_value called without a key"
        return seed.decode(self._decoder)

    def skip_value(self) -> None:
        """Consume the current entry's payload without building anything."""
        self.next_value(_IGNORED)


class _KeyVisitor(Visitor):
    expected = Tag.STRING

    def visit_string(self, value: str) -> str:
        return value


class _IgnoredVisitor(Visitor):
    """Accepts any payload and discards it."""

    def decode(self, decoder: Decoder) -> None:
        decoder.decode_any(self)

    def visit_bool(self, value: bool) -> None:
        return None

    visit_byte = visit_short = visit_int = visit_long = visit_bool
    visit_float = visit_double = visit_string = visit_byte_array = visit_bool

    def visit_sequence(self, access: SequenceAccess) -> None:
        while access.remaining:
            access.next_element(self)

    def visit_compound(self, access: CompoundAccess) -> None:
        while access.next_key() is not None:
            access.next_value(self)


_KEY = _KeyVisitor()
_IGNORED = _IgnoredVisitor()


def _as_stream(source: Source) -> BinaryIO:
    if isinstance(source, (bytes, bytearray, memoryview)):
        return io.BytesIO(bytes(source))
    return source


def decode(
    target: Any,
    source: Source,
    variant: Variant = Variant.BIG_ENDIAN,
    *,
    config: CodecConfig | None = None,
) -> Any:
    """Decode one NBT document.

    The root of every document is a Compound. Decoding is strictly forward-only;
    bytes after the root Compound's End tag are left unread.

    Args:
        target: What to build: ``Value`` (or a Value subclass such as ``Compound``)
            for a dynamic tree, a pydantic model class, or a supported annotation
            such as ``dict[str, int]``
        source: Bytes-like object or binary file object
        variant: Wire encoding of the source
        config: Limits for this call (defaults to CodecConfig())

    Returns:
        Decoded value of the requested shape

    Raises:
        UnexpectedTypeError: If a tag does not match what the target requires
        UnrecognizedTagError: If a tag byte is outside 0-12
        UnsupportedError: If the target contains a shape NBT cannot represent
        NbtIOError: If the source is truncated or fails
        Utf8Error: If a string is not valid UTF-8
        OtherError: For other format errors (length mismatch, depth limit, ...)

    Examples:
        ```python
        from nbtx import Value, Variant, decode

        # Dynamic tree
        value = decode(Value, data)

        # Typed model, network variant
        player = decode(Player, data, Variant.NETWORK_LITTLE_ENDIAN)
        ```
    """
    config = config or CodecConfig()
    node = compile_type(target)
    reader = ByteReader(_as_stream(source))

    logger.debug("Decoding %s from %s source", getattr(target, "__name__", target), variant.name)
    try:
        decoder = Decoder(reader, variant.wire_format(), config.max_depth)
        result = node.decode(decoder)
    except RecursionError as e:
        raise DepthLimitError(config.max_depth) from e

    logger.debug("Decoded %d bytes", reader.position())
    return result


def from_be_bytes(target: Any, source: Source, *, config: CodecConfig | None = None) -> Any:
    """Decode big-endian NBT (Java Edition files and network)."""
    return decode(target, source, Variant.BIG_ENDIAN, config=config)


def from_le_bytes(target: Any, source: Source, *, config: CodecConfig | None = None) -> Any:
    """Decode little-endian NBT (Bedrock Edition disk formats)."""
    return decode(target, source, Variant.LITTLE_ENDIAN, config=config)


def from_net_bytes(target: Any, source: Source, *, config: CodecConfig | None = None) -> Any:
    """Decode network little-endian NBT (Bedrock Edition network formats)."""
    return decode(target, source, Variant.NETWORK_LITTLE_ENDIAN, config=config)
