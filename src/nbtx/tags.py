"""NBT tag model.

Every value on the wire is introduced by a one-byte tag. This module defines the
closed set of 13 tags, the payload grammar each one implies, and the single
legality gate used by the decoder for every tag byte it reads.
"""

from __future__ import annotations

import enum

from .exceptions import UnrecognizedTagError


class Grammar(enum.Enum):
    """Shape of the payload that follows a tag."""

    END = "end"
    SCALAR = "scalar"
    STRING = "string"
    BYTES = "bytes"
    SEQUENCE = "sequence"
    TAGGED_SEQUENCE = "tagged_sequence"
    COMPOUND = "compound"


class Tag(enum.IntEnum):
    """Wire type tag with its fixed one-byte discriminant."""

    END = 0
    BYTE = 1
    SHORT = 2
    INT = 3
    LONG = 4
    FLOAT = 5
    DOUBLE = 6
    BYTE_ARRAY = 7
    STRING = 8
    LIST = 9
    COMPOUND = 10
    INT_ARRAY = 11
    LONG_ARRAY = 12

    @classmethod
    def from_byte(cls, byte: int) -> Tag:
        """Convert a wire byte to a tag.

        Args:
            byte: Raw tag byte read from the stream

        Returns:
            Matching tag

        Raises:
            UnrecognizedTagError: If the byte is not in the range 0-12
        """
        if 0 <= byte <= 12:
            return _BY_VALUE[byte]
        raise UnrecognizedTagError(byte)

    @property
    def grammar(self) -> Grammar:
        return _GRAMMAR[self]

    @property
    def array_element(self) -> Tag | None:
        """Element tag implied by an array tag (None for non-array tags)."""
        return _ARRAY_ELEMENT.get(self)

    @property
    def is_scalar(self) -> bool:
        return _GRAMMAR[self] is Grammar.SCALAR


_BY_VALUE = tuple(Tag)

_GRAMMAR = {
    Tag.END: Grammar.END,
    Tag.BYTE: Grammar.SCALAR,
    Tag.SHORT: Grammar.SCALAR,
    Tag.INT: Grammar.SCALAR,
    Tag.LONG: Grammar.SCALAR,
    Tag.FLOAT: Grammar.SCALAR,
    Tag.DOUBLE: Grammar.SCALAR,
    Tag.BYTE_ARRAY: Grammar.BYTES,
    Tag.STRING: Grammar.STRING,
    Tag.LIST: Grammar.TAGGED_SEQUENCE,
    Tag.COMPOUND: Grammar.COMPOUND,
    Tag.INT_ARRAY: Grammar.SEQUENCE,
    Tag.LONG_ARRAY: Grammar.SEQUENCE,
}

_ARRAY_ELEMENT = {
    Tag.BYTE_ARRAY: Tag.BYTE,
    Tag.INT_ARRAY: Tag.INT,
    Tag.LONG_ARRAY: Tag.LONG,
}
