"""Exception hierarchy for nbtx.

This module defines all custom exceptions used throughout the package.
All exceptions inherit from NbtError for easy catching of any nbtx-specific error.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from .tags import Tag


class NbtError(Exception):
    """Base exception for all nbtx errors."""

    pass


class UnexpectedTypeError(NbtError):
    """Raised when a tag-directed read finds a different tag than required.

    Examples:
        - A Short field where the wire carries an Int
        - A root tag that is not Compound
        - A List mixing element tags on encode
    """

    def __init__(self, expected: Tag, actual: Tag) -> None:
        self.expected = expected
        self.actual = actual
        super().__init__(f"Expected tag {expected.name}, found {actual.name}")


class UnrecognizedTagError(NbtError):
    """Raised when a tag byte is outside the legal 0-12 range."""

    def __init__(self, byte: int) -> None:
        self.byte = byte
        super().__init__(f"Unrecognized tag byte {byte}")


class UnsupportedError(NbtError):
    """Raised when a shape has no NBT wire representation.

    Examples:
        - Unsigned or 128-bit integers
        - Enumerations
        - Unit values and tuple records
    """

    pass


class NbtIOError(NbtError):
    """Raised when the byte source or sink fails, including truncation."""

    def __init__(self, error: BaseException) -> None:
        self.error = error
        super().__init__(f"I/O error: {error}")


class Utf8Error(NbtError):
    """Raised when string bytes are not valid UTF-8."""

    def __init__(self, error: UnicodeError) -> None:
        self.error = error
        super().__init__(f"Invalid UTF-8: {error}")


class OtherError(NbtError):
    """Raised for format errors that have no dedicated kind.

    Examples:
        - An End tag where a value was required
        - A missing required field
        - A varint longer than its type allows
    """

    pass


class SequenceLengthError(OtherError):
    """Raised when a sequence length disagrees with a fixed expected arity."""

    def __init__(self, expected: int, actual: int, element: Tag) -> None:
        self.expected = expected
        self.actual = actual
        self.element = element
        super().__init__(
            f"Sequence of {expected} {element.name} expected, found only {actual} items"
        )


class DepthLimitError(OtherError):
    """Raised when nested Lists/Compounds exceed the configured depth bound."""

    def __init__(self, max_depth: int) -> None:
        self.max_depth = max_depth
        super().__init__(f"Nesting depth exceeds maximum of {max_depth}")
