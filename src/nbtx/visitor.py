"""Visitor interface shared by the dynamic and typed decoding modes.

The decoder knows the wire grammar; a visitor knows what to build. Each decode
method of the decoder hands its payload to exactly one ``visit_*`` method. The
dynamic Value tree implements every method; typed schema nodes implement only
the shapes they accept.
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Any

from .exceptions import UnexpectedTypeError
from .tags import Tag

if TYPE_CHECKING:
    from .codec.decoder import CompoundAccess, SequenceAccess


class Visitor:
    """Base visitor. Every shape it does not override is a type error.

    Attributes:
        expected: Tag reported as ``expected`` when a visit is rejected
    """

    expected: Tag = Tag.COMPOUND

    def _reject(self, actual: Tag) -> Any:
        raise UnexpectedTypeError(self.expected, actual)

    def visit_bool(self, value: bool) -> Any:
        return self._reject(Tag.BYTE)

    def visit_byte(self, value: int) -> Any:
        return self._reject(Tag.BYTE)

    def visit_short(self, value: int) -> Any:
        return self._reject(Tag.SHORT)

    def visit_int(self, value: int) -> Any:
        return self._reject(Tag.INT)

    def visit_long(self, value: int) -> Any:
        return self._reject(Tag.LONG)

    def visit_float(self, value: float) -> Any:
        return self._reject(Tag.FLOAT)

    def visit_double(self, value: float) -> Any:
        return self._reject(Tag.DOUBLE)

    def visit_string(self, value: str) -> Any:
        return self._reject(Tag.STRING)

    def visit_byte_array(self, value: bytes) -> Any:
        return self._reject(Tag.BYTE_ARRAY)

    def visit_sequence(self, access: SequenceAccess) -> Any:
        return self._reject(access.container)

    def visit_compound(self, access: CompoundAccess) -> Any:
        return self._reject(Tag.COMPOUND)
