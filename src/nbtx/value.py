"""Dynamic NBT value tree.

When the structure of a document is not known in advance it can be decoded into
a tree of Value objects: one class per non-End tag, each carrying its payload.

Equality is structural and tag-exact: ``Int(1) != Long(1)``, Compounds compare
independently of key order, Lists compare in order, and floats compare with
IEEE-754 semantics, so a NaN payload is never equal to anything. Hashes of
Float/Double payloads use the raw bit pattern.

Example:
    >>> from nbtx import Compound, Int, String, Value, decode, encode
    >>> tree = Compound({"name": String("Steve"), "level": Int(7)})
    >>> decode(Value, encode(tree)) == tree
    True
"""

from __future__ import annotations

import re
import struct
from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Any, ClassVar

from pydantic_core import core_schema

from .exceptions import UnexpectedTypeError
from .tags import Tag
from .visitor import Visitor

if TYPE_CHECKING:
    from pydantic import GetCoreSchemaHandler

    from .codec.decoder import CompoundAccess, Decoder, SequenceAccess
    from .codec.encoder import Encoder

_F32 = struct.Struct("<f")
_F64 = struct.Struct("<d")


def _check_range(kind: str, value: int, num_bits: int) -> int:
    half = 1 << (num_bits - 1)
    if not isinstance(value, int) or not -half <= value < half:
        raise ValueError(f"{kind} payload must be an integer in [{-half}, {half - 1}], got {value!r}")
    return value


class Value:
    """Base class of the twelve NBT value kinds.

    Every subclass has a ``value`` attribute holding its payload and a ``tag``
    class attribute holding its wire tag. Accessors ``as_<kind>()``,
    ``into_<kind>()`` and ``is_<kind>()`` exist for every kind.
    """

    tag: ClassVar[Tag]
    value: Any

    def discriminant(self) -> int:
        """Return the wire tag number of this value."""
        return int(self.tag)

    def _payload_eq(self, other: Value) -> bool:
        return bool(self.value == other.value)

    def _payload_hash(self) -> Any:
        return self.value

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, Value):
            return NotImplemented
        return type(self) is type(other) and self._payload_eq(other)

    def __hash__(self) -> int:
        return hash((self.tag, self._payload_hash()))

    @classmethod
    def decode(cls, decoder: Decoder) -> Value:
        """Decode the payload at the decoder's position into a Value.

        Called on a subclass, the current tag must match that subclass.
        """
        if cls is not Value:
            decoder.expect(cls.tag)
        return decoder.decode_any(_VALUE_VISITOR)

    def write_payload(self, encoder: Encoder) -> None:
        """Write this value's payload (without tag or name)."""
        raise NotImplementedError

    @classmethod
    def __get_pydantic_core_schema__(
        cls, source_type: Any, handler: GetCoreSchemaHandler
    ) -> core_schema.CoreSchema:
        return core_schema.is_instance_schema(cls)


@dataclass(frozen=True, eq=False)
class Byte(Value):
    """A signed 8-bit integer."""

    tag: ClassVar[Tag] = Tag.BYTE
    value: int

    def __post_init__(self) -> None:
        _check_range("Byte", self.value, 8)

    def write_payload(self, encoder: Encoder) -> None:
        encoder.write_byte(self.value)


@dataclass(frozen=True, eq=False)
class Short(Value):
    """A signed 16-bit integer."""

    tag: ClassVar[Tag] = Tag.SHORT
    value: int

    def __post_init__(self) -> None:
        _check_range("Short", self.value, 16)

    def write_payload(self, encoder: Encoder) -> None:
        encoder.write_short(self.value)


@dataclass(frozen=True, eq=False)
class Int(Value):
    """A signed 32-bit integer."""

    tag: ClassVar[Tag] = Tag.INT
    value: int

    def __post_init__(self) -> None:
        _check_range("Int", self.value, 32)

    def write_payload(self, encoder: Encoder) -> None:
        encoder.write_int(self.value)


@dataclass(frozen=True, eq=False)
class Long(Value):
    """A signed 64-bit integer."""

    tag: ClassVar[Tag] = Tag.LONG
    value: int

    def __post_init__(self) -> None:
        _check_range("Long", self.value, 64)

    def write_payload(self, encoder: Encoder) -> None:
        encoder.write_long(self.value)


@dataclass(frozen=True, eq=False)
class Float(Value):
    """A 32-bit IEEE-754 float. The payload is rounded to single precision."""

    tag: ClassVar[Tag] = Tag.FLOAT
    value: float

    def __post_init__(self) -> None:
        try:
            rounded = _F32.unpack(_F32.pack(float(self.value)))[0]
        except (OverflowError, struct.error) as e:
            raise ValueError(f"Float payload out of single-precision range: {self.value!r}") from e
        object.__setattr__(self, "value", rounded)

    def _payload_hash(self) -> Any:
        return _F32.pack(self.value)

    def write_payload(self, encoder: Encoder) -> None:
        encoder.write_float(self.value)


@dataclass(frozen=True, eq=False)
class Double(Value):
    """A 64-bit IEEE-754 float."""

    tag: ClassVar[Tag] = Tag.DOUBLE
    value: float

    def __post_init__(self) -> None:
        object.__setattr__(self, "value", float(self.value))

    def _payload_hash(self) -> Any:
        return _F64.pack(self.value)

    def write_payload(self, encoder: Encoder) -> None:
        encoder.write_double(self.value)


@dataclass(frozen=True, eq=False)
class ByteArray(Value):
    """A raw byte sequence."""

    tag: ClassVar[Tag] = Tag.BYTE_ARRAY
    value: bytes = b""

    def __post_init__(self) -> None:
        object.__setattr__(self, "value", bytes(self.value))

    def write_payload(self, encoder: Encoder) -> None:
        encoder.write_byte_array(self.value)


@dataclass(frozen=True, eq=False)
class String(Value):
    """A UTF-8 string."""

    tag: ClassVar[Tag] = Tag.STRING
    value: str = ""

    def __post_init__(self) -> None:
        if not isinstance(self.value, str):
            raise ValueError(f"String payload must be str, got {type(self.value).__name__}")

    def write_payload(self, encoder: Encoder) -> None:
        encoder.write_string(self.value)


@dataclass(frozen=True, eq=False)
class List(Value):
    """An ordered sequence of values.

    All elements are written with one element tag, taken from the first
    element. An empty List is written with element tag End.
    """

    tag: ClassVar[Tag] = Tag.LIST
    value: list[Value] = field(default_factory=list)

    def __post_init__(self) -> None:
        items = list(self.value)
        for item in items:
            if not isinstance(item, Value):
                raise ValueError(f"List elements must be Value, got {type(item).__name__}")
        object.__setattr__(self, "value", items)

    def __len__(self) -> int:
        return len(self.value)

    def __getitem__(self, index: int) -> Value:
        return self.value[index]

    @property
    def element_tag(self) -> Tag:
        return self.value[0].tag if self.value else Tag.END

    def _payload_eq(self, other: Value) -> bool:
        return len(self.value) == len(other.value) and all(
            a == b for a, b in zip(self.value, other.value)
        )

    def _payload_hash(self) -> Any:
        return tuple(self.value)

    def write_payload(self, encoder: Encoder) -> None:
        element = self.element_tag
        with encoder.nested():
            encoder.begin_list(element, len(self.value))
            for item in self.value:
                if item.tag is not element:
                    raise UnexpectedTypeError(element, item.tag)
                item.write_payload(encoder)


@dataclass(frozen=True, eq=False)
class Compound(Value):
    """A string-keyed mapping of values. Key order carries no meaning."""

    tag: ClassVar[Tag] = Tag.COMPOUND
    value: dict[str, Value] = field(default_factory=dict)

    def __post_init__(self) -> None:
        entries = dict(self.value)
        for key, item in entries.items():
            if not isinstance(key, str):
                raise ValueError(f"Compound keys must be str, got {type(key).__name__}")
            if not isinstance(item, Value):
                raise ValueError(f"Compound values must be Value, got {type(item).__name__}")
        object.__setattr__(self, "value", entries)

    def __len__(self) -> int:
        return len(self.value)

    def __getitem__(self, key: str) -> Value:
        return self.value[key]

    def __contains__(self, key: object) -> bool:
        return key in self.value

    def get(self, key: str, default: Value | None = None) -> Value | None:
        return self.value.get(key, default)

    def _payload_eq(self, other: Value) -> bool:
        if self.value.keys() != other.value.keys():
            return False
        return all(item == other.value[key] for key, item in self.value.items())

    def _payload_hash(self) -> Any:
        return frozenset(self.value.items())

    def write_payload(self, encoder: Encoder) -> None:
        with encoder.nested():
            for key, item in self.value.items():
                encoder.write_entry_header(item.tag, key)
                item.write_payload(encoder)
            encoder.end_compound()


@dataclass(frozen=True, eq=False)
class IntArray(Value):
    """A sequence of signed 32-bit integers stored without per-element tags."""

    tag: ClassVar[Tag] = Tag.INT_ARRAY
    value: list[int] = field(default_factory=list)

    def __post_init__(self) -> None:
        object.__setattr__(self, "value", [_check_range("IntArray", v, 32) for v in self.value])

    def _payload_hash(self) -> Any:
        return tuple(self.value)

    def write_payload(self, encoder: Encoder) -> None:
        encoder.begin_array(len(self.value))
        for item in self.value:
            encoder.write_int(item)


@dataclass(frozen=True, eq=False)
class LongArray(Value):
    """A sequence of signed 64-bit integers stored without per-element tags."""

    tag: ClassVar[Tag] = Tag.LONG_ARRAY
    value: list[int] = field(default_factory=list)

    def __post_init__(self) -> None:
        object.__setattr__(self, "value", [_check_range("LongArray", v, 64) for v in self.value])

    def _payload_hash(self) -> Any:
        return tuple(self.value)

    def write_payload(self, encoder: Encoder) -> None:
        encoder.begin_array(len(self.value))
        for item in self.value:
            encoder.write_long(item)


VALUE_TYPES: tuple[type[Value], ...] = (
    Byte,
    Short,
    Int,
    Long,
    Float,
    Double,
    ByteArray,
    String,
    List,
    Compound,
    IntArray,
    LongArray,
)


def _install_accessors(kind: type[Value]) -> None:
    name = re.sub(r"(?<!^)(?=[A-Z])", "_", kind.__name__).lower()

    def as_kind(self: Value) -> Any:
        return self.value if type(self) is kind else None

    def into_kind(self: Value) -> Any:
        return self.value if type(self) is kind else self

    def is_kind(self: Value) -> bool:
        return type(self) is kind

    as_kind.__doc__ = f"Return the payload if this is a {kind.__name__}, else None."
    into_kind.__doc__ = f"Return the payload if this is a {kind.__name__}, else this value unchanged."
    is_kind.__doc__ = f"Return whether this is a {kind.__name__}."
    for prefix, method in (("as", as_kind), ("into", into_kind), ("is", is_kind)):
        method.__name__ = f"{prefix}_{name}"
        method.__qualname__ = f"Value.{prefix}_{name}"
        setattr(Value, method.__name__, method)


for _kind in VALUE_TYPES:
    _install_accessors(_kind)


class _ValueVisitor(Visitor):
    """Builds a Value from any payload."""

    def visit_bool(self, value: bool) -> Value:
        return Byte(int(value))

    def visit_byte(self, value: int) -> Value:
        return Byte(value)

    def visit_short(self, value: int) -> Value:
        return Short(value)

    def visit_int(self, value: int) -> Value:
        return Int(value)

    def visit_long(self, value: int) -> Value:
        return Long(value)

    def visit_float(self, value: float) -> Value:
        return Float(value)

    def visit_double(self, value: float) -> Value:
        return Double(value)

    def visit_string(self, value: str) -> Value:
        return String(value)

    def visit_byte_array(self, value: bytes) -> Value:
        return ByteArray(value)

    def visit_sequence(self, access: SequenceAccess) -> Value:
        items = []
        while access.remaining:
            items.append(access.next_element(Value))

        if access.container is Tag.INT_ARRAY:
            return IntArray([item.value for item in items])
        if access.container is Tag.LONG_ARRAY:
            return LongArray([item.value for item in items])
        return List(items)

    def visit_compound(self, access: CompoundAccess) -> Value:
        entries = {}
        while (key := access.next_key()) is not None:
            entries[key] = access.next_value(Value)
        return Compound(entries)


_VALUE_VISITOR = _ValueVisitor()
