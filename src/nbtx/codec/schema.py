"""Schema introspection for typed NBT records.

This module compiles Python type annotations (pydantic models, containers and
scalars) into TypeNode trees. Each node is a visitor for the decoder and knows
how to drive the encoder for its values, which lets typed records use exactly
the same wire logic as the dynamic Value tree.

Annotation mapping:

| Annotation                          | NBT tag                     |
|-------------------------------------|-----------------------------|
| bool                                | Byte (0 / 1)                |
| int, FixedInt(bits=8/16/32/64)      | Int, Byte/Short/Int/Long    |
| float, FixedFloat(bits=32/64)       | Double, Float/Double        |
| str                                 | String                      |
| bytes                               | ByteArray                   |
| list[T], tuple[T, ...]              | List                        |
| tuple[T, T, T]                      | List of exactly 3           |
| list[int] with IntArrayField()      | IntArray (LongArrayField()) |
| dict[str, T], pydantic model        | Compound                    |
| Value, Compound, ...                | dynamic                     |
| Optional[T]                         | T, omitted when None        |
"""

from __future__ import annotations

import enum
import types
from collections.abc import Iterable, Mapping, Sequence
from dataclasses import dataclass
from typing import TYPE_CHECKING, Annotated, Any, Union, get_args, get_origin

from pydantic import BaseModel, ValidationError
from pydantic.fields import FieldInfo

from ..exceptions import OtherError, SequenceLengthError, UnexpectedTypeError, UnsupportedError
from ..tags import Tag
from ..value import Value
from ..visitor import Visitor

if TYPE_CHECKING:
    from .decoder import CompoundAccess, Decoder, SequenceAccess
    from .encoder import Encoder

_INT_TAGS = {8: Tag.BYTE, 16: Tag.SHORT, 32: Tag.INT, 64: Tag.LONG}
_FLOAT_TAGS = {32: Tag.FLOAT, 64: Tag.DOUBLE}
_ARRAY_TAGS = {"INT_ARRAY": Tag.INT_ARRAY, "LONG_ARRAY": Tag.LONG_ARRAY}


class TypeNode(Visitor):
    """Compiled encode/decode plan for one annotation.

    Attributes:
        tag: Wire tag of values of this type
        dynamic: True when the tag depends on the run-time value
    """

    tag: Tag
    dynamic = False

    @property
    def expected(self) -> Tag:  # type: ignore[override]
        return self.tag

    def tag_for(self, value: Any) -> Tag:
        """Return the tag to write for a value of this type."""
        return self.tag

    def decode(self, decoder: Decoder) -> Any:
        raise NotImplementedError

    def encode(self, encoder: Encoder, value: Any) -> None:
        raise NotImplementedError


class ScalarNode(TypeNode):
    """Byte, Short, Int, Long, Float or Double."""

    def __init__(self, tag: Tag, python_type: type) -> None:
        self.tag = tag
        self._python_type = python_type
        self._decode_method = f"decode_{tag.name.lower()}"

    def decode(self, decoder: Decoder) -> Any:
        return getattr(decoder, self._decode_method)(self)

    def encode(self, encoder: Encoder, value: Any) -> None:
        if self._python_type is float and isinstance(value, int):
            value = float(value)
        if not isinstance(value, self._python_type):
            raise OtherError(f"Expected {self._python_type.__name__} for {self.tag.name}, "
                             f"got {type(value).__name__}")
        encoder.write_scalar(self.tag, value)

    def _identity(self, value: Any) -> Any:
        return value

    visit_byte = visit_short = visit_int = visit_long = _identity
    visit_float = visit_double = _identity


class BoolNode(TypeNode):
    tag = Tag.BYTE

    def decode(self, decoder: Decoder) -> bool:
        return decoder.decode_bool(self)

    def encode(self, encoder: Encoder, value: Any) -> None:
        encoder.write_bool(bool(value))

    def visit_bool(self, value: bool) -> bool:
        return value


class StringNode(TypeNode):
    tag = Tag.STRING

    def decode(self, decoder: Decoder) -> str:
        return decoder.decode_string(self)

    def encode(self, encoder: Encoder, value: Any) -> None:
        if not isinstance(value, str):
            raise OtherError(f"Expected str for STRING, got {type(value).__name__}")
        encoder.write_string(value)

    def visit_string(self, value: str) -> str:
        return value


class BytesNode(TypeNode):
    tag = Tag.BYTE_ARRAY

    def decode(self, decoder: Decoder) -> bytes:
        return decoder.decode_byte_array(self)

    def encode(self, encoder: Encoder, value: Any) -> None:
        if not isinstance(value, (bytes, bytearray, memoryview)):
            raise OtherError(f"Expected bytes for BYTE_ARRAY, got {type(value).__name__}")
        encoder.write_byte_array(bytes(value))

    def visit_byte_array(self, value: bytes) -> bytes:
        return value


class ArrayNode(TypeNode):
    """IntArray or LongArray decoded to and from ``list[int]``."""

    def __init__(self, tag: Tag) -> None:
        self.tag = tag
        self._element = ScalarNode(tag.array_element, int)

    def decode(self, decoder: Decoder) -> list[int]:
        decoder.expect(self.tag)
        return decoder.decode_sequence(self)

    def encode(self, encoder: Encoder, value: Any) -> None:
        items = list(value)
        encoder.begin_array(len(items))
        for item in items:
            self._element.encode(encoder, item)

    def visit_sequence(self, access: SequenceAccess) -> list[int]:
        items = []
        while access.remaining:
            items.append(access.next_element(self._element))
        return items


class ListNode(TypeNode):
    """List of one element type, optionally of fixed arity."""

    tag = Tag.LIST

    def __init__(self, element: TypeNode, arity: int = 0, container: type = list) -> None:
        self._element = element
        self._arity = arity
        self._container = container

    def decode(self, decoder: Decoder) -> Any:
        return decoder.decode_sequence(self, expected_len=self._arity)

    def visit_sequence(self, access: SequenceAccess) -> Any:
        items = []
        while access.remaining:
            items.append(access.next_element(self._element))
        return self._container(items)

    def encode(self, encoder: Encoder, value: Any) -> None:
        items = list(value)
        element = self._element
        if element.dynamic:
            element_tag = element.tag_for(items[0]) if items else Tag.END
        else:
            element_tag = element.tag
        if self._arity and len(items) != self._arity:
            raise SequenceLengthError(self._arity, len(items), element_tag)

        with encoder.nested():
            encoder.begin_list(element_tag, len(items))
            for item in items:
                if element.dynamic and element.tag_for(item) is not element_tag:
                    raise UnexpectedTypeError(element_tag, element.tag_for(item))
                element.encode(encoder, item)


class MappingNode(TypeNode):
    """``dict[str, T]`` as a Compound."""

    tag = Tag.COMPOUND

    def __init__(self, value_node: TypeNode) -> None:
        self._value_node = value_node

    def decode(self, decoder: Decoder) -> dict[str, Any]:
        return decoder.decode_compound(self)

    def visit_compound(self, access: CompoundAccess) -> dict[str, Any]:
        entries = {}
        while (key := access.next_key()) is not None:
            entries[key] = access.next_value(self._value_node)
        return entries

    def encode(self, encoder: Encoder, value: Any) -> None:
        node = self._value_node
        with encoder.nested():
            for key, item in value.items():
                if item is None and isinstance(node, OptionalNode):
                    continue
                if not isinstance(key, str):
                    raise UnsupportedError(
                        f"Compound keys must be str, got {type(key).__name__}"
                    )
                encoder.write_entry_header(node.tag_for(item), key)
                node.encode(encoder, item)
            encoder.end_compound()


class ModelNode(TypeNode):
    """A pydantic model as a Compound."""

    tag = Tag.COMPOUND

    def __init__(self, model_class: type[BaseModel]) -> None:
        self.model_class = model_class
        self.schema: MessageSchema

    def decode(self, decoder: Decoder) -> BaseModel:
        return decoder.decode_compound(self)

    def visit_compound(self, access: CompoundAccess) -> BaseModel:
        by_key = self.schema.by_key
        values: dict[str, Any] = {}
        while (key := access.next_key()) is not None:
            field_schema = by_key.get(key)
            if field_schema is None:
                access.skip_value()
            else:
                values[key] = access.next_value(field_schema.node)

        for field_schema in self.schema.fields:
            if field_schema.key in values or not field_schema.required:
                continue
            if field_schema.optional:
                values[field_schema.key] = None
            else:
                raise OtherError(
                    f"Missing field `{field_schema.key}` for {self.model_class.__name__}"
                )

        try:
            return self.model_class.model_validate(values)
        except ValidationError as e:
            raise OtherError(f"Failed to construct {self.model_class.__name__}: {e}") from e

    def encode(self, encoder: Encoder, value: Any) -> None:
        with encoder.nested():
            for field_schema in self.schema.fields:
                item = getattr(value, field_schema.name)
                if item is None:
                    if field_schema.optional:
                        continue
                    raise OtherError(f"Field {field_schema.name} is required but got None")
                node = field_schema.node
                encoder.write_entry_header(node.tag_for(item), field_schema.key)
                node.encode(encoder, item)
            encoder.end_compound()


class OptionalNode(TypeNode):
    """``Optional[T]``: absent from the Compound when None."""

    def __init__(self, inner: TypeNode) -> None:
        self._inner = inner
        self.dynamic = inner.dynamic

    @property
    def tag(self) -> Tag:  # type: ignore[override]
        return self._inner.tag

    def tag_for(self, value: Any) -> Tag:
        return self._inner.tag_for(value)

    def decode(self, decoder: Decoder) -> Any:
        return decoder.decode_optional(self._inner)

    def encode(self, encoder: Encoder, value: Any) -> None:
        if value is None:
            raise OtherError("None has no NBT representation outside an omitted Compound entry")
        self._inner.encode(encoder, value)


class ValueNode(TypeNode):
    """A dynamic Value, or one specific Value kind."""

    def __init__(self, value_class: type[Value]) -> None:
        self._value_class = value_class
        self.dynamic = value_class is Value
        self.tag = Tag.END if self.dynamic else value_class.tag

    def tag_for(self, value: Any) -> Tag:
        if not isinstance(value, self._value_class):
            raise OtherError(
                f"Expected {self._value_class.__name__}, got {type(value).__name__}"
            )
        return value.tag

    def decode(self, decoder: Decoder) -> Value:
        return self._value_class.decode(decoder)

    def encode(self, encoder: Encoder, value: Any) -> None:
        self.tag_for(value)
        value.write_payload(encoder)


class InferredNode(TypeNode):
    """Picks the tag from the run-time value: a Value, a model or a mapping."""

    dynamic = True
    tag = Tag.END

    def tag_for(self, value: Any) -> Tag:
        if isinstance(value, Value):
            return value.tag
        if isinstance(value, (BaseModel, Mapping)):
            return Tag.COMPOUND
        raise UnsupportedError(f"Cannot infer an NBT tag for {type(value).__name__}")

    def decode(self, decoder: Decoder) -> Value:
        return Value.decode(decoder)

    def encode(self, encoder: Encoder, value: Any) -> None:
        if isinstance(value, Value):
            value.write_payload(encoder)
        elif isinstance(value, BaseModel):
            compile_type(type(value)).encode(encoder, value)
        elif isinstance(value, Mapping):
            MappingNode(self).encode(encoder, value)
        else:
            raise UnsupportedError(f"Cannot infer an NBT tag for {type(value).__name__}")


class UnsupportedNode(TypeNode):
    """A shape NBT cannot represent. Fails only when actually used."""

    def __init__(self, shape: str) -> None:
        self._shape = shape

    @property
    def tag(self) -> Tag:  # type: ignore[override]
        raise UnsupportedError(f"Encoding of `{self._shape}` is not supported")

    def tag_for(self, value: Any) -> Tag:
        return self.tag

    def decode(self, decoder: Decoder) -> Any:
        raise UnsupportedError(f"Decoding of `{self._shape}` is not supported")

    def encode(self, encoder: Encoder, value: Any) -> None:
        self.tag_for(value)


@dataclass(frozen=True)
class FieldSchema:
    """Schema information for a single model field.

    Attributes:
        name: Python attribute name
        key: Compound key on the wire (the alias when one is set)
        node: Compiled plan for the field's annotation
        required: Whether the field must be present when decoding
        optional: Whether None means "omit this entry"
    """

    name: str
    key: str
    node: TypeNode
    required: bool
    optional: bool


class MessageSchema:
    """Schema information for an entire model.

    Example:
        >>> schema = MessageSchema.from_model(Player)
        >>> for field in schema.fields:
        ...     print(field.key, field.required)
    """

    def __init__(self, model_class: type[BaseModel], memo: dict[Any, TypeNode]) -> None:
        self.model_class = model_class
        self.fields: list[FieldSchema] = []
        self.by_key: dict[str, FieldSchema] = {}
        self._introspect(memo)

    @classmethod
    def from_model(
        cls, model_class: type[BaseModel], memo: dict[Any, TypeNode] | None = None
    ) -> MessageSchema:
        return cls(model_class, {} if memo is None else memo)

    def _introspect(self, memo: dict[Any, TypeNode]) -> None:
        for name, field_info in self.model_class.model_fields.items():
            field_schema = self._extract_field_schema(name, field_info, memo)
            self.fields.append(field_schema)
            self.by_key[field_schema.key] = field_schema

    def _extract_field_schema(
        self, name: str, field_info: FieldInfo, memo: dict[Any, TypeNode]
    ) -> FieldSchema:
        node = compile_type(field_info.annotation, (field_info,), memo)
        return FieldSchema(
            name=name,
            key=field_info.alias or name,
            node=node,
            required=field_info.is_required(),
            optional=isinstance(node, OptionalNode),
        )


def _extras(metadata: Iterable[Any]) -> dict[str, Any]:
    extras: dict[str, Any] = {}
    for item in metadata:
        if isinstance(item, FieldInfo) and isinstance(item.json_schema_extra, dict):
            extras.update(item.json_schema_extra)
    return extras


def _int_node(extras: dict[str, Any]) -> TypeNode:
    bits = extras.get("bits")
    if bits is None:
        return ScalarNode(Tag.INT, int)
    if not extras.get("signed", True):
        return UnsupportedNode(f"u{bits}")
    if bits not in _INT_TAGS:
        return UnsupportedNode(f"i{bits}")
    return ScalarNode(_INT_TAGS[bits], int)


def _float_node(extras: dict[str, Any]) -> TypeNode:
    bits = extras.get("bits", 64)
    if bits not in _FLOAT_TAGS:
        return UnsupportedNode(f"f{bits}")
    return ScalarNode(_FLOAT_TAGS[bits], float)


def _tuple_node(args: tuple[Any, ...], memo: dict[Any, TypeNode]) -> TypeNode:
    if not args or args == ((),):
        return UnsupportedNode("unit")
    if len(args) == 2 and args[1] is Ellipsis:
        return ListNode(compile_type(args[0], (), memo), container=tuple)
    if any(arg != args[0] for arg in args[1:]):
        return UnsupportedNode("heterogeneous tuple")
    return ListNode(compile_type(args[0], (), memo), arity=len(args), container=tuple)


def compile_type(
    annotation: Any,
    metadata: Iterable[Any] = (),
    memo: dict[Any, TypeNode] | None = None,
) -> TypeNode:
    """Compile a type annotation into a TypeNode.

    Shapes NBT cannot represent compile to nodes that raise UnsupportedError
    when used, so a model with such a field can still be declared.

    Args:
        annotation: Type annotation to compile
        metadata: Annotated metadata (pydantic FieldInfo) attached to it
        memo: Models already compiled in this pass (handles recursive models)

    Returns:
        Root node of the compiled plan
    """
    memo = {} if memo is None else memo
    metadata = tuple(metadata)
    origin = get_origin(annotation)
    args = get_args(annotation)

    if origin is Annotated:
        return compile_type(args[0], (*metadata, *args[1:]), memo)

    if origin is Union or origin is types.UnionType:
        non_none = [arg for arg in args if arg is not type(None)]
        if len(non_none) == 1 and len(args) == 2:
            return OptionalNode(compile_type(non_none[0], metadata, memo))
        return UnsupportedNode(f"union {annotation}")

    extras = _extras(metadata)

    if origin in (list, Sequence, Iterable) or annotation is list:
        array_tag = _ARRAY_TAGS.get(extras.get("nbt_tag", ""))
        if array_tag is not None:
            return ArrayNode(array_tag)
        element = compile_type(args[0], (), memo) if args else ValueNode(Value)
        return ListNode(element)

    if origin is tuple:
        return _tuple_node(args, memo)

    if origin in (dict, Mapping) or annotation is dict:
        if args and args[0] is not str:
            return UnsupportedNode(f"non-string keys {args[0]}")
        value_node = compile_type(args[1], (), memo) if args else ValueNode(Value)
        return MappingNode(value_node)

    if annotation is Any:
        return UnsupportedNode("any")
    if annotation is None or annotation is type(None):
        return UnsupportedNode("unit")
    if not isinstance(annotation, type):
        return UnsupportedNode(str(annotation))

    if issubclass(annotation, Value):
        return ValueNode(annotation)
    if issubclass(annotation, BaseModel):
        node = memo.get(annotation)
        if node is None:
            node = ModelNode(annotation)
            memo[annotation] = node
            node.schema = MessageSchema.from_model(annotation, memo)
        return node
    if issubclass(annotation, enum.Enum):
        return UnsupportedNode("enum")
    if annotation is bool:
        return BoolNode()
    if annotation is int:
        return _int_node(extras)
    if annotation is float:
        return _float_node(extras)
    if annotation is str:
        return StringNode()
    if annotation in (bytes, bytearray):
        return BytesNode()
    if annotation is memoryview:
        return UnsupportedNode("byte slice")
    if issubclass(annotation, tuple) and hasattr(annotation, "_fields"):
        return UnsupportedNode("tuple struct")
    if annotation is tuple:
        return ListNode(ValueNode(Value), container=tuple)
    return UnsupportedNode(annotation.__name__)
