"""Field type helpers and utilities.

Python has one int and one float type while NBT has four integer and two float
widths. These helpers record the intended NBT tag on a field; they work both as
a field default and inside ``Annotated`` (including list elements).

Without a helper, ``int`` is written as Int and ``float`` as Double.
"""

from __future__ import annotations

from typing import Any, cast

from pydantic import Field
from pydantic.fields import FieldInfo

_SIGNED_BOUNDS = {
    8: (-(2**7), 2**7 - 1),
    16: (-(2**15), 2**15 - 1),
    32: (-(2**31), 2**31 - 1),
    64: (-(2**63), 2**63 - 1),
}


def FixedInt(*, bits: int, signed: bool = True, **kwargs: Any) -> FieldInfo:
    """Create a fixed-size integer field.

    Signed widths map to NBT tags: 8 -> Byte, 16 -> Short, 32 -> Int, 64 -> Long.
    Signed widths also get matching ge=/le= constraints. Unsigned and 128-bit
    integers have no NBT representation; fields declared with them fail with
    UnsupportedError when encoded or decoded.

    Args:
        bits: Number of bits (8, 16, 32 or 64)
        signed: Whether the integer is signed (default True)
        **kwargs: Additional Field() arguments

    Returns:
        Pydantic FieldInfo suitable for use as a field default/metadata.

    Example:
        >>> class Player(NbtModel):
        ...     health: int = FixedInt(bits=16)
        ...     rotation: list[Annotated[int, FixedInt(bits=8)]]
    """
    bounds = _SIGNED_BOUNDS.get(bits) if signed else None
    if bounds is not None:
        kwargs.setdefault("ge", bounds[0])
        kwargs.setdefault("le", bounds[1])
    return cast(FieldInfo, Field(json_schema_extra={"bits": bits, "signed": signed}, **kwargs))


def FixedFloat(*, bits: int, **kwargs: Any) -> FieldInfo:
    """Create a fixed-size float field.

    Args:
        bits: 32 for an NBT Float, 64 for an NBT Double
        **kwargs: Additional Field() arguments

    Returns:
        Pydantic FieldInfo suitable for use as a field default/metadata.

    Example:
        >>> class Food(NbtModel):
        ...     value: float = FixedFloat(bits=32)

    Note:
        A 32-bit field stores whatever Python float it is given; values that
        are not exactly representable in single precision come back rounded.
    """
    return cast(FieldInfo, Field(json_schema_extra={"bits": bits}, **kwargs))


def IntArrayField(**kwargs: Any) -> FieldInfo:
    """Mark a ``list[int]`` field as an NBT IntArray instead of a List of Int.

    Example:
        >>> class Entity(NbtModel):
        ...     uuid: list[int] = IntArrayField()
    """
    return cast(FieldInfo, Field(json_schema_extra={"nbt_tag": "INT_ARRAY"}, **kwargs))


def LongArrayField(**kwargs: Any) -> FieldInfo:
    """Mark a ``list[int]`` field as an NBT LongArray instead of a List of Long."""
    return cast(FieldInfo, Field(json_schema_extra={"nbt_tag": "LONG_ARRAY"}, **kwargs))
