"""nbtx: Named Binary Tag codec

A Python library for reading and writing NBT, the tagged binary tree format
used by Minecraft. All three wire variants are supported:

- Big-endian (Java Edition files and network)
- Little-endian (Bedrock Edition disk formats)
- Network little-endian (Bedrock Edition network, with varints)

Key Features:
- Dynamic Value tree for documents of unknown shape
- Pydantic-based typed records sharing one wire implementation
- Strict, tag-exact decoding with a nesting depth limit
- Pure Python implementation

Quick Start:
    >>> from nbtx import NbtModel, FixedInt, Variant, encode, decode
    >>>
    >>> class Player(NbtModel):
    ...     name: str
    ...     health: int = FixedInt(bits=16)
    ...     inventory: list[str] = []
    >>>
    >>> player = Player(name="Steve", health=20)
    >>> data = encode(player, Variant.NETWORK_LITTLE_ENDIAN)
    >>> decoded = decode(Player, data, Variant.NETWORK_LITTLE_ENDIAN)
"""

from __future__ import annotations

from .codec import (
    Variant,
    decode,
    encode,
    encode_into,
    from_be_bytes,
    from_le_bytes,
    from_net_bytes,
    to_be_bytes,
    to_le_bytes,
    to_net_bytes,
)
from .config import CodecConfig
from .exceptions import (
    DepthLimitError,
    NbtError,
    NbtIOError,
    OtherError,
    SequenceLengthError,
    UnexpectedTypeError,
    UnrecognizedTagError,
    UnsupportedError,
    Utf8Error,
)
from .models import FixedFloat, FixedInt, IntArrayField, LongArrayField, NbtModel
from .tags import Tag
from .value import (
    Byte,
    ByteArray,
    Compound,
    Double,
    Float,
    Int,
    IntArray,
    List,
    Long,
    LongArray,
    Short,
    String,
    Value,
)

__version__ = "0.1.0"

__all__ = [
    # Core API
    "encode",
    "encode_into",
    "decode",
    "Variant",
    "CodecConfig",
    "Tag",
    # Variant shortcuts
    "to_be_bytes",
    "to_le_bytes",
    "to_net_bytes",
    "from_be_bytes",
    "from_le_bytes",
    "from_net_bytes",
    # Dynamic values
    "Value",
    "Byte",
    "Short",
    "Int",
    "Long",
    "Float",
    "Double",
    "ByteArray",
    "String",
    "List",
    "Compound",
    "IntArray",
    "LongArray",
    # Typed records
    "NbtModel",
    "FixedInt",
    "FixedFloat",
    "IntArrayField",
    "LongArrayField",
    # Exceptions
    "NbtError",
    "UnexpectedTypeError",
    "UnrecognizedTagError",
    "UnsupportedError",
    "NbtIOError",
    "Utf8Error",
    "OtherError",
    "SequenceLengthError",
    "DepthLimitError",
]
