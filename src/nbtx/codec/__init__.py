"""Binary codec for NBT.

This module provides the decoder, the encoder and the schema compiler shared by
the dynamic Value tree and typed pydantic models.
"""

from __future__ import annotations

from .decoder import decode, from_be_bytes, from_le_bytes, from_net_bytes
from .encoder import encode, encode_into, to_be_bytes, to_le_bytes, to_net_bytes
from .schema import FieldSchema, MessageSchema, compile_type
from .variant import Variant

__all__ = [
    "encode",
    "encode_into",
    "decode",
    "to_be_bytes",
    "to_le_bytes",
    "to_net_bytes",
    "from_be_bytes",
    "from_le_bytes",
    "from_net_bytes",
    "Variant",
    "MessageSchema",
    "FieldSchema",
    "compile_type",
]
