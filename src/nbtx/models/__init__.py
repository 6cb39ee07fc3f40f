"""Pydantic record modeling for nbtx.

This module provides the NbtModel base class and field helpers for declaring
the NBT width of numeric fields.
"""

from __future__ import annotations

from .base import NbtModel
from .fields import FixedFloat, FixedInt, IntArrayField, LongArrayField

__all__ = [
    "NbtModel",
    "FixedInt",
    "FixedFloat",
    "IntArrayField",
    "LongArrayField",
]
