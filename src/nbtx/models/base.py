"""Base record class and nbtx-specific Pydantic configuration.

This module provides the NbtModel class that typed NBT records should inherit from.
Plain pydantic BaseModel subclasses work too; NbtModel adds the root name option
and a configuration suited to decoded data.
"""

from __future__ import annotations

from typing import ClassVar

from pydantic import BaseModel, ConfigDict


class NbtModel(BaseModel):
    """Base class for typed NBT records.

    Fields are written to the Compound in declaration order. A field's key is
    its pydantic alias when one is set, so keys that are not Python
    identifiers can be mapped with ``Field(alias=...)``.

    Example:
        >>> from typing import ClassVar, Optional
        >>> from pydantic import Field
        >>> class Server(NbtModel):
        ...     ip: str
        ...     name: str
        ...     accept_textures: Optional[bool] = Field(default=None, alias="acceptTextures")
        ...
        ...     nbt_root_name: ClassVar[str] = ""

    Attributes:
        nbt_root_name: Name written for the root Compound when this model is
            the top-level value (ignored when decoding)
    """

    model_config = ConfigDict(
        # Coercion is left to the field types
        strict=False,
        # Permit user-defined field types
        arbitrary_types_allowed=True,
        # Validate on assignment
        validate_assignment=True,
        # Aliased fields may also be set by attribute name
        populate_by_name=True,
        # Forbid extra fields not defined in schema
        extra="forbid",
    )

    nbt_root_name: ClassVar[str] = ""
