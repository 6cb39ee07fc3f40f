#!/usr/bin/env python3
"""Basic usage example for nbtx.

This example demonstrates:
1. Defining a record with Pydantic
2. Encoding it in each NBT variant
3. Decoding back to a Pydantic model
4. Inspecting the same bytes as a dynamic Value tree
"""

from __future__ import annotations

from typing import Optional

from pydantic import Field

from nbtx import FixedFloat, FixedInt, NbtModel, Value, Variant, decode, encode


class Player(NbtModel):
    """A small player record.

    Widths that differ from Python's defaults are declared with field helpers.
    """

    name: str = Field(alias="Name")
    health: int = FixedInt(bits=16, alias="Health")
    xp_level: int = Field(alias="XpLevel")
    fall_distance: float = FixedFloat(bits=32, alias="FallDistance")
    pos: tuple[float, float, float] = Field(alias="Pos")
    spawn_world: Optional[str] = Field(default=None, alias="SpawnWorld")


def main() -> None:
    """Run the basic usage example."""
    print("=" * 60)
    print("nbtx Basic Usage Example")
    print("=" * 60)
    print()

    print("1. Creating a player record...")
    player = Player(
        name="Steve",
        health=20,
        xp_level=7,
        fall_distance=0.0,
        pos=(0.5, 64.0, -12.5),
    )
    print(f"   {player!r}")
    print()

    print("2. Encoding in each variant...")
    encoded = {variant: encode(player, variant) for variant in Variant}
    for variant, data in encoded.items():
        print(f"   {variant.name:<22} {len(data):>3} bytes  {data[:16].hex(' ')} ...")
    print()

    print("3. Decoding back to a record...")
    for variant, data in encoded.items():
        decoded = decode(Player, data, variant)
        status = "OK" if decoded == player else "MISMATCH"
        print(f"   {variant.name:<22} {status}")
    print()

    print("4. Reading the same bytes as a dynamic tree...")
    tree = decode(Value, encoded[Variant.BIG_ENDIAN])
    for key, item in tree.value.items():
        print(f"   {key:<14} {item.tag.name:<8} {item.value!r}")
    print()
    print("SpawnWorld is None, so it was not written.")


if __name__ == "__main__":
    main()
