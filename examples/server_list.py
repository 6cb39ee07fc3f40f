#!/usr/bin/env python3
"""Reading and writing a servers.dat style file.

The multiplayer server list is stored as an uncompressed big-endian NBT file.
Entries may omit the icon and the texture flag.
"""

from __future__ import annotations

import sys
import tempfile
from pathlib import Path
from typing import Optional

from pydantic import Field

from nbtx import NbtError, NbtModel, decode, encode_into


class ServerDatItem(NbtModel):
    icon: Optional[str] = None
    ip: str
    name: str
    accept_textures: Optional[bool] = Field(default=None, alias="acceptTextures")


class ServerDat(NbtModel):
    servers: list[ServerDatItem]


def main() -> None:
    """Write a server list to disk and read it back."""
    servers = ServerDat(
        servers=[
            ServerDatItem(ip="mc.example.org", name="Example", accept_textures=True),
            ServerDatItem(ip="10.0.0.2:25565", name="LAN party"),
        ]
    )

    path = Path(tempfile.mkdtemp()) / "servers.dat"
    with path.open("wb") as f:
        encode_into(f, servers)
    print(f"Wrote {path.stat().st_size} bytes to {path}")

    try:
        with path.open("rb") as f:
            loaded = decode(ServerDat, f)
    except NbtError as e:
        print(f"Failed to read {path}: {e}", file=sys.stderr)
        sys.exit(1)

    for server in loaded.servers:
        textures = "unset" if server.accept_textures is None else server.accept_textures
        print(f"  {server.name:<12} {server.ip:<20} textures={textures}")


if __name__ == "__main__":
    main()
