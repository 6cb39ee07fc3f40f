"""Pytest configuration and shared fixtures."""

from __future__ import annotations

import pytest

from nbtx import Compound, String, Variant


@pytest.fixture
def hello_world_be() -> bytes:
    """The classic hello_world.nbt document in big-endian form."""
    return (
        b"\x0a\x00\x0bhello world"
        b"\x08\x00\x04name\x00\x09Bananrama"
        b"\x00"
    )


@pytest.fixture
def hello_world_value() -> Compound:
    """Dynamic tree matching hello_world_be."""
    return Compound({"name": String("Bananrama")})


@pytest.fixture(params=list(Variant), ids=lambda v: v.value)
def variant(request: pytest.FixtureRequest) -> Variant:
    """Each of the three wire variants."""
    return request.param
