"""Unit tests for CodecConfig."""

from __future__ import annotations

import pytest

from nbtx import CodecConfig
from nbtx.config import DEFAULT_MAX_DEPTH


def test_defaults() -> None:
    """Test default limits."""
    assert CodecConfig().max_depth == DEFAULT_MAX_DEPTH == 128


def test_invalid_depth() -> None:
    """Test validation of max_depth."""
    with pytest.raises(ValueError, match="max_depth must be >= 1"):
        CodecConfig(max_depth=0)


def test_frozen() -> None:
    """Test configs are immutable."""
    config = CodecConfig(max_depth=8)
    with pytest.raises(AttributeError):
        config.max_depth = 9  # type: ignore[misc]
