"""Configuration for encode/decode calls.

This module provides the configuration dataclass accepted by every entry point.
A configuration is read once per call; no state survives between calls.
"""

from __future__ import annotations

from dataclasses import dataclass

DEFAULT_MAX_DEPTH = 128


@dataclass(frozen=True)
class CodecConfig:
    """Limits applied to a single encode or decode call.

    Attributes:
        max_depth: Maximum nesting of Lists and Compounds (default 128).
            The root Compound counts as depth 1. Decoding untrusted input
            deeper than this fails with DepthLimitError instead of
            recursing without bound. Each level costs several interpreter
            frames, so values far above the default can hit the
            interpreter's own recursion limit first; that case is reported
            as DepthLimitError as well.

    Examples:
        ```python
        from nbtx import CodecConfig, Value, decode

        # Shallow documents only
        value = decode(Value, data, config=CodecConfig(max_depth=16))
        ```
    """

    max_depth: int = DEFAULT_MAX_DEPTH

    def __post_init__(self) -> None:
        """Validate configuration parameters."""
        if self.max_depth < 1:
            raise ValueError(f"max_depth must be >= 1, got {self.max_depth}")
