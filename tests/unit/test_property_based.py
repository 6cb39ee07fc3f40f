"""Property-based tests using hypothesis."""

from __future__ import annotations

from hypothesis import given, settings
from hypothesis import strategies as st

from nbtx import (
    Byte,
    ByteArray,
    Compound,
    Double,
    FixedInt,
    Float,
    Int,
    IntArray,
    List,
    Long,
    LongArray,
    NbtError,
    NbtModel,
    Short,
    String,
    Value,
    Variant,
    decode,
    encode,
)

I32 = st.integers(min_value=-(2**31), max_value=2**31 - 1)
I64 = st.integers(min_value=-(2**63), max_value=2**63 - 1)

scalars = st.one_of(
    st.integers(min_value=-128, max_value=127).map(Byte),
    st.integers(min_value=-(2**15), max_value=2**15 - 1).map(Short),
    I32.map(Int),
    I64.map(Long),
    st.floats(allow_nan=False, width=32).map(Float),
    st.floats(allow_nan=False).map(Double),
    st.binary(max_size=32).map(ByteArray),
    st.text(max_size=32).map(String),
    st.lists(I32, max_size=8).map(IntArray),
    st.lists(I64, max_size=8).map(LongArray),
)


def _homogeneous(items: list[Value]) -> List:
    return List([item for item in items if items and item.tag is items[0].tag])


values = st.recursive(
    scalars,
    lambda children: st.one_of(
        st.lists(children, max_size=5).map(_homogeneous),
        st.dictionaries(st.text(max_size=8), children, max_size=5).map(Compound),
    ),
    max_leaves=20,
)

documents = st.dictionaries(st.text(max_size=8), values, max_size=6).map(Compound)
variants = st.sampled_from(list(Variant))


class Counter(NbtModel):
    """Record for property testing."""

    value: int
    small: int = FixedInt(bits=8)
    flag: bool


class TestCodecProperties:
    """Property-based tests for codec."""

    @given(document=documents, variant=variants)
    def test_value_roundtrip(self, document: Compound, variant: Variant) -> None:
        """Test encode/decode is invertible for dynamic trees."""
        assert decode(Value, encode(document, variant), variant) == document

    @given(document=documents, variant=variants)
    def test_encode_deterministic(self, document: Compound, variant: Variant) -> None:
        """Test encoding the same tree twice gives the same bytes."""
        assert encode(document, variant) == encode(document, variant)

    @given(
        value=st.integers(min_value=-(2**31), max_value=2**31 - 1),
        small=st.integers(min_value=-128, max_value=127),
        flag=st.booleans(),
        variant=variants,
    )
    def test_record_roundtrip(self, value: int, small: int, flag: bool, variant: Variant) -> None:
        """Test encode/decode is invertible for records."""
        record = Counter(value=value, small=small, flag=flag)
        assert decode(Counter, encode(record, variant), variant) == record


class TestDecoderRobustness:
    """Arbitrary input never escapes the error hierarchy."""

    @settings(max_examples=300)
    @given(body=st.binary(max_size=200), variant=variants)
    def test_arbitrary_input(self, body: bytes, variant: Variant) -> None:
        """Test decoding arbitrary bytes returns a Value or raises NbtError."""
        try:
            result = decode(Value, b"\x0a\x00" + body, variant)
        except NbtError:
            return
        assert isinstance(result, Compound)

    @settings(max_examples=100)
    @given(body=st.binary(max_size=200), variant=variants)
    def test_arbitrary_input_typed(self, body: bytes, variant: Variant) -> None:
        """Test typed decoding of arbitrary bytes raises only NbtError."""
        try:
            decode(Counter, b"\x0a\x00" + body, variant)
        except NbtError:
            pass
