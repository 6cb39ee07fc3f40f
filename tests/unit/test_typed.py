"""Unit tests for typed records."""

from __future__ import annotations

import enum
from typing import Annotated, ClassVar, Optional

import pytest
from pydantic import Field

from nbtx import (
    ByteArray,
    Compound,
    Double,
    FixedFloat,
    FixedInt,
    Float,
    Int,
    IntArray,
    IntArrayField,
    List,
    LongArray,
    LongArrayField,
    NbtModel,
    OtherError,
    SequenceLengthError,
    Short,
    String,
    Tag,
    UnexpectedTypeError,
    UnsupportedError,
    Value,
    Variant,
    decode,
    encode,
)
from nbtx.codec import MessageSchema, compile_type


class Color(enum.Enum):
    """Test enum."""

    RED = 1
    GREEN = 2


class Player(NbtModel):
    """Player record with a spread of field shapes."""

    name: str
    health: int = FixedInt(bits=16)
    level: int = 0
    pos: tuple[float, float, float] = (0.0, 0.0, 0.0)
    inventory: list[str] = []
    nickname: Optional[str] = None


class Food(NbtModel):
    """Nested record."""

    name: str
    value: float = FixedFloat(bits=32)


class Kitchen(NbtModel):
    """Record holding nested records."""

    foods: list[Food]
    best: Food


class Sized(NbtModel):
    """Record using every integer width."""

    b: int = FixedInt(bits=8)
    s: int = FixedInt(bits=16)
    i: int = FixedInt(bits=32)
    l: int = FixedInt(bits=64)
    flag: bool = False
    blob: bytes = b""
    ratio: float = 0.0


class Arrays(NbtModel):
    """Record with packed arrays."""

    uuid: list[int] = IntArrayField()
    heights: list[int] = LongArrayField()
    bytes_as_list: list[Annotated[int, FixedInt(bits=8)]] = []


class Aliased(NbtModel):
    """Record with wire keys that are not Python identifiers."""

    on_ground: bool = Field(alias="OnGround")
    death_time: int = FixedInt(bits=16, alias="DeathTime")


class HelloWorld(NbtModel):
    """Record with a dynamic field and a root name."""

    nbt_root_name: ClassVar[str] = "hello world"

    name: Value


class WithEnum(NbtModel):
    """Record with a shape NBT cannot represent."""

    color: Color


class WithUnsigned(NbtModel):
    """Record with an unsigned integer."""

    port: int = FixedInt(bits=16, signed=False)


def _entries(data: bytes, variant: Variant = Variant.BIG_ENDIAN) -> Compound:
    return decode(Value, data, variant)


class TestRoundTrip:
    """Test typed encode/decode."""

    def test_player(self, variant: Variant) -> None:
        """Test a record round-trips in every variant."""
        player = Player(name="Steve", health=20, pos=(1.5, 64.0, -3.25), inventory=["apple"])
        assert decode(Player, encode(player, variant), variant) == player

    def test_nested_records(self) -> None:
        """Test records inside Lists and Compounds."""
        ham = Food(name="ham", value=0.75)
        kitchen = Kitchen(foods=[Food(name="egg", value=0.5), ham], best=ham)
        assert decode(Kitchen, encode(kitchen)) == kitchen

    def test_sized_fields(self) -> None:
        """Test every integer width maps to its tag."""
        record = Sized(b=-5, s=300, i=-70000, l=2**40, flag=True, blob=b"\x00\xff", ratio=0.1)
        data = encode(record)
        entries = _entries(data)
        assert [entries[k].tag for k in ("b", "s", "i", "l", "flag", "blob", "ratio")] == [
            Tag.BYTE,
            Tag.SHORT,
            Tag.INT,
            Tag.LONG,
            Tag.BYTE,
            Tag.BYTE_ARRAY,
            Tag.DOUBLE,
        ]
        assert decode(Sized, data) == record

    def test_float32_field(self) -> None:
        """Test FixedFloat(bits=32) is written as Float."""
        entries = _entries(encode(Food(name="egg", value=0.5)))
        assert entries["value"] == Float(0.5)

    def test_arrays(self) -> None:
        """Test IntArray and LongArray fields."""
        record = Arrays(uuid=[1, -2, 3, 4], heights=[2**40], bytes_as_list=[-1, 2])
        data = encode(record)
        entries = _entries(data)
        assert entries["uuid"] == IntArray([1, -2, 3, 4])
        assert entries["heights"].tag is Tag.LONG_ARRAY
        assert entries["bytes_as_list"].tag is Tag.LIST
        assert decode(Arrays, data) == record

    def test_byte_list_from_byte_array(self) -> None:
        """Test a list of bytes accepts a ByteArray on the wire."""
        data = encode(
            Compound({"uuid": IntArray(), "heights": LongArray(), "bytes_as_list": ByteArray(b"\x01\xff")})
        )
        assert decode(Arrays, data).bytes_as_list == [1, -1]

    def test_aliases(self) -> None:
        """Test aliases are used as wire keys."""
        record = Aliased(on_ground=True, death_time=3)
        data = encode(record)
        assert set(_entries(data).value) == {"OnGround", "DeathTime"}
        assert decode(Aliased, data) == record

    def test_dynamic_field(self, hello_world_be: bytes) -> None:
        """Test a Value field and a custom root name reproduce a document exactly."""
        record = decode(HelloWorld, hello_world_be)
        assert record.name == String("Bananrama")
        assert encode(record) == hello_world_be

    def test_mapping_target(self) -> None:
        """Test decoding into dict[str, int]."""
        data = encode(Compound({"a": Int(1), "b": Int(2)}))
        assert decode(dict[str, int], data) == {"a": 1, "b": 2}


class TestOptional:
    """Test Optional fields."""

    def test_none_is_omitted(self) -> None:
        """Test a None Optional field writes no entry."""
        data = encode(Player(name="Alex", health=10))
        assert "nickname" not in _entries(data)
        assert decode(Player, data).nickname is None

    def test_present_value(self) -> None:
        """Test a set Optional field round-trips."""
        player = Player(name="Alex", health=10, nickname="Al")
        assert _entries(encode(player))["nickname"] == String("Al")
        assert decode(Player, encode(player)).nickname == "Al"


class TestStrictness:
    """Test tag-exact decoding."""

    def test_int_field_rejects_short(self) -> None:
        """Test an Int field does not accept a Short payload."""
        data = encode(Compound({"name": String("x"), "health": Short(1), "level": Short(1)}))
        with pytest.raises(UnexpectedTypeError) as exc_info:
            decode(Player, data)
        assert exc_info.value.expected is Tag.INT
        assert exc_info.value.actual is Tag.SHORT

    def test_short_field_rejects_int(self) -> None:
        """Test a Short field does not accept an Int payload."""
        data = encode(Compound({"name": String("x"), "health": Int(1)}))
        with pytest.raises(UnexpectedTypeError) as exc_info:
            decode(Player, data)
        assert exc_info.value.expected is Tag.SHORT
        assert exc_info.value.actual is Tag.INT

    def test_fixed_arity(self) -> None:
        """Test a fixed-size tuple rejects a List of a different length."""
        data = encode(
            Compound({"name": String("x"), "health": Short(1), "pos": List([Double(1.0), Double(2.0)])})
        )
        with pytest.raises(SequenceLengthError) as exc_info:
            decode(Player, data)
        assert exc_info.value.expected == 3
        assert exc_info.value.actual == 2
        assert str(exc_info.value) == "Sequence of 3 DOUBLE expected, found only 2 items"

    def test_missing_field(self) -> None:
        """Test a required field absent from the wire."""
        data = encode(Compound({"health": Short(1)}))
        with pytest.raises(OtherError, match="Missing field `name`"):
            decode(Player, data)

    def test_unknown_keys_skipped(self) -> None:
        """Test entries without a matching field are ignored."""
        data = encode(
            Compound(
                {
                    "name": String("x"),
                    "health": Short(1),
                    "extra": Compound({"deep": List([Int(1)])}),
                    "level": Int(4),
                }
            )
        )
        player = decode(Player, data)
        assert player.level == 4

    def test_validation_failure(self) -> None:
        """Test pydantic constraints still apply after decoding."""

        class Bounded(NbtModel):
            percent: int = Field(ge=0, le=100)

        with pytest.raises(OtherError, match="Failed to construct Bounded"):
            decode(Bounded, encode(Compound({"percent": Int(101)})))

    def test_bytes_field_rejects_int(self) -> None:
        """Test a bytes field holding an int fails instead of writing zero bytes."""

        class Blob(NbtModel):
            data: bytes

        with pytest.raises(OtherError, match="Expected bytes for BYTE_ARRAY, got int"):
            encode(Blob.model_construct(data=5))


class TestUnsupported:
    """Test shapes with no NBT representation."""

    def test_enum_encode(self) -> None:
        """Test enum fields fail on encode."""
        with pytest.raises(UnsupportedError):
            encode(WithEnum(color=Color.RED))

    def test_enum_decode(self) -> None:
        """Test enum fields fail on decode."""
        with pytest.raises(UnsupportedError):
            decode(WithEnum, encode(Compound({"color": Int(1)})))

    def test_unsigned(self) -> None:
        """Test unsigned integers are rejected."""
        with pytest.raises(UnsupportedError, match="u16"):
            encode(WithUnsigned(port=80))

    @pytest.mark.parametrize("annotation", [tuple[int, str], tuple[()], dict[int, int], type(None), memoryview])
    def test_unsupported_annotations(self, annotation: object) -> None:
        """Test unsupported shapes compile but fail when used."""
        node = compile_type(annotation)
        with pytest.raises(UnsupportedError):
            node.tag_for(None)


class TestSchema:
    """Test schema introspection."""

    def test_fields(self) -> None:
        """Test field keys and flags."""
        schema = MessageSchema.from_model(Aliased)
        assert [f.key for f in schema.fields] == ["OnGround", "DeathTime"]
        assert schema.by_key["DeathTime"].name == "death_time"
        assert schema.by_key["DeathTime"].required

    def test_optional_flag(self) -> None:
        """Test Optional fields are marked."""
        schema = MessageSchema.from_model(Player)
        assert schema.by_key["nickname"].optional
        assert not schema.by_key["name"].optional
