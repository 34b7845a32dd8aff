from __future__ import annotations

import struct

import pytest

from virtual_mentor.ibt.errors import LayoutError, PrimitiveSizeError
from virtual_mentor.ibt.layout import VarType
from virtual_mentor.ibt.primitives import Primitive, decode_elements, decode_primitive


def test_int_needs_exactly_four_bytes() -> None:
    with pytest.raises(PrimitiveSizeError) as excinfo:
        decode_primitive(VarType.INT, b"\x01\x00")

    assert excinfo.value.expected == 4
    assert excinfo.value.actual == 2
    assert "Int" in str(excinfo.value)

    assert decode_primitive(VarType.INT, struct.pack("<i", -7)) == Primitive(VarType.INT, -7)


@pytest.mark.parametrize(
    ("var_type", "payload", "expected"),
    [
        (VarType.CHAR, b"A", "A"),
        (VarType.BOOL, b"\x00", False),
        (VarType.BOOL, b"\x02", True),
        (VarType.BITFIELD, b"\xff\xff\xff\xff", 0xFFFFFFFF),
        (VarType.FLOAT, struct.pack("<f", 1.5), 1.5),
        (VarType.DOUBLE, struct.pack("<d", 93.86666742960224), 93.86666742960224),
    ],
)
def test_decode_primitive_values(var_type: VarType, payload: bytes, expected) -> None:
    primitive = decode_primitive(var_type, payload)

    assert primitive.var_type is var_type
    assert primitive.value == expected


def test_etcount_has_no_sample_representation() -> None:
    with pytest.raises(LayoutError) as excinfo:
        decode_primitive(VarType.ETCOUNT, b"")

    assert excinfo.value.field == "ETCount"


def test_as_number_maps_chars_and_bools() -> None:
    assert Primitive(VarType.CHAR, "A").as_number() == 65
    assert Primitive(VarType.BOOL, True).as_number() == 1
    assert Primitive(VarType.FLOAT, 2.5).as_number() == 2.5


def test_primitive_str_names_the_type() -> None:
    assert str(Primitive(VarType.INT, 3)) == "Int(3)"
    assert str(Primitive(VarType.BITFIELD, 8)) == "BitField(8)"


def test_decode_elements_splits_array_values() -> None:
    elements = decode_elements(VarType.INT, struct.pack("<3i", 4, 5, 6), 3)

    assert [element.value for element in elements] == [4, 5, 6]


def test_decode_elements_rejects_short_span() -> None:
    with pytest.raises(PrimitiveSizeError):
        decode_elements(VarType.FLOAT, b"\x00" * 10, 3)
