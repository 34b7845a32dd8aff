"""Type-tagged scalar decoding for IBT sample rows."""

from __future__ import annotations

from dataclasses import dataclass
import struct
from typing import Callable, Union

from .errors import LayoutError, PrimitiveSizeError
from .layout import VarType

__all__ = ["Primitive", "PrimitiveValue", "decode_primitive", "decode_elements"]

PrimitiveValue = Union[str, bool, int, float]

_I32 = struct.Struct("<i")
_U32 = struct.Struct("<I")
_F32 = struct.Struct("<f")
_F64 = struct.Struct("<d")


@dataclass(frozen=True)
class Primitive:
    """A single decoded sample element together with its type tag."""

    var_type: VarType
    value: PrimitiveValue

    def as_number(self) -> float | int:
        """Return the value as a number (characters map to their code point)."""

        if self.var_type is VarType.CHAR:
            return ord(self.value)  # type: ignore[arg-type]
        if self.var_type is VarType.BOOL:
            return int(self.value)
        return self.value  # type: ignore[return-value]

    def __str__(self) -> str:
        return f"{self.var_type.label}({self.value!r})"


def _char(data: bytes) -> str:
    return data.decode("latin-1")


def _bool(data: bytes) -> bool:
    return data[0] != 0


_DECODERS: dict[VarType, Callable[[bytes], PrimitiveValue]] = {
    VarType.CHAR: _char,
    VarType.BOOL: _bool,
    VarType.INT: lambda data: _I32.unpack(data)[0],
    VarType.BITFIELD: lambda data: _U32.unpack(data)[0],
    VarType.FLOAT: lambda data: _F32.unpack(data)[0],
    VarType.DOUBLE: lambda data: _F64.unpack(data)[0],
}


def decode_primitive(var_type: VarType, data: bytes) -> Primitive:
    """Decode ``data`` as one element of ``var_type``.

    The span must be exactly as wide as the type; anything else raises
    :class:`PrimitiveSizeError`. ``ETCount`` has no value representation and
    is rejected with :class:`LayoutError`.
    """

    decoder = _DECODERS.get(var_type)
    if decoder is None:
        raise LayoutError(var_type.label, bytes(data), "type has no sample representation")
    expected = var_type.byte_size
    if len(data) != expected:
        raise PrimitiveSizeError(var_type.label, expected, len(data))
    return Primitive(var_type, decoder(bytes(data)))


def decode_elements(var_type: VarType, data: bytes, count: int) -> tuple[Primitive, ...]:
    """Decode ``count`` consecutive elements of ``var_type`` from ``data``."""

    width = var_type.byte_size
    if len(data) != width * count:
        raise PrimitiveSizeError(var_type.label, width * count, len(data))
    return tuple(
        decode_primitive(var_type, data[index * width : (index + 1) * width])
        for index in range(count)
    )
