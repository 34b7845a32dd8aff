"""Fixed-size regions of an IBT telemetry recording.

An IBT file starts with a 112 byte header describing where the session YAML,
the variable descriptors and the sample buffers live.  A 32 byte disk summary
follows the header and the variable descriptors (144 bytes each) sit at the
offset declared by the header.  All integers are little-endian.

Every region is decoded by a pure function taking exactly ``SIZE`` bytes; the
``read_*`` helpers seek a binary source, read the region and delegate to the
pure decoders.  Fields stored as signed 32 bit integers but used as sizes or
offsets go through :func:`_checked_unsigned`, which rejects negative or
overflowing values instead of wrapping them.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum, IntEnum
import struct
from typing import BinaryIO

from .errors import DecodeError, IbtError, LayoutError

__all__ = [
    "HEADER_SIZE",
    "VAR_BUFFER_SIZE",
    "MAX_BUFFERS",
    "DISK_SUMMARY_SIZE",
    "DESCRIPTOR_SIZE",
    "Status",
    "VarType",
    "VarBuffer",
    "RecordingHeader",
    "DiskSummary",
    "VariableDescriptor",
    "decode_header",
    "decode_var_buffer",
    "decode_disk_summary",
    "decode_descriptor",
    "read_exact",
    "read_header",
    "read_disk_summary",
    "read_descriptors",
]

HEADER_SIZE = 112
VAR_BUFFER_SIZE = 16
MAX_BUFFERS = 4
DISK_SUMMARY_SIZE = 32
DESCRIPTOR_SIZE = 144

_VAR_BUFFERS_OFFSET = 48
_NAME_SIZE = 32
_DESCRIPTION_SIZE = 64
_UNIT_SIZE = 32

_I8 = struct.Struct("<b")
_I32 = struct.Struct("<i")
_I64 = struct.Struct("<q")
_F64 = struct.Struct("<d")

_U32_MAX = 2**32 - 1
_U64_MAX = 2**64 - 1


class Status(Enum):
    """Connection status reported by the simulator when recording."""

    CONNECTED = "connected"
    UNKNOWN = "unknown"

    @classmethod
    def from_raw(cls, value: int) -> "Status":
        return cls.CONNECTED if value == 1 else cls.UNKNOWN


class VarType(IntEnum):
    """Type tag of a telemetry variable as stored in its descriptor."""

    CHAR = 0
    BOOL = 1
    INT = 2
    BITFIELD = 3
    FLOAT = 4
    DOUBLE = 5
    ETCOUNT = 6

    @property
    def byte_size(self) -> int:
        return _BYTE_SIZES[self]

    @property
    def label(self) -> str:
        return _LABELS[self]


_BYTE_SIZES = {
    VarType.CHAR: 1,
    VarType.BOOL: 1,
    VarType.INT: 4,
    VarType.BITFIELD: 4,
    VarType.FLOAT: 4,
    VarType.DOUBLE: 8,
    VarType.ETCOUNT: 0,
}

_LABELS = {
    VarType.CHAR: "Char",
    VarType.BOOL: "Bool",
    VarType.INT: "Int",
    VarType.BITFIELD: "BitField",
    VarType.FLOAT: "Float",
    VarType.DOUBLE: "Double",
    VarType.ETCOUNT: "ETCount",
}


@dataclass(frozen=True)
class VarBuffer:
    """One of the four candidate sample buffers declared by the header."""

    tick_count: int
    offset: int


@dataclass(frozen=True)
class RecordingHeader:
    """Top level metadata stored in the first 112 bytes of a recording."""

    version: int
    status: Status
    tick_rate: int
    session_info_update: int
    session_info_length: int
    session_info_offset: int
    num_vars: int
    var_header_offset: int
    num_buf: int
    buf_len: int
    var_buffers: tuple[VarBuffer, VarBuffer, VarBuffer, VarBuffer]

    def active_buffer(self) -> VarBuffer:
        """Return the buffer with the highest tick count (first one on ties)."""

        return max(self.var_buffers, key=lambda buffer: buffer.tick_count)


@dataclass(frozen=True)
class DiskSummary:
    """Session bounds stored right after the header."""

    start_date: int
    start_time: float
    end_time: float
    lap_count: int
    record_count: int


@dataclass(frozen=True)
class VariableDescriptor:
    """Binary layout of one telemetry channel inside a buffer row."""

    var_type: VarType
    offset: int
    count: int
    count_as_time: int
    name: str
    description: str
    unit: str

    @property
    def byte_size(self) -> int:
        """Number of bytes the channel occupies in every row."""

        return self.var_type.byte_size * self.count


def _checked_unsigned(value: int, field: str, *, limit: int = _U64_MAX) -> int:
    if value < 0 or value > limit:
        raise LayoutError(
            field,
            value,
            f"{value} cannot be converted to an unsigned integer no larger than {limit}",
        )
    return value


def _unpack(codec: struct.Struct, data: bytes, offset: int, field: str):
    try:
        return codec.unpack_from(data, offset)[0]
    except struct.error as exc:
        raise LayoutError(field, data[offset : offset + codec.size], str(exc)) from exc


def _expect_size(data: bytes, size: int, region: str) -> None:
    if len(data) != size:
        raise LayoutError(region, len(data), f"expected exactly {size} bytes")


def _read_fixed_string(data: bytes, offset: int, length: int) -> str:
    raw = data[offset : offset + length]
    return raw.split(b"\0", 1)[0].decode("latin-1")


def decode_var_buffer(data: bytes, *, field: str = "var_buffer") -> VarBuffer:
    """Decode a 16 byte buffer descriptor (the trailing 8 bytes are padding)."""

    _expect_size(data, VAR_BUFFER_SIZE, field)
    tick_count = _unpack(_I32, data, 0, f"{field}.tick_count")
    offset = _unpack(_I32, data, 4, f"{field}.offset")
    return VarBuffer(
        tick_count=_checked_unsigned(tick_count, f"{field}.tick_count", limit=_U32_MAX),
        offset=_checked_unsigned(offset, f"{field}.offset"),
    )


def decode_header(data: bytes) -> RecordingHeader:
    """Decode the 112 byte recording header."""

    _expect_size(data, HEADER_SIZE, "header")

    def signed(offset: int, field: str) -> int:
        return _unpack(_I32, data, offset, field)

    def unsigned(offset: int, field: str, *, limit: int = _U64_MAX) -> int:
        return _checked_unsigned(signed(offset, field), field, limit=limit)

    buffers = []
    for index in range(MAX_BUFFERS):
        start = _VAR_BUFFERS_OFFSET + index * VAR_BUFFER_SIZE
        buffers.append(
            decode_var_buffer(
                data[start : start + VAR_BUFFER_SIZE], field=f"var_buffers[{index}]"
            )
        )

    return RecordingHeader(
        version=signed(0, "version"),
        status=Status.from_raw(signed(4, "status")),
        tick_rate=unsigned(8, "tick_rate", limit=_U32_MAX),
        session_info_update=signed(12, "session_info_update"),
        session_info_length=unsigned(16, "session_info_length"),
        session_info_offset=unsigned(20, "session_info_offset"),
        num_vars=unsigned(24, "num_vars"),
        var_header_offset=unsigned(28, "var_header_offset"),
        num_buf=unsigned(32, "num_buf", limit=_U32_MAX),
        buf_len=unsigned(36, "buf_len", limit=_U32_MAX),
        var_buffers=tuple(buffers),  # type: ignore[arg-type]
    )


def decode_disk_summary(data: bytes) -> DiskSummary:
    """Decode the 32 byte disk summary."""

    _expect_size(data, DISK_SUMMARY_SIZE, "disk_header")
    start_date = _unpack(_I64, data, 0, "start_date")
    lap_count = _unpack(_I32, data, 24, "lap_count")
    record_count = _unpack(_I32, data, 28, "record_count")
    return DiskSummary(
        start_date=_checked_unsigned(start_date, "start_date"),
        start_time=_unpack(_F64, data, 8, "start_time"),
        end_time=_unpack(_F64, data, 16, "end_time"),
        lap_count=_checked_unsigned(lap_count, "lap_count", limit=_U32_MAX),
        record_count=_checked_unsigned(record_count, "record_count", limit=_U32_MAX),
    )


def decode_descriptor(data: bytes) -> VariableDescriptor:
    """Decode one 144 byte variable descriptor."""

    _expect_size(data, DESCRIPTOR_SIZE, "var_header")
    raw_type = _unpack(_I32, data, 0, "var_type")
    try:
        var_type = VarType(raw_type)
    except ValueError as exc:
        raise LayoutError("var_type", raw_type, "unknown variable type tag") from exc
    offset = _unpack(_I32, data, 4, "offset")
    count = _unpack(_I32, data, 8, "count")
    return VariableDescriptor(
        var_type=var_type,
        offset=_checked_unsigned(offset, "offset"),
        count=_checked_unsigned(count, "count"),
        count_as_time=_unpack(_I8, data, 12, "count_as_time"),
        name=_read_fixed_string(data, 16, _NAME_SIZE),
        description=_read_fixed_string(data, 48, _DESCRIPTION_SIZE),
        unit=_read_fixed_string(data, 112, _UNIT_SIZE),
    )


def read_exact(source: BinaryIO, offset: int, size: int, field: str) -> bytes:
    """Seek ``source`` to ``offset`` and read exactly ``size`` bytes."""

    try:
        source.seek(offset)
        data = source.read(size)
    except (OSError, ValueError, OverflowError) as exc:
        raise DecodeError(field, str(exc)) from exc
    if data is None or len(data) != size:
        read = 0 if data is None else len(data)
        raise DecodeError(
            field, f"expected {size} bytes at offset {offset} but only {read} could be read"
        )
    return data


def read_header(source: BinaryIO) -> RecordingHeader:
    return decode_header(read_exact(source, 0, HEADER_SIZE, "header"))


def read_disk_summary(source: BinaryIO) -> DiskSummary:
    return decode_disk_summary(
        read_exact(source, HEADER_SIZE, DISK_SUMMARY_SIZE, "disk_header")
    )


def read_descriptors(
    source: BinaryIO, header: RecordingHeader
) -> tuple[VariableDescriptor, ...]:
    """Read the ``num_vars`` descriptors declared by ``header``.

    Descriptors are laid out back to back, ``DESCRIPTOR_SIZE`` bytes apart,
    starting at ``header.var_header_offset``.
    """

    descriptors = []
    for index in range(header.num_vars):
        field = f"var_headers[{index}]"
        offset = header.var_header_offset + index * DESCRIPTOR_SIZE
        data = read_exact(source, offset, DESCRIPTOR_SIZE, field)
        try:
            descriptors.append(decode_descriptor(data))
        except IbtError as exc:
            raise LayoutError(field, offset, str(exc)) from exc
    return tuple(descriptors)
