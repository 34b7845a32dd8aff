"""Extract per-channel time series from the active sample buffer."""

from __future__ import annotations

from collections.abc import Iterable, Sequence
from dataclasses import dataclass
import logging
from typing import BinaryIO, Union

from .errors import ChannelError, DecodeError, IbtError
from .layout import RecordingHeader, VarBuffer, VarType, VariableDescriptor
from .primitives import Primitive, decode_elements

__all__ = [
    "Sample",
    "Channel",
    "ChannelSet",
    "VarFilter",
    "block_size",
    "materialize",
]

logger = logging.getLogger(__name__)

Sample = Union[Primitive, tuple[Primitive, ...]]


@dataclass(frozen=True)
class Channel:
    """Every sample recorded for one variable, one entry per tick."""

    descriptor: VariableDescriptor
    samples: tuple[Sample, ...]

    @property
    def name(self) -> str:
        return self.descriptor.name

    def __len__(self) -> int:
        return len(self.samples)

    def is_scalar(self) -> bool:
        return all(isinstance(sample, Primitive) for sample in self.samples)

    def numbers(self) -> list[float | int]:
        """Return the samples as plain numbers.

        Raises :class:`TypeError` when the channel holds array samples.
        """

        values: list[float | int] = []
        for sample in self.samples:
            if not isinstance(sample, Primitive):
                raise TypeError(f"{self.name} holds array samples")
            values.append(sample.as_number())
        return values


@dataclass(frozen=True)
class ChannelSet:
    """Column oriented result of walking the active buffer."""

    stride: int
    buffer: VarBuffer
    channels: tuple[Channel, ...]

    @property
    def names(self) -> tuple[str, ...]:
        return tuple(channel.name for channel in self.channels)

    @property
    def tick_count(self) -> int:
        return len(self.channels[0]) if self.channels else 0

    def get(self, name: str) -> Channel | None:
        for channel in self.channels:
            if channel.name == name:
                return channel
        return None

    def __iter__(self):
        return iter(self.channels)

    def __len__(self) -> int:
        return len(self.channels)


class VarFilter:
    """Case-insensitive substring allow-list applied to descriptor names."""

    __slots__ = ("_terms",)

    def __init__(self, terms: Iterable[str]) -> None:
        self._terms = tuple(term.strip().lower() for term in terms)

    @property
    def terms(self) -> tuple[str, ...]:
        return self._terms

    def matches(self, descriptor: VariableDescriptor) -> bool:
        name = descriptor.name.strip().lower()
        return any(term in name for term in self._terms)

    def apply(self, descriptors: Iterable[VariableDescriptor]) -> list[VariableDescriptor]:
        return [descriptor for descriptor in descriptors if self.matches(descriptor)]


def block_size(descriptors: Iterable[VariableDescriptor]) -> int:
    """Bytes per buffer row, summed over the complete descriptor list."""

    return sum(descriptor.byte_size for descriptor in descriptors)


def _read_row(source: BinaryIO, offset: int, stride: int, tick: int) -> bytes:
    try:
        source.seek(offset)
        return source.read(stride) or b""
    except (OSError, ValueError, OverflowError) as exc:
        raise DecodeError(f"row {tick}", str(exc)) from exc


def _decode_sample(descriptor: VariableDescriptor, row: bytes, tick: int) -> Sample:
    start = descriptor.offset
    end = start + descriptor.byte_size
    if end > len(row):
        raise ChannelError(
            descriptor.name,
            tick,
            DecodeError(
                descriptor.name,
                f"row holds {len(row)} bytes but the variable ends at byte {end}",
            ),
        )
    try:
        elements = decode_elements(descriptor.var_type, row[start:end], descriptor.count)
    except IbtError as exc:
        raise ChannelError(descriptor.name, tick, exc) from exc
    if len(elements) == 1:
        return elements[0]
    return elements


def materialize(
    source: BinaryIO,
    header: RecordingHeader,
    descriptors: Sequence[VariableDescriptor],
    names: Iterable[str] | None = None,
) -> ChannelSet:
    """Decode the active buffer of ``source`` into one channel per descriptor.

    The row stride always derives from the full ``descriptors`` list so that
    narrowing the selection with ``names`` never shifts sample offsets.  Rows
    are read until the active buffer's tick count is reached; running out of
    input exactly at a row boundary ends the walk early.
    """

    stride = block_size(descriptors)
    if stride != header.buf_len:
        logger.debug(
            "Computed row stride differs from the declared buffer length.",
            extra={
                "event": "ibt.materialize.stride_mismatch",
                "stride": stride,
                "buf_len": header.buf_len,
            },
        )

    selected = [d for d in descriptors if d.var_type is not VarType.ETCOUNT]
    if names is not None:
        selected = VarFilter(names).apply(selected)

    buffer = header.active_buffer()
    columns: list[list[Sample]] = [[] for _ in selected]
    if stride > 0 and selected:
        for tick in range(buffer.tick_count):
            row = _read_row(source, buffer.offset + tick * stride, stride, tick)
            if not row:
                logger.warning(
                    "Recording ended before the declared tick count.",
                    extra={
                        "event": "ibt.materialize.truncated",
                        "ticks_read": tick,
                        "tick_count": buffer.tick_count,
                    },
                )
                break
            for column, descriptor in zip(columns, selected):
                column.append(_decode_sample(descriptor, row, tick))

    channels = tuple(
        Channel(descriptor=descriptor, samples=tuple(column))
        for descriptor, column in zip(selected, columns)
    )
    logger.debug(
        "Materialised telemetry channels.",
        extra={
            "event": "ibt.materialize.done",
            "channels": len(channels),
            "ticks": len(columns[0]) if columns else 0,
            "stride": stride,
        },
    )
    return ChannelSet(stride=stride, buffer=buffer, channels=channels)
