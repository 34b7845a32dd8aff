"""High level entry points to decode whole IBT recordings."""

from __future__ import annotations

from collections.abc import Iterable
from dataclasses import dataclass
import logging
from os import PathLike
from pathlib import Path
from typing import BinaryIO, Callable, TypeVar

from mentor_core.laps import Lap

from ..segmentation import segment_laps
from .errors import IbtError, RecordingError
from .layout import (
    DiskSummary,
    RecordingHeader,
    VariableDescriptor,
    read_descriptors,
    read_disk_summary,
    read_header,
)
from .materialize import ChannelSet, materialize
from .session import SessionMetadata, read_session_info

__all__ = [
    "ALLOWED_CHANNELS",
    "IbtRecording",
    "read_recording",
    "read_ibt",
    "decode_laps",
]

logger = logging.getLogger(__name__)

ALLOWED_CHANNELS: tuple[str, ...] = (
    "Lap",
    "Speed",
    "Throttle",
    "Brake",
    "Clutch",
    "Gear",
    "RPM",
    "LapDist",
    "LapDistPct",
    "TrackTempCrew",
    "Lat",
    "Lon",
    "Alt",
    "SteeringWheelAngle",
    "FuelLevel",
    "LapCurrentLapTime",
)

T = TypeVar("T")


@dataclass(frozen=True)
class IbtRecording:
    """Everything decoded from one recording."""

    header: RecordingHeader
    disk_summary: DiskSummary
    session: SessionMetadata
    descriptors: tuple[VariableDescriptor, ...]
    channels: ChannelSet


def _region(name: str, decode: Callable[[], T]) -> T:
    try:
        return decode()
    except IbtError as exc:
        logger.debug(
            "Failed to decode recording region.",
            extra={"event": "ibt.region.failed", "region": name, "error": str(exc)},
        )
        raise RecordingError(name, exc) from exc


def read_recording(
    source: BinaryIO, names: Iterable[str] | None = ALLOWED_CHANNELS
) -> IbtRecording:
    """Decode every region of the recording held by ``source``.

    ``names`` narrows the materialised channels; ``None`` keeps them all.
    Any failure rejects the whole recording with a :class:`RecordingError`
    naming the region that could not be decoded.
    """

    header = _region("header", lambda: read_header(source))
    disk_summary = _region("disk_header", lambda: read_disk_summary(source))
    session = _region("session_info", lambda: read_session_info(source, header))

    def _metrics() -> tuple[tuple[VariableDescriptor, ...], ChannelSet]:
        descriptors = read_descriptors(source, header)
        return descriptors, materialize(source, header, descriptors, names)

    descriptors, channels = _region("metrics", _metrics)
    logger.info(
        "Decoded IBT recording.",
        extra={
            "event": "ibt.recording.decoded",
            "num_vars": header.num_vars,
            "channels": len(channels),
            "ticks": channels.tick_count,
        },
    )
    return IbtRecording(
        header=header,
        disk_summary=disk_summary,
        session=session,
        descriptors=descriptors,
        channels=channels,
    )


def read_ibt(
    path: str | PathLike[str], names: Iterable[str] | None = ALLOWED_CHANNELS
) -> IbtRecording:
    """Open ``path`` and decode it with :func:`read_recording`."""

    with Path(path).open("rb") as handle:
        return read_recording(handle, names)


def decode_laps(
    source: BinaryIO,
    *,
    file_id: str | None = None,
    names: Iterable[str] | None = ALLOWED_CHANNELS,
) -> list[Lap]:
    """Decode ``source`` and split it into one :class:`Lap` per lap number."""

    recording = read_recording(source, names)
    return segment_laps(recording.channels, recording.session, file_id=file_id)
