"""Virtual Mentor: IBT telemetry decoding, lap segmentation and lap coaching."""

from __future__ import annotations

from virtual_mentor._version import __version__
from virtual_mentor.ibt import (
    ALLOWED_CHANNELS,
    IbtError,
    IbtRecording,
    RecordingError,
    decode_laps,
    read_ibt,
    read_recording,
)
from virtual_mentor.segmentation import segment_laps
from virtual_mentor.store import (
    InMemoryLapRepository,
    LapNotFoundError,
    LapRepository,
    compare_stored_laps,
)

__all__ = [
    "ALLOWED_CHANNELS",
    "IbtError",
    "IbtRecording",
    "InMemoryLapRepository",
    "LapNotFoundError",
    "LapRepository",
    "RecordingError",
    "__version__",
    "compare_stored_laps",
    "decode_laps",
    "read_ibt",
    "read_recording",
    "segment_laps",
]
