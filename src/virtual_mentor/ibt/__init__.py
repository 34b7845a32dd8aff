"""Decoder for IBT binary telemetry recordings."""

from .errors import (
    ChannelError,
    DecodeError,
    IbtError,
    LayoutError,
    PrimitiveSizeError,
    RecordingError,
)
from .layout import (
    DESCRIPTOR_SIZE,
    DISK_SUMMARY_SIZE,
    HEADER_SIZE,
    DiskSummary,
    RecordingHeader,
    Status,
    VarBuffer,
    VarType,
    VariableDescriptor,
    decode_descriptor,
    decode_disk_summary,
    decode_header,
    read_descriptors,
    read_disk_summary,
    read_header,
)
from .primitives import Primitive, decode_primitive
from .materialize import Channel, ChannelSet, VarFilter, block_size, materialize
from .session import SessionMetadata, parse_session_info, read_session_info
from .reader import ALLOWED_CHANNELS, IbtRecording, decode_laps, read_ibt, read_recording

__all__ = [
    "ALLOWED_CHANNELS",
    "DESCRIPTOR_SIZE",
    "DISK_SUMMARY_SIZE",
    "HEADER_SIZE",
    "Channel",
    "ChannelError",
    "ChannelSet",
    "DecodeError",
    "DiskSummary",
    "IbtError",
    "IbtRecording",
    "LayoutError",
    "Primitive",
    "PrimitiveSizeError",
    "RecordingError",
    "RecordingHeader",
    "SessionMetadata",
    "Status",
    "VarBuffer",
    "VarFilter",
    "VarType",
    "VariableDescriptor",
    "block_size",
    "decode_descriptor",
    "decode_disk_summary",
    "decode_header",
    "decode_laps",
    "decode_primitive",
    "materialize",
    "parse_session_info",
    "read_descriptors",
    "read_disk_summary",
    "read_header",
    "read_ibt",
    "read_recording",
    "read_session_info",
]
