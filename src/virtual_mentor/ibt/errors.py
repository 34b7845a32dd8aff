"""Exception hierarchy raised while decoding IBT telemetry recordings."""

from __future__ import annotations

from typing import Any

__all__ = [
    "IbtError",
    "DecodeError",
    "LayoutError",
    "PrimitiveSizeError",
    "ChannelError",
    "RecordingError",
]


class IbtError(ValueError):
    """Base class for every failure surfaced by the IBT decoder."""


class DecodeError(IbtError):
    """Seeking or reading the byte source failed while extracting ``field``."""

    def __init__(self, field: str, reason: str) -> None:
        super().__init__(f"Cannot read `{field}` from source: {reason}")
        self.field = field
        self.reason = reason


class LayoutError(IbtError):
    """A decoded value does not fit the declared layout of ``field``."""

    def __init__(self, field: str, value: Any, reason: str) -> None:
        super().__init__(f"Error extracting `{field}` ({value!r}): {reason}")
        self.field = field
        self.value = value
        self.reason = reason


class PrimitiveSizeError(LayoutError):
    """The byte span handed to a primitive decoder has the wrong width."""

    def __init__(self, type_name: str, expected: int, actual: int) -> None:
        super().__init__(
            type_name,
            actual,
            f"{type_name} needs {expected} bytes but {actual} were provided",
        )
        self.expected = expected
        self.actual = actual


class ChannelError(IbtError):
    """A sample of a channel could not be materialised."""

    def __init__(self, name: str, tick: int, cause: IbtError) -> None:
        super().__init__(f"{name} at tick {tick}: {cause}")
        self.name = name
        self.tick = tick


class RecordingError(IbtError):
    """Decoding one region of a recording failed; the recording is rejected."""

    def __init__(self, region: str, cause: BaseException) -> None:
        super().__init__(f"File error extracting `{region}`: {cause}")
        self.region = region
