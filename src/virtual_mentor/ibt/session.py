"""Session metadata stored as YAML inside an IBT recording."""

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass, field
from typing import Any, BinaryIO, Optional

import yaml

from .errors import LayoutError
from .layout import RecordingHeader, read_exact

__all__ = [
    "SessionMetadata",
    "parse_session_info",
    "decode_session_info",
    "read_session_info",
]


@dataclass(frozen=True)
class SessionMetadata:
    """The handful of session fields consumed by lap segmentation."""

    driver: Optional[str] = None
    car: Optional[str] = None
    category: Optional[str] = None
    circuit: Optional[str] = None
    date: Optional[str] = None
    time_of_day: Optional[str] = None
    raw: Mapping[str, Any] = field(default_factory=dict, repr=False, compare=False)


def _section(payload: Any, key: str) -> Mapping[str, Any]:
    if isinstance(payload, Mapping):
        value = payload.get(key)
        if isinstance(value, Mapping):
            return value
    return {}


def _text(value: Any) -> Optional[str]:
    if value is None:
        return None
    text = str(value).strip()
    return text or None


def _find_driver(driver_info: Mapping[str, Any]) -> Mapping[str, Any]:
    user_id = driver_info.get("DriverUserID")
    drivers = driver_info.get("Drivers")
    if user_id is None or not isinstance(drivers, list):
        return {}
    for entry in drivers:
        if isinstance(entry, Mapping) and entry.get("UserID") == user_id:
            return entry
    return {}


def parse_session_info(text: str) -> SessionMetadata:
    """Parse the session YAML and keep the fields laps are labelled with."""

    try:
        payload = yaml.safe_load(text)
    except yaml.YAMLError as exc:
        raise LayoutError("session_info", len(text), f"invalid YAML: {exc}") from exc
    if payload is None:
        payload = {}
    if not isinstance(payload, Mapping):
        raise LayoutError("session_info", type(payload).__name__, "expected a YAML mapping")

    weekend = _section(payload, "WeekendInfo")
    options = _section(weekend, "WeekendOptions")
    driver = _find_driver(_section(payload, "DriverInfo"))
    return SessionMetadata(
        driver=_text(driver.get("UserName")),
        car=_text(driver.get("CarScreenName")),
        category=_text(weekend.get("Category")),
        circuit=_text(weekend.get("TrackDisplayName")),
        date=_text(options.get("Date")),
        time_of_day=_text(options.get("TimeOfDay")),
        raw=payload,
    )


def decode_session_info(data: bytes) -> SessionMetadata:
    text = data.split(b"\0", 1)[0].decode("latin-1")
    return parse_session_info(text)


def read_session_info(source: BinaryIO, header: RecordingHeader) -> SessionMetadata:
    """Read the YAML region declared by ``header`` and parse it."""

    if header.session_info_length == 0:
        return SessionMetadata()
    data = read_exact(
        source, header.session_info_offset, header.session_info_length, "session_info"
    )
    return decode_session_info(data)
