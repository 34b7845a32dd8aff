"""Lap records produced by telemetry segmentation."""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from typing import Any, Mapping, Optional
import uuid

from mentor_core.channels import ChannelBundle

__all__ = ["UNKNOWN", "Lap"]

UNKNOWN = "Unknown"


@dataclass(frozen=True)
class Lap:
    """One completed lap and the telemetry recorded during it."""

    number: int
    driver: str
    category: str
    car: str
    circuit: str
    date: datetime
    time: float
    channels: ChannelBundle = field(compare=False)
    file_id: Optional[str] = None
    id: str = field(default_factory=lambda: str(uuid.uuid4()))

    def summary(self) -> Mapping[str, Any]:
        """Return the lap metadata without channel samples."""

        return {
            "id": self.id,
            "file_id": self.file_id,
            "number": self.number,
            "driver": self.driver,
            "category": self.category,
            "car": self.car,
            "circuit": self.circuit,
            "date": self.date.isoformat(),
            "time": self.time,
            "samples": len(self.channels),
        }

    def as_dict(self) -> Mapping[str, Any]:
        payload = dict(self.summary())
        payload["channels"] = self.channels.as_dict()
        return payload
