"""Index aligned telemetry channels describing one lap."""

from __future__ import annotations

from dataclasses import dataclass, field, fields
from typing import Any, Iterator, Mapping, Tuple

import numpy as np

__all__ = [
    "CHANNEL_NAMES",
    "DISCRETE_CHANNELS",
    "RECORDING_NAMES",
    "ChannelBundle",
]


def _channel(**metadata: Any):
    return field(default_factory=lambda: np.empty(0, dtype=float), metadata=metadata)


@dataclass(frozen=True, eq=False)
class ChannelBundle:
    """Per-sample arrays for every channel the comparison pipeline understands.

    Channels absent from the source recording are empty arrays.  Every
    non-empty channel holds the same number of samples; arrays are stored
    read-only so bundles can be shared freely.
    """

    speed: np.ndarray = _channel(source="Speed")
    throttle: np.ndarray = _channel(source="Throttle")
    brake: np.ndarray = _channel(source="Brake")
    clutch: np.ndarray = _channel(source="Clutch")
    gear: np.ndarray = _channel(source="Gear", discrete=True)
    rpm: np.ndarray = _channel(source="RPM")
    distance: np.ndarray = _channel(source="LapDist")
    distance_pct: np.ndarray = _channel(source="LapDistPct")
    track_temperature: np.ndarray = _channel(source="TrackTempCrew")
    latitude: np.ndarray = _channel(source="Lat")
    longitude: np.ndarray = _channel(source="Lon")
    altitude: np.ndarray = _channel(source="Alt")
    steering_wheel_angle: np.ndarray = _channel(source="SteeringWheelAngle")
    fuel_level: np.ndarray = _channel(source="FuelLevel")
    lap_current_lap_time: np.ndarray = _channel(source="LapCurrentLapTime")

    def __post_init__(self) -> None:
        lengths = set()
        for item in fields(self):
            dtype = np.int64 if item.metadata.get("discrete") else float
            raw = getattr(self, item.name)
            values = np.array(raw if raw is not None else (), dtype=dtype)
            if values.ndim != 1:
                raise ValueError(f"{item.name} must be one dimensional")
            values.flags.writeable = False
            object.__setattr__(self, item.name, values)
            if values.size:
                lengths.add(values.size)
        if len(lengths) > 1:
            raise ValueError(
                f"Non-empty channels must share one length, got {sorted(lengths)}"
            )

    def __len__(self) -> int:
        return max((values.size for _, values in self.items()), default=0)

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, ChannelBundle):
            return NotImplemented
        return all(
            np.array_equal(values, other.get(name)) for name, values in self.items()
        )

    __hash__ = None  # type: ignore[assignment]

    def get(self, name: str) -> np.ndarray:
        if name not in CHANNEL_NAMES:
            raise KeyError(name)
        return getattr(self, name)

    def items(self) -> Iterator[Tuple[str, np.ndarray]]:
        for name in CHANNEL_NAMES:
            yield name, getattr(self, name)

    def as_dict(self) -> dict[str, list[float | int]]:
        return {name: values.tolist() for name, values in self.items()}

    @classmethod
    def from_recording(cls, payload: Mapping[str, Any]) -> "ChannelBundle":
        """Build a bundle keyed by the recorder's variable names (``Speed``...)."""

        return cls(
            **{
                name: payload[source]
                for name, source in RECORDING_NAMES.items()
                if source in payload
            }
        )


CHANNEL_NAMES: Tuple[str, ...] = tuple(item.name for item in fields(ChannelBundle))
DISCRETE_CHANNELS = frozenset(
    item.name for item in fields(ChannelBundle) if item.metadata.get("discrete")
)
RECORDING_NAMES: Mapping[str, str] = {
    item.name: item.metadata["source"] for item in fields(ChannelBundle)
}
