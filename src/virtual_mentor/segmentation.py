"""Split materialised telemetry into one :class:`Lap` per lap number."""

from __future__ import annotations

from datetime import datetime, timezone
import logging
from typing import Dict, List, Optional

import numpy as np

from mentor_core.channels import RECORDING_NAMES, ChannelBundle
from mentor_core.laps import UNKNOWN, Lap

from .ibt.materialize import ChannelSet
from .ibt.session import SessionMetadata

__all__ = ["LAP_CHANNEL", "SESSION_DATE_FORMAT", "session_datetime", "segment_laps"]

logger = logging.getLogger(__name__)

LAP_CHANNEL = "Lap"
SESSION_DATE_FORMAT = "%Y-%m-%d %I:%M %p"


def session_datetime(date: Optional[str], time_of_day: Optional[str]) -> datetime:
    """Combine the session date and time of day, falling back to now (UTC)."""

    if date and time_of_day:
        try:
            parsed = datetime.strptime(f"{date} {time_of_day}".upper(), SESSION_DATE_FORMAT)
        except ValueError:
            logger.warning(
                "Unparsable session date, using the current time.",
                extra={"event": "segmentation.date_fallback", "date": date, "time": time_of_day},
            )
        else:
            return parsed.replace(tzinfo=timezone.utc)
    return datetime.now(timezone.utc)


def _series(channels: ChannelSet, source: str, expected: int) -> np.ndarray:
    channel = channels.get(source)
    if channel is None:
        return np.empty(0)
    if not channel.is_scalar():
        logger.warning(
            "Ignoring channel with array samples.",
            extra={"event": "segmentation.channel_ignored", "channel": source},
        )
        return np.empty(0)
    if len(channel) != expected:
        logger.warning(
            "Ignoring channel whose length differs from the lap channel.",
            extra={
                "event": "segmentation.channel_ignored",
                "channel": source,
                "samples": len(channel),
                "expected": expected,
            },
        )
        return np.empty(0)
    return np.asarray(channel.numbers(), dtype=float)


def segment_laps(
    channels: ChannelSet,
    session: SessionMetadata | None = None,
    *,
    file_id: str | None = None,
) -> List[Lap]:
    """Group samples by the value of the ``Lap`` channel.

    Laps are returned in ascending lap number with sample order preserved
    inside each lap.  Channels the recording lacks stay empty.
    """

    session = session or SessionMetadata()
    lap_channel = channels.get(LAP_CHANNEL)
    if lap_channel is None or len(lap_channel) == 0:
        logger.warning(
            "Recording has no lap samples.",
            extra={"event": "segmentation.no_laps", "file_id": file_id},
        )
        return []
    if not lap_channel.is_scalar():
        logger.warning(
            "Lap channel holds array samples.",
            extra={"event": "segmentation.no_laps", "file_id": file_id},
        )
        return []

    lap_numbers = np.asarray(lap_channel.numbers()).astype(np.int64)
    series: Dict[str, np.ndarray] = {
        source: _series(channels, source, lap_numbers.size)
        for source in RECORDING_NAMES.values()
    }
    date = session_datetime(session.date, session.time_of_day)

    laps: List[Lap] = []
    for number in np.unique(lap_numbers):
        mask = lap_numbers == number
        bundle = ChannelBundle.from_recording(
            {source: values[mask] if values.size else values for source, values in series.items()}
        )
        elapsed = bundle.lap_current_lap_time
        laps.append(
            Lap(
                number=int(number),
                driver=session.driver or UNKNOWN,
                category=session.category or UNKNOWN,
                car=session.car or UNKNOWN,
                circuit=session.circuit or UNKNOWN,
                date=date,
                time=float(elapsed[-1]) if elapsed.size else 0.0,
                channels=bundle,
                file_id=file_id,
            )
        )
    logger.info(
        "Segmented recording into laps.",
        extra={"event": "segmentation.done", "file_id": file_id, "laps": len(laps)},
    )
    return laps
