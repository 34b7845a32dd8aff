"""Lap persistence contract and an in-memory implementation."""

from __future__ import annotations

import logging
from typing import Any, Dict, Iterable, List, Optional, Protocol, runtime_checkable

from mentor_core.comparison import Comparison, ComparisonConfig, compare_laps
from mentor_core.laps import Lap

__all__ = [
    "LapNotFoundError",
    "LapRepository",
    "InMemoryLapRepository",
    "compare_stored_laps",
]

logger = logging.getLogger(__name__)


class LapNotFoundError(LookupError):
    """No lap is stored under the requested identifier."""

    def __init__(self, lap_id: str) -> None:
        super().__init__(f"Lap {lap_id!r} not found")
        self.lap_id = lap_id


@runtime_checkable
class LapRepository(Protocol):
    """Minimal create/find/delete contract for lap storage."""

    def create(self, laps: Iterable[Lap]) -> None: ...

    def find_by_id(self, lap_id: str) -> Optional[Lap]: ...

    def find_by_criteria(self, **filters: Any) -> List[Lap]: ...

    def delete(self, lap_id: str) -> bool: ...


class InMemoryLapRepository:
    """Dictionary backed :class:`LapRepository`."""

    def __init__(self, laps: Iterable[Lap] = ()) -> None:
        self._laps: Dict[str, Lap] = {}
        self.create(laps)

    def __len__(self) -> int:
        return len(self._laps)

    def create(self, laps: Iterable[Lap]) -> None:
        for lap in laps:
            self._laps[lap.id] = lap

    def find_by_id(self, lap_id: str) -> Optional[Lap]:
        return self._laps.get(lap_id)

    def find_by_criteria(self, **filters: Any) -> List[Lap]:
        """Return laps whose attributes equal every ``filters`` value.

        Unknown attribute names match nothing.
        """

        matches = []
        for lap in self._laps.values():
            if all(
                hasattr(lap, key) and getattr(lap, key) == value
                for key, value in filters.items()
            ):
                matches.append(lap)
        return matches

    def delete(self, lap_id: str) -> bool:
        return self._laps.pop(lap_id, None) is not None

    def delete_by_file(self, file_id: str) -> int:
        doomed = [lap.id for lap in self._laps.values() if lap.file_id == file_id]
        for lap_id in doomed:
            del self._laps[lap_id]
        return len(doomed)


def compare_stored_laps(
    repository: LapRepository,
    reference_id: str,
    target_id: str,
    config: ComparisonConfig | None = None,
    *,
    name: str | None = None,
) -> Comparison:
    """Load both laps from ``repository`` and compare them."""

    laps = []
    for lap_id in (reference_id, target_id):
        lap = repository.find_by_id(lap_id)
        if lap is None:
            logger.warning(
                "Lap requested for comparison is missing.",
                extra={"event": "store.lap_missing", "lap_id": lap_id},
            )
            raise LapNotFoundError(lap_id)
        laps.append(lap)
    reference, target = laps
    return compare_laps(reference, target, config, name=name)
