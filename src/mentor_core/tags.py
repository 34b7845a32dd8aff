"""Map fitted cluster geometry onto directional coaching tags."""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Any, List, Optional, Sequence

import numpy as np

from mentor_core.clustering import FittedModel

__all__ = [
    "Action",
    "Direction",
    "Tag",
    "centroid_directions",
    "assign_tags",
]


class Action(str, Enum):
    STAY = "stay"
    INCREASE = "increase"
    REDUCE = "reduce"


@dataclass(frozen=True)
class Direction:
    """What to do with an input and how strongly (``level`` 0 is mildest)."""

    action: Action
    level: int = 0

    @classmethod
    def stay(cls) -> "Direction":
        return cls(Action.STAY)

    @classmethod
    def increase(cls, level: int = 0) -> "Direction":
        return cls(Action.INCREASE, level)

    @classmethod
    def reduce(cls, level: int = 0) -> "Direction":
        return cls(Action.REDUCE, level)

    def as_dict(self) -> dict[str, Any]:
        if self.action is Action.STAY:
            return {"action": self.action.value}
        return {"action": self.action.value, "level": self.level}

    def __str__(self) -> str:
        if self.action is Action.STAY:
            return "Stay"
        return f"{self.action.value.capitalize()}({self.level})"


@dataclass(frozen=True)
class Tag:
    """Primary direction of one sample plus an optional secondary tendency."""

    primary: Direction
    secondary: Optional[Direction] = None

    @property
    def is_tendency(self) -> bool:
        return self.secondary is not None

    def as_dict(self) -> dict[str, Any]:
        payload: dict[str, Any] = {"primary": self.primary.as_dict()}
        if self.secondary is not None:
            payload["secondary"] = self.secondary.as_dict()
        return payload

    def __str__(self) -> str:
        if self.secondary is None:
            return f"Single({self.primary})"
        return f"Tendency({self.primary}, {self.secondary})"


def centroid_directions(
    centroids: np.ndarray, differences: Sequence[float] | np.ndarray
) -> List[Direction]:
    """Return one direction per centroid, in the centroids' original order.

    Centroids are ranked ascending.  Strictly positive differences map to an
    increase ladder and strictly negative ones to a reduce ladder whose
    smallest magnitude gets level 0.  Mixed signs anchor ``Stay`` on the
    centroid nearest the origin and grow the ladders away from it.
    """

    points = np.asarray(centroids, dtype=float)
    if points.ndim == 1:
        points = points[:, np.newaxis]
    values = np.asarray(differences, dtype=float)
    count = points.shape[0]
    order = sorted(range(count), key=lambda index: points[index, 0])
    ranked: List[Direction] = []

    if np.all(values > 0.0):
        ranked = [Direction.increase(rank) for rank in range(count)]
    elif np.all(values < 0.0):
        ranked = [Direction.reduce(count - 1 - rank) for rank in range(count)]
    elif count:
        norms = [float(np.linalg.norm(points[index])) for index in order]
        anchor = norms.index(min(norms))
        for rank in range(count):
            if rank < anchor:
                ranked.append(Direction.reduce(anchor - 1 - rank))
            elif rank > anchor:
                ranked.append(Direction.increase(rank - anchor - 1))
            else:
                ranked.append(Direction.stay())

    directions: List[Direction] = [Direction.stay()] * count
    for rank, index in enumerate(order):
        directions[index] = ranked[rank]
    return directions


def assign_tags(
    model: FittedModel,
    differences: Sequence[float] | np.ndarray,
    threshold: float = 0.2,
) -> List[Tag]:
    """Tag every sample of ``differences`` using ``model``'s memberships.

    The cluster with the highest membership gives the primary direction.  When
    the runner-up membership reaches ``threshold`` its direction is attached
    as a secondary tendency.
    """

    directions = centroid_directions(model.centroids, differences)
    memberships = np.asarray(model.memberships, dtype=float)
    tags: List[Tag] = []
    for sample in range(memberships.shape[1]):
        column = memberships[:, sample]
        ranked = sorted(range(column.size), key=lambda index: column[index])
        if not ranked:
            tags.append(Tag(Direction.stay()))
            continue
        primary = directions[ranked.pop()]
        secondary = None
        if ranked:
            runner_up = ranked.pop()
            if column[runner_up] >= threshold:
                secondary = directions[runner_up]
        tags.append(Tag(primary, secondary))
    return tags
