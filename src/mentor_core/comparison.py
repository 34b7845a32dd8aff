"""Compare a target lap against a reference lap.

The pipeline aligns both laps on the union of their distances, differences
every channel, fits the best fuzzy c-means model to each selected difference
channel and turns the fitted memberships into per-sample coaching tags.
"""

from __future__ import annotations

from collections import Counter
from dataclasses import dataclass, field
from datetime import datetime, timezone
import logging
from typing import Any, Dict, List, Mapping, Optional, Tuple
import uuid

import numpy as np

from mentor_core.alignment import align_laps
from mentor_core.channels import CHANNEL_NAMES, ChannelBundle
from mentor_core.clustering import FittedModel
from mentor_core.grid import FcmGrid, GridConfig, GridConfigError, ParameterRange
from mentor_core.laps import Lap
from mentor_core.tags import Tag, assign_tags

__all__ = [
    "DEFAULT_CHANNELS",
    "ComparisonConfig",
    "LapSummary",
    "Comparison",
    "compare_laps",
]

logger = logging.getLogger(__name__)

DEFAULT_CHANNELS: Tuple[str, ...] = (
    "speed",
    "throttle",
    "brake",
    "gear",
    "steering_wheel_angle",
)


@dataclass(frozen=True)
class ComparisonConfig:
    """Grid ranges, tendency threshold and channels used by a comparison."""

    grid: GridConfig = field(default_factory=GridConfig)
    threshold: float = 0.2
    channels: Tuple[str, ...] = DEFAULT_CHANNELS
    seed: Optional[int] = None

    def __post_init__(self) -> None:
        channels = tuple(self.channels)
        unknown = [name for name in channels if name not in CHANNEL_NAMES]
        if unknown:
            raise GridConfigError(f"Unknown channels requested: {', '.join(unknown)}")
        object.__setattr__(self, "channels", channels)
        object.__setattr__(self, "threshold", float(self.threshold))

    @classmethod
    def from_mapping(cls, payload: Mapping[str, Any] | None) -> "ComparisonConfig":
        """Build a configuration from a ``[compare]`` style table."""

        payload = dict(payload or {})
        grid_kwargs = {
            key: ParameterRange.parse(payload[key])
            for key in ("clusters", "fuzziness", "max_iter", "tolerance")
            if key in payload
        }
        kwargs: Dict[str, Any] = {"grid": GridConfig(**grid_kwargs)}
        if "threshold" in payload:
            kwargs["threshold"] = float(payload["threshold"])
        if "channels" in payload:
            kwargs["channels"] = tuple(str(name) for name in payload["channels"])
        if payload.get("seed") is not None:
            kwargs["seed"] = int(payload["seed"])
        return cls(**kwargs)


@dataclass(frozen=True, eq=False)
class LapSummary:
    """Metadata of a compared lap and its channels on the shared grid."""

    id: str
    number: int
    driver: str
    category: str
    car: str
    channels: ChannelBundle

    @classmethod
    def from_lap(cls, lap: Lap, channels: ChannelBundle) -> "LapSummary":
        return cls(
            id=lap.id,
            number=lap.number,
            driver=lap.driver,
            category=lap.category,
            car=lap.car,
            channels=channels,
        )

    def as_dict(self, *, include_channels: bool = True) -> Dict[str, Any]:
        payload: Dict[str, Any] = {
            "id": self.id,
            "number": self.number,
            "driver": self.driver,
            "category": self.category,
            "car": self.car,
        }
        if include_channels:
            payload["channels"] = self.channels.as_dict()
        return payload


@dataclass(frozen=True, eq=False)
class Comparison:
    """Result of comparing a target lap with a reference lap."""

    id: str
    name: str
    created_at: datetime
    circuit: str
    reference: LapSummary
    target: LapSummary
    distances: np.ndarray
    differences: ChannelBundle
    models: Mapping[str, FittedModel]
    tags: Mapping[str, List[Tag]]

    def tag_histogram(self, channel: str) -> Dict[str, int]:
        return dict(Counter(str(tag) for tag in self.tags.get(channel, ())))

    def summary(self) -> Dict[str, Any]:
        """Per-channel model quality and tag counts, without samples."""

        return {
            "id": self.id,
            "name": self.name,
            "created_at": self.created_at.isoformat(),
            "circuit": self.circuit,
            "reference": self.reference.as_dict(include_channels=False),
            "target": self.target.as_dict(include_channels=False),
            "samples": int(self.distances.size),
            "channels": {
                name: {
                    "clusters": model.clusters,
                    "fpc": model.fpc,
                    "tags": self.tag_histogram(name),
                }
                for name, model in self.models.items()
            },
        }

    def as_dict(self) -> Dict[str, Any]:
        payload = self.summary()
        payload["reference"] = self.reference.as_dict()
        payload["target"] = self.target.as_dict()
        payload["distances"] = self.distances.tolist()
        payload["differences"] = self.differences.as_dict()
        payload["models"] = {name: model.as_dict() for name, model in self.models.items()}
        payload["tags"] = {
            name: [tag.as_dict() for tag in tags] for name, tags in self.tags.items()
        }
        return payload


def compare_laps(
    reference: Lap,
    target: Lap,
    config: ComparisonConfig | None = None,
    *,
    name: str | None = None,
) -> Comparison:
    """Run the full comparison pipeline for ``target`` against ``reference``.

    Raises :class:`~mentor_core.alignment.DifferentCircuitsError` when the
    laps were driven on different circuits and
    :class:`~mentor_core.grid.NoValidModelFound` when no model could be
    fitted to a selected channel.
    """

    config = config or ComparisonConfig()
    aligned = align_laps(reference, target)
    grid = FcmGrid(config.grid, seed=config.seed)

    models: Dict[str, FittedModel] = {}
    tags: Dict[str, List[Tag]] = {}
    for channel in config.channels:
        differences = aligned.differences.get(channel)
        if differences.size == 0:
            logger.warning(
                "Skipping channel without samples.",
                extra={"event": "comparison.channel_skipped", "channel": channel},
            )
            continue
        model = grid.best_model(differences)
        models[channel] = model
        tags[channel] = assign_tags(model, differences, config.threshold)

    comparison = Comparison(
        id=str(uuid.uuid4()),
        name=name or f"Lap {target.number} vs lap {reference.number}",
        created_at=datetime.now(timezone.utc),
        circuit=reference.circuit,
        reference=LapSummary.from_lap(reference, aligned.reference),
        target=LapSummary.from_lap(target, aligned.target),
        distances=aligned.distances,
        differences=aligned.differences,
        models=models,
        tags=tags,
    )
    logger.info(
        "Compared laps.",
        extra={
            "event": "comparison.done",
            "comparison": comparison.id,
            "reference": reference.id,
            "target": target.id,
            "channels": sorted(models),
        },
    )
    return comparison
