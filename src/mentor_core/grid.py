"""Exhaustive hyperparameter sweep over fuzzy c-means models."""

from __future__ import annotations

from dataclasses import dataclass, field
import itertools
import logging
from typing import Any, Iterator, Optional, Sequence, Union

import numpy as np

from mentor_core.clustering import (
    ClusteringConfigError,
    FittedModel,
    FittingError,
    FuzzyCMeans,
)

__all__ = [
    "GridConfigError",
    "NoValidModelFound",
    "ParameterRange",
    "GridConfig",
    "FcmGrid",
]

logger = logging.getLogger(__name__)

Number = Union[int, float]


class GridConfigError(ValueError):
    """A sweep range is malformed."""


class NoValidModelFound(ValueError):
    """Every combination of the sweep failed or the sweep was empty."""

    def __init__(self, message: str = "No valid model found") -> None:
        super().__init__(message)


@dataclass(frozen=True)
class ParameterRange:
    """``initial, initial + increment, ...`` up to and including ``maximum``.

    Without both ``maximum`` and ``increment`` the range only holds
    ``initial``.
    """

    initial: Number
    maximum: Optional[Number] = None
    increment: Optional[Number] = None

    def __post_init__(self) -> None:
        if self.maximum is not None and self.increment is not None and self.increment <= 0:
            raise GridConfigError(f"increment must be positive, got {self.increment}")

    @classmethod
    def parse(cls, value: Any) -> "ParameterRange":
        """Accept a scalar, a ``(initial, max, increment)`` sequence or a range."""

        if isinstance(value, ParameterRange):
            return value
        if isinstance(value, (int, float)) and not isinstance(value, bool):
            return cls(value)
        if isinstance(value, Sequence) and not isinstance(value, str) and 1 <= len(value) <= 3:
            return cls(*value)
        raise GridConfigError(f"cannot interpret {value!r} as a parameter range")

    @property
    def is_integral(self) -> bool:
        return all(
            isinstance(item, int) and not isinstance(item, bool)
            for item in (self.initial, self.maximum, self.increment)
            if item is not None
        )

    def values(self) -> Iterator[Number]:
        if self.maximum is None or self.increment is None:
            yield self.initial
            return
        if self.is_integral:
            yield from range(int(self.initial), int(self.maximum) + 1, int(self.increment))
            return
        slack = 1e-9 * max(1.0, abs(float(self.increment)))
        for step in itertools.count():
            value = float(self.initial) + step * float(self.increment)
            if value > float(self.maximum) + slack:
                return
            yield value

    def __iter__(self) -> Iterator[Number]:
        return self.values()


def _default_range(value: Number):
    return field(default_factory=lambda: ParameterRange(value))


@dataclass(frozen=True)
class GridConfig:
    """The four independent sweep ranges."""

    clusters: ParameterRange = _default_range(5)
    fuzziness: ParameterRange = _default_range(2.0)
    max_iter: ParameterRange = _default_range(1000)
    tolerance: ParameterRange = _default_range(1e-6)

    def __post_init__(self) -> None:
        for name in ("clusters", "fuzziness", "max_iter", "tolerance"):
            object.__setattr__(self, name, ParameterRange.parse(getattr(self, name)))

    def combinations(self) -> Iterator[tuple[Number, Number, Number, Number]]:
        return itertools.product(
            self.clusters.values(),
            self.fuzziness.values(),
            self.max_iter.values(),
            self.tolerance.values(),
        )


class FcmGrid:
    """Fit one model per combination and keep the highest FPC."""

    def __init__(self, config: GridConfig | None = None, *, seed: Optional[int] = None) -> None:
        self.config = config or GridConfig()
        self.seed = seed

    def best_model(self, data: Sequence[float] | np.ndarray) -> FittedModel:
        best: FittedModel | None = None
        tried = 0
        for clusters, fuzziness, max_iter, tolerance in self.config.combinations():
            tried += 1
            try:
                if not float(clusters).is_integer() or not float(max_iter).is_integer():
                    raise ClusteringConfigError(
                        f"clusters and max_iter must be integers, got {clusters}, {max_iter}"
                    )
                estimator = FuzzyCMeans(
                    clusters=int(clusters),
                    fuzziness=float(fuzziness),
                    max_iter=int(max_iter),
                    tolerance=float(tolerance),
                    seed=self.seed,
                )
                model = estimator.fit(data)
            except (ClusteringConfigError, FittingError) as exc:
                logger.debug(
                    "Skipping grid combination.",
                    extra={
                        "event": "grid.combination_failed",
                        "clusters": clusters,
                        "fuzziness": fuzziness,
                        "max_iter": max_iter,
                        "tolerance": tolerance,
                        "error": str(exc),
                    },
                )
                continue
            if best is None or model.fpc > best.fpc:
                best = model

        if best is None:
            raise NoValidModelFound(
                "No valid model found" if tried else "No valid model found: empty grid"
            )
        logger.debug(
            "Selected best fuzzy c-means model.",
            extra={
                "event": "grid.best_model",
                "combinations": tried,
                "clusters": best.clusters,
                "fpc": best.fpc,
            },
        )
        return best
