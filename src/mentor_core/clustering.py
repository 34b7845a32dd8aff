"""Fuzzy c-means clustering of one dimensional difference channels."""

from __future__ import annotations

from dataclasses import dataclass, field
import logging
from typing import Optional, Sequence

import numpy as np

__all__ = [
    "ClusteringConfigError",
    "FittingError",
    "FittedModel",
    "FuzzyCMeans",
    "partition_coefficient",
]

logger = logging.getLogger(__name__)

_EPSILON = float(np.finfo(float).eps)


class ClusteringConfigError(ValueError):
    """Invalid fuzzy c-means hyperparameters."""


class FittingError(ValueError):
    """The data cannot be clustered."""


def partition_coefficient(memberships: np.ndarray) -> float:
    """Return the fuzzy partition coefficient ``sum(u ** 2) / n_samples``.

    NaN or non-positive values are floored at machine epsilon and the result
    is clamped to ``[eps, 1]``.
    """

    samples = memberships.shape[1] if memberships.ndim == 2 else 0
    if samples == 0:
        return _EPSILON
    fpc = float(np.sum(memberships**2) / samples)
    if np.isnan(fpc) or fpc <= 0.0:
        logger.warning(
            "Partition coefficient degenerated, flooring at machine epsilon.",
            extra={"event": "clustering.fpc_floor", "fpc": fpc},
        )
        return _EPSILON
    return min(max(fpc, _EPSILON), 1.0)


@dataclass(frozen=True, eq=False)
class FittedModel:
    """Centroids (``C x 1``) and memberships (``C x N``) of a fitted model."""

    centroids: np.ndarray
    memberships: np.ndarray
    fuzziness: float
    iterations: int = 0
    converged: bool = False
    fpc: float = field(init=False)

    def __post_init__(self) -> None:
        object.__setattr__(self, "fpc", partition_coefficient(self.memberships))

    @property
    def clusters(self) -> int:
        return int(self.centroids.shape[0])

    @property
    def samples(self) -> int:
        return int(self.memberships.shape[1])

    def as_dict(self) -> dict:
        return {
            "clusters": self.clusters,
            "fuzziness": self.fuzziness,
            "fpc": self.fpc,
            "iterations": self.iterations,
            "converged": self.converged,
            "centroids": self.centroids[:, 0].tolist(),
        }


@dataclass(frozen=True)
class FuzzyCMeans:
    """Fuzzy c-means estimator.

    Fitting alternates centroid and membership updates until the largest
    centroid shift falls below ``tolerance`` or ``max_iter`` rounds ran.
    """

    clusters: int
    fuzziness: float = 2.0
    max_iter: int = 1000
    tolerance: float = 1e-6
    seed: Optional[int] = None

    def __post_init__(self) -> None:
        if self.clusters < 1:
            raise ClusteringConfigError(f"clusters must be >= 1, got {self.clusters}")
        if not self.fuzziness > 1.0:
            raise ClusteringConfigError(
                f"fuzziness must be greater than 1, got {self.fuzziness}"
            )
        if self.max_iter < 1:
            raise ClusteringConfigError(f"max_iter must be >= 1, got {self.max_iter}")
        if not self.tolerance >= 0.0:
            raise ClusteringConfigError(f"tolerance must be >= 0, got {self.tolerance}")

    def initial_memberships(self, samples: int) -> np.ndarray:
        """Random ``C x N`` memberships normalised per sample."""

        rng = np.random.default_rng(self.seed)
        memberships = rng.random((self.clusters, samples))
        totals = memberships.sum(axis=0)
        zero = totals == 0.0
        memberships[:, zero] = 1.0 / self.clusters
        totals[zero] = 1.0
        return memberships / totals

    def update_centroids(self, data: np.ndarray, memberships: np.ndarray) -> np.ndarray:
        weights = memberships**self.fuzziness
        denominator = weights.sum(axis=1)
        denominator[denominator == 0.0] = 1.0
        return (weights @ data / denominator)[:, np.newaxis]

    def update_memberships(self, data: np.ndarray, centroids: np.ndarray) -> np.ndarray:
        squared = (data[np.newaxis, :] - centroids) ** 2
        exponent = 1.0 / (self.fuzziness - 1.0)
        with np.errstate(divide="ignore", invalid="ignore", over="ignore"):
            ratios = (squared[:, np.newaxis, :] / squared[np.newaxis, :, :]) ** exponent
        # zero distances to centroid k are left out of the sum over k
        ratios = np.where(squared[np.newaxis, :, :] == 0.0, 0.0, ratios)
        totals = ratios.sum(axis=1)
        totals[totals == 0.0] = 1.0
        memberships = 1.0 / totals

        on_centroid = squared == 0.0
        hits = on_centroid.sum(axis=0)
        crisp = hits > 0
        if np.any(crisp):
            memberships[:, crisp] = on_centroid[:, crisp] / hits[crisp]
        return memberships

    def fit(self, data: Sequence[float] | np.ndarray) -> FittedModel:
        values = _as_series(data)
        return self.fit_with_memberships(values, self.initial_memberships(values.size))

    def fit_with_memberships(
        self, data: Sequence[float] | np.ndarray, memberships: np.ndarray
    ) -> FittedModel:
        """Fit starting from explicit ``C x N`` memberships."""

        values = _as_series(data)
        current = np.array(memberships, dtype=float)
        if current.shape != (self.clusters, values.size):
            raise FittingError(
                f"memberships shape {current.shape} does not match "
                f"({self.clusters}, {values.size})"
            )

        centroids = self.update_centroids(values, current)
        current = self.update_memberships(values, centroids)
        converged = False
        iterations = 1
        while iterations < self.max_iter:
            iterations += 1
            updated = self.update_centroids(values, current)
            current = self.update_memberships(values, updated)
            shift = float(np.max(np.abs(updated - centroids)))
            centroids = updated
            if shift < self.tolerance:
                converged = True
                break

        model = FittedModel(
            centroids=centroids,
            memberships=current,
            fuzziness=self.fuzziness,
            iterations=iterations,
            converged=converged,
        )
        logger.debug(
            "Fitted fuzzy c-means model.",
            extra={
                "event": "clustering.fit",
                "clusters": self.clusters,
                "fuzziness": self.fuzziness,
                "iterations": iterations,
                "converged": converged,
                "fpc": model.fpc,
            },
        )
        return model


def _as_series(data: Sequence[float] | np.ndarray) -> np.ndarray:
    values = np.asarray(data, dtype=float)
    if values.ndim == 2 and values.shape[1] == 1:
        values = values[:, 0]
    if values.ndim != 1:
        raise FittingError(f"expected one dimensional data, got shape {values.shape}")
    if values.size == 0:
        raise FittingError("cannot fit an empty series")
    if not np.all(np.isfinite(values)):
        raise FittingError("data contains NaN or infinite values")
    return values
