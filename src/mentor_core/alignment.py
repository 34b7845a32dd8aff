"""Distance alignment, interpolation and differencing of two laps.

Two laps are compared on the union of their ``distance`` samples.  Every
channel of both laps is linearly interpolated onto that grid, clamping to the
first/last recorded value outside the recorded span, and the difference
bundle is ``reference - target`` channel by channel.
"""

from __future__ import annotations

from dataclasses import dataclass
import logging
from typing import Sequence

import numpy as np

from mentor_core.channels import DISCRETE_CHANNELS, ChannelBundle
from mentor_core.laps import Lap

__all__ = [
    "AlignmentError",
    "DifferentCircuitsError",
    "AlignedLaps",
    "union_distances",
    "interpolate",
    "interpolate_bundle",
    "difference",
    "align_laps",
]

logger = logging.getLogger(__name__)


class DifferentCircuitsError(ValueError):
    """The reference and target laps were driven on different circuits."""

    def __init__(self, reference: str, target: str) -> None:
        super().__init__(
            f"Cannot compare laps from different circuits: {reference!r} != {target!r}"
        )
        self.reference = reference
        self.target = target


class AlignmentError(ValueError):
    """A lap cannot be placed on a distance grid."""


@dataclass(frozen=True, eq=False)
class AlignedLaps:
    """Two laps resampled on a shared distance grid and their differences."""

    distances: np.ndarray
    reference: ChannelBundle
    target: ChannelBundle
    differences: ChannelBundle


def union_distances(
    reference: Sequence[float] | np.ndarray, target: Sequence[float] | np.ndarray
) -> np.ndarray:
    """Return the ascending, duplicate free union of both distance series."""

    merged = np.concatenate(
        [np.asarray(reference, dtype=float), np.asarray(target, dtype=float)]
    )
    return np.unique(merged)


def _round_half_away(values: np.ndarray) -> np.ndarray:
    return np.sign(values) * np.floor(np.abs(values) + 0.5)


def interpolate(
    distances: Sequence[float] | np.ndarray,
    values: Sequence[float] | np.ndarray,
    grid: Sequence[float] | np.ndarray,
    *,
    discrete: bool = False,
) -> np.ndarray:
    """Linearly interpolate ``values`` recorded at ``distances`` onto ``grid``.

    For each grid point the upper bracket is the first recorded sample whose
    distance is greater than or equal to it.  Points before that sample clamp
    to the first value and points past every sample clamp to the last value.
    ``discrete`` channels are rounded to the nearest integer afterwards.
    """

    d = np.asarray(distances, dtype=float)
    v = np.asarray(values, dtype=float)
    x = np.asarray(grid, dtype=float)
    if v.size == 0:
        return np.empty(0, dtype=np.int64 if discrete else float)
    if d.size == 0:
        raise AlignmentError("Cannot interpolate a channel without distance samples")
    if d.size != v.size:
        raise AlignmentError(
            f"Distance and value series differ in length: {d.size} != {v.size}"
        )

    # first index whose distance reaches x, also on non monotonic series
    upper = np.searchsorted(np.fmax.accumulate(d), x, side="left")
    result = np.empty(x.shape, dtype=float)

    before = upper == 0
    after = upper >= d.size
    inside = ~(before | after)
    result[before] = v[0]
    result[after] = v[-1]

    hi = upper[inside]
    lo = hi - 1
    d0, d1 = d[lo], d[hi]
    v0, v1 = v[lo], v[hi]
    result[inside] = v0 + (x[inside] - d0) / (d1 - d0) * (v1 - v0)

    if discrete:
        return _round_half_away(result).astype(np.int64)
    return result


def interpolate_bundle(bundle: ChannelBundle, grid: np.ndarray) -> ChannelBundle:
    """Resample every channel of ``bundle`` onto ``grid``.

    The ``distance`` channel of the result is the grid itself.
    """

    if bundle.distance.size == 0:
        raise AlignmentError("Cannot align a lap without distance samples")
    resampled = {}
    for name, values in bundle.items():
        if name == "distance":
            resampled[name] = np.asarray(grid, dtype=float)
            continue
        resampled[name] = interpolate(
            bundle.distance, values, grid, discrete=name in DISCRETE_CHANNELS
        )
    return ChannelBundle(**resampled)


def difference(reference: ChannelBundle, target: ChannelBundle) -> ChannelBundle:
    """Elementwise ``reference - target`` for every channel.

    A channel empty on either side yields an empty difference.
    """

    deltas = {}
    for name, ref_values in reference.items():
        target_values = target.get(name)
        if ref_values.size == 0 or target_values.size == 0:
            continue
        if ref_values.size != target_values.size:
            raise AlignmentError(
                f"{name} is not on a shared grid: {ref_values.size} != {target_values.size}"
            )
        deltas[name] = ref_values - target_values
    return ChannelBundle(**deltas)


def align_laps(reference: Lap, target: Lap) -> AlignedLaps:
    """Resample both laps on the union of their distances and difference them."""

    if reference.circuit != target.circuit:
        raise DifferentCircuitsError(reference.circuit, target.circuit)

    grid = union_distances(reference.channels.distance, target.channels.distance)
    aligned_reference = interpolate_bundle(reference.channels, grid)
    aligned_target = interpolate_bundle(target.channels, grid)
    differences = difference(aligned_reference, aligned_target)
    logger.debug(
        "Aligned laps on a shared distance grid.",
        extra={
            "event": "alignment.done",
            "reference": reference.id,
            "target": target.id,
            "grid_size": int(grid.size),
        },
    )
    return AlignedLaps(
        distances=grid,
        reference=aligned_reference,
        target=aligned_target,
        differences=differences,
    )
