"""Lap comparison analytics: alignment, fuzzy clustering and coaching tags."""

from __future__ import annotations

from mentor_core.alignment import (
    AlignedLaps,
    AlignmentError,
    DifferentCircuitsError,
    align_laps,
    difference,
    interpolate,
    interpolate_bundle,
    union_distances,
)
from mentor_core.channels import CHANNEL_NAMES, DISCRETE_CHANNELS, ChannelBundle
from mentor_core.clustering import (
    ClusteringConfigError,
    FittedModel,
    FittingError,
    FuzzyCMeans,
)
from mentor_core.comparison import (
    DEFAULT_CHANNELS,
    Comparison,
    ComparisonConfig,
    LapSummary,
    compare_laps,
)
from mentor_core.grid import (
    FcmGrid,
    GridConfig,
    GridConfigError,
    NoValidModelFound,
    ParameterRange,
)
from mentor_core.laps import UNKNOWN, Lap
from mentor_core.tags import Action, Direction, Tag, assign_tags, centroid_directions

__all__ = [
    "CHANNEL_NAMES",
    "DEFAULT_CHANNELS",
    "DISCRETE_CHANNELS",
    "UNKNOWN",
    "Action",
    "AlignedLaps",
    "AlignmentError",
    "ChannelBundle",
    "ClusteringConfigError",
    "Comparison",
    "ComparisonConfig",
    "DifferentCircuitsError",
    "Direction",
    "FcmGrid",
    "FittedModel",
    "FittingError",
    "FuzzyCMeans",
    "GridConfig",
    "GridConfigError",
    "Lap",
    "LapSummary",
    "NoValidModelFound",
    "ParameterRange",
    "Tag",
    "align_laps",
    "assign_tags",
    "centroid_directions",
    "compare_laps",
    "difference",
    "interpolate",
    "interpolate_bundle",
    "union_distances",
]
