from __future__ import annotations

import numpy as np
import pytest

from mentor_core.alignment import (
    AlignmentError,
    DifferentCircuitsError,
    align_laps,
    difference,
    interpolate,
    interpolate_bundle,
    union_distances,
)

from tests.helpers import build_bundle, build_lap


def test_union_distances_sorted_without_duplicates() -> None:
    grid = union_distances([1.0, 2.0, 3.0], [1.5, 2.0, 2.5])

    np.testing.assert_array_equal(grid, [1.0, 1.5, 2.0, 2.5, 3.0])


def test_interpolate_inside_and_clamped_outside() -> None:
    result = interpolate([1.5, 2.5], [15.0, 25.0], [1.0, 1.5, 2.0, 2.5, 3.0])

    np.testing.assert_allclose(result, [15.0, 15.0, 20.0, 25.0, 25.0])


def test_interpolate_hits_recorded_samples_exactly() -> None:
    result = interpolate([0.0, 10.0, 20.0], [3.0, 7.0, -1.0], [0.0, 10.0, 20.0, 15.0])

    np.testing.assert_allclose(result, [3.0, 7.0, -1.0, 3.0])


def test_discrete_channels_round_half_away_from_zero() -> None:
    result = interpolate([0.0, 10.0], [2, 3], [2.5, 5.0, 7.5], discrete=True)

    assert result.dtype == np.int64
    np.testing.assert_array_equal(result, [2, 3, 3])

    negative = interpolate([0.0, 10.0], [-2, -3], [5.0], discrete=True)
    np.testing.assert_array_equal(negative, [-3])


def test_empty_values_interpolate_to_empty() -> None:
    assert interpolate([0.0, 1.0], [], [0.5]).size == 0
    assert interpolate([], [], [0.5], discrete=True).dtype == np.int64


@pytest.mark.parametrize(
    ("distances", "values"),
    [([], [1.0]), ([0.0, 1.0], [1.0])],
)
def test_interpolate_rejects_mismatched_series(distances, values) -> None:
    with pytest.raises(AlignmentError):
        interpolate(distances, values, [0.0])


def test_interpolate_bundle_replaces_distance_with_grid() -> None:
    bundle = build_bundle([0.0, 10.0], speed=[40.0, 50.0], gear=[2, 3])

    aligned = interpolate_bundle(bundle, np.array([0.0, 2.0, 10.0]))

    np.testing.assert_array_equal(aligned.distance, [0.0, 2.0, 10.0])
    np.testing.assert_allclose(aligned.speed, [40.0, 42.0, 50.0])
    np.testing.assert_array_equal(aligned.gear, [2, 2, 3])
    assert aligned.throttle.size == 0


def test_interpolate_bundle_requires_distance() -> None:
    bundle = build_bundle([], speed=[1.0])

    with pytest.raises(AlignmentError):
        interpolate_bundle(bundle, np.array([0.0]))


def test_difference_is_reference_minus_target() -> None:
    reference = build_bundle([0.0, 1.0], speed=[10.0, 20.0], brake=[0.5, 0.5])
    target = build_bundle([0.0, 1.0], speed=[12.0, 15.0])

    delta = difference(reference, target)

    np.testing.assert_allclose(delta.speed, [-2.0, 5.0])
    assert delta.brake.size == 0
    np.testing.assert_array_equal(delta.distance, [0.0, 0.0])


def test_difference_requires_shared_grid() -> None:
    with pytest.raises(AlignmentError):
        difference(build_bundle([0.0, 1.0]), build_bundle([0.0, 1.0, 2.0]))


def test_align_laps_on_distance_union() -> None:
    reference = build_lap(build_bundle([1.0, 2.0, 3.0], speed=[10.0, 20.0, 30.0]))
    target = build_lap(build_bundle([1.5, 2.5], speed=[15.0, 25.0]), number=2)

    aligned = align_laps(reference, target)

    np.testing.assert_array_equal(aligned.distances, [1.0, 1.5, 2.0, 2.5, 3.0])
    np.testing.assert_allclose(aligned.reference.speed, [10.0, 15.0, 20.0, 25.0, 30.0])
    np.testing.assert_allclose(aligned.target.speed, [15.0, 15.0, 20.0, 25.0, 25.0])
    np.testing.assert_allclose(aligned.differences.speed, [-5.0, 0.0, 0.0, 0.0, 5.0])


def test_align_laps_rejects_different_circuits() -> None:
    reference = build_lap(build_bundle([0.0, 1.0]), circuit="Spa")
    target = build_lap(build_bundle([0.0, 1.0]), circuit="Monza")

    with pytest.raises(DifferentCircuitsError) as excinfo:
        align_laps(reference, target)

    assert excinfo.value.reference == "Spa"
    assert excinfo.value.target == "Monza"
