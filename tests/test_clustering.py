from __future__ import annotations

import numpy as np
import pytest

from mentor_core.clustering import (
    ClusteringConfigError,
    FittedModel,
    FittingError,
    FuzzyCMeans,
    partition_coefficient,
)


def test_single_iteration_matches_reference_values() -> None:
    estimator = FuzzyCMeans(clusters=2, fuzziness=1.7, max_iter=1)
    initial = np.array([[0.8, 0.2], [0.7, 0.3], [0.2, 0.8], [0.1, 0.9]]).T

    model = estimator.fit_with_memberships([1.0, 2.0, 4.0, 7.0], initial)

    np.testing.assert_allclose(
        model.centroids[:, 0], [1.6539221306009797, 5.198884159924932], atol=1e-6
    )
    np.testing.assert_allclose(
        model.memberships.T,
        [
            [0.9950975335864382, 0.004902466413561808],
            [0.9982632153654964, 0.0017367846345036414],
            [0.12806762946010766, 0.8719323705398923],
            [0.042760125204558706, 0.9572398747954414],
        ],
        atol=1e-6,
    )
    assert model.fpc == pytest.approx(0.920394895454056, abs=1e-6)
    assert model.iterations == 1
    assert not model.converged


def test_fit_separates_two_groups() -> None:
    data = [0.0, 0.1, 0.2, 10.0, 10.1, 10.2]

    model = FuzzyCMeans(clusters=2, seed=0).fit(data)

    np.testing.assert_allclose(np.sort(model.centroids[:, 0]), [0.1, 10.1], atol=1e-3)
    assert model.converged
    assert model.fpc > 0.99
    np.testing.assert_allclose(model.memberships.sum(axis=0), 1.0)


def test_fit_is_reproducible_with_seed() -> None:
    data = np.linspace(-3.0, 3.0, 25)

    first = FuzzyCMeans(clusters=3, seed=11).fit(data)
    second = FuzzyCMeans(clusters=3, seed=11).fit(data)

    np.testing.assert_array_equal(first.centroids, second.centroids)
    assert first.fpc == second.fpc


def test_initial_memberships_are_normalised() -> None:
    memberships = FuzzyCMeans(clusters=4, seed=3).initial_memberships(10)

    assert memberships.shape == (4, 10)
    np.testing.assert_allclose(memberships.sum(axis=0), 1.0)


def test_sample_on_centroid_gets_crisp_membership() -> None:
    estimator = FuzzyCMeans(clusters=2)

    memberships = estimator.update_memberships(
        np.array([1.0, 2.0]), np.array([[1.0], [3.0]])
    )

    np.testing.assert_allclose(memberships[:, 0], [1.0, 0.0])
    np.testing.assert_allclose(memberships[:, 1], [0.5, 0.5])


def test_constant_series_still_fits() -> None:
    model = FuzzyCMeans(clusters=2, seed=1).fit([4.0, 4.0, 4.0])

    np.testing.assert_allclose(model.centroids[:, 0], [4.0, 4.0])
    assert np.all(np.isfinite(model.memberships))
    assert 0.0 < model.fpc <= 1.0


@pytest.mark.parametrize(
    "kwargs",
    [
        {"clusters": 0},
        {"clusters": 2, "fuzziness": 1.0},
        {"clusters": 2, "max_iter": 0},
        {"clusters": 2, "tolerance": -1.0},
    ],
)
def test_invalid_hyperparameters(kwargs) -> None:
    with pytest.raises(ClusteringConfigError):
        FuzzyCMeans(**kwargs)


@pytest.mark.parametrize("data", [[], [1.0, float("nan")], [[1.0, 2.0], [3.0, 4.0]]])
def test_unusable_data_is_a_fitting_error(data) -> None:
    with pytest.raises(FittingError):
        FuzzyCMeans(clusters=2, seed=0).fit(data)


def test_membership_shape_must_match() -> None:
    with pytest.raises(FittingError):
        FuzzyCMeans(clusters=2).fit_with_memberships([1.0, 2.0], np.ones((3, 2)) / 3)


def test_partition_coefficient_bounds() -> None:
    assert partition_coefficient(np.array([[1.0, 0.0], [0.0, 1.0]])) == 1.0
    assert partition_coefficient(np.array([[0.5, 0.5], [0.5, 0.5]])) == pytest.approx(0.5)
    assert partition_coefficient(np.zeros((2, 3))) == np.finfo(float).eps
    assert partition_coefficient(np.full((2, 2), np.nan)) == np.finfo(float).eps


def test_fitted_model_as_dict() -> None:
    model = FittedModel(
        centroids=np.array([[-1.0], [2.0]]),
        memberships=np.array([[1.0, 0.0], [0.0, 1.0]]),
        fuzziness=2.0,
        iterations=4,
        converged=True,
    )

    assert model.as_dict() == {
        "clusters": 2,
        "fuzziness": 2.0,
        "fpc": 1.0,
        "iterations": 4,
        "converged": True,
        "centroids": [-1.0, 2.0],
    }
    assert model.samples == 2


def test_five_clusters_on_two_groups() -> None:
    spread = np.linspace(-0.5, 0.5, 10)
    data = np.concatenate([spread, 10.0 + spread])

    model = FuzzyCMeans(clusters=5, seed=0).fit(data)

    memberships = model.memberships
    assert memberships.shape == (5, 20)
    assert np.all((memberships >= 0.0) & (memberships <= 1.0))
    np.testing.assert_allclose(memberships.sum(axis=0), 1.0)
    strongest = model.centroids[np.argmax(memberships, axis=0), 0]
    assert np.all(np.abs(strongest - data) < 2.0)


def test_iteration_count_respects_limit() -> None:
    model = FuzzyCMeans(clusters=2, seed=0, max_iter=2).fit([0.0, 0.1, 10.0, 10.1])

    assert model.iterations == 2
    assert model.centroids.shape == (2, 1)
    np.testing.assert_allclose(model.memberships.sum(axis=0), 1.0)
