import itertools

import numpy as np
import pytest

from brainentropy.exceptions import (
    ClusteringFailureError,
    GroupingInconsistencyError,
    InvalidInputError,
)
from brainentropy.metastate.grouping import anticorrelates, centroid_correlation, group_states
from brainentropy.metastate.model import Metastate


def test_opposing_pairs(opposing_centroids):
    grouping = group_states(opposing_centroids)
    assert grouping.anticorrelate == (1, 0, 3, 2)
    assert grouping.group(Metastate.A) == frozenset({0, 1})
    assert grouping.group(Metastate.B) == frozenset({2, 3})
    assert grouping.membership == (Metastate.A, Metastate.A, Metastate.B, Metastate.B)


@pytest.mark.parametrize("order", list(itertools.permutations(range(4))))
def test_pairing_is_mutual_and_partition_complete(opposing_centroids, order):
    grouping = group_states(opposing_centroids[list(order)])
    idx = grouping.anticorrelate
    assert all(idx[idx[k]] == k for k in range(4))
    group_a = grouping.group(Metastate.A)
    group_b = grouping.group(Metastate.B)
    assert 0 in group_a
    assert group_a.isdisjoint(group_b)
    assert group_a | group_b == {0, 1, 2, 3}
    assert len(group_a) == len(group_b) == 2
    # each metastate holds one anti-correlated pair
    for k in range(4):
        assert grouping.membership[k] is grouping.membership[idx[k]]


def test_label_maps_clusters_to_booleans(opposing_centroids):
    grouping = group_states(opposing_centroids)
    labels = grouping.label(np.array([0, 1, 2, 3, 2, 0]))
    assert labels.dtype == bool
    assert labels.tolist() == [False, False, True, True, True, False]


def test_non_mutual_pairing_raises():
    a = np.array([1.0, -1.0, 0.0, 0.0, 0.0, 0.0])
    b = np.array([0.0, 0.0, 1.0, -1.0, 0.0, 0.0])
    c = np.array([0.0, 0.0, 0.0, 0.0, 1.0, -1.0])
    # 0 -> 1 (r = -0.45) but 1 -> 2 (r = -0.89)
    centroids = np.array([a, -a - 2 * b, b, c])
    assert anticorrelates(centroids).tolist()[:2] == [1, 2]
    with pytest.raises(GroupingInconsistencyError):
        group_states(centroids)


def test_requires_four_centroids(opposing_centroids):
    with pytest.raises(InvalidInputError):
        group_states(opposing_centroids[:3])
    with pytest.raises(InvalidInputError):
        group_states(opposing_centroids[0])


def test_constant_centroid_rejected(opposing_centroids):
    centroids = opposing_centroids.copy()
    centroids[3] = 1.0
    with pytest.raises(ClusteringFailureError):
        group_states(centroids)


def test_centroid_correlation_symmetric(opposing_centroids):
    corr = centroid_correlation(opposing_centroids)
    assert corr.shape == (4, 4)
    assert np.allclose(corr, corr.T)
    assert np.allclose(np.diag(corr), 1.0)
    assert np.isclose(corr[0, 1], -1.0)


def test_identical_centroids_raise():
    u = np.array([1.0, -1.0, 0.5, 0.0, 2.0])
    centroids = np.tile(u, (4, 1))
    # every cluster is least correlated with cluster 0, itself included
    assert anticorrelates(centroids).tolist() == [0, 0, 0, 0]
    with pytest.raises(GroupingInconsistencyError):
        group_states(centroids)
