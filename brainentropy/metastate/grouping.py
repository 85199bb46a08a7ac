"""
brainentropy.metastate.grouping
===============================

Collapse the four K-means states into two opposing metastates.

The rule is deterministic given the centroids:

1. Correlate every pair of centroids.
2. For each cluster ``k`` find its anti-correlate, the cluster whose
   centroid is least correlated with centroid ``k`` (first minimum on
   ties).
3. Require the pairing to be mutual.  If the anti-correlate of the
   anti-correlate of ``k`` is not ``k`` the clustering does not show
   the expected two-lobe structure and
   :class:`~brainentropy.exceptions.GroupingInconsistencyError` is
   raised.  A cluster that is its own anti-correlate can only arise
   when all centroids are perfectly correlated, which fails this check.
4. Metastate A holds cluster 0 and its anti-correlate; metastate B
   holds the two remaining clusters.
"""

from __future__ import annotations

import numpy as np

from ..exceptions import ClusteringFailureError, GroupingInconsistencyError, InvalidInputError
from .config import N_CLUSTERS
from .model import Metastate, MetastateGrouping


def centroid_correlation(centroids: np.ndarray) -> np.ndarray:
    """Pearson correlation between every pair of centroids (rows)."""
    centroids = np.asarray(centroids, dtype=float)
    if centroids.ndim != 2:
        raise InvalidInputError("centroids must be a 2D array of shape (n_clusters, n_features)")
    with np.errstate(divide='ignore', invalid='ignore'):
        corr = np.corrcoef(centroids)
    if not np.isfinite(corr).all():
        raise ClusteringFailureError("Centroid correlation is undefined; a centroid has zero variance")
    return corr


def anticorrelates(centroids: np.ndarray) -> np.ndarray:
    """Return, for each cluster, the index of its least correlated centroid."""
    return np.argmin(centroid_correlation(centroids), axis=0)


def group_states(centroids: np.ndarray) -> MetastateGrouping:
    """Partition the cluster labels into two metastates.

    Parameters
    ----------
    centroids : np.ndarray
        Array of shape ``(4, n_features)``.

    Returns
    -------
    MetastateGrouping
        Mutual anti-correlate pairing and the metastate of each
        cluster.  Both metastates hold exactly two clusters.

    Raises
    ------
    InvalidInputError
        If the number of centroids is not four.
    GroupingInconsistencyError
        If the anti-correlation pairing is not mutual.
    """
    centroids = np.asarray(centroids, dtype=float)
    if centroids.ndim != 2 or centroids.shape[0] != N_CLUSTERS:
        raise InvalidInputError(
            f"Metastate grouping requires exactly {N_CLUSTERS} centroids, "
            f"got array of shape {centroids.shape}"
        )
    idx = anticorrelates(centroids)
    for k in range(N_CLUSTERS):
        if idx[idx[k]] != k:
            raise GroupingInconsistencyError(
                f"Wrong metastate grouping: cluster {k} is most anti-correlated with "
                f"cluster {int(idx[k])}, whose most anti-correlated cluster is "
                f"{int(idx[idx[k]])}"
            )
    group_a = {0, int(idx[0])}
    membership = tuple(
        Metastate.A if k in group_a else Metastate.B for k in range(N_CLUSTERS)
    )
    return MetastateGrouping(
        anticorrelate=tuple(int(i) for i in idx),
        membership=membership,
    )


__all__ = [
    'centroid_correlation',
    'anticorrelates',
    'group_states',
]
