"""
brainentropy.metastate.clustering
=================================

This module implements the clustering stage of the metastate
pipeline: K-means with a correlation distance (``1 - r``), repeated
from many random initialisations, keeping the solution with the
lowest total within-cluster distance.

Correlation distance is obtained by standardising every observation
(row) to zero mean and unit norm across features.  For such vectors
the squared Euclidean distance equals ``2 (1 - r)``, so each replicate
starts from a single-initialisation :class:`sklearn.cluster.KMeans` fit
on the standardised rows.  Euclidean Lloyd steps compare rows against
raw cluster means, which are not unit norm, so the fit is refined by
spherical Lloyd steps: centroids are re-standardised cluster means and
every row moves to its correlation-nearest centroid, until the labels
stop changing or ``max_iter`` further steps have run.  The cost of a
replicate is the summed correlation distance of every row to its
centroid.

Replicates are independent and are distributed with :mod:`joblib`
when more than one worker is requested.  Each replicate receives its
own seed drawn from a :class:`numpy.random.SeedSequence`, so a fixed
``random_state`` yields the same solution regardless of the number of
workers.  Without a seed the result is not reproducible across runs.

Note
----
This module relies on ``scikit-learn`` for the K-means iterations,
``scipy`` for the correlation distances and ``joblib`` for the
replicate fan-out.
"""

from __future__ import annotations

import logging
from typing import List, Optional, Tuple

import numpy as np
from joblib import Parallel, delayed
from scipy.spatial.distance import cdist
from sklearn.cluster import KMeans

from ..exceptions import ClusteringFailureError, InvalidInputError
from .config import DISTANCE_METRIC, N_CLUSTERS
from .model import ClusteringResult

logger = logging.getLogger(__name__)

_Replicate = Tuple[np.ndarray, np.ndarray, float, int]


def standardize_rows(data: np.ndarray) -> np.ndarray:
    """Centre each row and scale it to unit Euclidean norm.

    Rows with zero variance map to NaN.
    """
    centered = data - data.mean(axis=1, keepdims=True)
    norms = np.linalg.norm(centered, axis=1, keepdims=True)
    with np.errstate(divide='ignore', invalid='ignore'):
        return centered / norms


def _check_input(pooled: np.ndarray, n_clusters: int) -> None:
    if pooled.ndim != 2:
        raise InvalidInputError("Clustering input must be a 2D matrix (observations x features)")
    if not np.isfinite(pooled).all():
        raise InvalidInputError("Clustering input contains NaN or Inf values")
    n_obs, n_features = pooled.shape
    if n_obs < n_clusters:
        raise InvalidInputError(
            f"At least {n_clusters} observations are required, got {n_obs}"
        )
    if n_features < 2:
        raise InvalidInputError("Correlation distance requires at least 2 features")
    constant = np.ptp(pooled, axis=1) == 0
    if constant.any():
        raise InvalidInputError(
            f"{int(constant.sum())} observation(s) are constant across features; "
            "their correlation distance is undefined"
        )


def _cluster_centroids(standardized: np.ndarray, labels: np.ndarray, n_clusters: int) -> np.ndarray:
    """Standardised mean of each cluster; empty clusters map to NaN."""
    means = np.zeros((n_clusters, standardized.shape[1]), dtype=float)
    for k in range(n_clusters):
        members = standardized[labels == k]
        if members.shape[0]:
            means[k] = members.mean(axis=0)
    return standardize_rows(means)


def _correlation_distances(standardized: np.ndarray, centroids: np.ndarray) -> np.ndarray:
    with np.errstate(divide='ignore', invalid='ignore'):
        distances = cdist(standardized, centroids, metric=DISTANCE_METRIC)
    # an empty cluster never attracts rows
    return np.where(np.isfinite(distances), distances, np.inf)


def _run_replicate(
    standardized: np.ndarray, n_clusters: int, max_iter: int, seed: int
) -> _Replicate:
    """Fit one K-means initialisation and score it by correlation distance."""
    km = KMeans(
        n_clusters=n_clusters,
        init='k-means++',
        n_init=1,
        max_iter=max_iter,
        random_state=seed,
    )
    labels = km.fit_predict(standardized)
    n_iter = int(km.n_iter_)
    # spherical refinement: Lloyd steps under correlation distance
    for _ in range(max_iter):
        centroids = _cluster_centroids(standardized, labels, n_clusters)
        distances = _correlation_distances(standardized, centroids)
        nearest = distances.argmin(axis=1)
        if np.array_equal(nearest, labels):
            break
        labels = nearest
        n_iter += 1
    cost = float(distances[np.arange(standardized.shape[0]), labels].sum())
    if not np.isfinite(cost) or np.bincount(labels, minlength=n_clusters).min() == 0:
        # never preferred over a replicate with every cluster populated
        cost = np.inf
    return labels.astype(int), centroids, cost, n_iter


def _check_solution(labels: np.ndarray, centroids: np.ndarray, n_clusters: int) -> None:
    counts = np.bincount(labels, minlength=n_clusters)
    empty = np.flatnonzero(counts == 0)
    if empty.size:
        raise ClusteringFailureError(
            f"K-means left {empty.size} of {n_clusters} clusters empty (clusters {empty.tolist()})"
        )
    if not np.isfinite(centroids).all():
        raise ClusteringFailureError("K-means produced a centroid with zero variance")
    between = cdist(centroids, centroids, metric=DISTANCE_METRIC)
    np.fill_diagonal(between, np.inf)
    if np.min(between) <= 1e-12:
        raise ClusteringFailureError("K-means produced indistinguishable centroids")


def correlation_kmeans(
    pooled: np.ndarray,
    n_clusters: int = N_CLUSTERS,
    n_replicates: int = 200,
    max_iter: int = 1000,
    random_state: Optional[int] = None,
    n_jobs: Optional[int] = 1,
) -> ClusteringResult:
    """Cluster observations with replicated correlation-distance K-means.

    Parameters
    ----------
    pooled : np.ndarray
        Array of shape ``(n_observations, n_features)``.
    n_clusters : int, optional
        Number of clusters.  Defaults to 4.
    n_replicates : int, optional
        Number of independent initialisations.  Defaults to 200.
    max_iter : int, optional
        Iteration cap per replicate.  Defaults to 1000.
    random_state : int | None, optional
        Seed from which the per-replicate seeds are derived.
    n_jobs : int | None, optional
        Number of :mod:`joblib` workers.  ``1`` (default) runs the
        replicates sequentially; ``None`` or ``-1`` uses all cores.

    Returns
    -------
    ClusteringResult
        The replicate with the lowest total correlation distance.
        Ties are resolved in favour of the earliest replicate.

    Raises
    ------
    InvalidInputError
        If the input is not a finite 2D matrix with at least
        ``n_clusters`` rows and two columns, or if a row is constant.
    ClusteringFailureError
        If the best solution has an empty cluster or centroids that
        cannot be told apart.
    """
    if n_clusters < 1 or n_replicates < 1 or max_iter < 1:
        raise ValueError("n_clusters, n_replicates and max_iter must be positive integers")
    pooled = np.asarray(pooled, dtype=float)
    _check_input(pooled, n_clusters)
    standardized = standardize_rows(pooled)
    seeds = np.random.SeedSequence(random_state).generate_state(n_replicates)
    replicates: List[_Replicate] = Parallel(n_jobs=-1 if n_jobs is None else n_jobs)(
        delayed(_run_replicate)(standardized, n_clusters, max_iter, int(seed))
        for seed in seeds
    )
    costs = np.array([rep[2] for rep in replicates], dtype=float)
    best = int(np.argmin(costs))
    labels, centroids, cost, n_iter = replicates[best]
    logger.info(
        "Correlation K-means: best total distance %.6g (replicate %d of %d, %d iterations)",
        cost, best + 1, n_replicates, n_iter,
    )
    _check_solution(labels, centroids, n_clusters)
    return ClusteringResult(
        labels=labels,
        centroids=centroids,
        cost=cost,
        n_iter=n_iter,
        replicate=best,
    )


__all__ = [
    'correlation_kmeans',
    'standardize_rows',
]
