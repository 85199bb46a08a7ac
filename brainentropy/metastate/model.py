"""
brainentropy.metastate.model
============================

This module defines the data structures shared by the components of
the metastate pipeline:

``Metastate``
    Closed enumeration of the two opposing metastates.

``SessionSpan``
    One session's row range inside the pooled matrix.  A tuple of
    spans forms the immutable offset table used to re-segment the
    pooled metastate series.

``ClusteringResult``
    The winning K-means replicate: cluster label per pooled row,
    centroids and total within-cluster distance.

``MetastateGrouping``
    Partition of the cluster labels into the two metastates, together
    with the anti-correlate of every cluster.

``MetastateResult``
    Everything produced by one run of
    :class:`brainentropy.metastate.analyzer.MetastateAnalyzer`.
"""

from __future__ import annotations

import enum
from dataclasses import dataclass
from typing import FrozenSet, Tuple

import numpy as np
import pandas as pd


class Metastate(enum.IntEnum):
    """The two opposing metastates.  ``B`` is encoded as ``True``."""

    A = 0
    B = 1


@dataclass(frozen=True)
class SessionSpan:
    """Row range ``[start, start + length)`` of one session.

    Parameters
    ----------
    name : str
        Session identifier (table index, mapping key or position).
    start : int
        Offset of the first row of the session in the pooled matrix.
    length : int
        Number of time points in the session.
    """

    name: str
    start: int
    length: int

    @property
    def stop(self) -> int:
        return self.start + self.length

    @property
    def rows(self) -> slice:
        return slice(self.start, self.stop)


@dataclass
class ClusteringResult:
    """Outcome of the replicated correlation K-means.

    Attributes
    ----------
    labels : np.ndarray
        Integer cluster label per pooled row, in ``0..n_clusters-1``.
    centroids : np.ndarray
        Array of shape ``(n_clusters, n_features)``.  Centroids live in
        the row-standardised space in which correlation distance is
        measured.
    cost : float
        Total correlation distance of all rows to their centroids.
    n_iter : int
        Number of iterations the winning replicate ran for.
    replicate : int
        Index of the winning replicate.
    """

    labels: np.ndarray
    centroids: np.ndarray
    cost: float
    n_iter: int = 0
    replicate: int = 0

    @property
    def n_clusters(self) -> int:
        return int(self.centroids.shape[0])


@dataclass(frozen=True)
class MetastateGrouping:
    """Partition of cluster labels into :class:`Metastate` groups.

    Attributes
    ----------
    anticorrelate : Tuple[int, ...]
        ``anticorrelate[k]`` is the cluster whose centroid is least
        correlated with the centroid of cluster ``k``.  The pairing is
        mutual for every grouping returned by
        :func:`brainentropy.metastate.grouping.group_states`.
    membership : Tuple[Metastate, ...]
        Metastate of each cluster label.
    """

    anticorrelate: Tuple[int, ...]
    membership: Tuple[Metastate, ...]

    def group(self, metastate: Metastate) -> FrozenSet[int]:
        """Return the cluster labels belonging to ``metastate``."""
        return frozenset(k for k, m in enumerate(self.membership) if m is metastate)

    def label(self, assignment: np.ndarray) -> np.ndarray:
        """Map cluster labels to booleans (True for :attr:`Metastate.B`)."""
        lookup = np.array([m is Metastate.B for m in self.membership], dtype=bool)
        return lookup[np.asarray(assignment, dtype=int)]


@dataclass
class MetastateResult:
    """Result of a metastate series complexity analysis.

    Parameters
    ----------
    table : pd.DataFrame
        One row per session, in input order, with the complexity
        score in the ``entropy`` column (and the input data when
        ``keepdata`` was requested).
    sessions : Tuple[SessionSpan, ...]
        Offset table of the pooled matrix.
    clustering : ClusteringResult
        Winning K-means solution on the pooled matrix.
    grouping : MetastateGrouping
        Cluster-to-metastate partition derived from the centroids.
    metastate_series : np.ndarray
        Boolean metastate label for every pooled row.
    """

    table: pd.DataFrame
    sessions: Tuple[SessionSpan, ...]
    clustering: ClusteringResult
    grouping: MetastateGrouping
    metastate_series: np.ndarray

    @property
    def entropy(self) -> np.ndarray:
        return self.table['entropy'].to_numpy(dtype=float)


__all__ = [
    'Metastate',
    'SessionSpan',
    'ClusteringResult',
    'MetastateGrouping',
    'MetastateResult',
]
