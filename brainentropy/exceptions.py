"""
brainentropy.exceptions
=======================

Errors raised by the metastate complexity pipeline.  Each one marks a
condition under which the method cannot produce a meaningful score, so
none of them is caught inside the package: they propagate to the
caller, who receives a reason instead of a silently wrong value.

``InvalidInputError``
    Malformed input (shape, missing data column, too few rows,
    mismatched feature counts) or NaN/Inf contamination.  Raised before
    any clustering work starts.
``ClusteringFailureError``
    K-means did not yield the requested number of non-empty,
    distinguishable clusters.
``GroupingInconsistencyError``
    The nearest anti-correlate pairing of the centroids is not mutual,
    i.e. the data does not show two opposing metastates.
"""

from __future__ import annotations


class MetastateError(Exception):
    """Base class for all metastate pipeline errors."""


class InvalidInputError(MetastateError, ValueError):
    """Input data cannot be analysed."""


class ClusteringFailureError(MetastateError, RuntimeError):
    """Clustering produced empty or indistinguishable clusters."""


class GroupingInconsistencyError(MetastateError, RuntimeError):
    """Anti-correlation pairing of the cluster centroids is not mutual."""


__all__ = [
    'MetastateError',
    'InvalidInputError',
    'ClusteringFailureError',
    'GroupingInconsistencyError',
]
