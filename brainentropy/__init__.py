"""
brainentropy
============

This package computes entropy and complexity measures of brain
activity time series.  Its core is the metastate series complexity:
timepoint observations from all sessions are clustered into four
recurring spatial patterns with correlation-distance K-means, the
patterns are grouped into two opposing metastates by the mutual
anti-correlation of their centroids, and the LZ76 (Lempel–Ziv)
complexity of each session's binary metastate sequence is reported.

The key modules include:

* ``metastate`` – configuration, clustering, metastate grouping,
  LZ76 estimation and the :class:`MetastateAnalyzer` pipeline.
* ``exceptions`` – errors raised when the input or the clustering
  solution does not support the analysis.
* ``main`` – command line entry point working on ``.npy`` or text
  matrices.

Example
-------
>>> from brainentropy import metastate_series_complexity
>>> table = metastate_series_complexity({'sub-01': ts1, 'sub-02': ts2}, keepdata=False)

Note
----
This code relies on ``numpy``, ``pandas``, ``scipy``, ``scikit-learn``
and ``joblib``.
"""

from .exceptions import (
    ClusteringFailureError,
    GroupingInconsistencyError,
    InvalidInputError,
    MetastateError,
)
from .metastate import (
    Metastate,
    MetastateAnalyzer,
    MetastateConfig,
    MetastateResult,
    lz_complexity,
    metastate_series_complexity,
)

__version__ = '0.1.0'

__all__ = [
    'MetastateError',
    'InvalidInputError',
    'ClusteringFailureError',
    'GroupingInconsistencyError',
    'Metastate',
    'MetastateAnalyzer',
    'MetastateConfig',
    'MetastateResult',
    'lz_complexity',
    'metastate_series_complexity',
]
