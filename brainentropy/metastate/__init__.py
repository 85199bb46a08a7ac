"""
brainentropy.metastate
======================

This subpackage computes the metastate series complexity of brain
activity time series.  Observations from all sessions are clustered
together into four recurring spatial patterns, the patterns are
collapsed into two opposing metastates and the LZ76 complexity of the
binary metastate sequence is evaluated per session.

Modules
-------

config
    Defines the :class:`MetastateConfig` dataclass.

model
    Defines :class:`Metastate`, :class:`SessionSpan`,
    :class:`ClusteringResult`, :class:`MetastateGrouping` and
    :class:`MetastateResult`.

sessions
    Input coercion, per-session centring, pooling and re-segmentation.

clustering
    Replicated correlation-distance K-means.

grouping
    Grouping of the four states into two metastates by mutual
    anti-correlation of their centroids.

lz
    LZ76 complexity of binary sequences.

analyzer
    Contains :class:`MetastateAnalyzer`, which ties the steps
    together, and :func:`metastate_series_complexity`.

io
    Saving and loading of analysis results.
"""

from .config import MetastateConfig
from .model import (
    ClusteringResult,
    Metastate,
    MetastateGrouping,
    MetastateResult,
    SessionSpan,
)
from .lz import lz76_phrase_count, lz_complexity
from .clustering import correlation_kmeans
from .grouping import group_states
from .analyzer import MetastateAnalyzer, metastate_series_complexity

__all__ = [
    'MetastateConfig',
    'Metastate',
    'SessionSpan',
    'ClusteringResult',
    'MetastateGrouping',
    'MetastateResult',
    'lz76_phrase_count',
    'lz_complexity',
    'correlation_kmeans',
    'group_states',
    'MetastateAnalyzer',
    'metastate_series_complexity',
]
