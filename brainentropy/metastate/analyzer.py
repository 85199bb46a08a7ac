"""
brainentropy.metastate.analyzer
===============================

This module defines :class:`MetastateAnalyzer`, the high level
interface for metastate series complexity, and the functional entry
point :func:`metastate_series_complexity`.

The analysis runs as follows:

1. Subtract the column means of each session.
2. Stack the centred sessions into one pooled matrix, recording the
   row range of every session.
3. Reject pooled data containing NaN or Inf.
4. Cluster the pooled matrix once into four states with replicated
   correlation-distance K-means, so that states are shared by all
   sessions.
5. Group the four states into two metastates by mutual
   anti-correlation of their centroids.
6. Cut the binary metastate series back into sessions and compute the
   normalised LZ76 complexity of each.

The result holds one score per session, in input order.
"""

from __future__ import annotations

import logging
from typing import Any, Callable, Optional

import numpy as np
import pandas as pd

from .clustering import correlation_kmeans
from .config import N_CLUSTERS, MetastateConfig
from .grouping import group_states
from .io import save_result
from .lz import lz_complexity
from .model import ClusteringResult, MetastateResult
from .sessions import coerce_sessions, pool_sessions, split_by_sessions, validate_pooled

logger = logging.getLogger(__name__)

ENTROPY_COLUMN = 'entropy'

Clusterer = Callable[[np.ndarray], ClusteringResult]


class MetastateAnalyzer:
    """Compute metastate series complexity for one or more sessions.

    Parameters
    ----------
    config : MetastateConfig, optional
        Clustering, LZ76 and output options.  Defaults to
        ``MetastateConfig()``.
    clusterer : callable, optional
        Function taking the pooled matrix and returning a
        :class:`~brainentropy.metastate.model.ClusteringResult`.
        Defaults to :func:`~brainentropy.metastate.clustering.correlation_kmeans`
        configured from ``config``.

    Examples
    --------
    >>> from brainentropy.metastate import MetastateAnalyzer, MetastateConfig
    >>> cfg = MetastateConfig(parallel=False, random_state=0)
    >>> result = MetastateAnalyzer(cfg).analyse({'sub-01': ts1, 'sub-02': ts2})
    >>> print(result.table['entropy'])
    """

    def __init__(
        self,
        config: Optional[MetastateConfig] = None,
        clusterer: Optional[Clusterer] = None,
    ) -> None:
        self.config = config if config is not None else MetastateConfig()
        self.config.validate()
        self.clusterer = clusterer if clusterer is not None else self._default_clusterer

    def _default_clusterer(self, pooled: np.ndarray) -> ClusteringResult:
        cfg = self.config
        return correlation_kmeans(
            pooled,
            n_clusters=N_CLUSTERS,
            n_replicates=cfg.n_replicates,
            max_iter=cfg.max_iter,
            random_state=cfg.random_state,
            n_jobs=cfg.effective_n_jobs,
        )

    # --------------------------------------------------------------
    def analyse(self, data: Any) -> MetastateResult:
        """Run the metastate complexity analysis.

        Parameters
        ----------
        data : np.ndarray | pd.DataFrame | Mapping | Sequence
            A single ``(n, p)`` matrix with ``n > 1``, a table whose
            first column holds one matrix per session, a mapping from
            session name to matrix, or a sequence of matrices.

        Returns
        -------
        MetastateResult
            Scores per session together with the clustering solution,
            the metastate grouping and the pooled metastate series.

        Raises
        ------
        InvalidInputError
            If the input is malformed or contains NaN/Inf values.
        ClusteringFailureError
            If clustering does not yield four distinguishable clusters.
        GroupingInconsistencyError
            If the anti-correlation pairing of the centroids is not
            mutual.
        """
        cfg = self.config
        table, names, matrices = coerce_sessions(data)
        logger.info("Concatenating data")
        pooled, sessions = pool_sessions(matrices, names)
        validate_pooled(pooled)

        logger.info("Running k-means and LZ calculations")
        clustering = self.clusterer(pooled)
        grouping = group_states(clustering.centroids)
        metastate_series = grouping.label(clustering.labels)

        scores = np.empty(len(sessions), dtype=float)
        for i, (span, segment) in enumerate(zip(sessions, split_by_sessions(metastate_series, sessions))):
            scores[i] = lz_complexity(segment, mode=cfg.lz_mode, normalize=cfg.normalize)
            logger.debug("Session %s: LZ complexity %.4f over %d time points", span.name, scores[i], span.length)

        result = MetastateResult(
            table=self._output_table(table, scores),
            sessions=sessions,
            clustering=clustering,
            grouping=grouping,
            metastate_series=metastate_series,
        )
        if cfg.output_dir is not None:
            save_result(result, cfg.output_dir)
        return result

    def _output_table(self, table: pd.DataFrame, scores: np.ndarray) -> pd.DataFrame:
        if self.config.keepdata:
            if ENTROPY_COLUMN in table.columns:
                logger.warning("Overwriting '%s' column in input table", ENTROPY_COLUMN)
            out = table.copy()
            out[ENTROPY_COLUMN] = scores
            return out
        return pd.DataFrame({ENTROPY_COLUMN: scores}, index=table.index)


def metastate_series_complexity(
    data: Any,
    keepdata: bool = True,
    parallel: bool = True,
    **options: Any,
) -> pd.DataFrame:
    """Compute metastate series complexity and return the score table.

    Parameters
    ----------
    data : np.ndarray | pd.DataFrame | Mapping | Sequence
        Input sessions, see :meth:`MetastateAnalyzer.analyse`.
    keepdata : bool, optional
        If True (default) the returned table also contains the input
        data.  An existing ``entropy`` column is overwritten with a
        warning.
    parallel : bool, optional
        Whether K-means replicates may run in parallel.  Defaults to
        True.
    **options
        Further :class:`MetastateConfig` fields, e.g. ``random_state``
        or ``n_replicates``.

    Returns
    -------
    pd.DataFrame
        One row per session with the score in the ``entropy`` column.
    """
    config = MetastateConfig(keepdata=keepdata, parallel=parallel, **options)
    return MetastateAnalyzer(config).analyse(data).table


__all__ = [
    'ENTROPY_COLUMN',
    'MetastateAnalyzer',
    'metastate_series_complexity',
]
