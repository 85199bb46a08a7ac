"""
brainentropy.metastate.config
=============================

This module defines the configuration dataclass for metastate series
complexity.  :class:`MetastateConfig` collects the options of the
clustering stage (replicates, iteration cap, parallel execution and
random seed), the LZ76 estimator (parsing mode and normalisation) and
the shape of the output table.  The number of clusters and the
distance metric are fixed by the method and are therefore module
constants rather than options.
"""

from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path
from typing import Optional, Union

N_CLUSTERS = 4
DISTANCE_METRIC = 'correlation'
LZ_MODES = ('exhaustive', 'primitive')


@dataclass
class MetastateConfig:
    """Configuration options for metastate series complexity.

    Attributes
    ----------
    n_replicates : int, optional
        Number of independent K-means initialisations.  The solution
        with the lowest total within-cluster distance is kept.
        Defaults to 200.
    max_iter : int, optional
        Maximum number of iterations allowed per replicate.  Defaults
        to 1000.
    parallel : bool, optional
        If True (default) replicates are distributed over ``n_jobs``
        workers.  Only wall-clock time is affected.
    n_jobs : int | None, optional
        Number of workers used when ``parallel`` is True.  ``None``
        uses all available cores.
    random_state : int | None, optional
        Seed for the replicate initialisations.  Defaults to None,
        in which case results are not reproducible across runs.
    keepdata : bool, optional
        If True (default) the output table contains the input data
        with an extra ``entropy`` column; otherwise it only holds the
        scores.
    lz_mode : str, optional
        LZ76 parsing strategy, ``'exhaustive'`` (default) or
        ``'primitive'``.
    normalize : bool, optional
        Normalise phrase counts by ``n / log2(n)``.  Defaults to True.
    output_dir : str | Path | None, optional
        If provided, results are written to this directory using
        :func:`brainentropy.metastate.io.save_result`.
    """

    n_replicates: int = 200
    max_iter: int = 1000
    parallel: bool = True
    n_jobs: Optional[int] = None
    random_state: Optional[int] = None
    keepdata: bool = True
    lz_mode: str = 'exhaustive'
    normalize: bool = True
    output_dir: Optional[Union[str, Path]] = None

    @property
    def effective_n_jobs(self) -> int:
        """Worker count handed to :mod:`joblib` (``-1`` means all cores)."""
        if not self.parallel:
            return 1
        return -1 if self.n_jobs is None else self.n_jobs

    def validate(self) -> None:
        """Validate configuration parameters.

        Raises
        ------
        ValueError
            If a count is not positive or an unsupported LZ mode is
            specified.
        """
        if self.n_replicates <= 0 or self.max_iter <= 0:
            raise ValueError("n_replicates and max_iter must be positive integers")
        if self.n_jobs is not None and self.n_jobs == 0:
            raise ValueError("n_jobs must be a non-zero integer or None")
        if self.lz_mode not in LZ_MODES:
            raise ValueError(f"Unknown LZ mode '{self.lz_mode}'")
