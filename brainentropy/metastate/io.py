"""Utility helpers for saving metastate analysis outputs.

This module provides functions to persist the results of a metastate
complexity analysis to disk.  Arrays are written in both CSV and NumPy
formats for easy inspection and efficient reloading; the per-session
scores are written as a CSV table and the metastate grouping as JSON.
"""

from __future__ import annotations

import json
from pathlib import Path

import numpy as np
import pandas as pd

from .model import Metastate, MetastateResult


def _ensure_dir(path: Path) -> None:
    """Create directory if it does not already exist."""
    path.mkdir(parents=True, exist_ok=True)


def save_entropy(result: MetastateResult, output_dir: str | Path) -> None:
    """Save the per-session scores to ``entropy.csv``.

    Only session names and scores are written; the input matrices
    retained with ``keepdata`` are not serialised.
    """
    out = Path(output_dir)
    _ensure_dir(out)
    table = pd.DataFrame(
        {
            'session': [span.name for span in result.sessions],
            'n_timepoints': [span.length for span in result.sessions],
            'entropy': result.entropy,
        }
    )
    table.to_csv(out / "entropy.csv", index=False)


def save_result(result: MetastateResult, output_dir: str | Path) -> None:
    """Persist scores, clustering solution and metastate series.

    Parameters
    ----------
    result : MetastateResult
        Output of :meth:`brainentropy.metastate.analyzer.MetastateAnalyzer.analyse`.
    output_dir : str or Path
        Destination directory. It will be created if necessary.
    """
    out = Path(output_dir)
    _ensure_dir(out)
    save_entropy(result, out)
    labels = np.asarray(result.clustering.labels, dtype=int)
    np.savetxt(out / "cluster_labels.csv", labels, fmt="%d", delimiter=",")
    np.save(out / "cluster_labels.npy", labels)
    series = np.asarray(result.metastate_series, dtype=bool)
    np.savetxt(out / "metastate_series.csv", series.astype(int), fmt="%d", delimiter=",")
    np.save(out / "metastate_series.npy", series)
    np.savetxt(out / "centroids.csv", result.clustering.centroids, delimiter=",")
    np.save(out / "centroids.npy", result.clustering.centroids)
    grouping = {
        'anticorrelate': list(result.grouping.anticorrelate),
        'metastate_a': sorted(result.grouping.group(Metastate.A)),
        'metastate_b': sorted(result.grouping.group(Metastate.B)),
        'cost': result.clustering.cost,
    }
    with open(out / "grouping.json", "w", encoding="utf-8") as fh:
        json.dump(grouping, fh, indent=2)


def load_entropy(input_dir: str | Path) -> pd.DataFrame:
    """Load per-session scores from ``input_dir``.

    Returns
    -------
    pd.DataFrame
        Table indexed by session name with ``n_timepoints`` and
        ``entropy`` columns.
    """
    path = Path(input_dir) / "entropy.csv"
    if not path.exists():
        raise FileNotFoundError(f"No entropy table found in {input_dir}.")
    return pd.read_csv(path, dtype={'session': str}).set_index('session')


def load_centroids(input_dir: str | Path) -> np.ndarray:
    """Load saved cluster centroids, preferring the ``.npy`` file."""
    inp = Path(input_dir)
    npy = inp / "centroids.npy"
    csv = inp / "centroids.csv"
    if npy.exists():
        return np.load(npy)
    if csv.exists():
        return np.atleast_2d(np.loadtxt(csv, delimiter=","))
    raise FileNotFoundError(f"No centroids file found in {input_dir}.")


def load_metastate_series(input_dir: str | Path) -> np.ndarray:
    """Load the pooled boolean metastate series.

    The function will look for a binary ``.npy`` file first and fall
    back to the CSV file if necessary.
    """
    inp = Path(input_dir)
    npy = inp / "metastate_series.npy"
    csv = inp / "metastate_series.csv"
    if npy.exists():
        return np.load(npy)
    if csv.exists():
        return np.atleast_1d(np.loadtxt(csv, delimiter=",")).astype(bool)
    raise FileNotFoundError(f"No metastate series file found in {input_dir}.")


__all__ = [
    "save_entropy",
    "save_result",
    "load_entropy",
    "load_centroids",
    "load_metastate_series",
]
