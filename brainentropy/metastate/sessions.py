"""
brainentropy.metastate.sessions
===============================

Session bookkeeping for the metastate pipeline.  Input arrives either
as a single observation matrix or as an ordered collection of
sessions (a table whose first column holds the matrices, a mapping or
a plain sequence).  The helpers in this module

1. coerce all accepted input forms to a table plus a list of float
   matrices,
2. subtract each session's column means,
3. stack the centred sessions into the pooled matrix while recording
   an immutable offset table of :class:`SessionSpan` objects, and
4. cut any per-row series of the pooled matrix back into sessions.

Functions
---------

``coerce_sessions(data)``
    Normalise the input to ``(table, names, matrices)``.
``build_session_table(names, lengths)``
    Compute the offset table.
``pool_sessions(matrices, names)``
    Centre and stack sessions.
``validate_pooled(pooled)``
    Reject NaN/Inf before clustering.
``split_by_sessions(series, sessions)``
    Re-segment a pooled series.
"""

from __future__ import annotations

from collections.abc import Mapping
from typing import Any, List, Sequence, Tuple

import numpy as np
import pandas as pd

from ..exceptions import InvalidInputError
from .model import SessionSpan

DATA_COLUMN = 'data'


def _object_column(values: Sequence[Any]) -> np.ndarray:
    """Pack matrices into a 1-D object array so pandas keeps them whole."""
    column = np.empty(len(values), dtype=object)
    for i, value in enumerate(values):
        column[i] = value
    return column


def _as_matrix(value: Any, name: str) -> np.ndarray:
    try:
        arr = np.asarray(value, dtype=float)
    except (TypeError, ValueError) as exc:
        raise InvalidInputError(f"Session {name!r} does not hold a numeric matrix") from exc
    if arr.ndim != 2:
        raise InvalidInputError(
            f"Session {name!r} must be a 2D matrix (n time points x p features), "
            f"got {arr.ndim} dimension(s)"
        )
    if arr.shape[0] < 2:
        raise InvalidInputError(f"Session {name!r} must contain at least 2 time points")
    if arr.shape[1] < 1:
        raise InvalidInputError(f"Session {name!r} has no feature columns")
    return arr


def coerce_sessions(data: Any) -> Tuple[pd.DataFrame, List[str], List[np.ndarray]]:
    """Normalise the accepted input forms.

    Parameters
    ----------
    data : np.ndarray | pd.DataFrame | Mapping | Sequence
        A single 2D matrix, a table whose FIRST column holds one
        matrix per row (the index names the sessions), a mapping from
        session name to matrix, or a sequence of matrices.

    Returns
    -------
    table : pd.DataFrame
        The input as a table.  DataFrame input is returned unchanged;
        other forms are wrapped in a table with a single ``'data'``
        column.
    names : list of str
        Session names in input order.
    matrices : list of np.ndarray
        Float matrices in input order.

    Raises
    ------
    InvalidInputError
        If the input form is not recognised, no session is given, a
        matrix is not 2D with at least two rows, or the feature counts
        differ between sessions.
    """
    if isinstance(data, pd.DataFrame):
        if data.shape[1] == 0:
            raise InvalidInputError("Input table has no columns; the first column must hold the data")
        table = data
        values = list(data.iloc[:, 0])
    elif isinstance(data, np.ndarray) and data.ndim == 2 and data.dtype != object:
        table = pd.DataFrame({DATA_COLUMN: _object_column([data])})
        values = [data]
    elif isinstance(data, Mapping):
        values = list(data.values())
        table = pd.DataFrame({DATA_COLUMN: _object_column(values)}, index=list(data.keys()))
    elif isinstance(data, (list, tuple)) or (isinstance(data, np.ndarray) and data.dtype == object):
        values = list(data)
        table = pd.DataFrame({DATA_COLUMN: _object_column(values)})
    else:
        raise InvalidInputError(
            "Please specify the input data as either a matrix (n x p, n > 1), a table whose "
            "first column holds one matrix per row, a mapping or a sequence of matrices"
        )
    if not values:
        raise InvalidInputError("At least one session is required")
    names = [str(name) for name in table.index]
    matrices = [_as_matrix(value, name) for value, name in zip(values, names)]
    n_features = {m.shape[1] for m in matrices}
    if len(n_features) != 1:
        raise InvalidInputError(
            f"All sessions must have the same number of features, got {sorted(n_features)}"
        )
    return table, names, matrices


def build_session_table(names: Sequence[str], lengths: Sequence[int]) -> Tuple[SessionSpan, ...]:
    """Compute the row range of every session in the pooled matrix."""
    if len(names) != len(lengths):
        raise ValueError("names and lengths must have the same length")
    offsets = np.concatenate(([0], np.cumsum(lengths, dtype=int)))
    return tuple(
        SessionSpan(name=str(name), start=int(start), length=int(length))
        for name, start, length in zip(names, offsets[:-1], lengths)
    )


def center_session(matrix: np.ndarray) -> np.ndarray:
    """Subtract the column means of a single session."""
    return matrix - matrix.mean(axis=0)


def pool_sessions(
    matrices: Sequence[np.ndarray], names: Sequence[str]
) -> Tuple[np.ndarray, Tuple[SessionSpan, ...]]:
    """Centre each session and stack them row-wise.

    Parameters
    ----------
    matrices : sequence of np.ndarray
        Session matrices sharing the same number of columns.
    names : sequence of str
        Session names, used for the offset table.

    Returns
    -------
    pooled : np.ndarray
        Array of shape ``(sum(n_i), p)``.
    sessions : tuple of SessionSpan
        Offset table, in session order.
    """
    sessions = build_session_table(names, [m.shape[0] for m in matrices])
    pooled = np.vstack([center_session(m) for m in matrices])
    return pooled, sessions


def validate_pooled(pooled: np.ndarray) -> None:
    """Raise :class:`InvalidInputError` if ``pooled`` holds NaN or Inf."""
    if pooled.ndim != 2:
        raise InvalidInputError("The pooled matrix must be 2D")
    finite = np.isfinite(pooled)
    if not finite.all():
        bad_rows = np.unique(np.nonzero(~finite)[0])
        raise InvalidInputError(
            f"Pooled data contains NaN or Inf values in {bad_rows.size} row(s) "
            f"(first at row {int(bad_rows[0])})"
        )


def split_by_sessions(series: np.ndarray, sessions: Sequence[SessionSpan]) -> List[np.ndarray]:
    """Cut a per-row series of the pooled matrix back into sessions."""
    series = np.asarray(series)
    expected = sessions[-1].stop if sessions else 0
    if series.shape[0] != expected:
        raise ValueError(
            f"Series has {series.shape[0]} entries but the session table covers {expected} rows"
        )
    return [series[span.rows] for span in sessions]


__all__ = [
    'DATA_COLUMN',
    'coerce_sessions',
    'build_session_table',
    'center_session',
    'pool_sessions',
    'validate_pooled',
    'split_by_sessions',
]
