"""
brainentropy.metastate.lz
=========================

Lempel–Ziv (LZ76) complexity of binary sequences.

The sequence is scanned from left to right and split into phrases.
In the ``'exhaustive'`` parsing each phrase is the longest word that
can be copied from some earlier starting position (the copy may run
into the phrase itself) followed by one new symbol.  Every starting
offset of the history is tried, which costs ``O(n^2)`` in the worst
case but is exact; the implementation follows Kaspar & Schuster
(1987).  The ``'primitive'`` parsing forbids the self-overlap: a
phrase is the shortest word that does not occur among the symbols
strictly before it.  In both modes a trailing phrase that runs into
the end of the sequence counts as a phrase.

Normalisation divides the phrase count ``c`` by ``n / log2(n)``, the
asymptotic phrase count of a random binary sequence of length ``n``.

Degenerate inputs
-----------------
An empty sequence has 0 phrases and a score of 0.0.  A sequence of
length 1 has a single phrase; its normalised score is 0.0, the value
of ``c * log2(n) / n`` at ``n = 1``.

Example
-------
``01011001110`` parses as ``0 | 1 | 011 | 00 | 111 | 0``:

>>> lz76_phrase_count('01011001110')
6
>>> round(lz_complexity('01011001110'), 6)
1.886963

References
----------
Lempel, A. & Ziv, J. (1976). On the complexity of finite sequences.
IEEE Transactions on Information Theory, 22(1), 75-81.

Kaspar, F. & Schuster, H. G. (1987). Easily calculable measure for the
complexity of spatiotemporal patterns. Physical Review A, 36(2), 842.
"""

from __future__ import annotations

import math
from typing import List, Sequence, Union

import numpy as np

from ..exceptions import InvalidInputError
from .config import LZ_MODES

BinarySequence = Union[str, Sequence[int], Sequence[bool], np.ndarray]


def _as_symbols(sequence: BinarySequence) -> List[int]:
    """Return ``sequence`` as a list of 0/1 integers."""
    if isinstance(sequence, str):
        if set(sequence) - {'0', '1'}:
            raise InvalidInputError("binary strings may only contain '0' and '1'")
        return [int(ch) for ch in sequence]
    arr = np.ravel(np.asarray(sequence))
    if arr.size == 0:
        return []
    if arr.dtype == bool:
        return arr.astype(np.int8).tolist()
    if not np.issubdtype(arr.dtype, np.number):
        raise InvalidInputError("LZ76 complexity requires a numeric binary sequence")
    if not np.all(np.isin(arr, (0, 1))):
        raise InvalidInputError("LZ76 complexity requires a binary sequence of 0/1 values")
    return arr.astype(np.int8).tolist()


def _exhaustive_count(s: List[int]) -> int:
    n = len(s)
    c = 1
    l = 1  # length of the parsed prefix
    i = 0  # candidate copy start within the prefix
    k = 1  # current match length
    k_max = 1
    while True:
        if s[i + k - 1] == s[l + k - 1]:
            k += 1
            if l + k > n:
                c += 1
                break
        else:
            k_max = max(k, k_max)
            i += 1
            if i == l:
                # no start in the history extends further: new phrase
                c += 1
                l += k_max
                if l + 1 > n:
                    break
                i = 0
                k = 1
                k_max = 1
            else:
                k = 1
    return c


def _primitive_count(s: List[int]) -> int:
    text = ''.join('1' if x else '0' for x in s)
    n = len(text)
    c = 0
    i = 0
    while i < n:
        j = i + 1
        while j <= n and text[i:j] in text[:i]:
            j += 1
        c += 1
        i = j
    return c


def lz76_phrase_count(sequence: BinarySequence, mode: str = 'exhaustive') -> int:
    """Count LZ76 phrases of a binary sequence.

    Parameters
    ----------
    sequence : str | sequence of int/bool | np.ndarray
        Binary sequence.  Strings must consist of ``'0'`` and ``'1'``.
    mode : str, optional
        ``'exhaustive'`` (default) or ``'primitive'``.

    Returns
    -------
    int
        Number of phrases (0 for an empty sequence).

    Raises
    ------
    InvalidInputError
        If the sequence contains values other than 0 and 1.
    ValueError
        If ``mode`` is unknown.
    """
    if mode not in LZ_MODES:
        raise ValueError(f"Unknown LZ mode '{mode}'")
    s = _as_symbols(sequence)
    if len(s) < 2:
        return len(s)
    if mode == 'exhaustive':
        return _exhaustive_count(s)
    return _primitive_count(s)


def lz_complexity(
    sequence: BinarySequence,
    mode: str = 'exhaustive',
    normalize: bool = True,
) -> float:
    """Compute the (normalised) LZ76 complexity of a binary sequence.

    Parameters
    ----------
    sequence : str | sequence of int/bool | np.ndarray
        Binary sequence.
    mode : str, optional
        Parsing strategy, ``'exhaustive'`` (default) or ``'primitive'``.
    normalize : bool, optional
        If True (default) the phrase count is divided by
        ``n / log2(n)``.

    Returns
    -------
    float
        Finite, non-negative complexity score.  See the module
        docstring for the convention used for sequences shorter than
        two symbols.
    """
    s = _as_symbols(sequence)
    c = lz76_phrase_count(s, mode=mode)
    if not normalize:
        return float(c)
    n = len(s)
    if n < 2:
        return 0.0
    return c * math.log2(n) / n


__all__ = [
    'lz76_phrase_count',
    'lz_complexity',
]
