"""Shared fixtures for the metastate tests."""

from __future__ import annotations

import sys
from pathlib import Path

import numpy as np
import pytest

# Ensure package import path
sys.path.insert(0, str(Path(__file__).resolve().parents[1]))

U = np.array([1.0, -1.0, 0.0, 0.0, 0.0])
V = np.array([0.0, 0.0, 1.0, -1.0, 0.0])
PATTERNS = 3.0 * np.array([U, -U, V, -V])


def _four_state_session(n_timepoints: int, rng: np.random.RandomState, dwell: int = 5):
    """Time series visiting the patterns +U, -U, +V, -V in blocks of ``dwell``."""
    n_blocks = n_timepoints // dwell + 1
    states = np.repeat(rng.randint(0, 4, size=n_blocks), dwell)[:n_timepoints]
    data = PATTERNS[states] + 0.3 * rng.randn(n_timepoints, PATTERNS.shape[1])
    return data, states


@pytest.fixture
def four_state_sessions():
    """Factory returning ``(matrices, true_states)`` for the given session lengths."""

    def make(lengths, random_state: int = 0):
        rng = np.random.RandomState(random_state)
        pairs = [_four_state_session(n, rng) for n in lengths]
        return [p[0] for p in pairs], [p[1] for p in pairs]

    return make


@pytest.fixture
def opposing_centroids() -> np.ndarray:
    """Centroids +U, -U, +V, -V: two mutually anti-correlated pairs."""
    return PATTERNS.copy()
