import logging

import numpy as np
import pandas as pd
import pytest

from brainentropy.exceptions import GroupingInconsistencyError, InvalidInputError
from brainentropy.metastate import (
    ClusteringResult,
    Metastate,
    MetastateAnalyzer,
    MetastateConfig,
    metastate_series_complexity,
)
from brainentropy.metastate.lz import lz_complexity


def _fast_config(**kwargs) -> MetastateConfig:
    options = dict(n_replicates=8, parallel=False, random_state=0)
    options.update(kwargs)
    return MetastateConfig(**options)


class _FixedClusterer:
    """Clusterer stub returning preset labels and centroids."""

    def __init__(self, labels, centroids):
        self.labels = np.asarray(labels)
        self.centroids = np.asarray(centroids, dtype=float)
        self.calls = 0

    def __call__(self, pooled):
        self.calls += 1
        assert pooled.shape[0] == self.labels.shape[0]
        return ClusteringResult(labels=self.labels, centroids=self.centroids, cost=0.0)


def test_two_sessions_end_to_end(four_state_sessions):
    matrices, states = four_state_sessions([100, 150])
    result = MetastateAnalyzer(_fast_config()).analyse({'sub-01': matrices[0], 'sub-02': matrices[1]})

    assert list(result.table.index) == ['sub-01', 'sub-02']
    assert [s.length for s in result.sessions] == [100, 150]
    assert result.metastate_series.shape == (250,)
    assert result.metastate_series.dtype == bool

    grouping = result.grouping
    idx = grouping.anticorrelate
    assert all(idx[idx[k]] == k for k in range(4))
    assert len(grouping.group(Metastate.A)) == len(grouping.group(Metastate.B)) == 2

    # +U/-U share one metastate and +V/-V the other
    true_v = np.concatenate(states) >= 2
    series = result.metastate_series
    assert np.array_equal(series, true_v) or np.array_equal(series, ~true_v)

    scores = result.entropy
    assert scores.shape == (2,)
    assert np.all(np.isfinite(scores)) and np.all(scores >= 0.0)
    for span, score in zip(result.sessions, scores):
        assert score == pytest.approx(lz_complexity(series[span.rows]))


def test_scores_follow_session_segments(opposing_centroids):
    lengths = [6, 4, 8]
    labels = np.array([0, 1, 0, 1, 0, 1, 2, 3, 2, 3, 0, 0, 0, 0, 2, 2, 2, 2])
    clusterer = _FixedClusterer(labels, opposing_centroids)
    rng = np.random.RandomState(0)
    sessions = [rng.randn(n, 5) for n in lengths]
    result = MetastateAnalyzer(_fast_config(keepdata=False), clusterer=clusterer).analyse(sessions)

    assert clusterer.calls == 1
    expected_series = labels >= 2
    assert np.array_equal(result.metastate_series, expected_series)
    expected = [
        lz_complexity(expected_series[0:6]),
        lz_complexity(expected_series[6:10]),
        lz_complexity(expected_series[10:18]),
    ]
    assert np.allclose(result.table['entropy'].to_numpy(), expected)
    assert list(result.table.columns) == ['entropy']


@pytest.mark.parametrize("value", [np.nan, np.inf])
def test_non_finite_input_never_reaches_clustering(opposing_centroids, value):
    clusterer = _FixedClusterer(np.zeros(10, dtype=int), opposing_centroids)
    first = np.random.RandomState(0).randn(5, 5)
    second = np.random.RandomState(1).randn(5, 5)
    second[3, 2] = value
    analyzer = MetastateAnalyzer(_fast_config(), clusterer=clusterer)
    with pytest.raises(InvalidInputError):
        analyzer.analyse([first, second])
    assert clusterer.calls == 0


def test_non_mutual_grouping_propagates():
    a = np.array([1.0, -1.0, 0.0, 0.0, 0.0])
    b = np.array([0.0, 0.0, 1.0, -1.0, 0.0])
    c = np.array([0.0, 0.0, 0.0, 1.0, -1.0])
    centroids = np.array([a, -a - 2 * b, b, c])
    clusterer = _FixedClusterer(np.array([0, 1, 2, 3] * 3), centroids)
    analyzer = MetastateAnalyzer(_fast_config(), clusterer=clusterer)
    with pytest.raises(GroupingInconsistencyError):
        analyzer.analyse(np.random.RandomState(0).randn(12, 5))


def test_keepdata_retains_input_table(opposing_centroids):
    mats = [np.random.RandomState(i).randn(4, 5) for i in range(2)]
    column = np.empty(2, dtype=object)
    column[0], column[1] = mats
    table = pd.DataFrame({'ts': column, 'condition': ['psilocybin', 'placebo']}, index=['s1', 's2'])
    clusterer = _FixedClusterer([0, 1, 2, 3, 0, 2, 1, 3], opposing_centroids)
    out = MetastateAnalyzer(_fast_config(), clusterer=clusterer).analyse(table).table
    assert list(out.columns) == ['ts', 'condition', 'entropy']
    assert list(out.index) == ['s1', 's2']
    assert 'entropy' not in table.columns


def test_existing_entropy_column_is_overwritten(opposing_centroids, caplog):
    column = np.empty(1, dtype=object)
    column[0] = np.random.RandomState(0).randn(8, 5)
    table = pd.DataFrame({'ts': column, 'entropy': [-1.0]})
    clusterer = _FixedClusterer([0, 1, 2, 3] * 2, opposing_centroids)
    with caplog.at_level(logging.WARNING, logger='brainentropy.metastate.analyzer'):
        out = MetastateAnalyzer(_fast_config(), clusterer=clusterer).analyse(table).table
    assert "Overwriting 'entropy'" in caplog.text
    assert out['entropy'].iloc[0] >= 0.0


def test_progress_is_logged(opposing_centroids, caplog):
    clusterer = _FixedClusterer([0, 1, 2, 3] * 2, opposing_centroids)
    with caplog.at_level(logging.INFO, logger='brainentropy.metastate.analyzer'):
        MetastateAnalyzer(_fast_config(), clusterer=clusterer).analyse(np.random.RandomState(0).randn(8, 5))
    assert "Concatenating data" in caplog.text
    assert "Running k-means and LZ calculations" in caplog.text


def test_single_matrix_keepdata(opposing_centroids):
    data = np.random.RandomState(0).randn(8, 5)
    clusterer = _FixedClusterer([0, 0, 1, 1, 2, 3, 2, 3], opposing_centroids)
    out = MetastateAnalyzer(_fast_config(), clusterer=clusterer).analyse(data).table
    assert list(out.columns) == ['data', 'entropy']
    assert len(out) == 1
    assert np.array_equal(out['data'].iloc[0], data)


def test_output_dir_writes_results(opposing_centroids, tmp_path):
    clusterer = _FixedClusterer([0, 1, 2, 3] * 2, opposing_centroids)
    cfg = _fast_config(output_dir=tmp_path / 'out')
    MetastateAnalyzer(cfg, clusterer=clusterer).analyse([np.random.RandomState(0).randn(8, 5)])
    assert (tmp_path / 'out' / 'entropy.csv').exists()
    assert (tmp_path / 'out' / 'grouping.json').exists()


def test_functional_entry_point(four_state_sessions):
    matrices, _ = four_state_sessions([60, 40], random_state=5)
    out = metastate_series_complexity(
        matrices, keepdata=False, parallel=False, n_replicates=4, random_state=0
    )
    assert list(out.columns) == ['entropy']
    assert len(out) == 2
    assert np.all(np.isfinite(out['entropy']))


def test_invalid_config_rejected():
    with pytest.raises(ValueError):
        MetastateAnalyzer(MetastateConfig(lz_mode='bogus'))
    with pytest.raises(ValueError):
        MetastateAnalyzer(MetastateConfig(n_replicates=0))


def test_effective_n_jobs():
    assert MetastateConfig(parallel=False, n_jobs=4).effective_n_jobs == 1
    assert MetastateConfig(parallel=True).effective_n_jobs == -1
    assert MetastateConfig(parallel=True, n_jobs=3).effective_n_jobs == 3
