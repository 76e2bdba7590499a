# -*- coding: utf-8 -*-
"""
Elbow Sweep Tests - Dispersion series over k = 1..K_max and knee finders.

License
-------
MIT License
Copyright (c) 2024 geoint.org
See LICENSE file for full text.

Created
-------
2026-10-18

Modified
--------
2026-10-18
"""

import numpy as np
import pytest

from georegion.clustering import (
    ElbowSeries,
    ElbowSweep,
    max_distance_knee,
    second_difference_knee,
)
from georegion.exceptions import ConfigurationError, InvalidInputError
from georegion.grid import Grid


def _blob_grid():
    """Three well-separated 2-band blobs of 120 cells each."""
    rng = np.random.RandomState(42)
    centers = np.array([[0.0, 0.0], [10.0, 0.0], [0.0, 10.0]])
    data = np.concatenate([
        c[:, np.newaxis, np.newaxis] + rng.normal(0.0, 0.1, (2, 10, 12))
        for c in centers
    ], axis=1)
    return Grid(data, band_names=['stock', 'rate'])


# ---------------------------------------------------------------------------
# Knee finders
# ---------------------------------------------------------------------------

class TestKneeFinders:
    """Test both knee heuristics on known curves."""

    KS = np.arange(1, 6)
    WSS = np.array([100.0, 30.0, 10.0, 8.0, 7.0])

    def test_max_distance(self):
        assert max_distance_knee(self.KS, self.WSS) == 2

    def test_second_difference(self):
        assert second_difference_knee(self.KS, self.WSS) == 2

    def test_short_series(self):
        assert max_distance_knee(np.array([1, 2]), np.array([5.0, 1.0])) == 1
        assert second_difference_knee(np.array([1]), np.array([5.0])) == 1

    def test_flat_curve(self):
        assert max_distance_knee(self.KS, np.full(5, 3.0)) == 1

    def test_returns_python_int(self):
        assert type(max_distance_knee(self.KS, self.WSS)) is int


# ---------------------------------------------------------------------------
# ElbowSeries
# ---------------------------------------------------------------------------

class TestElbowSeries:
    """Test the append-only series."""

    def test_append_in_order(self):
        s = ElbowSeries()
        s.append(1, 10.0)
        s.append(2, 4.0)
        assert len(s) == 2
        assert s.pairs() == [(1, 10.0), (2, 4.0)]
        np.testing.assert_array_equal(s.ks, [1, 2])
        np.testing.assert_allclose(s.dispersion, [10.0, 4.0])

    def test_append_out_of_order(self):
        s = ElbowSeries()
        with pytest.raises(InvalidInputError, match="expects k=1"):
            s.append(2, 1.0)

    def test_negative_dispersion(self):
        with pytest.raises(InvalidInputError, match=">= 0"):
            ElbowSeries().append(1, -0.5)

    def test_nan_dispersion(self):
        with pytest.raises(InvalidInputError):
            ElbowSeries().append(1, float('nan'))

    def test_from_pairs_and_iter(self):
        s = ElbowSeries.from_pairs([(1, 5.0), (2, 3.0), (3, 2.5)])
        assert list(s) == [(1, 5.0), (2, 3.0), (3, 2.5)]
        assert s.is_non_increasing()

    def test_increasing_detected(self):
        s = ElbowSeries.from_pairs([(1, 5.0), (2, 6.0)])
        assert not s.is_non_increasing()

    def test_knee_empty(self):
        with pytest.raises(InvalidInputError, match="empty"):
            ElbowSeries().knee()

    def test_knee_pluggable(self):
        s = ElbowSeries.from_pairs(
            [(1, 100.0), (2, 30.0), (3, 10.0), (4, 8.0), (5, 7.0)]
        )
        assert s.knee() == 2
        assert s.knee(lambda ks, wss: 4) == 4

    def test_to_dict(self):
        s = ElbowSeries.from_pairs([(1, 5.0), (2, 3.0)])
        assert s.to_dict() == {'k': [1, 2], 'total_within_ss': [5.0, 3.0]}


# ---------------------------------------------------------------------------
# ElbowSweep
# ---------------------------------------------------------------------------

class TestElbowSweep:
    """Test the sweep over k."""

    def test_max_clusters_below_two(self):
        with pytest.raises(ConfigurationError, match="max_clusters"):
            ElbowSweep(max_clusters=1)

    def test_length_and_keys(self):
        series = ElbowSweep(max_clusters=4, restarts=3).sweep(_blob_grid())
        assert len(series) == 4
        np.testing.assert_array_equal(series.ks, [1, 2, 3, 4])

    def test_non_increasing_on_structured_data(self):
        series = ElbowSweep(max_clusters=5, restarts=10,
                            seed=4).sweep(_blob_grid())
        assert series.is_non_increasing()

    def test_knee_finds_three_blobs(self):
        series = ElbowSweep(max_clusters=5, restarts=10,
                            seed=4).sweep(_blob_grid())
        assert series.knee(max_distance_knee) == 3
        assert series.knee(second_difference_knee) == 3

    def test_deterministic(self):
        sweep = ElbowSweep(max_clusters=4, sample_size=100, restarts=3,
                           seed=9)
        grid = _blob_grid()
        assert sweep.sweep(grid).pairs() == sweep.sweep(grid).pairs()

    def test_concurrent_matches_sequential(self):
        grid = _blob_grid()
        kwargs = dict(max_clusters=5, sample_size=150, restarts=4, seed=5)
        seq = ElbowSweep(n_workers=1, **kwargs).sweep(grid)
        par = ElbowSweep(n_workers=3, **kwargs).sweep(grid)
        assert seq.pairs() == par.pairs()

    def test_aborts_when_k_exceeds_valid_cells(self):
        grid = Grid(np.array([[1.0, 2.0, 4.0, np.nan]]))
        with pytest.raises(InvalidInputError, match="exceeds"):
            ElbowSweep(max_clusters=5, restarts=2).sweep(grid)

    def test_aborts_concurrently(self):
        grid = Grid(np.array([[1.0, 2.0, 4.0, np.nan]]))
        with pytest.raises(InvalidInputError, match="n_clusters=4"):
            ElbowSweep(max_clusters=5, restarts=2,
                       n_workers=4).sweep(grid)

    def test_progress_callback(self):
        seen = []
        ElbowSweep(max_clusters=3, restarts=2).sweep(
            _blob_grid(), progress_callback=seen.append,
        )
        assert seen == pytest.approx([1 / 3, 2 / 3, 1.0])
