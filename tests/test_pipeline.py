# -*- coding: utf-8 -*-
"""
Regionalizer Tests - End-to-end normalization, clustering and labelling.

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

import json

import numpy as np
import pytest

from georegion import (
    ConfigurationError,
    Grid,
    InvalidInputError,
    RegionalizationConfig,
    RegionalizationResult,
    Regionalizer,
)


def _two_block_grid():
    """10x10 grid: top-left 5x5 at (1, 1, 1), bottom-right 5x5 at
    (10, 10, 10), everything else no-data."""
    data = np.full((3, 10, 10), -9999.0)
    data[:, :5, :5] = 1.0
    data[:, 5:, 5:] = 10.0
    return Grid(data, band_names=['stock', 'rate', 'reactivity'],
                nodata=-9999.0)


def _random_grid():
    rng = np.random.RandomState(42)
    data = rng.normal(size=(2, 15, 15))
    data[:, 0, :3] = np.nan
    return Grid(data, band_names=['stock', 'rate'])


# ---------------------------------------------------------------------------
# Final run
# ---------------------------------------------------------------------------

class TestRun:
    """Test the final regionalization."""

    def test_two_blocks(self):
        grid = _two_block_grid()
        result = Regionalizer().run(grid, n_clusters=2)
        assert isinstance(result, RegionalizationResult)
        labels = result.regions.labels
        assert np.all(labels[5:, 5:] == 1)
        assert np.all(labels[:5, :5] == 2)
        assert np.all(labels[:5, 5:] == 0)
        assert np.all(labels[5:, :5] == 0)
        np.testing.assert_array_equal(result.regions.valid_mask,
                                      grid.valid_mask)

    def test_reference_band_by_name(self):
        cfg = RegionalizationConfig(reference_band='reactivity')
        result = Regionalizer(cfg).run(_two_block_grid(), n_clusters=2)
        assert np.all(result.regions.labels[5:, 5:] == 1)
        assert result.lut.reference_band == 'reactivity'

    def test_centers_in_source_units(self):
        result = Regionalizer().run(_two_block_grid(), n_clusters=2)
        source = result.normalized.denormalize_centers(result.model.centers)
        ordered = source[result.lut.inverse]
        np.testing.assert_allclose(ordered, [[10.0] * 3, [1.0] * 3])

    def test_chosen_clusters_from_config(self):
        cfg = RegionalizationConfig(chosen_clusters=3, restarts=5)
        result = Regionalizer(cfg).run(_random_grid())
        assert result.regions.k == 3
        assert set(np.unique(result.regions.labels[result.regions.valid_mask])) \
            <= {1, 2, 3}

    def test_reproducible(self):
        cfg = RegionalizationConfig(restarts=4, sample_size=100, seed=8)
        a = Regionalizer(cfg).run(_random_grid(), n_clusters=4)
        b = Regionalizer(cfg).run(_random_grid(), n_clusters=4)
        np.testing.assert_array_equal(a.regions.labels, b.regions.labels)

    def test_to_dict_is_json(self):
        result = Regionalizer().run(_two_block_grid(), n_clusters=2)
        summary = result.to_dict()
        assert summary['reference_band'] == 'stock'
        assert summary['region_cell_counts'] == {'1': 25, '2': 25}
        assert summary['normalization']['mode'] == 'center-and-scale'
        json.dumps(summary)

    def test_progress_callback(self):
        seen = []
        Regionalizer(RegionalizationConfig(restarts=2)).run(
            _random_grid(), n_clusters=2, progress_callback=seen.append,
        )
        assert seen == sorted(seen)
        assert seen[-1] == pytest.approx(1.0)


class TestRunErrors:
    """Test failures raised before any clustering work."""

    def test_no_cluster_count(self):
        with pytest.raises(ConfigurationError, match="no cluster count"):
            Regionalizer().run(_random_grid())

    def test_unknown_reference_band(self):
        cfg = RegionalizationConfig(reference_band='accumulation')
        with pytest.raises(ConfigurationError, match="not found"):
            Regionalizer(cfg).run(_random_grid(), n_clusters=2)

    def test_constant_band(self):
        data = np.stack([np.arange(9.0).reshape(3, 3), np.ones((3, 3))])
        with pytest.raises(InvalidInputError, match="constant"):
            Regionalizer().run(Grid(data), n_clusters=2)

    def test_k_exceeds_valid_cells(self):
        with pytest.raises(InvalidInputError, match="exceeds"):
            Regionalizer().run(_two_block_grid(), n_clusters=51)

    def test_not_a_grid(self):
        with pytest.raises(InvalidInputError, match="Grid"):
            Regionalizer().run(np.ones((3, 3)), n_clusters=2)

    def test_nodata_label_collision(self):
        cfg = RegionalizationConfig(nodata_label=1)
        with pytest.raises(ConfigurationError, match="collides"):
            Regionalizer(cfg).run(_two_block_grid(), n_clusters=2)


# ---------------------------------------------------------------------------
# Elbow
# ---------------------------------------------------------------------------

class TestElbow:
    """Test the elbow stage."""

    def test_series_length(self):
        cfg = RegionalizationConfig(max_clusters=4, restarts=3)
        series = Regionalizer(cfg).elbow(_random_grid())
        assert len(series) == 4
        assert series.ks.tolist() == [1, 2, 3, 4]

    def test_first_entry_is_total_variance(self):
        grid = _random_grid()
        cfg = RegionalizationConfig(max_clusters=2, restarts=2)
        series = Regionalizer(cfg).elbow(grid)
        # unit variance per band after center-and-scale
        assert series.dispersion[0] == pytest.approx(2.0 * grid.n_valid)

    def test_progress_callback(self):
        seen = []
        cfg = RegionalizationConfig(max_clusters=3, restarts=2)
        Regionalizer(cfg).elbow(_random_grid(), progress_callback=seen.append)
        assert seen == sorted(seen)
        assert seen[0] == pytest.approx(0.1)
        assert seen[-1] == pytest.approx(1.0)
