# -*- coding: utf-8 -*-
"""
Band Normalizer Tests - Per-band standardization of grid valid cells.

Tests both normalization conventions, the ddof option, fit/transform
semantics, no-data preservation, constant-band rejection, and input
validation.

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

from georegion.data_prep import BandNormalizer
from georegion.exceptions import ConfigurationError, InvalidInputError
from georegion.grid import Grid, NormalizedGrid
from georegion.vocabulary import NormalizationMode


def _random_grid(nodata_fraction=0.2):
    rng = np.random.RandomState(42)
    data = np.stack([
        rng.normal(50.0, 10.0, (20, 30)),
        rng.normal(-3.0, 0.5, (20, 30)),
        rng.uniform(0.0, 1000.0, (20, 30)),
    ])
    mask = rng.uniform(size=(20, 30)) < nodata_fraction
    return Grid(data, band_names=['stock', 'rate', 'reactivity'],
                nodata_mask=mask)


# ---------------------------------------------------------------------------
# Constructor validation
# ---------------------------------------------------------------------------

class TestBandNormalizerInit:
    """Test constructor validation and defaults."""

    def test_defaults(self):
        norm = BandNormalizer()
        assert norm.mode == 'center-and-scale'
        assert norm.ddof == 0
        assert norm.is_fitted is False

    def test_invalid_mode_raises(self):
        with pytest.raises(ConfigurationError, match="allowed choices"):
            BandNormalizer(mode='zscore')

    def test_invalid_ddof_raises(self):
        with pytest.raises(ConfigurationError, match="ddof"):
            BandNormalizer(ddof=2)


# ---------------------------------------------------------------------------
# Center-and-scale
# ---------------------------------------------------------------------------

class TestCenterAndScale:
    """Test z-score standardization of every band."""

    def test_zero_mean_unit_std(self):
        result = BandNormalizer().normalize(_random_grid())
        feats = result.features()
        np.testing.assert_allclose(feats.mean(axis=0), 0.0, atol=1e-12)
        np.testing.assert_allclose(feats.std(axis=0), 1.0, rtol=1e-12)

    def test_sample_std(self):
        result = BandNormalizer(ddof=1).normalize(_random_grid())
        np.testing.assert_allclose(
            result.features().std(axis=0, ddof=1), 1.0, rtol=1e-12,
        )

    def test_known_values(self):
        g = Grid(np.array([[1.0, 2.0, 3.0]]))
        result = BandNormalizer().normalize(g)
        std = np.sqrt(2.0 / 3.0)
        np.testing.assert_allclose(
            result.data[0, 0], [-1.0 / std, 0.0, 1.0 / std],
        )
        np.testing.assert_allclose(result.center, [2.0])
        np.testing.assert_allclose(result.scale, [std])

    def test_returns_normalized_grid(self):
        result = BandNormalizer().normalize(_random_grid())
        assert isinstance(result, NormalizedGrid)
        assert result.mode is NormalizationMode.CENTER_AND_SCALE
        assert result.band_names == ('stock', 'rate', 'reactivity')

    def test_denormalize_recovers_source(self):
        grid = _random_grid()
        result = BandNormalizer().normalize(grid)
        np.testing.assert_allclose(
            result.denormalize_centers(result.features()), grid.features(),
            rtol=1e-10,
        )


# ---------------------------------------------------------------------------
# Center-only
# ---------------------------------------------------------------------------

class TestCenterOnly:
    """Test mean removal without scaling."""

    def test_zero_mean_std_preserved(self):
        grid = _random_grid()
        result = BandNormalizer(mode='center-only').normalize(grid)
        feats = result.features()
        np.testing.assert_allclose(feats.mean(axis=0), 0.0, atol=1e-9)
        np.testing.assert_allclose(
            feats.std(axis=0), grid.features().std(axis=0), rtol=1e-12,
        )
        np.testing.assert_array_equal(result.scale, np.ones(3))

    def test_constant_band_rejected(self):
        data = np.stack([np.arange(6.0).reshape(2, 3), np.full((2, 3), 4.0)])
        grid = Grid(data, band_names=['a', 'flat'])
        with pytest.raises(InvalidInputError, match="'flat' is constant"):
            BandNormalizer(mode='center-only').normalize(grid)


# ---------------------------------------------------------------------------
# No-data and edge cases
# ---------------------------------------------------------------------------

class TestNoDataAndEdges:
    """Test footprint preservation and degenerate grids."""

    def test_nodata_footprint_preserved(self):
        grid = _random_grid()
        result = BandNormalizer().normalize(grid)
        np.testing.assert_array_equal(result.nodata_mask, grid.nodata_mask)
        assert result.n_valid == grid.n_valid

    def test_nodata_cells_untouched(self):
        grid = _random_grid()
        result = BandNormalizer().normalize(grid)
        np.testing.assert_array_equal(
            result.data[:, grid.nodata_mask], grid.data[:, grid.nodata_mask],
        )

    def test_stats_ignore_nodata(self):
        data = np.array([[1.0, 3.0, -9999.0]])
        result = BandNormalizer().normalize(Grid(data, nodata=-9999.0))
        np.testing.assert_allclose(result.center, [2.0])
        np.testing.assert_allclose(result.data[0, 0, :2], [-1.0, 1.0])

    def test_constant_band_rejected(self):
        data = np.stack([np.arange(6.0).reshape(2, 3), np.full((2, 3), 7.0)])
        grid = Grid(data, band_names=['a', 'flat'])
        with pytest.raises(InvalidInputError, match="'flat' is constant"):
            BandNormalizer().normalize(grid)

    def test_all_nodata_rejected(self):
        grid = Grid(np.full((3, 3), np.nan))
        with pytest.raises(InvalidInputError, match="no valid cells"):
            BandNormalizer().normalize(grid)

    def test_single_cell_with_sample_std(self):
        grid = Grid(np.array([[5.0, np.nan]]))
        with pytest.raises(InvalidInputError, match="ddof=1"):
            BandNormalizer(ddof=1).normalize(grid)

    def test_not_a_grid(self):
        with pytest.raises(InvalidInputError, match="Grid"):
            BandNormalizer().normalize(np.ones((2, 2)))


# ---------------------------------------------------------------------------
# Fit / transform
# ---------------------------------------------------------------------------

class TestFitTransform:
    """Test statistics reuse across grids."""

    def test_transform_before_fit_raises(self):
        with pytest.raises(RuntimeError, match="not been fitted"):
            BandNormalizer().transform(_random_grid())

    def test_fit_transform_matches_normalize(self):
        grid = _random_grid()
        a = BandNormalizer().fit_transform(grid)
        b = BandNormalizer().normalize(grid)
        np.testing.assert_allclose(a.data, b.data)

    def test_reuse_statistics(self):
        grid = _random_grid()
        norm = BandNormalizer().fit(grid)
        shifted = grid.with_data(grid.data + 1.0)
        result = norm.transform(shifted)
        np.testing.assert_allclose(result.center, norm.center_)
        np.testing.assert_allclose(
            result.features().mean(axis=0), 1.0 / norm.scale_, rtol=1e-9,
        )

    def test_band_count_mismatch(self):
        norm = BandNormalizer().fit(_random_grid())
        with pytest.raises(InvalidInputError, match="fitted on 3 bands"):
            norm.transform(Grid(np.arange(4.0).reshape(2, 2)))

    def test_normalize_leaves_fit_untouched(self):
        norm = BandNormalizer()
        norm.normalize(_random_grid())
        assert norm.is_fitted is False
