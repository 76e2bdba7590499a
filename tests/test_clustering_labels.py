# -*- coding: utf-8 -*-
"""
Label LUT Tests - Canonical ordering of cluster indices.

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

from georegion.clustering import UNASSIGNED, ClusterModel, LabelLUT
from georegion.exceptions import ConfigurationError, InvalidInputError


def _model(centers, band_names=('stock', 'rate')):
    centers = np.asarray(centers, dtype=float)
    assignment = np.arange(centers.shape[0]).reshape(1, -1)
    return ClusterModel(centers, 0.0, assignment, band_names)


# ---------------------------------------------------------------------------
# Construction
# ---------------------------------------------------------------------------

class TestLabelLUTInit:
    """Test bijection validation."""

    def test_valid_permutation(self):
        lut = LabelLUT([3, 1, 2])
        assert lut.k == 3
        assert len(lut) == 3
        np.testing.assert_array_equal(lut.inverse, [1, 2, 0])

    def test_not_bijective(self):
        with pytest.raises(InvalidInputError, match="bijection"):
            LabelLUT([1, 1, 2])

    def test_out_of_range(self):
        with pytest.raises(InvalidInputError, match="bijection"):
            LabelLUT([0, 1])

    def test_empty(self):
        with pytest.raises(InvalidInputError, match="non-empty"):
            LabelLUT([])

    def test_equality(self):
        assert LabelLUT([2, 1]) == LabelLUT([2, 1])
        assert LabelLUT([2, 1]) != LabelLUT([1, 2])


# ---------------------------------------------------------------------------
# Canonical ordering
# ---------------------------------------------------------------------------

class TestFromCenters:
    """Test descending order on the reference band."""

    def test_descending_reference(self):
        centers = np.array([[1.0, 0.0], [10.0, 0.0], [5.0, 0.0]])
        lut = LabelLUT.from_centers(centers, reference=0)
        np.testing.assert_array_equal(lut.forward, [3, 1, 2])

    def test_other_reference_band(self):
        centers = np.array([[1.0, 7.0], [10.0, -2.0], [5.0, 3.0]])
        lut = LabelLUT.from_centers(centers, reference=1)
        np.testing.assert_array_equal(lut.forward, [1, 3, 2])

    def test_ties_keep_original_order(self):
        centers = np.array([[2.0], [5.0], [2.0], [5.0]])
        lut = LabelLUT.from_centers(centers, reference=0)
        np.testing.assert_array_equal(lut.forward, [3, 1, 4, 2])

    def test_single_cluster(self):
        lut = LabelLUT.from_centers(np.array([[4.0, 1.0]]), reference=1)
        np.testing.assert_array_equal(lut.forward, [1])

    def test_reference_out_of_range(self):
        with pytest.raises(ConfigurationError, match="out of range"):
            LabelLUT.from_centers(np.ones((2, 2)), reference=2)

    def test_permutation_invariance(self):
        rng = np.random.RandomState(42)
        centers = rng.normal(size=(6, 3))
        perm = rng.permutation(6)
        a = LabelLUT.from_centers(centers, reference=2)
        b = LabelLUT.from_centers(centers[perm], reference=2)
        # the same physical center gets the same label
        np.testing.assert_array_equal(a.forward[perm], b.forward)


class TestFromModel:
    """Test reference band resolution on a model."""

    def test_by_name(self):
        lut = LabelLUT.from_model(_model([[1.0, 9.0], [2.0, 3.0]]), 'rate')
        np.testing.assert_array_equal(lut.forward, [1, 2])
        assert lut.reference_band == 'rate'

    def test_by_index(self):
        lut = LabelLUT.from_model(_model([[1.0, 9.0], [2.0, 3.0]]), 0)
        np.testing.assert_array_equal(lut.forward, [2, 1])
        assert lut.reference_band == 'stock'

    def test_unknown_band(self):
        with pytest.raises(ConfigurationError, match="not found"):
            LabelLUT.from_model(_model([[1.0, 2.0]]), 'reactivity')

    def test_index_out_of_range(self):
        with pytest.raises(ConfigurationError, match="out of range"):
            LabelLUT.from_model(_model([[1.0, 2.0]]), 5)

    def test_bad_type(self):
        with pytest.raises(ConfigurationError, match="str or int"):
            LabelLUT.from_model(_model([[1.0, 2.0]]), 1.5)


# ---------------------------------------------------------------------------
# Mapping
# ---------------------------------------------------------------------------

class TestApplyInvert:
    """Test forward and inverse mapping of label arrays."""

    def test_apply_keeps_nodata(self):
        lut = LabelLUT([2, 3, 1])
        assignment = np.array([[0, 1], [UNASSIGNED, 2]])
        np.testing.assert_array_equal(
            lut.apply(assignment, nodata_label=-9), [[2, 3], [-9, 1]],
        )

    def test_invert_round_trip(self):
        lut = LabelLUT([2, 3, 1])
        assignment = np.array([[0, 1], [UNASSIGNED, 2]])
        np.testing.assert_array_equal(lut.invert(lut.apply(assignment)),
                                      assignment)

    def test_apply_rejects_unknown_index(self):
        with pytest.raises(InvalidInputError, match="outside"):
            LabelLUT([1, 2]).apply(np.array([0, 2]))

    def test_to_dict(self):
        assert LabelLUT([2, 1]).to_dict() == {0: 2, 1: 1}
