# -*- coding: utf-8 -*-
"""
Canonical Labels - Reproducible ordering of arbitrary cluster indices.

K-means numbers its clusters arbitrarily; the numbering can change between
runs even when the partition is the same.  ``LabelLUT`` fixes a canonical
order by sorting the clusters on the center value of one reference band,
highest first, so that e.g. label 1 is always "highest accumulation rate".
Ties are broken by the original cluster index, ascending.

The LUT is a bijection from original index ``0..k-1`` to canonical label
``1..k`` and can be applied to assignments and inverted.

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

# Standard library
import logging
from typing import Dict, Optional, Sequence, Union

# Third-party
import numpy as np

# GeoRegion internal
from georegion.clustering.models import UNASSIGNED, ClusterModel
from georegion.exceptions import ConfigurationError, InvalidInputError

logger = logging.getLogger(__name__)


class LabelLUT:
    """Bijective map from original cluster index to canonical label.

    Parameters
    ----------
    forward : Sequence[int]
        ``forward[i]`` is the canonical label of original cluster ``i``.
        Must be a permutation of ``1..k``.
    reference_band : str, optional
        Name of the band the ordering was derived from.

    Raises
    ------
    InvalidInputError
        If *forward* is not a permutation of ``1..k``.

    Examples
    --------
    >>> lut = LabelLUT.from_centers(np.array([[1.0], [10.0]]), reference=0)
    >>> lut.forward
    array([2, 1], dtype=int32)
    """

    def __init__(
        self,
        forward: Sequence[int],
        reference_band: Optional[str] = None,
    ) -> None:
        forward = np.array(forward, dtype=np.int32)
        k = forward.size
        if forward.ndim != 1 or k == 0:
            raise InvalidInputError(
                f"LUT must be a non-empty 1D sequence, got shape {forward.shape}"
            )
        if not np.array_equal(np.sort(forward), np.arange(1, k + 1)):
            raise InvalidInputError(
                f"LUT {forward.tolist()} is not a bijection onto 1..{k}"
            )
        inverse = np.empty(k, dtype=np.int32)
        inverse[forward - 1] = np.arange(k, dtype=np.int32)

        forward.setflags(write=False)
        inverse.setflags(write=False)
        self._forward = forward
        self._inverse = inverse
        self.reference_band = reference_band

    @classmethod
    def from_centers(
        cls,
        centers: np.ndarray,
        reference: int,
        reference_band: Optional[str] = None,
    ) -> 'LabelLUT':
        """Order clusters by descending center value of column *reference*.

        Parameters
        ----------
        centers : np.ndarray
            ``(k, bands)`` cluster centers.
        reference : int
            Column index of the reference band.
        reference_band : str, optional
            Band name recorded on the LUT.
        """
        centers = np.asarray(centers, dtype=np.float64)
        if centers.ndim != 2 or centers.shape[0] == 0:
            raise InvalidInputError(
                f"centers must be a non-empty (k, bands) array, "
                f"got shape {centers.shape}"
            )
        if not 0 <= reference < centers.shape[1]:
            raise ConfigurationError(
                f"reference band index {reference} out of range for "
                f"{centers.shape[1]} bands"
            )
        k = centers.shape[0]
        # lexsort: last key is primary
        order = np.lexsort((np.arange(k), -centers[:, reference]))
        forward = np.empty(k, dtype=np.int32)
        forward[order] = np.arange(1, k + 1)
        return cls(forward, reference_band=reference_band)

    @classmethod
    def from_model(
        cls, model: ClusterModel, reference_band: Union[str, int]
    ) -> 'LabelLUT':
        """Canonical LUT for *model*, reference band given by name or index.

        Raises
        ------
        ConfigurationError
            If the reference band is not one of the model's bands.
        """
        names = list(model.band_names)
        if isinstance(reference_band, str):
            if reference_band not in names:
                raise ConfigurationError(
                    f"reference band '{reference_band}' not found; "
                    f"available bands: {names}"
                )
            index = names.index(reference_band)
        elif isinstance(reference_band, (int, np.integer)) \
                and not isinstance(reference_band, bool):
            index = int(reference_band)
            if not 0 <= index < len(names):
                raise ConfigurationError(
                    f"reference band index {index} out of range for "
                    f"bands {names}"
                )
        else:
            raise ConfigurationError(
                f"reference band must be str or int, "
                f"got {type(reference_band).__name__}"
            )
        lut = cls.from_centers(model.centers, index,
                               reference_band=names[index])
        logger.debug("Canonical LUT on '%s': %s", names[index],
                     lut.to_dict())
        return lut

    # -----------------------------------------------------------------
    # Properties
    # -----------------------------------------------------------------
    @property
    def k(self) -> int:
        return self._forward.size

    @property
    def forward(self) -> np.ndarray:
        """``forward[i]`` = canonical label of original cluster ``i``."""
        return self._forward

    @property
    def inverse(self) -> np.ndarray:
        """``inverse[label - 1]`` = original cluster index of ``label``."""
        return self._inverse

    # -----------------------------------------------------------------
    # Mapping
    # -----------------------------------------------------------------
    def apply(self, assignment: np.ndarray, nodata_label: int = 0) -> np.ndarray:
        """Map original cluster indices to canonical labels.

        Cells holding ``-1`` (unassigned) receive *nodata_label*.

        Raises
        ------
        InvalidInputError
            If an index lies outside ``[-1, k)``.
        """
        assignment = np.asarray(assignment)
        valid = assignment != UNASSIGNED
        indices = assignment[valid]
        if indices.size and (indices.min() < 0 or indices.max() >= self.k):
            raise InvalidInputError(
                f"assignment holds cluster indices outside [0, {self.k})"
            )
        out = np.full(assignment.shape, nodata_label, dtype=np.int32)
        out[valid] = self._forward[indices]
        return out

    def invert(self, labels: np.ndarray) -> np.ndarray:
        """Map canonical labels back to original indices.

        Values outside ``1..k`` (no-data labels) become ``-1``.
        """
        labels = np.asarray(labels)
        valid = (labels >= 1) & (labels <= self.k)
        out = np.full(labels.shape, UNASSIGNED, dtype=np.int32)
        out[valid] = self._inverse[labels[valid] - 1]
        return out

    def to_dict(self) -> Dict[int, int]:
        """``{original_index: canonical_label}``."""
        return {i: int(label) for i, label in enumerate(self._forward)}

    def __len__(self) -> int:
        return self.k

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, LabelLUT):
            return NotImplemented
        return np.array_equal(self._forward, other._forward)

    def __repr__(self) -> str:
        return (
            f"LabelLUT({self._forward.tolist()}, "
            f"reference_band={self.reference_band!r})"
        )
