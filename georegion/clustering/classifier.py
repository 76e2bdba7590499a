# -*- coding: utf-8 -*-
"""
Grid Classifier - Nearest-center assignment and canonical region labelling.

``GridClassifier`` maps every valid cell of a grid to its nearest cluster
center (squared Euclidean distance, ties to the lowest center index) and
turns a cluster assignment into a ``RegionGrid``, optionally through a
canonical ``LabelLUT``.  The per-cell map runs over disjoint row blocks,
so blocks can be handed to a thread pool; each block writes only to its own
slice of the output.

The output always has the input's spatial shape and exact no-data
footprint.

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
from concurrent.futures import ThreadPoolExecutor, as_completed
from typing import TYPE_CHECKING, Annotated, Any, Optional

# Third-party
import numpy as np
from scipy.spatial.distance import cdist

# GeoRegion internal
from georegion.base import RegionProcessor
from georegion.clustering.models import UNASSIGNED, ClusterModel
from georegion.data_prep.blocks import BlockPartitioner, BlockRegion
from georegion.exceptions import ConfigurationError, InvalidInputError
from georegion.grid import Grid, RegionGrid
from georegion.params import Desc, Range
from georegion.versioning import processor_version

if TYPE_CHECKING:
    from georegion.clustering.labels import LabelLUT

logger = logging.getLogger(__name__)


def nearest_center(features: np.ndarray, centers: np.ndarray) -> np.ndarray:
    """Index of the nearest center for each row of *features*.

    Parameters
    ----------
    features : np.ndarray
        ``(n, bands)`` feature vectors.
    centers : np.ndarray
        ``(k, bands)`` cluster centers.

    Returns
    -------
    np.ndarray
        ``(n,)`` int32 indices in ``[0, k)``.
    """
    d2 = cdist(features, centers, 'sqeuclidean')
    return d2.argmin(axis=1).astype(np.int32)


@processor_version('1.0.0')
class GridClassifier(RegionProcessor):
    """Classify grid cells into clusters and canonical region labels.

    Parameters
    ----------
    n_workers : int
        Threads used for the per-block assignment.  Default ``1``.
    block_rows : int
        Rows per block.  Default ``256``.
    nodata_label : int
        Label written on no-data cells of the ``RegionGrid``.  Must not
        collide with a region label ``1..k``.  Default ``0``.

    Examples
    --------
    >>> from georegion.clustering import GridClassifier, LabelLUT
    >>> lut = LabelLUT.from_model(model, reference_band='accumulation')
    >>> regions = GridClassifier().classify(model, lut)
    """

    n_workers: Annotated[int, Range(min=1), Desc('Worker threads')] = 1
    block_rows: Annotated[int, Range(min=1), Desc('Rows per block')] = 256
    nodata_label: Annotated[int, Desc('Label stored on no-data cells')] = 0

    def assign(
        self, grid: Grid, centers: np.ndarray, **kwargs: Any
    ) -> np.ndarray:
        """Nearest-center index for every valid cell of *grid*.

        Parameters
        ----------
        grid : Grid
            Grid in the same feature space as *centers*.
        centers : np.ndarray
            ``(k, bands)`` cluster centers.

        Returns
        -------
        np.ndarray
            ``(rows, cols)`` int32 array; ``-1`` on no-data cells.

        Raises
        ------
        InvalidInputError
            If the center dimensionality does not match the band count.
        """
        params = self._resolve_params(kwargs)
        centers = np.asarray(centers, dtype=np.float64)
        if centers.ndim != 2 or centers.shape[1] != grid.n_bands:
            raise InvalidInputError(
                f"centers of shape {centers.shape} do not match a grid "
                f"with {grid.n_bands} bands"
            )

        rows, cols = grid.shape
        out = np.full((rows, cols), UNASSIGNED, dtype=np.int32)
        valid = grid.valid_mask
        blocks = BlockPartitioner(
            rows, cols, block_rows=params['block_rows'],
        ).block_regions()

        def _work(region: BlockRegion) -> None:
            rs, re = region.row_start, region.row_end
            block_valid = valid[rs:re]
            if not block_valid.any():
                return
            feats = grid.data[:, rs:re][:, block_valid].T
            out[rs:re][block_valid] = nearest_center(feats, centers)

        n_workers = min(params['n_workers'], len(blocks))
        logger.debug("Assigning %d valid cells in %d blocks on %d thread(s)",
                     grid.n_valid, len(blocks), n_workers)
        if n_workers == 1:
            for i, region in enumerate(blocks):
                _work(region)
                self._report_progress(kwargs, (i + 1) / len(blocks))
        else:
            with ThreadPoolExecutor(max_workers=n_workers) as executor:
                futures = [executor.submit(_work, r) for r in blocks]
                for done, future in enumerate(as_completed(futures), 1):
                    future.result()
                    self._report_progress(kwargs, done / len(blocks))
        return out

    def classify(
        self,
        model: ClusterModel,
        lut: Optional['LabelLUT'] = None,
        **kwargs: Any,
    ) -> RegionGrid:
        """Region grid from the model's own full-grid assignment.

        Without *lut* the raw labelling ``index + 1`` is produced.
        """
        params = self._resolve_params(kwargs)
        return self._label(model.assignment, model.k, lut,
                           params['nodata_label'])

    def classify_grid(
        self,
        grid: Grid,
        model: ClusterModel,
        lut: Optional['LabelLUT'] = None,
        **kwargs: Any,
    ) -> RegionGrid:
        """Assign *grid* to the model's centers, then label it.

        *grid* must carry the model's bands, in the same feature space
        (e.g. normalized with the statistics the model was fitted on).

        Raises
        ------
        InvalidInputError
            If the band names differ from the model's.
        """
        if tuple(grid.band_names) != tuple(model.band_names):
            raise InvalidInputError(
                f"grid bands {list(grid.band_names)} do not match model "
                f"bands {list(model.band_names)}"
            )
        params = self._resolve_params(kwargs)
        assignment = self.assign(grid, model.centers, **kwargs)
        return self._label(assignment, model.k, lut, params['nodata_label'])

    @staticmethod
    def _label(
        assignment: np.ndarray,
        k: int,
        lut: Optional['LabelLUT'],
        nodata_label: int,
    ) -> RegionGrid:
        if 1 <= nodata_label <= k:
            raise ConfigurationError(
                f"nodata_label={nodata_label} collides with region labels "
                f"1..{k}"
            )
        valid = assignment != UNASSIGNED
        if lut is None:
            labels = np.where(valid, assignment + 1, nodata_label)
        else:
            if lut.k != k:
                raise InvalidInputError(
                    f"label LUT covers {lut.k} clusters, model has {k}"
                )
            labels = lut.apply(assignment, nodata_label=nodata_label)
        return RegionGrid(labels, valid, k=k, nodata_label=nodata_label)
