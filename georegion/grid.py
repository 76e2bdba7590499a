# -*- coding: utf-8 -*-
"""
Grid Data Model - Co-registered multi-band grids and categorical outputs.

Provides the in-memory containers that flow through the regionalization
engine:

- ``Grid``: ``(bands, rows, cols)`` numeric stack with unique, ordered band
  names and a per-cell no-data mask.
- ``NormalizedGrid``: a ``Grid`` produced by ``BandNormalizer``, carrying
  the per-band center and scale that were applied.
- ``RegionGrid``: single-band categorical grid of canonical labels with the
  source no-data footprint.

A cell is no-data for clustering purposes when *any* band is no-data at that
cell: explicitly masked, equal to the ``nodata`` sentinel, or non-finite.
All arrays are stored read-only; derived grids are new objects.

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
from typing import Dict, Mapping, Optional, Sequence, Tuple, Union

# Third-party
import numpy as np

# GeoRegion internal
from georegion.exceptions import ConfigurationError, InvalidInputError
from georegion.vocabulary import NormalizationMode

BandRef = Union[str, int]


def _readonly(arr: np.ndarray) -> np.ndarray:
    arr.setflags(write=False)
    return arr


class Grid:
    """Multi-band grid of co-registered numeric layers.

    Parameters
    ----------
    data : np.ndarray
        ``(bands, rows, cols)`` array, or ``(rows, cols)`` for a single
        band.  Copied to float64.
    band_names : Sequence[str], optional
        Unique band labels in band order.  Defaults to ``band_0``,
        ``band_1``, ...
    nodata : float, optional
        Sentinel value marking missing cells in any band.
    nodata_mask : np.ndarray, optional
        ``(rows, cols)`` boolean array, True where the cell is no-data.

    Raises
    ------
    InvalidInputError
        If the array is not 2D/3D numeric, has an empty dimension, the band
        names are duplicated or do not match the band count, or the mask
        shape differs from the spatial shape.

    Examples
    --------
    >>> import numpy as np
    >>> from georegion import Grid
    >>> stock = np.array([[1.0, 2.0], [3.0, -9999.0]])
    >>> rate = np.array([[0.1, 0.2], [0.3, 0.4]])
    >>> grid = Grid.from_bands({'stock': stock, 'rate': rate}, nodata=-9999.0)
    >>> grid.n_valid
    3
    """

    def __init__(
        self,
        data: np.ndarray,
        band_names: Optional[Sequence[str]] = None,
        nodata: Optional[float] = None,
        nodata_mask: Optional[np.ndarray] = None,
    ) -> None:
        if not isinstance(data, np.ndarray):
            raise InvalidInputError(
                f"data must be np.ndarray, got {type(data).__name__}"
            )
        if data.ndim == 2:
            data = data[np.newaxis]
        if data.ndim != 3:
            raise InvalidInputError(
                f"data must be 2D (rows, cols) or 3D (bands, rows, cols), "
                f"got {data.ndim}D"
            )
        if not (np.issubdtype(data.dtype, np.number)
                or data.dtype == np.bool_):
            raise InvalidInputError(f"data must be numeric, got {data.dtype}")
        if np.iscomplexobj(data):
            raise InvalidInputError("complex-valued bands are not supported")
        if 0 in data.shape:
            raise InvalidInputError(f"grid is empty, shape {data.shape}")

        n_bands = data.shape[0]
        if band_names is None:
            band_names = [f"band_{i}" for i in range(n_bands)]
        band_names = tuple(str(name) for name in band_names)
        if len(band_names) != n_bands:
            raise InvalidInputError(
                f"{len(band_names)} band names given for {n_bands} bands"
            )
        if len(set(band_names)) != len(band_names):
            dupes = sorted({n for n in band_names if band_names.count(n) > 1})
            raise InvalidInputError(f"duplicate band names: {dupes}")

        values = np.array(data, dtype=np.float64)
        mask = np.any(~np.isfinite(values), axis=0)
        if nodata is not None:
            mask |= np.any(values == nodata, axis=0)
        if nodata_mask is not None:
            nodata_mask = np.asarray(nodata_mask, dtype=bool)
            if nodata_mask.shape != values.shape[1:]:
                raise InvalidInputError(
                    f"nodata_mask shape {nodata_mask.shape} does not match "
                    f"grid shape {values.shape[1:]}"
                )
            mask |= nodata_mask

        self._data = _readonly(values)
        self._band_names = band_names
        self._nodata = nodata
        self._nodata_mask = _readonly(mask)

    @classmethod
    def from_bands(
        cls,
        bands: Mapping[str, np.ndarray],
        nodata: Optional[float] = None,
        nodata_mask: Optional[np.ndarray] = None,
    ) -> 'Grid':
        """Build a grid from an ordered ``{name: 2D array}`` mapping.

        Raises
        ------
        InvalidInputError
            If the mapping is empty, a band is not 2D, or a band's shape
            differs from the first band's.
        """
        if not bands:
            raise InvalidInputError("at least one band is required")
        names = list(bands)
        arrays = [np.asarray(bands[name]) for name in names]
        ref_shape = arrays[0].shape
        for name, arr in zip(names, arrays):
            if arr.ndim != 2:
                raise InvalidInputError(
                    f"band '{name}' must be 2D, got {arr.ndim}D"
                )
            if arr.shape != ref_shape:
                raise InvalidInputError(
                    f"band '{name}' has shape {arr.shape}, expected "
                    f"{ref_shape} (from band '{names[0]}')"
                )
        return cls(np.stack(arrays), band_names=names, nodata=nodata,
                   nodata_mask=nodata_mask)

    # -----------------------------------------------------------------
    # Properties
    # -----------------------------------------------------------------
    @property
    def data(self) -> np.ndarray:
        """Read-only ``(bands, rows, cols)`` float64 values."""
        return self._data

    @property
    def band_names(self) -> Tuple[str, ...]:
        return self._band_names

    @property
    def n_bands(self) -> int:
        return self._data.shape[0]

    @property
    def shape(self) -> Tuple[int, int]:
        """Spatial dimensions ``(rows, cols)``."""
        return self._data.shape[1], self._data.shape[2]

    @property
    def nodata(self) -> Optional[float]:
        return self._nodata

    @property
    def nodata_mask(self) -> np.ndarray:
        """Read-only ``(rows, cols)`` mask, True on no-data cells."""
        return self._nodata_mask

    @property
    def valid_mask(self) -> np.ndarray:
        """``(rows, cols)`` mask, True on cells usable for clustering."""
        return ~self._nodata_mask

    @property
    def n_valid(self) -> int:
        return int(self._nodata_mask.size - np.count_nonzero(self._nodata_mask))

    # -----------------------------------------------------------------
    # Accessors
    # -----------------------------------------------------------------
    def band_index(self, band: BandRef) -> int:
        """Resolve a band name or integer index to an integer index.

        Raises
        ------
        ConfigurationError
            If the name is unknown or the index is out of range.
        """
        if isinstance(band, (int, np.integer)) and not isinstance(band, bool):
            index = int(band)
            if not 0 <= index < self.n_bands:
                raise ConfigurationError(
                    f"band index {index} out of range for "
                    f"{self.n_bands} bands {list(self._band_names)}"
                )
            return index
        if isinstance(band, str):
            if band not in self._band_names:
                raise ConfigurationError(
                    f"band '{band}' not found; available bands: "
                    f"{list(self._band_names)}"
                )
            return self._band_names.index(band)
        raise ConfigurationError(
            f"band reference must be str or int, got {type(band).__name__}"
        )

    def band(self, band: BandRef) -> np.ndarray:
        """Return one band as a read-only ``(rows, cols)`` view."""
        return self._data[self.band_index(band)]

    def valid_indices(self) -> np.ndarray:
        """Flat (row-major) indices of the valid cells."""
        return np.flatnonzero(self.valid_mask)

    def features(self) -> np.ndarray:
        """Feature matrix of valid cells, shape ``(n_valid, bands)``.

        Rows follow row-major cell order, matching ``valid_indices()``.
        """
        flat = self._data.reshape(self.n_bands, -1)
        return np.ascontiguousarray(flat[:, self.valid_indices()].T)

    def with_data(self, data: np.ndarray) -> 'Grid':
        """New grid with the same band names and no-data footprint."""
        return Grid(data, band_names=self._band_names,
                    nodata_mask=self._nodata_mask)

    def __repr__(self) -> str:
        rows, cols = self.shape
        return (
            f"{type(self).__name__}(bands={list(self._band_names)}, "
            f"rows={rows}, cols={cols}, n_valid={self.n_valid})"
        )


class NormalizedGrid(Grid):
    """Grid whose valid cells have been standardized band by band.

    No-data cells keep their source values and stay masked.  The applied
    statistics are kept so that results can be mapped back to physical
    units (``denormalize_centers``).

    Parameters
    ----------
    data : np.ndarray
        ``(bands, rows, cols)`` normalized values.
    band_names : Sequence[str]
        Band labels of the source grid.
    nodata_mask : np.ndarray
        No-data mask of the source grid.
    center, scale : np.ndarray
        Per-band center and scale that were applied (``scale`` is all ones
        for center-only normalization).
    mode : NormalizationMode
        The convention that produced the grid.
    """

    def __init__(
        self,
        data: np.ndarray,
        band_names: Sequence[str],
        nodata_mask: np.ndarray,
        center: np.ndarray,
        scale: np.ndarray,
        mode: NormalizationMode,
    ) -> None:
        super().__init__(data, band_names=band_names, nodata_mask=nodata_mask)
        self._center = _readonly(np.array(center, dtype=np.float64))
        self._scale = _readonly(np.array(scale, dtype=np.float64))
        self._mode = mode

    @property
    def center(self) -> np.ndarray:
        return self._center

    @property
    def scale(self) -> np.ndarray:
        return self._scale

    @property
    def mode(self) -> NormalizationMode:
        return self._mode

    def denormalize_centers(self, centers: np.ndarray) -> np.ndarray:
        """Map ``(k, bands)`` centers from normalized space to source units."""
        return np.asarray(centers) * self._scale + self._center


class RegionGrid:
    """Single-band categorical grid of canonical region labels.

    Parameters
    ----------
    labels : np.ndarray
        ``(rows, cols)`` integer labels in ``1..k`` on valid cells and
        ``nodata_label`` elsewhere.
    valid_mask : np.ndarray
        ``(rows, cols)`` boolean mask of labelled cells.
    k : int
        Number of regions.
    nodata_label : int
        Value stored on no-data cells.  Default ``0``.
    """

    def __init__(
        self,
        labels: np.ndarray,
        valid_mask: np.ndarray,
        k: int,
        nodata_label: int = 0,
    ) -> None:
        labels = np.array(labels, dtype=np.int32)
        valid_mask = np.array(valid_mask, dtype=bool)
        if labels.ndim != 2 or labels.shape != valid_mask.shape:
            raise InvalidInputError(
                f"labels {labels.shape} and valid_mask {valid_mask.shape} "
                f"must be matching 2D arrays"
            )
        self._labels = _readonly(labels)
        self._valid_mask = _readonly(valid_mask)
        self._k = int(k)
        self._nodata_label = int(nodata_label)

    @property
    def labels(self) -> np.ndarray:
        return self._labels

    @property
    def valid_mask(self) -> np.ndarray:
        return self._valid_mask

    @property
    def nodata_mask(self) -> np.ndarray:
        return ~self._valid_mask

    @property
    def k(self) -> int:
        return self._k

    @property
    def nodata_label(self) -> int:
        return self._nodata_label

    @property
    def shape(self) -> Tuple[int, int]:
        return self._labels.shape

    def to_masked(self) -> np.ma.MaskedArray:
        """Labels as a masked array with no-data cells masked."""
        return np.ma.MaskedArray(self._labels, mask=~self._valid_mask)

    def label_counts(self) -> Dict[int, int]:
        """Number of cells per canonical label (labels with no cells: 0)."""
        counts = np.bincount(self._labels[self._valid_mask],
                             minlength=self._k + 1)
        return {label: int(counts[label]) for label in range(1, self._k + 1)}

    def __repr__(self) -> str:
        return (
            f"RegionGrid(shape={self.shape}, k={self._k}, "
            f"n_valid={int(self._valid_mask.sum())})"
        )
