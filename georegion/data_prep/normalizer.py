# -*- coding: utf-8 -*-
"""
Band Normalizer - Per-band, no-data aware standardization of a Grid.

Standardizes every band of a ``Grid`` using statistics computed over the
valid cells only.  Two conventions are supported:

- ``'center-and-scale'``: ``(x - mean_b) / std_b``
- ``'center-only'``: ``x - mean_b``

The standard deviation is the population estimate (``ddof=0``) unless
``ddof=1`` is requested.  A constant band is rejected in both modes since it
carries no information for clustering and would divide by zero when scaled.
No-data cells keep their source values and remain masked.

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
from typing import Annotated, Any, Optional, Tuple

# Third-party
import numpy as np

# GeoRegion internal
from georegion.base import RegionProcessor
from georegion.exceptions import InvalidInputError
from georegion.grid import Grid, NormalizedGrid
from georegion.params import Desc, Options, Range
from georegion.versioning import processor_version
from georegion.vocabulary import NormalizationMode

logger = logging.getLogger(__name__)

_MODES = tuple(m.value for m in NormalizationMode)


@processor_version('1.0.0')
class BandNormalizer(RegionProcessor):
    """Per-band standardization with fit/transform semantics.

    Use ``normalize()`` for a stateless one-shot transform, or ``fit()`` /
    ``transform()`` to reuse the statistics of one grid on another grid
    with the same bands.

    Parameters
    ----------
    mode : str
        ``'center-and-scale'`` (default) or ``'center-only'``.
    ddof : int
        Delta degrees of freedom of the standard deviation.  ``0``
        (population, default) or ``1`` (sample).
    epsilon : float
        Relative tolerance under which a band's standard deviation counts
        as zero.  Default ``1e-10``.

    Examples
    --------
    >>> from georegion.data_prep import BandNormalizer
    >>> norm = BandNormalizer(mode='center-and-scale')
    >>> normalized = norm.normalize(grid)
    >>> normalized.features().mean(axis=0)   # ~0 per band
    """

    mode: Annotated[str, Options(*_MODES), Desc('Standardization convention')] = \
        NormalizationMode.CENTER_AND_SCALE.value
    ddof: Annotated[int, Range(min=0, max=1), Desc('Std delta degrees of freedom')] = 0
    epsilon: Annotated[float, Range(min=0.0), Desc('Zero-variance tolerance')] = 1e-10

    def __post_init__(self) -> None:
        self._center: Optional[np.ndarray] = None
        self._scale: Optional[np.ndarray] = None
        self._band_names: Optional[Tuple[str, ...]] = None
        self._fitted_mode: Optional[str] = None

    @property
    def is_fitted(self) -> bool:
        """Whether ``fit()`` has been called."""
        return self._center is not None

    @property
    def center_(self) -> Optional[np.ndarray]:
        """Fitted per-band centers, or ``None`` before ``fit()``."""
        return self._center

    @property
    def scale_(self) -> Optional[np.ndarray]:
        """Fitted per-band scales, or ``None`` before ``fit()``."""
        return self._scale

    def normalize(self, grid: Grid, **kwargs: Any) -> NormalizedGrid:
        """Normalize *grid* with statistics computed from *grid* itself.

        Stateless: fitted parameters, if any, are left untouched.

        Parameters
        ----------
        grid : Grid
            Source grid.

        Returns
        -------
        NormalizedGrid

        Raises
        ------
        InvalidInputError
            If the grid has no valid cells or a band is constant.
        """
        params = self._resolve_params(kwargs)
        center, scale = self._compute_stats(grid, params)
        return self._apply(grid, center, scale, params['mode'])

    def fit(self, grid: Grid, **kwargs: Any) -> 'BandNormalizer':
        """Compute and store per-band statistics.  Returns self."""
        params = self._resolve_params(kwargs)
        self._center, self._scale = self._compute_stats(grid, params)
        self._band_names = grid.band_names
        self._fitted_mode = params['mode']
        return self

    def transform(self, grid: Grid) -> NormalizedGrid:
        """Apply previously fitted statistics to *grid*.

        Raises
        ------
        RuntimeError
            If ``fit()`` was not called first.
        InvalidInputError
            If *grid* has a different band count from the fitted grid.
        """
        if not self.is_fitted:
            raise RuntimeError(
                "BandNormalizer has not been fitted. Call fit() first."
            )
        self._validate_grid(grid)
        if grid.n_bands != len(self._center):
            raise InvalidInputError(
                f"grid has {grid.n_bands} bands, normalizer was fitted on "
                f"{len(self._center)} bands {list(self._band_names)}"
            )
        return self._apply(grid, self._center, self._scale, self._fitted_mode)

    def fit_transform(self, grid: Grid, **kwargs: Any) -> NormalizedGrid:
        """Equivalent to ``fit(grid)`` followed by ``transform(grid)``."""
        return self.fit(grid, **kwargs).transform(grid)

    # -----------------------------------------------------------------
    # Private helpers
    # -----------------------------------------------------------------
    def _compute_stats(
        self, grid: Grid, params: dict
    ) -> Tuple[np.ndarray, np.ndarray]:
        self._validate_grid(grid)
        ddof = params['ddof']
        if grid.n_valid == 0:
            raise InvalidInputError(
                f"grid has no valid cells; every band of "
                f"{list(grid.band_names)} is entirely no-data"
            )
        if grid.n_valid <= ddof:
            raise InvalidInputError(
                f"standard deviation with ddof={ddof} needs more than "
                f"{ddof} valid cell(s), grid has {grid.n_valid}"
            )

        feats = grid.features()
        center = feats.mean(axis=0)
        spread = feats.std(axis=0, ddof=ddof)

        for b, name in enumerate(grid.band_names):
            tol = params['epsilon'] * max(1.0, abs(center[b]))
            if spread[b] <= tol:
                raise InvalidInputError(
                    f"band '{name}' is constant over the valid cells "
                    f"(value {center[b]:g}); cannot standardize"
                )

        if params['mode'] == NormalizationMode.CENTER_ONLY.value:
            scale = np.ones_like(spread)
        else:
            scale = spread
        logger.debug("Band stats (mode=%s, ddof=%d): center=%s scale=%s",
                     params['mode'], ddof, center, scale)
        return center, scale

    @staticmethod
    def _apply(
        grid: Grid, center: np.ndarray, scale: np.ndarray, mode: str
    ) -> NormalizedGrid:
        valid = grid.valid_mask
        out = np.array(grid.data)
        out[:, valid] = (
            (out[:, valid] - center[:, np.newaxis]) / scale[:, np.newaxis]
        )
        return NormalizedGrid(
            out,
            band_names=grid.band_names,
            nodata_mask=grid.nodata_mask,
            center=center,
            scale=scale,
            mode=NormalizationMode(mode),
        )

    @staticmethod
    def _validate_grid(grid: Grid) -> None:
        if not isinstance(grid, Grid):
            raise InvalidInputError(
                f"grid must be a Grid, got {type(grid).__name__}"
            )
