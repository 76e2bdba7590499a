# -*- coding: utf-8 -*-
"""
Regionalizer - End-to-end regionalization of a multi-band grid.

Chains the engine stages in their data-flow order:

    Grid -> BandNormalizer -> ElbowSweep (operator picks k)
         -> StochasticKMeans(k) -> LabelLUT -> GridClassifier -> RegionGrid

The elbow step and the final run are separate calls so that the cluster
count can be chosen by a person (or a knee finder) in between.  Progress is
reported across the stages of each call through an optional
``progress_callback``.

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
from typing import Any, Callable, Dict, NamedTuple, Optional

# Third-party
import numpy as np

# GeoRegion internal
from georegion.clustering.classifier import GridClassifier
from georegion.clustering.elbow import ElbowSeries, ElbowSweep
from georegion.clustering.kmeans import StochasticKMeans
from georegion.clustering.labels import LabelLUT
from georegion.clustering.models import ClusterModel
from georegion.config import RegionalizationConfig
from georegion.data_prep.normalizer import BandNormalizer
from georegion.exceptions import (
    ConfigurationError,
    InvalidInputError,
    ProcessorError,
)
from georegion.grid import Grid, NormalizedGrid, RegionGrid

logger = logging.getLogger(__name__)

ProgressCallback = Callable[[float], None]


class RegionalizationResult(NamedTuple):
    """Everything produced by one final regionalization run."""

    normalized: NormalizedGrid
    model: ClusterModel
    lut: LabelLUT
    regions: RegionGrid

    def to_dict(self) -> Dict[str, Any]:
        """Diagnostics for external reporting.

        Centers are given both in normalized units and in source units.
        """
        summary = self.model.to_dict()
        summary['centers_source_units'] = (
            self.normalized.denormalize_centers(self.model.centers).tolist()
        )
        summary['normalization'] = {
            'mode': self.normalized.mode.value,
            'center': self.normalized.center.tolist(),
            'scale': self.normalized.scale.tolist(),
        }
        summary['reference_band'] = self.lut.reference_band
        summary['label_lut'] = {
            str(i): label for i, label in self.lut.to_dict().items()
        }
        summary['region_cell_counts'] = {
            str(label): n for label, n in self.regions.label_counts().items()
        }
        summary['processor_versions'] = {
            cls.__name__: cls.__processor_version__
            for cls in (BandNormalizer, StochasticKMeans, GridClassifier)
        }
        return summary


class Regionalizer:
    """Drive the regionalization engine from one configuration.

    Parameters
    ----------
    config : RegionalizationConfig, optional
        Settings; defaults are used when omitted.

    Examples
    --------
    >>> from georegion import Grid, Regionalizer, RegionalizationConfig
    >>> reg = Regionalizer(RegionalizationConfig(max_clusters=8, seed=3,
    ...                                          reference_band='rate'))
    >>> series = reg.elbow(grid)          # inspect, pick k
    >>> result = reg.run(grid, n_clusters=4)
    >>> result.regions.labels
    """

    def __init__(self, config: Optional[RegionalizationConfig] = None) -> None:
        self._config = config if config is not None else RegionalizationConfig()

    @property
    def config(self) -> RegionalizationConfig:
        return self._config

    def normalize(self, grid: Grid) -> NormalizedGrid:
        """Standardize *grid* according to the configured convention."""
        cfg = self._config
        return BandNormalizer(mode=cfg.normalize, ddof=cfg.ddof).normalize(grid)

    def elbow(
        self,
        grid: Grid,
        progress_callback: Optional[ProgressCallback] = None,
    ) -> ElbowSeries:
        """Normalize *grid* and sweep k = 1..max_clusters."""
        cfg = self._config
        self._check_grid(grid)
        logger.debug("Elbow: normalizing %r", grid)
        normalized = self.normalize(grid)
        _report(progress_callback, 0.1)

        sweep = ElbowSweep(
            max_clusters=cfg.max_clusters,
            sample_size=cfg.sample_size,
            restarts=cfg.restarts,
            seed=cfg.seed,
            max_iter=cfg.max_iter,
            init=cfg.init,
            n_workers=cfg.n_workers,
        )
        series = sweep.sweep(
            normalized,
            progress_callback=_rescaled(progress_callback, 0.1, 0.9),
        )
        _report(progress_callback, 1.0)
        return series

    def run(
        self,
        grid: Grid,
        n_clusters: Optional[int] = None,
        progress_callback: Optional[ProgressCallback] = None,
    ) -> RegionalizationResult:
        """Final run: normalize, cluster with k, remap, classify.

        Parameters
        ----------
        grid : Grid
            Source grid.
        n_clusters : int, optional
            Chosen k; falls back to ``config.chosen_clusters``.
        progress_callback : callable, optional
            Receives the overall fraction complete.

        Raises
        ------
        ConfigurationError
            If no k is available or the reference band is unknown.
        InvalidInputError
            On malformed input or k above the valid-cell count.
        """
        cfg = self._config
        k = n_clusters if n_clusters is not None else cfg.chosen_clusters
        if k is None:
            raise ConfigurationError(
                "no cluster count chosen; pass n_clusters or set "
                "chosen_clusters after reviewing the elbow series"
            )
        self._check_grid(grid)
        # fail before any clustering work if the reference band is unknown
        grid.band_index(cfg.reference_band)

        logger.debug("Run k=%d: normalizing %r", k, grid)
        normalized = self.normalize(grid)
        _report(progress_callback, 0.1)

        model = StochasticKMeans(
            n_clusters=k,
            sample_size=cfg.sample_size,
            restarts=cfg.restarts,
            seed=cfg.seed,
            max_iter=cfg.max_iter,
            init=cfg.init,
            n_workers=cfg.n_workers,
            block_rows=cfg.block_rows,
        ).fit(
            normalized,
            progress_callback=_rescaled(progress_callback, 0.1, 0.8),
        )

        lut = LabelLUT.from_model(model, cfg.reference_band)
        regions = GridClassifier(
            n_workers=cfg.n_workers,
            block_rows=cfg.block_rows,
            nodata_label=cfg.nodata_label,
        ).classify(model, lut)
        if not np.array_equal(regions.valid_mask, grid.valid_mask):
            raise ProcessorError(
                "region grid no-data footprint differs from the input grid"
            )
        _report(progress_callback, 1.0)

        logger.info("Regionalized %d valid cells into %d regions "
                    "(total within SS %.6g)", grid.n_valid, k,
                    model.total_within_ss)
        return RegionalizationResult(normalized, model, lut, regions)

    @staticmethod
    def _check_grid(grid: Grid) -> None:
        if not isinstance(grid, Grid):
            raise InvalidInputError(
                f"grid must be a Grid, got {type(grid).__name__}"
            )

    def __repr__(self) -> str:
        return f"Regionalizer({self._config!r})"


def _report(cb: Optional[ProgressCallback], fraction: float) -> None:
    if cb is not None:
        cb(float(fraction))


def _rescaled(
    cb: Optional[ProgressCallback], base: float, scale: float
) -> Optional[ProgressCallback]:
    """Map a stage's [0, 1] progress onto ``[base, base + scale]``."""
    if cb is None:
        return None
    return lambda f, _b=base, _s=scale: cb(_b + f * _s)
