# -*- coding: utf-8 -*-
"""
GeoRegion - Geochemical Regionalization Library.

Partitions a geographic area into discrete ecological/geochemical regions by
unsupervised clustering of co-registered raster layers (e.g. organic-carbon
stock, accumulation rate, reactivity index): per-band normalization, seeded
multi-start k-means, an elbow sweep over cluster counts, canonical label
ordering and no-data preserving classification of every cell.

Dependencies
------------
numpy
scipy
scikit-learn
pyyaml

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

__version__ = "0.1.0"

from georegion.exceptions import (
    GeoRegionError,
    InvalidInputError,
    ConfigurationError,
    ProcessorError,
    NonConvergenceWarning,
)
from georegion.vocabulary import InitMethod, NormalizationMode
from georegion.grid import Grid, NormalizedGrid, RegionGrid
from georegion.data_prep import BandNormalizer
from georegion.clustering import (
    ClusterModel,
    ElbowSeries,
    ElbowSweep,
    GridClassifier,
    LabelLUT,
    StochasticKMeans,
)
from georegion.config import RegionalizationConfig, load_config
from georegion.pipeline import RegionalizationResult, Regionalizer

__all__ = [
    'GeoRegionError',
    'InvalidInputError',
    'ConfigurationError',
    'ProcessorError',
    'NonConvergenceWarning',
    'InitMethod',
    'NormalizationMode',
    'Grid',
    'NormalizedGrid',
    'RegionGrid',
    'BandNormalizer',
    'ClusterModel',
    'ElbowSeries',
    'ElbowSweep',
    'GridClassifier',
    'LabelLUT',
    'StochasticKMeans',
    'RegionalizationConfig',
    'load_config',
    'RegionalizationResult',
    'Regionalizer',
]
