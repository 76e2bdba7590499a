# -*- coding: utf-8 -*-
"""
Clustering Module - Seeded k-means, elbow sweep, canonical labels, classifier.

Key Classes
-----------
- StochasticKMeans: multi-start k-means on a sample of valid cells
- ClusterModel: immutable result of one k-means run
- ElbowSweep / ElbowSeries: dispersion for k = 1..K_max
- LabelLUT: canonical ordering of cluster indices by a reference band
- GridClassifier: nearest-center assignment and RegionGrid production

Usage
-----
    >>> from georegion.clustering import (
    ...     ElbowSweep, StochasticKMeans, LabelLUT, GridClassifier,
    ... )
    >>> series = ElbowSweep(max_clusters=8, seed=7).sweep(normalized)
    >>> model = StochasticKMeans(n_clusters=4, seed=7).fit(normalized)
    >>> lut = LabelLUT.from_model(model, reference_band=0)
    >>> regions = GridClassifier().classify(model, lut)

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

from georegion.clustering.models import UNASSIGNED, ClusterModel
from georegion.clustering.classifier import GridClassifier, nearest_center
from georegion.clustering.kmeans import SampleFit, StartResult, StochasticKMeans
from georegion.clustering.labels import LabelLUT
from georegion.clustering.elbow import (
    ElbowSeries,
    ElbowSweep,
    max_distance_knee,
    second_difference_knee,
)

__all__ = [
    'UNASSIGNED',
    'ClusterModel',
    'GridClassifier',
    'nearest_center',
    'SampleFit',
    'StartResult',
    'StochasticKMeans',
    'LabelLUT',
    'ElbowSeries',
    'ElbowSweep',
    'max_distance_knee',
    'second_difference_knee',
]
