# -*- coding: utf-8 -*-
"""
Vocabulary - Canonical enums for GeoRegion.

Single source of truth for the controlled option values accepted by the
normalizer, the clusterer and the configuration layer.

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

from enum import Enum


class NormalizationMode(Enum):
    """Per-band standardization convention.

    ``CENTER_AND_SCALE`` subtracts the band mean and divides by the band
    standard deviation.  ``CENTER_ONLY`` subtracts the mean and leaves the
    spread untouched.
    """

    CENTER_ONLY = "center-only"
    CENTER_AND_SCALE = "center-and-scale"


class InitMethod(Enum):
    """Initialization strategy for a single k-means start.

    ``FORGY`` picks k distinct sample points as initial centers.
    ``RANDOM_PARTITION`` assigns every sample point to a random cluster and
    uses the cluster means as initial centers.
    """

    FORGY = "forgy"
    RANDOM_PARTITION = "random_partition"
