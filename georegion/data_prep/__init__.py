# -*- coding: utf-8 -*-
"""
Data Preparation Module - Band normalization and block planning.

Key Classes
-----------
- BandNormalizer: per-band, no-data aware standardization of a Grid
- BlockRegion: named tuple of half-open cell bounds
- BlockPartitioner: disjoint row blocks for parallel per-cell maps

Usage
-----
Standardize every band of a grid:

    >>> from georegion.data_prep import BandNormalizer
    >>> normalized = BandNormalizer(mode='center-and-scale').normalize(grid)

Plan row blocks for a worker pool:

    >>> from georegion.data_prep import BlockPartitioner
    >>> blocks = BlockPartitioner(nrows=1000, ncols=2000, block_rows=128)
    >>> regions = blocks.block_regions()

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

from georegion.data_prep.blocks import BlockPartitioner, BlockRegion
from georegion.data_prep.normalizer import BandNormalizer

__all__ = [
    'BandNormalizer',
    'BlockPartitioner',
    'BlockRegion',
]
