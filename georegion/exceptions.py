# -*- coding: utf-8 -*-
"""
GeoRegion Exception Hierarchy - Domain-specific errors and warnings.

Lets callers (CLI, batch drivers) catch regionalization failures distinctly
from Python built-in exceptions. Every error subclasses both
``GeoRegionError`` and the matching built-in so that plain ``except
ValueError`` handlers keep working.

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


class GeoRegionError(Exception):
    """Base exception for all GeoRegion errors."""


class InvalidInputError(GeoRegionError, ValueError):
    """Malformed or unusable input data.

    Raised for mismatched band shapes, duplicate band names, bands with no
    valid cells, constant (zero-variance) bands, empty grids, and cluster
    counts that exceed the number of valid cells.
    """


class ConfigurationError(GeoRegionError, ValueError):
    """Invalid parameter or configuration value.

    Raised for out-of-range cluster counts, restart counts and sample
    sizes, unknown reference bands, and unrecognized configuration keys.
    """


class ProcessorError(GeoRegionError, RuntimeError):
    """Internal processing failure (not an input validation issue)."""


class NonConvergenceWarning(UserWarning):
    """A k-means start reached its iteration cap before stabilizing.

    Non-fatal: the start still competes with its final state.
    """
