# -*- coding: utf-8 -*-
"""
Processor Versioning - Version stamp decorator for GeoRegion processors.

Provides ``@processor_version`` for stamping a semantic version string on
any ``RegionProcessor`` subclass.  The version is copied into exported
diagnostics so that stored outputs can be traced back to the algorithm
revision that produced them.

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
import importlib.metadata
from typing import Optional, Type, TypeVar

T = TypeVar('T')


def _installed_version() -> str:
    try:
        return importlib.metadata.version('georegion')
    except importlib.metadata.PackageNotFoundError:
        return 'unknown'


def processor_version(version: Optional[str] = None):
    """Record the algorithm version of a processor class.

    Sets ``__processor_version__``.  Without *version* the installed
    ``georegion`` distribution version is used (``'unknown'`` from a plain
    source checkout).  Bump a processor's version whenever its numeric
    output can change for the same input and seed.

    Examples
    --------
    >>> @processor_version('1.0.0')
    ... class Smoother(RegionProcessor):
    ...     pass
    >>> Smoother.__processor_version__
    '1.0.0'
    """
    def stamp(cls: Type[T]) -> Type[T]:
        cls.__processor_version__ = version or _installed_version()
        return cls
    return stamp
