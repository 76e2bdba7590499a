# -*- coding: utf-8 -*-
"""
GeoRegion Module Entry Point - ``python -m georegion``.

Runs the same command line as the ``georegion`` console script.

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
import sys

# GeoRegion internal
from georegion.cli import main

sys.exit(main())
