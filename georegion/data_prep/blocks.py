# -*- coding: utf-8 -*-
"""
Block Partitioner - Disjoint full-width row blocks for per-cell maps.

Splits a grid into non-overlapping horizontal strips so that a per-cell
operation (nearest-center assignment) can be distributed across worker
threads.  Strips cover every cell exactly once; the last strip is shorter
when the row count is not a multiple of the block height.

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
from typing import List, NamedTuple, Tuple

# GeoRegion internal
from georegion.exceptions import ConfigurationError, InvalidInputError


class BlockRegion(NamedTuple):
    """Half-open cell bounds of one block, usable directly as slices::

        block = data[..., r.row_start:r.row_end, r.col_start:r.col_end]
    """

    row_start: int
    col_start: int
    row_end: int
    col_end: int

    @property
    def size(self) -> int:
        """Number of cells in the block."""
        return (self.row_end - self.row_start) * (self.col_end - self.col_start)


class BlockPartitioner:
    """Plan disjoint row blocks spanning the full grid width.

    Index-only: returns bounds, never pixel data.

    Parameters
    ----------
    nrows : int
        Number of grid rows.
    ncols : int
        Number of grid columns.
    block_rows : int
        Rows per block.  Default ``256``.

    Raises
    ------
    InvalidInputError
        If the grid dimensions are not positive ints.
    ConfigurationError
        If ``block_rows`` is not a positive int.

    Examples
    --------
    >>> part = BlockPartitioner(nrows=10, ncols=4, block_rows=4)
    >>> [(r.row_start, r.row_end) for r in part.block_regions()]
    [(0, 4), (4, 8), (8, 10)]
    """

    def __init__(self, nrows: int, ncols: int, block_rows: int = 256) -> None:
        for name, value in (('nrows', nrows), ('ncols', ncols)):
            if isinstance(value, bool) or not isinstance(value, int):
                raise InvalidInputError(
                    f"{name} must be int, got {type(value).__name__}"
                )
            if value <= 0:
                raise InvalidInputError(
                    f"{name} must be positive, got {value}"
                )
        if isinstance(block_rows, bool) or not isinstance(block_rows, int) \
                or block_rows < 1:
            raise ConfigurationError(
                f"block_rows must be a positive int, got {block_rows!r}"
            )
        self._nrows = nrows
        self._ncols = ncols
        self._block_rows = block_rows

    @property
    def shape(self) -> Tuple[int, int]:
        """Grid dimensions ``(nrows, ncols)``."""
        return (self._nrows, self._ncols)

    @property
    def block_rows(self) -> int:
        return self._block_rows

    def block_regions(self) -> List[BlockRegion]:
        """Row-major list of disjoint blocks covering every cell once."""
        return [
            BlockRegion(start, 0, min(start + self._block_rows, self._nrows),
                        self._ncols)
            for start in range(0, self._nrows, self._block_rows)
        ]

    def __len__(self) -> int:
        return -(-self._nrows // self._block_rows)

    def __repr__(self) -> str:
        return (
            f"BlockPartitioner(nrows={self._nrows}, ncols={self._ncols}, "
            f"block_rows={self._block_rows})"
        )
