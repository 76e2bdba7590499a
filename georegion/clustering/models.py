# -*- coding: utf-8 -*-
"""
Cluster Data Models - Immutable result of one k-means run.

``ClusterModel`` bundles the winning centers, the within-cluster dispersion
of the fitting sample, and the full-grid nearest-center assignment together
with the diagnostics of the run that produced them.

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
from types import MappingProxyType
from typing import Any, Dict, Mapping, Optional, Sequence, Tuple

# Third-party
import numpy as np

#: Assignment value stored on no-data cells.
UNASSIGNED = -1


class ClusterModel:
    """
    Result of one stochastic k-means run.

    Parameters
    ----------
    centers : np.ndarray
        ``(k, bands)`` cluster centers in the feature space of the input
        grid (normalized units when fitted on a ``NormalizedGrid``).
    total_within_ss : float
        Total within-cluster sum of squared Euclidean distances of the
        fitting sample to the winning centers.
    assignment : np.ndarray
        ``(rows, cols)`` cluster index in ``[0, k)`` for every valid cell,
        ``UNASSIGNED`` (-1) on no-data cells.
    band_names : Sequence[str]
        Band labels, one per center column.
    n_iter : int
        Iterations run by the winning start.
    converged : bool
        Whether the winning start stabilized before the iteration cap.
    n_nonconverged : int
        Number of starts (out of ``restarts``) that hit the cap.
    best_start : int
        Index of the winning start.
    sample_size : int
        Number of cells in the fitting sample.
    params : Dict[str, Any], optional
        Clusterer parameters used for the run.
    """

    def __init__(
        self,
        centers: np.ndarray,
        total_within_ss: float,
        assignment: np.ndarray,
        band_names: Sequence[str],
        n_iter: int = 0,
        converged: bool = True,
        n_nonconverged: int = 0,
        best_start: int = 0,
        sample_size: int = 0,
        params: Optional[Dict[str, Any]] = None,
    ) -> None:
        centers = np.array(centers, dtype=np.float64)
        assignment = np.array(assignment, dtype=np.int32)
        centers.setflags(write=False)
        assignment.setflags(write=False)
        self._centers = centers
        self._total_within_ss = float(total_within_ss)
        self._assignment = assignment
        self._band_names = tuple(band_names)
        self._n_iter = int(n_iter)
        self._converged = bool(converged)
        self._n_nonconverged = int(n_nonconverged)
        self._best_start = int(best_start)
        self._sample_size = int(sample_size)
        self._params = MappingProxyType(dict(params or {}))

    @property
    def k(self) -> int:
        """Number of clusters."""
        return self._centers.shape[0]

    @property
    def centers(self) -> np.ndarray:
        """Read-only ``(k, bands)`` cluster centers."""
        return self._centers

    @property
    def total_within_ss(self) -> float:
        return self._total_within_ss

    @property
    def assignment(self) -> np.ndarray:
        """Read-only ``(rows, cols)`` cluster indices, -1 on no-data."""
        return self._assignment

    @property
    def band_names(self) -> Tuple[str, ...]:
        return self._band_names

    @property
    def n_iter(self) -> int:
        return self._n_iter

    @property
    def converged(self) -> bool:
        return self._converged

    @property
    def n_nonconverged(self) -> int:
        """Starts that reached the iteration cap."""
        return self._n_nonconverged

    @property
    def best_start(self) -> int:
        return self._best_start

    @property
    def sample_size(self) -> int:
        return self._sample_size

    @property
    def params(self) -> Mapping[str, Any]:
        """Read-only view of the clusterer parameters used for the run."""
        return self._params

    @property
    def valid_mask(self) -> np.ndarray:
        return self._assignment != UNASSIGNED

    def cluster_sizes(self) -> np.ndarray:
        """Number of full-grid cells assigned to each cluster, length k."""
        assigned = self._assignment[self._assignment != UNASSIGNED]
        return np.bincount(assigned, minlength=self.k)

    def to_dict(self) -> Dict[str, Any]:
        """JSON-serializable summary for external reporting."""
        return {
            'k': self.k,
            'band_names': list(self._band_names),
            'centers': self._centers.tolist(),
            'total_within_ss': self._total_within_ss,
            'cluster_sizes': self.cluster_sizes().tolist(),
            'n_iter': self.n_iter,
            'converged': self.converged,
            'n_nonconverged': self.n_nonconverged,
            'best_start': self.best_start,
            'sample_size': self.sample_size,
            'params': dict(self.params),
        }

    def __repr__(self) -> str:
        return (
            f"ClusterModel(k={self.k}, "
            f"total_within_ss={self._total_within_ss:.6g}, "
            f"shape={self._assignment.shape})"
        )
