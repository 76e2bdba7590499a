# -*- coding: utf-8 -*-
"""
Elbow Sweep - Within-cluster dispersion over a range of cluster counts.

``ElbowSweep`` runs ``StochasticKMeans`` once per k = 1..K_max with the same
seed and collects an ``ElbowSeries`` of ``(k, total_within_ss)`` pairs.  No
cluster count is chosen here: the series is handed back to the operator (or
to a knee finder passed to ``ElbowSeries.knee``).

Each k-run builds its own clusterer and therefore its own generators, so
runs can proceed on a thread pool without sharing random state.

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
from concurrent.futures import ThreadPoolExecutor
from typing import (
    Annotated, Any, Callable, Dict, Iterator, List, Sequence, Tuple,
)

# Third-party
import numpy as np

# GeoRegion internal
from georegion.base import RegionProcessor
from georegion.clustering.kmeans import SampleFit, StochasticKMeans
from georegion.exceptions import InvalidInputError
from georegion.grid import Grid
from georegion.params import Desc, Options, Range
from georegion.versioning import processor_version
from georegion.vocabulary import InitMethod

logger = logging.getLogger(__name__)

KneeFinder = Callable[[np.ndarray, np.ndarray], int]


# =====================================================================
# Knee finders
# =====================================================================

def max_distance_knee(ks: np.ndarray, wss: np.ndarray) -> int:
    """Cluster count farthest below the chord of the normalized curve.

    Both axes are rescaled to [0, 1]; the knee is the point with the
    largest vertical gap under the straight line joining the first and
    last points.  Fewer than three points, or a flat curve, yield the
    first k.
    """
    ks = np.asarray(ks, dtype=np.float64)
    wss = np.asarray(wss, dtype=np.float64)
    if ks.size < 3 or np.ptp(wss) == 0.0:
        return int(ks[0])
    x = (ks - ks[0]) / (ks[-1] - ks[0])
    y = (wss - wss.min()) / np.ptp(wss)
    chord = y[0] + (y[-1] - y[0]) * x
    return int(ks[np.argmax(chord - y)])


def second_difference_knee(ks: np.ndarray, wss: np.ndarray) -> int:
    """Cluster count with the largest discrete second difference."""
    ks = np.asarray(ks)
    wss = np.asarray(wss, dtype=np.float64)
    if ks.size < 3:
        return int(ks[0])
    second = wss[:-2] - 2.0 * wss[1:-1] + wss[2:]
    return int(ks[np.argmax(second) + 1])


# =====================================================================
# ElbowSeries
# =====================================================================

class ElbowSeries:
    """Append-only ``(k, total_within_ss)`` series for k = 1..K_max.

    Examples
    --------
    >>> series = ElbowSeries()
    >>> series.append(1, 120.0)
    >>> series.append(2, 35.5)
    >>> series.pairs()
    [(1, 120.0), (2, 35.5)]
    """

    def __init__(self) -> None:
        self._ks: List[int] = []
        self._wss: List[float] = []

    @classmethod
    def from_pairs(cls, pairs: Sequence[Tuple[int, float]]) -> 'ElbowSeries':
        series = cls()
        for k, wss in pairs:
            series.append(k, wss)
        return series

    def append(self, k: int, total_within_ss: float) -> None:
        """Add the next entry; k must be ``len(self) + 1``.

        Raises
        ------
        InvalidInputError
            If k is out of sequence or the dispersion is negative or not
            finite.
        """
        expected = len(self._ks) + 1
        if k != expected:
            raise InvalidInputError(
                f"elbow series expects k={expected} next, got k={k}"
            )
        value = float(total_within_ss)
        if not np.isfinite(value) or value < 0.0:
            raise InvalidInputError(
                f"total within SS for k={k} must be finite and >= 0, "
                f"got {value}"
            )
        self._ks.append(int(k))
        self._wss.append(value)

    @property
    def ks(self) -> np.ndarray:
        return np.array(self._ks, dtype=np.int64)

    @property
    def dispersion(self) -> np.ndarray:
        return np.array(self._wss, dtype=np.float64)

    def pairs(self) -> List[Tuple[int, float]]:
        return list(zip(self._ks, self._wss))

    def is_non_increasing(self, rtol: float = 1e-9) -> bool:
        """Whether dispersion never rises with k (within *rtol*)."""
        wss = self.dispersion
        return bool(np.all(wss[1:] <= wss[:-1] * (1.0 + rtol) + rtol))

    def knee(self, finder: KneeFinder = max_distance_knee) -> int:
        """Suggest a cluster count with a pluggable *finder*."""
        if not self._ks:
            raise InvalidInputError("elbow series is empty")
        return int(finder(self.ks, self.dispersion))

    def to_dict(self) -> Dict[str, List]:
        """JSON-serializable form for external plotting."""
        return {'k': list(self._ks), 'total_within_ss': list(self._wss)}

    def __len__(self) -> int:
        return len(self._ks)

    def __iter__(self) -> Iterator[Tuple[int, float]]:
        return iter(self.pairs())

    def __repr__(self) -> str:
        return f"ElbowSeries({self.pairs()!r})"


# =====================================================================
# ElbowSweep
# =====================================================================

@processor_version('1.0.0')
class ElbowSweep(RegionProcessor):
    """Run the clusterer for k = 1..max_clusters and collect dispersion.

    Parameters
    ----------
    max_clusters : int
        Largest k of the sweep (K_max >= 2).
    sample_size, restarts, seed, max_iter, init
        Forwarded unchanged to every ``StochasticKMeans`` run.
    n_workers : int
        Number of k-runs executed concurrently.  Default ``1``.

    Examples
    --------
    >>> sweep = ElbowSweep(max_clusters=8, sample_size=5000, restarts=10)
    >>> series = sweep.sweep(normalized_grid)
    >>> series.to_dict()['total_within_ss']
    """

    max_clusters: Annotated[int, Range(min=2), Desc('Largest k (K_max)')] = 10
    sample_size: Annotated[int, Range(min=1), Desc('Cells drawn to fit centers')] = 10000
    restarts: Annotated[int, Range(min=1), Desc('Independent random starts')] = 25
    seed: Annotated[int, Range(min=0), Desc('Random seed, reused for every k')] = 0
    max_iter: Annotated[int, Range(min=1), Desc('Iteration cap per start')] = 100
    init: Annotated[str, Options(*(m.value for m in InitMethod)),
                    Desc('Start initialization')] = InitMethod.FORGY.value
    n_workers: Annotated[int, Range(min=1), Desc('Concurrent k-runs')] = 1

    def sweep(self, grid: Grid, **kwargs: Any) -> ElbowSeries:
        """Build the elbow series for *grid*.

        Raises
        ------
        InvalidInputError
            From the first failing k (e.g. k above the valid-cell count);
            no partial series is returned.
        """
        params = self._resolve_params(kwargs)
        k_max = params['max_clusters']
        runs = [
            StochasticKMeans(
                n_clusters=k,
                sample_size=params['sample_size'],
                restarts=params['restarts'],
                seed=params['seed'],
                max_iter=params['max_iter'],
                init=params['init'],
            )
            for k in range(1, k_max + 1)
        ]

        fits: List[SampleFit] = []
        n_workers = min(params['n_workers'], k_max)
        if n_workers == 1:
            for i, run in enumerate(runs):
                fits.append(run.fit_centers(grid))
                self._report_progress(kwargs, (i + 1) / k_max)
        else:
            with ThreadPoolExecutor(max_workers=n_workers) as executor:
                futures = [executor.submit(run.fit_centers, grid)
                           for run in runs]
                # collect in k order so the first failing k is the one raised
                for i, future in enumerate(futures):
                    fits.append(future.result())
                    self._report_progress(kwargs, (i + 1) / k_max)

        series = ElbowSeries()
        for k, fit in enumerate(fits, start=1):
            series.append(k, fit.total_within_ss)
        logger.info("Elbow sweep k=1..%d: %s", k_max, series.to_dict())
        return series
