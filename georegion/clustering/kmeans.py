# -*- coding: utf-8 -*-
"""
Stochastic K-Means - Seeded, multi-start k-means clustering of grid cells.

Fits k cluster centers on a random sample of valid cells with
``sklearn.cluster.KMeans`` (Lloyd algorithm, one initialization per fit),
repeated from ``restarts`` independent random starts and keeping the
start with the lowest within-cluster sum of squares.  The winning centers
are then used to classify every valid cell of the full grid.

Reproducibility
---------------
A single ``numpy.random.SeedSequence(seed)`` is spawned into
``restarts + 1`` children: child 0 draws the fitting sample and child
``i + 1`` initializes start ``i`` (including the integer ``random_state``
passed to scikit-learn), so results are identical whether the starts run
sequentially or on a thread pool, and identical across repeated calls.

Sampling
--------
``sample_size`` cells are drawn without replacement.  When ``sample_size``
is at least the number of valid cells, every valid cell is used.

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
import warnings
from concurrent.futures import ThreadPoolExecutor, as_completed
from typing import Annotated, Any, List, NamedTuple

# Third-party
import numpy as np
from sklearn.cluster import KMeans

# GeoRegion internal
from georegion.base import RegionProcessor
from georegion.clustering.classifier import GridClassifier
from georegion.clustering.models import ClusterModel
from georegion.exceptions import (
    ConfigurationError,
    InvalidInputError,
    NonConvergenceWarning,
)
from georegion.grid import Grid
from georegion.params import Desc, Options, Range
from georegion.versioning import processor_version
from georegion.vocabulary import InitMethod

logger = logging.getLogger(__name__)


class StartResult(NamedTuple):
    """Outcome of a single k-means start on the fitting sample."""

    centers: np.ndarray
    total_within_ss: float
    n_iter: int
    converged: bool


class SampleFit(NamedTuple):
    """Winning start across all restarts, before full-grid assignment."""

    centers: np.ndarray
    total_within_ss: float
    n_iter: int
    converged: bool
    best_start: int
    n_nonconverged: int
    sample_size: int


@processor_version('1.0.0')
class StochasticKMeans(RegionProcessor):
    """Multi-start k-means over the valid cells of a grid.

    Parameters
    ----------
    n_clusters : int
        Number of clusters k (>= 1).
    sample_size : int
        Number of valid cells drawn to fit the centers.
    restarts : int
        Number of independent random starts (>= 1).
    seed : int
        Non-negative seed of the run.
    max_iter : int
        Lloyd iteration cap per start.  Reaching it is not fatal.
    init : str
        ``'forgy'`` (k distinct sample points) or ``'random_partition'``.
    n_workers : int
        Threads used for the starts and the full-grid assignment.
    block_rows : int
        Row-block height of the full-grid assignment.

    Examples
    --------
    >>> from georegion.clustering import StochasticKMeans
    >>> km = StochasticKMeans(n_clusters=4, sample_size=5000, restarts=10,
    ...                       seed=42)
    >>> model = km.fit(normalized_grid)
    >>> model.centers.shape
    (4, 3)
    """

    n_clusters: Annotated[int, Range(min=1), Desc('Number of clusters k')] = 2
    sample_size: Annotated[int, Range(min=1), Desc('Cells drawn to fit centers')] = 10000
    restarts: Annotated[int, Range(min=1), Desc('Independent random starts')] = 25
    seed: Annotated[int, Range(min=0), Desc('Random seed')] = 0
    max_iter: Annotated[int, Range(min=1), Desc('Iteration cap per start')] = 100
    init: Annotated[str, Options(*(m.value for m in InitMethod)),
                    Desc('Start initialization')] = InitMethod.FORGY.value
    n_workers: Annotated[int, Range(min=1), Desc('Worker threads')] = 1
    block_rows: Annotated[int, Range(min=1), Desc('Rows per assignment block')] = 256

    def fit(self, grid: Grid, **kwargs: Any) -> ClusterModel:
        """Fit centers on a sample and classify every valid cell.

        Parameters
        ----------
        grid : Grid
            Normalized (or any numeric) grid.
        **kwargs
            Runtime overrides of any declared parameter, and an optional
            ``progress_callback``.

        Returns
        -------
        ClusterModel

        Raises
        ------
        InvalidInputError
            If the grid has no valid cells or k exceeds the valid cells.
        ConfigurationError
            If a parameter is out of range.
        """
        params = self._resolve_params(kwargs)
        fit = self._fit_sample(grid, params)
        self._report_progress(kwargs, 0.8)

        classifier = GridClassifier(
            n_workers=params['n_workers'], block_rows=params['block_rows'],
        )
        assignment = classifier.assign(grid, fit.centers)
        self._report_progress(kwargs, 1.0)

        return ClusterModel(
            centers=fit.centers,
            total_within_ss=fit.total_within_ss,
            assignment=assignment,
            band_names=grid.band_names,
            n_iter=fit.n_iter,
            converged=fit.converged,
            n_nonconverged=fit.n_nonconverged,
            best_start=fit.best_start,
            sample_size=fit.sample_size,
            params=params,
        )

    def fit_centers(self, grid: Grid, **kwargs: Any) -> SampleFit:
        """Fit centers on the sample only, skipping full-grid assignment.

        Used by the elbow sweep, which only needs the dispersion.
        """
        return self._fit_sample(grid, self._resolve_params(kwargs))

    # -----------------------------------------------------------------
    # Private helpers
    # -----------------------------------------------------------------
    def _fit_sample(self, grid: Grid, params: dict) -> SampleFit:
        if not isinstance(grid, Grid):
            raise InvalidInputError(
                f"grid must be a Grid, got {type(grid).__name__}"
            )
        k = params['n_clusters']
        restarts = params['restarts']
        n_valid = grid.n_valid
        if n_valid == 0:
            raise InvalidInputError("grid has no valid cells to cluster")
        if k > n_valid:
            raise InvalidInputError(
                f"n_clusters={k} exceeds the number of valid cells ({n_valid})"
            )
        n_sample = min(params['sample_size'], n_valid)
        if n_sample < k:
            raise ConfigurationError(
                f"sample_size={params['sample_size']} is smaller than "
                f"n_clusters={k}"
            )

        seqs = np.random.SeedSequence(params['seed']).spawn(restarts + 1)
        features = grid.features()
        if n_sample < n_valid:
            picks = np.random.default_rng(seqs[0]).choice(
                n_valid, size=n_sample, replace=False,
            )
            sample = features[np.sort(picks)]
        else:
            sample = features
        logger.debug("k=%d: fitting on %d of %d valid cells, %d starts",
                     k, n_sample, n_valid, restarts)

        results = self._run_starts(sample, k, seqs[1:], params)

        best = min(range(restarts),
                   key=lambda i: (results[i].total_within_ss, i))
        n_nonconverged = sum(1 for r in results if not r.converged)
        if n_nonconverged:
            msg = (
                f"k={k}: {n_nonconverged} of {restarts} starts reached "
                f"max_iter={params['max_iter']} without converging"
            )
            logger.warning(msg)
            warnings.warn(msg, NonConvergenceWarning, stacklevel=3)

        winner = results[best]
        logger.debug("k=%d: best start %d, total within SS %.6g",
                     k, best, winner.total_within_ss)
        return SampleFit(
            centers=winner.centers,
            total_within_ss=winner.total_within_ss,
            n_iter=winner.n_iter,
            converged=winner.converged,
            best_start=best,
            n_nonconverged=n_nonconverged,
            sample_size=n_sample,
        )

    @staticmethod
    def _run_starts(
        sample: np.ndarray,
        k: int,
        seqs: List[np.random.SeedSequence],
        params: dict,
    ) -> List[StartResult]:
        """Run every start; slot ``i`` always holds start ``i``."""
        results: List[StartResult] = [None] * len(seqs)

        def _start(i: int) -> StartResult:
            return _run_start(sample, k, seqs[i], params['max_iter'],
                              params['init'])

        n_workers = min(params['n_workers'], len(seqs))
        if n_workers == 1:
            for i in range(len(seqs)):
                results[i] = _start(i)
        else:
            with ThreadPoolExecutor(max_workers=n_workers) as executor:
                futures = {executor.submit(_start, i): i
                           for i in range(len(seqs))}
                for future in as_completed(futures):
                    results[futures[future]] = future.result()

        for i, r in enumerate(results):
            logger.debug("k=%d start %d: within SS %.6g after %d iter%s",
                         k, i, r.total_within_ss, r.n_iter,
                         '' if r.converged else ' (not converged)')
        return results


def _run_start(
    sample: np.ndarray,
    k: int,
    seq: np.random.SeedSequence,
    max_iter: int,
    init: str,
) -> StartResult:
    """One single-initialization ``KMeans`` fit on the sample.

    The integer ``random_state`` handed to scikit-learn is derived from
    *seq*, so the start is reproducible on its own.
    """
    rng = np.random.default_rng(seq)
    if init == InitMethod.FORGY.value:
        start = 'random'
    else:
        start = _random_partition_centers(sample, k, rng)
    km = KMeans(
        n_clusters=k,
        init=start,
        n_init=1,
        algorithm='lloyd',
        max_iter=max_iter,
        tol=0.0,
        random_state=int(rng.integers(0, 2 ** 31 - 1)),
    )
    km.fit(sample)
    n_iter = int(km.n_iter_)
    return StartResult(
        centers=np.asarray(km.cluster_centers_, dtype=np.float64),
        total_within_ss=float(km.inertia_),
        n_iter=n_iter,
        converged=n_iter < max_iter,
    )


def _random_partition_centers(
    sample: np.ndarray, k: int, rng: np.random.Generator
) -> np.ndarray:
    """Means of a random partition of *sample* into k non-empty groups."""
    n = sample.shape[0]
    labels = rng.integers(0, k, size=n)
    labels[rng.permutation(n)[:k]] = np.arange(k)
    counts = np.bincount(labels, minlength=k)
    centers = np.empty((k, sample.shape[1]), dtype=np.float64)
    for b in range(sample.shape[1]):
        centers[:, b] = np.bincount(labels, weights=sample[:, b], minlength=k)
    return centers / counts[:, np.newaxis]
