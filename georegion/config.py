# -*- coding: utf-8 -*-
"""
Configuration - Regionalization settings, YAML loading and validation.

``RegionalizationConfig`` collects every recognized option of the engine.
Keys may be given in the camelCase form used by configuration files
(``maxClusters``, ``sampleSize``, ``referenceBand``, ...) or as the
snake_case field names.  Unknown keys and out-of-range values raise
``ConfigurationError``.

Example YAML::

    normalize: center-and-scale
    maxClusters: 10
    chosenClusters: 5
    sampleSize: 10000
    restarts: 25
    seed: 42
    referenceBand: accumulation_rate

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
import dataclasses
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Dict, Mapping, Optional, Union

# Third-party
import yaml

# GeoRegion internal
from georegion.exceptions import ConfigurationError
from georegion.vocabulary import InitMethod, NormalizationMode

_CAMEL_KEYS = {
    'normalize': 'normalize',
    'maxClusters': 'max_clusters',
    'chosenClusters': 'chosen_clusters',
    'sampleSize': 'sample_size',
    'restarts': 'restarts',
    'seed': 'seed',
    'referenceBand': 'reference_band',
    'maxIter': 'max_iter',
    'init': 'init',
    'ddof': 'ddof',
    'workers': 'n_workers',
    'blockRows': 'block_rows',
    'nodataLabel': 'nodata_label',
}


@dataclass
class RegionalizationConfig:
    """Settings of one regionalization run.

    Attributes
    ----------
    normalize : str
        ``'center-and-scale'`` or ``'center-only'``.
    max_clusters : int
        Largest k of the elbow sweep (K_max >= 2).
    chosen_clusters : int, optional
        Operator-selected k for the final run.
    sample_size : int
        Cells drawn to fit the centers.
    restarts : int
        Independent k-means starts.
    seed : int
        Non-negative random seed.
    reference_band : str or int
        Band whose center values define the canonical label order.
    max_iter : int
        Lloyd iteration cap per start.
    init : str
        ``'forgy'`` or ``'random_partition'``.
    ddof : int
        Standard deviation convention of the normalizer (0 or 1).
    n_workers : int
        Worker threads.
    block_rows : int
        Row-block height of the full-grid assignment.
    nodata_label : int
        Label written on no-data cells of the region grid.
    """

    normalize: str = NormalizationMode.CENTER_AND_SCALE.value
    max_clusters: int = 10
    chosen_clusters: Optional[int] = None
    sample_size: int = 10000
    restarts: int = 25
    seed: int = 0
    reference_band: Union[str, int] = 0
    max_iter: int = 100
    init: str = InitMethod.FORGY.value
    ddof: int = 0
    n_workers: int = 1
    block_rows: int = 256
    nodata_label: int = 0

    def __post_init__(self) -> None:
        self.validate()

    def validate(self) -> None:
        """Check every field.

        Raises
        ------
        ConfigurationError
            On the first invalid value.
        """
        modes = tuple(m.value for m in NormalizationMode)
        if self.normalize not in modes:
            raise ConfigurationError(
                f"normalize must be one of {modes}, got {self.normalize!r}"
            )
        _require_int('max_clusters', self.max_clusters, 2)
        if self.chosen_clusters is not None:
            _require_int('chosen_clusters', self.chosen_clusters, 1)
        _require_int('sample_size', self.sample_size, 1)
        _require_int('restarts', self.restarts, 1)
        _require_int('seed', self.seed, 0)
        _require_int('max_iter', self.max_iter, 1)
        _require_int('n_workers', self.n_workers, 1)
        _require_int('block_rows', self.block_rows, 1)
        _require_int('nodata_label', self.nodata_label, None)
        inits = tuple(m.value for m in InitMethod)
        if self.init not in inits:
            raise ConfigurationError(
                f"init must be one of {inits}, got {self.init!r}"
            )
        if self.ddof not in (0, 1) or isinstance(self.ddof, bool):
            raise ConfigurationError(f"ddof must be 0 or 1, got {self.ddof!r}")
        if isinstance(self.reference_band, bool) or \
                not isinstance(self.reference_band, (str, int)):
            raise ConfigurationError(
                f"reference_band must be a band name or index, "
                f"got {self.reference_band!r}"
            )
        if isinstance(self.reference_band, int) and self.reference_band < 0:
            raise ConfigurationError(
                f"reference_band index must be >= 0, got {self.reference_band}"
            )

    @classmethod
    def from_dict(cls, values: Mapping[str, Any]) -> 'RegionalizationConfig':
        """Build a config from camelCase or snake_case keys.

        Raises
        ------
        ConfigurationError
            On unknown keys, a key given twice, or invalid values.
        """
        fields = {f.name for f in dataclasses.fields(cls)}
        kwargs: Dict[str, Any] = {}
        for key, value in values.items():
            name = _CAMEL_KEYS.get(key, key)
            if name not in fields:
                raise ConfigurationError(
                    f"unknown configuration key {key!r}; recognized keys: "
                    f"{sorted(_CAMEL_KEYS)}"
                )
            if name in kwargs:
                raise ConfigurationError(
                    f"configuration key {key!r} given more than once"
                )
            kwargs[name] = value
        return cls(**kwargs)

    def to_dict(self) -> Dict[str, Any]:
        """Snake_case field dictionary."""
        return dataclasses.asdict(self)

    def replace(self, **changes: Any) -> 'RegionalizationConfig':
        """Copy with *changes* applied (``None`` values are ignored)."""
        changes = {k: v for k, v in changes.items() if v is not None}
        return dataclasses.replace(self, **changes)


def load_config(path: Union[str, Path]) -> RegionalizationConfig:
    """Load a ``RegionalizationConfig`` from a YAML file.

    An empty file yields the defaults.

    Raises
    ------
    ConfigurationError
        If the file does not hold a mapping, or holds invalid settings.
    FileNotFoundError
        If *path* does not exist.
    """
    with open(path) as f:
        raw = yaml.safe_load(f)
    if raw is None:
        raw = {}
    if not isinstance(raw, dict):
        raise ConfigurationError(
            f"configuration file {path} must contain a mapping, "
            f"got {type(raw).__name__}"
        )
    return RegionalizationConfig.from_dict(raw)


def _require_int(name: str, value: Any, minimum: Optional[int]) -> None:
    if isinstance(value, bool) or not isinstance(value, int):
        raise ConfigurationError(
            f"{name} must be an integer, got {value!r}"
        )
    if minimum is not None and value < minimum:
        raise ConfigurationError(f"{name} must be >= {minimum}, got {value}")
