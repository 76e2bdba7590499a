# -*- coding: utf-8 -*-
"""
Processor Base Class - Common machinery for GeoRegion processing steps.

Defines ``RegionProcessor``, the base of the normalizer, clusterer, elbow
sweep and classifier.  It provides ``typing.Annotated``-based tunable
parameter declarations with automatic ``__init__`` generation, runtime
override resolution through ``**kwargs``, a version check at first
instantiation, and optional progress reporting.

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
from abc import ABC
from typing import Any, Dict, Tuple

# GeoRegion internal
from georegion.params import ParamSpec, collect_param_specs, _make_init

logger = logging.getLogger(__name__)


class RegionProcessor(ABC):
    """
    Base class of every GeoRegion processing step.

    Subclasses declare their settings as ``Annotated`` class attributes
    (markers from :mod:`georegion.params`).  On subclass creation those
    declarations become ``__param_specs__`` and, unless the subclass
    writes its own, a validating keyword-only ``__init__``.  Each public
    method then calls ``_resolve_params(kwargs)`` so that any setting can
    be overridden for a single call.

    A concrete subclass without ``@processor_version`` emits one
    ``UserWarning`` the first time it is instantiated.
    """

    __param_specs__: Tuple[ParamSpec, ...] = ()

    _unversioned_checked: set = set()

    def __init_subclass__(cls, **kwargs: Any) -> None:
        super().__init_subclass__(**kwargs)
        specs = collect_param_specs(cls)
        cls.__param_specs__ = specs
        if specs and '__init__' not in vars(cls):
            cls.__init__ = _make_init(specs)

    def __new__(cls, *args: Any, **kwargs: Any) -> 'RegionProcessor':
        cls._check_version()
        logger.debug("Instantiating %s", cls.__qualname__)
        return super().__new__(cls)

    @classmethod
    def _check_version(cls) -> None:
        if cls in RegionProcessor._unversioned_checked:
            return
        RegionProcessor._unversioned_checked.add(cls)
        if getattr(cls, '__abstractmethods__', None):
            return
        if not getattr(cls, '__processor_version__', None):
            warnings.warn(
                f"{cls.__qualname__} declares no processor version; "
                f"decorate it with @processor_version('x.y.z').",
                UserWarning,
                stacklevel=3,
            )

    @property
    def params(self) -> Dict[str, Any]:
        """``{name: value}`` of every declared parameter on this instance."""
        return {s.name: getattr(self, s.name)
                for s in type(self).__param_specs__}

    def _resolve_params(self, kwargs: Dict[str, Any]) -> Dict[str, Any]:
        """Instance settings with per-call *kwargs* overrides, validated.

        Keys that are not declared parameters (``progress_callback`` for
        instance) are ignored.

        Raises
        ------
        ConfigurationError
            If an override is invalid.
        """
        resolved = self.params
        for spec in type(self).__param_specs__:
            if spec.name in kwargs:
                resolved[spec.name] = kwargs[spec.name]
            spec.validate(resolved[spec.name])
        return resolved

    def _report_progress(
        self, kwargs: Dict[str, Any], fraction: float
    ) -> None:
        """Forward *fraction* to ``kwargs['progress_callback']`` if given."""
        callback = kwargs.get('progress_callback')
        if callback is not None:
            callback(float(fraction))

    def __repr__(self) -> str:
        settings = ', '.join(f"{k}={v!r}" for k, v in self.params.items())
        return f"{type(self).__name__}({settings})"
