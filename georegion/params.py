# -*- coding: utf-8 -*-
"""
Tunable Parameter Annotations - Declarative constraints via typing.Annotated.

Provides constraint markers (``Range``, ``Options``, ``Desc``) used inside
``typing.Annotated`` class-body declarations on ``RegionProcessor``
subclasses, the ``ParamSpec`` introspection record, and the collection and
``__init__`` generation helpers consumed by
``RegionProcessor.__init_subclass__``.

Usage
-----
Declare tunable parameters as class-body annotations::

    from typing import Annotated
    from georegion.params import Range, Options, Desc

    class MyClusterer(RegionProcessor):
        n_clusters: Annotated[int, Range(min=1), Desc('Cluster count')] = 2
        init: Annotated[str, Options('forgy', 'random_partition')] = 'forgy'

Violations raise ``ConfigurationError`` so that bad settings surface the
same way whether they come from code, a YAML file or the command line.

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
import inspect
from typing import (
    Annotated,
    Any,
    NamedTuple,
    Optional,
    Tuple,
    Type,
    TypeVar,
    Union,
    get_origin,
    get_type_hints,
)

# GeoRegion internal
from georegion.exceptions import ConfigurationError

Number = Union[int, float]
M = TypeVar('M', bound='ParamMeta')


# =====================================================================
# Markers
# =====================================================================

class ParamMeta:
    """Base of every marker recognized inside ``Annotated[...]``."""


class Range(ParamMeta):
    """Inclusive bounds on a numeric parameter; either side may be open."""

    __slots__ = ('min', 'max')

    def __init__(self, min: Optional[Number] = None,
                 max: Optional[Number] = None) -> None:
        self.min = min
        self.max = max

    def __repr__(self) -> str:
        bounds = [f"{side}={value!r}"
                  for side, value in (('min', self.min), ('max', self.max))
                  if value is not None]
        return f"Range({', '.join(bounds)})"


class Options(ParamMeta):
    """Closed set of allowed values."""

    __slots__ = ('choices',)

    def __init__(self, *choices: Any) -> None:
        if not choices:
            raise ValueError("Options needs at least one choice")
        self.choices = choices

    def __repr__(self) -> str:
        return f"Options{self.choices!r}"


class Desc(ParamMeta):
    """One-line description shown in reprs and docs."""

    __slots__ = ('text',)

    def __init__(self, text: str) -> None:
        self.text = text

    def __repr__(self) -> str:
        return f"Desc({self.text!r})"


# =====================================================================
# ParamSpec
# =====================================================================

class ParamSpec(NamedTuple):
    """Everything known about one declared parameter.

    Attributes
    ----------
    name : str
        Keyword name.
    param_type : type
        First argument of the ``Annotated`` hint.
    default : Any
        Class-body default, ``None`` when there is none.
    has_default : bool
        Whether the class body assigned a default.
    description : str
        Text of the ``Desc`` marker, or ``''``.
    min_value, max_value : int, float or None
        ``Range`` bounds.
    choices : tuple or None
        ``Options`` values.
    """

    name: str
    param_type: type
    default: Any
    has_default: bool
    description: str
    min_value: Optional[Number]
    max_value: Optional[Number]
    choices: Optional[Tuple]

    def validate(self, value: Any) -> None:
        """Check *value* against type, bounds and choices.

        ``int`` satisfies ``float``; ``bool`` never satisfies a numeric
        type.  ``None`` passes when it is the declared default.

        Raises
        ------
        ConfigurationError
            On the first violated constraint.
        """
        if value is None and self.has_default and self.default is None:
            return

        expected = self.param_type
        if expected in (int, float) and isinstance(value, bool):
            raise ConfigurationError(
                f"Parameter '{self.name}' must be {expected.__name__}, "
                f"got bool"
            )
        accepted = (int, float) if expected is float else expected
        if expected is not object and not isinstance(value, accepted):
            raise ConfigurationError(
                f"Parameter '{self.name}' must be {expected.__name__}, "
                f"got {type(value).__name__}"
            )

        if self.min_value is not None and value < self.min_value:
            raise ConfigurationError(
                f"Parameter '{self.name}' value {value!r} is below minimum "
                f"{self.min_value!r}"
            )
        if self.max_value is not None and value > self.max_value:
            raise ConfigurationError(
                f"Parameter '{self.name}' value {value!r} is above maximum "
                f"{self.max_value!r}"
            )
        if self.choices is not None and value not in self.choices:
            raise ConfigurationError(
                f"Parameter '{self.name}' value {value!r} is not in allowed "
                f"choices {self.choices!r}"
            )


# =====================================================================
# Collection
# =====================================================================

_MISSING = object()


def _marker(metas: Tuple[ParamMeta, ...], kind: Type[M]) -> Optional[M]:
    return next((m for m in metas if isinstance(m, kind)), None)


def collect_param_specs(cls: type) -> Tuple[ParamSpec, ...]:
    """Build a ``ParamSpec`` for every marked annotation on *cls*.

    Base-class parameters come first; declaration order is kept within a
    class.  Annotations without a ``ParamMeta`` marker are skipped.

    Raises
    ------
    TypeError
        If one parameter carries both ``Range`` and ``Options``.
    """
    hints = get_type_hints(cls, include_extras=True)
    names: dict = {}
    for klass in reversed(cls.__mro__):
        for name in getattr(klass, '__annotations__', {}):
            if name in hints:
                names.setdefault(name, None)

    specs = []
    for name in names:
        hint = hints[name]
        if get_origin(hint) is not Annotated:
            continue
        metas = tuple(m for m in hint.__metadata__ if isinstance(m, ParamMeta))
        if not metas:
            continue

        bounds = _marker(metas, Range)
        options = _marker(metas, Options)
        desc = _marker(metas, Desc)
        if bounds is not None and options is not None:
            raise TypeError(
                f"Parameter '{name}' on {cls.__qualname__}: Range and "
                f"Options are mutually exclusive"
            )

        default = getattr(cls, name, _MISSING)
        specs.append(ParamSpec(
            name=name,
            param_type=hint.__origin__,
            default=None if default is _MISSING else default,
            has_default=default is not _MISSING,
            description=desc.text if desc else '',
            min_value=bounds.min if bounds else None,
            max_value=bounds.max if bounds else None,
            choices=options.choices if options else None,
        ))
    return tuple(specs)


# =====================================================================
# Generated __init__
# =====================================================================

def _make_init(specs: Tuple[ParamSpec, ...]):
    """Keyword-only ``__init__`` that validates and stores each parameter.

    ``__post_init__`` runs last when the class defines one.
    """
    known = {s.name for s in specs}

    def __init__(self, **kwargs):
        unexpected = sorted(set(kwargs) - known)
        if unexpected:
            raise TypeError(
                f"{type(self).__name__}() got unexpected keyword "
                f"arguments: {', '.join(unexpected)}"
            )
        for spec in specs:
            if spec.name in kwargs:
                value = kwargs[spec.name]
            elif spec.has_default:
                value = spec.default
            else:
                raise TypeError(
                    f"{type(self).__name__}() missing required keyword "
                    f"argument: '{spec.name}'"
                )
            spec.validate(value)
            setattr(self, spec.name, value)
        if hasattr(self, '__post_init__'):
            self.__post_init__()

    self_param = inspect.Parameter('self',
                                   inspect.Parameter.POSITIONAL_OR_KEYWORD)
    __init__.__signature__ = inspect.Signature([self_param] + [
        inspect.Parameter(
            s.name, inspect.Parameter.KEYWORD_ONLY,
            default=s.default if s.has_default else inspect.Parameter.empty,
        )
        for s in specs
    ])
    __init__.__qualname__ = '__init__'
    return __init__
