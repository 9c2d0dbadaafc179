"""Live-tunable flocking parameters.

Each parameter is a scalar kept inside its ``[min, max]`` range. Writes are
clamped, never rejected. The simulation reads a frozen :class:`FlockingParams`
taken once at the start of every tick, so a write that lands mid-tick is only
seen on the next one.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Dict, Iterator, Mapping

from ..utils.math2d import _clamp_value
from .config import PARAMETER_NAMES, ParameterConfig

logger = logging.getLogger(__name__)


class UnknownParameterError(KeyError):
    pass


@dataclass(slots=True)
class Parameter:
    name: str
    min: float
    max: float
    value: float

    @property
    def fraction(self) -> float:
        span = self.max - self.min
        if span <= 0.0:
            return 0.0
        return (self.value - self.min) / span


@dataclass(frozen=True, slots=True)
class FlockingParams:
    cohesion_range: float
    cohesion_strength: float
    separation_range: float
    separation_strength: float
    alignment_range: float
    alignment_strength: float


class ParameterSet:
    def __init__(self, definitions: Mapping[str, ParameterConfig]):
        self._params: Dict[str, Parameter] = {}
        for name in PARAMETER_NAMES:
            definition = definitions[name]
            start = definition.midpoint if definition.initial is None else definition.initial
            self._params[name] = Parameter(
                name=name,
                min=definition.min,
                max=definition.max,
                value=_clamp_value(start, definition.min, definition.max),
            )
        self._dirty = True

    def get(self, name: str) -> float:
        return self._lookup(name).value

    def set(self, name: str, value: float) -> float:
        param = self._lookup(name)
        clamped = _clamp_value(float(value), param.min, param.max)
        if clamped != value:
            logger.debug("Clamped %s=%r into [%s, %s]", name, value, param.min, param.max)
        if clamped != param.value:
            logger.info("Parameter %s changed %.6g -> %.6g", name, param.value, clamped)
            param.value = clamped
            self._dirty = True
        return clamped

    def set_fraction(self, name: str, fraction: float) -> float:
        """Set a parameter from a slider position, 0.0 being ``min`` and 1.0 ``max``."""
        param = self._lookup(name)
        return self.set(name, fraction * (param.max - param.min) + param.min)

    def snapshot(self) -> FlockingParams:
        return FlockingParams(**{name: param.value for name, param in self._params.items()})

    def as_dict(self) -> Dict[str, Dict[str, float]]:
        return {
            name: {"min": param.min, "max": param.max, "value": param.value, "fraction": param.fraction}
            for name, param in self._params.items()
        }

    @property
    def dirty(self) -> bool:
        return self._dirty

    def consume_dirty(self) -> bool:
        dirty = self._dirty
        self._dirty = False
        return dirty

    def __iter__(self) -> Iterator[str]:
        return iter(self._params)

    def __contains__(self, name: object) -> bool:
        return name in self._params

    def _lookup(self, name: str) -> Parameter:
        try:
            return self._params[name]
        except KeyError:
            raise UnknownParameterError(name) from None
