from __future__ import annotations

import logging
import math
import numbers
import threading
from dataclasses import dataclass, asdict, fields, replace
from typing import Any, Dict, Optional, Tuple

import numpy as np

from photosynth.core.config import SimulationConfig
from photosynth.core.errors import InvalidEnvironmentValue, UnknownEnvironmentField

logger = logging.getLogger("photosynth")

# (min, max) per field
FIELD_RANGES: Dict[str, Tuple[float, float]] = {
    "light_intensity": (0.0, 100.0),
    "co2_level": (0.0, 100.0),
    "water_level": (0.0, 100.0),
    "temperature": (0.0, 50.0),
}

FIELD_ALIASES: Dict[str, str] = {
    "light": "light_intensity",
    "co2": "co2_level",
    "water": "water_level",
    "temp": "temperature",
}


def resolve_field(name: str) -> str:
    """Map a boundary alias (``light``, ``co2``...) or attribute name to the attribute name."""
    key = str(name).strip()
    key = FIELD_ALIASES.get(key, key)
    if key not in FIELD_RANGES:
        raise UnknownEnvironmentField(str(name))
    return key


def clamp_value(field: str, value: Any) -> float:
    """
    Coerce a raw write into the field's domain.

    Out-of-range numbers are clamped; anything that is not a finite real number
    (strings, None, booleans, NaN, infinities) is rejected.
    """
    key = resolve_field(field)
    if isinstance(value, bool) or not isinstance(value, numbers.Real):
        raise InvalidEnvironmentValue(key, value)
    low, high = FIELD_RANGES[key]
    try:
        as_float = float(value)
    except OverflowError:
        # integers beyond float range sit outside every field range
        as_float = low if value < low else high
    if not math.isfinite(as_float):
        raise InvalidEnvironmentValue(key, value)
    return float(np.clip(as_float, low, high))


@dataclass(frozen=True)
class EnvironmentState:
    """Immutable snapshot of the four environmental inputs."""
    light_intensity: float = 50.0  # 0-100 %
    co2_level: float = 50.0  # 0-100 %
    water_level: float = 50.0  # 0-100 %
    temperature: float = 25.0  # 0-50 Celsius

    def __post_init__(self) -> None:
        for item in fields(self):
            object.__setattr__(self, item.name, clamp_value(item.name, getattr(self, item.name)))

    @classmethod
    def from_config(cls, config: SimulationConfig) -> "EnvironmentState":
        return cls(
            light_intensity=config.default_light_intensity,
            co2_level=config.default_co2_level,
            water_level=config.default_water_level,
            temperature=config.default_temperature,
        )

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "EnvironmentState":
        return cls(**{resolve_field(key): value for key, value in data.items()})

    def with_value(self, field: str, value: Any) -> "EnvironmentState":
        key = resolve_field(field)
        return replace(self, **{key: clamp_value(key, value)})

    def to_dict(self) -> Dict[str, float]:
        return asdict(self)


class EnvironmentStore:
    """
    Owns the current EnvironmentState.

    Writers never mutate the snapshot in place: every ``set`` builds a new
    frozen state and swaps it in under a lock, so a reader (including the tick
    loop) sees either the old or the fully updated value.
    """

    def __init__(self, config: Optional[SimulationConfig] = None,
                 initial: Optional[EnvironmentState] = None) -> None:
        self.config = config or SimulationConfig()
        self._defaults = EnvironmentState.from_config(self.config)
        self._lock = threading.Lock()
        self._state = initial if initial is not None else self._defaults

    @property
    def defaults(self) -> EnvironmentState:
        return self._defaults

    def snapshot(self) -> EnvironmentState:
        return self._state

    def set(self, field: str, value: Any) -> EnvironmentState:
        """Clamp ``value`` into range for ``field`` and swap in the new snapshot."""
        key = resolve_field(field)
        clamped = clamp_value(key, value)
        with self._lock:
            self._state = replace(self._state, **{key: clamped})
            state = self._state
        if clamped != value:
            logger.debug("Clamped %s write %r to %s", key, value, clamped)
        return state

    def update(self, **changes: Any) -> EnvironmentState:
        """Apply several fields in a single swap. Nothing is written if any value is invalid."""
        clamped = {resolve_field(key): clamp_value(key, value) for key, value in changes.items()}
        with self._lock:
            self._state = replace(self._state, **clamped)
            return self._state

    def replace_state(self, state: EnvironmentState) -> EnvironmentState:
        with self._lock:
            self._state = state
            return self._state

    def reset(self) -> EnvironmentState:
        return self.replace_state(self._defaults)
