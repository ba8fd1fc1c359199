"""
Photosynthesis rate model.

A deliberately simple, deterministic model for teaching: the glucose rate is set
by the scarcest input (Liebig's Law of the Minimum), oxygen follows the light
reactions, and ATP/NADPH act as visual proxies for energy-carrier build-up.
It is not intended to be biochemically accurate.
"""
from __future__ import annotations

from dataclasses import dataclass, asdict
from enum import Enum
from typing import Any, Dict, List, Tuple

import numpy as np

from photosynth.core.environment import EnvironmentState

TEMPERATURE_PEAK = 25.0
TEMPERATURE_SPREAD = 15.0
# Enzymes only work inside the open interval (min, max) in Celsius.
VIABLE_TEMPERATURE_WINDOW = (0.0, 45.0)
# Below this normalized water level the stomata start closing.
STOMATAL_CLOSURE_THRESHOLD = 0.2
RATE_MULTIPLIER = 5.0
# Larger than any normalized factor.
MINIMUM_SENTINEL = 2.0


class LimitingFactor(str, Enum):
    LIGHT = "Light"
    CO2 = "CO2"
    WATER = "Water"
    TEMPERATURE = "Temperature"
    # Only the scan's starting label; no in-range environment yields it.
    NONE = "None"

    def __str__(self) -> str:
        return self.value


@dataclass(frozen=True)
class ProductionStats:
    glucose_rate: float  # arbitrary units per tick
    oxygen_rate: float  # arbitrary units per tick
    atp_level: float  # 0-100 %
    nadph_level: float  # 0-100 %, tracks atp_level
    limiting_factor: LimitingFactor

    @property
    def efficiency_percent(self) -> float:
        """Glucose rate as a share of the maximum possible rate (5.0 -> 100%)."""
        return self.glucose_rate * 20.0

    def to_dict(self) -> Dict[str, Any]:
        data = asdict(self)
        data["limiting_factor"] = self.limiting_factor.value
        return data


def temperature_factor(temperature: float) -> float:
    """Gaussian enzyme activity centred on 25 C; zero outside the viable window."""
    low, high = VIABLE_TEMPERATURE_WINDOW
    if not (low < temperature < high):
        return 0.0
    return float(np.exp(-((temperature - TEMPERATURE_PEAK) ** 2) / (2 * TEMPERATURE_SPREAD ** 2)))


def effective_co2(co2: float, water: float) -> float:
    """
    CO2 actually available to the Calvin cycle given normalized ``co2`` and ``water``.

    Water stress closes the stomata; below the threshold uptake scales with
    ``water * 5`` so the curve stays continuous at the boundary.
    """
    if water > STOMATAL_CLOSURE_THRESHOLD:
        return co2
    return co2 * water * 5


def limiting_factors(env: EnvironmentState) -> List[Tuple[LimitingFactor, float]]:
    """Normalized factors in scan order: Light, CO2 (effective), Temperature, Water."""
    light = env.light_intensity / 100
    co2 = env.co2_level / 100
    water = env.water_level / 100
    return [
        (LimitingFactor.LIGHT, light),
        (LimitingFactor.CO2, effective_co2(co2, water)),
        (LimitingFactor.TEMPERATURE, temperature_factor(env.temperature)),
        (LimitingFactor.WATER, water),
    ]


def compute_stats(env: EnvironmentState) -> ProductionStats:
    """
    Map an environment snapshot to production statistics.

    Pure and side-effect free, so it can be called off-tick for live previews.

    Args:
        env (EnvironmentState): Range-checked environment snapshot.

    Returns:
        ProductionStats: Rates, energy-carrier proxies and the limiting factor.
    """
    light = env.light_intensity / 100
    co2 = env.co2_level / 100
    water = env.water_level / 100
    factors = limiting_factors(env)
    temp_factor = factors[2][1]

    # Strict '<' keeps the earlier factor on ties.
    min_val = MINIMUM_SENTINEL
    limiting = LimitingFactor.NONE
    for name, value in factors:
        if value < min_val:
            min_val = value
            limiting = name

    glucose_rate = min_val * RATE_MULTIPLIER
    # Oxygen comes from water splitting in the light reactions.
    oxygen_rate = min(light, water) * temp_factor * RATE_MULTIPLIER

    if light > co2:
        # Calvin cycle is the bottleneck, carriers stockpile
        atp_level = min(100.0, 50 + (light - co2) * 50)
    else:
        atp_level = min(100.0, light * 100)

    return ProductionStats(
        glucose_rate=float(glucose_rate),
        oxygen_rate=float(oxygen_rate),
        atp_level=float(atp_level),
        nadph_level=float(atp_level),
        limiting_factor=limiting,
    )
