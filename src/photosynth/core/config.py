from __future__ import annotations

from dataclasses import dataclass


@dataclass
class SimulationConfig:
    """
    Central configuration for the environment store, scheduler and history window.
    """
    # Scheduler
    tick_period_seconds: float = 1.0

    # History window (chart readability)
    history_capacity: int = 50

    # Start-up / reset environment
    default_light_intensity: float = 50.0
    default_co2_level: float = 50.0
    default_water_level: float = 50.0
    default_temperature: float = 25.0

    def __post_init__(self) -> None:
        if self.tick_period_seconds <= 0:
            raise ValueError("tick_period_seconds must be > 0")
        if self.history_capacity < 1:
            raise ValueError("history_capacity must be >= 1")
