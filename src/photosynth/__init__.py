# src/photosynth/__init__.py

__version__ = "0.1.0"

# Core Simulation Components
from .core.config import SimulationConfig
from .core.environment import EnvironmentState, EnvironmentStore
from .core.errors import (
    PhotosynthError,
    InvalidEnvironmentValue,
    UnknownEnvironmentField,
    NarrationUnavailable,
)
from .core.rate_model import LimitingFactor, ProductionStats, compute_stats
from .core.history import HistoryBuffer, HistoryPoint
from .core.accumulator import Accumulator
from .core.scheduler import SimulationScheduler, SimulationStatus, TickRecord
from .core.simulator import EnvironmentChange, Scenario, Simulator

# Presets and scenario files
from .presets import load_presets, get_preset, preset_environment
from .validation import build_scenario, load_scenario, load_simulation_config

# Narration collaborator (optional network access)
from .narration import BotanistNarrator, NarrationResult

__all__ = [
    # Core
    "SimulationConfig",
    "EnvironmentState",
    "EnvironmentStore",
    "LimitingFactor",
    "ProductionStats",
    "compute_stats",
    "HistoryBuffer",
    "HistoryPoint",
    "Accumulator",
    "SimulationScheduler",
    "SimulationStatus",
    "TickRecord",
    "EnvironmentChange",
    "Scenario",
    "Simulator",
    # Errors
    "PhotosynthError",
    "InvalidEnvironmentValue",
    "UnknownEnvironmentField",
    "NarrationUnavailable",
    # Presets / scenarios
    "load_presets",
    "get_preset",
    "preset_environment",
    "build_scenario",
    "load_scenario",
    "load_simulation_config",
    # Narration
    "BotanistNarrator",
    "NarrationResult",
]
