from .accumulator import Accumulator
from .config import SimulationConfig
from .environment import EnvironmentState, EnvironmentStore, FIELD_RANGES
from .errors import (
    PhotosynthError,
    InvalidEnvironmentValue,
    UnknownEnvironmentField,
    NarrationUnavailable,
)
from .history import HistoryBuffer, HistoryPoint, HISTORY_CAPACITY
from .rate_model import (
    LimitingFactor,
    ProductionStats,
    compute_stats,
    effective_co2,
    limiting_factors,
    temperature_factor,
)
from .scheduler import SimulationScheduler, SimulationStatus, TickRecord, TICK_RATE_NORMALIZATION
from .simulator import EnvironmentChange, Scenario, Simulator

__all__ = [
    "Accumulator",
    "SimulationConfig",
    "EnvironmentState",
    "EnvironmentStore",
    "FIELD_RANGES",
    "PhotosynthError",
    "InvalidEnvironmentValue",
    "UnknownEnvironmentField",
    "NarrationUnavailable",
    "HistoryBuffer",
    "HistoryPoint",
    "HISTORY_CAPACITY",
    "LimitingFactor",
    "ProductionStats",
    "compute_stats",
    "effective_co2",
    "limiting_factors",
    "temperature_factor",
    "SimulationScheduler",
    "SimulationStatus",
    "TickRecord",
    "TICK_RATE_NORMALIZATION",
    "EnvironmentChange",
    "Scenario",
    "Simulator",
]
