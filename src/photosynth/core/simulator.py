import logging
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Callable, Dict, Generator, List, Optional, Tuple, Union

import pandas as pd

from photosynth.core.accumulator import Accumulator
from photosynth.core.config import SimulationConfig
from photosynth.core.environment import EnvironmentState, EnvironmentStore, resolve_field
from photosynth.core.history import HistoryBuffer, HistoryPoint
from photosynth.core.rate_model import ProductionStats, compute_stats
from photosynth.core.scheduler import SimulationScheduler, SimulationStatus, TickRecord

logger = logging.getLogger("photosynth")

RESULT_COLUMNS = [
    "tick",
    "light_intensity",
    "co2_level",
    "water_level",
    "temperature",
    "glucose_rate",
    "oxygen_rate",
    "atp_level",
    "nadph_level",
    "limiting_factor",
    "total_glucose",
]


class EnvironmentChange:
    """A scripted slider move applied just before a given tick of a run."""
    def __init__(self, tick: int, field: str, value: float) -> None:
        """
        Args:
            tick (int): 1-based tick of the run the new value first takes effect on.
            field (str): Environment field or alias (light, co2, water, temperature).
            value (float): New value; clamped into range when applied.
        """
        self.tick = tick
        self.field = resolve_field(field)
        self.value = value

    def __str__(self) -> str:
        return f"Change(Tick: {self.tick}, Field: {self.field}, Value: {self.value})"

    def __repr__(self) -> str:
        return str(self)


@dataclass
class Scenario:
    """Named starting environment plus scripted environment changes."""
    name: str = "Unnamed Scenario"
    initial_environment: Optional[EnvironmentState] = None
    changes: List[EnvironmentChange] = field(default_factory=list)
    description: str = ""


class Simulator:
    """
    In-process photosynthesis engine.

    Wires the environment store, scheduler, history window and glucose
    accumulator together and exposes the operations presentation code needs.
    """
    def __init__(
        self,
        config: Optional[SimulationConfig] = None,
        on_tick: Optional[Callable[[TickRecord], None]] = None,
    ) -> None:
        self.config = config or SimulationConfig()
        self.environment = EnvironmentStore(config=self.config)
        self.history = HistoryBuffer(capacity=self.config.history_capacity)
        self.accumulator = Accumulator()
        self.scheduler = SimulationScheduler(
            environment=self.environment,
            history=self.history,
            accumulator=self.accumulator,
            config=self.config,
            on_tick=on_tick,
        )

    # --- Boundary operations ---

    def set_environment(self, field: str, value: Any) -> EnvironmentState:
        """Clamp and store a new value. Effective for the next tick and any compute_stats call."""
        return self.environment.set(field, value)

    def get_environment(self) -> EnvironmentState:
        return self.environment.snapshot()

    def pause(self) -> None:
        self.scheduler.pause()

    def resume(self) -> None:
        self.scheduler.resume()

    def toggle(self) -> SimulationStatus:
        return self.scheduler.toggle()

    def reset(self) -> None:
        self.scheduler.reset()

    def compute_stats(self) -> ProductionStats:
        """Tick-independent evaluation of the current environment."""
        return compute_stats(self.environment.snapshot())

    def get_history(self) -> Tuple[HistoryPoint, ...]:
        return self.history.snapshot()

    def get_total_glucose(self) -> float:
        return self.accumulator.value()

    @property
    def status(self) -> SimulationStatus:
        return self.scheduler.status

    @property
    def clock(self) -> int:
        return self.scheduler.clock

    # --- Real-time timer ---

    def start(self) -> None:
        self.scheduler.start()

    def stop(self) -> None:
        self.scheduler.stop()

    def __enter__(self) -> "Simulator":
        self.start()
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        self.stop()

    # --- Headless runs ---

    def apply_scenario_start(self, scenario: Scenario) -> None:
        if scenario.initial_environment is not None:
            self.environment.replace_state(scenario.initial_environment)

    def run_live(self, ticks: int, scenario: Optional[Scenario] = None) -> Generator[Dict[str, Any], None, None]:
        """
        Runs ``ticks`` synchronous ticks, yielding one record per tick.

        Args:
            ticks (int): Number of ticks to run.
            scenario (Optional[Scenario]): Starting environment and scripted changes.

        Yields:
            Dict[str, Any]: Environment, production statistics and running total for the tick.
        """
        if ticks < 0:
            raise ValueError("ticks must be >= 0")
        pending: List[EnvironmentChange] = []
        if scenario is not None:
            logger.info("Running scenario '%s' for %d ticks.", scenario.name, ticks)
            self.apply_scenario_start(scenario)
            pending = sorted(scenario.changes, key=lambda change: change.tick)

        for run_tick in range(1, ticks + 1):
            while pending and pending[0].tick <= run_tick:
                change = pending.pop(0)
                logger.debug("[run tick %d] Applying %s", run_tick, change)
                self.environment.set(change.field, change.value)

            record = self.scheduler.tick()
            if record is None:
                logger.warning("Simulation is paused; stopping run after %d ticks.", run_tick - 1)
                break
            yield self._record_to_row(record)

    def run_batch(self, ticks: int, scenario: Optional[Scenario] = None) -> pd.DataFrame:
        """Runs ``ticks`` synchronous ticks and returns one DataFrame row per tick."""
        logger.info("Starting batch simulation for %d ticks...", ticks)
        rows = list(self.run_live(ticks, scenario=scenario))
        results_df = pd.DataFrame(rows, columns=RESULT_COLUMNS)
        logger.info(
            "Batch simulation completed. %d records generated, total glucose %.2f.",
            len(results_df), self.get_total_glucose(),
        )
        return results_df

    def export_history(self, path: Union[str, Path]) -> Path:
        """Write the current history window to CSV."""
        output_path = Path(path)
        output_path.parent.mkdir(parents=True, exist_ok=True)
        self.history.to_dataframe().to_csv(output_path, index=False)
        return output_path

    @staticmethod
    def _record_to_row(record: TickRecord) -> Dict[str, Any]:
        return {
            "tick": record.tick,
            **record.environment.to_dict(),
            **record.stats.to_dict(),
            "total_glucose": record.total_glucose,
        }
