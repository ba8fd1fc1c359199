from __future__ import annotations

import logging
import threading
from dataclasses import dataclass
from enum import Enum
from typing import Callable, Optional

from photosynth.core.accumulator import Accumulator
from photosynth.core.config import SimulationConfig
from photosynth.core.environment import EnvironmentState, EnvironmentStore
from photosynth.core.history import HistoryBuffer, HistoryPoint
from photosynth.core.rate_model import ProductionStats, compute_stats

logger = logging.getLogger("photosynth")

# Per-tick glucose is rate / 10 whatever the tick period is. Model constant.
TICK_RATE_NORMALIZATION = 10.0


class SimulationStatus(Enum):
    RUNNING = "running"
    PAUSED = "paused"


@dataclass(frozen=True)
class TickRecord:
    """Everything one tick produced, handed to observers after the tick completes."""
    tick: int
    environment: EnvironmentState
    stats: ProductionStats
    total_glucose: float
    point: HistoryPoint


class SimulationScheduler:
    """
    Owns simulated time and drives one tick per fixed period while running.

    The scheduler reads the environment store at tick time and is never bound
    to a particular EnvironmentState, so environment edits take effect on the
    next tick without restarting the timer. Ticks are serialized by a lock.
    The real-time timer is a daemon thread started with ``start()``; ``tick()``
    can also be called directly for headless or test-driven stepping.
    """

    def __init__(
        self,
        environment: EnvironmentStore,
        history: Optional[HistoryBuffer] = None,
        accumulator: Optional[Accumulator] = None,
        config: Optional[SimulationConfig] = None,
        on_tick: Optional[Callable[[TickRecord], None]] = None,
    ) -> None:
        self.config = config or environment.config
        self.environment = environment
        self.history = history if history is not None else HistoryBuffer(self.config.history_capacity)
        self.accumulator = accumulator if accumulator is not None else Accumulator()
        self.on_tick = on_tick
        self.period = float(self.config.tick_period_seconds)

        self._status = SimulationStatus.RUNNING
        self._clock = 0
        self._tick_lock = threading.Lock()
        self._control_lock = threading.RLock()
        self._timer_enabled = False
        self._thread: Optional[threading.Thread] = None
        self._stop_event: Optional[threading.Event] = None

    @property
    def status(self) -> SimulationStatus:
        return self._status

    @property
    def clock(self) -> int:
        return self._clock

    @property
    def is_running(self) -> bool:
        return self._status is SimulationStatus.RUNNING

    @property
    def timer_active(self) -> bool:
        return self._thread is not None and self._thread.is_alive()

    def tick(self) -> Optional[TickRecord]:
        """
        Advance the simulation by one step.

        Returns:
            Optional[TickRecord]: The tick's outputs, or None when paused.
        """
        with self._tick_lock:
            if self._status is SimulationStatus.PAUSED:
                return None
            self._clock += 1
            env = self.environment.snapshot()
            stats = compute_stats(env)
            total = self.accumulator.add(stats.glucose_rate / TICK_RATE_NORMALIZATION)
            point = HistoryPoint(
                timestamp=self._clock,
                glucose=round(stats.glucose_rate, 2),
                oxygen=round(stats.oxygen_rate, 2),
            )
            self.history.append(point)
            record = TickRecord(
                tick=self._clock,
                environment=env,
                stats=stats,
                total_glucose=total,
                point=point,
            )
        logger.debug(
            "[tick %d] glucose=%.3f oxygen=%.3f limiting=%s total=%.3f",
            record.tick, stats.glucose_rate, stats.oxygen_rate, stats.limiting_factor, total,
        )
        if self.on_tick is not None:
            try:
                self.on_tick(record)
            except Exception as exc:
                logger.warning("on_tick callback failed at tick %d: %s", record.tick, exc)
        return record

    def pause(self) -> None:
        """Halt ticking. Any in-flight tick completes first."""
        with self._control_lock:
            with self._tick_lock:
                if self._status is SimulationStatus.PAUSED:
                    return
                self._status = SimulationStatus.PAUSED
            self._stop_timer()
            logger.info("Simulation paused at tick %d.", self._clock)

    def resume(self) -> None:
        """Restart ticking from the current clock value. Skipped time is not replayed."""
        with self._control_lock:
            with self._tick_lock:
                if self._status is SimulationStatus.RUNNING:
                    return
                self._status = SimulationStatus.RUNNING
            if self._timer_enabled:
                self._start_timer()
            logger.info("Simulation resumed at tick %d.", self._clock)

    def toggle(self) -> SimulationStatus:
        if self._status is SimulationStatus.RUNNING:
            self.pause()
        else:
            self.resume()
        return self._status

    def reset(self) -> None:
        """Restore defaults, clear history, zero the clock and total, and force RUNNING."""
        with self._control_lock:
            self._stop_timer()
            with self._tick_lock:
                self.environment.reset()
                self.history.clear()
                self._clock = 0
                self.accumulator.reset()
                self._status = SimulationStatus.RUNNING
            if self._timer_enabled:
                self._start_timer()
            logger.info("Simulation reset.")

    def start(self) -> None:
        """Enable the real-time timer. Ticks begin one period from now unless paused."""
        with self._control_lock:
            self._timer_enabled = True
            if self._status is SimulationStatus.RUNNING:
                self._start_timer()
            logger.info("Scheduler started (period %.3fs).", self.period)

    def stop(self) -> None:
        """Disable the real-time timer. Status and state are left as they are."""
        with self._control_lock:
            self._timer_enabled = False
            self._stop_timer()
            logger.info("Scheduler stopped at tick %d.", self._clock)

    def _start_timer(self) -> None:
        if self.timer_active:
            return
        stop_event = threading.Event()
        thread = threading.Thread(
            target=self._run_loop,
            args=(stop_event,),
            name="photosynth-scheduler",
            daemon=True,
        )
        self._stop_event = stop_event
        self._thread = thread
        thread.start()

    def _stop_timer(self) -> None:
        if self._stop_event is not None:
            self._stop_event.set()
        thread = self._thread
        self._thread = None
        self._stop_event = None
        # on_tick may pause or reset from inside the timer thread
        if thread is not None and thread is not threading.current_thread():
            thread.join(timeout=self.period + 1.0)

    def _run_loop(self, stop_event: threading.Event) -> None:
        while not stop_event.wait(self.period):
            self.tick()
