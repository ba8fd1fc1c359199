import logging
import threading
import time

import pytest

from photosynth.core.config import SimulationConfig
from photosynth.core.environment import EnvironmentState, EnvironmentStore
from photosynth.core.rate_model import compute_stats
from photosynth.core.scheduler import SimulationScheduler, SimulationStatus


def _scheduler(period: float = 1.0, **kwargs) -> SimulationScheduler:
    store = EnvironmentStore(config=SimulationConfig(tick_period_seconds=period))
    return SimulationScheduler(environment=store, **kwargs)


def test_initial_state_is_running_at_zero():
    scheduler = _scheduler()
    assert scheduler.status is SimulationStatus.RUNNING
    assert scheduler.clock == 0
    assert len(scheduler.history) == 0
    assert scheduler.accumulator.value() == 0.0


def test_tick_advances_clock_total_and_history():
    scheduler = _scheduler()
    record = scheduler.tick()

    assert record is not None
    assert record.tick == 1
    assert scheduler.clock == 1
    assert record.stats.glucose_rate == pytest.approx(2.5)
    assert scheduler.accumulator.value() == pytest.approx(0.25)
    point = scheduler.history.latest()
    assert point.timestamp == 1
    assert point.glucose == 2.5
    assert point.oxygen == 2.5


def test_history_points_are_rounded_to_two_decimals():
    scheduler = _scheduler()
    scheduler.environment.update(light=100, co2=100, water=100, temperature=31)
    scheduler.tick()

    expected = compute_stats(scheduler.environment.snapshot())
    point = scheduler.history.latest()
    assert point.glucose == round(expected.glucose_rate, 2)
    assert point.oxygen == round(expected.oxygen_rate, 2)


def test_fifty_one_ticks_keep_the_last_fifty(optimal_env):
    scheduler = _scheduler()
    scheduler.environment.replace_state(optimal_env)
    for _ in range(51):
        scheduler.tick()

    history = scheduler.history.snapshot()
    assert len(history) == 50
    assert history[0].timestamp == 2
    assert history[-1].timestamp == 51
    assert all(1 != p.timestamp for p in history)
    assert scheduler.accumulator.value() == pytest.approx(25.5)


def test_total_uses_environment_in_effect_at_each_tick():
    scheduler = _scheduler()
    expected = 0.0
    for light in (100, 0, 20, 60, 100):
        scheduler.environment.set("light", light)
        expected += compute_stats(scheduler.environment.snapshot()).glucose_rate / 10
        scheduler.tick()
    assert scheduler.accumulator.value() == pytest.approx(expected)


def test_pause_freezes_everything_and_resume_continues_clock():
    scheduler = _scheduler()
    for _ in range(10):
        scheduler.tick()
    scheduler.pause()
    total = scheduler.accumulator.value()

    assert scheduler.status is SimulationStatus.PAUSED
    for _ in range(3):
        assert scheduler.tick() is None
    assert scheduler.clock == 10
    assert len(scheduler.history) == 10
    assert scheduler.accumulator.value() == total

    scheduler.resume()
    for _ in range(5):
        scheduler.tick()
    assert scheduler.clock == 15
    assert [p.timestamp for p in scheduler.history] == list(range(1, 16))


def test_pause_and_resume_are_idempotent():
    scheduler = _scheduler()
    scheduler.resume()
    assert scheduler.status is SimulationStatus.RUNNING
    scheduler.pause()
    scheduler.pause()
    assert scheduler.status is SimulationStatus.PAUSED
    assert scheduler.toggle() is SimulationStatus.RUNNING
    assert scheduler.toggle() is SimulationStatus.PAUSED


@pytest.mark.parametrize("paused", [False, True])
def test_reset_restores_everything(paused):
    scheduler = _scheduler()
    scheduler.environment.update(light=5, co2=90, water=15, temperature=44)
    for _ in range(7):
        scheduler.tick()
    if paused:
        scheduler.pause()

    scheduler.reset()

    assert scheduler.environment.snapshot() == EnvironmentState(
        light_intensity=50, co2_level=50, water_level=50, temperature=25
    )
    assert len(scheduler.history) == 0
    assert scheduler.clock == 0
    assert scheduler.accumulator.value() == 0.0
    assert scheduler.status is SimulationStatus.RUNNING


def test_on_tick_receives_record_and_failures_do_not_stop_ticking(caplog):
    seen = []

    def callback(record):
        seen.append(record.tick)
        if record.tick == 2:
            raise RuntimeError("display crashed")

    scheduler = _scheduler(on_tick=callback)
    with caplog.at_level(logging.WARNING, logger="photosynth"):
        for _ in range(3):
            scheduler.tick()

    assert seen == [1, 2, 3]
    assert scheduler.clock == 3
    assert "on_tick callback failed" in caplog.text


def _wait_for(predicate, timeout: float = 3.0) -> bool:
    deadline = time.monotonic() + timeout
    while time.monotonic() < deadline:
        if predicate():
            return True
        time.sleep(0.005)
    return predicate()


def test_timer_ticks_until_paused_then_stays_frozen():
    scheduler = _scheduler(period=0.01)
    scheduler.start()
    try:
        assert _wait_for(lambda: scheduler.clock >= 3)
        scheduler.pause()
        assert not scheduler.timer_active
        frozen_clock = scheduler.clock
        frozen_total = scheduler.accumulator.value()
        frozen_len = len(scheduler.history)

        time.sleep(0.1)
        assert scheduler.clock == frozen_clock
        assert scheduler.accumulator.value() == frozen_total
        assert len(scheduler.history) == frozen_len

        scheduler.resume()
        assert scheduler.timer_active
        assert _wait_for(lambda: scheduler.clock >= frozen_clock + 2)
        timestamps = [p.timestamp for p in scheduler.history]
        assert timestamps == list(range(timestamps[0], timestamps[0] + len(timestamps)))
    finally:
        scheduler.stop()
    assert not scheduler.timer_active


def test_environment_edits_do_not_restart_timer():
    scheduler = _scheduler(period=0.01)
    scheduler.start()
    try:
        assert _wait_for(lambda: scheduler.clock >= 1)
        thread = scheduler._thread
        scheduler.environment.set("light", 0)
        scheduler.environment.set("water", 5)
        assert scheduler._thread is thread
        assert _wait_for(lambda: scheduler.history.latest().glucose == 0.0)
    finally:
        scheduler.stop()


def test_reset_while_timer_runs_restarts_from_zero():
    scheduler = _scheduler(period=0.01)
    scheduler.start()
    try:
        assert _wait_for(lambda: scheduler.clock >= 5)
        scheduler.reset()
        assert scheduler.status is SimulationStatus.RUNNING
        assert scheduler.timer_active
        assert _wait_for(lambda: scheduler.clock >= 1)
        assert scheduler.history.snapshot()[0].timestamp == 1
    finally:
        scheduler.stop()


def test_on_tick_can_pause_from_timer_thread():
    paused = threading.Event()

    def callback(record):
        if record.tick == 2:
            scheduler.pause()
            paused.set()

    scheduler = _scheduler(period=0.01, on_tick=callback)
    scheduler.start()
    try:
        assert paused.wait(timeout=3.0)
        time.sleep(0.05)
        assert scheduler.clock == 2
        assert scheduler.status is SimulationStatus.PAUSED
    finally:
        scheduler.stop()
