import pandas as pd
import pytest

from photosynth.core.config import SimulationConfig
from photosynth.core.environment import EnvironmentState
from photosynth.core.rate_model import LimitingFactor
from photosynth.core.scheduler import SimulationStatus
from photosynth.core.simulator import RESULT_COLUMNS, EnvironmentChange, Scenario, Simulator


def test_boundary_operations_round_trip():
    sim = Simulator()
    sim.set_environment("light", 150)

    assert sim.get_environment().light_intensity == 100.0
    # light 1.0, co2 0.5 -> CO2 limited
    stats = sim.compute_stats()
    assert stats.limiting_factor == LimitingFactor.CO2
    assert sim.clock == 0
    assert sim.get_history() == ()
    assert sim.get_total_glucose() == 0.0


def test_compute_stats_does_not_advance_the_simulation():
    sim = Simulator()
    for _ in range(5):
        sim.compute_stats()
    assert sim.clock == 0
    assert len(sim.get_history()) == 0


def test_run_batch_with_optimal_environment(optimal_env):
    sim = Simulator()
    scenario = Scenario(name="optimal", initial_environment=optimal_env)
    df = sim.run_batch(51, scenario=scenario)

    assert list(df.columns) == RESULT_COLUMNS
    assert len(df) == 51
    assert df["tick"].tolist() == list(range(1, 52))
    assert (df["glucose_rate"] == 5.0).all()
    assert df["total_glucose"].iloc[-1] == pytest.approx(25.5)
    assert sim.get_total_glucose() == pytest.approx(25.5)

    history = sim.get_history()
    assert len(history) == 50
    assert history[0].timestamp == 2
    assert history[-1].timestamp == 51


def test_scenario_changes_apply_before_their_tick():
    scenario = Scenario(
        name="drought onset",
        initial_environment=EnvironmentState(light_intensity=80, co2_level=80, water_level=80, temperature=25),
        changes=[
            EnvironmentChange(tick=3, field="water", value=10),
            EnvironmentChange(tick=5, field="temperature", value=48),
        ],
    )
    df = Simulator().run_batch(6, scenario=scenario)

    assert df["limiting_factor"].tolist() == ["Light", "Light", "Water", "Water", "Temperature", "Temperature"]
    assert df.loc[df["tick"] == 3, "water_level"].item() == 10.0
    assert df.loc[df["tick"] == 5, "temperature"].item() == 48.0
    assert df["glucose_rate"].iloc[-1] == 0.0


def test_pause_and_resume_scenario():
    sim = Simulator()
    sim.run_batch(10)
    sim.pause()

    assert sim.run_batch(5).empty
    assert sim.clock == 10

    sim.resume()
    sim.run_batch(5)
    assert sim.clock == 15
    timestamps = [p.timestamp for p in sim.get_history()]
    assert timestamps == list(range(1, 16))


def test_reset_from_paused_state():
    sim = Simulator()
    sim.set_environment("co2", 5)
    sim.run_batch(4)
    sim.pause()
    sim.reset()

    assert sim.status is SimulationStatus.RUNNING
    assert sim.get_environment() == EnvironmentState()
    assert sim.get_history() == ()
    assert sim.get_total_glucose() == 0.0
    assert sim.clock == 0


def test_toggle_flips_status():
    sim = Simulator()
    assert sim.toggle() is SimulationStatus.PAUSED
    assert sim.toggle() is SimulationStatus.RUNNING


def test_run_live_is_a_generator():
    sim = Simulator()
    gen = sim.run_live(3)
    first = next(gen)
    assert first["tick"] == 1
    assert sim.clock == 1
    assert [row["tick"] for row in gen] == [2, 3]


def test_negative_ticks_rejected():
    with pytest.raises(ValueError):
        list(Simulator().run_live(-1))


def test_history_capacity_follows_config():
    sim = Simulator(config=SimulationConfig(history_capacity=5))
    sim.run_batch(8)
    assert [p.timestamp for p in sim.get_history()] == [4, 5, 6, 7, 8]


def test_export_history_writes_csv(tmp_path):
    sim = Simulator()
    sim.run_batch(3)
    path = sim.export_history(tmp_path / "out" / "history.csv")

    df = pd.read_csv(path)
    assert df.columns.tolist() == ["timestamp", "glucose", "oxygen"]
    assert df["timestamp"].tolist() == [1, 2, 3]


def test_context_manager_starts_and_stops_timer():
    with Simulator(config=SimulationConfig(tick_period_seconds=5.0)) as sim:
        assert sim.scheduler.timer_active
    assert not sim.scheduler.timer_active


def test_environment_change_validates_field():
    change = EnvironmentChange(tick=1, field="co2", value=30)
    assert change.field == "co2_level"
    assert "co2_level" in str(change)
    with pytest.raises(ValueError):
        EnvironmentChange(tick=1, field="sunshine", value=30)
