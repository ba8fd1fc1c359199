from __future__ import annotations

import logging
import time
from pathlib import Path

import photosynth


def main() -> None:
    logging.basicConfig(level=logging.INFO, format="%(asctime)s %(name)s %(levelname)s %(message)s")
    output_root = Path("results/demo_flow")
    output_root.mkdir(parents=True, exist_ok=True)

    # 1. Headless scenario run
    scenario_path = Path(__file__).parent / "scenarios" / "drought_onset.json"
    scenario = photosynth.build_scenario(photosynth.load_scenario(scenario_path))
    simulator = photosynth.Simulator()
    results_df = simulator.run_batch(60, scenario=scenario)
    results_df.to_csv(output_root / "drought_onset.csv", index=False)
    print(results_df.groupby("limiting_factor")["glucose_rate"].describe())
    print(f"Total glucose after 60 ticks: {simulator.get_total_glucose():.2f}g")

    # 2. Real-time loop with slider moves and a pause
    config = photosynth.SimulationConfig(tick_period_seconds=0.2)
    live = photosynth.Simulator(
        config=config,
        on_tick=lambda record: print(
            f"tick {record.tick:>3}: glucose {record.stats.glucose_rate:.2f} "
            f"({record.stats.limiting_factor.value})"
        ),
    )
    with live:
        time.sleep(1.0)
        live.set_environment("light", 100)
        live.set_environment("co2", 100)
        time.sleep(1.0)
        live.pause()
        time.sleep(0.5)
        live.resume()
        time.sleep(1.0)
    live.export_history(output_root / "history.csv")

    # 3. Ask the tutor (needs GEMINI_API_KEY; prints a fallback message otherwise)
    narration = photosynth.BotanistNarrator().narrate(live.get_environment(), live.compute_stats())
    print(f"Dr. Green: {narration.text}")


if __name__ == "__main__":
    main()
