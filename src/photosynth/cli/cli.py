import typer  # type: ignore
from pathlib import Path
from typing import Any, Dict, List, Optional
from typing_extensions import Annotated
import json
import threading

import yaml

from pydantic import ValidationError
from rich.console import Console  # type: ignore # For pretty printing
from rich.table import Table  # type: ignore
from rich.panel import Panel  # type: ignore

import photosynth
from photosynth.core.environment import EnvironmentState
from photosynth.core.errors import PhotosynthError
from photosynth.core.rate_model import ProductionStats
from photosynth.core.scheduler import TickRecord
from photosynth.narration import BotanistNarrator
from photosynth.presets import get_preset, load_presets, preset_environment
from photosynth.utils.run_io import generate_run_id, get_package_version, resolve_output_dir, write_json
from photosynth.validation import (
    build_scenario,
    format_validation_error,
    load_scenario,
    load_simulation_config,
    scenario_warnings,
)


app = typer.Typer(help="PhotoSynth Live CLI - interactive photosynthesis rate simulator.")
presets_app = typer.Typer(help="Built-in environment presets.")
app.add_typer(presets_app, name="presets")

LightOption = Annotated[Optional[float], typer.Option(help="Light intensity (0-100 %)")]
Co2Option = Annotated[Optional[float], typer.Option(help="CO2 level (0-100 %)")]
WaterOption = Annotated[Optional[float], typer.Option(help="Water availability (0-100 %)")]
TemperatureOption = Annotated[Optional[float], typer.Option(help="Temperature (0-50 C)")]
PresetOption = Annotated[Optional[str], typer.Option(help="Start from a built-in preset (e.g., drought)")]


def _resolve_environment(
    console: Console,
    preset: Optional[str],
    light: Optional[float],
    co2: Optional[float],
    water: Optional[float],
    temperature: Optional[float],
) -> EnvironmentState:
    env = EnvironmentState()
    if preset:
        try:
            env = preset_environment(preset)
        except KeyError:
            console.print(f"[bold red]Error: Unknown preset '{preset}'.[/bold red]")
            raise typer.Exit(code=1)
    overrides = {"light": light, "co2": co2, "water": water, "temperature": temperature}
    for field, value in overrides.items():
        if value is not None:
            try:
                env = env.with_value(field, value)
            except PhotosynthError as e:
                console.print(f"[bold red]Error: Invalid --{field} value: {e}[/bold red]")
                raise typer.Exit(code=1)
    return env


def _stats_table(env: EnvironmentState, stats: ProductionStats) -> Table:
    table = Table(title="Production Rates", show_lines=False)
    table.add_column("Quantity", style="cyan")
    table.add_column("Value", justify="right")
    table.add_row("Light Intensity", f"{env.light_intensity:g}%")
    table.add_row("CO2 Level", f"{env.co2_level:g}%")
    table.add_row("Water Level", f"{env.water_level:g}%")
    table.add_row("Temperature", f"{env.temperature:g}°C")
    table.add_row("Glucose Rate", f"{stats.glucose_rate:.2f}")
    table.add_row("Oxygen Rate", f"{stats.oxygen_rate:.2f}")
    table.add_row("ATP / NADPH", f"{stats.atp_level:.0f}% / {stats.nadph_level:.0f}%")
    table.add_row("Efficiency", f"{stats.efficiency_percent:.0f}%")
    table.add_row("Limiting Factor", f"[bold red]{stats.limiting_factor.value}[/bold red]")
    return table


def _build_simulator(console: Console, config_path: Optional[Path]) -> photosynth.Simulator:
    if config_path is None:
        return photosynth.Simulator()
    if not config_path.is_file():
        console.print(f"[bold red]Error: Config file '{config_path}' not found.[/bold red]")
        raise typer.Exit(code=1)
    try:
        config = load_simulation_config(config_path)
    except ValidationError as e:
        console.print("[bold red]Config Errors:[/bold red]")
        for line in format_validation_error(e):
            console.print(f"- {line}")
        raise typer.Exit(code=1)
    except (ValueError, yaml.YAMLError) as e:
        console.print(f"[bold red]Error reading config {config_path}: {e}[/bold red]")
        raise typer.Exit(code=1)
    return photosynth.Simulator(config=config)


@app.command()
def stats(
    preset: PresetOption = None,
    light: LightOption = None,
    co2: Co2Option = None,
    water: WaterOption = None,
    temperature: TemperatureOption = None,
):
    """
    Evaluate the rate model once for a given environment (no ticking).
    """
    console = Console()
    env = _resolve_environment(console, preset, light, co2, water, temperature)
    console.print(_stats_table(env, photosynth.compute_stats(env)))


@app.command()
def run(
    ticks: Annotated[int, typer.Option(help="Number of ticks to simulate")] = 60,
    preset: PresetOption = None,
    scenario_path: Annotated[Optional[Path], typer.Option(help="Path to a scenario JSON/YAML file")] = None,
    config_path: Annotated[Optional[Path], typer.Option(help="Optional simulation config YAML/JSON")] = None,
    output_dir: Annotated[Optional[Path], typer.Option(help="Directory to save results")] = None,
):
    """
    Run a headless simulation as fast as possible and save the per-tick results.
    """
    console = Console()
    if ticks < 0:
        console.print("[bold red]Error: --ticks must be >= 0.[/bold red]")
        raise typer.Exit(code=1)

    if preset and scenario_path:
        console.print(
            "[bold red]Error: --preset and --scenario-path cannot be combined; "
            "a scenario sets its own initial environment.[/bold red]"
        )
        raise typer.Exit(code=1)

    simulator = _build_simulator(console, config_path)
    scenario = None
    if scenario_path:
        if not scenario_path.is_file():
            console.print(f"[bold red]Error: Scenario file '{scenario_path}' not found.[/bold red]")
            raise typer.Exit(code=1)
        try:
            scenario = build_scenario(load_scenario(scenario_path))
        except ValidationError as e:
            console.print("[bold red]Scenario Errors:[/bold red]")
            for line in format_validation_error(e):
                console.print(f"- {line}")
            raise typer.Exit(code=1)
        except (ValueError, yaml.YAMLError) as e:
            console.print(f"[bold red]Error parsing scenario file {scenario_path}: {e}[/bold red]")
            raise typer.Exit(code=1)
        console.print(f"Loaded {len(scenario.changes)} environment changes from scenario: [magenta]{scenario.name}[/magenta]")
    elif preset:
        env = _resolve_environment(console, preset, None, None, None, None)
        simulator.environment.replace_state(env)

    console.print(f"[bold blue]Starting PhotoSynth simulation for {ticks} ticks[/bold blue]")
    results_df = simulator.run_batch(ticks, scenario=scenario)

    run_id = generate_run_id()
    output_path = resolve_output_dir(output_dir, run_id)
    results_file = output_path / "simulation_results.csv"
    history_file = output_path / "history.csv"
    results_df.to_csv(results_file, index=False)
    simulator.export_history(history_file)

    summary: Dict[str, Any] = {
        "run_id": run_id,
        "version": get_package_version(),
        "ticks": int(len(results_df)),
        "total_glucose": simulator.get_total_glucose(),
        "final_environment": simulator.get_environment(),
        "final_limiting_factor": simulator.compute_stats().limiting_factor,
        "scenario": scenario.name if scenario else None,
        "preset": preset,
    }
    if len(results_df):
        summary["limiting_factor_counts"] = results_df["limiting_factor"].value_counts().to_dict()
        summary["mean_glucose_rate"] = float(results_df["glucose_rate"].mean())
    write_json(output_path / "run_summary.json", summary)

    console.print(f"\nSimulation completed. Results saved to: [link=file://{results_file}]{results_file}[/link]")
    console.print(f"Total glucose: [bold green]{simulator.get_total_glucose():.2f}g[/bold green]")
    if len(results_df):
        console.print(Panel(str(results_df.tail())))


@app.command()
def live(
    ticks: Annotated[int, typer.Option(help="Stop after this many ticks")] = 20,
    period: Annotated[float, typer.Option(help="Seconds between ticks")] = 1.0,
    preset: PresetOption = None,
):
    """
    Run the real-time scheduler and print each tick as it fires.
    """
    console = Console()
    if ticks < 1 or period <= 0:
        console.print("[bold red]Error: --ticks must be >= 1 and --period > 0.[/bold red]")
        raise typer.Exit(code=1)

    done = threading.Event()

    def _print_tick(record: TickRecord) -> None:
        console.print(
            f"[{record.tick:>4}] glucose={record.stats.glucose_rate:.2f} "
            f"oxygen={record.stats.oxygen_rate:.2f} "
            f"limiting={record.stats.limiting_factor.value} "
            f"total={record.total_glucose:.2f}g"
        )
        if record.tick >= ticks:
            done.set()

    simulator = photosynth.Simulator(config=photosynth.SimulationConfig(tick_period_seconds=period), on_tick=_print_tick)
    if preset:
        simulator.environment.replace_state(_resolve_environment(console, preset, None, None, None, None))

    console.print(f"[bold blue]Live simulation: {ticks} ticks every {period:g}s (Ctrl+C to stop)[/bold blue]")
    simulator.start()
    try:
        done.wait()
    except KeyboardInterrupt:
        console.print("[yellow]Interrupted.[/yellow]")
    finally:
        simulator.stop()
    console.print(f"Total glucose: [bold green]{simulator.get_total_glucose():.2f}g[/bold green]")


@app.command()
def validate(
    scenario_path: Annotated[Path, typer.Option(help="Path to a scenario JSON/YAML file")],
):
    """Validate a scenario file for out-of-range values and missing keys."""
    console = Console()
    if not scenario_path.is_file():
        console.print(f"[bold red]Error: Scenario file '{scenario_path}' not found.[/bold red]")
        raise typer.Exit(code=1)
    try:
        model = load_scenario(scenario_path)
    except ValidationError as e:
        console.print("[bold red]Errors:[/bold red]")
        for line in format_validation_error(e):
            console.print(f"- {line}")
        raise typer.Exit(code=1)
    except (ValueError, yaml.YAMLError) as e:
        console.print(f"[bold red]Error: Invalid scenario file - {e}[/bold red]")
        raise typer.Exit(code=1)

    warnings: List[str] = scenario_warnings(model)
    if warnings:
        console.print("[yellow]Warnings:[/yellow]")
        for warning in warnings:
            console.print(f"- {warning}")
    console.print("[green]Scenario validation passed.[/green]")


@app.command()
def narrate(
    preset: PresetOption = None,
    light: LightOption = None,
    co2: Co2Option = None,
    water: WaterOption = None,
    temperature: TemperatureOption = None,
    model: Annotated[str, typer.Option(help="Text generation model name")] = "gemini-2.5-flash",
):
    """Ask Dr. Green (AI tutor) to explain the current conditions."""
    console = Console()
    env = _resolve_environment(console, preset, light, co2, water, temperature)
    stats_now = photosynth.compute_stats(env)
    console.print(_stats_table(env, stats_now))
    result = BotanistNarrator(model=model).narrate(env, stats_now)
    style = "green" if result.ok else "yellow"
    console.print(Panel(result.text, title="Dr. Green (AI Tutor)", border_style=style))


@presets_app.command("list")
def presets_list():
    """List built-in environment presets."""
    console = Console()
    table = Table(title="Environment Presets", show_lines=False)
    table.add_column("Name", style="cyan")
    table.add_column("Description")
    table.add_column("Light", justify="right")
    table.add_column("CO2", justify="right")
    table.add_column("Water", justify="right")
    table.add_column("Temp", justify="right")
    for preset in load_presets():
        env = preset.get("environment", {})
        table.add_row(
            preset.get("name", ""),
            preset.get("description", ""),
            str(env.get("light_intensity", "")),
            str(env.get("co2_level", "")),
            str(env.get("water_level", "")),
            str(env.get("temperature", "")),
        )
    console.print(table)


@presets_app.command("show")
def presets_show(
    name: Annotated[str, typer.Option(help="Preset name (e.g., drought)")],
):
    """Show a preset definition and its production statistics."""
    console = Console()
    try:
        preset = get_preset(name)
    except KeyError:
        console.print(f"[bold red]Error: Unknown preset '{name}'.[/bold red]")
        raise typer.Exit(code=1)
    console.print_json(json.dumps(preset, indent=2))
    try:
        env = EnvironmentState.from_dict(preset["environment"])
    except (KeyError, PhotosynthError) as e:
        console.print(f"[bold red]Error: Preset '{name}' is malformed: {e}[/bold red]")
        raise typer.Exit(code=1)
    console.print(_stats_table(env, photosynth.compute_stats(env)))


def main():
    app()


if __name__ == "__main__":
    main()
