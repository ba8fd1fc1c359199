from __future__ import annotations

import json
from pathlib import Path
from typing import Any, Dict, List, Union

import yaml
from pydantic import ValidationError

from photosynth.core.config import SimulationConfig
from photosynth.core.environment import EnvironmentState
from photosynth.core.simulator import EnvironmentChange, Scenario
from photosynth.validation.schemas import (
    EnvironmentChangeModel,
    EnvironmentModel,
    ScenarioModel,
    SimulationConfigModel,
)


def _read_mapping(path: Union[str, Path]) -> Dict[str, Any]:
    source = Path(path)
    text = source.read_text()
    if source.suffix.lower() in {".yaml", ".yml"}:
        data = yaml.safe_load(text)
    else:
        data = json.loads(text)
    if not isinstance(data, dict):
        raise ValueError(f"{source} must contain a mapping at the top level")
    return data


def validate_scenario_dict(data: Dict[str, Any]) -> ScenarioModel:
    return ScenarioModel.model_validate(data)


def load_scenario(path: Union[str, Path]) -> ScenarioModel:
    """Load and validate a scenario from a JSON or YAML file."""
    return validate_scenario_dict(_read_mapping(path))


def scenario_warnings(model: ScenarioModel) -> List[str]:
    warnings: List[str] = []
    seen: Dict[tuple, int] = {}
    for idx, change in enumerate(model.changes):
        prefix = f"change[{idx}]"
        key = (change.tick, EnvironmentChange(change.tick, change.field, change.value).field)
        if key in seen:
            warnings.append(f"{prefix}: overrides change[{seen[key]}] for {key[1]} at tick {change.tick}")
        seen[key] = idx
        if change.field in {"temperature", "temp"} and not (0.0 < change.value < 45.0):
            warnings.append(f"{prefix}: temperature {change.value} C stops photosynthesis entirely")
    return warnings


def build_environment(model: EnvironmentModel) -> EnvironmentState:
    return EnvironmentState(**model.model_dump())


def build_changes(models: List[EnvironmentChangeModel]) -> List[EnvironmentChange]:
    return [EnvironmentChange(tick=item.tick, field=item.field, value=item.value) for item in models]


def build_scenario(model: ScenarioModel) -> Scenario:
    return Scenario(
        name=model.scenario_name,
        initial_environment=build_environment(model.initial_environment),
        changes=build_changes(model.changes),
        description=model.description or "",
    )


def validate_config_dict(data: Dict[str, Any]) -> SimulationConfigModel:
    return SimulationConfigModel.model_validate(data)


def build_simulation_config(model: SimulationConfigModel) -> SimulationConfig:
    env = model.default_environment
    return SimulationConfig(
        tick_period_seconds=model.tick_period_seconds,
        history_capacity=model.history_capacity,
        default_light_intensity=env.light_intensity,
        default_co2_level=env.co2_level,
        default_water_level=env.water_level,
        default_temperature=env.temperature,
    )


def load_simulation_config(path: Union[str, Path]) -> SimulationConfig:
    """Load a YAML/JSON simulation config file into a SimulationConfig."""
    return build_simulation_config(validate_config_dict(_read_mapping(path)))


def format_validation_error(error: ValidationError) -> List[str]:
    lines: List[str] = []
    for entry in error.errors():
        loc = ".".join(str(item) for item in entry.get("loc", []))
        msg = entry.get("msg", "Invalid value")
        lines.append(f"{loc}: {msg}")
    return lines


__all__ = [
    "EnvironmentModel",
    "EnvironmentChangeModel",
    "ScenarioModel",
    "SimulationConfigModel",
    "validate_scenario_dict",
    "load_scenario",
    "scenario_warnings",
    "build_environment",
    "build_changes",
    "build_scenario",
    "validate_config_dict",
    "build_simulation_config",
    "load_simulation_config",
    "format_validation_error",
]
