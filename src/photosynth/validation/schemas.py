from __future__ import annotations

from typing import Any, List, Literal, Optional

LATEST_SCHEMA_VERSION = "1.0"

from pydantic import BaseModel, Field, ConfigDict, field_validator, model_validator


class EnvironmentModel(BaseModel):
    model_config = ConfigDict(extra="forbid")

    light_intensity: float = Field(default=50.0, ge=0.0, le=100.0)
    co2_level: float = Field(default=50.0, ge=0.0, le=100.0)
    water_level: float = Field(default=50.0, ge=0.0, le=100.0)
    temperature: float = Field(default=25.0, ge=0.0, le=50.0)

    @model_validator(mode="before")
    @classmethod
    def _expand_aliases(cls, data: Any) -> Any:
        if isinstance(data, dict):
            aliases = {"light": "light_intensity", "co2": "co2_level", "water": "water_level", "temp": "temperature"}
            return {aliases.get(key, key): value for key, value in data.items()}
        return data


class EnvironmentChangeModel(BaseModel):
    model_config = ConfigDict(extra="forbid")

    tick: int = Field(ge=1)
    field: Literal[
        "light", "co2", "water", "temperature", "temp",
        "light_intensity", "co2_level", "water_level",
    ]
    value: float

    @model_validator(mode="after")
    def _check_range(self) -> "EnvironmentChangeModel":
        high = 50.0 if self.field in {"temperature", "temp"} else 100.0
        if not (0.0 <= self.value <= high):
            raise ValueError(f"{self.field} value must be between 0 and {high:g}")
        return self


class ScenarioModel(BaseModel):
    model_config = ConfigDict(extra="forbid")

    scenario_name: str = Field(min_length=1)
    schema_version: str = Field(default=LATEST_SCHEMA_VERSION, min_length=1)
    description: Optional[str] = None
    initial_environment: EnvironmentModel = Field(default_factory=EnvironmentModel)
    changes: List[EnvironmentChangeModel] = Field(default_factory=list)

    @field_validator("schema_version", mode="before")
    @classmethod
    def _normalize_schema_version(cls, value: Any) -> str:
        if isinstance(value, (int, float)):
            return str(value)
        if value is None:
            return LATEST_SCHEMA_VERSION
        return str(value)


class SimulationConfigModel(BaseModel):
    model_config = ConfigDict(extra="forbid")

    tick_period_seconds: float = Field(default=1.0, gt=0.0, le=60.0)
    history_capacity: int = Field(default=50, ge=1, le=10_000)
    default_environment: EnvironmentModel = Field(default_factory=EnvironmentModel)
