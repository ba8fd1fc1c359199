"""Built-in environment presets."""

from __future__ import annotations

import json
from importlib.resources import files
from typing import Any, Dict, List

from photosynth.core.environment import EnvironmentState


def load_presets() -> List[Dict[str, Any]]:
    content = files("photosynth.presets").joinpath("presets.json").read_text()
    return json.loads(content)


def get_preset(name: str) -> Dict[str, Any]:
    presets = load_presets()
    for preset in presets:
        if preset.get("name") == name:
            return preset
    raise KeyError(name)


def preset_environment(name: str) -> EnvironmentState:
    return EnvironmentState.from_dict(get_preset(name)["environment"])


__all__ = ["load_presets", "get_preset", "preset_environment"]
