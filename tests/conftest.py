from pathlib import Path
import sys

project_root = Path(__file__).resolve().parents[1]
src_path = project_root / "src"

if src_path.exists():
    sys.path.insert(0, str(src_path))

import pytest

from photosynth.core.environment import EnvironmentState


@pytest.fixture
def optimal_env() -> EnvironmentState:
    """Every input saturated at 25 C: glucose rate 5.0 per tick."""
    return EnvironmentState(light_intensity=100, co2_level=100, water_level=100, temperature=25)
