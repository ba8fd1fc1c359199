import json

from photosynth.core.environment import EnvironmentState
from photosynth.core.rate_model import LimitingFactor
from photosynth.utils.run_io import generate_run_id, get_package_version, resolve_output_dir, write_json


def test_unknown_distribution_reports_unknown_version():
    assert get_package_version("photosynth-live-not-installed") == "unknown"


def test_resolve_output_dir_creates_directory(tmp_path):
    path = resolve_output_dir(tmp_path / "runs" / "a", generate_run_id())
    assert path.is_dir()


def test_write_json_serializes_dataclasses_and_enums(tmp_path):
    out = tmp_path / "summary.json"
    write_json(out, {"env": EnvironmentState(), "factor": LimitingFactor.WATER, "path": tmp_path})

    data = json.loads(out.read_text())
    assert data["env"]["light_intensity"] == 50.0
    assert data["factor"] == "Water"
    assert data["path"] == str(tmp_path)
