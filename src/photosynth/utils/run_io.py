from __future__ import annotations

from dataclasses import asdict, is_dataclass
from datetime import datetime, timezone
from enum import Enum
from importlib.metadata import PackageNotFoundError, version as pkg_version
import json
import uuid
from pathlib import Path
from typing import Any, Dict, Optional, Union


def generate_run_id() -> str:
    timestamp = datetime.now(timezone.utc).strftime("%Y%m%d-%H%M%S")
    token = uuid.uuid4().hex[:6]
    return f"{timestamp}-{token}"


def resolve_output_dir(output_dir: Optional[Union[str, Path]], run_id: str) -> Path:
    if output_dir is None:
        output_path = Path.cwd() / "results" / run_id
    else:
        output_path = Path(output_dir).expanduser()
        if not output_path.is_absolute():
            output_path = (Path.cwd() / output_path).resolve()
        else:
            output_path = output_path.resolve()
    output_path.mkdir(parents=True, exist_ok=True)
    return output_path


def _serialize_payload(payload: Any) -> Any:
    if is_dataclass(payload) and not isinstance(payload, type):
        return asdict(payload)
    if isinstance(payload, Path):
        return str(payload)
    if isinstance(payload, Enum):
        return payload.value
    return payload


def write_json(path: Path, payload: Dict[str, Any]) -> None:
    safe_payload = {key: _serialize_payload(value) for key, value in payload.items()}
    path.write_text(json.dumps(safe_payload, indent=2, sort_keys=True, default=str))


def get_package_version(package_name: str = "photosynth-live") -> str:
    try:
        return pkg_version(package_name)
    except PackageNotFoundError:
        return "unknown"
