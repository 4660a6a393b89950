from __future__ import annotations

import json
from collections.abc import Mapping
from pathlib import Path
from typing import Any

import yaml
from pydantic import BaseModel, ConfigDict

from pipeline.io.validate import load_schema, validation_errors

from .collector import OUTPUT_GLOB, OUTPUT_SUBDIR
from .errors import ConfigurationAbsent
from .paths import TASK_INDEX_VAR

REPO_ROOT = Path(__file__).resolve().parents[2]
SCHEMAS_ROOT = REPO_ROOT / "pipeline" / "schemas"
SETTINGS_SCHEMA = SCHEMAS_ROOT / "batch_task_config.schema.yaml"

# Container layout: share mounted at /mnt/share, optimizer in /app
DEFAULT_SETTINGS: dict[str, Any] = {
    "share_root": "/mnt/share",
    "binary": "/app/sparrow",
    "workdir": "/app",
    "output_glob": OUTPUT_GLOB,
    "task_index_var": TASK_INDEX_VAR,
    "timeout_s": None,
}

SETTINGS_ENV: dict[str, str] = {
    "share_root": "SHARE_ROOT",
    "binary": "SPARROW_BIN",
    "workdir": "SPARROW_WORKDIR",
    "output_glob": "OUTPUT_GLOB",
    "task_index_var": "TASK_INDEX_VAR",
    "timeout_s": "TASK_TIMEOUT_S",
}


class WrapperSettings(BaseModel):
    model_config = ConfigDict(frozen=True)

    share_root: Path
    binary: str
    workdir: Path
    output_glob: str
    task_index_var: str
    timeout_s: float | None = None

    @property
    def output_dir(self) -> Path:
        return self.workdir / OUTPUT_SUBDIR


def _coerce_scalar(val: str) -> int | float | str:
    try:
        return int(val)
    except ValueError:
        pass
    try:
        # Covers "12.5" and exponent forms like "1e3"
        return float(val)
    except ValueError:
        return val


def _read_config_file(config_path: Path) -> dict[str, Any]:
    try:
        text = config_path.read_text(encoding="utf-8")
    except OSError as e:
        raise ConfigurationAbsent(f"Cannot read config {config_path}: {e}") from e
    try:
        if config_path.suffix.lower() in (".yaml", ".yml"):
            data = yaml.safe_load(text) or {}
        else:
            data = json.loads(text)
    except (yaml.YAMLError, json.JSONDecodeError) as e:
        raise ConfigurationAbsent(f"Cannot parse config {config_path}: {e}") from e
    if not isinstance(data, dict):
        raise ConfigurationAbsent(f"Config {config_path} must be a mapping")
    return dict(data)


def load_settings(
    env: Mapping[str, str],
    config_path: Path | None = None,
    schemas_root: Path | None = None,
) -> WrapperSettings:
    """Merge defaults < config file < environment and validate the result."""
    merged: dict[str, Any] = dict(DEFAULT_SETTINGS)
    if config_path is not None:
        merged.update(_read_config_file(config_path))
    for key, var in SETTINGS_ENV.items():
        raw = env.get(var)
        if raw:
            merged[key] = _coerce_scalar(raw) if key == "timeout_s" else raw

    schema = load_schema((schemas_root or SCHEMAS_ROOT) / SETTINGS_SCHEMA.name)
    errors = validation_errors(schema, merged)
    if errors:
        raise ConfigurationAbsent("Invalid wrapper settings: " + "; ".join(errors))
    return WrapperSettings(**merged)
