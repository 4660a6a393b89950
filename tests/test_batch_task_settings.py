from __future__ import annotations

import json
from pathlib import Path

import pytest

from processes.batch_task.errors import ConfigurationAbsent
from processes.batch_task.settings import load_settings


def test_defaults_match_container_layout() -> None:
    s = load_settings({})
    assert s.share_root == Path("/mnt/share")
    assert s.binary == "/app/sparrow"
    assert s.workdir == Path("/app")
    assert s.output_dir == Path("/app/output")
    assert s.output_glob == "*.json"
    assert s.task_index_var == "BATCH_TASK_INDEX"
    assert s.timeout_s is None


def test_config_file_then_env_precedence(tmp_path: Path) -> None:
    cfg = tmp_path / "wrapper.yaml"
    cfg.write_text(
        "share_root: /data/share\nbinary: /opt/sparrow\ntimeout_s: 900\n",
        encoding="utf-8",
    )
    s = load_settings({"SPARROW_BIN": "/usr/local/bin/sparrow"}, cfg)
    assert s.share_root == Path("/data/share")
    assert s.binary == "/usr/local/bin/sparrow"
    assert s.timeout_s == 900


def test_json_config_file(tmp_path: Path) -> None:
    cfg = tmp_path / "wrapper.json"
    cfg.write_text(json.dumps({"workdir": "/srv/app"}), encoding="utf-8")
    assert load_settings({}, cfg).output_dir == Path("/srv/app/output")


@pytest.mark.parametrize(
    ("raw", "expected"), [("12.5", 12.5), ("600", 600), ("1e3", 1000.0), ("2.5E2", 250.0)]
)
def test_timeout_from_env_is_numeric(raw: str, expected: float) -> None:
    assert load_settings({"TASK_TIMEOUT_S": raw}).timeout_s == expected


@pytest.mark.parametrize(
    "env",
    [
        {"TASK_TIMEOUT_S": "soon"},
        {"TASK_TIMEOUT_S": "0"},
        {"TASK_INDEX_VAR": "not a var"},
    ],
)
def test_invalid_env_values_are_fatal(env: dict[str, str]) -> None:
    with pytest.raises(ConfigurationAbsent):
        load_settings(env)


def test_unknown_config_key_is_fatal(tmp_path: Path) -> None:
    cfg = tmp_path / "wrapper.yaml"
    cfg.write_text("shareroot: /typo\n", encoding="utf-8")
    with pytest.raises(ConfigurationAbsent) as exc:
        load_settings({}, cfg)
    assert "shareroot" in str(exc.value)


def test_unreadable_config_is_fatal(tmp_path: Path) -> None:
    with pytest.raises(ConfigurationAbsent):
        load_settings({}, tmp_path / "missing.yaml")


def test_non_mapping_config_is_fatal(tmp_path: Path) -> None:
    cfg = tmp_path / "wrapper.yaml"
    cfg.write_text("- a\n- b\n", encoding="utf-8")
    with pytest.raises(ConfigurationAbsent):
        load_settings({}, cfg)
