from __future__ import annotations

import shlex
import sys
from pathlib import Path

import pytest

# Ensure project root is on sys.path for package imports like `pipeline.*`
ROOT = Path(__file__).resolve().parents[1]
if str(ROOT) not in sys.path:
    sys.path.insert(0, str(ROOT))

STUB_SPARROW = Path(__file__).parent / "fixtures" / "stub_sparrow.py"

_STUB_VARS = (
    "BATCH_TASK_INDEX",
    "SEED",
    "EXPLORE",
    "COMPRESS",
    "SHARE_ROOT",
    "SPARROW_BIN",
    "SPARROW_WORKDIR",
    "OUTPUT_GLOB",
    "TASK_INDEX_VAR",
    "TASK_TIMEOUT_S",
    "STUB_ARGV_FILE",
    "STUB_OUTPUTS",
    "STUB_SLEEP_S",
    "STUB_EXIT_CODE",
)


@pytest.fixture(autouse=True)
def _clean_env(monkeypatch):
    # Host values for these would leak into the wrapper and the stub
    for var in _STUB_VARS:
        monkeypatch.delenv(var, raising=False)


@pytest.fixture
def stub_binary() -> str:
    return f"{shlex.quote(sys.executable)} {shlex.quote(str(STUB_SPARROW))}"


@pytest.fixture
def task_layout(tmp_path: Path, stub_binary: str) -> dict[str, Path | str]:
    """Share root with inputs/config_5.json and an empty optimizer workdir."""
    share = tmp_path / "share"
    (share / "inputs").mkdir(parents=True)
    (share / "outputs").mkdir(parents=True)
    (share / "inputs" / "config_5.json").write_text(
        '{"name": "swim", "items": []}', encoding="utf-8"
    )
    workdir = tmp_path / "app"
    workdir.mkdir()
    return {
        "share": share,
        "workdir": workdir,
        "binary": stub_binary,
        "argv_file": tmp_path / "argv.json",
    }
