from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass
from pathlib import Path

from .errors import ConfigurationAbsent

# Injected by GCP Batch into every task of a job array
TASK_INDEX_VAR = "BATCH_TASK_INDEX"

INPUT_TEMPLATE = "inputs/config_{index}.json"
RESULT_TEMPLATE = "outputs/result_{index}.json"


@dataclass(frozen=True)
class TaskPaths:
    index: str
    input_path: Path
    result_path: Path


def read_task_index(env: Mapping[str, str], var: str = TASK_INDEX_VAR) -> str:
    """Return the task index token from ``env``.

    The token is not range-checked; it only addresses files. A missing or
    blank value is fatal instead of producing ``config_.json``.
    """
    raw = env.get(var)
    index = (raw or "").strip()
    if not index:
        raise ConfigurationAbsent(
            f"Task index not set: environment variable {var} is missing or empty"
        )
    if "/" in index or "\\" in index:
        raise ConfigurationAbsent(
            f"Task index {index!r} from {var} contains a path separator"
        )
    return index


def task_paths(index: str | int, share_root: Path) -> TaskPaths:
    """Build the input/result pair for ``index`` under ``share_root`` (no I/O)."""
    token = str(index)
    return TaskPaths(
        index=token,
        input_path=share_root / INPUT_TEMPLATE.format(index=token),
        result_path=share_root / RESULT_TEMPLATE.format(index=token),
    )
