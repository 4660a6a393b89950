from __future__ import annotations

from collections.abc import Mapping
from pathlib import Path
from typing import Any

import yaml
from jsonschema.validators import Draft202012Validator as Validator


def load_schema(path: Path) -> dict[str, Any]:
    with path.open("r", encoding="utf-8") as f:
        schema = yaml.safe_load(f)
    Validator.check_schema(schema)
    return schema


def validate_obj(schema: dict[str, Any], obj: Mapping[str, Any]) -> None:
    Validator(schema).validate(dict(obj))


def validation_errors(schema: dict[str, Any], obj: Mapping[str, Any]) -> list[str]:
    """Return every violation as ``<json path>: <message>``, sorted by path."""
    errors = sorted(
        Validator(schema).iter_errors(dict(obj)), key=lambda e: [str(p) for p in e.absolute_path]
    )
    out: list[str] = []
    for err in errors:
        where = ".".join(str(p) for p in err.absolute_path) or "<root>"
        out.append(f"{where}: {err.message}")
    return out
