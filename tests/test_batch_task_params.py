from __future__ import annotations

import pytest
from pydantic import ValidationError

from processes.batch_task.params import DEFAULTS, ParameterSet, describe, resolve


def test_defaults_when_unset() -> None:
    params = resolve({})
    assert (params.seed, params.explore, params.compress) == ("23", "300", "200")
    assert params == ParameterSet()


def test_empty_value_falls_back_to_default() -> None:
    params = resolve({"SEED": "", "EXPLORE": "", "COMPRESS": ""})
    assert params.model_dump() == DEFAULTS


def test_values_are_used_verbatim() -> None:
    params = resolve({"SEED": "007", "EXPLORE": "1e3", "COMPRESS": "not-a-number"})
    assert params.seed == "007"
    assert params.explore == "1e3"
    assert params.compress == "not-a-number"


def test_partial_override() -> None:
    params = resolve({"EXPLORE": "50"})
    assert params.model_dump() == {"seed": "23", "explore": "50", "compress": "200"}


def test_unrelated_variables_are_ignored() -> None:
    params = resolve({"seed": "1", "EXPLORE_BUDGET": "2", "PATH": "/usr/bin"})
    assert params.model_dump() == DEFAULTS


def test_parameter_set_is_immutable() -> None:
    params = resolve({})
    with pytest.raises(ValidationError):
        params.seed = "1"  # type: ignore[misc]


def test_describe_lists_resolved_values() -> None:
    line = describe(resolve({"SEED": "9"}))
    assert line == "Params: seed=9, explore=300, compress=200"
