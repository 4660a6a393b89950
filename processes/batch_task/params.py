from __future__ import annotations

from collections.abc import Mapping

from pydantic import BaseModel, ConfigDict

# field -> (environment variable, default); values stay strings and are
# handed to the optimizer CLI untouched
PARAM_ENV: dict[str, tuple[str, str]] = {
    "seed": ("SEED", "23"),
    "explore": ("EXPLORE", "300"),
    "compress": ("COMPRESS", "200"),
}

DEFAULTS: dict[str, str] = {name: default for name, (_, default) in PARAM_ENV.items()}


class ParameterSet(BaseModel):
    model_config = ConfigDict(frozen=True)

    seed: str = DEFAULTS["seed"]
    explore: str = DEFAULTS["explore"]
    compress: str = DEFAULTS["compress"]


def resolve(env: Mapping[str, str]) -> ParameterSet:
    """Merge environment overrides over the defaults.

    A variable that is unset or empty falls back to its default; anything else
    is used verbatim. Never raises.
    """
    values: dict[str, str] = {}
    for name, (var, default) in PARAM_ENV.items():
        raw = env.get(var)
        values[name] = raw if raw else default
    return ParameterSet(**values)


def describe(params: ParameterSet) -> str:
    return (
        f"Params: seed={params.seed}, explore={params.explore}, "
        f"compress={params.compress}"
    )
