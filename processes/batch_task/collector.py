from __future__ import annotations

import logging
from pathlib import Path

from pipeline.io.files import copy_atomic

from .errors import CopyFailure, ResultAmbiguity

logger = logging.getLogger("processes.batch_task")

# The optimizer writes into "output/" relative to its working directory
OUTPUT_SUBDIR = "output"
OUTPUT_GLOB = "*.json"


def find_outputs(output_dir: Path, pattern: str = OUTPUT_GLOB) -> list[Path]:
    if not output_dir.is_dir():
        return []
    return sorted(p for p in output_dir.glob(pattern) if p.is_file())


def collect_result(
    output_dir: Path, result_path: Path, pattern: str = OUTPUT_GLOB
) -> Path:
    """Copy the single artifact matching ``pattern`` to ``result_path``.

    Zero or several matches raise ResultAmbiguity and nothing is written.
    The copy is atomic; an OS error raises CopyFailure.
    """
    matches = find_outputs(output_dir, pattern)
    if len(matches) != 1:
        names = [p.name for p in matches]
        if matches:
            detail = f"{len(matches)} candidates: {', '.join(names)}"
        else:
            detail = "no candidates"
        raise ResultAmbiguity(
            f"Expected exactly one {pattern} in {output_dir}, found {detail}",
            candidates=[str(p) for p in matches],
        )

    source = matches[0]
    try:
        copy_atomic(source, result_path)
    except OSError as e:
        raise CopyFailure(f"Copy {source} -> {result_path} failed: {e}") from e
    logger.info("Copied %s -> %s", source, result_path)
    return source
