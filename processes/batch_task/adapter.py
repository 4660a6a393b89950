from __future__ import annotations

import argparse
import json
import logging
import os
import shlex
import sys
from collections.abc import Mapping, Sequence
from pathlib import Path
from typing import Any

from pipeline.io.files import sha256_of_path

from .collector import collect_result, find_outputs
from .errors import BatchTaskError, CopyFailure
from .invoker import build_command, interrupt_on_signals, run_binary
from .params import describe, resolve
from .paths import read_task_index, task_paths
from .settings import WrapperSettings, load_settings

logger = logging.getLogger("processes.batch_task")


def run_adapter(
    *,
    env: Mapping[str, str],
    settings: WrapperSettings,
    dry_run: bool = False,
) -> dict[str, Any]:
    """Run one task end to end: index -> params -> optimizer -> result.

    Each stage gates the next and any BatchTaskError aborts the run. With
    ``dry_run`` the plan is returned without launching anything.
    """
    index = read_task_index(env, settings.task_index_var)
    paths = task_paths(index, settings.share_root)
    logger.info("Processing task %s", index)

    params = resolve(env)
    logger.info(describe(params))

    command = build_command(settings.binary, paths.input_path, params)
    plan: dict[str, Any] = {
        "task_index": index,
        "input_path": str(paths.input_path),
        "result_path": str(paths.result_path),
        "params": params.model_dump(),
        "command": command,
        "output_dir": str(settings.output_dir),
    }
    if dry_run:
        return plan

    stale = find_outputs(settings.output_dir, settings.output_glob)
    if stale:
        logger.warning(
            "Output dir %s already holds %d %s file(s) before the run: %s",
            settings.output_dir,
            len(stale),
            settings.output_glob,
            ", ".join(p.name for p in stale),
        )

    # A result left by an earlier attempt must not outlive a failed rerun
    if paths.result_path.exists():
        logger.warning("Removing previous result %s before the run", paths.result_path)
        try:
            paths.result_path.unlink(missing_ok=True)
        except OSError as e:
            raise CopyFailure(
                f"Cannot remove previous result {paths.result_path}: {e}"
            ) from e

    with interrupt_on_signals():
        run_binary(command, cwd=settings.workdir, timeout_s=settings.timeout_s)
        source = collect_result(
            settings.output_dir, paths.result_path, settings.output_glob
        )
    plan.update(
        {
            "source": str(source),
            "sha256": sha256_of_path(paths.result_path),
            "bytes": paths.result_path.stat().st_size,
        }
    )
    logger.info("Done. Result saved to %s", paths.result_path)
    return plan


def _build_parser() -> argparse.ArgumentParser:
    p = argparse.ArgumentParser(
        prog="python -m processes.batch_task",
        description="Run the sparrow optimizer for one batch task index",
    )
    p.add_argument(
        "--config",
        type=Path,
        help="Optional YAML/JSON wrapper settings (environment still wins)",
    )
    p.add_argument(
        "--schemas-root",
        type=Path,
        help="Override schemas root (defaults to repo-relative pipeline/schemas)",
    )
    p.add_argument(
        "--dry-run",
        action="store_true",
        help="Print the resolved plan without running the optimizer",
    )
    p.add_argument("--verbose", action="store_true")
    return p


def main(argv: Sequence[str] | None = None) -> int:
    args = _build_parser().parse_args(argv)
    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.INFO,
        format="[batch_task] %(levelname)s %(message)s",
        stream=sys.stderr,
    )
    env = dict(os.environ)
    try:
        settings = load_settings(env, args.config, args.schemas_root)
        logger.debug("Settings: %s", settings.model_dump(mode="json"))
        result = run_adapter(env=env, settings=settings, dry_run=args.dry_run)
    except BatchTaskError as e:
        print(f"[batch_task] ✗ Error: {e}", file=sys.stderr)
        if args.verbose:
            import traceback

            traceback.print_exc()
        return e.exit_code

    if args.dry_run:
        print(f"[batch_task] Dry run: {shlex.join(result['command'])}", file=sys.stderr)
    print(json.dumps(result, sort_keys=True))
    return 0
