from __future__ import annotations

import logging
import shlex
import signal
import subprocess
import threading
from collections.abc import Callable, Iterator, Sequence
from contextlib import contextmanager
from pathlib import Path
from typing import Any

from .errors import Interrupted, SubprocessFailure
from .params import ParameterSet

logger = logging.getLogger("processes.batch_task")

FORWARDED_SIGNALS = (signal.SIGTERM, signal.SIGINT)

# Seconds between SIGTERM and SIGKILL when a timed-out child is torn down
KILL_GRACE_S = 10.0


def build_command(binary: str, input_path: Path, params: ParameterSet) -> list[str]:
    """Assemble ``<binary> -i <input> -s <seed> -e <explore> -c <compress>``.

    ``binary`` is split shell-style so it may carry an interpreter prefix.
    """
    argv = shlex.split(binary)
    if not argv:
        raise SubprocessFailure("Optimizer binary is empty")
    return argv + [
        "-i",
        str(input_path),
        "-s",
        params.seed,
        "-e",
        params.explore,
        "-c",
        params.compress,
    ]


def _install_forwarding(handler: Callable[[int, Any], None]) -> dict[int, Any]:
    # signal.signal only works from the main thread; elsewhere the host owns signals
    if threading.current_thread() is not threading.main_thread():
        return {}
    previous: dict[int, Any] = {}
    for sig in FORWARDED_SIGNALS:
        previous[sig] = signal.signal(sig, handler)
    return previous


def _restore(previous: dict[int, Any]) -> None:
    for sig, handler in previous.items():
        signal.signal(sig, handler)


def _terminate(proc: subprocess.Popen, grace_s: float) -> None:
    proc.terminate()
    try:
        proc.wait(timeout=grace_s)
    except subprocess.TimeoutExpired:
        logger.warning(
            "Optimizer ignored SIGTERM for %.0fs; killing pid %d", grace_s, proc.pid
        )
        proc.kill()
        proc.wait()


def run_binary(
    command: Sequence[str],
    *,
    cwd: Path,
    timeout_s: float | None = None,
    grace_s: float = KILL_GRACE_S,
) -> int:
    """Run the optimizer and block until it exits.

    stdout/stderr are inherited. SIGTERM and SIGINT delivered to the wrapper
    are forwarded to the child and the wait continues until the child exits.
    ``timeout_s=None`` waits forever. Returns 0; every other outcome raises
    SubprocessFailure.
    """
    cmd = [str(c) for c in command]
    logger.info("Running: %s (cwd=%s)", shlex.join(cmd), cwd)

    received: list[int] = []
    children: list[subprocess.Popen] = []

    def _send(proc: subprocess.Popen, signum: int) -> None:
        if proc.poll() is None:
            logger.warning(
                "Forwarding %s to optimizer pid %d",
                signal.Signals(signum).name,
                proc.pid,
            )
            proc.send_signal(signum)

    def _forward(signum: int, frame: Any) -> None:
        received.append(signum)
        # Before Popen returns there is no child yet; the signal is replayed below
        for proc in children:
            _send(proc, signum)

    # Handlers go in before the child exists so no stop signal can orphan it
    previous = _install_forwarding(_forward)
    try:
        if received:
            raise SubprocessFailure(
                f"Interrupted by {signal.Signals(received[0]).name} before launching {cmd[0]}",
                returncode=-received[0],
            )
        try:
            proc = subprocess.Popen(cmd, cwd=str(cwd))
        except OSError as e:
            raise SubprocessFailure(f"Failed to launch {cmd[0]}: {e}") from e
        children.append(proc)
        for signum in list(received):
            _send(proc, signum)
        try:
            returncode = proc.wait(timeout=timeout_s)
        except subprocess.TimeoutExpired:
            logger.error("Optimizer exceeded timeout of %ss; terminating", timeout_s)
            _terminate(proc, grace_s)
            raise SubprocessFailure(f"{cmd[0]} timed out after {timeout_s}s") from None
    finally:
        _restore(previous)

    if received:
        names = ", ".join(signal.Signals(s).name for s in received)
        raise SubprocessFailure(
            f"{cmd[0]} interrupted by {names} (exit status {returncode})",
            returncode=returncode or -received[0],
        )
    if returncode != 0:
        raise SubprocessFailure(
            f"{cmd[0]} exited with status {returncode}", returncode=returncode
        )
    return returncode


@contextmanager
def interrupt_on_signals() -> Iterator[None]:
    """Turn SIGTERM/SIGINT into an Interrupted exception for the enclosed block.

    Cleanup code (``finally``/``except BaseException``) in the block then runs
    instead of the process dying on the default action.
    """

    def _raise(signum: int, frame: Any) -> None:
        # Follow-up signals must not interrupt the cleanup path
        for sig in FORWARDED_SIGNALS:
            signal.signal(sig, signal.SIG_IGN)
        raise Interrupted(f"Interrupted by {signal.Signals(signum).name}", signum)

    previous = _install_forwarding(_raise)
    try:
        yield
    finally:
        _restore(previous)
