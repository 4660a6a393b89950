from __future__ import annotations


class BatchTaskError(Exception):
    """Base class for fatal wrapper errors; ``exit_code`` is what main() returns."""

    exit_code = 1


class ConfigurationAbsent(BatchTaskError):
    exit_code = 2


class SubprocessFailure(BatchTaskError):
    exit_code = 3

    def __init__(self, message: str, returncode: int | None = None) -> None:
        super().__init__(message)
        self.returncode = returncode
        # Surface the child's own status when it fits in a process exit code
        if returncode is not None and 0 < returncode < 256:
            self.exit_code = returncode
        elif returncode is not None and returncode < 0:
            # Killed by signal N: shell convention 128 + N
            self.exit_code = 128 - returncode


class ResultAmbiguity(BatchTaskError):
    exit_code = 4

    def __init__(self, message: str, candidates: list[str] | None = None) -> None:
        super().__init__(message)
        self.candidates = list(candidates or [])


class CopyFailure(BatchTaskError):
    exit_code = 5


class Interrupted(BatchTaskError):
    """Stop signal received outside the optimizer run (e.g. while copying)."""

    def __init__(self, message: str, signum: int) -> None:
        super().__init__(message)
        self.signum = signum
        self.exit_code = 128 + signum
