"""Shared error types for the apply runtime."""

from __future__ import annotations

from collections.abc import Sequence

from plansmith.manifests.models import OnFailure


class ApplyError(Exception):
    """Base error for all apply-time failures."""


class ActionNotFoundError(ApplyError):
    """The executable for an action is not on ``PATH``."""

    def __init__(self, executable: str) -> None:
        self.executable = executable
        super().__init__(f"Executable not found in PATH: {executable}")


class CommandError(ApplyError):
    """A command exited with a non-zero status or could not be started."""

    def __init__(self, command: Sequence[str], exit_code: int | None, output: str = "", detail: str = "") -> None:
        self.command = list(command)
        self.exit_code = exit_code
        self.output = output
        self.detail = detail
        msg = f"Command {' '.join(self.command)!r} failed"
        if exit_code is not None:
            msg += f" with exit code {exit_code}"
        if detail:
            msg += f": {detail}"
        super().__init__(msg)


class CommandTimeoutError(CommandError):
    """A command did not finish before the context deadline."""

    def __init__(self, command: Sequence[str], timeout: float, output: str = "") -> None:
        self.timeout = timeout
        super().__init__(command, None, output, detail=f"timed out after {timeout:.1f}s")


class PolicyError(ApplyError):
    """A bundle failure classified by its manifest's ``onFailure`` policy."""

    def __init__(self, cause: BaseException, bundle: str = "") -> None:
        self.cause = cause
        self.bundle = bundle
        msg = str(cause)
        if bundle:
            msg = f"unable to apply bundle {bundle}: {msg}"
        super().__init__(msg)


class AbortError(PolicyError):
    """The failure halts processing of the remaining bundles."""


class ContinueError(PolicyError):
    """The failure is reported and processing moves on to the next bundle."""


def wrap_failure(on_failure: OnFailure | str, cause: BaseException, *, bundle: str = "") -> PolicyError:
    """Wrap *cause* according to the ``onFailure`` policy."""
    if OnFailure(on_failure) is OnFailure.CONTINUE:
        return ContinueError(cause, bundle)
    return AbortError(cause, bundle)
