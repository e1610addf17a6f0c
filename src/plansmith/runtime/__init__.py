"""Apply runtime — action runners and dispatch."""

from plansmith.runtime.dispatcher import ActionDispatcher, RunnerFactory
from plansmith.runtime.errors import (
    AbortError,
    ActionNotFoundError,
    ApplyError,
    CommandError,
    CommandTimeoutError,
    ContinueError,
    PolicyError,
    wrap_failure,
)
from plansmith.runtime.models import RunnerResult
from plansmith.runtime.runners import ActionRunner, EchoRunner, ExecutableRunner, ShellRunner, run_command

__all__ = [
    "AbortError",
    "ActionDispatcher",
    "ActionNotFoundError",
    "ActionRunner",
    "ApplyError",
    "CommandError",
    "CommandTimeoutError",
    "ContinueError",
    "EchoRunner",
    "ExecutableRunner",
    "PolicyError",
    "RunnerFactory",
    "RunnerResult",
    "ShellRunner",
    "run_command",
    "wrap_failure",
]
