"""Action runners — execute local-execution manifests on the host.

Every runner satisfies :class:`ActionRunner`. Command output (stdout and
stderr) is captured into :attr:`RunnerResult.output` and mirrored live to
the process's own streams while the command runs.
"""

from __future__ import annotations

import asyncio
import codecs
import contextlib
import logging
import os
import shutil
import sys
from collections.abc import Mapping, Sequence
from typing import IO, TYPE_CHECKING, Protocol, runtime_checkable

from plansmith.manifests.models import Action
from plansmith.runtime.errors import ActionNotFoundError, CommandError, CommandTimeoutError
from plansmith.runtime.models import RunnerResult

if TYPE_CHECKING:
    from plansmith.core.context import ApplyContext
    from plansmith.manifests.models import ClientSideApplyManifest

logger = logging.getLogger(__name__)

DEFAULT_SHELL = "/bin/bash"
_CHUNK_SIZE = 4096


@runtime_checkable
class ActionRunner(Protocol):
    """Executes one local-execution manifest."""

    async def execute(self, ctx: ApplyContext, manifest: ClientSideApplyManifest) -> RunnerResult:
        """Run the manifest's action and return its captured output."""
        ...


async def run_command(
    ctx: ApplyContext,
    command: Sequence[str],
    *,
    action: str,
    env: Mapping[str, str] | None = None,
    mirror: bool = True,
) -> RunnerResult:
    """Run *command*, capturing and mirroring its output.

    The context deadline bounds the run; task cancellation kills the process.

    Raises:
        CommandError: The process could not start or exited non-zero.
        CommandTimeoutError: The context deadline passed first.
    """
    command = list(command)
    timeout = ctx.remaining()
    if timeout is not None and timeout <= 0:
        raise CommandTimeoutError(command, 0.0)

    try:
        proc = await asyncio.create_subprocess_exec(
            *command,
            stdout=asyncio.subprocess.PIPE,
            stderr=asyncio.subprocess.PIPE,
            env={**os.environ, **env} if env else None,
        )
    except OSError as exc:
        raise CommandError(command, None, detail=str(exc)) from exc

    chunks: list[str] = []

    async def pump(stream: asyncio.StreamReader | None, target: str) -> None:
        if stream is None:
            return
        decoder = codecs.getincrementaldecoder("utf-8")(errors="replace")
        while chunk := await stream.read(_CHUNK_SIZE):
            text = decoder.decode(chunk)
            chunks.append(text)
            if mirror:
                _mirror(target, text)
        tail = decoder.decode(b"", final=True)
        if tail:
            chunks.append(tail)
            if mirror:
                _mirror(target, tail)

    async def communicate() -> int:
        await asyncio.gather(pump(proc.stdout, "stdout"), pump(proc.stderr, "stderr"))
        return await proc.wait()

    try:
        exit_code = await asyncio.wait_for(communicate(), timeout=timeout)
    except TimeoutError:
        _kill(proc)
        await proc.wait()
        raise CommandTimeoutError(command, timeout or 0.0, "".join(chunks)) from None
    except asyncio.CancelledError:
        _kill(proc)
        raise

    output = "".join(chunks)
    if exit_code != 0:
        raise CommandError(command, exit_code, output)
    return RunnerResult(action=action, command=command, exit_code=exit_code, output=output)


class ShellRunner:
    """Runs ``cmd`` manifests through ``bash -c``.

    The arguments are joined with spaces into one script. For any action
    other than ``cmd`` the action name is used as the first word.
    """

    def __init__(
        self,
        *,
        shell: str = DEFAULT_SHELL,
        env: Mapping[str, str] | None = None,
        mirror: bool = True,
    ) -> None:
        self._shell = shell
        self._env = dict(env or {})
        self._mirror = mirror

    def command(self, manifest: ClientSideApplyManifest) -> list[str]:
        action = manifest.spec.action.value
        words = [] if action == Action.CMD.value else [action]
        words.extend(manifest.spec.args)
        return [self._shell, "-c", " ".join(w for w in words if w)]

    async def execute(self, ctx: ApplyContext, manifest: ClientSideApplyManifest) -> RunnerResult:
        logger.info("Executing %s", manifest.spec.action.value)
        return await run_command(
            ctx,
            self.command(manifest),
            action=manifest.spec.action.value,
            env=self._env,
            mirror=self._mirror,
        )


class ExecutableRunner:
    """Locates an executable on ``PATH`` and invokes it with the manifest args.

    Raises:
        ActionNotFoundError: On construction, if the executable is missing.
    """

    def __init__(
        self,
        executable: str,
        *,
        search_path: str | None = None,
        env: Mapping[str, str] | None = None,
        mirror: bool = True,
    ) -> None:
        resolved = shutil.which(executable, path=search_path)
        if resolved is None:
            raise ActionNotFoundError(executable)
        self.executable = resolved
        self._env = dict(env or {})
        self._mirror = mirror

    def command(self, manifest: ClientSideApplyManifest) -> list[str]:
        return [self.executable, *manifest.spec.args]

    async def execute(self, ctx: ApplyContext, manifest: ClientSideApplyManifest) -> RunnerResult:
        logger.info("Executing %s", manifest.spec.action.value)
        return await run_command(
            ctx,
            self.command(manifest),
            action=manifest.spec.action.value,
            env=self._env,
            mirror=self._mirror,
        )


class EchoRunner:
    """Renders the manifest instead of running it (dry run)."""

    def __init__(self, stream: IO[str] | None = None) -> None:
        self._stream = stream

    def render(self, manifest: ClientSideApplyManifest) -> str:
        lines = [
            "ClientSideApply:",
            f"  OnFailure: {manifest.spec.on_failure.value}",
            f"  Action: {manifest.spec.action.value}",
            "  Args:",
            *(f"    - {arg}" for arg in manifest.spec.args),
        ]
        return "\n".join(lines) + "\n"

    async def execute(self, ctx: ApplyContext, manifest: ClientSideApplyManifest) -> RunnerResult:
        output = self.render(manifest)
        stream = self._stream or sys.stdout
        stream.write(output)
        stream.flush()
        return RunnerResult(action=manifest.spec.action.value, output=output)


def _mirror(target: str, text: str) -> None:
    stream = sys.stdout if target == "stdout" else sys.stderr
    stream.write(text)
    stream.flush()


def _kill(proc: asyncio.subprocess.Process) -> None:
    with contextlib.suppress(ProcessLookupError):
        proc.kill()
