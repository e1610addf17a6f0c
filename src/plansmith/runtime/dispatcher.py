"""ActionDispatcher — maps a manifest's action to the runner that executes it.

``cmd`` runs through the shell; ``kubectl``, ``helm``, ``task`` and
``cribctl`` have dedicated entries; every other action falls back to
locating an executable of the same name on ``PATH``. In dry-run mode every
action is routed to :class:`EchoRunner`.
"""

from __future__ import annotations

import asyncio
import logging
from collections.abc import Callable, Mapping
from typing import IO, TYPE_CHECKING

from plansmith.manifests.models import Action
from plansmith.runtime.runners import ActionRunner, EchoRunner, ExecutableRunner, ShellRunner
from plansmith.utils.telemetry import ATTR_ACTION, ATTR_DRY_RUN, ATTR_EXIT_CODE, ATTR_ON_FAILURE, get_tracer

if TYPE_CHECKING:
    from plansmith.core.context import ApplyContext
    from plansmith.manifests.models import ClientSideApplyManifest
    from plansmith.runtime.models import RunnerResult

logger = logging.getLogger(__name__)
_tracer = get_tracer(__name__)

RunnerFactory = Callable[[str], ActionRunner]


class ActionDispatcher:
    """Selects and runs an :class:`ActionRunner` per manifest.

    Dispatches are serialized: one action runs at a time per dispatcher.
    """

    def __init__(
        self,
        *,
        dry_run: bool = False,
        echo_stream: IO[str] | None = None,
        env: Mapping[str, str] | None = None,
        mirror: bool = True,
    ) -> None:
        self._dry_run = dry_run
        self._echo_stream = echo_stream
        self._env = dict(env or {})
        self._mirror = mirror
        self._lock = asyncio.Lock()
        self._factories: dict[str, RunnerFactory] = {
            Action.CMD.value: lambda _action: ShellRunner(env=self._env, mirror=self._mirror),
            Action.KUBECTL.value: self._executable,
            Action.HELM.value: self._executable,
            Action.TASK.value: self._executable,
            Action.CRIBCTL.value: self._executable,
        }

    @property
    def dry_run(self) -> bool:
        return self._dry_run

    def register(self, action: Action | str, factory: RunnerFactory) -> None:
        """Route *action* to runners built by *factory*, replacing any entry."""
        key = action.value if isinstance(action, Action) else action
        self._factories[key] = factory

    def runner_for(self, manifest: ClientSideApplyManifest) -> ActionRunner:
        """Build the runner for *manifest*.

        Raises:
            ActionNotFoundError: The fallback executable is not on ``PATH``.
        """
        if self._dry_run:
            return EchoRunner(self._echo_stream)
        action = manifest.spec.action.value
        factory = self._factories.get(action, self._executable)
        return factory(action)

    async def dispatch(self, ctx: ApplyContext, manifest: ClientSideApplyManifest) -> RunnerResult:
        """Run *manifest* with its runner, one dispatch at a time."""
        async with self._lock:
            with _tracer.start_as_current_span("plansmith.action.dispatch") as span:
                span.set_attribute(ATTR_ACTION, manifest.spec.action.value)
                span.set_attribute(ATTR_ON_FAILURE, manifest.spec.on_failure.value)
                span.set_attribute(ATTR_DRY_RUN, self._dry_run)
                runner = self.runner_for(manifest)
                result = await runner.execute(ctx, manifest)
                span.set_attribute(ATTR_EXIT_CODE, result.exit_code)
                return result

    def _executable(self, action: str) -> ActionRunner:
        return ExecutableRunner(action, env=self._env, mirror=self._mirror)
