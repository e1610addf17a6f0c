"""PlanService — constructs, synthesizes, and applies plans.

Typical use::

    service = PlanService(settings=Settings.from_env())
    app_plan = await service.create_plan(ctx, plan)   # components run, manifests written
    state = await app_plan.apply(ctx)                 # bundles discovered and applied

Construction runs on the synthesis worker so that no two plans mutate a
construct tree at the same time. Construction failures are collected and
raised together before anything is written or dispatched.
"""

from __future__ import annotations

import logging
import shutil
import tempfile
from pathlib import Path
from typing import TYPE_CHECKING

from plansmith.core.constructs import App, Chart, default_worker
from plansmith.core.context import ApplyContext
from plansmith.core.identity import resource_id, to_dns_label
from plansmith.core.results import ResultIndex
from plansmith.manifests.bundler import ManifestBundler
from plansmith.manifests.errors import ManifestError
from plansmith.runtime.dispatcher import ActionDispatcher
from plansmith.runtime.errors import AbortError, ActionNotFoundError, ApplyError, ContinueError, wrap_failure
from plansmith.sdk.errors import PlanConstructionError
from plansmith.sdk.models import Settings
from plansmith.sdk.state import PlanState
from plansmith.utils.telemetry import (
    ATTR_BUNDLE,
    ATTR_BUNDLE_COUNT,
    ATTR_BUNDLE_LOCAL,
    ATTR_COMPONENT_COUNT,
    ATTR_NAMESPACE,
    ATTR_PLAN,
    ATTR_PLAN_COUNT,
    get_tracer,
)

if TYPE_CHECKING:
    from plansmith.core.constructs import SynthesisWorker
    from plansmith.core.plan import Plan
    from plansmith.manifests.models import ManifestBundle
    from plansmith.runtime.models import RunnerResult

logger = logging.getLogger(__name__)
_tracer = get_tracer(__name__)


class PlanService:
    """Creates :class:`AppPlan` instances and applies their bundles."""

    def __init__(
        self,
        outdir: str | Path | None = None,
        *,
        dispatcher: ActionDispatcher | None = None,
        worker: SynthesisWorker | None = None,
        settings: Settings | None = None,
    ) -> None:
        self._settings = settings or Settings()
        self._outdir = Path(outdir) if outdir is not None else self._settings.outdir
        self._dispatcher = dispatcher or ActionDispatcher(dry_run=self._settings.dry_run)
        self._worker = worker or default_worker()

    @property
    def settings(self) -> Settings:
        return self._settings

    @property
    def dispatcher(self) -> ActionDispatcher:
        return self._dispatcher

    async def create_plan(self, ctx: ApplyContext, plan: Plan) -> AppPlan:
        """Build *plan*, run its components, and synthesize its manifests.

        Raises:
            PlanCycleError: The plan graph contains a cycle.
            PlanConstructionError: One or more components failed.
        """
        return await self._worker.run_async(self.create_plan_sync, ctx, plan)

    def create_plan_sync(self, ctx: ApplyContext, plan: Plan) -> AppPlan:
        """Blocking form of :meth:`create_plan`; runs on the synthesis worker."""
        if not self._worker.on_worker_thread:
            return self._worker.run(self.create_plan_sync, ctx, plan)

        with _tracer.start_as_current_span("plansmith.plan.create") as span:
            root = plan.build()
            plans = list(root.walk())
            span.set_attribute(ATTR_PLAN, root.name)
            span.set_attribute(ATTR_NAMESPACE, root.namespace)
            span.set_attribute(ATTR_PLAN_COUNT, len(plans))

            outdir, temporary = self._prepare_outdir(root)
            app = App(outdir, resolvers=root.resolvers())
            chart = Chart(app, resource_id(f"{root.name}.{root.namespace}", None), namespace=root.namespace)
            scoped = ctx.with_scope(chart)

            results = ResultIndex()
            failures: list[BaseException] = []
            for current in plans:
                for component in current.components():
                    try:
                        unit = component(scoped)
                    except Exception as exc:
                        logger.debug("Component of plan %r failed", current.name, exc_info=True)
                        failures.append(exc)
                        continue
                    results.add(unit)
            span.set_attribute(ATTR_COMPONENT_COUNT, len(results))

            if failures:
                if temporary:
                    shutil.rmtree(outdir, ignore_errors=True)
                raise PlanConstructionError(root.name, failures)

            app.synth()
            logger.info("Synthesized plan %r into %s", root.name, outdir)
            return AppPlan(self, root, app, chart, results, outdir, temporary=temporary)

    async def apply_bundle(self, ctx: ApplyContext, bundle: ManifestBundle) -> RunnerResult:
        """Apply one bundle, classifying any failure by its policy.

        Raises:
            AbortError: The bundle failed under ``abort``, or could not be
                prepared at all.
            ContinueError: The bundle failed under ``continue``.
        """
        with _tracer.start_as_current_span("plansmith.bundle.apply") as span:
            span.set_attribute(ATTR_BUNDLE, str(bundle))
            span.set_attribute(ATTR_BUNDLE_LOCAL, bundle.is_local)
            try:
                manifest = bundle.client_manifest()
            except ManifestError as exc:
                raise AbortError(exc, str(bundle)) from exc

            try:
                return await self._dispatcher.dispatch(ctx, manifest)
            except ActionNotFoundError as exc:
                raise AbortError(exc, str(bundle)) from exc
            except ApplyError as exc:
                raise wrap_failure(manifest.spec.on_failure, exc, bundle=str(bundle)) from exc

    def _prepare_outdir(self, plan: Plan) -> tuple[Path, bool]:
        if self._outdir is not None:
            return self._outdir, False
        prefix = f"plansmith-{to_dns_label(plan.name)}-"
        return Path(tempfile.mkdtemp(prefix=prefix)), True


class AppPlan:
    """A constructed, synthesized plan ready to be applied."""

    def __init__(
        self,
        service: PlanService,
        root_plan: Plan,
        app: App,
        chart: Chart,
        results: ResultIndex,
        outdir: Path,
        *,
        temporary: bool = False,
    ) -> None:
        self._service = service
        self.root_plan = root_plan
        self.app = app
        self.chart = chart
        self.results = results
        self.outdir = outdir
        self.temporary = temporary

    def bundles(self) -> list[ManifestBundle]:
        """Discover the bundles in the manifest directory.

        Raises:
            ManifestDiscoveryError: The directory cannot be read.
        """
        return ManifestBundler(self.outdir).discover()

    async def apply(self, ctx: ApplyContext | None = None) -> PlanState:
        """Apply every bundle in order.

        A ``continue`` failure is logged and recorded in
        :attr:`PlanState.errors`; an ``abort`` failure stops the run and
        propagates. Discovery errors are always fatal.
        """
        ctx = ctx or ApplyContext()
        timeout = self._service.settings.timeout
        if timeout is not None:
            ctx = ctx.with_timeout(timeout)

        with _tracer.start_as_current_span("plansmith.plan.apply") as span:
            span.set_attribute(ATTR_PLAN, self.root_plan.name)
            bundles = self.bundles()
            span.set_attribute(ATTR_BUNDLE_COUNT, len(bundles))

            errors: list[ContinueError] = []
            outputs: list[RunnerResult] = []
            for bundle in bundles:
                try:
                    outputs.append(await self._service.apply_bundle(ctx, bundle))
                except ContinueError as exc:
                    logger.warning("Bundle failed, continuing: %s", exc)
                    errors.append(exc)

        return PlanState(self.results, bundles=bundles, errors=errors, outputs=outputs)

    def cleanup(self) -> None:
        """Remove a temporary manifest directory unless it should be kept."""
        if self.temporary and not self._service.settings.keep_manifests:
            shutil.rmtree(self.outdir, ignore_errors=True)
