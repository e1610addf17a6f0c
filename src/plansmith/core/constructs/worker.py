"""SynthesisWorker — the single writer for construct trees.

Plan creation, component execution, and synthesis all mutate construct
trees. Instead of guarding them with a process-wide lock, every such job is
submitted to one dedicated thread and executed in submission order.

Usage::

    worker = default_worker()
    app_plan = worker.run(service.create_plan_sync, ctx, plan)
    app_plan = await worker.run_async(service.create_plan_sync, ctx, plan)
"""

from __future__ import annotations

import asyncio
import threading
from collections.abc import Callable
from concurrent.futures import Future, ThreadPoolExecutor
from typing import Any, TypeVar

T = TypeVar("T")

_THREAD_PREFIX = "plansmith-synth"


class SynthesisWorker:
    """A request queue served by exactly one thread.

    Jobs submitted from the worker thread itself run inline so that nested
    calls (a component building a composite, for example) cannot deadlock.
    """

    def __init__(self) -> None:
        self._local = threading.local()
        self._executor = ThreadPoolExecutor(
            max_workers=1,
            thread_name_prefix=_THREAD_PREFIX,
            initializer=self._mark_worker_thread,
        )

    @property
    def on_worker_thread(self) -> bool:
        return getattr(self._local, "owner", False)

    def submit(self, fn: Callable[..., T], /, *args: Any, **kwargs: Any) -> Future[T]:
        """Queue *fn* and return a future for its result."""
        return self._executor.submit(fn, *args, **kwargs)

    def run(self, fn: Callable[..., T], /, *args: Any, **kwargs: Any) -> T:
        """Run *fn* on the worker and block until it finishes."""
        if self.on_worker_thread:
            return fn(*args, **kwargs)
        return self.submit(fn, *args, **kwargs).result()

    async def run_async(self, fn: Callable[..., T], /, *args: Any, **kwargs: Any) -> T:
        """Run *fn* on the worker without blocking the event loop."""
        if self.on_worker_thread:
            return fn(*args, **kwargs)
        return await asyncio.wrap_future(self.submit(fn, *args, **kwargs))

    def shutdown(self, *, wait: bool = True) -> None:
        self._executor.shutdown(wait=wait)

    def _mark_worker_thread(self) -> None:
        self._local.owner = True


_default_worker: SynthesisWorker | None = None
_default_worker_lock = threading.Lock()


def default_worker() -> SynthesisWorker:
    """Return the process-wide worker, creating it on first use."""
    global _default_worker
    with _default_worker_lock:
        if _default_worker is None:
            _default_worker = SynthesisWorker()
        return _default_worker
