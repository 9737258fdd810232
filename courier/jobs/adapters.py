"""
Courier Jobs - Queue adapters.

An adapter accepts descriptors from ``Job.perform_later`` and eventually
performs them.  Every adapter is also an *event source*: listeners
subscribed with :meth:`QueueAdapter.subscribe` are called as
``listener(event, descriptor)`` for :attr:`JobEvent.ENQUEUED` and
:attr:`JobEvent.PERFORMED`.

Adapters:
    InlineAdapter   — performs each job as soon as it is enqueued
    TestAdapter     — records jobs, performs only on request
    AsyncioAdapter  — asyncio queue drained by worker tasks
"""

from __future__ import annotations

import asyncio
import inspect
import logging
from contextlib import contextmanager
from typing import Any, Callable, Iterator, List, Optional

from .base import JobSelector, job_filter, lookup_job
from .descriptor import JobDescriptor, JobEvent
from .faults import QueueAdapterFault

logger = logging.getLogger("courier.jobs")

Listener = Callable[[JobEvent, JobDescriptor], None]


class QueueAdapter:
    """Base adapter: listener registry and synchronous job execution."""

    name = "base"

    def __init__(self):
        self._listeners: List[Listener] = []

    # ── Event source ────────────────────────────────────────────────

    def subscribe(self, listener: Listener) -> None:
        self._listeners.append(listener)

    def unsubscribe(self, listener: Listener) -> None:
        if listener in self._listeners:
            self._listeners.remove(listener)

    @property
    def listener_count(self) -> int:
        return len(self._listeners)

    def _emit(self, event: JobEvent, descriptor: JobDescriptor) -> None:
        for listener in list(self._listeners):
            listener(event, descriptor)

    # ── Queue API ───────────────────────────────────────────────────

    def enqueue(self, descriptor: JobDescriptor) -> None:
        raise NotImplementedError

    def _enqueued(self, descriptor: JobDescriptor) -> None:
        logger.debug(f"Enqueued {descriptor.describe()} on {self.name}")
        self._emit(JobEvent.ENQUEUED, descriptor)

    def _performed(self, descriptor: JobDescriptor) -> None:
        logger.debug(f"Performed {descriptor.job_kind} ({descriptor.job_id[:8]})")
        self._emit(JobEvent.PERFORMED, descriptor)

    def _instantiate(self, descriptor: JobDescriptor) -> Any:
        job_cls = lookup_job(descriptor.job_kind)
        return job_cls(descriptor)

    def perform(self, descriptor: JobDescriptor) -> Any:
        """Run *descriptor*'s job synchronously and publish PERFORMED."""
        job = self._instantiate(descriptor)
        result = job.perform(*descriptor.positional_args, **descriptor.named_args)
        self._performed(descriptor)
        return result

    def __repr__(self) -> str:
        return f"<{type(self).__name__} listeners={len(self._listeners)}>"


class InlineAdapter(QueueAdapter):
    """Performs every job immediately on enqueue."""

    name = "inline"

    def enqueue(self, descriptor: JobDescriptor) -> None:
        self._enqueued(descriptor)
        self.perform(descriptor)


class TestAdapter(QueueAdapter):
    """
    Recording adapter for tests.

    Keeps every enqueued and performed descriptor since the last
    :meth:`clear`.  Jobs are only performed when ``perform_enqueued_jobs``
    is on (optionally restricted by ``only``), when :meth:`flush` is called,
    or inside :meth:`performing`.

    Usage::

        adapter = TestAdapter()
        set_queue_adapter(adapter)

        WelcomeJob.perform_later(1)
        assert len(adapter.enqueued_jobs) == 1

        adapter.flush()
        assert len(adapter.performed_jobs) == 1
    """

    __test__ = False  # not a pytest test class
    name = "test"

    def __init__(
        self,
        *,
        perform_enqueued_jobs: bool = False,
        only: JobSelector = None,
        except_: JobSelector = None,
    ):
        super().__init__()
        self.enqueued_jobs: List[JobDescriptor] = []
        self.performed_jobs: List[JobDescriptor] = []
        self.perform_enqueued_jobs = perform_enqueued_jobs
        self._perform_filter = job_filter(only, except_)

    def enqueue(self, descriptor: JobDescriptor) -> None:
        self.enqueued_jobs.append(descriptor)
        self._enqueued(descriptor)
        if self.perform_enqueued_jobs and self._perform_filter(descriptor):
            self.perform(descriptor)

    def _performed(self, descriptor: JobDescriptor) -> None:
        self.performed_jobs.append(descriptor)
        super()._performed(descriptor)

    @property
    def pending_jobs(self) -> List[JobDescriptor]:
        """Enqueued jobs that have not been performed yet."""
        done = {d.job_id for d in self.performed_jobs}
        return [d for d in self.enqueued_jobs if d.job_id not in done]

    def flush(
        self,
        only: JobSelector = None,
        except_: JobSelector = None,
    ) -> List[JobDescriptor]:
        """
        Perform pending jobs (including jobs they enqueue) and return them.
        """
        predicate = job_filter(only, except_)
        flushed: List[JobDescriptor] = []
        attempted = set()
        while True:
            batch = [
                d for d in self.pending_jobs
                if d.job_id not in attempted and predicate(d)
            ]
            if not batch:
                return flushed
            for descriptor in batch:
                attempted.add(descriptor.job_id)
                self.perform(descriptor)
                flushed.append(descriptor)

    @contextmanager
    def performing(
        self,
        only: JobSelector = None,
        except_: JobSelector = None,
    ) -> Iterator["TestAdapter"]:
        """Perform jobs as they are enqueued for the duration of the block."""
        previous = (self.perform_enqueued_jobs, self._perform_filter)
        self.perform_enqueued_jobs = True
        self._perform_filter = job_filter(only, except_)
        try:
            yield self
        finally:
            self.perform_enqueued_jobs, self._perform_filter = previous

    def clear(self) -> None:
        """Forget every recorded job."""
        self.enqueued_jobs.clear()
        self.performed_jobs.clear()


class AsyncioAdapter(QueueAdapter):
    """
    Adapter backed by an :class:`asyncio.Queue` and worker tasks.

    ``perform`` of a job may be a coroutine function; it is awaited.
    Failures are logged and kept in :attr:`failed_jobs`; the worker keeps
    running.

    Usage::

        adapter = AsyncioAdapter(concurrency=2)
        await adapter.start()
        ReportJob.perform_later("weekly")
        await adapter.drain()
        await adapter.stop()
    """

    name = "asyncio"

    def __init__(self, *, concurrency: int = 1):
        super().__init__()
        self.concurrency = concurrency
        self.failed_jobs: List[tuple] = []
        self._queue: Optional[asyncio.Queue] = None
        self._workers: List[asyncio.Task] = []

    @property
    def running(self) -> bool:
        return bool(self._workers)

    async def start(self) -> None:
        if self.running:
            return
        self._queue = asyncio.Queue()
        self._workers = [
            asyncio.create_task(self._work(i)) for i in range(self.concurrency)
        ]
        logger.debug(f"AsyncioAdapter started ({self.concurrency} worker(s))")

    async def stop(self) -> None:
        for task in self._workers:
            task.cancel()
        await asyncio.gather(*self._workers, return_exceptions=True)
        self._workers = []
        self._queue = None
        logger.debug("AsyncioAdapter stopped")

    def enqueue(self, descriptor: JobDescriptor) -> None:
        if self._queue is None:
            raise QueueAdapterFault(
                "AsyncioAdapter is not running; await start() before enqueueing",
                adapter=self.name,
            )
        self._queue.put_nowait(descriptor)
        self._enqueued(descriptor)

    async def drain(self) -> None:
        """Wait until every enqueued job has been processed."""
        if self._queue is None:
            raise QueueAdapterFault("AsyncioAdapter is not running", adapter=self.name)
        await self._queue.join()

    async def aperform(self, descriptor: JobDescriptor) -> Any:
        job = self._instantiate(descriptor)
        result = job.perform(*descriptor.positional_args, **descriptor.named_args)
        if inspect.isawaitable(result):
            result = await result
        self._performed(descriptor)
        return result

    async def _work(self, index: int) -> None:
        queue = self._queue
        while True:
            descriptor = await queue.get()
            try:
                await self.aperform(descriptor)
            except Exception as e:
                logger.warning(
                    f"Worker {index}: job {descriptor.job_kind} "
                    f"({descriptor.job_id[:8]}) failed: {e}"
                )
                self.failed_jobs.append((descriptor, e))
            finally:
                queue.task_done()


# ── Module-level active adapter ─────────────────────────────────────

_queue_adapter: Optional[QueueAdapter] = None


def get_queue_adapter() -> QueueAdapter:
    """Return the active adapter, creating an :class:`InlineAdapter` if none is set."""
    global _queue_adapter
    if _queue_adapter is None:
        _queue_adapter = InlineAdapter()
    return _queue_adapter


def set_queue_adapter(adapter: Optional[QueueAdapter]) -> Optional[QueueAdapter]:
    """Install *adapter* as the active adapter and return the previous one."""
    global _queue_adapter
    previous = _queue_adapter
    _queue_adapter = adapter
    return previous
