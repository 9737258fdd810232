"""
Courier Jobs - Job base class and registry.

Jobs are plain classes with a ``perform`` method.  Every subclass is
registered under its fully qualified name (its *job kind*), which is what
descriptors carry instead of a live class reference.

Usage::

    class CleanupJob(Job):
        queue_name = "maintenance"

        def perform(self, account_id, *, dry_run=False):
            ...

    CleanupJob.perform_later(42, dry_run=True)
    CleanupJob.set(wait=timedelta(minutes=5)).perform_later(42)
"""

from __future__ import annotations

from datetime import datetime, timedelta
from typing import Any, Callable, Dict, Iterable, Mapping, Optional, Sequence, Type, Union

from .descriptor import DEFAULT_QUEUE_NAME, JobDescriptor, normalize_queue_name, utcnow
from .faults import JobLookupFault

_job_registry: Dict[str, Type["Job"]] = {}


def job_kind_of(job_cls: type) -> str:
    """Fully qualified name used as the job kind."""
    return f"{job_cls.__module__}.{job_cls.__qualname__}"


def lookup_job(job_kind: str) -> Type["Job"]:
    """Return the job class registered as *job_kind*."""
    try:
        return _job_registry[job_kind]
    except KeyError:
        raise JobLookupFault(job_kind) from None


def registered_jobs() -> Dict[str, Type["Job"]]:
    return dict(_job_registry)


class Job:
    """
    Base class for background jobs.

    Class attributes:
        queue_name: Queue the job is enqueued on (str, enum member or None
            for the default queue).
        priority:   Optional priority hint passed through to descriptors.
    """

    queue_name: Any = DEFAULT_QUEUE_NAME
    priority: Optional[int] = None
    job_kind: str = ""

    def __init_subclass__(cls, **kwargs: Any) -> None:
        super().__init_subclass__(**kwargs)
        cls.job_kind = job_kind_of(cls)
        _job_registry[cls.job_kind] = cls

    def __init__(self, descriptor: Optional[JobDescriptor] = None):
        self.descriptor = descriptor

    def perform(self, *args: Any, **kwargs: Any) -> Any:
        raise NotImplementedError(f"{type(self).__name__} must implement perform()")

    # ── Dispatch ────────────────────────────────────────────────────

    @classmethod
    def resolve_queue_name(
        cls,
        positional_args: Sequence[Any],
        named_args: Mapping[str, Any],
    ) -> str:
        """Queue for a job built from these arguments (subclasses may inspect them)."""
        return normalize_queue_name(cls.queue_name, DEFAULT_QUEUE_NAME)

    @classmethod
    def instance_params_for(
        cls,
        positional_args: Sequence[Any],
        named_args: Mapping[str, Any],
    ) -> Optional[Mapping[str, Any]]:
        """Bound construction parameters recorded on the descriptor, if any."""
        return None

    @classmethod
    def build_descriptor(
        cls,
        args: Sequence[Any] = (),
        kwargs: Optional[Mapping[str, Any]] = None,
        *,
        queue: Any = None,
        wait: Union[timedelta, float, None] = None,
        wait_until: Optional[datetime] = None,
        priority: Optional[int] = None,
        instance_params: Optional[Mapping[str, Any]] = None,
    ) -> JobDescriptor:
        kwargs = dict(kwargs or {})
        now = utcnow()
        if wait is not None and not isinstance(wait, timedelta):
            wait = timedelta(seconds=wait)
        scheduled_at = wait_until or (now + wait if wait is not None else None)
        queue_name = normalize_queue_name(queue) or cls.resolve_queue_name(args, kwargs)
        return JobDescriptor(
            job_kind=cls.job_kind,
            queue_name=queue_name,
            positional_args=tuple(args),
            named_args=kwargs,
            instance_params=(
                instance_params if instance_params is not None
                else cls.instance_params_for(args, kwargs)
            ),
            enqueue_time=now,
            scheduled_at=scheduled_at,
            priority=priority if priority is not None else cls.priority,
        )

    @classmethod
    def set(
        cls,
        *,
        queue: Any = None,
        wait: Union[timedelta, float, None] = None,
        wait_until: Optional[datetime] = None,
        priority: Optional[int] = None,
    ) -> "ConfiguredJob":
        """Return a handle that enqueues this job with the given options."""
        return ConfiguredJob(cls, queue=queue, wait=wait, wait_until=wait_until, priority=priority)

    @classmethod
    def perform_later(cls, *args: Any, **kwargs: Any) -> JobDescriptor:
        """Enqueue the job on the active queue adapter."""
        return cls.set().perform_later(*args, **kwargs)

    @classmethod
    def perform_now(cls, *args: Any, **kwargs: Any) -> Any:
        """Run the job synchronously through the active queue adapter."""
        return cls.set().perform_now(*args, **kwargs)


class ConfiguredJob:
    """A job class bound to enqueue options (queue, delay, priority)."""

    def __init__(
        self,
        job_cls: Type[Job],
        *,
        queue: Any = None,
        wait: Union[timedelta, float, None] = None,
        wait_until: Optional[datetime] = None,
        priority: Optional[int] = None,
    ):
        self.job_cls = job_cls
        self.options = {
            "queue": queue,
            "wait": wait,
            "wait_until": wait_until,
            "priority": priority,
        }

    def perform_later(self, *args: Any, **kwargs: Any) -> JobDescriptor:
        from .adapters import get_queue_adapter

        descriptor = self.job_cls.build_descriptor(args, kwargs, **self.options)
        get_queue_adapter().enqueue(descriptor)
        return descriptor

    def perform_now(self, *args: Any, **kwargs: Any) -> Any:
        from .adapters import get_queue_adapter

        descriptor = self.job_cls.build_descriptor(args, kwargs, **self.options)
        return get_queue_adapter().perform(descriptor)

    def __repr__(self) -> str:
        opts = {k: v for k, v in self.options.items() if v is not None}
        return f"ConfiguredJob({self.job_cls.__name__}, {opts!r})"


# ── Filters ─────────────────────────────────────────────────────────

JobSelector = Union[Type[Job], Iterable[Type[Job]], Callable[[JobDescriptor], bool], None]


def _matches_selector(descriptor: JobDescriptor, selector: JobSelector) -> bool:
    if isinstance(selector, type):
        selector = (selector,)
    elif callable(selector):
        return bool(selector(descriptor))
    job_cls = _job_registry.get(descriptor.job_kind)
    if job_cls is None:
        return any(job_kind_of(c) == descriptor.job_kind for c in selector)
    return any(issubclass(job_cls, c) for c in selector)


def job_filter(
    only: JobSelector = None,
    except_: JobSelector = None,
    queue: Any = None,
) -> Callable[[JobDescriptor], bool]:
    """
    Build a descriptor predicate.

    ``only`` / ``except_`` accept a job class, several job classes (subclasses
    match too) or a predicate over descriptors.  ``queue`` restricts to one
    queue name.
    """
    queue_key = normalize_queue_name(queue)

    def predicate(descriptor: JobDescriptor) -> bool:
        if only is not None and not _matches_selector(descriptor, only):
            return False
        if except_ is not None and _matches_selector(descriptor, except_):
            return False
        if queue_key is not None and descriptor.queue_name != queue_key:
            return False
        return True

    return predicate
