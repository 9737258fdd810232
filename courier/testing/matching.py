"""
Courier Testing - Match criteria over job descriptors.

Criteria fields left as ``None`` are wildcards.  Arguments compare by
structural equality after normalization: tuples become lists, mappings
become dicts, and a parameterized mailer becomes the params mapping it
bound.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, List, Mapping, Optional, Sequence

from ..jobs.base import job_kind_of
from ..jobs.descriptor import JobDescriptor, normalize_queue_name
from ..mail.config import MailerConfig
from ..mail.mailer import Mailer, ParameterizedMailer
from .faults import UnresolvableQueueName


def normalize_value(value: Any) -> Any:
    """Recursively unwrap call-time wrappers into plain comparable values."""
    if isinstance(value, ParameterizedMailer):
        return normalize_value(value.params)
    if isinstance(value, Mapping):
        return {k: normalize_value(v) for k, v in value.items()}
    if isinstance(value, (list, tuple)):
        return [normalize_value(v) for v in value]
    return value


def job_kind_key(job: Any) -> str:
    """Job kind for a job class, or the string itself."""
    if isinstance(job, type):
        return getattr(job, "job_kind", None) or job_kind_of(job)
    return str(job)


@dataclass(frozen=True)
class MatchCriteria:
    """What an enqueued or performed job must look like."""

    expected_count: Optional[int] = None
    job_kind: Optional[Any] = None
    positional_args: Optional[Sequence[Any]] = None
    named_args: Optional[Mapping[str, Any]] = None
    queue_name: Optional[Any] = None

    def matches(self, descriptor: JobDescriptor) -> bool:
        if self.job_kind is not None and descriptor.job_kind != job_kind_key(self.job_kind):
            return False
        if self.positional_args is not None and (
            normalize_value(descriptor.positional_args) != normalize_value(self.positional_args)
        ):
            return False
        if self.named_args is not None and (
            normalize_value(descriptor.named_args) != normalize_value(self.named_args)
        ):
            return False
        if self.queue_name is not None and (
            descriptor.queue_name != normalize_queue_name(self.queue_name)
        ):
            return False
        return True

    def filter(self, descriptors: Sequence[JobDescriptor]) -> List[JobDescriptor]:
        return [d for d in descriptors if self.matches(d)]

    def describe(self) -> str:
        parts = []
        if self.job_kind is not None:
            parts.append(f"job={job_kind_key(self.job_kind)}")
        if self.positional_args is not None:
            parts.append(f"args={normalize_value(self.positional_args)!r}")
        if self.named_args is not None:
            parts.append(f"kwargs={normalize_value(self.named_args)!r}")
        if self.queue_name is not None:
            parts.append(f"queue={normalize_queue_name(self.queue_name)!r}")
        if self.expected_count is not None:
            parts.append(f"count={self.expected_count}")
        return "{" + ", ".join(parts) + "}" if parts else "{any job}"


def resolve_delivery_queue(mailer_cls: type, config: MailerConfig) -> str:
    """
    Expected delivery queue for *mailer_cls* under an explicit *config*.

    Raises :class:`UnresolvableQueueName` when neither the mailer nor the
    config names a queue.
    """
    override = getattr(mailer_cls, "deliver_later_queue_name", None)
    queue = config.queue_for(override) if config is not None else normalize_queue_name(override)
    if not queue:
        delivery_job = getattr(mailer_cls, "delivery_job", None)
        raise UnresolvableQueueName(
            job_kind_key(delivery_job) if delivery_job is not None else repr(mailer_cls)
        )
    return queue


def delivery_criteria(
    mailer: Any,
    method: str,
    *,
    config: MailerConfig,
    params: Optional[Mapping[str, Any]] = None,
    args: Any = None,
    kwargs: Optional[Mapping[str, Any]] = None,
    queue: Any = None,
) -> MatchCriteria:
    """
    Criteria for a ``deliver_later`` of ``mailer.method``.

    *mailer* may be a parameterized mailer, whose params are used.  A
    mapping passed as *args* is shorthand for *params*.
    """
    if isinstance(mailer, ParameterizedMailer):
        params = mailer.params
        mailer = mailer.mailer_cls
    if isinstance(args, Mapping):
        params, args = args, None
    elif isinstance(args, str):
        args = [args]
    if not (isinstance(mailer, type) and issubclass(mailer, Mailer)):
        raise TypeError(f"Expected a Mailer class, got {mailer!r}")

    expected_queue = queue if queue is not None else resolve_delivery_queue(mailer, config)
    named: dict = {"args": list(args or [])}
    if kwargs:
        named["kwargs"] = dict(kwargs)
    if params is not None:
        named["params"] = dict(params)

    return MatchCriteria(
        job_kind=mailer.delivery_job,
        positional_args=[mailer.mailer_name(), method, "deliver_now"],
        named_args=named,
        queue_name=expected_queue,
    )
