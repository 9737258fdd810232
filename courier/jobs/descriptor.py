"""
Courier Jobs - Job descriptors and queue events.

A :class:`JobDescriptor` is the normalized record of one unit of work as it
travels through a queue adapter: which job class, which queue, which
arguments.  Descriptors are immutable once built; assertions and adapters
only ever read them.
"""

from __future__ import annotations

import copy
import uuid
from dataclasses import dataclass, field
from datetime import datetime, timezone
from enum import Enum
from types import MappingProxyType
from typing import Any, Dict, Mapping, Optional, Tuple

DEFAULT_QUEUE_NAME = "default"


class JobEvent(str, Enum):
    """Events published by queue adapters to their listeners."""
    ENQUEUED = "enqueued"
    PERFORMED = "performed"


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


def normalize_queue_name(value: Any, default: Optional[str] = None) -> Optional[str]:
    """
    Turn a configured queue name into its comparison key.

    ``None`` falls back to *default*; enum members (the closest thing to a
    symbol) use their string value, or their name for non-string values.

        normalize_queue_name(None, "default")     -> "default"
        normalize_queue_name("mailers")           -> "mailers"
        normalize_queue_name(Queues.MAILERS)      -> "mailers"
    """
    if value is None:
        return default
    if isinstance(value, Enum):
        return value.value if isinstance(value.value, str) else value.name
    if isinstance(value, bytes):
        return value.decode()
    return str(value)


@dataclass(frozen=True)
class JobDescriptor:
    """
    Immutable record of an enqueued or performed job.

    Arguments are deep-copied on construction so later mutation by the
    caller never changes what was recorded.  Descriptors hash by ``job_id``.
    """
    job_kind: str
    queue_name: str = DEFAULT_QUEUE_NAME
    positional_args: Tuple[Any, ...] = ()
    named_args: Mapping[str, Any] = field(default_factory=dict)
    instance_params: Optional[Mapping[str, Any]] = None
    enqueue_time: datetime = field(default_factory=utcnow)
    scheduled_at: Optional[datetime] = None
    priority: Optional[int] = None
    job_id: str = field(default_factory=lambda: uuid.uuid4().hex)

    def __post_init__(self):
        object.__setattr__(self, "positional_args", copy.deepcopy(tuple(self.positional_args)))
        object.__setattr__(self, "named_args", MappingProxyType(copy.deepcopy(dict(self.named_args))))
        if self.instance_params is not None:
            object.__setattr__(
                self, "instance_params", MappingProxyType(copy.deepcopy(dict(self.instance_params))),
            )

    def __hash__(self) -> int:
        return hash(self.job_id)

    @property
    def job_class(self) -> type:
        """The registered job class for this descriptor's kind."""
        from .base import lookup_job
        return lookup_job(self.job_kind)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "job_id": self.job_id,
            "job_kind": self.job_kind,
            "queue_name": self.queue_name,
            "positional_args": list(self.positional_args),
            "named_args": dict(self.named_args),
            "instance_params": (
                dict(self.instance_params) if self.instance_params is not None else None
            ),
            "enqueue_time": self.enqueue_time.isoformat(),
            "scheduled_at": self.scheduled_at.isoformat() if self.scheduled_at else None,
            "priority": self.priority,
        }

    def describe(self) -> str:
        """One-line rendering used in assertion messages."""
        parts = [f"queue={self.queue_name!r}"]
        if self.positional_args:
            parts.append(f"args={list(self.positional_args)!r}")
        if self.named_args:
            parts.append(f"kwargs={dict(self.named_args)!r}")
        if self.instance_params is not None:
            parts.append(f"params={dict(self.instance_params)!r}")
        if self.scheduled_at is not None:
            parts.append(f"at={self.scheduled_at.isoformat()}")
        return f"{self.job_kind}({', '.join(parts)})"

    def __repr__(self) -> str:
        return f"<JobDescriptor {self.describe()} id={self.job_id[:8]}>"
