"""
Courier Jobs Faults - typed faults raised by the job layer.
"""

from __future__ import annotations

from typing import Any, Optional

from ..faults import Fault, FaultDomain, Severity


class JobFault(Fault):
    """Base class for all job-subsystem faults."""

    domain = FaultDomain.JOBS

    def __init__(
        self,
        message: str,
        *,
        code: str = "JOB_ERROR",
        severity: Severity = Severity.ERROR,
        details: Optional[dict[str, Any]] = None,
    ):
        super().__init__(
            code=code,
            message=message,
            domain=FaultDomain.JOBS,
            severity=severity,
            metadata=details or {},
        )


class JobLookupFault(JobFault):
    """No job class is registered under the requested kind."""

    def __init__(self, job_kind: str):
        self.job_kind = job_kind
        super().__init__(
            f"No job class registered as {job_kind!r}",
            code="JOB_NOT_FOUND",
            details={"job_kind": job_kind},
        )


class QueueAdapterFault(JobFault):
    """Adapter used outside its lifecycle (e.g. enqueue before start)."""

    def __init__(self, message: str, *, adapter: str = "unknown"):
        self.adapter = adapter
        super().__init__(
            message,
            code="QUEUE_ADAPTER_ERROR",
            details={"adapter": adapter},
        )
