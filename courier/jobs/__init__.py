"""
Courier Jobs — background jobs, descriptors and queue adapters.

Quick Start:
    from courier.jobs import Job, TestAdapter, set_queue_adapter

    class WelcomeJob(Job):
        queue_name = "onboarding"

        def perform(self, user_id):
            ...

    set_queue_adapter(TestAdapter())
    WelcomeJob.perform_later(7)
"""

from .descriptor import (
    DEFAULT_QUEUE_NAME,
    JobDescriptor,
    JobEvent,
    normalize_queue_name,
)
from .base import (
    ConfiguredJob,
    Job,
    job_filter,
    job_kind_of,
    lookup_job,
    registered_jobs,
)
from .adapters import (
    AsyncioAdapter,
    InlineAdapter,
    QueueAdapter,
    TestAdapter,
    get_queue_adapter,
    set_queue_adapter,
)
from .faults import JobFault, JobLookupFault, QueueAdapterFault

__all__ = [
    # Descriptors
    "DEFAULT_QUEUE_NAME",
    "JobDescriptor",
    "JobEvent",
    "normalize_queue_name",
    # Jobs
    "ConfiguredJob",
    "Job",
    "job_filter",
    "job_kind_of",
    "lookup_job",
    "registered_jobs",
    # Adapters
    "AsyncioAdapter",
    "InlineAdapter",
    "QueueAdapter",
    "TestAdapter",
    "get_queue_adapter",
    "set_queue_adapter",
    # Faults
    "JobFault",
    "JobLookupFault",
    "QueueAdapterFault",
]
