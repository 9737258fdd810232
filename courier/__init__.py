"""
Courier - background jobs, mailers and a test harness for both.

- Jobs: job classes, descriptors and queue adapters (inline, test, asyncio)
- Mail: action-based mailers, deliveries and the mail delivery job
- Faults: structured errors with fault domains
- Testing: observation windows with count and pattern assertions
"""

__version__ = "0.1.0"

from .faults import Fault, FaultDomain, Severity
from .jobs import Job, TestAdapter, get_queue_adapter, set_queue_adapter
from .mail import Mailer, MailerConfig, MailService, action, get_mail_service, set_mail_service

__all__ = [
    "__version__",
    # Faults
    "Fault",
    "FaultDomain",
    "Severity",
    # Jobs
    "Job",
    "TestAdapter",
    "get_queue_adapter",
    "set_queue_adapter",
    # Mail
    "Mailer",
    "MailerConfig",
    "MailService",
    "action",
    "get_mail_service",
    "set_mail_service",
]
