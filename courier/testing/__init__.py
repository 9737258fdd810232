"""
Courier Testing - assertions over enqueued jobs and delivered mail.

Usage:
    from courier.testing import MailerTestCase

    class AccountMailerTest(MailerTestCase):
        def test_welcome_is_queued(self):
            self.assert_enqueued_emails(
                1, lambda: AccountMailer.welcome("a@b.c").deliver_later()
            )

Components:
    - ObservationWindow:  Scoped recorder over a queue adapter or outbox
    - assert_count:       Exact-count assertion over a window or backlog
    - assert_matches:     Pattern assertion over job descriptors
    - JobAssertions:      Job-level helpers (assert_enqueued_jobs, ...)
    - MailTestMixin:      Mail-level helpers (assert_emails, ...)
    - MailerTestCase:     unittest case wiring a TestAdapter and MailService
    - override_config:    Context manager / decorator for config overrides
"""

from .faults import (
    AssertionFault,
    CountMismatch,
    InvalidWindowState,
    NoMatchFound,
    UnresolvableQueueName,
)
from .recorder import ObservationWindow, WindowState, aobserve, observe
from .matching import MatchCriteria, delivery_criteria, normalize_value, resolve_delivery_queue
from .assertions import (
    JobAssertions,
    aassert_count,
    aassert_matches,
    assert_count,
    assert_matches,
    check_count,
    check_matches,
)
from .mail import MailTestMixin
from .cases import MailerTestCase
from .config import override_config

__all__ = [
    # Faults
    "AssertionFault",
    "CountMismatch",
    "InvalidWindowState",
    "NoMatchFound",
    "UnresolvableQueueName",
    # Windows
    "ObservationWindow",
    "WindowState",
    "aobserve",
    "observe",
    # Matching
    "MatchCriteria",
    "delivery_criteria",
    "normalize_value",
    "resolve_delivery_queue",
    # Assertions
    "JobAssertions",
    "aassert_count",
    "aassert_matches",
    "assert_count",
    "assert_matches",
    "check_count",
    "check_matches",
    # Mail
    "MailTestMixin",
    "MailerTestCase",
    "override_config",
]
