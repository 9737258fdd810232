"""
Courier Testing - Pytest Fixtures.

Provides ready-to-use pytest fixtures for mailer and job tests.  Import
``courier_fixtures`` in your ``conftest.py`` to register all fixtures at
once, or import individual fixtures.

Usage in conftest.py::

    from courier.testing.fixtures import *  # noqa: F401,F403
    from courier.testing.fixtures import courier_fixtures
    courier_fixtures()
"""

from __future__ import annotations

import pytest

from ..jobs.adapters import TestAdapter, set_queue_adapter
from ..mail.config import MailerConfig
from ..mail.service import MailService, set_mail_service
from .mail import MailTestMixin


def courier_fixtures():
    """
    Register Courier pytest fixtures.

    This is a no-op: the fixtures are registered by importing this module.
    The function exists as a documentation anchor and to ensure the
    module's side-effects run.
    """
    pass  # Side-effect of import registers the fixtures below


class MailHelpers(MailTestMixin):
    """Mail and job assertions bound to explicit adapter and service instances."""

    def __init__(self, queue_adapter: TestAdapter, mail_service: MailService):
        self.queue_adapter = queue_adapter
        self.mail_service = mail_service

    def __repr__(self) -> str:
        return f"<MailHelpers {self.queue_adapter!r} {self.mail_service!r}>"


# -----------------------------------------------------------------------
# Fixtures
# -----------------------------------------------------------------------

@pytest.fixture
def mailer_config():
    """A :class:`MailerConfig` preset for tests."""
    return MailerConfig.testing()


@pytest.fixture
def queue_adapter():
    """A :class:`TestAdapter` installed as the active queue adapter."""
    adapter = TestAdapter()
    previous = set_queue_adapter(adapter)
    yield adapter
    adapter.clear()
    set_queue_adapter(previous)


@pytest.fixture
def mail_service(mailer_config):
    """A :class:`MailService` capturing deliveries, installed as active."""
    service = MailService(mailer_config)
    previous = set_mail_service(service)
    yield service
    service.outbox.clear()
    set_mail_service(previous)


@pytest.fixture
def mail_assertions(queue_adapter, mail_service):
    """
    Mail assertion helpers for plain pytest functions.

    Usage::

        def test_welcome(mail_assertions):
            mail_assertions.assert_enqueued_emails(
                1, lambda: AccountMailer.welcome("a@b.c").deliver_later()
            )
    """
    return MailHelpers(queue_adapter, mail_service)
