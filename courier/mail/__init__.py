"""
Courier Mail — mailers, deliveries and the mail delivery job.

Quick Start:
    from courier.mail import Mailer, MailService, action, set_mail_service

    set_mail_service(MailService())

    class AccountMailer(Mailer):
        @action
        def welcome(self, recipient):
            self.mail(to=recipient, subject="Welcome!", body="Hello")

    AccountMailer.welcome("a@example.com").deliver_now()
    AccountMailer.welcome("a@example.com").deliver_later()
"""

from .message import EmailMessage, encode_header
from .config import MailerConfig
from .delivery import DELIVERED, Outbox, TestDelivery, console_delivery
from .service import MailService, get_mail_service, set_mail_service
from .delivery_job import MailDeliveryJob
from .mailer import (
    Mailer,
    MessageDelivery,
    ParameterizedMailer,
    action,
    find_mailer,
    lookup_mailer,
    mailer_name_of,
)
from .faults import (
    MailConfigFault,
    MailDeliveryFault,
    MailFault,
    MailTemplateFault,
    MailValidationFault,
    NonInferrableMailerError,
)

__all__ = [
    # Messages
    "EmailMessage",
    "encode_header",
    # Config & service
    "MailerConfig",
    "MailService",
    "get_mail_service",
    "set_mail_service",
    # Delivery
    "DELIVERED",
    "Outbox",
    "TestDelivery",
    "console_delivery",
    "MailDeliveryJob",
    # Mailers
    "Mailer",
    "MessageDelivery",
    "ParameterizedMailer",
    "action",
    "find_mailer",
    "lookup_mailer",
    "mailer_name_of",
    # Faults
    "MailConfigFault",
    "MailDeliveryFault",
    "MailFault",
    "MailTemplateFault",
    "MailValidationFault",
    "NonInferrableMailerError",
]
