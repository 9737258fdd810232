"""
Courier Mail Service — owns mail configuration and delivery.

MailService holds the :class:`MailerConfig`, the registered delivery
methods and the test :class:`Outbox`.  Mailers hand finished messages to
the active service through :func:`get_mail_service`.
"""

from __future__ import annotations

import logging
from typing import Dict, List, Optional

from .config import MailerConfig
from .delivery import DeliveryMethod, Outbox, TestDelivery, console_delivery
from .faults import MailConfigFault, MailDeliveryFault
from .message import EmailMessage

logger = logging.getLogger("courier.mail")

# ── Module-level singleton reference ────────────────────────────────

_mail_service: Optional["MailService"] = None


def get_mail_service() -> "MailService":
    """Return the active MailService."""
    if _mail_service is None:
        raise MailConfigFault(
            "MailService not initialised.  Call set_mail_service(MailService(...)) "
            "during application startup or use MailerTestCase in tests.",
            config_key="mail.service",
        )
    return _mail_service


def set_mail_service(svc: Optional["MailService"]) -> Optional["MailService"]:
    """Install a MailService as the module-level singleton and return the previous one."""
    global _mail_service
    previous = _mail_service
    _mail_service = svc
    return previous


class MailService:
    """
    Central mail service.

    Responsibilities:
        - Hold the explicit mailer configuration
        - Resolve delivery methods by name
        - Apply ``perform_deliveries`` / ``raise_delivery_errors``
    """

    def __init__(self, config: Optional[MailerConfig] = None, outbox: Optional[Outbox] = None):
        self.config = config or MailerConfig()
        self.outbox = outbox or Outbox()
        self.logger = logger
        self._delivery_methods: Dict[str, DeliveryMethod] = {
            "test": TestDelivery(self.outbox),
            "console": console_delivery,
        }

    # ── Delivery methods ────────────────────────────────────────────

    def register_delivery_method(self, name: str, method: DeliveryMethod) -> None:
        """Register a custom delivery method callable ``method(message, config)``."""
        self._delivery_methods[name] = method

    def get_delivery_method_names(self) -> List[str]:
        return list(self._delivery_methods.keys())

    def _resolve_delivery_method(self, name: str) -> DeliveryMethod:
        try:
            return self._delivery_methods[name]
        except KeyError:
            raise MailConfigFault(
                f"Unknown delivery method: {name!r}",
                config_key="mail.delivery_method",
            ) from None

    # ── Delivery ────────────────────────────────────────────────────

    def prepare(self, message: EmailMessage) -> EmailMessage:
        """Fill config-level defaults on a freshly built message."""
        if not message.from_email:
            message.from_email = self.config.default_from
        if self.config.subject_prefix and not message.subject.startswith(self.config.subject_prefix):
            message.subject = self.config.subject_prefix + message.subject
        return message

    def deliver(self, message: EmailMessage) -> bool:
        """
        Deliver *message* with the configured delivery method.

        Returns:
            True if delivered, False if deliveries are disabled or a delivery
            error was suppressed by ``raise_delivery_errors=False``.
        """
        if not self.config.perform_deliveries:
            self.logger.debug(
                f"Skipped delivery of {message!r} (perform_deliveries is off)"
            )
            return False

        method = self._resolve_delivery_method(self.config.delivery_method)
        try:
            method(message, self.config)
        except MailConfigFault:
            raise
        except Exception as e:
            if self.config.raise_delivery_errors:
                raise MailDeliveryFault(
                    f"Delivery via {self.config.delivery_method!r} failed: {e}",
                    mailer=message.mailer_name,
                    action=message.action,
                ) from e
            self.logger.warning(
                f"Delivery of {message!r} via {self.config.delivery_method!r} failed: {e}"
            )
            return False

        self.logger.debug(
            f"Delivered {message.mailer_name}#{message.action} → {message.recipients()}"
        )
        return True

    @property
    def deliveries(self) -> List[EmailMessage]:
        """Messages captured by the ``test`` delivery method."""
        return self.outbox.messages

    def __repr__(self) -> str:
        return f"<MailService method={self.config.delivery_method!r} outbox={len(self.outbox)}>"
