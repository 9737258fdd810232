"""
Courier Mail Faults — typed faults for the mail subsystem.
"""

from __future__ import annotations

from typing import Any, Optional

from ..faults import Fault, FaultDomain, Severity


class MailFault(Fault):
    """Base class for all mail-subsystem faults."""

    domain = FaultDomain.MAIL

    def __init__(
        self,
        message: str,
        *,
        code: str = "MAIL_ERROR",
        severity: Severity = Severity.ERROR,
        details: Optional[dict[str, Any]] = None,
    ):
        super().__init__(
            code=code,
            message=message,
            domain=FaultDomain.MAIL,
            severity=severity,
            metadata=details or {},
        )


class MailDeliveryFault(MailFault):
    """A message could not be delivered or scheduled."""

    def __init__(
        self,
        message: str,
        *,
        mailer: Optional[str] = None,
        action: Optional[str] = None,
        details: Optional[dict[str, Any]] = None,
    ):
        self.mailer = mailer
        self.action = action
        super().__init__(
            message,
            code="MAIL_DELIVERY_ERROR",
            details={**(details or {}), "mailer": mailer, "action": action},
        )


class MailConfigFault(MailFault):
    """Mail configuration error (unknown delivery method, missing service...)."""

    def __init__(
        self,
        message: str,
        *,
        config_key: Optional[str] = None,
        details: Optional[dict[str, Any]] = None,
    ):
        super().__init__(
            message,
            code="MAIL_CONFIG_ERROR",
            severity=Severity.FATAL,
            details={**(details or {}), "config_key": config_key},
        )


class NonInferrableMailerError(MailFault):
    """A mailer test case could not work out which mailer it tests."""

    def __init__(self, name: str):
        self.name = name
        super().__init__(
            f"Cannot infer a mailer from test case {name!r}; "
            f"declare it with use_mailer(SomeMailer)",
            code="MAILER_NOT_INFERRABLE",
            details={"test_case": name},
        )


class MailValidationFault(MailFault):
    """Invalid address or missing required message field."""

    def __init__(
        self,
        message: str,
        *,
        field: Optional[str] = None,
        details: Optional[dict[str, Any]] = None,
    ):
        self.field = field
        super().__init__(
            message,
            code="MAIL_VALIDATION_ERROR",
            details={**(details or {}), "field": field},
        )


class MailTemplateFault(MailFault):
    """Template lookup or render error."""

    def __init__(
        self,
        message: str,
        *,
        template_name: Optional[str] = None,
        details: Optional[dict[str, Any]] = None,
    ):
        self.template_name = template_name
        super().__init__(
            message,
            code="MAIL_TEMPLATE_ERROR",
            details={**(details or {}), "template_name": template_name},
        )
