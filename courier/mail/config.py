"""
Courier Mail Configuration.

All values have sensible defaults for development; override via
``MailerConfig(...)``, ``MailerConfig.from_dict(...)`` or, in tests,
``courier.testing.override_config``.

Queue configuration is explicit: assertions and deliveries receive the
config object instead of reading mutable class-level defaults.
"""

from __future__ import annotations

from typing import Any, Dict, Optional

from ..jobs.descriptor import DEFAULT_QUEUE_NAME, normalize_queue_name

DELIVERY_METHODS = ("test", "console")


class MailerConfig:
    """
    Top-level mailer configuration.

    Usage::

        config = MailerConfig(
            default_from="noreply@myapp.com",
            delivery_method="console",
            deliver_later_queue_name="mailers",
        )
    """

    __slots__ = (
        "default_from", "delivery_method", "perform_deliveries",
        "raise_delivery_errors", "deliver_later_queue_name",
        "default_queue_name", "charset", "mime_version", "content_type",
        "subject_prefix",
    )

    def __init__(
        self,
        default_from: str = "noreply@localhost",
        delivery_method: str = "test",
        perform_deliveries: bool = True,
        raise_delivery_errors: bool = True,
        deliver_later_queue_name: Any = None,
        default_queue_name: Optional[str] = DEFAULT_QUEUE_NAME,
        charset: str = "UTF-8",
        mime_version: str = "1.0",
        content_type: str = "text/plain",
        subject_prefix: str = "",
    ):
        self.default_from = default_from
        self.delivery_method = delivery_method
        self.perform_deliveries = perform_deliveries
        self.raise_delivery_errors = raise_delivery_errors
        self.deliver_later_queue_name = deliver_later_queue_name
        self.default_queue_name = default_queue_name
        self.charset = charset
        self.mime_version = mime_version
        self.content_type = content_type
        self.subject_prefix = subject_prefix

    def queue_for(self, mailer_queue_name: Any = None) -> Optional[str]:
        """
        Resolve the delivery queue for a mailer.

        The mailer's own ``deliver_later_queue_name`` wins, then this
        config's ``deliver_later_queue_name``, then ``default_queue_name``.
        Returns ``None`` if none of them is set.
        """
        for candidate in (
            mailer_queue_name,
            self.deliver_later_queue_name,
            self.default_queue_name,
        ):
            key = normalize_queue_name(candidate)
            if key:
                return key
        return None

    def copy(self, **overrides: Any) -> "MailerConfig":
        data = self.to_dict()
        data.update(overrides)
        return type(self)(**data)

    def to_dict(self) -> Dict[str, Any]:
        return {name: getattr(self, name) for name in self.__slots__}

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "MailerConfig":
        """Build a config from a dict, ignoring unknown keys."""
        known = {k: v for k, v in data.items() if k in cls.__slots__}
        return cls(**known)

    @classmethod
    def development(cls) -> "MailerConfig":
        """Pre-configured for local development (console delivery)."""
        return cls(default_from="dev@localhost", delivery_method="console")

    @classmethod
    def testing(cls, **overrides: Any) -> "MailerConfig":
        """Pre-configured for tests (deliveries captured in the outbox)."""
        config = cls(default_from="test@localhost", delivery_method="test")
        for k, v in overrides.items():
            setattr(config, k, v)
        return config

    def __eq__(self, other: object) -> bool:
        if isinstance(other, MailerConfig):
            return self.to_dict() == other.to_dict()
        return NotImplemented

    def __repr__(self) -> str:
        return (
            f"MailerConfig(delivery_method={self.delivery_method!r}, "
            f"deliver_later_queue_name={self.deliver_later_queue_name!r})"
        )
