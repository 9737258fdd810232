"""
Courier Mail — the job that delivers mail scheduled with ``deliver_later``.

Job arguments:
    positional: (mailer name, action name, "deliver_now")
    named:      args=[...], kwargs={...} (if any), params={...} (if parameterized)
"""

from __future__ import annotations

from typing import Any, Mapping, Optional, Sequence

from ..jobs.base import Job
from .faults import MailConfigFault, MailDeliveryFault

DELIVERY_METHODS = ("deliver_now",)


class MailDeliveryJob(Job):
    """Rebuilds a mailer action in the worker and delivers it."""

    queue_name = None

    @classmethod
    def resolve_queue_name(
        cls,
        positional_args: Sequence[Any],
        named_args: Mapping[str, Any],
    ) -> str:
        from .mailer import lookup_mailer
        from .service import get_mail_service

        mailer_cls = lookup_mailer(positional_args[0])
        config = get_mail_service().config
        queue = config.queue_for(mailer_cls.deliver_later_queue_name)
        if queue is None:
            raise MailConfigFault(
                f"No delivery queue for {mailer_cls.__name__}: set deliver_later_queue_name "
                f"on the mailer or the config, or a default_queue_name",
                config_key="mail.default_queue_name",
            )
        return queue

    @classmethod
    def instance_params_for(
        cls,
        positional_args: Sequence[Any],
        named_args: Mapping[str, Any],
    ) -> Optional[Mapping[str, Any]]:
        return named_args.get("params")

    def perform(
        self,
        mailer: str,
        mail_method: str,
        delivery_method: str,
        *,
        args: Sequence[Any] = (),
        kwargs: Optional[Mapping[str, Any]] = None,
        params: Optional[Mapping[str, Any]] = None,
    ) -> Any:
        from .mailer import MessageDelivery, lookup_mailer

        if delivery_method not in DELIVERY_METHODS:
            raise MailDeliveryFault(
                f"Unsupported delivery method {delivery_method!r} for queued mail",
                mailer=mailer,
                action=mail_method,
            )
        delivery = MessageDelivery(
            lookup_mailer(mailer), mail_method, args, kwargs, params=params,
        )
        return getattr(delivery, delivery_method)()
