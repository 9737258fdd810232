"""
Courier Mailers — action-based message construction.

A mailer is a class whose ``@action`` methods build one message each by
calling :meth:`Mailer.mail`.  Calling an action on the *class* does not run
it; it returns a lazy :class:`MessageDelivery` that is delivered now or
scheduled for later::

    class AccountMailer(Mailer):
        deliver_later_queue_name = "mailers"

        @action
        def welcome(self, recipient, name):
            self.name = name
            self.mail(
                to=recipient,
                subject="Welcome!",
                body=self.render(inline="Hello, {{ name }}"),
            )

    AccountMailer.welcome("a@example.com", "Asha").deliver_now()
    AccountMailer.welcome("a@example.com", "Asha").deliver_later()
    AccountMailer.with_params(locale="en").welcome("a@example.com", "Asha").deliver_later()
"""

from __future__ import annotations

import functools
import logging
from pathlib import Path
from typing import Any, Callable, Dict, List, Mapping, Optional, Sequence, Type

from jinja2 import Environment, FileSystemLoader, StrictUndefined
from jinja2.exceptions import TemplateNotFound, UndefinedError

from ..jobs.descriptor import JobDescriptor
from .delivery_job import MailDeliveryJob
from .faults import MailDeliveryFault, MailTemplateFault
from .message import EmailMessage
from .service import get_mail_service

logger = logging.getLogger("courier.mail")

_mailer_registry: Dict[str, Type["Mailer"]] = {}

_inline_env = Environment(undefined=StrictUndefined, keep_trailing_newline=True)


def mailer_name_of(mailer_cls: type) -> str:
    """Fully qualified mailer name, as carried by delivery jobs."""
    return f"{mailer_cls.__module__}.{mailer_cls.__qualname__}"


def lookup_mailer(name: str) -> Type["Mailer"]:
    """Return the mailer class registered under its qualified *name*."""
    try:
        return _mailer_registry[name]
    except KeyError:
        raise MailDeliveryFault(f"No mailer registered as {name!r}", mailer=name) from None


def find_mailer(class_name: str) -> Optional[Type["Mailer"]]:
    """Find a registered mailer by bare class name (most recently defined wins)."""
    for mailer_cls in reversed(list(_mailer_registry.values())):
        if mailer_cls.__name__ == class_name:
            return mailer_cls
    return None


class action:
    """
    Mark a :class:`Mailer` method as an action.

    Accessed on the class, the action returns a :class:`MessageDelivery`
    factory; accessed on an instance it is the plain bound method.
    """

    def __init__(self, func: Callable[..., Any]):
        self.func = func
        self.name = func.__name__
        functools.update_wrapper(self, func)

    def __set_name__(self, owner: type, name: str) -> None:
        self.name = name

    def __get__(self, instance: Any, owner: type) -> Callable[..., Any]:
        if instance is not None:
            return self.func.__get__(instance, owner)

        @functools.wraps(self.func)
        def build_delivery(*args: Any, **kwargs: Any) -> "MessageDelivery":
            return MessageDelivery(owner, self.name, args, kwargs)

        return build_delivery


class Mailer:
    """
    Base class for mailers.

    Class attributes:
        delivery_job:             Job class used by ``deliver_later``.
        deliver_later_queue_name: Queue override for this mailer (str, enum
                                  member or None to use the configured one).
        default:                  Default ``mail()`` keyword arguments.
        template_path:            Directory searched by ``render(template=...)``.
    """

    delivery_job: Type[MailDeliveryJob] = MailDeliveryJob
    deliver_later_queue_name: Any = None
    default: Dict[str, Any] = {}
    template_path: Optional[str] = None

    def __init_subclass__(cls, **kwargs: Any) -> None:
        super().__init_subclass__(**kwargs)
        _mailer_registry[mailer_name_of(cls)] = cls

    def __init__(self, params: Optional[Mapping[str, Any]] = None):
        self.params: Dict[str, Any] = dict(params or {})
        self._message: Optional[EmailMessage] = None
        self._action_name: Optional[str] = None

    # ── Introspection ───────────────────────────────────────────────

    @classmethod
    def mailer_name(cls) -> str:
        return mailer_name_of(cls)

    @classmethod
    def action_methods(cls) -> List[str]:
        """Names of every action defined on this mailer or its bases."""
        names: List[str] = []
        for klass in reversed(cls.__mro__):
            for name, value in vars(klass).items():
                if isinstance(value, action) and name not in names:
                    names.append(name)
        return names

    @classmethod
    def with_params(cls, **params: Any) -> "ParameterizedMailer":
        """Bind construction parameters, available as ``self.params`` in actions."""
        return ParameterizedMailer(cls, params)

    # ── Processing ──────────────────────────────────────────────────

    def process(self, action_name: str, *args: Any, **kwargs: Any) -> Optional[EmailMessage]:
        """Run *action_name* and return the message it built (None if it built none)."""
        if action_name not in self.action_methods():
            raise MailDeliveryFault(
                f"{type(self).__name__} has no action {action_name!r}",
                mailer=self.mailer_name(),
                action=action_name,
            )
        self._action_name = action_name
        getattr(self, action_name)(*args, **kwargs)
        return self._message

    @property
    def message(self) -> Optional[EmailMessage]:
        return self._message

    def mail(
        self,
        *,
        subject: Optional[str] = None,
        body: Optional[str] = None,
        to: Any = None,
        from_email: Optional[str] = None,
        cc: Any = None,
        bcc: Any = None,
        reply_to: Optional[str] = None,
        headers: Optional[Dict[str, str]] = None,
        template: Optional[str] = None,
    ) -> EmailMessage:
        """Build this action's message; defaults come from ``default`` and the config."""
        service = get_mail_service()
        config = service.config
        defaults = dict(self.default)
        if body is None and template is not None:
            body = self.render(template=template)

        message = EmailMessage(
            subject=subject if subject is not None else defaults.get("subject", ""),
            body=body or "",
            from_email=from_email or defaults.get("from_email"),
            to=to if to is not None else defaults.get("to"),
            cc=cc if cc is not None else defaults.get("cc"),
            bcc=bcc if bcc is not None else defaults.get("bcc"),
            reply_to=reply_to or defaults.get("reply_to"),
            headers={**defaults.get("headers", {}), **(headers or {})},
            charset=config.charset,
            mime_version=config.mime_version,
            content_type=config.content_type,
        )
        message.mailer_name = self.mailer_name()
        message.action = self._action_name
        self._message = service.prepare(message)
        return self._message

    # ── Rendering ───────────────────────────────────────────────────

    def template_context(self, **extra: Any) -> Dict[str, Any]:
        """Public instance attributes plus ``params`` and *extra*."""
        context = {k: v for k, v in vars(self).items() if not k.startswith("_")}
        context.update(extra)
        return context

    def render(self, inline: Optional[str] = None, *, template: Optional[str] = None, **context: Any) -> str:
        """Render an inline jinja2 template string or a file under ``template_path``."""
        ctx = self.template_context(**context)
        try:
            if inline is not None:
                return _inline_env.from_string(inline).render(ctx)
            if template is None:
                raise MailTemplateFault("render() needs inline= or template=")
            return self._template_env().get_template(template).render(ctx)
        except (TemplateNotFound, UndefinedError) as e:
            raise MailTemplateFault(
                f"Cannot render {template or 'inline template'}: {e}",
                template_name=template,
            ) from e

    @classmethod
    @functools.lru_cache(maxsize=None)
    def _template_env(cls) -> Environment:
        search_path = cls.template_path or str(Path.cwd() / "mail_templates")
        return Environment(
            loader=FileSystemLoader(search_path),
            undefined=StrictUndefined,
            keep_trailing_newline=True,
        )

    def __repr__(self) -> str:
        return f"<{type(self).__name__} params={self.params!r}>"


class ParameterizedMailer:
    """A mailer class bound to construction parameters (``Mailer.with_params``)."""

    def __init__(self, mailer_cls: Type[Mailer], params: Mapping[str, Any]):
        self.mailer_cls = mailer_cls
        self.params = dict(params)

    def __getattr__(self, name: str) -> Callable[..., "MessageDelivery"]:
        if name.startswith("_") or name not in self.mailer_cls.action_methods():
            raise AttributeError(
                f"{self.mailer_cls.__name__!r} has no action {name!r}"
            )

        def build_delivery(*args: Any, **kwargs: Any) -> "MessageDelivery":
            return MessageDelivery(self.mailer_cls, name, args, kwargs, params=self.params)

        return build_delivery

    def __eq__(self, other: object) -> bool:
        if isinstance(other, ParameterizedMailer):
            return self.mailer_cls is other.mailer_cls and self.params == other.params
        return NotImplemented

    def __repr__(self) -> str:
        return f"<ParameterizedMailer {self.mailer_cls.__name__} params={self.params!r}>"


class MessageDelivery:
    """
    A pending mailer action.

    The action runs only when :attr:`message` is read or on ``deliver_now``.
    ``deliver_later`` must be called before the message is built, since the
    job re-runs the action in the worker.
    """

    def __init__(
        self,
        mailer_cls: Type[Mailer],
        action_name: str,
        args: Sequence[Any] = (),
        kwargs: Optional[Mapping[str, Any]] = None,
        *,
        params: Optional[Mapping[str, Any]] = None,
    ):
        self.mailer_cls = mailer_cls
        self.action_name = action_name
        self.args = tuple(args)
        self.kwargs = dict(kwargs or {})
        self.params = dict(params) if params is not None else None
        self._mailer: Optional[Mailer] = None

    @property
    def processed(self) -> bool:
        return self._mailer is not None

    @property
    def message(self) -> Optional[EmailMessage]:
        if self._mailer is None:
            mailer = self.mailer_cls(self.params)
            mailer.process(self.action_name, *self.args, **self.kwargs)
            self._mailer = mailer
        return self._mailer.message

    def deliver_now(self) -> Optional[EmailMessage]:
        """Build and deliver the message immediately."""
        message = self.message
        if message is None:
            logger.debug(
                f"{self.mailer_cls.__name__}#{self.action_name} built no message; nothing delivered"
            )
            return None
        get_mail_service().deliver(message)
        return message

    def deliver_later(
        self,
        *,
        wait: Any = None,
        wait_until: Any = None,
        queue: Any = None,
        priority: Optional[int] = None,
    ) -> JobDescriptor:
        """Enqueue the mailer's delivery job to build and deliver the message later."""
        if self.processed:
            raise MailDeliveryFault(
                f"{self.mailer_cls.__name__}#{self.action_name}: the message was already "
                f"built; deliver_later must be called before accessing it",
                mailer=self.mailer_cls.mailer_name(),
                action=self.action_name,
            )
        job_kwargs: Dict[str, Any] = {"args": list(self.args)}
        if self.kwargs:
            job_kwargs["kwargs"] = dict(self.kwargs)
        if self.params is not None:
            job_kwargs["params"] = dict(self.params)
        job = self.mailer_cls.delivery_job.set(
            queue=queue, wait=wait, wait_until=wait_until, priority=priority,
        )
        return job.perform_later(
            self.mailer_cls.mailer_name(), self.action_name, "deliver_now", **job_kwargs,
        )

    def __repr__(self) -> str:
        return f"<MessageDelivery {self.mailer_cls.__name__}#{self.action_name} args={list(self.args)!r}>"
