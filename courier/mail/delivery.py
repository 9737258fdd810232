"""
Courier Mail Delivery Methods.

A delivery method is a callable ``method(message, config)``.  Built-ins:

    test     — append to the :class:`Outbox` (what tests assert against)
    console  — log the rendered message on the ``courier.mail`` logger

The outbox is an event source like the queue adapters: subscribed
listeners are called as ``listener(DELIVERED, message)``.
"""

from __future__ import annotations

import logging
from typing import Any, Callable, Iterator, List

from .message import EmailMessage

logger = logging.getLogger("courier.mail")

DELIVERED = "delivered"

Listener = Callable[[str, EmailMessage], None]
DeliveryMethod = Callable[[EmailMessage, Any], None]


class Outbox:
    """In-memory list of delivered messages with delivery listeners."""

    def __init__(self):
        self._messages: List[EmailMessage] = []
        self._listeners: List[Listener] = []

    def subscribe(self, listener: Listener) -> None:
        self._listeners.append(listener)

    def unsubscribe(self, listener: Listener) -> None:
        if listener in self._listeners:
            self._listeners.remove(listener)

    def append(self, message: EmailMessage) -> None:
        self._messages.append(message)
        for listener in list(self._listeners):
            listener(DELIVERED, message)

    def clear(self) -> None:
        self._messages.clear()

    @property
    def messages(self) -> List[EmailMessage]:
        return list(self._messages)

    @property
    def latest(self):
        return self._messages[-1] if self._messages else None

    def __len__(self) -> int:
        return len(self._messages)

    def __iter__(self) -> Iterator[EmailMessage]:
        return iter(list(self._messages))

    def __getitem__(self, index):
        return self._messages[index]

    def __repr__(self) -> str:
        return f"<Outbox messages={len(self._messages)}>"


class TestDelivery:
    """Delivery method that records messages in an :class:`Outbox`."""

    __test__ = False  # not a pytest test class

    def __init__(self, outbox: Outbox):
        self.outbox = outbox

    def __call__(self, message: EmailMessage, config: Any) -> None:
        self.outbox.append(message)


def console_delivery(message: EmailMessage, config: Any) -> None:
    """Delivery method that logs the message instead of sending it."""
    mime = message.to_mime()
    logger.info(
        f"[console] {message.mailer_name}#{message.action} → "
        f"{', '.join(message.recipients())}\n{mime.as_string()}"
    )
