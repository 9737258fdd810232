"""
Courier Mail Messages.

:class:`EmailMessage` is the object a mailer action produces and a delivery
method receives.  It is a plain-text message; ``to_mime()`` renders it with
the standard library ``email`` package for transports that need bytes.
"""

from __future__ import annotations

import re
from email.charset import QP, Charset
from email.header import Header
from email.mime.text import MIMEText
from email.utils import formatdate, make_msgid
from typing import Any, Dict, List, Optional, Sequence, Union

from .faults import MailValidationFault

# Basic email regex for fast validation (not RFC-complete but practical)
_EMAIL_RE = re.compile(
    r"^[a-zA-Z0-9.!#$%&'*+/=?^_`{|}~-]+@[a-zA-Z0-9-]+(?:\.[a-zA-Z0-9-]+)*$"
)


def _validate_email(addr: str, field_name: str = "email") -> str:
    """Validate and normalise a single email address."""
    addr = addr.strip()
    if not addr:
        raise MailValidationFault(f"Empty {field_name} address", field=field_name)
    # Handle "Display Name <addr>" format
    if "<" in addr and addr.endswith(">"):
        raw = addr.rsplit("<", 1)[1].rstrip(">").strip()
    else:
        raw = addr
    if not _EMAIL_RE.match(raw):
        raise MailValidationFault(
            f"Invalid {field_name} address: {addr!r}", field=field_name
        )
    return addr


def _validate_list(
    addrs: Union[str, Sequence[str], None], field_name: str
) -> List[str]:
    """Validate one address or a list of addresses."""
    if not addrs:
        return []
    if isinstance(addrs, str):
        addrs = [addrs]
    return [_validate_email(a, field_name) for a in addrs]


def encode_header(value: str, charset: str = "UTF-8") -> str:
    """RFC 2047 Q-encode a header value."""
    cs = Charset(charset.lower())
    cs.header_encoding = QP
    return Header(value, cs).encode()


class EmailMessage:
    """
    A single plain-text email message.

    Usage:
        msg = EmailMessage(
            subject="Hello",
            body="World",
            to="user@example.com",
            from_email="app@example.com",
        )
    """

    def __init__(
        self,
        subject: str = "",
        body: str = "",
        from_email: Optional[str] = None,
        to: Union[str, Sequence[str], None] = None,
        cc: Union[str, Sequence[str], None] = None,
        bcc: Union[str, Sequence[str], None] = None,
        reply_to: Optional[str] = None,
        headers: Optional[Dict[str, str]] = None,
        charset: str = "UTF-8",
        mime_version: str = "1.0",
        content_type: str = "text/plain",
    ):
        self.subject = subject
        self.body = body
        self.from_email = from_email
        self.to = _validate_list(to, "to")
        self.cc = _validate_list(cc, "cc")
        self.bcc = _validate_list(bcc, "bcc")
        self.reply_to = reply_to
        self.extra_headers = dict(headers or {})
        self.charset = charset
        self.mime_version = mime_version
        self.content_type = content_type
        # Set by the mailer that built the message
        self.mailer_name: Optional[str] = None
        self.action: Optional[str] = None

    @property
    def mime_type(self) -> str:
        return self.content_type

    def recipients(self) -> List[str]:
        """All recipients (to + cc + bcc), order preserved."""
        return [*self.to, *self.cc, *self.bcc]

    def to_mime(self) -> MIMEText:
        """Render as a standard library MIME message."""
        subtype = self.content_type.split("/", 1)[-1]
        mime = MIMEText(self.body, subtype, self.charset.lower())
        mime["Subject"] = encode_header(self.subject, self.charset)
        if self.from_email:
            mime["From"] = self.from_email
        if self.to:
            mime["To"] = ", ".join(self.to)
        if self.cc:
            mime["Cc"] = ", ".join(self.cc)
        if self.reply_to:
            mime["Reply-To"] = self.reply_to
        mime["Date"] = formatdate(localtime=False)
        mime["Message-ID"] = make_msgid()
        for name, value in self.extra_headers.items():
            mime[name] = value
        return mime

    def to_dict(self) -> Dict[str, Any]:
        return {
            "subject": self.subject,
            "body": self.body,
            "from_email": self.from_email,
            "to": list(self.to),
            "cc": list(self.cc),
            "bcc": list(self.bcc),
            "reply_to": self.reply_to,
            "headers": dict(self.extra_headers),
            "charset": self.charset,
            "mailer": self.mailer_name,
            "action": self.action,
        }

    def __repr__(self) -> str:
        return (
            f"EmailMessage(subject={self.subject!r}, "
            f"to={self.to!r})"
        )
