"""
Courier Faults - the typed error core.

Every error Courier raises is a :class:`Fault`: a stable code, a message,
the domain it came from and a severity.  ``courier.jobs``, ``courier.mail``
and ``courier.testing`` each build their fault families on top of it.
"""

from __future__ import annotations

from enum import Enum
from typing import Any, Optional


class Severity(str, Enum):
    """How bad a fault is. FATAL faults mean the setup itself is broken."""
    ERROR = "error"
    FATAL = "fatal"


class FaultDomain:
    """Named area a fault belongs to."""

    def __init__(self, name: str, description: str = ""):
        self.name = name
        self.description = description

    def __str__(self) -> str:
        return self.name

    def __repr__(self) -> str:
        return f"FaultDomain(name='{self.name}')"

    def __eq__(self, other: Any) -> bool:
        if isinstance(other, FaultDomain):
            return self.name == other.name
        return self.name == str(other)

    def __hash__(self) -> int:
        return hash(self.name)


FaultDomain.JOBS = FaultDomain("jobs", "Job queue and adapter faults")
FaultDomain.MAIL = FaultDomain("mail", "Mailer, message and delivery faults")
FaultDomain.TESTING = FaultDomain("testing", "Assertion failures raised by test helpers")


class Fault(Exception):
    """
    Structured error with a code, a message and a domain.

    Subclasses may set ``code`` and ``domain`` as class attributes instead
    of passing them.

    Example::

        raise Fault(
            code="JOB_NOT_FOUND",
            message="No job class registered as 'app.jobs.Cleanup'",
            domain=FaultDomain.JOBS,
        )
    """

    def __init__(
        self,
        code: str | None = None,
        message: str | None = None,
        *,
        domain: FaultDomain | None = None,
        severity: Severity = Severity.ERROR,
        metadata: Optional[dict[str, Any]] = None,
    ):
        self.code = code if code is not None else getattr(self, "code", None)
        self.message = message if message is not None else getattr(self, "message", None)
        self.domain = domain if domain is not None else getattr(self, "domain", None)

        if self.code is None or self.message is None or self.domain is None:
            raise TypeError(f"{self.__class__.__name__} missing required code, message, or domain")

        super().__init__(self.message)
        self.severity = severity
        self.metadata = metadata or {}

    def __str__(self) -> str:
        return f"[{self.code}] {self.message}"

    def __repr__(self) -> str:
        return (
            f"Fault(code={self.code!r}, domain={self.domain.name}, "
            f"severity={self.severity.value})"
        )

    def to_dict(self) -> dict[str, Any]:
        return {
            "code": self.code,
            "message": self.message,
            "domain": self.domain.name,
            "severity": self.severity.value,
            "metadata": self.metadata,
        }
