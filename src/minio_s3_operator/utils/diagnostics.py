"""Diagnostics accumulated during a single reconcile invocation."""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Any, Iterable

from .errors import ReconcileError, sanitize_exception


class Severity(str, Enum):
    """Severity of a diagnostic."""

    WARNING = "warning"
    ERROR = "error"


@dataclass(frozen=True)
class Diagnostic:
    """One warning or error, scoped to an attribute path."""

    severity: Severity
    attribute: str
    message: str

    def to_dict(self) -> dict[str, Any]:
        """Render the diagnostic for status output."""
        return {
            "severity": self.severity.value,
            "attribute": self.attribute,
            "message": self.message,
        }


class Diagnostics(list):
    """Ordered list of diagnostics with severity helpers."""

    def __init__(self, items: Iterable[Diagnostic] = ()) -> None:
        super().__init__(items)

    def warn(self, attribute: str, message: str) -> None:
        """Append a warning for ``attribute``."""
        self.append(Diagnostic(Severity.WARNING, attribute, message))

    def error(self, attribute: str, message: str) -> None:
        """Append a fatal error for ``attribute``."""
        self.append(Diagnostic(Severity.ERROR, attribute, message))

    def from_exception(self, error: Exception, attribute: str = "", summary: str = "") -> None:
        """Append a fatal error describing ``error``.

        Args:
            error: Exception that occurred
            attribute: Attribute path, defaults to the one carried by the error
            summary: Optional prefix for the message
        """
        if not attribute and isinstance(error, ReconcileError):
            attribute = error.attribute
        message = sanitize_exception(error)
        if summary:
            message = f"{summary}: {message}"
        self.error(attribute, message)

    def merge(self, other: Iterable[Diagnostic]) -> bool:
        """Append ``other`` and report whether processing may continue.

        For callers that compose the results of several reconciler runs. The
        reconcilers themselves append to the accumulator they are given.

        Returns:
            False if ``other`` contained an error, True otherwise
        """
        other = list(other)
        self.extend(other)
        return not any(d.severity is Severity.ERROR for d in other)

    def has_error(self) -> bool:
        return any(d.severity is Severity.ERROR for d in self)

    @property
    def errors(self) -> list[Diagnostic]:
        return [d for d in self if d.severity is Severity.ERROR]

    @property
    def warnings(self) -> list[Diagnostic]:
        return [d for d in self if d.severity is Severity.WARNING]

    def to_list(self) -> list[dict[str, Any]]:
        return [d.to_dict() for d in self]
