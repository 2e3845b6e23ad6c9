"""Error types and sanitization utilities for reconciliation."""

from __future__ import annotations

import re
from typing import Any


class ReconcileError(Exception):
    """Base class for all reconciliation errors.

    Args:
        message: Human-readable error message
        attribute: Attribute path the error refers to, if any
    """

    def __init__(self, message: str, attribute: str = "") -> None:
        super().__init__(message)
        self.message = message
        self.attribute = attribute


class ValidationError(ReconcileError):
    """Declared state was rejected before any remote call was issued."""


class RemoteError(ReconcileError):
    """A call to the storage or administration service failed."""


class NotFoundError(RemoteError):
    """The resource no longer exists on the remote service."""


class ReconcileCancelled(ReconcileError):
    """The calling context cancelled the reconcile before a remote call."""


# Patterns that might expose sensitive information
SENSITIVE_PATTERNS = [
    r"access[_\s]?key[_\s]?id[:\s]+([A-Z0-9]{20})",
    r"secret[_\s]?access[_\s]?key[:\s]+([A-Za-z0-9/+=]{40})",
    r"session[_\s]?token[:\s]+([A-Za-z0-9/+=]+)",
    r"x-amz-credential=([A-Za-z0-9/%\-_]+)",
]

# Fields to redact completely
SENSITIVE_FIELDS = {
    "secret_key",
    "secret_access_key",
    "session_token",
    "password",
    "credentials",
    "token",
}


def sanitize_error_message(message: str) -> str:
    """Sanitize error message to remove sensitive information.

    Args:
        message: Original error message

    Returns:
        Sanitized error message with sensitive data redacted
    """
    sanitized = message

    for pattern in SENSITIVE_PATTERNS:
        sanitized = re.sub(pattern, "[REDACTED]", sanitized, flags=re.IGNORECASE)

    for field in SENSITIVE_FIELDS:
        sanitized = re.sub(
            rf"{field}[:=\s]+([^\s,;\)]+)",
            rf"{field}: [REDACTED]",
            sanitized,
            flags=re.IGNORECASE,
        )

    return sanitized


def sanitize_exception(error: Exception) -> str:
    """Sanitize exception message.

    Args:
        error: Exception object

    Returns:
        Sanitized error message
    """
    if isinstance(error, ReconcileError):
        return sanitize_error_message(error.message)
    return sanitize_error_message(str(error))


def sanitize_dict(data: dict[str, Any], sensitive_keys: set[str] | None = None) -> dict[str, Any]:
    """Sanitize dictionary by redacting sensitive fields.

    Args:
        data: Dictionary to sanitize
        sensitive_keys: Additional keys to redact (merged with SENSITIVE_FIELDS)

    Returns:
        Sanitized dictionary with sensitive values redacted
    """
    all_sensitive = SENSITIVE_FIELDS | (sensitive_keys or set())
    sanitized: dict[str, Any] = {}

    for key, value in data.items():
        key_lower = key.lower()
        if any(sensitive in key_lower for sensitive in all_sensitive):
            sanitized[key] = "[REDACTED]"
        elif isinstance(value, dict):
            sanitized[key] = sanitize_dict(value, sensitive_keys)
        elif isinstance(value, str):
            sanitized[key] = sanitize_error_message(value)
        else:
            sanitized[key] = value

    return sanitized
