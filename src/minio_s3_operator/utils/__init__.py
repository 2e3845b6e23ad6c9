"""Utility functions for the MinIO S3 Operator."""

from .conditions import conditions_from_diagnostics, update_condition
from .context import (
    ClientContext,
    get_context_dict,
    get_correlation_id,
    with_correlation_id,
)
from .diagnostics import Diagnostic, Diagnostics, Severity
from .diff import string_set_diff
from .events import emit_event
from .secrets import get_secret_value

__all__ = [
    "update_condition",
    "conditions_from_diagnostics",
    "ClientContext",
    "get_correlation_id",
    "with_correlation_id",
    "get_context_dict",
    "Diagnostic",
    "Diagnostics",
    "Severity",
    "string_set_diff",
    "emit_event",
    "get_secret_value",
]
