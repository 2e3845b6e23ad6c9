"""Client handles and correlation IDs passed through a reconcile invocation."""

from __future__ import annotations

import contextvars
import threading
import uuid
from contextlib import contextmanager
from dataclasses import dataclass, field
from typing import Any, Iterator

from ..services.s3.base import AdminProvider, StorageProvider

# Context variable for storing correlation ID
correlation_id: contextvars.ContextVar[str | None] = contextvars.ContextVar(
    "correlation_id", default=None
)


@dataclass
class ClientContext:
    """Remote client handles for one reconcile stream.

    Concurrent reconcile invocations must each use their own context.

    Attributes:
        storage: Object-storage control client
        admin: Administration client
        cancelled: Set by the caller to abort the remaining remote calls
    """

    storage: StorageProvider
    admin: AdminProvider
    cancelled: threading.Event = field(default_factory=threading.Event)

    def cancel(self) -> None:
        """Request cancellation of every remote call not issued yet."""
        self.cancelled.set()

    def is_cancelled(self) -> bool:
        return self.cancelled.is_set()


def get_correlation_id() -> str | None:
    """Get the correlation ID from the current context."""
    return correlation_id.get()


@contextmanager
def with_correlation_id(corr_id: str | None = None) -> Iterator[str]:
    """Context manager to set a correlation ID for the duration of a block.

    Args:
        corr_id: Correlation ID to use, a new one is generated if omitted

    Yields:
        The correlation ID
    """
    corr_id = corr_id or uuid.uuid4().hex
    token = correlation_id.set(corr_id)
    try:
        yield corr_id
    finally:
        correlation_id.reset(token)


def get_context_dict(additional: dict[str, Any] | None = None) -> dict[str, Any]:
    """Get a dictionary of context values including the correlation ID."""
    ctx: dict[str, Any] = {}

    corr_id = get_correlation_id()
    if corr_id:
        ctx["correlation_id"] = corr_id

    if additional:
        ctx.update(additional)

    return ctx
