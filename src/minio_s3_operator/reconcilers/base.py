"""Base reconciler class with common functionality for all resource kinds."""

from __future__ import annotations

import logging
import time
from typing import Any, Callable, Generic, TypeVar

from .. import metrics
from ..logging import log_resource_event
from ..utils.context import ClientContext
from ..utils.diagnostics import Diagnostics
from ..utils.errors import ReconcileCancelled, ReconcileError, RemoteError, sanitize_exception

T = TypeVar("T")
R = TypeVar("R")


class BaseReconciler(Generic[T]):
    """Base class for all resource reconcilers.

    Subclasses implement ``create``, ``read``, ``update`` and ``delete`` for
    one resource kind. Every remote call goes through ``call`` so that
    cancellation, metrics and error conversion behave the same everywhere.
    """

    def __init__(self, kind: str):
        """Initialize base reconciler.

        Args:
            kind: The resource kind (e.g., "MinioBucket")
        """
        self.kind = kind
        self.logger = logging.getLogger(__name__)

    def log_info(self, name: str, message: str, event: str = "info", reason: str = "Info", **kwargs: Any) -> None:
        """Log an info-level structured log message."""
        log_resource_event(self.logger, self.kind, name, event, reason, message, **kwargs)

    def log_warning(
        self, name: str, message: str, event: str = "warning", reason: str = "Warning", **kwargs: Any
    ) -> None:
        """Log a warning-level structured log message."""
        log_resource_event(self.logger, self.kind, name, event, reason, message, level=logging.WARNING, **kwargs)

    def log_error(
        self,
        name: str,
        message: str,
        error: Exception | None = None,
        event: str = "error",
        reason: str = "Error",
        **kwargs: Any,
    ) -> None:
        """Log an error-level structured log message.

        Args:
            name: Identity of the resource
            message: Log message
            error: Optional exception to include sanitized error details
            event: Event type (default: "error")
            reason: Reason for the event (default: "Error")
            **kwargs: Additional fields to include in the log
        """
        if error is not None:
            kwargs["error"] = sanitize_exception(error)
            kwargs["error_type"] = type(error).__name__
        log_resource_event(self.logger, self.kind, name, event, reason, message, level=logging.ERROR, **kwargs)

    def call(
        self,
        ctx: ClientContext,
        api_type: str,
        operation: str,
        fn: Callable[..., R],
        *args: Any,
        **kwargs: Any,
    ) -> R:
        """Issue one remote call.

        Args:
            ctx: Client context of this invocation
            api_type: "s3" or "admin", used as metric label
            operation: Operation name, used as metric label
            fn: Client method to call

        Raises:
            ReconcileCancelled: If the context was cancelled before the call
            RemoteError: If the call failed
        """
        if ctx.is_cancelled():
            raise ReconcileCancelled(f"Reconcile cancelled before {operation}")

        start_time = time.time()
        try:
            result = fn(*args, **kwargs)
            metrics.api_call_total.labels(api_type=api_type, operation=operation, result="success").inc()
            return result
        except ReconcileError:
            metrics.api_call_total.labels(api_type=api_type, operation=operation, result="error").inc()
            raise
        except Exception as e:
            metrics.api_call_total.labels(api_type=api_type, operation=operation, result="error").inc()
            raise RemoteError(f"{operation} failed: {sanitize_exception(e)}") from e
        finally:
            duration = time.time() - start_time
            metrics.api_call_duration_seconds.labels(api_type=api_type, operation=operation).observe(duration)

    def warn(self, diags: Diagnostics, name: str, attribute: str, message: str) -> None:
        """Record a warning and log it."""
        diags.warn(attribute, message)
        self.log_warning(name, message, reason="PartiallyApplied", attribute=attribute)

    def fail(self, diags: Diagnostics, name: str, error: Exception, attribute: str = "", summary: str = "") -> None:
        """Record a fatal error and log it."""
        diags.from_exception(error, attribute=attribute, summary=summary)
        self.log_error(name, summary or "Reconcile step failed", error=error, reason="ReconcileFailed",
                       attribute=diags[-1].attribute)

    def create(self, ctx: ClientContext, declared: T, diags: Diagnostics) -> tuple[str | None, T | None]:
        """Create the resource. Returns the bound identity and the snapshot."""
        raise NotImplementedError

    def read(self, ctx: ClientContext, identity: str, diags: Diagnostics, declared: T | None = None) -> T | None:
        """Re-derive the snapshot from the remote service."""
        raise NotImplementedError

    def update(self, ctx: ClientContext, identity: str, old: T, new: T, diags: Diagnostics) -> T | None:
        """Move the resource from ``old`` to ``new`` declared state."""
        raise NotImplementedError

    def delete(self, ctx: ClientContext, identity: str, diags: Diagnostics) -> None:
        """Delete the resource."""
        raise NotImplementedError
