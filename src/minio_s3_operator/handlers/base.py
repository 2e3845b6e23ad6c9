"""Base handler class with common functionality for all CRD handlers."""

from __future__ import annotations

import logging
from datetime import datetime, timezone
from typing import Any, Callable, Generic, TypeVar

import kopf

from .. import metrics
from ..constants import FINALIZER
from ..coordinator import ReconcileResult
from ..logging import log_resource_event
from ..utils.conditions import conditions_from_diagnostics
from ..utils.context import with_correlation_id
from ..utils.errors import ValidationError, sanitize_exception
from ..utils.events import emit_deleted, emit_diagnostics, emit_reconcile_started, emit_validate_failed
from . import shared

T = TypeVar("T")

# Delay before kopf retries a reconcile that reported errors
RETRY_DELAY_SECONDS = 60


class ResourceHandler(Generic[T]):
    """Bridges kopf events of one CRD kind to the coordinator.

    The resource ``spec`` is the declared state. The bound identity, the last
    snapshot, the diagnostics and the conditions are kept in ``status``.
    """

    def __init__(
        self,
        kind: str,
        from_spec: Callable[[dict[str, Any]], T],
        to_spec: Callable[[T], dict[str, Any]],
    ):
        """Initialize resource handler.

        Args:
            kind: The Kubernetes resource kind (e.g., "MinioBucket")
            from_spec: Decoder from a spec mapping to a declared model
            to_spec: Renderer from a snapshot model to a spec mapping
        """
        self.kind = kind
        self.from_spec = from_spec
        self.to_spec = to_spec
        self.logger = logging.getLogger(__name__)

    def _get_resource_context(self, meta: dict[str, Any]) -> dict[str, Any]:
        return {
            "name": meta.get("name", "unknown"),
            "namespace": meta.get("namespace", "default"),
            "uid": meta.get("uid", "unknown"),
        }

    def log_info(self, meta: dict[str, Any], message: str, event: str = "info", reason: str = "Info", **kwargs: Any) -> None:
        """Log an info-level structured log message."""
        ctx = self._get_resource_context(meta)
        log_resource_event(
            self.logger, self.kind, ctx["name"], event, reason, message,
            namespace=ctx["namespace"], uid=ctx["uid"], **kwargs,
        )

    def log_error(
        self,
        meta: dict[str, Any],
        message: str,
        error: Exception | None = None,
        event: str = "error",
        reason: str = "Error",
        **kwargs: Any,
    ) -> None:
        """Log an error-level structured log message.

        Args:
            meta: Kubernetes resource metadata
            message: Log message
            error: Optional exception to include sanitized error details
            event: Event type (default: "error")
            reason: Reason for the event (default: "Error")
            **kwargs: Additional fields to include in the log
        """
        ctx = self._get_resource_context(meta)
        log_data = kwargs.copy()

        if error is not None:
            log_data["error"] = sanitize_exception(error)
            log_data["error_type"] = type(error).__name__

        log_resource_event(
            self.logger, self.kind, ctx["name"], event, reason, message,
            level=logging.ERROR, namespace=ctx["namespace"], uid=ctx["uid"], **log_data,
        )

    def ensure_finalizer(self, meta: dict[str, Any], patch: kopf.Patch) -> None:
        """Ensure finalizer is present in metadata."""
        finalizers = list(meta.get("finalizers", []))
        if FINALIZER not in finalizers:
            finalizers.append(FINALIZER)
            patch.metadata["finalizers"] = finalizers

    def remove_finalizer(self, meta: dict[str, Any], patch: kopf.Patch) -> None:
        """Remove finalizer from metadata."""
        finalizers = list(meta.get("finalizers", []))
        if FINALIZER in finalizers:
            finalizers.remove(FINALIZER)
            patch.metadata["finalizers"] = finalizers if finalizers else None

    def build(self, spec: dict[str, Any], for_create: bool = False) -> T:
        """Build the declared model from a spec mapping."""
        return self.from_spec(spec)

    def decode(self, spec: dict[str, Any], body: dict[str, Any], for_create: bool = False) -> T:
        """Decode the declared state of a resource.

        ``for_create`` is set when the result is used to create the remote
        resource, which may need attributes an update does not.

        Raises:
            kopf.PermanentError: If the spec is invalid
        """
        try:
            return self.build(dict(spec), for_create)
        except ValidationError as e:
            message = f"Invalid spec: {e.attribute}: {e.message}" if e.attribute else f"Invalid spec: {e.message}"
            self.log_error(body.get("metadata", {}), message, reason="ValidationFailed")
            emit_validate_failed(body, message)
            metrics.reconcile_total.labels(kind=self.kind, action="validate", result="failed").inc()
            raise kopf.PermanentError(message) from e

    def decode_snapshot(
        self,
        snapshot: dict[str, Any],
        old_spec: dict[str, Any] | None,
        declared: T,
        status: dict[str, Any],
    ) -> T:
        """Decode the snapshot stored in status as the prior state of an update."""
        return self.from_spec(dict(snapshot))

    def create(self, body: dict[str, Any], patch: kopf.Patch) -> None:
        """Create the remote resource and bind its identity."""
        self.ensure_finalizer(body.get("metadata", {}), patch)
        declared = self.decode(body.get("spec", {}), body, for_create=True)
        with with_correlation_id():
            emit_reconcile_started(body, "create")
            ctx = shared.new_client_context()
            result = shared.get_coordinator().create(ctx, declared)
            self.apply_result(body, patch, "create", result)

    def update(self, body: dict[str, Any], old_spec: dict[str, Any] | None, patch: kopf.Patch) -> None:
        """Move the bound resource to the new declared state.

        The last snapshot in status is the prior state. Without a bound
        identity the resource is created instead.
        """
        status = body.get("status", {})
        identity = status.get("identity")
        snapshot = status.get("snapshot")
        if not identity or snapshot is None:
            self.sync(body, patch)
            return

        meta = body.get("metadata", {})
        self.ensure_finalizer(meta, patch)
        declared = self.decode(body.get("spec", {}), body)
        try:
            old = self.decode_snapshot(snapshot, old_spec, declared, status)
        except ValidationError as e:
            self.log_error(meta, "Stored snapshot is unusable, re-reading remote state", error=e, reason="SnapshotInvalid")
            self.sync(body, patch)
            return

        with with_correlation_id():
            emit_reconcile_started(body, "update")
            ctx = shared.new_client_context()
            result = shared.get_coordinator().update(ctx, identity, old, declared)
            self.apply_result(body, patch, "update", result)

    def sync(self, body: dict[str, Any], patch: kopf.Patch, create_unbound: bool = True) -> None:
        """Re-read the remote resource and correct drift."""
        identity = body.get("status", {}).get("identity")
        if not identity and not create_unbound:
            return

        self.ensure_finalizer(body.get("metadata", {}), patch)
        declared = self.decode(body.get("spec", {}), body, for_create=not identity)
        with with_correlation_id():
            ctx = shared.new_client_context()
            result = shared.get_coordinator().sync(ctx, declared, identity)
            self.apply_result(body, patch, "sync", result)

    def delete(self, body: dict[str, Any], patch: kopf.Patch) -> None:
        """Delete the bound remote resource.

        Raises:
            kopf.TemporaryError: If deletion reported errors, the finalizer stays
        """
        meta = body.get("metadata", {})
        identity = body.get("status", {}).get("identity")
        if identity:
            with with_correlation_id():
                ctx = shared.new_client_context()
                diags = shared.get_coordinator().delete(ctx, self.kind, identity)
            if diags.has_error():
                message = "; ".join(d.message for d in diags.errors)
                emit_diagnostics(body, "delete", diags)
                raise kopf.TemporaryError(f"Deletion of {identity} failed: {message}", delay=RETRY_DELAY_SECONDS)
            emit_deleted(body, identity)
            self.log_info(meta, f"Deleted {identity}", event="delete", reason="Deleted")
        self.remove_finalizer(meta, patch)

    def apply_result(self, body: dict[str, Any], patch: kopf.Patch, action: str, result: ReconcileResult[Any]) -> None:
        """Record a reconcile result in status.

        Raises:
            kopf.TemporaryError: If the result carries errors
        """
        generation = body.get("metadata", {}).get("generation", 0)
        conditions = body.get("status", {}).get("conditions", [])
        status_update: dict[str, Any] = {
            "diagnostics": result.diagnostics.to_list(),
            "conditions": conditions_from_diagnostics(conditions, result.diagnostics, generation),
            "observedGeneration": generation,
            "lastSyncTime": datetime.now(timezone.utc).isoformat(),
        }
        if result.identity is not None:
            status_update["identity"] = result.identity
        if result.snapshot is not None:
            status_update["snapshot"] = self.to_spec(result.snapshot)
        status_update.update(self.status_extras(body, action, result))
        patch.status.update(status_update)

        emit_diagnostics(body, action, result.diagnostics)
        if not result.ok:
            message = "; ".join(d.message for d in result.diagnostics.errors)
            raise kopf.TemporaryError(f"Reconciliation failed: {message}", delay=RETRY_DELAY_SECONDS)

    def status_extras(self, body: dict[str, Any], action: str, result: ReconcileResult[Any]) -> dict[str, Any]:
        """Additional status fields a resource kind records after a reconcile."""
        return {}
