"""Coordinator driving create, read, update and delete per resource."""

from __future__ import annotations

import logging
import time
from dataclasses import dataclass, fields, replace
from typing import Any, Callable, Generic, TypeVar

from . import metrics
from .constants import KEY_SECRET_KEY, KIND_BUCKET, KIND_CANNED_POLICY, KIND_GROUP, KIND_USER
from .logging import log_resource_event
from .models import Bucket, CannedPolicy, Group, Resource, UserAccount, identity_of
from .reconcilers import (
    BaseReconciler,
    BucketReconciler,
    CannedPolicyReconciler,
    GroupReconciler,
    UserReconciler,
)
from .utils.context import ClientContext
from .utils.diagnostics import Diagnostics, Severity
from .utils.errors import ReconcileCancelled, sanitize_exception

T = TypeVar("T")

KIND_BY_MODEL: dict[type, str] = {
    Bucket: KIND_BUCKET,
    UserAccount: KIND_USER,
    Group: KIND_GROUP,
    CannedPolicy: KIND_CANNED_POLICY,
}

# Write-only attributes never take part in drift detection
WRITE_ONLY_ATTRIBUTES = {KEY_SECRET_KEY}


@dataclass
class ReconcileResult(Generic[T]):
    """Outcome of one reconcile invocation.

    When ``ok`` is False the caller must not trust ``snapshot`` as fully
    applied.
    """

    identity: str | None
    snapshot: T | None
    diagnostics: Diagnostics

    @property
    def ok(self) -> bool:
        return not self.diagnostics.has_error()


def kind_of(resource: Resource) -> str:
    """Return the resource kind of a declared model."""
    return KIND_BY_MODEL[type(resource)]


def default_reconcilers() -> dict[str, BaseReconciler[Any]]:
    return {
        KIND_BUCKET: BucketReconciler(),
        KIND_USER: UserReconciler(),
        KIND_GROUP: GroupReconciler(),
        KIND_CANNED_POLICY: CannedPolicyReconciler(),
    }


class Coordinator:
    """Sequences reconcilers and aggregates their diagnostics.

    Every remote call is attempted at most once per invocation; retrying is
    left to whoever drives the next reconcile cycle.
    """

    def __init__(self, reconcilers: dict[str, BaseReconciler[Any]] | None = None) -> None:
        self.reconcilers = reconcilers if reconcilers is not None else default_reconcilers()
        self.logger = logging.getLogger(__name__)

    def reconciler_for(self, kind: str) -> BaseReconciler[Any]:
        try:
            return self.reconcilers[kind]
        except KeyError:
            raise ValueError(f"Unsupported resource kind: {kind}") from None

    def _run(
        self,
        kind: str,
        action: str,
        name: str,
        fn: Callable[[Diagnostics], tuple[str | None, Any]],
    ) -> ReconcileResult[Any]:
        """Run one reconciler operation with a fresh diagnostics accumulator."""
        diags = Diagnostics()
        identity: str | None = None
        snapshot: Any = None

        metrics.reconcile_total.labels(kind=kind, action=action, result="started").inc()
        start_time = time.time()
        try:
            identity, snapshot = fn(diags)
        except ReconcileCancelled as e:
            diags.from_exception(e)
        except Exception as e:
            metrics.reconcile_total.labels(kind=kind, action=action, result="error").inc()
            log_resource_event(
                self.logger, kind, name, action, "ReconciliationFailed", "Reconciliation failed",
                level=logging.ERROR, error=sanitize_exception(e), error_type=type(e).__name__,
            )
            raise
        finally:
            duration = time.time() - start_time
            metrics.reconcile_duration_seconds.labels(kind=kind, action=action).observe(duration)

        result = ReconcileResult(identity=identity, snapshot=snapshot, diagnostics=diags)
        for diag in diags:
            metrics.diagnostics_total.labels(kind=kind, severity=diag.severity.value).inc()

        if result.ok:
            metrics.reconcile_total.labels(kind=kind, action=action, result="success").inc()
            log_resource_event(
                self.logger, kind, name, action, "ReconcileSucceeded", f"{action} succeeded",
                warnings=[d.to_dict() for d in diags if d.severity is Severity.WARNING],
            )
        else:
            metrics.reconcile_total.labels(kind=kind, action=action, result="failed").inc()
            log_resource_event(
                self.logger, kind, name, action, "ReconcileFailed", f"{action} failed",
                level=logging.WARNING, diagnostics=diags.to_list(),
            )
        return result

    def create(self, ctx: ClientContext, declared: Resource) -> ReconcileResult[Any]:
        """Create a resource and bind its identity."""
        kind = kind_of(declared)
        reconciler = self.reconciler_for(kind)
        return self._run(kind, "create", identity_of(declared), lambda diags: reconciler.create(ctx, declared, diags))

    def read(self, ctx: ClientContext, kind: str, identity: str, declared: Resource | None = None) -> ReconcileResult[Any]:
        """Re-derive the snapshot of a bound resource.

        Args:
            ctx: Client context of this invocation
            kind: Resource kind
            identity: Bound identity
            declared: Optional declared state, used for write-only attributes
                and formatting-insensitive comparisons
        """
        reconciler = self.reconciler_for(kind)
        return self._run(
            kind, "read", identity, lambda diags: (identity, reconciler.read(ctx, identity, diags, declared))
        )

    def update(self, ctx: ClientContext, identity: str, old: Resource, new: Resource) -> ReconcileResult[Any]:
        """Move a bound resource from ``old`` to ``new`` declared state.

        Values the server assigned in ``old`` and ``new`` leaves open are kept,
        so they never count as a change.
        """
        new = align_with_snapshot(new, old)
        kind = kind_of(new)
        reconciler = self.reconciler_for(kind)
        return self._run(
            kind, "update", identity, lambda diags: (identity, reconciler.update(ctx, identity, old, new, diags))
        )

    def delete(self, ctx: ClientContext, kind: str, identity: str) -> Diagnostics:
        """Delete a bound resource and return the diagnostics."""
        reconciler = self.reconciler_for(kind)

        def run(diags: Diagnostics) -> tuple[str | None, Any]:
            reconciler.delete(ctx, identity, diags)
            return None, None

        return self._run(kind, "delete", identity, run).diagnostics

    def detect_drift(self, declared: Resource, snapshot: Resource) -> list[str]:
        """List the attributes where the snapshot differs from declared state."""
        declared = align_with_snapshot(declared, snapshot)
        drifted = [
            f.name
            for f in fields(declared)
            if f.name not in WRITE_ONLY_ATTRIBUTES and getattr(declared, f.name) != getattr(snapshot, f.name)
        ]
        for attribute in drifted:
            metrics.drift_detected_total.labels(kind=kind_of(declared), attribute=attribute).inc()
        return drifted

    def sync(self, ctx: ClientContext, declared: Resource, identity: str | None = None) -> ReconcileResult[Any]:
        """Drive one full cycle: create when unbound, otherwise read and update on drift."""
        if identity is None:
            return self.create(ctx, declared)

        kind = kind_of(declared)
        current = self.read(ctx, kind, identity, declared)
        if not current.ok or current.snapshot is None:
            return current

        declared = align_with_snapshot(declared, current.snapshot)
        if not self.detect_drift(declared, current.snapshot):
            return current
        return self.update(ctx, identity, current.snapshot, declared)


def align_with_snapshot(declared: Resource, snapshot: Resource) -> Resource:
    """Fill server-assigned values the declared state leaves open.

    Lifecycle rules declared without an ID take the ID the server reports at
    the same position.
    """
    if not isinstance(declared, Bucket) or not isinstance(snapshot, Bucket):
        return declared
    rules = tuple(
        replace(rule, id=snapshot.lifecycle_rules[idx].id)
        if not rule.id and idx < len(snapshot.lifecycle_rules)
        else rule
        for idx, rule in enumerate(declared.lifecycle_rules)
    )
    return replace(declared, lifecycle_rules=rules)
