"""Utilities for emitting Kubernetes events."""

from __future__ import annotations

from typing import Any

import kopf

from ..constants import (
    EVENT_REASON_DELETED,
    EVENT_REASON_PARTIALLY_APPLIED,
    EVENT_REASON_RECONCILE_FAILED,
    EVENT_REASON_RECONCILE_STARTED,
    EVENT_REASON_RECONCILE_SUCCEEDED,
    EVENT_REASON_VALIDATE_FAILED,
)
from .diagnostics import Diagnostics


def emit_event(
    body: dict[str, Any],
    reason: str,
    message: str,
    type_: str = "Normal",
) -> None:
    """Emit a Kubernetes event.

    Args:
        body: Resource body
        reason: Event reason
        message: Event message
        type_: Event type (Normal or Warning)
    """
    kopf.event(
        body,
        reason=reason,
        message=message,
        type=type_,
    )


def emit_reconcile_started(body: dict[str, Any], action: str) -> None:
    """Emit reconcile started event."""
    emit_event(body, EVENT_REASON_RECONCILE_STARTED, f"Reconciliation started ({action})")


def emit_validate_failed(body: dict[str, Any], message: str) -> None:
    """Emit validation failed event."""
    emit_event(body, EVENT_REASON_VALIDATE_FAILED, message, type_="Warning")


def emit_deleted(body: dict[str, Any], identity: str) -> None:
    """Emit deletion event."""
    emit_event(body, EVENT_REASON_DELETED, f"Deleted {identity}")


def emit_diagnostics(body: dict[str, Any], action: str, diagnostics: Diagnostics) -> None:
    """Emit one event per diagnostic, or a success event if there are none."""
    if not diagnostics:
        emit_event(body, EVENT_REASON_RECONCILE_SUCCEEDED, f"Reconciliation succeeded ({action})")
        return
    for diag in diagnostics.warnings:
        emit_event(body, EVENT_REASON_PARTIALLY_APPLIED, f"{diag.attribute}: {diag.message}", type_="Warning")
    for diag in diagnostics.errors:
        emit_event(body, EVENT_REASON_RECONCILE_FAILED, f"{diag.attribute}: {diag.message}", type_="Warning")
