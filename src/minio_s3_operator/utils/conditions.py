"""Utilities for managing Kubernetes conditions."""

from __future__ import annotations

from datetime import datetime, timezone
from typing import Any

from ..constants import COND_DEGRADED, COND_READY
from .diagnostics import Diagnostics


def update_condition(
    conditions: list[dict[str, Any]],
    condition_type: str,
    status: str,
    reason: str,
    message: str,
    observed_generation: int | None = None,
) -> list[dict[str, Any]]:
    """Update or add a condition to the conditions list.

    Args:
        conditions: List of existing conditions
        condition_type: Type of condition
        status: Status of condition ("True", "False", "Unknown")
        reason: Reason for the condition
        message: Human-readable message
        observed_generation: Generation when condition was observed

    Returns:
        Updated list of conditions
    """
    now = datetime.now(timezone.utc).isoformat()
    conditions = list(conditions)

    existing_idx = None
    for idx, cond in enumerate(conditions):
        if cond.get("type") == condition_type:
            existing_idx = idx
            break

    new_condition = {
        "type": condition_type,
        "status": status,
        "reason": reason,
        "message": message,
        "lastTransitionTime": now,
    }

    if observed_generation is not None:
        new_condition["observedGeneration"] = observed_generation

    if existing_idx is not None:
        existing = conditions[existing_idx]
        # Only update lastTransitionTime if status changed
        if existing.get("status") == status:
            new_condition["lastTransitionTime"] = existing.get("lastTransitionTime", now)
        conditions[existing_idx] = new_condition
    else:
        conditions.append(new_condition)

    return conditions


def conditions_from_diagnostics(
    conditions: list[dict[str, Any]],
    diagnostics: Diagnostics,
    observed_generation: int | None = None,
) -> list[dict[str, Any]]:
    """Derive the Ready and Degraded conditions from reconcile diagnostics.

    Errors make the resource not ready. Warnings keep it ready but degraded,
    naming the attributes that were not fully applied.
    """
    errors = diagnostics.errors
    warnings = diagnostics.warnings

    if errors:
        message = "; ".join(f"{d.attribute}: {d.message}" if d.attribute else d.message for d in errors)
        conditions = update_condition(conditions, COND_READY, "False", "ReconcileFailed", message, observed_generation)
    else:
        conditions = update_condition(conditions, COND_READY, "True", "Ready", "Resource is in sync", observed_generation)

    if warnings:
        attributes = ", ".join(sorted({d.attribute for d in warnings}))
        conditions = update_condition(
            conditions, COND_DEGRADED, "True", "PartiallyApplied",
            f"Not fully applied: {attributes}", observed_generation,
        )
    else:
        conditions = update_condition(
            conditions, COND_DEGRADED, "False", "FullyApplied", "All attributes applied", observed_generation
        )

    return conditions
