"""Translation between declared lifecycle rules and the S3 lifecycle wire form."""

from __future__ import annotations

import uuid
from datetime import date, datetime, timezone
from typing import Any, Iterable

from ..constants import (
    LIFECYCLE_DATE_FORMAT,
    LIFECYCLE_RULE_ID_PREFIX,
    LIFECYCLE_STATUS_DISABLED,
    LIFECYCLE_STATUS_ENABLED,
)
from ..models import BucketLifecycleRule, LifecycleExpiration, LifecycleTransition


def generate_rule_id() -> str:
    """Generate a unique lifecycle rule ID."""
    return f"{LIFECYCLE_RULE_ID_PREFIX}{uuid.uuid4().hex}"


def parse_lifecycle_date(value: str) -> date:
    """Parse a ``YYYY-MM-DD`` calendar date.

    Raises:
        ValueError: If the value is not a valid calendar date
    """
    return datetime.strptime(value, LIFECYCLE_DATE_FORMAT).date()


def format_lifecycle_date(value: date | datetime | str) -> str:
    """Format a remote date value as ``YYYY-MM-DD``."""
    if isinstance(value, str):
        # Servers may return a full ISO 8601 timestamp
        return value[:10]
    if isinstance(value, datetime):
        value = value.astimezone(timezone.utc).date() if value.tzinfo else value.date()
    return value.strftime(LIFECYCLE_DATE_FORMAT)


def _to_wire_date(value: str) -> datetime:
    parsed = parse_lifecycle_date(value)
    return datetime(parsed.year, parsed.month, parsed.day, tzinfo=timezone.utc)


def rule_to_remote(rule: BucketLifecycleRule) -> dict[str, Any]:
    """Convert a declared rule to an S3 lifecycle rule.

    Args:
        rule: Declared rule, already validated

    Returns:
        Lifecycle rule in the shape of ``put_bucket_lifecycle_configuration``
    """
    remote: dict[str, Any] = {
        "ID": rule.id or generate_rule_id(),
        "Status": LIFECYCLE_STATUS_ENABLED if rule.enabled else LIFECYCLE_STATUS_DISABLED,
        "Filter": {"Prefix": ""},
    }

    if rule.expiration is not None:
        expiration: dict[str, Any] = {}
        if rule.expiration.date:
            expiration["Date"] = _to_wire_date(rule.expiration.date)
        elif rule.expiration.days is not None:
            expiration["Days"] = rule.expiration.days
        remote["Expiration"] = expiration

    if rule.transition is not None:
        transition: dict[str, Any] = {"StorageClass": rule.transition.storage_class}
        if rule.transition.date:
            transition["Date"] = _to_wire_date(rule.transition.date)
        elif rule.transition.days is not None:
            transition["Days"] = rule.transition.days
        remote["Transitions"] = [transition]

    return remote


def rules_to_remote(rules: Iterable[BucketLifecycleRule]) -> list[dict[str, Any]]:
    """Convert the full declared rule list. The remote API replaces it wholesale."""
    return [rule_to_remote(rule) for rule in rules]


def rule_from_remote(remote: dict[str, Any]) -> BucketLifecycleRule:
    """Convert an S3 lifecycle rule back to its declared form.

    Sub-blocks that carry neither a date nor a number of days are omitted.
    """
    expiration = None
    remote_expiration = remote.get("Expiration") or {}
    if remote_expiration.get("Date") is not None:
        expiration = LifecycleExpiration(date=format_lifecycle_date(remote_expiration["Date"]))
    elif remote_expiration.get("Days") is not None:
        expiration = LifecycleExpiration(days=int(remote_expiration["Days"]))

    transition = None
    remote_transitions = remote.get("Transitions") or []
    if not remote_transitions and remote.get("Transition"):
        remote_transitions = [remote["Transition"]]
    if remote_transitions:
        first = remote_transitions[0]
        storage_class = first.get("StorageClass", "")
        if first.get("Date") is not None:
            transition = LifecycleTransition(
                storage_class=storage_class,
                date=format_lifecycle_date(first["Date"]),
            )
        elif first.get("Days") is not None:
            transition = LifecycleTransition(storage_class=storage_class, days=int(first["Days"]))

    return BucketLifecycleRule(
        id=remote.get("ID", ""),
        enabled=remote.get("Status") == LIFECYCLE_STATUS_ENABLED,
        expiration=expiration,
        transition=transition,
    )


def rules_from_remote(configuration: dict[str, Any] | None) -> tuple[BucketLifecycleRule, ...]:
    """Convert a lifecycle configuration to declared rules.

    Args:
        configuration: Response of ``get_bucket_lifecycle``, or None when the
            bucket has no lifecycle configuration

    Returns:
        Declared rules in server order, empty when no configuration exists
    """
    if configuration is None:
        return ()
    return tuple(rule_from_remote(rule) for rule in configuration.get("Rules", []))
