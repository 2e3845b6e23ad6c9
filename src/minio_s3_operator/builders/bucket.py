"""Builder for bucket declared state."""

from __future__ import annotations

from typing import Any

from ..constants import (
    KEY_BUCKET_LIFECYCLE_RULES,
    KEY_BUCKET_NAME,
    KEY_BUCKET_VERSIONING_ENABLED,
    KEY_LIFECYCLE_DATE,
    KEY_LIFECYCLE_DAYS,
    KEY_LIFECYCLE_ENABLED,
    KEY_LIFECYCLE_EXPIRATION,
    KEY_LIFECYCLE_ID,
    KEY_LIFECYCLE_STORAGE_CLASS,
    KEY_LIFECYCLE_TRANSITION,
)
from ..models import Bucket, BucketLifecycleRule, LifecycleExpiration, LifecycleTransition
from ..utils.errors import ValidationError
from .lifecycle import parse_lifecycle_date


def _date_or_days(block: dict[str, Any], path: str) -> tuple[str | None, int | None]:
    """Validate a sub-block carrying exactly one of date and days."""
    date_value = block.get(KEY_LIFECYCLE_DATE) or None
    days_value = block.get(KEY_LIFECYCLE_DAYS)

    if date_value is not None and days_value is not None:
        raise ValidationError(f"{path} can not set both date and days", attribute=path)
    if date_value is None and days_value is None:
        raise ValidationError(f"{path} must set one of date or days", attribute=path)

    if date_value is not None:
        try:
            parse_lifecycle_date(str(date_value))
        except ValueError as e:
            raise ValidationError(
                f"{date_value!r} does not have a valid date format",
                attribute=f"{path}.{KEY_LIFECYCLE_DATE}",
            ) from e
        return str(date_value), None

    if isinstance(days_value, bool) or not isinstance(days_value, int) or days_value < 0:
        raise ValidationError(
            f"{path}.{KEY_LIFECYCLE_DAYS} must be a non-negative integer",
            attribute=f"{path}.{KEY_LIFECYCLE_DAYS}",
        )
    return None, days_value


def lifecycle_rule_from_spec(rule: dict[str, Any], index: int) -> BucketLifecycleRule:
    """Decode and validate one declared lifecycle rule."""
    path = f"{KEY_BUCKET_LIFECYCLE_RULES}.{index}"

    expiration = None
    expiration_spec = rule.get(KEY_LIFECYCLE_EXPIRATION)
    if expiration_spec:
        date_value, days_value = _date_or_days(expiration_spec, f"{path}.{KEY_LIFECYCLE_EXPIRATION}")
        expiration = LifecycleExpiration(date=date_value, days=days_value)

    transition = None
    transition_spec = rule.get(KEY_LIFECYCLE_TRANSITION)
    if transition_spec:
        transition_path = f"{path}.{KEY_LIFECYCLE_TRANSITION}"
        storage_class = transition_spec.get(KEY_LIFECYCLE_STORAGE_CLASS)
        if not storage_class:
            raise ValidationError(
                f"{transition_path}.{KEY_LIFECYCLE_STORAGE_CLASS} is required",
                attribute=f"{transition_path}.{KEY_LIFECYCLE_STORAGE_CLASS}",
            )
        date_value, days_value = _date_or_days(transition_spec, transition_path)
        transition = LifecycleTransition(storage_class=storage_class, date=date_value, days=days_value)

    return BucketLifecycleRule(
        id=rule.get(KEY_LIFECYCLE_ID) or "",
        enabled=bool(rule.get(KEY_LIFECYCLE_ENABLED, True)),
        expiration=expiration,
        transition=transition,
    )


def bucket_from_spec(spec: dict[str, Any]) -> Bucket:
    """Create a bucket declaration from a resource spec.

    Args:
        spec: MinioBucket spec

    Returns:
        Validated bucket declaration

    Raises:
        ValidationError: If the spec is invalid
    """
    name = spec.get(KEY_BUCKET_NAME)
    if not name:
        raise ValidationError("bucket name is required", attribute=KEY_BUCKET_NAME)

    rules = spec.get(KEY_BUCKET_LIFECYCLE_RULES) or []
    return Bucket(
        name=name,
        versioning_enabled=bool(spec.get(KEY_BUCKET_VERSIONING_ENABLED, False)),
        lifecycle_rules=tuple(lifecycle_rule_from_spec(rule, idx) for idx, rule in enumerate(rules)),
    )


def lifecycle_rule_to_spec(rule: BucketLifecycleRule) -> dict[str, Any]:
    """Render a lifecycle rule in declared form, omitting absent sub-blocks."""
    rendered: dict[str, Any] = {KEY_LIFECYCLE_ID: rule.id, KEY_LIFECYCLE_ENABLED: rule.enabled}
    if rule.expiration is not None:
        expiration: dict[str, Any] = {}
        if rule.expiration.date is not None:
            expiration[KEY_LIFECYCLE_DATE] = rule.expiration.date
        if rule.expiration.days is not None:
            expiration[KEY_LIFECYCLE_DAYS] = rule.expiration.days
        rendered[KEY_LIFECYCLE_EXPIRATION] = expiration
    if rule.transition is not None:
        transition: dict[str, Any] = {KEY_LIFECYCLE_STORAGE_CLASS: rule.transition.storage_class}
        if rule.transition.date is not None:
            transition[KEY_LIFECYCLE_DATE] = rule.transition.date
        if rule.transition.days is not None:
            transition[KEY_LIFECYCLE_DAYS] = rule.transition.days
        rendered[KEY_LIFECYCLE_TRANSITION] = transition
    return rendered


def bucket_to_spec(bucket: Bucket) -> dict[str, Any]:
    """Render a bucket snapshot in the same shape as its spec."""
    return {
        KEY_BUCKET_NAME: bucket.name,
        KEY_BUCKET_VERSIONING_ENABLED: bucket.versioning_enabled,
        KEY_BUCKET_LIFECYCLE_RULES: [lifecycle_rule_to_spec(rule) for rule in bucket.lifecycle_rules],
    }
