"""Builders for user, group and canned policy declared state."""

from __future__ import annotations

import json
from typing import Any

from ..constants import (
    KEY_ACCESS_KEY,
    KEY_GROUP_NAME,
    KEY_GROUP_POLICIES,
    KEY_POLICY_NAME,
    KEY_POLICY_POLICY,
    KEY_SECRET_KEY,
    KEY_USER_GROUPS,
    KEY_USER_POLICIES,
)
from ..models import CannedPolicy, Group, UserAccount
from ..utils.errors import ValidationError


def _string_set(spec: dict[str, Any], key: str) -> frozenset[str]:
    values = spec.get(key) or []
    if isinstance(values, str) or not all(isinstance(value, str) and value for value in values):
        raise ValidationError(f"{key} must be a list of non-empty strings", attribute=key)
    return frozenset(values)


def user_from_spec(spec: dict[str, Any], secret_key: str | None = None, require_secret: bool = False) -> UserAccount:
    """Create a user declaration from a resource spec.

    Args:
        spec: MinioUser spec
        secret_key: Secret key resolved from a secret reference, overrides
            an inline ``secret_key``
        require_secret: Reject a spec without secret key, as needed to create
            the user

    Raises:
        ValidationError: If the spec is invalid
    """
    access_key = spec.get(KEY_ACCESS_KEY)
    if not access_key:
        raise ValidationError("access_key is required", attribute=KEY_ACCESS_KEY)

    secret_key = secret_key or spec.get(KEY_SECRET_KEY)
    if require_secret and not secret_key:
        raise ValidationError("A secret key is required to create a user", attribute=KEY_SECRET_KEY)

    return UserAccount(
        access_key=access_key,
        secret_key=secret_key,
        policies=_string_set(spec, KEY_USER_POLICIES),
        groups=_string_set(spec, KEY_USER_GROUPS),
    )


def user_to_spec(user: UserAccount) -> dict[str, Any]:
    """Render a user snapshot. The secret key is never rendered."""
    return {
        KEY_ACCESS_KEY: user.access_key,
        KEY_USER_POLICIES: sorted(user.policies),
        KEY_USER_GROUPS: sorted(user.groups),
    }


def group_from_spec(spec: dict[str, Any]) -> Group:
    """Create a group declaration from a resource spec."""
    name = spec.get(KEY_GROUP_NAME)
    if not name:
        raise ValidationError("group name is required", attribute=KEY_GROUP_NAME)
    return Group(name=name, policies=_string_set(spec, KEY_GROUP_POLICIES))


def group_to_spec(group: Group) -> dict[str, Any]:
    return {KEY_GROUP_NAME: group.name, KEY_GROUP_POLICIES: sorted(group.policies)}


def canned_policy_from_spec(spec: dict[str, Any]) -> CannedPolicy:
    """Create a canned policy declaration from a resource spec.

    The policy may be given as a JSON string or as a mapping, which is
    encoded as JSON.
    """
    name = spec.get(KEY_POLICY_NAME)
    if not name:
        raise ValidationError("policy name is required", attribute=KEY_POLICY_NAME)

    policy = spec.get(KEY_POLICY_POLICY)
    if isinstance(policy, dict):
        policy = json.dumps(policy)
    if not isinstance(policy, str) or not policy:
        raise ValidationError("policy document is required", attribute=KEY_POLICY_POLICY)
    try:
        decoded = json.loads(policy)
    except ValueError as e:
        raise ValidationError(f"policy is not valid JSON: {e}", attribute=KEY_POLICY_POLICY) from e
    if not isinstance(decoded, dict):
        raise ValidationError("policy must be a JSON object", attribute=KEY_POLICY_POLICY)

    return CannedPolicy(name=name, policy=policy)


def canned_policy_to_spec(policy: CannedPolicy) -> dict[str, Any]:
    return {KEY_POLICY_NAME: policy.name, KEY_POLICY_POLICY: policy.policy}
