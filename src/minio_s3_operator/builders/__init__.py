"""Builders translating between resource specs, models and remote payloads."""

from .bucket import bucket_from_spec, bucket_to_spec
from .identity import (
    canned_policy_from_spec,
    canned_policy_to_spec,
    group_from_spec,
    group_to_spec,
    user_from_spec,
    user_to_spec,
)
from .provider import ProviderSettings, create_client_context, settings_from_env

__all__ = [
    "bucket_from_spec",
    "bucket_to_spec",
    "user_from_spec",
    "user_to_spec",
    "group_from_spec",
    "group_to_spec",
    "canned_policy_from_spec",
    "canned_policy_to_spec",
    "ProviderSettings",
    "create_client_context",
    "settings_from_env",
]
