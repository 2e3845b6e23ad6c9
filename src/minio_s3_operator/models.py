"""Typed declared-state models for the reconciled resource kinds."""

from __future__ import annotations

from dataclasses import dataclass, field


@dataclass(frozen=True)
class LifecycleExpiration:
    """Expiration sub-block of a lifecycle rule. Exactly one field is set."""

    date: str | None = None
    days: int | None = None


@dataclass(frozen=True)
class LifecycleTransition:
    """Transition sub-block of a lifecycle rule."""

    storage_class: str
    date: str | None = None
    days: int | None = None


@dataclass(frozen=True)
class BucketLifecycleRule:
    """A single declared lifecycle rule."""

    id: str = ""
    enabled: bool = True
    expiration: LifecycleExpiration | None = None
    transition: LifecycleTransition | None = None


@dataclass(frozen=True)
class Bucket:
    """Declared state of a bucket. ``name`` is the identity."""

    name: str
    versioning_enabled: bool = False
    lifecycle_rules: tuple[BucketLifecycleRule, ...] = ()


@dataclass(frozen=True)
class UserAccount:
    """Declared state of a user. ``access_key`` is the identity.

    The secret key is write-only; snapshots only carry it over from the
    declared input.
    """

    access_key: str
    secret_key: str | None = None
    policies: frozenset[str] = field(default_factory=frozenset)
    groups: frozenset[str] = field(default_factory=frozenset)


@dataclass(frozen=True)
class Group:
    """Declared state of a group. ``name`` is the identity."""

    name: str
    policies: frozenset[str] = field(default_factory=frozenset)


@dataclass(frozen=True)
class CannedPolicy:
    """Declared state of a canned policy. Both fields are immutable."""

    name: str
    policy: str


Resource = Bucket | UserAccount | Group | CannedPolicy


def identity_of(resource: Resource) -> str:
    """Return the immutable identity of a declared resource."""
    if isinstance(resource, UserAccount):
        return resource.access_key
    return resource.name
