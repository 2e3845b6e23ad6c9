"""Interfaces of the remote storage and administration services."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Iterable, Protocol


class StorageProvider(Protocol):
    """Protocol defining object-storage control operations."""

    def create_bucket(self, name: str) -> None:
        """Create a bucket."""
        ...

    def delete_bucket(self, name: str) -> None:
        """Delete an empty bucket."""
        ...

    def bucket_exists(self, name: str) -> bool:
        """Check if a bucket exists."""
        ...

    def get_bucket_versioning(self, name: str) -> bool:
        """Return True if versioning is enabled on the bucket."""
        ...

    def set_bucket_versioning(self, name: str, enabled: bool) -> None:
        """Enable or suspend bucket versioning."""
        ...

    def get_bucket_lifecycle(self, name: str) -> dict[str, Any] | None:
        """Get bucket lifecycle configuration, None when there is none."""
        ...

    def set_bucket_lifecycle(self, name: str, rules: list[dict[str, Any]]) -> None:
        """Replace the bucket lifecycle configuration."""
        ...

    def delete_bucket_lifecycle(self, name: str) -> None:
        """Delete bucket lifecycle configuration."""
        ...


@dataclass(frozen=True)
class UserInfo:
    """Policies and group memberships of a user as reported by the server."""

    policies: frozenset[str] = field(default_factory=frozenset)
    groups: frozenset[str] = field(default_factory=frozenset)


@dataclass(frozen=True)
class GroupInfo:
    """Description of a group as reported by the server."""

    name: str
    members: frozenset[str] = field(default_factory=frozenset)
    policies: frozenset[str] = field(default_factory=frozenset)


class AdminProvider(Protocol):
    """Protocol defining identity administration operations."""

    def add_user(self, access_key: str, secret_key: str) -> None:
        """Create a user, or set the secret key of an existing one."""
        ...

    def remove_user(self, access_key: str) -> None:
        """Remove a user."""
        ...

    def list_users(self) -> dict[str, UserInfo]:
        """List all users keyed by access key."""
        ...

    def set_policy(self, policies: Iterable[str], entity: str, is_group: bool) -> None:
        """Replace the policies attached to a user or group."""
        ...

    def update_group_members(self, group: str, members: list[str], remove: bool) -> None:
        """Add or remove group members. Adding to a missing group creates it."""
        ...

    def get_group_description(self, group: str) -> GroupInfo:
        """Describe a group."""
        ...

    def list_groups(self) -> list[str]:
        """List all group names."""
        ...

    def add_canned_policy(self, name: str, policy: bytes) -> None:
        """Create a canned policy."""
        ...

    def remove_canned_policy(self, name: str) -> None:
        """Remove a canned policy."""
        ...

    def info_canned_policy(self, name: str) -> bytes:
        """Return the raw policy document."""
        ...
