"""Shared fixtures: in-memory fakes for the storage and administration clients."""

from __future__ import annotations

import json
from typing import Any, Callable, Iterable

import pytest

from minio_s3_operator.services.s3.base import GroupInfo, UserInfo
from minio_s3_operator.utils.context import ClientContext
from minio_s3_operator.utils.errors import NotFoundError, RemoteError


class _Recorder:
    """Records every call and raises injected failures."""

    MUTATING: frozenset[str] = frozenset()

    def __init__(self) -> None:
        self.calls: list[tuple[str, tuple[Any, ...]]] = []
        self._failures: list[tuple[str, Exception, Callable[..., bool] | None]] = []

    def fail(self, operation: str, error: Exception | None = None, when: Callable[..., bool] | None = None) -> None:
        """Make ``operation`` raise ``error``, optionally only when ``when(*args)`` holds."""
        self._failures.append((operation, error or RemoteError(f"{operation} failed"), when))

    def _record(self, operation: str, *args: Any) -> None:
        self.calls.append((operation, args))
        for failing, error, when in self._failures:
            if failing == operation and (when is None or when(*args)):
                raise error

    def operations(self) -> list[str]:
        return [operation for operation, _ in self.calls]

    def mutating_calls(self) -> list[tuple[str, tuple[Any, ...]]]:
        return [call for call in self.calls if call[0] in self.MUTATING]


class FakeStorage(_Recorder):
    """In-memory object-storage control client."""

    MUTATING = frozenset(
        {"create_bucket", "delete_bucket", "set_bucket_versioning", "set_bucket_lifecycle", "delete_bucket_lifecycle"}
    )

    def __init__(self) -> None:
        super().__init__()
        self.buckets: dict[str, dict[str, Any]] = {}

    def add_bucket(self, name: str, versioning: bool = False, rules: list[dict[str, Any]] | None = None) -> None:
        self.buckets[name] = {"versioning": versioning, "lifecycle": rules}

    def _bucket(self, name: str) -> dict[str, Any]:
        if name not in self.buckets:
            raise NotFoundError(f"Bucket {name} does not exist")
        return self.buckets[name]

    def create_bucket(self, name: str) -> None:
        self._record("create_bucket", name)
        if name in self.buckets:
            raise RemoteError(f"Bucket {name} already exists")
        self.add_bucket(name)

    def delete_bucket(self, name: str) -> None:
        self._record("delete_bucket", name)
        self._bucket(name)
        del self.buckets[name]

    def bucket_exists(self, name: str) -> bool:
        self._record("bucket_exists", name)
        return name in self.buckets

    def get_bucket_versioning(self, name: str) -> bool:
        self._record("get_bucket_versioning", name)
        return self._bucket(name)["versioning"]

    def set_bucket_versioning(self, name: str, enabled: bool) -> None:
        self._record("set_bucket_versioning", name, enabled)
        self._bucket(name)["versioning"] = enabled

    def get_bucket_lifecycle(self, name: str) -> dict[str, Any] | None:
        self._record("get_bucket_lifecycle", name)
        rules = self._bucket(name)["lifecycle"]
        return None if rules is None else {"Rules": rules}

    def set_bucket_lifecycle(self, name: str, rules: list[dict[str, Any]]) -> None:
        self._record("set_bucket_lifecycle", name, rules)
        self._bucket(name)["lifecycle"] = list(rules) or None

    def delete_bucket_lifecycle(self, name: str) -> None:
        self._record("delete_bucket_lifecycle", name)
        self._bucket(name)["lifecycle"] = None


class FakeAdmin(_Recorder):
    """In-memory administration client.

    Adding members to a group that does not exist creates it, the same way
    the server does.
    """

    MUTATING = frozenset(
        {"add_user", "remove_user", "set_policy", "update_group_members", "add_canned_policy", "remove_canned_policy"}
    )

    def __init__(self) -> None:
        super().__init__()
        self.users: dict[str, dict[str, Any]] = {}
        self.groups: dict[str, dict[str, set[str]]] = {}
        self.policies: dict[str, bytes] = {}

    def add_group(self, name: str, policies: Iterable[str] = (), members: Iterable[str] = ()) -> None:
        self.groups[name] = {"members": set(members), "policies": set(policies)}
        for member in members:
            self.users.setdefault(member, {"secret": "", "policies": set()})

    def add_existing_user(self, access_key: str, policies: Iterable[str] = (), groups: Iterable[str] = ()) -> None:
        self.users[access_key] = {"secret": "s3cret", "policies": set(policies)}
        for group in groups:
            self.groups.setdefault(group, {"members": set(), "policies": set()})["members"].add(access_key)

    def add_user(self, access_key: str, secret_key: str) -> None:
        self._record("add_user", access_key, secret_key)
        self.users.setdefault(access_key, {"secret": "", "policies": set()})["secret"] = secret_key

    def remove_user(self, access_key: str) -> None:
        self._record("remove_user", access_key)
        if access_key not in self.users:
            raise NotFoundError(f"User {access_key} does not exist")
        del self.users[access_key]
        for group in self.groups.values():
            group["members"].discard(access_key)

    def list_users(self) -> dict[str, UserInfo]:
        self._record("list_users")
        return {
            access_key: UserInfo(
                policies=frozenset(info["policies"]),
                groups=frozenset(name for name, group in self.groups.items() if access_key in group["members"]),
            )
            for access_key, info in self.users.items()
        }

    def set_policy(self, policies: Iterable[str], entity: str, is_group: bool) -> None:
        policies = frozenset(policies)
        self._record("set_policy", policies, entity, is_group)
        target = self.groups if is_group else self.users
        if entity not in target:
            raise NotFoundError(f"{entity} does not exist")
        target[entity]["policies"] = set(policies)

    def update_group_members(self, group: str, members: list[str], remove: bool) -> None:
        self._record("update_group_members", group, list(members), remove)
        if remove:
            if group not in self.groups:
                raise NotFoundError(f"Group {group} does not exist")
            if members:
                self.groups[group]["members"].difference_update(members)
            else:
                del self.groups[group]
            return
        self.groups.setdefault(group, {"members": set(), "policies": set()})["members"].update(members)

    def get_group_description(self, group: str) -> GroupInfo:
        self._record("get_group_description", group)
        if group not in self.groups:
            raise NotFoundError(f"Group {group} does not exist")
        info = self.groups[group]
        return GroupInfo(name=group, members=frozenset(info["members"]), policies=frozenset(info["policies"]))

    def list_groups(self) -> list[str]:
        self._record("list_groups")
        return sorted(self.groups)

    def add_canned_policy(self, name: str, policy: bytes) -> None:
        self._record("add_canned_policy", name, policy)
        self.policies[name] = policy

    def remove_canned_policy(self, name: str) -> None:
        self._record("remove_canned_policy", name)
        if name not in self.policies:
            raise NotFoundError(f"Policy {name} does not exist")
        del self.policies[name]

    def info_canned_policy(self, name: str) -> bytes:
        self._record("info_canned_policy", name)
        if name not in self.policies:
            raise NotFoundError(f"Policy {name} does not exist")
        return self.policies[name]

    def reformat_policy(self, name: str) -> None:
        """Store a policy the way the server echoes it: compact, keys sorted."""
        self.policies[name] = json.dumps(json.loads(self.policies[name]), sort_keys=True).encode("utf-8")


@pytest.fixture
def storage() -> FakeStorage:
    """Create a fake storage client."""
    return FakeStorage()


@pytest.fixture
def admin() -> FakeAdmin:
    """Create a fake administration client."""
    return FakeAdmin()


@pytest.fixture
def ctx(storage: FakeStorage, admin: FakeAdmin) -> ClientContext:
    """Create a client context over the fakes."""
    return ClientContext(storage=storage, admin=admin)
