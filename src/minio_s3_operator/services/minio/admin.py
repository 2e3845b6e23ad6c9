"""MinIO administration client, built on the minio SDK."""

from __future__ import annotations

import json
import logging
import os
import tempfile
from typing import Any, Iterable

from minio.credentials import StaticProvider
from minio.error import MinioAdminException
from minio.minioadmin import MinioAdmin

from ...utils.errors import NotFoundError, RemoteError
from ..s3.base import GroupInfo, UserInfo

logger = logging.getLogger(__name__)

NOT_FOUND_MARKERS = ("404", "NoSuchUser", "NoSuchGroup", "NoSuchPolicy", "does not exist")


def join_policies(policies: Iterable[str]) -> str:
    """Encode a policy set as the comma-joined wire value."""
    return ",".join(sorted(set(policies)))


def split_policies(value: str | None) -> frozenset[str]:
    """Decode a comma-joined policy value, dropping empty parts."""
    if not value:
        return frozenset()
    return frozenset(part.strip() for part in value.split(",") if part.strip())


def _remote_error(error: Exception, message: str) -> RemoteError:
    text = str(error)
    if any(marker in text for marker in NOT_FOUND_MARKERS):
        return NotFoundError(f"{message}: {text}")
    return RemoteError(f"{message}: {text}")


def _loads(payload: str | bytes) -> Any:
    if not payload:
        return {}
    return json.loads(payload)


class MinioAdminProvider:
    """Administration provider implementation."""

    def __init__(
        self,
        endpoint: str,
        access_key: str,
        secret_key: str,
        secure: bool = False,
        region: str = "",
        cert_check: bool = True,
    ) -> None:
        """Initialize the administration provider.

        Args:
            endpoint: MinIO server address (``host:port``)
            access_key: Access key of a user allowed to administer identities
            secret_key: Secret key of that user
            secure: Use https
            region: Region name
            cert_check: Verify TLS certificates
        """
        self.endpoint = endpoint.split("://", 1)[-1]
        self.client = MinioAdmin(
            endpoint=self.endpoint,
            credentials=StaticProvider(access_key, secret_key),
            region=region,
            secure=secure,
            cert_check=cert_check,
        )

    def add_user(self, access_key: str, secret_key: str) -> None:
        """Create a user, or set the secret key of an existing one."""
        try:
            self.client.user_add(access_key, secret_key)
        except (MinioAdminException, ValueError, OSError) as e:
            logger.error(f"Failed to add user {access_key}: {e}")
            raise _remote_error(e, f"Could not add user {access_key}") from e

    def remove_user(self, access_key: str) -> None:
        """Remove a user."""
        try:
            self.client.user_remove(access_key)
        except (MinioAdminException, ValueError, OSError) as e:
            logger.error(f"Failed to remove user {access_key}: {e}")
            raise _remote_error(e, f"Could not remove user {access_key}") from e

    def list_users(self) -> dict[str, UserInfo]:
        """List all users with their policies and group memberships."""
        try:
            users = _loads(self.client.user_list())
        except (MinioAdminException, ValueError, OSError) as e:
            logger.error(f"Failed to list users: {e}")
            raise _remote_error(e, "Could not list users") from e

        return {
            access_key: UserInfo(
                policies=split_policies(info.get("policyName")),
                groups=frozenset(info.get("memberOf") or []),
            )
            for access_key, info in users.items()
        }

    def set_policy(self, policies: Iterable[str], entity: str, is_group: bool) -> None:
        """Replace the policies attached to a user or group."""
        policy_string = join_policies(policies)
        try:
            if is_group:
                self.client.policy_set(policy_string, group=entity)
            else:
                self.client.policy_set(policy_string, user=entity)
        except (MinioAdminException, ValueError, OSError) as e:
            kind = "group" if is_group else "user"
            logger.error(f"Failed to set policy {policy_string} for {kind} {entity}: {e}")
            raise _remote_error(e, f"Could not set policy for {kind} {entity}") from e

    def update_group_members(self, group: str, members: list[str], remove: bool) -> None:
        """Add or remove group members.

        Adding with an empty member list creates the group when it does not
        exist yet. Removing with an empty member list removes the group.
        """
        try:
            if remove:
                self.client.group_remove(group, members or None)
            else:
                self.client.group_add(group, members)
        except (MinioAdminException, ValueError, OSError) as e:
            action = "remove" if remove else "add"
            logger.error(f"Failed to {action} members {members} of group {group}: {e}")
            raise _remote_error(e, f"Could not {action} members of group {group}") from e

    def get_group_description(self, group: str) -> GroupInfo:
        """Describe a group."""
        try:
            info = _loads(self.client.group_info(group))
        except (MinioAdminException, ValueError, OSError) as e:
            raise _remote_error(e, f"Could not load group {group}") from e

        return GroupInfo(
            name=info.get("name", group),
            members=frozenset(info.get("members") or []),
            policies=split_policies(info.get("policy")),
        )

    def list_groups(self) -> list[str]:
        """List all group names."""
        try:
            groups = _loads(self.client.group_list())
        except (MinioAdminException, ValueError, OSError) as e:
            logger.error(f"Failed to list groups: {e}")
            raise _remote_error(e, "Could not list groups") from e
        return list(groups or [])

    def add_canned_policy(self, name: str, policy: bytes) -> None:
        """Create a canned policy from a raw JSON document."""
        fd, path = tempfile.mkstemp(suffix=".json")
        try:
            with os.fdopen(fd, "wb") as handle:
                handle.write(policy)
            self.client.policy_add(name, path)
        except (MinioAdminException, ValueError, OSError) as e:
            logger.error(f"Failed to add canned policy {name}: {e}")
            raise _remote_error(e, f"Could not add canned policy {name}") from e
        finally:
            os.unlink(path)

    def remove_canned_policy(self, name: str) -> None:
        """Remove a canned policy."""
        try:
            self.client.policy_remove(name)
        except (MinioAdminException, ValueError, OSError) as e:
            logger.error(f"Failed to remove canned policy {name}: {e}")
            raise _remote_error(e, f"Could not remove canned policy {name}") from e

    def info_canned_policy(self, name: str) -> bytes:
        """Return the raw policy document."""
        try:
            document = self.client.policy_info(name)
        except (MinioAdminException, ValueError, OSError) as e:
            raise _remote_error(e, f"Could not load canned policy {name}") from e
        return document.encode("utf-8") if isinstance(document, str) else document
