"""Reconciler for users and their group memberships."""

from __future__ import annotations

from dataclasses import replace

from ..constants import KEY_ACCESS_KEY, KEY_SECRET_KEY, KEY_USER_GROUPS, KEY_USER_POLICIES, KIND_USER
from ..models import UserAccount
from ..utils.context import ClientContext
from ..utils.diagnostics import Diagnostics
from ..utils.diff import string_set_diff
from ..utils.errors import NotFoundError, ReconcileCancelled, RemoteError, sanitize_exception
from .base import BaseReconciler

EMPTY_POLICIES_MESSAGE = (
    "Can not set policies to empty after the {kind} has been assigned other policies. "
    "This is a MinIO API limitation."
)


class UserReconciler(BaseReconciler[UserAccount]):
    """Reconciler for User resources."""

    def __init__(self):
        super().__init__(KIND_USER)

    def _missing_groups(self, ctx: ClientContext, groups: list[str]) -> list[str]:
        """Return the groups that do not exist on the server."""
        existing = set(self.call(ctx, "admin", "list_groups", ctx.admin.list_groups))
        return sorted(group for group in groups if group not in existing)

    def create(
        self, ctx: ClientContext, declared: UserAccount, diags: Diagnostics
    ) -> tuple[str | None, UserAccount | None]:
        """Create a user, then attach its initial policies and groups."""
        access_key = declared.access_key
        if not declared.secret_key:
            diags.error(KEY_SECRET_KEY, "A secret key is required to create a user")
            return None, None

        try:
            self.call(ctx, "admin", "add_user", ctx.admin.add_user, access_key, declared.secret_key)
        except RemoteError as e:
            self.fail(diags, access_key, e, attribute=KEY_ACCESS_KEY, summary=f"Could not create user {access_key}")
            return None, None

        self.log_info(access_key, f"Created user {access_key}", event="create", reason="UserCreated")

        policies: frozenset[str] = frozenset()
        added_groups: list[str] = []
        try:
            if declared.policies:
                try:
                    self.call(ctx, "admin", "set_policy", ctx.admin.set_policy, declared.policies, access_key, False)
                    policies = declared.policies
                except RemoteError as e:
                    self.warn(diags, access_key, KEY_USER_POLICIES,
                              f"Could not set policy for user: {sanitize_exception(e)}")

            if declared.groups:
                groups_to_add = sorted(declared.groups)
                try:
                    missing = self._missing_groups(ctx, groups_to_add)
                except RemoteError as e:
                    self.warn(diags, access_key, KEY_USER_GROUPS, f"Could not list groups: {sanitize_exception(e)}")
                    groups_to_add = []
                else:
                    if missing:
                        self.warn(diags, access_key, KEY_USER_GROUPS,
                                  f"Group(s) do not exist: {', '.join(missing)}")
                        groups_to_add = []

                for group in groups_to_add:
                    try:
                        self.call(
                            ctx, "admin", "update_group_members", ctx.admin.update_group_members,
                            group, [access_key], False,
                        )
                        added_groups.append(group)
                    except RemoteError as e:
                        self.warn(diags, access_key, KEY_USER_GROUPS,
                                  f"Could not add user to group {group}: {sanitize_exception(e)}")
        except ReconcileCancelled as e:
            self.fail(diags, access_key, e)

        return access_key, UserAccount(
            access_key=access_key,
            secret_key=declared.secret_key,
            policies=policies,
            groups=frozenset(added_groups),
        )

    def read(
        self, ctx: ClientContext, identity: str, diags: Diagnostics, declared: UserAccount | None = None
    ) -> UserAccount | None:
        """Read policies and group memberships. The secret key is never read back."""
        try:
            users = self.call(ctx, "admin", "list_users", ctx.admin.list_users)
        except RemoteError as e:
            self.fail(diags, identity, e, attribute=KEY_ACCESS_KEY)
            return None

        info = users.get(identity)
        if info is None:
            self.fail(diags, identity, NotFoundError(f"User {identity} does not exist", attribute=KEY_ACCESS_KEY))
            return None

        return UserAccount(
            access_key=identity,
            secret_key=declared.secret_key if declared is not None else None,
            policies=frozenset(info.policies),
            groups=frozenset(info.groups),
        )

    def update(
        self, ctx: ClientContext, identity: str, old: UserAccount, new: UserAccount, diags: Diagnostics
    ) -> UserAccount | None:
        """Apply policy, secret key and group membership changes."""
        if new.access_key != identity or old.access_key != new.access_key:
            diags.error(KEY_ACCESS_KEY, "Users can not be renamed")
            return old
        if old.policies != new.policies and not new.policies:
            diags.error(KEY_USER_POLICIES, EMPTY_POLICIES_MESSAGE.format(kind="user"))
            return old

        snapshot = old
        try:
            if old.policies != new.policies:
                try:
                    self.call(ctx, "admin", "set_policy", ctx.admin.set_policy, new.policies, identity, False)
                    snapshot = replace(snapshot, policies=new.policies)
                except RemoteError as e:
                    self.fail(diags, identity, e, attribute=KEY_USER_POLICIES,
                              summary="Could not apply policy to user")

            if new.secret_key and old.secret_key != new.secret_key:
                try:
                    self.call(ctx, "admin", "add_user", ctx.admin.add_user, identity, new.secret_key)
                    snapshot = replace(snapshot, secret_key=new.secret_key)
                except RemoteError as e:
                    self.fail(diags, identity, e, attribute=KEY_SECRET_KEY, summary="Could not change secret key")
        except ReconcileCancelled as e:
            self.fail(diags, identity, e)
            return snapshot

        if old.groups != new.groups:
            snapshot = replace(snapshot, groups=self._update_groups(ctx, identity, old.groups, new.groups, diags))

        if diags.has_error():
            return snapshot
        return self.read(ctx, identity, diags, declared=new)

    def _update_groups(
        self,
        ctx: ClientContext,
        identity: str,
        old: frozenset[str],
        new: frozenset[str],
        diags: Diagnostics,
    ) -> frozenset[str]:
        """Apply membership changes one edge at a time.

        Additions run first, then removals. The first failure within a phase
        abandons the remaining edges of that phase. The returned membership
        reflects exactly the edges that were applied.
        """
        added, removed = string_set_diff(old, new)
        current = set(old)

        try:
            if added:
                try:
                    missing = self._missing_groups(ctx, added)
                except RemoteError as e:
                    self.fail(diags, identity, e, attribute=KEY_USER_GROUPS, summary="Could not list groups")
                    return frozenset(current)
                if missing:
                    diags.error(KEY_USER_GROUPS, f"Invalid group(s): Group(s) do not exist: {', '.join(missing)}")
                    return frozenset(current)

            for group in added:
                try:
                    self.call(
                        ctx, "admin", "update_group_members", ctx.admin.update_group_members,
                        group, [identity], False,
                    )
                except RemoteError as e:
                    self.fail(diags, identity, e, attribute=KEY_USER_GROUPS,
                              summary=f"Could not add user to group {group}")
                    break
                current.add(group)

            for group in removed:
                try:
                    self.call(
                        ctx, "admin", "update_group_members", ctx.admin.update_group_members,
                        group, [identity], True,
                    )
                except RemoteError as e:
                    self.fail(diags, identity, e, attribute=KEY_USER_GROUPS,
                              summary=f"Could not remove user from group {group}")
                    break
                current.discard(group)
        except ReconcileCancelled as e:
            self.fail(diags, identity, e, attribute=KEY_USER_GROUPS)

        return frozenset(current)

    def delete(self, ctx: ClientContext, identity: str, diags: Diagnostics) -> None:
        """Remove the user. The server severs its group memberships."""
        try:
            self.call(ctx, "admin", "remove_user", ctx.admin.remove_user, identity)
        except RemoteError as e:
            self.fail(diags, identity, e, attribute=KEY_ACCESS_KEY, summary=f"Could not remove user {identity}")
            return
        self.log_info(identity, f"Removed user {identity}", event="delete", reason="UserDeleted")
