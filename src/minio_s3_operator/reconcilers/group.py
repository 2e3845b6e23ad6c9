"""Reconciler for groups."""

from __future__ import annotations

from ..constants import KEY_GROUP_NAME, KEY_GROUP_POLICIES, KIND_GROUP
from ..models import Group
from ..utils.context import ClientContext
from ..utils.diagnostics import Diagnostics
from ..utils.errors import ReconcileCancelled, RemoteError, sanitize_exception
from .base import BaseReconciler
from .user import EMPTY_POLICIES_MESSAGE


class GroupReconciler(BaseReconciler[Group]):
    """Reconciler for Group resources.

    There is no explicit create primitive: adding an empty member list
    creates the group. The server can not tell this apart from adding to an
    existing group of the same name, and no local existence check is made.
    """

    def __init__(self):
        super().__init__(KIND_GROUP)

    def create(self, ctx: ClientContext, declared: Group, diags: Diagnostics) -> tuple[str | None, Group | None]:
        name = declared.name
        try:
            self.call(ctx, "admin", "update_group_members", ctx.admin.update_group_members, name, [], False)
        except RemoteError as e:
            self.fail(diags, name, e, attribute=KEY_GROUP_NAME, summary=f"Could not create group {name}")
            return None, None

        self.log_info(name, f"Created group {name}", event="create", reason="GroupCreated")

        policies: frozenset[str] = frozenset()
        if declared.policies:
            try:
                self.call(ctx, "admin", "set_policy", ctx.admin.set_policy, declared.policies, name, True)
                policies = declared.policies
            except RemoteError as e:
                self.warn(diags, name, KEY_GROUP_POLICIES, f"Could not set policy for group: {sanitize_exception(e)}")
            except ReconcileCancelled as e:
                self.fail(diags, name, e)

        return name, Group(name=name, policies=policies)

    def read(self, ctx: ClientContext, identity: str, diags: Diagnostics, declared: Group | None = None) -> Group | None:
        try:
            info = self.call(ctx, "admin", "get_group_description", ctx.admin.get_group_description, identity)
        except RemoteError as e:
            self.fail(diags, identity, e, attribute=KEY_GROUP_NAME, summary=f"Could not load group {identity}")
            return None
        return Group(name=identity, policies=frozenset(info.policies))

    def update(self, ctx: ClientContext, identity: str, old: Group, new: Group, diags: Diagnostics) -> Group | None:
        if new.name != identity or old.name != new.name:
            diags.error(KEY_GROUP_NAME, "Groups can not be renamed")
            return old

        if old.policies != new.policies:
            if not new.policies:
                diags.error(KEY_GROUP_POLICIES, EMPTY_POLICIES_MESSAGE.format(kind="group"))
                return old
            try:
                self.call(ctx, "admin", "set_policy", ctx.admin.set_policy, new.policies, identity, True)
            except RemoteError as e:
                self.fail(diags, identity, e, attribute=KEY_GROUP_POLICIES, summary="Could not change group policies")
                return old
            except ReconcileCancelled as e:
                self.fail(diags, identity, e)
                return old

        return self.read(ctx, identity, diags)

    def delete(self, ctx: ClientContext, identity: str, diags: Diagnostics) -> None:
        try:
            self.call(ctx, "admin", "update_group_members", ctx.admin.update_group_members, identity, [], True)
        except RemoteError as e:
            self.fail(diags, identity, e, attribute=KEY_GROUP_NAME, summary=f"Could not remove group {identity}")
            return
        self.log_info(identity, f"Removed group {identity}", event="delete", reason="GroupDeleted")
