"""Reconciler for canned policies."""

from __future__ import annotations

from ..constants import KEY_POLICY_NAME, KEY_POLICY_POLICY, KIND_CANNED_POLICY
from ..models import CannedPolicy
from ..utils.context import ClientContext
from ..utils.diagnostics import Diagnostics
from ..utils.errors import ReconcileCancelled, ReconcileError, RemoteError
from ..utils.policy import snapshot_policy_text
from .base import BaseReconciler


class CannedPolicyReconciler(BaseReconciler[CannedPolicy]):
    """Reconciler for CannedPolicy resources.

    The server offers no update primitive, so a changed policy has to be
    deleted and created again by the caller.
    """

    def __init__(self):
        super().__init__(KIND_CANNED_POLICY)

    def create(
        self, ctx: ClientContext, declared: CannedPolicy, diags: Diagnostics
    ) -> tuple[str | None, CannedPolicy | None]:
        name = declared.name
        try:
            self.call(
                ctx, "admin", "add_canned_policy", ctx.admin.add_canned_policy, name, declared.policy.encode("utf-8")
            )
        except RemoteError as e:
            self.fail(diags, name, e, attribute=KEY_POLICY_NAME, summary=f"Could not create canned policy {name}")
            return None, None

        self.log_info(name, f"Created canned policy {name}", event="create", reason="PolicyCreated")
        try:
            return name, self.read(ctx, name, diags, declared=declared)
        except ReconcileCancelled as e:
            self.fail(diags, name, e)
            return name, declared

    def read(
        self, ctx: ClientContext, identity: str, diags: Diagnostics, declared: CannedPolicy | None = None
    ) -> CannedPolicy | None:
        """Read the policy and keep the declared text unless its content differs.

        The server may store the document with different formatting, so the
        comparison is structural.
        """
        try:
            remote = self.call(ctx, "admin", "info_canned_policy", ctx.admin.info_canned_policy, identity)
        except RemoteError as e:
            self.fail(diags, identity, e, attribute=KEY_POLICY_NAME)
            return None

        try:
            policy = snapshot_policy_text(declared.policy if declared is not None else None, remote)
        except ReconcileError as e:
            self.fail(diags, identity, e, attribute=KEY_POLICY_POLICY)
            return None
        return CannedPolicy(name=identity, policy=policy)

    def update(
        self, ctx: ClientContext, identity: str, old: CannedPolicy, new: CannedPolicy, diags: Diagnostics
    ) -> CannedPolicy | None:
        if new.name != identity or old.name != new.name:
            diags.error(KEY_POLICY_NAME, "Canned policies can not be renamed")
            return old
        if old.policy != new.policy:
            diags.error(KEY_POLICY_POLICY, "Canned policies can not be updated, delete and recreate instead")
            return old
        return self.read(ctx, identity, diags, declared=new)

    def delete(self, ctx: ClientContext, identity: str, diags: Diagnostics) -> None:
        try:
            self.call(ctx, "admin", "remove_canned_policy", ctx.admin.remove_canned_policy, identity)
        except RemoteError as e:
            self.fail(diags, identity, e, attribute=KEY_POLICY_NAME,
                      summary=f"Could not remove canned policy {identity}")
            return
        self.log_info(identity, f"Removed canned policy {identity}", event="delete", reason="PolicyDeleted")
