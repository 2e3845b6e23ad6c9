"""Reconciler for buckets."""

from __future__ import annotations

from dataclasses import replace

from ..builders.lifecycle import rules_from_remote, rules_to_remote
from ..constants import KEY_BUCKET_LIFECYCLE_RULES, KEY_BUCKET_NAME, KEY_BUCKET_VERSIONING_ENABLED, KIND_BUCKET
from ..models import Bucket
from ..utils.context import ClientContext
from ..utils.diagnostics import Diagnostics
from ..utils.errors import NotFoundError, ReconcileCancelled, RemoteError, sanitize_exception
from .base import BaseReconciler


class BucketReconciler(BaseReconciler[Bucket]):
    """Reconciler for Bucket resources."""

    def __init__(self):
        super().__init__(KIND_BUCKET)

    def create(self, ctx: ClientContext, declared: Bucket, diags: Diagnostics) -> tuple[str | None, Bucket | None]:
        """Create a bucket, then apply versioning and lifecycle rules.

        Only the bucket creation itself is fatal. Once the bucket exists its
        name is bound, and a failing secondary step leaves a warning on the
        affected attribute.
        """
        name = declared.name
        try:
            self.call(ctx, "s3", "create_bucket", ctx.storage.create_bucket, name)
        except RemoteError as e:
            self.fail(diags, name, e, attribute=KEY_BUCKET_NAME, summary=f"Could not create bucket {name}")
            return None, None

        self.log_info(name, f"Created bucket {name}", event="create", reason="BucketCreated")

        versioning_enabled = False
        rules: tuple = ()
        try:
            if declared.versioning_enabled:
                try:
                    self.call(ctx, "s3", "set_bucket_versioning", ctx.storage.set_bucket_versioning, name, True)
                    versioning_enabled = True
                except RemoteError as e:
                    self.warn(diags, name, KEY_BUCKET_VERSIONING_ENABLED,
                              f"Could not enable versioning: {sanitize_exception(e)}")

            if declared.lifecycle_rules:
                remote_rules = rules_to_remote(declared.lifecycle_rules)
                try:
                    self.call(ctx, "s3", "set_bucket_lifecycle", ctx.storage.set_bucket_lifecycle, name, remote_rules)
                    rules = rules_from_remote({"Rules": remote_rules})
                except RemoteError as e:
                    self.warn(diags, name, KEY_BUCKET_LIFECYCLE_RULES,
                              f"Could not apply lifecycle rules: {sanitize_exception(e)}")
        except ReconcileCancelled as e:
            self.fail(diags, name, e)

        return name, Bucket(name=name, versioning_enabled=versioning_enabled, lifecycle_rules=rules)

    def read(
        self, ctx: ClientContext, identity: str, diags: Diagnostics, declared: Bucket | None = None
    ) -> Bucket | None:
        """Read existence, versioning and lifecycle as three separate facts."""
        try:
            exists = self.call(ctx, "s3", "bucket_exists", ctx.storage.bucket_exists, identity)
        except RemoteError as e:
            self.fail(diags, identity, e, attribute=KEY_BUCKET_NAME)
            return None
        if not exists:
            self.fail(diags, identity, NotFoundError(f"Bucket {identity} does not exist", attribute=KEY_BUCKET_NAME))
            return None

        try:
            versioning_enabled = self.call(
                ctx, "s3", "get_bucket_versioning", ctx.storage.get_bucket_versioning, identity
            )
        except RemoteError as e:
            self.fail(diags, identity, e, attribute=KEY_BUCKET_VERSIONING_ENABLED)
            return None

        try:
            lifecycle = self.call(ctx, "s3", "get_bucket_lifecycle", ctx.storage.get_bucket_lifecycle, identity)
        except RemoteError as e:
            self.fail(diags, identity, e, attribute=KEY_BUCKET_LIFECYCLE_RULES)
            return None

        return Bucket(
            name=identity,
            versioning_enabled=bool(versioning_enabled),
            lifecycle_rules=rules_from_remote(lifecycle),
        )

    def update(self, ctx: ClientContext, identity: str, old: Bucket, new: Bucket, diags: Diagnostics) -> Bucket | None:
        """Apply changed versioning and lifecycle settings."""
        if new.name != identity or old.name != new.name:
            diags.error(KEY_BUCKET_NAME, "Buckets can not be renamed")
            return old

        versioning_enabled = old.versioning_enabled
        if old.versioning_enabled != new.versioning_enabled:
            try:
                self.call(
                    ctx, "s3", "set_bucket_versioning", ctx.storage.set_bucket_versioning,
                    identity, new.versioning_enabled,
                )
                versioning_enabled = new.versioning_enabled
            except RemoteError as e:
                action = "enable" if new.versioning_enabled else "disable"
                self.warn(diags, identity, KEY_BUCKET_VERSIONING_ENABLED,
                          f"Could not {action} versioning: {sanitize_exception(e)}")

        rules = old.lifecycle_rules
        if old.lifecycle_rules != new.lifecycle_rules:
            remote_rules = rules_to_remote(new.lifecycle_rules)
            try:
                self.call(ctx, "s3", "set_bucket_lifecycle", ctx.storage.set_bucket_lifecycle, identity, remote_rules)
                rules = rules_from_remote({"Rules": remote_rules})
            except RemoteError as e:
                self.fail(diags, identity, e, attribute=KEY_BUCKET_LIFECYCLE_RULES,
                          summary="Could not apply lifecycle rules")

        if diags.has_error():
            return replace(old, versioning_enabled=versioning_enabled, lifecycle_rules=rules)
        return self.read(ctx, identity, diags)

    def delete(self, ctx: ClientContext, identity: str, diags: Diagnostics) -> None:
        """Delete the bucket. Non-empty buckets are refused by the server."""
        try:
            self.call(ctx, "s3", "delete_bucket", ctx.storage.delete_bucket, identity)
        except RemoteError as e:
            self.fail(diags, identity, e, attribute=KEY_BUCKET_NAME, summary=f"Could not delete bucket {identity}")
            return
        self.log_info(identity, f"Deleted bucket {identity}", event="delete", reason="BucketDeleted")
