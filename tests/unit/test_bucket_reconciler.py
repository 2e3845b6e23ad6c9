"""Tests for the bucket reconciler."""

from __future__ import annotations

import pytest

from minio_s3_operator.builders.lifecycle import rules_to_remote
from minio_s3_operator.models import Bucket, BucketLifecycleRule, LifecycleExpiration
from minio_s3_operator.reconcilers import BucketReconciler
from minio_s3_operator.utils.diagnostics import Diagnostics, Severity
from minio_s3_operator.utils.errors import ReconcileCancelled

RULE = BucketLifecycleRule(id="expire", expiration=LifecycleExpiration(days=30))


@pytest.fixture
def reconciler() -> BucketReconciler:
    return BucketReconciler()


class TestBucketCreate:
    """Test bucket creation."""

    def test_create_minimal(self, reconciler, ctx, storage):
        """Test that a plain bucket needs a single call."""
        diags = Diagnostics()
        identity, snapshot = reconciler.create(ctx, Bucket(name="data"), diags)

        assert identity == "data"
        assert snapshot == Bucket(name="data")
        assert not diags
        assert storage.operations() == ["create_bucket"]

    def test_create_with_versioning_and_lifecycle(self, reconciler, ctx, storage):
        """Test that versioning and lifecycle are applied after creation."""
        diags = Diagnostics()
        identity, snapshot = reconciler.create(
            ctx, Bucket(name="data", versioning_enabled=True, lifecycle_rules=(RULE,)), diags
        )

        assert not diags
        assert snapshot.versioning_enabled is True
        assert snapshot.lifecycle_rules == (RULE,)
        assert storage.operations() == ["create_bucket", "set_bucket_versioning", "set_bucket_lifecycle"]

    def test_create_generates_missing_rule_ids(self, reconciler, ctx, storage):
        """Test that the snapshot carries the generated rule ID."""
        diags = Diagnostics()
        _, snapshot = reconciler.create(
            ctx, Bucket(name="data", lifecycle_rules=(BucketLifecycleRule(expiration=LifecycleExpiration(days=1)),)),
            diags,
        )
        assert snapshot.lifecycle_rules[0].id.startswith("rule-")
        assert storage.buckets["data"]["lifecycle"][0]["ID"] == snapshot.lifecycle_rules[0].id

    def test_versioning_unsupported_is_warning(self, reconciler, ctx, storage):
        """Test that a failing versioning call leaves the bucket bound with a warning."""
        storage.fail("set_bucket_versioning")
        diags = Diagnostics()
        identity, snapshot = reconciler.create(ctx, Bucket(name="data", versioning_enabled=True), diags)

        assert identity == "data"
        assert snapshot.versioning_enabled is False
        assert [(d.severity, d.attribute) for d in diags] == [(Severity.WARNING, "versioning_enabled")]
        assert not diags.has_error()

    def test_lifecycle_failure_is_warning(self, reconciler, ctx, storage):
        """Test that a failing lifecycle call leaves the bucket bound with a warning."""
        storage.fail("set_bucket_lifecycle")
        diags = Diagnostics()
        identity, snapshot = reconciler.create(ctx, Bucket(name="data", lifecycle_rules=(RULE,)), diags)

        assert identity == "data"
        assert snapshot.lifecycle_rules == ()
        assert [d.attribute for d in diags.warnings] == ["lifecycle_rules"]

    def test_create_failure_is_fatal(self, reconciler, ctx, storage):
        """Test that a failing create binds nothing and stops."""
        storage.fail("create_bucket")
        diags = Diagnostics()
        identity, snapshot = reconciler.create(ctx, Bucket(name="data", versioning_enabled=True), diags)

        assert identity is None
        assert snapshot is None
        assert diags.has_error()
        assert storage.operations() == ["create_bucket"]

    def test_cancel_after_create_keeps_identity(self, reconciler, ctx, storage):
        """Test that cancellation after creation keeps the bucket bound."""
        create_bucket = storage.create_bucket

        def create_then_cancel(name):
            create_bucket(name)
            ctx.cancel()

        storage.create_bucket = create_then_cancel
        diags = Diagnostics()
        identity, snapshot = reconciler.create(ctx, Bucket(name="data", versioning_enabled=True), diags)

        assert identity == "data"
        assert snapshot.versioning_enabled is False
        assert diags.has_error()
        assert "set_bucket_versioning" not in storage.operations()

    def test_cancelled_before_create(self, reconciler, ctx, storage):
        """Test that no remote call is issued once cancelled."""
        ctx.cancel()
        with pytest.raises(ReconcileCancelled):
            reconciler.create(ctx, Bucket(name="data"), Diagnostics())
        assert storage.calls == []


class TestBucketRead:
    """Test bucket reads."""

    def test_absent_lifecycle_reads_empty(self, reconciler, ctx, storage):
        """Test that a bucket without lifecycle configuration reads as no rules."""
        storage.add_bucket("data")
        diags = Diagnostics()
        snapshot = reconciler.read(ctx, "data", diags)

        assert snapshot == Bucket(name="data", versioning_enabled=False, lifecycle_rules=())
        assert not diags

    def test_read_missing_bucket(self, reconciler, ctx, storage):
        """Test that a missing bucket is an error."""
        diags = Diagnostics()
        assert reconciler.read(ctx, "data", diags) is None
        assert diags.has_error()
        assert diags[0].attribute == "name"

    def test_read_versioning_failure(self, reconciler, ctx, storage):
        """Test that a failing versioning read is an error."""
        storage.add_bucket("data")
        storage.fail("get_bucket_versioning")
        diags = Diagnostics()
        assert reconciler.read(ctx, "data", diags) is None
        assert diags.errors[0].attribute == "versioning_enabled"

    def test_read_lifecycle(self, reconciler, ctx, storage):
        """Test that lifecycle rules are read back."""
        storage.add_bucket("data", versioning=True, rules=rules_to_remote([RULE]))
        snapshot = reconciler.read(ctx, "data", Diagnostics())
        assert snapshot == Bucket(name="data", versioning_enabled=True, lifecycle_rules=(RULE,))


class TestBucketUpdate:
    """Test bucket updates."""

    def test_idempotent(self, reconciler, ctx, storage):
        """Test that an unchanged declaration issues no mutating call."""
        storage.add_bucket("data", versioning=True, rules=rules_to_remote([RULE]))
        bucket = Bucket(name="data", versioning_enabled=True, lifecycle_rules=(RULE,))
        diags = Diagnostics()

        snapshot = reconciler.update(ctx, "data", bucket, bucket, diags)

        assert snapshot == bucket
        assert not diags
        assert storage.mutating_calls() == []

    def test_rename_rejected(self, reconciler, ctx, storage):
        """Test that a name change is an error without remote calls."""
        diags = Diagnostics()
        snapshot = reconciler.update(ctx, "data", Bucket(name="data"), Bucket(name="other"), diags)

        assert snapshot == Bucket(name="data")
        assert diags.errors[0].attribute == "name"
        assert storage.calls == []

    def test_enable_versioning(self, reconciler, ctx, storage):
        """Test that versioning changes are applied and re-read."""
        storage.add_bucket("data")
        diags = Diagnostics()
        snapshot = reconciler.update(ctx, "data", Bucket(name="data"), Bucket(name="data", versioning_enabled=True), diags)

        assert snapshot.versioning_enabled is True
        assert not diags

    def test_versioning_failure_is_warning(self, reconciler, ctx, storage):
        """Test that a failing versioning change is a warning."""
        storage.add_bucket("data")
        storage.fail("set_bucket_versioning")
        diags = Diagnostics()
        snapshot = reconciler.update(ctx, "data", Bucket(name="data"), Bucket(name="data", versioning_enabled=True), diags)

        assert snapshot.versioning_enabled is False
        assert not diags.has_error()
        assert diags.warnings[0].attribute == "versioning_enabled"

    def test_lifecycle_failure_is_fatal(self, reconciler, ctx, storage):
        """Test that a failing lifecycle change is an error and keeps the applied parts."""
        storage.add_bucket("data")
        storage.fail("set_bucket_lifecycle")
        diags = Diagnostics()
        snapshot = reconciler.update(
            ctx, "data", Bucket(name="data"),
            Bucket(name="data", versioning_enabled=True, lifecycle_rules=(RULE,)), diags,
        )

        assert diags.has_error()
        assert diags.errors[0].attribute == "lifecycle_rules"
        assert snapshot == Bucket(name="data", versioning_enabled=True, lifecycle_rules=())

    def test_remove_all_rules(self, reconciler, ctx, storage):
        """Test that removing every rule clears the configuration."""
        storage.add_bucket("data", rules=rules_to_remote([RULE]))
        diags = Diagnostics()
        snapshot = reconciler.update(
            ctx, "data", Bucket(name="data", lifecycle_rules=(RULE,)), Bucket(name="data"), diags
        )

        assert snapshot.lifecycle_rules == ()
        assert storage.buckets["data"]["lifecycle"] is None
        assert not diags


class TestBucketDelete:
    """Test bucket deletion."""

    def test_delete(self, reconciler, ctx, storage):
        """Test deleting an existing bucket."""
        storage.add_bucket("data")
        diags = Diagnostics()
        reconciler.delete(ctx, "data", diags)
        assert "data" not in storage.buckets
        assert not diags

    def test_delete_failure(self, reconciler, ctx, storage):
        """Test that a refused deletion is an error."""
        storage.add_bucket("data")
        storage.fail("delete_bucket")
        diags = Diagnostics()
        reconciler.delete(ctx, "data", diags)
        assert diags.has_error()
        assert "data" in storage.buckets
