"""Tests for bucket spec decoding."""

from __future__ import annotations

import pytest

from minio_s3_operator.builders.bucket import bucket_from_spec, bucket_to_spec
from minio_s3_operator.models import Bucket, BucketLifecycleRule, LifecycleExpiration, LifecycleTransition
from minio_s3_operator.utils.errors import ValidationError


class TestBucketFromSpec:
    """Test cases for bucket_from_spec."""

    def test_minimal(self):
        """Test a bucket with only a name."""
        assert bucket_from_spec({"name": "data"}) == Bucket(name="data")

    def test_name_required(self):
        """Test that a missing name is rejected."""
        with pytest.raises(ValidationError) as exc_info:
            bucket_from_spec({})
        assert exc_info.value.attribute == "name"

    def test_full(self):
        """Test a bucket with versioning and lifecycle rules."""
        spec = {
            "name": "data",
            "versioning_enabled": True,
            "lifecycle_rules": [
                {"id": "expire", "expiration": {"days": 30}},
                {"enabled": False, "transition": {"storage_class": "GLACIER", "date": "2030-01-01"}},
            ],
        }
        bucket = bucket_from_spec(spec)
        assert bucket.versioning_enabled is True
        assert bucket.lifecycle_rules == (
            BucketLifecycleRule(id="expire", expiration=LifecycleExpiration(days=30)),
            BucketLifecycleRule(
                enabled=False, transition=LifecycleTransition(storage_class="GLACIER", date="2030-01-01")
            ),
        )

    def test_date_and_days_rejected(self):
        """Test that setting both date and days is a validation error."""
        spec = {"name": "data", "lifecycle_rules": [{"expiration": {"date": "2030-01-01", "days": 5}}]}
        with pytest.raises(ValidationError) as exc_info:
            bucket_from_spec(spec)
        assert exc_info.value.attribute == "lifecycle_rules.0.expiration"

    def test_neither_date_nor_days_rejected(self):
        """Test that an empty transition timing is rejected."""
        spec = {"name": "data", "lifecycle_rules": [{"transition": {"storage_class": "GLACIER"}}]}
        with pytest.raises(ValidationError, match="one of date or days"):
            bucket_from_spec(spec)

    def test_invalid_date_format(self):
        """Test that dates must be YYYY-MM-DD."""
        spec = {"name": "data", "lifecycle_rules": [{}, {"expiration": {"date": "01/02/2030"}}]}
        with pytest.raises(ValidationError) as exc_info:
            bucket_from_spec(spec)
        assert exc_info.value.attribute == "lifecycle_rules.1.expiration.date"

    def test_negative_days(self):
        """Test that negative days are rejected."""
        spec = {"name": "data", "lifecycle_rules": [{"expiration": {"days": -1}}]}
        with pytest.raises(ValidationError):
            bucket_from_spec(spec)

    def test_transition_requires_storage_class(self):
        """Test that transitions need a storage class."""
        spec = {"name": "data", "lifecycle_rules": [{"transition": {"days": 3}}]}
        with pytest.raises(ValidationError) as exc_info:
            bucket_from_spec(spec)
        assert exc_info.value.attribute == "lifecycle_rules.0.transition.storage_class"


class TestBucketToSpec:
    """Test cases for bucket_to_spec."""

    def test_renders_same_shape(self):
        """Test that rendering and decoding a snapshot is lossless."""
        bucket = Bucket(
            name="data",
            versioning_enabled=True,
            lifecycle_rules=(
                BucketLifecycleRule(id="a", expiration=LifecycleExpiration(date="2030-01-01")),
                BucketLifecycleRule(id="b", transition=LifecycleTransition(storage_class="COLD", days=0)),
            ),
        )
        assert bucket_from_spec(bucket_to_spec(bucket)) == bucket

    def test_absent_blocks_omitted(self):
        """Test that absent sub-blocks are not rendered."""
        rendered = bucket_to_spec(Bucket(name="data", lifecycle_rules=(BucketLifecycleRule(id="a"),)))
        assert rendered["lifecycle_rules"] == [{"id": "a", "enabled": True}]
