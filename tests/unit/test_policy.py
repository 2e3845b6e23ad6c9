"""Tests for structural policy comparison."""

from __future__ import annotations

import pytest

from minio_s3_operator.utils.errors import RemoteError, ValidationError
from minio_s3_operator.utils.policy import policies_equal, snapshot_policy_text

DECLARED = '{"Version": "2012-10-17", "Statement": [{"Effect": "Allow", "Action": ["s3:GetObject"]}]}'
REFORMATTED = b'{"Statement":[{"Action":["s3:GetObject"],"Effect":"Allow"}],"Version":"2012-10-17"}'
CHANGED = b'{"Statement":[{"Action":["s3:PutObject"],"Effect":"Allow"}],"Version":"2012-10-17"}'


class TestPoliciesEqual:
    """Test cases for policies_equal."""

    def test_formatting_and_key_order_ignored(self):
        """Test that whitespace and key order do not matter."""
        assert policies_equal(DECLARED, REFORMATTED)

    def test_content_difference(self):
        """Test that different content is detected."""
        assert not policies_equal(DECLARED, CHANGED)

    def test_declared_parse_error(self):
        """Test that an unparsable declared document is a validation error."""
        with pytest.raises(ValidationError):
            policies_equal("{", REFORMATTED)

    def test_remote_parse_error(self):
        """Test that an unparsable remote document is a remote error."""
        with pytest.raises(RemoteError):
            policies_equal(DECLARED, b"<html>")


class TestSnapshotPolicyText:
    """Test cases for snapshot_policy_text."""

    def test_keeps_declared_text_when_equal(self):
        """Test that the declared text survives server reformatting."""
        assert snapshot_policy_text(DECLARED, REFORMATTED) == DECLARED

    def test_takes_remote_text_when_different(self):
        """Test that a content change shows up as the remote text."""
        assert snapshot_policy_text(DECLARED, CHANGED) == CHANGED.decode("utf-8")

    def test_no_declared_text(self):
        """Test that the remote text is used when nothing was declared."""
        assert snapshot_policy_text(None, REFORMATTED) == REFORMATTED.decode("utf-8")

    def test_no_declared_text_invalid_remote(self):
        """Test that an unparsable remote document is reported."""
        with pytest.raises(RemoteError):
            snapshot_policy_text(None, b"nope")

    def test_remote_not_utf8(self):
        """Test that remote bytes that are not UTF-8 are a remote error."""
        with pytest.raises(RemoteError, match="not valid UTF-8") as excinfo:
            snapshot_policy_text(DECLARED, b"\xff\xfe{}")
        assert excinfo.value.attribute == "policy"
