"""Structural comparison of JSON policy documents."""

from __future__ import annotations

import json
from typing import Any

from ..constants import KEY_POLICY_POLICY
from .errors import RemoteError, ValidationError


def _text(document: str | bytes, error_cls: type[ValidationError] | type[RemoteError], origin: str) -> str:
    if not isinstance(document, bytes):
        return document
    try:
        return document.decode("utf-8")
    except UnicodeDecodeError as e:
        raise error_cls(f"The {origin} policy is not valid UTF-8: {e}", attribute=KEY_POLICY_POLICY) from e


def _decode(document: str | bytes, error_cls: type[ValidationError] | type[RemoteError], origin: str) -> dict[str, Any]:
    try:
        decoded = json.loads(_text(document, error_cls, origin))
    except (TypeError, ValueError) as e:
        raise error_cls(f"Could not decode {origin} JSON policy: {e}", attribute=KEY_POLICY_POLICY) from e
    if not isinstance(decoded, dict):
        raise error_cls(f"The {origin} policy is not a JSON object", attribute=KEY_POLICY_POLICY)
    return decoded


def policies_equal(declared: str | bytes, remote: str | bytes) -> bool:
    """Compare two policy documents ignoring key order and formatting.

    Raises:
        ValidationError: If the declared document does not parse
        RemoteError: If the remote document does not parse
    """
    return _decode(declared, ValidationError, "declared") == _decode(remote, RemoteError, "remote")


def snapshot_policy_text(declared: str | None, remote: str | bytes) -> str:
    """Return the policy text the snapshot should carry.

    The declared text is kept as long as the remote document has the same
    content, so server-side reformatting never shows up as drift.

    Raises:
        RemoteError: If the remote document is not UTF-8 encoded JSON
    """
    remote_text = _text(remote, RemoteError, "remote")
    if declared is None:
        _decode(remote_text, RemoteError, "remote")
        return remote_text
    if policies_equal(declared, remote_text):
        return declared
    return remote_text
