"""Handler for MinioCannedPolicy CRD."""

from __future__ import annotations

from typing import Any

import kopf

from ..builders.identity import canned_policy_from_spec, canned_policy_to_spec
from ..constants import API_GROUP_VERSION, KIND_CANNED_POLICY
from ..models import CannedPolicy
from .base import ResourceHandler
from .shared import DRIFT_CHECK_INTERVAL

# Global handler instance
_handler: ResourceHandler[CannedPolicy] = ResourceHandler(KIND_CANNED_POLICY, canned_policy_from_spec, canned_policy_to_spec)


@kopf.on.create(API_GROUP_VERSION, KIND_CANNED_POLICY)
def handle_canned_policy_create(body: dict[str, Any], patch: kopf.Patch, **kwargs: Any) -> None:
    """Handle MinioCannedPolicy creation."""
    _handler.create(body, patch)


@kopf.on.update(API_GROUP_VERSION, KIND_CANNED_POLICY, field="spec")
def handle_canned_policy_update(body: dict[str, Any], patch: kopf.Patch, old: Any = None, **kwargs: Any) -> None:
    """Handle MinioCannedPolicy spec changes."""
    _handler.update(body, old, patch)


@kopf.on.resume(API_GROUP_VERSION, KIND_CANNED_POLICY)
def handle_canned_policy_resume(body: dict[str, Any], patch: kopf.Patch, **kwargs: Any) -> None:
    """Re-sync a MinioCannedPolicy after operator restart."""
    _handler.sync(body, patch)


@kopf.timer(API_GROUP_VERSION, KIND_CANNED_POLICY, interval=DRIFT_CHECK_INTERVAL, idle=DRIFT_CHECK_INTERVAL)
def handle_canned_policy_drift(body: dict[str, Any], patch: kopf.Patch, **kwargs: Any) -> None:
    """Periodically correct MinioCannedPolicy drift."""
    _handler.sync(body, patch, create_unbound=False)


@kopf.on.delete(API_GROUP_VERSION, KIND_CANNED_POLICY)
def handle_canned_policy_delete(body: dict[str, Any], patch: kopf.Patch, **kwargs: Any) -> None:
    """Handle MinioCannedPolicy deletion."""
    _handler.delete(body, patch)
