"""Handler for MinioGroup CRD."""

from __future__ import annotations

from typing import Any

import kopf

from ..builders.identity import group_from_spec, group_to_spec
from ..constants import API_GROUP_VERSION, KIND_GROUP
from ..models import Group
from .base import ResourceHandler
from .shared import DRIFT_CHECK_INTERVAL

# Global handler instance
_handler: ResourceHandler[Group] = ResourceHandler(KIND_GROUP, group_from_spec, group_to_spec)


@kopf.on.create(API_GROUP_VERSION, KIND_GROUP)
def handle_group_create(body: dict[str, Any], patch: kopf.Patch, **kwargs: Any) -> None:
    """Handle MinioGroup creation."""
    _handler.create(body, patch)


@kopf.on.update(API_GROUP_VERSION, KIND_GROUP, field="spec")
def handle_group_update(body: dict[str, Any], patch: kopf.Patch, old: Any = None, **kwargs: Any) -> None:
    """Handle MinioGroup spec changes."""
    _handler.update(body, old, patch)


@kopf.on.resume(API_GROUP_VERSION, KIND_GROUP)
def handle_group_resume(body: dict[str, Any], patch: kopf.Patch, **kwargs: Any) -> None:
    """Re-sync a MinioGroup after operator restart."""
    _handler.sync(body, patch)


@kopf.timer(API_GROUP_VERSION, KIND_GROUP, interval=DRIFT_CHECK_INTERVAL, idle=DRIFT_CHECK_INTERVAL)
def handle_group_drift(body: dict[str, Any], patch: kopf.Patch, **kwargs: Any) -> None:
    """Periodically correct MinioGroup drift."""
    _handler.sync(body, patch, create_unbound=False)


@kopf.on.delete(API_GROUP_VERSION, KIND_GROUP)
def handle_group_delete(body: dict[str, Any], patch: kopf.Patch, **kwargs: Any) -> None:
    """Handle MinioGroup deletion."""
    _handler.delete(body, patch)
