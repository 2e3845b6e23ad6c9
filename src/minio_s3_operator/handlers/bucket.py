"""Handler for MinioBucket CRD."""

from __future__ import annotations

from typing import Any

import kopf

from ..builders.bucket import bucket_from_spec, bucket_to_spec
from ..constants import API_GROUP_VERSION, KIND_BUCKET
from ..models import Bucket
from .base import ResourceHandler
from .shared import DRIFT_CHECK_INTERVAL

# Global handler instance
_handler: ResourceHandler[Bucket] = ResourceHandler(KIND_BUCKET, bucket_from_spec, bucket_to_spec)


@kopf.on.create(API_GROUP_VERSION, KIND_BUCKET)
def handle_bucket_create(body: dict[str, Any], patch: kopf.Patch, **kwargs: Any) -> None:
    """Handle MinioBucket creation."""
    _handler.create(body, patch)


@kopf.on.update(API_GROUP_VERSION, KIND_BUCKET, field="spec")
def handle_bucket_update(body: dict[str, Any], patch: kopf.Patch, old: Any = None, **kwargs: Any) -> None:
    """Handle MinioBucket spec changes."""
    _handler.update(body, old, patch)


@kopf.on.resume(API_GROUP_VERSION, KIND_BUCKET)
def handle_bucket_resume(body: dict[str, Any], patch: kopf.Patch, **kwargs: Any) -> None:
    """Re-sync a MinioBucket after operator restart."""
    _handler.sync(body, patch)


@kopf.timer(API_GROUP_VERSION, KIND_BUCKET, interval=DRIFT_CHECK_INTERVAL, idle=DRIFT_CHECK_INTERVAL)
def handle_bucket_drift(body: dict[str, Any], patch: kopf.Patch, **kwargs: Any) -> None:
    """Periodically correct MinioBucket drift."""
    _handler.sync(body, patch, create_unbound=False)


@kopf.on.delete(API_GROUP_VERSION, KIND_BUCKET)
def handle_bucket_delete(body: dict[str, Any], patch: kopf.Patch, **kwargs: Any) -> None:
    """Handle MinioBucket deletion."""
    _handler.delete(body, patch)
