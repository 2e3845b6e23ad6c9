"""Main entry point for the MinIO S3 Operator."""

from __future__ import annotations

import logging
import os
from typing import Any

import kopf

from . import handlers  # noqa: F401
from . import health
from . import logging as structured_logging
from .builders.provider import settings_from_env
from .handlers import shared
from .utils.errors import sanitize_exception

logger = logging.getLogger(__name__)


@kopf.on.startup()
def configure(settings: kopf.OperatorSettings, **_: Any) -> None:
    """Configure the operator."""
    structured_logging.setup_structured_logging()

    # Use AnnotationsProgressStorage to avoid conflicts with status updates
    settings.persistence.progress_storage = kopf.AnnotationsProgressStorage()
    settings.persistence.diffbase_storage = kopf.AnnotationsDiffBaseStorage()

    settings.posting.level = 0
    settings.networking.request_timeout = 30.0
    settings.execution.max_workers = 4

    metrics_port = int(os.getenv("METRICS_PORT", "8080"))
    health.start_server(metrics_port)

    try:
        shared.configure_provider(settings_from_env())
    except ValueError as e:
        logger.error(f"MinIO provider configuration is invalid: {sanitize_exception(e)}")
        raise
    health.set_ready(True)


@kopf.on.cleanup()
def cleanup(**_: Any) -> None:
    """Mark the operator not ready while it shuts down."""
    health.set_ready(False)
