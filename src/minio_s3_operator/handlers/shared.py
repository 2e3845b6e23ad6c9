"""Shared state for handlers: provider settings and the coordinator."""

from __future__ import annotations

import os

import kopf

from ..builders.provider import ProviderSettings, create_client_context
from ..coordinator import Coordinator
from ..utils.context import ClientContext

DRIFT_CHECK_INTERVAL = int(os.getenv("DRIFT_CHECK_INTERVAL_SECONDS", "300"))

_settings: ProviderSettings | None = None
_coordinator = Coordinator()


def configure_provider(settings: ProviderSettings | None) -> None:
    """Install the provider settings loaded at startup."""
    global _settings
    _settings = settings


def get_settings() -> ProviderSettings:
    """Get the provider settings.

    Raises:
        kopf.TemporaryError: If the operator has no provider settings yet
    """
    if _settings is None:
        raise kopf.TemporaryError("MinIO provider is not configured", delay=30)
    return _settings


def new_client_context() -> ClientContext:
    """Build a client context dedicated to one handler invocation."""
    return create_client_context(get_settings())


def get_coordinator() -> Coordinator:
    return _coordinator
