"""Builder for the remote client context from operator configuration."""

from __future__ import annotations

import os
from dataclasses import dataclass
from typing import Mapping

from ..services.aws.client import AWSProvider
from ..services.minio.admin import MinioAdminProvider
from ..utils.context import ClientContext
from ..utils.secrets import get_core_api, get_secret_value

TRUE_VALUES = {"1", "true", "yes", "on"}


@dataclass(frozen=True)
class ProviderSettings:
    """Connection settings for one MinIO deployment.

    Attributes:
        endpoint: ``host:port`` of the MinIO server
        access_key: Administrator access key
        secret_key: Administrator secret key
        region: Region reported to the S3 API
        secure: Use TLS
        insecure_skip_verify: Skip TLS certificate verification
    """

    endpoint: str
    access_key: str
    secret_key: str
    region: str = "us-east-1"
    secure: bool = False
    insecure_skip_verify: bool = False

    def __repr__(self) -> str:
        return (
            f"ProviderSettings(endpoint={self.endpoint!r}, region={self.region!r}, "
            f"secure={self.secure}, access_key='***', secret_key='***')"
        )


def _flag(env: Mapping[str, str], name: str) -> bool:
    return env.get(name, "false").strip().lower() in TRUE_VALUES


def settings_from_env(env: Mapping[str, str] | None = None) -> ProviderSettings:
    """Read provider settings from environment variables.

    Credentials come from ``MINIO_ACCESS_KEY``/``MINIO_SECRET_KEY`` unless
    ``MINIO_CREDENTIALS_SECRET`` names a Kubernetes secret holding the keys
    ``access-key`` and ``secret-key``.

    Args:
        env: Environment mapping, defaults to ``os.environ``

    Returns:
        Provider settings

    Raises:
        ValueError: If configuration is invalid
    """
    env = os.environ if env is None else env

    endpoint = env.get("MINIO_ENDPOINT", "").strip()
    if not endpoint:
        raise ValueError("MINIO_ENDPOINT is required")

    secret_name = env.get("MINIO_CREDENTIALS_SECRET")
    if secret_name:
        namespace = env.get("MINIO_CREDENTIALS_NAMESPACE", "default")
        api = get_core_api()
        access_key = get_secret_value(api, namespace, secret_name, "access-key")
        secret_key = get_secret_value(api, namespace, secret_name, "secret-key")
    else:
        access_key = env.get("MINIO_ACCESS_KEY", "")
        secret_key = env.get("MINIO_SECRET_KEY", "")

    if not access_key or not secret_key:
        raise ValueError("MINIO_ACCESS_KEY and MINIO_SECRET_KEY (or MINIO_CREDENTIALS_SECRET) are required")

    return ProviderSettings(
        endpoint=endpoint,
        access_key=access_key,
        secret_key=secret_key,
        region=env.get("MINIO_REGION", "us-east-1"),
        secure=_flag(env, "MINIO_SECURE"),
        insecure_skip_verify=_flag(env, "MINIO_INSECURE_SKIP_VERIFY"),
    )


def create_client_context(settings: ProviderSettings) -> ClientContext:
    """Create a fresh client context for one reconcile invocation."""
    storage = AWSProvider(
        endpoint=settings.endpoint,
        region=settings.region,
        access_key=settings.access_key,
        secret_key=settings.secret_key,
        secure=settings.secure,
        insecure_skip_verify=settings.insecure_skip_verify,
    )
    admin = MinioAdminProvider(
        endpoint=settings.endpoint,
        access_key=settings.access_key,
        secret_key=settings.secret_key,
        secure=settings.secure,
        region=settings.region,
        cert_check=not settings.insecure_skip_verify,
    )
    return ClientContext(storage=storage, admin=admin)
