"""S3 control client for MinIO, built on boto3."""

from __future__ import annotations

import logging
from typing import Any

import boto3
from botocore.config import Config
from botocore.exceptions import BotoCoreError, ClientError

from ...constants import (
    ERROR_CODE_NO_LIFECYCLE,
    ERROR_CODE_NO_SUCH_BUCKET,
    VERSIONING_STATUS_ENABLED,
    VERSIONING_STATUS_SUSPENDED,
)
from ...utils.errors import NotFoundError, RemoteError

logger = logging.getLogger(__name__)


def _error_code(error: ClientError) -> str:
    return error.response.get("Error", {}).get("Code", "")


def _remote_error(error: Exception, message: str) -> RemoteError:
    if isinstance(error, ClientError) and _error_code(error) in (ERROR_CODE_NO_SUCH_BUCKET, "404"):
        return NotFoundError(f"{message}: {error}")
    return RemoteError(f"{message}: {error}")


class AWSProvider:
    """S3 storage provider implementation."""

    def __init__(
        self,
        endpoint: str,
        region: str,
        access_key: str,
        secret_key: str,
        secure: bool = False,
        insecure_skip_verify: bool = False,
    ) -> None:
        """Initialize the S3 storage provider.

        Args:
            endpoint: MinIO server address (``host:port``) or full URL
            region: Region name
            access_key: Access key ID
            secret_key: Secret access key
            secure: Use https when the endpoint carries no scheme
            insecure_skip_verify: Skip TLS verification
        """
        if "://" not in endpoint:
            endpoint = f"{'https' if secure else 'http'}://{endpoint}"
        self.endpoint = endpoint
        self.region = region

        config = Config(
            signature_version="s3v4",
            s3={"addressing_style": "path"},
            retries={"max_attempts": 1, "mode": "standard"},
        )

        self.client = boto3.client(
            "s3",
            endpoint_url=endpoint,
            region_name=region,
            aws_access_key_id=access_key,
            aws_secret_access_key=secret_key,
            config=config,
            verify=not insecure_skip_verify,
        )

    def create_bucket(self, name: str) -> None:
        """Create a bucket."""
        try:
            self.client.create_bucket(Bucket=name)
        except (ClientError, BotoCoreError) as e:
            logger.error(f"Failed to create bucket {name}: {e}")
            raise _remote_error(e, f"Could not create bucket {name}") from e

    def delete_bucket(self, name: str) -> None:
        """Delete a bucket. The server refuses to delete a non-empty bucket."""
        try:
            self.client.delete_bucket(Bucket=name)
        except (ClientError, BotoCoreError) as e:
            logger.error(f"Failed to delete bucket {name}: {e}")
            raise _remote_error(e, f"Could not delete bucket {name}") from e

    def bucket_exists(self, name: str) -> bool:
        """Check if bucket exists."""
        try:
            self.client.head_bucket(Bucket=name)
            return True
        except ClientError as e:
            if _error_code(e) in ("404", ERROR_CODE_NO_SUCH_BUCKET, "NotFound"):
                return False
            raise RemoteError(f"Could not check bucket {name}: {e}") from e
        except BotoCoreError as e:
            raise RemoteError(f"Could not check bucket {name}: {e}") from e

    def get_bucket_versioning(self, name: str) -> bool:
        """Return True if versioning is enabled."""
        try:
            response = self.client.get_bucket_versioning(Bucket=name)
            return response.get("Status") == VERSIONING_STATUS_ENABLED
        except (ClientError, BotoCoreError) as e:
            logger.error(f"Failed to get versioning for bucket {name}: {e}")
            raise _remote_error(e, f"Could not read versioning of bucket {name}") from e

    def set_bucket_versioning(self, name: str, enabled: bool) -> None:
        """Enable or suspend bucket versioning."""
        status = VERSIONING_STATUS_ENABLED if enabled else VERSIONING_STATUS_SUSPENDED
        try:
            self.client.put_bucket_versioning(
                Bucket=name,
                VersioningConfiguration={"Status": status},
            )
        except (ClientError, BotoCoreError) as e:
            logger.error(f"Failed to set versioning for bucket {name}: {e}")
            raise _remote_error(e, f"Could not set versioning of bucket {name} to {status}") from e

    def get_bucket_lifecycle(self, name: str) -> dict[str, Any] | None:
        """Get bucket lifecycle configuration.

        Returns:
            Lifecycle configuration, or None if the bucket has none
        """
        try:
            response = self.client.get_bucket_lifecycle_configuration(Bucket=name)
            return {"Rules": response.get("Rules", [])}
        except ClientError as e:
            if _error_code(e) == ERROR_CODE_NO_LIFECYCLE:
                return None
            logger.error(f"Failed to get lifecycle for bucket {name}: {e}")
            raise _remote_error(e, f"Could not read lifecycle of bucket {name}") from e
        except BotoCoreError as e:
            raise RemoteError(f"Could not read lifecycle of bucket {name}: {e}") from e

    def set_bucket_lifecycle(self, name: str, rules: list[dict[str, Any]]) -> None:
        """Replace the bucket lifecycle configuration.

        An empty rule list deletes the configuration, since S3 does not
        accept an empty one.
        """
        if not rules:
            self.delete_bucket_lifecycle(name)
            return
        try:
            self.client.put_bucket_lifecycle_configuration(
                Bucket=name,
                LifecycleConfiguration={"Rules": rules},
            )
        except (ClientError, BotoCoreError) as e:
            logger.error(f"Failed to set lifecycle for bucket {name}: {e}")
            raise _remote_error(e, f"Could not set lifecycle of bucket {name}") from e

    def delete_bucket_lifecycle(self, name: str) -> None:
        """Delete bucket lifecycle configuration."""
        try:
            self.client.delete_bucket_lifecycle(Bucket=name)
        except ClientError as e:
            if _error_code(e) == ERROR_CODE_NO_LIFECYCLE:
                return
            logger.error(f"Failed to delete lifecycle for bucket {name}: {e}")
            raise _remote_error(e, f"Could not delete lifecycle of bucket {name}") from e
        except BotoCoreError as e:
            raise RemoteError(f"Could not delete lifecycle of bucket {name}: {e}") from e
