"""Handler for MinioUser CRD."""

from __future__ import annotations

import hashlib
from typing import Any

import kopf

from ..builders.identity import user_from_spec, user_to_spec
from ..constants import API_GROUP_VERSION, KEY_SECRET_KEY, KIND_USER
from ..coordinator import ReconcileResult
from ..models import UserAccount
from ..utils.secrets import get_core_api, get_secret_value
from .base import ResourceHandler
from .shared import DRIFT_CHECK_INTERVAL

# Spec field referencing a Kubernetes secret that holds the secret key
SECRET_KEY_REF = "secret_key_ref"

# Status field holding a digest of the secret key last applied on the server
STATUS_SECRET_KEY_HASH = "secretKeyHash"


def secret_key_hash(access_key: str, secret_key: str) -> str:
    """Digest identifying a secret key without storing it."""
    return hashlib.sha256(f"{access_key}:{secret_key}".encode("utf-8")).hexdigest()


class UserHandler(ResourceHandler[UserAccount]):
    """Handler for MinioUser resources.

    The secret key is taken inline from ``secret_key`` or resolved from
    ``secret_key_ref`` (``name`` and optional ``key``, default
    ``secret-key``) in the resource's namespace. A digest of the key last
    applied is kept in status, so an unchanged key is never sent again.
    """

    def __init__(self) -> None:
        super().__init__(KIND_USER, user_from_spec, user_to_spec)

    def resolve_secret_key(self, spec: dict[str, Any], body: dict[str, Any]) -> str | None:
        meta = body.get("metadata", {})
        ref = spec.get(SECRET_KEY_REF)
        if not ref:
            return spec.get(KEY_SECRET_KEY)

        name = ref.get("name")
        if not name:
            raise kopf.PermanentError(f"{SECRET_KEY_REF}.name is required")
        namespace = meta.get("namespace", "default")
        try:
            return get_secret_value(get_core_api(), namespace, name, ref.get("key", "secret-key"))
        except ValueError as e:
            self.log_error(meta, "Could not resolve secret key", error=e, reason="SecretNotFound")
            raise kopf.TemporaryError(str(e), delay=30) from e

    def build(self, spec: dict[str, Any], for_create: bool = False) -> UserAccount:
        return user_from_spec(spec, require_secret=for_create)

    def decode(self, spec: dict[str, Any], body: dict[str, Any], for_create: bool = False) -> UserAccount:
        secret_key = self.resolve_secret_key(spec, body)
        spec = {k: v for k, v in spec.items() if k != SECRET_KEY_REF}
        spec[KEY_SECRET_KEY] = secret_key
        return super().decode(spec, body, for_create)

    def decode_snapshot(
        self,
        snapshot: dict[str, Any],
        old_spec: dict[str, Any] | None,
        declared: UserAccount,
        status: dict[str, Any],
    ) -> UserAccount:
        """Rebuild the prior user, including the secret key known to be applied.

        Snapshots never hold the secret. The recorded digest tells whether the
        declared key is already in place; without one, only an inline key of
        the old spec is known.
        """
        applied = status.get(STATUS_SECRET_KEY_HASH)
        if applied is None:
            old_secret = (old_spec or {}).get(KEY_SECRET_KEY)
        elif declared.secret_key and applied == secret_key_hash(declared.access_key, declared.secret_key):
            old_secret = declared.secret_key
        else:
            old_secret = None
        return user_from_spec(dict(snapshot), secret_key=old_secret)

    def status_extras(
        self, body: dict[str, Any], action: str, result: ReconcileResult[UserAccount]
    ) -> dict[str, Any]:
        snapshot = result.snapshot
        if snapshot is None or not snapshot.secret_key:
            return {}
        # A sync of a bound user reads the key from the declaration, it never sends it
        if action == "sync" and body.get("status", {}).get("identity"):
            return {}
        return {STATUS_SECRET_KEY_HASH: secret_key_hash(snapshot.access_key, snapshot.secret_key)}


# Global handler instance
_handler = UserHandler()


@kopf.on.create(API_GROUP_VERSION, KIND_USER)
def handle_user_create(body: dict[str, Any], patch: kopf.Patch, **kwargs: Any) -> None:
    """Handle MinioUser creation."""
    _handler.create(body, patch)


@kopf.on.update(API_GROUP_VERSION, KIND_USER, field="spec")
def handle_user_update(body: dict[str, Any], patch: kopf.Patch, old: Any = None, **kwargs: Any) -> None:
    """Handle MinioUser spec changes."""
    _handler.update(body, old, patch)


@kopf.on.resume(API_GROUP_VERSION, KIND_USER)
def handle_user_resume(body: dict[str, Any], patch: kopf.Patch, **kwargs: Any) -> None:
    """Re-sync a MinioUser after operator restart."""
    _handler.sync(body, patch)


@kopf.timer(API_GROUP_VERSION, KIND_USER, interval=DRIFT_CHECK_INTERVAL, idle=DRIFT_CHECK_INTERVAL)
def handle_user_drift(body: dict[str, Any], patch: kopf.Patch, **kwargs: Any) -> None:
    """Periodically correct MinioUser drift."""
    _handler.sync(body, patch, create_unbound=False)


@kopf.on.delete(API_GROUP_VERSION, KIND_USER)
def handle_user_delete(body: dict[str, Any], patch: kopf.Patch, **kwargs: Any) -> None:
    """Handle MinioUser deletion."""
    _handler.delete(body, patch)
