"""Per-kind reconcilers."""

from .base import BaseReconciler
from .bucket import BucketReconciler
from .canned_policy import CannedPolicyReconciler
from .group import GroupReconciler
from .user import UserReconciler

__all__ = [
    "BaseReconciler",
    "BucketReconciler",
    "CannedPolicyReconciler",
    "GroupReconciler",
    "UserReconciler",
]
