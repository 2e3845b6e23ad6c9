"""Kubernetes operator reconciling MinIO buckets, users, groups and canned policies."""

__version__ = "0.1.0"
