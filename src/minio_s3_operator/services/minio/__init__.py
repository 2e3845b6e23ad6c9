"""MinIO administration client."""
