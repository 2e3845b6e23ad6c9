"""Prometheus metrics for the MinIO S3 Operator."""

from prometheus_client import Counter, Histogram

# Reconciliation metrics
reconcile_total = Counter(
    "minio_s3_operator_reconcile_total",
    "Total number of reconciliations",
    ["kind", "action", "result"],
)

reconcile_duration_seconds = Histogram(
    "minio_s3_operator_reconcile_duration_seconds",
    "Duration of reconciliations in seconds",
    ["kind", "action"],
    buckets=[0.1, 0.5, 1.0, 2.5, 5.0, 10.0],
)

diagnostics_total = Counter(
    "minio_s3_operator_diagnostics_total",
    "Total number of diagnostics reported by reconciliations",
    ["kind", "severity"],
)

# Configuration drift detection metrics
drift_detected_total = Counter(
    "minio_s3_operator_drift_detected_total",
    "Total number of configuration drift detections",
    ["kind", "attribute"],
)

# Remote API call metrics
api_call_total = Counter(
    "minio_s3_operator_api_call_total",
    "Total number of remote API calls",
    ["api_type", "operation", "result"],
)

api_call_duration_seconds = Histogram(
    "minio_s3_operator_api_call_duration_seconds",
    "Duration of remote API calls in seconds",
    ["api_type", "operation"],
    buckets=[0.01, 0.05, 0.1, 0.5, 1.0, 2.5, 5.0],
)
