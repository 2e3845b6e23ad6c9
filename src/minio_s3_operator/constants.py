"""Constants for the MinIO S3 Operator."""

# API Group
API_GROUP = "minio.cloud37.dev"
API_GROUP_VERSION = f"{API_GROUP}/v1alpha1"

# Resource Kinds
KIND_BUCKET = "MinioBucket"
KIND_USER = "MinioUser"
KIND_GROUP = "MinioGroup"
KIND_CANNED_POLICY = "MinioCannedPolicy"

# Finalizers
FINALIZER = f"{API_GROUP}/finalizer"

# Controller name used in structured logs
CONTROLLER = "minio-s3-operator"

# Attribute keys, shared by declared state, snapshots and diagnostics
KEY_BUCKET_NAME = "name"
KEY_BUCKET_VERSIONING_ENABLED = "versioning_enabled"
KEY_BUCKET_LIFECYCLE_RULES = "lifecycle_rules"
KEY_LIFECYCLE_ID = "id"
KEY_LIFECYCLE_ENABLED = "enabled"
KEY_LIFECYCLE_EXPIRATION = "expiration"
KEY_LIFECYCLE_TRANSITION = "transition"
KEY_LIFECYCLE_DATE = "date"
KEY_LIFECYCLE_DAYS = "days"
KEY_LIFECYCLE_STORAGE_CLASS = "storage_class"
KEY_ACCESS_KEY = "access_key"
KEY_SECRET_KEY = "secret_key"
KEY_USER_POLICIES = "policies"
KEY_USER_GROUPS = "groups"
KEY_GROUP_NAME = "name"
KEY_GROUP_POLICIES = "policies"
KEY_POLICY_NAME = "name"
KEY_POLICY_POLICY = "policy"

# Lifecycle wire values
LIFECYCLE_STATUS_ENABLED = "Enabled"
LIFECYCLE_STATUS_DISABLED = "Disabled"
LIFECYCLE_DATE_FORMAT = "%Y-%m-%d"
LIFECYCLE_RULE_ID_PREFIX = "rule-"

# Versioning wire values
VERSIONING_STATUS_ENABLED = "Enabled"
VERSIONING_STATUS_SUSPENDED = "Suspended"

# Remote error codes
ERROR_CODE_NO_LIFECYCLE = "NoSuchLifecycleConfiguration"
ERROR_CODE_NO_SUCH_BUCKET = "NoSuchBucket"

# Condition Types
COND_READY = "Ready"
COND_DEGRADED = "Degraded"

# Event Reasons
EVENT_REASON_RECONCILE_STARTED = "ReconcileStarted"
EVENT_REASON_RECONCILE_SUCCEEDED = "ReconcileSucceeded"
EVENT_REASON_RECONCILE_FAILED = "ReconcileFailed"
EVENT_REASON_VALIDATE_FAILED = "ValidateFailed"
EVENT_REASON_PARTIALLY_APPLIED = "PartiallyApplied"
EVENT_REASON_DELETED = "Deleted"
