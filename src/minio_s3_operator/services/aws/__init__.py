"""S3 storage client built on boto3."""
