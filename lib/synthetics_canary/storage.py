"""
S3 utilities for the artifact bucket.

Provides the existence probe used before deploy and the reads used to
fetch run logs.
"""

import logging

from botocore.exceptions import ClientError

from synthetics_canary.clients import error_code

logger = logging.getLogger(__name__)

_NOT_FOUND_CODES = frozenset({"404", "NoSuchBucket", "NotFound", "NoSuchKey"})


def parse_artifact_location(location: str) -> tuple[str, str]:
    """
    Split an artifact location into bucket and key prefix.

    Synthetics reports run artifacts as "bucket/prefix/..." without a
    scheme; the s3:// form used for canary configuration is accepted too.

    Args:
        location: Artifact location like "my-bucket/canary/2024/01/01/run-id"

    Returns:
        Tuple of (bucket, prefix)

    Example:
        bucket, prefix = parse_artifact_location("s3://my-bucket/c1/")
        # bucket = "my-bucket"
        # prefix = "c1/"
    """
    if location.startswith("s3://"):
        location = location[5:]
    if not location:
        raise ValueError("Empty artifact location")

    parts = location.split("/", 1)
    bucket = parts[0]
    prefix = parts[1] if len(parts) > 1 else ""
    return bucket, prefix


def bucket_exists(s3, bucket_name: str) -> bool:
    """Check if an S3 bucket exists and is reachable."""
    try:
        s3.head_bucket(Bucket=bucket_name)
    except ClientError as e:
        if error_code(e) in _NOT_FOUND_CODES:
            return False
        logger.error(f"Failed to check bucket {bucket_name}: {e}")
        raise
    return True


def list_object_keys(s3, bucket_name: str, prefix: str) -> list[str]:
    """
    List object keys under a prefix.

    Args:
        s3: S3 client
        bucket_name: Bucket to list
        prefix: Key prefix

    Returns:
        Object keys, empty if the bucket does not exist
    """
    keys = []
    paginator = s3.get_paginator("list_objects_v2")
    try:
        for page in paginator.paginate(Bucket=bucket_name, Prefix=prefix):
            keys.extend(obj["Key"] for obj in page.get("Contents", []))
    except ClientError as e:
        if error_code(e) in _NOT_FOUND_CODES:
            logger.warning(f"Bucket {bucket_name} not found while listing {prefix}")
            return []
        logger.error(f"Failed to list s3://{bucket_name}/{prefix}: {e}")
        raise
    return keys


def read_object_text(s3, bucket_name: str, key: str, encoding: str = "utf-8") -> str:
    """
    Read text content of an object.

    Returns:
        Decoded content, empty string if the object does not exist
    """
    try:
        response = s3.get_object(Bucket=bucket_name, Key=key)
    except ClientError as e:
        if error_code(e) in _NOT_FOUND_CODES:
            logger.warning(f"Object s3://{bucket_name}/{key} not found")
            return ""
        logger.error(f"Failed to read s3://{bucket_name}/{key}: {e}")
        raise
    return response["Body"].read().decode(encoding, errors="replace")
