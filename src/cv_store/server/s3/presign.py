"""Functions for issuing signed URLs for single S3 objects."""

from datetime import datetime, timezone
from typing import TYPE_CHECKING, Optional

import boto3

if TYPE_CHECKING:
    from mypy_boto3_s3 import S3Client

DEFAULT_EXPIRES_IN = 60 * 5


def make_upload_key(prefix: str, name: str, now: Optional[datetime] = None) -> str:
    """
    Build a collision-resistant key: ``<prefix><ISO timestamp>-<name>``.

    `:` and `.` in the timestamp are replaced by `-`, e.g.
    ``cv-uploads/2024-01-01T10-20-30-123Z-resume.pdf``.

    :param prefix: key prefix, usually ending in ``/``.
    :param name: original file name.
    :param now: timestamp to embed, defaults to the current UTC time.
    """
    now = now or datetime.now(timezone.utc)
    stamp = now.astimezone(timezone.utc).strftime("%Y-%m-%dT%H:%M:%S") + f".{now.microsecond // 1000:03d}Z"
    stamp = stamp.replace(":", "-").replace(".", "-")
    return f"{prefix}{stamp}-{name}"


def generate_upload_url(
    bucket_name: str,
    object_key: str,
    content_type: str,
    expires_in: int = DEFAULT_EXPIRES_IN,
    s3_client: Optional["S3Client"] = None,
) -> str:
    """
    Sign a PUT for exactly one object.

    :param bucket_name: The name of the S3 bucket.
    :param object_key: path to the object in the S3 bucket.
    :param content_type: The MIME type the upload must be sent with.
    :param expires_in: Validity window in seconds.
    :param s3_client: An optional boto3 S3 client. If not provided, one will be created.
    """
    s3_client = s3_client or boto3.client("s3")
    return s3_client.generate_presigned_url(
        "put_object",
        Params={"Bucket": bucket_name, "Key": object_key, "ContentType": content_type},
        ExpiresIn=expires_in,
    )


def generate_download_url(
    bucket_name: str,
    object_key: str,
    expires_in: int = DEFAULT_EXPIRES_IN,
    s3_client: Optional["S3Client"] = None,
) -> str:
    """Sign a GET for exactly one object."""
    s3_client = s3_client or boto3.client("s3")
    return s3_client.generate_presigned_url(
        "get_object",
        Params={"Bucket": bucket_name, "Key": object_key},
        ExpiresIn=expires_in,
    )
