"""Functions for reading objects from an S3 bucket--the "R" in CRUD."""

from typing import TYPE_CHECKING, List, Optional

import boto3

from cv_store.schemas import ListItem

if TYPE_CHECKING:
    from mypy_boto3_s3 import S3Client


def fetch_prefixed_objects(
    bucket_name: str,
    prefix: str = "",
    s3_client: Optional["S3Client"] = None,
) -> List[ListItem]:
    """
    List every object under a prefix, skipping directory markers.

    :param bucket_name: The name of the S3 bucket.
    :param prefix: Only keys starting with this prefix are returned.
    :param s3_client: An optional boto3 S3 client. If not provided, one will be created.
    :return: One item per object; ``name`` is the key without the prefix.
    """
    s3_client = s3_client or boto3.client("s3")
    paginator = s3_client.get_paginator("list_objects_v2")

    items = []
    for page in paginator.paginate(Bucket=bucket_name, Prefix=prefix):
        for obj in page.get("Contents", []):
            key = obj["Key"]
            if key.endswith("/"):
                continue
            items.append(ListItem(
                key=key,
                name=key[len(prefix):] if key.startswith(prefix) else key,
                size=obj["Size"],
                last_modified=obj["LastModified"],
            ))
    return items
