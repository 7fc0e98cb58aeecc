"""Construction of the backend's S3 client."""
import logging

import boto3
from botocore.config import Config

from cv_store.config.settings import Settings

logger = logging.getLogger(__name__)


def get_s3_client(settings: Settings):
    """Create an S3 client from settings; SigV4 so signed URLs carry X-Amz-Expires."""
    logger.info(f"Creating S3 client for region {settings.aws_region}")
    return boto3.client(
        "s3",
        region_name=settings.aws_region,
        endpoint_url=settings.aws_endpoint_url,
        config=Config(signature_version="s3v4"),
    )
