"""
S3 client configuration
"""

import boto3
from botocore.config import Config
from core.config import get_settings, StorageConfig
from core.logger import logger

client = None


def create_s3_client(storage_config: StorageConfig):
    """
    Build a boto3 S3 client for the configured endpoint.
    Every call is bounded by the configured timeout and made once;
    the backend is never retried.
    """
    settings = get_settings()
    botocore_config = Config(
        connect_timeout=storage_config.timeout_seconds,
        read_timeout=storage_config.timeout_seconds,
        retries={"mode": "standard", "total_max_attempts": 1},
    )
    return boto3.client(
        "s3",
        endpoint_url=storage_config.endpoint_url,
        region_name=storage_config.region_name,
        aws_access_key_id=settings.AWS_ACCESS_KEY_ID,
        aws_secret_access_key=settings.AWS_SECRET_ACCESS_KEY,
        config=botocore_config,
    )


def get_s3_client(storage_config: StorageConfig):
    global client

    if client:
        return client

    client = create_s3_client(storage_config)
    logger.info(
        "S3 client created for endpoint %s",
        client.meta.endpoint_url,
    )
    return client
