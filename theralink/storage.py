"""
Object storage for user uploads (S3-compatible, e.g. Cloudflare R2 or Supabase Storage).
"""

import logging
from typing import Optional

import boto3
from botocore.config import Config

from .config import (
    STORAGE_ACCESS_KEY_ID,
    STORAGE_ENDPOINT_URL,
    STORAGE_PUBLIC_URL,
    STORAGE_REGION,
    STORAGE_SECRET_ACCESS_KEY,
)

logger = logging.getLogger(__name__)


def get_storage_client():
    """Create and return an S3 client for the configured endpoint"""
    return boto3.client(
        "s3",
        endpoint_url=STORAGE_ENDPOINT_URL,
        aws_access_key_id=STORAGE_ACCESS_KEY_ID,
        aws_secret_access_key=STORAGE_SECRET_ACCESS_KEY,
        config=Config(signature_version="s3v4"),
        region_name=STORAGE_REGION,
    )


def list_objects(client, bucket: str, prefix: str, limit: int = 100) -> list[str]:
    """Keys stored under ``prefix``"""
    response = client.list_objects_v2(Bucket=bucket, Prefix=prefix, MaxKeys=limit)
    return [obj["Key"] for obj in response.get("Contents", [])]


def remove_objects(client, bucket: str, keys: list[str]) -> None:
    if not keys:
        return
    client.delete_objects(Bucket=bucket, Delete={"Objects": [{"Key": key} for key in keys]})


def upload_object(
    client,
    bucket: str,
    key: str,
    body: bytes,
    content_type: str,
    cache_control: Optional[str] = None,
) -> None:
    params = {"Bucket": bucket, "Key": key, "Body": body, "ContentType": content_type}
    if cache_control:
        params["CacheControl"] = cache_control
    client.put_object(**params)
    logger.info(f"✅ Uploaded {key} to {bucket}")


def public_url(bucket: str, key: str) -> str:
    """Public URL of an object in a public bucket"""
    return f"{STORAGE_PUBLIC_URL.rstrip('/')}/{bucket}/{key}"
