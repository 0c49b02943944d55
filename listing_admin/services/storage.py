# listing_admin/services/storage.py: S3/MinIO object storage for listing photos
from __future__ import annotations
import logging
from typing import Iterable, Optional, Protocol
from urllib.parse import quote, unquote

import boto3
from botocore.client import Config as BotoConfig
from botocore.exceptions import BotoCoreError, ClientError

from listing_admin.core.exceptions import StorageWriteError

logger = logging.getLogger(__name__)


class ObjectStore(Protocol):
    def put(self, bucket: str, key: str, data: bytes, content_type: str, upsert: bool = True) -> None: ...

    def public_url(self, bucket: str, key: str) -> str: ...

    def key_for_url(self, bucket: str, url: str) -> Optional[str]: ...

    def remove(self, bucket: str, keys: Iterable[str]) -> None: ...


class S3ObjectStore:
    """Blob storage on any S3-compatible endpoint (AWS, MinIO, Supabase S3)."""

    def __init__(self, client, public_base: str = ""):
        self.client = client
        self.public_base = public_base.rstrip("/")

    @classmethod
    def from_settings(cls, conf) -> "S3ObjectStore":
        client = boto3.client(
            "s3",
            endpoint_url=conf.storage_endpoint_url,  # e.g. http://minio:9000
            aws_access_key_id=conf.storage_access_key or None,
            aws_secret_access_key=conf.storage_secret_key or None,
            region_name=conf.storage_region,
            config=BotoConfig(
                signature_version="s3v4",
                s3={"addressing_style": "path"},
            ),
        )
        public_base = conf.storage_public_base
        if not public_base and conf.storage_endpoint_url:
            public_base = conf.storage_endpoint_url.rstrip("/")
        return cls(client, public_base=public_base)

    def _base_for(self, bucket: str) -> str:
        if self.public_base:
            return f"{self.public_base}/{bucket}"
        return f"https://{bucket}.s3.amazonaws.com"

    def put(self, bucket: str, key: str, data: bytes, content_type: str, upsert: bool = True) -> None:
        params = {
            "Bucket": bucket,
            "Key": key,
            "Body": data,
            "ContentType": content_type or "application/octet-stream",
            "CacheControl": "max-age=31536000",
        }
        if not upsert:
            # conditional write: fail if the key already exists
            params["IfNoneMatch"] = "*"
        try:
            self.client.put_object(**params)
        except (ClientError, BotoCoreError) as e:
            raise StorageWriteError(f"Upload of {key!r} to {bucket!r} failed: {e}") from e

    def public_url(self, bucket: str, key: str) -> str:
        return f"{self._base_for(bucket)}/{quote(key)}"

    def key_for_url(self, bucket: str, url: str) -> Optional[str]:
        base = self._base_for(bucket) + "/"
        if not url or not url.startswith(base):
            return None
        return unquote(url[len(base):]) or None

    def remove(self, bucket: str, keys: Iterable[str]) -> None:
        objects = [{"Key": k} for k in keys]
        if not objects:
            return
        try:
            self.client.delete_objects(Bucket=bucket, Delete={"Objects": objects, "Quiet": True})
        except (ClientError, BotoCoreError) as e:
            raise StorageWriteError(f"Delete from {bucket!r} failed: {e}") from e
        logger.info("Removed %d object(s) from %s", len(objects), bucket)
