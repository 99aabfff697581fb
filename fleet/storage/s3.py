"""
S3-compatible storage client (AWS S3, MinIO, Supabase S3 gateway, ...).
"""

from __future__ import annotations

from typing import Iterable, List, Optional

import boto3
from botocore.config import Config
from botocore.exceptions import BotoCoreError, ClientError

from ..errors import StorageError
from .base import StorageItem, public_url


class S3StorageClient:
    def __init__(
        self,
        endpoint_url: Optional[str],
        region: str,
        access_key_id: Optional[str],
        secret_access_key: Optional[str],
        public_base_url: str,
        bucket_prefix: str = "",
    ):
        self.public_base_url = public_base_url
        self.bucket_prefix = bucket_prefix
        self._client = boto3.client(
            "s3",
            endpoint_url=endpoint_url,
            region_name=region,
            aws_access_key_id=access_key_id,
            aws_secret_access_key=secret_access_key,
            config=Config(signature_version="s3v4"),
        )

    def _bucket(self, bucket: str) -> str:
        return f"{self.bucket_prefix}{bucket}"

    def _exists(self, bucket: str, key: str) -> bool:
        try:
            self._client.head_object(Bucket=self._bucket(bucket), Key=key)
            return True
        except ClientError as e:
            if e.response.get("Error", {}).get("Code") in ("404", "NoSuchKey", "NotFound"):
                return False
            raise StorageError(f"head_object failed: {e}") from e

    def upload(self, bucket, path, data, content_type="application/octet-stream", upsert=False):
        key = path.strip("/")
        if not upsert and self._exists(bucket, key):
            raise StorageError(f"The resource already exists: {bucket}/{path}")
        try:
            self._client.put_object(
                Bucket=self._bucket(bucket),
                Key=key,
                Body=data,
                ContentType=content_type,
                CacheControl="max-age=3600",
            )
        except (BotoCoreError, ClientError) as e:
            raise StorageError(f"upload failed: {e}") from e
        return key

    def download(self, bucket: str, path: str) -> bytes:
        try:
            resp = self._client.get_object(Bucket=self._bucket(bucket), Key=path.strip("/"))
            return resp["Body"].read()
        except (BotoCoreError, ClientError) as e:
            raise StorageError(f"download failed: {e}") from e

    def remove(self, bucket: str, paths: Iterable[str]) -> None:
        objects = [{"Key": p.strip("/")} for p in paths]
        if not objects:
            return
        try:
            self._client.delete_objects(
                Bucket=self._bucket(bucket),
                Delete={"Objects": objects, "Quiet": True},
            )
        except (BotoCoreError, ClientError) as e:
            raise StorageError(f"remove failed: {e}") from e

    def list(self, bucket: str, prefix: str) -> List[StorageItem]:
        lead = prefix.strip("/")
        lead = f"{lead}/" if lead else ""
        try:
            resp = self._client.list_objects_v2(
                Bucket=self._bucket(bucket), Prefix=lead, Delimiter="/"
            )
        except (BotoCoreError, ClientError) as e:
            raise StorageError(f"list failed: {e}") from e

        dirs = [
            StorageItem(cp["Prefix"][len(lead):].rstrip("/"), is_dir=True)
            for cp in resp.get("CommonPrefixes", [])
        ]
        files = [
            StorageItem(obj["Key"][len(lead):])
            for obj in resp.get("Contents", [])
            if obj["Key"] != lead
        ]
        return dirs + files

    def get_public_url(self, bucket: str, path: str) -> str:
        # public_base_url fronts the prefixed buckets (CDN / gateway)
        return public_url(self.public_base_url, bucket, path)
