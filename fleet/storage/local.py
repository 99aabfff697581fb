import os
from typing import Iterable, List

from werkzeug.security import safe_join

from ..errors import StorageError
from .base import StorageItem, public_url


class LocalStorageClient:
    """
    Buckets are directories under ``root``:
      root/equipments/equipment-<id>/equipment-images/image_1700000000.jpg
    Files are served back by the /storage route.
    """

    def __init__(self, root: str, base_url: str = "/storage"):
        self.root = root
        self.base_url = base_url
        os.makedirs(root, exist_ok=True)

    def bucket_dir(self, bucket: str) -> str:
        path = safe_join(self.root, bucket)
        if path is None:
            raise StorageError(f"invalid bucket: {bucket}")
        return path

    def _resolve(self, bucket: str, path: str) -> str:
        full = safe_join(self.bucket_dir(bucket), path.strip("/"))
        if full is None:
            raise StorageError(f"invalid storage path: {path}")
        return full

    def upload(self, bucket, path, data, content_type="application/octet-stream", upsert=False):
        full = self._resolve(bucket, path)
        if os.path.exists(full) and not upsert:
            raise StorageError(f"The resource already exists: {bucket}/{path}")

        os.makedirs(os.path.dirname(full), exist_ok=True)
        try:
            with open(full, "wb") as f:
                f.write(data)
        except OSError as e:
            raise StorageError(f"upload failed: {e}") from e
        return path.strip("/")

    def download(self, bucket: str, path: str) -> bytes:
        full = self._resolve(bucket, path)
        try:
            with open(full, "rb") as f:
                return f.read()
        except OSError as e:
            raise StorageError(f"download failed: {e}") from e

    def remove(self, bucket: str, paths: Iterable[str]) -> None:
        for p in paths:
            full = self._resolve(bucket, p)
            if os.path.isfile(full):
                os.remove(full)
            self._prune_empty_dirs(bucket, os.path.dirname(full))

    def _prune_empty_dirs(self, bucket: str, start: str) -> None:
        # directories only exist through their files, like an object store
        stop = self.bucket_dir(bucket)
        cur = start
        while cur.startswith(stop) and cur != stop:
            if not os.path.isdir(cur) or os.listdir(cur):
                break
            os.rmdir(cur)
            cur = os.path.dirname(cur)

    def list(self, bucket: str, prefix: str) -> List[StorageItem]:
        full = self._resolve(bucket, prefix) if prefix.strip("/") else self.bucket_dir(bucket)
        if not os.path.isdir(full):
            return []

        items = []
        for name in sorted(os.listdir(full)):
            items.append(StorageItem(name, is_dir=os.path.isdir(os.path.join(full, name))))
        return sorted(items, key=lambda i: (not i.is_dir, i.name))

    def get_public_url(self, bucket: str, path: str) -> str:
        return public_url(self.base_url, bucket, path)
