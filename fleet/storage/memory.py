from __future__ import annotations

from dataclasses import dataclass, field
from typing import Dict, Iterable, List, Tuple

from ..errors import StorageError
from .base import StorageItem, public_url, split_children


@dataclass
class MemoryStorageClient:
    """Keeps objects in a dict. Used by the test config."""

    base_url: str = "https://storage.test/public"
    objects: Dict[Tuple[str, str], bytes] = field(default_factory=dict)
    content_types: Dict[Tuple[str, str], str] = field(default_factory=dict)

    def upload(self, bucket, path, data, content_type="application/octet-stream", upsert=False):
        key = (bucket, path.strip("/"))
        if key in self.objects and not upsert:
            raise StorageError(f"The resource already exists: {bucket}/{path}")
        self.objects[key] = bytes(data)
        self.content_types[key] = content_type
        return key[1]

    def remove(self, bucket: str, paths: Iterable[str]) -> None:
        for p in paths:
            self.objects.pop((bucket, p.strip("/")), None)
            self.content_types.pop((bucket, p.strip("/")), None)

    def list(self, bucket: str, prefix: str) -> List[StorageItem]:
        keys = [k for (b, k) in self.objects if b == bucket]
        return split_children(prefix, keys)

    def get_public_url(self, bucket: str, path: str) -> str:
        return public_url(self.base_url, bucket, path)

    def download(self, bucket: str, path: str) -> bytes:
        try:
            return self.objects[(bucket, path.strip("/"))]
        except KeyError:
            raise StorageError(f"Object not found: {bucket}/{path}") from None

    # test helper
    def paths(self, bucket: str) -> List[str]:
        return sorted(k for (b, k) in self.objects if b == bucket)
