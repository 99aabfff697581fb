"""
Storage abstraction: what the API needs from an object store.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Iterable, List, Protocol


@dataclass(frozen=True)
class StorageItem:
    """One entry returned by ``list``: a file or a virtual directory."""

    name: str
    is_dir: bool = False


class StorageClient(Protocol):
    """Bucket-addressed object storage."""

    def upload(
        self,
        bucket: str,
        path: str,
        data: bytes,
        content_type: str = "application/octet-stream",
        upsert: bool = False,
    ) -> str:
        """Store ``data`` and return the stored path."""
        ...

    def download(self, bucket: str, path: str) -> bytes:
        """Contents of ``path``; raises StorageError when it does not exist."""
        ...

    def remove(self, bucket: str, paths: Iterable[str]) -> None:
        ...

    def list(self, bucket: str, prefix: str) -> List[StorageItem]:
        """Immediate children of the directory ``prefix``."""
        ...

    def get_public_url(self, bucket: str, path: str) -> str:
        ...


def public_url(base_url: str, bucket: str, path: str) -> str:
    return f"{base_url.rstrip('/')}/{bucket}/{path.lstrip('/')}"


def split_children(prefix: str, keys: Iterable[str]) -> List[StorageItem]:
    """Group flat object keys into the immediate children of ``prefix``."""
    prefix = prefix.strip("/")
    lead = f"{prefix}/" if prefix else ""

    files, dirs = [], []
    seen_dirs = set()
    for key in keys:
        if not key.startswith(lead):
            continue
        rest = key[len(lead):]
        if not rest:
            continue
        head, sep, _ = rest.partition("/")
        if sep:
            if head not in seen_dirs:
                seen_dirs.add(head)
                dirs.append(StorageItem(head, is_dir=True))
        else:
            files.append(StorageItem(head))

    return sorted(dirs, key=lambda i: i.name) + sorted(files, key=lambda i: i.name)
