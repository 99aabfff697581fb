"""
Storage path conventions and best-effort directory helpers.

Layout inside a bucket:
    <resource>-<id>/<subfolder>/<filename>
e.g.
    equipment-3f2c.../equipment-images/image_1717000000000.jpg
    equipment-3f2c.../parts-management/Engine/1_filter_1717000000000.png
    vehicle-9a1b.../maintenance-reports/<report-id>/attachments/...
"""

import logging
import re
import time
from typing import Optional
from urllib.parse import unquote, urlparse

from ..errors import StorageError
from .base import StorageClient

log = logging.getLogger(__name__)

PLACEHOLDER = ".placeholder"

_UNSAFE = re.compile(r"[^a-zA-Z0-9_\-]")


def sanitize_segment(value: str) -> str:
    return _UNSAFE.sub("_", value or "")


def asset_folder(resource: str, asset_id: str) -> str:
    return f"{resource}-{asset_id}"


def timestamp_ms() -> int:
    return int(time.time() * 1000)


def file_extension(filename: str, default: str = "bin") -> str:
    if filename and "." in filename:
        ext = filename.rsplit(".", 1)[1].strip().lower()
        if ext:
            return ext
    return default


def file_stem(filename: str) -> str:
    name = filename or ""
    return name.rsplit(".", 1)[0] if "." in name else name


def object_name(prefix: str, filename: str, ts: Optional[int] = None) -> str:
    """``<prefix>_<timestamp>.<ext>``"""
    ts = ts if ts is not None else timestamp_ms()
    return f"{prefix}_{ts}.{file_extension(filename)}"


def extract_storage_path(url: str, bucket: str) -> Optional[str]:
    """Path of an object inside ``bucket`` from its public URL."""
    if not url:
        return None
    try:
        parts = [p for p in urlparse(url).path.split("/") if p]
    except ValueError:
        return None

    # last occurrence: the bucket may also appear in a base path
    for idx in range(len(parts) - 1, -1, -1):
        if parts[idx] == bucket:
            rest = parts[idx + 1:]
            return unquote("/".join(rest)) if rest else None
    return None


def ensure_directory(client: StorageClient, bucket: str, directory: str) -> None:
    """Create a placeholder object so an empty directory shows up in listings."""
    try:
        if client.list(bucket, directory):
            return
        client.upload(bucket, f"{directory}/{PLACEHOLDER}", b"", content_type="text/plain")
    except StorageError as e:
        log.debug("ensure_directory %s/%s skipped: %s", bucket, directory, e)


def delete_directory(client: StorageClient, bucket: str, directory: str) -> int:
    """
    Recursively remove everything under ``directory``.
    Errors are logged and skipped; returns the number of files removed.
    """
    try:
        items = client.list(bucket, directory)
    except StorageError as e:
        log.warning("list %s/%s failed during cleanup: %s", bucket, directory, e)
        return 0

    removed = 0
    files = [f"{directory}/{i.name}" for i in items if not i.is_dir]
    if files:
        try:
            client.remove(bucket, files)
            removed += len(files)
        except StorageError as e:
            log.warning("remove in %s/%s failed: %s", bucket, directory, e)

    for sub in (i for i in items if i.is_dir):
        removed += delete_directory(client, bucket, f"{directory}/{sub.name}")

    return removed
