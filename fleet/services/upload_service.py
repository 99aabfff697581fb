"""Upload validation and storage writes shared by every multipart endpoint."""

import re
from typing import Optional, Tuple

from flask import current_app

from ..errors import StorageError
from ..storage import BUCKET_AVATARS, BUCKET_EQUIPMENTS, BUCKET_VEHICLES
from ..storage.paths import ensure_directory, extract_storage_path, file_extension, sanitize_segment, timestamp_ms

MB = 1024 * 1024

IMAGE_TYPES = ("image/jpeg", "image/jpg", "image/png", "image/webp", "image/gif")
DOCUMENT_TYPES = (
    "application/pdf",
    "application/msword",
    "application/vnd.openxmlformats-officedocument.wordprocessingml.document",
)

DEFAULT_MAX_SIZE = 10 * MB
MAINTENANCE_MAX_SIZE = 15 * MB

_MAINTENANCE_MARKERS = ("maintenance-parts", "maintenance-attachments", "/parts", "/attachments")
_UNSAFE_NAME = re.compile(r"[^a-zA-Z0-9.\-]")


def upload_rules(folder: str) -> Tuple[Tuple[str, ...], int]:
    """Allowed content types and max size for a target folder."""
    folder = folder or ""
    if any(marker in folder for marker in _MAINTENANCE_MARKERS):
        return IMAGE_TYPES + DOCUMENT_TYPES, MAINTENANCE_MAX_SIZE
    return IMAGE_TYPES, DEFAULT_MAX_SIZE


def bucket_for_folder(folder: str) -> str:
    folder = folder or ""
    if "profile" in folder:
        return BUCKET_AVATARS
    if "vehicle" in folder:
        return BUCKET_VEHICLES
    return BUCKET_EQUIPMENTS


def read_file(file_storage) -> bytes:
    data = file_storage.read()
    file_storage.stream.seek(0)
    return data


def validate_upload(file_storage, folder: str) -> bytes:
    """Check type and size; returns the file content."""
    if file_storage is None or not file_storage.filename:
        raise ValueError("No file provided")

    allowed, max_size = upload_rules(folder)
    if (file_storage.mimetype or "") not in allowed:
        raise ValueError(f"Invalid file type. Allowed types: {', '.join(allowed)}")

    data = read_file(file_storage)
    if len(data) > max_size:
        raise ValueError(f"File too large. Maximum size is {max_size // MB}MB.")
    return data


def storage_client():
    return current_app.extensions["storage"]


def store_bytes(bucket: str, directory: str, filename: str, data: bytes, content_type: Optional[str] = None) -> str:
    """Upload into ``directory`` (placeholder-created first) and return the public URL."""
    client = storage_client()
    ensure_directory(client, bucket, directory)
    path = client.upload(
        bucket,
        f"{directory}/{filename}",
        data,
        content_type=content_type or "application/octet-stream",
    )
    return client.get_public_url(bucket, path)


def store_file(bucket: str, directory: str, filename: str, file_storage, data: Optional[bytes] = None) -> str:
    if data is None:
        data = read_file(file_storage)
    return store_bytes(bucket, directory, filename, data, file_storage.mimetype)


def delete_by_url(bucket: str, url: str) -> bool:
    """Best effort; returns False when the object could not be removed."""
    path = extract_storage_path(url, bucket)
    if not path:
        current_app.logger.warning("cannot derive storage path from %s", url)
        return False
    try:
        storage_client().remove(bucket, [path])
        return True
    except StorageError as e:
        current_app.logger.warning("delete %s/%s failed: %s", bucket, path, e)
        return False


def clean_folder(folder: Optional[str], default: str = "general") -> str:
    """Folder path with every segment sanitized; ``.`` and ``..`` are rejected."""
    segments = [s for s in (folder or "").split("/") if s.strip()]
    if any(s.strip() in (".", "..") for s in segments):
        raise ValueError("Invalid folder")
    return "/".join(sanitize_segment(s.strip()) for s in segments) or default


def upload_generic(file_storage, folder: Optional[str], user_id: str) -> dict:
    """``POST /api/upload``: validated upload into an arbitrary folder."""
    folder = clean_folder(folder)
    data = validate_upload(file_storage, folder)

    safe_name = _UNSAFE_NAME.sub("_", file_storage.filename)
    path = f"{folder}/{timestamp_ms()}_{user_id}_{safe_name}"
    bucket = bucket_for_folder(folder)

    client = storage_client()
    try:
        stored = client.upload(bucket, path, data, content_type=file_storage.mimetype)
    except StorageError as e:
        current_app.logger.exception("upload to %s failed", bucket)
        raise StorageError("Failed to upload to storage") from e

    return {
        "message": "File uploaded successfully",
        "url": client.get_public_url(bucket, stored),
        "path": stored,
        "bucket": bucket,
        "folder": folder,
        "originalName": file_storage.filename,
        "size": len(data),
        "type": file_storage.mimetype,
    }


# ==========================================
# profile images
# ==========================================
AVATAR_TYPES = ("image/jpeg", "image/jpg", "image/png", "image/webp")
AVATAR_MAX_SIZE = 5 * MB


def upload_avatar(file_storage, user_id: str) -> dict:
    """``POST /api/upload/profile-image``: ``avatars/profiles/<user>_<ts>.<ext>``."""
    if file_storage is None or not file_storage.filename:
        raise ValueError("No file provided")
    if (file_storage.mimetype or "") not in AVATAR_TYPES:
        raise ValueError("Invalid file type. Only JPEG, PNG, and WebP are allowed.")
    data = read_file(file_storage)
    if len(data) > AVATAR_MAX_SIZE:
        raise ValueError("File too large. Maximum size is 5MB.")

    path = f"profiles/{user_id}_{timestamp_ms()}.{file_extension(file_storage.filename, 'jpg')}"
    client = storage_client()
    try:
        stored = client.upload(BUCKET_AVATARS, path, data, content_type=file_storage.mimetype, upsert=True)
    except StorageError as e:
        current_app.logger.exception("avatar upload for %s failed", user_id)
        raise StorageError("Failed to upload to storage") from e

    return {
        "message": "File uploaded successfully",
        "url": client.get_public_url(BUCKET_AVATARS, stored),
        "path": stored,
    }
