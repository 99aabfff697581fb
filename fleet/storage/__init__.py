"""Object storage: client protocol, backends and path conventions."""

from .base import StorageClient, StorageItem
from .memory import MemoryStorageClient
from .local import LocalStorageClient
from .paths import (
    asset_folder,
    delete_directory,
    ensure_directory,
    extract_storage_path,
    object_name,
    sanitize_segment,
)

BUCKET_EQUIPMENTS = "equipments"
BUCKET_VEHICLES = "vehicles"
BUCKET_AVATARS = "avatars"
