import os

from flask import current_app


class Storage:
    """Flask extension holding the configured StorageClient."""

    def __init__(self, app=None):
        if app is not None:
            self.init_app(app)

    def init_app(self, app):
        app.extensions["storage"] = self.create_client(app.config, app.instance_path)

    @staticmethod
    def create_client(config, instance_path):
        backend = (config.get("STORAGE_BACKEND") or "local").lower()
        base_url = config.get("STORAGE_PUBLIC_URL") or "/storage"

        if backend == "memory":
            from .memory import MemoryStorageClient

            return MemoryStorageClient(base_url=base_url)

        if backend == "s3":
            from .s3 import S3StorageClient

            return S3StorageClient(
                endpoint_url=config.get("S3_ENDPOINT_URL"),
                region=config.get("S3_REGION"),
                access_key_id=config.get("S3_ACCESS_KEY_ID"),
                secret_access_key=config.get("S3_SECRET_ACCESS_KEY"),
                public_base_url=base_url,
                bucket_prefix=config.get("S3_BUCKET_PREFIX") or "",
            )

        if backend == "local":
            from .local import LocalStorageClient

            root = config.get("STORAGE_ROOT") or os.path.join(instance_path, "storage")
            return LocalStorageClient(root, base_url=base_url)

        raise RuntimeError(f"unknown STORAGE_BACKEND: {backend}")

    @property
    def client(self):
        return current_app.extensions["storage"]
