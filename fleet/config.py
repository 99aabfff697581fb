import os


def _env_bool(name, default=False):
    raw = os.environ.get(name)
    if raw is None:
        return default
    return raw.strip().lower() in ("1", "true", "yes", "on")


class Config:
    SECRET_KEY = os.environ.get("SECRET_KEY", "dev-key")
    SQLALCHEMY_TRACK_MODIFICATIONS = False

    # None -> sqlite file in the instance folder (see create_app)
    SQLALCHEMY_DATABASE_URI = os.environ.get("DATABASE_URL")

    # 50MB: a multipart create can carry several images + parts files
    MAX_CONTENT_LENGTH = int(os.environ.get("MAX_CONTENT_LENGTH", 50 * 1024 * 1024))

    # ===== object storage =====
    STORAGE_BACKEND = os.environ.get("STORAGE_BACKEND", "local")  # local | memory | s3
    STORAGE_ROOT = os.environ.get("STORAGE_ROOT")  # None -> instance/storage
    STORAGE_PUBLIC_URL = os.environ.get("STORAGE_PUBLIC_URL", "/storage")
    S3_ENDPOINT_URL = os.environ.get("S3_ENDPOINT_URL")
    S3_REGION = os.environ.get("S3_REGION", "us-east-1")
    S3_ACCESS_KEY_ID = os.environ.get("S3_ACCESS_KEY_ID")
    S3_SECRET_ACCESS_KEY = os.environ.get("S3_SECRET_ACCESS_KEY")
    S3_BUCKET_PREFIX = os.environ.get("S3_BUCKET_PREFIX", "")

    # ===== realtime =====
    REALTIME_ENABLED = _env_bool("REALTIME_ENABLED", True)
    REALTIME_HEARTBEAT_SECONDS = float(os.environ.get("REALTIME_HEARTBEAT_SECONDS", 15))

    LOG_LEVEL = os.environ.get("LOG_LEVEL", "INFO")

    # seeded superadmin; skipped when the password is empty
    ADMIN_USERNAME = os.environ.get("ADMIN_USERNAME", "superadmin")
    ADMIN_PASSWORD = os.environ.get("ADMIN_PASSWORD", "superpass")
    ADMIN_FULL_NAME = os.environ.get("ADMIN_FULL_NAME", "Super Admin")


class TestingConfig(Config):
    TESTING = True
    SECRET_KEY = "test-key"
    SQLALCHEMY_DATABASE_URI = "sqlite://"
    STORAGE_BACKEND = "memory"
    STORAGE_PUBLIC_URL = "https://storage.test/public"
    REALTIME_HEARTBEAT_SECONDS = 0.05
    LOG_LEVEL = "DEBUG"
