"""Factory for building storage instances from a StorageConfig."""

from __future__ import annotations

from urllib.parse import urlparse

from minio import Minio

from objstore.core.config import StorageConfig
from objstore.storage.contracts import ProgressObserver
from objstore.storage.minio_impl import MinioStorage


def _normalize_endpoint(endpoint: str) -> tuple[str, bool]:
    """Extract host:port from endpoint URL and determine if secure (https).

    Returns:
        Tuple of (host:port, secure_flag)
    """
    parsed = urlparse(endpoint)
    secure = parsed.scheme == "https"
    host = parsed.netloc or parsed.path.rstrip("/")
    return host, secure


def build_client(config: StorageConfig) -> Minio:
    """Create the one Minio connection handle for ``config``."""
    host, secure = _normalize_endpoint(config.endpoint)
    return Minio(
        host,
        access_key=config.credentials.access_key_id,
        secret_key=config.credentials.secret_access_key,
        region=config.region,
        secure=secure,
    )


def build_storage(
    config: StorageConfig, progress_observer: ProgressObserver | None = None
) -> MinioStorage:
    """Build a MinioStorage wrapper around a fresh client for ``config``."""
    return MinioStorage(build_client(config), config, progress_observer=progress_observer)


__all__ = ["build_client", "build_storage"]
