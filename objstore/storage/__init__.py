"""Storage package: object storage abstraction."""

from objstore.storage.contracts import (
    ObjectStorage,
    StorageError,
    StorageOperation,
    UploadOptions,
    UploadProgress,
)
from objstore.storage.factory import build_storage
from objstore.storage.minio_impl import MinioStorage

__all__ = [
    "MinioStorage",
    "ObjectStorage",
    "StorageError",
    "StorageOperation",
    "UploadOptions",
    "UploadProgress",
    "build_storage",
]
