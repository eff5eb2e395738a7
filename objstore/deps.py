"""Process-wide storage instance."""

from __future__ import annotations

from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from objstore.storage.minio_impl import MinioStorage

_storage: "MinioStorage | None" = None


def get_storage() -> "MinioStorage":
    """Get or lazily initialize the storage singleton.

    Configuration is read from the environment on first use, so importing
    this module never requires storage settings to be present.
    """
    global _storage
    if _storage is None:
        from objstore.core.config import load_storage_config
        from objstore.storage.factory import build_storage

        _storage = build_storage(load_storage_config())
    return _storage


def reset_storage() -> None:
    """Drop the cached instance (tests, credential rotation)."""
    global _storage
    _storage = None


__all__ = ["get_storage", "reset_storage"]
