"""Pytest configuration and fixtures."""

from unittest.mock import MagicMock

import pytest
from minio.error import S3Error

from objstore.core.config import Credentials, StorageConfig
from objstore.storage.minio_impl import MinioStorage


def _make_s3_error(code: str, message: str = "denied", bucket: str | None = None, key: str | None = None) -> S3Error:
    """Build an S3Error the way minio raises it for a failed request."""
    return S3Error(
        response=None,
        code=code,
        message=message,
        resource="resource",
        request_id="request",
        host_id="host",
        bucket_name=bucket,
        object_name=key,
    )


@pytest.fixture
def storage_config():
    """Connection settings with the documented defaults."""
    return StorageConfig(
        endpoint="http://localhost:9000",
        credentials=Credentials(access_key_id="key-id", secret_access_key="secret"),
    )


@pytest.fixture
def mock_client():
    """Create a mock Minio client."""
    return MagicMock()


@pytest.fixture
def progress_events():
    """Collects UploadProgress snapshots reported by a storage instance."""
    return []


@pytest.fixture
def storage(mock_client, storage_config, progress_events):
    """MinioStorage wired to the mock client."""
    return MinioStorage(mock_client, storage_config, progress_observer=progress_events.append)


@pytest.fixture
def s3_error():
    """Factory for S3Error instances."""
    return _make_s3_error
