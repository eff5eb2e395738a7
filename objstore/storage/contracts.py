"""Storage interfaces, option types and the normalized error."""

from __future__ import annotations

import json
from dataclasses import dataclass
from enum import Enum
from typing import TYPE_CHECKING, Any, BinaryIO, Callable, Mapping, Protocol, Union, runtime_checkable

if TYPE_CHECKING:
    from urllib3 import BaseHTTPResponse

ObjectData = Union[bytes, bytearray, BinaryIO]


class StorageOperation(str, Enum):
    """Operations whose failures are reported as StorageError."""

    ENSURE_BUCKET = "ensureBucket"
    DELETE_BUCKET = "deleteBucket"
    UPLOAD_OBJECT = "uploadObject"
    DOWNLOAD_OBJECT = "downloadObject"


class StorageError(Exception):
    """Wraps an underlying storage failure with operation context.

    ``details`` keeps the order in which context fields were supplied; the
    message renders as ``Storage error: {"operation":...,"error":...,...}``.
    """

    def __init__(self, operation: StorageOperation, cause: str, **details: Any):
        self.operation = StorageOperation(operation)
        self.cause = cause
        self.details = dict(details)
        super().__init__(self.__str__())

    def to_dict(self) -> dict[str, Any]:
        return {"operation": self.operation.value, "error": self.cause, **self.details}

    def __str__(self) -> str:
        return "Storage error: " + json.dumps(self.to_dict(), separators=(",", ":"))


@dataclass(frozen=True, slots=True)
class UploadProgress:
    """Snapshot of a managed upload's transfer state."""

    bucket_name: str
    object_key: str
    loaded: int
    total: int | None = None

    @property
    def percent(self) -> float | None:
        """Percentage complete, or None while the total size is unknown."""
        if not self.total:
            return None
        return self.loaded / self.total * 100


ProgressObserver = Callable[[UploadProgress], None]


@dataclass(frozen=True, slots=True)
class UploadOptions:
    """Per-call upload switches.

    ``progress`` overrides the storage instance's observer for this call only.
    It may be invoked from a worker thread.
    """

    ensure_bucket: bool = False
    multipart_upload: bool = False
    content_type: str = "application/octet-stream"
    metadata: Mapping[str, str] | None = None
    progress: ProgressObserver | None = None


@runtime_checkable
class ObjectStorage(Protocol):
    """Contract for object storage implementations."""

    async def ensure_bucket(self, bucket_name: str) -> None:
        ...

    async def delete_bucket(self, bucket_name: str) -> None:
        ...

    async def upload_object(
        self,
        bucket_name: str,
        object_key: str,
        data: ObjectData,
        options: UploadOptions | None = None,
    ) -> None:
        ...

    async def download_object(self, bucket_name: str, object_key: str) -> BaseHTTPResponse:
        ...


__all__ = [
    "ObjectData",
    "ObjectStorage",
    "ProgressObserver",
    "StorageError",
    "StorageOperation",
    "UploadOptions",
    "UploadProgress",
]
