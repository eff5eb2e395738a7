"""MinIO-backed implementation of the storage interfaces."""

from __future__ import annotations

import asyncio
import io
import logging
import os
from dataclasses import dataclass
from threading import Lock, Thread
from typing import TYPE_CHECKING, BinaryIO, Union

from minio import Minio
from minio.error import MinioException, S3Error
from minio.helpers import MIN_PART_SIZE

from objstore.core.config import StorageConfig
from objstore.storage.contracts import (
    ObjectData,
    ObjectStorage,
    ProgressObserver,
    StorageError,
    StorageOperation,
    UploadOptions,
    UploadProgress,
)

if TYPE_CHECKING:
    from urllib3 import BaseHTTPResponse

logger = logging.getLogger(__name__)

EMPTY_BODY = "Received empty body"

# remove_bucket on a missing bucket
NO_SUCH_BUCKET = "NoSuchBucket"
# make_bucket lost a race with a concurrent ensure_bucket
ALREADY_OWNED = "BucketAlreadyOwnedByYou"


@dataclass(frozen=True, slots=True)
class RecognizedFault:
    """A failure raised by the storage SDK itself."""

    code: str
    description: str


@dataclass(frozen=True, slots=True)
class UnrecognizedFault:
    """Anything that did not come from the storage SDK."""

    error: BaseException


Fault = Union[RecognizedFault, UnrecognizedFault]


def classify_fault(exc: BaseException) -> Fault:
    """Tell storage-service faults apart from everything else."""
    if isinstance(exc, S3Error):
        code = exc.code or type(exc).__name__
        return RecognizedFault(code=code, description=exc.message or code)
    if isinstance(exc, MinioException):
        return RecognizedFault(code=type(exc).__name__, description=str(exc))
    return UnrecognizedFault(error=exc)


def _describe(exc: BaseException) -> str:
    fault = classify_fault(exc)
    if isinstance(fault, RecognizedFault):
        return fault.description
    return str(exc) or type(exc).__name__


def _has_code(exc: BaseException, code: str) -> bool:
    fault = classify_fault(exc)
    return isinstance(fault, RecognizedFault) and fault.code == code


def log_progress(progress: UploadProgress) -> None:
    """Default observer: log managed upload progress."""
    if progress.percent is None:
        logger.info("Upload progress for %s: %d bytes", progress.object_key, progress.loaded)
    else:
        logger.info("Upload progress for %s: %.1f%%", progress.object_key, progress.percent)


class _ProgressRelay(Thread):
    """Bridges minio's ``progress`` hook to a ProgressObserver.

    minio only accepts Thread instances here and calls ``set_meta`` and
    ``update`` directly; the thread itself is never started.
    """

    def __init__(self, bucket_name: str, object_key: str, observer: ProgressObserver):
        super().__init__(daemon=True)
        self._bucket_name = bucket_name
        self._object_key = object_key
        self._observer = observer
        self._progress_lock = Lock()
        self._loaded = 0
        self._total: int | None = None

    def set_meta(self, object_name: str, total_length: int) -> None:
        with self._progress_lock:
            self._total = total_length if total_length and total_length > 0 else None

    def update(self, size: int) -> None:
        with self._progress_lock:
            self._loaded += size
            snapshot = UploadProgress(
                bucket_name=self._bucket_name,
                object_key=self._object_key,
                loaded=self._loaded,
                total=self._total,
            )
        try:
            self._observer(snapshot)
        except Exception:
            logger.exception("Progress observer failed for %s/%s", self._bucket_name, self._object_key)


def _stream_length(data: ObjectData) -> tuple[BinaryIO, int]:
    """Return a readable stream and its remaining length (-1 when unknown)."""
    if isinstance(data, (bytes, bytearray)):
        return io.BytesIO(data), len(data)
    seekable = getattr(data, "seekable", None)
    if seekable is not None and seekable():
        position = data.tell()
        end = data.seek(0, os.SEEK_END)
        data.seek(position)
        return data, end - position
    return data, -1


def _read_all(data: ObjectData) -> bytes:
    if isinstance(data, (bytes, bytearray)):
        return bytes(data)
    return data.read()


class MinioStorage(ObjectStorage):
    """Object storage wrapper backed by the MinIO SDK.

    Blocking SDK calls run in worker threads so every operation can be
    awaited; the shared client is safe for concurrent use.
    """

    def __init__(
        self,
        client: Minio,
        config: StorageConfig,
        progress_observer: ProgressObserver | None = None,
    ):
        self._client = client
        self._config = config
        self._progress_observer = progress_observer or log_progress

    @property
    def config(self) -> StorageConfig:
        return self._config

    # -------
    # Buckets
    # -------
    async def ensure_bucket(self, bucket_name: str) -> None:
        """Create ``bucket_name`` unless it already exists."""
        try:
            exists = await asyncio.to_thread(self._client.bucket_exists, bucket_name=bucket_name)
        except Exception as exc:
            raise StorageError(
                StorageOperation.ENSURE_BUCKET, _describe(exc), bucketName=bucket_name
            ) from exc
        if exists:
            return

        try:
            await asyncio.to_thread(self._client.make_bucket, bucket_name=bucket_name)
        except Exception as exc:
            if _has_code(exc, ALREADY_OWNED):
                logger.debug("Bucket %s created concurrently", bucket_name)
                return
            raise StorageError(
                StorageOperation.ENSURE_BUCKET, _describe(exc), bucketName=bucket_name
            ) from exc
        logger.info("Created bucket %s", bucket_name)

    async def delete_bucket(self, bucket_name: str) -> None:
        """Delete ``bucket_name``; a bucket that is already gone is not an error."""
        try:
            await asyncio.to_thread(self._client.remove_bucket, bucket_name=bucket_name)
        except Exception as exc:
            if _has_code(exc, NO_SUCH_BUCKET):
                logger.debug("Bucket %s already absent", bucket_name)
                return
            raise StorageError(
                StorageOperation.DELETE_BUCKET, _describe(exc), bucketName=bucket_name
            ) from exc
        logger.info("Deleted bucket %s", bucket_name)

    # -------
    # Objects
    # -------
    async def upload_object(
        self,
        bucket_name: str,
        object_key: str,
        data: ObjectData,
        options: UploadOptions | None = None,
    ) -> None:
        """Upload ``data`` to ``bucket_name/object_key``.

        Only storage-service faults are wrapped in StorageError; other
        exceptions (e.g. minio's ValueError for an invalid part size) are
        re-raised as they are.
        """
        options = options or UploadOptions()
        if options.ensure_bucket:
            await self.ensure_bucket(bucket_name)

        try:
            if options.multipart_upload:
                await asyncio.to_thread(self._managed_upload, bucket_name, object_key, data, options)
            else:
                await asyncio.to_thread(self._single_put, bucket_name, object_key, data, options)
        except Exception as exc:
            fault = classify_fault(exc)
            if isinstance(fault, UnrecognizedFault):
                raise
            raise StorageError(
                StorageOperation.UPLOAD_OBJECT,
                fault.description,
                bucketName=bucket_name,
                objectKey=object_key,
            ) from exc
        logger.info("Uploaded %s/%s", bucket_name, object_key)

    def _single_put(
        self, bucket_name: str, object_key: str, data: ObjectData, options: UploadOptions
    ) -> None:
        body = _read_all(data)
        self._client.put_object(
            bucket_name=bucket_name,
            object_name=object_key,
            data=io.BytesIO(body),
            length=len(body),
            content_type=options.content_type,
            metadata=dict(options.metadata) if options.metadata else None,
            # one part covering the whole body keeps minio on its single PUT path
            part_size=max(len(body), MIN_PART_SIZE),
            num_parallel_uploads=1,
        )

    def _managed_upload(
        self, bucket_name: str, object_key: str, data: ObjectData, options: UploadOptions
    ) -> None:
        stream, length = _stream_length(data)
        relay = _ProgressRelay(bucket_name, object_key, options.progress or self._progress_observer)
        self._client.put_object(
            bucket_name=bucket_name,
            object_name=object_key,
            data=stream,
            length=length,
            content_type=options.content_type,
            metadata=dict(options.metadata) if options.metadata else None,
            progress=relay,
            part_size=self._config.part_size,
            num_parallel_uploads=self._config.max_concurrency,
        )

    async def download_object(self, bucket_name: str, object_key: str) -> BaseHTTPResponse:
        """Open ``bucket_name/object_key`` for reading.

        Returns the SDK response as-is: a single-pass byte stream that the
        caller must ``close()`` and ``release_conn()``.
        """
        try:
            response = await asyncio.to_thread(
                self._client.get_object, bucket_name=bucket_name, object_name=object_key
            )
        except Exception as exc:
            raise StorageError(
                StorageOperation.DOWNLOAD_OBJECT,
                _describe(exc),
                bucketName=bucket_name,
                objectKey=object_key,
            ) from exc
        if response is None:
            raise StorageError(
                StorageOperation.DOWNLOAD_OBJECT,
                EMPTY_BODY,
                bucketName=bucket_name,
                objectKey=object_key,
            )
        return response


__all__ = [
    "EMPTY_BODY",
    "MinioStorage",
    "RecognizedFault",
    "UnrecognizedFault",
    "classify_fault",
    "log_progress",
]
