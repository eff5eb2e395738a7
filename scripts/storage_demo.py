#!/usr/bin/env python3
"""
End-to-end demo against a live S3/MinIO endpoint.

Prerequisites:
    AWS_ENDPOINT, AWS_ACCESS_KEY_ID and AWS_SECRET_ACCESS_KEY set in the
    environment or in .env (e.g. a local MinIO on http://localhost:9000).

Usage:
    python scripts/storage_demo.py

    # Upload a file of your own with the multipart strategy:
    python scripts/storage_demo.py --file path/to/large.bin --multipart

    # Leave the bucket in place afterwards:
    python scripts/storage_demo.py --keep
"""

import argparse
import asyncio
import logging
import sys
from pathlib import Path

from pydantic import ValidationError

from objstore.core.config import load_storage_config
from objstore.core.logging import setup_logging
from objstore.storage import MinioStorage, StorageError, UploadOptions
from objstore.storage.factory import build_client

logger = logging.getLogger("storage_demo")

DEFAULT_BUCKET = "objstore-demo"
DEFAULT_KEY = "demo/hello.txt"
DEFAULT_PAYLOAD = b"hello from objstore\n"


def print_header(text: str) -> None:
    print(f"\n{'=' * 60}")
    print(f" {text}")
    print(f"{'=' * 60}")


async def run(args: argparse.Namespace) -> int:
    config = load_storage_config()
    client = build_client(config)
    storage = MinioStorage(client, config)

    print_header(f"Uploading to {args.bucket}/{args.key}")
    options = UploadOptions(ensure_bucket=True, multipart_upload=args.multipart)
    if args.file:
        with open(args.file, "rb") as f:
            await storage.upload_object(args.bucket, args.key, f, options)
        expected_size = Path(args.file).stat().st_size
    else:
        await storage.upload_object(args.bucket, args.key, DEFAULT_PAYLOAD, options)
        expected_size = len(DEFAULT_PAYLOAD)

    print_header("Downloading")
    response = await storage.download_object(args.bucket, args.key)
    received = 0
    try:
        for chunk in response.stream(64 * 1024):
            received += len(chunk)
    finally:
        response.close()
        response.release_conn()
    print(f"Received {received} bytes (expected {expected_size})")

    if not args.keep:
        print_header("Cleaning up")
        # object removal is outside the wrapper; buckets must be empty before removal
        await asyncio.to_thread(client.remove_object, bucket_name=args.bucket, object_name=args.key)
        await storage.delete_bucket(args.bucket)
        # a second delete is a no-op
        await storage.delete_bucket(args.bucket)
        print(f"Deleted bucket {args.bucket}")

    return 0 if received == expected_size else 1


def main() -> int:
    parser = argparse.ArgumentParser(description="objstore end-to-end demo")
    parser.add_argument("--bucket", default=DEFAULT_BUCKET, help="Bucket to use")
    parser.add_argument("--key", default=DEFAULT_KEY, help="Object key to use")
    parser.add_argument("--file", type=Path, help="File to upload instead of a small payload")
    parser.add_argument("--multipart", action="store_true", help="Use the managed multipart upload")
    parser.add_argument("--keep", action="store_true", help="Keep the object and bucket")
    args = parser.parse_args()

    setup_logging()

    try:
        return asyncio.run(run(args))
    except ValidationError as e:
        print(f"Invalid storage configuration:\n{e}")
        return 2
    except StorageError as e:
        logger.error("%s", e)
        return 1


if __name__ == "__main__":
    sys.exit(main())
