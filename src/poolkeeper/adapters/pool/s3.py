"""S3 package pool using boto3."""

from __future__ import annotations

from typing import TYPE_CHECKING

import boto3
from botocore.exceptions import ClientError

from poolkeeper.adapters.pool.filesystem import LIST_TASK, derive_pool_path
from poolkeeper.core.exceptions import (
    ConfigurationError,
    PoolAccessError,
    PoolError,
    PoolFileNotFoundError,
)
from poolkeeper.core.ports import NullProgressReporter


if TYPE_CHECKING:
    from mypy_boto3_s3 import S3Client

    from poolkeeper.core.ports import ProgressReporter


class S3Pool:
    """Package pool stored under a key prefix of an S3 bucket.

    Pool paths are keys relative to the prefix, so the same derived layout
    is used as for FilesystemPool.
    """

    def __init__(
        self, bucket: str, prefix: str = "", client: S3Client | None = None
    ) -> None:
        """Initialize the S3 pool.

        Args:
            bucket: Bucket holding the pool.
            prefix: Key prefix of the pool inside the bucket.
            client: Optional boto3 S3 client. If not provided, creates a default client.
        """
        self.bucket = bucket
        self.prefix = prefix.strip("/") + "/" if prefix.strip("/") else ""
        self._client = client or boto3.client("s3")

    @classmethod
    def from_uri(cls, uri: str, client: S3Client | None = None) -> S3Pool:
        """Create a pool from an s3://bucket/prefix URI.

        Raises:
            ConfigurationError: If uri is not a valid S3 URI.
        """
        if not uri.startswith("s3://"):
            raise ConfigurationError(f"Invalid S3 URI: {uri}")
        bucket, _, prefix = uri[5:].partition("/")
        if not bucket:
            raise ConfigurationError(f"Invalid S3 URI (missing bucket): {uri}")
        return cls(bucket, prefix, client=client)

    def relative_path(self, filename: str, md5: str) -> str:
        """Derive the pool path of a package file."""
        return derive_pool_path(filename, md5)

    def filepath_list(self, progress: ProgressReporter | None = None) -> list[str]:
        """List all objects under the pool prefix.

        Reports one progress step per listing page.

        Returns:
            Pool-relative keys, sorted alphabetically.
        """
        progress = progress or NullProgressReporter()
        paginator = self._client.get_paginator("list_objects_v2")
        callback = progress.start_task(LIST_TASK, 0)
        results: list[str] = []

        try:
            for pages, page in enumerate(
                paginator.paginate(Bucket=self.bucket, Prefix=self.prefix), 1
            ):
                for obj in page.get("Contents", []):
                    # directory markers created by console uploads
                    if obj["Key"].endswith("/"):
                        continue
                    results.append(obj["Key"][len(self.prefix) :])
                callback(pages, pages)
        except ClientError as e:
            raise self._translate_client_error(e, self.prefix) from e
        progress.finish_task(LIST_TASK)

        return sorted(results)

    def size(self, path: str) -> int:
        """Return the size of a pool object in bytes.

        Raises:
            PoolFileNotFoundError: If the object does not exist.
        """
        try:
            response = self._client.head_object(Bucket=self.bucket, Key=self._key(path))
        except ClientError as e:
            raise self._translate_client_error(e, path) from e
        return int(response["ContentLength"])

    def remove(self, path: str) -> int:
        """Delete an object from the pool.

        Returns:
            Size of the removed object in bytes.

        Raises:
            PoolFileNotFoundError: If the object does not exist.
            PoolAccessError: If access is denied.
            PoolError: For other S3 errors.
        """
        size = self.size(path)
        try:
            self._client.delete_object(Bucket=self.bucket, Key=self._key(path))
        except ClientError as e:
            raise self._translate_client_error(e, path) from e
        return size

    def _key(self, path: str) -> str:
        return f"{self.prefix}{path}"

    def _translate_client_error(self, error: ClientError, path: str) -> PoolError:
        """Translate botocore ClientError to domain exception.

        Args:
            error: The botocore ClientError.
            path: The pool path for context.

        Returns:
            Appropriate PoolError subclass.
        """
        code = error.response.get("Error", {}).get("Code", "")
        uri = f"s3://{self.bucket}/{self._key(path)}"

        if code in ("404", "NoSuchKey", "NoSuchBucket"):
            return PoolFileNotFoundError(
                f"Object not found: {uri}", path=path, cause=error
            )

        if code in ("403", "AccessDenied"):
            return PoolAccessError(f"Access denied: {uri}", path=path, cause=error)

        return PoolError(f"S3 error ({code}): {error}", path=path, cause=error)
