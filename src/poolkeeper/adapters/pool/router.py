"""Pool selection by location URI scheme."""

from __future__ import annotations

from pathlib import Path
from typing import TYPE_CHECKING

from poolkeeper.core.exceptions import ConfigurationError


if TYPE_CHECKING:
    from poolkeeper.core.ports import PoolPort


def parse_uri_scheme(uri: str) -> str | None:
    """Extract the URI scheme from a location string.

    Args:
        uri: Location URI or file path.

    Returns:
        The scheme (e.g., 's3', 'file') or None for local paths.
    """
    if "://" in uri:
        scheme = uri.split("://", 1)[0]
        # Avoid confusing Windows drive letters (C:) with schemes
        if len(scheme) > 1:
            return scheme.lower()
    return None


def strip_file_scheme(uri: str) -> str:
    """Strip file:// prefix from URI, returning plain path."""
    if uri.startswith("file://"):
        return uri[7:]  # len("file://") == 7
    return uri


def create_pool(location: str) -> PoolPort:
    """Create the pool adapter for a location.

    Args:
        location: s3://bucket/prefix for an S3 pool; a plain path or
            file:// URI for a local directory.

    Returns:
        S3Pool or FilesystemPool.

    Raises:
        ConfigurationError: If the URI scheme is not supported.
    """
    from poolkeeper.adapters.pool.filesystem import FilesystemPool

    scheme = parse_uri_scheme(location)
    if scheme == "s3":
        from poolkeeper.adapters.pool.s3 import S3Pool

        return S3Pool.from_uri(location)
    if scheme in (None, "file"):
        return FilesystemPool(Path(strip_file_scheme(location)))
    raise ConfigurationError(f"Unsupported pool location scheme: {scheme}")
