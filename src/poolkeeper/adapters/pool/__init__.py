"""Package pool adapters."""

from poolkeeper.adapters.pool.filesystem import FilesystemPool, derive_pool_path
from poolkeeper.adapters.pool.router import create_pool
from poolkeeper.adapters.pool.s3 import S3Pool


__all__ = ["FilesystemPool", "S3Pool", "create_pool", "derive_pool_path"]
