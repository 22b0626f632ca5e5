"""Core domain module for poolkeeper.

This module contains pure Python domain models, port definitions and the
garbage collection phases. It has no I/O dependencies and can be tested
in isolation.
"""

from poolkeeper.core.models import (
    CleanupResult,
    LocalRepo,
    Package,
    PackageFile,
    RefList,
    RemoteMirror,
    Snapshot,
)
from poolkeeper.core.ports import (
    DatabasePort,
    PackageCollectionPort,
    PoolPort,
    ProgressCallback,
)


__all__ = [
    "CleanupResult",
    "DatabasePort",
    "LocalRepo",
    "Package",
    "PackageCollectionPort",
    "PackageFile",
    "PoolPort",
    "ProgressCallback",
    "RefList",
    "RemoteMirror",
    "Snapshot",
]
