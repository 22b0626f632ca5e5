"""poolkeeper - garbage collection for a content-addressed package repository.

Package records live in a metadata store, their files in a package pool.
Mirrors, local repos and snapshots keep packages alive; everything they no
longer reference can be reclaimed.

Example:
    >>> from poolkeeper import Maintenance
    >>> maintenance = Maintenance.from_directory()
    >>> result = maintenance.cleanup()
    >>> result.deleted_packages, result.freed_bytes
    (12, 48211968)
"""

from poolkeeper.adapters.database import (
    LocalRepoCollection,
    PackageCollection,
    RemoteRepoCollection,
    SnapshotCollection,
    SqliteDatabase,
)
from poolkeeper.adapters.pool import FilesystemPool, S3Pool, create_pool
from poolkeeper.config import Settings, find_project_root, load_settings
from poolkeeper.core.exceptions import (
    BatchCommitError,
    CompactionError,
    ConfigurationError,
    DatabaseError,
    DatabaseOpenError,
    DependentsExistError,
    EntityLoadError,
    EntityNotFoundError,
    FileDeleteError,
    KeyNotFoundError,
    PackageDeleteError,
    PackageNotFoundError,
    PoolAccessError,
    PoolError,
    PoolFileNotFoundError,
    PoolkeeperError,
)
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
    NullProgressReporter,
    PoolPort,
    ProgressCallback,
    ProgressReporter,
)
from poolkeeper.core.services import Maintenance
from poolkeeper.progress import RichProgressReporter


__version__ = "0.1.0"

__all__ = [
    "BatchCommitError",
    "CleanupResult",
    "CompactionError",
    "ConfigurationError",
    "DatabaseError",
    "DatabaseOpenError",
    "DependentsExistError",
    "EntityLoadError",
    "EntityNotFoundError",
    "FileDeleteError",
    "FilesystemPool",
    "KeyNotFoundError",
    "LocalRepo",
    "LocalRepoCollection",
    "Maintenance",
    "NullProgressReporter",
    "Package",
    "PackageCollection",
    "PackageDeleteError",
    "PackageFile",
    "PackageNotFoundError",
    "PoolAccessError",
    "PoolError",
    "PoolFileNotFoundError",
    "PoolPort",
    "PoolkeeperError",
    "ProgressCallback",
    "ProgressReporter",
    "RefList",
    "RemoteMirror",
    "RemoteRepoCollection",
    "RichProgressReporter",
    "S3Pool",
    "Settings",
    "Snapshot",
    "SnapshotCollection",
    "SqliteDatabase",
    "__version__",
    "create_pool",
    "find_project_root",
    "load_settings",
]
