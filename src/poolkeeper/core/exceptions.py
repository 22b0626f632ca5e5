"""Domain exceptions for poolkeeper.

All library errors inherit from PoolkeeperError, allowing users to catch
any library exception with a single except clause. Each exception provides
a recovery_hint property with guidance on resolving the error.
"""

from __future__ import annotations

from typing import TYPE_CHECKING


if TYPE_CHECKING:
    from poolkeeper.core.models import CleanupResult


class PoolkeeperError(Exception):
    """Base class for all poolkeeper exceptions.

    Catch this to handle any error from the library.
    """

    @property
    def recovery_hint(self) -> str | None:
        """Optional guidance on how to resolve this error."""
        return None


class EntityNotFoundError(PoolkeeperError):
    """Raised when a named mirror, local repo or snapshot doesn't exist.

    Attributes:
        kind: Entity kind ("mirror", "local repo", "snapshot").
        name: The name that was not found.
        available: Names of existing entities of the same kind.
    """

    def __init__(
        self, kind: str, name: str, available: list[str] | None = None
    ) -> None:
        self.kind = kind
        self.name = name
        self.available = available if available is not None else []
        super().__init__(f"{kind} with name {name} not found")

    @property
    def recovery_hint(self) -> str:
        """Suggest existing names."""
        if self.available:
            return f"Available {self.kind}s: {', '.join(self.available)}"
        return f"No {self.kind}s exist yet"


class EntityLoadError(PoolkeeperError):
    """Raised when an entity's reference list cannot be loaded.

    Aborts garbage collection before anything has been deleted.

    Attributes:
        kind: Entity kind ("mirror", "local repo", "snapshot").
        name: Name of the entity that failed to load.
        cause: The underlying exception, if any.
    """

    def __init__(self, kind: str, name: str, cause: Exception | None = None) -> None:
        self.kind = kind
        self.name = name
        self.cause = cause
        message = f"unable to load {kind} {name}"
        if cause is not None:
            message = f"{message}: {cause}"
        super().__init__(message)

    @property
    def recovery_hint(self) -> str:
        """Explain that nothing was deleted."""
        return "Nothing was deleted; check the metadata store and run cleanup again"


class PackageNotFoundError(PoolkeeperError):
    """Raised when a package record is missing from the metadata store.

    Attributes:
        key: The reference key that was looked up.
    """

    def __init__(self, key: bytes) -> None:
        self.key = key
        super().__init__(f"package not found: {key.decode(errors='replace')}")


class PackageDeleteError(PoolkeeperError):
    """Raised when a package record cannot be deleted during the sweep.

    The current batch is rolled back; records deleted in earlier runs
    are not affected.

    Attributes:
        key: Reference key of the record that failed to delete.
        cause: The underlying exception, if any.
    """

    def __init__(self, key: bytes, cause: Exception | None = None) -> None:
        self.key = key
        self.cause = cause
        super().__init__(
            f"unable to delete package {key.decode(errors='replace')}: {cause}"
        )


class BatchCommitError(PoolkeeperError):
    """Raised when the metadata store fails to persist a deletion batch.

    Attributes:
        cause: The underlying exception, if any.
    """

    def __init__(self, cause: Exception | None = None) -> None:
        self.cause = cause
        super().__init__(f"unable to write to DB: {cause}")

    @property
    def recovery_hint(self) -> str:
        """Point at the storage layer."""
        return "Check free disk space and permissions of the database directory"


class DependentsExistError(PoolkeeperError):
    """Raised when dropping a mirror that snapshots were created from.

    Attributes:
        name: Name of the mirror.
        dependents: Display names of the dependent snapshots.
    """

    def __init__(self, name: str, dependents: list[str]) -> None:
        self.name = name
        self.dependents = dependents
        super().__init__(
            f"won't delete mirror {name} with snapshots, use force to override"
        )

    @property
    def recovery_hint(self) -> str:
        """Suggest forcing or dropping the snapshots first."""
        return "Drop the snapshots first, or use --force to drop the mirror anyway"


class PoolError(PoolkeeperError):
    """Base class for package pool errors.

    Attributes:
        path: The pool path that caused the error.
        cause: The underlying exception, if any.
    """

    def __init__(
        self,
        message: str,
        path: str,
        cause: Exception | None = None,
    ) -> None:
        self.path = path
        self.cause = cause
        super().__init__(message)


class PoolFileNotFoundError(PoolError):
    """Raised when a pool file doesn't exist."""

    @property
    def recovery_hint(self) -> str:
        """Suggest verifying the path."""
        return f"Verify the pool path exists: {self.path}"


class PoolAccessError(PoolError):
    """Raised when access to the pool is denied (permissions, credentials)."""

    @property
    def recovery_hint(self) -> str:
        """Suggest checking permissions."""
        return "Check credentials and pool directory/bucket permissions"


class FileDeleteError(PoolError):
    """Raised when an unreferenced pool file cannot be deleted.

    Files removed before the failure stay removed. The metadata sweep has
    already been committed by then, so the run is partially done.

    Attributes:
        deleted_files: Files removed before the failure.
        freed_bytes: Bytes reclaimed before the failure.
        result: Partial CleanupResult of the run, set by Maintenance.
    """

    def __init__(
        self,
        path: str,
        cause: Exception | None = None,
        *,
        deleted_files: int = 0,
        freed_bytes: int = 0,
    ) -> None:
        self.deleted_files = deleted_files
        self.freed_bytes = freed_bytes
        self.result: CleanupResult | None = None
        super().__init__(f"unable to delete pool file {path}: {cause}", path, cause)

    @property
    def recovery_hint(self) -> str:
        """Suggest rerunning once the file is deletable."""
        return "Fix the problem and run cleanup again; it will resume from here"


class DatabaseError(PoolkeeperError):
    """Base class for metadata store errors."""

    pass


class DatabaseOpenError(DatabaseError):
    """Raised when the metadata store cannot be opened.

    Attributes:
        path: Location of the database file.
        cause: The underlying exception, if any.
    """

    def __init__(self, path: str, cause: Exception | None = None) -> None:
        self.path = path
        self.cause = cause
        super().__init__(f"unable to open database {path}: {cause}")

    @property
    def recovery_hint(self) -> str:
        """Point at the database file."""
        return f"Check that {self.path} is a poolkeeper database and is readable"


class CompactionError(DatabaseError):
    """Raised when compacting the store fails after a completed sweep.

    Packages and files were already deleted; only the space of deleted
    records was not reclaimed.

    Attributes:
        cause: The underlying exception, if any.
        result: CleanupResult of the sweep that preceded compaction.
    """

    def __init__(
        self, cause: Exception | None = None, result: CleanupResult | None = None
    ) -> None:
        self.cause = cause
        self.result = result
        super().__init__(f"unable to compact DB after cleanup: {cause}")

    @property
    def recovery_hint(self) -> str:
        """Explain that the cleanup itself succeeded."""
        return "Cleanup finished; run it again later to retry compaction"


class KeyNotFoundError(DatabaseError):
    """Raised when a key is missing from the metadata store.

    Attributes:
        key: The key that was looked up.
    """

    def __init__(self, key: bytes) -> None:
        self.key = key
        super().__init__(f"key not found: {key.decode(errors='replace')}")


class ConfigurationError(PoolkeeperError):
    """Raised for configuration problems (unreadable or invalid settings)."""

    pass
