"""Port interfaces for hexagonal architecture.

Ports define contracts that adapters must implement. The core domain
depends only on these protocols, never on concrete implementations.
"""

from __future__ import annotations

from collections.abc import Callable
from typing import TYPE_CHECKING, Protocol, runtime_checkable


if TYPE_CHECKING:
    from poolkeeper.core.models import (
        LocalRepo,
        Package,
        RefList,
        RemoteMirror,
        Snapshot,
    )

ProgressCallback = Callable[[int, int], None]


@runtime_checkable
class RemoteRepoCollectionPort(Protocol):
    """Stored remote repository mirrors."""

    def for_each(self, visit: Callable[[RemoteMirror], None]) -> None:
        """Call visit for every mirror, stopping at the first exception."""
        ...

    def load_complete(self, mirror: RemoteMirror) -> None:
        """Load the mirror's reference list into mirror.ref_list."""
        ...

    def by_name(self, name: str) -> RemoteMirror:
        """Look up a mirror by name.

        Raises:
            EntityNotFoundError: If no mirror with that name exists.
        """
        ...

    def drop(self, mirror: RemoteMirror) -> None:
        """Delete the mirror entry and its stored reference list.

        Package records and pool files are left alone.
        """
        ...


@runtime_checkable
class LocalRepoCollectionPort(Protocol):
    """Stored local repositories."""

    def for_each(self, visit: Callable[[LocalRepo], None]) -> None:
        """Call visit for every local repo, stopping at the first exception."""
        ...

    def load_complete(self, repo: LocalRepo) -> None:
        """Load the repo's reference list into repo.ref_list."""
        ...


@runtime_checkable
class SnapshotCollectionPort(Protocol):
    """Stored snapshots."""

    def for_each(self, visit: Callable[[Snapshot], None]) -> None:
        """Call visit for every snapshot, stopping at the first exception."""
        ...

    def load_complete(self, snapshot: Snapshot) -> None:
        """Load the snapshot's reference list into snapshot.ref_list."""
        ...

    def by_remote_repo_source(self, mirror: RemoteMirror) -> list[Snapshot]:
        """Return snapshots created directly from the given mirror."""
        ...


@runtime_checkable
class PackageCollectionPort(Protocol):
    """Package records in the metadata store."""

    def all_package_refs(self) -> RefList:
        """Return the keys of every stored package."""
        ...

    def by_key(self, key: bytes) -> Package:
        """Load a package record by its key.

        Raises:
            PackageNotFoundError: If no record is stored under key.
        """
        ...

    def delete_by_key(self, key: bytes) -> None:
        """Delete the package record stored under key."""
        ...


@runtime_checkable
class DatabasePort(Protocol):
    """Batching and maintenance controls of the metadata store."""

    def start_batch(self) -> None:
        """Start grouping subsequent writes into one atomic batch."""
        ...

    def finish_batch(self) -> None:
        """Commit the current batch."""
        ...

    def discard_batch(self) -> None:
        """Roll back the current batch without writing anything."""
        ...

    def compact_db(self) -> None:
        """Reclaim space left behind by deleted records."""
        ...


@runtime_checkable
class PoolPort(Protocol):
    """Physical storage of package files."""

    def relative_path(self, filename: str, md5: str) -> str:
        """Derive the pool path of a package file from its checksum."""
        ...

    def filepath_list(self, progress: ProgressReporter | None = None) -> list[str]:
        """List paths of all files currently in the pool.

        Returns:
            Pool-relative POSIX paths, sorted alphabetically.
        """
        ...

    def remove(self, path: str) -> int:
        """Delete a file from the pool.

        Returns:
            Size of the removed file in bytes.

        Raises:
            PoolFileNotFoundError: If the file does not exist.
            PoolError: If the file could not be removed.
        """
        ...

    def size(self, path: str) -> int:
        """Return the size of a pool file in bytes without removing it."""
        ...


@runtime_checkable
class ProgressReporter(Protocol):
    """Reports progress of long-running steps to the user.

    The core domain uses this to report progress without depending
    on any specific UI library.
    """

    def start_task(self, name: str, total: int) -> ProgressCallback:
        """Start tracking a task.

        Args:
            name: Human-readable name for the task.
            total: Total number of steps.

        Returns:
            A ProgressCallback to call with (steps_done, total_steps).
        """
        ...

    def finish_task(self, name: str) -> None:
        """Mark a task as complete.

        Args:
            name: The task name passed to start_task().
        """
        ...


class NullProgressReporter:
    """A ProgressReporter that produces no output.

    Used as the default when no progress reporting is desired.
    """

    def start_task(self, name: str, total: int) -> ProgressCallback:  # noqa: ARG002
        """Return a no-op callback."""
        return lambda _done, _total: None

    def finish_task(self, name: str) -> None:
        """Do nothing."""
        _ = name  # Unused but required by protocol
