"""Core domain services for poolkeeper."""

import logging
from pathlib import Path

from poolkeeper.core.collector import collect_live_refs
from poolkeeper.core.exceptions import CompactionError, FileDeleteError
from poolkeeper.core.guard import safe_drop_mirror
from poolkeeper.core.models import CleanupResult, RemoteMirror
from poolkeeper.core.ports import (
    DatabasePort,
    LocalRepoCollectionPort,
    NullProgressReporter,
    PackageCollectionPort,
    PoolPort,
    ProgressReporter,
    RemoteRepoCollectionPort,
    SnapshotCollectionPort,
)
from poolkeeper.core.reconciler import reconcile_pool
from poolkeeper.core.sweeper import sweep_metadata


logger = logging.getLogger(__name__)


class Maintenance:
    """Runs garbage collection and guarded drops against one repository.

    Callers must make sure no other process modifies the metadata store or
    the pool while a cleanup is running.
    """

    def __init__(
        self,
        database: DatabasePort,
        packages: PackageCollectionPort,
        mirrors: RemoteRepoCollectionPort,
        local_repos: LocalRepoCollectionPort,
        snapshots: SnapshotCollectionPort,
        pool: PoolPort,
    ) -> None:
        self._database = database
        self._packages = packages
        self._mirrors = mirrors
        self._local_repos = local_repos
        self._snapshots = snapshots
        self._pool = pool

    @classmethod
    def from_directory(cls, directory: Path | None = None) -> "Maintenance":
        """Create Maintenance with auto-discovered settings and default adapters.

        Args:
            directory: Start directory for root discovery (defaults to cwd).

        Returns:
            Maintenance backed by the SQLite metadata store and the pool
            named in the project settings.

        Raises:
            ConfigurationError: If the settings or the pool location are invalid.
            DatabaseOpenError: If the metadata store cannot be opened.
        """
        from poolkeeper.adapters.database import (
            LocalRepoCollection,
            PackageCollection,
            RemoteRepoCollection,
            SnapshotCollection,
            SqliteDatabase,
        )
        from poolkeeper.adapters.pool import create_pool
        from poolkeeper.config import find_project_root, load_settings

        settings = load_settings(find_project_root(directory))
        pool = create_pool(settings.pool_location)
        database = SqliteDatabase(settings.database_path)

        return cls(
            database=database,
            packages=PackageCollection(database),
            mirrors=RemoteRepoCollection(database),
            local_repos=LocalRepoCollection(database),
            snapshots=SnapshotCollection(database),
            pool=pool,
        )

    def cleanup(
        self,
        progress: ProgressReporter | None = None,
        *,
        dry_run: bool = False,
    ) -> CleanupResult:
        """Delete unreferenced package records and pool files.

        Runs the mark phase over every mirror, local repo and snapshot,
        then sweeps the metadata store, then the pool, then compacts the
        store.

        Args:
            progress: Optional progress reporter for long-running steps.
            dry_run: If True, report what would be deleted without deleting.

        Returns:
            CleanupResult with counts and bytes freed.

        Raises:
            EntityLoadError: If an entity fails to load (nothing deleted).
            PackageDeleteError: If a package record cannot be deleted.
            BatchCommitError: If the metadata batch cannot be written.
            FileDeleteError: If a pool file cannot be deleted. Its result
                attribute holds the partial CleanupResult.
            CompactionError: If compaction fails after a completed sweep.
        """
        progress = progress or NullProgressReporter()

        live = collect_live_refs(self._mirrors, self._local_repos, self._snapshots)
        deleted_packages = sweep_metadata(
            self._database, self._packages, live, dry_run=dry_run
        )
        try:
            deleted_files, freed_bytes = reconcile_pool(
                self._packages, self._pool, live, progress, dry_run=dry_run
            )
        except FileDeleteError as e:
            e.result = CleanupResult(
                live_packages=len(live),
                deleted_packages=deleted_packages,
                deleted_files=e.deleted_files,
                freed_bytes=e.freed_bytes,
            )
            raise

        result = CleanupResult(
            live_packages=len(live),
            deleted_packages=deleted_packages,
            deleted_files=deleted_files,
            freed_bytes=freed_bytes,
            dry_run=dry_run,
        )

        if not dry_run:
            logger.info("Compacting database...")
            try:
                self._database.compact_db()
            except Exception as e:
                raise CompactionError(cause=e, result=result) from e

        return result

    def drop_mirror(self, name: str, *, force: bool = False) -> RemoteMirror:
        """Drop a mirror, refusing if snapshots were created from it.

        Args:
            name: Name of the mirror.
            force: Drop even if snapshots depend on the mirror.

        Returns:
            The dropped mirror.

        Raises:
            EntityNotFoundError: If no mirror with that name exists.
            DependentsExistError: If snapshots depend on it and force is unset.
        """
        return safe_drop_mirror(self._mirrors, self._snapshots, name, force=force)
