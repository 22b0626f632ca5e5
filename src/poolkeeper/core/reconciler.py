"""Pool sweep: delete pool files no surviving package refers to."""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING

from poolkeeper.core.exceptions import FileDeleteError
from poolkeeper.core.models import subtract_sorted
from poolkeeper.core.ports import NullProgressReporter


if TYPE_CHECKING:
    from poolkeeper.core.models import RefList
    from poolkeeper.core.ports import (
        PackageCollectionPort,
        PoolPort,
        ProgressReporter,
    )

logger = logging.getLogger(__name__)

REFERENCED_TASK = "Building list of files referenced by packages"
DELETE_TASK = "Deleting unreferenced files"


def referenced_files(
    packages: PackageCollectionPort,
    pool: PoolPort,
    live: RefList,
    progress: ProgressReporter | None = None,
) -> list[str]:
    """Collect the sorted pool paths of every package in live.

    Raises:
        PackageNotFoundError: If a live key has no package record.
    """
    progress = progress or NullProgressReporter()
    files: list[str] = []
    total = len(live)
    callback = progress.start_task(REFERENCED_TASK, total)
    done = 0

    def visit(key: bytes) -> None:
        nonlocal done
        pkg = packages.by_key(key)
        files.extend(pkg.filepath_list(pool))
        done += 1
        callback(done, total)

    live.for_each(visit)
    progress.finish_task(REFERENCED_TASK)

    files.sort()
    return files


def reconcile_pool(
    packages: PackageCollectionPort,
    pool: PoolPort,
    live: RefList,
    progress: ProgressReporter | None = None,
    *,
    dry_run: bool = False,
) -> tuple[int, int]:
    """Delete files in the pool that no live package refers to.

    The live set must have been computed before any package was deleted;
    since the metadata sweep keeps exactly the live packages, the paths
    derived from it are those of the survivors.

    Args:
        packages: Package collection used to resolve live keys.
        pool: The package pool to sweep.
        live: Keys of all surviving packages.
        progress: Optional progress reporter.
        dry_run: If True, only measure the files that would be deleted.

    Returns:
        Tuple of (number of files deleted, bytes freed).

    Raises:
        PackageNotFoundError: If a live key has no package record.
        PoolError: If the pool cannot be listed.
        FileDeleteError: If a file cannot be deleted. Files removed before
            the failure stay removed and are counted on the error.
    """
    progress = progress or NullProgressReporter()

    logger.info("Building list of files referenced by packages...")
    referenced = referenced_files(packages, pool, live, progress)

    logger.info("Building list of files in package pool...")
    existing = sorted(pool.filepath_list(progress))

    to_delete = subtract_sorted(existing, referenced)
    if not to_delete:
        logger.info("No unreferenced files found")
        return 0, 0

    if dry_run:
        freed = sum(pool.size(path) for path in to_delete)
        logger.info("Would delete unreferenced files (%d)", len(to_delete))
        return len(to_delete), freed

    logger.info("Deleting unreferenced files (%d)...", len(to_delete))
    callback = progress.start_task(DELETE_TASK, len(to_delete))
    freed = 0
    for done, path in enumerate(to_delete, 1):
        try:
            freed += pool.remove(path)
        except Exception as e:
            raise FileDeleteError(
                path, cause=e, deleted_files=done - 1, freed_bytes=freed
            ) from e
        logger.debug("Deleted pool file %s", path)
        callback(done, len(to_delete))
    progress.finish_task(DELETE_TASK)

    return len(to_delete), freed
