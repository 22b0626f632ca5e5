"""Metadata sweep: delete package records no entity references."""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING

from poolkeeper.core.exceptions import BatchCommitError, PackageDeleteError


if TYPE_CHECKING:
    from poolkeeper.core.models import RefList
    from poolkeeper.core.ports import DatabasePort, PackageCollectionPort

logger = logging.getLogger(__name__)


def sweep_metadata(
    database: DatabasePort,
    packages: PackageCollectionPort,
    live: RefList,
    *,
    dry_run: bool = False,
) -> int:
    """Delete every package record whose key is not in live.

    All deletions happen inside a single batch: either the whole sweep is
    committed or, if a delete fails, nothing is.

    Args:
        database: Metadata store providing the batch scope.
        packages: Package collection to sweep.
        live: Keys that must survive. Must be computed over every entity
            before calling this.
        dry_run: If True, only count the records that would be deleted.

    Returns:
        Number of package records deleted (or that would be deleted).

    Raises:
        PackageDeleteError: If a record cannot be deleted. The batch is
            rolled back.
        BatchCommitError: If the batch cannot be written.
    """
    logger.info("Loading list of all packages...")
    all_refs = packages.all_package_refs()
    garbage = all_refs.difference(live)

    if dry_run:
        logger.info("Would delete unreferenced packages (%d)", len(garbage))
        return len(garbage)

    logger.info("Deleting unreferenced packages (%d)...", len(garbage))
    database.start_batch()
    for key in garbage:
        try:
            packages.delete_by_key(key)
        except Exception as e:
            database.discard_batch()
            raise PackageDeleteError(key, cause=e) from e
        logger.debug("Deleted package %s", key.decode(errors="replace"))

    try:
        database.finish_batch()
    except Exception as e:
        database.discard_batch()
        raise BatchCommitError(cause=e) from e

    return len(garbage)
