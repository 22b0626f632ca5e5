"""Guarded removal of a remote mirror.

A mirror that snapshots were taken from is kept unless the caller forces
the drop. Dropping only removes the mirror's own entry; its packages and
pool files are reclaimed by the next cleanup run.
"""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING

from poolkeeper.core.exceptions import DependentsExistError


if TYPE_CHECKING:
    from poolkeeper.core.models import RemoteMirror
    from poolkeeper.core.ports import RemoteRepoCollectionPort, SnapshotCollectionPort

logger = logging.getLogger(__name__)


def safe_drop_mirror(
    mirrors: RemoteRepoCollectionPort,
    snapshots: SnapshotCollectionPort,
    name: str,
    *,
    force: bool = False,
) -> RemoteMirror:
    """Drop a mirror unless snapshots depend on it.

    Args:
        mirrors: Remote mirror collection.
        snapshots: Snapshot collection, searched for dependents.
        name: Name of the mirror to drop.
        force: Drop even if snapshots were created from the mirror.

    Returns:
        The dropped mirror.

    Raises:
        EntityNotFoundError: If no mirror with that name exists.
        DependentsExistError: If snapshots depend on the mirror and force
            is not set. The mirror is left untouched.
    """
    mirror = mirrors.by_name(name)

    if not force:
        dependents = snapshots.by_remote_repo_source(mirror)
        if dependents:
            raise DependentsExistError(
                mirror.name, [str(snapshot) for snapshot in dependents]
            )

    mirrors.drop(mirror)
    logger.info("Mirror %s has been removed", mirror.name)
    return mirror
