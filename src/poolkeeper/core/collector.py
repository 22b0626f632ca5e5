"""Mark phase: compute the set of package references still in use.

Every mirror, local repo and snapshot is loaded in full and its reference
list merged into one RefList. Nothing may be deleted until all three
collections have been drained.
"""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING

from poolkeeper.core.exceptions import EntityLoadError
from poolkeeper.core.models import RefList


if TYPE_CHECKING:
    from poolkeeper.core.models import LocalRepo, RemoteMirror, Snapshot
    from poolkeeper.core.ports import (
        LocalRepoCollectionPort,
        RemoteRepoCollectionPort,
        SnapshotCollectionPort,
    )

logger = logging.getLogger(__name__)


def collect_live_refs(
    mirrors: RemoteRepoCollectionPort,
    local_repos: LocalRepoCollectionPort,
    snapshots: SnapshotCollectionPort,
) -> RefList:
    """Union the reference lists of all mirrors, local repos and snapshots.

    Args:
        mirrors: Remote mirror collection.
        local_repos: Local repository collection.
        snapshots: Snapshot collection.

    Returns:
        Every package key reachable from at least one entity.

    Raises:
        EntityLoadError: If any entity fails to load. No partial result
            is returned.
    """
    live = RefList()

    def visit_mirror(mirror: RemoteMirror) -> None:
        nonlocal live
        try:
            mirrors.load_complete(mirror)
        except Exception as e:
            raise EntityLoadError("mirror", mirror.name, cause=e) from e
        if mirror.ref_list is not None:
            live = live.union(mirror.ref_list)

    def visit_local_repo(repo: LocalRepo) -> None:
        nonlocal live
        try:
            local_repos.load_complete(repo)
        except Exception as e:
            raise EntityLoadError("local repo", repo.name, cause=e) from e
        if repo.ref_list is not None:
            live = live.union(repo.ref_list)

    def visit_snapshot(snapshot: Snapshot) -> None:
        nonlocal live
        try:
            snapshots.load_complete(snapshot)
        except Exception as e:
            raise EntityLoadError("snapshot", snapshot.name, cause=e) from e
        # snapshots are created with their ref list
        if snapshot.ref_list is None:
            raise EntityLoadError("snapshot", snapshot.name)
        live = live.union(snapshot.ref_list)

    logger.info("Loading mirrors, local repos and snapshots...")
    mirrors.for_each(visit_mirror)
    local_repos.for_each(visit_local_repo)
    snapshots.for_each(visit_snapshot)

    logger.debug("Live set contains %d package(s)", len(live))
    return live
