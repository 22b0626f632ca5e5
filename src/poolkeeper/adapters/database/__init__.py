"""Metadata store adapters."""

from poolkeeper.adapters.database.sqlite import SqliteDatabase
from poolkeeper.adapters.database.stores import (
    LocalRepoCollection,
    PackageCollection,
    RemoteRepoCollection,
    SnapshotCollection,
)


__all__ = [
    "LocalRepoCollection",
    "PackageCollection",
    "RemoteRepoCollection",
    "SnapshotCollection",
    "SqliteDatabase",
]
