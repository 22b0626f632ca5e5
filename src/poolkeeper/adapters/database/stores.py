"""Package and entity collections stored in SqliteDatabase.

Records are JSON-encoded. Key prefixes keep the kinds apart:

    P<arch> <name> <version>   package record
    R<uuid>                    remote mirror
    L<uuid>                    local repo
    S<uuid>                    snapshot
    E<uuid>                    reference list of the entity with that uuid
"""

from __future__ import annotations

import base64
import json
from typing import TYPE_CHECKING, Any, Generic, TypeVar

from poolkeeper.core.exceptions import (
    EntityNotFoundError,
    KeyNotFoundError,
    PackageNotFoundError,
)
from poolkeeper.core.models import (
    LocalRepo,
    Package,
    PackageFile,
    RefList,
    RemoteMirror,
    Snapshot,
)


if TYPE_CHECKING:
    from collections.abc import Callable

    from poolkeeper.adapters.database.sqlite import SqliteDatabase

E = TypeVar("E", RemoteMirror, LocalRepo, Snapshot)

PACKAGE_PREFIX = b"P"
REF_LIST_PREFIX = b"E"


def encode_ref_list(refs: RefList) -> bytes:
    """Serialize a RefList as a JSON array of base64 keys."""
    return json.dumps([base64.b64encode(ref).decode("ascii") for ref in refs]).encode()


def decode_ref_list(data: bytes) -> RefList:
    """Inverse of encode_ref_list."""
    return RefList(base64.b64decode(item) for item in json.loads(data))


class PackageCollection:
    """Package records, implementing PackageCollectionPort."""

    def __init__(self, db: SqliteDatabase) -> None:
        self._db = db

    def update(self, package: Package) -> None:
        """Store a package record, replacing an existing one with the same key."""
        data = {
            "name": package.name,
            "version": package.version,
            "architecture": package.architecture,
            "files": [
                {"filename": f.filename, "md5": f.md5, "size": f.size}
                for f in package.files
            ],
        }
        self._db.put(package.key, json.dumps(data).encode())

    def all_package_refs(self) -> RefList:
        """Return the keys of every stored package."""
        return RefList(self._db.keys_by_prefix(PACKAGE_PREFIX))

    def by_key(self, key: bytes) -> Package:
        """Load a package record.

        Raises:
            PackageNotFoundError: If no record is stored under key.
        """
        try:
            data = json.loads(self._db.get(key))
        except KeyNotFoundError:
            raise PackageNotFoundError(key) from None

        return Package(
            name=data["name"],
            version=data["version"],
            architecture=data["architecture"],
            files=tuple(
                PackageFile(filename=f["filename"], md5=f["md5"], size=f.get("size", 0))
                for f in data.get("files", [])
            ),
        )

    def delete_by_key(self, key: bytes) -> None:
        """Delete the package record stored under key."""
        self._db.delete(key)


class _EntityCollection(Generic[E]):
    """Shared storage logic for mirrors, local repos and snapshots."""

    kind: str
    prefix: bytes

    def __init__(self, db: SqliteDatabase) -> None:
        self._db = db

    def _encode(self, entity: E) -> dict[str, Any]:
        raise NotImplementedError

    def _decode(self, data: dict[str, Any]) -> E:
        raise NotImplementedError

    def _missing_ref_list(self, entity: E) -> RefList | None:  # noqa: ARG002
        """Value of ref_list for an entity whose list was never stored."""
        return None

    def _key(self, entity: E) -> bytes:
        return self.prefix + entity.uuid.encode()

    def _ref_key(self, entity: E) -> bytes:
        return REF_LIST_PREFIX + entity.uuid.encode()

    def all(self) -> list[E]:
        """Return every stored entity, without reference lists."""
        return [
            self._decode(json.loads(value))
            for _key, value in self._db.fetch_by_prefix(self.prefix)
        ]

    def for_each(self, visit: Callable[[E], None]) -> None:
        """Call visit for every entity, stopping at the first exception."""
        for entity in self.all():
            visit(entity)

    def by_name(self, name: str) -> E:
        """Look up an entity by name.

        Raises:
            EntityNotFoundError: If no entity with that name exists.
        """
        entities = self.all()
        for entity in entities:
            if entity.name == name:
                return entity
        raise EntityNotFoundError(
            self.kind, name, available=sorted(e.name for e in entities)
        )

    def load_complete(self, entity: E) -> None:
        """Load the entity's reference list into entity.ref_list."""
        try:
            data = self._db.get(self._ref_key(entity))
        except KeyNotFoundError:
            entity.ref_list = self._missing_ref_list(entity)
            return
        entity.ref_list = decode_ref_list(data)

    def add(self, entity: E) -> None:
        """Store a new entity.

        Raises:
            ValueError: If an entity with the same name already exists.
        """
        if any(e.name == entity.name for e in self.all()):
            raise ValueError(f"{self.kind} with name {entity.name} already exists")
        self.update(entity)

    def update(self, entity: E) -> None:
        """Store an entity and, if loaded, its reference list."""
        self._db.put(self._key(entity), json.dumps(self._encode(entity)).encode())
        if entity.ref_list is not None:
            self._db.put(self._ref_key(entity), encode_ref_list(entity.ref_list))

    def drop(self, entity: E) -> None:
        """Delete the entity and its reference list.

        Raises:
            EntityNotFoundError: If the entity is not stored.
        """
        try:
            self._db.get(self._key(entity))
        except KeyNotFoundError:
            raise EntityNotFoundError(self.kind, entity.name) from None
        self._db.delete(self._key(entity))
        self._db.delete(self._ref_key(entity))


class RemoteRepoCollection(_EntityCollection[RemoteMirror]):
    """Remote mirrors, implementing RemoteRepoCollectionPort."""

    kind = "mirror"
    prefix = b"R"

    def _encode(self, entity: RemoteMirror) -> dict[str, Any]:
        return {
            "uuid": entity.uuid,
            "name": entity.name,
            "archive_root": entity.archive_root,
            "distribution": entity.distribution,
            "components": entity.components,
        }

    def _decode(self, data: dict[str, Any]) -> RemoteMirror:
        return RemoteMirror(
            name=data["name"],
            uuid=data["uuid"],
            archive_root=data.get("archive_root", ""),
            distribution=data.get("distribution", ""),
            components=list(data.get("components", [])),
        )


class LocalRepoCollection(_EntityCollection[LocalRepo]):
    """Local repositories, implementing LocalRepoCollectionPort."""

    kind = "local repo"
    prefix = b"L"

    def _encode(self, entity: LocalRepo) -> dict[str, Any]:
        return {"uuid": entity.uuid, "name": entity.name, "comment": entity.comment}

    def _decode(self, data: dict[str, Any]) -> LocalRepo:
        return LocalRepo(
            name=data["name"], uuid=data["uuid"], comment=data.get("comment", "")
        )


class SnapshotCollection(_EntityCollection[Snapshot]):
    """Snapshots, implementing SnapshotCollectionPort.

    A snapshot always has a reference list; a missing one is reported as
    an error instead of being treated as empty.
    """

    kind = "snapshot"
    prefix = b"S"

    def _encode(self, entity: Snapshot) -> dict[str, Any]:
        return {
            "uuid": entity.uuid,
            "name": entity.name,
            "description": entity.description,
            "source_kind": entity.source_kind,
            "source_ids": entity.source_ids,
        }

    def _decode(self, data: dict[str, Any]) -> Snapshot:
        return Snapshot(
            name=data["name"],
            uuid=data["uuid"],
            description=data.get("description", ""),
            source_kind=data.get("source_kind", ""),
            source_ids=list(data.get("source_ids", [])),
        )

    def _missing_ref_list(self, entity: Snapshot) -> RefList | None:
        raise KeyNotFoundError(self._ref_key(entity))

    def by_remote_repo_source(self, mirror: RemoteMirror) -> list[Snapshot]:
        """Return snapshots created directly from the given mirror."""
        return [
            snapshot
            for snapshot in self.all()
            if snapshot.source_kind == "repo" and mirror.uuid in snapshot.source_ids
        ]
