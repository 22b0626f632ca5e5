"""Pytest configuration and shared fixtures.

This module registers custom markers for CI job separation and provides
in-memory fakes for every port the core depends on.
"""

from __future__ import annotations

import hashlib
from pathlib import Path
from typing import TYPE_CHECKING

import pytest

from poolkeeper.core.exceptions import EntityNotFoundError, PoolFileNotFoundError
from poolkeeper.core.models import (
    LocalRepo,
    Package,
    PackageFile,
    RefList,
    RemoteMirror,
    Snapshot,
)
from poolkeeper.core.services import Maintenance


if TYPE_CHECKING:
    from collections.abc import Callable

    from poolkeeper.core.ports import ProgressReporter


def pytest_configure(config: pytest.Config) -> None:
    """Register custom markers."""
    config.addinivalue_line("markers", "core: Core models, ports, and services")
    config.addinivalue_line("markers", "storage: Metadata store and pool adapters")
    config.addinivalue_line("markers", "progress: Rich progress integration")
    config.addinivalue_line("markers", "cli: CLI tests")
    config.addinivalue_line("markers", "e2e: End-to-end tests")
    config.addinivalue_line(
        "markers", "tra: Test Responsibility Anchor (TRA) - namespace.Anchor format"
    )
    config.addinivalue_line(
        "markers",
        "tier: Test tier for CI job separation (0=instant, 1=fast, 2=standard, 3=slow, 4=manual)",
    )


class FakeDatabase:
    """In-memory metadata store with batch semantics."""

    def __init__(self) -> None:
        self.records: dict[bytes, Package] = {}
        self.pending: list[bytes] | None = None
        self.commits = 0
        self.discards = 0
        self.compactions = 0
        self.fail_commit = False
        self.fail_compact = False

    def start_batch(self) -> None:
        assert self.pending is None, "batch already started"
        self.pending = []

    def finish_batch(self) -> None:
        assert self.pending is not None, "no batch started"
        pending, self.pending = self.pending, None
        if self.fail_commit:
            raise OSError("disk full")
        for key in pending:
            self.records.pop(key, None)
        self.commits += 1

    def discard_batch(self) -> None:
        self.pending = None
        self.discards += 1

    def compact_db(self) -> None:
        if self.fail_compact:
            raise OSError("vacuum failed")
        self.compactions += 1


class FakePackages:
    """Package collection over FakeDatabase."""

    def __init__(self, db: FakeDatabase) -> None:
        self._db = db
        self.fail_delete: set[bytes] = set()
        self.lookups: list[bytes] = []

    def update(self, package: Package) -> None:
        self._db.records[package.key] = package

    def all_package_refs(self) -> RefList:
        return RefList(self._db.records)

    def by_key(self, key: bytes) -> Package:
        from poolkeeper.core.exceptions import PackageNotFoundError

        self.lookups.append(key)
        try:
            return self._db.records[key]
        except KeyError:
            raise PackageNotFoundError(key) from None

    def delete_by_key(self, key: bytes) -> None:
        if key in self.fail_delete:
            raise OSError(f"cannot delete {key!r}")
        if self._db.pending is not None:
            self._db.pending.append(key)
        else:
            self._db.records.pop(key, None)


class FakeEntities:
    """Collection of mirrors, local repos or snapshots."""

    def __init__(self, kind: str) -> None:
        self.kind = kind
        self.entities: list[RemoteMirror | LocalRepo | Snapshot] = []
        self.ref_lists: dict[str, RefList] = {}
        self.fail_load: set[str] = set()
        self.loaded: list[str] = []

    def add(self, entity: RemoteMirror | LocalRepo | Snapshot, refs: RefList | None) -> None:
        self.entities.append(entity)
        if refs is not None:
            self.ref_lists[entity.uuid] = refs

    def for_each(self, visit: Callable[[RemoteMirror | LocalRepo | Snapshot], None]) -> None:
        for entity in list(self.entities):
            visit(entity)

    def load_complete(self, entity: RemoteMirror | LocalRepo | Snapshot) -> None:
        if entity.name in self.fail_load:
            raise OSError(f"corrupt {self.kind} {entity.name}")
        self.loaded.append(entity.name)
        entity.ref_list = self.ref_lists.get(entity.uuid)

    def by_name(self, name: str) -> RemoteMirror | LocalRepo | Snapshot:
        for entity in self.entities:
            if entity.name == name:
                return entity
        raise EntityNotFoundError(
            self.kind, name, available=[e.name for e in self.entities]
        )

    def drop(self, entity: RemoteMirror | LocalRepo | Snapshot) -> None:
        self.entities.remove(entity)
        self.ref_lists.pop(entity.uuid, None)

    def by_remote_repo_source(self, mirror: RemoteMirror) -> list[Snapshot]:
        return [
            s
            for s in self.entities
            if isinstance(s, Snapshot)
            and s.source_kind == "repo"
            and mirror.uuid in s.source_ids
        ]


class FakePool:
    """Pool holding file sizes in a dict."""

    def __init__(self) -> None:
        self.files: dict[str, int] = {}
        self.fail_remove: set[str] = set()
        self.removed: list[str] = []

    def relative_path(self, filename: str, md5: str) -> str:
        return f"{md5[0:2]}/{md5[2:4]}/{filename}"

    def filepath_list(self, progress: ProgressReporter | None = None) -> list[str]:
        return sorted(self.files)

    def size(self, path: str) -> int:
        try:
            return self.files[path]
        except KeyError:
            raise PoolFileNotFoundError(f"File not found: {path}", path=path) from None

    def remove(self, path: str) -> int:
        if path in self.fail_remove:
            raise PermissionError(f"cannot remove {path}")
        size = self.size(path)
        del self.files[path]
        self.removed.append(path)
        return size


class FakeRepository:
    """A complete set of fakes plus helpers to populate them."""

    def __init__(self) -> None:
        self.database = FakeDatabase()
        self.packages = FakePackages(self.database)
        self.mirrors = FakeEntities("mirror")
        self.local_repos = FakeEntities("local repo")
        self.snapshots = FakeEntities("snapshot")
        self.pool = FakePool()
        self._counter = 0

    def _uuid(self) -> str:
        self._counter += 1
        return f"uuid-{self._counter}"

    def add_package(
        self, name: str, size: int = 100, *, in_pool: bool = True
    ) -> Package:
        """Store a package with one file, optionally placing the file in the pool."""
        md5 = f"{abs(hash(name)) % 16**8:08x}"
        package = Package(
            name=name,
            version="1.0",
            architecture="amd64",
            files=(PackageFile(f"{name}_1.0_amd64.deb", md5, size),),
        )
        self.packages.update(package)
        if in_pool:
            for path in package.filepath_list(self.pool):
                self.pool.files[path] = size
        return package

    def add_mirror(self, name: str, packages: list[Package] | None) -> RemoteMirror:
        mirror = RemoteMirror(name=name, uuid=self._uuid())
        refs = None if packages is None else RefList(p.key for p in packages)
        self.mirrors.add(mirror, refs)
        return mirror

    def add_local_repo(self, name: str, packages: list[Package] | None) -> LocalRepo:
        repo = LocalRepo(name=name, uuid=self._uuid())
        refs = None if packages is None else RefList(p.key for p in packages)
        self.local_repos.add(repo, refs)
        return repo

    def add_snapshot(
        self,
        name: str,
        packages: list[Package],
        source: RemoteMirror | None = None,
    ) -> Snapshot:
        snapshot = Snapshot(
            name=name,
            uuid=self._uuid(),
            description=f"Snapshot from mirror {source}" if source else "",
            source_kind="repo" if source else "",
            source_ids=[source.uuid] if source else [],
        )
        self.snapshots.add(snapshot, RefList(p.key for p in packages))
        return snapshot

    def maintenance(self) -> Maintenance:
        return Maintenance(
            database=self.database,
            packages=self.packages,
            mirrors=self.mirrors,
            local_repos=self.local_repos,
            snapshots=self.snapshots,
            pool=self.pool,
        )


@pytest.fixture
def fake_repo() -> FakeRepository:
    """Empty in-memory repository."""
    return FakeRepository()


@pytest.fixture
def fake_repo_factory() -> Callable[[], FakeRepository]:
    """Factory for fresh repositories, for use inside hypothesis tests."""
    return FakeRepository


class SqliteProject:
    """A project directory with a real SQLite store and filesystem pool."""

    def __init__(self, root: Path) -> None:
        from poolkeeper.adapters.database import (
            LocalRepoCollection,
            PackageCollection,
            RemoteRepoCollection,
            SnapshotCollection,
            SqliteDatabase,
        )
        from poolkeeper.adapters.pool import FilesystemPool

        self.root = root
        (root / ".poolkeeper").mkdir(exist_ok=True)
        self.database = SqliteDatabase(root / ".poolkeeper" / "db" / "poolkeeper.sqlite")
        self.packages = PackageCollection(self.database)
        self.mirrors = RemoteRepoCollection(self.database)
        self.local_repos = LocalRepoCollection(self.database)
        self.snapshots = SnapshotCollection(self.database)
        self.pool = FilesystemPool(root / ".poolkeeper" / "pool")
        self._counter = 0

    def _uuid(self) -> str:
        self._counter += 1
        return f"uuid-{self._counter}"

    def add_package(self, name: str, content: bytes = b"deb") -> Package:
        """Store a package and write its file into the pool."""
        md5 = hashlib.md5(name.encode()).hexdigest()  # noqa: S324
        package = Package(
            name=name,
            version="1.0",
            architecture="amd64",
            files=(PackageFile(f"{name}_1.0_amd64.deb", md5, len(content)),),
        )
        self.packages.update(package)
        for relative in package.filepath_list(self.pool):
            self.add_pool_file(relative, content)
        return package

    def add_pool_file(self, relative: str, content: bytes = b"orphan") -> Path:
        path = self.pool.path(relative)
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_bytes(content)
        return path

    def add_mirror(self, name: str, packages: list[Package]) -> RemoteMirror:
        mirror = RemoteMirror(
            name=name,
            uuid=self._uuid(),
            archive_root="http://deb.debian.org/debian/",
            distribution="wheezy",
            components=["main"],
            ref_list=RefList(p.key for p in packages),
        )
        self.mirrors.add(mirror)
        return mirror

    def add_local_repo(self, name: str, packages: list[Package]) -> LocalRepo:
        repo = LocalRepo(
            name=name, uuid=self._uuid(), ref_list=RefList(p.key for p in packages)
        )
        self.local_repos.add(repo)
        return repo

    def add_snapshot(
        self,
        name: str,
        packages: list[Package],
        source: RemoteMirror | None = None,
    ) -> Snapshot:
        snapshot = Snapshot(
            name=name,
            uuid=self._uuid(),
            description=f"Snapshot from mirror {source}" if source else "",
            source_kind="repo" if source else "local",
            source_ids=[source.uuid] if source else [],
            ref_list=RefList(p.key for p in packages),
        )
        self.snapshots.add(snapshot)
        return snapshot

    def pool_files(self) -> list[str]:
        return self.pool.filepath_list()


@pytest.fixture
def sqlite_project(tmp_path: Path, monkeypatch: pytest.MonkeyPatch):
    """Project in tmp_path using the default store and pool locations.

    The working directory is changed to the project root so that
    Maintenance.from_directory() and the CLI find it.
    """
    monkeypatch.delenv("POOLKEEPER_DATABASE", raising=False)
    monkeypatch.delenv("POOLKEEPER_POOL", raising=False)
    monkeypatch.chdir(tmp_path)
    project = SqliteProject(tmp_path)
    yield project
    project.database.close()
