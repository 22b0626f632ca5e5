"""Core domain models for poolkeeper.

These models are pure Python with no I/O dependencies. They represent
package references, the entities that keep packages alive, and the
package records themselves.
"""

from __future__ import annotations

import bisect
from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Self


if TYPE_CHECKING:
    from collections.abc import Callable, Iterable, Iterator

    from poolkeeper.core.ports import PoolPort


class RefList:
    """Sorted, duplicate-free collection of package reference keys.

    Keys are opaque byte strings. Set operations work by merging the two
    sorted sequences, so they stay linear in the size of both operands.

    Example:
        >>> a = RefList([b"Pamd64 nginx 1.2", b"Pamd64 curl 7.0"])
        >>> b = RefList([b"Pamd64 curl 7.0"])
        >>> list(a.difference(b))
        [b'Pamd64 nginx 1.2']
    """

    __slots__ = ("_refs",)

    def __init__(self, refs: Iterable[bytes] = ()) -> None:
        self._refs: list[bytes] = sorted(set(refs))

    @classmethod
    def from_keys(cls, refs: Iterable[bytes]) -> Self:
        """Build a RefList from any iterable of keys."""
        return cls(refs)

    @classmethod
    def _from_sorted(cls, refs: list[bytes]) -> Self:
        instance = cls.__new__(cls)
        instance._refs = refs
        return instance

    def __len__(self) -> int:
        return len(self._refs)

    def __iter__(self) -> Iterator[bytes]:
        return iter(self._refs)

    def __contains__(self, ref: object) -> bool:
        if not isinstance(ref, bytes):
            return False
        i = bisect.bisect_left(self._refs, ref)
        return i < len(self._refs) and self._refs[i] == ref

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, RefList):
            return NotImplemented
        return self._refs == other._refs

    def __repr__(self) -> str:
        return f"RefList({self._refs!r})"

    def for_each(self, visit: Callable[[bytes], None]) -> None:
        """Call visit for every key in sorted order.

        The first exception raised by visit stops the iteration and
        propagates to the caller.
        """
        for ref in self._refs:
            visit(ref)

    def union(self, other: RefList, allow_duplicates: bool = False) -> RefList:
        """Return every key present in either list.

        Args:
            other: The list to merge with.
            allow_duplicates: Keep keys found in both lists twice instead of
                once. The result is then a multiset and no longer obeys the
                uniqueness invariant.

        Returns:
            A new RefList; neither operand is modified.
        """
        left, right = self._refs, other._refs
        merged: list[bytes] = []
        i = j = 0
        while i < len(left) and j < len(right):
            if left[i] < right[j]:
                merged.append(left[i])
                i += 1
            elif left[i] > right[j]:
                merged.append(right[j])
                j += 1
            else:
                merged.append(left[i])
                if allow_duplicates:
                    merged.append(right[j])
                i += 1
                j += 1
        merged.extend(left[i:])
        merged.extend(right[j:])
        return RefList._from_sorted(merged)

    def difference(self, other: RefList) -> RefList:
        """Return keys in this list that are absent from other."""
        left, right = self._refs, other._refs
        result: list[bytes] = []
        j = 0
        for ref in left:
            while j < len(right) and right[j] < ref:
                j += 1
            if j < len(right) and right[j] == ref:
                continue
            result.append(ref)
        return RefList._from_sorted(result)


def subtract_sorted(left: list[str], right: list[str]) -> list[str]:
    """Return elements of left that do not appear in right.

    Both lists must already be sorted lexicographically. Duplicates in
    either list are allowed; the result keeps the order of left.

    Args:
        left: Sorted candidates (e.g., every file in the pool).
        right: Sorted exclusions (e.g., files referenced by packages).

    Returns:
        Sorted list of elements only present in left.
    """
    result: list[str] = []
    j = 0
    for item in left:
        while j < len(right) and right[j] < item:
            j += 1
        if j < len(right) and right[j] == item:
            continue
        result.append(item)
    return result


@dataclass(frozen=True, slots=True)
class PackageFile:
    """A single file belonging to a package.

    Attributes:
        filename: Base name of the file (e.g., "nginx_1.2_amd64.deb").
        md5: Hex MD5 checksum, used to derive the pool location.
        size: Size in bytes as recorded in the repository index.
    """

    filename: str
    md5: str
    size: int = 0

    def __post_init__(self) -> None:
        """Validate file fields after initialization."""
        if not self.filename:
            raise ValueError("Package file name cannot be empty")
        if len(self.md5) < 4:
            raise ValueError(f"Invalid md5 checksum for {self.filename}: {self.md5!r}")


@dataclass(frozen=True, slots=True)
class Package:
    """A package record stored in the metadata store.

    Attributes:
        name: Package name.
        version: Package version string.
        architecture: Target architecture (e.g., "amd64", "source").
        files: Files in the pool that make up the package.

    Example:
        >>> pkg = Package("nginx", "1.2", "amd64")
        >>> pkg.key
        b'Pamd64 nginx 1.2'
    """

    name: str
    version: str
    architecture: str
    files: tuple[PackageFile, ...] = ()

    def __post_init__(self) -> None:
        """Validate package fields after initialization."""
        if not self.name:
            raise ValueError("Package name cannot be empty")
        if not self.version:
            raise ValueError("Package version cannot be empty")

    @property
    def key(self) -> bytes:
        """Reference key identifying this package in the metadata store."""
        return f"P{self.architecture} {self.name} {self.version}".encode()

    def filepath_list(self, pool: PoolPort) -> list[str]:
        """Return the pool paths of all files of this package."""
        return [pool.relative_path(f.filename, f.md5) for f in self.files]

    def __str__(self) -> str:
        return f"{self.name}_{self.version}_{self.architecture}"


@dataclass(slots=True)
class RemoteMirror:
    """A mirror of a remote repository.

    The reference list is only populated after the owning collection's
    load_complete() has been called; until then it is None.
    """

    name: str
    uuid: str
    archive_root: str = ""
    distribution: str = ""
    components: list[str] = field(default_factory=list)
    ref_list: RefList | None = None

    def __str__(self) -> str:
        return f"[{self.name}]: {self.archive_root} {self.distribution}".rstrip()


@dataclass(slots=True)
class LocalRepo:
    """A local package repository."""

    name: str
    uuid: str
    comment: str = ""
    ref_list: RefList | None = None

    def __str__(self) -> str:
        if self.comment:
            return f"[{self.name}]: {self.comment}"
        return f"[{self.name}]"


@dataclass(slots=True)
class Snapshot:
    """An immutable snapshot of a mirror, local repo or other snapshots.

    Attributes:
        source_kind: Kind of entity the snapshot was taken from
            ("repo", "local" or "snapshot").
        source_ids: UUIDs of the source entities.
    """

    name: str
    uuid: str
    description: str = ""
    source_kind: str = ""
    source_ids: list[str] = field(default_factory=list)
    ref_list: RefList | None = None

    def __str__(self) -> str:
        return f"[{self.name}]: {self.description}"


@dataclass(frozen=True, slots=True)
class CleanupResult:
    """Outcome of a full garbage collection run.

    Attributes:
        live_packages: Number of package keys reachable from any entity.
        deleted_packages: Package records removed (or that would be removed).
        deleted_files: Pool files removed (or that would be removed).
        freed_bytes: Bytes reclaimed in the pool.
        dry_run: True if nothing was actually deleted.
    """

    live_packages: int = 0
    deleted_packages: int = 0
    deleted_files: int = 0
    freed_bytes: int = 0
    dry_run: bool = False
