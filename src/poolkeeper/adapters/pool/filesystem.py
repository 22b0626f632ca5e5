"""Filesystem package pool implementing PoolPort."""

from __future__ import annotations

from pathlib import Path, PurePosixPath
from typing import TYPE_CHECKING

from poolkeeper.core.exceptions import (
    PoolAccessError,
    PoolError,
    PoolFileNotFoundError,
)
from poolkeeper.core.ports import NullProgressReporter


if TYPE_CHECKING:
    from poolkeeper.core.ports import ProgressReporter


LIST_TASK = "Building list of files in package pool"


def derive_pool_path(filename: str, md5: str) -> str:
    """Derive the pool-relative path of a file from its MD5 checksum.

    Files are spread over two levels of directories named after the
    first four hex digits of the checksum.

    Example:
        >>> derive_pool_path("nginx_1.2_amd64.deb", "d41d8cd98f00b204")
        'd4/1d/nginx_1.2_amd64.deb'
    """
    if len(md5) < 4:
        raise ValueError(f"Invalid md5 checksum for {filename}: {md5!r}")
    return str(PurePosixPath(md5[0:2], md5[2:4], filename))


class FilesystemPool:
    """Package pool stored in a local directory.

    Attributes:
        root: Directory holding the pool.
    """

    def __init__(self, root: Path) -> None:
        """Initialize the pool with its root directory.

        Args:
            root: Directory holding the pool. It doesn't need to exist yet.
        """
        self.root = root

    def relative_path(self, filename: str, md5: str) -> str:
        """Derive the pool path of a package file."""
        return derive_pool_path(filename, md5)

    def path(self, relative: str) -> Path:
        """Absolute location of a pool-relative path."""
        return self.root / relative

    def filepath_list(self, progress: ProgressReporter | None = None) -> list[str]:
        """List all files in the pool.

        Reports one progress step per top-level directory.

        Returns:
            Pool-relative POSIX paths, sorted alphabetically.
        """
        progress = progress or NullProgressReporter()
        if not self.root.exists():
            return []

        try:
            top_level = sorted(self.root.iterdir())
        except PermissionError as e:
            raise PoolAccessError(
                f"Access denied: {self.root}", path=str(self.root), cause=e
            ) from e

        callback = progress.start_task(LIST_TASK, len(top_level))
        files: list[str] = []
        for done, entry in enumerate(top_level, 1):
            if entry.is_file():
                files.append(entry.relative_to(self.root).as_posix())
            else:
                files.extend(
                    p.relative_to(self.root).as_posix()
                    for p in entry.rglob("*")
                    if p.is_file()
                )
            callback(done, len(top_level))
        progress.finish_task(LIST_TASK)

        return sorted(files)

    def size(self, path: str) -> int:
        """Return the size of a pool file in bytes.

        Raises:
            PoolFileNotFoundError: If the file does not exist.
        """
        try:
            return self.path(path).stat().st_size
        except FileNotFoundError as e:
            raise PoolFileNotFoundError(
                f"File not found: {path}", path=path, cause=e
            ) from e

    def remove(self, path: str) -> int:
        """Delete a file from the pool.

        Empty parent directories are left in place.

        Returns:
            Size of the removed file in bytes.

        Raises:
            PoolFileNotFoundError: If the file does not exist.
            PoolAccessError: If the file may not be removed.
            PoolError: For other filesystem errors.
        """
        size = self.size(path)
        try:
            self.path(path).unlink()
        except FileNotFoundError as e:
            raise PoolFileNotFoundError(
                f"File not found: {path}", path=path, cause=e
            ) from e
        except PermissionError as e:
            raise PoolAccessError(f"Access denied: {path}", path=path, cause=e) from e
        except OSError as e:
            raise PoolError(f"Unable to remove {path}: {e}", path=path, cause=e) from e
        return size
