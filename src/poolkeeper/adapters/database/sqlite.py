"""SQLite-backed key/value store implementing DatabasePort."""

from __future__ import annotations

import sqlite3
from pathlib import Path

from poolkeeper.core.exceptions import (
    DatabaseError,
    DatabaseOpenError,
    KeyNotFoundError,
)


def _prefix_upper_bound(prefix: bytes) -> bytes | None:
    """Smallest key greater than every key starting with prefix."""
    stripped = prefix.rstrip(b"\xff")
    if not stripped:
        return None
    return stripped[:-1] + bytes([stripped[-1] + 1])


class SqliteDatabase:
    """Ordered key/value store in a single SQLite table.

    Writes outside a batch are committed immediately. Between start_batch()
    and finish_batch() they are grouped into one transaction.

    Attributes:
        path: Location of the database file.
    """

    def __init__(self, path: Path) -> None:
        """Open (or create) the database.

        Args:
            path: Location of the database file. Parent directories are
                created as needed.

        Raises:
            DatabaseOpenError: If the file is not a readable SQLite database.
        """
        self.path = path
        self.path.parent.mkdir(parents=True, exist_ok=True)
        try:
            self._con = sqlite3.connect(str(self.path), isolation_level=None)
        except sqlite3.Error as e:
            raise DatabaseOpenError(str(self.path), cause=e) from e
        try:
            self._con.execute(
                """
                CREATE TABLE IF NOT EXISTS kv (
                  key BLOB PRIMARY KEY,
                  value BLOB NOT NULL
                );
                """
            )
        except sqlite3.Error as e:
            self._con.close()
            raise DatabaseOpenError(str(self.path), cause=e) from e
        self._in_batch = False

    def __enter__(self) -> SqliteDatabase:
        return self

    def __exit__(self, exc_type: object, exc_val: object, exc_tb: object) -> None:
        self.close()

    def close(self) -> None:
        """Close the connection, discarding an unfinished batch."""
        if self._in_batch:
            self.discard_batch()
        self._con.close()

    def get(self, key: bytes) -> bytes:
        """Return the value stored under key.

        Raises:
            KeyNotFoundError: If the key does not exist.
        """
        row = self._con.execute("SELECT value FROM kv WHERE key = ?", (key,)).fetchone()
        if row is None:
            raise KeyNotFoundError(key)
        return bytes(row[0])

    def put(self, key: bytes, value: bytes) -> None:
        """Store value under key, replacing any previous value."""
        self._con.execute(
            """
            INSERT INTO kv(key, value) VALUES(?, ?)
            ON CONFLICT(key) DO UPDATE SET value=excluded.value;
            """,
            (key, value),
        )

    def delete(self, key: bytes) -> None:
        """Delete key. Deleting a missing key is not an error."""
        self._con.execute("DELETE FROM kv WHERE key = ?", (key,))

    def keys_by_prefix(self, prefix: bytes) -> list[bytes]:
        """Return all keys starting with prefix, in byte order."""
        return [bytes(row[0]) for row in self._scan("key", prefix)]

    def fetch_by_prefix(self, prefix: bytes) -> list[tuple[bytes, bytes]]:
        """Return (key, value) pairs for keys starting with prefix."""
        return [
            (bytes(row[0]), bytes(row[1])) for row in self._scan("key, value", prefix)
        ]

    def _scan(self, columns: str, prefix: bytes) -> sqlite3.Cursor:
        upper = _prefix_upper_bound(prefix)
        if upper is None:
            return self._con.execute(
                f"SELECT {columns} FROM kv WHERE key >= ? ORDER BY key",  # noqa: S608
                (prefix,),
            )
        return self._con.execute(
            f"SELECT {columns} FROM kv WHERE key >= ? AND key < ? ORDER BY key",  # noqa: S608
            (prefix, upper),
        )

    def start_batch(self) -> None:
        """Start grouping writes into one transaction.

        Raises:
            DatabaseError: If a batch is already open.
        """
        if self._in_batch:
            raise DatabaseError("batch already started")
        self._con.execute("BEGIN")
        self._in_batch = True

    def finish_batch(self) -> None:
        """Commit the open batch.

        Raises:
            DatabaseError: If no batch is open.
            sqlite3.Error: If the commit fails.
        """
        if not self._in_batch:
            raise DatabaseError("no batch started")
        self._con.execute("COMMIT")
        self._in_batch = False

    def discard_batch(self) -> None:
        """Roll back the open batch. Does nothing if none is open."""
        if not self._in_batch:
            return
        self._in_batch = False
        # a failed COMMIT may already have ended the transaction
        if self._con.in_transaction:
            self._con.execute("ROLLBACK")

    def compact_db(self) -> None:
        """Rebuild the database file to reclaim space of deleted records."""
        self._con.execute("VACUUM")
