# ABOUTME: Key-record persistence for the Bookcase metadata store.
# ABOUTME: Insert, delete, and list book rows addressed by file path.

import sqlite3
import threading

from bookcase.db.mapping import BookRecord, record_to_row, row_to_record


class StoreWriteError(Exception):
    """Raised when a row cannot be written to or deleted from the store."""


class MetadataStore:
    """Wraps a sqlite3 connection and provides typed access to the books table.

    All access to the connection goes through a lock so the store writer
    thread and the caller's thread never use it at the same time.
    """

    def __init__(self, conn: sqlite3.Connection) -> None:
        self._conn = conn
        self._lock = threading.Lock()
        self._closed = False

    @property
    def closed(self) -> bool:
        return self._closed

    def insert(self, record: BookRecord) -> None:
        """Write one row for the record.

        Uniqueness of the path is not enforced here; the collection is
        responsible for not inserting the same path twice.

        Raises:
            StoreWriteError: If the row cannot be written.
        """
        row = record_to_row(record)
        columns = ", ".join(row.keys())
        placeholders = ", ".join("?" for _ in row)

        with self._lock:
            try:
                self._conn.execute(
                    f"INSERT INTO books ({columns}) VALUES ({placeholders})",
                    list(row.values()),
                )
                self._conn.commit()
            except sqlite3.Error as exc:
                raise StoreWriteError(f"Could not insert {record.path}: {exc}") from exc

    def delete(self, path: str) -> None:
        """Remove the row(s) matching path. No-op if absent.

        Raises:
            StoreWriteError: If the delete fails.
        """
        with self._lock:
            try:
                self._conn.execute("DELETE FROM books WHERE path = ?", (path,))
                self._conn.commit()
            except sqlite3.Error as exc:
                raise StoreWriteError(f"Could not delete {path}: {exc}") from exc

    def select_all(self) -> list[BookRecord]:
        """Return every stored record, in storage order."""
        with self._lock:
            cursor = self._conn.execute("SELECT author, title, path, cover FROM books")
            rows = cursor.fetchall()
        return [row_to_record(row) for row in rows]

    def paths(self) -> set[str]:
        """Return the set of stored paths."""
        with self._lock:
            cursor = self._conn.execute("SELECT path FROM books")
            return {row[0] for row in cursor.fetchall()}

    def close(self) -> None:
        """Release the connection. Calling it again is a no-op."""
        with self._lock:
            if self._closed:
                return
            self._conn.close()
            self._closed = True
