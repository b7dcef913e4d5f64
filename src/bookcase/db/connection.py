# ABOUTME: SQLite connection management for the Bookcase metadata store.
# ABOUTME: Resolves the user data directory, creates the store file, and applies the schema.

import sqlite3
from pathlib import Path

from platformdirs import user_data_dir

from bookcase.db.schema import SCHEMA

DEFAULT_DATA_DIR = Path(user_data_dir("books", appauthor=False))
DEFAULT_DB_PATH = DEFAULT_DATA_DIR / "meta.db"
DEFAULT_COVER_DIR = DEFAULT_DATA_DIR / "covers"


class StoreInitError(Exception):
    """Raised when the metadata store cannot be created or opened."""


def _apply_schema(conn: sqlite3.Connection) -> None:
    """Create the books table if it does not exist yet."""
    conn.executescript(SCHEMA)


def open_store(path: Path | None = None) -> sqlite3.Connection:
    """Open or create the Bookcase metadata store.

    Creates the parent directory (user-private) and the database file if
    they don't exist, then applies the schema. The connection may be used
    from the store writer thread, so same-thread checking is disabled;
    callers serialize access through MetadataStore.

    Args:
        path: Path to the database file. Defaults to <user data dir>/books/meta.db.

    Returns:
        A configured sqlite3.Connection.

    Raises:
        StoreInitError: If the directory or database cannot be created or opened.
    """
    db_path = path or DEFAULT_DB_PATH

    try:
        db_path.parent.mkdir(mode=0o700, parents=True, exist_ok=True)
    except OSError as exc:
        raise StoreInitError(f"Could not create store directory {db_path.parent}: {exc}") from exc

    try:
        conn = sqlite3.connect(str(db_path), check_same_thread=False)
    except sqlite3.Error as exc:
        raise StoreInitError(f"Could not open store {db_path}: {exc}") from exc

    conn.row_factory = sqlite3.Row

    try:
        _apply_schema(conn)
    except sqlite3.Error as exc:
        conn.close()
        raise StoreInitError(f"Could not create table in {db_path}: {exc}") from exc

    return conn
