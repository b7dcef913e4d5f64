# ABOUTME: Public API for the Bookcase metadata store layer.
# ABOUTME: Exports connection management, the store, its background writer, and data types.

from bookcase.db.connection import (
    DEFAULT_COVER_DIR,
    DEFAULT_DATA_DIR,
    DEFAULT_DB_PATH,
    StoreInitError,
    open_store,
)
from bookcase.db.mapping import DEFAULT_AUTHOR, BookRecord
from bookcase.db.store import MetadataStore, StoreWriteError
from bookcase.db.writer import StoreWriter

__all__ = [
    "DEFAULT_AUTHOR",
    "DEFAULT_COVER_DIR",
    "DEFAULT_DATA_DIR",
    "DEFAULT_DB_PATH",
    "BookRecord",
    "MetadataStore",
    "StoreInitError",
    "StoreWriteError",
    "StoreWriter",
    "open_store",
]
