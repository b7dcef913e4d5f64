# ABOUTME: SQL DDL statements for the Bookcase metadata store.
# ABOUTME: A single books table keyed by file path, created lazily on first run.

SCHEMA = """
-- One row per cataloged EPUB; path is the de facto key
CREATE TABLE IF NOT EXISTS books (
    author TEXT,
    title  TEXT,
    path   TEXT,
    cover  TEXT
);
"""
