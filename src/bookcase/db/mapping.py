# ABOUTME: The BookRecord type and its conversion to and from SQLite rows.
# ABOUTME: Persists a missing cover as an empty string for downstream readers.

from dataclasses import dataclass
from typing import Any

DEFAULT_AUTHOR = "n/a"


@dataclass(frozen=True)
class BookRecord:
    """A cataloged book. The path is the unique key."""

    author: str
    title: str
    path: str
    cover_path: str | None = None

    @property
    def label(self) -> str:
        """Display label: 'Author — Title'."""
        return f"{self.author} — {self.title}"


def record_to_row(record: BookRecord) -> dict[str, Any]:
    """Convert a BookRecord to a dict suitable for INSERT.

    A missing cover is stored as "" rather than NULL.
    """
    return {
        "author": record.author,
        "title": record.title,
        "path": record.path,
        "cover": record.cover_path if record.cover_path is not None else "",
    }


def row_to_record(row: Any) -> BookRecord:
    """Convert a database row (dict-like) back to a BookRecord."""
    cover = row["cover"]
    return BookRecord(
        author=row["author"] if row["author"] is not None else DEFAULT_AUTHOR,
        title=row["title"] or "",
        path=row["path"],
        cover_path=cover or None,
    )
