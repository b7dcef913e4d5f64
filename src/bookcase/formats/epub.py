# ABOUTME: EPUB opening and metadata extraction using ebooklib.
# ABOUTME: Defensive wrapper that turns malformed or missing files into OpenError.

import hashlib
import logging
from dataclasses import dataclass, field
from pathlib import Path

import ebooklib
from ebooklib import epub

from bookcase.db.connection import DEFAULT_COVER_DIR

logger = logging.getLogger(__name__)

_IMAGE_TYPES = (ebooklib.ITEM_IMAGE, ebooklib.ITEM_COVER)


class OpenError(Exception):
    """Raised when an EPUB file cannot be opened or parsed."""


@dataclass
class EpubHandle:
    """An opened EPUB together with where its cover gets extracted to."""

    path: Path
    book: epub.EpubBook
    cover_dir: Path
    _cover_path: str | None = field(default=None, repr=False)
    _cover_checked: bool = field(default=False, repr=False)


def open_epub(path: Path | str, *, cover_dir: Path | None = None) -> EpubHandle:
    """Open an EPUB file for metadata extraction and reading.

    Args:
        path: Path to the EPUB file.
        cover_dir: Directory covers are extracted into. Defaults to
            <user data dir>/books/covers.

    Returns:
        An EpubHandle wrapping the parsed book.

    Raises:
        OpenError: If the file does not exist or cannot be parsed.
    """
    path = Path(path)
    if not path.exists():
        raise OpenError(f"File not found: {path}")

    try:
        book = epub.read_epub(str(path), options={"ignore_ncx": True})
    except Exception as exc:
        raise OpenError(f"Failed to read EPUB: {path}: {exc}") from exc

    return EpubHandle(path=path, book=book, cover_dir=cover_dir or DEFAULT_COVER_DIR)


def get_meta(handle: EpubHandle, key: str) -> str | None:
    """Return the first Dublin Core value for key ("creator", "title", ...), or None."""
    values = handle.book.get_metadata("DC", key)
    if not values:
        return None
    # Metadata entries are tuples of (value, attributes)
    value = values[0][0]
    return str(value).strip() if value else None


def _find_cover_item(book: epub.EpubBook) -> epub.EpubItem | None:
    """Locate the cover image item of an EPUB, if present."""
    meta_entries = book.get_metadata("OPF", "cover")
    if meta_entries:
        cover_id = meta_entries[0][1].get("content")
        if cover_id:
            item = book.get_item_with_id(cover_id)
            if item is not None:
                return item

    # Fallback: an image with "cover" in its id or file name
    for item in book.get_items():
        item_id = item.get_id() or ""
        item_name = item.get_name() or ""
        if "cover" in item_id.lower() or "cover" in item_name.lower():
            if item.get_type() in _IMAGE_TYPES:
                return item

    return None


def get_cover_path(handle: EpubHandle) -> str | None:
    """Extract the cover image into the cover directory and return its path.

    The file is named after a hash of the book's path so re-adding the same
    book reuses it. Returns None when the book has no cover or it cannot
    be written.
    """
    if handle._cover_checked:
        return handle._cover_path
    handle._cover_checked = True

    item = _find_cover_item(handle.book)
    if item is None:
        return None

    suffix = Path(item.get_name() or "").suffix or ".img"
    digest = hashlib.sha256(str(handle.path.resolve()).encode("utf-8")).hexdigest()
    target = handle.cover_dir / f"{digest}{suffix}"

    try:
        handle.cover_dir.mkdir(parents=True, exist_ok=True)
        target.write_bytes(item.get_content())
    except OSError as exc:
        logger.warning("Could not extract cover of %s: %s", handle.path, exc)
        return None

    handle._cover_path = str(target)
    return handle._cover_path


def spine_documents(handle: EpubHandle) -> list[str]:
    """Return the file names of the documents in reading order."""
    names = []
    for entry in handle.book.spine:
        item_id = entry[0] if isinstance(entry, tuple) else entry
        item = handle.book.get_item_with_id(item_id)
        if item is not None:
            names.append(item.get_name())
    return names
