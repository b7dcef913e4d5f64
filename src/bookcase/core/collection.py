# ABOUTME: In-memory book collection mirrored to the metadata store.
# ABOUTME: Add, remove, filter, sort, and resolve displayed rows back to book records.

import logging
import threading
from collections.abc import Callable, Iterable, Iterator
from dataclasses import dataclass, field
from pathlib import Path
from types import TracebackType

from PIL import Image

from bookcase.core.covers import discard_cover, load_thumbnail, make_placeholder
from bookcase.core.reconciler import ReportFn, reconcile
from bookcase.db.connection import DEFAULT_DB_PATH, open_store
from bookcase.db.mapping import DEFAULT_AUTHOR, BookRecord
from bookcase.db.store import MetadataStore
from bookcase.db.writer import StoreWriter
from bookcase.formats.epub import EpubHandle, get_cover_path, get_meta, open_epub

logger = logging.getLogger(__name__)

SORT_COLUMNS = ("author", "title")


class DuplicateBookError(Exception):
    """Raised when adding a book whose path is already in the collection."""


class StaleReferenceError(Exception):
    """Raised when a displayed row no longer maps to a record in the collection."""


@dataclass(frozen=True)
class SortSpec:
    """Which column the view is sorted on. column=None keeps insertion order."""

    column: str | None = None
    descending: bool = False

    def __post_init__(self) -> None:
        if self.column is not None and self.column not in SORT_COLUMNS:
            raise ValueError(f"Unknown sort column: {self.column!r}")


@dataclass(frozen=True)
class CollectionEntry:
    """A book record together with its loaded cover thumbnail."""

    record: BookRecord
    thumbnail: Image.Image = field(compare=False, repr=False)

    @property
    def path(self) -> str:
        return self.record.path


@dataclass(frozen=True)
class ViewReference:
    """A displayed row, tied to the view generation it was taken from."""

    row: int
    generation: int


Reference = ViewReference | int
Listener = Callable[["BookCollection"], None]


@dataclass(frozen=True)
class VisibleView:
    """Ordered, filtered, sorted projection of the collection."""

    entries: tuple[CollectionEntry, ...]
    generation: int

    def __getitem__(self, index: int) -> CollectionEntry:
        return self.entries[index]

    def __len__(self) -> int:
        return len(self.entries)

    def __iter__(self) -> Iterator[CollectionEntry]:
        return iter(self.entries)

    @property
    def records(self) -> list[BookRecord]:
        return [entry.record for entry in self.entries]

    def reference(self, row: int) -> ViewReference:
        """A reference to row that goes stale as soon as the collection changes."""
        return ViewReference(row=row, generation=self.generation)


def matches_filter(record: BookRecord, term: str | None) -> bool:
    """Case-insensitive substring match of term against author or title.

    An empty or absent term matches everything.
    """
    if not term:
        return True
    needle = term.lower()
    return needle in record.author.lower() or needle in record.title.lower()


def _sort_key(column: str) -> Callable[[CollectionEntry], tuple[str, str]]:
    def key(entry: CollectionEntry) -> tuple[str, str]:
        value = getattr(entry.record, column)
        return value.casefold(), value

    return key


def compute_visible_view(
    entries: Iterable[CollectionEntry],
    filter_term: str | None,
    sort_spec: SortSpec | None = None,
) -> list[CollectionEntry]:
    """Filter entries by filter_term, then sort them by sort_spec.

    With no sort column the result keeps insertion order. Sorting is
    stable, so entries with equal keys also keep insertion order.
    """
    visible = [entry for entry in entries if matches_filter(entry.record, filter_term)]
    if sort_spec is None or sort_spec.column is None:
        return visible
    return sorted(visible, key=_sort_key(sort_spec.column), reverse=sort_spec.descending)


class BookCollection:
    """The authoritative list of cataloged books.

    In-memory changes and listener notifications happen synchronously;
    store writes are queued on a StoreWriter and applied in the background.
    """

    def __init__(
        self,
        store: MetadataStore,
        writer: StoreWriter,
        *,
        placeholder: Image.Image | None = None,
        cover_dir: Path | None = None,
    ) -> None:
        self._store = store
        self._writer = writer
        self._placeholder = placeholder if placeholder is not None else make_placeholder()
        self._cover_dir = cover_dir
        self._entries: list[CollectionEntry] = []
        self._filter_term: str | None = None
        self._sort = SortSpec()
        self._generation = 0
        self._listeners: list[Listener] = []
        self._lock = threading.RLock()
        self._closed = False

    @classmethod
    def open(
        cls,
        db_path: Path | None = None,
        *,
        cover_dir: Path | None = None,
        report_removed: ReportFn | None = None,
    ) -> "BookCollection":
        """Open the store, load its records, and prune books whose file is gone.

        Covers are extracted next to the store unless cover_dir is given.

        Raises:
            StoreInitError: If the store cannot be created or opened.
        """
        db_path = db_path or DEFAULT_DB_PATH
        store = MetadataStore(open_store(db_path))
        writer = StoreWriter(store)
        collection = cls(store, writer, cover_dir=cover_dir or db_path.parent / "covers")
        try:
            collection.load()
            reconcile(store, collection, report_removed=report_removed)
        except Exception:
            collection.close()
            raise
        return collection

    # --- Properties ---

    @property
    def placeholder(self) -> Image.Image:
        return self._placeholder

    @property
    def cover_dir(self) -> Path | None:
        return self._cover_dir

    @property
    def store(self) -> MetadataStore:
        return self._store

    @property
    def filter_term(self) -> str | None:
        return self._filter_term

    @property
    def sort_spec(self) -> SortSpec:
        return self._sort

    @property
    def generation(self) -> int:
        return self._generation

    def __len__(self) -> int:
        with self._lock:
            return len(self._entries)

    def __contains__(self, path: object) -> bool:
        if not isinstance(path, str):
            return False
        with self._lock:
            return self._index_of(path) is not None

    def paths(self) -> set[str]:
        """Paths of every record, visible or not."""
        with self._lock:
            return {entry.path for entry in self._entries}

    def records(self) -> list[BookRecord]:
        """Every record in insertion order, ignoring filter and sort."""
        with self._lock:
            return [entry.record for entry in self._entries]

    # --- Change notification ---

    def connect(self, listener: Listener) -> None:
        """Register listener to be called after every add, remove, filter, or sort change."""
        self._listeners.append(listener)

    def disconnect(self, listener: Listener) -> None:
        self._listeners.remove(listener)

    def _changed(self) -> None:
        with self._lock:
            self._generation += 1
        for listener in list(self._listeners):
            try:
                listener(self)
            except Exception as exc:
                logger.warning("Collection listener %r failed: %s", listener, exc)

    # --- Loading ---

    def _make_entry(self, record: BookRecord) -> CollectionEntry:
        thumbnail = load_thumbnail(record.cover_path, self._placeholder)
        return CollectionEntry(record=record, thumbnail=thumbnail)

    def load(self) -> None:
        """Hydrate the collection from every record in the store."""
        loaded = 0
        with self._lock:
            for record in self._store.select_all():
                if self._index_of(record.path) is not None:
                    logger.warning("Skipping duplicate store row for %s", record.path)
                    continue
                self._entries.append(self._make_entry(record))
                loaded += 1
        logger.debug("Loaded %d book(s) from the store", loaded)
        self._changed()

    # --- Mutation ---

    def _check_open(self) -> None:
        if self._closed:
            raise RuntimeError("BookCollection is closed")

    def _index_of(self, path: str) -> int | None:
        for index, entry in enumerate(self._entries):
            if entry.path == path:
                return index
        return None

    def add_book(self, handle: EpubHandle, path: Path | str) -> BookRecord:
        """Add an opened EPUB to the collection and queue it for the store.

        Missing creator or title metadata is not an error: the author becomes
        "n/a" and the title an empty string.

        Raises:
            DuplicateBookError: If path is already in the collection.
            RuntimeError: If the collection has been closed.
        """
        self._check_open()
        canonical = str(Path(path).expanduser().absolute())
        record = BookRecord(
            author=get_meta(handle, "creator") or DEFAULT_AUTHOR,
            title=get_meta(handle, "title") or "",
            path=canonical,
            cover_path=get_cover_path(handle),
        )
        entry = self._make_entry(record)

        with self._lock:
            self._check_open()
            if self._index_of(canonical) is not None:
                raise DuplicateBookError(f"Book already in collection: {canonical}")
            self._entries.append(entry)
            self._writer.submit_insert(record)

        self._changed()
        return record

    def remove_book(self, reference: Reference) -> BookRecord:
        """Remove the record shown at reference and queue its store delete.

        Raises:
            StaleReferenceError: If reference no longer maps to a displayed record.
            RuntimeError: If the collection has been closed.
        """
        with self._lock:
            self._check_open()
            record = self.resolve_reference(reference)
            index = self._index_of(record.path)
            if index is None:
                raise StaleReferenceError(f"Book no longer in collection: {record.path}")
            del self._entries[index]
            self._writer.submit_delete(record.path)

        discard_cover(record.cover_path, self._cover_dir)
        self._changed()
        return record

    def remove_path(self, path: str) -> bool:
        """Remove the record for path. Returns False (and changes nothing) if absent."""
        with self._lock:
            self._check_open()
            index = self._index_of(path)
            if index is None:
                return False
            record = self._entries.pop(index).record
            self._writer.submit_delete(path)

        discard_cover(record.cover_path, self._cover_dir)
        self._changed()
        return True

    def forget(self, paths: Iterable[str]) -> list[str]:
        """Drop paths from memory only, for rows the caller already deleted from the store."""
        wanted = set(paths)
        with self._lock:
            dropped = [entry.record for entry in self._entries if entry.path in wanted]
            self._entries = [entry for entry in self._entries if entry.path not in wanted]
        for record in dropped:
            discard_cover(record.cover_path, self._cover_dir)
        if dropped:
            self._changed()
        return [record.path for record in dropped]

    def set_filter_term(self, term: str | None) -> None:
        """Replace the filter term and recompute which records are visible."""
        with self._lock:
            self._filter_term = term
        self._changed()

    def set_sort(self, column: str | None, descending: bool = False) -> None:
        """Sort the visible view on column ("author" or "title"), or None for insertion order."""
        spec = SortSpec(column=column, descending=descending)
        with self._lock:
            self._sort = spec
        self._changed()

    # --- Queries ---

    def visible_view(self) -> VisibleView:
        """The filtered, sorted rows a presentation layer should display."""
        with self._lock:
            entries = compute_visible_view(self._entries, self._filter_term, self._sort)
            return VisibleView(entries=tuple(entries), generation=self._generation)

    def resolve_reference(self, reference: Reference) -> BookRecord:
        """Translate a displayed row back to its canonical record.

        A bare int is read against the current view. A ViewReference taken
        before the last change is rejected.

        Raises:
            StaleReferenceError: If the reference is out of range or outdated.
        """
        with self._lock:
            if isinstance(reference, ViewReference):
                if reference.generation != self._generation:
                    raise StaleReferenceError(
                        f"View changed since row {reference.row} was selected"
                    )
                row = reference.row
            else:
                row = reference

            view = self.visible_view()
            if not 0 <= row < len(view):
                raise StaleReferenceError(f"No book at row {row}")
            return view[row].record

    def get_book(self, reference: Reference) -> EpubHandle:
        """Open the book shown at reference for reading.

        Raises:
            StaleReferenceError: If reference no longer maps to a displayed record.
            OpenError: If the EPUB cannot be opened; the collection is unchanged.
        """
        record = self.resolve_reference(reference)
        return open_epub(record.path, cover_dir=self._cover_dir)

    # --- Lifecycle ---

    def drain(self) -> None:
        """Block until all queued store writes have been applied."""
        self._writer.drain()

    def close(self) -> None:
        """Apply queued store writes, then close the store. Idempotent."""
        with self._lock:
            if self._closed:
                return
            self._closed = True
        self._writer.close()
        self._store.close()

    def __enter__(self) -> "BookCollection":
        return self

    def __exit__(
        self,
        exc_type: type[BaseException] | None,
        exc: BaseException | None,
        tb: TracebackType | None,
    ) -> None:
        self.close()
