# ABOUTME: Background writer that applies metadata store mutations off the caller's thread.
# ABOUTME: One worker, one bounded FIFO queue; close() drains everything before stopping.

import logging
import queue
import threading
from collections.abc import Callable
from dataclasses import dataclass

from bookcase.db.mapping import BookRecord
from bookcase.db.store import MetadataStore, StoreWriteError

logger = logging.getLogger(__name__)

DEFAULT_QUEUE_SIZE = 256


@dataclass(frozen=True)
class _Mutation:
    """A queued store operation."""

    description: str
    apply: Callable[[], None]


_STOP = object()


class StoreWriter:
    """Applies inserts and deletes to a MetadataStore on a background thread.

    Mutations run in submission order, so two mutations for the same path
    are never reordered. A failed mutation is logged and abandoned; the
    in-memory collection may then differ from the store until the next
    startup reconciliation.
    """

    def __init__(self, store: MetadataStore, *, maxsize: int = DEFAULT_QUEUE_SIZE) -> None:
        self._store = store
        self._queue: queue.Queue = queue.Queue(maxsize=maxsize)
        self._closed = False
        self._thread = threading.Thread(target=self._run, name="bookcase-store-writer", daemon=True)
        self._thread.start()

    @property
    def closed(self) -> bool:
        return self._closed

    def submit_insert(self, record: BookRecord) -> None:
        """Queue an insert of record. Blocks while the queue is full."""
        self._submit(_Mutation(f"insert {record.path}", lambda: self._store.insert(record)))

    def submit_delete(self, path: str) -> None:
        """Queue a delete of path. Blocks while the queue is full."""
        self._submit(_Mutation(f"delete {path}", lambda: self._store.delete(path)))

    def drain(self) -> None:
        """Block until every queued mutation has been applied."""
        self._queue.join()

    def close(self) -> None:
        """Drain pending mutations and stop the worker. Idempotent."""
        if self._closed:
            return
        self._closed = True
        self._queue.put(_STOP)
        self._thread.join()

    def _submit(self, mutation: _Mutation) -> None:
        if self._closed:
            raise RuntimeError("StoreWriter is closed")
        self._queue.put(mutation)

    def _run(self) -> None:
        while True:
            item = self._queue.get()
            try:
                if item is _STOP:
                    return
                try:
                    item.apply()
                except StoreWriteError as exc:
                    logger.warning("Store mutation failed (%s): %s", item.description, exc)
            finally:
                self._queue.task_done()
