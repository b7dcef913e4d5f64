# ABOUTME: Startup reconciliation of the metadata store against the filesystem.
# ABOUTME: Prunes books whose file no longer exists and reports the removed paths.

from __future__ import annotations

import logging
from collections.abc import Callable
from dataclasses import dataclass, field
from pathlib import Path
from typing import TYPE_CHECKING

from bookcase.db.store import MetadataStore, StoreWriteError

if TYPE_CHECKING:
    from bookcase.core.collection import BookCollection

logger = logging.getLogger(__name__)

# Receives the pruned paths, e.g. to show them in an informational dialog
ReportFn = Callable[[list[str]], None]


@dataclass
class ReconcileResult:
    """Outcome of a reconciliation run."""

    checked: int = 0
    removed: list[str] = field(default_factory=list)
    failed: list[str] = field(default_factory=list)

    @property
    def clean(self) -> bool:
        """True when every stored file was found."""
        return not self.removed and not self.failed


def find_missing(store: MetadataStore) -> tuple[int, list[str]]:
    """Return how many stored paths were checked and which of them no longer exist."""
    stored = [record.path for record in store.select_all()]
    missing = [path for path in stored if not Path(path).exists()]
    return len(stored), missing


def reconcile(
    store: MetadataStore,
    collection: BookCollection | None = None,
    *,
    report_removed: ReportFn | None = None,
) -> ReconcileResult:
    """Remove books whose backing file has vanished.

    1. Check every stored path against the filesystem.
    2. Delete each missing path from the store, then from the collection.
    3. If anything was removed, hand the list to report_removed.

    The existence check finishes before any row is deleted. A file that
    disappears after the check is picked up on the next run.

    Args:
        store: The metadata store to prune.
        collection: The loaded collection to prune alongside the store.
        report_removed: Advisory callback receiving the removed paths.

    Returns:
        A ReconcileResult listing the removed paths in store order.
    """
    result = ReconcileResult()
    result.checked, missing = find_missing(store)

    for path in missing:
        try:
            store.delete(path)
        except StoreWriteError as exc:
            logger.warning("Could not prune missing book %s: %s", path, exc)
            result.failed.append(path)
            continue
        result.removed.append(path)

    if collection is not None and missing:
        collection.forget(missing)

    if result.removed:
        logger.info("Removed %d missing book(s) from the collection", len(result.removed))
        if report_removed is not None:
            try:
                report_removed(list(result.removed))
            except Exception as exc:
                logger.warning("Could not report removed books: %s", exc)

    return result
