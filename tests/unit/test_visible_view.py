# ABOUTME: Unit tests for filtering and sorting the visible view.
# ABOUTME: Validates the case-insensitive filter rule and the sort/insertion ordering.

import pytest

from bookcase.core.collection import (
    CollectionEntry,
    SortSpec,
    compute_visible_view,
    matches_filter,
)
from bookcase.core.covers import make_placeholder
from bookcase.db.mapping import BookRecord

PLACEHOLDER = make_placeholder()


def _entry(author: str, title: str) -> CollectionEntry:
    record = BookRecord(author=author, title=title, path=f"/books/{title}.epub")
    return CollectionEntry(record=record, thumbnail=PLACEHOLDER)


@pytest.fixture()
def entries() -> list[CollectionEntry]:
    return [
        _entry("Umberto Eco", "The Name of the Rose"),
        _entry("Frank Herbert", "Dune"),
        _entry("Jane Doe", "anthology"),
        _entry("umberto eco", "Baudolino"),
    ]


class TestMatchesFilter:
    """Tests for matches_filter()."""

    record = BookRecord(author="Jane Doe", title="Collected Stories", path="/b.epub")

    @pytest.mark.parametrize("term", ["jane", "JANE", "Jane", "doe"])
    def test_author_case_insensitive(self, term: str) -> None:
        assert matches_filter(self.record, term)

    def test_title_match(self) -> None:
        assert matches_filter(self.record, "stories")

    def test_no_match(self) -> None:
        assert not matches_filter(self.record, "herbert")

    @pytest.mark.parametrize("term", [None, ""])
    def test_empty_term_matches_all(self, term: str | None) -> None:
        assert matches_filter(self.record, term)

    def test_empty_fields(self) -> None:
        record = BookRecord(author="n/a", title="", path="/b.epub")
        assert not matches_filter(record, "rose")
        assert matches_filter(record, "n/a")

    def test_lowercase_without_case_folding(self) -> None:
        record = BookRecord(author="Johann Straße", title="Weg", path="/b.epub")
        assert matches_filter(record, "STRASSE") is False
        assert matches_filter(record, "ss") is False
        assert matches_filter(record, "STRAßE") is True


class TestComputeVisibleView:
    """Tests for compute_visible_view()."""

    def test_no_filter_keeps_insertion_order(self, entries: list[CollectionEntry]) -> None:
        assert compute_visible_view(entries, None) == entries
        assert compute_visible_view(entries, "") == entries

    def test_filter_without_sort(self, entries: list[CollectionEntry]) -> None:
        view = compute_visible_view(entries, "ECO")
        assert [e.record.title for e in view] == ["The Name of the Rose", "Baudolino"]

    def test_sort_by_title(self, entries: list[CollectionEntry]) -> None:
        view = compute_visible_view(entries, None, SortSpec(column="title"))
        assert [e.record.title for e in view] == [
            "anthology",
            "Baudolino",
            "Dune",
            "The Name of the Rose",
        ]

    def test_sort_by_author_descending(self, entries: list[CollectionEntry]) -> None:
        view = compute_visible_view(entries, None, SortSpec(column="author", descending=True))
        assert [e.record.author for e in view] == [
            "umberto eco",
            "Umberto Eco",
            "Jane Doe",
            "Frank Herbert",
        ]

    def test_filter_applies_beneath_sort(self, entries: list[CollectionEntry]) -> None:
        view = compute_visible_view(entries, "o", SortSpec(column="title"))
        assert [e.record.title for e in view] == [
            "anthology",
            "Baudolino",
            "The Name of the Rose",
        ]

    def test_does_not_modify_input(self, entries: list[CollectionEntry]) -> None:
        original = list(entries)
        compute_visible_view(entries, "dune", SortSpec(column="title"))
        assert entries == original


class TestSortSpec:
    """Tests for SortSpec validation."""

    def test_unknown_column_rejected(self) -> None:
        with pytest.raises(ValueError):
            SortSpec(column="publisher")

    def test_default_is_insertion_order(self) -> None:
        assert SortSpec().column is None
