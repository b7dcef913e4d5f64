# ABOUTME: Unit tests for cover thumbnail loading.
# ABOUTME: Validates scaling to the thumbnail width and placeholder fallback.

import logging
from pathlib import Path

import pytest

from bookcase.core.covers import (
    THUMBNAIL_WIDTH,
    CoverLoadError,
    _open_thumbnail,
    discard_cover,
    load_thumbnail,
    make_placeholder,
)


@pytest.fixture()
def placeholder():
    return make_placeholder()


class TestLoadThumbnail:
    """Tests for load_thumbnail()."""

    def test_scales_to_width_keeping_aspect(self, cover_png: Path, placeholder) -> None:
        thumb = load_thumbnail(str(cover_png), placeholder)
        assert thumb is not placeholder
        assert thumb.size == (THUMBNAIL_WIDTH, 96)

    def test_no_cover_uses_placeholder(self, placeholder) -> None:
        assert load_thumbnail(None, placeholder) is placeholder
        assert load_thumbnail("", placeholder) is placeholder

    def test_missing_file_uses_placeholder(
        self, tmp_path: Path, placeholder, caplog: pytest.LogCaptureFixture
    ) -> None:
        with caplog.at_level(logging.WARNING, logger="bookcase.core.covers"):
            thumb = load_thumbnail(str(tmp_path / "gone.png"), placeholder)

        assert thumb is placeholder
        assert "Could not load cover image" in caplog.text

    def test_unreadable_image_uses_placeholder(self, tmp_path: Path, placeholder) -> None:
        broken = tmp_path / "broken.png"
        broken.write_bytes(b"not an image")
        assert load_thumbnail(str(broken), placeholder) is placeholder


class TestOpenThumbnail:
    """Tests for the raising loader underneath load_thumbnail()."""

    def test_raises_cover_load_error(self, tmp_path: Path) -> None:
        with pytest.raises(CoverLoadError):
            _open_thumbnail(str(tmp_path / "gone.png"))


class TestPlaceholder:
    """Tests for make_placeholder()."""

    def test_placeholder_width(self) -> None:
        assert make_placeholder().width == THUMBNAIL_WIDTH


class TestDiscardCover:
    """Tests for discard_cover()."""

    def test_deletes_file_in_cover_dir(self, cover_dir: Path) -> None:
        cover_dir.mkdir()
        cover = cover_dir / "abc.png"
        cover.write_bytes(b"png")

        assert discard_cover(str(cover), cover_dir) is True
        assert not cover.exists()

    def test_leaves_file_outside_cover_dir(self, cover_png: Path, cover_dir: Path) -> None:
        assert discard_cover(str(cover_png), cover_dir) is False
        assert cover_png.exists()

    def test_already_gone(self, cover_dir: Path) -> None:
        assert discard_cover(str(cover_dir / "missing.png"), cover_dir) is False

    @pytest.mark.parametrize("cover_path", [None, ""])
    def test_no_cover(self, cover_dir: Path, cover_path: str | None) -> None:
        assert discard_cover(cover_path, cover_dir) is False
