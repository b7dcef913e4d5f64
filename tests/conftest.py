# ABOUTME: Shared pytest fixtures for Bookcase tests.
# ABOUTME: Builds real EPUB files and cover images, and temporary stores and collections.

from collections.abc import Callable, Iterator
from io import BytesIO
from pathlib import Path

import pytest
from ebooklib import epub
from PIL import Image

from bookcase.core.collection import BookCollection
from bookcase.db.connection import open_store
from bookcase.db.store import MetadataStore
from bookcase.db.writer import StoreWriter


def _png_bytes(size: tuple[int, int] = (120, 180)) -> bytes:
    buffer = BytesIO()
    Image.new("RGB", size, (200, 30, 30)).save(buffer, format="PNG")
    return buffer.getvalue()


@pytest.fixture
def make_epub(tmp_path: Path) -> Callable[..., Path]:
    """Factory for minimal valid EPUB files.

    Title and author are only written when given; cover=True embeds a
    120x180 PNG cover image.
    """

    def _make(
        filename: str,
        *,
        title: str | None = None,
        author: str | None = None,
        cover: bool = False,
    ) -> Path:
        book = epub.EpubBook()
        book.set_identifier(f"id-{filename}")
        book.set_language("en")
        if title is not None:
            book.set_title(title)
        if author is not None:
            book.add_author(author)
        if cover:
            book.set_cover("cover.png", _png_bytes(), create_page=False)

        # Add a minimal chapter so the EPUB is structurally valid
        chapter = epub.EpubHtml(title="Chapter 1", file_name="chap01.xhtml", lang="en")
        chapter.content = b"<html><body><h1>Chapter 1</h1><p>Content.</p></body></html>"
        book.add_item(chapter)

        book.toc = [epub.Link("chap01.xhtml", "Chapter 1", "chap01")]
        book.add_item(epub.EpubNcx())
        book.add_item(epub.EpubNav())
        book.spine = ["nav", chapter]

        filepath = tmp_path / filename
        epub.write_epub(str(filepath), book)
        return filepath

    return _make


@pytest.fixture
def sample_epub(make_epub: Callable[..., Path]) -> Path:
    """An EPUB with title, author, and a cover image."""
    return make_epub(
        "name_of_the_rose.epub",
        title="The Name of the Rose",
        author="Umberto Eco",
        cover=True,
    )


@pytest.fixture
def untitled_epub(make_epub: Callable[..., Path]) -> Path:
    """An EPUB with neither a title nor a creator."""
    return make_epub("untitled.epub")


@pytest.fixture
def corrupt_epub(tmp_path: Path) -> Path:
    """A file that is not a valid EPUB."""
    filepath = tmp_path / "corrupt.epub"
    filepath.write_text("this is not a valid epub file")
    return filepath


@pytest.fixture
def cover_png(tmp_path: Path) -> Path:
    """A 120x180 PNG image on disk."""
    filepath = tmp_path / "cover.png"
    filepath.write_bytes(_png_bytes())
    return filepath


@pytest.fixture
def cover_dir(tmp_path: Path) -> Path:
    """Directory that extracted covers are written to."""
    return tmp_path / "covers"


@pytest.fixture
def db_path(tmp_path: Path) -> Path:
    """Location of a temporary metadata store."""
    return tmp_path / "data" / "meta.db"


@pytest.fixture
def store(db_path: Path) -> Iterator[MetadataStore]:
    """A MetadataStore backed by a temporary database."""
    metadata_store = MetadataStore(open_store(db_path))
    yield metadata_store
    metadata_store.close()


@pytest.fixture
def collection(store: MetadataStore, cover_dir: Path) -> Iterator[BookCollection]:
    """An empty BookCollection over the temporary store."""
    books = BookCollection(store, StoreWriter(store), cover_dir=cover_dir)
    yield books
    books.close()
