# ABOUTME: The `bookcase add` command for adding EPUBs to the collection.
# ABOUTME: Opens each file, extracts author/title/cover, and stores the record.

from pathlib import Path

import click
from rich.console import Console

from bookcase.cli.options import db_option
from bookcase.cli.presenter import ConsolePresenter
from bookcase.core.collection import DuplicateBookError
from bookcase.formats.epub import OpenError, open_epub

console = Console()  # TODO: move Console() inside command for testability


def _find_epubs(path: Path) -> list[Path]:
    """Find EPUB files at the given path (single file or directory)."""
    if path.is_dir():
        return sorted(path.rglob("*.epub"))
    return [path]


@click.command("add")
@click.argument("paths", nargs=-1, required=True, type=click.Path(path_type=Path))
@db_option
def add(paths: tuple[Path, ...], db_path: Path | None) -> None:
    """Add EPUB files (or every EPUB under a directory) to the collection."""
    presenter = ConsolePresenter(console=console)
    collection = presenter.open_collection(db_path)

    added = 0
    skipped = 0
    errors = 0

    try:
        for path in paths:
            for epub_path in _find_epubs(path):
                try:
                    handle = open_epub(epub_path, cover_dir=collection.cover_dir)
                except OpenError as exc:
                    console.print(f"[red]Could not open:[/red] {exc}")
                    errors += 1
                    continue

                try:
                    record = collection.add_book(handle, epub_path)
                except DuplicateBookError:
                    console.print(f"[yellow]Already in collection:[/yellow] {epub_path.name}")
                    skipped += 1
                    continue

                console.print(f"[green]Added:[/green] {record.label}")
                added += 1
    finally:
        collection.close()

    console.print(f"\n{added} added, {skipped} skipped, {errors} error(s).")
    if errors:
        raise SystemExit(1)
