# ABOUTME: The `bookcase open` command for opening a book from the collection.
# ABOUTME: Opens the EPUB at a displayed row and shows its metadata and reading order.

from pathlib import Path

import click
from rich.console import Console
from rich.table import Table

from bookcase.cli.options import apply_view, db_option, view_options
from bookcase.cli.presenter import ConsolePresenter
from bookcase.core.collection import StaleReferenceError
from bookcase.formats.epub import OpenError, get_meta, spine_documents

console = Console()  # TODO: move Console() inside command for testability


@click.command("open")
@click.argument("row", type=int)
@view_options
@db_option
def open_book(
    row: int,
    filter_term: str | None,
    sort_column: str | None,
    reverse: bool,
    db_path: Path | None,
) -> None:
    """Open the book shown at ROW by `bookcase ls` with the same options."""
    presenter = ConsolePresenter(console=console)
    collection = presenter.open_collection(db_path)

    try:
        apply_view(collection, filter_term, sort_column, reverse)
        view = collection.visible_view()
        try:
            handle = collection.get_book(view.reference(row - 1))
        except StaleReferenceError as exc:
            console.print(f"[red]No book at row {row}.[/red]")
            raise SystemExit(1) from exc
        except OpenError as exc:
            console.print(f"[red]Could not open:[/red] {exc}")
            raise SystemExit(1) from exc
    finally:
        collection.close()

    table = Table(show_header=False, box=None, pad_edge=False)
    table.add_column("Field", style="bold", width=10)
    table.add_column("Value")

    table.add_row("Title", get_meta(handle, "title") or "")
    table.add_row("Author", get_meta(handle, "creator") or "unknown")
    language = get_meta(handle, "language")
    if language:
        table.add_row("Language", language)
    publisher = get_meta(handle, "publisher")
    if publisher:
        table.add_row("Publisher", publisher)
    table.add_row("File", str(handle.path))

    console.print(table)

    documents = spine_documents(handle)
    console.print(f"\n[bold]Contents[/bold] ({len(documents)} document(s))")
    for name in documents:
        console.print(f"  {name}")
