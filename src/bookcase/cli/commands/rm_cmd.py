# ABOUTME: The `bookcase rm` command for removing books from the collection.
# ABOUTME: Removes by displayed row number (under the same filter/sort) or by file path.

from pathlib import Path

import click
from rich.console import Console

from bookcase.cli.options import apply_view, db_option, view_options
from bookcase.cli.presenter import ConsolePresenter
from bookcase.core.collection import StaleReferenceError

console = Console()  # TODO: move Console() inside command for testability


@click.command("rm")
@click.argument("row", type=int, required=False)
@click.option(
    "--path",
    "book_path",
    default=None,
    help="Remove the book stored under this file path instead of a row.",
)
@view_options
@db_option
def rm(
    row: int | None,
    book_path: str | None,
    filter_term: str | None,
    sort_column: str | None,
    reverse: bool,
    db_path: Path | None,
) -> None:
    """Remove the book shown at ROW by `bookcase ls` with the same options."""
    if (row is None) == (book_path is None):
        raise click.UsageError("Give either a ROW or --path.")

    presenter = ConsolePresenter(console=console)
    collection = presenter.open_collection(db_path)

    try:
        if book_path is not None:
            book_path = str(Path(book_path).expanduser().absolute())
            if not collection.remove_path(book_path):
                console.print(f"[yellow]Not in collection:[/yellow] {book_path}")
                return
            console.print(f"[green]Removed:[/green] {book_path}")
            return

        apply_view(collection, filter_term, sort_column, reverse)
        view = collection.visible_view()
        try:
            record = collection.remove_book(view.reference(row - 1))
        except StaleReferenceError as exc:
            console.print(f"[red]No book at row {row}.[/red]")
            raise SystemExit(1) from exc
        console.print(f"[green]Removed:[/green] {record.label}")
    finally:
        collection.close()
