# ABOUTME: The `bookcase ls` command for listing the collection.
# ABOUTME: Displays a Rich table of the filtered, sorted visible view.

from pathlib import Path

import click
from rich.console import Console

from bookcase.cli.options import apply_view, db_option, view_options
from bookcase.cli.presenter import ConsolePresenter

console = Console()  # TODO: move Console() inside command for testability


@click.command("ls")
@view_options
@db_option
def ls(
    filter_term: str | None,
    sort_column: str | None,
    reverse: bool,
    db_path: Path | None,
) -> None:
    """List the books in the collection."""
    presenter = ConsolePresenter(console=console)
    collection = presenter.open_collection(db_path)

    try:
        apply_view(collection, filter_term, sort_column, reverse)
        presenter.render_view(collection.visible_view())
    finally:
        collection.close()
