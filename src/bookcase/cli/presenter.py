# ABOUTME: Console presentation of the book collection using Rich.
# ABOUTME: Renders the visible view and the removed-books report, and opens the collection.

from pathlib import Path

from rich.console import Console
from rich.table import Table

from bookcase.core.collection import BookCollection, VisibleView
from bookcase.db.connection import StoreInitError


class ConsolePresenter:
    """Shows a BookCollection on a Rich console.

    Rows are numbered from 1 in the order of the collection's visible view,
    so a number typed back by the user maps to row number - 1.
    """

    def __init__(self, *, console: Console | None = None) -> None:
        self._console = console or Console()

    @property
    def console(self) -> Console:
        return self._console

    def report_removed_paths(self, paths: list[str]) -> None:
        """Tell the user which books were dropped because their file is gone."""
        table = Table(title="Books removed from the collection")
        table.add_column("Missing file", overflow="fold")
        for path in paths:
            table.add_row(path)

        self._console.print(table)
        self._console.print(
            f"[yellow]{len(paths)} missing book(s) removed.[/yellow]"
        )

    def render_view(self, view: VisibleView) -> None:
        """Print the visible rows as a table."""
        if not len(view):
            self._console.print("[yellow]No books in the collection.[/yellow]")
            return

        table = Table()
        table.add_column("#", style="dim", width=4)
        table.add_column("Author")
        table.add_column("Title", style="bold")
        table.add_column("Cover", width=5)

        for row, entry in enumerate(view, start=1):
            table.add_row(
                str(row),
                entry.record.author,
                entry.record.title or "[dim]untitled[/dim]",
                "yes" if entry.record.cover_path else "-",
            )

        self._console.print(table)
        self._console.print(f"\n[dim]{len(view)} book(s)[/dim]")

    def open_collection(self, db_path: Path | None) -> BookCollection:
        """Open the collection, reporting pruned books on this console.

        Exits with status 1 if the store cannot be opened.
        """
        try:
            return BookCollection.open(db_path, report_removed=self.report_removed_paths)
        except StoreInitError as exc:
            self._console.print(f"[red]Could not open the book store:[/red] {exc}")
            raise SystemExit(1) from exc
