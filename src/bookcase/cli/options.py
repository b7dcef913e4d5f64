# ABOUTME: Shared Click options for Bookcase CLI commands.
# ABOUTME: Provides reusable decorators for the store location and the view filter/sort flags.

from collections.abc import Callable
from pathlib import Path
from typing import Any

import click

from bookcase.core.collection import SORT_COLUMNS, BookCollection
from bookcase.db.connection import DEFAULT_DB_PATH

db_option = click.option(
    "--db",
    "db_path",
    type=click.Path(path_type=Path),
    envvar="BOOKCASE_DB",
    default=None,
    help=f"Path to the metadata store (default: {DEFAULT_DB_PATH})",
)


def view_options(func: Callable[..., Any]) -> Callable[..., Any]:
    """Add --filter, --sort and --reverse, which shape the visible view."""
    func = click.option(
        "--reverse",
        is_flag=True,
        default=False,
        help="Sort in descending order.",
    )(func)
    func = click.option(
        "--sort",
        "sort_column",
        type=click.Choice(SORT_COLUMNS),
        default=None,
        help="Sort by author or title (default: order added).",
    )(func)
    func = click.option(
        "-f",
        "--filter",
        "filter_term",
        default=None,
        help="Only show books whose author or title contains this text.",
    )(func)
    return func


def apply_view(
    collection: BookCollection,
    filter_term: str | None,
    sort_column: str | None,
    reverse: bool,
) -> None:
    """Set the collection's filter and sort from the view options."""
    collection.set_filter_term(filter_term)
    collection.set_sort(sort_column, descending=reverse)
