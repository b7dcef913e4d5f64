# ABOUTME: CLI package for Bookcase, built on Click.
# ABOUTME: Defines the root command group, logging setup, and registers subcommands.

import logging

import click
from rich.console import Console
from rich.logging import RichHandler

from bookcase.cli.commands import add_cmd, ls_cmd, open_cmd, rm_cmd


def _configure_logging(verbose: bool) -> None:
    """Route bookcase log records through Rich on stderr."""
    logger = logging.getLogger("bookcase")
    logger.setLevel(logging.DEBUG if verbose else logging.WARNING)
    if not any(isinstance(handler, RichHandler) for handler in logger.handlers):
        logger.addHandler(RichHandler(console=Console(stderr=True), show_path=False))


@click.group()
@click.version_option(package_name="bookcase")
@click.option("-v", "--verbose", is_flag=True, default=False, help="Show debug logging.")
def cli(verbose: bool) -> None:
    """Bookcase - an EPUB collection backed by a local metadata cache."""
    _configure_logging(verbose)


cli.add_command(add_cmd.add)
cli.add_command(ls_cmd.ls)
cli.add_command(rm_cmd.rm)
cli.add_command(open_cmd.open_book)
