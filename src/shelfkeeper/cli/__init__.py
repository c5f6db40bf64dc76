# ABOUTME: CLI package for Shelfkeeper, built on Click.
# ABOUTME: Defines the root command group, logging setup, and registers subcommands.

import logging

import click
from rich.logging import RichHandler

from shelfkeeper.cli.commands import (
    book_cmd,
    graph_cmd,
    lend_cmd,
    stats_cmd,
    student_cmd,
)


@click.group()
@click.version_option(package_name="shelfkeeper")
@click.option("-v", "--verbose", is_flag=True, default=False, help="Show debug logging.")
def cli(verbose: bool) -> None:
    """Shelfkeeper - a school library inventory and lending tracker."""
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.WARNING,
        format="%(message)s",
        handlers=[RichHandler(show_path=False)],
        force=True,
    )


cli.add_command(book_cmd.book)
cli.add_command(student_cmd.student)
cli.add_command(lend_cmd.borrow)
cli.add_command(lend_cmd.return_book)
cli.add_command(lend_cmd.loans)
cli.add_command(lend_cmd.history)
cli.add_command(stats_cmd.stats)
cli.add_command(graph_cmd.graph)
