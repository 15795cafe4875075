"""Command-line interface for quotesync.

This module provides the main CLI entry point and assembles all commands.

Commands:
- show: Show a random quote from the selected category
- list: List stored quotes
- categories: List categories
- browse: Page through random quotes interactively
- add: Add a quote and push it to the server
- import: Import quotes from a JSON file
- export: Export quotes to a JSON file
- sync: Synchronize with the server and resolve conflicts
- config: Show or change settings
"""

from __future__ import annotations

import logging

import click

from quotesync.client.cli.config import (
    get_config_dir,
    get_config_file,
    get_database_path,
    load_config,
    save_config,
)
from quotesync.client.cli.quotes import (
    add,
    browse,
    categories,
    export,
    import_quotes,
    list_quotes,
    show,
)
from quotesync.client.cli.settings import config_cmd
from quotesync.client.cli.sync import sync


@click.group()
@click.version_option(package_name="quotesync")
@click.option("--verbose", "-v", is_flag=True, help="Show debug logging.")
def cli(verbose: bool) -> None:
    """quotesync - Quote collection with server sync."""
    handler = logging.StreamHandler()
    handler.setFormatter(logging.Formatter("%(message)s"))
    quotesync_logger = logging.getLogger("quotesync")
    quotesync_logger.handlers = [handler]
    quotesync_logger.setLevel(logging.DEBUG if verbose else logging.WARNING)


# Quote commands
cli.add_command(show)
cli.add_command(list_quotes)
cli.add_command(categories)
cli.add_command(browse)
cli.add_command(add)
cli.add_command(import_quotes)
cli.add_command(export)

# Sync commands
cli.add_command(sync)

# Settings
cli.add_command(config_cmd)


def main() -> None:
    """Entry point for the CLI."""
    cli()


__all__ = [
    # Main entry points
    "cli",
    "main",
    # Config utilities
    "get_config_dir",
    "get_config_file",
    "get_database_path",
    "load_config",
    "save_config",
]
