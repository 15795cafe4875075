"""Quote commands for quotesync CLI.

Commands:
- show: Display a random quote from the selected category
- list: List stored quotes
- categories: List categories
- browse: Page through random quotes interactively
- add: Add a quote (and push it to the server)
- import: Import quotes from a JSON file
- export: Export quotes to a timestamped JSON file
"""

from __future__ import annotations

import sys
from pathlib import Path

import click

from quotesync.client.cli.config import (
    get_database_path,
    get_import_dedup,
    get_remote_config,
)
from quotesync.client.manager import QuoteManager
from quotesync.client.notifications import Notification
from quotesync.client.records import QuoteRecord
from quotesync.client.store import DedupPolicy
from quotesync.client.transfer import ImportFileError


def echo_notification(notification: Notification) -> None:
    """Notification sink printing notices to the terminal."""
    click.echo(f"{notification.title}: {notification.message}")


def open_manager() -> QuoteManager:
    """Open the quote manager with the configured database and endpoint."""
    return QuoteManager(
        get_database_path(),
        config=get_remote_config(),
        notify=echo_notification,
    )


def format_quote(record: QuoteRecord) -> str:
    """Render a quote for the terminal."""
    return f'"{record.text}"\n  Category: {record.category}'


@click.command()
@click.option("--category", "-c", default=None, help="Category to pick from ('all' for every category).")
def show(category: str | None) -> None:
    """Show a random quote.

    The chosen category is remembered for the next call.
    """
    with open_manager() as manager:
        browser = manager.browser
        if category is not None:
            browser.select_filter(category)
        record = browser.random_quote()
        if record is None:
            click.echo("No quotes available in this category.")
            return
        click.echo(format_quote(record))


@click.command("list")
@click.option("--category", "-c", default="all", show_default=True, help="Only list this category.")
def list_quotes(category: str) -> None:
    """List stored quotes."""
    with open_manager() as manager:
        records = manager.browser.filter(category)
        if not records:
            click.echo("No quotes available in this category.")
            return
        for record in records:
            click.echo(f"[{record.source.value}] {record.category}: {record.text}")


@click.command()
def categories() -> None:
    """List quote categories."""
    with open_manager() as manager:
        for name in manager.browser.categories():
            click.echo(name)


@click.command()
@click.argument("text")
@click.argument("category")
@click.option("--no-push", is_flag=True, help="Keep the quote local, do not upload it.")
def add(text: str, category: str, no_push: bool) -> None:
    """Add a quote with TEXT in CATEGORY."""
    with open_manager() as manager:
        result = manager.add_quote(text, category, push=not no_push)
        if not result.added:
            click.echo("Quote not added (empty or already present).", err=True)
            sys.exit(1)
        click.echo("New quote added!")
        if result.push is not None and not result.pushed:
            click.echo("Server upload failed, quote kept locally.", err=True)


@click.command("import")
@click.argument("file", type=click.Path(exists=True, dir_okay=False, path_type=Path))
@click.option(
    "--dedup",
    type=click.Choice([p.value for p in DedupPolicy]),
    default=None,
    help="Duplicate detection key (defaults to the configured policy).",
)
def import_quotes(file: Path, dedup: str | None) -> None:
    """Import quotes from a JSON FILE."""
    policy = DedupPolicy(dedup) if dedup else get_import_dedup()
    with open_manager() as manager:
        try:
            result = manager.import_file(file, policy)
        except ImportFileError as e:
            click.echo(f"Error: {e}", err=True)
            sys.exit(1)

    if result.added_count == 0:
        click.echo("No new quotes to import (all duplicates or invalid).")
        return
    click.echo(f"Quotes imported successfully! Added {result.added_count}.")


@click.command()
@click.argument(
    "directory",
    required=False,
    type=click.Path(file_okay=False, path_type=Path),
)
def export(directory: Path | None) -> None:
    """Export quotes to a JSON file in DIRECTORY (default: current directory)."""
    with open_manager() as manager:
        target = manager.export(directory or Path.cwd())
    click.echo(f"Exported to {target}")


@click.command()
@click.option("--category", "-c", default=None, help="Category to browse ('all' for every category).")
def browse(category: str | None) -> None:
    """Browse quotes interactively.

    Enter or "n" shows another quote, "c NAME" switches category, "l" shows
    the last quote again and "q" quits.
    """
    with open_manager() as manager:
        browser = manager.browser
        if category is not None:
            browser.select_filter(category)
        click.echo(f"Categories: all, {', '.join(browser.categories())}")

        command = "n"
        while command not in ("q", "quit"):
            if command in ("l", "last"):
                record = browser.last_viewed()
                click.echo(format_quote(record) if record else "No quote viewed yet.")
            else:
                if command.startswith("c "):
                    browser.select_filter(command[2:])
                    click.echo(f"Category: {browser.current_filter}")
                record = browser.random_quote()
                click.echo(format_quote(record) if record else "No quotes available in this category.")
            command = click.prompt(
                "Next (n), last (l), category (c NAME), quit (q)",
                default="n",
                show_default=False,
            ).strip()
