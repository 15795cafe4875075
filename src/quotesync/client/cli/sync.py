"""Sync command for quotesync CLI.

Commands:
- sync: Synchronize quotes with the server and resolve conflicts
"""

from __future__ import annotations

import sys
import threading

import click

from quotesync.client.cli.quotes import open_manager
from quotesync.client.manager import QuoteManager
from quotesync.client.sync import Conflict, StaleSessionError, SyncOutcome


def show_conflicts(conflicts: list[Conflict]) -> None:
    """Print a conflict list."""
    click.echo(f"{len(conflicts)} conflict(s):")
    for conflict in conflicts:
        click.echo(
            f"  {conflict.remote.text!r}: local {conflict.local.category} "
            f"({conflict.local.source.value}) -> server {conflict.remote.category}"
        )


def resolve_conflicts(manager: QuoteManager, choice: str) -> None:
    """Apply an all-or-nothing conflict choice to the open session.

    The choice only applies to the conflicts that were shown. If a timer
    cycle replaces the session while the user is choosing, nothing is
    applied and the new conflicts are left for the next round.
    """
    generation, conflicts = manager.session.view()
    if not conflicts:
        return

    show_conflicts(conflicts)
    if choice == "ask":
        choice = click.prompt(
            "Keep which version for all conflicts?",
            type=click.Choice(["remote", "local"]),
            default="remote",
        )

    try:
        if choice == "local":
            reverted = manager.keep_local_for_all(generation)
            click.echo(f"Restored local version of {reverted} quote(s).")
        else:
            manager.keep_remote_for_all(generation)
            click.echo("Kept server version.")
    except StaleSessionError:
        click.echo("Conflicts changed while choosing, nothing applied.", err=True)


@click.command()
@click.option("--watch", "-w", is_flag=True, help="Keep syncing on a timer until interrupted.")
@click.option("--interval", type=float, default=None, help="Seconds between syncs in watch mode.")
@click.option(
    "--on-conflict",
    type=click.Choice(["ask", "remote", "local"]),
    default="ask",
    show_default=True,
    help="How to resolve conflicts.",
)
def sync(watch: bool, interval: float | None, on_conflict: str) -> None:
    """Synchronize quotes with the server.

    New server quotes are added; on conflict the server version is applied
    and you may restore your local version for all conflicting quotes.
    """
    with open_manager() as manager:
        if not watch:
            report = manager.sync_now()
            if report.outcome == SyncOutcome.FAILED:
                sys.exit(1)
            resolve_conflicts(manager, on_conflict)
            return

        # Conflicts are detected on the timer thread but resolved here
        conflicts_ready = threading.Event()
        manager.orchestrator.set_on_conflicts(lambda _conflicts: conflicts_ready.set())
        manager.start_auto_sync(interval)
        click.echo("Watching for server changes (Ctrl+C to stop)...")
        manager.sync_now()

        try:
            while True:
                conflicts_ready.wait(timeout=0.5)
                conflicts_ready.clear()
                resolve_conflicts(manager, on_conflict)
        except KeyboardInterrupt:
            click.echo("\nStopping sync...")
        finally:
            manager.stop_auto_sync()
