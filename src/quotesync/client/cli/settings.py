"""Config command for quotesync CLI.

Commands:
- config: Show or change settings
"""

from __future__ import annotations

import sys

import click

from quotesync.client.cli.config import (
    CONFIG_KEYS,
    get_config_file,
    load_config,
    save_config,
)
from quotesync.client.store import DedupPolicy
from quotesync.core.config import RemoteConfig


@click.command("config")
@click.argument("key", required=False, type=click.Choice(CONFIG_KEYS))
@click.argument("value", required=False)
def config_cmd(key: str | None, value: str | None) -> None:
    """Show settings, or set KEY to VALUE."""
    config = load_config()

    if key is None:
        effective = RemoteConfig.from_dict(config)
        click.echo(f"Config file: {get_config_file()}")
        click.echo(f"endpoint_url: {effective.endpoint_url}")
        click.echo(f"timeout: {effective.timeout}")
        click.echo(f"fetch_limit: {effective.fetch_limit}")
        click.echo(f"sync_interval: {effective.sync_interval}")
        click.echo(f"import_dedup: {config.get('import_dedup', DedupPolicy.MERGE_KEY.value)}")
        return

    if value is None:
        click.echo(config.get(key, ""))
        return

    candidate = dict(config)
    candidate[key] = value
    try:
        if key == "import_dedup":
            DedupPolicy(value)
        else:
            RemoteConfig.from_dict(candidate)
    except ValueError as e:
        click.echo(f"Error: invalid value for {key}: {e}", err=True)
        sys.exit(1)

    save_config(candidate)
    click.echo(f"{key} = {value}")
