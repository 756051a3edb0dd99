"""Main CLI entry point for the hbreport command."""

import json
import logging
import click
from pathlib import Path
from rich.console import Console
from rich.table import Table
from rich.panel import Panel
from rich.syntax import Syntax
from typing import Optional

from ..core.config import ReporterConfigManager, PageContext, ConfigError
from ..reporter import AnalyticsReporter, AuctionEvent
from ..storage import JsonFileStore
from ..tracking import AttributionResolver

console = Console()


def get_config_manager(config_path: Optional[str] = None) -> ReporterConfigManager:
    """Get config manager instance."""
    path = Path(config_path) if config_path else None
    return ReporterConfigManager(path)


class ConsoleClient:
    """Prints payloads instead of sending them."""

    def send(self, data: str) -> bool:
        console.print(Panel(Syntax(json.dumps(json.loads(data), indent=2), "json"), title="Payload"))
        return True


@click.group()
@click.version_option(version="1.0.0", prog_name="hbreport")
@click.option("--verbose", "-v", is_flag=True, help="Enable debug logging")
def cli(verbose: bool):
    """Header bidding analytics reporter.

    \b
    Quick Start:
      hbreport resolve "https://site.com/?utm_source=news&utm_campaign=spring"
      hbreport config set --conn-id 123 --url collector.example.com
      hbreport replay events.json --dry-run
    """
    logging.basicConfig(level=logging.DEBUG if verbose else logging.WARNING)


# ============================================================================
# ATTRIBUTION
# ============================================================================

@cli.command()
@click.argument("url")
@click.option("--referrer", "-r", default="", help="Referrer of the page view")
@click.option("--store", "store_path", type=click.Path(dir_okay=False),
              help="JSON file holding the persisted traffic source")
def resolve(url: str, referrer: str, store_path: Optional[str]):
    """Resolve the traffic source credited for a page view."""
    store = JsonFileStore(Path(store_path) if store_path else None)
    resolver = AttributionResolver(store)
    source = resolver.resolve(url, referrer)

    table = Table(title=f"Traffic source (rank {source.rank})")
    table.add_column("Field", style="cyan")
    table.add_column("Value")
    for key, value in source.to_dict().items():
        table.add_row(key, value)

    console.print(table)


# ============================================================================
# EVENT REPLAY
# ============================================================================

@cli.command()
@click.argument("events_file", type=click.Path(exists=True, dir_okay=False))
@click.option("--conn-id", help="Connection id (defaults to saved config)")
@click.option("--url", "collector_url", help="Collector host (defaults to saved config)")
@click.option("--page-url", default="https://localhost/", help="URL of the page the auction ran on")
@click.option("--referrer", "-r", default="", help="Referrer of the page")
@click.option("--dry-run", is_flag=True, help="Print payloads instead of sending them")
@click.option("--config", "config_path", help="Custom config path")
def replay(events_file: str, conn_id: Optional[str], collector_url: Optional[str],
           page_url: str, referrer: str, dry_run: bool, config_path: Optional[str]):
    """Replay a JSON list of {eventType, args} auction events through a reporter.

    \b
    Example file:
      [{"eventType": "auctionInit"},
       {"eventType": "bidWon", "args": {"bidderCode": "appnexus", "cpm": 1.2}},
       {"eventType": "auctionEnd"}]
    """
    config = get_config_manager(config_path).config
    if conn_id:
        config.conn_id = conn_id
    if collector_url:
        config.url = collector_url

    try:
        with open(events_file, 'r') as f:
            events = json.load(f)
    except ValueError as e:
        raise click.ClickException(f"Invalid events file: {e}")
    if not isinstance(events, list):
        raise click.ClickException("Events file must hold a JSON list")

    reporter = AnalyticsReporter(client_factory=(lambda c: ConsoleClient()) if dry_run else None)
    try:
        config.validate()
    except ConfigError as e:
        raise click.ClickException(str(e))
    reporter.enable_analytics(config, PageContext(url=page_url, referrer=referrer))

    known = {e.value for e in AuctionEvent}
    skipped = 0
    for entry in events:
        event_type = entry.get('eventType') if isinstance(entry, dict) else None
        if event_type not in known:
            skipped += 1
            continue
        reporter.track(event_type, entry.get('args'))

    reporter.disable_analytics()

    console.print(f"[green]✓ Replayed {len(events) - skipped} event(s)[/green]")
    if skipped:
        console.print(f"[yellow]Skipped {skipped} unknown event(s)[/yellow]")


# ============================================================================
# CONFIGURATION
# ============================================================================

@cli.group()
def config():
    """Show or change the saved reporter configuration."""
    pass


@config.command("show")
@click.option("--config", "config_path", help="Custom config path")
def config_show(config_path: Optional[str]):
    """Show the saved configuration."""
    manager = get_config_manager(config_path)
    cfg = manager.config

    console.print(Panel.fit(
        f"Connection id: [cyan]{cfg.conn_id or '-'}[/cyan]\n"
        f"Collector URL: [cyan]{cfg.url or '-'}[/cyan]\n"
        f"Host: {cfg.host}\n"
        f"Queue timeout: {cfg.queue_timeout_ms} ms\n"
        f"Storage: {cfg.storage_path or 'in-memory'}\n\n"
        f"[dim]{manager.config_path}[/dim]",
        title="Reporter Config"
    ))


@config.command("set")
@click.option("--conn-id", help="Connection id")
@click.option("--url", "collector_url", help="Collector host")
@click.option("--host", help="Tag host")
@click.option("--queue-timeout", type=int, help="Quiet period before flushing, in ms")
@click.option("--storage-path", help="JSON file for the attribution store")
@click.option("--config", "config_path", help="Custom config path")
def config_set(conn_id: Optional[str], collector_url: Optional[str], host: Optional[str],
               queue_timeout: Optional[int], storage_path: Optional[str], config_path: Optional[str]):
    """Update and save the configuration."""
    updates = {
        "conn_id": conn_id,
        "url": collector_url,
        "host": host,
        "queue_timeout_ms": queue_timeout,
        "storage_path": storage_path,
    }
    updates = {k: v for k, v in updates.items() if v is not None}
    if not updates:
        console.print("[yellow]Nothing to update[/yellow]")
        return

    manager = get_config_manager(config_path)
    manager.update(**updates)
    console.print(f"[green]✓ Saved {', '.join(sorted(updates))} to {manager.config_path}[/green]")


if __name__ == "__main__":
    cli()
