# goldwatch/cli/runner.py

"""Headless command implementations; each returns a process exit code."""

import logging
from pathlib import Path

from rich.console import Console
from rich.table import Table

from goldwatch.errors import GoldWatchError
from goldwatch.models.price_record import format_vnd, parse_price
from goldwatch.scrapers.gold_price_scraper import GoldPriceScraper
from goldwatch.services.notification_policy import NotificationKind
from goldwatch.services.notifier import DryRunNotifier, TelegramNotifier
from goldwatch.services.run_orchestrator import Notifier, RunOrchestrator
from goldwatch.storage.chart_exporter import export_price_chart
from goldwatch.storage.history_store import HistoryStore
from goldwatch.storage.state_store import StateStore

logger = logging.getLogger("goldwatch.cli")

# Stderr console so cron output stays readable
_err = Console(stderr=True)


def run_poll(dry_run: bool = False) -> int:
    """Run one poll (fetch, decide, notify, persist).

    A dry run prints instead of sending and leaves the state and history
    files untouched.
    """
    try:
        notifier: Notifier = (
            DryRunNotifier(console=_err) if dry_run else TelegramNotifier()
        )
        orchestrator = RunOrchestrator(
            scraper=GoldPriceScraper(),
            notifier=notifier,
            state_store=StateStore(),
            history_store=HistoryStore(),
            persist=not dry_run,
        )
        result = orchestrator.run()
    except GoldWatchError as exc:
        logger.error("Run failed: %s", exc, exc_info=True)
        _err.print(f"[red]❌ {type(exc).__name__}: {exc}[/red]")
        return 1

    if result.decision.kind is NotificationKind.NONE:
        _err.print(
            f"[dim]No change ({result.quote.buy} / {result.quote.sell})[/dim]"
        )
    else:
        chart = " + chart" if result.chart_sent else ""
        _err.print(
            f"[green]✓ Sent {result.decision.kind.value}{chart}[/green]"
        )
    return 0


def run_check() -> int:
    """Fetch and display the current price without touching state."""
    try:
        quote = GoldPriceScraper().fetch_price()
    except GoldWatchError as exc:
        logger.error("Price check failed: %s", exc, exc_info=True)
        _err.print(f"[red]❌ {exc}[/red]")
        return 1

    table = Table(title="Giá vàng hiện tại", title_style="bold cyan")
    table.add_column("", style="bold")
    table.add_column("Raw", justify="right")
    table.add_column("Parsed (VND)", justify="right", style="green")
    for name, raw in (("Mua", quote.buy), ("Bán", quote.sell)):
        try:
            parsed = format_vnd(parse_price(raw))
        except GoldWatchError:
            parsed = "N/A"
        table.add_row(name, raw, parsed)
    Console().print(table)
    return 0


def run_export_chart(output: str) -> int:
    """Render the stored history window to a PNG file."""
    history = HistoryStore().load()
    path = export_price_chart(history, Path(output))
    if path is None:
        _err.print(
            f"[yellow]Not enough valid history to draw a chart "
            f"({len(history)} records).[/yellow]"
        )
        return 1
    _err.print(f"[green]✓ Chart saved → {path}[/green]")
    return 0
