"""
CLI interface for Usage Rollup.

Provides terminal access to windowed usage statistics.
"""

import json
import logging
import sys
from pathlib import Path
from typing import Optional

import typer
from rich.console import Console
from rich.logging import RichHandler
from rich.markup import escape
from rich.table import Table

from usage_rollup.config.loader import load_stats_config
from usage_rollup.core.parser import LoadStatus
from usage_rollup.core.window import AggregatedStats, get_window_stats, inspect_window
from usage_rollup.demo.seed_demo_data import seed_demo_logs
from usage_rollup.storage.log_store import LogStore

app = typer.Typer()
console = Console()
err_console = Console(stderr=True)

EXIT_CODE_PASS = 0
EXIT_CODE_FAIL = 1

TIER_ORDER = ["SIMPLE", "MEDIUM", "COMPLEX", "REASONING"]
TOP_MODELS = 5
RECENT_DAYS_SHOWN = 7

_STATUS_STYLES = {
    LoadStatus.OK: "green",
    LoadStatus.EMPTY: "dim",
    LoadStatus.ABSENT: "dim",
    LoadStatus.UNREADABLE: "red",
    LoadStatus.MALFORMED: "yellow",
}


def _configure_logging(verbose: bool) -> None:
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.WARNING,
        format="%(message)s",
        handlers=[RichHandler(console=err_console, show_path=False)],
        force=True
    )


@app.callback(invoke_without_command=True)
def main(
    ctx: typer.Context,
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Enable debug logging")
):
    """Usage Rollup CLI."""
    _configure_logging(verbose)
    if ctx.invoked_subcommand is None:
        console.print("Usage Rollup - Use --help to see available commands")


def _build_store(log_dir: Optional[str], config_path: Optional[str]):
    config = load_stats_config(config_path)
    if log_dir:
        return config, LogStore(Path(log_dir).expanduser())
    return config, LogStore(config.log_path)


@app.command()
def stats(
    days: Optional[int] = typer.Option(
        None,
        "--days",
        "-d",
        help="Number of most recent days to include (default from config)"
    ),
    log_dir: Optional[str] = typer.Option(
        None,
        "--log-dir",
        "-l",
        help="Directory containing usage-YYYY-MM-DD.jsonl files"
    ),
    config_path: Optional[str] = typer.Option(
        None,
        "--config",
        "-c",
        help="Path to YAML configuration file"
    ),
    as_json: bool = typer.Option(
        False,
        "--json",
        help="Print the raw statistics as JSON"
    ),
    workers: Optional[int] = typer.Option(
        None,
        "--workers",
        "-w",
        min=1,
        help="Number of days to process in parallel"
    )
):
    """Show aggregated usage statistics for the most recent days."""
    try:
        config, store = _build_store(log_dir, config_path)
        window = config.default_days if days is None else days
        result = get_window_stats(window, store=store, config=config, max_workers=workers)
    except Exception as e:
        console.print(f"[red]Error:[/] {escape(str(e))}")
        sys.exit(EXIT_CODE_FAIL)

    if as_json:
        typer.echo(json.dumps(result.to_dict(), indent=2))
    else:
        _display_stats(result)
    sys.exit(EXIT_CODE_PASS)


@app.command()
def inspect(
    days: Optional[int] = typer.Option(None, "--days", "-d", help="Number of most recent days to check"),
    log_dir: Optional[str] = typer.Option(None, "--log-dir", "-l", help="Log directory"),
    config_path: Optional[str] = typer.Option(None, "--config", "-c", help="Path to YAML configuration file")
):
    """Show how each day's log file loaded (ok, empty, absent, unreadable, malformed)."""
    try:
        config, store = _build_store(log_dir, config_path)
        loads = inspect_window(config.default_days if days is None else days, store)
    except Exception as e:
        console.print(f"[red]Error:[/] {escape(str(e))}")
        sys.exit(EXIT_CODE_FAIL)

    if not loads:
        console.print(f"[dim]No usage logs found in {store.log_dir}[/]")
        sys.exit(EXIT_CODE_PASS)

    table = Table(title=f"Log units in {store.log_dir}")
    table.add_column("Day", no_wrap=True)
    table.add_column("Status", no_wrap=True)
    table.add_column("Events", justify="right")
    table.add_column("Detail")
    for load in loads:
        style = _STATUS_STYLES[load.status]
        table.add_row(load.day, f"[{style}]{load.status.value}[/]", str(len(load.events)), escape(load.detail))
    console.print(table)
    sys.exit(EXIT_CODE_PASS)


@app.command("seed-demo")
def seed_demo(
    log_dir: str = typer.Argument(..., help="Directory to write demo log files into"),
    days: int = typer.Option(3, "--days", "-d", min=1, help="Number of days to generate")
):
    """Write demo usage logs for trying out the other commands."""
    try:
        count = seed_demo_logs(Path(log_dir).expanduser(), days=days)
    except OSError as e:
        console.print(f"[red]Error writing demo data:[/] {escape(str(e))}")
        sys.exit(EXIT_CODE_FAIL)
    console.print(f"[green]✓[/] Wrote {count} demo events to {log_dir}")
    sys.exit(EXIT_CODE_PASS)


def _format_currency(amount: float) -> str:
    """Format currency with sign and four decimals."""
    sign = "-" if amount < 0 else ""
    return f"{sign}${abs(amount):,.4f}"


def _short_model(model: str) -> str:
    return model if len(model) <= 25 else model[:22] + "..."


def _display_stats(result: AggregatedStats) -> None:
    """Display window statistics as summary lines and tables."""
    console.print(f"\n[bold]Usage Statistics[/bold] ({result.period})")
    console.print("-" * 40)
    console.print(f"Total requests: {result.total_requests:,}")
    console.print(f"Total cost: {_format_currency(result.total_cost)}")
    console.print(f"Baseline cost: {_format_currency(result.total_baseline_cost)}")
    console.print(
        f"Total saved: {_format_currency(result.total_savings)} "
        f"({result.savings_percentage:.1f}%)"
    )
    console.print(f"Avg latency: {result.avg_latency_ms:.0f}ms")
    console.print(f"Cost per 1K requests: {_format_currency(result.avg_cost_per_request * 1000)}")

    console.print("\n[bold]Routing by tier[/bold]")
    if result.by_tier:
        tiers = [t for t in TIER_ORDER if t in result.by_tier]
        tiers += sorted(t for t in result.by_tier if t not in TIER_ORDER)
        table = Table()
        table.add_column("Tier")
        table.add_column("Share")
        table.add_column("%", justify="right")
        table.add_column("Requests", justify="right")
        for tier in tiers:
            share = result.by_tier[tier]
            bar = "█" * min(20, round(share.percentage / 5))
            table.add_row(escape(tier), bar, f"{share.percentage:.1f}", str(share.count))
        console.print(table)
    else:
        console.print("[dim]No requests recorded.[/]")

    console.print("\n[bold]Top models[/bold]")
    if result.by_model:
        top = sorted(result.by_model.items(), key=lambda item: item[1].count, reverse=True)
        table = Table()
        table.add_column("Model")
        table.add_column("Requests", justify="right")
        table.add_column("Cost", justify="right")
        for model, share in top[:TOP_MODELS]:
            table.add_row(escape(_short_model(model)), str(share.count), _format_currency(share.cost))
        console.print(table)
    else:
        console.print("[dim]No requests recorded.[/]")

    if result.daily_breakdown:
        console.print("\n[bold]Daily breakdown[/bold]")
        table = Table()
        table.add_column("Date", no_wrap=True)
        table.add_column("Requests", justify="right")
        table.add_column("Cost", justify="right")
        table.add_column("Saved", justify="right")
        for day in result.daily_breakdown[-RECENT_DAYS_SHOWN:]:
            table.add_row(
                day.date,
                str(day.total_requests),
                _format_currency(day.total_cost),
                _format_currency(day.total_savings)
            )
        console.print(table)


if __name__ == "__main__":
    app()
