"""CLI entry point for sitewatch."""

from __future__ import annotations

import logging
import sys
from pathlib import Path

import click
from rich.console import Console
from rich.logging import RichHandler
from rich.markup import escape
from rich.table import Table

from sitewatch.errors import ConfigError
from sitewatch.history.recorder import RunRecorder
from sitewatch.models.config import MonitorConfig, SiteSpec
from sitewatch.orchestrator import Orchestrator

console = Console()
logger = logging.getLogger("sitewatch")

EXIT_RUN_FAILED = 1
EXIT_CONFIG_ERROR = 2


def setup_logging(verbose: bool = False) -> None:
    level = logging.DEBUG if verbose else logging.INFO
    logging.basicConfig(
        level=level,
        format="%(message)s",
        datefmt="[%X]",
        handlers=[RichHandler(console=console, rich_tracebacks=True)],
    )


def _status_markup(status: str) -> str:
    return "[green]OK[/green]" if status == "OK" else "[red]FAIL[/red]"


@click.group()
@click.option("--verbose", "-v", is_flag=True, help="Enable debug logging")
def cli(verbose: bool) -> None:
    """Scheduled website screenshot monitor"""
    setup_logging(verbose)


@cli.command()
@click.option("--config", "-c", default="sites.json", help="Config file path")
@click.option("--root", "-r", default=".", type=click.Path(file_okay=False),
              help="Project root; history is written to <root>/reports")
def run(config: str, root: str) -> None:
    """Capture every configured site once and record the run."""
    try:
        cfg = MonitorConfig.load(config)
        orchestrator = Orchestrator(cfg, root=root)
    except ConfigError as e:
        console.print(f"[red]{e}[/red]")
        console.print("Run 'sitewatch init' to create a default config.")
        sys.exit(EXIT_CONFIG_ERROR)

    try:
        result = orchestrator.run()
    except Exception:
        logger.exception("Run aborted")
        sys.exit(EXIT_RUN_FAILED)

    table = Table(title=f"Run {result.id}")
    table.add_column("#", justify="right")
    table.add_column("Site", style="bold", no_wrap=True)
    table.add_column("Status")
    table.add_column("HTTP")
    table.add_column("Time")
    table.add_column("Error", overflow="fold")
    for i, item in enumerate(result.items, 1):
        table.add_row(
            str(i),
            escape(item.name),
            _status_markup(item.status),
            str(item.http_status) if item.http_status is not None else "-",
            f"{item.duration_ms / 1000:.1f}s",
            escape(item.error or ""),
        )
    console.print(table)
    console.print(
        f"Overall: {_status_markup(result.overall)} "
        f"({result.failed}/{result.total} failed, {result.duration_ms / 1000:.1f}s)"
    )

    if result.overall == "FAIL":
        sys.exit(EXIT_RUN_FAILED)


@cli.command()
@click.option("--url", "-u", "urls", multiple=True, help="Site URL to monitor (repeatable)")
@click.option("--config", "-c", default="sites.json", help="Config file path")
def init(urls: tuple[str, ...], config: str) -> None:
    """Create a default configuration file."""
    config_path = Path(config)
    if config_path.exists():
        if not click.confirm(f"{config_path} already exists. Overwrite?"):
            return

    if not urls:
        urls = (click.prompt("Site URL"),)
    cfg = MonitorConfig(sites=[SiteSpec(url=u) for u in urls])
    cfg.save(config_path)
    console.print(f"[green]Created {config_path}[/green]")
    console.print("\nAdd names, readySelector or waitUntil per site, then run:")
    console.print("  [blue]sitewatch run[/blue]")


@cli.command()
@click.option("--root", "-r", default=".", type=click.Path(file_okay=False),
              help="Project root containing reports/")
@click.option("--limit", "-n", default=20, show_default=True, help="Runs to show")
@click.option("--failed", "only_failed", is_flag=True, help="Only show failed runs")
def history(root: str, limit: int, only_failed: bool) -> None:
    """List recorded runs, newest first."""
    recorder = RunRecorder(Path(root))
    runs = recorder.load_index().runs
    if only_failed:
        runs = [r for r in runs if r.overall == "FAIL"]
    if not runs:
        console.print("[yellow]No runs recorded[/yellow]")
        return

    table = Table(title="Run history")
    table.add_column("Run ID", style="bold", no_wrap=True)
    table.add_column("Result")
    table.add_column("Failed", justify="right")
    table.add_column("Started")
    table.add_column("Duration", justify="right")
    for entry in runs[:limit]:
        table.add_row(
            entry.id,
            _status_markup(entry.overall),
            f"{entry.failed}/{entry.total}",
            entry.started_at,
            f"{entry.duration_ms / 1000:.0f}s",
        )
    console.print(table)


@cli.command()
@click.argument("run_id", required=False)
@click.option("--root", "-r", default=".", type=click.Path(file_okay=False),
              help="Project root containing reports/")
def show(run_id: str | None, root: str) -> None:
    """Show per-site results of a run (latest when RUN_ID is omitted)."""
    recorder = RunRecorder(Path(root))
    runs = recorder.load_index().runs
    entry = next((r for r in runs if run_id in (None, r.id)), None)
    if entry is None:
        console.print(f"[red]Run not found: {run_id or '(no runs recorded)'}[/red]")
        sys.exit(1)

    record = recorder.load_run(entry)
    if record is None:
        console.print(f"[red]Run record missing: {entry.run_record_path}[/red]")
        sys.exit(1)

    console.print(
        f"[bold]{record.id}[/bold] {_status_markup(record.overall)} "
        f"started {record.started_at}, finished {record.finished_at}"
    )
    for item in record.items:
        line = f"  {_status_markup(item.status)} {escape(item.name)} ({item.url}) -> {item.screenshot_path}"
        if item.error:
            line += f"\n      [dim]{escape(item.error)}[/dim]"
        console.print(line)


if __name__ == "__main__":
    cli()
