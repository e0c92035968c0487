"""CLI entry point: run the sourcing pipeline, search and delete stored leads."""

from __future__ import annotations

import asyncio
import logging
import sys
from pathlib import Path

import click
import duckdb
from rich.console import Console
from rich.logging import RichHandler
from rich.table import Table

from lead_sourcing.config import DEFAULT_SOURCES, load_config, parse_csv_list, parse_postcode_ranges
from lead_sourcing.eligibility import EligibilityPolicy
from lead_sourcing.enrich.abr_client import ABRClient
from lead_sourcing.models import DeleteFilters
from lead_sourcing.pipeline import PipelineResult, SourcingPipeline, default_export_path
from lead_sourcing.sources import SourceContext, build_sources
from lead_sourcing.storage.store import LeadStore

console = Console(force_terminal=True)
logger = logging.getLogger(__name__)


def _setup_logging(debug: bool) -> None:
    logging.basicConfig(
        level=logging.DEBUG if debug else logging.INFO,
        format="%(message)s",
        handlers=[RichHandler(console=console, show_path=False, show_time=False)],
    )
    # httpx logs every request at INFO
    logging.getLogger("httpx").setLevel(logging.WARNING)


def _open_store(db_path: str) -> LeadStore:
    try:
        return LeadStore.open(db_path)
    except duckdb.Error as e:
        console.print(f"[red]Could not open database {db_path}: {e}[/red]")
        sys.exit(1)


@click.group()
def cli() -> None:
    """Business lead sourcing with ABR enrichment."""


@cli.command()
@click.option("--age", "min_age", default=15, show_default=True, help="Minimum business age in years")
@click.option("--states", default="", help="State allow-list, comma-separated (e.g. VIC,NSW)")
@click.option("--postcodes", default="", help="Postcode ranges, comma-separated (e.g. 3000-3999)")
@click.option("--sources", "sources_raw", default=",".join(DEFAULT_SOURCES), show_default=True,
              help="Sources to run, comma-separated")
@click.option("--keywords", default="", help="ABR search keywords, comma-separated")
@click.option("--csv", "csv_path", default="", help="CSV file for the 'csv' source")
@click.option("--outdir", default=None, help="Output directory for the CSV export (default: out)")
@click.option("--db", "db_path", default=None, help="Path to DuckDB file (default: out/sourcing.duckdb)")
@click.option("--debug", is_flag=True, help="Enable debug logging, including skip reasons")
@click.option("--export-only", is_flag=True, help="Only export existing data, skip sourcing")
def run(
    min_age: int,
    states: str,
    postcodes: str,
    sources_raw: str,
    keywords: str,
    csv_path: str,
    outdir: str | None,
    db_path: str | None,
    debug: bool,
    export_only: bool,
) -> None:
    """Fetch leads from all sources, enrich, filter, store and export them.

    Example: lead-sourcing run --sources rto,abr --keywords "CNC Machining" --states VIC
    """
    _setup_logging(debug)

    # Export-only never talks to the registry, so it does not need ABR_GUID
    config = load_config(require_guid=not export_only)

    config.min_age = min_age
    config.states = parse_csv_list(states, upper=True)
    try:
        config.postcode_ranges = parse_postcode_ranges(postcodes)
    except ValueError as e:
        console.print(f"[red]Invalid --postcodes: {e}[/red]")
        sys.exit(1)
    config.sources = parse_csv_list(sources_raw) or list(DEFAULT_SOURCES)
    if keywords:
        config.keywords = parse_csv_list(keywords)
    if csv_path:
        config.csv_path = csv_path
    if outdir:
        config.out_dir = outdir
    if db_path:
        config.db_path = db_path

    try:
        Path(config.out_dir).mkdir(parents=True, exist_ok=True)
    except OSError as e:
        console.print(f"[red]Failed to create output directory: {e}[/red]")
        sys.exit(1)

    out_path = default_export_path(config.out_dir, config.sources, config.states, config.min_age)
    export_sources = [s.upper() for s in config.sources]
    policy = EligibilityPolicy(
        min_age=config.min_age,
        states=config.states,
        postcode_ranges=config.postcode_ranges,
    )

    store = _open_store(config.db_path)
    try:
        if export_only:
            logger.info("Export-only mode, exporting existing data")
            try:
                count = store.export_csv(out_path, config.min_age, config.states, export_sources)
            except (duckdb.Error, OSError) as e:
                console.print(f"[red]Export failed: {e}[/red]")
                sys.exit(1)
            console.print(f"[bold]Exported {count} leads to {out_path}[/bold]")
            return

        registry = ABRClient(
            config.abr_guid,
            min_interval=config.enrich_delay,
            timeout=config.http_timeout,
        )
        sources = build_sources(config.sources, SourceContext(config=config, registry=registry))
        console.print(f"\n[bold green]Running {len(sources)} sources[/bold green]: "
                      f"{', '.join(s.name for s in sources)}\n")

        pipeline = SourcingPipeline(
            sources,
            registry,
            store,
            policy,
            source_timeout=config.source_timeout,
        )

        async def _run() -> PipelineResult:
            try:
                return await pipeline.run(out_path, export_sources)
            finally:
                await registry.close()

        result = asyncio.run(_run())
    finally:
        store.close()

    _print_summary(result)


def _print_summary(result: PipelineResult) -> None:
    table = Table(title="Run summary", show_header=False)
    for name, value in result.stats.as_dict().items():
        style = "red" if name == "error" and value else ""
        table.add_row(name, f"[{style}]{value}[/{style}]" if style else str(value))
    console.print(table)
    if result.export_error:
        console.print(f"[red]Export failed: {result.export_error}[/red]")
    elif result.export_path:
        console.print(f"[bold]Exported {result.exported} leads to {result.export_path}[/bold]")


@cli.command()
@click.option("--db", "db_path", default="out/sourcing.duckdb", show_default=True, help="Path to DuckDB file")
@click.option("--name", default="", help="Name contains (case-insensitive)")
@click.option("--states", default="", help="State allow-list, comma-separated")
@click.option("--age", "min_age", default=0, help="Minimum business age in years")
@click.option("--out", "out_path", default="out/search_results.csv", show_default=True, help="Output CSV path")
def search(db_path: str, name: str, states: str, min_age: int, out_path: str) -> None:
    """Search stored leads and write the matches to CSV."""
    _setup_logging(False)
    store = _open_store(db_path)
    try:
        Path(out_path).parent.mkdir(parents=True, exist_ok=True)
        count = store.search_csv(
            out_path,
            name=name or None,
            states=parse_csv_list(states, upper=True),
            min_age=min_age,
        )
    except (duckdb.Error, OSError) as e:
        console.print(f"[red]Search failed: {e}[/red]")
        sys.exit(1)
    finally:
        store.close()
    console.print(f"Search complete: {count} leads written to {out_path}")


@cli.command()
@click.option("--name", default=None, help="Lead name to delete (exact, case-insensitive)")
@click.option("--abn", default=None, help="Lead ABN to delete")
@click.option("--age", type=int, default=None, help="Delete leads whose age in whole years equals this")
@click.option("--source", default=None, help="Delete leads whose sources contain this text")
@click.option("--db", "db_path", default="out/sourcing.duckdb", show_default=True, help="Path to DuckDB file")
@click.option("--yes", "-y", "assume_yes", is_flag=True, help="Skip the confirmation prompt")
def delete(
    name: str | None,
    abn: str | None,
    age: int | None,
    source: str | None,
    db_path: str,
    assume_yes: bool,
) -> None:
    """Delete stored leads matching all given filters."""
    _setup_logging(False)
    filters = DeleteFilters(name=name, abn=abn, age=age, source=source)
    active = filters.active()
    if not active:
        console.print("[red]Error: at least one filter is required (--name, --abn, --age or --source)[/red]")
        sys.exit(1)

    console.print("\nDelete with filters:")
    for key, value in active.items():
        console.print(f"  {key}: {value}")
    if not assume_yes and not click.confirm("\nAre you sure?", default=False):
        console.print("Cancelled.")
        return

    store = _open_store(db_path)
    try:
        deleted = store.delete(filters)
    except duckdb.Error as e:
        console.print(f"[red]Delete failed: {e}[/red]")
        sys.exit(1)
    finally:
        store.close()

    if deleted == 0:
        console.print("[yellow]No records matched the filters[/yellow]")
    else:
        console.print(f"[green]Deleted {deleted} leads[/green]")


if __name__ == "__main__":
    cli()
