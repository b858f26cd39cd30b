"""CLI interface for the Weiss Schwarz card crawler."""

from __future__ import annotations

import argparse
import asyncio
import logging
import sys
from pathlib import Path
from typing import List, Optional

from rich.console import Console
from rich.logging import RichHandler
from rich.table import Table

from ws_card_scraper.config import AppConfig, load_config
from ws_card_scraper.crawler import Crawler
from ws_card_scraper.exporter import COLUMNS, CheckpointWriter
from ws_card_scraper.models import CardRecord, ExtractionError, FetchError

console = Console()

# -v count -> root log level
_LOG_LEVELS = [logging.WARNING, logging.INFO, logging.DEBUG]


def main(argv: Optional[List[str]] = None) -> None:
    """Run the ws-card-scraper command line."""
    parser = _build_parser()
    args = parser.parse_args(argv)
    _setup_logging(args.verbose)

    handler = getattr(args, "func", None)
    if handler is None:
        parser.print_help()
    else:
        handler(args)


def _setup_logging(verbosity: int) -> None:
    level = _LOG_LEVELS[min(verbosity, len(_LOG_LEVELS) - 1)]
    logging.basicConfig(
        level=level,
        format="%(message)s",
        datefmt="[%X]",
        handlers=[RichHandler(console=console, rich_tracebacks=True, show_path=level == logging.DEBUG)],
    )


def _build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="ws-card-scraper",
        description="Crawl the Weiss Schwarz card database (ws-tcg.com) into an .xlsx sheet",
    )
    parser.add_argument("-v", "--verbose", action="count", default=0,
                        help="Log progress (-v) or HTTP details (-vv)")
    parser.add_argument("-c", "--config", type=Path, default=None, metavar="PATH",
                        help="YAML config file (default: ./config.yaml if present)")

    subparsers = parser.add_subparsers(title="commands", dest="command")

    # crawl
    crawl_parser = subparsers.add_parser("crawl", help="Crawl every card and write the spreadsheet")
    crawl_parser.add_argument(
        "--last-page",
        type=int,
        default=None,
        help="Crawl listing pages 1..N instead of detecting the last page",
    )
    crawl_parser.add_argument(
        "--output",
        type=str,
        default=None,
        help="Spreadsheet path (default: ./cardData.xlsx)",
    )
    crawl_parser.add_argument(
        "--max-attempts",
        type=int,
        default=None,
        help="Attempts per URL before giving up",
    )
    crawl_parser.set_defaults(func=_cmd_crawl)

    # card
    card_parser = subparsers.add_parser("card", help="Fetch and show a single card")
    card_parser.add_argument("cardno", help="Card number, e.g. BD/W54-001")
    card_parser.set_defaults(func=_cmd_card)

    # columns
    columns_parser = subparsers.add_parser("columns", help="Show the spreadsheet column layout")
    columns_parser.set_defaults(func=_cmd_columns)

    # clean
    clean_parser = subparsers.add_parser("clean", help="Remove the output spreadsheet")
    clean_parser.set_defaults(func=_cmd_clean)

    return parser


def _load_app_config(args: argparse.Namespace) -> AppConfig:
    """Load config, applying CLI overrides."""
    return load_config(
        args.config,
        last_page=getattr(args, "last_page", None),
        output=getattr(args, "output", None),
        max_attempts=getattr(args, "max_attempts", None),
    )


# ------------------------------------------------------------------
# Command handlers
# ------------------------------------------------------------------


def _cmd_crawl(args: argparse.Namespace) -> None:
    config = _load_app_config(args)
    console.print(f"[bold]Crawling {config.site.listing_url}[/bold]")

    try:
        asyncio.run(_run_crawl(config))
    except (FetchError, ExtractionError) as exc:
        console.print(f"[red]Crawl aborted: {exc}[/red]")
        sys.exit(1)


async def _run_crawl(config: AppConfig) -> None:
    out = config.output
    writer = CheckpointWriter(out.path, sheet_name=out.sheet_name, every=out.checkpoint_every)
    crawler = Crawler(config)
    try:
        await crawler.crawl(on_record=writer.add)
    except (FetchError, ExtractionError):
        if writer.records:
            writer.close()
            console.print(
                f"[yellow]Saved {writer.written} cards extracted before the abort to {out.path}[/yellow]"
            )
        raise
    finally:
        await crawler.close()

    path = writer.close()
    console.print(f"\n[bold green]Done! {writer.written} cards saved to {path}[/bold green]")


def _cmd_card(args: argparse.Namespace) -> None:
    config = _load_app_config(args)
    try:
        record = asyncio.run(_fetch_one(config, args.cardno))
    except (FetchError, ExtractionError) as exc:
        console.print(f"[red]{exc}[/red]")
        sys.exit(1)

    table = Table(title=f"Card {record.card_no}")
    table.add_column("Field", style="cyan")
    table.add_column("Value", style="green")
    table.add_row("Img Src", record.image_url)
    table.add_row("Card Name (Japanese)", record.name_japanese)
    table.add_row("Set", record.set)
    table.add_row("Rarity", record.rarity)
    table.add_row("Card Number", record.card_number)
    console.print(table)


async def _fetch_one(config: AppConfig, card_no: str) -> CardRecord:
    crawler = Crawler(config)
    try:
        return await crawler.fetch_card(card_no)
    finally:
        await crawler.close()


def _cmd_columns(args: argparse.Namespace) -> None:
    filled = {"set", "rarity", "cardNameJapanese", "cardNumber", "imgSrc"}
    table = Table(title="Spreadsheet Columns")
    table.add_column("#", justify="right")
    table.add_column("Header", style="cyan")
    table.add_column("Key")
    table.add_column("Filled", justify="center")
    for i, (header, key) in enumerate(COLUMNS, start=1):
        table.add_row(str(i), header, key, "[green]yes[/green]" if key in filled else "")
    console.print(table)


def _cmd_clean(args: argparse.Namespace) -> None:
    config = _load_app_config(args)
    output = Path(config.output.path)

    if output.exists():
        output.unlink()
        console.print(f"Removed output file: {output}")
    else:
        console.print(f"Output file not found: {output}")

    console.print("[green]Clean complete[/green]")
