"""Crawl orchestrator: paginates listings, dedupes cards, extracts detail pages."""

from __future__ import annotations

import logging
from typing import Callable, List, Optional, Set
from urllib.parse import urlencode

from rich.console import Console
from rich.progress import (
    BarColumn,
    MofNCompleteColumn,
    Progress,
    SpinnerColumn,
    TextColumn,
    TimeElapsedColumn,
)

from ws_card_scraper.config import AppConfig
from ws_card_scraper.extractors import CardPageExtractor, extract_record, get_extractor_class
from ws_card_scraper.fetcher import Fetcher
from ws_card_scraper.models import CardRecord, PageNotFoundError

logger = logging.getLogger(__name__)
console = Console()


class Crawler:
    """Walks the listing pages in order and extracts every unique card once.

    Pages are read strictly one after another.  When ``site.last_page`` is
    set, pages 1..last_page are crawled.  Otherwise the upper bound comes
    from the listing pager and the crawl also stops after
    ``site.max_empty_pages`` consecutive pages without a new card, or at
    the first listing page that answers 404.
    """

    def __init__(
        self,
        config: AppConfig,
        fetcher: Optional[Fetcher] = None,
        extractor: Optional[CardPageExtractor] = None,
    ) -> None:
        self._config = config
        self._site = config.site
        self._fetcher = fetcher or Fetcher(config.fetch, rate_limit_ms=config.site.rate_limit_ms)
        if extractor is None:
            cls = get_extractor_class(self._site.extractor)
            extractor = cls(base_url=self._site.base_url)
        self._extractor = extractor

    def listing_page_url(self, page: int) -> str:
        if page == 1:
            return self._site.listing_url
        return f"{self._site.listing_url}?page={page}"

    def detail_page_url(self, card_no: str) -> str:
        return f"{self._site.detail_url}?{urlencode({'cardno': card_no}, safe='/')}"

    async def fetch_card(self, card_no: str) -> CardRecord:
        """Fetch one detail page and extract its record."""
        body = await self._fetcher.fetch(self.detail_page_url(card_no))
        return extract_record(self._extractor, body, card_no)

    async def crawl(
        self, on_record: Optional[Callable[[CardRecord], None]] = None
    ) -> List[CardRecord]:
        """Return one record per unique card, in first-discovery order.

        ``on_record`` is called with each record as soon as it is extracted.
        """
        visited: Set[str] = set()
        records: List[CardRecord] = []
        fixed_bound = self._site.last_page
        bound = fixed_bound
        empty_streak = 0
        pages_read = 0
        page = 1

        with Progress(
            SpinnerColumn(),
            TextColumn("[progress.description]{task.description}"),
            BarColumn(),
            MofNCompleteColumn(),
            TimeElapsedColumn(),
            console=console,
        ) as progress:
            task = progress.add_task("Listing pages", total=bound)

            while bound is None or page <= bound:
                try:
                    body = await self._fetcher.fetch(
                        self.listing_page_url(page),
                        not_found_ok=fixed_bound is None and page > 1,
                    )
                except PageNotFoundError:
                    logger.info("Page %d not found, treating page %d as the last", page, page - 1)
                    break
                links = self._extractor.card_links(body)

                new_cards = 0
                for card_no in links:
                    if card_no in visited:
                        continue
                    visited.add(card_no)
                    record = await self.fetch_card(card_no)
                    records.append(record)
                    new_cards += 1
                    if on_record is not None:
                        on_record(record)

                logger.info(
                    "Page %d: %d links, %d new cards (%d total)",
                    page, len(links), new_cards, len(records),
                )
                pages_read += 1
                progress.advance(task)

                if fixed_bound is None:
                    detected = self._extractor.last_page(body)
                    if detected is not None and (bound is None or detected > bound):
                        logger.debug("Pager reports last page %d", detected)
                        bound = detected
                        progress.update(task, total=bound)

                    empty_streak = empty_streak + 1 if new_cards == 0 else 0
                    if empty_streak >= self._site.max_empty_pages:
                        logger.info(
                            "Stopping after %d consecutive pages without new cards (page %d)",
                            empty_streak, page,
                        )
                        break

                page += 1

        console.print(f"Crawled {pages_read} pages, {len(records)} unique cards")
        return records

    async def close(self) -> None:
        await self._fetcher.close()
