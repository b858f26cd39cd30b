"""Extractor for the Weiss Schwarz card database (ws-tcg.com)."""

from __future__ import annotations

import logging
from typing import List, Optional
from urllib.parse import parse_qs, urljoin, urlsplit

from bs4 import BeautifulSoup, NavigableString, Tag

from ws_card_scraper.models import ExtractionError

logger = logging.getLogger(__name__)

BASE_URL = "https://ws-tcg.com"
CARD_LINK_SELECTOR = 'a[href^="/cardlist/?cardno="]'
PAGER_LINK_SELECTOR = 'a[href*="page="]'

# Positions inside the detail page's card table
IMAGE_SELECTOR = "tbody tr:first-child td:first-child img"
NAME_SELECTOR = "tbody tr:first-child td:nth-child(3)"
SET_SELECTOR = "tbody tr:nth-child(3) td"
RARITY_SELECTOR = "tbody tr:nth-child(5) td:nth-child(4)"
CARD_NUMBER_SELECTOR = "tbody tr:nth-child(2) td"


class WsTcgExtractor:
    """Reads listing and detail pages of ws-tcg.com with BeautifulSoup."""

    def __init__(self, base_url: str = BASE_URL) -> None:
        self._base_url = base_url.rstrip("/") + "/"

    @property
    def name(self) -> str:
        return "ws-tcg"

    def card_links(self, html: str) -> List[str]:
        soup = BeautifulSoup(html, "html.parser")
        card_nos: List[str] = []
        for anchor in soup.select(CARD_LINK_SELECTOR):
            card_no = _query_param(anchor.get("href", ""), "cardno")
            if card_no:
                card_nos.append(card_no)
            else:
                logger.debug("Skipping card link without cardno: %s", anchor.get("href"))
        return card_nos

    def last_page(self, html: str) -> Optional[int]:
        soup = BeautifulSoup(html, "html.parser")
        pages = []
        for anchor in soup.select(PAGER_LINK_SELECTOR):
            value = _query_param(anchor.get("href", ""), "page")
            if value and value.isdigit():
                pages.append(int(value))
        return max(pages) if pages else None

    def parse(self, html: str) -> BeautifulSoup:
        return BeautifulSoup(html, "html.parser")

    def image_url(self, page: BeautifulSoup, card_no: str) -> str:
        img = page.select_one(IMAGE_SELECTOR)
        if img is None or not img.get("src"):
            raise ExtractionError(card_no, "image_url")
        return urljoin(self._base_url, img["src"])

    def name_japanese(self, page: BeautifulSoup, card_no: str) -> str:
        # Only the cell's own text; nested elements hold the kana reading
        cell = _require(page, NAME_SELECTOR, card_no, "name_japanese")
        return "".join(
            str(child) for child in cell.children if type(child) is NavigableString
        ).strip()

    def set_name(self, page: BeautifulSoup, card_no: str) -> str:
        return _require(page, SET_SELECTOR, card_no, "set").decode_contents()

    def rarity(self, page: BeautifulSoup, card_no: str) -> str:
        return _require(page, RARITY_SELECTOR, card_no, "rarity").get_text()

    def card_number(self, page: BeautifulSoup, card_no: str) -> str:
        return _require(page, CARD_NUMBER_SELECTOR, card_no, "card_number").decode_contents()


def _require(page: BeautifulSoup, selector: str, card_no: str, field: str) -> Tag:
    element = page.select_one(selector)
    if element is None:
        raise ExtractionError(card_no, field)
    return element


def _query_param(href: str, key: str) -> Optional[str]:
    values = parse_qs(urlsplit(href).query).get(key)
    return values[0] if values else None
