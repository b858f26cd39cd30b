"""Data models for crawled cards and crawl failures."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Optional


@dataclass(frozen=True)
class CardRecord:
    """One card as extracted from its detail page.

    ``set`` and ``card_number`` hold the raw inner markup of their table
    cells; they are kept verbatim for later manual cleanup.
    """

    card_no: str  # Identifier from the listing link, e.g. "BD/W54-001"
    image_url: str
    name_japanese: str
    set: str
    rarity: str
    card_number: str


class FetchError(Exception):
    """A URL could not be fetched within the allowed number of attempts."""

    def __init__(
        self,
        url: str,
        attempts: int,
        status_code: Optional[int] = None,
        error: Optional[str] = None,
    ) -> None:
        self.url = url
        self.attempts = attempts
        self.status_code = status_code
        self.error = error
        reason = error if error else f"status {status_code}"
        super().__init__(f"Failed to fetch {url} after {attempts} attempts: {reason}")


class PageNotFoundError(FetchError):
    """A URL answered 404 where a missing page is expected, e.g. past the last listing page."""

    def __init__(self, url: str, attempts: int) -> None:
        super().__init__(url, attempts, status_code=404)


class ExtractionError(Exception):
    """A detail page is missing an element needed for a field."""

    def __init__(self, card_no: str, field: str) -> None:
        self.card_no = card_no
        self.field = field
        super().__init__(f"Card {card_no}: could not extract '{field}' from detail page")
