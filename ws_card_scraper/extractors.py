"""Base protocol for page extractors and extractor registry."""

from __future__ import annotations

import importlib
from typing import Any, Dict, List, Optional, Protocol, Type, runtime_checkable

from ws_card_scraper.models import CardRecord


@runtime_checkable
class CardPageExtractor(Protocol):
    """Protocol that all site extractors must satisfy.

    An extractor knows the markup of one card database: where listing
    pages link to detail pages, how the pager is laid out, and where each
    field sits on a detail page.  Field operations take the parsed page
    returned by ``parse`` and raise ExtractionError when their element is
    missing.
    """

    @property
    def name(self) -> str:
        """Registry name, used in config and logs."""
        ...

    def card_links(self, html: str) -> List[str]:
        """Return card identifiers linked from a listing page, in page order."""
        ...

    def last_page(self, html: str) -> Optional[int]:
        """Return the highest page number linked from a listing page's pager."""
        ...

    def parse(self, html: str) -> Any:
        """Parse a detail page once for the field operations."""
        ...

    def image_url(self, page: Any, card_no: str) -> str:
        ...

    def name_japanese(self, page: Any, card_no: str) -> str:
        ...

    def set_name(self, page: Any, card_no: str) -> str:
        ...

    def rarity(self, page: Any, card_no: str) -> str:
        ...

    def card_number(self, page: Any, card_no: str) -> str:
        ...


def extract_record(extractor: CardPageExtractor, html: str, card_no: str) -> CardRecord:
    """Run every field operation of an extractor over one detail page."""
    page = extractor.parse(html)
    return CardRecord(
        card_no=card_no,
        image_url=extractor.image_url(page, card_no),
        name_japanese=extractor.name_japanese(page, card_no),
        set=extractor.set_name(page, card_no),
        rarity=extractor.rarity(page, card_no),
        card_number=extractor.card_number(page, card_no),
    )


# extractor name -> qualified class name
_EXTRACTOR_REGISTRY: Dict[str, str] = {
    "ws-tcg": "ws_card_scraper.sites.ws_tcg.WsTcgExtractor",
}


def get_extractor_class(name: str) -> Type[CardPageExtractor]:
    """Import and return the extractor class registered under a name."""
    qualified = _EXTRACTOR_REGISTRY.get(name)
    if qualified is None:
        raise ValueError(
            f"Unknown extractor '{name}'. Available: {list(_EXTRACTOR_REGISTRY.keys())}"
        )
    module_path, class_name = qualified.rsplit(".", 1)
    module = importlib.import_module(module_path)
    return getattr(module, class_name)


def known_extractors() -> set[str]:
    """Return the set of registered extractor names."""
    return set(_EXTRACTOR_REGISTRY.keys())
