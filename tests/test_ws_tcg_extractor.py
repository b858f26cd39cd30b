"""Tests for the ws-tcg.com page extractor."""

import pytest

from conftest import detail_html, listing_html
from ws_card_scraper.extractors import CardPageExtractor, extract_record, get_extractor_class
from ws_card_scraper.models import ExtractionError
from ws_card_scraper.sites.ws_tcg import WsTcgExtractor


@pytest.fixture
def extractor():
    return WsTcgExtractor()


def test_extractor_satisfies_protocol(extractor):
    assert isinstance(extractor, CardPageExtractor)
    assert extractor.name == "ws-tcg"


def test_registry_returns_ws_tcg():
    assert get_extractor_class("ws-tcg") is WsTcgExtractor


def test_registry_unknown_name():
    with pytest.raises(ValueError, match="Unknown extractor"):
        get_extractor_class("yugioh")


def test_card_links_in_page_order(extractor):
    html = listing_html(["BD/W54-001", "BD/W54-002", "BD/W54-001"])
    assert extractor.card_links(html) == ["BD/W54-001", "BD/W54-002", "BD/W54-001"]


def test_card_links_ignores_other_anchors(extractor):
    html = """<html><body>
    <a href="/cardlist/search?page=2">2</a>
    <a href="/products/">products</a>
    <a href="https://ws-tcg.com/cardlist/?cardno=X">absolute</a>
    <a href="/cardlist/?cardno=">empty</a>
    <a href="/cardlist/?cardno=DC/W01-001">ok</a>
    </body></html>"""
    assert extractor.card_links(html) == ["DC/W01-001"]


def test_card_links_none(extractor):
    assert extractor.card_links(listing_html([])) == []


def test_last_page_from_pager(extractor):
    assert extractor.last_page(listing_html(["A"], pager=[2, 3, 1786])) == 1786


def test_last_page_missing_pager(extractor):
    assert extractor.last_page(listing_html(["A"])) is None


def test_extract_record_fields(extractor):
    html = detail_html("BD/W54-001", name="戸山 香澄", rarity="RR", set_name="BanG Dream!")
    record = extract_record(extractor, html, "BD/W54-001")
    assert record.card_no == "BD/W54-001"
    assert record.image_url == (
        "https://ws-tcg.com/wordpress/wp-content/images/cardlist/bd_w54-001.png"
    )
    assert record.name_japanese == "戸山 香澄"
    assert record.set == "BanG Dream!"
    assert record.rarity == "RR"
    assert record.card_number == "BD/W54-001"


def test_raw_markup_preserved(extractor):
    html = detail_html("BD/W54-001", set_name='<a href="/x">BanG Dream!</a><br/>Vol.2')
    page = extractor.parse(html)
    assert extractor.set_name(page, "BD/W54-001") == '<a href="/x">BanG Dream!</a><br/>Vol.2'


def test_name_excludes_nested_reading(extractor):
    page = extractor.parse(detail_html("BD/W54-001", name="  龍  "))
    assert extractor.name_japanese(page, "BD/W54-001") == "龍"


def test_absolute_image_src_kept():
    extractor = WsTcgExtractor(base_url="https://ws-tcg.com")
    html = detail_html("A-1").replace(
        "/wordpress/wp-content/images/cardlist/a-1.png", "https://cdn.example.com/a.png"
    )
    page = extractor.parse(html)
    assert extractor.image_url(page, "A-1") == "https://cdn.example.com/a.png"


def test_missing_table_raises(extractor):
    page = extractor.parse("<html><body><p>メンテナンス中</p></body></html>")
    with pytest.raises(ExtractionError) as exc_info:
        extractor.image_url(page, "BD/W54-001")
    assert exc_info.value.card_no == "BD/W54-001"
    assert exc_info.value.field == "image_url"


def test_missing_rarity_row_raises(extractor):
    html = detail_html("BD/W54-001").replace(
        "<tr><th>種類</th><td>キャラ</td><th>レアリティ</th><td>RR</td></tr>", ""
    )
    with pytest.raises(ExtractionError, match="rarity"):
        extract_record(extractor, html, "BD/W54-001")
