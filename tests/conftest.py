"""Shared fixtures: canned ws-tcg.com pages and a fake site."""

from typing import Dict, List, Optional

import httpx
import pytest

from ws_card_scraper.config import AppConfig, FetchConfig, SiteConfig
from ws_card_scraper.fetcher import Fetcher

BASE_URL = "https://ws-tcg.com"

DETAIL_TEMPLATE = """<html><body>
<table class="card-detail-table">
<tbody>
<tr><td class="graphic" rowspan="4"><img src="/wordpress/wp-content/images/cardlist/{slug}.png" alt=""></td><th>カード名</th><td>{name}<br><span class="kana">かな</span></td></tr>
<tr><th>カード番号</th><td>{number}</td></tr>
<tr><th>商品名</th><td>{set}</td></tr>
<tr><th>ネオスタンダード区分</th><td>バンドリ！</td></tr>
<tr><th>種類</th><td>キャラ</td><th>レアリティ</th><td>{rarity}</td></tr>
</tbody>
</table>
</body></html>"""


def detail_html(card_no: str, name: str = "戸山 香澄", rarity: str = "RR", set_name: str = "BanG Dream!") -> str:
    slug = card_no.lower().replace("/", "_")
    return DETAIL_TEMPLATE.format(slug=slug, name=name, number=card_no, set=set_name, rarity=rarity)


def listing_html(card_nos: List[str], pager: Optional[List[int]] = None) -> str:
    links = "\n".join(
        f'<a href="/cardlist/?cardno={no}&l"><span>{no}</span></a>' for no in card_nos
    )
    pager_links = "".join(
        f'<a href="/cardlist/search?page={p}">{p}</a>' for p in (pager or [])
    )
    return f"""<html><body>
<div class="search-result-table">{links}</div>
<p class="pager">{pager_links}</p>
</body></html>"""


class FakeSite:
    """Serves listing and detail pages and records which ones were requested."""

    def __init__(self, pages: Dict[int, str], default_page: Optional[str] = None) -> None:
        self.pages = pages
        self.default_page = default_page
        self.listing_requests: List[int] = []
        self.detail_requests: List[str] = []

    def listing(self, request: httpx.Request) -> httpx.Response:
        page = int(request.url.params.get("page", "1"))
        self.listing_requests.append(page)
        body = self.pages.get(page, self.default_page)
        if body is None:
            return httpx.Response(404)
        return httpx.Response(200, text=body)

    def detail(self, request: httpx.Request) -> httpx.Response:
        card_no = request.url.params["cardno"]
        self.detail_requests.append(card_no)
        return httpx.Response(200, text=detail_html(card_no))

    def install(self, respx_mock) -> None:
        respx_mock.route(method="GET", path="/cardlist/search").mock(side_effect=self.listing)
        respx_mock.route(method="GET", path="/cardlist/").mock(side_effect=self.detail)


class SleepRecorder:
    """Stand-in for asyncio.sleep that records requested delays."""

    def __init__(self) -> None:
        self.delays: List[float] = []

    async def __call__(self, delay: float) -> None:
        self.delays.append(delay)


@pytest.fixture
def sleeps():
    return SleepRecorder()


@pytest.fixture
def fetcher(sleeps):
    return Fetcher(FetchConfig(max_attempts=3), sleep=sleeps)


@pytest.fixture
def app_config(tmp_path):
    config = AppConfig(site=SiteConfig(base_url=BASE_URL))
    config.output.path = str(tmp_path / "cardData.xlsx")
    return config
