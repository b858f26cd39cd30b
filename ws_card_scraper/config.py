"""YAML configuration loader and validation."""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict, Optional

import yaml

from ws_card_scraper.extractors import known_extractors

logger = logging.getLogger(__name__)

DEFAULT_CONFIG_PATH = Path("config.yaml")


@dataclass
class SiteConfig:
    """Target site endpoints and pagination settings."""

    base_url: str = "https://ws-tcg.com"
    listing_path: str = "/cardlist/search"
    detail_path: str = "/cardlist/"
    extractor: str = "ws-tcg"
    last_page: Optional[int] = None  # None = detect from the listing pager
    max_empty_pages: int = 3
    rate_limit_ms: int = 0

    @property
    def listing_url(self) -> str:
        return self.base_url.rstrip("/") + self.listing_path

    @property
    def detail_url(self) -> str:
        return self.base_url.rstrip("/") + self.detail_path


@dataclass
class FetchConfig:
    """Retry and timeout settings for HTTP fetches."""

    max_attempts: int = 10
    initial_delay: float = 1.0  # seconds before the first retry
    delay_step: float = 1.0  # added to the delay on every further retry
    timeout: float = 30.0


@dataclass
class OutputConfig:
    """Spreadsheet output settings."""

    path: str = "./cardData.xlsx"
    sheet_name: str = "Card Data"
    checkpoint_every: int = 50  # 0 disables intermediate writes


@dataclass
class AppConfig:
    """Top-level application configuration."""

    site: SiteConfig = field(default_factory=SiteConfig)
    fetch: FetchConfig = field(default_factory=FetchConfig)
    output: OutputConfig = field(default_factory=OutputConfig)


def load_config(
    path: Optional[Path] = None,
    last_page: Optional[int] = None,
    output: Optional[str] = None,
    max_attempts: Optional[int] = None,
) -> AppConfig:
    """Load configuration from a YAML file, falling back to defaults.

    Keyword arguments are CLI overrides applied on top of the file.
    """
    config_path = path or DEFAULT_CONFIG_PATH
    if not config_path.exists():
        logger.info("No config file at %s, using defaults", config_path)
        config = AppConfig()
    else:
        logger.info("Loading config from %s", config_path)
        with open(config_path, "r", encoding="utf-8") as f:
            raw = yaml.safe_load(f)
        config = _parse_config(raw) if raw else AppConfig()

    if last_page is not None:
        config.site.last_page = last_page
    if output:
        config.output.path = output
    if max_attempts is not None:
        config.fetch.max_attempts = max_attempts

    _validate_config(config)
    return config


def _parse_config(raw: Dict[str, Any]) -> AppConfig:
    """Parse raw YAML dict into AppConfig."""
    config = AppConfig()

    if "site" in raw:
        site = raw["site"]
        defaults = config.site
        last_page = site.get("last_page", defaults.last_page)
        config.site = SiteConfig(
            base_url=str(site.get("base_url", defaults.base_url)),
            listing_path=str(site.get("listing_path", defaults.listing_path)),
            detail_path=str(site.get("detail_path", defaults.detail_path)),
            extractor=str(site.get("extractor", defaults.extractor)),
            last_page=int(last_page) if last_page is not None else None,
            max_empty_pages=int(site.get("max_empty_pages", defaults.max_empty_pages)),
            rate_limit_ms=int(site.get("rate_limit_ms", defaults.rate_limit_ms)),
        )

    if "fetch" in raw:
        fetch = raw["fetch"]
        defaults = config.fetch
        config.fetch = FetchConfig(
            max_attempts=int(fetch.get("max_attempts", defaults.max_attempts)),
            initial_delay=float(fetch.get("initial_delay", defaults.initial_delay)),
            delay_step=float(fetch.get("delay_step", defaults.delay_step)),
            timeout=float(fetch.get("timeout", defaults.timeout)),
        )

    if "output" in raw:
        out = raw["output"]
        config.output = OutputConfig(
            path=str(out.get("path", config.output.path)),
            sheet_name=str(out.get("sheet_name", config.output.sheet_name)),
            checkpoint_every=int(out.get("checkpoint_every", config.output.checkpoint_every)),
        )

    return config


def _validate_config(config: AppConfig) -> None:
    """Validate config and raise on errors."""
    site = config.site
    known = known_extractors()
    if site.extractor not in known:
        raise ValueError(
            f"Config error: unknown extractor '{site.extractor}'. Known: {sorted(known)}"
        )
    if not site.base_url.startswith(("http://", "https://")):
        raise ValueError(f"Config error: base_url must be an http(s) URL, got '{site.base_url}'")
    if site.last_page is not None and site.last_page < 1:
        raise ValueError("Config error: last_page must be at least 1")
    if site.max_empty_pages < 1:
        raise ValueError("Config error: max_empty_pages must be at least 1")
    if site.rate_limit_ms < 0:
        raise ValueError("Config error: rate_limit_ms must not be negative")

    fetch = config.fetch
    if fetch.max_attempts < 1:
        raise ValueError("Config error: max_attempts must be at least 1")
    if fetch.initial_delay < 0 or fetch.delay_step < 0:
        raise ValueError("Config error: retry delays must not be negative")
    if fetch.timeout <= 0:
        raise ValueError("Config error: timeout must be positive")

    out = config.output
    if not out.path.lower().endswith(".xlsx"):
        raise ValueError(f"Config error: output path must end in .xlsx, got '{out.path}'")
    if out.checkpoint_every < 0:
        raise ValueError("Config error: checkpoint_every must not be negative")

    logger.info(
        "Config validated: %s via %s extractor, last page %s, output -> %s",
        site.listing_url,
        site.extractor,
        site.last_page if site.last_page is not None else "auto",
        out.path,
    )
