"""Orchestrator for cached scraping requests.

Request -> cache lookup -> scraper -> cache store. Failed scrapes are
never cached.
"""

import hashlib
import json
from dataclasses import asdict
from typing import Any, Optional

from loguru import logger

from src.browser.renderer import BrowserSession
from src.cache import ResponseCache
from src.scrapers.base_scraper import DEFAULT_PER_PAGE, BaseScraper
from src.scrapers.generic_scraper import GenericScraper
from src.scrapers.registry import get_scraper_class
from src.types import SiteConfig

Payload = dict[str, Any]


def site_config_fingerprint(site_config: SiteConfig) -> str:
    """Short digest of every SiteConfig field that can change a scrape result."""
    encoded = json.dumps(asdict(site_config), sort_keys=True).encode("utf-8")
    return hashlib.sha256(encoded).hexdigest()[:16]


class ScraperOrchestrator:
    """Coordinates the site scraper, the generic scraper and the cache.

    The browser session is owned by whoever builds the orchestrator; the
    orchestrator only passes it on to the scrapers.
    """

    def __init__(
        self,
        renderer: BrowserSession,
        site: str = "toolstation",
        cache: Optional[ResponseCache] = None,
        site_scraper: Optional[BaseScraper] = None,
        generic_scraper: Optional[GenericScraper] = None,
    ):
        """Initialize orchestrator.

        Args:
            renderer: Shared browser session
            site: Registry name of the hard-coded site behind search/product
            cache: Response cache (a fresh one-hour cache by default)
            site_scraper: Override for the registry scraper
            generic_scraper: Override for the config-driven scraper
        """
        self.renderer = renderer
        self.cache = cache if cache is not None else ResponseCache()
        self.site_scraper = site_scraper or get_scraper_class(site)(renderer)
        self.generic_scraper = generic_scraper or GenericScraper(renderer)

    async def search(
        self, query: str, page: int = 1, per_page: int = DEFAULT_PER_PAGE
    ) -> tuple[Payload, bool]:
        """Search the configured site.

        Returns:
            Tuple of (payload, cached)
        """
        key = f"search:{query}:{page}:{per_page}"
        cached = self.cache.get(key)
        if cached is not None:
            logger.info(f"Cache hit: {key}")
            return cached, True

        result = await self.site_scraper.search(query, page, per_page)
        payload = result.to_dict()
        self.cache.set(key, payload)
        return payload, False

    async def get_product(self, product_code: str) -> tuple[Payload, bool]:
        """Fetch one product from the configured site.

        Returns:
            Tuple of (payload, cached)
        """
        key = f"product:{product_code}"
        cached = self.cache.get(key)
        if cached is not None:
            logger.info(f"Cache hit: {key}")
            return cached, True

        product = await self.site_scraper.get_product(product_code)
        payload = product.to_dict()
        self.cache.set(key, payload)
        return payload, False

    async def scrape(self, site_config: SiteConfig, query: str) -> tuple[Payload, bool]:
        """Run a config-driven scrape.

        Returns:
            Tuple of (payload, cached)
        """
        fingerprint = site_config_fingerprint(site_config)
        key = f"scrape:{site_config.name}:{fingerprint}:{query}"
        cached = self.cache.get(key)
        if cached is not None:
            logger.info(f"Cache hit: {key}")
            return cached, True

        result = await self.generic_scraper.scrape_with_config(site_config, query)
        payload = result.to_dict()
        self.cache.set(key, payload)
        return payload, False
