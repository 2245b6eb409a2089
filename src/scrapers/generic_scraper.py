"""Config-driven scraper for arbitrary sites.

Nothing here knows about a particular site: every locator comes from the
caller's SiteConfig.
"""

import asyncio
from urllib.parse import quote

from loguru import logger

from src.browser.renderer import BrowserSession
from src.browser.scripts import CARD_SNAPSHOT_SCRIPT
from src.errors import ExtractionFailed, ScrapeFailed, ValidationFailed
from src.scrapers.base_scraper import validate_query
from src.scrapers.normalize import build_record
from src.scrapers.strategies import ConfigDrivenStrategy
from src.types import ScrapedRecord, ScrapeResult, SiteConfig

QUERY_PLACEHOLDER = "{query}"


def validate_site_config(site_config: SiteConfig | None) -> SiteConfig:
    """Reject configs that cannot drive a scrape.

    Raises:
        ValidationFailed: If the search URL, selectors, product card or
            title selector is missing, or the URL has no {query} placeholder
    """
    if site_config is None:
        raise ValidationFailed("Site configuration is required")
    if not site_config.search_url:
        raise ValidationFailed("Invalid site configuration: searchUrl is required")
    if QUERY_PLACEHOLDER not in site_config.search_url:
        raise ValidationFailed(
            f"Invalid site configuration: searchUrl must contain {QUERY_PLACEHOLDER}"
        )
    if site_config.selectors is None:
        raise ValidationFailed("Invalid site configuration: selectors are required")
    if not site_config.selectors.product_card or not site_config.selectors.title:
        raise ValidationFailed(
            "Invalid site configuration: productCard and title selectors are required"
        )
    return site_config


def build_config_url(site_config: SiteConfig, query: str) -> str:
    return site_config.search_url.replace(QUERY_PLACEHOLDER, quote(query, safe=""))


class GenericScraper:
    """Scrapes any listing page described by a SiteConfig."""

    def __init__(
        self,
        renderer: BrowserSession,
        navigation_timeout: float = 30.0,
        readiness_timeout: float = 10.0,
        settle_delay: float = 2.0,
        wait_until: str = "networkidle",
    ):
        self.renderer = renderer
        self.navigation_timeout = navigation_timeout
        self.readiness_timeout = readiness_timeout
        self.settle_delay = settle_delay
        self.wait_until = wait_until

    async def scrape_with_config(self, site_config: SiteConfig, query: str) -> ScrapeResult:
        """Scrape the listing for query using the caller's selectors.

        A card that fails extraction is logged and skipped; a missing
        product card selector on the page yields zero results.

        Raises:
            ValidationFailed: Before any navigation, if config or query is unusable
            ScrapeFailed: If navigation or the in-page script fails
        """
        site_config = validate_site_config(site_config)
        query = validate_query(query)
        strategy = ConfigDrivenStrategy.from_site_config(site_config)
        url = build_config_url(site_config, query)
        logger.info(f"Scraping {site_config.name}: {url}")

        try:
            async with self.renderer.open_surface() as surface:
                await surface.render(
                    url,
                    wait_until=self.wait_until,
                    timeout_ms=int(self.navigation_timeout * 1000),
                )
                ready = await surface.wait_for_selector(
                    strategy.selectors.product_card, int(self.readiness_timeout * 1000)
                )
                if not ready:
                    logger.warning(
                        f"No '{strategy.selectors.product_card}' cards appeared on {url}"
                    )
                elif self.settle_delay > 0:
                    await asyncio.sleep(self.settle_delay)
                snapshot = await surface.run_script(
                    CARD_SNAPSHOT_SCRIPT, strategy.snapshot_options()
                )
        except Exception as e:
            logger.error(f"Scrape of {site_config.name} failed: {e}")
            raise ScrapeFailed(e) from e

        page_url = snapshot.get("url") or url
        products: list[ScrapedRecord] = []
        for index, card in enumerate(snapshot.get("cards") or []):
            try:
                record = build_record(card, page_url)
            except (ExtractionFailed, KeyError, TypeError, AttributeError) as e:
                logger.warning(f"Skipping card {index} on {site_config.name}: {e}")
                continue
            if record is not None:
                products.append(record)

        logger.info(f"Extracted {len(products)} products from {site_config.name}")
        return ScrapeResult(
            site=site_config.name, query=query, url=url, products=tuple(products)
        )
