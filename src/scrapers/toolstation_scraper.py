"""Toolstation.com scraper.

Site-specific settings only; the workflow is inherited from BaseScraper.
Listing cards carry no stable classes, so they are located by scanning
for the "Product code:" label.
"""

from urllib.parse import quote

from src.browser.renderer import BrowserSession
from src.browser.scripts import PRICE_ELEMENTS_PRESENT
from src.scrapers.base_scraper import BaseScraper
from src.scrapers.strategies import MarkerTextScanStrategy
from src.types import ScraperConfig, SiteName

BASE_URL = "https://www.toolstation.com"


class ToolstationScraper(BaseScraper):
    """Scraper for Toolstation search listings and product pages."""

    strategy = MarkerTextScanStrategy(marker_pattern=r"Product code:\s*(\w+)")
    title_link_fragment = "/p"
    product_path_template = "/p{code}"
    listing_ready_expression = PRICE_ELEMENTS_PRESENT
    detail_ready_selector = "h1"

    def __init__(self, renderer: BrowserSession, config: ScraperConfig | None = None):
        """Initialize Toolstation scraper, defaulting to the live site settings."""
        if config is None:
            config = ScraperConfig(
                site=SiteName("toolstation"),
                base_url=BASE_URL,
                navigation_timeout=30,
                readiness_timeout=15,
                detail_readiness_timeout=10,
                settle_delay=3,
                asset_host="toolstation",
            )
        super().__init__(config, renderer)

    def build_search_url(self, query: str, page: int) -> str:
        return f"{self.config.base_url}/search?q={quote(query, safe='')}&page={page}"

    def build_product_url(self, product_code: str) -> str:
        return f"{self.config.base_url}/p{product_code}"
