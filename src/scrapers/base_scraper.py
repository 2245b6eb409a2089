"""Abstract base class for site-specific scrapers.

Shared render/extract orchestration lives here; subclasses supply the
site's URLs, extraction strategy and readiness conditions.
"""

import asyncio
import re
from abc import ABC, abstractmethod
from typing import Optional

from loguru import logger

from src.browser.renderer import BrowserSession, RenderResponse, RenderSurface
from src.browser.scripts import (
    CARD_SNAPSHOT_SCRIPT,
    DETAIL_SECTION_SELECTOR,
    PRODUCT_PAGE_SCRIPT,
)
from src.errors import (
    NavigationFailed,
    ProductFetchFailed,
    ProductNotFound,
    SearchFailed,
    ValidationFailed,
)
from src.scrapers.normalize import (
    build_detail,
    build_search_result,
    build_summary,
    dedupe_summaries,
)
from src.scrapers.strategies import ExtractionStrategy
from src.types import ProductDetail, ScraperConfig, SearchResult

PRODUCT_CODE_PATTERN = re.compile(r"^[A-Za-z0-9_-]+$")
DEFAULT_PER_PAGE = 24


def validate_query(query: Optional[str]) -> str:
    """Strip and check a search query.

    Raises:
        ValidationFailed: If query is missing or blank
    """
    if not query or not query.strip():
        raise ValidationFailed("Query parameter is required")
    return query.strip()


def validate_product_code(product_code: Optional[str]) -> str:
    """Check a product code is non-empty and URL-safe.

    Raises:
        ValidationFailed: If the code is missing or has invalid characters
    """
    if not product_code or not product_code.strip():
        raise ValidationFailed("Product code is required")

    product_code = product_code.strip()
    if not PRODUCT_CODE_PATTERN.match(product_code):
        raise ValidationFailed(f"Product code contains invalid characters: {product_code}")
    return product_code


class BaseScraper(ABC):
    """Abstract base class providing the search and product workflows.

    Subclasses must implement:
    - build_search_url(query, page)
    - build_product_url(product_code)
    and set `strategy` plus whichever readiness hooks the site needs.
    """

    strategy: ExtractionStrategy
    title_link_fragment: Optional[str] = None
    product_path_template: Optional[str] = None
    listing_ready_selector: Optional[str] = None
    listing_ready_expression: Optional[str] = None
    detail_ready_selector: str = "h1"
    brand_selector: Optional[str] = None
    price_selector: Optional[str] = None
    rating_selector: Optional[str] = None

    def __init__(self, config: ScraperConfig, renderer: BrowserSession):
        """Initialize scraper with configuration and a shared browser handle.

        Args:
            config: Scraper configuration including timeouts
            renderer: Browser session owned by the caller
        """
        self.config = config
        self.renderer = renderer

    @abstractmethod
    def build_search_url(self, query: str, page: int) -> str:
        """Construct the listing URL for a query and page number."""

    @abstractmethod
    def build_product_url(self, product_code: str) -> str:
        """Construct the product page URL from its code."""

    async def _navigate(
        self, surface: RenderSurface, url: str
    ) -> Optional[RenderResponse]:
        return await surface.render(
            url,
            wait_until=self.config.wait_until,
            timeout_ms=int(self.config.navigation_timeout * 1000),
        )

    async def _await_ready(
        self,
        surface: RenderSurface,
        timeout: float,
        selector: Optional[str] = None,
        expression: Optional[str] = None,
    ) -> bool:
        """Bounded readiness wait; a timeout degrades to the current DOM."""
        timeout_ms = int(timeout * 1000)
        if selector:
            ready = await surface.wait_for_selector(selector, timeout_ms)
        elif expression:
            ready = await surface.wait_for_function(expression, timeout_ms)
        else:
            return True

        if not ready:
            logger.warning(
                f"Readiness wait timed out after {timeout}s, using current page state"
            )
        return ready

    async def _settle(self) -> None:
        """Give late asynchronous content time to arrive."""
        if self.config.settle_delay > 0:
            await asyncio.sleep(self.config.settle_delay)

    def detail_script_options(self) -> dict:
        return {
            "brandSelector": self.brand_selector,
            "priceSelector": self.price_selector,
            "ratingSelector": self.rating_selector,
            "detailSelector": DETAIL_SECTION_SELECTOR,
        }

    async def search(
        self, query: str, page: int = 1, per_page: int = DEFAULT_PER_PAGE
    ) -> SearchResult:
        """Search the site and return one display page of summaries.

        Args:
            query: Search terms
            page: 1-based page number passed through to the site
            per_page: Maximum number of results returned

        Returns:
            SearchResult with at most per_page entries

        Raises:
            ValidationFailed: If arguments are invalid (nothing is rendered)
            SearchFailed: If rendering or extraction fails
        """
        query = validate_query(query)
        if page < 1:
            raise ValidationFailed("Page must be 1 or greater")
        if per_page < 1:
            raise ValidationFailed("perPage must be greater than 0")

        url = self.build_search_url(query, page)
        logger.info(f"Searching {self.config.site}: {url}")

        try:
            async with self.renderer.open_surface() as surface:
                await self._navigate(surface, url)
                await self._await_ready(
                    surface,
                    self.config.readiness_timeout,
                    selector=self.listing_ready_selector,
                    expression=self.listing_ready_expression,
                )
                await self._settle()
                snapshot = await surface.run_script(
                    CARD_SNAPSHOT_SCRIPT, self.strategy.snapshot_options()
                )

            page_url = snapshot.get("url") or url
            summaries = dedupe_summaries(
                summary
                for summary in (
                    build_summary(
                        card,
                        self.strategy,
                        page_url,
                        title_link_fragment=self.title_link_fragment,
                        product_path_template=self.product_path_template,
                    )
                    for card in snapshot.get("cards") or []
                )
                if summary is not None
            )
            result = build_search_result(
                query, page, per_page, summaries, snapshot.get("bodyText")
            )

        except Exception as e:
            logger.error(f"Search failed for '{query}' on {self.config.site}: {e}")
            raise SearchFailed(e) from e

        logger.info(
            f"Found {len(summaries)} products for '{query}' "
            f"(returning {len(result.results)}, total {result.total})"
        )
        return result

    async def get_product(self, product_code: str) -> ProductDetail:
        """Fetch and extract a single product page.

        Raises:
            ValidationFailed: If the product code is invalid
            ProductNotFound: If the product page answers 404
            ProductFetchFailed: For any other render or extraction failure
        """
        product_code = validate_product_code(product_code)
        url = self.build_product_url(product_code)
        logger.info(f"Fetching {self.config.site} product {product_code}: {url}")

        try:
            async with self.renderer.open_surface() as surface:
                response = await self._navigate(surface, url)
                if response is not None and response.status == 404:
                    raise ProductNotFound(product_code)
                if response is not None and not response.ok:
                    raise NavigationFailed(f"HTTP {response.status} error for {url}")

                await self._await_ready(
                    surface,
                    self.config.detail_readiness_timeout,
                    selector=self.detail_ready_selector,
                )
                await self._settle()
                snapshot = await surface.run_script(
                    PRODUCT_PAGE_SCRIPT, self.detail_script_options()
                )

            product = build_detail(
                product_code, snapshot, url, asset_host=self.config.asset_host
            )

        except ProductNotFound:
            logger.warning(f"Product {product_code} not found on {self.config.site}")
            raise
        except Exception as e:
            logger.error(f"Failed to fetch product {product_code}: {e}")
            raise ProductFetchFailed(e) from e

        logger.info(f"Fetched {product.title} ({product_code})")
        return product
