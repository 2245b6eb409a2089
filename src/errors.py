"""Exception hierarchy for rendering and extraction failures."""


class ScraperError(Exception):
    """Base class for every failure raised by the scrapers."""


class ValidationFailed(ScraperError):
    """Caller-supplied query, product code or site config is unusable.

    Raised before any page is rendered.
    """


class NavigationFailed(ScraperError):
    """The target URL could not be reached (timeout or network error)."""


class ExtractionFailed(ScraperError):
    """The in-page extraction script threw."""


class ProductNotFound(ScraperError):
    """The product page answered with HTTP 404."""

    def __init__(self, product_code: str):
        super().__init__("Product not found")
        self.product_code = product_code


class _WrappedFailure(ScraperError):
    """Single error surfaced to callers, carrying the underlying message."""

    prefix = "Scrape failed"

    def __init__(self, cause: Exception):
        super().__init__(f"{self.prefix}: {cause}")
        self.cause = cause


class SearchFailed(_WrappedFailure):
    prefix = "Search failed"


class ProductFetchFailed(_WrappedFailure):
    prefix = "Product fetch failed"


class ScrapeFailed(_WrappedFailure):
    prefix = "Scrape failed"
