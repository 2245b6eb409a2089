"""Type definitions for the product scraper.

Branded types (NewType) keep product codes, image URLs and product URLs
from being mixed up with arbitrary strings.
"""

from dataclasses import dataclass
from typing import Any, NewType

ProductCode = NewType("ProductCode", str)
ImageUrl = NewType("ImageUrl", str)
ProductUrl = NewType("ProductUrl", str)
SiteName = NewType("SiteName", str)


@dataclass(frozen=True)
class ProductSummary:
    """One product card from a search listing."""

    title: str
    url: ProductUrl
    product_code: ProductCode | None = None
    brand: str | None = None
    price: str | None = None
    reviews: int = 0
    image: ImageUrl | None = None

    def to_dict(self) -> dict[str, Any]:
        return {
            "productCode": self.product_code,
            "title": self.title,
            "brand": self.brand,
            "price": self.price,
            "reviews": self.reviews,
            "image": self.image,
            "url": self.url,
        }


@dataclass(frozen=True)
class SearchResult:
    """A page of search results plus the site's best-effort total."""

    query: str
    page: int
    per_page: int
    total: int
    results: tuple[ProductSummary, ...] = ()

    def to_dict(self) -> dict[str, Any]:
        return {
            "query": self.query,
            "page": self.page,
            "perPage": self.per_page,
            "total": self.total,
            "results": [summary.to_dict() for summary in self.results],
        }


@dataclass(frozen=True)
class ProductDetail:
    """Structured data from a single product page."""

    product_code: ProductCode
    url: str
    title: str | None = None
    brand: str | None = None
    price: str | None = None
    price_ex_vat: str | None = None
    rating: str | None = None  # e.g. "3/5"
    reviews: int = 0
    images: tuple[ImageUrl, ...] = ()
    in_stock: bool = True
    description: str | None = None

    def to_dict(self) -> dict[str, Any]:
        return {
            "productCode": self.product_code,
            "title": self.title,
            "brand": self.brand,
            "price": self.price,
            "priceExVAT": self.price_ex_vat,
            "rating": self.rating,
            "reviews": self.reviews,
            "images": list(self.images),
            "inStock": self.in_stock,
            "description": self.description,
            "url": self.url,
        }


@dataclass(frozen=True)
class SiteSelectors:
    """Locator strings for the config-driven scraper.

    Selectors are opaque to Python; they are handed to the page unchanged.
    """

    product_card: str
    title: str
    price: str | None = None
    image: str | None = None
    link: str | None = None
    brand: str | None = None
    rating: str | None = None

    def field_selectors(self) -> dict[str, str]:
        """Card-scoped selectors by field name, skipping unset ones."""
        fields = {
            "title": self.title,
            "price": self.price,
            "image": self.image,
            "link": self.link,
            "brand": self.brand,
            "rating": self.rating,
        }
        return {name: selector for name, selector in fields.items() if selector}


@dataclass(frozen=True)
class SiteConfig:
    """Caller-supplied description of an arbitrary target site."""

    name: SiteName
    search_url: str  # template containing "{query}"
    selectors: SiteSelectors | None
    image_attribute: str = "src"
    link_attribute: str = "href"


@dataclass(frozen=True)
class ScrapedRecord:
    """One card extracted by the config-driven scraper."""

    title: str
    price: str | None = None
    brand: str | None = None
    rating: str | None = None
    image: str | None = None
    link: str | None = None

    def to_dict(self) -> dict[str, Any]:
        return {
            "title": self.title,
            "price": self.price,
            "brand": self.brand,
            "rating": self.rating,
            "image": self.image,
            "link": self.link,
        }


@dataclass(frozen=True)
class ScrapeResult:
    """Output of one config-driven scrape."""

    site: str
    query: str
    url: str
    products: tuple[ScrapedRecord, ...] = ()

    @property
    def count(self) -> int:
        return len(self.products)

    def to_dict(self) -> dict[str, Any]:
        return {
            "site": self.site,
            "query": self.query,
            "products": [record.to_dict() for record in self.products],
            "count": self.count,
            "url": self.url,
        }


@dataclass
class ScraperConfig:
    """Configuration for a site scraper."""

    site: SiteName
    base_url: str
    navigation_timeout: float = 30.0  # seconds
    readiness_timeout: float = 15.0  # seconds, search listing
    detail_readiness_timeout: float = 10.0  # seconds, product page
    settle_delay: float = 3.0  # seconds after readiness
    wait_until: str = "networkidle"
    asset_host: str | None = None  # substring identifying the site's image CDN
