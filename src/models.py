"""Request bodies accepted by the HTTP API.

Field names are camelCase on the wire (perPage, siteConfig, searchUrl,
productCard); snake_case names are accepted too.
"""

from pydantic import BaseModel, ConfigDict, Field, field_validator

from src.scrapers.base_scraper import DEFAULT_PER_PAGE
from src.types import SiteConfig, SiteName, SiteSelectors

MAX_PER_PAGE = 100


class _CamelModel(BaseModel):
    model_config = ConfigDict(populate_by_name=True, str_strip_whitespace=True)


class SearchRequest(_CamelModel):
    query: str = Field(..., min_length=1)
    page: int = Field(default=1, ge=1)
    per_page: int = Field(default=DEFAULT_PER_PAGE, gt=0, le=MAX_PER_PAGE, alias="perPage")


class SelectorsModel(_CamelModel):
    product_card: str | None = Field(default=None, alias="productCard")
    title: str | None = None
    price: str | None = None
    image: str | None = None
    link: str | None = None
    brand: str | None = None
    rating: str | None = None


class SiteConfigModel(_CamelModel):
    name: str = "custom"
    search_url: str | None = Field(default=None, alias="searchUrl")
    selectors: SelectorsModel | None = None
    image_attribute: str = Field(default="src", alias="imageAttribute")
    link_attribute: str = Field(default="href", alias="linkAttribute")

    def to_site_config(self) -> SiteConfig:
        selectors = None
        if self.selectors is not None:
            selectors = SiteSelectors(
                product_card=self.selectors.product_card or "",
                title=self.selectors.title or "",
                price=self.selectors.price,
                image=self.selectors.image,
                link=self.selectors.link,
                brand=self.selectors.brand,
                rating=self.selectors.rating,
            )
        return SiteConfig(
            name=SiteName(self.name),
            search_url=self.search_url or "",
            selectors=selectors,
            image_attribute=self.image_attribute,
            link_attribute=self.link_attribute,
        )


class ScrapeRequest(_CamelModel):
    site_config: SiteConfigModel | None = Field(default=None, alias="siteConfig")
    query: str | None = None

    @field_validator("query")
    @classmethod
    def blank_query_is_missing(cls, value: str | None) -> str | None:
        return value or None


SCRAPE_REQUEST_EXAMPLE = {
    "siteConfig": {
        "name": "Site Name",
        "searchUrl": "https://example.com/search?q={query}",
        "selectors": {
            "productCard": ".product",
            "title": ".title",
            "price": ".price",
            "image": "img",
            "link": "a",
        },
    },
    "query": "search term",
}
