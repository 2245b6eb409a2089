"""Turn raw page snapshots into validated records.

Only complete, addressable entries leave this module: a search card
without a title, price or URL is dropped, a config-driven card without a
title is dropped.
"""

from typing import Any, Iterable, Optional

from loguru import logger

from src.errors import ExtractionFailed
from src.scrapers.extraction_rules import (
    build_description,
    derive_brand_from_title,
    filter_product_images,
    is_in_stock,
    is_single_product_container,
    match_marker,
    normalize_whitespace,
    parse_brand_phrase,
    parse_decimal_rating,
    parse_dual_price,
    parse_price_text,
    parse_review_count,
    parse_star_rating,
    parse_total_count,
    pick_card_image,
    resolve_product_url,
    resolve_url,
    select_title,
)
from src.scrapers.strategies import ExtractionStrategy, MarkerTextScanStrategy
from src.types import (
    ImageUrl,
    ProductCode,
    ProductDetail,
    ProductSummary,
    ProductUrl,
    ScrapedRecord,
    SearchResult,
)


def _field_text(fields: dict, name: str) -> Optional[str]:
    value = fields.get(name)
    if not value:
        return None
    return normalize_whitespace(value.get("text")) or None


def _field_attribute(fields: dict, name: str) -> Optional[str]:
    value = fields.get(name)
    if not value:
        return None
    return value.get("attribute")


def build_summary(
    card: dict[str, Any],
    strategy: ExtractionStrategy,
    page_url: str,
    title_link_fragment: Optional[str] = None,
    product_path_template: Optional[str] = None,
) -> Optional[ProductSummary]:
    """Build one search summary from a card snapshot.

    Args:
        card: Card snapshot ({"text", "links", "images", "fields"})
        strategy: Strategy that located the card
        page_url: Listing URL, used to resolve relative links
        title_link_fragment: Only links containing this may supply the title
        product_path_template: Path fragment a product link must contain,
            formatted with the product code (e.g. "/p{code}")

    Returns:
        ProductSummary, or None if title, price or URL could not be resolved
    """
    if card.get("error"):
        logger.debug(f"Skipping card that failed in page: {card['error']}")
        return None

    text = card.get("text") or ""
    links = card.get("links") or []
    fields = card.get("fields") or {}

    code = None
    if isinstance(strategy, MarkerTextScanStrategy):
        if not is_single_product_container(
            text, strategy.marker, strategy.max_text_length
        ):
            return None
        code = match_marker(text, strategy.marker)

    title = _field_text(fields, "title") or select_title(
        links, href_fragment=title_link_fragment
    )

    price_text = _field_text(fields, "price")
    if price_text:
        price = parse_price_text(price_text)
    else:
        price, _ = parse_dual_price(text)

    url = resolve_url(_field_attribute(fields, "link"), page_url)
    if not url:
        required = None
        if code and product_path_template:
            required = product_path_template.format(code=code)
        elif title_link_fragment:
            required = title_link_fragment
        url = resolve_product_url(links, page_url, required_fragment=required)

    if not (title and price and url):
        return None

    image = resolve_url(_field_attribute(fields, "image"), page_url)
    if not image:
        image = pick_card_image(card.get("images") or [], page_url)

    return ProductSummary(
        product_code=ProductCode(code) if code else None,
        title=title,
        brand=_field_text(fields, "brand") or derive_brand_from_title(title),
        price=price,
        reviews=parse_review_count(text),
        image=ImageUrl(image) if image else None,
        url=ProductUrl(url),
    )


def dedupe_summaries(summaries: Iterable[ProductSummary]) -> list[ProductSummary]:
    """Keep the first summary per product code (or title + URL)."""
    seen = set()
    unique = []
    for summary in summaries:
        key = summary.product_code or (summary.title, summary.url)
        if key in seen:
            continue
        seen.add(key)
        unique.append(summary)
    return unique


def build_search_result(
    query: str,
    page: int,
    per_page: int,
    summaries: list[ProductSummary],
    body_text: Optional[str],
) -> SearchResult:
    """Assemble the display page, capped at per_page entries."""
    total = parse_total_count(body_text)
    if total is None:
        total = len(summaries)

    return SearchResult(
        query=query,
        page=page,
        per_page=per_page,
        total=total,
        results=tuple(summaries[:per_page]),
    )


def build_detail(
    product_code: str,
    snapshot: dict[str, Any],
    fallback_url: str,
    asset_host: Optional[str] = None,
) -> ProductDetail:
    """Build a ProductDetail from a product page snapshot."""
    body = snapshot.get("bodyText") or ""
    url = snapshot.get("url") or fallback_url

    price, price_ex_vat = parse_dual_price(snapshot.get("priceText"))
    if not price:
        price, price_ex_vat = parse_dual_price(body)

    rating_text = snapshot.get("ratingText")
    rating = (
        parse_decimal_rating(snapshot.get("ratingLabel"), rating_text)
        or parse_star_rating(rating_text)
        or parse_star_rating(body)
    )

    images = filter_product_images(snapshot.get("images") or [], url, asset_host)

    return ProductDetail(
        product_code=ProductCode(product_code),
        url=url,
        title=normalize_whitespace(snapshot.get("heading")) or None,
        brand=normalize_whitespace(snapshot.get("brandText")) or parse_brand_phrase(body),
        price=price,
        price_ex_vat=price_ex_vat,
        rating=rating,
        reviews=parse_review_count(body),
        images=tuple(ImageUrl(image) for image in images),
        in_stock=is_in_stock(body),
        description=build_description(snapshot.get("details") or []),
    )


def build_record(card: dict[str, Any], page_url: str) -> Optional[ScrapedRecord]:
    """Build one config-driven record; None when the card has no title.

    Raises:
        ExtractionFailed: If the card failed inside the page
    """
    if card.get("error"):
        raise ExtractionFailed(card["error"])

    fields = card["fields"]
    title = _field_text(fields, "title")
    if not title:
        return None

    return ScrapedRecord(
        title=title,
        price=_field_text(fields, "price"),
        brand=_field_text(fields, "brand"),
        rating=_field_text(fields, "rating"),
        image=resolve_url(_field_attribute(fields, "image"), page_url),
        link=resolve_url(_field_attribute(fields, "link"), page_url),
    )
