"""Pure functions for pulling product fields out of rendered page text.

Each rule takes a text or DOM snapshot fragment and returns an optional
value, so a rule can be patched when a site's layout drifts without
touching the scrapers that call it.
"""

import re
from typing import Iterable, Optional
from urllib.parse import urljoin, urlparse

from loguru import logger

CURRENCY = r"[£$€]"
AMOUNT = r"\d+(?:,\d{3})*(?:\.\d+)?"

# "£12.50" optionally followed by "ex. VAT £15.00"
DUAL_PRICE_PATTERN = re.compile(
    rf"({CURRENCY})\s?({AMOUNT})(?:\s*ex\.?\s*VAT\s*({CURRENCY})\s?({AMOUNT}))?",
    flags=re.IGNORECASE,
)
REVIEW_COUNT_PATTERN = re.compile(r"\(\s*(\d+)\s*\)")
STAR_RUN_PATTERN = re.compile(r"★+")
DECIMAL_PATTERN = re.compile(r"(\d+(?:\.\d+)?)")
TOTAL_RANGE_PATTERN = re.compile(
    r"(\d[\d,]*)\s*-\s*(\d[\d,]*)\s+of\s+(\d[\d,]*)", flags=re.IGNORECASE
)
TOTAL_RESULTS_PATTERN = re.compile(r"(\d[\d,]*)\s*results?\b", flags=re.IGNORECASE)
TITLE_BRAND_PATTERN = re.compile(r"^([A-Z][A-Za-z\s&]+?)(?:\s+[A-Z0-9]|$)")
BRAND_PHRASE_PATTERN = re.compile(
    r"\bby\s+([A-Za-z][A-Za-z\s&]{0,60}?)\s+Product\b", flags=re.IGNORECASE
)
ADD_TO_CART_PATTERN = re.compile(r"\badd\s+to\b", flags=re.IGNORECASE)
OUT_OF_STOCK_PHRASE = "out of stock"

MIN_TITLE_LENGTH = 10
MAX_RATING = 5
MAX_IMAGES = 10
MIN_DESCRIPTION_LENGTH = 50
MAX_DESCRIPTION_LENGTH = 500

CARD_IMAGE_EXCLUDE = ("icon", "logo")
PRODUCT_IMAGE_INCLUDE = ("/images/", "/media/", "product")
PRODUCT_IMAGE_EXCLUDE = ("icon", "logo", "brand-img")
VECTOR_IMAGE_EXTENSIONS = (".svg",)


def normalize_whitespace(text: Optional[str]) -> str:
    """Collapse runs of whitespace to single spaces."""
    if not text:
        return ""
    return " ".join(text.split())


def _to_int(digits: str) -> int:
    return int(digits.replace(",", ""))


def parse_dual_price(text: Optional[str]) -> tuple[Optional[str], Optional[str]]:
    """Extract the price and optional ex-VAT price from text.

    A match carrying the ex-VAT part wins over any earlier lone amount
    (e.g. "orders over £25" in a delivery banner).

    Args:
        text: Text such as "£12.50 ex. VAT £15.00"

    Returns:
        (price, price_ex_vat), e.g. ("£12.50", "£15.00"); missing parts are None
    """
    if not text:
        return None, None

    matches = list(DUAL_PRICE_PATTERN.finditer(text))
    if not matches:
        return None, None

    match = next((m for m in matches if m.group(3)), matches[0])

    price = f"{match.group(1)}{match.group(2)}"
    ex_vat = f"{match.group(3)}{match.group(4)}" if match.group(3) else None
    return price, ex_vat


def parse_price_text(text: Optional[str]) -> Optional[str]:
    """Read a price from a dedicated price element.

    Uses the currency pattern when it matches, otherwise the element's own
    text as long as it contains a digit.
    """
    price, _ = parse_dual_price(text)
    if price:
        return price

    cleaned = normalize_whitespace(text)
    if cleaned and any(char.isdigit() for char in cleaned):
        return cleaned
    return None


def parse_review_count(text: Optional[str]) -> int:
    """First parenthesized integer, e.g. "(42)" -> 42. Defaults to 0."""
    if not text:
        return 0
    match = REVIEW_COUNT_PATTERN.search(text)
    return int(match.group(1)) if match else 0


def parse_star_rating(text: Optional[str]) -> Optional[str]:
    """Count the first run of filled star glyphs: "★★★☆☆" -> "3/5"."""
    if not text:
        return None
    match = STAR_RUN_PATTERN.search(text)
    if not match:
        return None
    return f"{min(len(match.group(0)), MAX_RATING)}/{MAX_RATING}"


def parse_decimal_rating(*texts: Optional[str]) -> Optional[str]:
    """Read a numeric rating from element text or its aria-label.

    Args:
        texts: Candidate strings in priority order (e.g. "Rated 4.5 out of 5")

    Returns:
        Rating normalized as "4.5/5", or None if no value in range is found
    """
    for text in texts:
        if not text:
            continue
        match = DECIMAL_PATTERN.search(text)
        if not match:
            continue
        value = float(match.group(1))
        if 0 <= value <= MAX_RATING:
            return f"{value:g}/{MAX_RATING}"
    return None


def parse_total_count(text: Optional[str]) -> Optional[int]:
    """Parse a result total from "1-24 of 300" or "300 results"."""
    if not text:
        return None

    match = TOTAL_RANGE_PATTERN.search(text)
    if match:
        return _to_int(match.group(3))

    match = TOTAL_RESULTS_PATTERN.search(text)
    if match:
        return _to_int(match.group(1))

    return None


def derive_brand_from_title(title: Optional[str]) -> Optional[str]:
    """Leading run of capitalized words: "Stanley FatMax Hammer" -> "Stanley"."""
    if not title:
        return None
    match = TITLE_BRAND_PATTERN.match(title.strip())
    if not match:
        return None
    brand = match.group(1).strip()
    return brand or None


def parse_brand_phrase(text: Optional[str]) -> Optional[str]:
    """Brand from a "by <Name> Product" phrase (case-insensitive)."""
    if not text:
        return None
    match = BRAND_PHRASE_PATTERN.search(text)
    if not match:
        return None
    brand = normalize_whitespace(match.group(1))
    return brand or None


def select_title(
    links: Iterable[dict],
    href_fragment: Optional[str] = None,
    min_length: int = MIN_TITLE_LENGTH,
) -> Optional[str]:
    """Longest qualifying link text within a card.

    Links whose text looks like an "Add to cart" button are ignored, as are
    texts of min_length characters or fewer.

    Args:
        links: Link snapshots ({"href": ..., "text": ...})
        href_fragment: Only consider links whose href contains this
        min_length: Texts must be longer than this
    """
    title = ""
    for link in links:
        href = link.get("href") or ""
        if href_fragment and href_fragment not in href:
            continue

        text = normalize_whitespace(link.get("text"))
        if len(text) <= min_length or ADD_TO_CART_PATTERN.search(text):
            continue
        if len(text) > len(title):
            title = text

    return title or None


def resolve_url(href: Optional[str], base_url: str) -> Optional[str]:
    """Absolute http(s) URL for href, or None for empty/script links."""
    if not href:
        return None
    href = href.strip()
    if not href or href.startswith(("#", "javascript:", "mailto:", "tel:")):
        return None

    absolute = urljoin(base_url, href)
    if urlparse(absolute).scheme not in ("http", "https"):
        return None
    return absolute


def resolve_product_url(
    links: Iterable[dict], base_url: str, required_fragment: Optional[str] = None
) -> Optional[str]:
    """First link that references the product, made absolute.

    Args:
        links: Link snapshots ({"href": ..., "text": ...})
        base_url: Page URL used to resolve relative hrefs
        required_fragment: Substring the href must contain (e.g. "/p12345")
    """
    for link in links:
        href = link.get("href") or ""
        if required_fragment and required_fragment not in href:
            continue
        absolute = resolve_url(href, base_url)
        if absolute:
            return absolute
    return None


def _has_any(value: str, fragments: Iterable[str]) -> bool:
    lowered = value.lower()
    return any(fragment in lowered for fragment in fragments)


def _is_vector_image(url: str) -> bool:
    return urlparse(url).path.lower().endswith(VECTOR_IMAGE_EXTENSIONS)


def pick_card_image(sources: Iterable[str], base_url: str) -> Optional[str]:
    """First card image that is not an icon or logo."""
    for source in sources:
        absolute = resolve_url(source, base_url)
        if absolute and not _has_any(absolute, CARD_IMAGE_EXCLUDE):
            return absolute
    return None


def filter_product_images(
    sources: Iterable[str],
    base_url: str,
    asset_host: Optional[str] = None,
    limit: int = MAX_IMAGES,
) -> list[str]:
    """Select product gallery images from every image on a page.

    The primary pass keeps images under product/media paths. If it finds
    nothing, a fallback pass accepts any image served from asset_host.
    Icons, logos, brand art and vector images are never returned.

    Args:
        sources: Raw image sources in document order
        base_url: Page URL used to resolve relative sources
        asset_host: Substring identifying the site's image host
        limit: Maximum number of images returned

    Returns:
        Deduplicated absolute URLs, at most limit long
    """
    candidates = []
    for source in sources:
        absolute = resolve_url(source, base_url)
        if not absolute or _is_vector_image(absolute):
            continue
        if _has_any(absolute, PRODUCT_IMAGE_EXCLUDE):
            continue
        candidates.append(absolute)

    def from_asset_host(url: str) -> bool:
        return not asset_host or asset_host in url

    images = [
        url
        for url in candidates
        if _has_any(url, PRODUCT_IMAGE_INCLUDE) and from_asset_host(url)
    ]

    if not images and asset_host:
        logger.debug(f"No product-path images found, falling back to {asset_host}")
        images = [url for url in candidates if asset_host in url]

    return list(dict.fromkeys(images))[:limit]


def build_description(
    texts: Iterable[str],
    min_length: int = MIN_DESCRIPTION_LENGTH,
    max_length: int = MAX_DESCRIPTION_LENGTH,
) -> Optional[str]:
    """Join description/detail sections and cap the excerpt.

    Returns None when the joined text is min_length characters or shorter.
    """
    joined = normalize_whitespace(" ".join(text for text in texts if text))
    if len(joined) <= min_length:
        return None
    return joined[:max_length].strip()


def is_in_stock(text: Optional[str]) -> bool:
    """In stock unless the page explicitly says "Out of stock"."""
    if not text:
        return True
    return OUT_OF_STOCK_PHRASE not in text.lower()


def match_marker(text: Optional[str], marker: re.Pattern) -> Optional[str]:
    """Identifier captured by the marker's first group, e.g. a product code."""
    if not text:
        return None
    match = marker.search(text)
    if not match:
        return None
    return match.group(1) if marker.groups else match.group(0)


def is_single_product_container(
    text: Optional[str], marker: re.Pattern, max_length: int
) -> bool:
    """True for containers holding exactly one marker and under max_length chars.

    Wrappers that aggregate several products repeat the marker or exceed
    the length bound.
    """
    if not text or len(text) >= max_length:
        return False
    return len(marker.findall(text)) == 1
