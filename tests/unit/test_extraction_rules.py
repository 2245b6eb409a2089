"""Unit tests for extraction rule functions.

Parameterized inputs, one rule per test class.
"""

import re

import pytest

from src.scrapers.extraction_rules import (
    build_description,
    derive_brand_from_title,
    filter_product_images,
    is_in_stock,
    is_single_product_container,
    match_marker,
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

BASE = "https://www.toolstation.com/search?q=hammer"
MARKER = re.compile(r"Product code:\s*(\w+)")


@pytest.mark.unit
class TestParseDualPrice:
    """Test price and ex-VAT price extraction."""

    @pytest.mark.parametrize(
        "text,expected",
        [
            ("£12.50 ex. VAT £15.00", ("£12.50", "£15.00")),
            ("£12.50 ex VAT £15.00", ("£12.50", "£15.00")),
            ("Now £1,299.99 ex. VAT £1,083.33", ("£1,299.99", "£1,083.33")),
            ("Only £7.98 today", ("£7.98", None)),
            (
                "Free delivery on orders over £25 | Hammer £12.50 ex. VAT £15.00",
                ("£12.50", "£15.00"),
            ),
            ("Spend £50, save £5", ("£50", None)),
            ("Total £1,299.99, delivered", ("£1,299.99", None)),
            ("$5 each", ("$5", None)),
            ("No price here", (None, None)),
            ("", (None, None)),
            (None, (None, None)),
        ],
    )
    def test_parse_dual_price(self, text, expected):
        assert parse_dual_price(text) == expected


@pytest.mark.unit
class TestParsePriceText:
    @pytest.mark.parametrize(
        "text,expected",
        [
            ("  £9.99  ", "£9.99"),
            ("£9.99 ex. VAT £8.33", "£9.99"),
            ("9,99 EUR", "9,99 EUR"),
            ("Call for price", None),
            (None, None),
        ],
    )
    def test_parse_price_text(self, text, expected):
        assert parse_price_text(text) == expected


@pytest.mark.unit
class TestParseReviewCount:
    @pytest.mark.parametrize(
        "text,expected",
        [
            ("Claw Hammer (42) £12.50", 42),
            ("Rated ( 7 ) times", 7),
            ("No reviews yet", 0),
            ("(abc)", 0),
            (None, 0),
        ],
    )
    def test_parse_review_count(self, text, expected):
        assert parse_review_count(text) == expected


@pytest.mark.unit
class TestRatings:
    @pytest.mark.parametrize(
        "text,expected",
        [
            ("★★★☆☆", "3/5"),
            ("Rating: ★★★★★ (12)", "5/5"),
            ("★", "1/5"),
            ("no stars", None),
            (None, None),
        ],
    )
    def test_parse_star_rating(self, text, expected):
        assert parse_star_rating(text) == expected

    @pytest.mark.parametrize(
        "texts,expected",
        [
            (("Rated 4.5 out of 5",), "4.5/5"),
            ((None, "4"), "4/5"),
            (("(120 reviews)", "3.8"), "3.8/5"),
            (("no rating",), None),
            ((), None),
        ],
    )
    def test_parse_decimal_rating(self, texts, expected):
        assert parse_decimal_rating(*texts) == expected


@pytest.mark.unit
class TestParseTotalCount:
    @pytest.mark.parametrize(
        "text,expected",
        [
            ("Showing 1-24 of 87", 87),
            ("1 - 24 of 1,204 results", 1204),
            ("132 results for hammer", 132),
            ("1 result", 1),
            ("0 results", 0),
            ("Nothing to count", None),
            (None, None),
        ],
    )
    def test_parse_total_count(self, text, expected):
        assert parse_total_count(text) == expected


@pytest.mark.unit
class TestBrand:
    @pytest.mark.parametrize(
        "title,expected",
        [
            ("Stanley FatMax Claw Hammer 16oz", "Stanley"),
            ("DeWalt Drill Driver 18V", "DeWalt"),
            ("Hammer", "Hammer"),
            ("claw hammer", None),
            ("", None),
            (None, None),
        ],
    )
    def test_derive_brand_from_title(self, title, expected):
        assert derive_brand_from_title(title) == expected

    @pytest.mark.parametrize(
        "text,expected",
        [
            ("Claw Hammer by Stanley Product code: 12345", "Stanley"),
            ("made BY Black & Decker product details", "Black & Decker"),
            ("Nothing here", None),
        ],
    )
    def test_parse_brand_phrase(self, text, expected):
        assert parse_brand_phrase(text) == expected


@pytest.mark.unit
class TestSelectTitle:
    def test_picks_longest_qualifying_link_text(self):
        links = [
            {"href": "/hammer/p12345", "text": "Claw Hammer"},
            {"href": "/hammer/p12345", "text": "  Stanley FatMax   Claw Hammer 16oz "},
            {"href": "/hammer/p12345", "text": "Add to basket and checkout now"},
        ]

        assert select_title(links, href_fragment="/p") == "Stanley FatMax Claw Hammer 16oz"

    def test_ignores_short_texts_and_other_hrefs(self):
        links = [
            {"href": "/hammer/p12345", "text": "View item"},
            {"href": "/help", "text": "Delivery information for all orders"},
        ]

        assert select_title(links, href_fragment="/p") is None

    def test_without_fragment_considers_every_link(self):
        links = [{"href": "/help", "text": "Delivery information"}]

        assert select_title(links) == "Delivery information"


@pytest.mark.unit
class TestUrls:
    @pytest.mark.parametrize(
        "href,expected",
        [
            ("/hammer/p12345", "https://www.toolstation.com/hammer/p12345"),
            ("https://cdn.example.com/a.jpg", "https://cdn.example.com/a.jpg"),
            ("//cdn.example.com/a.jpg", "https://cdn.example.com/a.jpg"),
            ("#reviews", None),
            ("javascript:void(0)", None),
            ("", None),
            (None, None),
        ],
    )
    def test_resolve_url(self, href, expected):
        assert resolve_url(href, BASE) == expected

    def test_resolve_product_url_requires_product_reference(self):
        links = [
            {"href": "/p99999", "text": "Other product"},
            {"href": "/claw-hammer/p12345", "text": "Claw Hammer"},
        ]

        result = resolve_product_url(links, BASE, required_fragment="/p12345")

        assert result == "https://www.toolstation.com/claw-hammer/p12345"

    def test_resolve_product_url_none_when_no_match(self):
        links = [{"href": "/p99999", "text": "Other product"}]

        assert resolve_product_url(links, BASE, required_fragment="/p12345") is None


@pytest.mark.unit
class TestImages:
    def test_pick_card_image_skips_icons_and_logos(self):
        sources = [
            "https://cdn.toolstation.com/icons/star.png",
            "/images/logo.png",
            "/images/12345.jpg",
        ]

        assert pick_card_image(sources, BASE) == "https://www.toolstation.com/images/12345.jpg"

    def test_pick_card_image_none_when_only_icons(self):
        assert pick_card_image(["/img/icon.svg"], BASE) is None

    def test_filter_product_images_excludes_icons_logos_and_svg(self):
        sources = [
            "https://cdn.toolstation.com/images/a.jpg",
            "https://cdn.toolstation.com/images/logo.png",
            "https://cdn.toolstation.com/images/icon-basket.png",
            "https://cdn.toolstation.com/media/brand-img/stanley.png",
            "https://cdn.toolstation.com/images/badge.svg",
            "https://cdn.toolstation.com/images/a.jpg",
            "https://tracker.example.com/product/pixel.gif",
        ]

        result = filter_product_images(sources, BASE, asset_host="toolstation")

        assert result == ["https://cdn.toolstation.com/images/a.jpg"]

    def test_filter_product_images_caps_at_ten(self):
        sources = [f"https://cdn.toolstation.com/images/{i}.jpg" for i in range(15)]

        result = filter_product_images(sources, BASE, asset_host="toolstation")

        assert len(result) == 10
        assert result[0].endswith("/0.jpg")

    def test_filter_product_images_falls_back_to_asset_host(self):
        sources = [
            "https://cdn.toolstation.com/static/hero.webp",
            "https://cdn.toolstation.com/static/logo.png",
            "https://other.example.com/static/x.jpg",
        ]

        result = filter_product_images(sources, BASE, asset_host="toolstation")

        assert result == ["https://cdn.toolstation.com/static/hero.webp"]

    def test_filter_product_images_empty_without_matches(self):
        assert filter_product_images([], BASE, asset_host="toolstation") == []


@pytest.mark.unit
class TestDescriptionAndStock:
    def test_build_description_joins_and_truncates(self):
        texts = ["A" * 300, "B" * 300]

        result = build_description(texts)

        assert len(result) == 500
        assert result.startswith("A" * 300 + " B")

    def test_build_description_discards_short_noise(self):
        assert build_description(["Details", "Specs"]) is None

    @pytest.mark.parametrize(
        "text,expected",
        [
            ("In stock for delivery", True),
            ("Out of stock", False),
            ("Currently OUT OF STOCK online", False),
            (None, True),
        ],
    )
    def test_is_in_stock(self, text, expected):
        assert is_in_stock(text) is expected


@pytest.mark.unit
class TestMarker:
    def test_match_marker_returns_identifier(self):
        assert match_marker("Hammer Product code: 12345 (3)", MARKER) == "12345"

    def test_match_marker_none_without_marker(self):
        assert match_marker("Hammer", MARKER) is None

    @pytest.mark.parametrize(
        "text,expected",
        [
            ("Hammer Product code: 12345", True),
            ("Product code: 1 ... Product code: 2", False),
            ("No marker", False),
            ("Product code: 1" + "x" * 1000, False),
            ("", False),
        ],
    )
    def test_is_single_product_container(self, text, expected):
        assert is_single_product_container(text, MARKER, 1000) is expected
