"""Command-line interface for the product scraper.

Usage:
    python -m src.cli search "claw hammer" --page 1 --per-page 24
    python -m src.cli product 12345
    python -m src.cli scrape --config site.json "claw hammer"
    python -m src.cli serve --port 3000
"""

import argparse
import asyncio
import json
import sys
from pathlib import Path
from typing import Any

from loguru import logger

from src.browser.renderer import BrowserSession
from src.config import get_settings
from src.errors import ProductNotFound, ScraperError
from src.models import SiteConfigModel
from src.scrapers.generic_scraper import GenericScraper
from src.scrapers.registry import get_available_sites, get_scraper_class
from src.types import SiteConfig
from src.utils.log_setup import configure_logging

EXIT_OK = 0
EXIT_ERROR = 1
EXIT_NOT_FOUND = 2


def read_site_config(file_path: str) -> SiteConfig:
    """Load a site configuration from a JSON file.

    Raises:
        FileNotFoundError: If file doesn't exist
    """
    path = Path(file_path)
    if not path.exists():
        raise FileNotFoundError(f"Site config not found: {file_path}")

    with open(path, "r", encoding="utf-8") as f:
        data = json.load(f)

    return SiteConfigModel.model_validate(data).to_site_config()


def _print_json(payload: dict[str, Any]) -> None:
    print(json.dumps(payload, indent=2, ensure_ascii=False))


async def run_command(args: argparse.Namespace) -> dict[str, Any]:
    """Run one scrape command against a browser session owned by this call."""
    settings = get_settings()
    site_config = read_site_config(args.config) if args.command == "scrape" else None

    async with BrowserSession(headless=settings.headless) as browser:
        if args.command == "search":
            scraper = get_scraper_class(args.site)(browser)
            result = await scraper.search(args.query, args.page, args.per_page)
            return result.to_dict()

        if args.command == "product":
            scraper = get_scraper_class(args.site)(browser)
            product = await scraper.get_product(args.code)
            return product.to_dict()

        result = await GenericScraper(browser).scrape_with_config(site_config, args.query)
        return result.to_dict()


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        description="Scrape product listings and product pages",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  # Search the default site
  python -m src.cli search "claw hammer"

  # Product details by code
  python -m src.cli product 12345

  # Any site, described by a JSON selector config
  python -m src.cli scrape --config site.json "claw hammer"

  # Start the HTTP API
  python -m src.cli serve --port 3000
        """,
    )
    parser.add_argument(
        "--verbose",
        "-v",
        action="store_true",
        help="Enable verbose debug logging",
    )

    subparsers = parser.add_subparsers(dest="command", required=True)

    search_parser = subparsers.add_parser("search", help="Search a site")
    search_parser.add_argument("query", help="Search terms")
    search_parser.add_argument("--page", type=int, default=1, help="Page number (default: 1)")
    search_parser.add_argument(
        "--per-page", type=int, default=24, help="Results per page (default: 24)"
    )

    product_parser = subparsers.add_parser("product", help="Fetch one product page")
    product_parser.add_argument("code", help="Product code")

    for site_parser in (search_parser, product_parser):
        site_parser.add_argument(
            "--site",
            choices=get_available_sites(),
            default=get_settings().default_site,
            help="Site to scrape",
        )

    scrape_parser = subparsers.add_parser("scrape", help="Scrape using a site config")
    scrape_parser.add_argument(
        "--config", "-c", required=True, help="Path to site config JSON file"
    )
    scrape_parser.add_argument("query", help="Search terms")

    serve_parser = subparsers.add_parser("serve", help="Run the HTTP API")
    serve_parser.add_argument("--host", default=None, help="Bind address")
    serve_parser.add_argument("--port", type=int, default=None, help="Port")

    return parser


def main(argv: list[str] | None = None) -> int:
    """Main CLI entry point.

    Returns:
        Exit code (0 for success, 1 for error, 2 for product not found)
    """
    args = build_parser().parse_args(argv)
    configure_logging(get_settings(), verbose=args.verbose)

    if args.command == "serve":
        import uvicorn

        settings = get_settings()
        uvicorn.run(
            "src.api:app",
            host=args.host or settings.host,
            port=args.port or settings.port,
        )
        return EXIT_OK

    try:
        payload = asyncio.run(run_command(args))
    except ProductNotFound as e:
        logger.error(f"Product {e.product_code} not found")
        return EXIT_NOT_FOUND
    except (FileNotFoundError, ValueError) as e:
        logger.error(str(e))
        return EXIT_ERROR
    except ScraperError as e:
        logger.error(str(e))
        return EXIT_ERROR

    _print_json(payload)
    return EXIT_OK


if __name__ == "__main__":
    sys.exit(main())
