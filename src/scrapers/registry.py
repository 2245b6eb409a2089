"""Site scraper registry.

Provides centralized mapping of site names to scraper classes.
Adding a new hard-coded site only requires adding an entry to SCRAPER_REGISTRY;
arbitrary sites go through GenericScraper instead.
"""

from typing import Type

from src.scrapers.base_scraper import BaseScraper
from src.scrapers.toolstation_scraper import ToolstationScraper

SCRAPER_REGISTRY: dict[str, Type[BaseScraper]] = {
    "toolstation": ToolstationScraper,
}


def get_scraper_class(site: str) -> Type[BaseScraper]:
    """Get scraper class for a site.

    Args:
        site: Site name (e.g., 'toolstation')

    Returns:
        Scraper class for the site

    Raises:
        ValueError: If site is not supported
    """
    if site not in SCRAPER_REGISTRY:
        available = ", ".join(SCRAPER_REGISTRY.keys())
        raise ValueError(f"Unknown site: {site}. Available: {available}")

    return SCRAPER_REGISTRY[site]


def get_available_sites() -> list[str]:
    """Get list of supported site names."""
    return list(SCRAPER_REGISTRY.keys())
