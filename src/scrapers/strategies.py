"""How product containers are located on a listing page.

Three variants, selected by configuration rather than hard-coded per site:

- structural: a known container selector, with optional field selectors
- marker: scan block elements whose text contains a marker token
  (e.g. "Product code: 12345") for sites without stable classes
- config: caller-supplied selectors for arbitrary sites
"""

import re
from dataclasses import dataclass, field
from functools import cached_property
from typing import Literal, Union

from src.types import SiteConfig, SiteSelectors

StrategyKind = Literal["structural", "marker", "config"]


@dataclass(frozen=True)
class StructuralSelectorStrategy:
    container_selector: str
    field_selectors: dict[str, str] = field(default_factory=dict)
    kind: StrategyKind = "structural"

    def snapshot_options(self) -> dict:
        return {
            "mode": self.kind,
            "containerSelector": self.container_selector,
            "fields": _field_specs(self.field_selectors),
        }


@dataclass(frozen=True)
class MarkerTextScanStrategy:
    marker_pattern: str  # first group captures the product identifier
    max_text_length: int = 1000
    scan_selector: str = "div, article, section"
    kind: StrategyKind = "marker"

    @cached_property
    def marker(self) -> re.Pattern:
        return re.compile(self.marker_pattern)

    def snapshot_options(self) -> dict:
        return {
            "mode": self.kind,
            "scanSelector": self.scan_selector,
            "markerPattern": self.marker_pattern,
            "markerFlags": "",
            "maxTextLength": self.max_text_length,
            "fields": {},
        }


@dataclass(frozen=True)
class ConfigDrivenStrategy:
    selectors: SiteSelectors
    image_attribute: str = "src"
    link_attribute: str = "href"
    kind: StrategyKind = "config"

    @classmethod
    def from_site_config(cls, site_config: SiteConfig) -> "ConfigDrivenStrategy":
        if site_config.selectors is None:
            raise ValueError("Site config has no selectors")
        return cls(
            selectors=site_config.selectors,
            image_attribute=site_config.image_attribute,
            link_attribute=site_config.link_attribute,
        )

    def snapshot_options(self) -> dict:
        return {
            "mode": self.kind,
            "containerSelector": self.selectors.product_card,
            "fields": _field_specs(
                self.selectors.field_selectors(),
                image_attribute=self.image_attribute,
                link_attribute=self.link_attribute,
            ),
        }


ExtractionStrategy = Union[
    StructuralSelectorStrategy, MarkerTextScanStrategy, ConfigDrivenStrategy
]


def _field_specs(
    selectors: dict[str, str],
    image_attribute: str = "src",
    link_attribute: str = "href",
) -> dict[str, dict]:
    attributes = {"image": image_attribute, "link": link_attribute}
    return {
        name: {"selector": selector, "attribute": attributes.get(name)}
        for name, selector in selectors.items()
    }
