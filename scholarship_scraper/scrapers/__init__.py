"""
Source extractors.

Available extractors:
- SelectorScraper: Static listing pages described by CSS selectors
- MITScraper: MIT graduate funding (heuristic, with broad fallback)
- DAADScraper: DAAD database (browser, paginated)
- ErasmusScraper: Erasmus+ catalogue (browser, per funding stream)
- GovernmentPortalScraper: Government portals (browser, config-driven)
"""

from .base import BaseScraper, ScholarshipScraper
from .static import BaseStaticScraper
from .dynamic import BaseDynamicScraper
from .selector import SelectorScraper
from .mit import MITScraper
from .daad import DAADScraper
from .erasmus import ErasmusScraper
from .government_portal import GovernmentPortalScraper
from .registry import SCRAPERS, build_scrapers, create_scraper

__all__ = [
    "BaseScraper",
    "ScholarshipScraper",
    "BaseStaticScraper",
    "BaseDynamicScraper",
    "SelectorScraper",
    "MITScraper",
    "DAADScraper",
    "ErasmusScraper",
    "GovernmentPortalScraper",
    "SCRAPERS",
    "build_scrapers",
    "create_scraper",
]
