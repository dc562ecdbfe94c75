"""
Extractor registry: builds configured extractors from source definitions.
"""

from typing import Optional

import structlog

from scholarship_scraper.config.loader import ScraperConfig, SourceConfig
from scholarship_scraper.core.retry_handler import RetryHandler
from scholarship_scraper.exceptions import ConfigError

from .base import BaseScraper
from .daad import DAADScraper
from .erasmus import ErasmusScraper
from .government_portal import GovernmentPortalScraper
from .mit import MITScraper
from .selector import SelectorScraper

logger = structlog.get_logger(__name__)


# Extractor registry, keyed by the source's `scraper` setting
SCRAPERS: dict[str, type[BaseScraper]] = {
    "selector": SelectorScraper,
    "mit": MITScraper,
    "daad": DAADScraper,
    "erasmus": ErasmusScraper,
    "government_portal": GovernmentPortalScraper,
}


def create_scraper(source: SourceConfig, config: ScraperConfig, **kwargs) -> BaseScraper:
    """
    Instantiate the extractor for one source.

    Args:
        source: Source definition
        config: Global settings (user agent, retry policy)
        **kwargs: Passed to the extractor (e.g. transport, playwright_factory)

    Raises:
        ConfigError: Unknown scraper key, a type the extractor cannot serve,
            or invalid extractor settings
    """
    scraper_class = SCRAPERS.get(source.scraper)
    if scraper_class is None:
        raise ConfigError(
            f"Unknown scraper '{source.scraper}', expected one of {sorted(SCRAPERS)}",
            source=source.id,
        )

    if scraper_class.source_type and scraper_class.source_type != source.type:
        raise ConfigError(
            f"Scraper '{source.scraper}' needs type '{scraper_class.source_type}', got '{source.type}'",
            source=source.id,
        )

    retry_handler = RetryHandler(
        retries=config.retry.retries,
        base_delay=config.retry.base_delay,
        max_delay=config.retry.max_delay,
    )

    return scraper_class(
        source,
        user_agent=config.user_agent,
        retry_handler=retry_handler,
        **kwargs,
    )


def build_scrapers(
    config: ScraperConfig,
    source_ids: Optional[list[str]] = None,
) -> list[BaseScraper]:
    """
    Build extractors for all enabled sources, in configuration order.

    Args:
        config: Loaded scraper configuration
        source_ids: Optional subset of source ids to include

    Returns:
        List of extractors
    """
    sources = config.enabled_sources
    if source_ids:
        unknown = set(source_ids) - {s.id for s in config.sources}
        if unknown:
            logger.warning("unknown_source_ids", ids=sorted(unknown))
        sources = [s for s in sources if s.id in source_ids]

    scrapers = [create_scraper(source, config) for source in sources]
    logger.info("scrapers_built", count=len(scrapers), sources=[s.id for s in sources])
    return scrapers
