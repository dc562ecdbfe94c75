"""
Base class for source extractors.

Extractors implement the acquisition phase of scraping - fetching a
source and returning loosely-typed RawScholarship records. The
orchestrator depends only on the ScholarshipScraper protocol.
"""

from abc import ABC, abstractmethod
from typing import Optional, Protocol, runtime_checkable
from urllib.parse import urljoin

import structlog
from bs4 import Tag

from scholarship_scraper.config.loader import DEFAULT_USER_AGENT, SourceConfig
from scholarship_scraper.core.models import RawScholarship
from scholarship_scraper.core.rate_limiter import RateLimiter
from scholarship_scraper.core.retry_handler import RetryHandler

logger = structlog.get_logger(__name__)


@runtime_checkable
class ScholarshipScraper(Protocol):
    """Anything with a name and an async scrape() returning raw records."""

    name: str

    async def scrape(self) -> list[RawScholarship]:
        ...


class BaseScraper(ABC):
    """
    Abstract base class for configured extractors.

    Each instance owns its own RateLimiter (from the source's rate_limit)
    and RetryHandler; neither is shared with other sources.
    """

    # Source type this extractor serves (static or dynamic)
    source_type: Optional[str] = None

    def __init__(
        self,
        source: SourceConfig,
        user_agent: str = DEFAULT_USER_AGENT,
        retry_handler: Optional[RetryHandler] = None,
        rate_limiter: Optional[RateLimiter] = None,
    ):
        """
        Initialize extractor.

        Args:
            source: Source configuration
            user_agent: User-Agent sent with every request
            retry_handler: Retry policy for fetches (default 3 / 1s / 10s)
            rate_limiter: Request spacing (default from source.rate_limit)
        """
        self.source = source
        self.name = source.name
        self.url = source.url
        self.user_agent = user_agent
        self.timeout = source.timeout
        self.retry_handler = retry_handler or RetryHandler()
        self.rate_limiter = rate_limiter or RateLimiter(source.rate_limit)
        self.logger = logger.bind(scraper=self.name)

    @abstractmethod
    async def scrape(self) -> list[RawScholarship]:
        """
        Extract raw records from the source.

        Returns:
            List of RawScholarship (possibly empty)

        Raises:
            Fetch or navigation errors once retries are exhausted
        """
        pass

    def extract_text(self, element: Optional[Tag]) -> str:
        """Visible text of an element with whitespace collapsed."""
        if element is None:
            return ""
        return " ".join(element.get_text(" ").split())

    def select_text(self, element: Tag, selector: Optional[str]) -> str:
        """Text of the first match of selector inside element."""
        if not selector:
            return ""
        return self.extract_text(element.select_one(selector))

    def extract_link(self, element: Optional[Tag], base_url: Optional[str] = None) -> str:
        """Absolute href of an element ("" when missing)."""
        if element is None:
            return ""
        href = (element.get("href") or "").strip()
        if not href:
            return ""
        return self.resolve_url(href, base_url)

    def resolve_url(self, url: str, base_url: Optional[str] = None) -> str:
        """Resolve a possibly relative URL against base_url (default: source URL)."""
        if url.startswith(("http://", "https://")):
            return url

        try:
            return urljoin(base_url or self.url, url)
        except ValueError:
            self.logger.warning("url_resolve_failed", url=url, base_url=base_url or self.url)
            return url

    def __repr__(self) -> str:
        return f"{self.__class__.__name__}(name={self.name!r}, url={self.url!r})"
