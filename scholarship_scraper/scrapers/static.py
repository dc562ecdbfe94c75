"""
Base for sources served as plain HTML.

Fetches with httpx and parses with BeautifulSoup (lxml backend). Every
fetch goes through the source's rate limiter and retry handler.
"""

from typing import Optional

import httpx
from bs4 import BeautifulSoup

from scholarship_scraper.exceptions import FetchError

from .base import BaseScraper

DEFAULT_HEADERS = {
    "Accept": "text/html,application/xhtml+xml,application/xml;q=0.9,*/*;q=0.8",
    "Accept-Language": "en-US,en;q=0.9",
}


class BaseStaticScraper(BaseScraper):
    """
    Extractor for server-rendered pages.

    Usage:
        class MySource(BaseStaticScraper):
            async def scrape(self):
                soup = self.parse_html(await self.fetch_html(self.url))
                ...
    """

    source_type = "static"

    def __init__(self, *args, transport: Optional[httpx.AsyncBaseTransport] = None, **kwargs):
        """
        Args:
            transport: Optional httpx transport (tests pass httpx.MockTransport)
        """
        super().__init__(*args, **kwargs)
        self._transport = transport

    async def fetch_html(self, url: str) -> str:
        """
        Fetch a page as text.

        Throttled by the rate limiter, then retried with backoff.

        Raises:
            FetchError: Non-2xx response after all attempts
            httpx.HTTPError: Network failure after all attempts
        """
        return await self.rate_limiter.throttle(
            lambda: self.retry_handler.execute_with_retry(lambda: self._get(url))
        )

    async def _get(self, url: str) -> str:
        self.logger.info("fetching_url", url=url)

        async with httpx.AsyncClient(
            timeout=httpx.Timeout(self.timeout),
            follow_redirects=True,
            headers={**DEFAULT_HEADERS, "User-Agent": self.user_agent},
            transport=self._transport,
        ) as client:
            response = await client.get(url)

        if not response.is_success:
            raise FetchError(
                f"HTTP {response.status_code}: {response.reason_phrase} for {url}",
                url=url,
                status_code=response.status_code,
            )

        html = response.text
        self.logger.debug("fetched_url", url=url, bytes=len(html))
        return html

    def parse_html(self, html: str) -> BeautifulSoup:
        return BeautifulSoup(html, "lxml")

