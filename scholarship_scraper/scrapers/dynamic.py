"""
Base for sources that render their listings with JavaScript.

Drives headless Chromium through Playwright. A browser session is a
scoped resource: open_page() always closes page, browser and the
Playwright driver on exit, whether scraping succeeded or not.
"""

from contextlib import asynccontextmanager
from typing import AsyncIterator, Callable, Optional

from bs4 import BeautifulSoup, Tag
from playwright.async_api import Page, async_playwright

from .base import BaseScraper

BROWSER_ARGS = [
    "--no-sandbox",
    "--disable-setuid-sandbox",
    "--disable-dev-shm-usage",
    "--disable-gpu",
]

VIEWPORT = {"width": 1920, "height": 1080}


def is_disabled(element: Optional[Tag]) -> bool:
    """True for a missing element or one marked disabled."""
    if element is None:
        return True
    if element.has_attr("disabled") or element.get("aria-disabled") == "true":
        return True
    return any("disabled" in cls for cls in element.get("class") or [])


class BaseDynamicScraper(BaseScraper):
    """
    Extractor for client-rendered pages.

    Usage:
        class MySource(BaseDynamicScraper):
            async def scrape(self):
                async with self.open_page() as page:
                    await self.navigate(page, self.url)
                    soup = await self.page_html(page)
                    ...
    """

    source_type = "dynamic"

    def __init__(self, *args, playwright_factory: Callable = async_playwright, **kwargs):
        """
        Args:
            playwright_factory: Returns a Playwright context manager with
                start() (tests pass a fake)
        """
        super().__init__(*args, **kwargs)
        self._playwright_factory = playwright_factory

    @property
    def timeout_ms(self) -> float:
        return self.timeout * 1000

    @asynccontextmanager
    async def open_page(self) -> AsyncIterator[Page]:
        """Start a browser session and yield a configured page."""
        playwright = await self._playwright_factory().start()
        browser = None
        page = None

        try:
            self.logger.info("browser_starting")
            browser = await playwright.chromium.launch(headless=True, args=BROWSER_ARGS)
            page = await browser.new_page(user_agent=self.user_agent, viewport=VIEWPORT)
            page.set_default_timeout(self.timeout_ms)
            yield page
        finally:
            if page is not None:
                await self._close(page.close, "page")
            if browser is not None:
                await self._close(browser.close, "browser")
            await self._close(playwright.stop, "playwright")
            self.logger.debug("browser_closed")

    async def _close(self, close: Callable, resource: str) -> None:
        # Cleanup continues with the remaining resources even if one close fails
        try:
            await close()
        except Exception as e:
            self.logger.warning("close_failed", resource=resource, error=str(e))

    async def navigate(self, page: Page, url: str, wait_until: str = "networkidle") -> None:
        """Throttled, retried page.goto."""
        async def goto():
            self.logger.info("navigating", url=url)
            await page.goto(url, wait_until=wait_until, timeout=self.timeout_ms)

        await self.rate_limiter.throttle(lambda: self.retry_handler.execute_with_retry(goto))

    async def wait_for_javascript(self, page: Page, delay: float = 1.0) -> None:
        """Give client-side rendering time to settle (delay in seconds)."""
        self.logger.debug("waiting_for_javascript", delay=delay)
        await page.wait_for_timeout(delay * 1000)

    async def scroll_to_load_content(
        self,
        page: Page,
        max_scrolls: int = 10,
        scroll_delay: float = 1.0,
    ) -> int:
        """
        Scroll to the bottom until the page stops growing.

        Returns:
            Number of scrolls performed
        """
        previous_height = None
        scrolls = 0

        while scrolls < max_scrolls:
            height = await page.evaluate("document.body.scrollHeight")
            if height == previous_height:
                break

            await page.evaluate("window.scrollTo(0, document.body.scrollHeight)")
            await page.wait_for_timeout(scroll_delay * 1000)

            previous_height = height
            scrolls += 1

        self.logger.info("scroll_complete", scrolls=scrolls)
        return scrolls

    async def click_element(self, page: Page, selector: str, wait_after: float = 0.5) -> None:
        try:
            await page.click(selector)
        except Exception as e:
            self.logger.warning("click_failed", selector=selector, error=str(e))
            raise
        await page.wait_for_timeout(wait_after * 1000)

    async def extract_texts(self, page: Page, selector: str) -> list[str]:
        """Trimmed text of every element matching selector ([] on failure)."""
        try:
            return await page.eval_on_selector_all(
                selector,
                "els => els.map(el => (el.textContent || '').trim())",
            )
        except Exception as e:
            self.logger.warning("extract_texts_failed", selector=selector, error=str(e))
            return []

    async def extract_links(self, page: Page, selector: str) -> list[str]:
        """Absolute hrefs of every element matching selector ([] on failure)."""
        try:
            hrefs = await page.eval_on_selector_all(
                selector,
                "els => els.map(el => el.href || el.getAttribute('href') || '')",
            )
        except Exception as e:
            self.logger.warning("extract_links_failed", selector=selector, error=str(e))
            return []

        return [self.resolve_url(href, page.url) for href in hrefs if href]

    async def page_html(self, page: Page) -> BeautifulSoup:
        """Current DOM of the page, parsed."""
        return BeautifulSoup(await page.content(), "lxml")
