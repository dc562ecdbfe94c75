"""
Erasmus+ joint master catalogue (EACEA).

The catalogue groups programmes into funding streams shown as tabs. Each
stream is opened by clicking its tab; the page is reloaded before the
next one so every click starts from the same landing state. A page with
no streams is read as a single listing.
"""

from typing import Optional

from bs4 import BeautifulSoup, Tag
from playwright.async_api import Page

from scholarship_scraper.core.models import RawScholarship

from .dynamic import BaseDynamicScraper

STREAM_SELECTOR = ".funding-stream, .program-type, .funding-category, [data-stream], .tab-item"
ITEM_SELECTOR = ".program-item, .scholarship-item, .opportunity-item, [data-program], .funding-opportunity"
NAME_SELECTOR = "h2, h3, .title, .program-name, [data-title]"
COUNTRY_SELECTOR = ".countries, [data-countries], .location"
DEGREE_SELECTOR = ".degree, [data-degree], .level, .education-level"
DEADLINE_SELECTOR = ".deadline, [data-deadline], .date, .application-deadline"

DEFAULT_COUNTRY = "European Union"
DEFAULT_DEGREE = "Masters"


def split_countries(text: Optional[str]) -> list[str]:
    """Comma-separated host countries, defaulting to the EU as a whole."""
    countries = [c.strip() for c in (text or "").split(",") if c.strip()]
    return countries or [DEFAULT_COUNTRY]


class ErasmusScraper(BaseDynamicScraper):
    """Stream-by-stream extractor for the Erasmus+ catalogue."""

    async def scrape(self) -> list[RawScholarship]:
        self.logger.info("scrape_started", url=self.url)
        scholarships: list[RawScholarship] = []

        async with self.open_page() as page:
            await self.navigate(page, self.url)
            await self.wait_for_javascript(page, 2.0)
            await self.scroll_to_load_content(page, max_scrolls=5)

            streams = await self.extract_texts(page, STREAM_SELECTOR)

            if streams:
                self.logger.info("funding_streams_found", count=len(streams), streams=streams)
                for index, label in enumerate(streams):
                    try:
                        scholarships.extend(await self._scrape_stream(page, index, label))
                        if index < len(streams) - 1:
                            await self.navigate(page, self.url)
                            await self.wait_for_javascript(page, 1.0)
                    except Exception as e:
                        self.logger.warning("stream_failed", stream=label, index=index, error=str(e))
            else:
                self.logger.info("no_funding_streams")
                soup = await self.page_html(page)
                scholarships.extend(self.extract_from_page(soup, page.url or self.url))

        self.logger.info("scrape_finished", count=len(scholarships))
        return scholarships

    async def _scrape_stream(self, page: Page, index: int, label: str) -> list[RawScholarship]:
        await self.click_element(page, f"{STREAM_SELECTOR} >> nth={index}", wait_after=1.5)
        soup = await self.page_html(page)
        items = self.extract_from_page(soup, page.url or self.url)
        self.logger.debug("stream_extracted", stream=label, count=len(items))
        return items

    def extract_from_page(self, soup: BeautifulSoup, page_url: str) -> list[RawScholarship]:
        results = []

        for item in soup.select(ITEM_SELECTOR):
            try:
                scholarship = self._extract_item(item, page_url)
            except Exception as e:
                self.logger.warning("item_extraction_failed", error=str(e))
                continue
            if scholarship is not None:
                results.append(scholarship)

        return results

    def _extract_item(self, item: Tag, page_url: str) -> Optional[RawScholarship]:
        name = self.select_text(item, NAME_SELECTOR)
        link = self.extract_link(item.select_one("a, [href]"), page_url)

        if not name or not link:
            return None

        return RawScholarship(
            name=name,
            source=self.name,
            country=split_countries(self.select_text(item, COUNTRY_SELECTOR)),
            degree=self.select_text(item, DEGREE_SELECTOR) or DEFAULT_DEGREE,
            deadline=self.select_text(item, DEADLINE_SELECTOR),
            link=link,
        )
