"""
DAAD scholarship database (German Academic Exchange Service).

The result list is rendered client-side and paginated with a "next"
control, so this source needs a browser session.
"""

from typing import Optional

from bs4 import BeautifulSoup, Tag
from playwright.async_api import Page

from scholarship_scraper.core.models import RawScholarship

from .dynamic import BaseDynamicScraper, is_disabled

ITEM_SELECTOR = ".c-search-result__item, .scholarship-item, .result-item, [data-scholarship], .c-result-item"
NAME_SELECTOR = "h2, h3, .c-search-result__title, .title, .scholarship-name, [data-title]"
COUNTRY_SELECTOR = ".country, [data-country], .location, .c-search-result__country"
DEGREE_SELECTOR = ".degree, [data-degree], .level, .education-level, .c-search-result__degree"
DEADLINE_SELECTOR = ".deadline, [data-deadline], .date, .application-deadline, .c-search-result__deadline"
NEXT_SELECTOR = '.pagination__next, .next-page, [data-next], .c-pagination__next, a[rel="next"]'

DEFAULT_COUNTRY = "Germany"
DEFAULT_DEGREE = "Masters"
DEFAULT_MAX_PAGES = 10


class DAADScraper(BaseDynamicScraper):
    """Paginated extractor for the DAAD scholarship database."""

    def __init__(self, *args, **kwargs):
        super().__init__(*args, **kwargs)
        self.max_pages = int(self.source.pagination.get("max_pages", DEFAULT_MAX_PAGES))

    async def scrape(self) -> list[RawScholarship]:
        self.logger.info("scrape_started", url=self.url)
        scholarships: list[RawScholarship] = []

        async with self.open_page() as page:
            await self.navigate(page, self.url)
            await self.wait_for_javascript(page, 3.0)

            current_page = 1
            while True:
                soup = await self.page_html(page)
                page_items = self.extract_from_page(soup, page.url or self.url)
                scholarships.extend(page_items)

                self.logger.debug("page_extracted", page=current_page, count=len(page_items))

                if current_page >= self.max_pages:
                    self.logger.info("max_pages_reached", pages=current_page)
                    break

                if is_disabled(soup.select_one(NEXT_SELECTOR)):
                    self.logger.info("last_page_reached", pages=current_page)
                    break

                try:
                    await self._next_page(page)
                except Exception as e:
                    self.logger.warning("next_page_failed", page=current_page + 1, error=str(e))
                    break

                current_page += 1

        self.logger.info("scrape_finished", count=len(scholarships))
        return scholarships

    async def _next_page(self, page: Page) -> None:
        await self.click_element(page, NEXT_SELECTOR, wait_after=0.5)
        await self.wait_for_javascript(page, 2.0)

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
        link_el = item if item.name == "a" else item.select_one("a[href], [href]")
        link = self.extract_link(link_el, page_url)

        if not name or not link:
            return None

        return RawScholarship(
            name=name,
            source=self.name,
            country=self.select_text(item, COUNTRY_SELECTOR) or DEFAULT_COUNTRY,
            degree=self.select_text(item, DEGREE_SELECTOR) or DEFAULT_DEGREE,
            deadline=self.select_text(item, DEADLINE_SELECTOR),
            link=link,
        )
