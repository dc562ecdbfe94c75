"""
Config-driven extractor for national government scholarship portals.

Portals differ only in markup, so one class serves all of them:

    country: Australia                 # required
    selectors:
      container: ".scholarship-card"   # required
      name: "h3"                       # required
      link: "a"                        # required
      deadline: ".deadline"
      degree: ".level"
      description: ".summary"
      amount: ".value"
    pagination:
      enabled: true
      next_button_selector: "button.next"
      max_pages: 5
    sections:
      enabled: true
      section_selector: "nav.programs a"
      max_sections: 4
"""

from typing import Optional

from bs4 import BeautifulSoup, Tag
from playwright.async_api import Page

from scholarship_scraper.core.models import RawScholarship
from scholarship_scraper.exceptions import ConfigError

from .dynamic import BaseDynamicScraper, is_disabled

REQUIRED_SELECTORS = ("container", "name", "link")
NOT_SPECIFIED = "Not specified"
DEFAULT_MAX_PAGES = 10


class GovernmentPortalScraper(BaseDynamicScraper):
    """
    Extractor for single-country government portals.

    Supports optional click-through pagination and an optional crawl of
    several program sections, each of which may itself be paginated.
    """

    def __init__(self, *args, **kwargs):
        super().__init__(*args, **kwargs)

        if not self.source.country:
            raise ConfigError("Government portal requires a country", source=self.source.id)

        self.country = self.source.country
        self.selectors = dict(self.source.selectors)
        for key in REQUIRED_SELECTORS:
            if not self.selectors.get(key):
                raise ConfigError(f"Missing selector: {key}", source=self.source.id)

        self.pagination = self.source.pagination
        self.sections = self.source.sections

    async def scrape(self) -> list[RawScholarship]:
        self.logger.info("scrape_started", url=self.url, country=self.country)

        async with self.open_page() as page:
            await self.navigate(page, self.url)
            await self.wait_for_javascript(page, 2.0)

            if self.sections.get("enabled"):
                scholarships = await self.scrape_sections(page)
            else:
                scholarships = await self.scrape_with_pagination(page)

        self.logger.info("scrape_finished", country=self.country, count=len(scholarships))
        return scholarships

    async def scrape_sections(self, page: Page) -> list[RawScholarship]:
        """Visit each program section link and scrape it. Failed sections are skipped."""
        section_selector = self.sections.get("section_selector")
        if not section_selector:
            self.logger.warning("section_selector_missing")
            return await self.scrape_with_pagination(page)

        links = await self.extract_links(page, section_selector)
        max_sections = self.sections.get("max_sections") or len(links)
        to_visit = links[: int(max_sections)]

        self.logger.info("sections_found", found=len(links), processing=len(to_visit))

        scholarships: list[RawScholarship] = []
        for index, url in enumerate(to_visit, start=1):
            try:
                await self.navigate(page, url)
                await self.wait_for_javascript(page, 1.5)
                section_items = await self.scrape_with_pagination(page)
            except Exception as e:
                self.logger.warning("section_failed", section=index, url=url, error=str(e))
                continue

            scholarships.extend(section_items)
            self.logger.debug("section_extracted", section=index, count=len(section_items))

        return scholarships

    async def scrape_with_pagination(self, page: Page) -> list[RawScholarship]:
        soup = await self.page_html(page)
        scholarships = self.extract_from_page(soup, page.url or self.url)

        next_selector = self.pagination.get("next_button_selector")
        if not (self.pagination.get("enabled") and next_selector):
            return scholarships

        max_pages = int(self.pagination.get("max_pages") or DEFAULT_MAX_PAGES)
        current_page = 1

        while current_page < max_pages:
            if is_disabled(soup.select_one(next_selector)):
                self.logger.debug("last_page_reached", page=current_page)
                break

            try:
                await self.click_element(page, next_selector, wait_after=1.0)
                await self.wait_for_javascript(page, 1.5)
            except Exception as e:
                self.logger.warning("next_page_failed", page=current_page + 1, error=str(e))
                break

            soup = await self.page_html(page)
            page_items = self.extract_from_page(soup, page.url or self.url)
            scholarships.extend(page_items)
            current_page += 1

            self.logger.debug("page_extracted", page=current_page, count=len(page_items))

        self.logger.info("pagination_finished", pages=current_page)
        return scholarships

    def extract_from_page(self, soup: BeautifulSoup, page_url: str) -> list[RawScholarship]:
        results = []

        for container in soup.select(self.selectors["container"]):
            try:
                scholarship = self._extract_item(container, page_url)
            except Exception as e:
                self.logger.warning("item_extraction_failed", error=str(e))
                continue
            if scholarship is not None:
                results.append(scholarship)

        return results

    def _extract_item(self, container: Tag, page_url: str) -> Optional[RawScholarship]:
        name = self.select_text(container, self.selectors["name"])
        link = self.extract_link(container.select_one(self.selectors["link"]), page_url)

        if not name or not link:
            return None

        return RawScholarship(
            name=name,
            source=self.name,
            country=self.country,
            degree=self.select_text(container, self.selectors.get("degree")) or NOT_SPECIFIED,
            deadline=self.select_text(container, self.selectors.get("deadline")) or NOT_SPECIFIED,
            link=link,
            description=self.select_text(container, self.selectors.get("description")) or None,
            amount=self.select_text(container, self.selectors.get("amount")) or None,
        )
