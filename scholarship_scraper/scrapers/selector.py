"""
Config-driven extractor for static listing pages.

Selectors (CSS) come from the source definition:

    selectors:
      container: ".scholarship"     # required, one per listing
      name: "h3"                    # required
      link: "a"                     # default "a"
      deadline: ".deadline"
      degree: ".level"
      country: ".country"
      description: "p"
      amount: ".amount"
    pagination:
      next_selector: "a[rel=next]"
      max_pages: 5
"""

from typing import Optional

from bs4 import BeautifulSoup, Tag

from scholarship_scraper.core.models import RawScholarship
from scholarship_scraper.exceptions import ConfigError

from .static import BaseStaticScraper

DEFAULT_MAX_PAGES = 10


class SelectorScraper(BaseStaticScraper):
    """Extracts one record per container element on each listing page."""

    def __init__(self, *args, **kwargs):
        super().__init__(*args, **kwargs)

        self.selectors = dict(self.source.selectors)
        for key in ("container", "name"):
            if not self.selectors.get(key):
                raise ConfigError(f"Missing selector: {key}", source=self.source.id)
        self.selectors.setdefault("link", "a")

        self.next_selector: Optional[str] = self.source.pagination.get("next_selector")
        self.max_pages = int(self.source.pagination.get("max_pages", DEFAULT_MAX_PAGES))

    async def scrape(self) -> list[RawScholarship]:
        self.logger.info("scrape_started", url=self.url)

        scholarships: list[RawScholarship] = []
        seen_pages: set[str] = set()
        url: Optional[str] = self.url
        pages = 0

        while url and url not in seen_pages and pages < self.max_pages:
            seen_pages.add(url)
            soup = self.parse_html(await self.fetch_html(url))

            page_items = self.extract_from_page(soup, url)
            scholarships.extend(page_items)
            pages += 1

            self.logger.debug("page_extracted", page=pages, url=url, count=len(page_items))
            url = self._next_page_url(soup, url)

        self.logger.info("scrape_finished", pages=pages, count=len(scholarships))
        return scholarships

    def extract_from_page(self, soup: BeautifulSoup, page_url: str) -> list[RawScholarship]:
        results = []

        for container in soup.select(self.selectors["container"]):
            try:
                item = self._extract_item(container, page_url)
            except Exception as e:
                self.logger.warning("item_extraction_failed", error=str(e))
                continue

            if item is not None:
                results.append(item)

        return results

    def _extract_item(self, container: Tag, page_url: str) -> Optional[RawScholarship]:
        name = self.select_text(container, self.selectors["name"])
        if not name:
            self.logger.debug("item_skipped_no_name")
            return None

        link_el = container if container.name == "a" else container.select_one(self.selectors["link"])
        link = self.extract_link(link_el, page_url) or page_url

        return RawScholarship(
            name=name,
            source=self.name,
            country=self.select_text(container, self.selectors.get("country")) or (self.source.country or ""),
            degree=self.select_text(container, self.selectors.get("degree")),
            deadline=self.select_text(container, self.selectors.get("deadline")),
            link=link,
            description=self.select_text(container, self.selectors.get("description")) or None,
            amount=self.select_text(container, self.selectors.get("amount")) or None,
        )

    def _next_page_url(self, soup: BeautifulSoup, current_url: str) -> Optional[str]:
        if not self.next_selector:
            return None

        link = self.extract_link(soup.select_one(self.next_selector), current_url)
        return link or None
