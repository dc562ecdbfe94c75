"""
MIT Student Financial Services - graduate funding listings.

The page layout changes often, so extraction tries a list of known item
selectors first and falls back to scanning headings and links for
funding keywords.
"""

import re
from typing import Optional

from bs4 import BeautifulSoup, Tag

from scholarship_scraper.core.models import RawScholarship

from .static import BaseStaticScraper

FUNDING_SELECTORS = [
    ".funding-opportunity",
    ".scholarship-item",
    ".award-listing",
    ".fellowship-item",
    "article.funding",
    ".financial-aid-item",
]

NAME_SELECTORS = ["h2", "h3", "h4", ".title", ".name", ".award-name", "a"]
DEADLINE_SELECTORS = [".deadline", ".date", ".due-date", "time"]
AMOUNT_SELECTORS = [".amount", ".value", ".funding-amount"]
DESCRIPTION_SELECTORS = [".description", ".summary", "p"]

HEADING_KEYWORDS = ("fellowship", "scholarship", "funding", "award", "grant")
LINK_KEYWORDS = ("fellowship", "scholarship", "funding")

AMOUNT_PATTERN = re.compile(r"\$[\d,]+(?:\s*(?:per|/)\s*(?:year|semester|month))?", re.IGNORECASE)

COUNTRY = "United States"
DEFAULT_DEGREES = ["Masters", "PhD"]


def detect_degrees(text: str) -> list[str]:
    """Degree levels mentioned in text (Masters and PhD when none are)."""
    text = text.lower()
    degrees = []
    if "master" in text or "graduate" in text:
        degrees.append("Masters")
    if "phd" in text or "doctoral" in text or "doctorate" in text:
        degrees.append("PhD")
    if "postdoc" in text:
        degrees.append("Postdoc")
    return degrees or list(DEFAULT_DEGREES)


class MITScraper(BaseStaticScraper):
    """Extractor for MIT graduate fellowships and awards."""

    async def scrape(self) -> list[RawScholarship]:
        self.logger.info("scrape_started", url=self.url)

        soup = self.parse_html(await self.fetch_html(self.url))

        items = []
        for selector in FUNDING_SELECTORS:
            items = soup.select(selector)
            if items:
                self.logger.debug("funding_items_found", selector=selector, count=len(items))
                break

        if not items:
            self.logger.warning("no_funding_items_using_broad_scan")
            scholarships = self.extract_broad(soup)
        else:
            scholarships = []
            for item in items:
                try:
                    scholarship = self._extract_item(item)
                except Exception as e:
                    self.logger.warning("item_extraction_failed", error=str(e))
                    continue
                if scholarship is not None:
                    scholarships.append(scholarship)

        self.logger.info("scrape_finished", count=len(scholarships))
        return scholarships

    def _first_text(self, element: Tag, selectors: list[str], min_length: int = 0) -> str:
        text = ""
        for selector in selectors:
            text = self.select_text(element, selector)
            if text and len(text) > min_length:
                return text
        return text

    def _extract_item(self, item: Tag) -> Optional[RawScholarship]:
        name = self._first_text(item, NAME_SELECTORS)
        if not name:
            self.logger.debug("item_skipped_no_name")
            return None

        item_text = self.extract_text(item)

        amount = self._first_text(item, AMOUNT_SELECTORS)
        if not amount:
            match = AMOUNT_PATTERN.search(item_text)
            amount = match.group(0) if match else ""

        return RawScholarship(
            name=name,
            source=self.name,
            country=COUNTRY,
            degree=detect_degrees(item_text),
            deadline=self._first_text(item, DEADLINE_SELECTORS) or "Varies",
            link=self.extract_link(item.select_one("a"), self.url) or self.url,
            amount=amount or None,
            description=self._first_text(item, DESCRIPTION_SELECTORS, min_length=20) or None,
        )

    def extract_broad(self, soup: BeautifulSoup) -> list[RawScholarship]:
        """Fallback: funding headings with their section, then funding links."""
        scholarships: list[RawScholarship] = []

        for heading in soup.select("h2, h3, h4"):
            heading_text = self.extract_text(heading)
            if not any(k in heading_text.lower() for k in HEADING_KEYWORDS):
                continue

            section = heading.parent if heading.parent is not None else heading
            section_text = self.extract_text(section)
            match = AMOUNT_PATTERN.search(section_text)

            scholarships.append(
                RawScholarship(
                    name=heading_text,
                    source=self.name,
                    country=COUNTRY,
                    degree=detect_degrees(section_text),
                    deadline="Varies",
                    link=self.extract_link(section.select_one("a"), self.url) or self.url,
                    amount=match.group(0) if match else None,
                    description=section_text[:200],
                )
            )

        names = {s.name for s in scholarships}
        for anchor in soup.select("a"):
            text = self.extract_text(anchor)
            if len(text) <= 10 or text in names:
                continue
            if not any(k in text.lower() for k in LINK_KEYWORDS):
                continue

            names.add(text)
            scholarships.append(
                RawScholarship(
                    name=text,
                    source=self.name,
                    country=COUNTRY,
                    degree=list(DEFAULT_DEGREES),
                    deadline="Varies",
                    link=self.extract_link(anchor, self.url) or self.url,
                    description="MIT graduate funding opportunity",
                )
            )

        return scholarships
