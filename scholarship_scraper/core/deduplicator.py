"""
Scholarship deduplication using content hashing.

The same listing is often published on an aggregator and on the
institution's own page, or repeated across paginated listings.
"""

import hashlib
from typing import Iterable, Optional

import structlog

from .models import Scholarship

logger = structlog.get_logger(__name__)


def normalize_link(link: str) -> str:
    return link.lower().rstrip("/")


def generate_content_hash(
    source: str,
    link: str,
    name: str,
    deadline: Optional[str] = None,
) -> str:
    """
    Generate SHA-256 hash for scholarship deduplication.

    Hash is based on:
    - source: Source name
    - link: Listing URL (case and trailing slash insensitive)
    - name: Scholarship name (case insensitive)
    - deadline: Normalized deadline (optional)

    Returns:
        SHA-256 hex digest
    """
    content = f"{source}|{normalize_link(link)}|{name.lower().strip()}|{deadline or ''}"
    return hashlib.sha256(content.encode("utf-8")).hexdigest()


class Deduplicator:
    """
    Hash-based scholarship deduplicator.

    Keeps the first occurrence of each record. A later record is a duplicate
    when its content hash has been seen, or when another source already
    published its link. A link repeated within one source is a listing-page
    fallback shared by several records and never counts as a match.
    """

    def __init__(self):
        self._seen_hashes: dict[str, Scholarship] = {}
        self._link_sources: dict[str, str] = {}  # link -> first source
        self._shared_links: set[str] = set()

    @staticmethod
    def content_hash(scholarship: Scholarship) -> str:
        return generate_content_hash(
            source=scholarship.source,
            link=scholarship.link,
            name=scholarship.name,
            deadline=scholarship.deadline,
        )

    def is_duplicate(self, scholarship: Scholarship) -> bool:
        if self.content_hash(scholarship) in self._seen_hashes:
            return True
        link = normalize_link(scholarship.link)
        owner = self._link_sources.get(link)
        if owner is None or link in self._shared_links:
            return False
        return owner != scholarship.source

    def add(self, scholarship: Scholarship) -> None:
        """Add record to the index."""
        content_hash = self.content_hash(scholarship)
        self._seen_hashes[content_hash] = scholarship
        link = normalize_link(scholarship.link)
        if self._link_sources.get(link) == scholarship.source:
            self._shared_links.add(link)
        self._link_sources.setdefault(link, scholarship.source)

        logger.debug(
            "scholarship_indexed",
            hash=content_hash[:8],
            link=scholarship.link,
            name=scholarship.name[:50],
        )

    def process(self, scholarship: Scholarship) -> Optional[Scholarship]:
        """
        Check and add in one operation.

        Returns:
            The record if new, None if it is a duplicate
        """
        if self.is_duplicate(scholarship):
            logger.debug(
                "scholarship_skipped_duplicate",
                link=scholarship.link,
                source=scholarship.source,
            )
            return None

        self.add(scholarship)
        return scholarship

    def deduplicate(self, scholarships: Iterable[Scholarship]) -> list[Scholarship]:
        """Return first occurrences, preserving input order."""
        return [s for s in scholarships if self.process(s) is not None]

    def get_all(self) -> list[Scholarship]:
        """Get all unique records."""
        return list(self._seen_hashes.values())

    def clear(self) -> None:
        self._seen_hashes.clear()
        self._link_sources.clear()
        self._shared_links.clear()

    def __len__(self) -> int:
        return len(self._seen_hashes)
