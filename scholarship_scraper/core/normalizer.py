"""
Normalization of raw scholarship records into the canonical schema.

Handles:
- Country aliases ("usa", "uk", "deutschland")
- Degree levels, including mixed strings ("MS/PhD", "Bachelor or Master")
- Deadlines in ISO, US (MM/DD/YYYY) and free-text formats
- Scheme-less and malformed URLs
"""

import re
from datetime import date, datetime, timezone
from typing import Optional, Union
from urllib.parse import urlsplit

import structlog
from dateutil import parser as date_parser

from .models import RawScholarship, Scholarship, format_iso_utc

logger = structlog.get_logger(__name__)


DEGREE_MAPPING = {
    "bachelor": "Bachelors",
    "bachelors": "Bachelors",
    "undergraduate": "Bachelors",
    "undergrad": "Bachelors",
    "bs": "Bachelors",
    "ba": "Bachelors",
    "bsc": "Bachelors",
    "master": "Masters",
    "masters": "Masters",
    "graduate": "Masters",
    "grad": "Masters",
    "ms": "Masters",
    "ma": "Masters",
    "msc": "Masters",
    "m.s.": "Masters",
    "m.a.": "Masters",
    "phd": "PhD",
    "ph.d.": "PhD",
    "ph.d": "PhD",
    "doctorate": "PhD",
    "doctoral": "PhD",
    "doctor": "PhD",
    "postdoc": "Postdoc",
    "postdoctoral": "Postdoc",
    "post-doctoral": "Postdoc",
    "post-doc": "Postdoc",
}

COUNTRY_MAPPING = {
    "usa": "United States",
    "us": "United States",
    "u.s.": "United States",
    "u.s.a.": "United States",
    "united states of america": "United States",
    "uk": "United Kingdom",
    "u.k.": "United Kingdom",
    "britain": "United Kingdom",
    "great britain": "United Kingdom",
    "england": "United Kingdom",
    "germany": "Germany",
    "deutschland": "Germany",
    "france": "France",
    "spain": "Spain",
    "italy": "Italy",
    "canada": "Canada",
    "australia": "Australia",
    "japan": "Japan",
    "china": "China",
    "india": "India",
    "brazil": "Brazil",
    "mexico": "Mexico",
    "netherlands": "Netherlands",
    "holland": "Netherlands",
    "sweden": "Sweden",
    "norway": "Norway",
    "denmark": "Denmark",
    "finland": "Finland",
    "switzerland": "Switzerland",
    "austria": "Austria",
    "belgium": "Belgium",
    "poland": "Poland",
    "portugal": "Portugal",
    "greece": "Greece",
    "ireland": "Ireland",
    "new zealand": "New Zealand",
    "south korea": "South Korea",
    "korea": "South Korea",
    "singapore": "Singapore",
}

# Separators between degree levels in one string: / | & and or
DEGREE_SEPARATORS = re.compile(r"[/|&]|\band\b|\bor\b", re.IGNORECASE)

# MM/DD/YYYY, MM-DD-YYYY, YYYY-MM-DD
DATE_PATTERNS = [
    re.compile(r"^(\d{1,2})/(\d{1,2})/(\d{4})$"),
    re.compile(r"^(\d{1,2})-(\d{1,2})-(\d{4})$"),
    re.compile(r"^(\d{4})-(\d{1,2})-(\d{1,2})$"),
]


def capitalize_words(text: str) -> str:
    """Capitalize each space-separated word ("NEW york" -> "New York")."""
    return " ".join(word[:1].upper() + word[1:].lower() for word in text.split(" "))


class DataNormalizer:
    """
    Maps raw extractor output to canonical Scholarship records.

    Normalization never rejects a record: unrecognized values fall back to a
    cleaned-up form of the input and a warning is logged.
    """

    def __init__(
        self,
        degree_mapping: Optional[dict[str, str]] = None,
        country_mapping: Optional[dict[str, str]] = None,
    ):
        self.degree_mapping = degree_mapping or dict(DEGREE_MAPPING)
        self.country_mapping = country_mapping or dict(COUNTRY_MAPPING)
        # Longest key first so "undergraduate" beats "graduate" and "grad"
        self._degree_keys_by_length = sorted(self.degree_mapping, key=len, reverse=True)

    def normalize(self, raw: RawScholarship) -> Scholarship:
        """
        Normalize one raw record.

        Args:
            raw: Record as returned by an extractor

        Returns:
            Canonical Scholarship stamped with the current time
        """
        return Scholarship(
            name=self.normalize_name(raw.name),
            source=raw.source,
            country=self.normalize_country(raw.country),
            degree=self.normalize_degree(raw.degree),
            deadline=self.normalize_date(raw.deadline),
            link=self.normalize_url(raw.link),
            description=raw.description,
            eligibility=raw.eligibility,
            amount=raw.amount,
            scraped_at=format_iso_utc(datetime.now(timezone.utc)),
        )

    def normalize_name(self, name: Optional[str]) -> str:
        return (name or "").strip()

    def normalize_country(self, country: Union[str, list[str], None]) -> Union[str, list[str]]:
        """Map country aliases to canonical names, element-wise for lists."""
        if isinstance(country, (list, tuple)):
            return [self._normalize_country_name(c) for c in country]
        return self._normalize_country_name(country)

    def _normalize_country_name(self, country: Optional[str]) -> str:
        stripped = (country or "").strip()
        mapped = self.country_mapping.get(stripped.lower())
        if mapped:
            return mapped
        return capitalize_words(stripped)

    def normalize_degree(self, degree: Union[str, list[str], None]) -> list[str]:
        """
        Normalize degree levels into a list of distinct canonical values.

        "MS/PhD" -> ["Masters", "PhD"]
        """
        if not degree:
            return []

        degrees = degree if isinstance(degree, (list, tuple)) else [degree]

        normalized: dict[str, None] = {}
        for value in degrees:
            for fragment in self._split_degrees(value):
                normalized[self._normalize_degree_level(fragment)] = None

        return list(normalized)

    def _split_degrees(self, degree: Optional[str]) -> list[str]:
        if not degree:
            return []
        fragments = DEGREE_SEPARATORS.split(str(degree))
        return [f.strip() for f in fragments if f and f.strip()]

    def _normalize_degree_level(self, degree: str) -> str:
        normalized = degree.strip().lower()

        if normalized in self.degree_mapping:
            return self.degree_mapping[normalized]

        for key in self._degree_keys_by_length:
            if key in normalized:
                return self.degree_mapping[key]

        logger.warning("unrecognized_degree_level", degree=degree)
        return capitalize_words(degree.strip())

    def normalize_date(self, value: Union[str, date, datetime, None]) -> str:
        """
        Normalize a deadline to ISO-8601.

        Tries strict ISO, then explicit numeric layouts, then a generic
        parser. Unparseable text is returned unchanged.
        """
        if isinstance(value, datetime):
            return format_iso_utc(value)
        if isinstance(value, date):
            return format_iso_utc(datetime(value.year, value.month, value.day))
        if value is None:
            return ""

        text = str(value)
        stripped = text.strip()
        if not stripped:
            return text

        try:
            return format_iso_utc(date_parser.isoparse(stripped))
        except (ValueError, OverflowError):
            pass

        parsed = self._parse_numeric_date(stripped)
        if parsed is not None:
            return format_iso_utc(parsed)

        try:
            return format_iso_utc(date_parser.parse(stripped))
        except (ValueError, OverflowError):
            pass

        logger.warning("unparseable_date", date=text)
        return text

    def _parse_numeric_date(self, text: str) -> Optional[datetime]:
        for pattern in DATE_PATTERNS:
            match = pattern.match(text)
            if not match:
                continue

            first, second, third = match.groups()
            if "/" in text:
                month, day, year = first, second, third
                # Day-first when the leading group cannot be a month
                if int(month) > 12 >= int(day):
                    month, day = day, month
            elif len(first) == 4:
                year, month, day = first, second, third
            else:
                month, day, year = first, second, third

            try:
                return datetime(int(year), int(month), int(day))
            except ValueError:
                return None

        return None

    def normalize_url(self, url: Optional[str]) -> str:
        """
        Ensure the URL is absolute, defaulting to https.

        Malformed URLs are logged and returned as-is (after prefixing).
        """
        trimmed = (url or "").strip()

        if not trimmed.startswith(("http://", "https://")):
            trimmed = f"https://{trimmed}"

        if not self.is_valid_url(trimmed):
            logger.warning("invalid_url", url=url)

        return trimmed

    @staticmethod
    def is_valid_url(url: str) -> bool:
        if any(ch.isspace() for ch in url):
            return False
        try:
            parts = urlsplit(url)
            # Accessing port validates it
            parts.port
        except ValueError:
            return False
        return parts.scheme in ("http", "https") and bool(parts.hostname)
