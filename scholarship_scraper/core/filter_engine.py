"""
Query-time filtering of canonical scholarship records.
"""

import math
from dataclasses import dataclass, fields
from typing import Any, Iterable, Optional

import structlog

from .amount_parser import AmountParser
from .deadline_calculator import DeadlineCalculator
from .models import Scholarship

logger = structlog.get_logger(__name__)


DEFAULT_LIMIT = 50
MAX_LIMIT = 100

# key -> (min, max) half-open, or a special marker
AMOUNT_RANGES = {
    "any": {"min": 0, "max": math.inf, "label": "Any Amount"},
    "under-5k": {"min": 0, "max": 5000, "label": "Under $5,000"},
    "5k-10k": {"min": 5000, "max": 10000, "label": "$5,000 - $10,000"},
    "10k-20k": {"min": 10000, "max": 20000, "label": "$10,000 - $20,000"},
    "20k-plus": {"min": 20000, "max": math.inf, "label": "$20,000+"},
    "full-tuition": {"special": "full", "label": "Full Tuition"},
    "not-specified": {"special": "none", "label": "Amount Not Specified"},
}

DEADLINE_RANGES = {
    "any": {"days": None, "label": "Any Deadline"},
    "within-30": {"days": 30, "label": "Due within 30 days"},
    "within-60": {"days": 60, "label": "Due within 60 days"},
    "within-90": {"days": 90, "label": "Due within 90 days"},
}


def clamp_limit(limit: Any) -> int:
    """Clamp a requested result count to [1, MAX_LIMIT]; unparseable -> default."""
    if limit is None or isinstance(limit, bool):
        return DEFAULT_LIMIT
    try:
        value = int(limit)
    except (TypeError, ValueError):
        return DEFAULT_LIMIT
    return min(max(value, 1), MAX_LIMIT)


@dataclass
class FilterState:
    """User-selected filter values. Empty string / "any" means inactive."""

    amount_range: str = "any"
    deadline_range: str = "any"
    country: str = ""
    degree: str = ""

    def set_filter(self, name: str, value: str) -> None:
        if name not in {f.name for f in fields(self)}:
            logger.warning("unknown_filter", filter=name)
            return
        setattr(self, name, value)

    def reset_all(self) -> None:
        self.amount_range = "any"
        self.deadline_range = "any"
        self.country = ""
        self.degree = ""

    def active_filters(self) -> dict[str, str]:
        active = {}
        if self.amount_range != "any":
            active["amount_range"] = self.amount_range
        if self.deadline_range != "any":
            active["deadline_range"] = self.deadline_range
        if self.country:
            active["country"] = self.country
        if self.degree:
            active["degree"] = self.degree
        return active

    def has_active_filters(self) -> bool:
        return bool(self.active_filters())


class FilterEngine:
    """
    Filters records by country, degree, amount and deadline.

    All filters preserve input order and never mutate the records.
    """

    def __init__(
        self,
        amount_parser: Optional[AmountParser] = None,
        deadline_calculator: Optional[DeadlineCalculator] = None,
    ):
        self.amount_parser = amount_parser or AmountParser()
        self.deadline_calculator = deadline_calculator or DeadlineCalculator()

    def query(
        self,
        scholarships: Iterable[Scholarship],
        country: Optional[str] = None,
        degree: Optional[str] = None,
        limit: Any = None,
    ) -> list[Scholarship]:
        """
        Search-endpoint filtering.

        Args:
            scholarships: Canonical records
            country: Case-insensitive substring matched against any country
            degree: Case-insensitive substring matched against any degree
            limit: Maximum result count, clamped to [1, 100] (default 50)

        Returns:
            Matching records, at most ``limit`` of them
        """
        results = list(scholarships)

        if country:
            results = self.filter_by_country(results, country)
        if degree:
            results = self.filter_by_degree(results, degree)

        return results[: clamp_limit(limit)]

    def apply_filters(self, scholarships: Iterable[Scholarship], state: FilterState) -> list[Scholarship]:
        results = list(scholarships)

        if state.amount_range and state.amount_range != "any":
            results = self.filter_by_amount(results, state.amount_range)
        if state.deadline_range and state.deadline_range != "any":
            results = self.filter_by_deadline(results, state.deadline_range)
        if state.country:
            results = self.filter_by_country(results, state.country)
        if state.degree:
            results = self.filter_by_degree(results, state.degree)

        return results

    def filter_by_country(self, scholarships: Iterable[Scholarship], country: str) -> list[Scholarship]:
        needle = country.lower().strip()
        if not needle:
            return list(scholarships)
        return [
            s for s in scholarships
            if any(needle in c.lower() for c in s.countries)
        ]

    def filter_by_degree(self, scholarships: Iterable[Scholarship], degree: str) -> list[Scholarship]:
        needle = degree.lower().strip()
        if not needle:
            return list(scholarships)
        return [
            s for s in scholarships
            if any(needle in d.lower() for d in s.degree)
        ]

    def filter_by_amount(self, scholarships: Iterable[Scholarship], range_key: str) -> list[Scholarship]:
        """Keep records whose parsed amount falls in the named range."""
        scholarships = list(scholarships)
        config = AMOUNT_RANGES.get(range_key)

        if config is None:
            logger.warning("unknown_amount_range", range=range_key)
            return scholarships
        if range_key == "any":
            return scholarships

        results = []
        for scholarship in scholarships:
            parsed = self.amount_parser.parse(scholarship.amount)
            special = config.get("special")

            if special == "full":
                keep = parsed.is_full_tuition
            elif special == "none":
                keep = parsed.value is None and not parsed.is_full_tuition
            else:
                keep = parsed.value is not None and config["min"] <= parsed.value < config["max"]

            if keep:
                results.append(scholarship)

        return results

    def filter_by_deadline(self, scholarships: Iterable[Scholarship], range_key: str) -> list[Scholarship]:
        """Keep records due within the named number of days."""
        scholarships = list(scholarships)
        config = DEADLINE_RANGES.get(range_key)

        if config is None:
            logger.warning("unknown_deadline_range", range=range_key)
            return scholarships
        if config["days"] is None:
            return scholarships

        return [
            s for s in scholarships
            if self.deadline_calculator.is_within_days(s.deadline, config["days"])
        ]
