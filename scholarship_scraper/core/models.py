"""
Data models for the scholarship scraper.

Raw records come from extractors, canonical records come out of the
normalizer, and run results are aggregated by the orchestrator.
"""

from dataclasses import dataclass, field, asdict
from datetime import date, datetime, timezone
from enum import Enum
from typing import Optional, Union


class UrgencyCategory(str, Enum):
    """Coarse deadline proximity bucket."""
    URGENT = "urgent"  # due within 30 days
    SOON = "soon"  # due within 60 days
    LATER = "later"  # due within 90 days
    NONE = "none"  # past, unknown or far away


class Severity(str, Enum):
    """Severity of a validation error."""
    CRITICAL = "critical"
    MAJOR = "major"
    MINOR = "minor"


def format_iso_utc(value: datetime) -> str:
    """
    Format a datetime as ``YYYY-MM-DDTHH:MM:SS.mmmZ``.

    Aware datetimes are converted to UTC; naive ones are taken as already
    being in UTC.
    """
    if value.tzinfo is not None:
        value = value.astimezone(timezone.utc)
    return value.strftime("%Y-%m-%dT%H:%M:%S.") + f"{value.microsecond // 1000:03d}Z"


@dataclass
class RawScholarship:
    """
    Scholarship listing as extracted from a source.

    Loosely typed - fields may be incomplete or malformed.
    """

    name: str
    source: str
    country: Union[str, list[str]] = ""
    degree: Union[str, list[str]] = ""
    deadline: Union[str, date, datetime] = ""
    link: str = ""

    description: Optional[str] = None
    eligibility: Optional[str] = None
    amount: Optional[str] = None

    @classmethod
    def from_dict(cls, data: dict) -> "RawScholarship":
        """Create from a plain dict (e.g., parsed JSON)."""
        return cls(
            name=data.get("name") or "",
            source=data.get("source") or "",
            country=data.get("country") or "",
            degree=data.get("degree") or "",
            deadline=data.get("deadline") or "",
            link=data.get("link") or "",
            description=data.get("description"),
            eligibility=data.get("eligibility"),
            amount=data.get("amount"),
        )


@dataclass
class Scholarship:
    """
    Canonical scholarship record.

    This is the primary output of the scraping pipeline.
    """

    name: str
    source: str
    country: Union[str, list[str]]
    degree: list[str]
    deadline: str
    link: str

    description: Optional[str] = None
    eligibility: Optional[str] = None
    amount: Optional[str] = None

    scraped_at: str = field(default_factory=lambda: format_iso_utc(datetime.now(timezone.utc)))

    @property
    def countries(self) -> list[str]:
        """Country field as a list."""
        if isinstance(self.country, list):
            return self.country
        return [self.country] if self.country else []

    def to_dict(self) -> dict:
        """Convert to the JSON shape served by the API."""
        return {
            "name": self.name,
            "source": self.source,
            "country": self.country,
            "degree": list(self.degree),
            "deadline": self.deadline,
            "link": self.link,
            "description": self.description,
            "eligibility": self.eligibility,
            "amount": self.amount,
            "scrapedAt": self.scraped_at,
        }


@dataclass(frozen=True)
class ParsedAmount:
    """Structured view of a free-text funding amount."""
    value: Optional[float] = None
    is_range: bool = False
    is_full_tuition: bool = False
    is_variable: bool = False
    original_text: str = ""

    def to_dict(self) -> dict:
        return asdict(self)


@dataclass(frozen=True)
class ScraperResult:
    """Outcome of one source within one orchestration run."""
    source: str
    scholarships: tuple[Scholarship, ...] = ()
    count: int = 0
    processing_time: int = 0  # milliseconds
    success: bool = True
    error: Optional[str] = None

    def to_dict(self) -> dict:
        data = {
            "source": self.source,
            "count": self.count,
            "processingTime": self.processing_time,
            "success": self.success,
        }
        if self.error is not None:
            data["error"] = self.error
        return data


@dataclass(frozen=True)
class ScraperSummary:
    """Aggregate of one ``scrape_all`` run."""
    total_scholarships: int
    successful_sources: int
    failed_sources: int
    total_processing_time: int  # milliseconds
    success_rate: float  # percent
    results: tuple[ScraperResult, ...] = ()

    def to_dict(self) -> dict:
        return {
            "totalScholarships": self.total_scholarships,
            "successfulSources": self.successful_sources,
            "failedSources": self.failed_sources,
            "totalProcessingTime": self.total_processing_time,
            "successRate": self.success_rate,
            "results": [r.to_dict() for r in self.results],
        }


@dataclass(frozen=True)
class ValidationError:
    """Blocking problem found in a record."""
    field: str
    message: str
    severity: Severity


@dataclass(frozen=True)
class ValidationWarning:
    """Non-blocking problem found in a record."""
    field: str
    message: str
    suggestion: Optional[str] = None


@dataclass
class ValidationResult:
    """Validation outcome for one record."""
    errors: list[ValidationError] = field(default_factory=list)
    warnings: list[ValidationWarning] = field(default_factory=list)

    @property
    def is_valid(self) -> bool:
        return not self.errors
