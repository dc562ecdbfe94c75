"""
Core layer - pure processing used by every scraper and surface.

Components:
- models: RawScholarship, Scholarship, result and validation dataclasses
- normalizer: Country, degree, deadline and URL normalization
- amount_parser: Free-text funding amount parsing
- deadline_calculator: Days-until and urgency buckets
- validator: Schema validation of canonical records
- retry_handler: Exponential-backoff retry (tenacity)
- rate_limiter: Per-source request spacing
- deduplicator: Hash-based record deduplication
- filter_engine: Query-time filtering
"""

from .models import (
    ParsedAmount,
    RawScholarship,
    Scholarship,
    ScraperResult,
    ScraperSummary,
    Severity,
    UrgencyCategory,
    ValidationError,
    ValidationResult,
    ValidationWarning,
)
from .normalizer import DataNormalizer
from .amount_parser import AmountParser
from .deadline_calculator import DeadlineCalculator
from .validator import ScholarshipValidator, SCHOLARSHIP_SCHEMA
from .retry_handler import RetryHandler
from .rate_limiter import RateLimiter
from .deduplicator import Deduplicator, generate_content_hash
from .filter_engine import FilterEngine, FilterState

__all__ = [
    "ParsedAmount",
    "RawScholarship",
    "Scholarship",
    "ScraperResult",
    "ScraperSummary",
    "Severity",
    "UrgencyCategory",
    "ValidationError",
    "ValidationResult",
    "ValidationWarning",
    "DataNormalizer",
    "AmountParser",
    "DeadlineCalculator",
    "ScholarshipValidator",
    "SCHOLARSHIP_SCHEMA",
    "RetryHandler",
    "RateLimiter",
    "Deduplicator",
    "generate_content_hash",
    "FilterEngine",
    "FilterState",
]
