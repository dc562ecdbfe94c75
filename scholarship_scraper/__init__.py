"""
Scholarship Scraper - concurrent scholarship aggregation pipeline.

Architecture:
- core/: Stable foundation (models, normalizer, parsers, retry, rate limiting)
- scrapers/: Source extractors (static fetch+parse, dynamic browser sessions)
- config/: YAML-driven source definitions
- orchestrator: Bounded-concurrency run over all sources
- web/: Thin JSON API over the normalized record set
"""

__version__ = "0.1.0"
__all__ = ["__version__"]
