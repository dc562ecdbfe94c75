"""
Custom exceptions for the scraping pipeline.
"""

from typing import Optional


class ScraperError(Exception):
    """Base exception for all scraper errors."""

    def __init__(self, message: str, url: Optional[str] = None):
        self.message = message
        self.url = url
        super().__init__(self.message)


class FetchError(ScraperError):
    """Raised when a source responds with a non-2xx status."""

    def __init__(self, message: str, url: Optional[str] = None, status_code: Optional[int] = None):
        self.status_code = status_code
        super().__init__(message, url)


class ConfigError(ScraperError):
    """Raised when the source configuration is malformed."""

    def __init__(self, message: str, source: Optional[str] = None):
        self.source = source
        super().__init__(message)
