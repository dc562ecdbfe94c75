"""
Orchestrator for the scholarship scraping pipeline.

Coordinates:
- Bounded-concurrency execution of all extractors
- Per-source retry with exponential backoff
- Normalization of raw records
- Per-source success/failure accounting
"""

import asyncio
import time
from typing import Optional, Sequence

import structlog

from .config.loader import ScraperConfig
from .core.models import RawScholarship, Scholarship, ScraperResult, ScraperSummary
from .core.normalizer import DataNormalizer
from .core.retry_handler import RetryHandler
from .scrapers.base import ScholarshipScraper

logger = structlog.get_logger(__name__)


def elapsed_ms(start: float) -> int:
    return int((time.monotonic() - start) * 1000)


class ScraperOrchestrator:
    """
    Runs every extractor once per invocation and aggregates the results.

    A failing source never aborts the run: its error is captured in its
    ScraperResult and the remaining sources proceed.
    """

    def __init__(
        self,
        scrapers: Sequence[ScholarshipScraper],
        config: Optional[ScraperConfig] = None,
        normalizer: Optional[DataNormalizer] = None,
        retry_handler: Optional[RetryHandler] = None,
    ):
        """
        Initialize orchestrator.

        Args:
            scrapers: Extractors to run (order is preserved in results)
            config: Concurrency and retry policy
            normalizer: Raw-to-canonical mapper
            retry_handler: Retry policy wrapper (default built from config.retry)
        """
        self._scrapers = list(scrapers)
        self._config = config or ScraperConfig()

        if self._config.concurrency < 1:
            raise ValueError(f"concurrency must be at least 1, got {self._config.concurrency}")

        self.normalizer = normalizer or DataNormalizer()
        self.retry_handler = retry_handler or RetryHandler(
            retries=self._config.retry.retries,
            base_delay=self._config.retry.base_delay,
            max_delay=self._config.retry.max_delay,
        )

    @property
    def scrapers(self) -> list[ScholarshipScraper]:
        return list(self._scrapers)

    @property
    def config(self) -> ScraperConfig:
        return self._config

    async def scrape_all(self) -> ScraperSummary:
        """
        Run all extractors with at most `concurrency` in flight.

        Returns:
            ScraperSummary with one result per extractor, in input order
        """
        start = time.monotonic()
        semaphore = asyncio.Semaphore(self._config.concurrency)

        logger.info(
            "scrape_started",
            sources=[s.name for s in self._scrapers],
            source_count=len(self._scrapers),
            concurrency=self._config.concurrency,
        )

        async def bounded(scraper: ScholarshipScraper) -> ScraperResult:
            async with semaphore:
                return await self._scrape_source(scraper)

        results = await asyncio.gather(*(bounded(s) for s in self._scrapers))

        successful = [r for r in results if r.success]
        total = len(results)

        summary = ScraperSummary(
            total_scholarships=sum(r.count for r in successful),
            successful_sources=len(successful),
            failed_sources=total - len(successful),
            total_processing_time=elapsed_ms(start),
            success_rate=(len(successful) / total * 100) if total else 0.0,
            results=tuple(results),
        )

        logger.info(
            "scrape_completed",
            total_scholarships=summary.total_scholarships,
            successful_sources=summary.successful_sources,
            failed_sources=summary.failed_sources,
            total_processing_time_ms=summary.total_processing_time,
            success_rate=round(summary.success_rate, 1),
        )

        return summary

    async def _scrape_source(self, scraper: ScholarshipScraper) -> ScraperResult:
        start = time.monotonic()
        log = logger.bind(source=scraper.name)
        log.info("source_started")

        def on_retry(attempt: int, error: BaseException) -> None:
            log.warning("source_retry", attempt=attempt, error=str(error))

        try:
            raw: list[RawScholarship] = await self.retry_handler.execute_with_retry(
                scraper.scrape,
                on_retry=on_retry,
            )
            scholarships = tuple(self.normalizer.normalize(r) for r in raw)
        except Exception as e:
            processing_time = elapsed_ms(start)
            log.error(
                "source_failed",
                error=str(e),
                error_type=type(e).__name__,
                processing_time_ms=processing_time,
            )
            return ScraperResult(
                source=scraper.name,
                processing_time=processing_time,
                success=False,
                error=str(e),
            )

        processing_time = elapsed_ms(start)
        log.info(
            "source_completed",
            count=len(scholarships),
            processing_time_ms=processing_time,
        )

        return ScraperResult(
            source=scraper.name,
            scholarships=scholarships,
            count=len(scholarships),
            processing_time=processing_time,
            success=True,
        )

    def get_scholarships(self, summary: ScraperSummary) -> list[Scholarship]:
        """Canonical records of successful sources, in source then record order."""
        return [
            scholarship
            for result in summary.results
            if result.success
            for scholarship in result.scholarships
        ]
