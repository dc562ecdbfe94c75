"""
CLI entry point for scholarship-scraper.

Usage:
    python -m scholarship_scraper
    python -m scholarship_scraper --sources mit,daad --country germany
    python -m scholarship_scraper --serve --port 8080
"""

import argparse
import asyncio
import json
import logging
import sys
from pathlib import Path

import structlog

# Log level mapping
LOG_LEVELS = {
    "DEBUG": logging.DEBUG,
    "INFO": logging.INFO,
    "WARNING": logging.WARNING,
    "ERROR": logging.ERROR,
}


def setup_logging(level: str = "INFO", json_output: bool = False):
    """Configure structured logging."""
    log_level = LOG_LEVELS.get(level.upper(), logging.INFO)

    if json_output:
        processors = [
            structlog.processors.add_log_level,
            structlog.processors.TimeStamper(fmt="iso"),
            structlog.processors.format_exc_info,
            structlog.processors.JSONRenderer(),
        ]
    else:
        processors = [
            structlog.processors.add_log_level,
            structlog.processors.TimeStamper(fmt="%Y-%m-%d %H:%M:%S"),
            structlog.dev.ConsoleRenderer(colors=sys.stderr.isatty()),
        ]

    structlog.configure(
        processors=processors,
        wrapper_class=structlog.make_filtering_bound_logger(log_level),
        context_class=dict,
        logger_factory=structlog.PrintLoggerFactory(file=sys.stderr),
        cache_logger_on_first_use=True,
    )


def parse_args(argv=None):
    """Parse command line arguments."""
    parser = argparse.ArgumentParser(
        prog="scholarship-scraper",
        description="Concurrent scholarship scraper with normalization and filtering",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  # Scrape all enabled sources and print the summary
  python -m scholarship_scraper

  # Scrape specific sources, filter and save
  python -m scholarship_scraper --sources mit,daad --degree phd --output results.json

  # Serve the JSON API
  python -m scholarship_scraper --serve --port 8080

  # Use custom config file
  python -m scholarship_scraper --config /path/to/sources.yml
        """,
    )

    parser.add_argument(
        "--config",
        type=str,
        help="Path to sources.yml config file (default: bundled)",
    )

    parser.add_argument(
        "--sources",
        type=str,
        help="Comma-separated list of source ids to run (default: all enabled)",
    )

    parser.add_argument(
        "--concurrency",
        type=int,
        help="Maximum sources scraped at once (default: from config)",
    )

    parser.add_argument(
        "--country",
        type=str,
        help="Only keep scholarships whose country contains this text",
    )

    parser.add_argument(
        "--degree",
        type=str,
        help="Only keep scholarships whose degree levels contain this text",
    )

    parser.add_argument(
        "--limit",
        type=int,
        help="Maximum scholarships returned, 1-100 (default: 50)",
    )

    parser.add_argument(
        "--output",
        type=str,
        help="Write summary and scholarships to this JSON file",
    )

    parser.add_argument(
        "--serve",
        action="store_true",
        help="Run the JSON API instead of a one-shot scrape",
    )

    parser.add_argument(
        "--host",
        type=str,
        default="0.0.0.0",
        help="API bind address (default: 0.0.0.0)",
    )

    parser.add_argument(
        "--port",
        type=int,
        help="API port (default: $PORT or 8080)",
    )

    parser.add_argument(
        "--log-level",
        choices=["DEBUG", "INFO", "WARNING", "ERROR"],
        default="INFO",
        help="Logging level (default: INFO)",
    )

    parser.add_argument(
        "--json-logs",
        action="store_true",
        help="Output logs as JSON (for production)",
    )

    parser.add_argument(
        "--version",
        action="store_true",
        help="Show version and exit",
    )

    return parser.parse_args(argv)


def build_orchestrator(args):
    """Load configuration and wire extractors into an orchestrator."""
    from .config.loader import load_config
    from .orchestrator import ScraperOrchestrator
    from .scrapers.registry import build_scrapers

    config = load_config(args.config)
    if args.concurrency is not None:
        config.concurrency = args.concurrency

    source_ids = None
    if args.sources:
        source_ids = [s.strip() for s in args.sources.split(",") if s.strip()]

    scrapers = build_scrapers(config, source_ids=source_ids)
    return ScraperOrchestrator(scrapers, config)


def save_json(path: str, summary, scholarships) -> str:
    """Write the run summary and records to a JSON file."""
    filepath = Path(path)
    filepath.parent.mkdir(parents=True, exist_ok=True)

    data = {
        "summary": summary.to_dict(),
        "scholarships": [s.to_dict() for s in scholarships],
    }

    with open(filepath, "w", encoding="utf-8") as f:
        json.dump(data, f, ensure_ascii=False, indent=2)

    return str(filepath)


def print_summary(summary, scholarships) -> None:
    print(f"\nSources: {summary.successful_sources} ok, {summary.failed_sources} failed "
          f"({summary.success_rate:.1f}% success) in {summary.total_processing_time} ms")

    for result in summary.results:
        status = "ok" if result.success else f"FAILED: {result.error}"
        print(f"  {result.source:<45} {result.count:>4}  {status}")

    print(f"\nScholarships: {len(scholarships)}")
    for s in scholarships:
        print(f"  - {s.name} [{', '.join(s.degree)}] {s.deadline or 'no deadline'}")
        print(f"    {s.link}")


async def main_async(args):
    """Async main function."""
    from .core.deduplicator import Deduplicator
    from .core.filter_engine import FilterEngine
    from .core.validator import ScholarshipValidator

    logger = structlog.get_logger(__name__)

    orchestrator = build_orchestrator(args)

    if args.serve:
        from .web.server import run_server
        await run_server(orchestrator, host=args.host, port=args.port)
        return True

    logger.info(
        "starting_scholarship_scraper",
        sources=[s.name for s in orchestrator.scrapers],
        concurrency=orchestrator.config.concurrency,
    )

    summary = await orchestrator.scrape_all()
    scholarships = Deduplicator().deduplicate(orchestrator.get_scholarships(summary))

    invalid = [r for r in ScholarshipValidator().validate_batch(scholarships) if not r.is_valid]
    if invalid:
        logger.warning("invalid_records", count=len(invalid), total=len(scholarships))

    scholarships = FilterEngine().query(
        scholarships,
        country=args.country,
        degree=args.degree,
        limit=args.limit,
    )

    print_summary(summary, scholarships)

    if args.output:
        path = save_json(args.output, summary, scholarships)
        logger.info("saved_json", path=path, scholarships=len(scholarships))

    return summary.successful_sources > 0 or not summary.results


def main(argv=None):
    """Main entry point."""
    args = parse_args(argv)

    if args.version:
        from . import __version__
        print(f"scholarship-scraper {__version__}")
        sys.exit(0)

    setup_logging(args.log_level, args.json_logs)

    try:
        ok = asyncio.run(main_async(args))
        sys.exit(0 if ok else 1)
    except KeyboardInterrupt:
        print("\nInterrupted by user")
        sys.exit(130)
    except Exception as e:
        logger = structlog.get_logger(__name__)
        logger.exception("fatal_error", error=str(e))
        sys.exit(1)


if __name__ == "__main__":
    main()
