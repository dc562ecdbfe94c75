"""
JSON API over the scraping pipeline.

Routes:
- GET /api/health         liveness check
- GET /api/scholarships   scrape, normalize, deduplicate, filter
- GET /api/countries      countries offered as filters
- GET /api/degrees        degree levels offered as filters
"""

import asyncio
import os
import time
from datetime import datetime, timezone
from typing import Optional

import structlog
from aiohttp import web

from scholarship_scraper.core.deduplicator import Deduplicator
from scholarship_scraper.core.filter_engine import FilterEngine
from scholarship_scraper.core.models import format_iso_utc
from scholarship_scraper.orchestrator import ScraperOrchestrator

logger = structlog.get_logger(__name__)

COUNTRIES = [
    "United States",
    "United Kingdom",
    "Germany",
    "Australia",
    "Canada",
    "France",
    "Netherlands",
    "Sweden",
    "Switzerland",
]

DEGREES = ["Bachelors", "Masters", "PhD"]

ORCHESTRATOR = web.AppKey("orchestrator", ScraperOrchestrator)
FILTER_ENGINE = web.AppKey("filter_engine", FilterEngine)
STARTED_AT = web.AppKey("started_at", float)


async def handle_health(request: web.Request) -> web.Response:
    """Health check"""
    return web.json_response({
        "status": "healthy",
        "timestamp": format_iso_utc(datetime.now(timezone.utc)),
        "uptime": time.monotonic() - request.app[STARTED_AT],
    })


async def handle_scholarships(request: web.Request) -> web.Response:
    """
    Search scholarships.

    Query params: country, degree (case-insensitive substrings) and limit
    (clamped to [1, 100], default 50). Every call runs a full scrape.
    """
    country = request.query.get("country") or None
    degree = request.query.get("degree") or None
    limit = request.query.get("limit")

    logger.info("scholarship_search_request", country=country, degree=degree, limit=limit)

    try:
        orchestrator = request.app[ORCHESTRATOR]
        summary = await orchestrator.scrape_all()
        scholarships = Deduplicator().deduplicate(orchestrator.get_scholarships(summary))
        results = request.app[FILTER_ENGINE].query(
            scholarships,
            country=country,
            degree=degree,
            limit=limit,
        )
    except Exception as e:
        logger.exception("scholarship_search_failed", error=str(e))
        return web.json_response({"error": "Failed to search scholarships"}, status=500)

    logger.info(
        "scholarship_search_completed",
        result_count=len(results),
        total_scraped=summary.total_scholarships,
    )
    return web.json_response([s.to_dict() for s in results])


async def handle_countries(request: web.Request) -> web.Response:
    return web.json_response(COUNTRIES)


async def handle_degrees(request: web.Request) -> web.Response:
    return web.json_response(DEGREES)


def create_app(orchestrator: ScraperOrchestrator, filter_engine: Optional[FilterEngine] = None) -> web.Application:
    """
    Build the aiohttp application.

    Args:
        orchestrator: Orchestrator used by the search route
        filter_engine: Query filter (default FilterEngine())

    Returns:
        web.Application with all /api routes registered
    """
    app = web.Application()
    app[ORCHESTRATOR] = orchestrator
    app[FILTER_ENGINE] = filter_engine or FilterEngine()
    app[STARTED_AT] = time.monotonic()

    app.router.add_get("/api/health", handle_health)
    app.router.add_get("/api/scholarships", handle_scholarships)
    app.router.add_get("/api/countries", handle_countries)
    app.router.add_get("/api/degrees", handle_degrees)

    return app


async def run_server(orchestrator: ScraperOrchestrator, host: str = "0.0.0.0", port: Optional[int] = None) -> None:
    """
    Serve the API until cancelled.

    The port defaults to $PORT, then 8080.
    """
    if port is None:
        port_str = os.getenv("PORT") or "8080"
        try:
            port = int(port_str)
        except ValueError:
            raise ValueError(f"Invalid port number: {port_str}")

    app = create_app(orchestrator)

    runner = web.AppRunner(app)
    await runner.setup()
    site = web.TCPSite(runner, host, port)
    await site.start()

    logger.info("api_server_started", url=f"http://{host}:{port}")

    try:
        await asyncio.Event().wait()
    finally:
        await runner.cleanup()
