"""Integration tests for the JSON API."""

import pytest
from aiohttp import test_utils

from scholarship_scraper.config.loader import ScraperConfig
from scholarship_scraper.core.models import RawScholarship
from scholarship_scraper.core.retry_handler import RetryHandler
from scholarship_scraper.orchestrator import ScraperOrchestrator
from scholarship_scraper.web.server import COUNTRIES, DEGREES, create_app


async def no_sleep(seconds):
    return None


class StaticListScraper:
    """Returns the same raw records on every call."""

    def __init__(self, name, records):
        self.name = name
        self.records = records
        self.calls = 0

    async def scrape(self):
        self.calls += 1
        return list(self.records)


class BrokenOrchestrator:

    async def scrape_all(self):
        raise RuntimeError("scheduler crashed")


def raw(name, source, country, degree, link):
    return RawScholarship(
        name=name,
        source=source,
        country=country,
        degree=degree,
        deadline="2025-03-01",
        link=link,
    )


def make_orchestrator():
    scrapers = [
        StaticListScraper("Alpha", [
            raw("Berlin PhD Grant", "Alpha", "deutschland", "PhD", "https://alpha.example.org/berlin"),
            raw("Boston Masters Award", "Alpha", "usa", "MS", "https://alpha.example.org/boston"),
        ]),
        StaticListScraper("Beta", [
            raw("Munich Doctoral Fellowship", "Beta", "Germany", "doctorate", "https://beta.example.org/munich"),
            # Same listing republished by another source
            raw("Berlin PhD Grant (mirror)", "Beta", "Germany", "PhD", "https://alpha.example.org/berlin/"),
        ]),
    ]
    return ScraperOrchestrator(
        scrapers,
        ScraperConfig(concurrency=2),
        retry_handler=RetryHandler(retries=0, sleep=no_sleep),
    )


def api_client(orchestrator):
    return test_utils.TestClient(test_utils.TestServer(create_app(orchestrator)))


class TestHealth:

    @pytest.mark.asyncio
    async def test_health(self):
        async with api_client(make_orchestrator()) as client:
            response = await client.get("/api/health")
            data = await response.json()

        assert response.status == 200
        assert data["status"] == "healthy"
        assert data["timestamp"].endswith("Z")
        assert data["uptime"] >= 0


class TestScholarships:
    """Tests for GET /api/scholarships."""

    @pytest.mark.asyncio
    async def test_all_deduplicated(self):
        async with api_client(make_orchestrator()) as client:
            response = await client.get("/api/scholarships")
            data = await response.json()

        assert response.status == 200
        assert [s["name"] for s in data] == [
            "Berlin PhD Grant",
            "Boston Masters Award",
            "Munich Doctoral Fellowship",
        ]
        assert data[0]["country"] == "Germany"
        assert data[0]["degree"] == ["PhD"]
        assert data[0]["deadline"] == "2025-03-01T00:00:00.000Z"
        assert "scrapedAt" in data[0]

    @pytest.mark.asyncio
    async def test_country_and_degree_filters(self):
        async with api_client(make_orchestrator()) as client:
            response = await client.get("/api/scholarships", params={"country": "GERM", "degree": "phd"})
            data = await response.json()

        assert [s["name"] for s in data] == ["Berlin PhD Grant", "Munich Doctoral Fellowship"]

    @pytest.mark.asyncio
    async def test_limit(self):
        async with api_client(make_orchestrator()) as client:
            response = await client.get("/api/scholarships", params={"limit": "1"})
            data = await response.json()

        assert len(data) == 1

    @pytest.mark.asyncio
    async def test_invalid_limit_uses_default(self):
        async with api_client(make_orchestrator()) as client:
            response = await client.get("/api/scholarships", params={"limit": "lots"})
            data = await response.json()

        assert response.status == 200
        assert len(data) == 3

    @pytest.mark.asyncio
    async def test_each_request_scrapes(self):
        orchestrator = make_orchestrator()

        async with api_client(orchestrator) as client:
            await client.get("/api/scholarships")
            await client.get("/api/scholarships")

        assert [s.calls for s in orchestrator.scrapers] == [2, 2]

    @pytest.mark.asyncio
    async def test_failure_returns_500(self):
        async with api_client(BrokenOrchestrator()) as client:
            response = await client.get("/api/scholarships")
            data = await response.json()

        assert response.status == 500
        assert data == {"error": "Failed to search scholarships"}


class TestStaticLists:

    @pytest.mark.asyncio
    async def test_countries(self):
        async with api_client(make_orchestrator()) as client:
            response = await client.get("/api/countries")
            data = await response.json()

        assert data == COUNTRIES
        assert "Germany" in data

    @pytest.mark.asyncio
    async def test_degrees(self):
        async with api_client(make_orchestrator()) as client:
            response = await client.get("/api/degrees")
            data = await response.json()

        assert data == DEGREES == ["Bachelors", "Masters", "PhD"]
