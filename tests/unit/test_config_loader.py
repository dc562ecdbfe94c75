"""Tests for configuration loading and extractor construction."""

import pytest

from scholarship_scraper.config.loader import (
    ScraperConfig,
    SourceConfig,
    load_config,
    substitute_env_vars,
)
from scholarship_scraper.exceptions import ConfigError
from scholarship_scraper.scrapers import (
    DAADScraper,
    ErasmusScraper,
    GovernmentPortalScraper,
    MITScraper,
    SelectorScraper,
)
from scholarship_scraper.scrapers.registry import build_scrapers, create_scraper

SAMPLE_CONFIG = """
concurrency: ${TEST_CONCURRENCY:-2}
retry:
  retries: 1
  base_delay: 0.5
  max_delay: 2
user_agent: "${TEST_AGENT}"
sources:
  - id: alpha
    name: Alpha
    url: https://alpha.example.org/
    scraper: selector
    selectors:
      container: ".item"
      name: "h3"
  - id: beta
    name: Beta
    url: https://beta.example.org/
    scraper: mit
    enabled: false
"""


def source_dict(**overrides):
    data = {
        "id": "alpha",
        "name": "Alpha",
        "url": "https://alpha.example.org/",
        "scraper": "selector",
        "selectors": {"container": ".item", "name": "h3"},
    }
    data.update(overrides)
    return data


class TestSubstituteEnvVars:

    def test_set_variable(self, monkeypatch):
        monkeypatch.setenv("SCHOLARSHIP_TEST_VAR", "value")

        assert substitute_env_vars("a=${SCHOLARSHIP_TEST_VAR}") == "a=value"

    def test_default(self, monkeypatch):
        monkeypatch.delenv("SCHOLARSHIP_TEST_VAR", raising=False)

        assert substitute_env_vars("${SCHOLARSHIP_TEST_VAR:-fallback}") == "fallback"

    def test_missing_without_default(self, monkeypatch):
        monkeypatch.delenv("SCHOLARSHIP_TEST_VAR", raising=False)

        assert substitute_env_vars("[${SCHOLARSHIP_TEST_VAR}]") == "[]"

    def test_empty_variable_beats_default(self, monkeypatch):
        monkeypatch.setenv("SCHOLARSHIP_TEST_VAR", "")

        assert substitute_env_vars("[${SCHOLARSHIP_TEST_VAR:-fallback}]") == "[]"

    def test_default_with_spaces(self, monkeypatch):
        monkeypatch.delenv("SCHOLARSHIP_TEST_VAR", raising=False)

        text = substitute_env_vars("agent: \"${SCHOLARSHIP_TEST_VAR:-Bot/1.0 (Research)}\"")

        assert text == "agent: \"Bot/1.0 (Research)\""


class TestSourceConfig:
    """Tests for SourceConfig.from_dict."""

    def test_defaults(self):
        source = SourceConfig.from_dict(source_dict())

        assert source.type == "static"
        assert source.enabled is True
        assert source.rate_limit == 2.0
        assert source.timeout == 30.0
        assert source.pagination == {}
        assert source.sections == {}

    @pytest.mark.parametrize("missing", ["id", "name", "url", "scraper"])
    def test_missing_required(self, missing):
        data = source_dict()
        del data[missing]

        with pytest.raises(ConfigError):
            SourceConfig.from_dict(data)

    def test_invalid_type(self):
        with pytest.raises(ConfigError):
            SourceConfig.from_dict(source_dict(type="ftp"))

    @pytest.mark.parametrize("rate_limit", [0, -1, "fast"])
    def test_invalid_rate_limit(self, rate_limit):
        with pytest.raises(ConfigError):
            SourceConfig.from_dict(source_dict(rate_limit=rate_limit))

    def test_not_a_mapping(self):
        with pytest.raises(ConfigError):
            SourceConfig.from_dict(["alpha"])


class TestScraperConfig:
    """Tests for ScraperConfig.from_dict."""

    def test_defaults(self):
        config = ScraperConfig.from_dict({})

        assert config.concurrency == 3
        assert config.retry.retries == 3
        assert config.retry.base_delay == 1.0
        assert config.retry.max_delay == 10.0
        assert config.sources == []

    def test_invalid_concurrency(self):
        with pytest.raises(ConfigError):
            ScraperConfig.from_dict({"concurrency": 0})

    def test_global_timeout_is_source_default(self):
        config = ScraperConfig.from_dict({
            "timeout": 12,
            "sources": [source_dict(), source_dict(id="beta", timeout=5)],
        })

        assert config.sources[0].timeout == 12.0
        assert config.sources[1].timeout == 5.0

    def test_sources_must_be_list(self):
        with pytest.raises(ConfigError):
            ScraperConfig.from_dict({"sources": {"id": "alpha"}})

    def test_root_must_be_mapping(self):
        with pytest.raises(ConfigError):
            ScraperConfig.from_dict(["alpha"])

    def test_enabled_sources_and_lookup(self):
        config = ScraperConfig.from_dict({
            "sources": [source_dict(), source_dict(id="beta", enabled=False)],
        })

        assert [s.id for s in config.enabled_sources] == ["alpha"]
        assert config.get_source("beta").enabled is False
        assert config.get_source("gamma") is None


class TestLoadConfig:
    """Tests for file loading."""

    def test_load_with_env(self, tmp_path, monkeypatch):
        monkeypatch.delenv("TEST_CONCURRENCY", raising=False)
        monkeypatch.setenv("TEST_AGENT", "TestBot/2.0")
        path = tmp_path / "sources.yml"
        path.write_text(SAMPLE_CONFIG, encoding="utf-8")

        config = load_config(str(path))

        assert config.concurrency == 2
        assert config.user_agent == "TestBot/2.0"
        assert config.retry.retries == 1
        assert config.retry.max_delay == 2.0
        assert [s.id for s in config.sources] == ["alpha", "beta"]

    def test_env_overrides_default(self, tmp_path, monkeypatch):
        monkeypatch.setenv("TEST_CONCURRENCY", "7")
        monkeypatch.setenv("TEST_AGENT", "TestBot/2.0")
        path = tmp_path / "custom.yml"
        path.write_text(SAMPLE_CONFIG, encoding="utf-8")

        config = load_config(str(path))

        assert config.concurrency == 7

    def test_missing_file(self, tmp_path):
        with pytest.raises(FileNotFoundError):
            load_config(str(tmp_path / "nope.yml"))

    def test_invalid_yaml(self, tmp_path):
        path = tmp_path / "sources.yml"
        path.write_text("sources: [unclosed", encoding="utf-8")

        with pytest.raises(ConfigError):
            load_config(str(path))

    def test_malformed_source(self, tmp_path):
        path = tmp_path / "sources.yml"
        path.write_text("sources:\n  - id: broken\n    name: Broken\n", encoding="utf-8")

        with pytest.raises(ConfigError) as exc_info:
            load_config(str(path))

        assert exc_info.value.source == "broken"

    def test_bundled_config(self, monkeypatch):
        monkeypatch.delenv("SCRAPER_CONCURRENCY", raising=False)
        monkeypatch.delenv("SCRAPER_USER_AGENT", raising=False)

        config = load_config()

        assert config.concurrency == 3
        assert config.user_agent.startswith("ScholarshipScraperBot")
        assert config.get_source("mit").scraper == "mit"
        assert config.get_source("daad").type == "dynamic"
        assert config.get_source("csc_china").enabled is False
        assert config.get_source("erasmus").scraper == "erasmus"


class TestRegistry:
    """Tests for extractor construction."""

    def test_bundled_sources_build(self, monkeypatch):
        monkeypatch.delenv("SCRAPER_CONCURRENCY", raising=False)
        config = load_config()

        scrapers = build_scrapers(config)

        assert len(scrapers) == len(config.enabled_sources)
        by_name = {s.name: s for s in scrapers}
        assert isinstance(by_name["MIT"], MITScraper)
        assert isinstance(by_name["DAAD"], DAADScraper)
        assert isinstance(by_name["Erasmus+"], ErasmusScraper)
        assert isinstance(by_name["Fulbright"], SelectorScraper)
        assert isinstance(by_name["Australia Government"], GovernmentPortalScraper)

    def test_subset_in_config_order(self):
        config = ScraperConfig.from_dict({
            "sources": [source_dict(id="a", name="A"), source_dict(id="b", name="B"), source_dict(id="c", name="C")],
        })

        scrapers = build_scrapers(config, ["c", "a", "missing"])

        assert [s.name for s in scrapers] == ["A", "C"]

    def test_retry_policy_applied(self):
        config = ScraperConfig.from_dict({"retry": {"retries": 5, "base_delay": 0.1, "max_delay": 1}})
        source = SourceConfig.from_dict(source_dict(rate_limit=4))

        scraper = create_scraper(source, config)

        assert scraper.retry_handler.retries == 5
        assert scraper.retry_handler.base_delay == 0.1
        assert scraper.rate_limiter.interval == 0.25

    def test_unknown_scraper(self):
        source = SourceConfig.from_dict(source_dict(scraper="telepathy"))

        with pytest.raises(ConfigError):
            create_scraper(source, ScraperConfig())

    @pytest.mark.parametrize(
        "scraper, source_type",
        [("daad", "static"), ("erasmus", "static"), ("mit", "dynamic"), ("selector", "dynamic")],
    )
    def test_type_must_match_scraper(self, scraper, source_type):
        source = SourceConfig.from_dict(source_dict(id="mismatch", scraper=scraper, type=source_type))

        with pytest.raises(ConfigError) as exc_info:
            create_scraper(source, ScraperConfig())

        assert exc_info.value.source == "mismatch"

    def test_selector_requires_container(self):
        source = SourceConfig.from_dict(source_dict(selectors={"name": "h3"}))

        with pytest.raises(ConfigError):
            create_scraper(source, ScraperConfig())

    def test_government_portal_requires_country(self):
        source = SourceConfig.from_dict(source_dict(
            scraper="government_portal",
            type="dynamic",
            selectors={"container": ".card", "name": "h3", "link": "a"},
        ))

        with pytest.raises(ConfigError):
            create_scraper(source, ScraperConfig())
