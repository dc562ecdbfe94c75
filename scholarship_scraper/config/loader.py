"""
Scraper configuration: global settings plus one definition per source.

The YAML document may reference the environment with ${NAME} or
${NAME:-default}. Global settings act as defaults for the sources,
currently the request timeout.
"""

import os
import re
from dataclasses import dataclass, field
from pathlib import Path
from typing import Optional

import yaml
import structlog

from scholarship_scraper.exceptions import ConfigError

logger = structlog.get_logger(__name__)

SOURCE_TYPES = ("static", "dynamic")

DEFAULT_USER_AGENT = "ScholarshipScraperBot/1.0 (Educational Purpose)"

ENV_VAR_PATTERN = re.compile(r"\$\{(?P<name>[A-Za-z_][A-Za-z0-9_]*)(?::-(?P<default>[^}]*))?\}")

BUNDLED_CONFIG = Path(__file__).with_name("sources.yml")


def substitute_env_vars(text: str) -> str:
    """
    Expand ${NAME} and ${NAME:-default} placeholders from the environment.

    A set variable wins over the default, even when empty. An unset
    variable without a default expands to "" and is reported once.
    """
    unset = []

    def expand(match: re.Match) -> str:
        value = os.environ.get(match["name"])
        if value is not None:
            return value
        if match["default"] is not None:
            return match["default"]
        unset.append(match["name"])
        return ""

    result = ENV_VAR_PATTERN.sub(expand, text)
    for name in dict.fromkeys(unset):
        logger.warning("env_var_not_set", var=name)
    return result


@dataclass
class RetryConfig:
    """Retry policy applied to every source invocation."""

    retries: int = 3
    base_delay: float = 1.0  # seconds
    max_delay: float = 10.0  # seconds

    @classmethod
    def from_dict(cls, data: Optional[dict]) -> "RetryConfig":
        data = data or {}
        return cls(
            retries=int(data.get("retries", 3)),
            base_delay=float(data.get("base_delay", 1.0)),
            max_delay=float(data.get("max_delay", 10.0)),
        )


@dataclass
class SourceConfig:
    """Configuration for one scholarship source."""

    id: str
    name: str
    url: str
    scraper: str  # registry key of the extractor class
    type: str = "static"
    enabled: bool = True

    # Requests per second
    rate_limit: float = 2.0
    # Seconds
    timeout: float = 30.0

    # Fixed country for single-country portals
    country: Optional[str] = None

    # Extractor-specific settings
    selectors: dict = field(default_factory=dict)
    pagination: dict = field(default_factory=dict)
    sections: dict = field(default_factory=dict)

    @classmethod
    def from_dict(cls, data: dict, default_timeout: float = 30.0) -> "SourceConfig":
        """
        Create from dictionary (e.g., from YAML).

        Args:
            data: Source mapping
            default_timeout: Seconds, used when the source sets no timeout

        Raises:
            ConfigError: If required fields are missing or invalid
        """
        if not isinstance(data, dict):
            raise ConfigError(f"Source definition must be a mapping, got {type(data).__name__}")

        source_id = data.get("id")
        for key in ("id", "name", "url", "scraper"):
            if not data.get(key):
                raise ConfigError(f"Missing required field: {key}", source=source_id)

        source_type = data.get("type", "static")
        if source_type not in SOURCE_TYPES:
            raise ConfigError(
                f"Invalid source type '{source_type}', expected one of {SOURCE_TYPES}",
                source=source_id,
            )

        try:
            rate_limit = float(data.get("rate_limit", 2.0))
            timeout = float(data.get("timeout", default_timeout))
        except (TypeError, ValueError) as e:
            raise ConfigError(f"Invalid numeric setting: {e}", source=source_id) from e

        if rate_limit <= 0:
            raise ConfigError("rate_limit must be positive", source=source_id)

        return cls(
            id=str(source_id),
            name=data["name"],
            url=data["url"],
            scraper=data["scraper"],
            type=source_type,
            enabled=bool(data.get("enabled", True)),
            rate_limit=rate_limit,
            timeout=timeout,
            country=data.get("country"),
            selectors=data.get("selectors") or {},
            pagination=data.get("pagination") or {},
            sections=data.get("sections") or {},
        )


@dataclass
class ScraperConfig:
    """Global scraper settings plus source definitions."""

    concurrency: int = 3
    timeout: float = 30.0  # seconds, default for sources without their own
    retry: RetryConfig = field(default_factory=RetryConfig)
    user_agent: str = DEFAULT_USER_AGENT
    sources: list[SourceConfig] = field(default_factory=list)

    @classmethod
    def from_dict(cls, data: dict) -> "ScraperConfig":
        """
        Create from dictionary (e.g., from YAML).

        Raises:
            ConfigError: If the document or any source is malformed
        """
        if not isinstance(data, dict):
            raise ConfigError("Configuration root must be a mapping")

        try:
            concurrency = int(data.get("concurrency", 3))
            timeout = float(data.get("timeout", 30.0))
            retry = RetryConfig.from_dict(data.get("retry"))
        except (TypeError, ValueError) as e:
            raise ConfigError(f"Invalid numeric setting: {e}") from e

        if concurrency < 1:
            raise ConfigError("concurrency must be at least 1")

        sources_data = data.get("sources") or []
        if not isinstance(sources_data, list):
            raise ConfigError("'sources' must be a list")

        return cls(
            concurrency=concurrency,
            timeout=timeout,
            retry=retry,
            user_agent=data.get("user_agent") or DEFAULT_USER_AGENT,
            sources=[SourceConfig.from_dict(s, default_timeout=timeout) for s in sources_data],
        )

    @property
    def enabled_sources(self) -> list[SourceConfig]:
        return [s for s in self.sources if s.enabled]

    def get_source(self, source_id: str) -> Optional[SourceConfig]:
        for source in self.sources:
            if source.id == source_id:
                return source
        return None


def read_config_file(path: Path) -> dict:
    """
    Read one YAML document with environment placeholders expanded.

    Raises:
        FileNotFoundError: If path does not exist
        ConfigError: If the YAML cannot be parsed
    """
    if not path.is_file():
        raise FileNotFoundError(f"Config file not found: {path}")

    logger.info("loading_config", file=str(path))
    text = substitute_env_vars(path.read_text(encoding="utf-8"))

    try:
        return yaml.safe_load(text) or {}
    except yaml.YAMLError as e:
        raise ConfigError(f"Invalid YAML in {path}: {e}") from e


def load_config(config_path: Optional[str] = None) -> ScraperConfig:
    """
    Load and validate the scraper configuration.

    Args:
        config_path: Path to a YAML file (defaults to the bundled sources.yml)

    Returns:
        ScraperConfig with all source definitions

    Raises:
        FileNotFoundError: If the file does not exist
        ConfigError: If the document or any source is malformed
    """
    path = Path(config_path) if config_path else BUNDLED_CONFIG
    config = ScraperConfig.from_dict(read_config_file(path))

    logger.info(
        "config_loaded",
        sources=len(config.sources),
        enabled=len(config.enabled_sources),
        disabled=[s.id for s in config.sources if not s.enabled],
        concurrency=config.concurrency,
    )
    return config
