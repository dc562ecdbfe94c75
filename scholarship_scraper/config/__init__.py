"""
Configuration module for scholarship sources.

Provides:
- YAML config loading with validation
- Source definitions
- Environment variable substitution
"""

from .loader import (
    RetryConfig,
    ScraperConfig,
    SourceConfig,
    load_config,
    read_config_file,
    substitute_env_vars,
)

__all__ = [
    "RetryConfig",
    "ScraperConfig",
    "SourceConfig",
    "load_config",
    "read_config_file",
    "substitute_env_vars",
]
