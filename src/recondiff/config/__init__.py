"""Application configuration helpers."""

from __future__ import annotations

from .env import optional_env_float, require_env_vars
from .errors import ConfigurationError, InvalidConfigurationError, MissingConfigurationError
from .matching import get_similarity_thresholds
from .schema import SchemaSourceConfig, get_schema_source_config

__all__ = [
    "ConfigurationError",
    "InvalidConfigurationError",
    "MissingConfigurationError",
    "SchemaSourceConfig",
    "get_schema_source_config",
    "get_similarity_thresholds",
    "optional_env_float",
    "require_env_vars",
]
