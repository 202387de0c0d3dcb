"""Errors raised while reading recondiff settings."""

from __future__ import annotations


class ConfigurationError(RuntimeError):
    """Base class for settings that keep recondiff from starting."""


class MissingConfigurationError(ConfigurationError):
    """A required environment variable is unset or blank."""


class InvalidConfigurationError(ConfigurationError):
    """An environment variable is set but cannot be parsed or is out of range."""
