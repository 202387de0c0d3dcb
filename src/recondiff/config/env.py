"""Readers for the ``RECONDIFF_*`` environment variables.

Blank values count as unset, so an empty line in ``.env`` falls back to the
default instead of failing to parse.
"""

from __future__ import annotations

import os
from typing import TYPE_CHECKING

from .errors import InvalidConfigurationError, MissingConfigurationError

if TYPE_CHECKING:
    from collections.abc import Sequence


def _read(name: str) -> str | None:
    value = os.getenv(name)
    if value is None or not value.strip():
        return None
    return value


def require_env_vars(names: Sequence[str]) -> dict[str, str]:
    """Map each of ``names`` to its value; raise naming every unset one."""

    values = {name: value for name in names if (value := _read(name)) is not None}
    missing = sorted(name for name in names if name not in values)
    if missing:
        raise MissingConfigurationError(f"Missing configuration for: {', '.join(missing)}")
    return values


def optional_env_float(name: str, default: float) -> float:
    raw = _read(name)
    if raw is None:
        return default
    try:
        return float(raw)
    except ValueError as exc:
        raise InvalidConfigurationError(f"{name} must be a number, got {raw!r}") from exc
