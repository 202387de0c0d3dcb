"""Location of the schema document used by the command line."""

from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path
from typing import Final

from .env import require_env_vars

SCHEMA_PATH_ENV: Final = "RECONDIFF_SCHEMA_PATH"


@dataclass(frozen=True, slots=True)
class SchemaSourceConfig:
    path: Path


def get_schema_source_config() -> SchemaSourceConfig:
    values = require_env_vars([SCHEMA_PATH_ENV])
    return SchemaSourceConfig(path=Path(values[SCHEMA_PATH_ENV]).expanduser())
