from __future__ import annotations

from pathlib import Path

import pytest

from recondiff.config import (
    InvalidConfigurationError,
    MissingConfigurationError,
    get_schema_source_config,
    get_similarity_thresholds,
    optional_env_float,
    require_env_vars,
)
from recondiff.domain.matching import DEFAULT_THRESHOLDS

THRESHOLD_VARS = (
    "RECONDIFF_TEXT_SIMILARITY_FLOOR",
    "RECONDIFF_TREE_POSITIONAL_THRESHOLD",
    "RECONDIFF_TREE_FALLBACK_THRESHOLD",
)


@pytest.fixture(autouse=True)
def _clear_threshold_env(monkeypatch: pytest.MonkeyPatch) -> None:
    for name in THRESHOLD_VARS:
        monkeypatch.delenv(name, raising=False)


def test_defaults_without_environment() -> None:
    assert get_similarity_thresholds() == DEFAULT_THRESHOLDS


def test_environment_overrides(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("RECONDIFF_TEXT_SIMILARITY_FLOOR", "0.25")
    monkeypatch.setenv("RECONDIFF_TREE_FALLBACK_THRESHOLD", " ")

    thresholds = get_similarity_thresholds()

    assert thresholds.text_floor == 0.25
    assert thresholds.tree_positional == DEFAULT_THRESHOLDS.tree_positional
    assert thresholds.tree_fallback == DEFAULT_THRESHOLDS.tree_fallback


def test_unparsable_override_is_rejected(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("RECONDIFF_TREE_POSITIONAL_THRESHOLD", "half")

    with pytest.raises(InvalidConfigurationError, match="RECONDIFF_TREE_POSITIONAL_THRESHOLD"):
        get_similarity_thresholds()


def test_out_of_range_override_is_rejected(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("RECONDIFF_TEXT_SIMILARITY_FLOOR", "1.5")

    with pytest.raises(InvalidConfigurationError, match="between 0 and 1"):
        get_similarity_thresholds()


def test_optional_env_float_default(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.delenv("EXAMPLE_FLOAT", raising=False)

    assert optional_env_float("EXAMPLE_FLOAT", 0.3) == 0.3

    monkeypatch.setenv("EXAMPLE_FLOAT", "  ")
    assert optional_env_float("EXAMPLE_FLOAT", 0.3) == 0.3


def test_require_env_vars_returns_values(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("EXAMPLE_VAR", "value")

    assert require_env_vars(["EXAMPLE_VAR"]) == {"EXAMPLE_VAR": "value"}


def test_require_env_vars_reports_missing(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.delenv("MISSING_B", raising=False)
    monkeypatch.setenv("MISSING_A", "   ")

    with pytest.raises(MissingConfigurationError, match="MISSING_A, MISSING_B"):
        require_env_vars(["MISSING_B", "MISSING_A"])


def test_schema_source_from_environment(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("RECONDIFF_SCHEMA_PATH", "/srv/schema.json")

    assert get_schema_source_config().path == Path("/srv/schema.json")


def test_schema_source_is_required(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.delenv("RECONDIFF_SCHEMA_PATH", raising=False)

    with pytest.raises(MissingConfigurationError, match="RECONDIFF_SCHEMA_PATH"):
        get_schema_source_config()
