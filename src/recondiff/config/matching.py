"""Similarity threshold configuration for the matchers."""

from __future__ import annotations

from typing import Final

from recondiff.domain.matching import SimilarityThresholds
from recondiff.domain.matching.contracts import (
    DEFAULT_TEXT_SIMILARITY_FLOOR,
    DEFAULT_TREE_FALLBACK_THRESHOLD,
    DEFAULT_TREE_POSITIONAL_THRESHOLD,
)

from .env import optional_env_float
from .errors import InvalidConfigurationError

TEXT_SIMILARITY_FLOOR_ENV: Final = "RECONDIFF_TEXT_SIMILARITY_FLOOR"
TREE_POSITIONAL_THRESHOLD_ENV: Final = "RECONDIFF_TREE_POSITIONAL_THRESHOLD"
TREE_FALLBACK_THRESHOLD_ENV: Final = "RECONDIFF_TREE_FALLBACK_THRESHOLD"


def get_similarity_thresholds() -> SimilarityThresholds:
    values = {
        TEXT_SIMILARITY_FLOOR_ENV: optional_env_float(
            TEXT_SIMILARITY_FLOOR_ENV, DEFAULT_TEXT_SIMILARITY_FLOOR
        ),
        TREE_POSITIONAL_THRESHOLD_ENV: optional_env_float(
            TREE_POSITIONAL_THRESHOLD_ENV, DEFAULT_TREE_POSITIONAL_THRESHOLD
        ),
        TREE_FALLBACK_THRESHOLD_ENV: optional_env_float(
            TREE_FALLBACK_THRESHOLD_ENV, DEFAULT_TREE_FALLBACK_THRESHOLD
        ),
    }
    for name, value in values.items():
        if not 0.0 <= value <= 1.0:
            raise InvalidConfigurationError(f"{name} must be between 0 and 1, got {value}")

    return SimilarityThresholds(
        text_floor=values[TEXT_SIMILARITY_FLOOR_ENV],
        tree_positional=values[TREE_POSITIONAL_THRESHOLD_ENV],
        tree_fallback=values[TREE_FALLBACK_THRESHOLD_ENV],
    )
