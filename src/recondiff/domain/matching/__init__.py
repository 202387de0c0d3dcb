"""Probabilistic entity matching.

Flow:
1) classify schema fields into Fellegi-Sunter profiles (once per schema)
2) score anonymous candidates pairwise
3) resolve the score matrix with the auction algorithm
"""

from __future__ import annotations

from .assignment import AssignmentResult, auction_match
from .classifier import classify_field, classify_fields
from .contracts import (
    DEFAULT_THRESHOLDS,
    NEUTRAL_CLASSIFICATION,
    FieldClassification,
    FieldClassifications,
    MatcherConfig,
    MatchPair,
    MatchResult,
    ScorerConfig,
    SimilarityThresholds,
)
from .matcher import match_entities
from .scorer import compare_field_values, compute_match_score, field_score

__all__ = [
    "DEFAULT_THRESHOLDS",
    "NEUTRAL_CLASSIFICATION",
    "AssignmentResult",
    "FieldClassification",
    "FieldClassifications",
    "MatchPair",
    "MatchResult",
    "MatcherConfig",
    "ScorerConfig",
    "SimilarityThresholds",
    "auction_match",
    "classify_field",
    "classify_fields",
    "compare_field_values",
    "compute_match_score",
    "field_score",
    "match_entities",
]
