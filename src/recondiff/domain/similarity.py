"""String and set similarity primitives in the ``[0, 1]`` range."""

from __future__ import annotations

from typing import TYPE_CHECKING

from rapidfuzz.distance import Levenshtein

from .model import contains_value

if TYPE_CHECKING:
    from collections.abc import Sequence

    from .model import FieldValue


def levenshtein_similarity(left: str, right: str) -> float:
    """``1 - distance / max(len)``; identical strings score 1, one empty side scores 0."""

    if left == right:
        return 1.0
    if not left or not right:
        return 0.0
    return Levenshtein.normalized_similarity(left, right)


def jaccard_similarity(left: Sequence[FieldValue], right: Sequence[FieldValue]) -> float:
    """``|intersection| / |union|`` over the distinct values of both sequences."""

    left_distinct = _distinct(left)
    right_distinct = _distinct(right)
    if not left_distinct and not right_distinct:
        return 1.0

    intersection = sum(1 for value in left_distinct if contains_value(right_distinct, value))
    union = len(left_distinct) + len(right_distinct) - intersection
    return intersection / union


def _distinct(values: Sequence[FieldValue]) -> list[FieldValue]:
    distinct: list[FieldValue] = []
    for value in values:
        if not contains_value(distinct, value):
            distinct.append(value)
    return distinct
