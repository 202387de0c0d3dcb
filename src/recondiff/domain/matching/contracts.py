"""Shared matching contract components.

This module holds the value objects passed between the classifier, scorer,
assignment and matcher stages. All of them are frozen: a config built once
for a schema may be reused across calls and threads.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Final, TypeAlias

if TYPE_CHECKING:
    from collections.abc import Mapping

    from recondiff.domain.model import EntitySchema, FieldKey

DEFAULT_TEXT_SIMILARITY_FLOOR: Final = 0.1
DEFAULT_TREE_POSITIONAL_THRESHOLD: Final = 0.5
DEFAULT_TREE_FALLBACK_THRESHOLD: Final = 0.3


@dataclass(frozen=True, slots=True)
class FieldClassification:
    """Fellegi-Sunter profile of one field.

    ``m`` is the chance the field agrees when both records are the same entity,
    ``u`` the chance it agrees between unrelated entities.
    """

    m: float
    u: float


FieldClassifications: TypeAlias = "Mapping[FieldKey, FieldClassification]"

NEUTRAL_CLASSIFICATION: Final = FieldClassification(m=0.5, u=0.5)


@dataclass(frozen=True, slots=True, kw_only=True)
class SimilarityThresholds:
    text_floor: float = DEFAULT_TEXT_SIMILARITY_FLOOR
    tree_positional: float = DEFAULT_TREE_POSITIONAL_THRESHOLD
    tree_fallback: float = DEFAULT_TREE_FALLBACK_THRESHOLD


DEFAULT_THRESHOLDS: Final = SimilarityThresholds()


@dataclass(frozen=True, slots=True, kw_only=True)
class MatcherConfig:
    schema: EntitySchema
    classifications: FieldClassifications
    exclude_fields: frozenset[FieldKey] = field(default_factory=frozenset)
    thresholds: SimilarityThresholds = DEFAULT_THRESHOLDS

    def for_list(self, list_length: int) -> ScorerConfig:
        return ScorerConfig(
            schema=self.schema,
            classifications=self.classifications,
            exclude_fields=self.exclude_fields,
            thresholds=self.thresholds,
            list_length=list_length,
        )


@dataclass(frozen=True, slots=True, kw_only=True)
class ScorerConfig(MatcherConfig):
    """Matcher config bound to the length of the lists being compared."""

    list_length: int


@dataclass(frozen=True, slots=True)
class MatchPair:
    new_index: int
    old_index: int


@dataclass(frozen=True, slots=True, kw_only=True)
class MatchResult:
    matches: tuple[MatchPair, ...] = ()
    to_create: tuple[int, ...] = ()
    to_remove: tuple[int, ...] = ()
