"""Fellegi-Sunter field profiles derived from schema metadata.

For each field we estimate:
- m: P(field agrees | same entity)
- u: P(field agrees | different entities)

Agreement then contributes ``log2(m/u)`` of evidence and disagreement
``log2((1-m)/(1-u))``. Valid profiles satisfy ``0 < u < m < 1``.
"""

from __future__ import annotations

from types import MappingProxyType
from typing import TYPE_CHECKING, Final

from recondiff.domain.model import ID_FIELD, TYPE_FIELD, UID_FIELD, DataType

from .contracts import NEUTRAL_CLASSIFICATION, FieldClassification

if TYPE_CHECKING:
    from recondiff.domain.model import EntitySchema, FieldDef, FieldKey

    from .contracts import FieldClassifications

_PLAINTEXT_U_VALUES: Final = {
    "token": 0.001,
    "code": 0.0001,
    "word": 0.001,
    "line": 0.0001,
    "paragraph": 0.00001,
}

_RICHTEXT_U_VALUES: Final = {
    "word": 0.001,
    "line": 0.0001,
    "block": 0.00001,
    "section": 0.000001,
    "document": 0.0000001,
}

_FALLBACK_U_VALUE: Final = 0.01
# keeps u below every non-neutral m
_MAX_U_VALUE: Final = 0.5
_EXCLUDED_FIELDS: Final = frozenset({ID_FIELD, UID_FIELD})


def classify_fields(schema: EntitySchema) -> FieldClassifications:
    """Build the read-only classification map for every non-identifier field."""

    type_count = schema.type_count
    classifications: dict[FieldKey, FieldClassification] = {}
    for key, field_def in schema.fields.items():
        if key in _EXCLUDED_FIELDS:
            continue
        classifications[key] = classify_field(field_def, type_count=type_count)
    return MappingProxyType(classifications)


def classify_field(field_def: FieldDef, *, type_count: int = 1) -> FieldClassification:
    # a single allowed option carries no evidence either way
    if field_def.options is not None and len(field_def.options) == 1:
        return NEUTRAL_CLASSIFICATION

    return FieldClassification(
        m=_estimate_match_probability(field_def),
        u=min(_estimate_unrelated_match_chance(field_def, type_count), _MAX_U_VALUE),
    )


def _base_unrelated_match_chance(field_def: FieldDef, type_count: int) -> float:
    if field_def.key == TYPE_FIELD and type_count > 1:
        return 1 / type_count

    if field_def.options is not None and len(field_def.options) > 1:
        return 1 / len(field_def.options)

    match field_def.data_type:
        case DataType.BOOLEAN:
            return 0.5
        case DataType.PLAINTEXT:
            if field_def.plaintext_alphabet is not None:
                return _PLAINTEXT_U_VALUES[field_def.plaintext_alphabet]
            return 0.0001
        case DataType.RICHTEXT:
            if field_def.richtext_alphabet is not None:
                return _RICHTEXT_U_VALUES[field_def.richtext_alphabet]
            return 0.00001
        case DataType.INTEGER | DataType.DECIMAL:
            return 0.001
        case DataType.DATE | DataType.PERIOD:
            return 0.003
        case DataType.DATETIME | DataType.UID | DataType.SEQ_ID:
            return 0.0001
        case DataType.RELATION:
            return 0.05
        case DataType.OPTION:
            return _FALLBACK_U_VALUE


def _estimate_unrelated_match_chance(field_def: FieldDef, type_count: int) -> float:
    base = _base_unrelated_match_chance(field_def, type_count)

    if field_def.unique:
        return base * 0.01

    # set comparison makes accidental overlap more likely
    if field_def.allow_multiple:
        return base * 2

    if field_def.is_relation and field_def.range:
        if len(field_def.range) == 1:
            return base * 0.5
        if len(field_def.range) >= 3:
            return base * 1.5

    return base


def _estimate_match_probability(field_def: FieldDef) -> float:
    if field_def.immutable or field_def.unique:
        return 0.99
    if field_def.data_type is DataType.BOOLEAN:
        return 0.7
    if field_def.data_type in (DataType.DATE, DataType.DATETIME):
        return 0.9
    if field_def.options:
        return 0.7
    return 0.8
