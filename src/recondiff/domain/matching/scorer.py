"""Pairwise match scores between a new and an old entity.

The score is a sum of log-likelihood ratios (Fellegi-Sunter): each field
present on both sides contributes agreement or disagreement evidence weighted
by its classification, plus one positional term for the list indices.
Negative scores are normal for poor matches.
"""

from __future__ import annotations

import math
from datetime import UTC, date, datetime
from typing import TYPE_CHECKING, Final

from recondiff.domain.model import (
    IDENTITY_FIELD_KEYS,
    DataType,
    extract_uid,
    get_all_fields_for_type,
    is_fieldset,
    values_equal,
)
from recondiff.domain.similarity import jaccard_similarity, levenshtein_similarity

from .contracts import FieldClassification

if TYPE_CHECKING:
    from collections.abc import Iterable, Mapping, Sequence

    from recondiff.domain.model import EntityType, FieldDef, FieldsetNested, FieldValue

    from .contracts import ScorerConfig

_SECONDS_PER_DAY: Final = 24 * 60 * 60
_DATE_WINDOW_DAYS: Final = 365
_DATETIME_WINDOW_DAYS: Final = 30
_POSITION_MATCH_PROBABILITY: Final = 0.6


def compute_match_score(
    config: ScorerConfig,
    new_entity: Mapping[str, FieldValue],
    old_entity: Mapping[str, FieldValue],
    new_index: int,
    old_index: int,
) -> float:
    """Score how likely ``new_entity`` is an edited version of ``old_entity``."""

    if not 0 <= new_index < config.list_length:
        raise ValueError(f"new_index {new_index} outside list of length {config.list_length}")
    if not 0 <= old_index < config.list_length:
        raise ValueError(f"old_index {old_index} outside list of length {config.list_length}")

    score = 0.0
    for key, new_value in new_entity.items():
        if key in config.exclude_fields or key not in old_entity:
            continue
        classification = config.classifications.get(key)
        if classification is None:
            continue
        field_def = config.schema.field_def(key)
        if field_def is None:
            raise ValueError(f"Classified field '{key}' has no definition in the schema")

        similarity = compare_field_values(config, field_def, new_value, old_entity[key])
        score += field_score(similarity, classification)

    position = FieldClassification(
        m=_POSITION_MATCH_PROBABILITY,
        u=min(1 / config.list_length, 0.5),
    )
    score += field_score(_position_similarity(new_index, old_index, config.list_length), position)
    return score


def field_score(similarity: float, classification: FieldClassification) -> float:
    m, u = classification.m, classification.u
    agreement_weight = math.log2(m / u)
    disagreement_weight = math.log2((1 - m) / (1 - u))
    return similarity * agreement_weight + (1 - similarity) * disagreement_weight


def compare_field_values(
    config: ScorerConfig,
    field_def: FieldDef,
    new_value: FieldValue,
    old_value: FieldValue,
) -> float:
    """Similarity of two values of one field, in ``[0, 1]``."""

    if values_equal(new_value, old_value):
        return 1.0

    if new_value is None or old_value is None:
        return 0.0

    if field_def.is_relation:
        range_types = field_def.range or ()
        if field_def.allow_multiple:
            return _compare_multi_relation(config, field_def.key, new_value, old_value, range_types)
        return _compare_single_relation(config, new_value, old_value, range_types)

    if field_def.allow_multiple:
        new_items = _require_array(new_value, field_def.key)
        old_items = _require_array(old_value, field_def.key)
        if len(new_items) == 1 and len(old_items) == 1:
            return 1.0 if values_equal(new_items[0], old_items[0]) else 0.0
        return jaccard_similarity(new_items, old_items)

    # categorical values get no partial credit
    if field_def.unique or field_def.immutable or field_def.options is not None:
        return 0.0

    match field_def.data_type:
        case DataType.DATE:
            return _compare_dates(new_value, old_value, _DATE_WINDOW_DAYS)
        case DataType.DATETIME:
            return _compare_dates(new_value, old_value, _DATETIME_WINDOW_DAYS)
        case DataType.INTEGER | DataType.DECIMAL:
            return _compare_numbers(new_value, old_value)
        case DataType.PLAINTEXT | DataType.RICHTEXT:
            if not isinstance(new_value, str) or not isinstance(old_value, str):
                return 0.0
            return _scale_text_similarity(
                levenshtein_similarity(new_value, old_value),
                floor=config.thresholds.text_floor,
            )
        case (
            DataType.BOOLEAN
            | DataType.UID
            | DataType.SEQ_ID
            | DataType.OPTION
            | DataType.PERIOD
            | DataType.RELATION
        ):
            return 0.0


def compare_nested_fieldsets(
    config: ScorerConfig,
    new_entity: Mapping[str, FieldValue],
    old_entity: Mapping[str, FieldValue],
    range_types: Iterable[EntityType],
) -> float:
    """Mean similarity over the fields the relation's range types allow."""

    allowed_fields: set[str] = set()
    for range_type in range_types:
        allowed_fields.update(
            get_all_fields_for_type(range_type, config.schema, include_system_fields=False)
        )

    total_similarity = 0.0
    field_count = 0
    for key, new_value in new_entity.items():
        if key in IDENTITY_FIELD_KEYS or key not in allowed_fields or key not in old_entity:
            continue
        field_def = config.schema.field_def(key)
        if field_def is None:
            continue
        total_similarity += compare_field_values(config, field_def, new_value, old_entity[key])
        field_count += 1

    return total_similarity / field_count if field_count else 0.0


def _compare_single_relation(
    config: ScorerConfig,
    new_value: FieldValue,
    old_value: FieldValue,
    range_types: Sequence[EntityType],
) -> float:
    new_uid = extract_uid(new_value)
    old_uid = extract_uid(old_value)
    if new_uid and old_uid:
        return 1.0 if new_uid == old_uid else 0.0

    if is_fieldset(new_value) and is_fieldset(old_value):
        return compare_nested_fieldsets(config, new_value, old_value, range_types)

    return 0.0


def _compare_multi_relation(
    config: ScorerConfig,
    field_key: str,
    new_value: FieldValue,
    old_value: FieldValue,
    range_types: Sequence[EntityType],
) -> float:
    # imported here: the matcher scores candidates with this module
    from .matcher import match_entities  # noqa: PLC0415

    new_items = _require_array(new_value, field_key)
    old_items = _require_array(old_value, field_key)
    if not new_items and not old_items:
        return 1.0
    if not new_items or not old_items:
        return 0.0

    new_entities: list[FieldsetNested] = [item for item in new_items if is_fieldset(item)]
    old_entities: list[FieldsetNested] = [item for item in old_items if is_fieldset(item)]

    if new_entities and old_entities:
        result = match_entities(config, new_entities, old_entities)
        total_similarity = sum(
            compare_nested_fieldsets(
                config,
                new_entities[pair.new_index],
                old_entities[pair.old_index],
                range_types,
            )
            for pair in result.matches
        )
        max_length = max(len(new_items), len(old_items))
        return (total_similarity + len(result.matches)) / (2 * max_length)

    new_uids = [uid for uid in map(extract_uid, new_items) if uid]
    old_uids = [uid for uid in map(extract_uid, old_items) if uid]
    return jaccard_similarity(new_uids, old_uids)


def _compare_dates(new_value: FieldValue, old_value: FieldValue, window_days: int) -> float:
    new_moment = _parse_moment(new_value)
    old_moment = _parse_moment(old_value)
    if new_moment is None or old_moment is None:
        return 0.0

    diff_days = abs((new_moment - old_moment).total_seconds()) / _SECONDS_PER_DAY
    return max(0.0, 1 - diff_days / window_days)


def _parse_moment(value: FieldValue) -> datetime | None:
    if isinstance(value, datetime):
        moment = value
    elif isinstance(value, date):
        moment = datetime(value.year, value.month, value.day)
    elif isinstance(value, str):
        normalized = value.strip()
        if normalized.endswith("Z"):
            normalized = normalized[:-1] + "+00:00"
        try:
            moment = datetime.fromisoformat(normalized)
        except ValueError:
            return None
    else:
        return None
    if moment.tzinfo is None:
        moment = moment.replace(tzinfo=UTC)
    return moment


def _compare_numbers(new_value: FieldValue, old_value: FieldValue) -> float:
    if not _is_number(new_value) or not _is_number(old_value):
        raise ValueError(f"Expected numbers, got {new_value!r} and {old_value!r}")
    max_abs = max(abs(new_value), abs(old_value))
    if max_abs == 0:
        return 1.0
    return max(0.0, 1 - abs(new_value - old_value) / max_abs)


def _scale_text_similarity(similarity: float, *, floor: float) -> float:
    # quadratic: 0.9 -> 0.81, 0.5 -> 0.25, 0.3 -> 0.09
    if similarity < floor:
        return 0.0
    return similarity * similarity


def _position_similarity(new_index: int, old_index: int, list_length: int) -> float:
    if new_index == old_index:
        return 1.0
    return 1 - abs(new_index - old_index) / max(list_length - 1, 1)


def _is_number(value: object) -> bool:
    return isinstance(value, int | float) and not isinstance(value, bool)


def _require_array(value: FieldValue, field_key: str) -> Sequence[FieldValue]:
    if not isinstance(value, list | tuple):
        raise ValueError(f"Expected an array value for '{field_key}', got {type(value).__name__}")
    return value
