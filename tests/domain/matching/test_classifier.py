from __future__ import annotations

import pytest

from recondiff.domain.matching import (
    NEUTRAL_CLASSIFICATION,
    FieldClassification,
    classify_field,
    classify_fields,
)
from recondiff.domain.model import DataType, EntitySchema, FieldDef, PlaintextAlphabet


def test_plaintext_line_field() -> None:
    field_def = FieldDef(
        key="title",
        data_type=DataType.PLAINTEXT,
        plaintext_alphabet=PlaintextAlphabet.LINE,
    )

    assert classify_field(field_def) == FieldClassification(m=0.8, u=0.0001)


def test_unique_field_is_strong_evidence() -> None:
    classification = classify_field(
        FieldDef(key="email", data_type=DataType.PLAINTEXT, unique=True)
    )

    assert classification.m == 0.99
    assert classification.u == pytest.approx(0.000001)


def test_multi_valued_field_doubles_chance_agreement() -> None:
    classification = classify_field(
        FieldDef(key="tags", data_type=DataType.PLAINTEXT, allow_multiple=True)
    )

    assert classification.u == pytest.approx(0.0002)


@pytest.mark.parametrize(
    ("range_types", "expected_u"),
    [
        (("Project",), 0.025),
        (("User", "Team"), 0.05),
        (("User", "Team", "Project"), 0.075),
    ],
)
def test_relation_range_adjustment(range_types: tuple[str, ...], expected_u: float) -> None:
    classification = classify_field(
        FieldDef(key="owner", data_type=DataType.RELATION, range=range_types)
    )

    assert classification.u == pytest.approx(expected_u)


def test_option_field_uses_option_count() -> None:
    classification = classify_field(
        FieldDef(key="status", data_type=DataType.OPTION, options=("a", "b", "c", "d"))
    )

    assert classification == FieldClassification(m=0.7, u=0.25)


def test_single_option_is_neutral() -> None:
    classification = classify_field(
        FieldDef(key="kind", data_type=DataType.OPTION, options=("only",))
    )

    assert classification is NEUTRAL_CLASSIFICATION


def test_type_field_uses_type_count(schema: EntitySchema) -> None:
    classifications = classify_fields(schema)

    assert classifications["type"].u == pytest.approx(1 / 4)
    assert classifications["type"].m == 0.99


def test_multi_valued_boolean_keeps_u_below_m() -> None:
    classification = classify_field(
        FieldDef(key="flags", data_type=DataType.BOOLEAN, allow_multiple=True)
    )

    assert classification.u < classification.m


def test_classify_fields_skips_identifiers() -> None:
    schema = EntitySchema(
        fields={
            "id": FieldDef(key="id", data_type=DataType.SEQ_ID),
            "uid": FieldDef(key="uid", data_type=DataType.UID),
            "title": FieldDef(key="title", data_type=DataType.PLAINTEXT),
        }
    )

    classifications = classify_fields(schema)

    assert set(classifications) == {"title"}


def test_classifications_are_read_only(schema: EntitySchema) -> None:
    classifications = classify_fields(schema)

    with pytest.raises(TypeError):
        classifications["title"] = NEUTRAL_CLASSIFICATION  # pyright: ignore[reportIndexIssue]


def test_every_profile_is_valid(schema: EntitySchema) -> None:
    for key, classification in classify_fields(schema).items():
        if classification == NEUTRAL_CLASSIFICATION:
            continue
        assert 0 < classification.u < classification.m < 1, key
