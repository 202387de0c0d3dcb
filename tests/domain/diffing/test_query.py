from __future__ import annotations

import pytest

from recondiff.domain.diffing import (
    QueryParams,
    extract_fieldset_from_query,
    get_type_from_filters,
    parse_filters_from_string,
)


@pytest.mark.parametrize(
    "query",
    [
        "type=Task AND status=pending",
        "type=Task,status=pending",
        " type = Task ,  status = pending ",
    ],
)
def test_parse_filters_from_string(query: str) -> None:
    assert parse_filters_from_string(query) == {"type": "Task", "status": "pending"}


def test_parse_filters_ignores_conditions_without_value() -> None:
    assert parse_filters_from_string("type=Task AND orphan") == {"type": "Task"}
    assert parse_filters_from_string("nothing here") is None
    assert parse_filters_from_string("") is None


def test_extract_fieldset_keeps_equality_filters_only() -> None:
    params = QueryParams(
        filters={
            "type": "Task",
            "tags": ["a", "b"],
            "status": {"op": "eq", "value": "pending"},
            "priority": {"op": "in", "value": ["low", "high"]},
            "dueDate": None,
        }
    )

    assert extract_fieldset_from_query(params) == {
        "type": "Task",
        "tags": ["a", "b"],
        "status": "pending",
    }


def test_get_type_from_filters() -> None:
    assert get_type_from_filters({"type": "Task"}) == "Task"
    assert get_type_from_filters({"type": {"op": "eq", "value": "Project"}}) == "Project"
    assert get_type_from_filters({"status": "pending"}) is None
    assert get_type_from_filters({"type": ["Task", "Project"]}) is None


def test_coerce_accepts_strings_and_mappings() -> None:
    assert QueryParams.coerce("type=Task") == QueryParams(filters={"type": "Task"})
    assert QueryParams.coerce({"filters": {"type": "Idea"}}) == QueryParams(
        filters={"type": "Idea"}
    )
    params = QueryParams(filters={"type": "Task"})
    assert QueryParams.coerce(params) is params
    assert QueryParams.coerce({"limit": 5}) == QueryParams()
    assert QueryParams.coerce(42) is None
