from __future__ import annotations

from typing import TYPE_CHECKING

from recondiff.domain.diffing import QueryParams, diff_query_results

if TYPE_CHECKING:
    from recondiff.domain.model import EntitySchema


def test_edited_result_becomes_update_and_missing_one_is_ignored(schema: EntitySchema) -> None:
    old = [
        {"uid": "t1", "title": "Implement auth"},
        {"uid": "t2", "title": "Add tests"},
    ]
    new = [{"title": "Implement auth v2"}]

    result = diff_query_results(schema, new, old)

    assert result.to_update == [{"$ref": "t1", "title": "Implement auth v2"}]
    assert result.to_create == []


def test_new_results_are_hydrated_from_query(schema: EntitySchema) -> None:
    query = QueryParams.from_string("type=Task AND status=pending")

    result = diff_query_results(schema, [{"title": "Brand new"}], [], query)

    assert result.to_create == [{"type": "Task", "status": "pending", "title": "Brand new"}]
    assert result.to_update == []


def test_entity_fields_override_query_defaults(schema: EntitySchema) -> None:
    query = QueryParams(filters={"type": "Task", "status": {"op": "eq", "value": "pending"}})

    result = diff_query_results(schema, [{"title": "Urgent", "status": "active"}], [], query)

    assert result.to_create == [{"type": "Task", "status": "active", "title": "Urgent"}]


def test_new_result_without_type_is_skipped(schema: EntitySchema) -> None:
    result = diff_query_results(schema, [{"title": "Who am I"}], [])

    assert result.to_create == []


def test_query_fields_do_not_drive_matching(schema: EntitySchema) -> None:
    query = QueryParams.from_string("type=Task, status=pending")
    old = [
        {"uid": "t1", "type": "Task", "status": "pending", "title": "Water plants"},
        {"uid": "t2", "type": "Task", "status": "pending", "title": "Pay rent"},
    ]
    new = [
        {"type": "Task", "status": "pending", "title": "Pay the rent"},
        {"type": "Task", "status": "pending", "title": "Water plants"},
    ]

    result = diff_query_results(schema, new, old, query)

    assert result.to_update == [{"$ref": "t2", "title": "Pay the rent"}]
    assert result.to_create == []


def test_query_fields_still_drive_matching_of_nested_children(schema: EntitySchema) -> None:
    query = QueryParams.from_string("title=Household")
    old = [
        {
            "uid": "p1",
            "type": "Project",
            "title": "Household",
            "tasks": [{"uid": "c1", "title": "Buy milk", "status": "pending", "priority": "low"}],
        }
    ]
    new = [
        {
            "uid": "p1",
            "type": "Project",
            "title": "Household",
            "tasks": [{"title": "Buy milk", "status": "active", "priority": "high"}],
        }
    ]

    result = diff_query_results(schema, new, old, query)

    assert result.to_update == [{"$ref": "c1", "status": "active", "priority": "high"}]
    assert result.to_create == []
