from __future__ import annotations

import pytest

from recondiff.domain.diffing import (
    ConflictOrigin,
    ConflictSource,
    FieldAccumulator,
    FieldConflictError,
    TextPosition,
    TextRange,
)

BASE = {"title": "Original", "status": "pending", "meta": {"owner": "ann", "size": 3}}


def _source(origin: ConflictOrigin, line: int) -> ConflictSource:
    return ConflictSource(
        file="tasks/today.md",
        range=TextRange(start=TextPosition(line, 0), end=TextPosition(line, 20)),
        origin=origin,
    )


def test_values_equal_to_base_are_not_edits() -> None:
    accumulator = FieldAccumulator(BASE)
    accumulator.set(["title"], "Original")
    accumulator.set(["meta", "owner"], "ann")

    assert accumulator.result() == {}


def test_same_edit_from_two_sources_is_one_change() -> None:
    accumulator = FieldAccumulator(BASE)
    accumulator.set(["title"], "Renamed", _source(ConflictOrigin.FRONTMATTER, 1))
    accumulator.set(["title"], "Renamed", _source(ConflictOrigin.BODY, 8))

    assert accumulator.conflicts == ()
    assert accumulator.result() == {"title": "Renamed"}


def test_edit_and_unchanged_copy_keep_the_edit() -> None:
    accumulator = FieldAccumulator(BASE)
    accumulator.set(["status"], "pending")
    accumulator.set(["status"], "complete")

    assert accumulator.result() == {"status": "complete"}


def test_different_edits_conflict() -> None:
    frontmatter = _source(ConflictOrigin.FRONTMATTER, 2)
    duplicate = _source(ConflictOrigin.BODY_DUPLICATE, 14)
    accumulator = FieldAccumulator(BASE)
    accumulator.set(["meta", "owner"], "bob", frontmatter)
    accumulator.set(["meta", "owner"], "cy", duplicate)

    (conflict,) = accumulator.conflicts
    assert conflict.field_path == ("meta", "owner")
    assert [proposed.value for proposed in conflict.values] == ["bob", "cy"]
    assert [proposed.source for proposed in conflict.values] == [frontmatter, duplicate]
    assert conflict.base_value == "ann"

    expected = r"Conflicting values for field 'meta\.owner'"
    with pytest.raises(FieldConflictError, match=expected) as excinfo:
        accumulator.result()
    assert excinfo.value.conflict is conflict


def test_conflict_on_field_missing_from_base() -> None:
    accumulator = FieldAccumulator(BASE)
    accumulator.set(["dueDate"], "2024-01-01")
    accumulator.set(["dueDate"], "2024-02-01")

    (conflict,) = accumulator.conflicts
    assert conflict.base_value is None


def test_nested_paths_merge_into_parent_objects() -> None:
    accumulator = FieldAccumulator(BASE)
    accumulator.set(["meta", "size"], 5)
    accumulator.set(["meta"], {"owner": "bob"})
    accumulator.set(["links", "next"], "task2")

    assert accumulator.result() == {
        "meta": {"owner": "bob", "size": 5},
        "links": {"next": "task2"},
    }


def test_result_does_not_alias_stored_values() -> None:
    tags = ["a", "b"]
    accumulator = FieldAccumulator({"tags": ["a"]})
    accumulator.set(["tags"], tags)

    result = accumulator.result()
    result["tags"].append("c")

    assert tags == ["a", "b"]
    assert accumulator.result() == {"tags": ["a", "b"]}
