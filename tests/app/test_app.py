from __future__ import annotations

from pathlib import Path
from typing import TYPE_CHECKING

import pytest

from recondiff.app import (
    build_context,
    match_entity_lists,
    merge_field_proposals,
    reconcile_document_tree,
    reconcile_entity,
    reconcile_query_results,
)
from recondiff.domain.diffing import FieldConflictError
from recondiff.domain.matching import SimilarityThresholds

if TYPE_CHECKING:
    from recondiff.domain.model import EntitySchema

SCHEMA_PATH = Path(__file__).resolve().parents[1] / "data" / "schema.json"


def test_build_context_reads_schema_path_from_environment(
    monkeypatch: pytest.MonkeyPatch,
) -> None:
    monkeypatch.setenv("RECONDIFF_SCHEMA_PATH", str(SCHEMA_PATH))

    context = build_context()

    assert "tasks" in context.schema.fields
    assert "uid" not in context.classifications
    assert "title" in context.classifications


def test_build_context_with_explicit_schema(schema: EntitySchema) -> None:
    thresholds = SimilarityThresholds(text_floor=0.2)

    context = build_context(schema=schema, thresholds=thresholds)

    assert context.schema is schema
    assert context.matcher_config().thresholds is thresholds


def test_use_cases_share_context(schema: EntitySchema, project: dict[str, object]) -> None:
    context = build_context(schema=schema)
    old = [{"uid": "t1", "title": "Implement auth"}, {"uid": "t2", "title": "Add tests"}]
    new = [{"title": "Implement auth v2"}]

    assert match_entity_lists(context, new, old).to_remove == (1,)
    assert reconcile_entity(context, project, project) == []
    assert reconcile_query_results(context, new, old, "type=Task").to_update == [
        {"$ref": "t1", "title": "Implement auth v2"}
    ]


def test_unsupported_query_is_rejected(schema: EntitySchema) -> None:
    context = build_context(schema=schema)

    with pytest.raises(ValueError, match="Unsupported query"):
        reconcile_query_results(context, [], [], 42)


def test_reconcile_document_tree() -> None:
    old = {"type": "Document", "uid": "doc-1", "title": "Draft"}

    assert reconcile_document_tree({"type": "Document", "title": "Final"}, old) == [
        {"$ref": "doc-1", "title": "Final"}
    ]


def test_merge_field_proposals() -> None:
    base = {"title": "Original", "meta": {"owner": "ann"}}
    proposals = [
        {"path": "title", "value": "Renamed", "source": {"origin": "frontmatter"}},
        {"path": ["meta", "owner"], "value": "bob"},
        {"path": "title", "value": "Renamed", "source": {"origin": "body"}},
    ]

    assert merge_field_proposals(base, proposals) == {"title": "Renamed", "meta": {"owner": "bob"}}


def test_merge_field_proposals_reports_conflict_source() -> None:
    source = {
        "file": "today.md",
        "origin": "body:duplicate",
        "range": {"start": {"line": 3, "character": 0}, "end": {"line": 3, "character": 9}},
    }
    proposals = [
        {"path": "title", "value": "One"},
        {"path": "title", "value": "Two", "source": source},
    ]

    with pytest.raises(FieldConflictError) as excinfo:
        merge_field_proposals({"title": "Original"}, proposals)

    conflicting = excinfo.value.conflict.values[1].source
    assert conflicting is not None
    assert conflicting.file == "today.md"
    assert conflicting.range is not None
    assert conflicting.range.start.line == 3


def test_merge_field_proposals_requires_a_path() -> None:
    with pytest.raises(ValueError, match="path"):
        merge_field_proposals({}, [{"value": 1}])
