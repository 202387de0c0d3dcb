"""Application orchestration entry points."""

from __future__ import annotations

import json
from collections.abc import Iterable, Mapping
from dataclasses import dataclass
from logging import getLogger
from typing import TYPE_CHECKING, Any

from recondiff.adapters.schema import load_entity_schema
from recondiff.config import get_schema_source_config, get_similarity_thresholds
from recondiff.domain.diffing import (
    ConflictOrigin,
    ConflictSource,
    DiffQueryResult,
    FieldAccumulator,
    QueryParams,
    TextPosition,
    TextRange,
    diff_entities,
    diff_node_trees,
    diff_query_results,
)
from recondiff.domain.matching import MatcherConfig, classify_fields, match_entities
from recondiff.domain.model import new_uid

if TYPE_CHECKING:
    from pathlib import Path

    from recondiff.domain.diffing.entities import UidFactory
    from recondiff.domain.matching import FieldClassifications, MatchResult, SimilarityThresholds
    from recondiff.domain.model import Changeset, EntitySchema, FieldsetNested

log = getLogger(__name__)


@dataclass(frozen=True, slots=True, kw_only=True)
class ReconciliationContext:
    """Schema-derived state built once and shared by every use case."""

    schema: EntitySchema
    classifications: FieldClassifications
    thresholds: SimilarityThresholds

    def matcher_config(self) -> MatcherConfig:
        return MatcherConfig(
            schema=self.schema,
            classifications=self.classifications,
            thresholds=self.thresholds,
        )


def build_context(
    *,
    schema: EntitySchema | None = None,
    schema_path: Path | None = None,
    thresholds: SimilarityThresholds | None = None,
) -> ReconciliationContext:
    """Load the schema (from ``RECONDIFF_SCHEMA_PATH`` unless given) and classify its fields."""

    if schema is None:
        effective_path = schema_path or get_schema_source_config().path
        log.info("Loading schema from %s", effective_path)
        schema = load_entity_schema(effective_path)
    return ReconciliationContext(
        schema=schema,
        classifications=classify_fields(schema),
        thresholds=thresholds or get_similarity_thresholds(),
    )


def load_json(path: Path) -> Any:
    with path.open(encoding="utf-8") as handle:
        return json.load(handle)


def match_entity_lists(
    context: ReconciliationContext,
    new_entities: list[FieldsetNested],
    old_entities: list[FieldsetNested],
) -> MatchResult:
    result = match_entities(context.matcher_config(), new_entities, old_entities)
    log.info(
        "Matched entities: matched=%d, create=%d, remove=%d",
        len(result.matches),
        len(result.to_create),
        len(result.to_remove),
    )
    return result


def reconcile_entity(
    context: ReconciliationContext,
    new_entity: FieldsetNested,
    old_entity: FieldsetNested,
    *,
    uid_factory: UidFactory = new_uid,
) -> list[Changeset]:
    changesets = diff_entities(
        context.schema,
        new_entity,
        old_entity,
        classifications=context.classifications,
        thresholds=context.thresholds,
        uid_factory=uid_factory,
    )
    log.info("Entity diff produced %d changesets", len(changesets))
    return changesets


def reconcile_query_results(
    context: ReconciliationContext,
    new_entities: list[FieldsetNested],
    old_entities: list[FieldsetNested],
    query: object = None,
    *,
    uid_factory: UidFactory = new_uid,
) -> DiffQueryResult:
    """Diff edited query results; ``query`` may be a filter string or ``{"filters": {...}}``."""

    params = QueryParams.coerce(query) if query is not None else None
    if query is not None and params is None:
        raise ValueError(f"Unsupported query: {query!r}")

    result = diff_query_results(
        context.schema,
        new_entities,
        old_entities,
        params,
        classifications=context.classifications,
        thresholds=context.thresholds,
        uid_factory=uid_factory,
    )
    log.info(
        "Query diff finished: create=%d, update=%d",
        len(result.to_create),
        len(result.to_update),
    )
    return result


def reconcile_document_tree(
    new_root: FieldsetNested,
    old_root: FieldsetNested,
    *,
    thresholds: SimilarityThresholds | None = None,
) -> list[Changeset]:
    """Diff two document trees; no schema is involved."""

    changesets = diff_node_trees(
        new_root, old_root, thresholds=thresholds or get_similarity_thresholds()
    )
    log.info("Tree diff produced %d changesets", len(changesets))
    return changesets


def merge_field_proposals(
    base: Mapping[str, Any],
    proposals: Iterable[Mapping[str, Any]],
) -> FieldsetNested:
    """Merge proposals ``{"path": "a.b" | [...], "value": ..., "source": {...}}`` against ``base``.

    Raises ``FieldConflictError`` when two proposals disagree on a changed field.
    """

    accumulator = FieldAccumulator(base)
    count = 0
    for proposal in proposals:
        accumulator.set(
            _proposal_path(proposal),
            proposal.get("value"),
            _proposal_source(proposal.get("source")),
        )
        count += 1

    merged = accumulator.result()
    log.info("Merged %d proposals into %d changed fields", count, len(merged))
    return merged


def _proposal_path(proposal: Mapping[str, Any]) -> list[str]:
    path = proposal.get("path")
    if isinstance(path, str) and path:
        return path.split(".")
    if isinstance(path, list) and path and all(isinstance(part, str) for part in path):
        return list(path)
    raise ValueError(f"Proposal path must be a dotted string or a list of keys, got {path!r}")


def _proposal_source(raw: object) -> ConflictSource | None:
    if not isinstance(raw, Mapping):
        return None
    origin = raw.get("origin")
    return ConflictSource(
        file=raw.get("file"),
        range=_text_range(raw.get("range")),
        origin=ConflictOrigin(origin) if origin is not None else None,
    )


def _text_range(raw: object) -> TextRange | None:
    if not isinstance(raw, Mapping):
        return None
    start, end = raw.get("start"), raw.get("end")
    if not isinstance(start, Mapping) or not isinstance(end, Mapping):
        return None
    return TextRange(
        start=TextPosition(line=int(start["line"]), character=int(start["character"])),
        end=TextPosition(line=int(end["line"]), character=int(end["character"])),
    )
