"""Structural differ for whole document trees.

Document nodes (sections, paragraphs, query views) rarely carry identifiers
once they have been rendered to text, so nodes are paired heuristically: first
by position, then by the best similar unclaimed node. Pairs are walked
breadth-first and every node yields at most one changeset.
"""

from __future__ import annotations

import json
from collections import deque
from dataclasses import dataclass, field
from logging import getLogger
from typing import TYPE_CHECKING, Final

from recondiff.domain.matching import DEFAULT_THRESHOLDS
from recondiff.domain.model import (
    ID_FIELD,
    REF_FIELD,
    TYPE_FIELD,
    UID_FIELD,
    get_uid,
    is_fieldset,
)
from recondiff.domain.similarity import levenshtein_similarity

from .query import QueryParams, extract_fieldset_from_query, get_type_from_filters

if TYPE_CHECKING:
    from collections.abc import Sequence

    from recondiff.domain.matching import SimilarityThresholds
    from recondiff.domain.model import Changeset, FieldsetNested, FieldValue

log = getLogger(__name__)

BLOCK_CONTENT_FIELD: Final = "blockContent"
DATA_FIELD: Final = "data"
QUERY_FIELD: Final = "query"
QUERY_NODE_TYPE: Final = "Dataview"

_NODE_SYSTEM_FIELDS: Final = frozenset(
    {BLOCK_CONTENT_FIELD, DATA_FIELD, UID_FIELD, ID_FIELD, "version"}
)
_CONTENT_KEY_FIELDS: Final = ("title", "textContent", QUERY_FIELD)

_TYPE_WEIGHT: Final = 0.2
_CONTENT_WEIGHT: Final = 0.5
_STRUCTURE_WEIGHT: Final = 0.3


@dataclass(frozen=True, slots=True)
class NodeMatch:
    new_node: FieldsetNested
    old_node: FieldsetNested | None
    similarity: float


@dataclass(frozen=True, slots=True, kw_only=True)
class NodeMatches:
    matches: list[NodeMatch] = field(default_factory=list)
    removed: tuple[int, ...] = ()


@dataclass(frozen=True, slots=True)
class _QueuedNode:
    new_node: FieldsetNested
    old_node: FieldsetNested | None
    parent: FieldsetNested | None = None


def node_similarity(new_node: FieldsetNested, old_node: FieldsetNested) -> float:
    """Weighted similarity in [0, 1]; nodes of different types never match."""

    if new_node.get(TYPE_FIELD) != old_node.get(TYPE_FIELD):
        return 0.0

    score = _TYPE_WEIGHT

    new_key = _content_key(new_node)
    old_key = _content_key(old_node)
    if new_key and old_key:
        score += _CONTENT_WEIGHT * levenshtein_similarity(new_key, old_key)
    elif not new_key and not old_key:
        score += _CONTENT_WEIGHT

    new_blocks = new_node.get(BLOCK_CONTENT_FIELD)
    old_blocks = old_node.get(BLOCK_CONTENT_FIELD)
    if isinstance(new_blocks, list) and isinstance(old_blocks, list):
        longest = max(len(new_blocks), len(old_blocks))
        structure = min(len(new_blocks), len(old_blocks)) / longest if longest else 1.0
        score += _STRUCTURE_WEIGHT * structure
    elif new_blocks is None and old_blocks is None:
        score += _STRUCTURE_WEIGHT

    return score


def match_nodes(
    new_nodes: Sequence[FieldsetNested],
    old_nodes: Sequence[FieldsetNested],
    *,
    thresholds: SimilarityThresholds = DEFAULT_THRESHOLDS,
) -> NodeMatches:
    """Pair sibling nodes by position first, then by best similarity."""

    matches: list[NodeMatch] = []
    claimed: set[int] = set()
    unmatched: list[int] = []

    for index, new_node in enumerate(new_nodes):
        if index < len(old_nodes):
            similarity = node_similarity(new_node, old_nodes[index])
            if similarity > thresholds.tree_positional:
                matches.append(NodeMatch(new_node, old_nodes[index], similarity))
                claimed.add(index)
                continue
        unmatched.append(index)

    for index in unmatched:
        new_node = new_nodes[index]
        best_index: int | None = None
        best_score = 0.0
        for old_index, old_node in enumerate(old_nodes):
            if old_index in claimed:
                continue
            score = node_similarity(new_node, old_node)
            if score > best_score and score > thresholds.tree_fallback:
                best_index, best_score = old_index, score

        if best_index is None:
            matches.append(NodeMatch(new_node, None, 0.0))
        else:
            matches.append(NodeMatch(new_node, old_nodes[best_index], best_score))
            claimed.add(best_index)

    removed = tuple(index for index in range(len(old_nodes)) if index not in claimed)
    return NodeMatches(matches=matches, removed=removed)


def diff_node_trees(
    new_root: FieldsetNested,
    old_root: FieldsetNested,
    *,
    thresholds: SimilarityThresholds = DEFAULT_THRESHOLDS,
) -> list[Changeset]:
    """Return the changesets turning the ``old_root`` tree into ``new_root``.

    Removed nodes produce no changeset; deleting them is left to the caller.
    """

    changesets: list[Changeset] = []
    queue = deque([_QueuedNode(new_root, old_root)])

    while queue:
        current = queue.popleft()
        changeset = _node_changeset(current.new_node, current.old_node, current.parent)
        if changeset is not None:
            changesets.append(changeset)

        for new_children, old_children in _child_lists(current.new_node, current.old_node):
            node_matches = match_nodes(new_children, old_children, thresholds=thresholds)
            queue.extend(
                _QueuedNode(match.new_node, match.old_node, current.new_node)
                for match in node_matches.matches
            )
            if node_matches.removed:
                log.debug(
                    "Nodes removed under %s: %s",
                    get_uid(current.old_node or {}) or "<new node>",
                    [get_uid(old_children[index]) for index in node_matches.removed],
                )

    return changesets


def diff_node_lists(
    new_nodes: Sequence[FieldsetNested],
    old_nodes: Sequence[FieldsetNested],
    *,
    thresholds: SimilarityThresholds = DEFAULT_THRESHOLDS,
) -> list[Changeset]:
    """Diff two flat node lists without descending into their children."""

    changesets: list[Changeset] = []
    for match in match_nodes(new_nodes, old_nodes, thresholds=thresholds).matches:
        changeset = _node_changeset(match.new_node, match.old_node)
        if changeset is not None:
            changesets.append(changeset)
    return changesets


def _child_lists(
    new_node: FieldsetNested,
    old_node: FieldsetNested | None,
) -> list[tuple[list[FieldsetNested], list[FieldsetNested]]]:
    pairs: list[tuple[list[FieldsetNested], list[FieldsetNested]]] = []

    new_blocks = new_node.get(BLOCK_CONTENT_FIELD)
    if isinstance(new_blocks, list):
        old_blocks = _nested_items(_get(old_node, BLOCK_CONTENT_FIELD))
        pairs.append((_nested_items(new_blocks), old_blocks))

    new_data = new_node.get(DATA_FIELD)
    if isinstance(new_data, list):
        new_items = _nested_items(new_data)
        query_fields = _query_fieldset(new_node)
        if query_fields:
            new_items = [{**query_fields, **item} for item in new_items]
        pairs.append((new_items, _nested_items(_get(old_node, DATA_FIELD))))

    return pairs


def _node_changeset(
    new_node: FieldsetNested,
    old_node: FieldsetNested | None,
    parent: FieldsetNested | None = None,
) -> Changeset | None:
    if old_node is None:
        return _creation_changeset(new_node, parent)

    changes: dict[str, FieldValue] = {}
    for key, new_value in new_node.items():
        if key in _NODE_SYSTEM_FIELDS:
            continue
        old_value = old_node.get(key)
        if new_value is None and old_value is None:
            continue
        if _canonical_json(new_value) != _canonical_json(old_value):
            changes[key] = new_value

    if not changes:
        return None

    uid = get_uid(old_node)
    if uid is None:
        log.warning("Skipping update of node without uid (changed fields: %s)", sorted(changes))
        return None
    return {REF_FIELD: uid, **changes}


def _creation_changeset(
    new_node: FieldsetNested,
    parent: FieldsetNested | None,
) -> Changeset | None:
    node_type = new_node.get(TYPE_FIELD)
    if not node_type and parent is not None and parent.get(TYPE_FIELD) == QUERY_NODE_TYPE:
        query = QueryParams.coerce(parent.get(QUERY_FIELD))
        node_type = get_type_from_filters(query.filters) if query is not None else None

    if not isinstance(node_type, str):
        log.debug("Dropping new node without a type: %s", sorted(new_node))
        return None

    fields = {
        key: value
        for key, value in new_node.items()
        if key not in _NODE_SYSTEM_FIELDS and key != TYPE_FIELD
    }
    return {TYPE_FIELD: node_type, **fields}


def _query_fieldset(node: FieldsetNested) -> dict[str, FieldValue]:
    if node.get(TYPE_FIELD) != QUERY_NODE_TYPE:
        return {}
    query = QueryParams.coerce(node.get(QUERY_FIELD))
    return extract_fieldset_from_query(query) if query is not None else {}


def _content_key(node: FieldsetNested) -> str | None:
    for key in _CONTENT_KEY_FIELDS:
        value = node.get(key)
        if isinstance(value, str):
            return value
    return None


def _nested_items(value: FieldValue) -> list[FieldsetNested]:
    if not isinstance(value, list):
        return []
    return [item for item in value if is_fieldset(item)]


def _get(node: FieldsetNested | None, key: str) -> FieldValue:
    return None if node is None else node.get(key)


def _canonical_json(value: FieldValue) -> str:
    return json.dumps(value, sort_keys=True, default=str)
