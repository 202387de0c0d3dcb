"""Changeset production from edited snapshots.

- ``entities``: schema-aware recursive diff of entities and query results
- ``accumulator``: merge of field values proposed by several sources
- ``tree``: structural diff of whole document trees
"""

from __future__ import annotations

from .accumulator import (
    ConflictOrigin,
    ConflictSource,
    FieldAccumulator,
    FieldConflict,
    FieldConflictError,
    ProposedValue,
    TextPosition,
    TextRange,
)
from .entities import DiffQueryResult, diff_entities, diff_query_results
from .errors import (
    MissingIdentifierError,
    ReconciliationPreconditionError,
    UnexpandedRelationError,
)
from .query import (
    QueryParams,
    extract_fieldset_from_query,
    get_type_from_filters,
    parse_filters_from_string,
)
from .tree import (
    NodeMatch,
    NodeMatches,
    diff_node_lists,
    diff_node_trees,
    match_nodes,
    node_similarity,
)

__all__ = [
    "ConflictOrigin",
    "ConflictSource",
    "DiffQueryResult",
    "FieldAccumulator",
    "FieldConflict",
    "FieldConflictError",
    "MissingIdentifierError",
    "NodeMatch",
    "NodeMatches",
    "ProposedValue",
    "QueryParams",
    "ReconciliationPreconditionError",
    "TextPosition",
    "TextRange",
    "UnexpandedRelationError",
    "diff_entities",
    "diff_node_lists",
    "diff_node_trees",
    "diff_query_results",
    "extract_fieldset_from_query",
    "get_type_from_filters",
    "match_nodes",
    "node_similarity",
    "parse_filters_from_string",
]
