"""Query context shared by every entity a query returns.

A query such as ``type=Task AND status=pending`` implies field values for all
of its results. The differs use that fieldset to hydrate new entities and to
ignore fields that cannot discriminate between candidates.
"""

from __future__ import annotations

import re
from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Any, TypeAlias

from recondiff.domain.model import TYPE_FIELD, is_fieldset

if TYPE_CHECKING:
    from collections.abc import Mapping

    from recondiff.domain.model import EntityType, Fieldset

Filter: TypeAlias = Any
"""A literal value, a list of values, or an operator mapping ``{"op": ..., "value": ...}``."""

_CONDITION_SEPARATOR = re.compile(r"\s+AND\s+|,")


@dataclass(frozen=True, slots=True)
class QueryParams:
    filters: Mapping[str, Filter] = field(default_factory=dict)

    @classmethod
    def from_string(cls, query: str) -> QueryParams:
        return cls(filters=parse_filters_from_string(query) or {})

    @classmethod
    def coerce(cls, value: object) -> QueryParams | None:
        """Accept a query string, a ``{"filters": {...}}`` mapping or ``QueryParams``."""

        if isinstance(value, QueryParams):
            return value
        if isinstance(value, str):
            return cls.from_string(value)
        if is_fieldset(value):
            filters = value.get("filters")
            return cls(filters=dict(filters)) if is_fieldset(filters) else cls()
        return None


def parse_filters_from_string(query: str) -> dict[str, Filter] | None:
    filters: dict[str, Filter] = {}
    for condition in _CONDITION_SEPARATOR.split(query):
        name, separator, value = condition.strip().partition("=")
        if not separator:
            continue
        name, value = name.strip(), value.strip()
        if name and value:
            filters[name] = value
    return filters or None


def extract_fieldset_from_query(params: QueryParams) -> Fieldset:
    """Field values every result of ``params`` must carry (equality filters only)."""

    fieldset: Fieldset = {}
    for name, query_filter in params.filters.items():
        if isinstance(query_filter, str | int | float | bool | list):
            fieldset[name] = query_filter
        elif is_fieldset(query_filter) and query_filter.get("op") == "eq":
            fieldset[name] = query_filter.get("value")
    return fieldset


def get_type_from_filters(filters: Mapping[str, Filter]) -> EntityType | None:
    type_filter = filters.get(TYPE_FIELD)
    if not type_filter:
        return None
    if isinstance(type_filter, str):
        return type_filter
    if is_fieldset(type_filter) and "value" in type_filter:
        return str(type_filter["value"])
    return None
