"""Plain key/value representation of entities and the helpers operating on it.

A fieldset is a ``dict`` mapping field keys to JSON-like values. A missing key
means the field is undefined; ``None`` is an explicit null. Relation fields
hold either an identifier string or a nested fieldset (or a list of those)
when the relation has been expanded.
"""

from __future__ import annotations

import uuid
from collections.abc import Mapping, Sequence
from enum import Enum
from typing import Any, Final, Literal, TypeAlias, TypeGuard, TypeVar

from .schema import TYPE_FIELD, UID_FIELD

FieldValue: TypeAlias = Any
Fieldset: TypeAlias = dict[str, FieldValue]
FieldsetNested: TypeAlias = dict[str, FieldValue]
FieldPath: TypeAlias = tuple[str, ...]


class _Unset(Enum):
    UNSET = "unset"

    def __repr__(self) -> str:
        return "UNSET"


UNSET: Final = _Unset.UNSET
"""Marker for a field key absent from a fieldset."""

T = TypeVar("T")
MaybeUnset: TypeAlias = T | Literal[_Unset.UNSET]


def is_fieldset(value: object) -> TypeGuard[FieldsetNested]:
    return isinstance(value, Mapping)


def extract_uid(value: FieldValue) -> str | None:
    """Return the identifier of a relation value (plain uid or nested fieldset)."""

    if isinstance(value, str):
        return value
    if is_fieldset(value):
        return get_uid(value)
    return None


def get_uid(entity: Mapping[str, FieldValue]) -> str | None:
    uid = entity.get(UID_FIELD)
    return uid if isinstance(uid, str) else None


def get_type(entity: Mapping[str, FieldValue]) -> str | None:
    entity_type = entity.get(TYPE_FIELD)
    return entity_type if isinstance(entity_type, str) else None


def new_uid() -> str:
    return uuid.uuid4().hex


def values_equal(left: FieldValue, right: FieldValue) -> bool:
    """Deep equality with JSON semantics (``True`` is not ``1``)."""

    if isinstance(left, bool) or isinstance(right, bool):
        return type(left) is type(right) and left == right
    if is_fieldset(left) and is_fieldset(right):
        if left.keys() != right.keys():
            return False
        return all(values_equal(value, right[key]) for key, value in left.items())
    if _is_array(left) and _is_array(right):
        if len(left) != len(right):
            return False
        return all(values_equal(a, b) for a, b in zip(left, right, strict=True))
    if _is_array(left) or _is_array(right) or is_fieldset(left) or is_fieldset(right):
        return False
    return left == right


def contains_value(values: Sequence[FieldValue], candidate: FieldValue) -> bool:
    return any(values_equal(value, candidate) for value in values)


def get_nested_value(
    fieldset: Mapping[str, FieldValue],
    path: Sequence[str],
) -> MaybeUnset[FieldValue]:
    current: FieldValue = fieldset
    for key in path:
        if not is_fieldset(current) or key not in current:
            return UNSET
        current = current[key]
    return current


def set_nested_value(fieldset: FieldsetNested, path: Sequence[str], value: FieldValue) -> None:
    """Assign ``value`` at ``path``, creating (or replacing) intermediate objects."""

    if not path:
        return
    current = fieldset
    for key in path[:-1]:
        child = current.get(key)
        if not isinstance(child, dict):
            child = {}
            current[key] = child
        current = child
    current[path[-1]] = value


def _is_array(value: object) -> TypeGuard[Sequence[FieldValue]]:
    return isinstance(value, list | tuple)
