"""Edit instructions emitted by the differs."""

from __future__ import annotations

from enum import StrEnum
from typing import Any, Final, NamedTuple, TypeAlias

REF_FIELD: Final = "$ref"

Changeset: TypeAlias = dict[str, Any]
"""Either an update ``{"$ref": uid, ...changed fields}`` or a creation ``{"type": ..., ...}``."""


class MutationKind(StrEnum):
    INSERT = "insert"
    REMOVE = "remove"


class ListMutation(NamedTuple):
    """Edit to a multi-valued field; equal to the plain pair ``("insert", value)``."""

    kind: MutationKind
    value: Any


def insert(value: Any) -> ListMutation:
    return ListMutation(MutationKind.INSERT, value)


def remove(value: Any) -> ListMutation:
    return ListMutation(MutationKind.REMOVE, value)


def update_changeset(uid: str, changes: dict[str, Any]) -> Changeset:
    return {REF_FIELD: uid, **changes}


def is_update(changeset: Changeset) -> bool:
    return REF_FIELD in changeset
