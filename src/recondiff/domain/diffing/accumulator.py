"""Three-way merge of field values proposed by several sources.

One file may state the same field more than once (frontmatter and body, or a
duplicated block). Each proposal is compared with the ``base`` snapshot:
values equal to base are not edits, identical edits from different sources are
the same edit, and two different edits of one field are a conflict.
"""

from __future__ import annotations

import copy
from dataclasses import dataclass, field
from enum import StrEnum
from typing import TYPE_CHECKING

from recondiff.domain.model import UNSET, get_nested_value, set_nested_value, values_equal

if TYPE_CHECKING:
    from collections.abc import Mapping, Sequence

    from recondiff.domain.model import FieldPath, FieldsetNested, FieldValue


class ConflictOrigin(StrEnum):
    FRONTMATTER = "frontmatter"
    BODY = "body"
    BODY_DUPLICATE = "body:duplicate"


@dataclass(frozen=True, slots=True)
class TextPosition:
    line: int
    character: int


@dataclass(frozen=True, slots=True)
class TextRange:
    start: TextPosition
    end: TextPosition


@dataclass(frozen=True, slots=True, kw_only=True)
class ConflictSource:
    """Where a proposed value came from."""

    file: str | None = None
    range: TextRange | None = None
    origin: ConflictOrigin | None = None


@dataclass(frozen=True, slots=True)
class ProposedValue:
    value: FieldValue
    source: ConflictSource | None = None


@dataclass(frozen=True, slots=True, kw_only=True)
class FieldConflict:
    field_path: FieldPath
    values: tuple[ProposedValue, ...]
    base_value: FieldValue = None

    @property
    def field_key(self) -> str:
        return ".".join(self.field_path)


class FieldConflictError(ValueError):
    """Raised when sources disagree on the new value of one field."""

    def __init__(self, conflict: FieldConflict) -> None:
        self.conflict = conflict
        super().__init__(f"Conflicting values for field '{conflict.field_key}'")


@dataclass(slots=True)
class FieldAccumulator:
    """Collect field edits against ``base`` and detect conflicting ones."""

    base: Mapping[str, FieldValue]
    _stored: dict[FieldPath, ProposedValue] = field(default_factory=dict, init=False)
    _conflicts: list[FieldConflict] = field(default_factory=list, init=False)

    @property
    def conflicts(self) -> tuple[FieldConflict, ...]:
        return tuple(self._conflicts)

    def set(
        self,
        field_path: Sequence[str],
        value: FieldValue,
        source: ConflictSource | None = None,
    ) -> None:
        path = tuple(field_path)
        base_value = get_nested_value(self.base, path)
        if base_value is not UNSET and values_equal(value, base_value):
            return

        existing = self._stored.get(path)
        if existing is None:
            self._stored[path] = ProposedValue(value, source)
            return
        if values_equal(existing.value, value):
            return

        self._conflicts.append(
            FieldConflict(
                field_path=path,
                values=(existing, ProposedValue(value, source)),
                base_value=None if base_value is UNSET else base_value,
            )
        )

    def result(self) -> FieldsetNested:
        """Return the sparse fieldset of changed fields, or raise the first conflict."""

        if self._conflicts:
            raise FieldConflictError(self._conflicts[0])

        fieldset: FieldsetNested = {}
        # parents first so nested paths merge into them
        for path, proposed in sorted(self._stored.items(), key=lambda item: len(item[0])):
            set_nested_value(fieldset, path, copy.deepcopy(proposed.value))
        return fieldset
