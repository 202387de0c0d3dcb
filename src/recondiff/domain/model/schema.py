"""Read-only entity schema consumed by the matching and diffing stages.

The schema is supplied from outside (see ``recondiff.adapters.schema``) and
never mutated after construction, so one instance may be shared freely.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import StrEnum
from typing import TYPE_CHECKING, Final, TypeAlias

if TYPE_CHECKING:
    from collections.abc import Mapping


class DataType(StrEnum):
    BOOLEAN = "boolean"
    DATE = "date"
    DATETIME = "datetime"
    INTEGER = "integer"
    DECIMAL = "decimal"
    PLAINTEXT = "plaintext"
    RICHTEXT = "richtext"
    RELATION = "relation"
    UID = "uid"
    SEQ_ID = "seqId"
    OPTION = "option"
    PERIOD = "period"


class PlaintextAlphabet(StrEnum):
    """Granularity of a plaintext field, from single tokens to paragraphs."""

    TOKEN = "token"
    CODE = "code"
    WORD = "word"
    LINE = "line"
    PARAGRAPH = "paragraph"


class RichtextAlphabet(StrEnum):
    """Granularity of a richtext field, from words to whole documents."""

    WORD = "word"
    LINE = "line"
    BLOCK = "block"
    SECTION = "section"
    DOCUMENT = "document"


FieldKey: TypeAlias = str
EntityType: TypeAlias = str

ID_FIELD: Final = "id"
UID_FIELD: Final = "uid"
TYPE_FIELD: Final = "type"
KEY_FIELD: Final = "key"

IDENTITY_FIELD_KEYS: Final[frozenset[FieldKey]] = frozenset({ID_FIELD, UID_FIELD, TYPE_FIELD})
SYSTEM_FIELD_KEYS: Final[tuple[FieldKey, ...]] = (ID_FIELD, UID_FIELD, KEY_FIELD, TYPE_FIELD)


@dataclass(frozen=True, slots=True, kw_only=True)
class FieldDef:
    key: FieldKey
    data_type: DataType
    allow_multiple: bool = False
    unique: bool = False
    immutable: bool = False
    options: tuple[str, ...] | None = None
    range: tuple[EntityType, ...] | None = None
    plaintext_alphabet: PlaintextAlphabet | None = None
    richtext_alphabet: RichtextAlphabet | None = None

    @property
    def is_relation(self) -> bool:
        return self.data_type is DataType.RELATION

    @property
    def is_multi_relation(self) -> bool:
        return self.is_relation and self.allow_multiple


@dataclass(frozen=True, slots=True, kw_only=True)
class TypeDef:
    key: EntityType
    fields: tuple[FieldKey, ...] = ()
    extends: EntityType | None = None


@dataclass(frozen=True, slots=True)
class EntitySchema:
    fields: Mapping[FieldKey, FieldDef] = field(default_factory=dict)
    types: Mapping[EntityType, TypeDef] = field(default_factory=dict)

    def field_def(self, key: FieldKey) -> FieldDef | None:
        return self.fields.get(key)

    @property
    def type_count(self) -> int:
        return max(len(self.types), 1)


def get_all_fields_for_type(
    entity_type: EntityType,
    schema: EntitySchema,
    *,
    include_system_fields: bool = True,
) -> list[FieldKey]:
    """Return the fields declared by ``entity_type`` and every type it extends."""

    fields: list[FieldKey] = []
    seen_types: set[EntityType] = set()
    current: EntityType | None = entity_type
    while current is not None and current not in seen_types:
        type_def = schema.types.get(current)
        if type_def is None:
            break
        seen_types.add(current)
        fields.extend(type_def.fields)
        current = type_def.extends

    if not seen_types:
        return []
    if include_system_fields:
        return [*SYSTEM_FIELD_KEYS, *fields]
    return fields
