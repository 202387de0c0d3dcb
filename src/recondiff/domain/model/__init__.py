"""Schema, fieldset and changeset primitives shared by the reconciliation engine."""

from __future__ import annotations

from .changeset import (
    REF_FIELD,
    Changeset,
    ListMutation,
    MutationKind,
    insert,
    is_update,
    remove,
    update_changeset,
)
from .fieldset import (
    UNSET,
    FieldPath,
    Fieldset,
    FieldsetNested,
    FieldValue,
    MaybeUnset,
    contains_value,
    extract_uid,
    get_nested_value,
    get_type,
    get_uid,
    is_fieldset,
    new_uid,
    set_nested_value,
    values_equal,
)
from .schema import (
    ID_FIELD,
    IDENTITY_FIELD_KEYS,
    SYSTEM_FIELD_KEYS,
    TYPE_FIELD,
    UID_FIELD,
    DataType,
    EntitySchema,
    EntityType,
    FieldDef,
    FieldKey,
    PlaintextAlphabet,
    RichtextAlphabet,
    TypeDef,
    get_all_fields_for_type,
)

__all__ = [
    "ID_FIELD",
    "IDENTITY_FIELD_KEYS",
    "REF_FIELD",
    "SYSTEM_FIELD_KEYS",
    "TYPE_FIELD",
    "UID_FIELD",
    "UNSET",
    "Changeset",
    "DataType",
    "EntitySchema",
    "EntityType",
    "FieldDef",
    "FieldKey",
    "FieldPath",
    "FieldValue",
    "Fieldset",
    "FieldsetNested",
    "ListMutation",
    "MaybeUnset",
    "MutationKind",
    "PlaintextAlphabet",
    "RichtextAlphabet",
    "TypeDef",
    "contains_value",
    "extract_uid",
    "get_all_fields_for_type",
    "get_nested_value",
    "get_type",
    "get_uid",
    "insert",
    "is_fieldset",
    "is_update",
    "new_uid",
    "remove",
    "set_nested_value",
    "update_changeset",
    "values_equal",
]
