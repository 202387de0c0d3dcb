"""Translate validated schema documents into the frozen domain schema."""

from __future__ import annotations

import json
from logging import getLogger
from types import MappingProxyType
from typing import TYPE_CHECKING

from recondiff.domain.model import EntitySchema, FieldDef, TypeDef

from .schema import FieldDefPayload, SchemaDocument, TypeDefPayload

if TYPE_CHECKING:
    from pathlib import Path

    from .schema import SchemaDocumentInput

log = getLogger(__name__)


def _ensure_schema_document(document: SchemaDocumentInput) -> SchemaDocument:
    if isinstance(document, SchemaDocument):
        return document
    return SchemaDocument.model_validate(document)


def parse_entity_schema(document: SchemaDocumentInput) -> EntitySchema:
    """Validate ``document`` and build an ``EntitySchema`` from it.

    Raises ``pydantic.ValidationError`` when the document is malformed.
    """

    payload = _ensure_schema_document(document)
    fields = {key: _to_field_def(field) for key, field in payload.fields.items()}
    types = {key: _to_type_def(type_def) for key, type_def in payload.types.items()}

    for type_def in types.values():
        if type_def.extends is not None and type_def.extends not in types:
            log.warning("Type %s extends unknown type %s", type_def.key, type_def.extends)

    log.debug("Parsed schema with %d fields and %d types", len(fields), len(types))
    return EntitySchema(fields=MappingProxyType(fields), types=MappingProxyType(types))


def load_entity_schema(path: Path) -> EntitySchema:
    with path.open(encoding="utf-8") as handle:
        return parse_entity_schema(json.load(handle))


def _to_field_def(payload: FieldDefPayload) -> FieldDef:
    return FieldDef(
        key=payload.key,
        data_type=payload.data_type,
        allow_multiple=payload.allow_multiple,
        unique=payload.unique,
        immutable=payload.immutable,
        options=tuple(payload.options) if payload.options is not None else None,
        range=tuple(payload.range) if payload.range is not None else None,
        plaintext_alphabet=payload.plaintext_alphabet,
        richtext_alphabet=payload.richtext_alphabet,
    )


def _to_type_def(payload: TypeDefPayload) -> TypeDef:
    return TypeDef(key=payload.key, fields=tuple(payload.fields), extends=payload.extends)
