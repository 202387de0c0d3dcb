"""Public interface for the schema document adapter."""

from __future__ import annotations

from .schema import FieldDefPayload, SchemaDocument, SchemaDocumentInput, TypeDefPayload
from .translator import load_entity_schema, parse_entity_schema

__all__ = [
    "FieldDefPayload",
    "SchemaDocument",
    "SchemaDocumentInput",
    "TypeDefPayload",
    "load_entity_schema",
    "parse_entity_schema",
]
