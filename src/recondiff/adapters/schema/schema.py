"""Pydantic models describing schema documents supplied by the store."""

from __future__ import annotations

from collections.abc import Mapping
from typing import Any, TypeAlias, cast

from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator

from recondiff.domain.model import DataType, PlaintextAlphabet, RichtextAlphabet


class SchemaBaseModel(BaseModel):
    model_config = ConfigDict(extra="ignore", populate_by_name=True)


def _option_key(value: object) -> object:
    if isinstance(value, Mapping):
        return cast(Mapping[str, object], value).get("key")
    return value


class FieldDefPayload(SchemaBaseModel):
    key: str
    data_type: DataType = Field(alias="dataType")
    allow_multiple: bool = Field(default=False, alias="allowMultiple")
    unique: bool = False
    immutable: bool = False
    options: list[str] | None = None
    range: list[str] | None = None
    plaintext_alphabet: PlaintextAlphabet | None = Field(default=None, alias="plaintextAlphabet")
    richtext_alphabet: RichtextAlphabet | None = Field(default=None, alias="richtextAlphabet")

    @field_validator("options", mode="before")
    @classmethod
    def _normalize_options(cls, value: object) -> object:
        # options are either plain keys or {"key": ..., "name": ...} records
        if isinstance(value, list):
            return [_option_key(option) for option in cast(list[object], value)]
        return value


class TypeDefPayload(SchemaBaseModel):
    key: str
    fields: list[str] = Field(default_factory=list)
    extends: str | None = None

    @field_validator("fields", mode="before")
    @classmethod
    def _normalize_fields(cls, value: object) -> object:
        # a field may be listed with attributes as [key, {...}]
        if isinstance(value, list):
            return [
                item[0] if isinstance(item, list | tuple) and item else item
                for item in cast(list[object], value)
            ]
        return value


class SchemaDocument(SchemaBaseModel):
    fields: dict[str, FieldDefPayload] = Field(default_factory=dict)
    types: dict[str, TypeDefPayload] = Field(default_factory=dict)

    @model_validator(mode="before")
    @classmethod
    def _index_lists_by_key(cls, value: object) -> object:
        """Accept ``fields``/``types`` as lists of definitions as well as keyed maps."""

        if not isinstance(value, Mapping):
            return value
        data: dict[str, Any] = dict(cast(Mapping[str, Any], value))
        for section in ("fields", "types"):
            entries = data.get(section)
            if isinstance(entries, list):
                data[section] = {
                    entry["key"]: entry
                    for entry in cast(list[Any], entries)
                    if isinstance(entry, Mapping) and "key" in entry
                }
            elif isinstance(entries, Mapping):
                data[section] = {
                    key: {"key": key, **entry} if isinstance(entry, Mapping) else entry
                    for key, entry in cast(Mapping[str, Any], entries).items()
                }
        return data


SchemaDocumentInput: TypeAlias = SchemaDocument | Mapping[str, Any]
