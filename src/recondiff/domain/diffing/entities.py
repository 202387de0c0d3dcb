"""Recursive entity diffing.

``diff_entities`` compares an edited snapshot of an entity with its stored
state and emits the changesets that bring the store in line:

- scalar fields: the new literal value (absence never deletes, ``None`` does)
- multi-valued fields: ``insert``/``remove`` list mutations
- expanded relations: recursion into the related entities, matching owned
  children with ``match_entities`` and creating the ones that are new

All field changes of one entity collapse into a single ``{"$ref": uid, ...}``
changeset that precedes the changesets of its descendants.
"""

from __future__ import annotations

from collections.abc import Callable
from dataclasses import dataclass, field, replace
from logging import getLogger
from typing import TYPE_CHECKING, TypeAlias

from recondiff.domain.matching import (
    DEFAULT_THRESHOLDS,
    MatcherConfig,
    classify_fields,
    match_entities,
)
from recondiff.domain.model import (
    IDENTITY_FIELD_KEYS,
    TYPE_FIELD,
    UID_FIELD,
    UNSET,
    contains_value,
    get_type,
    get_uid,
    insert,
    is_fieldset,
    new_uid,
    remove,
    update_changeset,
    values_equal,
)

from .errors import MissingIdentifierError, UnexpandedRelationError
from .query import QueryParams, extract_fieldset_from_query

if TYPE_CHECKING:
    from collections.abc import Mapping, Sequence

    from recondiff.domain.matching import FieldClassifications, SimilarityThresholds
    from recondiff.domain.model import (
        Changeset,
        EntitySchema,
        FieldDef,
        FieldsetNested,
        FieldValue,
        ListMutation,
        MaybeUnset,
    )

log = getLogger(__name__)

UidFactory: TypeAlias = Callable[[], str]


@dataclass(slots=True, kw_only=True)
class DiffQueryResult:
    to_create: list[Changeset] = field(default_factory=list)
    to_update: list[Changeset] = field(default_factory=list)


@dataclass(slots=True)
class _FieldDiff:
    changesets: list[Changeset] = field(default_factory=list)
    change: MaybeUnset[FieldValue] = UNSET


def diff_entities(
    schema: EntitySchema,
    new_entity: Mapping[str, FieldValue],
    old_entity: Mapping[str, FieldValue],
    *,
    classifications: FieldClassifications | None = None,
    thresholds: SimilarityThresholds | None = None,
    uid_factory: UidFactory = new_uid,
) -> list[Changeset]:
    """Return the changesets turning ``old_entity`` into ``new_entity``.

    ``old_entity`` must carry a ``uid``. ``classifications`` may be passed to
    reuse a map built once for ``schema``.
    """

    differ = _EntityDiffer(
        config=_matcher_config(schema, classifications, thresholds),
        uid_factory=uid_factory,
    )
    return differ.diff(new_entity, old_entity)


def diff_query_results(
    schema: EntitySchema,
    new_entities: Sequence[Mapping[str, FieldValue]],
    old_entities: Sequence[Mapping[str, FieldValue]],
    query: QueryParams | None = None,
    *,
    classifications: FieldClassifications | None = None,
    thresholds: SimilarityThresholds | None = None,
    uid_factory: UidFactory = new_uid,
) -> DiffQueryResult:
    """Diff the edited result list of a query against the stored results.

    Fields fixed by the query are shared by every candidate, so they are left
    out of the similarity comparison and used as defaults for new entities.
    """

    query_context = extract_fieldset_from_query(query or QueryParams())
    config = _matcher_config(
        schema,
        classifications,
        thresholds,
        exclude_fields=frozenset(query_context),
    )
    match_result = match_entities(config, new_entities, old_entities)

    result = DiffQueryResult()
    for new_index in match_result.to_create:
        hydrated = _creation_fields(schema, {**query_context, **new_entities[new_index]})
        if hydrated is None:
            log.warning("Skipping new query result without a type at index %d", new_index)
            continue
        result.to_create.append(hydrated)

    # children of a result do not share the query context
    nested_config = replace(config, exclude_fields=frozenset())
    differ = _EntityDiffer(config=nested_config, uid_factory=uid_factory)
    for pair in match_result.matches:
        result.to_update.extend(
            differ.diff(new_entities[pair.new_index], old_entities[pair.old_index])
        )

    log.debug(
        "Query diff: matched=%d, create=%d, updates=%d",
        len(match_result.matches),
        len(result.to_create),
        len(result.to_update),
    )
    return result


def _matcher_config(
    schema: EntitySchema,
    classifications: FieldClassifications | None,
    thresholds: SimilarityThresholds | None,
    *,
    exclude_fields: frozenset[str] = frozenset(),
) -> MatcherConfig:
    return MatcherConfig(
        schema=schema,
        classifications=classifications if classifications is not None else classify_fields(schema),
        exclude_fields=exclude_fields,
        thresholds=thresholds or DEFAULT_THRESHOLDS,
    )


@dataclass(frozen=True, slots=True, kw_only=True)
class _EntityDiffer:
    config: MatcherConfig
    uid_factory: UidFactory

    @property
    def schema(self) -> EntitySchema:
        return self.config.schema

    def diff(
        self,
        new_entity: Mapping[str, FieldValue],
        old_entity: Mapping[str, FieldValue],
    ) -> list[Changeset]:
        uid = get_uid(old_entity)
        if uid is None:
            raise MissingIdentifierError(context="diff target")

        changesets: list[Changeset] = []
        field_changes: dict[str, FieldValue] = {}
        for key in _collect_field_keys(new_entity, old_entity):
            if key in IDENTITY_FIELD_KEYS:
                continue
            result = self._diff_field(key, new_entity.get(key, UNSET), old_entity.get(key, UNSET))
            if result is None:
                continue
            changesets.extend(result.changesets)
            if result.change is not UNSET:
                field_changes[key] = result.change

        if field_changes:
            changesets.insert(0, update_changeset(uid, field_changes))
        return changesets

    def _diff_field(
        self,
        key: str,
        new_value: MaybeUnset[FieldValue],
        old_value: MaybeUnset[FieldValue],
    ) -> _FieldDiff | None:
        field_def = self.schema.field_def(key)

        if field_def is not None and field_def.is_multi_relation:
            return self._diff_owned_children(new_value, old_value)

        if field_def is not None and field_def.is_relation and is_fieldset(new_value):
            if not is_fieldset(old_value):
                raise UnexpandedRelationError(
                    field_key=key, old_value=None if old_value is UNSET else old_value
                )
            return _FieldDiff(changesets=self._diff_single_relation(new_value, old_value))

        if new_value is UNSET:
            return None
        if new_value is None and (old_value is None or old_value is UNSET):
            return None

        if field_def is not None and field_def.allow_multiple:
            mutations = _diff_multiple_values(new_value, old_value)
            return _FieldDiff(change=mutations) if mutations else None

        if old_value is UNSET or not values_equal(new_value, old_value):
            return _FieldDiff(change=new_value)
        return None

    def _diff_owned_children(
        self,
        new_value: MaybeUnset[FieldValue],
        old_value: MaybeUnset[FieldValue],
    ) -> _FieldDiff | None:
        if new_value is UNSET:
            return None
        new_children = _extract_owned_children(new_value)
        old_children = _extract_owned_children(old_value)
        if not new_children and not old_children:
            # unexpanded on both sides: plain identifier lists
            mutations = _diff_multiple_values(new_value, old_value)
            return _FieldDiff(change=mutations) if mutations else None

        match_result = match_entities(self.config, new_children, old_children)
        changesets: list[Changeset] = []
        mutations: list[ListMutation] = []

        for new_index in match_result.to_create:
            generated_uid = self.uid_factory()
            creation = _creation_fields(self.schema, new_children[new_index], uid=generated_uid)
            if creation is not None:
                changesets.append(creation)
            mutations.append(insert(generated_uid))

        for old_index in match_result.to_remove:
            old_uid = get_uid(old_children[old_index])
            if old_uid is None:
                raise MissingIdentifierError(context=f"removed child at index {old_index}")
            mutations.append(remove(old_uid))

        for pair in match_result.matches:
            changesets.extend(self.diff(new_children[pair.new_index], old_children[pair.old_index]))

        return _FieldDiff(changesets=changesets, change=mutations if mutations else UNSET)

    def _diff_single_relation(
        self,
        new_value: FieldsetNested,
        old_value: FieldsetNested,
    ) -> list[Changeset]:
        old_uid = get_uid(old_value)
        new_uid = get_uid(new_value)
        if old_uid is None:
            return []
        # pointing at another entity is not an edit of the related entity
        if new_uid is not None and new_uid != old_uid:
            return []

        # text extraction usually drops the uid of the related entity
        new_with_uid = new_value if new_uid is not None else {**new_value, UID_FIELD: old_uid}
        return self.diff(new_with_uid, old_value)


def _creation_fields(
    schema: EntitySchema,
    entity: Mapping[str, FieldValue],
    *,
    uid: str | None = None,
) -> Changeset | None:
    entity_type = get_type(entity)
    if entity_type is None:
        return None

    creation: Changeset = {TYPE_FIELD: entity_type}
    if uid is not None:
        creation[UID_FIELD] = uid
    for key, value in entity.items():
        if key in IDENTITY_FIELD_KEYS or _is_multi_relation(schema.field_def(key)):
            continue
        creation[key] = value
    return creation


def _is_multi_relation(field_def: FieldDef | None) -> bool:
    return field_def is not None and field_def.is_multi_relation


def _extract_owned_children(value: MaybeUnset[FieldValue]) -> list[FieldsetNested]:
    if not isinstance(value, list | tuple):
        return []
    return [item for item in value if is_fieldset(item)]


def _diff_multiple_values(
    new_value: FieldValue,
    old_value: MaybeUnset[FieldValue],
) -> list[ListMutation]:
    new_items = new_value if isinstance(new_value, list | tuple) else []
    old_items = old_value if isinstance(old_value, list | tuple) else []

    removals = [remove(item) for item in old_items if not contains_value(new_items, item)]
    insertions = [insert(item) for item in new_items if not contains_value(old_items, item)]
    return [*removals, *insertions]


def _collect_field_keys(
    new_entity: Mapping[str, FieldValue],
    old_entity: Mapping[str, FieldValue],
) -> list[str]:
    keys = dict.fromkeys(new_entity)
    keys.update(dict.fromkeys(old_entity))
    return list(keys)
