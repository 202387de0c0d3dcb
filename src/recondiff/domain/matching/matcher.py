"""Match a list of new entities against a list of old entities.

Two phases:
1) exact identity: entities carrying a ``uid`` claim the old entity with the
   same ``uid``
2) ambiguous matching: anonymous entities are scored against every unclaimed
   old entity and the score matrix is resolved by the auction algorithm

Every new index ends up in exactly one of ``matches``/``to_create`` and every
old index in exactly one of ``matches``/``to_remove``.
"""

from __future__ import annotations

from logging import getLogger
from typing import TYPE_CHECKING

from recondiff.domain.model import get_uid

from .assignment import auction_match
from .contracts import MatchPair, MatchResult
from .scorer import compute_match_score

if TYPE_CHECKING:
    from collections.abc import Mapping, Sequence

    from recondiff.domain.model import FieldValue

    from .contracts import MatcherConfig

log = getLogger(__name__)


def match_entities(
    config: MatcherConfig,
    new_entities: Sequence[Mapping[str, FieldValue]],
    old_entities: Sequence[Mapping[str, FieldValue]],
) -> MatchResult:
    matches: list[MatchPair] = []
    to_create: list[int] = []

    old_index_by_uid: dict[str, int] = {}
    for old_index, old_entity in enumerate(old_entities):
        uid = get_uid(old_entity)
        if uid is not None:
            old_index_by_uid.setdefault(uid, old_index)

    claimed_old: set[int] = set()
    anonymous_new: list[int] = []
    for new_index, new_entity in enumerate(new_entities):
        uid = get_uid(new_entity)
        if uid is None:
            anonymous_new.append(new_index)
            continue
        old_index = old_index_by_uid.get(uid)
        if old_index is None or old_index in claimed_old:
            to_create.append(new_index)
            continue
        matches.append(MatchPair(new_index, old_index))
        claimed_old.add(old_index)

    unclaimed_old = [index for index in range(len(old_entities)) if index not in claimed_old]

    if not anonymous_new or not unclaimed_old:
        return _result(matches, [*to_create, *anonymous_new], unclaimed_old)

    scorer_config = config.for_list(max(len(new_entities), len(old_entities)))
    scores = [
        [
            compute_match_score(
                scorer_config,
                new_entities[new_index],
                old_entities[old_index],
                new_index,
                old_index,
            )
            for old_index in unclaimed_old
        ]
        for new_index in anonymous_new
    ]
    assignment = auction_match(scores)

    for bidder, item in assignment.assignment.items():
        matches.append(MatchPair(anonymous_new[bidder], unclaimed_old[item]))
    to_create.extend(anonymous_new[bidder] for bidder in assignment.unassigned_bidders)
    to_remove = [unclaimed_old[item] for item in assignment.unassigned_items]

    log.debug(
        "Scored %d anonymous against %d unclaimed entities: matched=%d, create=%d, remove=%d",
        len(anonymous_new),
        len(unclaimed_old),
        len(assignment.assignment),
        len(assignment.unassigned_bidders),
        len(to_remove),
    )
    return _result(matches, to_create, to_remove)


def _result(matches: list[MatchPair], to_create: list[int], to_remove: list[int]) -> MatchResult:
    return MatchResult(
        matches=tuple(sorted(matches, key=lambda pair: pair.new_index)),
        to_create=tuple(sorted(to_create)),
        to_remove=tuple(sorted(to_remove)),
    )
