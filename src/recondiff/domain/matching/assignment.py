"""Auction algorithm for the rectangular assignment problem.

Bidders (new entities) compete for items (old entities). Every bidder also has
an implicit "no match" option worth ``threshold``, so a bidder whose best net
value (score minus current price) does not exceed it drops out instead of
accepting a poor pairing. With a positive ``epsilon`` the result is within
``bidders * epsilon`` of the optimal total score.

Bidding alone does not settle ties: a later bidder may outbid an earlier one
at equal score. A final pass therefore moves every equal-score pairing towards
the lowest bidder index and then the lowest item index, so the same matrix
always yields the same assignment.
"""

from __future__ import annotations

import math
from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Final

if TYPE_CHECKING:
    from collections.abc import Sequence

DEFAULT_EPSILON: Final = 0.01
DEFAULT_THRESHOLD: Final = 0.0


@dataclass(frozen=True, slots=True, kw_only=True)
class AssignmentResult:
    assignment: dict[int, int] = field(default_factory=dict)
    unassigned_bidders: tuple[int, ...] = ()
    unassigned_items: tuple[int, ...] = ()


@dataclass(frozen=True, slots=True)
class _Bid:
    item: int
    value: float
    runner_up_value: float


def auction_match(
    scores: Sequence[Sequence[float]],
    *,
    epsilon: float = DEFAULT_EPSILON,
    threshold: float = DEFAULT_THRESHOLD,
) -> AssignmentResult:
    """Assign bidders (rows) to items (columns) maximising the total score."""

    if epsilon <= 0:
        raise ValueError("Auction epsilon must be positive")

    bidder_count = len(scores)
    item_count = len(scores[0]) if bidder_count else 0
    if any(len(row) != item_count for row in scores):
        raise ValueError("Score matrix rows must all have the same length")

    if bidder_count == 0 or item_count == 0:
        return AssignmentResult(
            unassigned_bidders=tuple(range(bidder_count)),
            unassigned_items=tuple(range(item_count)),
        )

    prices = [0.0] * item_count
    item_by_bidder: dict[int, int] = {}
    bidder_by_item: dict[int, int] = {}
    dropped: set[int] = set()

    pending = list(range(bidder_count))
    while pending:
        for bidder in pending:
            bid = _best_bid(scores[bidder], prices, threshold)
            if bid is None:
                dropped.add(bidder)
                continue

            previous_owner = bidder_by_item.get(bid.item)
            if previous_owner is not None:
                del item_by_bidder[previous_owner]

            item_by_bidder[bidder] = bid.item
            bidder_by_item[bid.item] = bidder
            prices[bid.item] += bid.value - bid.runner_up_value + epsilon

        pending = [
            bidder
            for bidder in range(bidder_count)
            if bidder not in item_by_bidder and bidder not in dropped
        ]

    while _settle_tie(scores, item_by_bidder, threshold):
        pass

    assigned_items = set(item_by_bidder.values())
    return AssignmentResult(
        assignment={bidder: item_by_bidder[bidder] for bidder in sorted(item_by_bidder)},
        unassigned_bidders=tuple(
            bidder for bidder in range(bidder_count) if bidder not in item_by_bidder
        ),
        unassigned_items=tuple(item for item in range(item_count) if item not in assigned_items),
    )


def _best_bid(row: Sequence[float], prices: Sequence[float], threshold: float) -> _Bid | None:
    best_item = -1
    best_value = float("-inf")
    runner_up_value = float("-inf")

    for item, score in enumerate(row):
        value = score - prices[item]
        if value > best_value:
            runner_up_value = best_value
            best_value = value
            best_item = item
        elif value > runner_up_value:
            runner_up_value = value

    if best_item == -1 or best_value <= threshold:
        return None
    # the "no match" option competes like any other item
    return _Bid(item=best_item, value=best_value, runner_up_value=max(runner_up_value, threshold))


def _settle_tie(
    scores: Sequence[Sequence[float]],
    item_by_bidder: dict[int, int],
    threshold: float,
) -> bool:
    """Apply one equal-score move towards lower indices; return whether one was found.

    Each move makes the assignment lexicographically smaller (first by assigned
    bidders, then by their items), so repeating it terminates.
    """

    owner_by_item = {item: bidder for bidder, item in item_by_bidder.items()}
    for bidder, row in enumerate(scores):
        item = item_by_bidder.get(bidder)
        if item is None:
            # take over the item of a later bidder who scores it the same
            for later in range(bidder + 1, len(scores)):
                taken = item_by_bidder.get(later)
                if taken is not None and math.isclose(row[taken], scores[later][taken]):
                    del item_by_bidder[later]
                    item_by_bidder[bidder] = taken
                    return True
            continue

        for lower in range(item):
            other = owner_by_item.get(lower)
            if other is None:
                if math.isclose(row[lower], row[item]):
                    item_by_bidder[bidder] = lower
                    return True
            elif (
                other > bidder
                and row[lower] > threshold
                and scores[other][item] > threshold
                and math.isclose(row[lower] + scores[other][item], row[item] + scores[other][lower])
            ):
                item_by_bidder[bidder], item_by_bidder[other] = lower, item
                return True
    return False
