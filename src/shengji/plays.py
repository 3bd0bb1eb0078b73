"""Viable-play finder.

Given a set of cards, enumerate every way to group them into trick units.
Cards are first split by effective suit; within a suit the search works on
a multiplicity table (``card -> copies``) and a precomputed list of
candidate tractors, and every partial choice of tractors is emitted as a
grouping with the leftover copies of each card as one ``Repeated`` unit.

The enumeration deliberately over-generates: the same cards are offered
as a long tractor, as shorter tractors, and as plain tuples.  Callers
choose among them (the most structured grouping comes first).
"""

from __future__ import annotations

import heapq
from collections import Counter
from dataclasses import dataclass
from typing import Iterable, List, Optional

from shengji.cards import Card, Trump, group_by_suit, sort_cards
from shengji.constants import MAX_VIABLE_PLAYS
from shengji.units import (
    Repeated,
    Tractor,
    TractorRequirements,
    TrickUnit,
    multi_description,
)


@dataclass(frozen=True, slots=True)
class ViablePlay:
    grouping: tuple[TrickUnit, ...]
    description: str


# ---------------------------------------------------------------------------
#  Per-suit search
# ---------------------------------------------------------------------------


def _tractor_candidates(
    trump: Trump,
    requirements: TractorRequirements,
    order: List[Card],
    counts: Counter[Card],
) -> list[tuple[tuple[Card, ...], int]]:
    """Every (members, count) tractor the table could supply on its own."""
    by_rung: dict[int, list[Card]] = {}
    for card in order:
        by_rung.setdefault(trump.rank_position(card), []).append(card)

    out: list[tuple[tuple[Card, ...], int]] = []

    def extend(members: list[Card]) -> None:
        if len(members) >= requirements.min_length:
            top = min(counts[m] for m in members)
            for count in range(requirements.min_count, top + 1):
                out.append((tuple(members), count))
        for card in by_rung.get(trump.rank_position(members[-1]) + 1, []):
            if counts[card] >= requirements.min_count:
                members.append(card)
                extend(members)
                members.pop()

    for card in order:
        if counts[card] >= requirements.min_count:
            extend([card])
    return out


def _suit_groupings(
    trump: Trump,
    requirements: TractorRequirements,
    cards: Iterable[Card],
) -> list[list[TrickUnit]]:
    counts: Counter[Card] = Counter(cards)
    order = sort_cards(trump, counts)
    candidates = _tractor_candidates(trump, requirements, order, counts)

    remaining = dict(counts)
    chosen: list[TrickUnit] = []
    results: list[list[TrickUnit]] = []

    # Candidate indices are chosen in non-decreasing order so each multiset
    # of tractors is visited exactly once.
    def visit(start: int) -> None:
        leftovers = [Repeated(c, remaining[c]) for c in order if remaining[c]]
        results.append(chosen + leftovers)
        for i in range(start, len(candidates)):
            members, count = candidates[i]
            if all(remaining[m] >= count for m in members):
                for m in members:
                    remaining[m] -= count
                chosen.append(Tractor(count, members))
                visit(i)
                chosen.pop()
                for m in members:
                    remaining[m] += count

    visit(0)
    return results


# ---------------------------------------------------------------------------
#  Public API
# ---------------------------------------------------------------------------


def _merge_suits(
    per_suit: list[list[list[TrickUnit]]],
    limit: Optional[int],
) -> list[list[TrickUnit]]:
    """Combine one grouping per suit, fewest units first.

    Each suit's list is sorted by length, so stepping one suit forward never
    shrinks the total; a heap over index tuples then yields combinations in
    order without building the whole product.
    """
    per_suit = [sorted(groupings, key=len) for groupings in per_suit]

    def total(index: tuple[int, ...]) -> int:
        return sum(len(per_suit[s][i]) for s, i in enumerate(index))

    start = (0,) * len(per_suit)
    heap = [(total(start), start)]
    seen = {start}
    out: list[list[TrickUnit]] = []
    while heap and (limit is None or len(out) < limit):
        _, index = heapq.heappop(heap)
        out.append([unit for s, i in enumerate(index) for unit in per_suit[s][i]])
        for s in range(len(index)):
            if index[s] + 1 < len(per_suit[s]):
                nxt = index[:s] + (index[s] + 1,) + index[s + 1:]
                if nxt not in seen:
                    seen.add(nxt)
                    heapq.heappush(heap, (total(nxt), nxt))
    return out


def find_plays(
    trump: Trump,
    requirements: TractorRequirements,
    cards: Iterable[Card],
    limit: Optional[int] = MAX_VIABLE_PLAYS,
) -> list[list[TrickUnit]]:
    """Every grouping of *cards* into units, fewest units first.

    Each grouping uses every card exactly once.  No cards, no groupings.
    At most *limit* groupings are returned (``None`` for all of them).
    """
    groups = group_by_suit(trump, cards)
    if not groups:
        return []
    per_suit = [_suit_groupings(trump, requirements, g.cards) for g in groups]
    return _merge_suits(per_suit, limit)


def find_viable_plays(
    trump: Trump,
    requirements: TractorRequirements,
    cards: Iterable[Card],
) -> list[ViablePlay]:
    return [
        ViablePlay(tuple(grouping), multi_description(grouping))
        for grouping in find_plays(trump, requirements, cards)
    ]
