"""Trick formats: the shape a trick's lead imposes on the followers.

A follower who holds enough cards of the led suit must match the lead's
format as closely as their hand allows.  "As closely as possible" is
made precise by :func:`decomposition`, which lists the lead's shape and
every weaker shape derived from it in order of preference; the first one
the follower's hand can satisfy is the one they must play.

Draw policies
-------------
``NO_PROTECTIONS``
    A longer tuple is broken to satisfy a shorter requirement (a triple
    supplies a pair).
``LONGER_TUPLES_PROTECTED``
    A tuple is only taken from a card held exactly that many times, so a
    triple never has to be broken for a pair.
``NO_FORMAT_BASED_DRAW``
    Shape is ignored; only the number of led-suit cards matters.
"""

from __future__ import annotations

from collections import Counter, deque
from dataclasses import dataclass
from enum import Enum
from typing import Iterable, List, Optional, Sequence

from shengji.cards import Card, EffectiveSuit, Trump, sort_cards
from shengji.errors import RulesError
from shengji.plays import find_plays
from shengji.units import (
    Repeated,
    Tractor,
    TractorRequirements,
    TrickUnit,
    UnitLike,
    multi_description,
    unit_like,
)


class TrickDrawPolicy(str, Enum):
    NO_PROTECTIONS = "NO_PROTECTIONS"
    LONGER_TUPLES_PROTECTED = "LONGER_TUPLES_PROTECTED"
    NO_FORMAT_BASED_DRAW = "NO_FORMAT_BASED_DRAW"


Shape = tuple[UnitLike, ...]

_SINGLE = UnitLike((1,))


@dataclass(frozen=True, slots=True)
class TrickFormat:
    """Effective suit and unit shapes of a trick's lead."""

    suit: EffectiveSuit
    trump: Trump
    units: Shape

    @property
    def size(self) -> int:
        return sum(u.size for u in self.units)

    def description(self) -> str:
        return multi_description(self.units)

    @classmethod
    def from_cards(
        cls,
        trump: Trump,
        requirements: TractorRequirements,
        cards: Sequence[Card],
    ) -> TrickFormat:
        """Format of a lead: its most structured viable grouping."""
        if not cards:
            raise RulesError("A lead needs at least one card")
        suits = {trump.effective_suit(c) for c in cards}
        if len(suits) != 1:
            raise RulesError("A lead must be a single effective suit")
        best = find_plays(trump, requirements, cards, limit=1)[0]
        return cls(suits.pop(), trump, tuple(unit_like(u) for u in best))


# ---------------------------------------------------------------------------
#  Decomposition
# ---------------------------------------------------------------------------


def _canonical(units: Iterable[UnitLike]) -> Shape:
    return tuple(sorted(
        units,
        key=lambda u: (-max(u.adjacent_tuples), -len(u.adjacent_tuples),
                       tuple(-n for n in u.adjacent_tuples)),
    ))


def _preference(shape: Shape) -> tuple:
    multiplicities = sorted((n for u in shape for n in u.adjacent_tuples), reverse=True)
    lengths = sorted((len(u.adjacent_tuples) for u in shape), reverse=True)
    return (
        tuple(-m for m in multiplicities),
        len(shape),
        tuple(-n for n in lengths),
    )


def _reductions(shape: Shape) -> Iterable[Shape]:
    """Every shape one step weaker than *shape*."""
    for i, unit in enumerate(shape):
        rest = list(shape[:i]) + list(shape[i + 1:])
        tuples = unit.adjacent_tuples
        if len(tuples) > 1:
            for k in range(1, len(tuples)):
                yield _canonical(rest + [UnitLike(tuples[:k]), UnitLike(tuples[k:])])
            lowered = tuple(n - 1 for n in tuples)
            singles = [_SINGLE] * len(tuples)
            if min(lowered) >= 2:
                yield _canonical(rest + [UnitLike(lowered)] + singles)
            else:
                yield _canonical(rest + [_SINGLE] * unit.size)
        elif tuples[0] > 1:
            yield _canonical(rest + [UnitLike((tuples[0] - 1,)), _SINGLE])


def decomposition(
    trick_format: TrickFormat,
    draw_policy: TrickDrawPolicy = TrickDrawPolicy.NO_PROTECTIONS,
) -> list[Shape]:
    """The lead's shape, then every weaker shape, most preferred first."""
    if draw_policy == TrickDrawPolicy.NO_FORMAT_BASED_DRAW:
        return [(_SINGLE,) * trick_format.size]

    original = tuple(trick_format.units)
    start = _canonical(original)
    seen = {start}
    queue = deque([start])
    while queue:
        shape = queue.popleft()
        for nxt in _reductions(shape):
            if nxt not in seen:
                seen.add(nxt)
                queue.append(nxt)
    seen.discard(start)
    return [original] + sorted(seen, key=_preference)


# ---------------------------------------------------------------------------
#  Matching cards against a shape
# ---------------------------------------------------------------------------


def _placements(
    trump: Trump,
    order: List[Card],
    remaining: Counter[Card],
    original: Counter[Card],
    unit: UnitLike,
    protected: bool,
) -> Iterable[TrickUnit]:
    """Every way to take *unit* out of *remaining* (not yet removed)."""
    count = unit.count

    def usable(card: Card) -> bool:
        if remaining[card] < count:
            return False
        return not protected or original[card] == count

    if len(unit.adjacent_tuples) == 1:
        for card in order:
            if usable(card):
                yield Repeated(card, count)
        return

    length = len(unit.adjacent_tuples)
    by_rung: dict[tuple[EffectiveSuit, int], list[Card]] = {}
    for card in order:
        key = (trump.effective_suit(card), trump.rank_position(card))
        by_rung.setdefault(key, []).append(card)

    def extend(members: list[Card]) -> Iterable[TrickUnit]:
        if len(members) == length:
            yield Tractor(count, tuple(members))
            return
        last = members[-1]
        key = (trump.effective_suit(last), trump.rank_position(last) + 1)
        for card in by_rung.get(key, []):
            if usable(card):
                members.append(card)
                yield from extend(members)
                members.pop()

    for card in order:
        if usable(card):
            yield from extend([card])


def _unit_key(trump: Trump, unit: TrickUnit) -> tuple:
    if isinstance(unit, Repeated):
        return (unit.count, (trump.sort_key(unit.card),))
    if isinstance(unit, Tractor):
        return (unit.count, tuple(trump.sort_key(m) for m in unit.members))
    raise TypeError(f"Not a trick unit: {unit!r}")


def _grouping_key(trump: Trump, units: Iterable[TrickUnit]) -> tuple:
    return tuple(sorted(_unit_key(trump, u) for u in units))


def check_play(
    trump: Trump,
    available_cards: Iterable[Card],
    requirement: Sequence[UnitLike],
    draw_policy: TrickDrawPolicy = TrickDrawPolicy.NO_PROTECTIONS,
    limit: Optional[int] = None,
) -> list[list[TrickUnit]]:
    """Every distinct way *available_cards* can satisfy *requirement*.

    Non-single units are placed first (largest first); singles are then
    taken from the lowest leftover cards.  An empty list means the
    requirement cannot be met.  With *limit* the search stops after that
    many groupings; ``limit=1`` is an existence test.
    """
    original: Counter[Card] = Counter(available_cards)
    if sum(u.size for u in requirement) > sum(original.values()):
        return []
    order = sort_cards(trump, original)
    protected = draw_policy == TrickDrawPolicy.LONGER_TUPLES_PROTECTED

    structured = sorted(
        (u for u in requirement if u != _SINGLE),
        key=lambda u: (-u.size, -len(u.adjacent_tuples)),
    )
    num_singles = sum(1 for u in requirement if u == _SINGLE)

    remaining = Counter(original)
    placed: list[TrickUnit] = []
    results: list[list[TrickUnit]] = []
    seen: set[tuple] = set()

    # Equal shapes take their cards in non-decreasing key order, so a set
    # of identical units is placed once rather than once per permutation.
    def place(index: int, floor: Optional[tuple]) -> bool:
        if index == len(structured):
            leftovers = [c for c in order for _ in range(remaining[c])]
            grouping = placed + [Repeated(c, 1) for c in leftovers[:num_singles]]
            key = _grouping_key(trump, grouping)
            if key not in seen:
                seen.add(key)
                results.append(grouping)
            return limit is not None and len(results) >= limit
        unit = structured[index]
        for option in list(_placements(trump, order, remaining, original, unit, protected)):
            key = _unit_key(trump, option)
            if floor is not None and key < floor:
                continue
            taken = option.cards()
            remaining.subtract(taken)
            placed.append(option)
            same_next = index + 1 < len(structured) and structured[index + 1] == unit
            done = place(index + 1, key if same_next else None)
            placed.pop()
            remaining.update(taken)
            if done:
                return True
        return False

    place(0, None)
    return results
