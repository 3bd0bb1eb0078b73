"""Trick units and their shapes.

A play is decomposed into *units*:

  - ``Repeated(card, count)``: ``count`` copies of one card (single, pair,
    triple, ...);
  - ``Tractor(count, members)``: ``count`` copies of each of two or more
    adjacent cards, members listed up the ladder.

``TrickUnit`` is exactly these two classes.  Code that consumes units
dispatches with ``isinstance`` and raises on anything else.

The *shape* of a unit, stripped of its cards, is a :class:`UnitLike`: the
multiplicity of every adjacent group, e.g. ``(2,)`` for a pair or
``(2, 2, 2)`` for a tractor of three pairs.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Iterable, List, Union

from shengji.cards import Card
from shengji.constants import DEFAULT_TRACTOR_MIN_COUNT, DEFAULT_TRACTOR_MIN_LENGTH


@dataclass(frozen=True, slots=True)
class TractorRequirements:
    """What it takes to count as a tractor.

    ``min_count`` is the smallest multiplicity (2 = pairs may form
    tractors, 3 = only triples and up); ``min_length`` is the fewest
    adjacent groups.
    """

    min_count: int = DEFAULT_TRACTOR_MIN_COUNT
    min_length: int = DEFAULT_TRACTOR_MIN_LENGTH

    def __post_init__(self) -> None:
        if self.min_count < 2:
            raise ValueError(f"Tractor min_count must be at least 2, got {self.min_count}")
        if self.min_length < 2:
            raise ValueError(f"Tractor min_length must be at least 2, got {self.min_length}")


# ---------------------------------------------------------------------------
#  Units
# ---------------------------------------------------------------------------


@dataclass(frozen=True, slots=True)
class Repeated:
    card: Card
    count: int

    def __post_init__(self) -> None:
        if self.count < 1:
            raise ValueError(f"Unit count must be positive, got {self.count}")

    @property
    def size(self) -> int:
        return self.count

    def cards(self) -> List[Card]:
        return [self.card] * self.count


@dataclass(frozen=True, slots=True)
class Tractor:
    count: int
    members: tuple[Card, ...]

    def __post_init__(self) -> None:
        if self.count < 1:
            raise ValueError(f"Unit count must be positive, got {self.count}")
        if len(self.members) < 2:
            raise ValueError("A tractor needs at least two members")

    @property
    def size(self) -> int:
        return self.count * len(self.members)

    def cards(self) -> List[Card]:
        return [m for m in self.members for _ in range(self.count)]


TrickUnit = Union[Repeated, Tractor]


def unit_cards(unit: TrickUnit) -> List[Card]:
    if isinstance(unit, (Repeated, Tractor)):
        return unit.cards()
    raise TypeError(f"Not a trick unit: {unit!r}")


def grouping_cards(units: Iterable[TrickUnit]) -> List[Card]:
    """Every card used by a grouping, unit by unit."""
    return [card for unit in units for card in unit_cards(unit)]


# ---------------------------------------------------------------------------
#  Shapes
# ---------------------------------------------------------------------------

_TUPLE_NAMES = {1: "single", 2: "pair", 3: "triple", 4: "quadruple"}

_NUMBER_WORDS = {
    2: "two", 3: "three", 4: "four", 5: "five", 6: "six",
    7: "seven", 8: "eight", 9: "nine", 10: "ten", 11: "eleven", 12: "twelve",
}


def _tuple_name(count: int) -> str:
    return _TUPLE_NAMES.get(count, f"{count}-tuple")


def _number_word(n: int) -> str:
    return _NUMBER_WORDS.get(n, str(n))


def _article(noun: str) -> str:
    if noun[0] in "aeiou" or noun.startswith(("8", "11", "18")):
        return "an"
    return "a"


@dataclass(frozen=True, slots=True)
class UnitLike:
    adjacent_tuples: tuple[int, ...]

    def __post_init__(self) -> None:
        if not self.adjacent_tuples or any(n < 1 for n in self.adjacent_tuples):
            raise ValueError(f"Invalid unit shape: {self.adjacent_tuples!r}")
        # Tractor members all share one multiplicity.
        if len(set(self.adjacent_tuples)) != 1:
            raise ValueError(f"Tractor shape mixes multiplicities: {self.adjacent_tuples!r}")

    @property
    def size(self) -> int:
        return sum(self.adjacent_tuples)

    @property
    def count(self) -> int:
        return self.adjacent_tuples[0]

    def description(self, plural: bool = False) -> str:
        """``'pair'``, ``'tractor of two pairs'``, ``'tractors of ...'``."""
        tuples = self.adjacent_tuples
        if len(tuples) == 1:
            name = _tuple_name(tuples[0])
            return name + "s" if plural else name
        head = "tractors" if plural else "tractor"
        return f"{head} of {_number_word(len(tuples))} {_tuple_name(self.count)}s"


def unit_like(unit: TrickUnit) -> UnitLike:
    if isinstance(unit, Repeated):
        return UnitLike((unit.count,))
    if isinstance(unit, Tractor):
        return UnitLike((unit.count,) * len(unit.members))
    raise TypeError(f"Not a trick unit: {unit!r}")


def multi_description(units: Iterable[Union[UnitLike, TrickUnit]]) -> str:
    """Human description of a list of units or shapes.

    >>> multi_description([UnitLike((2,)), UnitLike((1,)), UnitLike((1,))])
    'a pair and two singles'
    """
    counts: dict[UnitLike, int] = {}
    for unit in units:
        shape = unit if isinstance(unit, UnitLike) else unit_like(unit)
        counts[shape] = counts.get(shape, 0) + 1
    if not counts:
        return "nothing"
    parts = []
    for shape, n in counts.items():
        if n == 1:
            noun = shape.description()
            parts.append(f"{_article(noun)} {noun}")
        else:
            parts.append(f"{_number_word(n)} {shape.description(plural=True)}")
    if len(parts) == 1:
        return parts[0]
    return f"{', '.join(parts[:-1])} and {parts[-1]}"
