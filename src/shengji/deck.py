"""Deck configuration.

A game is played with a list of decks.  Each deck is a standard 54-card
deck, optionally trimmed: either joker may be removed and the low numbers
below ``min`` may be stripped (short decks).
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Iterable, List

from shengji.cards import ALL_SUITS, BIG_JOKER, SMALL_JOKER, Card
from shengji.constants import MAX_NUMBER, MIN_NUMBER


@dataclass(frozen=True, slots=True)
class Deck:
    exclude_small_joker: bool = False
    exclude_big_joker: bool = False
    min: int = MIN_NUMBER

    def __post_init__(self) -> None:
        if not MIN_NUMBER <= self.min <= MAX_NUMBER:
            raise ValueError(f"Deck minimum out of range: {self.min}")

    def cards(self) -> List[Card]:
        """Every card in the deck, suits first, then the jokers."""
        out = [
            Card(suit, number)
            for suit in ALL_SUITS
            for number in range(self.min, MAX_NUMBER + 1)
        ]
        if not self.exclude_small_joker:
            out.append(SMALL_JOKER)
        if not self.exclude_big_joker:
            out.append(BIG_JOKER)
        return out

    def __len__(self) -> int:
        jokers = (not self.exclude_small_joker) + (not self.exclude_big_joker)
        return len(ALL_SUITS) * (MAX_NUMBER - self.min + 1) + jokers

    def points(self) -> int:
        """Total point value (100 for a full deck)."""
        return sum(c.points() for c in self.cards())


def total_len(decks: Iterable[Deck]) -> int:
    return sum(len(d) for d in decks)


def total_points(decks: Iterable[Deck]) -> int:
    return sum(d.points() for d in decks)
