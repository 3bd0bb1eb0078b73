"""Card and trump model for Shengji / Tractor.

A game is played with one or more standard 54-card decks:
  - four suits of 2 .. A (numbers 2 .. 14, with 11 .. 14 = J, Q, K, A)
  - a small and a big joker per deck

Cards carry no intrinsic order.  Everything order-related (which suit a
card belongs to, which cards are adjacent for tractors, how a hand sorts)
is defined relative to a :class:`Trump`:

  - jokers are always trump;
  - every card of the trump number is trump, whatever its suit;
  - every card of the trump suit is trump.

Inside the trump "suit" the ladder runs (low to high): trump-suit cards
by number, every off-suit trump-number card (all on the same rung), the
trump-suit trump-number card, the small joker, the big joker.  In every
suit the trump number is skipped, so with trump number 5 the 4 and 6 of
a plain suit are adjacent.

Text notation: rank then suit letter (``"3S"``, ``"10H"``, ``"QD"``),
``"LJ"`` for the small joker and ``"BJ"`` for the big joker.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Iterable, List, Optional, Union

from shengji.constants import MAX_NUMBER, MIN_NUMBER, POINT_VALUES


# ---------------------------------------------------------------------------
#  Suits
# ---------------------------------------------------------------------------


class Suit(str, Enum):
    CLUBS = "CLUBS"
    DIAMONDS = "DIAMONDS"
    SPADES = "SPADES"
    HEARTS = "HEARTS"


ALL_SUITS: tuple[Suit, ...] = tuple(Suit)

# Tie-break order between suits (also used when comparing bids).
SUIT_ORDER: dict[Suit, int] = {s: i for i, s in enumerate(ALL_SUITS)}


class Joker(str, Enum):
    SMALL = "SMALL"
    BIG = "BIG"


class EffectiveSuit(str, Enum):
    """The suit a card counts as once trump is applied."""

    CLUBS = "CLUBS"
    DIAMONDS = "DIAMONDS"
    SPADES = "SPADES"
    HEARTS = "HEARTS"
    TRUMP = "TRUMP"


EFFECTIVE_SUIT_ORDER: dict[EffectiveSuit, int] = {
    s: i for i, s in enumerate(EffectiveSuit)
}


# ---------------------------------------------------------------------------
#  Text notation
# ---------------------------------------------------------------------------

_NUMBER_SHORT: dict[int, str] = {11: "J", 12: "Q", 13: "K", 14: "A"}
_SHORT_NUMBER: dict[str, int] = {v: k for k, v in _NUMBER_SHORT.items()}

_SUIT_SHORT: dict[Suit, str] = {
    Suit.CLUBS: "C", Suit.DIAMONDS: "D",
    Suit.SPADES: "S", Suit.HEARTS: "H",
}
_SHORT_SUIT: dict[str, Suit] = {v: k for k, v in _SUIT_SHORT.items()}

_JOKER_SHORT: dict[Joker, str] = {Joker.SMALL: "LJ", Joker.BIG: "BJ"}
_SHORT_JOKER: dict[str, Joker] = {v: k for k, v in _JOKER_SHORT.items()}


def number_label(number: int) -> str:
    """``11`` -> ``'J'``, ``7`` -> ``'7'``."""
    return _NUMBER_SHORT.get(number, str(number))


def parse_number(value: Union[int, str]) -> int:
    """Parse a card number from an int or a label (``'10'``, ``'K'``)."""
    if isinstance(value, bool):
        raise ValueError(f"Invalid card number: {value!r}")
    if isinstance(value, int):
        number = value
    else:
        text = str(value).strip().upper()
        if text in _SHORT_NUMBER:
            number = _SHORT_NUMBER[text]
        elif text.isdigit():
            number = int(text)
        else:
            raise ValueError(f"Invalid card number: {value!r}")
    if not MIN_NUMBER <= number <= MAX_NUMBER:
        raise ValueError(f"Card number out of range: {value!r}")
    return number


def parse_suit(value: str) -> Suit:
    """Parse a suit from its name (``'SPADES'``) or letter (``'S'``)."""
    text = str(value).strip().upper()
    if text in _SHORT_SUIT:
        return _SHORT_SUIT[text]
    try:
        return Suit(text)
    except ValueError:
        raise ValueError(f"Invalid suit: {value!r}") from None


# ---------------------------------------------------------------------------
#  Card
# ---------------------------------------------------------------------------


@dataclass(frozen=True, slots=True)
class Card:
    """A suited card (``suit`` + ``number``) or a joker (``joker`` only)."""

    suit: Optional[Suit] = None
    number: Optional[int] = None
    joker: Optional[Joker] = None

    def __post_init__(self) -> None:
        if self.joker is not None:
            if self.suit is not None or self.number is not None:
                raise ValueError("A joker has neither suit nor number")
        elif self.suit is None or self.number is None:
            raise ValueError("A suited card needs both a suit and a number")
        elif not MIN_NUMBER <= self.number <= MAX_NUMBER:
            raise ValueError(f"Card number out of range: {self.number}")

    @property
    def is_joker(self) -> bool:
        return self.joker is not None

    def points(self) -> int:
        """Point value: every 5 is worth 5, every 10 and K is worth 10."""
        if self.number is None:
            return 0
        return POINT_VALUES.get(self.number, 0)

    def short(self) -> str:
        """Text notation, e.g. ``'10H'``, ``'QS'``, ``'BJ'``."""
        if self.joker is not None:
            return _JOKER_SHORT[self.joker]
        return f"{number_label(self.number)}{_SUIT_SHORT[self.suit]}"

    @classmethod
    def parse(cls, text: str) -> Card:
        """Inverse of :meth:`short`."""
        raw = str(text).strip().upper()
        if raw in _SHORT_JOKER:
            return cls(joker=_SHORT_JOKER[raw])
        if len(raw) < 2 or raw[-1] not in _SHORT_SUIT:
            raise ValueError(f"Invalid card: {text!r}")
        return cls(suit=_SHORT_SUIT[raw[-1]], number=parse_number(raw[:-1]))

    def __repr__(self) -> str:
        return f"Card({self.short()})"


SMALL_JOKER: Card = Card(joker=Joker.SMALL)
BIG_JOKER: Card = Card(joker=Joker.BIG)


def parse_cards(texts: Iterable[str]) -> List[Card]:
    """Parse a sequence of card labels (``["3S", "3S", "BJ"]``)."""
    return [Card.parse(t) for t in texts]


# ---------------------------------------------------------------------------
#  Trump
# ---------------------------------------------------------------------------


@dataclass(frozen=True, slots=True)
class Trump:
    """Trump configuration: a suit and/or a number, or neither (no trump).

    With neither set only the jokers are trump.
    """

    suit: Optional[Suit] = None
    number: Optional[int] = None

    def __post_init__(self) -> None:
        if self.number is not None and not MIN_NUMBER <= self.number <= MAX_NUMBER:
            raise ValueError(f"Trump number out of range: {self.number}")

    @property
    def is_no_trump(self) -> bool:
        """True when no suit is trump (jokers still outrank everything)."""
        return self.suit is None

    def is_trump(self, card: Card) -> bool:
        if card.is_joker:
            return True
        if self.number is not None and card.number == self.number:
            return True
        return self.suit is not None and card.suit == self.suit

    def effective_suit(self, card: Card) -> EffectiveSuit:
        """Suit the card counts as: TRUMP for trump cards, else its own."""
        if self.is_trump(card):
            return EffectiveSuit.TRUMP
        return EffectiveSuit(card.suit.value)

    def _plain_rung(self, number: int) -> int:
        rung = number - MIN_NUMBER
        if self.number is not None and number > self.number:
            rung -= 1
        return rung

    def rank_position(self, card: Card) -> int:
        """Rung of *card* on its effective suit's ladder.

        Two cards of the same effective suit are adjacent (may form a
        tractor) iff their rungs differ by exactly one.  Off-suit
        trump-number cards share a rung.
        """
        if not self.is_trump(card):
            return self._plain_rung(card.number)
        base = 0
        if self.suit is not None:
            base = MAX_NUMBER - MIN_NUMBER + 1 - (1 if self.number is not None else 0)
            if card.suit == self.suit and card.number != self.number:
                return self._plain_rung(card.number)
        if self.number is not None:
            if card.number == self.number:
                return base + (1 if card.suit == self.suit else 0)
            base += 2 if self.suit is not None else 1
        return base + (1 if card.joker is Joker.BIG else 0)

    def is_adjacent(self, lower: Card, upper: Card) -> bool:
        """True if *upper* sits on the rung directly above *lower*."""
        if self.effective_suit(lower) != self.effective_suit(upper):
            return False
        return self.rank_position(upper) == self.rank_position(lower) + 1

    def sort_key(self, card: Card) -> tuple[int, int, int]:
        """Strict total order: effective suit, rung, then suit tie-break."""
        tie = SUIT_ORDER[card.suit] if card.suit is not None else 0
        return (
            EFFECTIVE_SUIT_ORDER[self.effective_suit(card)],
            self.rank_position(card),
            tie,
        )

    def compare(self, a: Card, b: Card) -> int:
        """-1 / 0 / +1.  Zero only for equal cards."""
        ka = self.sort_key(a)
        kb = self.sort_key(b)
        return (ka > kb) - (ka < kb)


# ---------------------------------------------------------------------------
#  Sorting and grouping
# ---------------------------------------------------------------------------


@dataclass(frozen=True, slots=True)
class SuitGroup:
    """A run of sorted cards sharing one effective suit."""

    suit: EffectiveSuit
    cards: tuple[Card, ...]


def sort_cards(trump: Trump, cards: Iterable[Card]) -> List[Card]:
    """Sort low to high under *trump* (trump cards last)."""
    return sorted(cards, key=trump.sort_key)


def group_by_suit(trump: Trump, cards: Iterable[Card]) -> List[SuitGroup]:
    """Sort *cards* and merge adjacent cards of equal effective suit."""
    groups: list[tuple[EffectiveSuit, list[Card]]] = []
    for card in sort_cards(trump, cards):
        suit = trump.effective_suit(card)
        if groups and groups[-1][0] == suit:
            groups[-1][1].append(card)
        else:
            groups.append((suit, [card]))
    return [SuitGroup(suit, tuple(group)) for suit, group in groups]
