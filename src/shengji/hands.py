"""Players and the cards they hold."""

from __future__ import annotations

from collections import Counter
from dataclasses import dataclass
from typing import Iterable, Mapping, Optional

from shengji.cards import Card
from shengji.errors import UnknownPlayerError

PlayerID = int


@dataclass(frozen=True, slots=True)
class Player:
    """A seated player.

    ``level`` is the rank the player is currently on (2 .. 14).  ``None``
    stands for a no-trump level on which only jokers can be bid.
    """

    id: PlayerID
    name: str = ""
    level: Optional[int] = None


class Hands:
    """Read-only view of every player's cards as a multiset."""

    __slots__ = ("_hands",)

    def __init__(self, hands: Optional[Mapping[PlayerID, Iterable[Card] | Mapping[Card, int]]] = None) -> None:
        self._hands: dict[PlayerID, Counter[Card]] = {}
        for pid, cards in (hands or {}).items():
            counter: Counter[Card] = Counter()
            if isinstance(cards, Mapping):
                for card, count in cards.items():
                    if count < 0:
                        raise ValueError(f"Negative card count for {card!r}")
                    if count:
                        counter[card] += count
            else:
                counter.update(cards)
            self._hands[pid] = counter

    def get(self, player_id: PlayerID) -> Counter[Card]:
        """Copy of *player_id*'s multiset; unknown ids raise."""
        try:
            return Counter(self._hands[player_id])
        except KeyError:
            raise UnknownPlayerError(player_id) from None

    def cards_of(self, player_id: PlayerID) -> list[Card]:
        """The hand expanded into a flat card list."""
        return list(self.get(player_id).elements())

    def contains(self, player_id: PlayerID, cards: Iterable[Card]) -> bool:
        """True if every card (with multiplicity) is in the hand."""
        held = self.get(player_id)
        wanted = Counter(cards)
        return all(held[card] >= n for card, n in wanted.items())

    def __repr__(self) -> str:
        inner = ", ".join(
            f"{pid}: {sorted(c.short() for c in cards.elements())}"
            for pid, cards in self._hands.items()
        )
        return f"Hands({{{inner}}})"


def find_player(players: Iterable[Player], player_id: PlayerID) -> Player:
    """Look up *player_id* in *players*; unknown ids raise."""
    for player in players:
        if player.id == player_id:
            return player
    raise UnknownPlayerError(player_id)
