"""Play legality within a trick.

The first player of a trick leads any cards of one effective suit; the
lead fixes the trick's :class:`~shengji.trick_format.TrickFormat`.
Every follower plays exactly as many cards as were led and must:

  1. play led-suit cards as long as they have them, and
  2. among led-suit cards, match the most preferred shape of the
     format's decomposition that their hand can satisfy.
"""

from __future__ import annotations

from collections import Counter
from dataclasses import dataclass, field
from enum import Enum
from typing import Iterable, Optional

from shengji.cards import Card, Trump
from shengji.errors import RulesError
from shengji.hands import Hands, PlayerID
from shengji.trick_format import TrickDrawPolicy, TrickFormat, check_play, decomposition
from shengji.units import TractorRequirements


class PlayErrorReason(str, Enum):
    TRICK_COMPLETE = "TRICK_COMPLETE"
    NOT_YOUR_TURN = "NOT_YOUR_TURN"
    NO_CARDS = "NO_CARDS"
    CARDS_NOT_IN_HAND = "CARDS_NOT_IN_HAND"
    MIXED_SUITS = "MIXED_SUITS"
    WRONG_NUMBER_OF_CARDS = "WRONG_NUMBER_OF_CARDS"
    WRONG_SUIT = "WRONG_SUIT"
    WRONG_SHAPE = "WRONG_SHAPE"


_MESSAGES: dict[PlayErrorReason, str] = {
    PlayErrorReason.TRICK_COMPLETE: "The trick is already complete",
    PlayErrorReason.NOT_YOUR_TURN: "It is not this player's turn",
    PlayErrorReason.NO_CARDS: "No cards were played",
    PlayErrorReason.CARDS_NOT_IN_HAND: "The cards are not in the player's hand",
    PlayErrorReason.MIXED_SUITS: "A lead must be of a single suit",
    PlayErrorReason.WRONG_NUMBER_OF_CARDS: "Wrong number of cards for this trick",
    PlayErrorReason.WRONG_SUIT: "Cards of the led suit must be played first",
    PlayErrorReason.WRONG_SHAPE: "The cards do not match the required format",
}


class PlayError(RulesError):
    """An illegal play; ``reason`` says which rule was broken."""

    def __init__(self, reason: PlayErrorReason, message: Optional[str] = None) -> None:
        super().__init__(message or _MESSAGES[reason])
        self.reason = reason


@dataclass(frozen=True, slots=True)
class PlayedCards:
    id: PlayerID
    cards: tuple[Card, ...]


@dataclass(frozen=True, slots=True)
class Trick:
    """A trick in progress.

    ``player_queue`` lists the players still to play, next player first.
    ``trick_format`` may be omitted once somebody has led; it is then
    derived from the first play.
    """

    trump: Trump
    player_queue: tuple[PlayerID, ...]
    played_cards: tuple[PlayedCards, ...] = ()
    trick_format: Optional[TrickFormat] = None
    tractor_requirements: TractorRequirements = field(default_factory=TractorRequirements)

    @property
    def is_complete(self) -> bool:
        return not self.player_queue

    def current_format(self) -> Optional[TrickFormat]:
        """The format followers must match, or ``None`` before the lead."""
        if self.trick_format is not None:
            return self.trick_format
        if not self.played_cards:
            return None
        return TrickFormat.from_cards(
            self.trump, self.tractor_requirements, self.played_cards[0].cards,
        )


def can_play_cards(
    trick: Trick,
    player_id: PlayerID,
    hands: Hands,
    cards: Iterable[Card],
    draw_policy: TrickDrawPolicy = TrickDrawPolicy.NO_PROTECTIONS,
) -> None:
    """Raise :class:`PlayError` unless *player_id* may play *cards* now."""
    if trick.is_complete:
        raise PlayError(PlayErrorReason.TRICK_COMPLETE)
    if trick.player_queue[0] != player_id:
        raise PlayError(PlayErrorReason.NOT_YOUR_TURN)
    cards = list(cards)
    if not cards:
        raise PlayError(PlayErrorReason.NO_CARDS)
    if not hands.contains(player_id, cards):
        raise PlayError(PlayErrorReason.CARDS_NOT_IN_HAND)

    trump = trick.trump
    fmt = trick.current_format()
    if fmt is None:
        if len({trump.effective_suit(c) for c in cards}) != 1:
            raise PlayError(PlayErrorReason.MIXED_SUITS)
        return

    if len(cards) != fmt.size:
        raise PlayError(
            PlayErrorReason.WRONG_NUMBER_OF_CARDS,
            f"Expected {fmt.size} cards, got {len(cards)}",
        )

    in_suit = [c for c in hands.cards_of(player_id) if trump.effective_suit(c) == fmt.suit]
    proposed = [c for c in cards if trump.effective_suit(c) == fmt.suit]
    if len(proposed) < fmt.size:
        # Short of the led suit: every led-suit card held must go.
        if Counter(proposed) != Counter(in_suit):
            raise PlayError(PlayErrorReason.WRONG_SUIT)
        return

    for shape in decomposition(fmt, draw_policy):
        if check_play(trump, in_suit, shape, draw_policy, limit=1):
            if not check_play(trump, proposed, shape, draw_policy, limit=1):
                raise PlayError(PlayErrorReason.WRONG_SHAPE)
            return


def is_legal_follow(
    trick: Trick,
    player_id: PlayerID,
    hands: Hands,
    cards: Iterable[Card],
    draw_policy: TrickDrawPolicy = TrickDrawPolicy.NO_PROTECTIONS,
) -> bool:
    try:
        can_play_cards(trick, player_id, hands, cards, draw_policy)
    except PlayError:
        return False
    return True
