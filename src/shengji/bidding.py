"""Trump bidding.

During the deal players reveal cards of the current level number (or
jokers) to claim trump.  A bid is ``count`` identical copies of one card.
Bids are grouped in *epochs*; only bids made in the current epoch compete,
and the most recent one is the bid to beat.

Three independent policies shape what may be bid:

``BidPolicy``
    How a new bid beats the current one.
``BidReinforcementPolicy``
    What the current winner, or a player who was overbid, may still do.
``JokerBidPolicy``
    How many jokers it takes to bid no trump.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Iterable, List, Optional

from shengji.cards import SUIT_ORDER, Card, Joker
from shengji.errors import RulesError
from shengji.hands import Hands, Player, PlayerID, find_player


class BidPolicy(str, Enum):
    JOKER_OR_GREATER_LENGTH = "JOKER_OR_GREATER_LENGTH"
    GREATER_LENGTH = "GREATER_LENGTH"
    JOKER_OR_HIGHER_SUIT = "JOKER_OR_HIGHER_SUIT"


class BidReinforcementPolicy(str, Enum):
    REINFORCE_WHILE_WINNING = "REINFORCE_WHILE_WINNING"
    OVERTURN_OR_REINFORCE_WHILE_WINNING = "OVERTURN_OR_REINFORCE_WHILE_WINNING"
    REINFORCE_WHILE_EQUIVALENT = "REINFORCE_WHILE_EQUIVALENT"


class JokerBidPolicy(str, Enum):
    BOTH_TWO_OR_MORE = "BOTH_TWO_OR_MORE"
    BOTH_NUM_DECKS = "BOTH_NUM_DECKS"
    LJ_NUM_DECKS_HJ_NUM_DECKS_LESS_ONE = "LJ_NUM_DECKS_HJ_NUM_DECKS_LESS_ONE"
    DISABLED = "DISABLED"


@dataclass(frozen=True, slots=True)
class Bid:
    id: PlayerID
    card: Card
    count: int
    epoch: int = 0


def bid_rank(card: Card) -> int:
    """Clubs < Diamonds < Spades < Hearts < small joker < big joker."""
    if card.joker is Joker.BIG:
        return len(SUIT_ORDER) + 1
    if card.joker is Joker.SMALL:
        return len(SUIT_ORDER)
    return SUIT_ORDER[card.suit]


# ---------------------------------------------------------------------------
#  Candidates
# ---------------------------------------------------------------------------


def _joker_counts(card: Card, held: int, policy: JokerBidPolicy, num_decks: int) -> range:
    if policy == JokerBidPolicy.BOTH_TWO_OR_MORE:
        return range(2, held + 1)
    if policy == JokerBidPolicy.BOTH_NUM_DECKS:
        return range(num_decks, min(held, num_decks) + 1)
    if policy == JokerBidPolicy.LJ_NUM_DECKS_HJ_NUM_DECKS_LESS_ONE:
        if card.joker is Joker.SMALL:
            return range(num_decks, min(held, num_decks) + 1)
        return range(max(num_decks - 1, 1), held + 1)
    if policy == JokerBidPolicy.DISABLED:
        return range(0)
    raise ValueError(f"Unknown joker bid policy: {policy!r}")


def _candidates(
    held: Iterable[tuple[Card, int]],
    level: Optional[int],
    joker_policy: JokerBidPolicy,
    num_decks: int,
) -> list[tuple[Card, int]]:
    out = []
    for card, n in held:
        if card.is_joker:
            counts = _joker_counts(card, n, joker_policy, num_decks)
        elif level is not None and card.number == level:
            counts = range(1, n + 1)
        else:
            continue
        out.extend((card, count) for count in counts)
    return out


def _dominates(card: Card, count: int, best: Bid, policy: BidPolicy) -> bool:
    if count > best.count:
        return True
    if count < best.count:
        return False
    if policy == BidPolicy.GREATER_LENGTH:
        return False
    if policy == BidPolicy.JOKER_OR_GREATER_LENGTH:
        return card.is_joker and bid_rank(card) > bid_rank(best.card)
    if policy == BidPolicy.JOKER_OR_HIGHER_SUIT:
        return bid_rank(card) > bid_rank(best.card)
    raise ValueError(f"Unknown bid policy: {policy!r}")


# ---------------------------------------------------------------------------
#  Public API
# ---------------------------------------------------------------------------


def valid_bids(
    id: PlayerID,
    bids: Iterable[Bid],
    hands: Hands,
    players: Iterable[Player],
    landlord: Optional[PlayerID],
    epoch: int,
    bid_policy: BidPolicy = BidPolicy.JOKER_OR_GREATER_LENGTH,
    reinforcement_policy: BidReinforcementPolicy = BidReinforcementPolicy.REINFORCE_WHILE_WINNING,
    joker_bid_policy: JokerBidPolicy = JokerBidPolicy.BOTH_TWO_OR_MORE,
    num_decks: int = 2,
) -> List[Bid]:
    """Every bid *id* may make now, lowest first.

    The bid level is the landlord's level when a landlord is already
    fixed, otherwise the bidder's own.
    """
    if num_decks < 1:
        raise RulesError(f"num_decks must be positive, got {num_decks}")
    players = list(players)
    current = [b for b in bids if b.epoch == epoch]
    best = current[-1] if current else None
    level = find_player(players, landlord if landlord is not None else id).level

    held = sorted(hands.get(id).items(), key=lambda kv: bid_rank(kv[0]))
    candidates = _candidates(held, level, joker_bid_policy, num_decks)

    if best is None:
        legal = candidates
    elif best.id == id:
        legal = [
            (card, count) for card, count in candidates
            if (card == best.card and count > best.count)
            or (
                reinforcement_policy == BidReinforcementPolicy.OVERTURN_OR_REINFORCE_WHILE_WINNING
                and card != best.card
                and _dominates(card, count, best, bid_policy)
            )
        ]
    else:
        own = [b for b in current if b.id == id]
        previous = own[-1] if own else None
        legal = []
        for card, count in candidates:
            if _dominates(card, count, best, bid_policy):
                legal.append((card, count))
            elif (
                reinforcement_policy == BidReinforcementPolicy.REINFORCE_WHILE_EQUIVALENT
                and previous is not None
                and card == previous.card
                and count > previous.count
                and count >= best.count
            ):
                legal.append((card, count))

    unique = dict.fromkeys(legal)
    ordered = sorted(unique, key=lambda cc: (cc[1], bid_rank(cc[0])))
    return [Bid(id, card, count, epoch) for card, count in ordered]
