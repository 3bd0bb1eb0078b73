"""Request/response operations exposed to hosts.

Every operation takes one JSON-shaped request and returns a JSON-shaped
response.  Operations are pure and keep no state between calls, so hosts
(the HTTP app, the CLI) may call them concurrently.

Malformed requests raise :class:`~shengji.errors.RequestError`; domain
violations raise the matching :class:`~shengji.errors.RulesError`
subclass.  Two operations report failure in-band instead:
``can_play_cards`` answers ``false`` and ``find_valid_bids`` answers an
empty list.
"""

from __future__ import annotations

import logging
from typing import Any, Callable, Mapping

from shengji import codec
from shengji.bidding import BidPolicy, BidReinforcementPolicy, JokerBidPolicy, valid_bids
from shengji.cards import group_by_suit
from shengji.deck import Deck, total_len, total_points
from shengji.errors import RequestError, RulesError, UnknownPlayerError
from shengji.plays import find_viable_plays as _find_viable_plays
from shengji.scoring import (
    GameScoringParameters,
    compute_level_deltas,
    explain_level_deltas,
    next_relevant_score,
)
from shengji.scoring import next_threshold_reachable as _next_threshold_reachable
from shengji.trick import PlayError, can_play_cards as _can_play_cards
from shengji.trick_format import TrickDrawPolicy, check_play, decomposition
from shengji.units import grouping_cards, multi_description

log = logging.getLogger(__name__)

Request = Mapping[str, Any]


def _draw_policy(req: Request) -> TrickDrawPolicy:
    return codec.enum_from_json(
        TrickDrawPolicy, req.get("trick_draw_policy"), TrickDrawPolicy.NO_PROTECTIONS,
    )


# ---------------------------------------------------------------------------
#  Plays and tricks
# ---------------------------------------------------------------------------


def find_viable_plays(req: Request) -> dict[str, Any]:
    trump = codec.trump_from_json(codec.require(req, "trump"))
    requirements = codec.requirements_from_json(req.get("tractor_requirements"))
    cards = codec.cards_from_json(codec.require(req, "cards"))
    return {
        "results": [
            {
                "grouping": [codec.unit_to_json(u) for u in play.grouping],
                "description": play.description,
            }
            for play in _find_viable_plays(trump, requirements, cards)
        ]
    }


def decompose_trick_format(req: Request) -> dict[str, Any]:
    """Every acceptable shape for the player's follow, with a sample play."""
    fmt = codec.trick_format_from_json(codec.require(req, "trick_format"))
    hands = codec.hands_from_json(codec.require(req, "hands"))
    player_id = codec.player_id_from_json(codec.require(req, "player_id"))
    policy = _draw_policy(req)

    in_suit = [
        c for c in hands.cards_of(player_id)
        if fmt.trump.effective_suit(c) == fmt.suit
    ]
    results = []
    for shape in decomposition(fmt, policy):
        matches = check_play(fmt.trump, in_suit, shape, policy, limit=1)
        results.append({
            "format": [codec.shape_to_json(u) for u in shape],
            "description": multi_description(shape),
            "playable": codec.cards_to_json(grouping_cards(matches[0])) if matches else [],
        })
    return {"results": results}


def can_play_cards(req: Request) -> dict[str, Any]:
    trick = codec.trick_from_json(codec.require(req, "trick"))
    player_id = codec.player_id_from_json(codec.require(req, "player_id"))
    hands = codec.hands_from_json(codec.require(req, "hands"))
    cards = codec.cards_from_json(codec.require(req, "cards"))
    policy = _draw_policy(req)
    try:
        _can_play_cards(trick, player_id, hands, cards, policy)
    except (PlayError, UnknownPlayerError) as e:
        log.debug("can_play_cards: player %s rejected: %s", player_id, e)
        return {"playable": False}
    return {"playable": True}


def sort_and_group_cards(req: Request) -> dict[str, Any]:
    trump = codec.trump_from_json(codec.require(req, "trump"))
    cards = codec.cards_from_json(codec.require(req, "cards"))
    return {"results": [codec.suit_group_to_json(g) for g in group_by_suit(trump, cards)]}


# ---------------------------------------------------------------------------
#  Bidding
# ---------------------------------------------------------------------------


def find_valid_bids(req: Request) -> dict[str, Any]:
    try:
        landlord = req.get("landlord")
        bids = valid_bids(
            codec.player_id_from_json(codec.require(req, "player_id")),
            codec.bids_from_json(req.get("bid_history") or []),
            codec.hands_from_json(codec.require(req, "hands")),
            codec.players_from_json(codec.require(req, "players")),
            codec.player_id_from_json(landlord) if landlord is not None else None,
            codec.int_field(req, "epoch", 0),
            codec.enum_from_json(BidPolicy, req.get("bid_policy"), BidPolicy.JOKER_OR_GREATER_LENGTH),
            codec.enum_from_json(
                BidReinforcementPolicy,
                req.get("reinforcement_policy"),
                BidReinforcementPolicy.REINFORCE_WHILE_WINNING,
            ),
            codec.enum_from_json(JokerBidPolicy, req.get("joker_bid_policy"), JokerBidPolicy.BOTH_TWO_OR_MORE),
            codec.int_field(req, "num_decks", 2),
        )
    except RulesError as e:
        log.debug("find_valid_bids: no bids (%s)", e)
        return {"results": []}
    return {"results": [codec.bid_to_json(b) for b in bids]}


# ---------------------------------------------------------------------------
#  Decks and scoring
# ---------------------------------------------------------------------------


def compute_deck_len(req: Any) -> int:
    """Total card count; the request is the deck list itself."""
    decks = req.get("decks") if isinstance(req, Mapping) else req
    return total_len(codec.decks_from_json(decks))


def _scoring_inputs(req: Request) -> tuple[list[Deck], GameScoringParameters]:
    decks = codec.decks_from_json(codec.require(req, "decks"))
    params = codec.params_from_json(req.get("params"))
    return decks, params


def next_threshold_reachable(req: Request) -> bool:
    decks, params = _scoring_inputs(req)
    return _next_threshold_reachable(
        params,
        decks,
        codec.int_field(req, "non_landlord_points"),
        codec.int_field(req, "observed_points"),
    )


def explain_scoring(req: Request) -> dict[str, Any]:
    decks, params = _scoring_inputs(req)
    smaller = codec.bool_field(req, "smaller_landlord_team_size")
    return {
        "results": [
            {"point_threshold": threshold, "score_result": codec.score_result_to_json(result)}
            for threshold, result in explain_level_deltas(params, decks, smaller)
        ],
        "total_points": total_points(decks),
        "step_size": params.step_size(decks),
    }


def compute_score(req: Request) -> dict[str, Any]:
    decks, params = _scoring_inputs(req)
    smaller = codec.bool_field(req, "smaller_landlord_team_size")
    points = codec.int_field(req, "non_landlord_points")
    return {
        "score_result": codec.score_result_to_json(
            compute_level_deltas(params, decks, points, smaller)
        ),
        "next_threshold": next_relevant_score(params, decks, points, smaller),
    }


# ---------------------------------------------------------------------------
#  Dispatch
# ---------------------------------------------------------------------------

OPERATIONS: dict[str, Callable[[Any], Any]] = {
    "find_viable_plays": find_viable_plays,
    "decompose_trick_format": decompose_trick_format,
    "can_play_cards": can_play_cards,
    "find_valid_bids": find_valid_bids,
    "sort_and_group_cards": sort_and_group_cards,
    "next_threshold_reachable": next_threshold_reachable,
    "explain_scoring": explain_scoring,
    "compute_deck_len": compute_deck_len,
    "compute_score": compute_score,
}


def dispatch(name: str, request: Any) -> Any:
    """Run operation *name* on *request*."""
    try:
        op = OPERATIONS[name]
    except KeyError:
        raise RequestError(f"Unknown operation: {name!r}") from None
    if name != "compute_deck_len" and not isinstance(request, Mapping):
        raise RequestError(f"Expected a JSON object for {name}, got {type(request).__name__}")
    try:
        return op(request)
    except RulesError as e:
        log.info("%s rejected: %s", name, e)
        raise
