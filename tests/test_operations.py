"""Tests for the JSON request/response operations and the wire codec."""

from __future__ import annotations

import pytest

from shengji import codec
from shengji.cards import Card, Suit, Trump
from shengji.errors import RequestError, ScoringError
from shengji.operations import OPERATIONS, dispatch
from shengji.trick_format import TrickDrawPolicy

TRUMP = {"suit": "HEARTS", "number": 2}
TRACTOR_FORMAT = {
    "suit": "SPADES",
    "trump": TRUMP,
    "units": [{"adjacent_tuples": [2, 2]}],
}


# ---------------------------------------------------------------------------
#  Codec
# ---------------------------------------------------------------------------


class TestCodec:
    def test_card(self):
        assert codec.card_from_json("10H") == Card(Suit.HEARTS, 10)
        assert codec.card_from_json({"suit": "S", "number": "Q"}) == Card(Suit.SPADES, 12)
        assert codec.card_from_json({"joker": "big"}).short() == "BJ"

    @pytest.mark.parametrize("value", ["ZZ", 7, None, {"suit": "S"}])
    def test_invalid_card(self, value):
        with pytest.raises(RequestError):
            codec.card_from_json(value)

    def test_trump(self):
        assert codec.trump_from_json({"suit": "S", "number": "K"}) == Trump(Suit.SPADES, 13)
        assert codec.trump_from_json({"suit": None, "number": None}) == Trump()
        with pytest.raises(RequestError):
            codec.trump_from_json({"suit": "X"})

    def test_hands_both_forms(self):
        by_count = codec.hands_from_json({"1": {"3S": 2, "BJ": 1}})
        by_list = codec.hands_from_json({"1": ["3S", "BJ", "3S"]})
        assert by_count.get(1) == by_list.get(1)

    def test_enum_case_insensitive(self):
        assert codec.enum_from_json(TrickDrawPolicy, "longer_tuples_protected") is TrickDrawPolicy.LONGER_TUPLES_PROTECTED
        with pytest.raises(RequestError):
            codec.enum_from_json(TrickDrawPolicy, "sometimes")

    def test_params(self):
        params = codec.params_from_json({"deadzone_size": 0, "step_adjustments": {"2": 5}})
        assert params.deadzone_size == 0
        assert params.step_adjustments == {2: 5}
        assert params.step_size_per_deck == 20
        with pytest.raises(RequestError):
            codec.params_from_json({"step_size": 40})

    def test_requirements(self):
        assert codec.requirements_from_json({"min_count": 3}).min_count == 3
        with pytest.raises(RequestError):
            codec.requirements_from_json({"min_length": 1})

    def test_shape_accepts_bare_list(self):
        assert codec.shape_from_json([2, 2]) == codec.shape_from_json({"adjacent_tuples": [2, 2]})

    def test_shape_rejects_mixed_tractor(self):
        with pytest.raises(RequestError):
            codec.shape_from_json([3, 2])

    def test_unit(self):
        unit = {"type": "tractor", "count": 2, "members": ["3S", "4S"]}
        assert codec.unit_to_json(codec.unit_from_json(unit)) == unit


# ---------------------------------------------------------------------------
#  Operations
# ---------------------------------------------------------------------------


class TestDispatch:
    def test_all_operations_registered(self):
        assert set(OPERATIONS) == {
            "find_viable_plays",
            "decompose_trick_format",
            "can_play_cards",
            "find_valid_bids",
            "sort_and_group_cards",
            "next_threshold_reachable",
            "explain_scoring",
            "compute_deck_len",
            "compute_score",
        }

    def test_unknown_operation(self):
        with pytest.raises(RequestError):
            dispatch("shuffle", {})

    def test_missing_field(self):
        with pytest.raises(RequestError):
            dispatch("find_viable_plays", {"trump": TRUMP})


class TestPlayOperations:
    def test_find_viable_plays(self):
        resp = dispatch("find_viable_plays", {"trump": TRUMP, "cards": ["3S", "3S", "4S", "4S"]})
        assert [r["description"] for r in resp["results"]] == ["a tractor of two pairs", "two pairs"]
        assert resp["results"][0]["grouping"] == [
            {"type": "tractor", "count": 2, "members": ["3S", "4S"]},
        ]

    def test_sort_and_group_cards_idempotent(self):
        first = dispatch("sort_and_group_cards", {"trump": TRUMP, "cards": ["BJ", "3H", "KS", "3C", "2C"]})
        flat = [c for group in first["results"] for c in group["cards"]]
        again = dispatch("sort_and_group_cards", {"trump": TRUMP, "cards": flat})
        assert again == first
        assert [g["suit"] for g in first["results"]] == ["CLUBS", "SPADES", "TRUMP"]

    def test_decompose_trick_format(self):
        resp = dispatch("decompose_trick_format", {
            "trick_format": TRACTOR_FORMAT,
            "hands": {"1": ["6S", "6S", "9S", "10S", "KD"]},
            "player_id": 1,
        })
        rows = resp["results"]
        assert [r["description"] for r in rows] == [
            "a tractor of two pairs", "two pairs", "a pair and two singles", "four singles",
        ]
        assert [r["playable"] for r in rows[:3]] == [[], [], ["6S", "6S", "9S", "10S"]]

    def test_decompose_tractor_of_triples(self):
        resp = dispatch("decompose_trick_format", {
            "trick_format": {"suit": "SPADES", "trump": TRUMP, "units": [[3, 3]]},
            "hands": {"1": ["3S", "3S", "3S", "4S", "4S", "4S", "9S"]},
            "player_id": 1,
        })
        first = resp["results"][0]
        assert first["description"] == "a tractor of two triples"
        assert first["playable"] == ["3S", "3S", "3S", "4S", "4S", "4S"]

    def test_decompose_rejects_mixed_tractor(self):
        with pytest.raises(RequestError):
            dispatch("decompose_trick_format", {
                "trick_format": {"suit": "SPADES", "trump": TRUMP, "units": [[3, 2]]},
                "hands": {"1": ["3S", "3S", "3S", "4S", "4S", "9S"]},
                "player_id": 1,
            })

    def test_first_playable_is_legal(self):
        hands = {"1": ["6S", "6S", "7S", "9S", "9S", "KD", "2H"]}
        resp = dispatch("decompose_trick_format", {
            "trick_format": TRACTOR_FORMAT, "hands": hands, "player_id": 1,
        })
        playable = next(r["playable"] for r in resp["results"] if r["playable"])
        trick = {
            "trump": TRUMP,
            "player_queue": [1],
            "played_cards": [{"id": 0, "cards": ["3S", "3S", "4S", "4S"]}],
        }
        req = {"trick": trick, "player_id": 1, "hands": hands, "cards": playable}
        assert dispatch("can_play_cards", req) == {"playable": True}

    def test_can_play_cards_rejections_are_false(self):
        trick = {"trump": TRUMP, "player_queue": [1], "played_cards": []}
        req = {"trick": trick, "player_id": 2, "hands": {"1": ["3S"]}, "cards": ["3S"]}
        assert dispatch("can_play_cards", req) == {"playable": False}
        trick["player_queue"] = [2]
        assert dispatch("can_play_cards", req) == {"playable": False}

    def test_draw_policy_field(self):
        trick = {
            "trump": TRUMP,
            "player_queue": [1],
            "played_cards": [{"id": 0, "cards": ["3S", "3S"]}],
        }
        req = {
            "trick": trick,
            "player_id": 1,
            "hands": {"1": ["7S", "7S", "7S", "9S", "10S"]},
            "cards": ["9S", "10S"],
        }
        assert dispatch("can_play_cards", req) == {"playable": False}
        req["trick_draw_policy"] = "LONGER_TUPLES_PROTECTED"
        assert dispatch("can_play_cards", req) == {"playable": True}


class TestBidOperations:
    def request(self, **overrides):
        req = {
            "player_id": 0,
            "bid_history": [],
            "hands": {"0": ["2S", "2S", "LJ", "LJ"]},
            "players": [{"id": 0, "name": "north", "level": 2}],
            "landlord": None,
            "epoch": 0,
            "bid_policy": "JOKER_OR_GREATER_LENGTH",
            "reinforcement_policy": "REINFORCE_WHILE_WINNING",
            "joker_bid_policy": "BOTH_TWO_OR_MORE",
            "num_decks": 2,
        }
        req.update(overrides)
        return req

    def test_find_valid_bids(self):
        resp = dispatch("find_valid_bids", self.request())
        assert resp["results"] == [
            {"id": 0, "card": "2S", "count": 1, "epoch": 0},
            {"id": 0, "card": "2S", "count": 2, "epoch": 0},
            {"id": 0, "card": "LJ", "count": 2, "epoch": 0},
        ]

    def test_failure_is_empty(self):
        assert dispatch("find_valid_bids", self.request(player_id=5)) == {"results": []}
        assert dispatch("find_valid_bids", self.request(bid_policy="NOPE")) == {"results": []}


class TestScoringOperations:
    def test_compute_deck_len(self):
        assert dispatch("compute_deck_len", [{}, {}]) == 108
        assert dispatch("compute_deck_len", [{"exclude_small_joker": True, "exclude_big_joker": True}]) == 52

    def test_explain_scoring(self):
        resp = dispatch("explain_scoring", {"decks": [{}, {}], "params": {}, "smaller_landlord_team_size": False})
        assert resp["total_points"] == 200
        assert resp["step_size"] == 40
        assert [r["point_threshold"] for r in resp["results"]] == [0, 40, 80, 120, 160, 200]
        assert resp["results"][0]["score_result"] == {
            "landlord_won": True, "landlord_delta": 2, "non_landlord_delta": 0, "landlord_bonus": False,
        }

    def test_compute_score(self):
        resp = dispatch("compute_score", {
            "decks": [{}, {}], "params": {}, "smaller_landlord_team_size": False, "non_landlord_points": 125,
        })
        assert resp["score_result"]["non_landlord_delta"] == 1
        assert resp["next_threshold"] == 160

    def test_next_threshold_reachable(self):
        req = {"decks": [{}, {}], "params": {}, "non_landlord_points": 60, "observed_points": 180}
        assert dispatch("next_threshold_reachable", req) is True
        req["observed_points"] = 185
        assert dispatch("next_threshold_reachable", req) is False

    def test_bad_step_size(self):
        with pytest.raises(ScoringError):
            dispatch("explain_scoring", {"decks": [{}], "params": {"step_size_per_deck": 12}})
