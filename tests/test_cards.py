"""Tests for the card and trump model."""

from __future__ import annotations

import pytest

from shengji.cards import (
    ALL_SUITS,
    BIG_JOKER,
    SMALL_JOKER,
    Card,
    EffectiveSuit,
    Joker,
    Suit,
    Trump,
    group_by_suit,
    parse_cards,
    sort_cards,
)
from shengji.deck import Deck


# ---------------------------------------------------------------------------
#  Notation and points
# ---------------------------------------------------------------------------


class TestNotation:
    def test_parse_suited(self):
        assert Card.parse("10H") == Card(Suit.HEARTS, 10)
        assert Card.parse("QD") == Card(Suit.DIAMONDS, 12)
        assert Card.parse("as") == Card(Suit.SPADES, 14)

    def test_parse_jokers(self):
        assert Card.parse("LJ") == Card(joker=Joker.SMALL)
        assert Card.parse("BJ") == BIG_JOKER

    def test_short(self):
        assert [c.short() for c in parse_cards(["3S", "10H", "KC", "LJ"])] == ["3S", "10H", "KC", "LJ"]

    @pytest.mark.parametrize("text", ["1S", "15H", "ZZ", "S", "", "10X"])
    def test_invalid(self, text):
        with pytest.raises(ValueError):
            Card.parse(text)

    def test_joker_with_suit_rejected(self):
        with pytest.raises(ValueError):
            Card(Suit.SPADES, 5, Joker.BIG)

    def test_points(self):
        assert Card.parse("5S").points() == 5
        assert Card.parse("10D").points() == 10
        assert Card.parse("KH").points() == 10
        assert Card.parse("QH").points() == 0
        assert SMALL_JOKER.points() == 0


# ---------------------------------------------------------------------------
#  Trump
# ---------------------------------------------------------------------------


class TestTrump:
    def test_is_trump(self):
        trump = Trump(Suit.SPADES, 5)
        assert trump.is_trump(Card.parse("5H"))
        assert trump.is_trump(Card.parse("3S"))
        assert trump.is_trump(SMALL_JOKER)
        assert not trump.is_trump(Card.parse("3H"))

    def test_effective_suit(self):
        trump = Trump(Suit.SPADES, 5)
        assert trump.effective_suit(Card.parse("5D")) is EffectiveSuit.TRUMP
        assert trump.effective_suit(Card.parse("6D")) is EffectiveSuit.DIAMONDS

    def test_plain_suit_skips_trump_number(self):
        trump = Trump(Suit.SPADES, 5)
        assert trump.is_adjacent(Card.parse("4H"), Card.parse("6H"))
        assert not trump.is_adjacent(Card.parse("3H"), Card.parse("5H"))

    def test_trump_ladder(self):
        trump = Trump(Suit.SPADES, 5)
        ladder = ["AS", "5H", "5S", "LJ", "BJ"]
        cards = parse_cards(ladder)
        for lower, upper in zip(cards, cards[1:]):
            assert trump.is_adjacent(lower, upper), (lower, upper)

    def test_off_suit_trump_numbers_share_a_rung(self):
        trump = Trump(Suit.SPADES, 5)
        assert trump.rank_position(Card.parse("5H")) == trump.rank_position(Card.parse("5D"))
        assert not trump.is_adjacent(Card.parse("5H"), Card.parse("5D"))

    def test_no_trump_suit_ladder(self):
        trump = Trump(None, 5)
        assert trump.rank_position(Card.parse("5H")) == 0
        assert trump.rank_position(SMALL_JOKER) == 1
        assert trump.rank_position(BIG_JOKER) == 2

    def test_trump_suit_without_number(self):
        trump = Trump(Suit.HEARTS, None)
        assert trump.is_adjacent(Card.parse("AH"), SMALL_JOKER)
        assert trump.is_adjacent(SMALL_JOKER, BIG_JOKER)

    def test_only_jokers_without_suit_or_number(self):
        trump = Trump()
        assert trump.is_no_trump
        assert trump.is_trump(BIG_JOKER)
        assert not any(trump.is_trump(c) for c in Deck(exclude_small_joker=True, exclude_big_joker=True).cards())

    def test_invalid_number(self):
        with pytest.raises(ValueError):
            Trump(Suit.HEARTS, 1)


# ---------------------------------------------------------------------------
#  Ordering
# ---------------------------------------------------------------------------


class TestOrdering:
    @pytest.mark.parametrize("trump", [
        Trump(Suit.SPADES, 5),
        Trump(None, 2),
        Trump(Suit.CLUBS, None),
        Trump(),
    ])
    def test_total_order(self, trump):
        cards = Deck().cards()
        assert len({trump.sort_key(c) for c in cards}) == len(cards)
        for a in cards[:20]:
            assert trump.compare(a, a) == 0
            for b in cards:
                if a != b:
                    assert trump.compare(a, b) == -trump.compare(b, a) != 0

    def test_sort_puts_trump_last(self):
        trump = Trump(Suit.HEARTS, 2)
        cards = parse_cards(["BJ", "3H", "3C", "2C"])
        assert [c.short() for c in sort_cards(trump, cards)] == ["3C", "3H", "2C", "BJ"]

    def test_suit_order(self):
        trump = Trump()
        first = [Card(s, 7) for s in reversed(ALL_SUITS)]
        assert [c.suit for c in sort_cards(trump, first)] == list(ALL_SUITS)


class TestGroupBySuit:
    def test_groups(self):
        trump = Trump(Suit.HEARTS, 2)
        groups = group_by_suit(trump, parse_cards(["3H", "KS", "3C", "2C", "4C", "BJ"]))
        assert [g.suit for g in groups] == [
            EffectiveSuit.CLUBS, EffectiveSuit.SPADES, EffectiveSuit.TRUMP,
        ]
        assert [c.short() for c in groups[0].cards] == ["3C", "4C"]
        assert [c.short() for c in groups[2].cards] == ["3H", "2C", "BJ"]

    def test_idempotent(self):
        trump = Trump(Suit.DIAMONDS, 10)
        cards = parse_cards(["10S", "3D", "AS", "LJ", "10D", "9H", "3D"])
        once = group_by_suit(trump, cards)
        flat = [c for g in once for c in g.cards]
        assert group_by_suit(trump, flat) == once

    def test_empty(self):
        assert group_by_suit(Trump(), []) == []
