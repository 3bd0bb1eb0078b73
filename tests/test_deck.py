from __future__ import annotations

import pytest

from shengji.deck import Deck, total_len, total_points


class TestDeck:
    def test_standard_deck(self):
        deck = Deck()
        assert len(deck) == 54
        assert len(deck.cards()) == 54
        assert deck.points() == 100

    def test_two_decks_have_108_cards(self):
        assert total_len([Deck(), Deck()]) == 108
        assert total_points([Deck(), Deck()]) == 200

    def test_excluded_jokers(self):
        assert len(Deck(exclude_small_joker=True)) == 53
        assert len(Deck(exclude_small_joker=True, exclude_big_joker=True)) == 52
        assert all(not c.is_joker for c in Deck(exclude_small_joker=True, exclude_big_joker=True).cards())

    def test_short_deck(self):
        deck = Deck(min=3)
        assert len(deck) == 4 * 12 + 2
        assert len(deck.cards()) == len(deck)
        assert deck.points() == 100

    def test_short_deck_without_fives(self):
        assert Deck(min=6).points() == 80

    def test_invalid_minimum(self):
        with pytest.raises(ValueError):
            Deck(min=15)
