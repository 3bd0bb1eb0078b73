"""Exception hierarchy shared by the rules engine and its hosts.

Everything the engine raises on purpose derives from :class:`RulesError`
(itself a ``ValueError``), so a host can turn any of them into a failure
description for the single request that caused it.
"""

from __future__ import annotations


class RulesError(ValueError):
    """Base class for every failure the engine reports."""


class RequestError(RulesError):
    """A request does not have the expected shape (malformed input)."""


class UnknownPlayerError(RulesError):
    """A request references a player that is not present."""

    def __init__(self, player_id: int) -> None:
        super().__init__(f"Unknown player: {player_id!r}")
        self.player_id = player_id


class ScoringError(RulesError):
    """Scoring parameters and decks are mutually inconsistent."""
