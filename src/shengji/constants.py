"""Centralized constants and defaults for the rules engine.

Every tunable default lives here.  Import from this module instead
of hardcoding magic numbers elsewhere.

Usage::

    from shengji.constants import (
        DEFAULT_STEP_SIZE_PER_DECK,
        DEFAULT_TRACTOR_MIN_COUNT,
    )
"""
from __future__ import annotations

# ---------------------------------------------------------------------------
#  Cards
# ---------------------------------------------------------------------------

MIN_NUMBER: int = 2
"""Lowest card number (the Two)."""

MAX_NUMBER: int = 14
"""Highest card number (the Ace)."""

POINT_VALUES: dict[int, int] = {5: 5, 10: 10, 13: 10}
"""Point cards: every Five is worth 5, every Ten and King 10."""

POINT_GRANULARITY: int = 5
"""Every point total is a multiple of this (the smallest point card)."""

# ---------------------------------------------------------------------------
#  Tractors
# ---------------------------------------------------------------------------

DEFAULT_TRACTOR_MIN_COUNT: int = 2
"""Smallest multiplicity that may form a tractor (2 = pairs)."""

DEFAULT_TRACTOR_MIN_LENGTH: int = 2
"""Fewest consecutive groups that make a tractor."""

MAX_VIABLE_PLAYS: int = 4096
"""Most groupings the viable-play finder returns for one card set.

The fewest-unit groupings are kept; hands spanning several suits with
runs in each multiply out far past this.
"""

# ---------------------------------------------------------------------------
#  Scoring
# ---------------------------------------------------------------------------

DEFAULT_STEP_SIZE_PER_DECK: int = 20
"""Points per scoring step contributed by each deck in play.

Two decks give the familiar 40-point steps.
"""

DEFAULT_NUM_STEPS_TO_NON_LANDLORD_TURNOVER: int = 2
"""Steps the non-landlord team must capture to take over as landlord."""

DEFAULT_DEADZONE_SIZE: int = 1
"""Steps after the turnover in which nobody gains a level."""
