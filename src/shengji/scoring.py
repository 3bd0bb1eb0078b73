"""End-of-game scoring: how many levels each side advances.

The non-landlord team's captured points are measured in *steps*.  The
step size scales with the number of decks (20 points per deck by
default, so 40 with two decks).

  - Below the turnover (``num_steps_to_non_landlord_turnover`` steps) the
    landlord team keeps the deal and climbs one level per step the
    non-landlords fell short by, plus a bonus level when the landlord
    played alone (or in the smaller team) and the policy grants it.
  - From the turnover on, the non-landlord team takes over and climbs
    one level per further step, after a dead zone of
    ``deadzone_size`` steps in which nobody moves.

Everything depends on the points only through ``points // step``, so
results are constant between two consecutive multiples of the step.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Mapping, Optional, Sequence

from shengji.constants import (
    DEFAULT_DEADZONE_SIZE,
    DEFAULT_NUM_STEPS_TO_NON_LANDLORD_TURNOVER,
    DEFAULT_STEP_SIZE_PER_DECK,
    POINT_GRANULARITY,
)
from shengji.deck import Deck, total_points
from shengji.errors import ScoringError


class BonusLevelPolicy(str, Enum):
    NO_BONUS_LEVEL = "NO_BONUS_LEVEL"
    BONUS_LEVEL_FOR_SMALLER_LANDLORD_TEAM = "BONUS_LEVEL_FOR_SMALLER_LANDLORD_TEAM"


@dataclass(frozen=True, slots=True)
class GameScoringParameters:
    step_size_per_deck: int = DEFAULT_STEP_SIZE_PER_DECK
    num_steps_to_non_landlord_turnover: int = DEFAULT_NUM_STEPS_TO_NON_LANDLORD_TURNOVER
    deadzone_size: int = DEFAULT_DEADZONE_SIZE
    step_adjustments: Mapping[int, int] = field(default_factory=dict)
    bonus_level_policy: BonusLevelPolicy = BonusLevelPolicy.BONUS_LEVEL_FOR_SMALLER_LANDLORD_TEAM

    def __post_init__(self) -> None:
        if self.num_steps_to_non_landlord_turnover < 1:
            raise ValueError("num_steps_to_non_landlord_turnover must be at least 1")
        if self.deadzone_size < 0:
            raise ValueError("deadzone_size must not be negative")

    def step_size(self, decks: Sequence[Deck]) -> int:
        """Points per step for *decks*; raises :class:`ScoringError`."""
        if not decks:
            raise ScoringError("Scoring needs at least one deck")
        step = (
            self.step_size_per_deck * len(decks)
            + self.step_adjustments.get(len(decks), 0)
        )
        if step <= 0:
            raise ScoringError(f"Step size must be positive, got {step}")
        if step % POINT_GRANULARITY != 0:
            raise ScoringError(
                f"Step size must be a multiple of {POINT_GRANULARITY}, got {step}"
            )
        return step


@dataclass(frozen=True, slots=True)
class GameScoreResult:
    landlord_won: bool
    landlord_delta: int
    non_landlord_delta: int
    landlord_bonus: bool


def compute_level_deltas(
    params: GameScoringParameters,
    decks: Sequence[Deck],
    non_landlord_points: int,
    smaller_landlord_team_size: bool = False,
) -> GameScoreResult:
    step = params.step_size(decks)
    points = min(max(non_landlord_points, 0), total_points(decks))
    turnover = params.num_steps_to_non_landlord_turnover * step

    if points < turnover:
        delta = params.num_steps_to_non_landlord_turnover - points // step
        bonus = (
            smaller_landlord_team_size
            and params.bonus_level_policy == BonusLevelPolicy.BONUS_LEVEL_FOR_SMALLER_LANDLORD_TEAM
        )
        if bonus:
            delta += 1
        return GameScoreResult(True, delta, 0, bonus)

    delta = max(0, (points - turnover) // step - params.deadzone_size + 1)
    return GameScoreResult(False, 0, delta, False)


def explain_level_deltas(
    params: GameScoringParameters,
    decks: Sequence[Deck],
    smaller_landlord_team_size: bool = False,
) -> list[tuple[int, GameScoreResult]]:
    """The result at every multiple of the step from 0 to the deck total."""
    step = params.step_size(decks)
    return [
        (threshold, compute_level_deltas(params, decks, threshold, smaller_landlord_team_size))
        for threshold in range(0, total_points(decks) + 1, step)
    ]


def _next_threshold(
    params: GameScoringParameters,
    decks: Sequence[Deck],
    points: int,
    smaller_landlord_team_size: bool,
) -> Optional[int]:
    current = compute_level_deltas(params, decks, points, smaller_landlord_team_size)
    for threshold, result in explain_level_deltas(params, decks, smaller_landlord_team_size):
        if threshold > points and result != current:
            return threshold
    return None


def next_relevant_score(
    params: GameScoringParameters,
    decks: Sequence[Deck],
    non_landlord_points: int,
    smaller_landlord_team_size: bool = False,
) -> int:
    """Smallest point total above *non_landlord_points* that changes the result.

    When no such total exists the last threshold is returned.
    """
    found = _next_threshold(params, decks, non_landlord_points, smaller_landlord_team_size)
    if found is not None:
        return found
    return explain_level_deltas(params, decks, smaller_landlord_team_size)[-1][0]


def next_threshold_reachable(
    params: GameScoringParameters,
    decks: Sequence[Deck],
    non_landlord_points: int,
    observed_points: int,
) -> bool:
    """Can the non-landlords still reach the next threshold?

    ``observed_points`` is every point already seen this game (captured
    by either side); the rest is still in play.
    """
    found = _next_threshold(params, decks, non_landlord_points, False)
    if found is None:
        return False
    remaining = total_points(decks) - observed_points
    return non_landlord_points + remaining >= found
