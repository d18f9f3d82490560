"""Per-player at-bat outcome distributions and sampling.

Converts season totals into a 7-outcome probability table, builds the
normalized cumulative table used for inverse-CDF sampling, and draws one
outcome per at-bat by lower-bound binary search.
"""

from dataclasses import dataclass
from enum import Enum

import numpy as np
from numpy.typing import NDArray

from lineupsim.models.player import PlayerRecord, clamp_count


class OutcomeType(str, Enum):
    """Resolved at-bat outcome."""

    HOMERUN = "homerun"
    TRIPLE = "triple"
    DOUBLE = "double"
    SINGLE = "single"
    WALK = "walk"  # includes hit-by-pitch
    STRIKEOUT = "strikeout"
    OUT = "out"  # any out other than a strikeout

    @property
    def is_out(self) -> bool:
        return self in (OutcomeType.STRIKEOUT, OutcomeType.OUT)


OUTCOME_LABELS: dict[OutcomeType, str] = {
    OutcomeType.HOMERUN: "Home run",
    OutcomeType.TRIPLE: "Triple",
    OutcomeType.DOUBLE: "Double",
    OutcomeType.SINGLE: "Single",
    OutcomeType.WALK: "Walk",
    OutcomeType.STRIKEOUT: "Strikeout",
    OutcomeType.OUT: "Out",
}


@dataclass(frozen=True)
class BattingOutcome:
    """One entry of a player's outcome distribution."""

    type: OutcomeType
    probability: float
    bases: int  # bases credited to the batter (4 for a homerun, 0 for outs)


GENERIC_OUT = BattingOutcome(type=OutcomeType.OUT, probability=1.0, bases=0)


def build_outcome_table(player: PlayerRecord) -> tuple[BattingOutcome, ...]:
    """Build a player's 7-entry outcome distribution.

    Args:
        player: Season batting totals

    Returns:
        Outcomes ordered homerun, triple, double, single, walk, strikeout, out

    Notes:
        - Plate appearances are treated as at least 1
        - Negative or NaN counts are clamped to 0, never rejected
        - The generic out absorbs the residual: max(0, 1 - sum(other rates))
    """
    pa = max(1, clamp_count(player.plate_appearances))

    hits = clamp_count(player.hits)
    doubles = clamp_count(player.doubles)
    triples = clamp_count(player.triples)
    home_runs = clamp_count(player.home_runs)

    single = max(0, hits - doubles - triples - home_runs) / pa
    double = doubles / pa
    triple = triples / pa
    homerun = home_runs / pa
    walk = (clamp_count(player.walks) + clamp_count(player.hit_by_pitch)) / pa
    strikeout = clamp_count(player.strikeouts) / pa

    modeled = single + double + triple + homerun + walk + strikeout
    other_out = max(0.0, 1.0 - modeled)

    return (
        BattingOutcome(OutcomeType.HOMERUN, homerun, 4),
        BattingOutcome(OutcomeType.TRIPLE, triple, 3),
        BattingOutcome(OutcomeType.DOUBLE, double, 2),
        BattingOutcome(OutcomeType.SINGLE, single, 1),
        BattingOutcome(OutcomeType.WALK, walk, 1),
        BattingOutcome(OutcomeType.STRIKEOUT, strikeout, 0),
        BattingOutcome(OutcomeType.OUT, other_out, 0),
    )


def build_cumulative(outcomes: tuple[BattingOutcome, ...]) -> NDArray[np.float64]:
    """Prefix-sum the outcome probabilities and renormalize to end at 1.0.

    A table with zero total mass is returned as all zeros; sampling against it
    falls back to the generic out.
    """
    cumulative = np.cumsum([o.probability for o in outcomes], dtype=np.float64)

    if len(cumulative) == 0:
        return cumulative

    total = cumulative[-1]
    if total > 0:
        cumulative = cumulative / total
        cumulative[-1] = 1.0
    else:
        cumulative[:] = 0.0

    cumulative.flags.writeable = False
    return cumulative


def sample_outcome(
    draw: float,
    cumulative: NDArray[np.float64],
    outcomes: tuple[BattingOutcome, ...],
) -> BattingOutcome:
    """Select the outcome for a uniform draw in [0, 1).

    Lower-bound search: the smallest index whose cumulative probability is
    >= draw. Degenerate tables resolve to the generic out.
    """
    if len(cumulative) == 0 or cumulative[-1] <= 0:
        return GENERIC_OUT

    index = int(np.searchsorted(cumulative, draw, side="left"))
    if index >= len(outcomes):
        return GENERIC_OUT
    return outcomes[index]


@dataclass(frozen=True)
class PlayerTables:
    """Outcome distribution and cumulative table for one lineup slot.

    Built once per batch and shared read-only across games.
    """

    player: PlayerRecord
    outcomes: tuple[BattingOutcome, ...]
    cumulative: NDArray[np.float64]

    def sample(self, rng: np.random.Generator) -> BattingOutcome:
        return sample_outcome(rng.random(), self.cumulative, self.outcomes)


def build_player_tables(player: PlayerRecord) -> PlayerTables:
    outcomes = build_outcome_table(player)
    return PlayerTables(player=player, outcomes=outcomes, cumulative=build_cumulative(outcomes))
