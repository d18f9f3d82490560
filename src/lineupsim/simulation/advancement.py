"""Base-advancement model driven by empirical advance probabilities.

Runner occupancy is a 3-bit set: bit 0 = first, bit 1 = second, bit 2 = third
(0 = bases empty, 7 = bases loaded). Every probability is looked up by the
number of outs *before* the at-bat, with an "average" fallback for missing
keys.

Implements:
- Homerun / triple: all runners score
- Double / single: conditional advance from the lookup tables below
- Walk / hit-by-pitch: forced advances only
- Generic out: tag-up from third with 0 or 1 outs, never with 2
- Strikeout: no movement
"""

from dataclasses import dataclass

import numpy as np

from lineupsim.models.outcomes import OutcomeType

FIRST = 0b001
SECOND = 0b010
THIRD = 0b100
BASES_LOADED = FIRST | SECOND | THIRD

AdvanceTable = dict[int | str, float]

# Observed scoring/advance rates keyed by outs
# Runner on third scores on an out other than a strikeout. Zero with 2 outs:
# the third out ends the inning before the runner can score.
THIRD_ON_OUT: AdvanceTable = {0: 0.43, 1: 0.41, 2: 0.00, "average": 0.42}
# Runner on second scores on a single
SECOND_ON_SINGLE: AdvanceTable = {0: 0.52, 1: 0.59, 2: 0.66, "average": 0.57}
# Runner on first scores on a double
FIRST_ON_DOUBLE: AdvanceTable = {0: 0.71, 1: 0.73, 2: 0.81, "average": 0.75}

# Estimated from league-wide tendencies
# Runner on first reaches third on a single
FIRST_ON_SINGLE_TO_THIRD: AdvanceTable = {0: 0.40, 1: 0.50, 2: 0.70, "average": 0.53}
# Runner on second scores on a double
SECOND_ON_DOUBLE: AdvanceTable = {0: 0.85, 1: 0.87, 2: 0.90, "average": 0.87}
# Runner on third scores on a single
THIRD_ON_SINGLE: AdvanceTable = {0: 0.95, 1: 0.95, 2: 0.95, "average": 0.95}


@dataclass(frozen=True)
class AdvanceResult:
    """Runs scored on one at-bat and the resulting occupancy."""

    runs: int
    new_runners: int


def advance_probability(table: AdvanceTable, outs: int) -> float:
    """Look up a rate by out count, falling back to the table average."""
    return table.get(outs, table["average"])


def _count_runners(runners: int) -> int:
    return bin(runners & BASES_LOADED).count("1")


def advance_runners(
    runners: int,
    outcome: OutcomeType,
    outs: int,
    rng: np.random.Generator,
) -> AdvanceResult:
    """Resolve runner movement for one at-bat.

    Args:
        runners: Occupancy before the at-bat (0-7)
        outcome: Resolved at-bat outcome
        outs: Outs before this at-bat (0, 1 or 2)
        rng: Random source for the probabilistic branches

    Returns:
        AdvanceResult with runs scored and new occupancy

    Notes:
        - Runners are resolved independently; two runners sent to the same
          base occupy it once (heuristic model, not a rules engine)
        - A generic out with 2 outs never scores the runner from third
    """
    on_first = bool(runners & FIRST)
    on_second = bool(runners & SECOND)
    on_third = bool(runners & THIRD)

    runs = 0
    new_runners = 0

    if outcome == OutcomeType.HOMERUN:
        runs = 1 + _count_runners(runners)
        new_runners = 0

    elif outcome == OutcomeType.TRIPLE:
        runs = _count_runners(runners)
        new_runners = THIRD

    elif outcome == OutcomeType.DOUBLE:
        if on_first:
            if rng.random() < advance_probability(FIRST_ON_DOUBLE, outs):
                runs += 1
            else:
                new_runners |= THIRD

        if on_second:
            if rng.random() < advance_probability(SECOND_ON_DOUBLE, outs):
                runs += 1
            else:
                new_runners |= THIRD  # rare

        if on_third:
            runs += 1

        new_runners |= SECOND

    elif outcome == OutcomeType.SINGLE:
        if on_first:
            if rng.random() < advance_probability(FIRST_ON_SINGLE_TO_THIRD, outs):
                new_runners |= THIRD
            else:
                new_runners |= SECOND

        if on_second:
            if rng.random() < advance_probability(SECOND_ON_SINGLE, outs):
                runs += 1
            else:
                new_runners |= THIRD

        if on_third:
            if rng.random() < advance_probability(THIRD_ON_SINGLE, outs):
                runs += 1
            else:
                new_runners |= THIRD  # rare

        new_runners |= FIRST

    elif outcome == OutcomeType.WALK:
        runs, new_runners = _force_advance(runners)

    elif outcome == OutcomeType.OUT:
        if on_third and outs < 2:
            if rng.random() < advance_probability(THIRD_ON_OUT, outs):
                runs += 1
            else:
                new_runners |= THIRD
        elif on_third:
            new_runners |= THIRD

        # Trailing runners hold
        if on_second:
            new_runners |= SECOND
        if on_first:
            new_runners |= FIRST

    else:
        # Strikeout
        new_runners = runners

    return AdvanceResult(runs=runs, new_runners=new_runners)


def _force_advance(runners: int) -> tuple[int, int]:
    """Walk / hit-by-pitch: only forced runners move."""
    if not runners & FIRST:
        return 0, runners | FIRST
    if not runners & SECOND:
        return 0, runners | SECOND
    if not runners & THIRD:
        return 0, BASES_LOADED
    return 1, BASES_LOADED


_BASE_NAMES = ((FIRST, "1st"), (SECOND, "2nd"), (THIRD, "3rd"))


def format_runners(runners: int) -> str:
    """Human-readable occupancy, e.g. 'bases empty', '1st & 3rd', 'bases loaded'."""
    if runners & BASES_LOADED == 0:
        return "bases empty"
    if runners & BASES_LOADED == BASES_LOADED:
        return "bases loaded"
    return " & ".join(name for bit, name in _BASE_NAMES if runners & bit)
