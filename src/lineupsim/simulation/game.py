"""Half-inning and full-game state machine.

A half-inning starts with empty bases and 0 outs, sends batters up from the
lineup cursor until the third out, and hands the cursor to the next inning.
A game is exactly 9 half-innings: no extra innings, no walk-off.
"""

import time
from dataclasses import dataclass, field
from typing import Sequence

import numpy as np

from lineupsim.config.settings import get_config
from lineupsim.models.outcomes import (
    OUTCOME_LABELS,
    OutcomeType,
    PlayerTables,
    build_player_tables,
)
from lineupsim.models.player import PlayerRecord
from lineupsim.simulation.advancement import advance_runners, format_runners

LINEUP_SIZE = 9
INNINGS_PER_GAME = 9
OUTS_PER_INNING = 3


@dataclass(frozen=True)
class AtBatRecord:
    """One plate appearance in a detailed game."""

    inning: int  # 1-9
    outs_before: int  # 0-2
    batter: PlayerRecord
    batter_position: int  # lineup slot, 1-9
    outcome: OutcomeType
    label: str
    runs: int  # runs scored on this at-bat
    runners_after: str


@dataclass(frozen=True)
class InningDetail:
    """Ordered at-bats of one half-inning."""

    inning: int
    at_bats: tuple[AtBatRecord, ...]
    runs: int
    total_outs: int


@dataclass(frozen=True)
class GameDetail:
    """Play-by-play of one simulated game."""

    innings: tuple[InningDetail, ...]
    final_score: int
    total_at_bats: int
    game_time_ms: float


@dataclass(frozen=True)
class Score:
    """Game outcome when detail collection is off."""

    runs: int


@dataclass(frozen=True)
class DetailedGame:
    """Game outcome with play-by-play attached."""

    detail: GameDetail

    @property
    def runs(self) -> int:
        return self.detail.final_score


GameOutcome = Score | DetailedGame


@dataclass(frozen=True)
class InningResult:
    """Result of one half-inning."""

    runs: int
    next_batter: int  # lineup cursor for the next inning
    outs: int
    at_bats: tuple[AtBatRecord, ...] = ()


@dataclass
class GameState:
    """Mutable state threaded through the innings of one game."""

    batter_index: int = 0
    runs: int = 0
    innings: list[InningDetail] = field(default_factory=list)
    total_at_bats: int = 0


def make_rng(seed: int | None = None) -> np.random.Generator:
    """Create a random generator, seeded from config when no seed is given."""
    if seed is None:
        seed = get_config().random_seed
    return np.random.default_rng(seed)


def validate_lineup(lineup: Sequence[PlayerRecord]) -> None:
    """Raise ValueError unless the lineup holds exactly 9 players."""
    if len(lineup) != LINEUP_SIZE:
        raise ValueError(f"Lineup must contain exactly {LINEUP_SIZE} players, got {len(lineup)}")


def build_lineup_tables(lineup: Sequence[PlayerRecord]) -> tuple[PlayerTables, ...]:
    """Precompute outcome and cumulative tables for every lineup slot.

    Raises:
        ValueError: If the lineup is not 9 players, or no batter can make an
            out (the half-inning would never end)
    """
    validate_lineup(lineup)
    tables = tuple(build_player_tables(player) for player in lineup)

    if not any(o.type.is_out and o.probability > 0 for t in tables for o in t.outcomes):
        raise ValueError("Lineup cannot record an out: every batter reaches base")
    return tables


def simulate_half_inning(
    tables: Sequence[PlayerTables],
    batter_index: int,
    rng: np.random.Generator,
    inning: int = 1,
    detailed: bool = False,
) -> InningResult:
    """Simulate one half-inning from the given lineup cursor.

    Args:
        tables: Per-slot outcome tables (9 entries)
        batter_index: Lineup cursor of the leadoff batter (0-8)
        rng: Random source
        inning: Inning number for detail records (1-9)
        detailed: Record every at-bat

    Returns:
        InningResult with runs, next cursor and outs (always 3)
    """
    runs = 0
    outs = 0
    runners = 0
    current = batter_index
    at_bats: list[AtBatRecord] = []

    while outs < OUTS_PER_INNING:
        slot = tables[current]
        outcome = slot.sample(rng).type
        outs_before = outs

        # Advancement sees the outs before this at-bat's out is applied
        advance = advance_runners(runners, outcome, outs_before, rng)
        if outcome.is_out:
            outs += 1

        runs += advance.runs
        runners = advance.new_runners

        if detailed:
            at_bats.append(
                AtBatRecord(
                    inning=inning,
                    outs_before=outs_before,
                    batter=slot.player,
                    batter_position=current + 1,
                    outcome=outcome,
                    label=OUTCOME_LABELS[outcome],
                    runs=advance.runs,
                    runners_after=format_runners(runners),
                )
            )

        current = (current + 1) % len(tables)

    return InningResult(runs=runs, next_batter=current, outs=outs, at_bats=tuple(at_bats))


def simulate_game(
    tables: Sequence[PlayerTables],
    rng: np.random.Generator,
    detailed: bool = False,
) -> GameOutcome:
    """Simulate a 9-inning game.

    Returns:
        Score when detailed is False, DetailedGame otherwise
    """
    start = time.perf_counter()
    state = GameState()

    for inning in range(1, INNINGS_PER_GAME + 1):
        result = simulate_half_inning(tables, state.batter_index, rng, inning, detailed)
        state.runs += result.runs
        state.batter_index = result.next_batter

        if detailed:
            state.total_at_bats += len(result.at_bats)
            state.innings.append(
                InningDetail(
                    inning=inning,
                    at_bats=result.at_bats,
                    runs=result.runs,
                    total_outs=result.outs,
                )
            )

    if not detailed:
        return Score(runs=state.runs)

    return DetailedGame(
        detail=GameDetail(
            innings=tuple(state.innings),
            final_score=state.runs,
            total_at_bats=state.total_at_bats,
            game_time_ms=(time.perf_counter() - start) * 1000.0,
        )
    )


def simulate_detailed_game(
    lineup: Sequence[PlayerRecord],
    rng: np.random.Generator | None = None,
) -> GameDetail:
    """Simulate one game with full play-by-play."""
    tables = build_lineup_tables(lineup)
    outcome = simulate_game(tables, rng or make_rng(), detailed=True)
    return outcome.detail
