"""Monte Carlo driver for batting-order run expectancy.

Implements:
- Per-batch precomputation of player outcome tables (shared read-only)
- Game loop with ordered progress events (0% first, then every N games)
- Cooperative yield to the event loop every `yield_every_games` games
- Aggregate statistics: mean, population variance, sd, min, max
"""

import asyncio
import logging
import time
from dataclasses import dataclass
from typing import Callable, Literal, Sequence

import numpy as np
from pydantic import BaseModel, Field

from lineupsim.config.settings import SimConfig, get_config
from lineupsim.models.player import PlayerRecord
from lineupsim.simulation.game import (
    DetailedGame,
    GameDetail,
    build_lineup_tables,
    make_rng,
    simulate_game,
)

logger = logging.getLogger(__name__)

MAX_GAME_COUNT = 10000


class SimulationParams(BaseModel):
    """Request parameters for a simulation run."""

    game_count: int = Field(default=1000, ge=1, le=MAX_GAME_COUNT)
    optimization_method: Literal["none", "random", "heuristic"] = "none"
    max_iterations: int = Field(default=100, ge=1, le=1000)
    detailed_single_game: bool = False


@dataclass(frozen=True)
class ProgressUpdate:
    """Progress event for a running batch."""

    completed_games: int
    total_games: int
    fraction_done: float  # 0.0-1.0
    running_average: float


ProgressCallback = Callable[[ProgressUpdate], None]


@dataclass
class SimulationResult:
    """Aggregate output of a simulation batch."""

    average_score: float
    variance: float  # population variance
    standard_deviation: float
    min_score: int
    max_score: int
    total_games: int
    scores: np.ndarray  # shape (total_games,)
    execution_time_ms: float
    improvement_percent: float | None = None
    detail_records: list[GameDetail] | None = None


def progress_interval(game_count: int, config: SimConfig | None = None) -> int:
    """Games between progress events: game_count // 100 clamped to [min, max]."""
    config = config or get_config()
    return max(config.progress_min_interval, min(config.progress_max_interval, game_count // 100))


class MonteCarloBatch:
    """One batch of simulated games, advanced a game at a time.

    The sync and async drivers share this stepper so both paths draw from the
    same model and randomness contract.
    """

    def __init__(
        self,
        lineup: Sequence[PlayerRecord],
        game_count: int,
        rng: np.random.Generator | None = None,
        collect_details: bool | None = None,
        on_progress: ProgressCallback | None = None,
        config: SimConfig | None = None,
    ):
        self.config = config or get_config()

        if game_count < 1 or game_count > MAX_GAME_COUNT:
            raise ValueError(f"game_count must be in [1, {MAX_GAME_COUNT}], got {game_count}")

        self.tables = build_lineup_tables(lineup)
        self.game_count = game_count
        self.rng = rng or make_rng()
        self.on_progress = on_progress

        if collect_details is None:
            collect_details = game_count <= self.config.detail_game_threshold
        self.detail_limit = self.config.detail_game_threshold if collect_details else 0

        self.interval = progress_interval(game_count, self.config)
        self.scores = np.zeros(game_count, dtype=np.int64)
        self.details: list[GameDetail] = []
        self.completed = 0
        self._total_runs = 0
        self._last_reported = -1
        self._start = time.perf_counter()

    @property
    def done(self) -> bool:
        return self.completed >= self.game_count

    def start(self) -> None:
        """Reset the clock and emit the 0% progress event."""
        self._start = time.perf_counter()
        logger.info(f"Starting simulation batch: {self.game_count} games")
        self._emit_progress()

    def step(self) -> int:
        """Simulate the next game and return its score."""
        detailed = len(self.details) < self.detail_limit
        outcome = simulate_game(self.tables, self.rng, detailed=detailed)

        if isinstance(outcome, DetailedGame):
            self.details.append(outcome.detail)

        score = outcome.runs
        self.scores[self.completed] = score
        self.completed += 1
        self._total_runs += score

        if self.completed % self.interval == 0:
            self._emit_progress()
        return score

    def finish(self) -> SimulationResult:
        """Aggregate the completed batch."""
        if not self.done:
            raise RuntimeError(
                f"Batch incomplete: {self.completed}/{self.game_count} games simulated"
            )

        if self._last_reported != self.completed:
            self._emit_progress()

        execution_time_ms = (time.perf_counter() - self._start) * 1000.0
        average = float(np.mean(self.scores))
        variance = float(np.mean((self.scores - average) ** 2))

        result = SimulationResult(
            average_score=average,
            variance=variance,
            standard_deviation=float(np.sqrt(variance)),
            min_score=int(self.scores.min()),
            max_score=int(self.scores.max()),
            total_games=self.game_count,
            scores=self.scores,
            execution_time_ms=execution_time_ms,
            detail_records=self.details if self.detail_limit else None,
        )

        logger.info(
            f"Simulation batch complete: {self.game_count} games, "
            f"avg={average:.3f}, sd={result.standard_deviation:.3f}, "
            f"{execution_time_ms:.0f}ms"
        )
        return result

    def _emit_progress(self) -> None:
        self._last_reported = self.completed
        running_average = self._total_runs / self.completed if self.completed else 0.0

        logger.debug(
            f"Simulation progress: {self.completed}/{self.game_count} games, "
            f"running avg={running_average:.3f}"
        )

        if self.on_progress is not None:
            self.on_progress(
                ProgressUpdate(
                    completed_games=self.completed,
                    total_games=self.game_count,
                    fraction_done=self.completed / self.game_count,
                    running_average=running_average,
                )
            )


def run_simulation_sync(
    lineup: Sequence[PlayerRecord],
    game_count: int,
    rng: np.random.Generator | None = None,
    collect_details: bool | None = None,
    on_progress: ProgressCallback | None = None,
) -> SimulationResult:
    """Run a batch to completion on the calling thread without yielding.

    Used by worker threads, where there is no event loop to starve.
    """
    batch = MonteCarloBatch(lineup, game_count, rng, collect_details, on_progress)
    batch.start()
    while not batch.done:
        batch.step()
    return batch.finish()


async def run_simulation(
    lineup: Sequence[PlayerRecord],
    game_count: int,
    rng: np.random.Generator | None = None,
    collect_details: bool | None = None,
    on_progress: ProgressCallback | None = None,
) -> SimulationResult:
    """Run a batch on the event loop, yielding control periodically.

    Args:
        lineup: Exactly 9 player records, in batting order
        game_count: Number of games to simulate (1-10000)
        rng: Random source (None = generator from config seed)
        collect_details: Record play-by-play per game (None = auto below threshold)
        on_progress: Callback for ordered progress events

    Returns:
        SimulationResult

    Raises:
        ValueError: If the lineup is not 9 players or game_count is out of range
    """
    batch = MonteCarloBatch(lineup, game_count, rng, collect_details, on_progress)
    yield_every = batch.config.yield_every_games

    batch.start()
    while not batch.done:
        batch.step()
        if batch.completed % yield_every == 0 and not batch.done:
            await asyncio.sleep(0)
    return batch.finish()
