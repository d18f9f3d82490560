"""Batting-order search using the Monte Carlo driver as fitness function.

Implements:
- LineupOptimizer: hill climbing over single swaps (adjacent, or a remote
  swap every Nth iteration to escape local optima), early stop after N
  consecutive non-improving trials
- RandomOptimizer: independent random shuffles of the original order
- create_optimizer() factory

Fitness evaluations are strictly sequential and capped at
`optimizer_eval_game_cap` games each.
"""

import logging
import time
from dataclasses import dataclass, field
from typing import Awaitable, Callable, Sequence

import numpy as np

from lineupsim.config.settings import SimConfig, get_config
from lineupsim.models.player import PlayerRecord
from lineupsim.simulation.engine import SimulationParams, SimulationResult, run_simulation
from lineupsim.simulation.game import LINEUP_SIZE, make_rng, validate_lineup
from lineupsim.simulation.session import SimulationSession

logger = logging.getLogger(__name__)

Evaluator = Callable[[Sequence[PlayerRecord], int], Awaitable[SimulationResult]]


class OptimizerBusyError(RuntimeError):
    """An optimization is already running on this optimizer instance."""


@dataclass(frozen=True)
class OptimizationIteration:
    """One evaluated trial. Iteration 0 is the unmodified input lineup."""

    iteration: int
    lineup: tuple[PlayerRecord, ...]
    average_score: float
    improvement: float  # signed, relative to the best score before this trial
    best_score: float  # best score known after this trial
    swap_positions: tuple[int, int] | None = None


@dataclass(frozen=True)
class OptimizationProgress:
    """Progress event emitted after every trial."""

    current_iteration: int
    total_iterations: int
    best_score: float
    current_score: float
    improvement_percent: float  # best vs original
    no_improvement_count: int


OptimizationProgressCallback = Callable[[OptimizationProgress], None]


@dataclass
class OptimizationResult:
    """Outcome of an optimization run."""

    original_lineup: tuple[PlayerRecord, ...]
    optimized_lineup: tuple[PlayerRecord, ...]
    original_score: float
    optimized_score: float
    improvement_percent: float
    iterations: int
    execution_time_ms: float
    iteration_history: list[OptimizationIteration] = field(default_factory=list)


def improvement_percent(best: float, original: float) -> float:
    """(best - original) / original * 100, or 0.0 when the original scored nothing."""
    if original == 0:
        return 0.0
    return (best - original) / original * 100


class BaseOptimizer:
    """Shared re-entrancy guard, evaluation and bookkeeping."""

    method = "base"

    def __init__(
        self,
        session: SimulationSession | None = None,
        evaluator: Evaluator | None = None,
        rng: np.random.Generator | None = None,
        config: SimConfig | None = None,
    ):
        self.config = config or get_config()
        self.session = session
        self.rng = rng or make_rng()
        self._evaluator = evaluator
        self._is_optimizing = False

    @property
    def is_optimizing(self) -> bool:
        return self._is_optimizing

    async def optimize_lineup(
        self,
        original_lineup: Sequence[PlayerRecord],
        params: SimulationParams,
        on_progress: OptimizationProgressCallback | None = None,
    ) -> OptimizationResult:
        """Search for a better batting order.

        Args:
            original_lineup: 9 players in their current order
            params: Simulation parameters (game_count, max_iterations)
            on_progress: Callback invoked after every trial

        Returns:
            OptimizationResult with the full trial history

        Raises:
            OptimizerBusyError: If this optimizer is already running
            ValueError: If the lineup is not 9 players
            Exception: Any driver failure propagates unchanged
        """
        if self._is_optimizing:
            raise OptimizerBusyError("Optimization already in progress")

        validate_lineup(original_lineup)
        self._is_optimizing = True
        logger.info(
            f"Starting {self.method} optimization: max_iterations={params.max_iterations}, "
            f"eval_games={self._eval_games(params.game_count)}"
        )

        try:
            return await self._optimize(tuple(original_lineup), params, on_progress)
        finally:
            self._is_optimizing = False

    async def _optimize(
        self,
        original_lineup: tuple[PlayerRecord, ...],
        params: SimulationParams,
        on_progress: OptimizationProgressCallback | None,
    ) -> OptimizationResult:
        raise NotImplementedError

    def _eval_games(self, game_count: int) -> int:
        return min(game_count, self.config.optimizer_eval_game_cap)

    async def evaluate_lineup(self, lineup: Sequence[PlayerRecord], game_count: int) -> float:
        """Average score of a lineup over a reduced batch."""
        games = self._eval_games(game_count)

        if self._evaluator is not None:
            result = await self._evaluator(lineup, games)
        elif self.session is not None:
            result = await self.session.run_with_fallback(lineup, games, collect_details=False)
        else:
            result = await run_simulation(lineup, games, rng=self.rng, collect_details=False)

        return result.average_score

    @staticmethod
    def _emit(
        on_progress: OptimizationProgressCallback | None,
        iteration: int,
        params: SimulationParams,
        best_score: float,
        current_score: float,
        original_score: float,
        no_improvement_count: int,
    ) -> None:
        if on_progress is None:
            return
        on_progress(
            OptimizationProgress(
                current_iteration=iteration,
                total_iterations=params.max_iterations,
                best_score=best_score,
                current_score=current_score,
                improvement_percent=improvement_percent(best_score, original_score),
                no_improvement_count=no_improvement_count,
            )
        )


class LineupOptimizer(BaseOptimizer):
    """Hill-climbing search over single swaps of the incumbent lineup."""

    method = "heuristic"

    async def _optimize(
        self,
        original_lineup: tuple[PlayerRecord, ...],
        params: SimulationParams,
        on_progress: OptimizationProgressCallback | None,
    ) -> OptimizationResult:
        start = time.perf_counter()

        original_score = await self.evaluate_lineup(original_lineup, params.game_count)

        current_lineup = original_lineup
        best_lineup = original_lineup
        best_score = original_score
        no_improvement_count = 0

        history = [
            OptimizationIteration(
                iteration=0,
                lineup=original_lineup,
                average_score=original_score,
                improvement=0.0,
                best_score=original_score,
            )
        ]

        for iteration in range(1, params.max_iterations + 1):
            new_lineup, swap = self.generate_neighbor(current_lineup, iteration)
            new_score = await self.evaluate_lineup(new_lineup, params.game_count)

            improvement = new_score - best_score
            if improvement > 0:
                current_lineup = new_lineup
                best_lineup = new_lineup
                best_score = new_score
                no_improvement_count = 0
            else:
                no_improvement_count += 1

            history.append(
                OptimizationIteration(
                    iteration=iteration,
                    lineup=new_lineup,
                    average_score=new_score,
                    improvement=improvement,
                    best_score=best_score,
                    swap_positions=swap,
                )
            )

            self._emit(
                on_progress,
                iteration,
                params,
                best_score,
                new_score,
                original_score,
                no_improvement_count,
            )

            if no_improvement_count >= self.config.optimizer_patience:
                logger.info(
                    f"Optimization stopped early at iteration {iteration} "
                    f"(no improvement for {no_improvement_count} iterations)"
                )
                break

        execution_time_ms = (time.perf_counter() - start) * 1000.0
        pct = improvement_percent(best_score, original_score)
        logger.info(
            f"Heuristic optimization complete: {original_score:.3f} -> {best_score:.3f} "
            f"({pct:+.2f}%) in {len(history) - 1} iterations"
        )

        return OptimizationResult(
            original_lineup=original_lineup,
            optimized_lineup=best_lineup,
            original_score=original_score,
            optimized_score=best_score,
            improvement_percent=pct,
            iterations=len(history) - 1,
            execution_time_ms=execution_time_ms,
            iteration_history=history,
        )

    def generate_neighbor(
        self, lineup: tuple[PlayerRecord, ...], iteration: int
    ) -> tuple[tuple[PlayerRecord, ...], tuple[int, int]]:
        """Swap two slots: a remote pair every Nth iteration, else an adjacent pair."""
        if iteration % self.config.remote_swap_every == 0:
            min_distance = self.config.remote_swap_min_distance
            # Middle slots have no partner far enough away for large distances
            anchors = [
                p for p in range(LINEUP_SIZE)
                if p <= LINEUP_SIZE - 1 - min_distance or p >= min_distance
            ]
            pos1 = anchors[int(self.rng.integers(len(anchors)))]
            partners = [q for q in range(LINEUP_SIZE) if abs(q - pos1) >= min_distance]
            pos2 = partners[int(self.rng.integers(len(partners)))]
        else:
            pos1 = int(self.rng.integers(LINEUP_SIZE - 1))
            pos2 = pos1 + 1

        swapped = list(lineup)
        swapped[pos1], swapped[pos2] = swapped[pos2], swapped[pos1]
        return tuple(swapped), (pos1, pos2)


class RandomOptimizer(BaseOptimizer):
    """Baseline: evaluate random shuffles of the original order, keep the best."""

    method = "random"

    async def _optimize(
        self,
        original_lineup: tuple[PlayerRecord, ...],
        params: SimulationParams,
        on_progress: OptimizationProgressCallback | None,
    ) -> OptimizationResult:
        start = time.perf_counter()

        original_score = await self.evaluate_lineup(original_lineup, params.game_count)
        best_lineup = original_lineup
        best_score = original_score

        history = [
            OptimizationIteration(
                iteration=0,
                lineup=original_lineup,
                average_score=original_score,
                improvement=0.0,
                best_score=original_score,
            )
        ]

        for iteration in range(1, params.max_iterations + 1):
            order = self.rng.permutation(len(original_lineup))
            new_lineup = tuple(original_lineup[i] for i in order)
            new_score = await self.evaluate_lineup(new_lineup, params.game_count)

            improvement = new_score - best_score
            if improvement > 0:
                best_lineup = new_lineup
                best_score = new_score

            history.append(
                OptimizationIteration(
                    iteration=iteration,
                    lineup=new_lineup,
                    average_score=new_score,
                    improvement=improvement,
                    best_score=best_score,
                )
            )

            self._emit(on_progress, iteration, params, best_score, new_score, original_score, 0)

        execution_time_ms = (time.perf_counter() - start) * 1000.0
        pct = improvement_percent(best_score, original_score)
        logger.info(
            f"Random optimization complete: {original_score:.3f} -> {best_score:.3f} ({pct:+.2f}%)"
        )

        return OptimizationResult(
            original_lineup=original_lineup,
            optimized_lineup=best_lineup,
            original_score=original_score,
            optimized_score=best_score,
            improvement_percent=pct,
            iterations=params.max_iterations,
            execution_time_ms=execution_time_ms,
            iteration_history=history,
        )


def create_optimizer(method: str, **kwargs) -> BaseOptimizer:
    """Build an optimizer for 'heuristic' or 'random'."""
    if method == "heuristic":
        return LineupOptimizer(**kwargs)
    if method == "random":
        return RandomOptimizer(**kwargs)
    raise ValueError(f"Unknown optimization method: {method}")
