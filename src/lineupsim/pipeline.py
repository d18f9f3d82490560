"""Analysis orchestration: one request end-to-end.

Steps:
    1. Simulate the lineup as given (base result)
    2. Optionally simulate one game with full play-by-play
    3. Optionally search for a better batting order

An optimization failure never discards the base result: it is logged and
the base result is returned without improvement fields.
"""

import logging
from dataclasses import dataclass
from typing import Sequence

import numpy as np

from lineupsim.models.player import PlayerRecord
from lineupsim.optimization.optimizer import (
    OptimizationProgressCallback,
    OptimizationResult,
    create_optimizer,
)
from lineupsim.simulation.engine import (
    ProgressCallback,
    SimulationParams,
    SimulationResult,
    run_simulation,
)
from lineupsim.simulation.game import GameDetail, make_rng, simulate_detailed_game, validate_lineup
from lineupsim.simulation.session import SimulationSession

logger = logging.getLogger(__name__)


@dataclass
class AnalysisResult:
    """Everything produced for one analysis request."""

    base: SimulationResult
    optimization: OptimizationResult | None = None
    detailed_game: GameDetail | None = None


async def run_analysis(
    lineup: Sequence[PlayerRecord],
    params: SimulationParams,
    session: SimulationSession | None = None,
    rng: np.random.Generator | None = None,
    on_progress: ProgressCallback | None = None,
    on_optimization_progress: OptimizationProgressCallback | None = None,
) -> AnalysisResult:
    """Run the base batch plus whatever the parameters request.

    Args:
        lineup: 9 players in batting order
        params: Validated request parameters
        session: Worker session (None = run inline on this loop)
        rng: Random source for inline work (None = generator from config seed)
        on_progress: Progress callback for the base batch
        on_optimization_progress: Progress callback for the optimizer

    Returns:
        AnalysisResult

    Raises:
        ValueError: If the lineup is not 9 players
        Exception: Failures of the base batch propagate
    """
    validate_lineup(lineup)
    rng = rng or make_rng()

    logger.info(
        f"Starting analysis: games={params.game_count}, "
        f"optimization={params.optimization_method}, detailed={params.detailed_single_game}"
    )

    if session is not None:
        base = await session.run_with_fallback(lineup, params.game_count, on_progress=on_progress)
    else:
        base = await run_simulation(lineup, params.game_count, rng=rng, on_progress=on_progress)

    result = AnalysisResult(base=base)

    if params.detailed_single_game:
        result.detailed_game = simulate_detailed_game(lineup, rng)

    if params.optimization_method == "none":
        return result

    optimizer = create_optimizer(params.optimization_method, session=session, rng=rng)
    try:
        optimization = await optimizer.optimize_lineup(lineup, params, on_optimization_progress)
    except Exception as e:
        logger.warning(f"Optimization failed, reporting base result only: {e}")
        return result

    base.improvement_percent = optimization.improvement_percent
    result.optimization = optimization
    return result
