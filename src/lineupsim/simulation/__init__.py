"""Monte Carlo simulation of batting-order run expectancy.

This module provides the base-advancement model, the inning/game state
machine, the batch driver and the worker-backed session.
Consumes PlayerRecord lineups, produces SimulationResult and GameDetail.
"""

from lineupsim.simulation.advancement import AdvanceResult, advance_runners, format_runners
from lineupsim.simulation.engine import (
    MonteCarloBatch,
    ProgressUpdate,
    SimulationParams,
    SimulationResult,
    run_simulation,
    run_simulation_sync,
)
from lineupsim.simulation.game import (
    AtBatRecord,
    DetailedGame,
    GameDetail,
    GameOutcome,
    InningDetail,
    Score,
    simulate_detailed_game,
    simulate_game,
    simulate_half_inning,
)
from lineupsim.simulation.session import (
    SimulationBusyError,
    SimulationSession,
    SimulationSessionClosedError,
)
from lineupsim.simulation.statistics import ScoreSummary, summarize

__all__ = [
    "AdvanceResult",
    "advance_runners",
    "format_runners",
    "MonteCarloBatch",
    "ProgressUpdate",
    "SimulationParams",
    "SimulationResult",
    "run_simulation",
    "run_simulation_sync",
    "AtBatRecord",
    "InningDetail",
    "GameDetail",
    "GameOutcome",
    "Score",
    "DetailedGame",
    "simulate_half_inning",
    "simulate_game",
    "simulate_detailed_game",
    "SimulationSession",
    "SimulationBusyError",
    "SimulationSessionClosedError",
    "ScoreSummary",
    "summarize",
]
