"""Batting-order optimization.

Hill-climbing and random-restart search, using the Monte Carlo driver as a
black-box fitness function.
"""

from lineupsim.optimization.optimizer import (
    LineupOptimizer,
    OptimizationIteration,
    OptimizationProgress,
    OptimizationProgressCallback,
    OptimizationResult,
    OptimizerBusyError,
    RandomOptimizer,
    create_optimizer,
    improvement_percent,
)

__all__ = [
    "LineupOptimizer",
    "RandomOptimizer",
    "create_optimizer",
    "OptimizationResult",
    "OptimizationIteration",
    "OptimizationProgress",
    "OptimizationProgressCallback",
    "OptimizerBusyError",
    "improvement_percent",
]
