"""Unit tests for the lineup optimizers."""

import asyncio
from collections import Counter
from unittest.mock import AsyncMock, MagicMock

import numpy as np
import pytest

from lineupsim.config.settings import SimConfig
from lineupsim.optimization.optimizer import (
    LineupOptimizer,
    OptimizerBusyError,
    RandomOptimizer,
    create_optimizer,
    improvement_percent,
)
from lineupsim.simulation.engine import SimulationParams
from lineupsim.simulation.session import SimulationSession


def scripted_evaluator(*scores: float) -> AsyncMock:
    """Evaluator stub returning results with the given average scores in order."""
    return AsyncMock(side_effect=[MagicMock(average_score=s) for s in scores])


def names(lineup) -> list[str]:
    return [p.name for p in lineup]


# ========== Hill climbing ==========


@pytest.mark.asyncio
async def test_early_stop_after_ten_non_improving(mixed_lineup, rng):
    """Ten consecutive non-improving trials stop the search at iteration 10."""
    evaluator = scripted_evaluator(5.0, *([4.0] * 50))
    optimizer = LineupOptimizer(evaluator=evaluator, rng=rng)

    result = await optimizer.optimize_lineup(mixed_lineup, SimulationParams(max_iterations=100))

    assert result.iterations == 10
    assert len(result.iteration_history) == 11
    assert result.optimized_lineup == tuple(mixed_lineup)
    assert result.optimized_score == result.original_score == 5.0
    assert result.improvement_percent == 0.0
    assert evaluator.await_count == 11


@pytest.mark.asyncio
async def test_improvement_resets_patience(mixed_lineup, rng):
    scores = [5.0] + [4.0] * 9 + [6.0] + [4.0] * 10
    optimizer = LineupOptimizer(evaluator=scripted_evaluator(*scores), rng=rng)

    result = await optimizer.optimize_lineup(mixed_lineup, SimulationParams(max_iterations=100))

    assert result.iterations == 20
    assert result.optimized_score == 6.0
    assert result.optimized_lineup == result.iteration_history[10].lineup
    assert result.improvement_percent == pytest.approx(20.0)


@pytest.mark.asyncio
async def test_best_score_non_decreasing(mixed_lineup, rng):
    draws = np.random.default_rng(1).uniform(3.0, 6.0, size=41)
    optimizer = LineupOptimizer(evaluator=scripted_evaluator(*draws), rng=rng)

    result = await optimizer.optimize_lineup(mixed_lineup, SimulationParams(max_iterations=40))

    best = [trial.best_score for trial in result.iteration_history]
    assert all(a <= b for a, b in zip(best, best[1:]))
    assert result.optimized_score == best[-1]

    evaluated = [t.average_score for t in result.iteration_history]
    assert result.optimized_score == max(evaluated)


@pytest.mark.asyncio
async def test_neighbors_generated_from_incumbent(mixed_lineup, rng):
    """Rejected neighbors are discarded; each trial swaps two slots of the last accepted lineup."""
    draws = [5.0, 4.0, 5.5, 4.0, 4.0, 6.0, 4.0, 4.0, 4.0]
    optimizer = LineupOptimizer(evaluator=scripted_evaluator(*draws), rng=rng)

    result = await optimizer.optimize_lineup(mixed_lineup, SimulationParams(max_iterations=8))

    incumbent = result.iteration_history[0].lineup
    for trial in result.iteration_history[1:]:
        i, j = trial.swap_positions
        expected = list(incumbent)
        expected[i], expected[j] = expected[j], expected[i]
        assert list(trial.lineup) == expected

        if trial.improvement > 0:
            incumbent = trial.lineup

    assert result.optimized_lineup == incumbent


@pytest.mark.asyncio
async def test_remote_swap_every_fifth_iteration(mixed_lineup, rng):
    """Every 5th trial swaps slots at least 3 apart; others swap adjacent slots."""
    increasing = [float(i) for i in range(31)]
    optimizer = LineupOptimizer(evaluator=scripted_evaluator(*increasing), rng=rng)

    result = await optimizer.optimize_lineup(mixed_lineup, SimulationParams(max_iterations=30))

    for trial in result.iteration_history[1:]:
        i, j = trial.swap_positions
        if trial.iteration % 5 == 0:
            assert abs(i - j) >= 3, f"Iteration {trial.iteration} remote swap {i},{j}"
        else:
            assert j == i + 1 and 0 <= i <= 7, f"Iteration {trial.iteration} adjacent swap {i},{j}"


@pytest.mark.parametrize("min_distance", [4, 5, 6, 7, 8])
def test_remote_swap_with_large_min_distance(mixed_lineup, min_distance):
    """Distances beyond the middle slot's reach still produce a swap."""
    config = SimConfig(remote_swap_min_distance=min_distance)
    optimizer = LineupOptimizer(evaluator=AsyncMock(), rng=np.random.default_rng(1), config=config)
    lineup = tuple(mixed_lineup)

    for _ in range(200):
        swapped, (i, j) = optimizer.generate_neighbor(lineup, 5)
        assert abs(i - j) >= min_distance
        assert 0 <= i < 9 and 0 <= j < 9
        assert swapped[i] == lineup[j] and swapped[j] == lineup[i]


@pytest.mark.asyncio
async def test_evaluation_game_count_capped(mixed_lineup, rng):
    evaluator = scripted_evaluator(*([4.0] * 20))
    optimizer = LineupOptimizer(evaluator=evaluator, rng=rng)

    await optimizer.optimize_lineup(mixed_lineup, SimulationParams(game_count=5000, max_iterations=3))
    assert {call.args[1] for call in evaluator.await_args_list} == {1000}

    evaluator = scripted_evaluator(*([4.0] * 20))
    optimizer = LineupOptimizer(evaluator=evaluator, rng=rng)

    await optimizer.optimize_lineup(mixed_lineup, SimulationParams(game_count=200, max_iterations=3))
    assert {call.args[1] for call in evaluator.await_args_list} == {200}


@pytest.mark.asyncio
async def test_progress_events(mixed_lineup, rng):
    events = []
    scores = [4.0, 5.0, 3.0, 3.0]
    optimizer = LineupOptimizer(evaluator=scripted_evaluator(*scores), rng=rng)

    await optimizer.optimize_lineup(
        mixed_lineup, SimulationParams(max_iterations=3), on_progress=events.append
    )

    assert [e.current_iteration for e in events] == [1, 2, 3]
    assert [e.current_score for e in events] == [5.0, 3.0, 3.0]
    assert [e.best_score for e in events] == [5.0, 5.0, 5.0]
    assert [e.no_improvement_count for e in events] == [0, 1, 2]
    assert events[-1].improvement_percent == pytest.approx(25.0)
    assert all(e.total_iterations == 3 for e in events)


# ========== Failure semantics ==========


@pytest.mark.asyncio
async def test_concurrent_run_is_busy(mixed_lineup, rng):
    gate = asyncio.Event()

    async def slow_evaluator(lineup, games):
        await gate.wait()
        return MagicMock(average_score=4.0)

    optimizer = LineupOptimizer(evaluator=slow_evaluator, rng=rng)
    params = SimulationParams(max_iterations=2)

    first = asyncio.create_task(optimizer.optimize_lineup(mixed_lineup, params))
    await asyncio.sleep(0)
    assert optimizer.is_optimizing

    with pytest.raises(OptimizerBusyError):
        await optimizer.optimize_lineup(mixed_lineup, params)

    gate.set()
    result = await first
    assert result.iterations == 2
    assert not optimizer.is_optimizing


@pytest.mark.asyncio
async def test_evaluation_failure_aborts(mixed_lineup, rng):
    evaluator = AsyncMock(
        side_effect=[MagicMock(average_score=4.0), MagicMock(average_score=4.5), RuntimeError("driver crashed")]
    )
    optimizer = LineupOptimizer(evaluator=evaluator, rng=rng)

    with pytest.raises(RuntimeError, match="driver crashed"):
        await optimizer.optimize_lineup(mixed_lineup, SimulationParams(max_iterations=10))

    assert not optimizer.is_optimizing


@pytest.mark.asyncio
async def test_short_lineup_rejected(mixed_lineup, rng):
    optimizer = LineupOptimizer(evaluator=scripted_evaluator(1.0), rng=rng)

    with pytest.raises(ValueError):
        await optimizer.optimize_lineup(mixed_lineup[:7], SimulationParams())

    assert not optimizer.is_optimizing


# ========== Random optimizer ==========


@pytest.mark.asyncio
async def test_random_optimizer_shuffles_original(mixed_lineup, rng):
    scores = [5.0, 4.0, 6.0] + [4.0] * 12
    optimizer = RandomOptimizer(evaluator=scripted_evaluator(*scores), rng=rng)

    result = await optimizer.optimize_lineup(mixed_lineup, SimulationParams(max_iterations=14))

    assert result.iterations == 14
    assert len(result.iteration_history) == 15
    assert result.optimized_score == 6.0
    assert result.optimized_lineup == result.iteration_history[2].lineup

    for trial in result.iteration_history[1:]:
        assert Counter(names(trial.lineup)) == Counter(names(mixed_lineup))
        assert trial.swap_positions is None


@pytest.mark.asyncio
async def test_random_optimizer_never_stops_early(mixed_lineup, rng):
    optimizer = RandomOptimizer(evaluator=scripted_evaluator(*([4.0] * 31)), rng=rng)

    result = await optimizer.optimize_lineup(mixed_lineup, SimulationParams(max_iterations=30))

    assert result.iterations == 30


# ========== Integration with the driver ==========


@pytest.mark.asyncio
async def test_optimizer_with_real_simulation(mixed_lineup, rng):
    optimizer = LineupOptimizer(rng=rng)

    result = await optimizer.optimize_lineup(
        mixed_lineup, SimulationParams(game_count=40, max_iterations=6)
    )

    assert 1 <= result.iterations <= 6
    assert sorted(names(result.optimized_lineup)) == sorted(names(mixed_lineup))
    assert result.optimized_score >= result.original_score


@pytest.mark.asyncio
async def test_optimizer_with_session(mixed_lineup, rng):
    async with SimulationSession(seed=17) as session:
        optimizer = LineupOptimizer(session=session, rng=rng)
        result = await optimizer.optimize_lineup(
            mixed_lineup, SimulationParams(game_count=40, max_iterations=4)
        )

    assert len(result.iteration_history) == result.iterations + 1


# ========== Factory and helpers ==========


def test_create_optimizer():
    assert isinstance(create_optimizer("heuristic"), LineupOptimizer)
    assert isinstance(create_optimizer("random"), RandomOptimizer)

    with pytest.raises(ValueError, match="Unknown optimization method"):
        create_optimizer("annealing")


def test_improvement_percent():
    assert improvement_percent(5.5, 5.0) == pytest.approx(10.0)
    assert improvement_percent(4.5, 5.0) == pytest.approx(-10.0)
    assert improvement_percent(1.0, 0.0) == 0.0
