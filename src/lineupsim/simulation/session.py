"""Caller-owned simulation session backed by a single worker thread.

A session runs at most one batch at a time on its worker. A second request
while one is in flight fails with SimulationBusyError, or runs inline on the
calling event loop via run_with_fallback(). Both paths use the same driver,
so results are statistically equivalent (not bit-identical).

Lifecycle: create, await run(), close(). Sessions are also sync and async
context managers.
"""

import asyncio
import functools
import logging
from concurrent.futures import Future, ThreadPoolExecutor
from typing import Sequence

import numpy as np

from lineupsim.config.settings import get_config
from lineupsim.models.player import PlayerRecord
from lineupsim.simulation.engine import (
    ProgressCallback,
    ProgressUpdate,
    SimulationResult,
    run_simulation,
    run_simulation_sync,
)

logger = logging.getLogger(__name__)


class SimulationBusyError(RuntimeError):
    """A batch is already running on this session."""


class SimulationSessionClosedError(RuntimeError):
    """The session was used after close()."""


class SimulationSession:
    """Explicit handle owning one background simulation worker."""

    def __init__(self, seed: int | None = None):
        if seed is None:
            seed = get_config().random_seed
        self._seed_seq = np.random.SeedSequence(seed)
        self._executor: ThreadPoolExecutor | None = ThreadPoolExecutor(
            max_workers=1, thread_name_prefix="lineupsim-worker"
        )
        self._running = False

    @property
    def is_running(self) -> bool:
        return self._running

    @property
    def closed(self) -> bool:
        return self._executor is None

    def spawn_rng(self) -> np.random.Generator:
        """Independent generator for one batch."""
        return np.random.default_rng(self._seed_seq.spawn(1)[0])

    async def run(
        self,
        lineup: Sequence[PlayerRecord],
        game_count: int,
        collect_details: bool | None = None,
        on_progress: ProgressCallback | None = None,
        rng: np.random.Generator | None = None,
    ) -> SimulationResult:
        """Run a batch on the worker thread.

        Progress events are delivered on the calling event loop, in order,
        before the result is returned. Cancelling the awaiting task abandons
        the result; the session stays busy until the worker finishes.

        Raises:
            SimulationBusyError: If a batch is already running
            SimulationSessionClosedError: If the session is closed
        """
        if self._executor is None:
            raise SimulationSessionClosedError("Simulation session is closed")
        if self._running:
            raise SimulationBusyError("Simulation already running")

        loop = asyncio.get_running_loop()

        relay = None
        if on_progress is not None:

            def relay(update: ProgressUpdate) -> None:
                loop.call_soon_threadsafe(on_progress, update)

        future = self._executor.submit(
            functools.partial(
                run_simulation_sync,
                lineup,
                game_count,
                rng or self.spawn_rng(),
                collect_details,
                relay,
            )
        )
        self._running = True
        # Cleared when the worker finishes, not when the awaiting task is
        # cancelled: an abandoned batch still occupies the worker.
        future.add_done_callback(self._on_batch_done)

        return await asyncio.wrap_future(future, loop=loop)

    def _on_batch_done(self, future: Future) -> None:
        self._running = False

    async def run_with_fallback(
        self,
        lineup: Sequence[PlayerRecord],
        game_count: int,
        collect_details: bool | None = None,
        on_progress: ProgressCallback | None = None,
    ) -> SimulationResult:
        """Run on the worker, or inline on this loop if the worker is unavailable."""
        try:
            return await self.run(lineup, game_count, collect_details, on_progress)
        except (SimulationBusyError, SimulationSessionClosedError) as e:
            logger.warning(f"Worker unavailable ({e}), running simulation inline")
            return await run_simulation(
                lineup,
                game_count,
                rng=self.spawn_rng(),
                collect_details=collect_details,
                on_progress=on_progress,
            )

    def close(self) -> None:
        """Shut down the worker. In-flight work finishes; new runs are rejected."""
        if self._executor is not None:
            self._executor.shutdown(wait=False)
            self._executor = None

    def __enter__(self) -> "SimulationSession":
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        self.close()

    async def __aenter__(self) -> "SimulationSession":
        return self

    async def __aexit__(self, exc_type, exc, tb) -> None:
        self.close()
