"""Application entry point."""

import asyncio
import logging
import sys

from lineupsim.config import get_config
from lineupsim.models.player import league_average_player
from lineupsim.simulation.engine import SimulationParams
from lineupsim.simulation.session import SimulationSession
from lineupsim.pipeline import run_analysis


async def boot() -> None:
    """
    Boot sequence: load config → open session → smoke batch → shutdown.

    Raises:
        SystemExit: On configuration or simulation errors
    """
    logger = logging.getLogger(__name__)

    try:
        config = get_config()
        logger.info(
            f"Configuration loaded: default_game_count={config.default_game_count}, "
            f"seed={config.random_seed}"
        )

        lineup = [league_average_player(f"Batter {slot}") for slot in range(1, 10)]
        params = SimulationParams(
            game_count=config.default_game_count,
            max_iterations=config.default_max_iterations,
        )

        async with SimulationSession() as session:
            result = await run_analysis(lineup, params, session=session)

        base = result.base
        logger.info(
            f"Smoke batch: avg={base.average_score:.2f} runs/game, "
            f"sd={base.standard_deviation:.2f}, range={base.min_score}-{base.max_score}"
        )
        logger.info("Application shutdown complete")

    except Exception as e:
        logger.error(f"Boot sequence failed: {e}")
        raise SystemExit(1) from e


def main() -> None:
    """Main entry point with logging configuration."""
    config = get_config()
    logging.basicConfig(
        level=config.log_level,
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
    )

    try:
        asyncio.run(boot())
    except KeyboardInterrupt:
        logging.info("Interrupted by user")
        sys.exit(0)
    except SystemExit:
        raise
    except Exception as e:
        logging.error(f"Unexpected error: {e}")
        sys.exit(1)


if __name__ == "__main__":
    main()
