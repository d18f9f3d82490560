"""Player records and at-bat outcome distributions."""

from lineupsim.models.outcomes import (
    OUTCOME_LABELS,
    BattingOutcome,
    OutcomeType,
    PlayerTables,
    build_cumulative,
    build_outcome_table,
    build_player_tables,
    sample_outcome,
)
from lineupsim.models.player import BattingLine, PlayerRecord, league_average_player

__all__ = [
    "PlayerRecord",
    "BattingLine",
    "league_average_player",
    "OutcomeType",
    "OUTCOME_LABELS",
    "BattingOutcome",
    "PlayerTables",
    "build_outcome_table",
    "build_cumulative",
    "build_player_tables",
    "sample_outcome",
]
