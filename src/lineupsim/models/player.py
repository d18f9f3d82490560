"""Player batting records.

Season totals are read-only input supplied by the caller. Rate stats are
derived on demand and never stored.
"""

import math
from dataclasses import dataclass


@dataclass(frozen=True)
class BattingLine:
    """Derived rate stats for display."""

    avg: float
    obp: float
    slg: float
    ops: float


@dataclass(frozen=True)
class PlayerRecord:
    """Season batting totals for one player."""

    name: str
    plate_appearances: int
    hits: int  # total hits, singles are derived
    doubles: int
    triples: int
    home_runs: int
    walks: int
    hit_by_pitch: int
    strikeouts: int
    team: str = ""

    @classmethod
    def from_singles(
        cls,
        name: str,
        plate_appearances: int,
        singles: int,
        doubles: int,
        triples: int,
        home_runs: int,
        walks: int,
        hit_by_pitch: int,
        strikeouts: int,
        team: str = "",
    ) -> "PlayerRecord":
        """Build a record from singles rather than total hits."""
        return cls(
            name=name,
            plate_appearances=plate_appearances,
            hits=singles + doubles + triples + home_runs,
            doubles=doubles,
            triples=triples,
            home_runs=home_runs,
            walks=walks,
            hit_by_pitch=hit_by_pitch,
            strikeouts=strikeouts,
            team=team,
        )

    @property
    def singles(self) -> int:
        return max(0, self.hits - self.doubles - self.triples - self.home_runs)

    def batting_line(self) -> BattingLine:
        """Compute AVG / OBP / SLG / OPS from the season totals.

        At-bats are approximated as PA minus walks and hit-by-pitch, since
        sacrifices are not part of the record.
        """
        pa = max(1, clamp_count(self.plate_appearances))
        hits = clamp_count(self.hits)
        on_base = hits + clamp_count(self.walks) + clamp_count(self.hit_by_pitch)
        at_bats = max(1, pa - clamp_count(self.walks) - clamp_count(self.hit_by_pitch))
        total_bases = (
            self.singles
            + 2 * clamp_count(self.doubles)
            + 3 * clamp_count(self.triples)
            + 4 * clamp_count(self.home_runs)
        )

        avg = hits / at_bats
        obp = on_base / pa
        slg = total_bases / at_bats
        return BattingLine(avg=avg, obp=obp, slg=slg, ops=obp + slg)


def clamp_count(value) -> float:
    """Clamp a raw count to a non-negative number (negative/NaN/None -> 0)."""
    if value is None:
        return 0
    try:
        if math.isnan(value):
            return 0
    except TypeError:
        return 0
    return max(0, value)


def league_average_player(name: str = "Average Hitter", team: str = "") -> PlayerRecord:
    """Roughly league-average full-season hitter (.250 / .320 / .410)."""
    return PlayerRecord(
        name=name,
        plate_appearances=600,
        hits=135,
        doubles=27,
        triples=3,
        home_runs=18,
        walks=50,
        hit_by_pitch=6,
        strikeouts=130,
        team=team,
    )
