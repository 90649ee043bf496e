"""Plain value types produced and consumed by the scheduling core.

The scheduler never touches the database. It emits ``Fixture`` records and
reads back anything that quacks like one, so persisted ``Match`` rows can be
fed straight into ``advance_cup``.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any


@dataclass
class Fixture:
    id: str
    round: int
    home_team_id: str
    away_team_id: str
    stage_name: str | None = None
    home_score: int | None = None
    away_score: int | None = None
    is_played: bool = False
    is_cup_match: bool = False
    stats: dict | None = None

    def swapped(self, new_id: str, stage_name: str | None = None, round: int | None = None) -> "Fixture":
        """Return the return leg: home and away exchanged, no result."""
        return Fixture(
            id=new_id,
            round=self.round if round is None else round,
            home_team_id=self.away_team_id,
            away_team_id=self.home_team_id,
            stage_name=self.stage_name if stage_name is None else stage_name,
            is_cup_match=self.is_cup_match,
        )


@dataclass(frozen=True)
class CupResult:
    champion: Any
    runner_up: Any
    third_place: Any = None


@dataclass
class AdvanceResult:
    new_matches: list[Fixture] = field(default_factory=list)
    completed: bool = False
    result: CupResult | None = None
