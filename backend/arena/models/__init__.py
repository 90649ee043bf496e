from arena.models.tournament import (
    Tournament,
    TournamentMode,
    TournamentStatus,
    TournamentType,
)
from arena.models.team import Team
from arena.models.match import Match

__all__ = [
    "Tournament",
    "TournamentMode",
    "TournamentStatus",
    "TournamentType",
    "Team",
    "Match",
]
