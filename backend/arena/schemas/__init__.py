from arena.schemas.tournament import TournamentSchema, CreateTournamentSchema
from arena.schemas.team import TeamSchema, CreateTeamSchema, UpdateTeamSchema
from arena.schemas.match import MatchSchema, MatchStatsSchema, RecordResultSchema
from arena.schemas.standing import StandingSchema, TeamStatsSchema

__all__ = [
    "TournamentSchema",
    "CreateTournamentSchema",
    "TeamSchema",
    "CreateTeamSchema",
    "UpdateTeamSchema",
    "MatchSchema",
    "MatchStatsSchema",
    "RecordResultSchema",
    "StandingSchema",
    "TeamStatsSchema",
]
