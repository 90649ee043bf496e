class TournamentError(Exception):
    """Base class for scheduling and bracket errors."""


class InvalidInput(TournamentError):
    """Raised when a roster or mode cannot be scheduled."""


class InvalidBracketState(TournamentError):
    """Raised when a match list cannot be advanced without losing a team."""
