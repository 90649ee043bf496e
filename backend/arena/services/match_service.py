import logging
from datetime import datetime, timezone

from arena.errors import TournamentError
from arena.events import event_bus
from arena.extensions import db
from arena.models.match import Match
from arena.models.tournament import Tournament, TournamentStatus
from arena.services.scheduler_service import advance_cup, is_bye_slot
from arena.services.tournament_service import get_matches, persist_fixtures

logger = logging.getLogger(__name__)


def record_result(match_id, home_score, away_score, stats=None):
    """Enter (or clear) a match score.

    Both scores set the match as played; both None clears it. In a cup, a
    completed round is fed to the advancement engine in the same transaction,
    so the next round (or the podium) is stored together with the result.
    """
    match = db.session.get(Match, match_id)
    if not match:
        return None, "Match not found"

    tournament = match.tournament
    if tournament.status == TournamentStatus.SETUP:
        return None, "The tournament has not started yet"

    if (home_score is None) != (away_score is None):
        return None, "Both scores are required to record a result"

    if tournament.is_cup:
        error = _cup_lock_reason(tournament, match)
        if error:
            return None, error

    match.home_score = home_score
    match.away_score = away_score
    match.is_played = home_score is not None
    if not match.is_played:
        match.stats = None
    elif stats is not None:
        match.stats = stats

    outcome = None
    league_finished = False
    try:
        if tournament.is_cup:
            if match.is_played:
                outcome = _advance_cup(tournament)
        else:
            league_finished = _refresh_league_status(tournament)
        db.session.commit()
    except TournamentError as e:
        db.session.rollback()
        logger.warning("Result for match %s rejected: %s", match_id, e)
        return None, str(e)

    event_bus.publish("match_result_recorded", tournament.id, {
        "match_id": match.id,
        "round": match.round,
        "home_team_id": match.home_team_id,
        "away_team_id": match.away_team_id,
        "home_score": match.home_score,
        "away_score": match.away_score,
        "is_played": match.is_played,
    })

    if outcome is not None and outcome.new_matches:
        event_bus.publish("round_generated", tournament.id, {
            "round": outcome.new_matches[0].round,
            "stage_name": outcome.new_matches[0].stage_name,
            "match_count": len(outcome.new_matches),
        })

    if (outcome is not None and outcome.completed) or league_finished:
        event_bus.publish("tournament_completed", tournament.id, {
            "champion_id": tournament.champion_id,
            "runner_up_id": tournament.runner_up_id,
            "third_place_id": tournament.third_place_id,
        })

    return match, None


def _cup_lock_reason(tournament, match):
    if tournament.status == TournamentStatus.COMPLETED:
        return "The cup has already been decided"
    if is_bye_slot(match.home_team_id) or is_bye_slot(match.away_team_id):
        return "Walkover results cannot be changed"
    if match.round <= tournament.advanced_round:
        return f"Round {match.round} is closed: the next round has already been drawn"
    return None


def _advance_cup(tournament):
    """Run the advancement engine at most once per completed round.

    ``Tournament.advanced_round`` is the latch: it is read under a row lock
    and bumped in the same transaction that stores the engine's output.
    """
    locked = (
        db.session.query(Tournament)
        .filter_by(id=tournament.id)
        .with_for_update()
        .one()
    )
    matches = get_matches(locked.id)
    current_round = max(m.round for m in matches)
    if locked.advanced_round >= current_round:
        logger.debug("Round %d of %r already advanced", current_round, locked)
        return None

    outcome = advance_cup(matches, locked.teams.all(), locked.mode)

    if outcome.completed:
        result = outcome.result
        locked.champion_id = result.champion.id
        locked.runner_up_id = result.runner_up.id
        locked.third_place_id = result.third_place.id if result.third_place else None
        locked.status = TournamentStatus.COMPLETED
        locked.completed_at = datetime.now(timezone.utc)
        locked.advanced_round = current_round
        logger.info("%r completed, champion %s", locked, result.champion.name)
    elif outcome.new_matches:
        persist_fixtures(locked, outcome.new_matches)
        locked.advanced_round = current_round

    return outcome


def _refresh_league_status(tournament):
    """Mark a league complete when every match is played; reopen it otherwise.

    Returns True when this call completed the league.
    """
    remaining = Match.query.filter_by(
        tournament_id=tournament.id, is_played=False
    ).count()

    if remaining == 0 and tournament.status != TournamentStatus.COMPLETED:
        tournament.status = TournamentStatus.COMPLETED
        tournament.completed_at = datetime.now(timezone.utc)
        return True
    if remaining > 0 and tournament.status == TournamentStatus.COMPLETED:
        tournament.status = TournamentStatus.IN_PROGRESS
        tournament.completed_at = None
    return False
