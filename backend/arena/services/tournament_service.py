import logging
import random

from flask import current_app

from arena.errors import TournamentError
from arena.events import event_bus
from arena.extensions import db
from arena.models.match import Match
from arena.models.team import Team
from arena.models.tournament import (
    Tournament,
    TournamentMode,
    TournamentStatus,
    TournamentType,
)
from arena.services.scheduler_service import (
    SECOND_LEG_SUFFIX,
    generate_cup_schedule,
    generate_league_schedule,
    is_third_place,
)

logger = logging.getLogger(__name__)


# ── Tournaments ──────────────────────────────────────────────────────────────

def create_tournament(data):
    tournament = Tournament(
        name=data["name"],
        type=TournamentType(data["type"]),
        mode=TournamentMode(data.get("mode", "single")),
        status=TournamentStatus.SETUP,
    )
    db.session.add(tournament)
    db.session.commit()
    logger.info("Created %r", tournament)
    return tournament


def get_tournament(tournament_id):
    tournament = db.session.get(Tournament, tournament_id)
    if not tournament:
        return None, "Tournament not found"
    return tournament, None


def delete_tournament(tournament_id):
    """Drop a tournament with its roster and every match."""
    tournament = db.session.get(Tournament, tournament_id)
    if not tournament:
        return None, "Tournament not found"

    Match.query.filter_by(tournament_id=tournament_id).delete()
    Team.query.filter_by(tournament_id=tournament_id).delete()
    db.session.delete(tournament)
    db.session.commit()
    return tournament, None


# ── Roster ───────────────────────────────────────────────────────────────────

def _editable_tournament(tournament_id):
    tournament = db.session.get(Tournament, tournament_id)
    if not tournament:
        return None, "Tournament not found"
    if tournament.status != TournamentStatus.SETUP:
        return None, "The roster is locked once the tournament has started"
    return tournament, None


def _name_taken(tournament_id, name, exclude_id=None):
    query = Team.query.filter(
        Team.tournament_id == tournament_id,
        db.func.lower(Team.name) == name.lower(),
    )
    if exclude_id:
        query = query.filter(Team.id != exclude_id)
    return query.first() is not None


def add_team(tournament_id, data):
    tournament, error = _editable_tournament(tournament_id)
    if error:
        return None, error

    name = data["name"].strip()
    if _name_taken(tournament.id, name):
        return None, "A team with this name already exists in the tournament"

    team = Team(tournament_id=tournament.id, name=name, logo_url=data.get("logo_url"))
    db.session.add(team)
    db.session.commit()
    return team, None


def update_team(team_id, data):
    team = db.session.get(Team, team_id)
    if not team:
        return None, "Team not found"
    _, error = _editable_tournament(team.tournament_id)
    if error:
        return None, error

    if "name" in data:
        name = data["name"].strip()
        if _name_taken(team.tournament_id, name, exclude_id=team.id):
            return None, "A team with this name already exists in the tournament"
        team.name = name
    if "logo_url" in data:
        team.logo_url = data["logo_url"]

    db.session.commit()
    return team, None


def remove_team(team_id):
    team = db.session.get(Team, team_id)
    if not team:
        return None, "Team not found"
    _, error = _editable_tournament(team.tournament_id)
    if error:
        return None, error

    db.session.delete(team)
    db.session.commit()
    return team, None


# ── Fixture generation ───────────────────────────────────────────────────────

def _scheduler_rng(tournament):
    """Entropy for the draw; a configured seed makes it reproducible per tournament."""
    seed = current_app.config.get("SCHEDULER_SEED")
    if seed is None:
        return random.SystemRandom()
    return random.Random(f"{seed}:{tournament.id}")


def persist_fixtures(tournament, fixtures):
    """Add scheduler fixtures to the session as Match rows, keeping their order."""
    matches = []
    for position, fixture in enumerate(fixtures):
        match = Match(
            id=fixture.id,
            tournament_id=tournament.id,
            round=fixture.round,
            position=position,
            stage_name=fixture.stage_name,
            home_team_id=fixture.home_team_id,
            away_team_id=fixture.away_team_id,
            home_score=fixture.home_score,
            away_score=fixture.away_score,
            is_played=fixture.is_played,
            is_cup_match=fixture.is_cup_match,
            stats=fixture.stats,
        )
        db.session.add(match)
        matches.append(match)
    return matches


def start_tournament(tournament_id):
    """Lock the roster and generate the fixture list (cup: round 1 only)."""
    tournament = db.session.get(Tournament, tournament_id)
    if not tournament:
        return None, "Tournament not found"

    if tournament.status != TournamentStatus.SETUP or tournament.matches.first():
        return None, "Fixtures already generated for this tournament"

    teams = tournament.teams.all()
    generate = generate_cup_schedule if tournament.is_cup else generate_league_schedule
    try:
        fixtures = generate(teams, tournament.mode, rng=_scheduler_rng(tournament))
    except TournamentError as e:
        return None, str(e)

    matches = persist_fixtures(tournament, fixtures)
    tournament.status = TournamentStatus.IN_PROGRESS
    db.session.commit()

    event_bus.publish("tournament_started", tournament.id, {
        "type": tournament.type.value,
        "mode": tournament.mode.value,
        "team_count": len(teams),
        "match_count": len(matches),
    })
    return matches, None


# ── Queries ──────────────────────────────────────────────────────────────────

def get_matches(tournament_id, round_number=None, played=None):
    query = Match.query.filter_by(tournament_id=tournament_id)
    if round_number is not None:
        query = query.filter_by(round=round_number)
    if played is not None:
        query = query.filter_by(is_played=played)
    return query.order_by(Match.round, Match.position).all()


def get_draw_pairs(tournament_id):
    """Round-1 pairings in draw order, one entry per tie (legs collapsed)."""
    tournament = db.session.get(Tournament, tournament_id)
    if not tournament:
        return None, "Tournament not found"

    pairs = []
    seen = set()
    for match in get_matches(tournament_id, round_number=1):
        key = frozenset((match.home_team_id, match.away_team_id))
        if key in seen:
            continue
        seen.add(key)
        pairs.append(match)

    if not pairs:
        return None, "Fixtures have not been generated yet"
    return pairs, None


def get_bracket(tournament_id):
    """Return cup matches grouped by round, third-place playoff split out."""
    tournament = db.session.get(Tournament, tournament_id)
    if not tournament:
        return None, "Tournament not found"
    if not tournament.is_cup:
        return None, "Bracket is only available for cup tournaments"

    rounds = {}
    for match in get_matches(tournament_id):
        entry = rounds.setdefault(match.round, {
            "round": match.round,
            "stage_name": None,
            "matches": [],
            "third_place": None,
        })
        if is_third_place(match):
            entry["third_place"] = match
            continue
        if entry["stage_name"] is None and match.stage_name:
            entry["stage_name"] = match.stage_name.removesuffix(SECOND_LEG_SUFFIX)
        entry["matches"].append(match)

    if not rounds:
        return None, "No bracket found for this tournament"
    return [rounds[r] for r in sorted(rounds)], None


def get_cup_result(tournament_id):
    tournament = db.session.get(Tournament, tournament_id)
    if not tournament:
        return None, "Tournament not found"
    if not tournament.is_cup:
        return None, "Only cup tournaments produce a podium"
    if tournament.status != TournamentStatus.COMPLETED:
        return None, "The cup has not been decided yet"

    def _team(team_id):
        return db.session.get(Team, team_id) if team_id else None

    return {
        "champion": _team(tournament.champion_id),
        "runner_up": _team(tournament.runner_up_id),
        "third_place": _team(tournament.third_place_id),
    }, None
