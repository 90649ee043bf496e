import queue

from flask import Blueprint, request, jsonify, Response

from arena.extensions import db
from arena.models.match import Match
from arena.models.tournament import Tournament
from arena.schemas import (
    TournamentSchema,
    CreateTournamentSchema,
    TeamSchema,
    CreateTeamSchema,
    UpdateTeamSchema,
    MatchSchema,
    RecordResultSchema,
    StandingSchema,
    TeamStatsSchema,
)
from arena.services.tournament_service import (
    create_tournament,
    get_tournament,
    delete_tournament,
    add_team,
    update_team,
    remove_team,
    start_tournament,
    get_matches,
    get_draw_pairs,
    get_bracket,
    get_cup_result,
)
from arena.services.match_service import record_result
from arena.services.standings import compute_standings, compute_team_stats

api_bp = Blueprint("api", __name__)

# ── Schema instances ─────────────────────────────────────────────────────────
tournament_schema = TournamentSchema()
tournaments_schema = TournamentSchema(many=True, exclude=("teams",))
create_tournament_schema = CreateTournamentSchema()

team_schema = TeamSchema()
create_team_schema = CreateTeamSchema()
update_team_schema = UpdateTeamSchema()

match_schema = MatchSchema()
matches_schema = MatchSchema(many=True)
record_result_schema = RecordResultSchema()

standings_schema = StandingSchema(many=True)
team_stats_schema = TeamStatsSchema(many=True)


_CONFLICT_WORDS = ("already", "locked", "closed", "cannot be changed", "not started")


def _error_status(error):
    if "not found" in error.lower():
        return 404
    if any(word in error.lower() for word in _CONFLICT_WORDS):
        return 409
    return 400


# ─── Tournaments ──────────────────────────────────────────────────────────────

@api_bp.route("/tournaments", methods=["GET"])
def get_tournaments():
    tournaments = Tournament.query.order_by(Tournament.created_at.desc()).all()
    return jsonify({"tournaments": tournaments_schema.dump(tournaments)}), 200


@api_bp.route("/tournaments", methods=["POST"])
def create_tournament_route():
    data = create_tournament_schema.load(request.get_json() or {})
    tournament = create_tournament(data)
    return jsonify({"tournament": tournament_schema.dump(tournament)}), 201


@api_bp.route("/tournaments/<int:tournament_id>", methods=["GET"])
def get_tournament_route(tournament_id):
    tournament, error = get_tournament(tournament_id)
    if error:
        return jsonify({"error": error}), _error_status(error)
    return jsonify({"tournament": tournament_schema.dump(tournament)}), 200


@api_bp.route("/tournaments/<int:tournament_id>", methods=["DELETE"])
def delete_tournament_route(tournament_id):
    _, error = delete_tournament(tournament_id)
    if error:
        return jsonify({"error": error}), _error_status(error)
    return jsonify({"message": "Tournament deleted"}), 200


# ─── Teams ────────────────────────────────────────────────────────────────────

@api_bp.route("/tournaments/<int:tournament_id>/teams", methods=["POST"])
def add_team_route(tournament_id):
    data = create_team_schema.load(request.get_json() or {})
    team, error = add_team(tournament_id, data)
    if error:
        return jsonify({"error": error}), _error_status(error)
    return jsonify({"team": team_schema.dump(team)}), 201


@api_bp.route("/teams/<team_id>", methods=["PATCH"])
def update_team_route(team_id):
    data = update_team_schema.load(request.get_json() or {})
    team, error = update_team(team_id, data)
    if error:
        return jsonify({"error": error}), _error_status(error)
    return jsonify({"team": team_schema.dump(team)}), 200


@api_bp.route("/teams/<team_id>", methods=["DELETE"])
def remove_team_route(team_id):
    _, error = remove_team(team_id)
    if error:
        return jsonify({"error": error}), _error_status(error)
    return jsonify({"message": "Team removed"}), 200


# ─── Scheduling ───────────────────────────────────────────────────────────────

@api_bp.route("/tournaments/<int:tournament_id>/start", methods=["POST"])
def start_tournament_route(tournament_id):
    matches, error = start_tournament(tournament_id)
    if error:
        return jsonify({"error": error}), _error_status(error)
    return jsonify({
        "message": "Fixtures generated",
        "match_count": len(matches),
        "matches": matches_schema.dump(matches),
    }), 201


@api_bp.route("/tournaments/<int:tournament_id>/draw", methods=["GET"])
def get_draw_route(tournament_id):
    pairs, error = get_draw_pairs(tournament_id)
    if error:
        return jsonify({"error": error}), _error_status(error)
    return jsonify({"pairs": matches_schema.dump(pairs)}), 200


@api_bp.route("/tournaments/<int:tournament_id>/bracket", methods=["GET"])
def get_bracket_route(tournament_id):
    rounds, error = get_bracket(tournament_id)
    if error:
        return jsonify({"error": error}), _error_status(error)
    return jsonify({
        "rounds": [
            {
                "round": entry["round"],
                "stage_name": entry["stage_name"],
                "matches": matches_schema.dump(entry["matches"]),
                "third_place": (
                    match_schema.dump(entry["third_place"])
                    if entry["third_place"] is not None else None
                ),
            }
            for entry in rounds
        ]
    }), 200


@api_bp.route("/tournaments/<int:tournament_id>/result", methods=["GET"])
def get_result_route(tournament_id):
    result, error = get_cup_result(tournament_id)
    if error:
        return jsonify({"error": error}), _error_status(error)
    return jsonify({
        place: team_schema.dump(team) if team is not None else None
        for place, team in result.items()
    }), 200


# ─── Matches ──────────────────────────────────────────────────────────────────

@api_bp.route("/tournaments/<int:tournament_id>/matches", methods=["GET"])
def get_matches_route(tournament_id):
    db.get_or_404(Tournament, tournament_id)
    round_number = request.args.get("round", type=int)
    played = request.args.get("played")
    if played is not None:
        played = played.lower() in ("1", "true", "yes")

    matches = get_matches(tournament_id, round_number=round_number, played=played)
    return jsonify({"matches": matches_schema.dump(matches)}), 200


@api_bp.route("/matches/<match_id>", methods=["GET"])
def get_match(match_id):
    match = db.get_or_404(Match, match_id)
    return jsonify({"match": match_schema.dump(match)}), 200


@api_bp.route("/matches/<match_id>/result", methods=["POST"])
def record_result_route(match_id):
    data = record_result_schema.load(request.get_json() or {})
    match, error = record_result(
        match_id, data["home_score"], data["away_score"], data.get("stats")
    )
    if error:
        return jsonify({"error": error}), _error_status(error)
    return jsonify({"match": match_schema.dump(match)}), 200


# ─── Standings ────────────────────────────────────────────────────────────────

@api_bp.route("/tournaments/<int:tournament_id>/standings", methods=["GET"])
def get_standings(tournament_id):
    tournament = db.get_or_404(Tournament, tournament_id)
    if tournament.is_cup:
        return jsonify({"error": "Standings are only available for league tournaments"}), 400

    rows = compute_standings(tournament.teams.all(), get_matches(tournament_id))
    return jsonify({"standings": standings_schema.dump(rows)}), 200


@api_bp.route("/tournaments/<int:tournament_id>/team-stats", methods=["GET"])
def get_team_stats(tournament_id):
    tournament = db.get_or_404(Tournament, tournament_id)
    rows = compute_team_stats(tournament.teams.all(), get_matches(tournament_id))
    return jsonify({"team_stats": team_stats_schema.dump(rows)}), 200


# ─── SSE Events ──────────────────────────────────────────────────────────

@api_bp.route("/events/stream", methods=["GET"])
def event_stream():
    from arena.events import event_bus

    tournament_id = request.args.get("tournament_id", type=int)

    def generate():
        q = event_bus.subscribe(tournament_id)
        try:
            while True:
                try:
                    msg = q.get(timeout=30)
                    yield f"data: {msg}\n\n"
                except queue.Empty:
                    yield ": keepalive\n\n"
        except GeneratorExit:
            pass
        finally:
            event_bus.unsubscribe(q)

    return Response(
        generate(),
        mimetype="text/event-stream",
        headers={
            "Cache-Control": "no-cache",
            "X-Accel-Buffering": "no",
        },
    )
