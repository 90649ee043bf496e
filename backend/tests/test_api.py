from arena.extensions import db
from arena.models.match import Match


def _create(client, **overrides):
    payload = {"name": "Spring League", "type": "league"}
    payload.update(overrides)
    resp = client.post("/api/tournaments", json=payload)
    assert resp.status_code == 201
    return resp.get_json()["tournament"]


def _add_teams(client, tournament_id, count):
    ids = []
    for i in range(1, count + 1):
        resp = client.post(f"/api/tournaments/{tournament_id}/teams", json={"name": f"Club {i}"})
        assert resp.status_code == 201
        ids.append(resp.get_json()["team"]["id"])
    return ids


def test_health_check(client):
    resp = client.get("/health")
    assert resp.status_code == 200
    assert resp.get_json()["status"] == "healthy"


# ── Tournaments ──────────────────────────────────────────────────────────────


def test_create_tournament(client):
    tournament = _create(client, mode="double")
    assert tournament["name"] == "Spring League"
    assert tournament["type"] == "league"
    assert tournament["mode"] == "double"
    assert tournament["status"] == "setup"
    assert tournament["team_count"] == 0
    assert tournament["teams"] == []


def test_create_tournament_defaults_to_single(client):
    assert _create(client)["mode"] == "single"


def test_create_tournament_validation(client):
    resp = client.post("/api/tournaments", json={"name": "", "type": "ladder"})
    assert resp.status_code == 400
    body = resp.get_json()
    assert body["error"] == "Validation failed"
    assert "name" in body["messages"]
    assert "type" in body["messages"]


def test_list_tournaments(client):
    _create(client, name="One")
    _create(client, name="Two", type="cup")
    resp = client.get("/api/tournaments")
    assert resp.status_code == 200
    names = {t["name"] for t in resp.get_json()["tournaments"]}
    assert names == {"One", "Two"}


def test_get_tournament_with_teams(client):
    tournament = _create(client)
    _add_teams(client, tournament["id"], 3)
    resp = client.get(f"/api/tournaments/{tournament['id']}")
    assert resp.status_code == 200
    body = resp.get_json()["tournament"]
    assert body["team_count"] == 3
    assert {t["name"] for t in body["teams"]} == {"Club 1", "Club 2", "Club 3"}


def test_get_tournament_not_found(client):
    resp = client.get("/api/tournaments/9999")
    assert resp.status_code == 404
    assert "error" in resp.get_json()


def test_delete_tournament(client):
    tournament = _create(client)
    _add_teams(client, tournament["id"], 2)
    resp = client.delete(f"/api/tournaments/{tournament['id']}")
    assert resp.status_code == 200
    assert client.get(f"/api/tournaments/{tournament['id']}").status_code == 404


# ── Teams ────────────────────────────────────────────────────────────────────


def test_add_duplicate_team_conflicts(client):
    tournament = _create(client)
    _add_teams(client, tournament["id"], 1)
    resp = client.post(f"/api/tournaments/{tournament['id']}/teams", json={"name": "CLUB 1"})
    assert resp.status_code == 409


def test_add_team_to_unknown_tournament(client):
    resp = client.post("/api/tournaments/9999/teams", json={"name": "Nobody"})
    assert resp.status_code == 404


def test_update_and_remove_team(client):
    tournament = _create(client)
    team_id = _add_teams(client, tournament["id"], 2)[0]

    resp = client.patch(f"/api/teams/{team_id}", json={"name": "Renamed"})
    assert resp.status_code == 200
    assert resp.get_json()["team"]["name"] == "Renamed"

    resp = client.delete(f"/api/teams/{team_id}")
    assert resp.status_code == 200
    assert client.delete(f"/api/teams/{team_id}").status_code == 404


def test_roster_locked_after_start(client):
    tournament = _create(client)
    _add_teams(client, tournament["id"], 2)
    client.post(f"/api/tournaments/{tournament['id']}/start")

    resp = client.post(f"/api/tournaments/{tournament['id']}/teams", json={"name": "Late"})
    assert resp.status_code == 409


# ── Scheduling ───────────────────────────────────────────────────────────────


def test_start_league(client):
    tournament = _create(client)
    _add_teams(client, tournament["id"], 4)

    resp = client.post(f"/api/tournaments/{tournament['id']}/start")
    assert resp.status_code == 201
    body = resp.get_json()
    assert body["match_count"] == 6
    assert body["matches"][0]["stage_name"] == "Matchday 1"
    assert "home_team" in body["matches"][0]

    resp = client.post(f"/api/tournaments/{tournament['id']}/start")
    assert resp.status_code == 409


def test_start_without_teams(client):
    tournament = _create(client)
    resp = client.post(f"/api/tournaments/{tournament['id']}/start")
    assert resp.status_code == 400
    assert resp.get_json()["error"] == "At least 2 teams are required"


def test_cup_walkovers_are_flagged(client):
    tournament = _create(client, type="cup")
    _add_teams(client, tournament["id"], 3)
    resp = client.post(f"/api/tournaments/{tournament['id']}/start")
    matches = resp.get_json()["matches"]

    walkovers = [m for m in matches if m["is_walkover"]]
    assert len(walkovers) == 1
    walkover = walkovers[0]
    assert walkover["is_played"] is True
    bye_side = walkover["away_team"] if walkover["away_team"]["name"] == "Bye" else walkover["home_team"]
    assert bye_side["name"] == "Bye"


def test_walkover_result_conflicts(client):
    tournament = _create(client, type="cup")
    _add_teams(client, tournament["id"], 3)
    matches = client.post(f"/api/tournaments/{tournament['id']}/start").get_json()["matches"]
    walkover = next(m for m in matches if m["is_walkover"])

    resp = client.post(f"/api/matches/{walkover['id']}/result", json={"home_score": 0, "away_score": 1})
    assert resp.status_code == 409
    assert resp.get_json()["error"] == "Walkover results cannot be changed"


def test_draw_and_bracket(client):
    tournament = _create(client, type="cup")
    _add_teams(client, tournament["id"], 4)
    client.post(f"/api/tournaments/{tournament['id']}/start")

    resp = client.get(f"/api/tournaments/{tournament['id']}/draw")
    assert resp.status_code == 200
    assert len(resp.get_json()["pairs"]) == 2

    resp = client.get(f"/api/tournaments/{tournament['id']}/bracket")
    assert resp.status_code == 200
    rounds = resp.get_json()["rounds"]
    assert len(rounds) == 1
    assert rounds[0]["stage_name"] == "Semi-Final"
    assert rounds[0]["third_place"] is None


def test_bracket_for_league_is_rejected(client):
    tournament = _create(client)
    resp = client.get(f"/api/tournaments/{tournament['id']}/bracket")
    assert resp.status_code == 400


# ── Matches and results ──────────────────────────────────────────────────────


def test_list_matches_filters(client):
    tournament = _create(client)
    _add_teams(client, tournament["id"], 4)
    matches = client.post(f"/api/tournaments/{tournament['id']}/start").get_json()["matches"]

    resp = client.get(f"/api/tournaments/{tournament['id']}/matches?round=2")
    assert {m["round"] for m in resp.get_json()["matches"]} == {2}

    client.post(f"/api/matches/{matches[0]['id']}/result", json={"home_score": 1, "away_score": 0})
    resp = client.get(f"/api/tournaments/{tournament['id']}/matches?played=true")
    assert [m["id"] for m in resp.get_json()["matches"]] == [matches[0]["id"]]

    resp = client.get(f"/api/matches/{matches[0]['id']}")
    assert resp.status_code == 200
    assert resp.get_json()["match"]["home_score"] == 1


def test_record_result_with_stats(client):
    tournament = _create(client)
    _add_teams(client, tournament["id"], 2)
    match = client.post(f"/api/tournaments/{tournament['id']}/start").get_json()["matches"][0]

    resp = client.post(f"/api/matches/{match['id']}/result", json={
        "home_score": 2,
        "away_score": 1,
        "stats": {"home_possession": 58, "away_possession": 42, "home_shots": 9, "home_shots_on_target": 4},
    })
    assert resp.status_code == 200
    stats = resp.get_json()["match"]["stats"]
    assert stats["home_shots"] == 9
    assert stats["away_shots"] == 0
    assert stats["home_possession"] == 58


def test_record_result_rejects_bad_stats(client):
    tournament = _create(client)
    _add_teams(client, tournament["id"], 2)
    match = client.post(f"/api/tournaments/{tournament['id']}/start").get_json()["matches"][0]

    resp = client.post(f"/api/matches/{match['id']}/result", json={
        "home_score": 2,
        "away_score": 1,
        "stats": {"home_possession": 70, "away_possession": 40},
    })
    assert resp.status_code == 400

    resp = client.post(f"/api/matches/{match['id']}/result", json={
        "home_score": 2,
        "away_score": 1,
        "stats": {"home_shots": 1, "home_shots_on_target": 3},
    })
    assert resp.status_code == 400


def test_record_result_validation(client):
    tournament = _create(client)
    _add_teams(client, tournament["id"], 2)
    match = client.post(f"/api/tournaments/{tournament['id']}/start").get_json()["matches"][0]

    resp = client.post(f"/api/matches/{match['id']}/result", json={"home_score": 1, "away_score": None})
    assert resp.status_code == 400
    resp = client.post(f"/api/matches/{match['id']}/result", json={"home_score": -1, "away_score": 0})
    assert resp.status_code == 400


def test_record_result_before_start_conflicts(client):
    tournament = _create(client)
    home_id, away_id = _add_teams(client, tournament["id"], 2)
    match = Match(tournament_id=tournament["id"], round=1, position=0,
                  home_team_id=home_id, away_team_id=away_id)
    db.session.add(match)
    db.session.commit()

    resp = client.post(f"/api/matches/{match.id}/result", json={"home_score": 1, "away_score": 0})
    assert resp.status_code == 409
    assert resp.get_json()["error"] == "The tournament has not started yet"


def test_record_result_unknown_match(client):
    resp = client.post("/api/matches/missing/result", json={"home_score": 1, "away_score": 0})
    assert resp.status_code == 404


def test_cup_to_completion(client):
    tournament = _create(client, type="cup")
    _add_teams(client, tournament["id"], 4)
    tid = tournament["id"]
    client.post(f"/api/tournaments/{tid}/start")

    resp = client.get(f"/api/tournaments/{tid}/result")
    assert resp.status_code == 400

    for _ in range(5):
        open_matches = client.get(f"/api/tournaments/{tid}/matches?played=false").get_json()["matches"]
        if not open_matches:
            break
        for match in open_matches:
            resp = client.post(f"/api/matches/{match['id']}/result", json={"home_score": 2, "away_score": 0})
            assert resp.status_code == 200

    assert client.get(f"/api/tournaments/{tid}").get_json()["tournament"]["status"] == "completed"
    podium = client.get(f"/api/tournaments/{tid}/result").get_json()
    assert podium["champion"]["name"].startswith("Club")
    assert podium["third_place"] is not None

    rounds = client.get(f"/api/tournaments/{tid}/bracket").get_json()["rounds"]
    assert rounds[-1]["stage_name"] == "Final"
    assert rounds[-1]["third_place"]["stage_name"] == "Third Place"

    first_round_match = rounds[0]["matches"][0]
    resp = client.post(f"/api/matches/{first_round_match['id']}/result", json={"home_score": 0, "away_score": 1})
    assert resp.status_code == 409


# ── Tables ───────────────────────────────────────────────────────────────────


def test_standings(client):
    tournament = _create(client)
    team_ids = _add_teams(client, tournament["id"], 2)
    match = client.post(f"/api/tournaments/{tournament['id']}/start").get_json()["matches"][0]
    client.post(f"/api/matches/{match['id']}/result", json={"home_score": 3, "away_score": 1})

    resp = client.get(f"/api/tournaments/{tournament['id']}/standings")
    assert resp.status_code == 200
    table = resp.get_json()["standings"]
    assert len(table) == 2
    assert table[0]["team_id"] == match["home_team_id"]
    assert table[0]["points"] == 3
    assert table[1]["goal_difference"] == -2
    assert {row["team_id"] for row in table} == set(team_ids)


def test_standings_for_cup_is_rejected(client):
    tournament = _create(client, type="cup")
    resp = client.get(f"/api/tournaments/{tournament['id']}/standings")
    assert resp.status_code == 400


def test_team_stats(client):
    tournament = _create(client)
    _add_teams(client, tournament["id"], 2)
    match = client.post(f"/api/tournaments/{tournament['id']}/start").get_json()["matches"][0]
    client.post(f"/api/matches/{match['id']}/result", json={
        "home_score": 0,
        "away_score": 0,
        "stats": {"home_corners": 7, "away_corners": 2},
    })

    resp = client.get(f"/api/tournaments/{tournament['id']}/team-stats")
    assert resp.status_code == 200
    rows = {row["team_id"]: row for row in resp.get_json()["team_stats"]}
    assert rows[match["home_team_id"]]["corners"] == 7
    assert rows[match["away_team_id"]]["corners"] == 2
    assert rows[match["home_team_id"]]["possession"] == 50.0