import os
import pytest

os.environ["FLASK_ENV"] = "testing"

from arena import create_app
from arena.extensions import db as _db
from arena.services.tournament_service import add_team, create_tournament


@pytest.fixture(scope="session")
def app():
    app = create_app("testing")
    yield app


@pytest.fixture(autouse=True)
def tables(app):
    """Create all tables before each test, drop after."""
    with app.app_context():
        _db.create_all()
        yield
        _db.session.remove()
        _db.drop_all()


@pytest.fixture
def client(app):
    return app.test_client()


@pytest.fixture
def make_tournament(app):
    """Factory: create a tournament with ``team_count`` teams, return its id and team ids."""

    def _make(tournament_type="league", mode="single", team_count=4, name=None):
        tournament = create_tournament({
            "name": name or f"Test {tournament_type} ({mode})",
            "type": tournament_type,
            "mode": mode,
        })
        team_ids = []
        for i in range(1, team_count + 1):
            team, error = add_team(tournament.id, {"name": f"Team {i}"})
            assert error is None
            team_ids.append(team.id)
        return {"tournament_id": tournament.id, "team_ids": team_ids}

    return _make
