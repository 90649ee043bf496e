import uuid
from datetime import datetime, timezone

from arena.extensions import db


class Match(db.Model):
    __tablename__ = "matches"

    id = db.Column(db.String(36), primary_key=True, default=lambda: str(uuid.uuid4()))
    tournament_id = db.Column(
        db.Integer, db.ForeignKey("tournaments.id"), nullable=False
    )
    round = db.Column(db.Integer, nullable=False)
    # Generation order inside a round; cup pairing depends on it
    position = db.Column(db.Integer, nullable=False, default=0)
    stage_name = db.Column(db.String(60), nullable=True)
    # Plain ids: bracket placeholders ("bye-N") are stored as-is
    home_team_id = db.Column(db.String(36), nullable=False)
    away_team_id = db.Column(db.String(36), nullable=False)
    home_score = db.Column(db.Integer, nullable=True)
    away_score = db.Column(db.Integer, nullable=True)
    is_played = db.Column(db.Boolean, nullable=False, default=False)
    is_cup_match = db.Column(db.Boolean, nullable=False, default=False)
    stats = db.Column(db.JSON, nullable=True)
    created_at = db.Column(
        db.DateTime, nullable=False, default=lambda: datetime.now(timezone.utc)
    )
    updated_at = db.Column(
        db.DateTime,
        nullable=False,
        default=lambda: datetime.now(timezone.utc),
        onupdate=lambda: datetime.now(timezone.utc),
    )

    __table_args__ = (
        db.Index("ix_matches_tournament_round", "tournament_id", "round"),
    )

    def __repr__(self):
        return f"<Match R{self.round} {self.home_team_id} vs {self.away_team_id}>"
