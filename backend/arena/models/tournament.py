from arena.extensions import db
from datetime import datetime, timezone
import enum


class TournamentType(enum.Enum):
    LEAGUE = "league"
    CUP = "cup"


class TournamentMode(enum.Enum):
    SINGLE = "single"
    DOUBLE = "double"


class TournamentStatus(enum.Enum):
    SETUP = "setup"
    IN_PROGRESS = "in_progress"
    COMPLETED = "completed"


class Tournament(db.Model):
    __tablename__ = "tournaments"

    id = db.Column(db.Integer, primary_key=True)
    name = db.Column(db.String(200), nullable=False)
    type = db.Column(db.Enum(TournamentType), nullable=False)
    mode = db.Column(
        db.Enum(TournamentMode), nullable=False, default=TournamentMode.SINGLE
    )
    status = db.Column(
        db.Enum(TournamentStatus), nullable=False, default=TournamentStatus.SETUP
    )
    # Highest round already fed through the cup advancement engine
    advanced_round = db.Column(db.Integer, nullable=False, default=0)
    champion_id = db.Column(db.String(36), nullable=True)
    runner_up_id = db.Column(db.String(36), nullable=True)
    third_place_id = db.Column(db.String(36), nullable=True)
    created_at = db.Column(
        db.DateTime, nullable=False, default=lambda: datetime.now(timezone.utc)
    )
    completed_at = db.Column(db.DateTime, nullable=True)

    # Relationships
    teams = db.relationship(
        "Team",
        backref="tournament",
        lazy="dynamic",
        order_by="Team.created_at",
    )
    matches = db.relationship(
        "Match",
        backref="tournament",
        lazy="dynamic",
    )

    @property
    def is_cup(self):
        return self.type == TournamentType.CUP

    def __repr__(self):
        return f"<Tournament {self.name} ({self.type.value}/{self.mode.value})>"
