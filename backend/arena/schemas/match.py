from arena.extensions import db, ma
from arena.models.match import Match
from arena.models.team import Team
from arena.services.scheduler_service import is_bye_slot
from arena.services.standings import STAT_KEYS
from marshmallow import Schema, ValidationError, fields, validate, validates_schema

# Display name for ids that are not on the roster (bracket placeholders, stale ids)
FALLBACK_TEAM_NAME = "Bye"


def _team_ref(team_id):
    team = db.session.get(Team, team_id) if not is_bye_slot(team_id) else None
    if team is None:
        return {"id": team_id, "name": FALLBACK_TEAM_NAME, "logo_url": None}
    return {"id": team.id, "name": team.name, "logo_url": team.logo_url}


class MatchSchema(ma.SQLAlchemyAutoSchema):
    class Meta:
        model = Match
        load_instance = True
        include_fk = True
        exclude = ("position",)

    home_team = fields.Function(lambda obj: _team_ref(obj.home_team_id), dump_only=True)
    away_team = fields.Function(lambda obj: _team_ref(obj.away_team_id), dump_only=True)
    is_walkover = fields.Function(
        lambda obj: is_bye_slot(obj.home_team_id) or is_bye_slot(obj.away_team_id),
        dump_only=True,
    )


_CountedStatsSchema = Schema.from_dict(
    {
        f"{side}_{key}": fields.Integer(load_default=0, validate=validate.Range(min=0))
        for key in STAT_KEYS
        for side in ("home", "away")
    },
    name="_CountedStatsSchema",
)


class MatchStatsSchema(_CountedStatsSchema):
    home_possession = fields.Integer(load_default=50, validate=validate.Range(min=0, max=100))
    away_possession = fields.Integer(load_default=50, validate=validate.Range(min=0, max=100))

    @validates_schema
    def validate_possession(self, data, **kwargs):
        if data["home_possession"] + data["away_possession"] != 100:
            raise ValidationError("Possession must add up to 100", "away_possession")

    @validates_schema
    def validate_shots(self, data, **kwargs):
        for side in ("home", "away"):
            if data[f"{side}_shots_on_target"] > data[f"{side}_shots"]:
                raise ValidationError(
                    "Shots on target cannot exceed shots", f"{side}_shots_on_target"
                )
            if data[f"{side}_passes_completed"] > data[f"{side}_passes"]:
                raise ValidationError(
                    "Completed passes cannot exceed passes", f"{side}_passes_completed"
                )


class RecordResultSchema(Schema):
    home_score = fields.Integer(required=True, allow_none=True, validate=validate.Range(min=0))
    away_score = fields.Integer(required=True, allow_none=True, validate=validate.Range(min=0))
    stats = fields.Nested(MatchStatsSchema, load_default=None, allow_none=True)

    @validates_schema
    def validate_scores(self, data, **kwargs):
        if (data["home_score"] is None) != (data["away_score"] is None):
            raise ValidationError("Provide both scores, or neither to clear the result")
