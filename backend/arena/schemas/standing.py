from marshmallow import Schema, fields

from arena.services.standings import STAT_KEYS


class StandingSchema(Schema):
    team_id = fields.String()
    team_name = fields.String()
    team_logo = fields.String(allow_none=True)
    played = fields.Integer()
    won = fields.Integer()
    drawn = fields.Integer()
    lost = fields.Integer()
    goals_for = fields.Integer()
    goals_against = fields.Integer()
    goal_difference = fields.Integer()
    points = fields.Integer()


TeamStatsSchema = Schema.from_dict(
    {
        "team_id": fields.String(),
        "team_name": fields.String(),
        "matches": fields.Integer(),
        "possession": fields.Float(allow_none=True),
        **{key: fields.Integer() for key in STAT_KEYS},
    },
    name="TeamStatsSchema",
)
