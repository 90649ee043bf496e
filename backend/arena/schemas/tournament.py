from arena.extensions import ma
from arena.models.tournament import Tournament
from marshmallow import Schema, fields, validate


class TournamentSchema(ma.SQLAlchemyAutoSchema):
    class Meta:
        model = Tournament
        load_instance = True

    type = fields.Function(lambda obj: obj.type.value if obj.type else None)
    mode = fields.Function(lambda obj: obj.mode.value if obj.mode else None)
    status = fields.Function(lambda obj: obj.status.value if obj.status else None)
    team_count = fields.Function(lambda obj: obj.teams.count(), dump_only=True)
    teams = ma.Nested("TeamSchema", many=True, exclude=("tournament_id",), dump_only=True)


class CreateTournamentSchema(Schema):
    name = fields.String(required=True, validate=validate.Length(min=1, max=200))
    type = fields.String(required=True, validate=validate.OneOf(["league", "cup"]))
    mode = fields.String(load_default="single", validate=validate.OneOf(["single", "double"]))
