from arena.extensions import ma
from arena.models.team import Team
from marshmallow import Schema, fields, validate


class TeamSchema(ma.SQLAlchemyAutoSchema):
    class Meta:
        model = Team
        load_instance = True
        include_fk = True


class CreateTeamSchema(Schema):
    name = fields.String(required=True, validate=validate.Length(min=1, max=100))
    logo_url = fields.String(load_default=None, allow_none=True, validate=validate.Length(max=500))


class UpdateTeamSchema(Schema):
    name = fields.String(validate=validate.Length(min=1, max=100))
    logo_url = fields.String(allow_none=True, validate=validate.Length(max=500))
