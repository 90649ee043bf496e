"""create tournament, team and match tables

Revision ID: 4b1f0c2a7d13
Revises:
Create Date: 2026-10-19 09:12:31.402118

"""
from alembic import op
import sqlalchemy as sa


# revision identifiers, used by Alembic.
revision = '4b1f0c2a7d13'
down_revision = None
branch_labels = None
depends_on = None


tournamenttype_enum = sa.Enum('LEAGUE', 'CUP', name='tournamenttype')
tournamentmode_enum = sa.Enum('SINGLE', 'DOUBLE', name='tournamentmode')
tournamentstatus_enum = sa.Enum(
    'SETUP', 'IN_PROGRESS', 'COMPLETED', name='tournamentstatus'
)


def upgrade():
    op.create_table(
        'tournaments',
        sa.Column('id', sa.Integer(), nullable=False),
        sa.Column('name', sa.String(length=200), nullable=False),
        sa.Column('type', tournamenttype_enum, nullable=False),
        sa.Column('mode', tournamentmode_enum, nullable=False),
        sa.Column('status', tournamentstatus_enum, nullable=False),
        sa.Column('advanced_round', sa.Integer(), nullable=False, server_default='0'),
        sa.Column('champion_id', sa.String(length=36), nullable=True),
        sa.Column('runner_up_id', sa.String(length=36), nullable=True),
        sa.Column('third_place_id', sa.String(length=36), nullable=True),
        sa.Column('created_at', sa.DateTime(), nullable=False),
        sa.Column('completed_at', sa.DateTime(), nullable=True),
        sa.PrimaryKeyConstraint('id'),
    )

    op.create_table(
        'teams',
        sa.Column('id', sa.String(length=36), nullable=False),
        sa.Column('tournament_id', sa.Integer(), nullable=False),
        sa.Column('name', sa.String(length=100), nullable=False),
        sa.Column('logo_url', sa.String(length=500), nullable=True),
        sa.Column('created_at', sa.DateTime(), nullable=False),
        sa.ForeignKeyConstraint(['tournament_id'], ['tournaments.id']),
        sa.PrimaryKeyConstraint('id'),
        sa.UniqueConstraint('tournament_id', 'name', name='uq_team_tournament_name'),
    )

    op.create_table(
        'matches',
        sa.Column('id', sa.String(length=36), nullable=False),
        sa.Column('tournament_id', sa.Integer(), nullable=False),
        sa.Column('round', sa.Integer(), nullable=False),
        sa.Column('position', sa.Integer(), nullable=False),
        sa.Column('stage_name', sa.String(length=60), nullable=True),
        sa.Column('home_team_id', sa.String(length=36), nullable=False),
        sa.Column('away_team_id', sa.String(length=36), nullable=False),
        sa.Column('home_score', sa.Integer(), nullable=True),
        sa.Column('away_score', sa.Integer(), nullable=True),
        sa.Column('is_played', sa.Boolean(), nullable=False),
        sa.Column('is_cup_match', sa.Boolean(), nullable=False),
        sa.Column('stats', sa.JSON(), nullable=True),
        sa.Column('created_at', sa.DateTime(), nullable=False),
        sa.Column('updated_at', sa.DateTime(), nullable=False),
        sa.ForeignKeyConstraint(['tournament_id'], ['tournaments.id']),
        sa.PrimaryKeyConstraint('id'),
    )
    op.create_index(
        'ix_matches_tournament_round', 'matches', ['tournament_id', 'round']
    )


def downgrade():
    op.drop_index('ix_matches_tournament_round', table_name='matches')
    op.drop_table('matches')
    op.drop_table('teams')
    op.drop_table('tournaments')

    bind = op.get_bind()
    tournamentstatus_enum.drop(bind, checkfirst=True)
    tournamentmode_enum.drop(bind, checkfirst=True)
    tournamenttype_enum.drop(bind, checkfirst=True)
