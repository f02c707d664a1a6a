"""create wavelength tables

Revision ID: 4c2d9e7a1b3f
Revises:
Create Date: 2026-10-18 00:00:00
"""

from alembic import op
import sqlalchemy as sa


# revision identifiers, used by Alembic.
revision = '4c2d9e7a1b3f'
down_revision = None
branch_labels = None
depends_on = None


def upgrade():
    op.create_table(
        'user',
        sa.Column('id', sa.Integer(), primary_key=True),
        sa.Column('username', sa.String(length=64), nullable=False),
        sa.Column('password_hash', sa.String(length=256), nullable=False),
    )
    op.create_index('ix_user_username', 'user', ['username'], unique=True)

    op.create_table(
        'game_session',
        sa.Column('id', sa.Integer(), primary_key=True),
        sa.Column('code', sa.String(length=4), nullable=True),
        sa.Column('status', sa.String(length=32), nullable=True),
        sa.Column('current_round', sa.Integer(), nullable=True),
        sa.Column('psychic_id', sa.Integer(), nullable=True),
        sa.Column('created_at', sa.DateTime(timezone=True), nullable=True),
    )
    op.create_index('ix_game_session_code', 'game_session', ['code'], unique=True)

    op.create_table(
        'player',
        sa.Column('id', sa.Integer(), primary_key=True),
        sa.Column('name', sa.String(length=64), nullable=False),
        sa.Column('session_id', sa.Integer(), sa.ForeignKey('game_session.id'), nullable=False),
        sa.Column('score', sa.Integer(), nullable=False, server_default='0'),
        sa.Column('join_order', sa.Integer(), nullable=False, server_default='0'),
        sa.Column('created_at', sa.DateTime(timezone=True), nullable=True),
    )

    op.create_table(
        'pair',
        sa.Column('id', sa.Integer(), primary_key=True),
        sa.Column('term_0', sa.String(length=128), nullable=False),
        sa.Column('term_1', sa.String(length=128), nullable=False),
        sa.Column('is_custom', sa.Boolean(), nullable=False, server_default=sa.false()),
        sa.Column('created_by', sa.Integer(), sa.ForeignKey('user.id'), nullable=True),
        sa.Column('created_at', sa.DateTime(timezone=True), nullable=True),
    )

    op.create_table(
        'round',
        sa.Column('id', sa.Integer(), primary_key=True),
        sa.Column('session_id', sa.Integer(), sa.ForeignKey('game_session.id'), nullable=False),
        sa.Column('number', sa.Integer(), nullable=False),
        sa.Column('goal_start', sa.Integer(), nullable=False),
        sa.Column('goal_end', sa.Integer(), nullable=False),
        sa.Column('stage', sa.String(length=32), nullable=False),
        sa.Column('psychic_id', sa.Integer(), sa.ForeignKey('player.id'), nullable=True),
        sa.Column('pair_id', sa.Integer(), sa.ForeignKey('pair.id', ondelete='SET NULL'), nullable=True),
        sa.Column('positive', sa.String(length=128), nullable=False),
        sa.Column('negative', sa.String(length=128), nullable=False),
        sa.UniqueConstraint('session_id', 'number', name='uq_round_session_number'),
    )

    op.create_table(
        'vote',
        sa.Column('id', sa.Integer(), primary_key=True),
        sa.Column('round_id', sa.Integer(), sa.ForeignKey('round.id'), nullable=False),
        sa.Column('player_id', sa.Integer(), sa.ForeignKey('player.id'), nullable=False),
        sa.Column('position', sa.Integer(), nullable=False),
        sa.UniqueConstraint('round_id', 'player_id', name='uq_vote_round_player'),
    )

    op.create_table(
        'round_score',
        sa.Column('id', sa.Integer(), primary_key=True),
        sa.Column('round_id', sa.Integer(), sa.ForeignKey('round.id'), nullable=False),
        sa.Column('player_id', sa.Integer(), sa.ForeignKey('player.id'), nullable=False),
        sa.Column('round_points', sa.Integer(), nullable=False),
        sa.Column('new_total', sa.Integer(), nullable=False),
        sa.UniqueConstraint('round_id', 'player_id', name='uq_round_score_round_player'),
    )


def downgrade():
    op.drop_table('round_score')
    op.drop_table('vote')
    op.drop_table('round')
    op.drop_table('pair')
    op.drop_table('player')
    op.drop_index('ix_game_session_code', table_name='game_session')
    op.drop_table('game_session')
    op.drop_index('ix_user_username', table_name='user')
    op.drop_table('user')
