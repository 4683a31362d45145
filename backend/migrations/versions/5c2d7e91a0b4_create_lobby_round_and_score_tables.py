"""create lobby, round, vote, elimination, score and history tables

Revision ID: 5c2d7e91a0b4
Revises:
Create Date: 2026-10-18 00:00:00
"""

from alembic import op
import sqlalchemy as sa


# revision identifiers, used by Alembic.
revision = '5c2d7e91a0b4'
down_revision = None
branch_labels = None
depends_on = None


def upgrade():
    op.create_table(
        'lobby',
        sa.Column('code', sa.String(length=6), primary_key=True),
        sa.Column('host_player_id', sa.String(length=255), nullable=False),
        sa.Column('status', sa.String(length=20), nullable=False, server_default='waiting'),
        sa.Column('category', sa.String(length=100), nullable=True),
        sa.Column('round_duration_seconds', sa.Integer(), nullable=False, server_default='300'),
        sa.Column('total_rounds', sa.Integer(), nullable=False, server_default='3'),
        sa.Column('current_round', sa.Integer(), nullable=False, server_default='1'),
        sa.Column('created_at', sa.Float(), nullable=False),
    )
    op.create_table(
        'player',
        sa.Column('id', sa.String(length=255), primary_key=True),
        sa.Column('lobby_code', sa.String(length=6), sa.ForeignKey('lobby.code', ondelete='CASCADE'), nullable=False),
        sa.Column('name', sa.String(length=100), nullable=False),
        sa.Column('avatar_color', sa.String(length=20), nullable=True),
        sa.Column('is_host', sa.Boolean(), nullable=False, server_default=sa.false()),
        sa.Column('seat', sa.Integer(), nullable=False, server_default='0'),
        sa.Column('joined_at', sa.Float(), nullable=False),
    )
    op.create_index('ix_player_lobby_code', 'player', ['lobby_code'])
    op.create_table(
        'game_round',
        sa.Column('id', sa.Integer(), primary_key=True),
        sa.Column('lobby_code', sa.String(length=6), sa.ForeignKey('lobby.code', ondelete='CASCADE'), nullable=False),
        sa.Column('round_number', sa.Integer(), nullable=False),
        sa.Column('imposter_id', sa.String(length=255), nullable=False),
        sa.Column('word', sa.String(length=100), nullable=False),
        sa.Column('category', sa.String(length=100), nullable=False),
        sa.Column('phase', sa.String(length=20), nullable=False, server_default='word_reveal'),
        sa.Column('round_start_time', sa.Float(), nullable=False),
        sa.Column('round_end_time', sa.Float(), nullable=True),
        sa.UniqueConstraint('lobby_code', 'round_number', name='uq_round_lobby_number'),
    )
    op.create_index('ix_game_round_lobby_code', 'game_round', ['lobby_code'])
    op.create_table(
        'vote',
        sa.Column('id', sa.Integer(), primary_key=True),
        sa.Column('lobby_code', sa.String(length=6), sa.ForeignKey('lobby.code', ondelete='CASCADE'), nullable=False),
        sa.Column('round_number', sa.Integer(), nullable=False),
        sa.Column('voter_id', sa.String(length=255), sa.ForeignKey('player.id', ondelete='CASCADE'), nullable=False),
        sa.Column('voted_for_id', sa.String(length=255), sa.ForeignKey('player.id', ondelete='CASCADE'), nullable=False),
        sa.UniqueConstraint('lobby_code', 'round_number', 'voter_id', name='uq_vote_voter_per_round'),
    )
    op.create_index('ix_vote_lobby_code', 'vote', ['lobby_code'])
    op.create_table(
        'elimination',
        sa.Column('id', sa.Integer(), primary_key=True),
        sa.Column('lobby_code', sa.String(length=6), sa.ForeignKey('lobby.code', ondelete='CASCADE'), nullable=False),
        sa.Column('round_number', sa.Integer(), nullable=False),
        sa.Column('player_id', sa.String(length=255), sa.ForeignKey('player.id', ondelete='CASCADE'), nullable=False),
        sa.UniqueConstraint('lobby_code', 'player_id', name='uq_elimination_player'),
    )
    op.create_index('ix_elimination_lobby_code', 'elimination', ['lobby_code'])
    op.create_table(
        'score',
        sa.Column('id', sa.Integer(), primary_key=True),
        sa.Column('lobby_code', sa.String(length=6), sa.ForeignKey('lobby.code', ondelete='CASCADE'), nullable=False),
        sa.Column('player_id', sa.String(length=255), sa.ForeignKey('player.id', ondelete='CASCADE'), nullable=False),
        sa.Column('total_score', sa.Integer(), nullable=False, server_default='0'),
        sa.Column('correct_votes', sa.Integer(), nullable=False, server_default='0'),
        sa.Column('survived_as_imposter', sa.Integer(), nullable=False, server_default='0'),
        sa.Column('rounds_as_imposter', sa.Integer(), nullable=False, server_default='0'),
        sa.UniqueConstraint('lobby_code', 'player_id', name='uq_score_player'),
    )
    op.create_index('ix_score_lobby_code', 'score', ['lobby_code'])
    op.create_table(
        'game_history',
        sa.Column('id', sa.Integer(), primary_key=True),
        sa.Column('lobby_code', sa.String(length=6), nullable=False),
        sa.Column('player_id', sa.String(length=255), nullable=False),
        sa.Column('player_name', sa.String(length=100), nullable=False),
        sa.Column('opponent_id', sa.String(length=255), nullable=False),
        sa.Column('opponent_name', sa.String(length=100), nullable=False),
        sa.Column('won', sa.Boolean(), nullable=False, server_default=sa.false()),
        sa.Column('was_imposter', sa.Boolean(), nullable=False, server_default=sa.false()),
        sa.Column('caught_as_imposter', sa.Boolean(), nullable=False, server_default=sa.false()),
        sa.Column('survived_as_imposter', sa.Boolean(), nullable=False, server_default=sa.false()),
        sa.Column('played_at', sa.Float(), nullable=False),
    )
    op.create_index('ix_game_history_player_name', 'game_history', ['player_name'])
    op.create_table(
        'word_category',
        sa.Column('category', sa.String(length=100), primary_key=True),
        sa.Column('words', sa.Text(), nullable=False),
    )


def downgrade():
    op.drop_table('word_category')
    op.drop_index('ix_game_history_player_name', table_name='game_history')
    op.drop_table('game_history')
    op.drop_index('ix_score_lobby_code', table_name='score')
    op.drop_table('score')
    op.drop_index('ix_elimination_lobby_code', table_name='elimination')
    op.drop_table('elimination')
    op.drop_index('ix_vote_lobby_code', table_name='vote')
    op.drop_table('vote')
    op.drop_index('ix_game_round_lobby_code', table_name='game_round')
    op.drop_table('game_round')
    op.drop_index('ix_player_lobby_code', table_name='player')
    op.drop_table('player')
    op.drop_table('lobby')
