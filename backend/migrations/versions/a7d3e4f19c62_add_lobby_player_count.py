"""add player_count to lobby

Revision ID: a7d3e4f19c62
Revises: 5c2d7e91a0b4
Create Date: 2026-10-19 00:00:00
"""

from alembic import op
import sqlalchemy as sa


# revision identifiers, used by Alembic.
revision = 'a7d3e4f19c62'
down_revision = '5c2d7e91a0b4'
branch_labels = None
depends_on = None


def upgrade():
    bind = op.get_bind()
    insp = sa.inspect(bind)
    cols = {c['name'] for c in insp.get_columns('lobby')}
    if 'player_count' not in cols:
        with op.batch_alter_table('lobby') as batch_op:
            batch_op.add_column(sa.Column('player_count', sa.Integer(), nullable=False, server_default='0'))
    # Backfill seats already taken
    op.execute(
        'UPDATE lobby SET player_count = '
        '(SELECT COUNT(*) FROM player WHERE player.lobby_code = lobby.code)'
    )


def downgrade():
    with op.batch_alter_table('lobby') as batch_op:
        batch_op.drop_column('player_count')
