"""add player_rankings table

Revision ID: 5c2d7e9a1b3f
Revises:
Create Date: 2026-10-19
"""

from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa


# revision identifiers, used by Alembic.
revision: str = '5c2d7e9a1b3f'
down_revision: Union[str, None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    op.create_table(
        'player_rankings',
        sa.Column('id', sa.Integer(), nullable=False),
        sa.Column('username', sa.String(length=64), nullable=False),
        sa.Column('playstyle', sa.Integer(), nullable=False),
        sa.Column('movement', sa.Integer(), nullable=False),
        sa.Column('pvp', sa.Integer(), nullable=False),
        sa.Column('building', sa.Integer(), nullable=False),
        sa.Column('projectiles', sa.Integer(), nullable=False),
        sa.Column('overall_score', sa.Float(), nullable=False),
        sa.Column('tier', sa.String(length=16), nullable=False),
        sa.Column('updated_at', sa.DateTime(timezone=True), nullable=False),
        sa.PrimaryKeyConstraint('id'),
    )
    op.create_index(op.f('ix_player_rankings_username'), 'player_rankings', ['username'], unique=True)
    op.create_index(op.f('ix_player_rankings_tier'), 'player_rankings', ['tier'])


def downgrade() -> None:
    op.drop_index(op.f('ix_player_rankings_tier'), table_name='player_rankings')
    op.drop_index(op.f('ix_player_rankings_username'), table_name='player_rankings')
    op.drop_table('player_rankings')
