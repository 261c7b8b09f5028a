"""create_karma_tables

Revision ID: 3a7c1e9d2b40
Revises:
Create Date: 2026-10-19 10:12:31.408517

"""
from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa

# revision identifiers, used by Alembic.
revision: str = '3a7c1e9d2b40'
down_revision: Union[str, Sequence[str], None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    """Upgrade schema."""
    op.create_table('users',
    sa.Column('username', sa.String(length=250), nullable=False),
    sa.Column('password', sa.String(length=250), nullable=False),
    sa.UniqueConstraint('password'),
    sa.UniqueConstraint('username'),
    )
    op.create_table('karma',
    sa.Column('id', sa.Integer(), nullable=False),
    sa.Column('purpose', sa.Integer(), nullable=False),
    sa.Column('name', sa.String(length=50), nullable=False),
    sa.PrimaryKeyConstraint('id'),
    sa.UniqueConstraint('name'),
    )
    op.create_table('karma_status',
    sa.Column('id', sa.Integer(), nullable=False),
    sa.Column('karma_id', sa.Integer(), nullable=False),
    sa.Column('closed_with', sa.Integer(), nullable=True),
    sa.Column('current_state', sa.String(length=50), nullable=False),
    sa.Column('timestamp', sa.Integer(), nullable=False),
    sa.ForeignKeyConstraint(['karma_id'], ['karma.id'], ),
    sa.PrimaryKeyConstraint('id'),
    )


def downgrade() -> None:
    """Downgrade schema."""
    op.drop_table('karma_status')
    op.drop_table('karma')
    op.drop_table('users')
