"""Reports - users flag posts and users for admin review

Revision ID: 0002
Revises: 0001
Create Date: 2026-10-19

"""
from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa

# revision identifiers, used by Alembic.
revision: str = '0002'
down_revision: Union[str, None] = '0001'
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    op.create_table(
        'reports',
        sa.Column('id', sa.Uuid(), primary_key=True),
        sa.Column('reporter_id', sa.Uuid(), sa.ForeignKey('users.id', ondelete='CASCADE'), nullable=False, index=True),
        sa.Column('type', sa.String(20), nullable=False),
        sa.Column('reported_user_id', sa.Uuid(), sa.ForeignKey('users.id', ondelete='CASCADE'), nullable=True, index=True),
        sa.Column('reported_post_id', sa.Uuid(), sa.ForeignKey('posts.id', ondelete='CASCADE'), nullable=True, index=True),
        sa.Column('reason', sa.String(1000), nullable=False),
        sa.Column('status', sa.String(20), nullable=False, default='pending', index=True),
        sa.Column('handled_by_id', sa.Uuid(), sa.ForeignKey('users.id', ondelete='SET NULL'), nullable=True),
        sa.Column('admin_response', sa.String(1000), nullable=True),
        sa.Column('handled_at', sa.DateTime(timezone=True), nullable=True),
        sa.Column('created_at', sa.DateTime(timezone=True), server_default=sa.func.now(), nullable=False),
        sa.Column('updated_at', sa.DateTime(timezone=True), server_default=sa.func.now(), nullable=False),
        sa.UniqueConstraint('reporter_id', 'reported_post_id', name='uq_report_post'),
        sa.UniqueConstraint('reporter_id', 'reported_user_id', name='uq_report_user'),
    )


def downgrade() -> None:
    op.drop_table('reports')
