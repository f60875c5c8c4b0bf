"""Add failed_at column to outbox_events

Revision ID: 002
Revises: 001
Create Date: 2024-02-12

"""
from alembic import op
import sqlalchemy as sa


# revision identifiers, used by Alembic.
revision = '002'
down_revision = '001'
branch_labels = None
depends_on = None


def upgrade():
    op.add_column(
        'outbox_events',
        sa.Column('failed_at', sa.DateTime(), nullable=True)
    )
    op.create_index('ix_outbox_events_dispatched_at', 'outbox_events', ['dispatched_at'])


def downgrade():
    op.drop_index('ix_outbox_events_dispatched_at', table_name='outbox_events')
    op.drop_column('outbox_events', 'failed_at')
