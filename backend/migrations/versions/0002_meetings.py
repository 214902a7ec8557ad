"""meetings table

Revision ID: 0002_meetings
Revises: 0001_initial_crm
Create Date: 2026-10-20
"""
from __future__ import annotations
from alembic import op
import sqlalchemy as sa

revision = '0002_meetings'
down_revision = '0001_initial_crm'
branch_labels = None
depends_on = None


def upgrade():
    op.create_table('meetings',
        sa.Column('id', sa.String(length=36), primary_key=True),
        sa.Column('title', sa.String(length=255), nullable=False),
        sa.Column('start_date', sa.DateTime()),
        sa.Column('start_time', sa.DateTime()),
        sa.Column('end_time', sa.DateTime()),
        sa.Column('repeat_meeting', sa.Boolean(), nullable=False, server_default=sa.text('0')),
        sa.Column('frequency', sa.String(length=16), nullable=False, server_default='Daily'),
        sa.Column('repeat_on', sa.String(length=64)),
        sa.Column('repeat_every', sa.Integer(), nullable=False, server_default=sa.text('0')),
        sa.Column('ends', sa.String(length=16), nullable=False, server_default='Never'),
        sa.Column('location', sa.String(length=255)),
        sa.Column('link', sa.String(length=512)),
        sa.Column('linked_id', sa.String(length=36), sa.ForeignKey('users.id'), nullable=False),
        sa.Column('assigned_id', sa.String(length=36), sa.ForeignKey('users.id')),
        sa.Column('owner_id', sa.String(length=36), sa.ForeignKey('users.id'), nullable=False),
        sa.Column('participants', sa.JSON()),
        sa.Column('status', sa.String(length=16), nullable=False, server_default='Scheduled'),
        sa.Column('tags', sa.JSON()),
        sa.Column('notes', sa.Text()),
        sa.Column('files', sa.JSON()),
        sa.Column('created_at', sa.DateTime(), nullable=False),
        sa.Column('updated_at', sa.DateTime(), nullable=False),
    )
    for col in ('title', 'start_date', 'linked_id', 'assigned_id', 'owner_id', 'status', 'created_at'):
        op.create_index(f'ix_meetings_{col}', 'meetings', [col])


def downgrade():
    op.drop_table('meetings')
