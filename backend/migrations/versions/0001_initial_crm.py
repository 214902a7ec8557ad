"""initial crm tables

Revision ID: 0001_initial_crm
Revises: 
Create Date: 2026-10-19
"""
from __future__ import annotations
from alembic import op
import sqlalchemy as sa

revision = '0001_initial_crm'
down_revision = None
branch_labels = None
depends_on = None


def _timestamps():
    return [
        sa.Column('created_at', sa.DateTime(), nullable=False),
        sa.Column('updated_at', sa.DateTime(), nullable=False),
    ]


def upgrade():
    op.create_table('users',
        sa.Column('id', sa.String(length=36), primary_key=True),
        sa.Column('name', sa.String(length=128)),
        sa.Column('email', sa.String(length=128), nullable=False, unique=True),
        sa.Column('password_hash', sa.String(length=255), nullable=False, server_default=''),
        sa.Column('status', sa.String(length=16), nullable=False, server_default='Inactive'),
        sa.Column('last_login', sa.DateTime()),
        *_timestamps()
    )
    op.create_index('ix_users_email', 'users', ['email'])
    op.create_index('ix_users_status', 'users', ['status'])
    op.create_index('ix_users_created_at', 'users', ['created_at'])

    op.create_table('companies',
        sa.Column('id', sa.String(length=36), primary_key=True),
        sa.Column('full_name', sa.String(length=200), nullable=False),
        sa.Column('industry', sa.String(length=120), nullable=False),
        sa.Column('email', sa.String(length=200)),
        sa.Column('phone', sa.String(length=64)),
        sa.Column('website', sa.String(length=255)),
        sa.Column('status', sa.String(length=16), nullable=False, server_default='Active'),
        sa.Column('tags', sa.JSON()),
        sa.Column('assignees', sa.JSON()),
        sa.Column('notes', sa.Text()),
        sa.Column('files', sa.JSON()),
        sa.Column('owner_id', sa.String(length=36), sa.ForeignKey('users.id'), nullable=False),
        sa.Column('user_id', sa.String(length=36), sa.ForeignKey('users.id'), nullable=False),
        *_timestamps()
    )
    op.create_index('ix_companies_full_name', 'companies', ['full_name'])
    op.create_index('ix_companies_status', 'companies', ['status'])
    op.create_index('ix_companies_owner_id', 'companies', ['owner_id'])
    op.create_index('ix_companies_created_at', 'companies', ['created_at'])

    for table in ('customers', 'prospects'):
        columns = [
            sa.Column('id', sa.String(length=36), primary_key=True),
            sa.Column('full_name', sa.String(length=200), nullable=False),
            sa.Column('company_id', sa.String(length=36), sa.ForeignKey('companies.id', ondelete='SET NULL')),
            sa.Column('email', sa.String(length=200)),
            sa.Column('phone', sa.String(length=64)),
            sa.Column('status', sa.String(length=16), nullable=False),
            sa.Column('tags', sa.JSON()),
            sa.Column('notes', sa.Text()),
        ]
        if table == 'customers':
            columns.append(sa.Column('files', sa.JSON()))
        columns += [
            sa.Column('owner_id', sa.String(length=36), sa.ForeignKey('users.id'), nullable=False),
            sa.Column('user_id', sa.String(length=36), sa.ForeignKey('users.id'), nullable=False),
            *_timestamps(),
        ]
        op.create_table(table, *columns)
        for col in ('full_name', 'company_id', 'status', 'owner_id', 'created_at'):
            op.create_index(f'ix_{table}_{col}', table, [col])

    op.create_table('deals',
        sa.Column('id', sa.String(length=36), primary_key=True),
        sa.Column('deal_name', sa.String(length=200), nullable=False),
        sa.Column('company_id', sa.String(length=36), sa.ForeignKey('companies.id', ondelete='SET NULL')),
        sa.Column('contact_id', sa.String(length=36), sa.ForeignKey('customers.id', ondelete='SET NULL')),
        sa.Column('stage', sa.String(length=16), nullable=False, server_default='New'),
        sa.Column('amount', sa.Float(), nullable=False, server_default=sa.text('0')),
        sa.Column('currency', sa.String(length=3), nullable=False, server_default='USD'),
        sa.Column('owner_id', sa.String(length=36), sa.ForeignKey('users.id'), nullable=False),
        sa.Column('close_date', sa.DateTime()),
        sa.Column('tags', sa.JSON()),
        sa.Column('notes', sa.Text()),
        sa.Column('files', sa.JSON()),
        *_timestamps()
    )
    for col in ('deal_name', 'company_id', 'contact_id', 'stage', 'owner_id', 'created_at'):
        op.create_index(f'ix_deals_{col}', 'deals', [col])

    op.create_table('todos',
        sa.Column('id', sa.String(length=36), primary_key=True),
        sa.Column('task_name', sa.String(length=255), nullable=False),
        sa.Column('linked_id', sa.String(length=36), sa.ForeignKey('users.id'), nullable=False),
        sa.Column('assigned_id', sa.String(length=36), sa.ForeignKey('users.id')),
        sa.Column('owner_id', sa.String(length=36), sa.ForeignKey('users.id'), nullable=False),
        sa.Column('status', sa.String(length=16), nullable=False, server_default='Todo'),
        sa.Column('priority', sa.String(length=16), nullable=False, server_default='High'),
        sa.Column('due_date', sa.DateTime()),
        sa.Column('notes', sa.Text()),
        sa.Column('files', sa.JSON()),
        *_timestamps()
    )
    for col in ('linked_id', 'assigned_id', 'owner_id', 'status', 'created_at'):
        op.create_index(f'ix_todos_{col}', 'todos', [col])

    op.create_table('email_settings',
        sa.Column('id', sa.String(length=36), primary_key=True),
        sa.Column('user_id', sa.String(length=36), sa.ForeignKey('users.id', ondelete='CASCADE'), nullable=False, unique=True),
        sa.Column('host', sa.String(length=255)),
        sa.Column('port', sa.Integer()),
        sa.Column('sender', sa.String(length=255)),
        sa.Column('username', sa.String(length=255)),
        sa.Column('password', sa.String(length=255)),
        sa.Column('updated_at', sa.DateTime(), nullable=False),
    )

    op.create_table('activity_logs',
        sa.Column('id', sa.Integer(), primary_key=True),
        sa.Column('entity_type', sa.String(length=64), nullable=False),
        sa.Column('entity_id', sa.Text(), nullable=False),
        sa.Column('action', sa.String(length=16), nullable=False),
        sa.Column('changed_fields', sa.JSON()),
        sa.Column('previous_values', sa.JSON()),
        sa.Column('new_values', sa.JSON()),
        sa.Column('metadata', sa.JSON()),
        sa.Column('performed_by_id', sa.String(length=36), sa.ForeignKey('users.id'), nullable=False),
        sa.Column('created_at', sa.DateTime(), server_default=sa.func.now()),
    )
    for col in ('entity_type', 'entity_id', 'action', 'performed_by_id', 'created_at'):
        op.create_index(f'ix_activity_logs_{col}', 'activity_logs', [col])


def downgrade():
    for table in ('activity_logs', 'email_settings', 'todos', 'deals', 'prospects', 'customers', 'companies', 'users'):
        op.drop_table(table)
