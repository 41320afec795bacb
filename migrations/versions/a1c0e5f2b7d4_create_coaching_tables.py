"""create coaching tables

Revision ID: a1c0e5f2b7d4
Revises:
Create Date: 2026-10-18
"""
from alembic import op
import sqlalchemy as sa
from sqlalchemy.dialects import postgresql


revision = 'a1c0e5f2b7d4'
down_revision = None
branch_labels = None
depends_on = None


def upgrade():
    op.create_table(
        'players',
        sa.Column('id', sa.String(64), primary_key=True),
        sa.Column('name', sa.String(255), nullable=False),
        sa.Column('email', sa.String(255), nullable=True),
        sa.Column('created_at', sa.DateTime(), server_default=sa.func.now(), nullable=False),
    )

    op.create_table(
        'coaches',
        sa.Column('id', sa.String(64), primary_key=True),
        sa.Column('name', sa.String(255), nullable=False),
        sa.Column('email', sa.String(255), nullable=True),
        sa.Column('available_days', postgresql.JSONB(), nullable=True),
        sa.Column('availability', postgresql.JSONB(), nullable=True),
        sa.Column('created_at', sa.DateTime(), server_default=sa.func.now(), nullable=False),
    )

    op.create_table(
        'subscriptions',
        sa.Column('id', sa.String(64), primary_key=True),
        sa.Column('player_id', sa.String(64), nullable=False),
        sa.Column('coach_id', sa.String(64), nullable=False),
        sa.Column('status', sa.String(16), nullable=False, server_default='pending'),
        sa.Column('start_date', sa.Date(), nullable=False),
        sa.Column('end_date', sa.Date(), nullable=False),
        sa.Column('created_at', sa.DateTime(), server_default=sa.func.now(), nullable=False),
        sa.Column('updated_at', sa.DateTime(), server_default=sa.func.now(), nullable=False),
        sa.CheckConstraint('start_date <= end_date', name='ck_subscriptions_date_order'),
    )
    op.create_index('ix_subscriptions_player_id', 'subscriptions', ['player_id'])
    op.create_index('ix_subscriptions_coach_id', 'subscriptions', ['coach_id'])
    op.create_index('ix_subscriptions_status', 'subscriptions', ['status'])
    op.create_index('ix_subscriptions_pair', 'subscriptions', ['coach_id', 'player_id'])

    op.create_table(
        'tasks',
        sa.Column('id', sa.String(64), primary_key=True),
        sa.Column('coach_id', sa.String(64), nullable=False),
        sa.Column('player_id', sa.String(64), nullable=False),
        sa.Column('subscription_id', sa.String(64), nullable=False),
        sa.Column('title', sa.String(255), nullable=False),
        sa.Column('description', sa.Text(), nullable=False, server_default=''),
        sa.Column('status', sa.String(16), nullable=False, server_default='pending'),
        sa.Column('start_date', sa.DateTime(), nullable=False),
        sa.Column('due_date', sa.DateTime(), nullable=False),
        sa.Column('submission', postgresql.JSONB(), nullable=True),
        sa.Column('created_at', sa.DateTime(), server_default=sa.func.now(), nullable=False),
        sa.Column('updated_at', sa.DateTime(), server_default=sa.func.now(), nullable=False),
        sa.CheckConstraint('start_date < due_date', name='ck_tasks_date_order'),
    )
    op.create_index('ix_tasks_coach_id', 'tasks', ['coach_id'])
    op.create_index('ix_tasks_player_id', 'tasks', ['player_id'])
    op.create_index('ix_tasks_subscription_id', 'tasks', ['subscription_id'])
    op.create_index('ix_tasks_status', 'tasks', ['status'])
    op.create_index('ix_tasks_pair', 'tasks', ['coach_id', 'player_id'])


def downgrade():
    op.drop_table('tasks')
    op.drop_table('subscriptions')
    op.drop_table('coaches')
    op.drop_table('players')
