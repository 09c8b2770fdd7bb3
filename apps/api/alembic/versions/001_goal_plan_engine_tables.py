"""goal plan engine tables

Revision ID: 001
Revises: 
Create Date: 2026-10-17 00:00:00.000000

"""
from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa
from sqlalchemy.dialects import postgresql

# revision identifiers, used by Alembic.
revision: str = '001'
down_revision: Union[str, None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    # Standards catalog (seeded + AI-discovered)
    op.create_table(
        'metric_standard',
        sa.Column('id', postgresql.UUID(as_uuid=True), primary_key=True),
        sa.Column('metric_key', sa.Text(), nullable=False),
        sa.Column('standard_type', sa.Text(), nullable=False),
        sa.Column('category', sa.Text(), nullable=False),
        sa.Column('age_min', sa.Integer(), nullable=True),
        sa.Column('age_max', sa.Integer(), nullable=True),
        sa.Column('gender', sa.Text(), server_default='all', nullable=False),
        sa.Column('value_min', sa.Float(), nullable=True),
        sa.Column('value_max', sa.Float(), nullable=True),
        sa.Column('value_single', sa.Float(), nullable=True),
        sa.Column('unit', sa.Text(), nullable=False),
        sa.Column('percentile', sa.Integer(), nullable=True),
        sa.Column('level', sa.Text(), nullable=True),
        sa.Column('source_name', sa.Text(), nullable=False),
        sa.Column('source_url', sa.Text(), nullable=True),
        sa.Column('source_description', sa.Text(), nullable=True),
        sa.Column('confidence_score', sa.Float(), server_default='1.0', nullable=False),
        sa.Column('evidence_level', sa.Text(), nullable=False),
        sa.Column('is_active', sa.Boolean(), server_default=sa.true(), nullable=False),
        sa.Column('verified_by_admin', sa.Boolean(), server_default=sa.false(), nullable=False),
        sa.Column('usage_count', sa.Integer(), server_default='0', nullable=False),
        sa.Column('last_verified_at', sa.DateTime(timezone=True), nullable=True),
        sa.Column('created_at', sa.DateTime(timezone=True), server_default=sa.text('now()'), nullable=False),
        sa.Column('updated_at', sa.DateTime(timezone=True), server_default=sa.text('now()'), nullable=False),
        sa.CheckConstraint(
            'confidence_score >= 0 AND confidence_score <= 1',
            name='ck_metric_standard_confidence',
        ),
    )
    op.create_index('ix_metric_standard_metric_key', 'metric_standard', ['metric_key'])
    op.create_index('ix_metric_standard_lookup', 'metric_standard', ['metric_key', 'gender', 'is_active'])

    op.create_table(
        'goal_milestone',
        sa.Column('id', postgresql.UUID(as_uuid=True), primary_key=True),
        sa.Column('goal_id', sa.Text(), nullable=False),
        sa.Column('title', sa.Text(), nullable=False),
        sa.Column('description', sa.Text(), nullable=True),
        sa.Column('due_date', sa.Date(), nullable=False),
        sa.Column('completion_rule', postgresql.JSONB(), nullable=True),
        sa.Column('status', sa.Text(), server_default='pending', nullable=False),
        sa.Column('progress_pct', sa.Integer(), server_default='0', nullable=False),
        sa.Column('created_at', sa.DateTime(timezone=True), server_default=sa.text('now()'), nullable=False),
    )
    op.create_index('ix_goal_milestone_goal_id', 'goal_milestone', ['goal_id'])

    op.create_table(
        'goal_plan',
        sa.Column('id', postgresql.UUID(as_uuid=True), primary_key=True),
        sa.Column('goal_id', sa.Text(), nullable=False),
        sa.Column('plan_type', sa.Text(), nullable=False),
        sa.Column('period', sa.Text(), server_default='weekly', nullable=False),
        sa.Column('content_json', postgresql.JSONB(), nullable=False),
        sa.Column('version', sa.Integer(), server_default='1', nullable=False),
        sa.Column('source_prompt_hash', sa.Text(), nullable=True),
        sa.Column('is_active', sa.Integer(), server_default='1', nullable=False),
        sa.Column('created_at', sa.DateTime(timezone=True), server_default=sa.text('now()'), nullable=False),
    )
    op.create_index('ix_goal_plan_goal_id', 'goal_plan', ['goal_id'])
    op.create_index('ix_goal_plan_goal_type', 'goal_plan', ['goal_id', 'plan_type'])


def downgrade() -> None:
    op.drop_index('ix_goal_plan_goal_type', table_name='goal_plan')
    op.drop_index('ix_goal_plan_goal_id', table_name='goal_plan')
    op.drop_table('goal_plan')
    op.drop_index('ix_goal_milestone_goal_id', table_name='goal_milestone')
    op.drop_table('goal_milestone')
    op.drop_index('ix_metric_standard_lookup', table_name='metric_standard')
    op.drop_index('ix_metric_standard_metric_key', table_name='metric_standard')
    op.drop_table('metric_standard')
