"""Initial schema: teams, users, projects, work orders, tasks, RACI members and agents.

Revision ID: 001
Revises:
Create Date: 2026-10-19

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

JSON = sa.JSON().with_variant(postgresql.JSONB(), 'postgresql')

ENUM_NAMES = (
    'raci_role', 'project_status', 'work_order_status', 'priority', 'task_status',
    'blocker_reason', 'deliverable_type', 'deliverable_status', 'playbook_type', 'document_type',
)


def _timestamps(index_created: bool = False) -> list[sa.Column]:
    return [
        sa.Column('created_at', sa.DateTime, nullable=False, server_default=sa.func.now(), index=index_created),
        sa.Column('updated_at', sa.DateTime, nullable=False, server_default=sa.func.now()),
    ]


def upgrade() -> None:
    raci_role = sa.Enum('accountable', 'responsible', 'consulted', 'informed', name='raci_role')

    # Users and teams
    op.create_table(
        'users',
        sa.Column('id', sa.Integer, primary_key=True, autoincrement=True),
        sa.Column('name', sa.String(255), nullable=False),
        sa.Column('email', sa.String(255), nullable=False, unique=True, index=True),
        sa.Column('capacity_hours_per_week', sa.Float, server_default='40'),
        sa.Column('current_workload_hours', sa.Float, server_default='0'),
        *_timestamps(),
    )
    op.create_table(
        'teams',
        sa.Column('id', sa.Integer, primary_key=True, autoincrement=True),
        sa.Column('name', sa.String(255), nullable=False),
        sa.Column('owner_id', sa.Integer, sa.ForeignKey('users.id', ondelete='SET NULL'), index=True),
        *_timestamps(),
    )
    op.create_table(
        'team_members',
        sa.Column('id', sa.Integer, primary_key=True, autoincrement=True),
        sa.Column('team_id', sa.Integer, sa.ForeignKey('teams.id', ondelete='CASCADE'), nullable=False, index=True),
        sa.Column('user_id', sa.Integer, sa.ForeignKey('users.id', ondelete='CASCADE'), nullable=False, index=True),
        sa.Column('role', sa.String(50), nullable=False, server_default='member'),
        sa.Column('joined_at', sa.DateTime, nullable=False, server_default=sa.func.now()),
        sa.UniqueConstraint('team_id', 'user_id', name='unique_team_user'),
    )
    op.create_table(
        'user_skills',
        sa.Column('id', sa.Integer, primary_key=True, autoincrement=True),
        sa.Column('user_id', sa.Integer, sa.ForeignKey('users.id', ondelete='CASCADE'), nullable=False, index=True),
        sa.Column('skill_name', sa.String(100), nullable=False),
        sa.Column('proficiency', sa.Integer, nullable=False, server_default='1'),
        sa.CheckConstraint('proficiency BETWEEN 1 AND 3', name='valid_proficiency'),
    )
    op.create_table(
        'user_preferences',
        sa.Column('id', sa.Integer, primary_key=True, autoincrement=True),
        sa.Column('user_id', sa.Integer, sa.ForeignKey('users.id', ondelete='CASCADE'), nullable=False, index=True),
        sa.Column('key', sa.String(100), nullable=False),
        sa.Column('value', sa.String(255)),
        sa.Column('updated_at', sa.DateTime, nullable=False, server_default=sa.func.now()),
        sa.UniqueConstraint('user_id', 'key', name='unique_user_preference'),
    )
    op.create_table(
        'parties',
        sa.Column('id', sa.Integer, primary_key=True, autoincrement=True),
        sa.Column('team_id', sa.Integer, sa.ForeignKey('teams.id', ondelete='CASCADE'), nullable=False, index=True),
        sa.Column('name', sa.String(255), nullable=False),
        sa.Column('created_at', sa.DateTime, nullable=False, server_default=sa.func.now()),
    )

    # Projects and work orders
    op.create_table(
        'projects',
        sa.Column('id', sa.Integer, primary_key=True, autoincrement=True),
        sa.Column('team_id', sa.Integer, sa.ForeignKey('teams.id', ondelete='CASCADE'), nullable=False, index=True),
        sa.Column('party_id', sa.Integer, sa.ForeignKey('parties.id', ondelete='SET NULL'), index=True),
        sa.Column('owner_id', sa.Integer, sa.ForeignKey('users.id', ondelete='SET NULL'), index=True),
        sa.Column('accountable_id', sa.Integer, sa.ForeignKey('users.id', ondelete='SET NULL'), index=True),
        sa.Column('responsible_id', sa.Integer, sa.ForeignKey('users.id', ondelete='SET NULL'), index=True),
        sa.Column('name', sa.String(255), nullable=False),
        sa.Column('description', sa.Text),
        sa.Column('status', sa.Enum('active', 'on_hold', 'completed', 'archived', name='project_status'),
                  nullable=False, server_default='active'),
        sa.Column('start_date', sa.Date),
        sa.Column('target_end_date', sa.Date),
        sa.Column('budget_hours', sa.Float, server_default='0'),
        sa.Column('actual_hours', sa.Float, server_default='0'),
        sa.Column('progress', sa.Integer, nullable=False, server_default='0'),
        sa.Column('tags', JSON, nullable=False, server_default='[]'),
        sa.Column('is_private', sa.Boolean, nullable=False, server_default=sa.false()),
        sa.Column('deleted_at', sa.DateTime, index=True),
        *_timestamps(index_created=True),
    )
    op.create_table(
        'work_orders',
        sa.Column('id', sa.Integer, primary_key=True, autoincrement=True),
        sa.Column('team_id', sa.Integer, sa.ForeignKey('teams.id', ondelete='CASCADE'), nullable=False, index=True),
        sa.Column('project_id', sa.Integer, sa.ForeignKey('projects.id', ondelete='CASCADE'), nullable=False, index=True),
        sa.Column('assigned_to_id', sa.Integer, sa.ForeignKey('users.id', ondelete='SET NULL'), index=True),
        sa.Column('created_by_id', sa.Integer, sa.ForeignKey('users.id', ondelete='SET NULL')),
        sa.Column('accountable_id', sa.Integer, sa.ForeignKey('users.id', ondelete='SET NULL'), index=True),
        sa.Column('responsible_id', sa.Integer, sa.ForeignKey('users.id', ondelete='SET NULL'), index=True),
        sa.Column('reviewer_id', sa.Integer, sa.ForeignKey('users.id', ondelete='SET NULL')),
        sa.Column('title', sa.String(255), nullable=False),
        sa.Column('description', sa.Text),
        sa.Column('status', sa.Enum('draft', 'active', 'in_review', 'approved', 'delivered', 'blocked', 'cancelled',
                                    'revision_requested', 'archived', name='work_order_status'),
                  nullable=False, server_default='draft'),
        sa.Column('priority', sa.Enum('low', 'medium', 'high', 'urgent', name='priority'),
                  nullable=False, server_default='medium'),
        sa.Column('due_date', sa.Date, index=True),
        sa.Column('estimated_hours', sa.Float),
        sa.Column('actual_hours', sa.Float, server_default='0'),
        sa.Column('acceptance_criteria', JSON, nullable=False, server_default='[]'),
        sa.Column('sop_attached', sa.Boolean, nullable=False, server_default=sa.false()),
        sa.Column('sop_name', sa.String(255)),
        sa.Column('deleted_at', sa.DateTime, index=True),
        *_timestamps(index_created=True),
    )

    # Consulted / informed memberships
    op.create_table(
        'project_raci_members',
        sa.Column('id', sa.Integer, primary_key=True, autoincrement=True),
        sa.Column('project_id', sa.Integer, sa.ForeignKey('projects.id', ondelete='CASCADE'), nullable=False, index=True),
        sa.Column('user_id', sa.Integer, sa.ForeignKey('users.id', ondelete='CASCADE'), nullable=False, index=True),
        sa.Column('role', raci_role, nullable=False),
        sa.UniqueConstraint('project_id', 'user_id', 'role', name='uq_project_raci_member'),
        sa.CheckConstraint("role IN ('consulted', 'informed')", name='project_raci_set_role'),
    )
    op.create_table(
        'work_order_raci_members',
        sa.Column('id', sa.Integer, primary_key=True, autoincrement=True),
        sa.Column('work_order_id', sa.Integer, sa.ForeignKey('work_orders.id', ondelete='CASCADE'), nullable=False, index=True),
        sa.Column('user_id', sa.Integer, sa.ForeignKey('users.id', ondelete='CASCADE'), nullable=False, index=True),
        sa.Column('role', raci_role, nullable=False),
        sa.UniqueConstraint('work_order_id', 'user_id', 'role', name='uq_work_order_raci_member'),
        sa.CheckConstraint("role IN ('consulted', 'informed')", name='work_order_raci_set_role'),
    )

    # Tasks, deliverables, playbooks, documents
    op.create_table(
        'tasks',
        sa.Column('id', sa.Integer, primary_key=True, autoincrement=True),
        sa.Column('team_id', sa.Integer, sa.ForeignKey('teams.id', ondelete='CASCADE'), nullable=False, index=True),
        sa.Column('work_order_id', sa.Integer, sa.ForeignKey('work_orders.id', ondelete='CASCADE'), nullable=False, index=True),
        sa.Column('project_id', sa.Integer, sa.ForeignKey('projects.id', ondelete='CASCADE'), nullable=False, index=True),
        sa.Column('assigned_to_id', sa.Integer, sa.ForeignKey('users.id', ondelete='SET NULL'), index=True),
        sa.Column('created_by_id', sa.Integer, sa.ForeignKey('users.id', ondelete='SET NULL')),
        sa.Column('reviewer_id', sa.Integer, sa.ForeignKey('users.id', ondelete='SET NULL')),
        sa.Column('title', sa.String(255), nullable=False),
        sa.Column('description', sa.Text),
        sa.Column('status', sa.Enum('todo', 'in_progress', 'in_review', 'approved', 'done', 'blocked', 'cancelled',
                                    'revision_requested', 'archived', name='task_status'),
                  nullable=False, server_default='todo'),
        sa.Column('due_date', sa.Date, index=True),
        sa.Column('estimated_hours', sa.Float, server_default='0'),
        sa.Column('actual_hours', sa.Float, server_default='0'),
        sa.Column('checklist_items', JSON, nullable=False, server_default='[]'),
        sa.Column('dependencies', JSON, nullable=False, server_default='[]'),
        sa.Column('is_blocked', sa.Boolean, nullable=False, server_default=sa.false(), index=True),
        sa.Column('blocker_reason', sa.Enum('waiting_on_external', 'missing_information', 'technical_issue',
                                            'waiting_on_approval', name='blocker_reason')),
        sa.Column('blocker_details', sa.Text),
        sa.Column('position_in_work_order', sa.Integer, nullable=False, server_default='1'),
        sa.Column('deleted_at', sa.DateTime, index=True),
        *_timestamps(index_created=True),
    )
    op.create_table(
        'deliverables',
        sa.Column('id', sa.Integer, primary_key=True, autoincrement=True),
        sa.Column('team_id', sa.Integer, sa.ForeignKey('teams.id', ondelete='CASCADE'), nullable=False, index=True),
        sa.Column('work_order_id', sa.Integer, sa.ForeignKey('work_orders.id', ondelete='CASCADE'), nullable=False, index=True),
        sa.Column('project_id', sa.Integer, sa.ForeignKey('projects.id', ondelete='CASCADE'), nullable=False, index=True),
        sa.Column('title', sa.String(255), nullable=False),
        sa.Column('description', sa.Text),
        sa.Column('type', sa.Enum('document', 'design', 'report', 'code', 'other', name='deliverable_type'),
                  nullable=False, server_default='other'),
        sa.Column('status', sa.Enum('draft', 'in_review', 'approved', 'delivered', name='deliverable_status'),
                  nullable=False, server_default='draft'),
        sa.Column('version', sa.String(20), nullable=False, server_default='1.0'),
        sa.Column('acceptance_criteria', JSON, nullable=False, server_default='[]'),
        sa.Column('created_date', sa.Date),
        sa.Column('delivered_date', sa.Date),
        sa.Column('deleted_at', sa.DateTime, index=True),
        *_timestamps(),
    )
    op.create_table(
        'playbooks',
        sa.Column('id', sa.Integer, primary_key=True, autoincrement=True),
        sa.Column('team_id', sa.Integer, sa.ForeignKey('teams.id', ondelete='CASCADE'), nullable=False, index=True),
        sa.Column('name', sa.String(255), nullable=False),
        sa.Column('description', sa.Text),
        sa.Column('type', sa.Enum('sop', 'checklist', 'template', 'acceptance_criteria', name='playbook_type'),
                  nullable=False, server_default='sop'),
        sa.Column('tags', JSON, nullable=False, server_default='[]'),
        sa.Column('content', JSON),
        sa.Column('times_applied', sa.Integer, nullable=False, server_default='0'),
        sa.Column('last_used', sa.DateTime),
        sa.Column('ai_generated', sa.Boolean, nullable=False, server_default=sa.false()),
        sa.Column('deleted_at', sa.DateTime, index=True),
        *_timestamps(),
    )
    op.create_table(
        'documents',
        sa.Column('id', sa.Integer, primary_key=True, autoincrement=True),
        sa.Column('team_id', sa.Integer, sa.ForeignKey('teams.id', ondelete='CASCADE'), nullable=False, index=True),
        sa.Column('documentable_type', sa.String(20), nullable=False),
        sa.Column('documentable_id', sa.Integer, nullable=False),
        sa.Column('folder_id', sa.Integer),
        sa.Column('name', sa.String(255), nullable=False),
        sa.Column('type', sa.Enum('reference', 'artifact', 'evidence', 'template', name='document_type'),
                  nullable=False, server_default='reference'),
        sa.Column('file_url', sa.String(1024)),
        sa.Column('file_size', sa.Integer),
        sa.Column('deleted_at', sa.DateTime, index=True),
        sa.Column('created_at', sa.DateTime, nullable=False, server_default=sa.func.now(), index=True),
        sa.CheckConstraint("documentable_type IN ('project', 'work_order')", name='valid_documentable_type'),
    )

    # Audit and agents
    op.create_table(
        'audit_logs',
        sa.Column('id', sa.Integer, primary_key=True, autoincrement=True),
        sa.Column('team_id', sa.Integer, sa.ForeignKey('teams.id', ondelete='CASCADE'), nullable=False, index=True),
        sa.Column('actor_type', sa.String(20), nullable=False),
        sa.Column('actor_id', sa.String(50)),
        sa.Column('actor_name', sa.String(255)),
        sa.Column('action', sa.String(100), nullable=False, index=True),
        sa.Column('details', sa.Text),
        sa.Column('target', sa.String(100)),
        sa.Column('target_id', sa.String(50)),
        sa.Column('ip_address', sa.String(45)),
        sa.Column('created_at', sa.DateTime, nullable=False, server_default=sa.func.now(), index=True),
    )
    op.create_table(
        'ai_agents',
        sa.Column('id', sa.Integer, primary_key=True, autoincrement=True),
        sa.Column('name', sa.String(255), nullable=False),
        sa.Column('agent_type', sa.String(50), nullable=False, server_default='pm_copilot'),
        sa.Column('is_active', sa.Boolean, nullable=False, server_default=sa.true()),
        sa.Column('created_at', sa.DateTime, nullable=False, server_default=sa.func.now()),
    )
    op.create_table(
        'agent_configurations',
        sa.Column('id', sa.Integer, primary_key=True, autoincrement=True),
        sa.Column('team_id', sa.Integer, sa.ForeignKey('teams.id', ondelete='CASCADE'), nullable=False, index=True),
        sa.Column('ai_agent_id', sa.Integer, sa.ForeignKey('ai_agents.id', ondelete='CASCADE'), nullable=False, index=True),
        sa.Column('enabled', sa.Boolean, nullable=False, server_default=sa.true()),
        sa.Column('can_modify_tasks', sa.Boolean, nullable=False, server_default=sa.false()),
        sa.Column('can_create_work_orders', sa.Boolean, nullable=False, server_default=sa.false()),
        sa.Column('can_modify_deliverables', sa.Boolean, nullable=False, server_default=sa.false()),
        sa.Column('can_modify_playbooks', sa.Boolean, nullable=False, server_default=sa.false()),
        sa.Column('can_access_client_data', sa.Boolean, nullable=False, server_default=sa.false()),
        sa.Column('can_send_emails', sa.Boolean, nullable=False, server_default=sa.false()),
        sa.Column('can_access_financial_data', sa.Boolean, nullable=False, server_default=sa.false()),
        sa.Column('tool_permissions', JSON),
        sa.UniqueConstraint('team_id', 'ai_agent_id', name='unique_team_agent_configuration'),
    )
    op.create_table(
        'agent_activity_logs',
        sa.Column('id', sa.Integer, primary_key=True, autoincrement=True),
        sa.Column('team_id', sa.Integer, sa.ForeignKey('teams.id', ondelete='CASCADE'), nullable=False, index=True),
        sa.Column('ai_agent_id', sa.Integer, sa.ForeignKey('ai_agents.id', ondelete='CASCADE'), index=True),
        sa.Column('run_type', sa.String(50), nullable=False),
        sa.Column('input', sa.Text),
        sa.Column('output', sa.Text),
        sa.Column('error', sa.Text),
        sa.Column('tool_calls', JSON),
        sa.Column('context_accessed', JSON),
        sa.Column('duration_ms', sa.Integer),
        sa.Column('created_at', sa.DateTime, nullable=False, server_default=sa.func.now(), index=True),
    )


def downgrade() -> None:
    # Drop tables (children first)
    for table in (
        'agent_activity_logs', 'agent_configurations', 'ai_agents', 'audit_logs',
        'documents', 'playbooks', 'deliverables', 'tasks',
        'work_order_raci_members', 'project_raci_members', 'work_orders', 'projects',
        'parties', 'user_preferences', 'user_skills', 'team_members', 'teams', 'users',
    ):
        op.drop_table(table)

    # Drop enums
    for enum_name in ENUM_NAMES:
        op.execute(f'DROP TYPE IF EXISTS {enum_name}')
