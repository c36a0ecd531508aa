"""Initial EcoPermit Administration schema

Revision ID: 001_initial
Revises: 
Create Date: 2026-10-18

Profiles, entities, permit applications with their initial and compliance
assessments, unit tasks, audit trail, notifications and the fee schedule.
Money as INTEGER CENTS.
"""
from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa
from sqlalchemy.dialects import postgresql

# revision identifiers, used by Alembic.
revision: str = '001_initial'
down_revision: Union[str, None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None

ENUMS = {
    'usertype': ('public', 'staff', 'admin', 'super_admin'),
    'staffunit': ('registry', 'revenue', 'compliance', 'finance', 'directorate', 'systems_admin'),
    'staffposition': ('officer', 'manager', 'director', 'managing_director'),
    'applicationstatus': (
        'draft', 'submitted', 'under_initial_review', 'requires_clarification',
        'under_technical_review', 'pending_decision', 'approved', 'rejected', 'cancelled',
    ),
    'initialassessmentstatus': ('pending', 'passed', 'failed', 'requires_clarification'),
    'complianceassessmentstatus': ('pending', 'in_progress', 'passed', 'failed', 'requires_clarification'),
    'taskstatus': ('pending', 'in_progress', 'completed', 'overdue'),
    'taskpriority': ('low', 'normal', 'high', 'urgent'),
    'auditactiontype': (
        'status_changed', 'assessment_created', 'assessment_updated', 'officer_assigned', 'fee_calculated',
    ),
}

TASK_TABLES = ('registry_tasks', 'compliance_tasks', 'revenue_tasks')


def enum(name: str) -> postgresql.ENUM:
    # Types are created up front, several tables share them
    return postgresql.ENUM(*ENUMS[name], name=name, create_type=False)


def uuid_fk(name: str, target: str, ondelete: str, nullable: bool = True, **kwargs) -> sa.Column:
    return sa.Column(
        name,
        postgresql.UUID(as_uuid=True),
        sa.ForeignKey(target, ondelete=ondelete),
        nullable=nullable,
        **kwargs,
    )


def upgrade() -> None:
    for name, values in ENUMS.items():
        labels = ", ".join(f"'{v}'" for v in values)
        op.execute(f"CREATE TYPE {name} AS ENUM ({labels})")

    # === PROFILES ===
    op.create_table(
        'profiles',
        sa.Column('id', postgresql.UUID(as_uuid=True), primary_key=True),
        sa.Column('firebase_uid', sa.String(128), unique=True, nullable=False, index=True),
        sa.Column('email', sa.String(255), unique=True, nullable=False, index=True),
        sa.Column('first_name', sa.String(100), nullable=True),
        sa.Column('last_name', sa.String(100), nullable=True),
        sa.Column('phone', sa.String(50), nullable=True),
        sa.Column('organization', sa.String(255), nullable=True),
        sa.Column('user_type', enum('usertype'), nullable=False, server_default='public'),
        sa.Column('staff_unit', enum('staffunit'), nullable=True, index=True),
        sa.Column('staff_position', enum('staffposition'), nullable=True),
        sa.Column('is_active', sa.Boolean(), default=True),
        sa.Column('created_at', sa.DateTime(), nullable=False),
        sa.Column('updated_at', sa.DateTime(), nullable=False),
    )

    # === ENTITIES ===
    op.create_table(
        'entities',
        sa.Column('id', postgresql.UUID(as_uuid=True), primary_key=True),
        uuid_fk('user_id', 'profiles.id', 'CASCADE', nullable=False, index=True),
        sa.Column('name', sa.String(255), nullable=False),
        sa.Column('entity_type', sa.String(50), nullable=False),
        sa.Column('registration_number', sa.String(100), nullable=True),
        sa.Column('tax_number', sa.String(100), nullable=True),
        sa.Column('email', sa.String(255), nullable=True),
        sa.Column('phone', sa.String(50), nullable=True),
        sa.Column('contact_person', sa.String(255), nullable=True),
        sa.Column('postal_address', sa.Text(), nullable=True),
        sa.Column('province', sa.String(100), nullable=True),
        sa.Column('district', sa.String(100), nullable=True),
        sa.Column('is_suspended', sa.Boolean(), default=False),
        sa.Column('created_at', sa.DateTime(), nullable=False),
        sa.Column('updated_at', sa.DateTime(), nullable=False),
    )

    # === FEE SCHEDULE ===
    op.create_table(
        'prescribed_activities',
        sa.Column('id', postgresql.UUID(as_uuid=True), primary_key=True),
        sa.Column('category_number', sa.String(20), nullable=False),
        sa.Column('category_type', sa.String(100), nullable=False),
        sa.Column('sub_category', sa.String(100), nullable=False, server_default='general'),
        sa.Column('activity_description', sa.Text(), nullable=False),
        sa.Column('level', sa.Integer(), nullable=False),
        sa.Column('fee_category', sa.String(20), nullable=True),
        sa.Column('created_at', sa.DateTime(), nullable=False),
        sa.CheckConstraint('level BETWEEN 1 AND 3', name='ck_prescribed_activity_level'),
    )
    op.create_table(
        'fee_structures',
        sa.Column('id', postgresql.UUID(as_uuid=True), primary_key=True),
        sa.Column('activity_type', sa.String(50), nullable=False, index=True),
        sa.Column('permit_operation', sa.String(50), nullable=False, server_default='new'),
        sa.Column('fee_category', sa.String(50), nullable=False),
        sa.Column('annual_recurrent_fee_cents', sa.Integer(), nullable=False),
        sa.Column('base_processing_days', sa.Integer(), nullable=False, server_default='30'),
        sa.Column('work_plan_amount_cents', sa.Integer(), nullable=False, server_default='0'),
        sa.Column('category_multiplier', sa.Float(), nullable=False, server_default='1.0'),
        sa.Column('administration_form', sa.String(20), nullable=False, server_default='Form 2'),
        sa.Column('technical_form', sa.String(20), nullable=False, server_default='Form 9'),
        sa.Column('is_active', sa.Boolean(), default=True),
        sa.Column('created_at', sa.DateTime(), nullable=False),
        sa.Column('updated_at', sa.DateTime(), nullable=False),
    )

    # === PERMIT APPLICATIONS ===
    op.create_table(
        'permit_applications',
        sa.Column('id', postgresql.UUID(as_uuid=True), primary_key=True),
        uuid_fk('user_id', 'profiles.id', 'CASCADE', nullable=False, index=True),
        uuid_fk('entity_id', 'entities.id', 'SET NULL', index=True),
        sa.Column('entity_name', sa.String(255), nullable=True),
        sa.Column('entity_type', sa.String(50), nullable=True),
        sa.Column('title', sa.String(255), nullable=False),
        sa.Column('application_number', sa.String(50), unique=True, nullable=True, index=True),
        sa.Column('permit_number', sa.String(50), nullable=True),
        sa.Column('permit_type', sa.String(100), nullable=False, server_default='new'),
        uuid_fk('activity_id', 'prescribed_activities.id', 'SET NULL'),
        sa.Column('activity_level', sa.String(20), nullable=True),
        sa.Column('activity_classification', sa.String(100), nullable=True),
        sa.Column('description', sa.Text(), nullable=True),
        sa.Column('activity_location', sa.Text(), nullable=True),
        sa.Column('environmental_impact', sa.Text(), nullable=True),
        sa.Column('mitigation_measures', sa.Text(), nullable=True),
        sa.Column('estimated_cost_kina', sa.Integer(), nullable=True),
        sa.Column('commencement_date', sa.DateTime(), nullable=True),
        sa.Column('completion_date', sa.DateTime(), nullable=True),
        sa.Column('status', enum('applicationstatus'), nullable=False, server_default='draft', index=True),
        uuid_fk('assigned_officer_id', 'profiles.id', 'SET NULL', index=True),
        uuid_fk('assigned_compliance_officer_id', 'profiles.id', 'SET NULL', index=True),
        sa.Column('fee_amount_cents', sa.Integer(), nullable=True),
        sa.Column('fee_breakdown', postgresql.JSONB(), nullable=True),
        sa.Column('application_date', sa.DateTime(), nullable=True),
        sa.Column('approval_date', sa.DateTime(), nullable=True),
        sa.Column('created_at', sa.DateTime(), nullable=False),
        sa.Column('updated_at', sa.DateTime(), nullable=False),
    )

    # === ASSESSMENTS ===
    op.create_table(
        'initial_assessments',
        sa.Column('id', postgresql.UUID(as_uuid=True), primary_key=True),
        uuid_fk('permit_application_id', 'permit_applications.id', 'CASCADE', nullable=False, unique=True),
        uuid_fk('assessed_by', 'profiles.id', 'SET NULL', index=True),
        sa.Column('assessment_status', enum('initialassessmentstatus'), nullable=False, server_default='pending', index=True),
        sa.Column('assessment_outcome', sa.String(255), nullable=True),
        sa.Column('assessment_notes', sa.Text(), nullable=True),
        sa.Column('feedback_provided', sa.Text(), nullable=True),
        sa.Column('permit_activity_type', sa.String(100), nullable=True),
        sa.Column('assessment_date', sa.DateTime(), nullable=True),
        sa.Column('created_at', sa.DateTime(), nullable=False),
        sa.Column('updated_at', sa.DateTime(), nullable=False),
    )
    op.create_table(
        'compliance_assessments',
        sa.Column('id', postgresql.UUID(as_uuid=True), primary_key=True),
        uuid_fk('permit_application_id', 'permit_applications.id', 'CASCADE', nullable=False, unique=True),
        uuid_fk('assessed_by', 'profiles.id', 'SET NULL', index=True),
        uuid_fk('assigned_by', 'profiles.id', 'SET NULL'),
        sa.Column('assessment_status', enum('complianceassessmentstatus'), nullable=False, server_default='pending', index=True),
        sa.Column('assessment_notes', sa.Text(), nullable=True),
        sa.Column('compliance_score', sa.Integer(), nullable=True),
        sa.Column('recommendations', sa.Text(), nullable=True),
        sa.Column('violations_found', postgresql.JSONB(), nullable=True),
        sa.Column('next_review_date', sa.DateTime(), nullable=True),
        sa.Column('processing_days', sa.Integer(), nullable=True),
        sa.Column('fee_category', sa.String(50), nullable=True),
        sa.Column('calculated_administration_fee_cents', sa.Integer(), nullable=True),
        sa.Column('calculated_technical_fee_cents', sa.Integer(), nullable=True),
        sa.Column('final_fee_amount_cents', sa.Integer(), nullable=True),
        sa.Column('created_at', sa.DateTime(), nullable=False),
        sa.Column('updated_at', sa.DateTime(), nullable=False),
        sa.CheckConstraint(
            'compliance_score IS NULL OR compliance_score BETWEEN 0 AND 100',
            name='ck_compliance_score_range'
        ),
    )

    # === UNIT TASKS ===
    for table in TASK_TABLES:
        extra = []
        if table == 'compliance_tasks':
            extra = [
                uuid_fk('related_permit_id', 'permit_applications.id', 'SET NULL'),
                sa.Column('related_intent_id', postgresql.UUID(as_uuid=True), nullable=True),
                sa.Column('related_inspection_id', postgresql.UUID(as_uuid=True), nullable=True),
            ]
        op.create_table(
            table,
            sa.Column('id', postgresql.UUID(as_uuid=True), primary_key=True),
            sa.Column('task_type', sa.String(50), nullable=False),
            sa.Column('title', sa.String(255), nullable=False),
            sa.Column('description', sa.Text(), nullable=True),
            uuid_fk('assigned_to', 'profiles.id', 'CASCADE', nullable=False, index=True),
            uuid_fk('assigned_by', 'profiles.id', 'SET NULL'),
            sa.Column('status', enum('taskstatus'), nullable=False, server_default='pending'),
            sa.Column('priority', enum('taskpriority'), nullable=False, server_default='normal'),
            sa.Column('due_date', sa.DateTime(), nullable=True),
            sa.Column('completed_at', sa.DateTime(), nullable=True),
            sa.Column('notes', sa.Text(), nullable=True),
            sa.Column('progress_percentage', sa.Integer(), nullable=False, server_default='0'),
            sa.Column('created_at', sa.DateTime(), nullable=False),
            sa.Column('updated_at', sa.DateTime(), nullable=False),
            *extra,
        )

    # === AUDIT TRAIL (append-only) ===
    op.create_table(
        'registry_audit_trail',
        sa.Column('id', postgresql.UUID(as_uuid=True), primary_key=True),
        uuid_fk('permit_application_id', 'permit_applications.id', 'CASCADE', nullable=False, index=True),
        sa.Column('assessment_id', postgresql.UUID(as_uuid=True), nullable=True),
        uuid_fk('officer_id', 'profiles.id', 'SET NULL'),
        sa.Column('officer_name', sa.String(255), nullable=True),
        sa.Column('officer_email', sa.String(255), nullable=True),
        sa.Column('action_type', enum('auditactiontype'), nullable=False, index=True),
        sa.Column('previous_status', sa.String(50), nullable=True),
        sa.Column('new_status', sa.String(50), nullable=True),
        sa.Column('previous_outcome', sa.String(255), nullable=True),
        sa.Column('new_outcome', sa.String(255), nullable=True),
        sa.Column('assessment_notes', sa.Text(), nullable=True),
        sa.Column('feedback_provided', sa.Text(), nullable=True),
        sa.Column('changes_made', postgresql.JSONB(), nullable=True),
        sa.Column('metadata', postgresql.JSONB(), nullable=True),
        sa.Column('created_at', sa.DateTime(), nullable=False, index=True),
    )

    # === NOTIFICATIONS ===
    op.create_table(
        'notifications',
        sa.Column('id', postgresql.UUID(as_uuid=True), primary_key=True),
        uuid_fk('user_id', 'profiles.id', 'CASCADE', nullable=False, index=True),
        sa.Column('title', sa.String(255), nullable=False),
        sa.Column('message', sa.Text(), nullable=False),
        sa.Column('type', sa.String(50), nullable=False),
        uuid_fk('related_permit_id', 'permit_applications.id', 'CASCADE'),
        sa.Column('is_read', sa.Boolean(), nullable=False, server_default=sa.false()),
        sa.Column('created_at', sa.DateTime(), nullable=False),
    )
    op.create_table(
        'manager_notifications',
        sa.Column('id', postgresql.UUID(as_uuid=True), primary_key=True),
        sa.Column('target_unit', enum('staffunit'), nullable=False, index=True),
        sa.Column('target_position', enum('staffposition'), nullable=True),
        sa.Column('type', sa.String(50), nullable=False),
        sa.Column('message', sa.Text(), nullable=False),
        sa.Column('related_id', postgresql.UUID(as_uuid=True), nullable=False),
        sa.Column('metadata', postgresql.JSONB(), nullable=True),
        sa.Column('is_read', sa.Boolean(), nullable=False, server_default=sa.false()),
        sa.Column('created_at', sa.DateTime(), nullable=False),
    )


def downgrade() -> None:
    op.drop_table('manager_notifications')
    op.drop_table('notifications')
    op.drop_table('registry_audit_trail')
    for table in reversed(TASK_TABLES):
        op.drop_table(table)
    op.drop_table('compliance_assessments')
    op.drop_table('initial_assessments')
    op.drop_table('permit_applications')
    op.drop_table('fee_structures')
    op.drop_table('prescribed_activities')
    op.drop_table('entities')
    op.drop_table('profiles')

    # Drop enums
    for name in reversed(list(ENUMS)):
        op.execute(f'DROP TYPE IF EXISTS {name}')
