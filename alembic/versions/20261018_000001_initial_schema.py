"""Initial schema with all tables

Revision ID: 20261018_000001
Revises:
Create Date: 2026-10-18

"""
from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa
from sqlalchemy.dialects import postgresql

# revision identifiers, used by Alembic.
revision: str = '20261018_000001'
down_revision: Union[str, None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def _id() -> sa.Column:
    return sa.Column('id', postgresql.UUID(as_uuid=True), nullable=False)


def _uuid(name: str, nullable: bool = True) -> sa.Column:
    return sa.Column(name, postgresql.UUID(as_uuid=True), nullable=nullable)


def _timestamps() -> list[sa.Column]:
    return [
        sa.Column('created_at', sa.DateTime(timezone=True), server_default=sa.text('now()'), nullable=False),
        sa.Column('updated_at', sa.DateTime(timezone=True), server_default=sa.text('now()'), nullable=False),
    ]


def upgrade() -> None:
    # === PROFILES ===
    op.create_table(
        'profiles',
        _id(),
        sa.Column('email', sa.String(length=255), nullable=True),
        sa.Column('password_hash', sa.String(length=255), nullable=True),
        sa.Column('full_name', sa.String(length=200), nullable=True),
        sa.Column('role', sa.String(length=20), nullable=True),
        sa.Column('phone', sa.String(length=50), nullable=True),
        sa.Column('avatar_url', sa.String(length=500), nullable=True),
        sa.Column('birth_date', sa.Date(), nullable=True),
        sa.Column('is_active', sa.Boolean(), nullable=False, server_default='true'),
        sa.Column('last_login_at', sa.DateTime(timezone=True), nullable=True),
        *_timestamps(),
        sa.PrimaryKeyConstraint('id')
    )
    op.create_index('idx_profiles_email', 'profiles', ['email'], unique=True)
    op.create_index('idx_profiles_role', 'profiles', ['role'])

    op.create_table(
        'user_roles',
        _id(),
        _uuid('user_id', nullable=False),
        sa.Column('role', sa.String(length=20), nullable=False),
        *_timestamps(),
        sa.ForeignKeyConstraint(['user_id'], ['profiles.id'], ondelete='CASCADE'),
        sa.PrimaryKeyConstraint('id'),
        sa.UniqueConstraint('user_id', 'role', name='uq_user_roles_user_role')
    )

    op.create_table(
        'user_menu_permissions',
        _id(),
        _uuid('user_id', nullable=False),
        sa.Column('menu_key', sa.String(length=50), nullable=False),
        sa.Column('is_allowed', sa.Boolean(), nullable=False, server_default='true'),
        *_timestamps(),
        sa.ForeignKeyConstraint(['user_id'], ['profiles.id'], ondelete='CASCADE'),
        sa.PrimaryKeyConstraint('id'),
        sa.UniqueConstraint('user_id', 'menu_key', name='uq_user_menu_permissions_user_menu')
    )

    # === ACADEMIC STRUCTURE ===
    op.create_table(
        'academic_years',
        _id(),
        sa.Column('name', sa.String(length=20), nullable=False),
        sa.Column('start_date', sa.Date(), nullable=False),
        sa.Column('end_date', sa.Date(), nullable=False),
        sa.Column('is_active', sa.Boolean(), nullable=False, server_default='false'),
        *_timestamps(),
        sa.PrimaryKeyConstraint('id')
    )
    op.create_index('idx_academic_years_name', 'academic_years', ['name'], unique=True)
    op.create_index('idx_academic_years_active', 'academic_years', ['is_active'], unique=True,
                    postgresql_where=sa.text('is_active = true'))

    op.create_table(
        'grade_levels',
        _id(),
        sa.Column('name', sa.String(length=100), nullable=False),
        sa.Column('short_name', sa.String(length=20), nullable=False),
        sa.Column('order_index', sa.Integer(), nullable=False, server_default='0'),
        sa.Column('is_senior_high', sa.Boolean(), nullable=False, server_default='false'),
        sa.Column('is_active', sa.Boolean(), nullable=False, server_default='true'),
        *_timestamps(),
        sa.PrimaryKeyConstraint('id')
    )
    op.create_index('idx_grade_levels_name', 'grade_levels', ['name'], unique=True)
    op.create_index('idx_grade_levels_order', 'grade_levels', ['order_index'])

    op.create_table(
        'strands',
        _id(),
        sa.Column('name', sa.String(length=50), nullable=False),
        sa.Column('full_name', sa.String(length=200), nullable=True),
        sa.Column('description', sa.Text(), nullable=True),
        _uuid('grade_level_id'),
        sa.Column('is_active', sa.Boolean(), nullable=False, server_default='true'),
        *_timestamps(),
        sa.ForeignKeyConstraint(['grade_level_id'], ['grade_levels.id'], ondelete='SET NULL'),
        sa.PrimaryKeyConstraint('id')
    )

    # === STAFF ===
    op.create_table(
        'teachers',
        _id(),
        sa.Column('employee_no', sa.String(length=30), nullable=True),
        sa.Column('first_name', sa.String(length=100), nullable=True),
        sa.Column('last_name', sa.String(length=100), nullable=True),
        sa.Column('email', sa.String(length=255), nullable=True),
        sa.Column('phone_number', sa.String(length=50), nullable=True),
        sa.Column('department', sa.String(length=100), nullable=True),
        sa.Column('position', sa.String(length=100), nullable=True),
        sa.Column('employment_type', sa.String(length=20), nullable=True),
        sa.Column('is_active', sa.Boolean(), nullable=False, server_default='true'),
        _uuid('profile_id'),
        *_timestamps(),
        sa.ForeignKeyConstraint(['profile_id'], ['profiles.id'], ondelete='SET NULL'),
        sa.PrimaryKeyConstraint('id')
    )
    op.create_index('idx_teachers_department', 'teachers', ['department'])

    op.create_table(
        'employees',
        _id(),
        sa.Column('name', sa.String(length=200), nullable=False),
        sa.Column('full_name', sa.String(length=200), nullable=True),
        sa.Column('employee_no', sa.String(length=30), nullable=True),
        sa.Column('position', sa.String(length=100), nullable=True),
        sa.Column('department', sa.String(length=100), nullable=True),
        sa.Column('salary', sa.Numeric(precision=12, scale=2), nullable=True),
        sa.Column('basic_salary', sa.Numeric(precision=12, scale=2), nullable=True),
        sa.Column('currency', sa.String(length=3), nullable=True),
        sa.Column('status', sa.String(length=20), nullable=False, server_default='active'),
        sa.Column('is_active', sa.Boolean(), nullable=False, server_default='true'),
        _uuid('profile_id'),
        *_timestamps(),
        sa.ForeignKeyConstraint(['profile_id'], ['profiles.id'], ondelete='SET NULL'),
        sa.PrimaryKeyConstraint('id')
    )
    op.create_index('idx_employees_status', 'employees', ['status'])

    op.create_table(
        'sections',
        _id(),
        sa.Column('name', sa.String(length=100), nullable=False),
        _uuid('grade_level_id', nullable=False),
        _uuid('school_year_id'),
        _uuid('adviser_id'),
        sa.Column('room', sa.String(length=50), nullable=True),
        sa.Column('capacity', sa.Integer(), nullable=True),
        *_timestamps(),
        sa.ForeignKeyConstraint(['grade_level_id'], ['grade_levels.id'], ondelete='CASCADE'),
        sa.ForeignKeyConstraint(['school_year_id'], ['academic_years.id'], ondelete='SET NULL'),
        sa.ForeignKeyConstraint(['adviser_id'], ['teachers.id'], ondelete='SET NULL'),
        sa.PrimaryKeyConstraint('id')
    )
    op.create_index('idx_sections_grade_level', 'sections', ['grade_level_id'])
    op.create_index('idx_sections_school_year', 'sections', ['school_year_id'])

    op.create_table(
        'subjects',
        _id(),
        sa.Column('name', sa.String(length=100), nullable=False),
        sa.Column('code', sa.String(length=20), nullable=True),
        sa.Column('description', sa.Text(), nullable=True),
        sa.Column('units', sa.Integer(), nullable=True),
        sa.Column('is_active', sa.Boolean(), nullable=False, server_default='true'),
        *_timestamps(),
        sa.PrimaryKeyConstraint('id')
    )
    op.create_index('idx_subjects_code', 'subjects', ['code'], unique=True,
                    postgresql_where=sa.text('code IS NOT NULL'))

    op.create_table(
        'subject_assignments',
        _id(),
        _uuid('subject_id', nullable=False),
        _uuid('section_id', nullable=False),
        _uuid('teacher_id', nullable=False),
        _uuid('school_year_id'),
        sa.Column('room', sa.String(length=50), nullable=True),
        sa.Column('schedule', sa.String(length=100), nullable=True),
        *_timestamps(),
        sa.ForeignKeyConstraint(['subject_id'], ['subjects.id'], ondelete='CASCADE'),
        sa.ForeignKeyConstraint(['section_id'], ['sections.id'], ondelete='CASCADE'),
        sa.ForeignKeyConstraint(['teacher_id'], ['teachers.id'], ondelete='CASCADE'),
        sa.ForeignKeyConstraint(['school_year_id'], ['academic_years.id'], ondelete='SET NULL'),
        sa.PrimaryKeyConstraint('id')
    )
    op.create_index('idx_subject_assignments_section', 'subject_assignments', ['section_id'])
    op.create_index('idx_subject_assignments_teacher', 'subject_assignments', ['teacher_id'])

    op.create_table(
        'classes',
        _id(),
        sa.Column('subject_name', sa.String(length=100), nullable=False),
        sa.Column('class_code', sa.String(length=150), nullable=False),
        _uuid('section_id'),
        _uuid('teacher_id'),
        _uuid('school_year_id'),
        sa.Column('room', sa.String(length=50), nullable=True),
        sa.Column('schedule', sa.String(length=100), nullable=True),
        sa.Column('color', sa.String(length=20), nullable=True),
        sa.Column('is_active', sa.Boolean(), nullable=False, server_default='true'),
        *_timestamps(),
        sa.ForeignKeyConstraint(['section_id'], ['sections.id'], ondelete='CASCADE'),
        sa.ForeignKeyConstraint(['teacher_id'], ['profiles.id'], ondelete='SET NULL'),
        sa.ForeignKeyConstraint(['school_year_id'], ['academic_years.id'], ondelete='SET NULL'),
        sa.PrimaryKeyConstraint('id')
    )
    op.create_index('idx_classes_section', 'classes', ['section_id'])
    op.create_index('idx_classes_teacher', 'classes', ['teacher_id'])
    op.create_index('idx_classes_code', 'classes', ['class_code'], unique=True)

    # === STUDENTS ===
    op.create_table(
        'student_records',
        _id(),
        sa.Column('student_name', sa.String(length=200), nullable=False),
        sa.Column('first_name', sa.String(length=100), nullable=True),
        sa.Column('middle_name', sa.String(length=100), nullable=True),
        sa.Column('last_name', sa.String(length=100), nullable=True),
        sa.Column('suffix', sa.String(length=20), nullable=True),
        sa.Column('lrn', sa.String(length=20), nullable=True),
        sa.Column('gender', sa.String(length=10), nullable=True),
        sa.Column('birth_date', sa.Date(), nullable=True),
        sa.Column('age', sa.Integer(), nullable=True),
        sa.Column('email', sa.String(length=255), nullable=True),
        sa.Column('phone_number', sa.String(length=50), nullable=True),
        sa.Column('avatar_url', sa.String(length=500), nullable=True),
        sa.Column('level', sa.String(length=50), nullable=True),
        sa.Column('school_year', sa.String(length=20), nullable=True),
        _uuid('grade_level_id'),
        _uuid('section_id'),
        _uuid('strand_id'),
        sa.Column('status', sa.String(length=20), nullable=True, server_default='active'),
        sa.Column('father_name', sa.String(length=200), nullable=True),
        sa.Column('father_contact', sa.String(length=50), nullable=True),
        sa.Column('mother_maiden_name', sa.String(length=200), nullable=True),
        sa.Column('mother_contact', sa.String(length=50), nullable=True),
        sa.Column('guardian_info', sa.Text(), nullable=True),
        sa.Column('phil_address', sa.Text(), nullable=True),
        sa.Column('uae_address', sa.Text(), nullable=True),
        sa.Column('previous_school', sa.String(length=200), nullable=True),
        _uuid('user_id'),
        *_timestamps(),
        sa.ForeignKeyConstraint(['grade_level_id'], ['grade_levels.id'], ondelete='SET NULL'),
        sa.ForeignKeyConstraint(['section_id'], ['sections.id'], ondelete='SET NULL'),
        sa.ForeignKeyConstraint(['strand_id'], ['strands.id'], ondelete='SET NULL'),
        sa.ForeignKeyConstraint(['user_id'], ['profiles.id'], ondelete='SET NULL'),
        sa.PrimaryKeyConstraint('id')
    )
    op.create_index('idx_student_records_year_level', 'student_records', ['school_year', 'level'])
    op.create_index('idx_student_records_section', 'student_records', ['section_id'])
    op.create_index('idx_student_records_lrn', 'student_records', ['lrn'])

    op.create_table(
        'parents',
        _id(),
        sa.Column('first_name', sa.String(length=100), nullable=True),
        sa.Column('last_name', sa.String(length=100), nullable=True),
        sa.Column('email', sa.String(length=255), nullable=True),
        sa.Column('phone_number', sa.String(length=50), nullable=True),
        sa.Column('address', sa.Text(), nullable=True),
        sa.Column('occupation', sa.String(length=100), nullable=True),
        _uuid('user_id'),
        *_timestamps(),
        sa.ForeignKeyConstraint(['user_id'], ['profiles.id'], ondelete='SET NULL'),
        sa.PrimaryKeyConstraint('id')
    )

    op.create_table(
        'student_parents',
        _id(),
        _uuid('student_id', nullable=False),
        _uuid('parent_id', nullable=False),
        sa.Column('relationship', sa.String(length=30), nullable=True),
        sa.Column('is_primary', sa.Boolean(), nullable=False, server_default='false'),
        *_timestamps(),
        sa.ForeignKeyConstraint(['student_id'], ['student_records.id'], ondelete='CASCADE'),
        sa.ForeignKeyConstraint(['parent_id'], ['parents.id'], ondelete='CASCADE'),
        sa.PrimaryKeyConstraint('id'),
        sa.UniqueConstraint('student_id', 'parent_id', name='uq_student_parents_pair')
    )

    op.create_table(
        'enrollments',
        _id(),
        _uuid('student_id', nullable=False),
        _uuid('section_id', nullable=False),
        _uuid('school_year_id', nullable=False),
        sa.Column('status', sa.String(length=20), nullable=False, server_default='enrolled'),
        sa.Column('enrolled_at', sa.DateTime(timezone=True), nullable=True),
        sa.Column('dropped_at', sa.DateTime(timezone=True), nullable=True),
        *_timestamps(),
        sa.ForeignKeyConstraint(['student_id'], ['student_records.id'], ondelete='CASCADE'),
        sa.ForeignKeyConstraint(['section_id'], ['sections.id'], ondelete='CASCADE'),
        sa.ForeignKeyConstraint(['school_year_id'], ['academic_years.id'], ondelete='CASCADE'),
        sa.PrimaryKeyConstraint('id'),
        sa.UniqueConstraint('student_id', 'school_year_id', name='uq_enrollments_student_year')
    )
    op.create_index('idx_enrollments_section', 'enrollments', ['section_id'])

    op.create_table(
        'pending_enrollments',
        _id(),
        sa.Column('student_name', sa.String(length=200), nullable=False),
        sa.Column('first_name', sa.String(length=100), nullable=True),
        sa.Column('middle_name', sa.String(length=100), nullable=True),
        sa.Column('last_name', sa.String(length=100), nullable=True),
        sa.Column('lrn', sa.String(length=20), nullable=True),
        sa.Column('gender', sa.String(length=10), nullable=True),
        sa.Column('birth_date', sa.Date(), nullable=True),
        sa.Column('age', sa.Integer(), nullable=True),
        _uuid('grade_level_id'),
        _uuid('strand_id'),
        sa.Column('father_contact', sa.String(length=50), nullable=True),
        sa.Column('mother_contact', sa.String(length=50), nullable=True),
        sa.Column('phil_address', sa.Text(), nullable=True),
        sa.Column('uae_address', sa.Text(), nullable=True),
        sa.Column('previous_school', sa.String(length=200), nullable=True),
        sa.Column('is_complete', sa.Boolean(), nullable=False, server_default='false'),
        sa.Column('validation_errors', postgresql.JSONB(astext_type=sa.Text()), nullable=True),
        sa.Column('status', sa.String(length=20), nullable=False, server_default='pending'),
        sa.Column('submitted_at', sa.DateTime(timezone=True), nullable=True),
        _uuid('submitted_by'),
        sa.Column('reviewed_at', sa.DateTime(timezone=True), nullable=True),
        _uuid('reviewed_by'),
        _uuid('student_id'),
        *_timestamps(),
        sa.ForeignKeyConstraint(['grade_level_id'], ['grade_levels.id'], ondelete='SET NULL'),
        sa.ForeignKeyConstraint(['strand_id'], ['strands.id'], ondelete='SET NULL'),
        sa.ForeignKeyConstraint(['submitted_by'], ['profiles.id'], ondelete='SET NULL'),
        sa.ForeignKeyConstraint(['reviewed_by'], ['profiles.id'], ondelete='SET NULL'),
        sa.ForeignKeyConstraint(['student_id'], ['student_records.id'], ondelete='SET NULL'),
        sa.PrimaryKeyConstraint('id')
    )
    op.create_index('idx_pending_enrollments_status', 'pending_enrollments', ['status'])

    # === ATTENDANCE ===
    op.create_table(
        'attendance_records',
        _id(),
        _uuid('student_id', nullable=False),
        _uuid('section_id'),
        sa.Column('date', sa.Date(), nullable=False),
        sa.Column('status', sa.String(length=20), nullable=False, server_default='absent'),
        _uuid('recorded_by'),
        sa.Column('notes', sa.Text(), nullable=True),
        *_timestamps(),
        sa.ForeignKeyConstraint(['student_id'], ['student_records.id'], ondelete='CASCADE'),
        sa.ForeignKeyConstraint(['section_id'], ['sections.id'], ondelete='SET NULL'),
        sa.ForeignKeyConstraint(['recorded_by'], ['profiles.id'], ondelete='SET NULL'),
        sa.PrimaryKeyConstraint('id'),
        sa.UniqueConstraint('student_id', 'date', name='uq_attendance_student_date')
    )
    op.create_index('idx_attendance_section_date', 'attendance_records', ['section_id', 'date'])
    op.create_index('idx_attendance_date', 'attendance_records', ['date'])

    # === CLASSROOM ===
    op.create_table(
        'assignments',
        _id(),
        _uuid('class_id', nullable=False),
        sa.Column('title', sa.String(length=200), nullable=False),
        sa.Column('instructions', sa.Text(), nullable=True),
        sa.Column('points', sa.Integer(), nullable=False, server_default='100'),
        sa.Column('due_at', sa.DateTime(timezone=True), nullable=True),
        sa.Column('published_at', sa.DateTime(timezone=True), nullable=True),
        *_timestamps(),
        sa.ForeignKeyConstraint(['class_id'], ['classes.id'], ondelete='CASCADE'),
        sa.PrimaryKeyConstraint('id')
    )
    op.create_index('idx_assignments_class', 'assignments', ['class_id'])
    op.create_index('idx_assignments_due_at', 'assignments', ['due_at'])

    op.create_table(
        'submissions',
        _id(),
        _uuid('assignment_id', nullable=False),
        _uuid('student_id', nullable=False),
        sa.Column('status', sa.String(length=20), nullable=False, server_default='draft'),
        sa.Column('submitted_at', sa.DateTime(timezone=True), nullable=True),
        sa.Column('late', sa.Boolean(), nullable=False, server_default='false'),
        sa.Column('score', sa.Numeric(precision=6, scale=2), nullable=True),
        sa.Column('teacher_feedback', sa.Text(), nullable=True),
        sa.Column('graded_at', sa.DateTime(timezone=True), nullable=True),
        *_timestamps(),
        sa.ForeignKeyConstraint(['assignment_id'], ['assignments.id'], ondelete='CASCADE'),
        sa.ForeignKeyConstraint(['student_id'], ['student_records.id'], ondelete='CASCADE'),
        sa.PrimaryKeyConstraint('id'),
        sa.UniqueConstraint('assignment_id', 'student_id', name='uq_submissions_assignment_student')
    )
    op.create_index('idx_submissions_status', 'submissions', ['status'])

    # === FINANCE ===
    op.create_table(
        'payroll_runs',
        _id(),
        sa.Column('period_start', sa.Date(), nullable=False),
        sa.Column('period_end', sa.Date(), nullable=False),
        sa.Column('employee_count', sa.Integer(), nullable=False, server_default='0'),
        sa.Column('total_amount', sa.Numeric(precision=14, scale=2), nullable=False, server_default='0'),
        sa.Column('status', sa.String(length=20), nullable=False, server_default='paid'),
        _uuid('processed_by'),
        *_timestamps(),
        sa.ForeignKeyConstraint(['processed_by'], ['profiles.id'], ondelete='SET NULL'),
        sa.PrimaryKeyConstraint('id')
    )
    op.create_index('idx_payroll_runs_period', 'payroll_runs', ['period_start', 'period_end'])

    op.create_table(
        'invoices',
        _id(),
        sa.Column('invoice_no', sa.String(length=30), nullable=True),
        sa.Column('student_name', sa.String(length=200), nullable=True),
        _uuid('student_id'),
        sa.Column('amount', sa.Numeric(precision=12, scale=2), nullable=False),
        sa.Column('paid_amount', sa.Numeric(precision=12, scale=2), nullable=False, server_default='0'),
        sa.Column('due_date', sa.Date(), nullable=True),
        sa.Column('status', sa.String(length=20), nullable=False, server_default='pending'),
        sa.Column('items', postgresql.JSONB(astext_type=sa.Text()), nullable=True),
        *_timestamps(),
        sa.ForeignKeyConstraint(['student_id'], ['student_records.id'], ondelete='SET NULL'),
        sa.PrimaryKeyConstraint('id')
    )
    op.create_index('idx_invoices_status', 'invoices', ['status'])
    op.create_index('idx_invoices_due_date', 'invoices', ['due_date'])
    op.create_index('idx_invoices_invoice_no', 'invoices', ['invoice_no'], unique=True)

    op.create_table(
        'payments',
        _id(),
        sa.Column('student_name', sa.String(length=200), nullable=True),
        _uuid('student_id'),
        sa.Column('amount', sa.Numeric(precision=12, scale=2), nullable=False),
        sa.Column('type', sa.String(length=50), nullable=True),
        sa.Column('payment_method', sa.String(length=30), nullable=True),
        sa.Column('reference', sa.String(length=30), nullable=True),
        sa.Column('date', sa.Date(), nullable=True),
        sa.Column('status', sa.String(length=20), nullable=False, server_default='paid'),
        sa.Column('received_by', sa.String(length=100), nullable=True),
        sa.Column('notes', sa.Text(), nullable=True),
        _uuid('invoice_id'),
        *_timestamps(),
        sa.ForeignKeyConstraint(['student_id'], ['student_records.id'], ondelete='SET NULL'),
        sa.ForeignKeyConstraint(['invoice_id'], ['invoices.id'], ondelete='SET NULL'),
        sa.PrimaryKeyConstraint('id')
    )
    op.create_index('idx_payments_status', 'payments', ['status'])
    op.create_index('idx_payments_date', 'payments', ['date'])
    op.create_index('idx_payments_reference', 'payments', ['reference'], unique=True)

    op.create_table(
        'expenses',
        _id(),
        sa.Column('description', sa.String(length=500), nullable=False),
        sa.Column('category', sa.String(length=50), nullable=True),
        sa.Column('amount', sa.Numeric(precision=12, scale=2), nullable=False),
        sa.Column('date', sa.Date(), nullable=True),
        sa.Column('vendor', sa.String(length=200), nullable=True),
        sa.Column('status', sa.String(length=20), nullable=False, server_default='pending'),
        sa.Column('approved_by', sa.String(length=100), nullable=True),
        sa.Column('receipt_url', sa.String(length=500), nullable=True),
        sa.Column('notes', sa.Text(), nullable=True),
        _uuid('payroll_run_id'),
        *_timestamps(),
        sa.ForeignKeyConstraint(['payroll_run_id'], ['payroll_runs.id'], ondelete='SET NULL'),
        sa.PrimaryKeyConstraint('id')
    )
    op.create_index('idx_expenses_status', 'expenses', ['status'])
    op.create_index('idx_expenses_date', 'expenses', ['date'])

    op.create_table(
        'fee_structures',
        _id(),
        sa.Column('name', sa.String(length=100), nullable=False),
        sa.Column('description', sa.Text(), nullable=True),
        sa.Column('amount', sa.Numeric(precision=12, scale=2), nullable=False),
        _uuid('grade_level_id'),
        _uuid('school_year_id'),
        sa.Column('is_active', sa.Boolean(), nullable=False, server_default='true'),
        *_timestamps(),
        sa.ForeignKeyConstraint(['grade_level_id'], ['grade_levels.id'], ondelete='SET NULL'),
        sa.ForeignKeyConstraint(['school_year_id'], ['academic_years.id'], ondelete='SET NULL'),
        sa.PrimaryKeyConstraint('id')
    )
    op.create_index('idx_fee_structures_school_year', 'fee_structures', ['school_year_id'])

    # === CALENDAR & ANNOUNCEMENTS ===
    op.create_table(
        'school_events',
        _id(),
        sa.Column('title', sa.String(length=200), nullable=False),
        sa.Column('description', sa.Text(), nullable=True),
        sa.Column('start_date', sa.Date(), nullable=False),
        sa.Column('end_date', sa.Date(), nullable=True),
        sa.Column('event_type', sa.String(length=20), nullable=False, server_default='event'),
        sa.Column('location', sa.String(length=200), nullable=True),
        sa.Column('is_all_day', sa.Boolean(), nullable=False, server_default='true'),
        _uuid('created_by'),
        *_timestamps(),
        sa.ForeignKeyConstraint(['created_by'], ['profiles.id'], ondelete='SET NULL'),
        sa.PrimaryKeyConstraint('id')
    )
    op.create_index('idx_school_events_start', 'school_events', ['start_date'])

    op.create_table(
        'announcements',
        _id(),
        sa.Column('title', sa.String(length=200), nullable=False),
        sa.Column('content', sa.Text(), nullable=True),
        sa.Column('priority', sa.String(length=20), nullable=True),
        sa.Column('target_roles', postgresql.ARRAY(sa.String(length=20)), nullable=True),
        sa.Column('is_published', sa.Boolean(), nullable=False, server_default='false'),
        sa.Column('published_at', sa.DateTime(timezone=True), nullable=True),
        sa.Column('expires_at', sa.DateTime(timezone=True), nullable=True),
        _uuid('created_by'),
        *_timestamps(),
        sa.ForeignKeyConstraint(['created_by'], ['profiles.id'], ondelete='SET NULL'),
        sa.PrimaryKeyConstraint('id')
    )
    op.create_index('idx_announcements_published', 'announcements', ['is_published', 'published_at'])

    # === DOCUMENTS ===
    op.create_table(
        'documents',
        _id(),
        _uuid('student_id', nullable=False),
        sa.Column('file_name', sa.String(length=255), nullable=False),
        sa.Column('file_size', sa.BigInteger(), nullable=True),
        sa.Column('mime_type', sa.String(length=100), nullable=True),
        sa.Column('s3_key', sa.String(length=500), nullable=True),
        sa.Column('s3_url', sa.String(length=1000), nullable=True),
        sa.Column('thumbnail_s3_key', sa.String(length=500), nullable=True),
        sa.Column('thumbnail_s3_url', sa.String(length=1000), nullable=True),
        sa.Column('notes', sa.Text(), nullable=True),
        _uuid('uploaded_by'),
        sa.Column('document_type', sa.String(length=40), nullable=True),
        sa.Column('ai_extracted_text', sa.Text(), nullable=True),
        sa.Column('ai_summary', sa.Text(), nullable=True),
        sa.Column('ai_metadata', postgresql.JSONB(astext_type=sa.Text()), nullable=True),
        sa.Column('ai_processed_at', sa.DateTime(timezone=True), nullable=True),
        *_timestamps(),
        sa.ForeignKeyConstraint(['student_id'], ['student_records.id'], ondelete='CASCADE'),
        sa.ForeignKeyConstraint(['uploaded_by'], ['profiles.id'], ondelete='SET NULL'),
        sa.PrimaryKeyConstraint('id')
    )
    op.create_index('idx_documents_student', 'documents', ['student_id'])

    # === SETTINGS & FEEDBACK ===
    op.create_table(
        'school_settings',
        _id(),
        sa.Column('name', sa.String(length=200), nullable=False),
        sa.Column('address', sa.Text(), nullable=True),
        sa.Column('phone', sa.String(length=50), nullable=True),
        sa.Column('email', sa.String(length=255), nullable=True),
        sa.Column('website', sa.String(length=255), nullable=True),
        sa.Column('principal', sa.String(length=200), nullable=True),
        sa.Column('founded_year', sa.Integer(), nullable=True),
        sa.Column('logo_url', sa.String(length=500), nullable=True),
        *_timestamps(),
        sa.PrimaryKeyConstraint('id')
    )

    op.create_table(
        'suggestions_reviews',
        _id(),
        sa.Column('type', sa.String(length=20), nullable=False),
        sa.Column('subject', sa.String(length=200), nullable=True),
        sa.Column('message', sa.Text(), nullable=False),
        sa.Column('email', sa.String(length=255), nullable=True),
        sa.Column('status', sa.String(length=20), nullable=False, server_default='new'),
        sa.Column('admin_notes', sa.Text(), nullable=True),
        _uuid('submitted_by'),
        _uuid('reviewed_by'),
        sa.Column('reviewed_at', sa.DateTime(timezone=True), nullable=True),
        *_timestamps(),
        sa.ForeignKeyConstraint(['submitted_by'], ['profiles.id'], ondelete='SET NULL'),
        sa.ForeignKeyConstraint(['reviewed_by'], ['profiles.id'], ondelete='SET NULL'),
        sa.PrimaryKeyConstraint('id')
    )
    op.create_index('idx_suggestions_reviews_status', 'suggestions_reviews', ['status'])


def downgrade() -> None:
    # Drop tables in reverse order of creation (respecting foreign key dependencies)
    op.drop_table('suggestions_reviews')
    op.drop_table('school_settings')
    op.drop_table('documents')
    op.drop_table('announcements')
    op.drop_table('school_events')
    op.drop_table('fee_structures')
    op.drop_table('expenses')
    op.drop_table('payments')
    op.drop_table('invoices')
    op.drop_table('payroll_runs')
    op.drop_table('submissions')
    op.drop_table('assignments')
    op.drop_table('attendance_records')
    op.drop_table('pending_enrollments')
    op.drop_table('enrollments')
    op.drop_table('student_parents')
    op.drop_table('parents')
    op.drop_table('student_records')
    op.drop_table('classes')
    op.drop_table('subject_assignments')
    op.drop_table('subjects')
    op.drop_table('sections')
    op.drop_table('employees')
    op.drop_table('teachers')
    op.drop_table('strands')
    op.drop_table('grade_levels')
    op.drop_table('academic_years')
    op.drop_table('user_menu_permissions')
    op.drop_table('user_roles')
    op.drop_table('profiles')
