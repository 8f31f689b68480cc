"""classes, subjects, teachers and attendance

Revision ID: 8b2e4c6a1d57
Revises: 3f1c2a7d9b10
Create Date: 2026-10-17 14:00:00.000000

"""
from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa


# revision identifiers, used by Alembic.
revision: str = '8b2e4c6a1d57'
down_revision: Union[str, Sequence[str], None] = '3f1c2a7d9b10'
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def timestamps():
    return [
        sa.Column('created_at', sa.DateTime(timezone=True), nullable=False, server_default=sa.text('CURRENT_TIMESTAMP')),
        sa.Column('updated_at', sa.DateTime(timezone=True), nullable=False, server_default=sa.text('CURRENT_TIMESTAMP')),
    ]


def upgrade():
    op.create_table(
        'teachers',
        sa.Column('id', sa.Uuid(), nullable=False),
        sa.Column('employee_id', sa.String(length=32), nullable=False),
        sa.Column('first_name', sa.String(length=64), nullable=False),
        sa.Column('middle_name', sa.String(length=64), nullable=True),
        sa.Column('last_name', sa.String(length=64), nullable=False),
        sa.Column('email', sa.String(length=255), nullable=False),
        sa.Column('phone', sa.String(length=32), nullable=True),
        sa.Column('gender', sa.String(length=16), nullable=True),
        sa.Column('qualification', sa.String(length=128), nullable=True),
        sa.Column('experience_years', sa.Integer(), nullable=False, server_default='0'),
        sa.Column('subjects', sa.JSON(), nullable=False),
        sa.Column('hire_date', sa.Date(), nullable=True),
        sa.Column('status', sa.String(length=16), nullable=False, server_default='active'),
        *timestamps(),
        sa.PrimaryKeyConstraint('id'),
        sa.UniqueConstraint('employee_id'),
        sa.UniqueConstraint('email'),
        sa.CheckConstraint("status IN ('active','inactive','terminated')", name='ck_teacher_status'),
        sa.CheckConstraint('experience_years >= 0', name='ck_teacher_experience_non_negative'),
    )

    op.create_table(
        'classes',
        sa.Column('id', sa.Uuid(), nullable=False),
        sa.Column('name', sa.String(length=32), nullable=False),
        sa.Column('level', sa.String(length=32), nullable=False),
        sa.Column('section', sa.String(length=16), nullable=True),
        sa.Column('capacity', sa.Integer(), nullable=False, server_default='40'),
        sa.Column('academic_year', sa.String(length=9), nullable=False),
        sa.Column('class_teacher_id', sa.Uuid(), nullable=True),
        sa.Column('subjects', sa.JSON(), nullable=False),
        sa.Column('status', sa.String(length=16), nullable=False, server_default='active'),
        *timestamps(),
        sa.PrimaryKeyConstraint('id'),
        sa.ForeignKeyConstraint(['class_teacher_id'], ['teachers.id'], ondelete='SET NULL'),
        sa.UniqueConstraint('name', 'academic_year', name='uix_class_name_year'),
        sa.CheckConstraint('capacity > 0', name='ck_class_capacity_positive'),
        sa.CheckConstraint("status IN ('active','inactive')", name='ck_class_status'),
    )
    op.create_index('ix_classes_class_teacher_id', 'classes', ['class_teacher_id'])

    op.create_table(
        'subjects',
        sa.Column('id', sa.Uuid(), nullable=False),
        sa.Column('name', sa.String(length=64), nullable=False),
        sa.Column('code', sa.String(length=16), nullable=False),
        sa.Column('description', sa.String(length=255), nullable=True),
        sa.Column('classes', sa.JSON(), nullable=False),
        sa.Column('teacher_id', sa.Uuid(), nullable=True),
        sa.Column('is_core', sa.Boolean(), nullable=False, server_default=sa.false()),
        sa.Column('status', sa.String(length=16), nullable=False, server_default='active'),
        *timestamps(),
        sa.PrimaryKeyConstraint('id'),
        sa.ForeignKeyConstraint(['teacher_id'], ['teachers.id'], ondelete='SET NULL'),
        sa.UniqueConstraint('code'),
        sa.CheckConstraint("status IN ('active','inactive')", name='ck_subject_status'),
    )
    op.create_index('ix_subjects_teacher_id', 'subjects', ['teacher_id'])

    op.create_table(
        'attendance',
        sa.Column('id', sa.Uuid(), nullable=False),
        sa.Column('student_id', sa.Uuid(), nullable=False),
        sa.Column('student_name', sa.String(length=160), nullable=False),
        sa.Column('class_name', sa.String(length=32), nullable=False),
        sa.Column('date', sa.Date(), nullable=False),
        sa.Column('status', sa.String(length=16), nullable=False),
        sa.Column('remarks', sa.String(length=255), nullable=True),
        sa.Column('recorded_by', sa.String(length=128), nullable=True),
        *timestamps(),
        sa.PrimaryKeyConstraint('id'),
        sa.ForeignKeyConstraint(['student_id'], ['students.id'], ondelete='CASCADE'),
        sa.UniqueConstraint('student_id', 'date', name='uix_attendance_student_date'),
        sa.CheckConstraint("status IN ('present','absent','late','excused')", name='ck_attendance_status'),
    )
    op.create_index('ix_attendance_class_date', 'attendance', ['class_name', 'date'])


def downgrade():
    op.drop_table('attendance')
    op.drop_table('subjects')
    op.drop_table('classes')
    op.drop_table('teachers')
