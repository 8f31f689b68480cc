"""initial schema: students, fees, coupons, payments and results

Revision ID: 3f1c2a7d9b10
Revises:
Create Date: 2026-10-17 09:00:00.000000

"""
from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa


# revision identifiers, used by Alembic.
revision: str = '3f1c2a7d9b10'
down_revision: Union[str, Sequence[str], None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def timestamps():
    return [
        sa.Column('created_at', sa.DateTime(timezone=True), nullable=False, server_default=sa.text('CURRENT_TIMESTAMP')),
        sa.Column('updated_at', sa.DateTime(timezone=True), nullable=False, server_default=sa.text('CURRENT_TIMESTAMP')),
    ]


def upgrade():
    op.create_table(
        'students',
        sa.Column('id', sa.Uuid(), nullable=False),
        sa.Column('admission_number', sa.String(length=32), nullable=False),
        sa.Column('first_name', sa.String(length=64), nullable=False),
        sa.Column('middle_name', sa.String(length=64), nullable=True),
        sa.Column('last_name', sa.String(length=64), nullable=False),
        sa.Column('gender', sa.String(length=16), nullable=True),
        sa.Column('date_of_birth', sa.Date(), nullable=True),
        sa.Column('class_name', sa.String(length=32), nullable=False),
        sa.Column('parent_name', sa.String(length=128), nullable=True),
        sa.Column('parent_email', sa.String(length=255), nullable=True),
        sa.Column('parent_phone', sa.String(length=32), nullable=True),
        sa.Column('status', sa.String(length=16), nullable=False, server_default='active'),
        *timestamps(),
        sa.PrimaryKeyConstraint('id'),
        sa.UniqueConstraint('admission_number'),
        sa.CheckConstraint("status IN ('active','inactive','graduated','transferred')", name='ck_student_status'),
    )
    op.create_index('ix_students_class_status', 'students', ['class_name', 'status'])

    op.create_table(
        'fee_structures',
        sa.Column('id', sa.Uuid(), nullable=False),
        sa.Column('class_name', sa.String(length=32), nullable=False),
        sa.Column('academic_year', sa.String(length=9), nullable=False),
        sa.Column('term', sa.String(length=16), nullable=False),
        sa.Column('due_date', sa.Date(), nullable=False),
        sa.Column('is_active', sa.Boolean(), nullable=False, server_default=sa.true()),
        *timestamps(),
        sa.PrimaryKeyConstraint('id'),
        sa.UniqueConstraint('class_name', 'academic_year', 'term', name='uix_fee_structure_class_term'),
    )

    op.create_table(
        'fee_structure_items',
        sa.Column('id', sa.Uuid(), nullable=False),
        sa.Column('fee_structure_id', sa.Uuid(), nullable=False),
        sa.Column('fee_type', sa.String(length=64), nullable=False),
        sa.Column('amount', sa.BigInteger(), nullable=False),
        *timestamps(),
        sa.PrimaryKeyConstraint('id'),
        sa.ForeignKeyConstraint(['fee_structure_id'], ['fee_structures.id'], ondelete='CASCADE'),
        sa.UniqueConstraint('fee_structure_id', 'fee_type', name='uix_fee_structure_item_type'),
        sa.CheckConstraint('amount > 0', name='ck_fee_structure_items_amount_positive'),
    )
    op.create_index('ix_fee_structure_items_fee_structure_id', 'fee_structure_items', ['fee_structure_id'])

    op.create_table(
        'fees',
        sa.Column('id', sa.Uuid(), nullable=False),
        sa.Column('student_id', sa.Uuid(), nullable=False),
        sa.Column('student_name', sa.String(length=160), nullable=False),
        sa.Column('class_name', sa.String(length=32), nullable=False),
        sa.Column('fee_type', sa.String(length=64), nullable=False),
        sa.Column('description', sa.String(length=255), nullable=True),
        sa.Column('amount', sa.BigInteger(), nullable=False),
        sa.Column('amount_paid', sa.BigInteger(), nullable=False, server_default='0'),
        sa.Column('balance', sa.BigInteger(), nullable=False),
        sa.Column('discount_total', sa.BigInteger(), nullable=False, server_default='0'),
        sa.Column('due_date', sa.Date(), nullable=False),
        sa.Column('status', sa.String(length=16), nullable=False, server_default='unpaid'),
        sa.Column('term', sa.String(length=16), nullable=False),
        sa.Column('academic_year', sa.String(length=9), nullable=False),
        sa.Column('version', sa.Integer(), nullable=False),
        *timestamps(),
        sa.PrimaryKeyConstraint('id'),
        sa.ForeignKeyConstraint(['student_id'], ['students.id']),
        sa.UniqueConstraint('student_id', 'fee_type', 'term', 'academic_year', name='uix_fee_student_type_term'),
        sa.CheckConstraint("status IN ('unpaid','partial','paid','overdue')", name='ck_fee_status'),
        sa.CheckConstraint('amount >= 0', name='ck_fee_amount_non_negative'),
        sa.CheckConstraint('amount_paid >= 0', name='ck_fee_amount_paid_non_negative'),
        sa.CheckConstraint('amount = amount_paid + balance', name='ck_fee_amount_reconciles'),
    )
    op.create_index('ix_fees_student_id', 'fees', ['student_id'])
    op.create_index('ix_fees_class_term_year', 'fees', ['class_name', 'term', 'academic_year'])
    op.create_index('ix_fees_status_due', 'fees', ['status', 'due_date'])

    op.create_table(
        'coupons',
        sa.Column('id', sa.Uuid(), nullable=False),
        sa.Column('code', sa.String(length=20), nullable=False),
        sa.Column('description', sa.String(length=255), nullable=False, server_default=''),
        sa.Column('discount_type', sa.String(length=16), nullable=False),
        sa.Column('discount_value', sa.BigInteger(), nullable=False, server_default='0'),
        sa.Column('max_uses', sa.Integer(), nullable=False, server_default='1'),
        sa.Column('used_count', sa.Integer(), nullable=False, server_default='0'),
        sa.Column('expiry_date', sa.Date(), nullable=False),
        sa.Column('is_active', sa.Boolean(), nullable=False, server_default=sa.true()),
        sa.Column('applicable_classes', sa.JSON(), nullable=False),
        sa.Column('applicable_fee_types', sa.JSON(), nullable=False),
        *timestamps(),
        sa.PrimaryKeyConstraint('id'),
        sa.UniqueConstraint('code'),
        sa.CheckConstraint("discount_type IN ('percentage','fixed','free')", name='ck_coupon_discount_type'),
        sa.CheckConstraint('used_count >= 0 AND used_count <= max_uses', name='ck_coupon_usage_within_limit'),
        sa.CheckConstraint('max_uses >= 1', name='ck_coupon_max_uses_positive'),
    )

    op.create_table(
        'payments',
        sa.Column('id', sa.Uuid(), nullable=False),
        sa.Column('fee_id', sa.Uuid(), nullable=False),
        sa.Column('student_id', sa.Uuid(), nullable=False),
        sa.Column('student_name', sa.String(length=160), nullable=False),
        sa.Column('amount', sa.BigInteger(), nullable=False),
        sa.Column('payment_method', sa.String(length=16), nullable=False),
        sa.Column('payment_date', sa.DateTime(timezone=True), nullable=False),
        sa.Column('transaction_id', sa.String(length=64), nullable=True),
        sa.Column('discount_applied', sa.Boolean(), nullable=False, server_default=sa.false()),
        sa.Column('discount_amount', sa.BigInteger(), nullable=False, server_default='0'),
        sa.Column('coupon_id', sa.Uuid(), nullable=True),
        sa.Column('coupon_usage_recorded', sa.Boolean(), nullable=False, server_default=sa.true()),
        sa.Column('status', sa.String(length=16), nullable=False, server_default='completed'),
        sa.Column('metadata', sa.JSON(), nullable=False),
        *timestamps(),
        sa.PrimaryKeyConstraint('id'),
        sa.ForeignKeyConstraint(['fee_id'], ['fees.id']),
        sa.ForeignKeyConstraint(['coupon_id'], ['coupons.id']),
        sa.UniqueConstraint('transaction_id'),
        sa.CheckConstraint("payment_method IN ('cash','bank_transfer','cheque','paystack')", name='ck_payment_method'),
        sa.CheckConstraint("status IN ('completed','pending','failed')", name='ck_payment_status'),
        sa.CheckConstraint('amount >= 0', name='ck_payment_amount_non_negative'),
        sa.CheckConstraint('discount_amount >= 0', name='ck_payment_discount_non_negative'),
    )
    op.create_index('ix_payments_fee_id', 'payments', ['fee_id'])
    op.create_index('ix_payments_student_id', 'payments', ['student_id'])
    op.create_index('ix_payments_coupon_id', 'payments', ['coupon_id'])
    op.create_index('ix_payments_student_date', 'payments', ['student_id', 'payment_date'])

    op.create_table(
        'coupon_usages',
        sa.Column('id', sa.Uuid(), nullable=False),
        sa.Column('coupon_id', sa.Uuid(), nullable=False),
        sa.Column('fee_id', sa.Uuid(), nullable=False),
        sa.Column('payment_id', sa.Uuid(), nullable=False),
        sa.Column('student_id', sa.Uuid(), nullable=False),
        sa.Column('discount_amount', sa.BigInteger(), nullable=False),
        *timestamps(),
        sa.PrimaryKeyConstraint('id'),
        sa.ForeignKeyConstraint(['coupon_id'], ['coupons.id']),
        sa.ForeignKeyConstraint(['fee_id'], ['fees.id']),
        sa.ForeignKeyConstraint(['payment_id'], ['payments.id']),
        sa.UniqueConstraint('payment_id'),
        sa.UniqueConstraint('coupon_id', 'fee_id', name='uix_coupon_usage_coupon_fee'),
    )
    op.create_index('ix_coupon_usages_coupon_id', 'coupon_usages', ['coupon_id'])

    op.create_table(
        'results',
        sa.Column('id', sa.Uuid(), nullable=False),
        sa.Column('student_id', sa.Uuid(), nullable=False),
        sa.Column('student_name', sa.String(length=160), nullable=False),
        sa.Column('class_name', sa.String(length=32), nullable=False),
        sa.Column('term', sa.String(length=16), nullable=False),
        sa.Column('academic_year', sa.String(length=9), nullable=False),
        sa.Column('total_score', sa.Integer(), nullable=False, server_default='0'),
        sa.Column('average_score', sa.Numeric(5, 2), nullable=False, server_default='0'),
        sa.Column('position', sa.Integer(), nullable=False, server_default='0'),
        sa.Column('total_students', sa.Integer(), nullable=False, server_default='0'),
        sa.Column('class_average', sa.Numeric(5, 2), nullable=False, server_default='0'),
        sa.Column('teacher_remarks', sa.Text(), nullable=True),
        sa.Column('principal_remarks', sa.Text(), nullable=True),
        sa.Column('status', sa.String(length=16), nullable=False, server_default='draft'),
        *timestamps(),
        sa.PrimaryKeyConstraint('id'),
        sa.ForeignKeyConstraint(['student_id'], ['students.id']),
        sa.UniqueConstraint('student_id', 'term', 'academic_year', name='uix_result_student_term'),
        sa.CheckConstraint("status IN ('draft','published')", name='ck_result_status'),
    )
    op.create_index('ix_results_student_id', 'results', ['student_id'])
    op.create_index('ix_results_cohort', 'results', ['class_name', 'term', 'academic_year'])

    op.create_table(
        'subject_scores',
        sa.Column('id', sa.Uuid(), nullable=False),
        sa.Column('result_id', sa.Uuid(), nullable=False),
        sa.Column('position_in_sheet', sa.Integer(), nullable=False, server_default='0'),
        sa.Column('subject_name', sa.String(length=64), nullable=False),
        sa.Column('ca1', sa.Integer(), nullable=False),
        sa.Column('ca2', sa.Integer(), nullable=False),
        sa.Column('exam', sa.Integer(), nullable=False),
        sa.Column('total', sa.Integer(), nullable=False),
        sa.Column('grade', sa.String(length=2), nullable=False),
        sa.Column('remarks', sa.String(length=32), nullable=False),
        sa.PrimaryKeyConstraint('id'),
        sa.ForeignKeyConstraint(['result_id'], ['results.id'], ondelete='CASCADE'),
        sa.UniqueConstraint('result_id', 'subject_name', name='uix_subject_score_result_subject'),
        sa.CheckConstraint('ca1 BETWEEN 0 AND 15', name='ck_subject_score_ca1'),
        sa.CheckConstraint('ca2 BETWEEN 0 AND 15', name='ck_subject_score_ca2'),
        sa.CheckConstraint('exam BETWEEN 0 AND 70', name='ck_subject_score_exam'),
    )
    op.create_index('ix_subject_scores_result_id', 'subject_scores', ['result_id'])


def downgrade():
    op.drop_table('subject_scores')
    op.drop_table('results')
    op.drop_table('coupon_usages')
    op.drop_table('payments')
    op.drop_table('coupons')
    op.drop_table('fees')
    op.drop_table('fee_structure_items')
    op.drop_table('fee_structures')
    op.drop_table('students')
