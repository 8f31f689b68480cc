# schooldesk/models/result.py - Term results and their subject scores
from __future__ import annotations
import uuid
from typing import Optional
from sqlalchemy import String, Integer, Numeric, Text, ForeignKey, Uuid, CheckConstraint, Index, UniqueConstraint
from sqlalchemy.orm import Mapped, mapped_column, relationship
from decimal import Decimal
from schooldesk.models.base import Base, IdMixin, TimestampMixin

RESULT_STATUSES = ("draft", "published")


class Result(IdMixin, TimestampMixin, Base):
    __tablename__ = "results"

    student_id: Mapped[uuid.UUID] = mapped_column(Uuid, ForeignKey("students.id"), nullable=False, index=True)
    student_name: Mapped[str] = mapped_column(String(160), nullable=False)
    class_name: Mapped[str] = mapped_column(String(32), nullable=False)
    term: Mapped[str] = mapped_column(String(16), nullable=False)
    academic_year: Mapped[str] = mapped_column(String(9), nullable=False)
    total_score: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    average_score: Mapped[Decimal] = mapped_column(Numeric(5, 2), nullable=False, default=Decimal("0.00"))
    # Filled in by cohort ranking; 0 until the cohort is ranked
    position: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    total_students: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    class_average: Mapped[Decimal] = mapped_column(Numeric(5, 2), nullable=False, default=Decimal("0.00"))
    teacher_remarks: Mapped[Optional[str]] = mapped_column(Text)
    principal_remarks: Mapped[Optional[str]] = mapped_column(Text)
    status: Mapped[str] = mapped_column(String(16), nullable=False, default="draft")

    subjects: Mapped[list["SubjectScore"]] = relationship(
        "SubjectScore",
        back_populates="result",
        cascade="all, delete-orphan",
        passive_deletes=True,
        order_by="SubjectScore.position_in_sheet",
    )

    __table_args__ = (
        CheckConstraint("status IN ('draft','published')", name="ck_result_status"),
        UniqueConstraint("student_id", "term", "academic_year", name="uix_result_student_term"),
        Index("ix_results_cohort", "class_name", "term", "academic_year"),
    )


class SubjectScore(IdMixin, Base):
    __tablename__ = "subject_scores"

    result_id: Mapped[uuid.UUID] = mapped_column(
        Uuid, ForeignKey("results.id", ondelete="CASCADE"), nullable=False, index=True
    )
    position_in_sheet: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    subject_name: Mapped[str] = mapped_column(String(64), nullable=False)
    ca1: Mapped[int] = mapped_column(Integer, nullable=False)
    ca2: Mapped[int] = mapped_column(Integer, nullable=False)
    exam: Mapped[int] = mapped_column(Integer, nullable=False)
    total: Mapped[int] = mapped_column(Integer, nullable=False)
    grade: Mapped[str] = mapped_column(String(2), nullable=False)
    remarks: Mapped[str] = mapped_column(String(32), nullable=False)

    result: Mapped["Result"] = relationship("Result", back_populates="subjects")

    __table_args__ = (
        CheckConstraint("ca1 BETWEEN 0 AND 15", name="ck_subject_score_ca1"),
        CheckConstraint("ca2 BETWEEN 0 AND 15", name="ck_subject_score_ca2"),
        CheckConstraint("exam BETWEEN 0 AND 70", name="ck_subject_score_exam"),
        UniqueConstraint("result_id", "subject_name", name="uix_subject_score_result_subject"),
    )
