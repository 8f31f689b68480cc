# schooldesk/models/student.py
from __future__ import annotations
from datetime import date
from typing import Optional
from sqlalchemy import String, Date, CheckConstraint, Index
from sqlalchemy.orm import Mapped, mapped_column
from schooldesk.models.base import Base, IdMixin, TimestampMixin


class Student(IdMixin, TimestampMixin, Base):
    __tablename__ = "students"

    admission_number: Mapped[str] = mapped_column(String(32), unique=True, nullable=False)
    first_name: Mapped[str] = mapped_column(String(64), nullable=False)
    middle_name: Mapped[Optional[str]] = mapped_column(String(64))
    last_name: Mapped[str] = mapped_column(String(64), nullable=False)
    gender: Mapped[Optional[str]] = mapped_column(String(16))
    date_of_birth: Mapped[Optional[date]] = mapped_column(Date())
    class_name: Mapped[str] = mapped_column(String(32), nullable=False)
    parent_name: Mapped[Optional[str]] = mapped_column(String(128))
    parent_email: Mapped[Optional[str]] = mapped_column(String(255))
    parent_phone: Mapped[Optional[str]] = mapped_column(String(32))
    status: Mapped[str] = mapped_column(String(16), nullable=False, default="active")  # active|inactive|graduated|transferred

    @property
    def full_name(self) -> str:
        return f"{self.first_name} {self.last_name}"

    __table_args__ = (
        CheckConstraint("status IN ('active','inactive','graduated','transferred')", name="ck_student_status"),
        Index("ix_students_class_status", "class_name", "status"),
    )
