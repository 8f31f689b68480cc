# schooldesk/models/teacher.py
from __future__ import annotations
from datetime import date
from typing import Optional
from sqlalchemy import String, Date, Integer, JSON, CheckConstraint
from sqlalchemy.orm import Mapped, mapped_column
from schooldesk.models.base import Base, IdMixin, TimestampMixin


class Teacher(IdMixin, TimestampMixin, Base):
    __tablename__ = "teachers"

    employee_id: Mapped[str] = mapped_column(String(32), unique=True, nullable=False)
    first_name: Mapped[str] = mapped_column(String(64), nullable=False)
    middle_name: Mapped[Optional[str]] = mapped_column(String(64))
    last_name: Mapped[str] = mapped_column(String(64), nullable=False)
    email: Mapped[str] = mapped_column(String(255), unique=True, nullable=False)
    phone: Mapped[Optional[str]] = mapped_column(String(32))
    gender: Mapped[Optional[str]] = mapped_column(String(16))
    qualification: Mapped[Optional[str]] = mapped_column(String(128))
    experience_years: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    subjects: Mapped[list[str]] = mapped_column(JSON, nullable=False, default=list)
    hire_date: Mapped[Optional[date]] = mapped_column(Date())
    status: Mapped[str] = mapped_column(String(16), nullable=False, default="active")  # active|inactive|terminated

    @property
    def full_name(self) -> str:
        return f"{self.first_name} {self.last_name}"

    __table_args__ = (
        CheckConstraint("status IN ('active','inactive','terminated')", name="ck_teacher_status"),
        CheckConstraint("experience_years >= 0", name="ck_teacher_experience_non_negative"),
    )
