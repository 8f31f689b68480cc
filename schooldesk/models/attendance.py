# schooldesk/models/attendance.py
from __future__ import annotations
import datetime as dt
import uuid
from typing import Optional
from sqlalchemy import String, Date, ForeignKey, Uuid, CheckConstraint, UniqueConstraint, Index
from sqlalchemy.orm import Mapped, mapped_column
from schooldesk.models.base import Base, IdMixin, TimestampMixin

ATTENDANCE_STATUSES = ("present", "absent", "late", "excused")
# late arrivals count towards attendance; excused absences do not
ATTENDED_STATUSES = ("present", "late")


class AttendanceRecord(IdMixin, TimestampMixin, Base):
    """One student's mark for one school day"""

    __tablename__ = "attendance"

    student_id: Mapped[uuid.UUID] = mapped_column(Uuid, ForeignKey("students.id", ondelete="CASCADE"), nullable=False)
    student_name: Mapped[str] = mapped_column(String(160), nullable=False)
    class_name: Mapped[str] = mapped_column(String(32), nullable=False)
    date: Mapped[dt.date] = mapped_column(Date, nullable=False)
    status: Mapped[str] = mapped_column(String(16), nullable=False)
    remarks: Mapped[Optional[str]] = mapped_column(String(255))
    recorded_by: Mapped[Optional[str]] = mapped_column(String(128))

    __table_args__ = (
        UniqueConstraint("student_id", "date", name="uix_attendance_student_date"),
        CheckConstraint("status IN ('present','absent','late','excused')", name="ck_attendance_status"),
        Index("ix_attendance_class_date", "class_name", "date"),
    )
