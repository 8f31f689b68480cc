# schooldesk/models/class_model.py
from __future__ import annotations
import uuid
from typing import Optional
from sqlalchemy import String, Integer, ForeignKey, Uuid, JSON, CheckConstraint, UniqueConstraint
from sqlalchemy.orm import Mapped, mapped_column, relationship
from schooldesk.models.base import Base, IdMixin, TimestampMixin
from schooldesk.models.teacher import Teacher


class SchoolClass(IdMixin, TimestampMixin, Base):
    """A class (form) for one academic year; students join it by ``class_name``"""

    __tablename__ = "classes"

    name: Mapped[str] = mapped_column(String(32), nullable=False)
    level: Mapped[str] = mapped_column(String(32), nullable=False)
    section: Mapped[Optional[str]] = mapped_column(String(16))
    capacity: Mapped[int] = mapped_column(Integer, nullable=False, default=40)
    academic_year: Mapped[str] = mapped_column(String(9), nullable=False)
    class_teacher_id: Mapped[Optional[uuid.UUID]] = mapped_column(
        Uuid, ForeignKey("teachers.id", ondelete="SET NULL"), index=True
    )
    subjects: Mapped[list[str]] = mapped_column(JSON, nullable=False, default=list)
    status: Mapped[str] = mapped_column(String(16), nullable=False, default="active")  # active|inactive

    class_teacher: Mapped[Optional[Teacher]] = relationship(lazy="joined")

    @property
    def class_teacher_name(self) -> Optional[str]:
        return self.class_teacher.full_name if self.class_teacher else None

    __table_args__ = (
        UniqueConstraint("name", "academic_year", name="uix_class_name_year"),
        CheckConstraint("capacity > 0", name="ck_class_capacity_positive"),
        CheckConstraint("status IN ('active','inactive')", name="ck_class_status"),
    )
