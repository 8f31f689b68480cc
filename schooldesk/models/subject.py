# schooldesk/models/subject.py
from __future__ import annotations
import uuid
from typing import Optional
from sqlalchemy import String, Boolean, ForeignKey, Uuid, JSON, CheckConstraint
from sqlalchemy.orm import Mapped, mapped_column, relationship
from schooldesk.models.base import Base, IdMixin, TimestampMixin
from schooldesk.models.teacher import Teacher


class Subject(IdMixin, TimestampMixin, Base):
    __tablename__ = "subjects"

    name: Mapped[str] = mapped_column(String(64), nullable=False)
    code: Mapped[str] = mapped_column(String(16), unique=True, nullable=False)
    description: Mapped[Optional[str]] = mapped_column(String(255))
    classes: Mapped[list[str]] = mapped_column(JSON, nullable=False, default=list)
    teacher_id: Mapped[Optional[uuid.UUID]] = mapped_column(
        Uuid, ForeignKey("teachers.id", ondelete="SET NULL"), index=True
    )
    is_core: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)
    status: Mapped[str] = mapped_column(String(16), nullable=False, default="active")

    teacher: Mapped[Optional[Teacher]] = relationship(lazy="joined")

    @property
    def teacher_name(self) -> Optional[str]:
        return self.teacher.full_name if self.teacher else None

    __table_args__ = (
        CheckConstraint("status IN ('active','inactive')", name="ck_subject_status"),
    )
