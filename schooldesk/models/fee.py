# schooldesk/models/fee.py
from __future__ import annotations

import uuid
from datetime import date
from typing import Literal, Optional

from sqlalchemy import (
    String, Integer, BigInteger, Boolean, Date, ForeignKey, Uuid,
    CheckConstraint, Index, UniqueConstraint
)
from sqlalchemy.orm import Mapped, mapped_column, relationship

from schooldesk.models.base import Base, IdMixin, TimestampMixin

FeeStatus = Literal["unpaid", "partial", "paid", "overdue"]
Term = Literal["1st Term", "2nd Term", "3rd Term"]

FEE_STATUSES = ("unpaid", "partial", "paid", "overdue")
TERMS = ("1st Term", "2nd Term", "3rd Term")


class FeeStructure(IdMixin, TimestampMixin, Base):
    """The fees billed to every student of a class for one term"""

    __tablename__ = "fee_structures"

    class_name: Mapped[str] = mapped_column(String(32), nullable=False)
    academic_year: Mapped[str] = mapped_column(String(9), nullable=False)
    term: Mapped[str] = mapped_column(String(16), nullable=False)
    due_date: Mapped[date] = mapped_column(Date, nullable=False)
    is_active: Mapped[bool] = mapped_column(Boolean, default=True, nullable=False)

    items: Mapped[list["FeeStructureItem"]] = relationship(
        "FeeStructureItem",
        back_populates="structure",
        cascade="all, delete-orphan",
        passive_deletes=True,
        order_by="FeeStructureItem.fee_type",
    )

    @property
    def total_amount(self) -> int:
        return sum(item.amount for item in self.items)

    __table_args__ = (
        UniqueConstraint("class_name", "academic_year", "term", name="uix_fee_structure_class_term"),
    )


class FeeStructureItem(IdMixin, TimestampMixin, Base):
    __tablename__ = "fee_structure_items"

    fee_structure_id: Mapped[uuid.UUID] = mapped_column(
        Uuid,
        ForeignKey("fee_structures.id", ondelete="CASCADE"),
        index=True,
        nullable=False,
    )
    fee_type: Mapped[str] = mapped_column(String(64), nullable=False)
    amount: Mapped[int] = mapped_column(BigInteger, nullable=False)  # kobo

    structure: Mapped["FeeStructure"] = relationship("FeeStructure", back_populates="items")

    __table_args__ = (
        CheckConstraint("amount > 0", name="ck_fee_structure_items_amount_positive"),
        UniqueConstraint("fee_structure_id", "fee_type", name="uix_fee_structure_item_type"),
    )


class FeeRecord(IdMixin, TimestampMixin, Base):
    """
    A student's obligation for one fee type in one term.

    ``amount`` is the net obligation after coupon discounts; what was
    originally billed is ``amount + discount_total``. All money is kobo.
    """

    __tablename__ = "fees"

    student_id: Mapped[uuid.UUID] = mapped_column(Uuid, ForeignKey("students.id"), nullable=False, index=True)
    student_name: Mapped[str] = mapped_column(String(160), nullable=False)
    class_name: Mapped[str] = mapped_column(String(32), nullable=False)
    fee_type: Mapped[str] = mapped_column(String(64), nullable=False)
    description: Mapped[Optional[str]] = mapped_column(String(255))
    amount: Mapped[int] = mapped_column(BigInteger, nullable=False)
    amount_paid: Mapped[int] = mapped_column(BigInteger, nullable=False, default=0)
    balance: Mapped[int] = mapped_column(BigInteger, nullable=False)
    discount_total: Mapped[int] = mapped_column(BigInteger, nullable=False, default=0)
    due_date: Mapped[date] = mapped_column(Date, nullable=False)
    status: Mapped[str] = mapped_column(String(16), nullable=False, default="unpaid")
    term: Mapped[str] = mapped_column(String(16), nullable=False)
    academic_year: Mapped[str] = mapped_column(String(9), nullable=False)
    version: Mapped[int] = mapped_column(Integer, nullable=False)

    __mapper_args__ = {"version_id_col": version}

    @property
    def gross_amount(self) -> int:
        return self.amount + self.discount_total

    __table_args__ = (
        CheckConstraint("status IN ('unpaid','partial','paid','overdue')", name="ck_fee_status"),
        CheckConstraint("amount >= 0", name="ck_fee_amount_non_negative"),
        CheckConstraint("amount_paid >= 0", name="ck_fee_amount_paid_non_negative"),
        CheckConstraint("amount = amount_paid + balance", name="ck_fee_amount_reconciles"),
        UniqueConstraint("student_id", "fee_type", "term", "academic_year", name="uix_fee_student_type_term"),
        Index("ix_fees_class_term_year", "class_name", "term", "academic_year"),
        Index("ix_fees_status_due", "status", "due_date"),
    )
