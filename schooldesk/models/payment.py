# schooldesk/models/payment.py - Append-only payment log
from __future__ import annotations
import uuid
from datetime import datetime
from typing import Any, Optional
from sqlalchemy import String, BigInteger, Boolean, DateTime, ForeignKey, Uuid, JSON, CheckConstraint, Index
from sqlalchemy.orm import Mapped, mapped_column
from schooldesk.models.base import Base, IdMixin, TimestampMixin, utcnow

PAYMENT_METHODS = ("cash", "bank_transfer", "cheque", "paystack")
PAYMENT_STATUSES = ("completed", "pending", "failed")


class Payment(IdMixin, TimestampMixin, Base):
    __tablename__ = "payments"

    # No cascade: payments outlive nothing, and fees with payments are never deleted
    fee_id: Mapped[uuid.UUID] = mapped_column(Uuid, ForeignKey("fees.id"), nullable=False, index=True)
    student_id: Mapped[uuid.UUID] = mapped_column(Uuid, nullable=False, index=True)
    student_name: Mapped[str] = mapped_column(String(160), nullable=False)
    amount: Mapped[int] = mapped_column(BigInteger, nullable=False)  # kobo
    payment_method: Mapped[str] = mapped_column(String(16), nullable=False)
    payment_date: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False, default=utcnow)
    transaction_id: Mapped[Optional[str]] = mapped_column(String(64), unique=True)
    discount_applied: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)
    discount_amount: Mapped[int] = mapped_column(BigInteger, nullable=False, default=0)
    coupon_id: Mapped[Optional[uuid.UUID]] = mapped_column(Uuid, ForeignKey("coupons.id"), index=True)
    coupon_usage_recorded: Mapped[bool] = mapped_column(Boolean, nullable=False, default=True)
    status: Mapped[str] = mapped_column(String(16), nullable=False, default="completed")
    payment_metadata: Mapped[dict[str, Any]] = mapped_column("metadata", JSON, nullable=False, default=dict)

    __table_args__ = (
        CheckConstraint("payment_method IN ('cash','bank_transfer','cheque','paystack')", name="ck_payment_method"),
        CheckConstraint("status IN ('completed','pending','failed')", name="ck_payment_status"),
        CheckConstraint("amount >= 0", name="ck_payment_amount_non_negative"),
        CheckConstraint("discount_amount >= 0", name="ck_payment_discount_non_negative"),
        Index("ix_payments_student_date", "student_id", "payment_date"),
    )
