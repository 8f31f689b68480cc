# schooldesk/models/coupon.py
from __future__ import annotations
import uuid
from datetime import date
from typing import Optional
from sqlalchemy import String, Integer, BigInteger, Boolean, Date, ForeignKey, Uuid, JSON, CheckConstraint, UniqueConstraint
from sqlalchemy.orm import Mapped, mapped_column
from schooldesk.models.base import Base, IdMixin, TimestampMixin

DISCOUNT_TYPES = ("percentage", "fixed", "free")


class Coupon(IdMixin, TimestampMixin, Base):
    __tablename__ = "coupons"

    code: Mapped[str] = mapped_column(String(20), unique=True, nullable=False)
    description: Mapped[str] = mapped_column(String(255), nullable=False, default="")
    discount_type: Mapped[str] = mapped_column(String(16), nullable=False)
    # whole percent for percentage coupons, kobo for fixed, 0 for free
    discount_value: Mapped[int] = mapped_column(BigInteger, nullable=False, default=0)
    max_uses: Mapped[int] = mapped_column(Integer, nullable=False, default=1)
    used_count: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    expiry_date: Mapped[date] = mapped_column(Date, nullable=False)
    is_active: Mapped[bool] = mapped_column(Boolean, nullable=False, default=True)
    applicable_classes: Mapped[list[str]] = mapped_column(JSON, nullable=False, default=list)
    applicable_fee_types: Mapped[list[str]] = mapped_column(JSON, nullable=False, default=list)

    @property
    def remaining_uses(self) -> int:
        return max(0, self.max_uses - self.used_count)

    __table_args__ = (
        CheckConstraint("discount_type IN ('percentage','fixed','free')", name="ck_coupon_discount_type"),
        CheckConstraint("used_count >= 0 AND used_count <= max_uses", name="ck_coupon_usage_within_limit"),
        CheckConstraint("max_uses >= 1", name="ck_coupon_max_uses_positive"),
    )


class CouponUsage(IdMixin, TimestampMixin, Base):
    """One row per discounted payment; a coupon applies to a fee at most once"""

    __tablename__ = "coupon_usages"

    coupon_id: Mapped[uuid.UUID] = mapped_column(Uuid, ForeignKey("coupons.id"), nullable=False, index=True)
    fee_id: Mapped[uuid.UUID] = mapped_column(Uuid, ForeignKey("fees.id"), nullable=False)
    payment_id: Mapped[uuid.UUID] = mapped_column(Uuid, ForeignKey("payments.id"), nullable=False, unique=True)
    student_id: Mapped[uuid.UUID] = mapped_column(Uuid, nullable=False)
    discount_amount: Mapped[int] = mapped_column(BigInteger, nullable=False)

    __table_args__ = (
        UniqueConstraint("coupon_id", "fee_id", name="uix_coupon_usage_coupon_fee"),
    )
