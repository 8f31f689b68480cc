# schooldesk/services/coupon_service.py - Coupon administration, validation and usage tracking
import logging
import re
from dataclasses import dataclass
from datetime import date
from typing import Optional, Sequence
from uuid import UUID

from sqlalchemy import func, select, update
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from schooldesk import repositories
from schooldesk.core.exceptions import ConflictError, ValidationError
from schooldesk.core.money import format_naira, percentage_of
from schooldesk.models import Coupon, CouponUsage, FeeRecord, Payment
from schooldesk.schemas.coupon import CouponCreate, CouponUpdate
from schooldesk.services.base import BaseService

logger = logging.getLogger(__name__)

COUPON_CODE_PATTERN = re.compile(r"^[A-Z0-9_-]{3,20}$")

INVALID_CODE = "Invalid coupon code"
INACTIVE = "This coupon is inactive"
EXHAUSTED = "This coupon has reached its maximum usage limit"
EXPIRED = "This coupon has expired"
WRONG_CLASS = "This coupon does not apply to this class"
WRONG_FEE_TYPE = "This coupon does not apply to this fee type"
ALREADY_APPLIED = "This coupon has already been applied to this fee"
APPLIED = "Coupon applied successfully"


@dataclass
class CouponValidation:
    valid: bool
    discount_amount: int = 0
    message: Optional[str] = None
    coupon: Optional[Coupon] = None


def format_discount_value(discount_type: str, value: int) -> str:
    if discount_type == "percentage":
        return f"{value}%"
    if discount_type == "fixed":
        return format_naira(value)
    return "Free"


def compute_discount(coupon: Coupon, balance: int) -> int:
    """Discount a coupon grants against ``balance``; never more than the balance"""
    if balance <= 0:
        return 0
    if coupon.discount_type == "percentage":
        discount = percentage_of(balance, coupon.discount_value)
    elif coupon.discount_type == "fixed":
        discount = coupon.discount_value
    else:
        discount = balance
    return min(discount, balance)


class CouponService(BaseService):
    def __init__(self, session: Session):
        super().__init__(session)
        self.coupons = repositories.coupons(session)
        self.usages = repositories.coupon_usages(session)
        self.payments = repositories.payments(session)
        self.fees = repositories.fees(session)

    # ------------------------------------------------------------------
    # Administration
    # ------------------------------------------------------------------

    def create_coupon(self, data: CouponCreate) -> Coupon:
        code = data.code.strip()
        if not COUPON_CODE_PATTERN.match(code):
            raise ValidationError(
                "Coupon code must be 3-20 characters of uppercase letters, digits, hyphens or underscores"
            )
        discount_value = self._check_discount_value(data.discount_type, data.discount_value)

        clash = self.session.execute(
            select(Coupon.id).where(func.upper(Coupon.code) == code.upper())
        ).first()
        if clash:
            raise ConflictError(f"Coupon code {code} already exists")

        coupon = Coupon(
            code=code,
            description=data.description.strip(),
            discount_type=data.discount_type,
            discount_value=discount_value,
            max_uses=data.max_uses,
            used_count=0,
            expiry_date=data.expiry_date,
            is_active=data.is_active,
            applicable_classes=list(data.applicable_classes),
            applicable_fee_types=list(data.applicable_fee_types),
        )
        with self.unit_of_work("Failed to create coupon", conflict_message=f"Coupon code {code} already exists"):
            self.coupons.add(coupon)

        logger.info(f"Created coupon {code} ({format_discount_value(coupon.discount_type, discount_value)})")
        return coupon

    def get_coupon(self, coupon_id: UUID) -> Coupon:
        return self.coupons.get_or_404(coupon_id)

    def list_coupons(self, active_only: bool = False) -> Sequence[Coupon]:
        if active_only:
            return self.coupons.list(order_by=Coupon.code, is_active=True)
        return self.coupons.list(order_by=Coupon.code)

    def update_coupon(self, coupon_id: UUID, data: CouponUpdate) -> Coupon:
        coupon = self.coupons.get_or_404(coupon_id)
        changes = data.model_dump(exclude_unset=True, exclude_none=True)

        if "discount_value" in changes:
            changes["discount_value"] = self._check_discount_value(coupon.discount_type, changes["discount_value"])
        if "max_uses" in changes and changes["max_uses"] < coupon.used_count:
            raise ValidationError(
                f"max_uses cannot be lower than the {coupon.used_count} time(s) this coupon was already used"
            )

        with self.unit_of_work("Failed to update coupon"):
            for field, value in changes.items():
                setattr(coupon, field, value)
        return coupon

    def delete_coupon(self, coupon_id: UUID) -> None:
        coupon = self.coupons.get_or_404(coupon_id)
        if coupon.used_count > 0:
            raise ConflictError("A coupon that has been used cannot be deleted; deactivate it instead")
        with self.unit_of_work("Failed to delete coupon"):
            self.coupons.delete(coupon)
        logger.info(f"Deleted coupon {coupon.code}")

    # ------------------------------------------------------------------
    # Validation
    # ------------------------------------------------------------------

    def validate(self, code: str, balance: int, fee: Optional[FeeRecord] = None, today: Optional[date] = None) -> CouponValidation:
        """
        Check ``code`` against a balance, and against ``fee`` when given.
        Read-only: nothing is reserved or counted here.
        """
        today = today or date.today()
        coupon = self.coupons.find_by(code=(code or "").strip())

        if coupon is None:
            return CouponValidation(False, message=INVALID_CODE)
        if not coupon.is_active:
            return CouponValidation(False, message=INACTIVE, coupon=coupon)
        if coupon.used_count >= coupon.max_uses:
            return CouponValidation(False, message=EXHAUSTED, coupon=coupon)
        if coupon.expiry_date < today:
            return CouponValidation(False, message=EXPIRED, coupon=coupon)

        if fee is not None:
            if coupon.applicable_classes and fee.class_name not in coupon.applicable_classes:
                return CouponValidation(False, message=WRONG_CLASS, coupon=coupon)
            if coupon.applicable_fee_types and fee.fee_type not in coupon.applicable_fee_types:
                return CouponValidation(False, message=WRONG_FEE_TYPE, coupon=coupon)
            if self._applied_to(coupon, fee):
                return CouponValidation(False, message=ALREADY_APPLIED, coupon=coupon)

        return CouponValidation(True, discount_amount=compute_discount(coupon, balance), message=APPLIED, coupon=coupon)

    def _applied_to(self, coupon: Coupon, fee: FeeRecord) -> bool:
        # Payments flagged for reconciliation have no usage row yet
        if self.usages.find_by(coupon_id=coupon.id, fee_id=fee.id):
            return True
        return self.payments.count(Payment.coupon_id == coupon.id, Payment.fee_id == fee.id) > 0

    # ------------------------------------------------------------------
    # Usage
    # ------------------------------------------------------------------

    def record_usage(self, coupon: Coupon, fee: FeeRecord, payment: Payment, discount_amount: int) -> CouponUsage:
        """
        Count one use of ``coupon`` and log it against ``fee``.

        Runs inside the caller's transaction and never commits. The
        increment is a guarded UPDATE so two payments racing for the last
        use cannot both win.
        """
        result = self.session.execute(
            update(Coupon)
            .where(
                Coupon.id == coupon.id,
                Coupon.is_active.is_(True),
                Coupon.used_count < Coupon.max_uses,
            )
            .values(used_count=Coupon.used_count + 1)
            .execution_options(synchronize_session=False)
        )
        if result.rowcount == 0:
            self.session.refresh(coupon, ["is_active", "used_count", "max_uses"])
            raise ValidationError(EXHAUSTED if coupon.is_active else INACTIVE)

        usage = self.usages.add(CouponUsage(
            coupon_id=coupon.id,
            fee_id=fee.id,
            payment_id=payment.id,
            student_id=fee.student_id,
            discount_amount=discount_amount,
        ))
        self.session.flush()
        self.session.refresh(coupon, ["used_count"])
        return usage

    def reconcile_usage(self) -> dict:
        """Record usage for discounted payments whose usage write failed earlier"""
        pending = self.payments.list(
            Payment.coupon_id.is_not(None),
            Payment.coupon_usage_recorded.is_(False),
            order_by=Payment.payment_date,
        )
        recorded = 0

        with self.unit_of_work("Failed to reconcile coupon usage"):
            for payment in pending:
                coupon = self.coupons.get(payment.coupon_id)
                fee = self.fees.get(payment.fee_id)
                try:
                    with self.session.begin_nested():
                        if not self.usages.find_by(payment_id=payment.id):
                            self.record_usage(coupon, fee, payment, payment.discount_amount)
                        payment.coupon_usage_recorded = True
                    recorded += 1
                except ValidationError as e:
                    # The discount was already granted; only the counter is behind
                    logger.warning(f"Usage of coupon {coupon.code} for payment {payment.id} cannot be counted: {e.message}")
                except SQLAlchemyError as e:
                    logger.warning(f"Still unable to record coupon usage for payment {payment.id}: {e}")

        if pending:
            logger.info(f"Reconciled coupon usage: {recorded} of {len(pending)} pending payment(s) recorded")
        return {"pending": len(pending), "recorded": recorded}

    # ------------------------------------------------------------------

    @staticmethod
    def _check_discount_value(discount_type: str, value: int) -> int:
        if discount_type == "percentage":
            if not 1 <= value <= 100:
                raise ValidationError("Percentage discount must be between 1 and 100")
            return value
        if discount_type == "fixed":
            if value <= 0:
                raise ValidationError("Fixed discount must be greater than zero")
            return value
        return 0
