# schooldesk/services/payment_service.py - Recording payments against fee records
import logging
from dataclasses import dataclass
from datetime import date, datetime, time, timedelta, timezone
from typing import Any, Dict, Optional, Sequence, Tuple
from uuid import UUID

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from schooldesk import repositories
from schooldesk.core.exceptions import ConflictError, ValidationError
from schooldesk.core.money import format_naira
from schooldesk.models import FeeRecord, Payment
from schooldesk.models.base import utcnow
from schooldesk.models.payment import PAYMENT_METHODS
from schooldesk.services.base import BaseService
from schooldesk.services.coupon_service import CouponService, CouponValidation
from schooldesk.services.fee_service import settle

logger = logging.getLogger(__name__)


@dataclass
class PaymentReceipt:
    fee: FeeRecord
    payment: Payment
    discount_amount: int

    @property
    def amount_display(self) -> str:
        return format_naira(self.payment.amount)

    @property
    def balance_display(self) -> str:
        return format_naira(self.fee.balance)


class PaymentRecorder(BaseService):
    """
    Applies a payment, and optionally one coupon, to a fee record.

    Everything a payment changes (the fee balance, the payment row and the
    coupon counter) is written in a single transaction.
    """

    def __init__(self, session: Session, coupon_service: Optional[CouponService] = None):
        super().__init__(session)
        self.fees = repositories.fees(session)
        self.payments = repositories.payments(session)
        self.coupon_service = coupon_service or CouponService(session)

    def quote(
        self,
        fee: FeeRecord,
        amount: int,
        coupon_code: Optional[str] = None,
        drop_invalid_coupon: bool = False,
    ) -> Tuple[Optional[CouponValidation], int]:
        """
        Validate a prospective payment without writing anything.

        Returns the coupon validation (None when no coupon applies) and the
        discount it grants. With ``drop_invalid_coupon`` an invalid coupon is
        logged and ignored instead of rejecting the payment.
        """
        validation = None
        discount = 0

        if coupon_code and coupon_code.strip():
            validation = self.coupon_service.validate(coupon_code, fee.balance, fee=fee)
            if validation.valid:
                discount = validation.discount_amount
            elif drop_invalid_coupon:
                logger.warning(
                    f"Coupon {coupon_code.strip()} no longer valid for fee {fee.id} "
                    f"({validation.message}); recording payment without discount"
                )
                validation = None
            else:
                raise ValidationError(validation.message)

        if drop_invalid_coupon and discount and amount + discount > fee.balance:
            logger.warning(f"Discount on fee {fee.id} would overshoot the balance; recording payment without it")
            validation, discount = None, 0

        if amount < 0:
            raise ValidationError("Payment amount cannot be negative")
        if amount + discount > fee.balance:
            raise ValidationError("Payment amount cannot exceed the balance")
        if amount == 0 and (discount == 0 or discount < fee.balance):
            raise ValidationError("Please enter a valid payment amount")

        return validation, discount

    def record_payment(
        self,
        fee_id: UUID,
        amount: int,
        payment_method: str = "cash",
        coupon_code: Optional[str] = None,
        transaction_id: Optional[str] = None,
        payment_date: Optional[datetime] = None,
        metadata: Optional[Dict[str, Any]] = None,
        drop_invalid_coupon: bool = False,
    ) -> PaymentReceipt:
        if payment_method not in PAYMENT_METHODS:
            raise ValidationError(f"Unsupported payment method: {payment_method}")

        if transaction_id:
            existing = self.payments.find_by(transaction_id=transaction_id)
            if existing:
                if existing.fee_id != fee_id or existing.amount != amount:
                    logger.warning(
                        f"Transaction {transaction_id} reused for fee {fee_id} ({amount}); "
                        f"already recorded as payment {existing.id} on fee {existing.fee_id} ({existing.amount})"
                    )
                    raise ConflictError(f"Transaction {transaction_id} is already recorded against another payment")
                logger.info(f"Transaction {transaction_id} already recorded as payment {existing.id}")
                return PaymentReceipt(self.fees.get_or_404(existing.fee_id), existing, existing.discount_amount)

        fee = self.fees.get_or_404(fee_id)
        validation, discount = self.quote(fee, amount, coupon_code, drop_invalid_coupon=drop_invalid_coupon)
        coupon = validation.coupon if validation else None

        with self.unit_of_work("Failed to record payment", conflict_message="This payment has already been recorded"):
            settle(fee, amount, discount)
            payment = self.payments.add(Payment(
                fee_id=fee.id,
                student_id=fee.student_id,
                student_name=fee.student_name,
                amount=amount,
                payment_method=payment_method,
                payment_date=payment_date or utcnow(),
                transaction_id=transaction_id,
                discount_applied=discount > 0,
                discount_amount=discount,
                coupon_id=coupon.id if coupon else None,
                coupon_usage_recorded=True,
                status="completed",
                payment_metadata=dict(metadata or {}),
            ))
            # The fee update and payment insert must reach the store before the savepoint
            self.session.flush()

            if coupon is not None:
                self._record_coupon_usage(coupon, fee, payment, discount)

        logger.info(
            f"Recorded {payment_method} payment of {format_naira(amount)} for {fee.student_name} "
            f"({fee.fee_type}); balance now {format_naira(fee.balance)}"
            + (f", coupon {coupon.code} saved {format_naira(discount)}" if coupon else "")
        )
        return PaymentReceipt(fee, payment, discount)

    def _record_coupon_usage(self, coupon, fee: FeeRecord, payment: Payment, discount: int) -> None:
        try:
            with self.session.begin_nested():
                self.coupon_service.record_usage(coupon, fee, payment, discount)
        except ValidationError:
            raise
        except SQLAlchemyError as e:
            logger.warning(
                f"Could not record usage of coupon {coupon.code} for payment {payment.id}; "
                f"flagged for reconciliation: {e}"
            )
            payment.coupon_usage_recorded = False

    # ------------------------------------------------------------------
    # Queries
    # ------------------------------------------------------------------

    def get_payment(self, payment_id: UUID) -> Payment:
        return self.payments.get_or_404(payment_id)

    def list_payments(
        self,
        student_id: Optional[UUID] = None,
        fee_id: Optional[UUID] = None,
        start_date: Optional[date] = None,
        end_date: Optional[date] = None,
        limit: Optional[int] = None,
    ) -> Sequence[Payment]:
        """Payments matching every given filter, most recent first. Date bounds are inclusive."""
        if start_date and end_date and start_date > end_date:
            raise ValidationError("start_date must not be after end_date")

        criteria = []
        if start_date:
            criteria.append(Payment.payment_date >= datetime.combine(start_date, time.min, tzinfo=timezone.utc))
        if end_date:
            criteria.append(
                Payment.payment_date < datetime.combine(end_date + timedelta(days=1), time.min, tzinfo=timezone.utc)
            )

        filters = {}
        if student_id:
            filters["student_id"] = student_id
        if fee_id:
            filters["fee_id"] = fee_id

        return self.payments.list(*criteria, order_by=Payment.payment_date.desc(), limit=limit, **filters)
