# schooldesk/api/routers/payments.py
from fastapi import APIRouter, Depends, Query, status
from typing import List, Optional
from datetime import date
from uuid import UUID

from schooldesk.api.deps.services import payment_recorder
from schooldesk.schemas.fee import FeeRecordOut, PaymentReceiptOut
from schooldesk.schemas.payment import PaymentCreate, PaymentOut
from schooldesk.services.payment_service import PaymentRecorder

router = APIRouter()


@router.post("/", response_model=PaymentReceiptOut, status_code=status.HTTP_201_CREATED)
async def record_payment(data: PaymentCreate, recorder: PaymentRecorder = Depends(payment_recorder)):
    """Record a payment against a fee record, optionally redeeming a coupon"""
    receipt = recorder.record_payment(
        fee_id=data.fee_id,
        amount=data.amount,
        payment_method=data.payment_method,
        coupon_code=data.coupon_code,
        transaction_id=data.transaction_id,
        payment_date=data.payment_date,
        metadata=data.metadata,
    )
    return PaymentReceiptOut(
        payment=PaymentOut.model_validate(receipt.payment),
        fee=FeeRecordOut.model_validate(receipt.fee),
        discount_amount=receipt.discount_amount,
        amount_display=receipt.amount_display,
        balance_display=receipt.balance_display,
    )


@router.get("/", response_model=List[PaymentOut])
async def list_payments(
    student_id: Optional[UUID] = Query(None),
    fee_id: Optional[UUID] = Query(None),
    start_date: Optional[date] = Query(None, description="Inclusive"),
    end_date: Optional[date] = Query(None, description="Inclusive"),
    limit: Optional[int] = Query(None, ge=1, le=1000),
    recorder: PaymentRecorder = Depends(payment_recorder),
):
    """Payments, most recent first"""
    payments = recorder.list_payments(
        student_id=student_id, fee_id=fee_id, start_date=start_date, end_date=end_date, limit=limit
    )
    return [PaymentOut.model_validate(p) for p in payments]


@router.get("/student/{student_id}", response_model=List[PaymentOut])
async def get_student_payments(student_id: UUID, recorder: PaymentRecorder = Depends(payment_recorder)):
    return [PaymentOut.model_validate(p) for p in recorder.list_payments(student_id=student_id)]


@router.get("/{payment_id}", response_model=PaymentOut)
async def get_payment(payment_id: UUID, recorder: PaymentRecorder = Depends(payment_recorder)):
    return PaymentOut.model_validate(recorder.get_payment(payment_id))
