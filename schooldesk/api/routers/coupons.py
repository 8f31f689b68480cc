# schooldesk/api/routers/coupons.py
from fastapi import APIRouter, Depends, Query, status
from typing import List
from uuid import UUID

from schooldesk.api.deps.services import coupon_service
from schooldesk.models import Coupon
from schooldesk.schemas.coupon import (
    CouponCreate,
    CouponOut,
    CouponReconcileOut,
    CouponUpdate,
    CouponValidateRequest,
    CouponValidationOut,
)
from schooldesk.services.coupon_service import CouponService, format_discount_value

router = APIRouter()


def to_out(coupon: Coupon) -> CouponOut:
    out = CouponOut.model_validate(coupon)
    out.discount_display = format_discount_value(coupon.discount_type, coupon.discount_value)
    return out


@router.post("/", response_model=CouponOut, status_code=status.HTTP_201_CREATED)
async def create_coupon(data: CouponCreate, service: CouponService = Depends(coupon_service)):
    return to_out(service.create_coupon(data))


@router.get("/", response_model=List[CouponOut])
async def list_coupons(
    active_only: bool = Query(False),
    service: CouponService = Depends(coupon_service),
):
    return [to_out(c) for c in service.list_coupons(active_only=active_only)]


@router.post("/validate", response_model=CouponValidationOut)
async def validate_coupon(data: CouponValidateRequest, service: CouponService = Depends(coupon_service)):
    """Check a coupon without redeeming it"""
    fee = service.fees.get_or_404(data.fee_id) if data.fee_id else None
    balance = fee.balance if fee else data.balance
    result = service.validate(data.code, balance, fee=fee)
    return CouponValidationOut(
        valid=result.valid,
        discount_amount=result.discount_amount,
        message=result.message,
        coupon=to_out(result.coupon) if result.valid else None,
    )


@router.post("/reconcile", response_model=CouponReconcileOut)
async def reconcile_coupon_usage(service: CouponService = Depends(coupon_service)):
    """Retry usage recording for payments flagged during a store failure"""
    return CouponReconcileOut(**service.reconcile_usage())


@router.get("/{coupon_id}", response_model=CouponOut)
async def get_coupon(coupon_id: UUID, service: CouponService = Depends(coupon_service)):
    return to_out(service.get_coupon(coupon_id))


@router.put("/{coupon_id}", response_model=CouponOut)
async def update_coupon(coupon_id: UUID, data: CouponUpdate, service: CouponService = Depends(coupon_service)):
    return to_out(service.update_coupon(coupon_id, data))


@router.delete("/{coupon_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_coupon(coupon_id: UUID, service: CouponService = Depends(coupon_service)):
    service.delete_coupon(coupon_id)
