# schooldesk/schemas/coupon.py
from pydantic import BaseModel, ConfigDict, Field, model_validator
from typing import Optional, List, Literal
from datetime import date, datetime
from uuid import UUID

DiscountType = Literal["percentage", "fixed", "free"]


class CouponCreate(BaseModel):
    code: str = Field(..., max_length=32)
    description: str = Field("", max_length=255)
    discount_type: DiscountType
    discount_value: int = Field(0, ge=0, description="Whole percent, or kobo for fixed coupons")
    max_uses: int = Field(1, ge=1)
    expiry_date: date
    is_active: bool = True
    applicable_classes: List[str] = []
    applicable_fee_types: List[str] = []


class CouponUpdate(BaseModel):
    description: Optional[str] = Field(None, max_length=255)
    discount_value: Optional[int] = Field(None, ge=0)
    max_uses: Optional[int] = Field(None, ge=1)
    expiry_date: Optional[date] = None
    is_active: Optional[bool] = None
    applicable_classes: Optional[List[str]] = None
    applicable_fee_types: Optional[List[str]] = None


class CouponOut(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: UUID
    code: str
    description: str
    discount_type: DiscountType
    discount_value: int
    discount_display: str = ""
    max_uses: int
    used_count: int
    remaining_uses: int
    expiry_date: date
    is_active: bool
    applicable_classes: List[str]
    applicable_fee_types: List[str]
    created_at: datetime
    updated_at: datetime


class CouponValidateRequest(BaseModel):
    """Check a code against a fee record or a bare balance"""
    code: str = Field(..., max_length=32)
    fee_id: Optional[UUID] = None
    balance: Optional[int] = Field(None, ge=0)

    @model_validator(mode="after")
    def require_fee_or_balance(self):
        if self.fee_id is None and self.balance is None:
            raise ValueError("Provide either fee_id or balance")
        return self


class CouponValidationOut(BaseModel):
    valid: bool
    discount_amount: int = 0
    message: Optional[str] = None
    coupon: Optional[CouponOut] = None


class CouponReconcileOut(BaseModel):
    pending: int
    recorded: int
