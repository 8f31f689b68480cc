# schooldesk/schemas/payment.py
from pydantic import BaseModel, ConfigDict, Field, field_validator
from typing import Optional, Literal, Dict, Any
from datetime import datetime
from uuid import UUID

from schooldesk.schemas.common import Kobo

PaymentMethod = Literal["cash", "bank_transfer", "cheque", "paystack"]


class PaymentCreate(BaseModel):
    fee_id: UUID
    amount: Kobo
    payment_method: PaymentMethod = "cash"
    coupon_code: Optional[str] = Field(None, max_length=32)
    transaction_id: Optional[str] = Field(None, max_length=64)
    payment_date: Optional[datetime] = None
    metadata: Dict[str, Any] = Field(default_factory=dict)

    @field_validator("coupon_code", "transaction_id")
    @classmethod
    def blank_to_none(cls, v: Optional[str]) -> Optional[str]:
        if v is not None and not v.strip():
            return None
        return v.strip() if v else v


class PaymentOut(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: UUID
    fee_id: UUID
    student_id: UUID
    student_name: str
    amount: int
    payment_method: str
    payment_date: datetime
    transaction_id: Optional[str]
    discount_applied: bool
    discount_amount: int
    coupon_id: Optional[UUID]
    coupon_usage_recorded: bool
    status: str
    metadata: Dict[str, Any] = Field(validation_alias="payment_metadata")
    created_at: datetime

