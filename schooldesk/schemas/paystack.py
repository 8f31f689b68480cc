# schooldesk/schemas/paystack.py
from pydantic import BaseModel, EmailStr, Field
from typing import Optional, Dict, Any
from uuid import UUID

from schooldesk.schemas.common import PositiveKobo


class CheckoutInitialize(BaseModel):
    fee_id: UUID
    email: EmailStr
    amount: PositiveKobo
    coupon_code: Optional[str] = Field(None, max_length=32)


class CheckoutOut(BaseModel):
    reference: str
    authorization_url: str
    access_code: Optional[str] = None
    amount: int
    discount_amount: int
    gateway_fee: int


class VerificationOut(BaseModel):
    status: bool
    message: str
    reference: str
    payment_id: Optional[UUID] = None
    gateway_status: Optional[str] = None


class WebhookAck(BaseModel):
    received: bool = True
    detail: Optional[str] = None
    data: Dict[str, Any] = {}
