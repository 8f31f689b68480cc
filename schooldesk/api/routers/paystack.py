# schooldesk/api/routers/paystack.py
from fastapi import APIRouter, Depends, Header, Request
from typing import Optional

from schooldesk.api.deps.services import paystack_service
from schooldesk.core.config import settings
from schooldesk.schemas.paystack import CheckoutInitialize, CheckoutOut, VerificationOut, WebhookAck
from schooldesk.services.paystack import PaystackService

router = APIRouter()


@router.post("/initialize", response_model=CheckoutOut)
async def initialize_checkout(data: CheckoutInitialize, service: PaystackService = Depends(paystack_service)):
    """Validate a card payment and open a Paystack hosted checkout"""
    checkout = await service.initialize_checkout(data.fee_id, data.email, data.amount, data.coupon_code)
    return CheckoutOut(**checkout)


@router.get("/verify/{reference}", response_model=VerificationOut)
async def verify_transaction(reference: str, service: PaystackService = Depends(paystack_service)):
    """Confirm a transaction with Paystack and record it when successful"""
    return VerificationOut(**await service.verify(reference))


@router.post("/webhook", response_model=WebhookAck)
async def paystack_webhook(
    request: Request,
    x_paystack_signature: Optional[str] = Header(default=None, alias="x-paystack-signature"),
    service: PaystackService = Depends(paystack_service),
):
    body = await request.body()
    return WebhookAck(**service.handle_webhook(body, x_paystack_signature, settings.PAYSTACK_SECRET_KEY))
