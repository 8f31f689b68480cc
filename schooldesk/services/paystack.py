"""
Paystack integration
Hosted checkout, transaction verification and webhook handling.

Paystack amounts are already in kobo, so nothing here converts money.
"""

import hashlib
import hmac
import json
import logging
import random
import re
import string
import time
from datetime import datetime
from typing import Any, Dict, Optional
from uuid import UUID

import httpx
from sqlalchemy.orm import Session

from schooldesk import repositories
from schooldesk.core.config import settings
from schooldesk.core.exceptions import PaymentGatewayError, SignatureError, ValidationError
from schooldesk.services.payment_service import PaymentReceipt, PaymentRecorder

logger = logging.getLogger(__name__)


# ============================================================================
# Helpers
# ============================================================================

REFERENCE_PATTERN = re.compile(r"^[A-Za-z0-9_-]{5,50}$")
GATEWAY_FEE_PERMILLE = 15  # 1.5%
GATEWAY_FEE_CAP = 200000  # ₦2,000 in kobo

_REFERENCE_ALPHABET = string.ascii_uppercase + string.digits


def generate_reference(prefix: str = "SKL") -> str:
    """``PREFIX_<epoch ms>_<6 random uppercase alphanumerics>``"""
    suffix = "".join(random.choices(_REFERENCE_ALPHABET, k=6))
    return f"{prefix}_{int(time.time() * 1000)}_{suffix}"


def is_valid_reference(reference: Optional[str]) -> bool:
    return bool(reference) and REFERENCE_PATTERN.match(reference) is not None


def calculate_gateway_fee(amount: int) -> int:
    """Paystack's local card fee: 1.5% of the charge, capped at ₦2,000"""
    fee = (amount * GATEWAY_FEE_PERMILLE + 500) // 1000
    return min(fee, GATEWAY_FEE_CAP)


def map_gateway_status(status: Optional[str]) -> str:
    status = (status or "").lower()
    if status == "success":
        return "completed"
    if status in ("failed", "abandoned"):
        return "failed"
    return "pending"


def verify_signature(secret: Optional[str], body: bytes, signature: Optional[str]) -> bool:
    """Check the ``x-paystack-signature`` header (HMAC-SHA512 of the raw body)"""
    if not secret or not signature:
        return False
    expected = hmac.new(secret.encode("utf-8"), body, hashlib.sha512).hexdigest()
    return hmac.compare_digest(expected, signature)


def _parse_paid_at(value: Optional[str]) -> Optional[datetime]:
    if not value:
        return None
    try:
        return datetime.fromisoformat(value.replace("Z", "+00:00"))
    except ValueError:
        logger.warning(f"Unparseable paid_at from Paystack: {value}")
        return None


# ============================================================================
# HTTP client
# ============================================================================

class PaystackClient:
    """Thin async wrapper over the Paystack transaction API"""

    def __init__(
        self,
        secret_key: Optional[str],
        base_url: str = "https://api.paystack.co",
        timeout: float = 30.0,
        currency: str = "NGN",
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        self.secret_key = secret_key
        self.currency = currency
        self.base_url = base_url.rstrip("/")
        self.timeout = timeout
        self._transport = transport

    async def initialize_transaction(
        self,
        amount: int,
        email: str,
        reference: str,
        metadata: Dict[str, Any],
        callback_url: Optional[str] = None,
    ) -> Dict[str, Any]:
        payload = {
            "amount": amount,
            "email": email,
            "reference": reference,
            "currency": self.currency,
            "metadata": metadata,
        }
        if callback_url:
            payload["callback_url"] = callback_url
        return await self._request("POST", "/transaction/initialize", json=payload)

    async def verify_transaction(self, reference: str) -> Dict[str, Any]:
        return await self._request("GET", f"/transaction/verify/{reference}")

    async def _request(self, method: str, path: str, **kwargs) -> Dict[str, Any]:
        if not self.secret_key:
            raise PaymentGatewayError("Paystack is not configured")

        headers = {
            "Authorization": f"Bearer {self.secret_key}",
            "Content-Type": "application/json",
        }
        try:
            async with httpx.AsyncClient(
                base_url=self.base_url,
                headers=headers,
                timeout=self.timeout,
                transport=self._transport,
            ) as client:
                response = await client.request(method, path, **kwargs)
        except httpx.HTTPError as e:
            logger.error(f"Paystack request {method} {path} failed: {e}")
            raise PaymentGatewayError("Could not reach Paystack") from e

        try:
            body = response.json()
        except ValueError:
            body = {}

        if response.status_code >= 400 or not body.get("status"):
            message = body.get("message") or f"HTTP {response.status_code}"
            logger.error(f"Paystack rejected {method} {path}: {message}")
            raise PaymentGatewayError(f"Paystack error: {message}", {"status_code": response.status_code})

        return body.get("data") or {}


def get_paystack_client() -> PaystackClient:
    return PaystackClient(
        secret_key=settings.PAYSTACK_SECRET_KEY,
        base_url=settings.PAYSTACK_BASE_URL,
        timeout=settings.PAYSTACK_TIMEOUT_SECONDS,
        currency=settings.CURRENCY,
    )


# ============================================================================
# Checkout flow
# ============================================================================

class PaystackService:
    def __init__(self, session: Session, client: PaystackClient, recorder: Optional[PaymentRecorder] = None):
        self.session = session
        self.client = client
        self.recorder = recorder or PaymentRecorder(session)
        self.fees = repositories.fees(session)

    async def initialize_checkout(self, fee_id: UUID, email: str, amount: int, coupon_code: Optional[str] = None) -> dict:
        """Validate the payment like the recorder would, then open a hosted checkout"""
        if amount <= 0:
            raise ValidationError("Card payments must be greater than zero")
        fee = self.fees.get_or_404(fee_id)
        validation, discount = self.recorder.quote(fee, amount, coupon_code)

        reference = generate_reference(settings.PAYSTACK_REFERENCE_PREFIX)
        metadata = {
            "fee_id": str(fee.id),
            "student_id": str(fee.student_id),
            "student_name": fee.student_name,
            "coupon_code": validation.coupon.code if validation else None,
            "discount_amount": discount,
        }
        data = await self.client.initialize_transaction(
            amount, email, reference, metadata, callback_url=settings.PAYSTACK_CALLBACK_URL
        )
        if not data.get("authorization_url"):
            raise PaymentGatewayError("Paystack did not return a checkout URL")
        logger.info(f"Opened Paystack checkout {reference} for fee {fee.id}")
        return {
            "reference": data.get("reference", reference),
            "authorization_url": data.get("authorization_url"),
            "access_code": data.get("access_code"),
            "amount": amount,
            "discount_amount": discount,
            "gateway_fee": calculate_gateway_fee(amount),
        }

    async def verify(self, reference: str) -> dict:
        if not is_valid_reference(reference):
            raise ValidationError("Invalid transaction reference")

        data = await self.client.verify_transaction(reference)
        gateway_status = data.get("status")
        status = map_gateway_status(gateway_status)

        if status != "completed":
            return {
                "status": False,
                "message": f"Payment {status}",
                "reference": reference,
                "gateway_status": gateway_status,
            }

        receipt = self.record_charge(data)
        return {
            "status": True,
            "message": "Payment verified",
            "reference": reference,
            "payment_id": receipt.payment.id,
            "gateway_status": gateway_status,
        }

    def handle_webhook(self, body: bytes, signature: Optional[str], secret: Optional[str]) -> dict:
        if not verify_signature(secret, body, signature):
            raise SignatureError("Invalid signature")

        try:
            event = json.loads(body)
        except ValueError as e:
            raise ValidationError("Malformed webhook payload") from e

        name = event.get("event")
        if name == "charge.success":
            receipt = self.record_charge(event.get("data") or {})
            return {"received": True, "data": {"payment_id": str(receipt.payment.id)}}

        logger.info(f"Unhandled Paystack event: {name}")
        return {"received": True, "detail": f"Ignored event {name}"}

    def record_charge(self, data: Dict[str, Any]) -> PaymentReceipt:
        """
        Record a charge Paystack reports as successful. Idempotent on the
        reference, and never drops confirmed money over a coupon.
        """
        metadata = data.get("metadata") or {}
        if isinstance(metadata, str):
            try:
                metadata = json.loads(metadata)
            except ValueError:
                metadata = {}

        fee_id = metadata.get("fee_id")
        if not fee_id:
            logger.error(f"Paystack charge {data.get('reference')} has no fee_id in its metadata")
            raise ValidationError("Missing fee_id in payment metadata")

        try:
            fee_id = UUID(str(fee_id))
        except ValueError as e:
            raise ValidationError("Invalid fee_id in payment metadata") from e

        customer = data.get("customer") or {}
        return self.recorder.record_payment(
            fee_id=fee_id,
            amount=int(data.get("amount") or 0),
            payment_method="paystack",
            coupon_code=metadata.get("coupon_code"),
            transaction_id=data.get("reference"),
            payment_date=_parse_paid_at(data.get("paid_at")),
            metadata={
                "paystack_reference": data.get("reference"),
                "customer_email": customer.get("email"),
                "channel": data.get("channel"),
                "gateway_fee": data.get("fees"),
                "quoted_discount": metadata.get("discount_amount"),
            },
            drop_invalid_coupon=True,
        )
