# tests/test_paystack.py
import asyncio
import hashlib
import hmac
import json
import re

import httpx
import pytest

from schooldesk.core.exceptions import PaymentGatewayError, SignatureError, ValidationError
from schooldesk.models import Payment
from schooldesk.services.paystack import (
    PaystackClient,
    PaystackService,
    calculate_gateway_fee,
    generate_reference,
    is_valid_reference,
    map_gateway_status,
    verify_signature,
)

SECRET = "sk_test_secret"


def sign(body: bytes, secret: str = SECRET) -> str:
    return hmac.new(secret.encode(), body, hashlib.sha512).hexdigest()


def gateway(handler) -> PaystackClient:
    return PaystackClient(SECRET, base_url="https://api.paystack.test", transport=httpx.MockTransport(handler))


def charge(fee, amount, reference="SKL_1700000000000_ABC123", coupon_code=None):
    return {
        "status": "success",
        "reference": reference,
        "amount": amount,
        "paid_at": "2024-09-10T12:30:00.000Z",
        "channel": "card",
        "fees": calculate_gateway_fee(amount),
        "customer": {"email": "parent@example.com"},
        "metadata": {
            "fee_id": str(fee.id),
            "student_id": str(fee.student_id),
            "student_name": fee.student_name,
            "coupon_code": coupon_code,
        },
    }


def test_generate_reference_shape():
    reference = generate_reference("SKL")
    assert re.fullmatch(r"SKL_\d{13}_[A-Z0-9]{6}", reference)
    assert is_valid_reference(reference)


@pytest.mark.parametrize("reference, valid", [
    ("abcde", True),
    ("abcd", False),
    ("A" * 50, True),
    ("A" * 51, False),
    ("has space", False),
    ("", False),
    (None, False),
])
def test_is_valid_reference(reference, valid):
    assert is_valid_reference(reference) is valid


@pytest.mark.parametrize("amount, fee", [
    (1_000_000, 15_000),   # ₦10,000 -> ₦150
    (10_000_000, 150_000),
    (20_000_000, 200_000),  # capped at ₦2,000
    (500_000_000, 200_000),
    (0, 0),
])
def test_calculate_gateway_fee(amount, fee):
    assert calculate_gateway_fee(amount) == fee


@pytest.mark.parametrize("status, expected", [
    ("success", "completed"),
    ("SUCCESS", "completed"),
    ("failed", "failed"),
    ("abandoned", "failed"),
    ("pending", "pending"),
    ("ongoing", "pending"),
    (None, "pending"),
])
def test_map_gateway_status(status, expected):
    assert map_gateway_status(status) == expected


def test_verify_signature():
    body = b'{"event":"charge.success"}'
    assert verify_signature(SECRET, body, sign(body))
    assert not verify_signature(SECRET, body, sign(body, "other"))
    assert not verify_signature(SECRET, body, None)
    assert not verify_signature(None, body, sign(body))


def test_client_sends_bearer_and_payload():
    seen = {}

    def handler(request: httpx.Request):
        seen["auth"] = request.headers["authorization"]
        seen["path"] = request.url.path
        seen["body"] = json.loads(request.content)
        return httpx.Response(200, json={"status": True, "data": {"authorization_url": "https://checkout/x", "reference": "REF12"}})

    data = asyncio.run(gateway(handler).initialize_transaction(5000, "p@example.com", "REF12", {"fee_id": "1"}))
    assert data["authorization_url"] == "https://checkout/x"
    assert seen["auth"] == f"Bearer {SECRET}"
    assert seen["path"] == "/transaction/initialize"
    assert seen["body"]["amount"] == 5000
    assert seen["body"]["currency"] == "NGN"


def test_client_maps_gateway_errors():
    def rejected(request):
        return httpx.Response(400, json={"status": False, "message": "Invalid key"})

    with pytest.raises(PaymentGatewayError, match="Invalid key"):
        asyncio.run(gateway(rejected).verify_transaction("REF12"))

    def unreachable(request):
        raise httpx.ConnectError("boom", request=request)

    with pytest.raises(PaymentGatewayError, match="Could not reach Paystack"):
        asyncio.run(gateway(unreachable).verify_transaction("REF12"))


def test_client_without_key_is_not_configured():
    with pytest.raises(PaymentGatewayError):
        asyncio.run(PaystackClient(None).verify_transaction("REF12"))


def test_initialize_checkout_validates_and_carries_metadata(session, make_fee, make_coupon):
    make_coupon(code="WELCOME10", discount_value=10)
    fee = make_fee(amount=5_000_000)
    sent = {}

    def handler(request):
        sent.update(json.loads(request.content))
        return httpx.Response(200, json={"status": True, "data": {
            "authorization_url": "https://checkout.paystack.com/abc", "access_code": "abc", "reference": sent["reference"],
        }})

    service = PaystackService(session, gateway(handler))
    checkout = asyncio.run(service.initialize_checkout(fee.id, "p@example.com", 4_500_000, "WELCOME10"))

    assert checkout["discount_amount"] == 500_000
    assert checkout["authorization_url"] == "https://checkout.paystack.com/abc"
    assert checkout["gateway_fee"] == 67_500
    assert sent["metadata"]["fee_id"] == str(fee.id)
    assert sent["metadata"]["coupon_code"] == "WELCOME10"
    assert sent["metadata"]["discount_amount"] == 500_000
    # Nothing is written until the gateway confirms the charge
    assert session.query(Payment).count() == 0
    assert fee.balance == 5_000_000


def test_initialize_checkout_rejects_overpayment_without_calling_gateway(session, make_fee):
    fee = make_fee(amount=1000)

    def handler(request):
        raise AssertionError("gateway must not be called")

    with pytest.raises(ValidationError):
        asyncio.run(PaystackService(session, gateway(handler)).initialize_checkout(fee.id, "p@example.com", 2000))


def test_verify_records_successful_charge_once(session, make_fee):
    fee = make_fee(amount=5_000_000)

    def handler(request):
        return httpx.Response(200, json={"status": True, "data": charge(fee, 2_000_000)})

    service = PaystackService(session, gateway(handler))
    first = asyncio.run(service.verify("SKL_1700000000000_ABC123"))
    second = asyncio.run(service.verify("SKL_1700000000000_ABC123"))

    assert first["status"] is True
    assert second["payment_id"] == first["payment_id"]
    assert session.query(Payment).count() == 1
    payment = session.query(Payment).one()
    assert payment.payment_method == "paystack"
    assert payment.transaction_id == "SKL_1700000000000_ABC123"
    assert payment.payment_metadata["customer_email"] == "parent@example.com"
    assert (fee.amount_paid, fee.balance, fee.status) == (2_000_000, 3_000_000, "partial")


def test_verify_failed_charge_records_nothing(session, make_fee):
    fee = make_fee()

    def handler(request):
        data = charge(fee, 1000)
        data["status"] = "abandoned"
        return httpx.Response(200, json={"status": True, "data": data})

    result = asyncio.run(PaystackService(session, gateway(handler)).verify("SKL_1700000000000_ABC123"))
    assert result["status"] is False
    assert result["gateway_status"] == "abandoned"
    assert session.query(Payment).count() == 0


def test_verify_rejects_malformed_reference(session):
    with pytest.raises(ValidationError):
        asyncio.run(PaystackService(session, gateway(lambda r: None)).verify("bad ref!"))


def test_webhook_rejects_bad_signature(session):
    body = b'{"event":"charge.success","data":{}}'
    with pytest.raises(SignatureError):
        PaystackService(session, gateway(lambda r: None)).handle_webhook(body, "deadbeef", SECRET)


def test_webhook_records_charge_with_coupon(session, make_fee, make_coupon):
    coupon = make_coupon(code="WELCOME10", discount_value=10)
    fee = make_fee(amount=5_000_000)
    body = json.dumps({"event": "charge.success", "data": charge(fee, 4_500_000, coupon_code="WELCOME10")}).encode()

    ack = PaystackService(session, gateway(lambda r: None)).handle_webhook(body, sign(body), SECRET)

    assert ack["received"] is True
    assert (fee.balance, fee.status, fee.discount_total) == (0, "paid", 500_000)
    session.refresh(coupon)
    assert coupon.used_count == 1


def test_webhook_keeps_money_when_coupon_became_invalid(session, make_fee, make_coupon):
    coupon = make_coupon(code="GONE", discount_value=10)
    coupon.is_active = False
    session.commit()
    fee = make_fee(amount=5_000_000)
    body = json.dumps({"event": "charge.success", "data": charge(fee, 4_500_000, coupon_code="GONE")}).encode()

    PaystackService(session, gateway(lambda r: None)).handle_webhook(body, sign(body), SECRET)

    payment = session.query(Payment).one()
    assert payment.amount == 4_500_000
    assert not payment.discount_applied
    assert (fee.amount_paid, fee.balance, fee.status) == (4_500_000, 500_000, "partial")


def test_webhook_ignores_other_events(session):
    body = b'{"event":"transfer.success","data":{}}'
    ack = PaystackService(session, gateway(lambda r: None)).handle_webhook(body, sign(body), SECRET)
    assert ack["received"] is True
    assert session.query(Payment).count() == 0


def test_webhook_without_fee_id_is_rejected(session):
    body = json.dumps({"event": "charge.success", "data": {"reference": "REF12", "amount": 100, "metadata": {}}}).encode()
    with pytest.raises(ValidationError, match="Missing fee_id"):
        PaystackService(session, gateway(lambda r: None)).handle_webhook(body, sign(body), SECRET)
