# tests/test_coupon_service.py
from datetime import date, timedelta

import pytest

from schooldesk.core.exceptions import ConflictError, ValidationError
from schooldesk.models import Coupon
from schooldesk.schemas.coupon import CouponUpdate
from schooldesk.services.coupon_service import CouponService, compute_discount, format_discount_value
from schooldesk.services.payment_service import PaymentRecorder


def coupon(discount_type, value):
    return Coupon(code="X", discount_type=discount_type, discount_value=value, max_uses=1, used_count=0)


@pytest.mark.parametrize("discount_type, value, balance, expected", [
    ("percentage", 10, 5_000_000, 500_000),
    ("percentage", 100, 5_000_000, 5_000_000),
    ("percentage", 33, 1001, 330),
    ("fixed", 500_000, 5_000_000, 500_000),
    ("fixed", 500_000, 300_000, 300_000),
    ("free", 0, 1_234_567, 1_234_567),
    ("percentage", 50, 0, 0),
])
def test_compute_discount_never_exceeds_balance(discount_type, value, balance, expected):
    discount = compute_discount(coupon(discount_type, value), balance)
    assert discount == expected
    assert discount <= balance


def test_format_discount_value():
    assert format_discount_value("percentage", 10) == "10%"
    assert format_discount_value("fixed", 500_000) == "₦5,000.00"
    assert format_discount_value("free", 0) == "Free"


@pytest.mark.parametrize("code", ["ab", "lowercase", "WITH SPACE", "A" * 21, "BAD!"])
def test_create_coupon_rejects_malformed_codes(make_coupon, code):
    with pytest.raises(ValidationError):
        make_coupon(code=code)


@pytest.mark.parametrize("discount_type, value", [("percentage", 0), ("percentage", 101), ("fixed", 0)])
def test_create_coupon_rejects_bad_values(make_coupon, discount_type, value):
    with pytest.raises(ValidationError):
        make_coupon(discount_type=discount_type, discount_value=value)


def test_free_coupon_stores_zero_value(make_coupon):
    assert make_coupon(code="FREEBIE", discount_type="free", discount_value=999).discount_value == 0


def test_duplicate_code_conflicts(make_coupon):
    make_coupon(code="SAVE-20")
    with pytest.raises(ConflictError):
        make_coupon(code="SAVE-20")


class TestValidate:
    def test_valid_percentage_coupon(self, session, make_coupon):
        make_coupon(code="WELCOME10", discount_value=10)
        result = CouponService(session).validate("WELCOME10", 5_000_000)
        assert result.valid
        assert result.discount_amount == 500_000
        assert result.message == "Coupon applied successfully"

    def test_surrounding_whitespace_is_ignored(self, session, make_coupon):
        make_coupon(code="WELCOME10")
        assert CouponService(session).validate("  WELCOME10 ", 1000).valid

    def test_lookup_is_case_sensitive(self, session, make_coupon):
        make_coupon(code="WELCOME10")
        result = CouponService(session).validate("welcome10", 1000)
        assert not result.valid
        assert result.message == "Invalid coupon code"

    def test_inactive(self, session, make_coupon):
        make_coupon(code="OFF", is_active=False)
        assert CouponService(session).validate("OFF", 1000).message == "This coupon is inactive"

    def test_exhausted(self, session, make_coupon):
        c = make_coupon(code="ONCE", max_uses=1)
        c.used_count = 1
        session.commit()
        assert CouponService(session).validate("ONCE", 1000).message == "This coupon has reached its maximum usage limit"

    def test_usable_through_expiry_date(self, session, make_coupon):
        make_coupon(code="LASTDAY", expiry_date=date(2024, 6, 30))
        service = CouponService(session)
        assert service.validate("LASTDAY", 1000, today=date(2024, 6, 30)).valid
        expired = service.validate("LASTDAY", 1000, today=date(2024, 7, 1))
        assert not expired.valid
        assert expired.message == "This coupon has expired"

    def test_applicability_lists(self, session, make_coupon, make_fee, make_student):
        make_coupon(code="JSS1ONLY", applicable_classes=["JSS 1"], applicable_fee_types=["Tuition"])
        service = CouponService(session)

        tuition = make_fee(student=make_student(class_name="JSS 1"))
        library = make_fee(student=make_student(class_name="JSS 1"), fee_type="Library")
        other_class = make_fee(student=make_student(class_name="SS 3"))

        assert service.validate("JSS1ONLY", tuition.balance, fee=tuition).valid
        assert service.validate("JSS1ONLY", library.balance, fee=library).message == "This coupon does not apply to this fee type"
        assert service.validate("JSS1ONLY", other_class.balance, fee=other_class).message == "This coupon does not apply to this class"

    def test_validation_has_no_side_effects(self, session, make_coupon):
        c = make_coupon(code="PEEK", max_uses=1)
        service = CouponService(session)
        service.validate("PEEK", 1000)
        service.validate("PEEK", 1000)
        session.refresh(c)
        assert c.used_count == 0


def test_coupon_cannot_be_applied_twice_to_same_fee(session, make_coupon, make_fee):
    make_coupon(code="TWICE", discount_type="fixed", discount_value=100_000, max_uses=5)
    fee = make_fee(amount=1_000_000)
    recorder = PaymentRecorder(session)
    recorder.record_payment(fee.id, 100_000, coupon_code="TWICE")

    result = CouponService(session).validate("TWICE", fee.balance, fee=fee)
    assert not result.valid
    assert result.message == "This coupon has already been applied to this fee"
    with pytest.raises(ValidationError):
        recorder.record_payment(fee.id, 100_000, coupon_code="TWICE")


def test_update_coupon(session, make_coupon):
    c = make_coupon(code="EDITME", discount_value=10, max_uses=3)
    service = CouponService(session)
    updated = service.update_coupon(c.id, CouponUpdate(discount_value=15, max_uses=5, description="Bigger"))
    assert (updated.discount_value, updated.max_uses, updated.description) == (15, 5, "Bigger")


def test_update_coupon_cannot_drop_max_uses_below_used(session, make_coupon):
    c = make_coupon(code="USED", max_uses=3)
    c.used_count = 2
    session.commit()
    with pytest.raises(ValidationError):
        CouponService(session).update_coupon(c.id, CouponUpdate(max_uses=1))


def test_delete_only_unused_coupons(session, make_coupon, make_fee):
    unused = make_coupon(code="UNUSED")
    used = make_coupon(code="USEDUP", discount_type="fixed", discount_value=100)
    PaymentRecorder(session).record_payment(make_fee().id, 1000, coupon_code="USEDUP")

    service = CouponService(session)
    service.delete_coupon(unused.id)
    assert service.coupons.get(unused.id) is None
    with pytest.raises(ConflictError):
        service.delete_coupon(used.id)


def test_list_coupons_active_only(session, make_coupon):
    make_coupon(code="ON1")
    make_coupon(code="OFF1", is_active=False)
    service = CouponService(session)
    assert [c.code for c in service.list_coupons()] == ["OFF1", "ON1"]
    assert [c.code for c in service.list_coupons(active_only=True)] == ["ON1"]
