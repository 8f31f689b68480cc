# tests/test_money.py
from decimal import Decimal

import pytest

from schooldesk.core.money import format_naira, percentage_of, to_kobo, to_naira


def test_to_kobo_accepts_int_str_and_decimal():
    assert to_kobo(50000) == 5_000_000
    assert to_kobo("1250.50") == 125_050
    assert to_kobo(Decimal("0.005")) == 1


def test_to_kobo_rejects_float():
    with pytest.raises(TypeError):
        to_kobo(10.5)


def test_to_naira_has_two_places():
    assert to_naira(5_000_050) == Decimal("50000.50")


def test_format_naira():
    assert format_naira(5_000_000) == "₦50,000.00"
    assert format_naira(-150) == "-₦1.50"
    assert format_naira(0) == "₦0.00"


def test_percentage_of_rounds_half_up():
    assert percentage_of(5_000_000, 10) == 500_000
    assert percentage_of(5, 10) == 1  # 0.5 kobo rounds up
    assert percentage_of(4, 10) == 0
