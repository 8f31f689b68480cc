# schooldesk/core/money.py - Minor-unit money helpers
"""
Amounts are stored as integer kobo everywhere. Naira only exists at the
presentation boundary, so conversions live here and nowhere else.
"""
from decimal import Decimal, ROUND_HALF_UP
from typing import Union

KOBO_PER_NAIRA = 100
CURRENCY_SYMBOLS = {"NGN": "₦", "GHS": "GH₵", "KES": "KSh", "USD": "$"}

NairaLike = Union[int, str, Decimal]


def to_kobo(naira: NairaLike) -> int:
    """Convert a naira amount to integer kobo, rounding half up"""
    if isinstance(naira, float):
        raise TypeError("Pass naira as int, str or Decimal, not float")
    value = Decimal(str(naira)) * KOBO_PER_NAIRA
    return int(value.quantize(Decimal("1"), rounding=ROUND_HALF_UP))


def to_naira(kobo: int) -> Decimal:
    return (Decimal(kobo) / KOBO_PER_NAIRA).quantize(Decimal("0.01"))


def format_naira(kobo: int, currency: str = "NGN") -> str:
    """Format kobo for display, e.g. 5000000 -> '₦50,000.00'"""
    symbol = CURRENCY_SYMBOLS.get(currency, f"{currency} ")
    amount = to_naira(abs(kobo))
    sign = "-" if kobo < 0 else ""
    return f"{sign}{symbol}{amount:,.2f}"


def percentage_of(amount: int, percent: int) -> int:
    """``amount * percent / 100`` in kobo, rounded half up"""
    return (amount * percent + 50) // 100


__all__ = ["KOBO_PER_NAIRA", "to_kobo", "to_naira", "format_naira", "percentage_of"]
