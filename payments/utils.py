# payments/utils.py
from __future__ import annotations

from decimal import Decimal, InvalidOperation, ROUND_HALF_UP
from typing import Union

MoneyLike = Union[Decimal, int, float, str, None]


def to_decimal(value: MoneyLike) -> Decimal | None:
    """Parse a dollars amount from user input; None when it is not a finite number."""
    if value is None or isinstance(value, bool):
        return None
    try:
        dec = value if isinstance(value, Decimal) else Decimal(str(value).strip())
    except (InvalidOperation, ValueError):
        return None
    if dec.is_nan() or dec.is_infinite():
        return None
    return dec


def money_to_cents(value: MoneyLike) -> int:
    """Convert a dollars amount to integer cents (ROUND_HALF_UP).

    NOTE: an int is assumed to already be cents (by convention).
    """
    if value is None:
        return 0

    if isinstance(value, int):
        return int(value)

    dec = value if isinstance(value, Decimal) else Decimal(str(value))
    cents = (dec * Decimal("100")).quantize(Decimal("1"), rounding=ROUND_HALF_UP)
    return int(cents)


def cents_to_money(cents: int) -> Decimal:
    return (Decimal(int(cents)) / Decimal("100")).quantize(Decimal("0.01"))


def cents_to_float(cents: int) -> float:
    # JSON wire format uses plain numbers for amounts.
    return float(cents_to_money(cents))
