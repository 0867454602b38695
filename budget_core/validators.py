"""Coercion helpers shared across the budget planner services.

User input never raises here: anything that does not parse as a finite
number becomes zero and anything that is not text becomes an empty string.
Money is bounded to MAX_AMOUNT in either direction so it survives a trip
through a JSON number unchanged.
"""

from __future__ import annotations

from decimal import Decimal, InvalidOperation, ROUND_HALF_UP

CENTS = Decimal("0.01")
RATE_STEP = Decimal("0.0001")
ZERO = Decimal("0.00")
MAX_RATE = Decimal("100")
MAX_AMOUNT = Decimal("999999999999.99")


def quantize_money(amount: Decimal) -> Decimal:
    """Round the amount to two decimal places using HALF_UP rounding."""
    try:
        return amount.quantize(CENTS, rounding=ROUND_HALF_UP)
    except InvalidOperation:
        return ZERO


def coerce_number(raw: object) -> Decimal:
    """Convert raw input to a finite Decimal, normalising failures to zero."""
    if raw is None or isinstance(raw, bool):
        return Decimal("0")
    if isinstance(raw, str):
        raw = raw.replace(",", "").strip()
        if not raw:
            return Decimal("0")
    try:
        value = Decimal(str(raw))
    except (InvalidOperation, TypeError, ValueError):
        return Decimal("0")
    if not value.is_finite():
        return Decimal("0")
    return value


def coerce_amount(raw: object) -> Decimal:
    """Coerce to a money value with exactly two fraction digits; sign is kept."""
    value = coerce_number(raw)
    value = min(max(value, -MAX_AMOUNT), MAX_AMOUNT)
    return quantize_money(value)


def coerce_budget(raw: object) -> Decimal:
    """Coerce to a non-negative money value."""
    return max(coerce_amount(raw), ZERO)


def coerce_rate(raw: object) -> Decimal:
    """Coerce an annual percentage rate, clamped to the 0-100 range."""
    rate = min(max(coerce_number(raw), Decimal("0")), MAX_RATE)
    return rate.quantize(RATE_STEP, rounding=ROUND_HALF_UP)


def clean_text(value: object) -> str:
    if not isinstance(value, str):
        return ""
    return value.strip()
