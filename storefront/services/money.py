"""Platform money (integer cents) <-> display money."""
from __future__ import annotations

from decimal import Decimal, ROUND_HALF_UP
from typing import Any, Dict, Optional

from ..schemas.catalog import Money

DEFAULT_CURRENCY = "USD"
# every amount is treated as a two-decimal currency
FRACTION_DIGITS = 2
_SCALE = Decimal(10) ** FRACTION_DIGITS


def to_money(value: Optional[Dict[str, Any] | Money]) -> Money:
    """Convert a platform money dict ({centAmount, currencyCode, ...})."""
    if isinstance(value, Money):
        return value
    value = value or {}
    cents = int(value.get("centAmount") or 0)
    currency = value.get("currencyCode") or DEFAULT_CURRENCY
    return Money(
        cent_amount=cents,
        currency_code=currency,
        amount=Decimal(cents) / _SCALE,
    )


def from_cents(cents: int, currency: str = DEFAULT_CURRENCY) -> Money:
    return to_money({"centAmount": cents, "currencyCode": currency})


def zero_money(currency: str = DEFAULT_CURRENCY) -> Money:
    return from_cents(0, currency)


def to_cent_amount(amount: Decimal | float | int | str) -> int:
    """59.99 -> 5999. Floats go through str() so 59.99 stays 59.99."""
    scaled = (Decimal(str(amount)) * _SCALE).quantize(Decimal("1"), rounding=ROUND_HALF_UP)
    return int(scaled)
