"""Money arithmetic for orders.

Amounts are ``Decimal`` quantized to cents with ROUND_HALF_UP.
``subtotal`` is the sum of frozen line totals and ``total`` is
``subtotal + tip``.
"""

from __future__ import annotations

from decimal import ROUND_HALF_UP, Decimal
from typing import Iterable, Tuple

CENT = Decimal("0.01")
ZERO = Decimal("0.00")


def quantize(amount: Decimal) -> Decimal:
    return Decimal(amount).quantize(CENT, rounding=ROUND_HALF_UP)


def line_total(unit_price: Decimal, quantity: int) -> Decimal:
    return quantize(Decimal(unit_price) * quantity)


def compute_totals(line_totals: Iterable[Decimal], tip: Decimal = ZERO) -> Tuple[Decimal, Decimal]:
    """Return ``(subtotal, total)``."""
    subtotal = quantize(sum((Decimal(value) for value in line_totals), ZERO))
    return subtotal, quantize(subtotal + Decimal(tip))
