"""
Opsboard: Metric primitives

Two money formats coexist on purpose: summaries round to whole dollars,
per-item rows show cents. Do not merge them.
"""
import math
from decimal import Decimal, ROUND_HALF_UP

from opsboard.schemas.metrics import MarginBand

MARGIN_CLAMP = 999.0
GOOD_MARGIN = 45.0
CAUTION_MARGIN = 25.0


def finite(value) -> float:
    """Coerce to float; NaN, infinities and junk become 0."""
    try:
        number = float(value)
    except (TypeError, ValueError):
        return 0.0
    return number if math.isfinite(number) else 0.0


def margin_percent(price, cost) -> float:
    price, cost = finite(price), finite(cost)
    if price == 0:
        return 0.0
    # Finite inputs can still overflow to ±inf; the clamp absorbs that
    margin = (price - cost) / price * 100
    return max(-MARGIN_CLAMP, min(MARGIN_CLAMP, margin))


def margin_band(margin: float) -> MarginBand:
    if margin >= GOOD_MARGIN:
        return MarginBand.GOOD
    if margin >= CAUTION_MARGIN:
        return MarginBand.CAUTION
    return MarginBand.POOR


def _signed(amount: Decimal, body: str) -> str:
    return f"-${body}" if amount < 0 else f"${body}"


def format_money(value) -> str:
    """Whole dollars, half-up: 1234.5 -> '$1,235'."""
    amount = Decimal(repr(finite(value))).quantize(Decimal("1"), rounding=ROUND_HALF_UP)
    return _signed(amount, f"{abs(amount):,.0f}")


def format_money_precise(value) -> str:
    """Cents: 1234.5 -> '$1,234.50'."""
    amount = Decimal(repr(finite(value))).quantize(Decimal("0.01"), rounding=ROUND_HALF_UP)
    return _signed(amount, f"{abs(amount):,.2f}")


def format_percent(value, digits: int = 1) -> str:
    return f"{finite(value):.{digits}f}%"


def percentage(part: int, whole: int) -> float:
    return part / whole * 100 if whole else 0.0
