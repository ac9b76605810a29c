"""Fixed-point helpers shared by every service that stores amounts."""

from decimal import ROUND_HALF_UP, Decimal, InvalidOperation
from typing import Any, Optional

MONEY_PLACES = Decimal("0.01")
QUANTITY_PLACES = Decimal("0.001")
ZERO = Decimal("0")


def parse_decimal(value: Any) -> Optional[Decimal]:
    """Return ``value`` as a Decimal or ``None`` when it is not numeric."""

    if value is None or value == "" or isinstance(value, bool):
        return None
    try:
        result = Decimal(str(value))
    except (InvalidOperation, ValueError, TypeError):
        return None
    if not result.is_finite():
        return None
    return result


def to_money(value: Any) -> Decimal:
    amount = parse_decimal(value)
    if amount is None:
        return ZERO.quantize(MONEY_PLACES)
    return amount.quantize(MONEY_PLACES, rounding=ROUND_HALF_UP)


def to_quantity(value: Any) -> Decimal:
    qty = parse_decimal(value)
    if qty is None:
        return ZERO.quantize(QUANTITY_PLACES)
    return qty.quantize(QUANTITY_PLACES, rounding=ROUND_HALF_UP)


def percent(part: Any, whole: Any) -> Decimal:
    """``part / whole * 100`` rounded to two places; 0 when ``whole`` is 0."""

    whole_d = parse_decimal(whole) or ZERO
    if whole_d == 0:
        return ZERO.quantize(MONEY_PLACES)
    part_d = parse_decimal(part) or ZERO
    return (part_d / whole_d * 100).quantize(MONEY_PLACES, rounding=ROUND_HALF_UP)
