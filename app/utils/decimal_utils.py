# app/utils/decimal_utils.py
from decimal import Decimal, ROUND_HALF_UP, InvalidOperation

TWOPLACES = Decimal("0.01")

# NUMERIC(14, 2): 12 integer digits + 2 fraction digits
MAX_TONNAGE = Decimal("999999999999.99")


def to_tonnage(value) -> Decimal:
    """Coerce a tonnage value to a two-place Decimal.

    Floats go through ``str`` first so ``25.5`` becomes ``Decimal("25.50")``
    rather than its binary expansion.
    """
    if value is None:
        return Decimal("0.00")
    if isinstance(value, bool):
        raise TypeError("Tonnage cannot be a boolean")
    try:
        if isinstance(value, Decimal):
            result = value.quantize(TWOPLACES, rounding=ROUND_HALF_UP)
        else:
            result = Decimal(str(value)).quantize(TWOPLACES, rounding=ROUND_HALF_UP)
    except InvalidOperation:
        raise ValueError(f"Invalid tonnage value: {value!r}")

    if not result.is_finite():
        raise ValueError(f"Invalid tonnage value: {value!r}")
    if abs(result) > MAX_TONNAGE:
        raise ValueError(f"Tonnage {result} exceeds the supported precision")
    return result


def sum_tonnage(values) -> Decimal:
    total = Decimal("0.00")
    for v in values:
        total += to_tonnage(v)
    return total.quantize(TWOPLACES, rounding=ROUND_HALF_UP)
